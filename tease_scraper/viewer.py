"""Static HTML gallery generated next to the scraped images."""

from __future__ import annotations

import html
import json
import logging
from pathlib import Path
from string import Template
from typing import Any, Dict, List, Sequence

from .config import PICS_DIRNAME
from .models import PageRecord
from .utils import write_text_atomic

logger = logging.getLogger("tease_scraper")

VIEWER_TEMPLATE = Template(
    """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>$title</title>
    <style>
        body {
            margin: 0;
            padding: 0;
            background-color: #1a1a1a;
            color: #fff;
            font-family: Arial, sans-serif;
            overflow: hidden;
        }

        #gallery-container {
            display: flex;
            flex-direction: column;
            height: 100vh;
            justify-content: space-between;
            align-items: center;
        }

        #image-display {
            position: relative;
            width: 100%;
            height: 90%;
            display: flex;
            justify-content: center;
            align-items: center;
            overflow: hidden;
        }

        #current-image {
            max-width: 100%;
            max-height: 100%;
            object-fit: contain;
        }

        #description-panel {
            width: 100%;
            height: 10%;
            background-color: #000;
            display: flex;
            align-items: center;
            justify-content: center;
            padding: 10px;
            box-sizing: border-box;
            text-align: center;
            font-size: 1.1em;
            overflow: auto;
        }

        .nav-arrow {
            position: absolute;
            top: 50%;
            transform: translateY(-50%);
            background-color: rgba(0, 0, 0, 0.5);
            color: white;
            border: none;
            padding: 15px 10px;
            cursor: pointer;
            font-size: 2em;
            z-index: 10;
            user-select: none;
            border-radius: 5px;
        }

        .nav-arrow:hover {
            background-color: rgba(0, 0, 0, 0.8);
        }

        #prev-arrow {
            left: 10px;
        }

        #next-arrow {
            right: 10px;
        }

        #controls {
            position: absolute;
            top: 10px;
            right: 10px;
            display: flex;
            gap: 10px;
            z-index: 20;
        }

        #fullscreen-btn, #page-select {
            background-color: rgba(0, 0, 0, 0.6);
            color: white;
            border: 1px solid rgba(255, 255, 255, 0.3);
            padding: 8px 12px;
            cursor: pointer;
            border-radius: 5px;
            font-size: 1em;
        }

        #fullscreen-btn:hover, #page-select:hover {
            background-color: rgba(0, 0, 0, 0.9);
        }
    </style>
</head>
<body>
    <div id="gallery-container" data-title="$title">
        <div id="image-display">
            <img id="current-image" src="" alt="$title">
            <button id="prev-arrow" class="nav-arrow" title="Previous (Left arrow)">&lt;</button>
            <button id="next-arrow" class="nav-arrow" title="Next (Right arrow)">&gt;</button>
            <div id="controls">
                <button id="fullscreen-btn" title="Fullscreen (F)">Fullscreen</button>
                <select id="page-select"></select>
            </div>
        </div>
        <div id="description-panel">
            <p id="image-description"></p>
        </div>
    </div>

    <script id="gallery-data" type="application/json">$gallery_data</script>
    <script>
        (function () {
            var galleryData = JSON.parse(document.getElementById('gallery-data').textContent) || [];
            var picsDir = '$pics_dir/';
            var currentIndex = 0;
            var currentImage = document.getElementById('current-image');
            var imageDescription = document.getElementById('image-description');
            var pageSelect = document.getElementById('page-select');
            var galleryContainer = document.getElementById('gallery-container');

            function render() {
                if (galleryData.length === 0) {
                    currentImage.removeAttribute('src');
                    currentImage.style.display = 'none';
                    imageDescription.textContent = 'No images to display.';
                    return;
                }
                var item = galleryData[currentIndex];
                if (item.imageUrl) {
                    currentImage.src = picsDir + item.imageFilename;
                    currentImage.style.display = '';
                } else {
                    currentImage.removeAttribute('src');
                    currentImage.style.display = 'none';
                }
                imageDescription.textContent = item.description;
                pageSelect.value = String(item.pageNumber);
                if (window.location.hash !== '#' + item.pageNumber) {
                    window.location.hash = '#' + item.pageNumber;
                }
            }

            function navigate(step) {
                if (galleryData.length === 0) {
                    return;
                }
                currentIndex = (currentIndex + step + galleryData.length) % galleryData.length;
                render();
            }

            function indexOfPage(pageNumber) {
                for (var i = 0; i < galleryData.length; i++) {
                    if (String(galleryData[i].pageNumber) === String(pageNumber)) {
                        return i;
                    }
                }
                return -1;
            }

            function goToPage(pageNumber) {
                var index = indexOfPage(pageNumber);
                if (index !== -1) {
                    currentIndex = index;
                    render();
                }
            }

            function hashPage() {
                return decodeURIComponent(window.location.hash.substring(1));
            }

            function toggleFullscreen() {
                if (!document.fullscreenElement) {
                    galleryContainer.requestFullscreen().catch(function (err) {
                        console.error('Could not enable full-screen mode:', err);
                    });
                } else {
                    document.exitFullscreen();
                }
            }

            galleryData.forEach(function (item) {
                var option = document.createElement('option');
                option.value = String(item.pageNumber);
                option.textContent = 'Page ' + item.pageNumber;
                pageSelect.appendChild(option);
            });

            var initial = indexOfPage(hashPage());
            if (initial !== -1) {
                currentIndex = initial;
            }
            render();

            document.getElementById('prev-arrow').addEventListener('click', function () { navigate(-1); });
            document.getElementById('next-arrow').addEventListener('click', function () { navigate(1); });
            document.getElementById('fullscreen-btn').addEventListener('click', toggleFullscreen);
            pageSelect.addEventListener('change', function (event) { goToPage(event.target.value); });

            document.addEventListener('keydown', function (event) {
                if (event.target === pageSelect) {
                    return;
                }
                if (event.key === 'ArrowLeft') {
                    navigate(-1);
                } else if (event.key === 'ArrowRight') {
                    navigate(1);
                } else if (event.key === 'f' || event.key === 'F') {
                    toggleFullscreen();
                }
            });

            window.addEventListener('hashchange', function () {
                if (galleryData.length === 0) {
                    return;
                }
                var page = hashPage();
                if (String(galleryData[currentIndex].pageNumber) !== page) {
                    goToPage(page);
                }
            });
        })();
    </script>
</body>
</html>
"""
)

def _page_payload(pages: Sequence[PageRecord]) -> List[Dict[str, Any]]:
    return [page.to_dict() for page in pages]


def embed_json(data: Any) -> str:
    """Serialize ``data`` so it can sit inside a ``<script>`` element."""
    encoded = json.dumps(data, ensure_ascii=False)
    return (
        encoded.replace("<", "\\u003c")
        .replace(">", "\\u003e")
        .replace("&", "\\u0026")
    )


def render_viewer(title: str, pages: Sequence[PageRecord]) -> str:
    return VIEWER_TEMPLATE.substitute(
        title=html.escape(title, quote=True),
        gallery_data=embed_json(_page_payload(pages)),
        pics_dir=PICS_DIRNAME,
    )


def generate_viewer(output_path: Path, title: str, pages: Sequence[PageRecord]) -> bool:
    """Overwrite ``output_path`` with a gallery for ``pages``.

    Returns False (after logging) if the file could not be written.
    """
    document = render_viewer(title, pages)
    try:
        write_text_atomic(output_path, document)
    except OSError:
        logger.exception("Error generating HTML viewer at %s", output_path)
        return False
    logger.info("HTML viewer generated: %s", output_path)
    return True
