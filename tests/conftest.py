"""Pytest configuration and fixtures."""

import asyncio
import base64
import io
import os
import sys
from pathlib import Path

import pytest
from loguru import logger
from PIL import Image

# Add src to Python path for testing
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))


def _png_base64(size=(2, 2), color=(255, 0, 0, 255)) -> str:
    buffer = io.BytesIO()
    Image.new("RGBA", size, color).save(buffer, format="PNG")
    return base64.b64encode(buffer.getvalue()).decode("ascii")


def pytest_configure(config):
    """Force test environment for all pytest runs"""
    os.environ["ESRISTYLE_ENVIRONMENT"] = "test"


@pytest.fixture(autouse=True)
def loguru_capture():
    stream = io.StringIO()
    logger.remove()
    logger.add(stream, level="DEBUG", format="{level} | {message}")
    yield stream
    logger.remove()


@pytest.fixture(autouse=True)
def reset_style_logger():
    """CLI invocations configure logging once per process; start clean each test."""
    from esristyle.utils.logging import style_logger

    yield
    style_logger.reset()


@pytest.fixture
def run():
    """Drive a coroutine to completion."""
    return asyncio.run


@pytest.fixture
def red_png():
    """Base64 of a 2x2 opaque red PNG."""
    return _png_base64()


@pytest.fixture
def unique_value_layer():
    """Layer definition with a unique value renderer, a default symbol and labels."""
    return {
        "id": 0,
        "name": "Stations",
        "drawingInfo": {
            "renderer": {
                "type": "uniqueValue",
                "field1": "STATUS",
                "fieldDelimiter": ",",
                "defaultSymbol": {
                    "type": "esriSFS",
                    "style": "esriSFSSolid",
                    "color": None,
                    "outline": {
                        "type": "esriSLS",
                        "style": "esriSLSSolid",
                        "color": [128, 128, 128, 255],
                        "width": 1,
                    },
                },
                "defaultLabel": "Other",
                "uniqueValueInfos": [
                    {
                        "value": "ACTIVE",
                        "label": "Active",
                        "symbol": {
                            "type": "esriSFS",
                            "style": "esriSFSSolid",
                            "color": [0, 255, 0, 255],
                        },
                    },
                    {
                        "value": "INACTIVE",
                        "label": "Inactive",
                        "symbol": {
                            "type": "esriSFS",
                            "style": "esriSFSSolid",
                            "color": [128, 128, 128, 255],
                        },
                    },
                ],
            },
            "labelingInfo": [
                {
                    "labelExpression": "[OBJECTID] CONCAT  NEWLINE  CONCAT [NAME]",
                    "labelPlacement": "esriServerPointLabelPlacementAboveRight",
                    "minScale": 0,
                    "maxScale": 0,
                    "symbol": {
                        "type": "esriTS",
                        "color": [0, 0, 0, 255],
                        "font": {"family": "Arial", "size": 8},
                    },
                }
            ],
        },
    }
