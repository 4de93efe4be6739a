"""
Picture fill patterns.

Decoding the embedded picture of an ``esriPFS`` symbol is the only suspend
point of the translation phase. Loaders are awaited by the translator before
the style table is handed out, so no draw call ever sees a half-built pattern.
"""

import asyncio
import base64
import binascii
import io
from typing import Optional, Protocol

from loguru import logger
from PIL import Image, UnidentifiedImageError

from esristyle.symbology.exceptions import ImageDecodeFailure
from esristyle.symbology.models import PatternFill

POINTS_TO_PIXELS = 1.333


class PatternLoader(Protocol):
    """Turns embedded picture bytes into a repeating pattern fill."""

    async def load(
        self,
        image_data: str,
        content_type: str = "image/png",
        width: Optional[float] = None,
        height: Optional[float] = None,
    ) -> PatternFill: ...


class PillowPatternLoader:
    """
    Default pattern loader backed by Pillow.

    The picture is decoded, resized to its symbol size (points converted to
    pixels) and re-encoded as a PNG tile. Decoding runs in a worker thread.
    """

    def __init__(self, resample: int = Image.Resampling.NEAREST):
        self.resample = resample

    async def load(
        self,
        image_data: str,
        content_type: str = "image/png",
        width: Optional[float] = None,
        height: Optional[float] = None,
    ) -> PatternFill:
        return await asyncio.to_thread(self._render_tile, image_data, width, height)

    def _render_tile(
        self, image_data: str, width: Optional[float], height: Optional[float]
    ) -> PatternFill:
        try:
            raw = base64.b64decode(image_data, validate=True)
            with Image.open(io.BytesIO(raw)) as image:
                image.load()
                tile = image.convert("RGBA")
        except (binascii.Error, UnidentifiedImageError, OSError) as e:
            raise ImageDecodeFailure(f"Cannot decode picture fill: {e}") from e

        size = (
            max(1, round(width * POINTS_TO_PIXELS)) if width else tile.width,
            max(1, round(height * POINTS_TO_PIXELS)) if height else tile.height,
        )
        if size != tile.size:
            tile = tile.resize(size, self.resample)

        buffer = io.BytesIO()
        tile.save(buffer, format="PNG")
        encoded = base64.b64encode(buffer.getvalue()).decode("ascii")

        logger.debug(f"Picture fill tile rendered ({size[0]}x{size[1]} px)")
        return PatternFill(
            src=f"data:image/png;base64,{encoded}", width=size[0], height=size[1]
        )
