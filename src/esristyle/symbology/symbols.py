"""
ESRI symbol reader.

Symbols from the ArcGIS REST ``drawingInfo`` are decoded once, at the input
boundary, into one of six symbol classes keyed by their ``type`` tag:

- esriSMS → SimpleMarkerSymbol  → circle
- esriSLS → SimpleLineSymbol    → stroke
- esriSFS → SimpleFillSymbol    → fill (+ outline stroke)
- esriPMS → PictureMarkerSymbol → icon
- esriPFS → PictureFillSymbol   → pattern fill (+ outline stroke)
- esriTS  → TextSymbol          → text

``read_symbol`` then turns a symbol into a normalized SymbolDescriptor.
An unknown tag is an error, never silently dropped.

See https://developers.arcgis.com/documentation/common-data-types/symbol-objects.htm
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from loguru import logger

from esristyle.symbology.colors import color_to_string
from esristyle.symbology.exceptions import ImageDecodeFailure, UnsupportedSymbolKind
from esristyle.symbology.models import (CircleStyle, FillStyle, IconStyle,
                                        StrokeStyle, SymbolDescriptor, TextStyle)
from esristyle.symbology.patterns import POINTS_TO_PIXELS, PatternLoader

DEFAULT_FONT = "20px Calibri,sans-serif"
TEXT_OFFSET_X = 20
TEXT_OFFSET_Y = -10
TEXT_PADDING = (5, 5, 5, 5)

LINE_DASH_PATTERNS = {
    "esriSLSSolid": [],
    "esriSLSDash": [10],
    "esriSLSDot": [1, 10],
    "esriSLSDashDot": [10, 10, 1, 10],
    "esriSLSDashDotDot": [10, 10, 1, 10, 1, 10],
    "esriSLSNull": [],
}

VALID_TEXT_BASELINES = {"bottom", "top", "middle", "alphabetic", "hanging", "ideographic"}
VALID_TEXT_ALIGNS = {"left", "right", "center", "end", "start"}

Color = Optional[List[float]]


# =============================================================================
# DECODED SYMBOLS
# =============================================================================


@dataclass(frozen=True)
class SimpleLineSymbol:
    color: Color = None
    width: Optional[float] = None
    style: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SimpleLineSymbol":
        return cls(color=data.get("color"), width=data.get("width"), style=data.get("style"))


@dataclass(frozen=True)
class SimpleMarkerSymbol:
    color: Color = None
    size: float = 0
    style: Optional[str] = None
    outline: Optional[SimpleLineSymbol] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SimpleMarkerSymbol":
        return cls(
            color=data.get("color"),
            size=data.get("size") or 0,
            style=data.get("style"),
            outline=_outline(data),
        )


@dataclass(frozen=True)
class SimpleFillSymbol:
    color: Color = None
    style: Optional[str] = None
    outline: Optional[SimpleLineSymbol] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SimpleFillSymbol":
        return cls(color=data.get("color"), style=data.get("style"), outline=_outline(data))


@dataclass(frozen=True)
class PictureMarkerSymbol:
    image_data: Optional[str] = None
    url: Optional[str] = None
    content_type: str = "image/png"
    width: Optional[float] = None
    height: Optional[float] = None
    angle: float = 0.0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PictureMarkerSymbol":
        return cls(
            image_data=data.get("imageData"),
            url=data.get("url"),
            content_type=data.get("contentType") or "image/png",
            width=data.get("width"),
            height=data.get("height"),
            angle=data.get("angle") or 0.0,
        )


@dataclass(frozen=True)
class PictureFillSymbol:
    image_data: Optional[str] = None
    content_type: str = "image/png"
    width: Optional[float] = None
    height: Optional[float] = None
    outline: Optional[SimpleLineSymbol] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PictureFillSymbol":
        return cls(
            image_data=data.get("imageData"),
            content_type=data.get("contentType") or "image/png",
            width=data.get("width"),
            height=data.get("height"),
            outline=_outline(data),
        )


@dataclass(frozen=True)
class TextSymbol:
    text: Optional[str] = None
    color: Color = None
    font: Dict[str, Any] = field(default_factory=dict)
    angle: float = 0.0
    xoffset: float = 0.0
    yoffset: float = 0.0
    horizontal_alignment: Optional[str] = None
    vertical_alignment: Optional[str] = None
    halo_color: Color = None
    halo_size: Optional[float] = None
    background_color: Color = None
    border_line_color: Color = None
    border_line_size: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TextSymbol":
        return cls(
            text=data.get("text"),
            color=data.get("color"),
            font=data.get("font") or {},
            angle=data.get("angle") or 0.0,
            xoffset=data.get("xoffset") or 0.0,
            yoffset=data.get("yoffset") or 0.0,
            horizontal_alignment=data.get("horizontalAlignment"),
            vertical_alignment=data.get("verticalAlignment"),
            halo_color=data.get("haloColor"),
            halo_size=data.get("haloSize"),
            background_color=data.get("backgroundColor"),
            border_line_color=data.get("borderLineColor"),
            border_line_size=data.get("borderLineSize"),
        )


EsriSymbol = Union[
    SimpleMarkerSymbol,
    SimpleLineSymbol,
    SimpleFillSymbol,
    PictureMarkerSymbol,
    PictureFillSymbol,
    TextSymbol,
]

SYMBOL_TYPES = {
    "esriSMS": SimpleMarkerSymbol,
    "esriSLS": SimpleLineSymbol,
    "esriSFS": SimpleFillSymbol,
    "esriPMS": PictureMarkerSymbol,
    "esriPFS": PictureFillSymbol,
    "esriTS": TextSymbol,
}


def _outline(data: Dict[str, Any]) -> Optional[SimpleLineSymbol]:
    outline = data.get("outline")
    if not outline:
        return None
    return SimpleLineSymbol.from_dict(outline)


def parse_symbol(data: Optional[Dict[str, Any]]) -> EsriSymbol:
    """
    Decode an ESRI symbol dictionary by its ``type`` tag.

    Raises:
        UnsupportedSymbolKind: missing or unknown ``type``
    """
    kind = data.get("type") if data else None
    symbol_class = SYMBOL_TYPES.get(kind)
    if symbol_class is None:
        raise UnsupportedSymbolKind(kind)
    return symbol_class.from_dict(data)


# =============================================================================
# READER
# =============================================================================


def _stroke(line: Optional[SimpleLineSymbol]) -> Optional[StrokeStyle]:
    if line is None:
        return None
    return StrokeStyle(
        color=color_to_string(line.color),
        width=line.width,
        line_dash=tuple(LINE_DASH_PATTERNS.get(line.style, [])),
    )


def _fill(color: Color) -> Optional[FillStyle]:
    css = color_to_string(color)
    return FillStyle(color=css) if css else None


def _font(font: Dict[str, Any]) -> str:
    """
    Build a CSS font shorthand from an ESRI font object.

    Example:
        {"family": "Arial", "size": 8, "style": "normal", "weight": "bold"}
        -> "normal bold 8pt Arial"
    """
    if not font:
        return DEFAULT_FONT

    size = font.get("size")
    parts = [
        font.get("style"),
        font.get("weight"),
        f"{size}pt" if size is not None else None,
        font.get("family"),
    ]
    return " ".join(str(p) for p in parts if p) or DEFAULT_FONT


def read_text_symbol(symbol: TextSymbol) -> SymbolDescriptor:
    """Read a text symbol into a text descriptor (the text itself stays unformatted)."""
    background_stroke = None
    if symbol.border_line_color:
        background_stroke = StrokeStyle(
            color=color_to_string(symbol.border_line_color),
            width=symbol.border_line_size or None,
        )

    halo = None
    if symbol.halo_color:
        halo = StrokeStyle(
            color=color_to_string(symbol.halo_color), width=symbol.halo_size or None
        )

    baseline = symbol.vertical_alignment
    align = symbol.horizontal_alignment

    text = TextStyle(
        font=_font(symbol.font),
        offset_x=symbol.xoffset + TEXT_OFFSET_X,
        offset_y=symbol.yoffset + TEXT_OFFSET_Y,
        text_align=align if align in VALID_TEXT_ALIGNS else None,
        text_baseline=baseline if baseline in VALID_TEXT_BASELINES else None,
        rotation=symbol.angle,
        fill=_fill(symbol.color),
        stroke=halo,
        background_fill=_fill(symbol.background_color),
        background_stroke=background_stroke,
        padding=TEXT_PADDING,
    )
    return SymbolDescriptor(text=text)


async def read_symbol(
    symbol: Union[EsriSymbol, Dict[str, Any]],
    *,
    pattern_loader: Optional[PatternLoader] = None,
    base_url: Optional[str] = None,
) -> SymbolDescriptor:
    """
    Convert an ESRI symbol to a normalized SymbolDescriptor.

    Args:
        symbol: Raw symbol dictionary or an already decoded symbol
        pattern_loader: Loader used for picture fills; without one, picture
            fills keep only their outline
        base_url: Layer URL used to resolve picture markers referenced by ``url``

    Returns:
        Descriptor with only the fields relevant to the symbol kind populated

    Raises:
        UnsupportedSymbolKind: if the symbol type is unknown
    """
    if isinstance(symbol, dict):
        symbol = parse_symbol(symbol)

    if isinstance(symbol, SimpleMarkerSymbol):
        return SymbolDescriptor(
            circle=CircleStyle(
                radius=symbol.size / 2,
                fill=_fill(symbol.color),
                stroke=_stroke(symbol.outline),
            )
        )

    if isinstance(symbol, SimpleLineSymbol):
        return SymbolDescriptor(stroke=_stroke(symbol))

    if isinstance(symbol, SimpleFillSymbol):
        return SymbolDescriptor(fill=_fill(symbol.color), stroke=_stroke(symbol.outline))

    if isinstance(symbol, PictureMarkerSymbol):
        return SymbolDescriptor(icon=_icon(symbol, base_url))

    if isinstance(symbol, PictureFillSymbol):
        return SymbolDescriptor(
            fill=await _picture_fill(symbol, pattern_loader),
            stroke=_stroke(symbol.outline),
        )

    if isinstance(symbol, TextSymbol):
        return read_text_symbol(symbol)

    raise UnsupportedSymbolKind(type(symbol).__name__)


def _icon(symbol: PictureMarkerSymbol, base_url: Optional[str]) -> IconStyle:
    if symbol.image_data:
        src = f"data:{symbol.content_type};base64,{symbol.image_data}"
    elif symbol.url and base_url:
        src = f"{base_url.rstrip('/')}/images/{symbol.url}"
    else:
        logger.warning("Picture marker without image data or resolvable url")
        src = None

    size = None
    if symbol.width and symbol.height:
        size = (symbol.width * POINTS_TO_PIXELS, symbol.height * POINTS_TO_PIXELS)

    return IconStyle(src=src, rotation=symbol.angle, size=size)


async def _picture_fill(
    symbol: PictureFillSymbol, pattern_loader: Optional[PatternLoader]
) -> Optional[FillStyle]:
    if not symbol.image_data:
        logger.warning("Picture fill without image data, fill left transparent")
        return None

    if pattern_loader is None:
        logger.warning("No pattern loader configured, picture fill left transparent")
        return None

    try:
        pattern = await pattern_loader.load(
            symbol.image_data,
            content_type=symbol.content_type,
            width=symbol.width,
            height=symbol.height,
        )
    except ImageDecodeFailure as e:
        logger.warning(f"{e}, fill left transparent")
        return None

    return FillStyle(pattern=pattern)
