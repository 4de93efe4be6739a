"""
Renderer-ready style objects.

Default style factory of the selection runtime. Descriptors from the style
table are turned into ``Style`` objects built from ``Fill``, ``Stroke``,
``Circle``, ``Icon`` and ``Text`` parts, shaped after the style classes of
common web map renderers. Another factory can be plugged into the runtime
through the ``StyleFactory`` protocol.
"""

import math
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional, Protocol, Tuple, Union

from esristyle.symbology.models import (FillStyle, PatternFill, StrokeStyle,
                                        SymbolDescriptor, compact_dict)


@dataclass
class Fill:
    color: Union[str, PatternFill, None] = None


@dataclass
class Stroke:
    color: Optional[str] = None
    width: Optional[float] = None
    line_dash: Tuple[float, ...] = ()


@dataclass
class Circle:
    radius: float
    fill: Optional[Fill] = None
    stroke: Optional[Stroke] = None


@dataclass
class Icon:
    src: Optional[str]
    rotation: float = 0.0  # radians
    size: Optional[Tuple[float, float]] = None
    anchor: Tuple[float, float] = (0.5, 0.5)


@dataclass
class Text:
    """Label text part; the text is replaced per draw call."""

    font: str
    text: str = ""
    offset_x: float = 0
    offset_y: float = 0
    text_align: Optional[str] = None
    text_baseline: Optional[str] = None
    rotation: float = 0.0  # radians
    placement: str = "point"
    fill: Optional[Fill] = None
    stroke: Optional[Stroke] = None
    background_fill: Optional[Fill] = None
    background_stroke: Optional[Stroke] = None
    padding: Tuple[int, int, int, int] = (0, 0, 0, 0)

    def set_text(self, text: str) -> None:
        self.text = text


@dataclass
class Style:
    fill: Optional[Fill] = None
    stroke: Optional[Stroke] = None
    image: Union[Circle, Icon, None] = None
    text: Optional[Text] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return compact_dict(asdict(self))


class StyleFactory(Protocol):
    """Builds renderer style objects from table descriptors."""

    def create_feature_style(self, descriptor: SymbolDescriptor) -> Any: ...

    def create_label_style(self, descriptor: SymbolDescriptor) -> Any: ...

    def set_label_text(self, style: Any, text: str) -> None: ...


def _fill(fill: Optional[FillStyle]) -> Optional[Fill]:
    if fill is None:
        return None
    return Fill(color=fill.pattern or fill.color)


def _stroke(stroke: Optional[StrokeStyle]) -> Optional[Stroke]:
    if stroke is None:
        return None
    return Stroke(color=stroke.color, width=stroke.width, line_dash=stroke.line_dash)


def create_feature_style(descriptor: SymbolDescriptor) -> Style:
    """Build the feature style of a rule."""
    image = None
    if descriptor.circle:
        circle = descriptor.circle
        image = Circle(
            radius=circle.radius, fill=_fill(circle.fill), stroke=_stroke(circle.stroke)
        )
    elif descriptor.icon:
        icon = descriptor.icon
        image = Icon(
            src=icon.src,
            rotation=math.radians(icon.rotation),
            size=icon.size,
            anchor=icon.anchor,
        )

    return Style(
        fill=_fill(descriptor.fill),
        stroke=_stroke(descriptor.stroke),
        image=image,
        text=_text(descriptor) if descriptor.text else None,
    )


def _text(descriptor: SymbolDescriptor) -> Text:
    text = descriptor.text
    return Text(
        font=text.font,
        offset_x=text.offset_x,
        offset_y=text.offset_y,
        text_align=text.text_align,
        text_baseline=text.text_baseline,
        rotation=math.radians(text.rotation),
        placement=text.placement,
        fill=_fill(text.fill),
        stroke=_stroke(text.stroke),
        background_fill=_fill(descriptor.background_fill),
        background_stroke=_stroke(descriptor.background_stroke),
        padding=descriptor.padding,
    )


def create_label_style(descriptor: SymbolDescriptor) -> Style:
    """Build the label style of a label rule, with an empty text."""
    return Style(text=_text(descriptor))


class DefaultStyleFactory:
    """StyleFactory producing the style objects of this module."""

    def create_feature_style(self, descriptor: SymbolDescriptor) -> Style:
        return create_feature_style(descriptor)

    def create_label_style(self, descriptor: SymbolDescriptor) -> Style:
        return create_label_style(descriptor)

    def set_label_text(self, style: Style, text: str) -> None:
        style.text.set_text(text)
