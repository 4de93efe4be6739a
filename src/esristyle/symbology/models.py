"""
Style table data models.

Normalized descriptors produced by the symbol reader, the filter and rule
types produced by the renderer translator, and the feature wrapper consumed
by the style selection runtime.

Rule tables are immutable: every type here that ends up in a ``StyleTable``
is a frozen dataclass, so a table can be shared by every draw call of a layer.
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Mapping, Optional, Tuple, Union

from esristyle.symbology.exceptions import RuleOrderError


def compact_dict(value: Any) -> Any:
    """Drop None values from nested dictionaries."""
    if isinstance(value, dict):
        return {k: compact_dict(v) for k, v in value.items() if v is not None}
    if isinstance(value, (list, tuple)):
        return [compact_dict(v) for v in value]
    return value


def attribute_text(value: Any) -> str:
    """
    String form of an attribute value, as used by filters and label templates.

    Integral floats lose their ``.0`` (ArcGIS JSON often types codes as
    doubles) and booleans render lowercase.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


# =============================================================================
# SYMBOL DESCRIPTORS
# =============================================================================


@dataclass(frozen=True)
class PatternFill:
    """Repeating image tile used by picture fills."""

    src: str  # data URI of the (resized) tile
    width: int
    height: int
    repeat: str = "repeat"


@dataclass(frozen=True)
class FillStyle:
    color: Optional[str] = None
    pattern: Optional[PatternFill] = None


@dataclass(frozen=True)
class StrokeStyle:
    color: Optional[str] = None
    width: Optional[float] = None
    line_dash: Tuple[float, ...] = ()


@dataclass(frozen=True)
class CircleStyle:
    radius: float
    fill: Optional[FillStyle] = None
    stroke: Optional[StrokeStyle] = None


@dataclass(frozen=True)
class IconStyle:
    src: Optional[str]
    rotation: float = 0.0  # degrees, converted when the style object is built
    size: Optional[Tuple[float, float]] = None
    anchor: Tuple[float, float] = (0.5, 0.5)


@dataclass(frozen=True)
class TextStyle:
    """Label appearance; the label text itself lives on the LabelRule."""

    font: str = "20px Calibri,sans-serif"
    offset_x: float = 20
    offset_y: float = -10
    text_align: Optional[str] = None
    text_baseline: Optional[str] = None
    rotation: float = 0.0  # degrees
    placement: str = "point"
    fill: Optional[FillStyle] = None
    stroke: Optional[StrokeStyle] = None
    background_fill: Optional[FillStyle] = None
    background_stroke: Optional[StrokeStyle] = None
    padding: Tuple[int, int, int, int] = (5, 5, 5, 5)


@dataclass(frozen=True)
class SymbolDescriptor:
    """
    Normalized, renderer-ready style fragment read from one ESRI symbol.

    Only the fields relevant to the source symbol kind are populated:
    markers fill ``circle``, lines ``stroke``, fills ``fill`` (and ``stroke``
    for outlines), picture markers ``icon`` and text symbols ``text``.
    """

    fill: Optional[FillStyle] = None
    stroke: Optional[StrokeStyle] = None
    circle: Optional[CircleStyle] = None
    icon: Optional[IconStyle] = None
    text: Optional[TextStyle] = None

    @property
    def padding(self) -> Optional[Tuple[int, int, int, int]]:
        return self.text.padding if self.text else None

    @property
    def background_fill(self) -> Optional[FillStyle]:
        return self.text.background_fill if self.text else None

    @property
    def background_stroke(self) -> Optional[StrokeStyle]:
        return self.text.background_stroke if self.text else None

    def is_empty(self) -> bool:
        return not any((self.fill, self.stroke, self.circle, self.icon, self.text))

    def to_dict(self) -> Dict[str, Any]:
        return compact_dict(asdict(self))


# =============================================================================
# FILTERS
# =============================================================================


class FilterOperator(Enum):
    """Operators supported by feature filters."""

    EQUALS = "="
    IN_SET = "in"
    NOT_IN_SET = "not in"
    IS_NULL = "is null"
    NOT_NULL = "not null"
    BETWEEN = "between"


@dataclass(frozen=True)
class Range:
    """Inclusive numeric range of a class break."""

    lower: float
    upper: float

    def contains(self, value: float) -> bool:
        return self.lower <= value <= self.upper


Operand = Union[None, str, FrozenSet[str], Range]


@dataclass(frozen=True)
class FilterRule:
    """
    A single attribute test.

    Missing attributes never satisfy a value comparison, ``NOT_IN_SET``
    included: absence is not a valid "not in set" pass.
    """

    attribute_name: str
    operator: FilterOperator
    operand: Operand = None

    def evaluate(self, attributes: Mapping[str, Any]) -> bool:
        value = attributes.get(self.attribute_name)
        op = self.operator

        if op is FilterOperator.IS_NULL:
            return value is None or value == ""
        if op is FilterOperator.NOT_NULL:
            return value is not None and value != ""

        if value is None:
            return False

        if op is FilterOperator.BETWEEN:
            try:
                number = float(value)
            except (TypeError, ValueError):
                return False
            return self.operand.contains(number)

        text = attribute_text(value)
        if op is FilterOperator.EQUALS:
            return text == self.operand
        if op is FilterOperator.IN_SET:
            return text in self.operand
        if op is FilterOperator.NOT_IN_SET:
            return text not in self.operand

        raise ValueError(f"Unknown filter operator: {op}")

    def to_dict(self) -> Dict[str, Any]:
        operand = self.operand
        if isinstance(operand, frozenset):
            operand = sorted(operand)
        elif isinstance(operand, Range):
            operand = {"lower": operand.lower, "upper": operand.upper}

        return {
            "attribute": self.attribute_name,
            "operator": self.operator.value,
            "operand": operand,
        }


# =============================================================================
# RULES
# =============================================================================


@dataclass(frozen=True)
class ConditionalRule:
    """Feature style applied when every filter matches."""

    filters: Tuple[FilterRule, ...]
    style: SymbolDescriptor
    title: Optional[str] = None

    def __post_init__(self):
        if not self.filters:
            raise ValueError("A conditional rule needs at least one filter")

    def matches(self, attributes: Mapping[str, Any]) -> bool:
        return all(f.evaluate(attributes) for f in self.filters)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": "conditional",
            "title": self.title,
            "filters": [f.to_dict() for f in self.filters],
            "style": self.style.to_dict(),
        }


@dataclass(frozen=True)
class DefaultRule:
    """Fallback feature style; always matches and must come last."""

    style: SymbolDescriptor
    title: Optional[str] = None

    @property
    def filters(self) -> Tuple[FilterRule, ...]:
        return ()

    def matches(self, attributes: Mapping[str, Any]) -> bool:
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": "default", "title": self.title, "style": self.style.to_dict()}


FeatureStyleRule = Union[ConditionalRule, DefaultRule]


@dataclass(frozen=True)
class LabelRule:
    """
    Label definition for a range of map scales.

    ``min_scale``/``max_scale`` are already swapped from the ESRI convention
    (larger denominator = zoomed out = larger resolution), so
    ``min_resolution <= max_resolution``.
    """

    min_scale: float
    max_scale: float
    template: str
    style: SymbolDescriptor
    min_resolution: float
    max_resolution: float

    def covers(self, resolution: float) -> bool:
        return self.min_resolution <= resolution <= self.max_resolution

    def to_dict(self) -> Dict[str, Any]:
        return {
            "min_scale": self.min_scale,
            "max_scale": self.max_scale,
            "min_resolution": self.min_resolution,
            "max_resolution": self.max_resolution,
            "template": self.template,
            "style": self.style.to_dict(),
        }


@dataclass(frozen=True)
class AggregatedValueGroup:
    """Unique-value rules sharing one label, merged per field position."""

    title: str
    symbol: Dict[str, Any] = field(compare=False, hash=False)
    field_values: Tuple[Tuple[str, ...], Tuple[str, ...], Tuple[str, ...]] = ((), (), ())

    def value_set(self, position: int) -> FrozenSet[str]:
        return frozenset(self.field_values[position])

    def joined(self, position: int) -> str:
        """Comma-joined values of a field position, as shown in legends."""
        return ",".join(self.field_values[position])


@dataclass(frozen=True)
class StyleTable:
    """
    Immutable translation result of one layer.

    Feature rules are evaluated in order, first match wins; a DefaultRule is
    therefore only accepted as the very last rule.
    """

    feature_rules: Tuple[FeatureStyleRule, ...] = ()
    label_rules: Tuple[LabelRule, ...] = ()

    def __post_init__(self):
        defaults = [
            i for i, rule in enumerate(self.feature_rules) if isinstance(rule, DefaultRule)
        ]
        if len(defaults) > 1:
            raise RuleOrderError(
                f"Only one default rule is allowed, found {len(defaults)}"
            )
        if defaults and defaults[0] != len(self.feature_rules) - 1:
            raise RuleOrderError(
                f"Default rule at position {defaults[0]} would shadow "
                f"{len(self.feature_rules) - 1 - defaults[0]} following rule(s)"
            )

    @property
    def default_rule(self) -> Optional[DefaultRule]:
        if self.feature_rules and isinstance(self.feature_rules[-1], DefaultRule):
            return self.feature_rules[-1]
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "feature_rules": [rule.to_dict() for rule in self.feature_rules],
            "label_rules": [rule.to_dict() for rule in self.label_rules],
        }


# =============================================================================
# FEATURES
# =============================================================================


@dataclass
class Feature:
    """Feature as seen by the style runtime: identity, attributes, visibility."""

    id: Any = None
    attributes: Dict[str, Any] = field(default_factory=dict)
    hidden: bool = False

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], id_field: str = "OBJECTID") -> "Feature":
        """
        Build a feature from an ArcGIS JSON feature or a plain attribute mapping.

        Examples:
            {"attributes": {"OBJECTID": 3, "NAME": "Bern"}, "geometry": {...}}
            {"OBJECTID": 3, "NAME": "Bern"}
        """
        attributes = data.get("attributes")
        if not isinstance(attributes, Mapping):
            attributes = data

        attributes = dict(attributes)
        feature_id = data.get("id", attributes.get(id_field))
        return cls(id=feature_id, attributes=attributes)
