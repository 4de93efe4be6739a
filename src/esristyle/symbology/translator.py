"""
ESRI renderer translator.

Turns the ``renderer`` and ``labelingInfo`` of an ArcGIS REST ``drawingInfo``
document into an immutable StyleTable:

- simple       → one DefaultRule
- uniqueValue  → one ConditionalRule per label group (IN_SET per field),
                 DefaultRule from ``defaultSymbol`` last
- classBreaks  → one ConditionalRule per break (BETWEEN), DefaultRule last

Label definitions become LabelRules with their scale range converted to a
resolution range for the target projection.

See https://developers.arcgis.com/documentation/common-data-types/renderer-objects.htm
"""

import asyncio
from dataclasses import replace
from typing import Any, Dict, List, Optional, Sequence

from loguru import logger

from esristyle.symbology.aggregator import aggregate_unique_values
from esristyle.symbology.colors import scale_to_resolution
from esristyle.symbology.exceptions import (MissingRendererError, StyleError,
                                            UnsupportedRendererKind,
                                            UnsupportedSymbolKind)
from esristyle.symbology.models import (ConditionalRule, DefaultRule,
                                        FeatureStyleRule, FilterOperator,
                                        FilterRule, LabelRule, Range,
                                        StyleTable, SymbolDescriptor)
from esristyle.symbology.patterns import PatternLoader, PillowPatternLoader
from esristyle.symbology.symbols import TextSymbol, parse_symbol, read_symbol, read_text_symbol

DEFAULT_LABEL_MAX_SCALE = 1000
DEFAULT_LABEL_MIN_SCALE = 0

# Order matters: the newline sequence contains the plain concatenation
LABEL_EXPRESSION_REPLACEMENTS = (
    ("[", "{"),
    ("]", "}"),
    (" CONCAT  NEWLINE  CONCAT ", "\n"),
    (" CONCAT ", " "),
)


def convert_label_expression(expression: Optional[str]) -> str:
    """
    Rewrite an ESRI label expression into a label template.

    Examples:
        "[NAME]" -> "{NAME}"
        "[ID] CONCAT  NEWLINE  CONCAT [NAME]" -> "{ID}\\n{NAME}"
        "[ID] CONCAT [NAME]" -> "{ID} {NAME}"
    """
    template = expression or ""
    for old, new in LABEL_EXPRESSION_REPLACEMENTS:
        template = template.replace(old, new)
    return template


def read_labels(
    labeling_info: Sequence[Dict[str, Any]], meters_per_unit: Optional[float] = None
) -> List[LabelRule]:
    """
    Read label definitions for different map scales.

    ESRI ``minScale`` is the zoomed-out limit, so it becomes the upper scale
    (and resolution) bound of the label rule, and ``maxScale`` the lower one.

    Args:
        labeling_info: ``labelingInfo`` entries of the drawingInfo
        meters_per_unit: Meters per unit of the target projection

    Returns:
        Label rules in declaration order
    """
    rules = []

    for definition in labeling_info:
        symbol = parse_symbol(definition.get("symbol") or {"type": "esriTS"})
        if not isinstance(symbol, TextSymbol):
            raise UnsupportedSymbolKind(definition["symbol"].get("type"))

        style = read_text_symbol(symbol)
        placement = definition.get("labelPlacement") or ""
        if "LinePlacement" in placement:
            style = replace(style, text=replace(style.text, placement="line"))

        max_scale = definition.get("minScale") or DEFAULT_LABEL_MAX_SCALE
        min_scale = definition.get("maxScale") or DEFAULT_LABEL_MIN_SCALE

        rules.append(
            LabelRule(
                min_scale=min_scale,
                max_scale=max_scale,
                template=convert_label_expression(definition.get("labelExpression")),
                style=style,
                min_resolution=scale_to_resolution(min_scale, meters_per_unit),
                max_resolution=scale_to_resolution(max_scale, meters_per_unit),
            )
        )

    return rules


class RendererTranslator:
    """Translate one renderer definition into ordered feature style rules."""

    def __init__(
        self,
        pattern_loader: Optional[PatternLoader] = None,
        base_url: Optional[str] = None,
        group_by_label: bool = True,
    ):
        self.pattern_loader = pattern_loader or PillowPatternLoader()
        self.base_url = base_url
        self.group_by_label = group_by_label

    async def _read_all(self, symbols: Sequence[Dict[str, Any]]) -> List[SymbolDescriptor]:
        # picture fills decode concurrently; every one is awaited here
        return list(
            await asyncio.gather(
                *(
                    read_symbol(
                        symbol, pattern_loader=self.pattern_loader, base_url=self.base_url
                    )
                    for symbol in symbols
                )
            )
        )

    async def _default_rule(self, renderer: Dict[str, Any]) -> List[FeatureStyleRule]:
        symbol = renderer.get("defaultSymbol")
        if not symbol:
            return []
        style = await read_symbol(
            symbol, pattern_loader=self.pattern_loader, base_url=self.base_url
        )
        return [DefaultRule(style=style, title=renderer.get("defaultLabel"))]

    async def translate(self, renderer: Optional[Dict[str, Any]]) -> List[FeatureStyleRule]:
        if not renderer:
            raise MissingRendererError()

        kind = renderer.get("type")
        logger.debug(f"Translating '{kind}' renderer")

        if kind == "simple":
            (style,) = await self._read_all([renderer.get("symbol")])
            return [DefaultRule(style=style, title=renderer.get("label") or None)]
        if kind == "uniqueValue":
            return await self._unique_value_rules(renderer)
        if kind == "classBreaks":
            return await self._class_break_rules(renderer)

        raise UnsupportedRendererKind(kind)

    async def _unique_value_rules(self, renderer: Dict[str, Any]) -> List[FeatureStyleRule]:
        fields = [renderer.get("field1"), renderer.get("field2"), renderer.get("field3")]
        if not fields[0]:
            raise StyleError("Unique value renderer without field1")

        groups = aggregate_unique_values(
            renderer.get("uniqueValueInfos") or [],
            renderer.get("fieldDelimiter") or ",",
            group_by_label=self.group_by_label,
        )
        styles = await self._read_all([group.symbol for group in groups])

        rules: List[FeatureStyleRule] = []
        for group, style in zip(groups, styles):
            filters = tuple(
                FilterRule(field_name, FilterOperator.IN_SET, group.value_set(position))
                for position, field_name in enumerate(fields)
                if field_name
            )
            rules.append(ConditionalRule(filters=filters, style=style, title=group.title))

        return rules + await self._default_rule(renderer)

    async def _class_break_rules(self, renderer: Dict[str, Any]) -> List[FeatureStyleRule]:
        field_name = renderer.get("field")
        if not field_name:
            raise StyleError("Class breaks renderer without field")

        infos = renderer.get("classBreakInfos") or []
        min_value = renderer.get("minValue")
        if min_value is None:
            min_value = float("-inf")

        styles = await self._read_all([info.get("symbol") for info in infos])

        rules: List[FeatureStyleRule] = []
        for position, (info, style) in enumerate(zip(infos, styles)):
            upper = info.get("classMaxValue")
            if upper is None:
                raise StyleError(
                    f"Class break {info.get('label') or position} without classMaxValue"
                )
            lower = info.get("classMinValue")
            bounds = Range(lower=min_value if lower is None else lower, upper=upper)
            rules.append(
                ConditionalRule(
                    filters=(FilterRule(field_name, FilterOperator.BETWEEN, bounds),),
                    style=style,
                    title=info.get("label"),
                )
            )

        return rules + await self._default_rule(renderer)


async def translate(
    renderer: Optional[Dict[str, Any]],
    labeling_info: Optional[Sequence[Dict[str, Any]]] = None,
    *,
    meters_per_unit: Optional[float] = None,
    group_by_label: bool = True,
    pattern_loader: Optional[PatternLoader] = None,
    base_url: Optional[str] = None,
) -> StyleTable:
    """
    Translate an ESRI renderer and its label definitions into a style table.

    Args:
        renderer: ``drawingInfo.renderer``
        labeling_info: ``drawingInfo.labelingInfo``
        meters_per_unit: Meters per unit of the target projection
        group_by_label: Merge unique values sharing a label into one rule
        pattern_loader: Loader for picture fill images (Pillow if None)
        base_url: Layer URL for picture markers referenced by ``url``

    Raises:
        MissingRendererError: no renderer given
        UnsupportedRendererKind: renderer type other than simple/uniqueValue/classBreaks
        UnsupportedSymbolKind: a symbol with an unknown type
    """
    translator = RendererTranslator(
        pattern_loader=pattern_loader, base_url=base_url, group_by_label=group_by_label
    )
    feature_rules = await translator.translate(renderer)
    label_rules = read_labels(labeling_info, meters_per_unit) if labeling_info else []

    table = StyleTable(feature_rules=tuple(feature_rules), label_rules=tuple(label_rules))
    logger.debug(
        f"Style table ready: {len(table.feature_rules)} feature rule(s), "
        f"{len(table.label_rules)} label rule(s)"
    )
    return table


async def read_style_definitions(document: Dict[str, Any], **options) -> StyleTable:
    """
    Translate a layer definition or a bare ``drawingInfo`` document.

    Keyword options are passed to :func:`translate`.
    """
    drawing_info = document.get("drawingInfo", document) if document else {}
    return await translate(
        drawing_info.get("renderer"), drawing_info.get("labelingInfo"), **options
    )
