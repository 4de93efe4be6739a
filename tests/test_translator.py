"""Tests for the renderer translator."""

import math

import pytest

from esristyle.symbology.colors import METERS_PER_UNIT, scale_to_resolution
from esristyle.symbology.exceptions import (MissingRendererError, RuleOrderError,
                                            StyleError, UnsupportedRendererKind,
                                            UnsupportedSymbolKind)
from esristyle.symbology.models import (ConditionalRule, DefaultRule,
                                        FilterOperator, FilterRule, StyleTable,
                                        SymbolDescriptor)
from esristyle.symbology.patterns import PillowPatternLoader
from esristyle.symbology.translator import (convert_label_expression, read_labels,
                                            read_style_definitions, translate)

LINE = {"type": "esriSLS", "style": "esriSLSSolid", "color": [0, 0, 0, 255], "width": 1}


@pytest.mark.parametrize(
    "expression, template",
    [
        ("[NAME]", "{NAME}"),
        ("[OBEJCTID] CONCAT  NEWLINE  CONCAT [C_NAZEV_OBLOBLAST]", "{OBEJCTID}\n{C_NAZEV_OBLOBLAST}"),
        ("[ID] CONCAT [NAME]", "{ID} {NAME}"),
        ("Fixed", "Fixed"),
        (None, ""),
    ],
)
def test_convert_label_expression(expression, template):
    assert convert_label_expression(expression) == template


def test_read_labels_defaults():
    (rule,) = read_labels(
        [
            {
                "labelExpression": "[OBEJCTID] CONCAT  NEWLINE  CONCAT [C_NAZEV_OBLOBLAST]",
                "minScale": 0,
                "maxScale": 0,
                "symbol": {"type": "esriTS", "color": [0, 0, 0, 255]},
            }
        ]
    )
    assert rule.max_scale == 1000
    assert rule.min_scale == 0
    assert rule.template == "{OBEJCTID}\n{C_NAZEV_OBLOBLAST}"
    assert rule.min_resolution == 0
    assert math.isclose(rule.max_resolution, scale_to_resolution(1000))
    assert rule.style.text.placement == "point"


def test_read_labels_swaps_scales():
    (rule,) = read_labels(
        [
            {
                "labelExpression": "[NAME]",
                "labelPlacement": "esriServerLinePlacementAboveAlong",
                "minScale": 50000,
                "maxScale": 5000,
                "symbol": {"type": "esriTS"},
            }
        ],
        METERS_PER_UNIT["m"],
    )
    assert (rule.min_scale, rule.max_scale) == (5000, 50000)
    assert rule.min_resolution < rule.max_resolution
    assert rule.covers(scale_to_resolution(20000))
    assert not rule.covers(scale_to_resolution(100000))
    assert rule.style.text.placement == "line"


def test_read_labels_rejects_non_text_symbol():
    with pytest.raises(UnsupportedSymbolKind):
        read_labels([{"labelExpression": "[A]", "symbol": LINE}])


def test_simple_renderer(run):
    table = run(translate({"type": "simple", "symbol": LINE, "label": "Roads"}))
    (rule,) = table.feature_rules
    assert isinstance(rule, DefaultRule)
    assert rule.title == "Roads"
    assert rule.filters == ()
    assert table.label_rules == ()


def test_unique_value_renderer(run, unique_value_layer):
    table = run(read_style_definitions(unique_value_layer))

    active, inactive, default = table.feature_rules
    assert isinstance(active, ConditionalRule)
    assert active.title == "Active"
    (f,) = active.filters
    assert f.attribute_name == "STATUS"
    assert f.operator is FilterOperator.IN_SET
    assert f.operand == {"ACTIVE"}
    assert active.style.fill.color == "rgba(0,255,0,1)"

    assert inactive.filters[0].operand == {"INACTIVE"}
    assert isinstance(default, DefaultRule)
    assert default.title == "Other"
    assert table.default_rule is default
    assert len(table.label_rules) == 1


def test_unique_value_multiple_fields(run):
    renderer = {
        "type": "uniqueValue",
        "field1": "VOLTAGE",
        "field2": "KIND",
        "fieldDelimiter": "|",
        "uniqueValueInfos": [
            {"value": "10|A", "label": "Low", "symbol": LINE},
            {"value": "10|B", "label": "Low", "symbol": LINE},
            {"value": "50|A", "label": "High", "symbol": LINE},
        ],
    }
    table = run(translate(renderer))
    low, high = table.feature_rules
    assert [f.attribute_name for f in low.filters] == ["VOLTAGE", "KIND"]
    assert low.filters[1].operand == {"A", "B"}
    assert low.matches({"VOLTAGE": 10, "KIND": "B"})
    assert not low.matches({"VOLTAGE": 50, "KIND": "A"})
    assert high.matches({"VOLTAGE": "50", "KIND": "A"})
    assert table.default_rule is None


def test_unique_value_per_value(run):
    renderer = {
        "type": "uniqueValue",
        "field1": "CODE",
        "uniqueValueInfos": [
            {"value": "1", "label": "Same", "symbol": LINE},
            {"value": "2", "label": "Same", "symbol": LINE},
        ],
    }
    assert len(run(translate(renderer)).feature_rules) == 1
    assert len(run(translate(renderer, group_by_label=False)).feature_rules) == 2


def test_unique_value_without_field(run):
    with pytest.raises(StyleError):
        run(translate({"type": "uniqueValue", "uniqueValueInfos": []}))


def test_class_break_without_upper_bound(run):
    renderer = {
        "type": "classBreaks",
        "field": "VALUE",
        "classBreakInfos": [{"classMinValue": 0, "label": "open", "symbol": LINE}],
    }
    with pytest.raises(StyleError, match="open"):
        run(translate(renderer))


def test_class_breaks_renderer(run):
    renderer = {
        "type": "classBreaks",
        "field": "VALUE",
        "minValue": 0,
        "classBreakInfos": [
            {"classMaxValue": 10, "label": "low", "symbol": LINE},
            {"classMinValue": 10, "classMaxValue": 20, "label": "high", "symbol": LINE},
        ],
        "defaultSymbol": LINE,
    }
    table = run(translate(renderer))
    low, high, default = table.feature_rules

    assert low.filters[0].operator is FilterOperator.BETWEEN
    assert (low.filters[0].operand.lower, low.filters[0].operand.upper) == (0, 10)
    assert (high.filters[0].operand.lower, high.filters[0].operand.upper) == (10, 20)
    assert not low.matches({"VALUE": 15})
    assert high.matches({"VALUE": 15})
    assert not high.matches({"VALUE": "n/a"})
    assert isinstance(default, DefaultRule)


def test_missing_renderer(run):
    with pytest.raises(MissingRendererError, match="renderer is not defined"):
        run(translate(None))
    with pytest.raises(MissingRendererError):
        run(read_style_definitions({"drawingInfo": {}}))


def test_unsupported_renderer(run):
    with pytest.raises(UnsupportedRendererKind) as exc_info:
        run(translate({"type": "heatmap"}))
    assert exc_info.value.kind == "heatmap"
    assert "not implemented yet" in str(exc_info.value)


def test_unsupported_symbol_aborts_translation(run):
    with pytest.raises(UnsupportedSymbolKind):
        run(translate({"type": "simple", "symbol": {"type": "esriCLS"}}))


def test_bare_drawing_info(run, unique_value_layer):
    table = run(read_style_definitions(unique_value_layer["drawingInfo"]))
    assert len(table.feature_rules) == 3


def test_picture_fills_are_loaded_before_return(run, red_png):
    renderer = {
        "type": "uniqueValue",
        "field1": "KIND",
        "uniqueValueInfos": [
            {
                "value": str(i),
                "label": str(i),
                "symbol": {"type": "esriPFS", "imageData": red_png, "width": 4, "height": 4},
            }
            for i in range(3)
        ],
    }
    table = run(translate(renderer, pattern_loader=PillowPatternLoader()))
    for rule in table.feature_rules:
        assert rule.style.fill.pattern.width == 5


def test_default_rule_must_be_last():
    default = DefaultRule(style=SymbolDescriptor())
    conditional = ConditionalRule(
        filters=(FilterRule("A", FilterOperator.EQUALS, "1"),), style=SymbolDescriptor()
    )
    with pytest.raises(RuleOrderError):
        StyleTable(feature_rules=(default, conditional))
    with pytest.raises(RuleOrderError):
        StyleTable(feature_rules=(conditional, default, default))
    assert StyleTable(feature_rules=(conditional, default)).default_rule is default


def test_conditional_rule_needs_filters():
    with pytest.raises(ValueError):
        ConditionalRule(filters=(), style=SymbolDescriptor())


def test_table_to_dict(run, unique_value_layer):
    data = run(read_style_definitions(unique_value_layer)).to_dict()
    assert data["feature_rules"][0]["kind"] == "conditional"
    assert data["feature_rules"][0]["filters"][0] == {
        "attribute": "STATUS",
        "operator": "in",
        "operand": ["ACTIVE"],
    }
    assert data["feature_rules"][-1]["kind"] == "default"
    assert data["label_rules"][0]["template"] == "{OBJECTID}\n{NAME}"
