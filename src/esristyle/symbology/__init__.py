"""
ESRI symbology translation.

This package turns the ``drawingInfo`` of an ArcGIS REST layer into an
immutable style table and selects the styles of features at draw time.
"""

from esristyle.symbology.exceptions import (ImageDecodeFailure, MissingRendererError,
                                            RuleOrderError, ServiceError, StyleError,
                                            UnsupportedRendererKind, UnsupportedSymbolKind)
from esristyle.symbology.formatters import format_template, resolve_label
from esristyle.symbology.models import (ConditionalRule, DefaultRule, Feature,
                                        FilterOperator, FilterRule, LabelRule, Range,
                                        StyleTable, SymbolDescriptor)
from esristyle.symbology.patterns import PillowPatternLoader
from esristyle.symbology.runtime import StyleSelector
from esristyle.symbology.service import (StyleJSONEncoder, create_style_function,
                                         create_style_function_from_url,
                                         fetch_layer_definition)
from esristyle.symbology.translator import (convert_label_expression, read_labels,
                                            read_style_definitions, translate)

__all__ = [
    "ConditionalRule",
    "DefaultRule",
    "Feature",
    "FilterOperator",
    "FilterRule",
    "ImageDecodeFailure",
    "LabelRule",
    "MissingRendererError",
    "PillowPatternLoader",
    "Range",
    "RuleOrderError",
    "ServiceError",
    "StyleError",
    "StyleJSONEncoder",
    "StyleSelector",
    "StyleTable",
    "SymbolDescriptor",
    "UnsupportedRendererKind",
    "UnsupportedSymbolKind",
    "convert_label_expression",
    "create_style_function",
    "create_style_function_from_url",
    "fetch_layer_definition",
    "format_template",
    "read_labels",
    "read_style_definitions",
    "resolve_label",
    "translate",
]
