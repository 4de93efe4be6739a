"""
Style selection runtime.

A ``StyleSelector`` holds the style table of one layer and is called once per
feature per draw with the current resolution. It picks the first matching
feature rule, the first label rule covering the resolution, and returns the
renderer styles for both.

Style objects are built once per rule and cached by rule position; label
styles are shared between calls and only their text changes.
"""

import threading
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from loguru import logger

from esristyle.symbology.formatters import resolve_label
from esristyle.symbology.models import Feature, FeatureStyleRule, StyleTable, SymbolDescriptor
from esristyle.symbology.styles import DefaultStyleFactory, StyleFactory

FeatureLike = Union[Feature, Mapping[str, Any]]


class StyleSelector:
    """
    Per-feature style function of a layer.

    Args:
        table: Translated style table
        style_factory: Builder of renderer styles (DefaultStyleFactory if None)
        hidden_attribute: Attribute flagging a feature as hidden
        keep_leftovers: Keep unresolved label placeholders verbatim

    Example:
        selector = StyleSelector(table)
        styles = selector({"OBJECTID": 1, "STATUS": "ACTIVE"}, resolution=0.5)
    """

    def __init__(
        self,
        table: StyleTable,
        style_factory: Optional[StyleFactory] = None,
        hidden_attribute: Optional[str] = "hidden",
        keep_leftovers: bool = False,
    ):
        self.table = table
        self.style_factory = style_factory or DefaultStyleFactory()
        self.hidden_attribute = hidden_attribute
        self.keep_leftovers = keep_leftovers

        self._lock = threading.Lock()
        self._feature_styles: Dict[int, Any] = {}
        self._label_styles: Dict[int, Any] = {}

    def __call__(self, feature: FeatureLike, resolution: float) -> Optional[List[Any]]:
        return self.select_style(feature, resolution)

    def select_style(self, feature: FeatureLike, resolution: float) -> Optional[List[Any]]:
        """
        Select the styles of one feature at one resolution.

        Returns:
            Feature style followed by the label style, or None when the
            feature is hidden or nothing applies
        """
        if not isinstance(feature, Feature):
            feature = Feature.from_mapping(feature)

        if self._is_hidden(feature):
            return None

        styles = []

        index = self._match_rule(feature)
        if index is not None:
            styles.append(
                self._cached(
                    self._feature_styles,
                    index,
                    self.table.feature_rules[index].style,
                    self.style_factory.create_feature_style,
                )
            )

        for index, label_rule in enumerate(self.table.label_rules):
            if not label_rule.covers(resolution):
                continue
            style = self._cached(
                self._label_styles,
                index,
                label_rule.style,
                self.style_factory.create_label_style,
            )
            text = resolve_label(
                label_rule.template, feature.id, feature.attributes, self.keep_leftovers
            )
            self.style_factory.set_label_text(style, text)
            styles.append(style)
            break

        return styles or None

    def _is_hidden(self, feature: Feature) -> bool:
        if feature.hidden:
            return True
        if self.hidden_attribute:
            return bool(feature.attributes.get(self.hidden_attribute))
        return False

    def _match_rule(self, feature: Feature) -> Optional[int]:
        for index, rule in enumerate(self.table.feature_rules):
            if self._matches(rule, feature):
                return index
        return None

    @staticmethod
    def _matches(rule: FeatureStyleRule, feature: Feature) -> bool:
        try:
            return rule.matches(feature.attributes)
        except Exception as e:
            logger.error(f"Filter evaluation failed for rule '{rule.title}': {e}")
            return False

    def _cached(
        self,
        cache: Dict[int, Any],
        index: int,
        descriptor: SymbolDescriptor,
        build: Callable[[SymbolDescriptor], Any],
    ) -> Any:
        with self._lock:
            style = cache.get(index)
            if style is None:
                style = cache[index] = build(descriptor)
                logger.debug(f"Built style for rule {index}")
            return style

    def clear_cache(self) -> None:
        with self._lock:
            self._feature_styles.clear()
            self._label_styles.clear()
