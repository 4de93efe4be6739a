"""
Unique-value aggregation.

ArcGIS lets several unique-value infos share one legend label (and render
identically). Grouping them by label yields one style rule per legend entry
with an ``IN_SET`` filter per field, instead of one equality rule per raw value.
"""

from typing import Any, Dict, List, Optional, Sequence

from loguru import logger

from esristyle.symbology.models import AggregatedValueGroup

MAX_FIELDS = 3


def _split_value(value: Any, delimiter: Optional[str]) -> List[str]:
    text = "" if value is None else str(value)
    parts = text.split(delimiter) if delimiter else [text]
    return parts[:MAX_FIELDS]


def aggregate_unique_values(
    infos: Sequence[Dict[str, Any]],
    delimiter: Optional[str] = ",",
    group_by_label: bool = True,
) -> List[AggregatedValueGroup]:
    """
    Merge unique-value infos sharing a label into value groups.

    Args:
        infos: ``uniqueValueInfos`` entries (``value``, ``label``, ``symbol``)
        delimiter: ``fieldDelimiter`` of the renderer, splits ``value`` into
            up to three field values
        group_by_label: Group infos by label; when False every info becomes
            its own group

    Returns:
        Groups in first-seen order, each holding the distinct values seen at
        every field position. The first symbol of a group is kept.

    Example:
        [{"value": "6,1", "label": "10 kV"}, {"value": "6,3", "label": "10 kV"}]
        -> [AggregatedValueGroup("10 kV", field_values=(("6",), ("1", "3"), ()))]
    """
    groups: Dict[Any, Dict[str, Any]] = {}

    for index, info in enumerate(infos):
        label = info.get("label")
        title = label if label is not None else str(info.get("value"))
        key = title if group_by_label else index

        group = groups.get(key)
        if group is None:
            group = groups[key] = {
                "title": title,
                "symbol": info.get("symbol"),
                "values": [dict() for _ in range(MAX_FIELDS)],
            }

        # dicts as insertion-ordered sets
        for position, part in enumerate(_split_value(info.get("value"), delimiter)):
            group["values"][position][part] = None

    if group_by_label and len(groups) < len(infos):
        logger.debug(f"Aggregated {len(infos)} unique values into {len(groups)} groups")

    return [
        AggregatedValueGroup(
            title=group["title"],
            symbol=group["symbol"],
            field_values=tuple(tuple(values) for values in group["values"]),
        )
        for group in groups.values()
    ]
