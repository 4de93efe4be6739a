"""
Label template formatting.

Templates come out of the label expression rewrite (``[NAME]`` → ``{NAME}``)
and may also hold the ``$id`` feature-identity token:

    "{NAME}"            → attribute NAME
    "$id - {name}"      → "<feature id> - <attribute NAME>"
    "Station"           → unchanged

Attribute lookup is case-insensitive. Placeholders are resolved in a single
scan of the template against a snapshot of the attributes, so substituted
values are never scanned again.
"""

import re
from typing import Any, Mapping, Optional

from esristyle.symbology.models import attribute_text

FEATURE_ID_TOKEN = "$id"

PLACEHOLDER_PATTERN = re.compile(r"\{([^{}]+)\}")
TOKEN_PATTERN = re.compile(r"\$id|\{([^{}]+)\}")
WHOLE_PLACEHOLDER_PATTERN = re.compile(r"\{([^{}]+)\}")


def _lowercase_lookup(values: Optional[Mapping[str, Any]]) -> dict:
    return {str(key).lower(): value for key, value in (values or {}).items()}


def _substitute(pattern, template, lookup, keep_leftovers, feature_id=None) -> str:
    def replace(match: "re.Match") -> str:
        name = match.group(1)
        if name is None:
            return attribute_text(feature_id)

        key = name.lower()
        if key in lookup:
            return attribute_text(lookup[key])
        return match.group(0) if keep_leftovers else ""

    return pattern.sub(replace, template)


def format_template(
    template: str, values: Optional[Mapping[str, Any]], keep_leftovers: bool = False
) -> str:
    """
    Replace every ``{name}`` placeholder with its value.

    Args:
        template: Template text
        values: Values by name, matched case-insensitively
        keep_leftovers: Keep unmatched placeholders verbatim instead of
            removing them

    Example:
        >>> format_template("{Name} ({kind})", {"NAME": "Aare", "KIND": "river"})
        'Aare (river)'
    """
    if not template or "{" not in template:
        return template
    return _substitute(
        PLACEHOLDER_PATTERN, template, _lowercase_lookup(values), keep_leftovers
    )


def resolve_label(
    template: Optional[str],
    feature_id: Any,
    attributes: Optional[Mapping[str, Any]],
    keep_leftovers: bool = False,
) -> str:
    """
    Resolve a label template for one feature.

    A template that is a single placeholder is a direct attribute lookup
    (empty when the attribute is absent). Otherwise ``$id`` and every
    ``{name}`` placeholder are substituted; unmatched placeholders are
    removed unless ``keep_leftovers`` is set. A template with neither is
    returned unchanged.

    Examples:
        >>> resolve_label("$id - {name}", 7, {"NAME": "Thun"})
        '7 - Thun'
        >>> resolve_label("{missing} km", 7, {})
        ' km'
    """
    if not template:
        return ""

    lookup = _lowercase_lookup(attributes)

    whole = WHOLE_PLACEHOLDER_PATTERN.fullmatch(template)
    if whole:
        return attribute_text(lookup.get(whole.group(1).lower()))

    if "{" not in template and FEATURE_ID_TOKEN not in template:
        return template

    return _substitute(TOKEN_PATTERN, template, lookup, keep_leftovers, feature_id)
