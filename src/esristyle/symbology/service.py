"""
ArcGIS REST service access and style function creation.

Entry points used by applications:

    selector = await create_style_function(layer_json)
    selector = await create_style_function_from_url(
        "https://example.com/arcgis/rest/services/Roads/MapServer/0"
    )
    styles = selector(feature, resolution)
"""

import asyncio
import json
import math
from dataclasses import asdict, is_dataclass
from enum import Enum
from typing import Any, Dict, Optional

import requests
from loguru import logger

from esristyle.symbology.exceptions import ServiceError
from esristyle.symbology.runtime import StyleSelector
from esristyle.symbology.translator import read_style_definitions

DEFAULT_TIMEOUT = 30


class StyleJSONEncoder(json.JSONEncoder):
    """JSON encoder for style tables and descriptors."""

    def default(self, obj):
        if isinstance(obj, Enum):
            return obj.value
        elif is_dataclass(obj) and not isinstance(obj, type):
            return asdict(obj)
        elif isinstance(obj, (set, frozenset)):
            return sorted(obj, key=str)
        elif isinstance(obj, tuple):
            return list(obj)
        else:
            return super().default(obj)

    def iterencode(self, o, _one_shot=False):
        return super().iterencode(_replace_infinity(o), _one_shot)


def _replace_infinity(value: Any) -> Any:
    # infinite resolution bounds are written as null
    if isinstance(value, float) and math.isinf(value):
        return None
    if isinstance(value, dict):
        return {k: _replace_infinity(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_replace_infinity(v) for v in value]
    return value


def fetch_layer_definition(
    url: str,
    timeout: float = DEFAULT_TIMEOUT,
    proxies: Optional[Dict[str, str]] = None,
) -> Dict[str, Any]:
    """
    Fetch the JSON definition of a map or feature service layer.

    Args:
        url: Layer URL, e.g. ``.../MapServer/0``
        timeout: Request timeout in seconds
        proxies: Optional requests proxy mapping

    Raises:
        ServiceError: unreachable service, HTTP error or ``error`` payload
    """
    request_args = {"params": {"f": "json"}, "timeout": timeout}
    if proxies:
        request_args["proxies"] = proxies
        logger.debug(f"Using proxies for layer request: {proxies}")

    logger.debug(f"Fetching layer definition from {url}")
    try:
        response = requests.get(url, **request_args)
        response.raise_for_status()
    except requests.RequestException as e:
        raise ServiceError(f"Cannot fetch layer definition: {e}", url=url) from e

    try:
        document = response.json()
    except ValueError as e:
        raise ServiceError(f"Layer definition is not valid JSON: {e}", url=url) from e

    # ArcGIS reports failures with HTTP 200 and an error object
    if isinstance(document, dict) and "error" in document:
        error = document["error"] or {}
        raise ServiceError(
            f"Service error {error.get('code', '?')}: {error.get('message', 'unknown')}",
            url=url,
        )

    return document


async def create_style_function(
    document: Dict[str, Any],
    *,
    hidden_attribute: Optional[str] = "hidden",
    keep_leftovers: bool = False,
    style_factory=None,
    **options,
) -> StyleSelector:
    """
    Translate a layer definition and wrap it in a style selector.

    Remaining keyword options are passed to the translator
    (``meters_per_unit``, ``group_by_label``, ``pattern_loader``, ``base_url``).
    """
    table = await read_style_definitions(document, **options)
    return StyleSelector(
        table,
        style_factory=style_factory,
        hidden_attribute=hidden_attribute,
        keep_leftovers=keep_leftovers,
    )


async def create_style_function_from_url(
    url: str,
    timeout: float = DEFAULT_TIMEOUT,
    proxies: Optional[Dict[str, str]] = None,
    **options,
) -> StyleSelector:
    """
    Fetch a layer definition and create its style selector.

    Picture markers referenced by ``url`` resolve against the layer URL unless
    ``base_url`` is given.
    """
    document = await asyncio.to_thread(fetch_layer_definition, url, timeout, proxies)
    options.setdefault("base_url", url)
    return await create_style_function(document, **options)
