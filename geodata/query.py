"""
Request body construction.

build_query only encodes; any value shaping an endpoint needs (joining band
lists, serializing GeoJSON regions) happens in shape_params at the call site.
"""

import json
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlencode

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

_SCALARS = (str, int, float, bool)


def _encode_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_query(params: Optional[Mapping[str, Any]]) -> str:
    """
    URL-encode a parameter mapping as key=value&key=value.

    Keys keep their insertion order. None values are left out so optional
    parameters can be passed through unconditionally.

    Args:
        params: Mapping of parameter names to scalar values

    Returns:
        Form-encoded string usable as a POST body or GET query string
    """
    if not params:
        return ""
    pairs = [
        (str(key), _encode_value(value))
        for key, value in params.items()
        if value is not None
    ]
    return urlencode(pairs)


def _shape_value(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        if all(isinstance(v, _SCALARS) for v in value):
            return ",".join(_encode_value(v) for v in value)
        return json.dumps(value, separators=(",", ":"))
    if isinstance(value, dict):
        return json.dumps(value, separators=(",", ":"))
    return value


def shape_params(params: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """
    Copy params, flattening values the form encoding cannot carry directly.

    - Sequences of scalars become comma-separated strings (bands, min, palette)
    - Dicts and nested sequences become compact JSON (region, bands specs)

    The caller's mapping is never modified.
    """
    return {key: _shape_value(value) for key, value in (params or {}).items()}
