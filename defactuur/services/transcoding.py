"""Request/response transcoding for the DeFactuur API.

This module provides:
- Flattening of nested payloads into bracket-notation parameters
- Query string building with list indices normalized to ``[]``
- File upload detection for ``@``-prefixed values
- Numeric coercion of known amount fields in decoded responses
"""

import re
from collections.abc import Mapping, Sequence
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union
from urllib.parse import urlencode

from defactuur.models.base import Entity

Scalar = Union[str, int, float, bool]
PathSegment = Union[str, int]

# Keys whose values the API returns as strings but are amounts
NUMERIC_FIELDS = frozenset({
    "amount",
    "price",
    "total_without_vat",
    "total_with_vat",
    "total_vat",
    "total",
})

FILE_SENTINEL = "@"

_ENCODED_INDEX = re.compile(r"%5B[0-9]*%5D", re.IGNORECASE)
_NUMERIC_PREFIX = re.compile(r"\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


# =============================================================================
# Encoding
# =============================================================================


def _children(data: Any) -> Iterator[Tuple[PathSegment, Any]]:
    if isinstance(data, Entity):
        data = data.to_payload(for_api=True)
    if isinstance(data, Mapping):
        yield from data.items()
    elif _is_sequence(data):
        yield from enumerate(data)
    else:
        raise TypeError(f"Cannot encode {type(data).__name__} as parameters")


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def _is_container(value: Any) -> bool:
    return isinstance(value, (Mapping, Entity)) or _is_sequence(value)


def _walk(
    data: Any,
    path: Tuple[PathSegment, ...] = (),
) -> Iterator[Tuple[Tuple[PathSegment, ...], Scalar]]:
    """Yield (path, scalar) pairs depth-first, skipping null values."""
    for key, value in _children(data):
        if value is None:
            continue
        if _is_container(value):
            yield from _walk(value, path + (key,))
        else:
            yield path + (key,), value


def _render_key(path: Tuple[PathSegment, ...], keep_indices: bool = True) -> str:
    head, *rest = path
    key = str(head)
    for segment in rest:
        if isinstance(segment, int) and not keep_indices:
            key += "[]"
        else:
            key += f"[{segment}]"
    return key


def flatten(data: Any) -> Dict[str, Scalar]:
    """Flatten a nested structure into bracket-notation keys.

    Example:
        >>> flatten({"a": {"b": 1, "c": [10, 20]}})
        {'a[b]': 1, 'a[c][0]': 10, 'a[c][1]': 20}

    Args:
        data: Mapping, list or entity, nested to any depth

    Returns:
        Ordered single-level mapping of bracket keys to scalar values.
        Null values are omitted at every level.
    """
    return {_render_key(path): value for path, value in _walk(data)}


def form_value(value: Scalar) -> str:
    # The API follows the form convention for booleans
    if isinstance(value, bool):
        return "1" if value else "0"
    return str(value)


def build_query_params(data: Any) -> List[Tuple[str, str]]:
    """Flatten ``data`` into query pairs with list indices rendered as ``[]``."""
    return [
        (_render_key(path, keep_indices=False), form_value(value))
        for path, value in _walk(data)
    ]


def build_query(data: Any) -> str:
    """Build a percent-encoded query string for ``data``.

    ``{"filters": ["paid", "late"]}`` becomes
    ``filters%5B%5D=paid&filters%5B%5D=late``.
    """
    return urlencode(build_query_params(data))


def remove_index_from_array_parameters(query: str) -> str:
    """Remove numeric indexes from bracket keys in an encoded query string.

    The DeFactuur application rejects numerical indexes in array parameters,
    so ``foo%5B1%5D=bar`` becomes ``foo%5B%5D=bar``. Only the key of each
    pair is rewritten; values are left as they are.
    """
    if not query:
        return query

    pairs = []
    for pair in query.split("&"):
        key, sep, value = pair.partition("=")
        pairs.append(_ENCODED_INDEX.sub("%5B%5D", key) + sep + value)
    return "&".join(pairs)


def are_we_sending_a_file(parameters: Mapping) -> bool:
    """Detect from flattened parameters whether a file should be uploaded."""
    return any(
        isinstance(value, str) and value.startswith(FILE_SENTINEL)
        for value in parameters.values()
    )


# =============================================================================
# Decoding
# =============================================================================


def _to_float(value: Any) -> float:
    """Cast like the service's own float conversion: leading number or 0.0."""
    try:
        return float(value)
    except (TypeError, ValueError):
        pass
    if isinstance(value, str):
        match = _NUMERIC_PREFIX.match(value)
        if match:
            return float(match.group(0))
    return 0.0


def decode_response(data: Any, key: Optional[str] = None) -> Any:
    """Coerce known numeric fields to float, recursively.

    Args:
        data: Decoded JSON value
        key: Key ``data`` was found under, if any

    Returns:
        A structure equal to ``data`` except that scalars stored under one
        of ``NUMERIC_FIELDS`` are floats. A string that does not start with
        a number becomes ``0.0``.
    """
    if isinstance(data, Mapping):
        return {k: decode_response(v, k) for k, v in data.items()}
    if isinstance(data, list):
        return [decode_response(item) for item in data]
    if key in NUMERIC_FIELDS and data is not None:
        return _to_float(data)
    return data
