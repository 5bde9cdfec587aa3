"""Request parameter serialization for the GitLab v3 API.

GitLab is a Rails application, so nested parameters travel in the Rack
bracket convention on both the query string and form bodies:

    {"issue": {"labels": ["bug", "ui"]}}  ->  issue[labels][]=bug&issue[labels][]=ui

`flatten_params` produces ordered (key, value) pairs in that convention and
`unflatten_params` is the matching decoder, following Rack's
`normalize_params` rules for arrays of hashes.

Reference: https://github.com/rack/rack/blob/main/lib/rack/query_parser.rb
"""

import re
from collections.abc import Mapping
from datetime import date, datetime
from enum import Enum
from typing import Any
from urllib.parse import urlencode

from .errors import ContractError

__all__ = [
    "encode_form",
    "encode_query",
    "flatten_params",
    "prune_params",
    "unflatten_params",
]

_BRACKET_SEGMENT = re.compile(r"\[([^\[\]]*)\]")


def flatten_params(params: Mapping[str, Any] | None) -> list[tuple[str, str]]:
    """Flatten a (possibly nested) params mapping into Rack-style pairs.

    Args:
        params: Mapping of parameter names to scalars, sequences or mappings.

    Returns:
        Ordered list of (key, value) string pairs. Mapping key order and
        sequence order are preserved. None values and empty containers
        produce no pairs.

    Raises:
        ContractError: If params is not a mapping, a sequence directly
            contains another sequence or an empty mapping, a sequence of
            mappings would not decode back element by element, or a value
            has an unsupported type.

    Example:
        >>> flatten_params({"state": "opened", "labels": ["a", "b"]})
        [('state', 'opened'), ('labels[]', 'a'), ('labels[]', 'b')]
    """
    if params is None:
        return []
    if not isinstance(params, Mapping):
        raise ContractError(
            f"params must be a mapping, got {type(params).__name__}"
        )

    pairs: list[tuple[str, str]] = []
    for key, value in params.items():
        _flatten_value(str(key), value, pairs)
    return pairs


def _flatten_value(name: str, value: Any, pairs: list[tuple[str, str]]) -> None:
    if value is None:
        return
    if isinstance(value, Mapping):
        for key, item in value.items():
            _flatten_value(f"{name}[{key}]", item, pairs)
        return
    if isinstance(value, (list, tuple)):
        _flatten_sequence(name, value, pairs)
        return
    pairs.append((name, _format_scalar(name, value)))


def _flatten_sequence(name: str, value: Any, pairs: list[tuple[str, str]]) -> None:
    # Replays the pairs through the decoder so that array elements Rack
    # would merge into their predecessor are rejected instead of corrupted.
    decoded: dict[str, Any] = {}
    expected: list[Any] = []
    for item in value:
        # Rack has no encoding for arrays of arrays
        if isinstance(item, (list, tuple)):
            raise ContractError(
                f"Parameter {name!r} contains a nested sequence, which "
                "cannot be encoded"
            )
        item_pairs: list[tuple[str, str]] = []
        _flatten_value(f"{name}[]", item, item_pairs)
        if not item_pairs:
            if isinstance(item, Mapping):
                raise ContractError(
                    f"Parameter {name!r} contains an empty mapping, which "
                    "cannot be encoded"
                )
            continue

        alone: dict[str, Any] = {}
        for key, text in item_pairs:
            local = _split_key("_" + key[len(name):])
            _assign(decoded, local, text)
            _assign(alone, local, text)
        expected.extend(alone["_"])
        if decoded["_"] != expected:
            raise ContractError(
                f"Parameter {name!r} holds mappings that would merge when "
                "encoded; give every element the same leading key"
            )
        pairs.extend(item_pairs)


def _format_scalar(name: str, value: Any) -> str:
    # bool is a subclass of int, check it first
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return _format_scalar(name, value.value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (str, int, float)):
        return str(value)
    raise ContractError(
        f"Parameter {name!r} has unsupported type {type(value).__name__}"
    )


def unflatten_params(pairs: list[tuple[str, str]]) -> dict[str, Any]:
    """Rebuild a nested mapping from Rack-style pairs.

    Scalar values come back as strings. A `key[][child]` pair starts a new
    mapping in the array unless the last mapping lacks `child`, which is
    how Rack groups the members of an array of hashes.

    Raises:
        ContractError: If a key is used both as a scalar and a container.
    """
    result: dict[str, Any] = {}
    for key, value in pairs:
        _assign(result, _split_key(key), value)
    return result


def _split_key(key: str) -> list[str]:
    head, sep, rest = key.partition("[")
    segments = [head]
    if sep:
        segments.extend(_BRACKET_SEGMENT.findall(sep + rest))
    return segments


def _assign(target: dict[str, Any], segments: list[str], value: str) -> None:
    name, rest = segments[0], segments[1:]
    if not rest:
        target[name] = value
        return

    if rest[0] == "":
        items = target.setdefault(name, [])
        if not isinstance(items, list):
            raise ContractError(f"Expected array for parameter {name!r}")
        if len(rest) == 1:
            items.append(value)
        elif (
            items
            and isinstance(items[-1], dict)
            and not _has_path(items[-1], rest[1:])
        ):
            _assign(items[-1], rest[1:], value)
        else:
            child: dict[str, Any] = {}
            _assign(child, rest[1:], value)
            items.append(child)
        return

    child = target.setdefault(name, {})
    if not isinstance(child, dict):
        raise ContractError(f"Expected mapping for parameter {name!r}")
    _assign(child, rest, value)


def _has_path(mapping: dict[str, Any], segments: list[str]) -> bool:
    if "" in segments:
        return False
    node: Any = mapping
    for segment in segments:
        if not isinstance(node, dict) or segment not in node:
            return False
        node = node[segment]
    return True


def prune_params(params: Mapping[str, Any] | None) -> dict[str, Any]:
    """Plain-container copy of params with the same omissions as the form encoder.

    None values and empty containers are dropped at every level, mappings
    become dicts and sequences become lists, so a JSON body carries exactly
    the parameters a form body would. Scalars are left as they are.

    Raises:
        ContractError: For the same malformed params `flatten_params` rejects.
    """
    flatten_params(params)
    return _prune(params or {}) or {}


def _prune(value: Any) -> Any:
    if isinstance(value, Mapping):
        pruned = {}
        for key, item in value.items():
            item = _prune(item)
            if item is not None:
                pruned[str(key)] = item
        return pruned or None
    if isinstance(value, (list, tuple)):
        items = [item for item in map(_prune, value) if item is not None]
        return items or None
    return value


def encode_query(params: Mapping[str, Any] | None) -> list[tuple[str, str]]:
    """Pairs suitable for httpx's `params=` argument."""
    return flatten_params(params)


def encode_form(params: Mapping[str, Any] | None) -> bytes:
    """application/x-www-form-urlencoded body for POST/PUT requests."""
    return urlencode(flatten_params(params)).encode("ascii")
