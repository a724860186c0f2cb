"""Result rendering: pretty JSON or TOON.

TOON (token-oriented object notation) is an indentation-based encoding of the
JSON data model that spends far fewer tokens on lists of similar records:

    issues[2]{id,status,title}:
      1,unresolved,Boom
      2,resolved,"Title, with comma"

Both encodings sort object keys so the same payload always renders to the same
bytes. TOON output is for reading; it is not parsed back anywhere.
"""

from __future__ import annotations

import json
import math
import re
from collections.abc import Mapping, Sequence
from typing import Any

FORMATS = ("json", "toon")
INDENT = "  "

_BARE_KEY = re.compile(r"^[A-Za-z_][A-Za-z0-9_.]*$")
_NUMERIC_LIKE = re.compile(r"^-?\d+(?:\.\d+)?(?:[eE][+-]?\d+)?$|^0\d+$")
_LITERALS = {"true", "false", "null"}
_STRUCTURAL = set(':,"\\[]{}#')


def format_result(payload: Any, output_format: str) -> str:
    if output_format == "json":
        return json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False)
    if output_format == "toon":
        return encode_toon(payload)
    raise ValueError(f"Unsupported output format: {output_format} (choose: {', '.join(FORMATS)})")


def encode_toon(value: Any) -> str:
    lines: list[str] = []
    if _is_mapping(value):
        _encode_object(value, 0, lines)
    elif _is_array(value):
        _encode_array(None, value, 0, lines)
    else:
        lines.append(_primitive(value))
    return "\n".join(lines)


# ---- primitives -----------------------------------------------------
def _is_mapping(value: Any) -> bool:
    return isinstance(value, Mapping)


def _is_array(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def _is_primitive(value: Any) -> bool:
    return value is None or isinstance(value, (str, bool, int, float))


def _number(value: int | float) -> str:
    if isinstance(value, float):
        if not math.isfinite(value):
            return "null"
        if value.is_integer():
            return str(int(value))
        return repr(value)
    return str(value)


def _quote(text: str) -> str:
    escaped = (
        text.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )
    return f'"{escaped}"'


def _needs_quotes(text: str) -> bool:
    if not text or text != text.strip():
        return True
    if text in _LITERALS or _NUMERIC_LIKE.match(text):
        return True
    if text.startswith("-"):
        return True
    return any(ch in _STRUCTURAL or ch in "\n\r\t" for ch in text)


def _string(text: str) -> str:
    return _quote(text) if _needs_quotes(text) else text


def _primitive(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return _number(value)
    if isinstance(value, str):
        return _string(value)
    raise TypeError(f"Object of type {type(value).__name__} is not TOON serializable")


def _key(key: Any) -> str:
    text = str(key)
    return text if _BARE_KEY.match(text) else _quote(text)


# ---- containers -----------------------------------------------------
def _sorted_items(obj: Mapping[Any, Any]) -> list[tuple[Any, Any]]:
    return sorted(obj.items(), key=lambda kv: str(kv[0]))


def _encode_object(obj: Mapping[Any, Any], depth: int, lines: list[str]) -> None:
    pad = INDENT * depth
    for key, value in _sorted_items(obj):
        if _is_mapping(value):
            lines.append(f"{pad}{_key(key)}:")
            _encode_object(value, depth + 1, lines)
        elif _is_array(value):
            _encode_array(_key(key), value, depth, lines)
        else:
            lines.append(f"{pad}{_key(key)}: {_primitive(value)}")


def _tabular_fields(items: Sequence[Any]) -> list[str] | None:
    if not items or not all(_is_mapping(item) and item for item in items):
        return None
    fields = sorted(str(k) for k in items[0])
    for item in items:
        if sorted(str(k) for k in item) != fields:
            return None
        if not all(_is_primitive(v) for v in item.values()):
            return None
    return fields


def _encode_array(key: str | None, items: Sequence[Any], depth: int, lines: list[str]) -> None:
    pad = INDENT * depth
    label = f"{key or ''}[{len(items)}]"
    if not items:
        lines.append(f"{pad}{label}:")
        return
    if all(_is_primitive(item) for item in items):
        lines.append(f"{pad}{label}: " + ",".join(_primitive(item) for item in items))
        return
    fields = _tabular_fields(items)
    if fields is not None:
        lines.append(f"{pad}{label}{{{','.join(_key(f) for f in fields)}}}:")
        row_pad = INDENT * (depth + 1)
        for item in items:
            by_name = {str(k): v for k, v in item.items()}
            lines.append(row_pad + ",".join(_primitive(by_name[f]) for f in fields))
        return
    lines.append(f"{pad}{label}:")
    for item in items:
        _encode_list_item(item, depth + 1, lines)


def _encode_list_item(item: Any, depth: int, lines: list[str]) -> None:
    pad = INDENT * depth
    if _is_primitive(item):
        lines.append(f"{pad}- {_primitive(item)}")
        return
    if _is_array(item):
        nested: list[str] = []
        _encode_array(None, item, depth + 1, nested)
        lines.append(f"{pad}- {nested[0].lstrip()}")
        lines.extend(nested[1:])
        return
    if not _is_mapping(item):
        raise TypeError(f"Object of type {type(item).__name__} is not TOON serializable")
    if not item:
        lines.append(f"{pad}-")
        return
    # First field shares the hyphen line; the rest align under it.
    nested = []
    _encode_object(item, depth + 1, nested)
    lines.append(f"{pad}- {nested[0].lstrip()}")
    lines.extend(nested[1:])


__all__ = ["FORMATS", "encode_toon", "format_result"]
