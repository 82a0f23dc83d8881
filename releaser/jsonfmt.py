"""
jsonfmt.py

Responsibility: Serialize JSON in a stable "pretty compact" layout.

Rules:
- A value that fits on the remaining line width is written on one line,
  with a space after every ':' and ',' outside string literals.
- Anything longer is broken into one item per line, indented by `indent`.
- Keys keep the mapping's insertion order.

Manifests written this way stay readable and produce small diffs between
releases.
"""

from __future__ import annotations

import json
import math
import re
from typing import Any

_STRING_OR_SEPARATOR = re.compile(r'("(?:[^\\"]|\\.)*")|[:,]')


def _flat(obj: Any) -> str:
    return json.dumps(obj, ensure_ascii=False, separators=(",", ":"))


def _spaced(flat: str) -> str:
    return _STRING_OR_SEPARATOR.sub(lambda m: m.group(1) or m.group(0) + " ", flat)


def dumps_compact(obj: Any, *, max_length: int = 35, indent: str = "\t") -> str:
    """
    Serialize `obj` to JSON text, wrapping containers wider than `max_length`.

    An empty `indent` disables wrapping entirely.
    """
    limit = math.inf if indent == "" else max_length

    def _dump(value: Any, current_indent: str, reserved: int) -> str:
        flat = _flat(value)
        width = limit - len(current_indent) - reserved
        if len(flat) <= width:
            spaced = _spaced(flat)
            if len(spaced) <= width:
                return spaced

        next_indent = current_indent + indent
        items: list[str] = []
        if isinstance(value, dict):
            start, end = "{", "}"
            keys = list(value)
            for i, key in enumerate(keys):
                key_part = f"{json.dumps(str(key), ensure_ascii=False)}: "
                last = i == len(keys) - 1
                items.append(key_part + _dump(value[key], next_indent, len(key_part) + (0 if last else 1)))
        elif isinstance(value, (list, tuple)):
            start, end = "[", "]"
            for i, item in enumerate(value):
                last = i == len(value) - 1
                items.append(_dump(item, next_indent, 0 if last else 1))
        else:
            return flat

        if not items:
            return flat
        body = indent + f",\n{next_indent}".join(items)
        return f"\n{current_indent}".join([start, body, end])

    return _dump(obj, "", 0)
