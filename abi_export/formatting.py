"""Canonical JSON formatting for exported ABI files."""

from __future__ import annotations

import json

from abi_export.errors import FormatError

JSON_INDENT = 2


def format_json(text: str) -> str:
    """Re-serialize *text* as two-space indented JSON with a trailing newline.

    Key order is kept as the tool emitted it.  Formatting already formatted
    output returns identical text.

    Raises
    ------
    FormatError
        If *text* is not valid JSON.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise FormatError(f"Tool output is not valid JSON: {exc}") from exc

    return json.dumps(data, indent=JSON_INDENT, ensure_ascii=False) + "\n"
