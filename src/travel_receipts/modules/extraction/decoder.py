from __future__ import annotations

import json
import re
from typing import Any

from travel_receipts.core.errors import DecodeError

_THINK_RE = re.compile(r"<think>.*?</think>", re.S | re.I)
_FENCE_OPEN_RE = re.compile(r"```(?:json)?[ \t]*", re.I)


def strip_code_fences(raw: str) -> str:
    if not raw:
        return ""
    cleaned = _THINK_RE.sub("", raw)
    cleaned = _FENCE_OPEN_RE.sub("", cleaned)
    return cleaned.replace("```", "").strip()


def find_json_object(text: str) -> str | None:
    """
    Return the substring of the first balanced top-level ``{...}`` in ``text``.

    Braces inside JSON string literals (including escaped quotes) do not count
    towards the nesting depth.
    """
    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start : i + 1]
    return None


def decode_model_output(raw: str) -> dict[str, Any]:
    """Recover the JSON object from raw provider text, or raise DecodeError."""
    cleaned = strip_code_fences(raw)

    try:
        obj = json.loads(cleaned)
    except ValueError:
        obj = None
    if isinstance(obj, dict):
        return obj

    candidate = find_json_object(cleaned)
    if candidate is None:
        raise DecodeError(
            f"Invalid JSON from model (no object found). Raw: {(raw or '')[:200]}..."
        )

    try:
        obj = json.loads(candidate)
    except ValueError as e:
        raise DecodeError(
            f"Invalid JSON from model (parse failed). Extracted: {candidate[:200]}..."
        ) from e
    if not isinstance(obj, dict):
        raise DecodeError(f"Invalid JSON from model (not an object). Extracted: {candidate[:200]}...")
    return obj
