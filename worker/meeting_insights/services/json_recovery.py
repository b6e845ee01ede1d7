from __future__ import annotations

import json
import logging
import re
from typing import Any, List, Optional

logger = logging.getLogger("app.parsing")

_FENCE_JSON_RE = re.compile(r"```json\s*", re.IGNORECASE)
_FENCE_RE = re.compile(r"```\s*")
_FENCED_BLOCK_RE = re.compile(r"```json\s*([\s\S]*?)```", re.IGNORECASE)
_JSON_SPAN_RE = re.compile(r"\{[\s\S]*\}|\[[\s\S]*\]")
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")

_CLOSERS = {"{": "}", "[": "]"}


def strip_markdown(s: str) -> str:
    """Drop ```json / ``` fence markers wherever they appear and trim."""
    s = _FENCE_JSON_RE.sub("", s)
    s = _FENCE_RE.sub("", s)
    return s.strip()


def _extract_json_span(s: str) -> Optional[str]:
    m = _JSON_SPAN_RE.search(s)
    return m.group(0) if m else None


def _strip_trailing_commas(s: str) -> str:
    return _TRAILING_COMMA_RE.sub(r"\1", s)


def repair_brackets(s: str) -> str:
    """Append the closers a truncated JSON candidate is missing.

    Brackets inside string literals are ignored; a closer that does not match
    the innermost open bracket is skipped rather than treated as an error.
    If the text ends inside a string literal, the literal is closed first.
    """
    stack: List[str] = []
    in_string = False
    escaping = False
    for ch in s:
        if escaping:
            escaping = False
            continue
        if ch == "\\":
            if in_string:
                escaping = True
            continue
        if ch == '"':
            in_string = not in_string
            continue
        if in_string:
            continue
        if ch in _CLOSERS:
            stack.append(ch)
        elif ch in ("}", "]"):
            expected = "{" if ch == "}" else "["
            if stack and stack[-1] == expected:
                stack.pop()

    if not stack and not in_string:
        return s
    repaired = s + '"' if in_string else s
    for opener in reversed(stack):
        repaired += _CLOSERS[opener]
    return repaired


def try_parse_json(s: str) -> Optional[Any]:
    """Recover a JSON value from model output. Returns None when nothing parses.

    The string must contain an object or array; prose without one is never
    parsed, even if it happens to be a valid JSON scalar.
    """
    if not isinstance(s, str):
        return None
    trimmed = strip_markdown(s)
    if trimmed.startswith("{") or trimmed.startswith("["):
        candidate: Optional[str] = trimmed
    else:
        candidate = _extract_json_span(trimmed)
    if not candidate:
        return None

    normalized = _strip_trailing_commas(candidate)
    try:
        return json.loads(normalized)
    except (ValueError, RecursionError):
        pass
    repaired = repair_brackets(normalized)
    if repaired == normalized:
        return None
    try:
        value = json.loads(_strip_trailing_commas(repaired))
    except (ValueError, RecursionError):
        return None
    logger.debug("recovered truncated json", extra={"fields": {"appended": len(repaired) - len(normalized)}})
    return value


def try_parse_json_from_array(value: Any) -> Optional[Any]:
    """Re-join a JSON blob that was exploded into a list of lines and parse it."""
    if not isinstance(value, list) or not value:
        return None
    if not all(isinstance(item, str) for item in value):
        return None
    joined = "\n".join(value).strip()
    if not joined:
        return None
    if "{" not in joined and "[" not in joined:
        return None
    return try_parse_json(joined)


def extract_fenced_json(s: str) -> List[Any]:
    """Parse every ```json fenced block in `s`; blocks that fail are skipped."""
    out: List[Any] = []
    for block in _FENCED_BLOCK_RE.findall(s or ""):
        parsed = try_parse_json(block)
        if parsed is not None:
            out.append(parsed)
    return out
