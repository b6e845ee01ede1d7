"""Shared machinery for the category extractors.

Model output arrives in any shape, so every extractor first classifies its
input into a small tagged union (`Shape`) and then walks the same decision
ladder (`Ladder.run`). Category modules only supply record builders and
their alias tables.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from pydantic import BaseModel

from . import aliases
from .json_recovery import extract_fenced_json, strip_markdown, try_parse_json, try_parse_json_from_array

logger = logging.getLogger("app.parsing")


class Shape(str, Enum):
    NULL = "null"
    STRING = "string"
    RECORD = "record"
    SEQUENCE = "sequence"
    SCALAR = "scalar"


def classify(value: Any) -> Shape:
    if value is None:
        return Shape.NULL
    if isinstance(value, str):
        return Shape.STRING
    if isinstance(value, (Mapping, BaseModel)):
        return Shape.RECORD
    if isinstance(value, (list, tuple)):
        return Shape.SEQUENCE
    return Shape.SCALAR


def as_record(value: Any) -> Dict[str, Any]:
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True, exclude_none=True)
    return dict(value)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def first_present(obj: Mapping[str, Any], keys: Iterable[str]) -> Any:
    """Value of the first key in `keys` that holds something other than None/blank."""
    for key in keys:
        value = obj.get(key)
        if not _is_blank(value):
            return value
    return None


def has_key(obj: Mapping[str, Any], keys: Iterable[str]) -> bool:
    """True when any of `keys` is set, even to a blank value."""
    return any(key in obj for key in keys)


def best_text(value: Any) -> str:
    """Most readable text form of an unknown value; never raises."""
    shape = classify(value)
    if shape is Shape.NULL:
        return ""
    if shape is Shape.STRING:
        return value.strip()
    if shape is Shape.SEQUENCE:
        return "\n".join(t for t in (best_text(v) for v in value) if t)
    if shape is Shape.RECORD:
        obj = as_record(value)
        hit = first_present(obj, aliases.TEXT_FALLBACK)
        if hit is not None:
            return best_text(hit)
        if not obj:
            return ""
        try:
            return json.dumps(obj, ensure_ascii=False, default=str)
        except (TypeError, ValueError):
            return str(obj)
    return str(value)


def safe_text(value: Any) -> str:
    """best_text for values nested too deeply to walk: the raw string, else ""."""
    try:
        return best_text(value)
    except RecursionError:
        return value.strip() if isinstance(value, str) else ""


def text_or_none(value: Any) -> Optional[str]:
    if _is_blank(value):
        return None
    if isinstance(value, str):
        return value
    return best_text(value) or None


def first_text(obj: Mapping[str, Any], keys: Iterable[str]) -> Optional[str]:
    return text_or_none(first_present(obj, keys))


def format_reference(ref: Any) -> str:
    """Render a transcript reference as "<speaker> (<timestamp>) <text>"."""
    if _is_blank(ref):
        return ""
    if isinstance(ref, str):
        return ref
    if classify(ref) is Shape.RECORD:
        obj = as_record(ref)
        speaker = first_text(obj, aliases.REFERENCE_SPEAKER) or ""
        timestamp = first_text(obj, aliases.REFERENCE_TIMESTAMP) or ""
        text = first_text(obj, aliases.REFERENCE_TEXT) or ""
        parts = [speaker, f"({timestamp})" if timestamp else "", text]
        return " ".join(p for p in parts if p).strip()
    return str(ref)


def str_list(value: Any, formatter: Callable[[Any], str] = format_reference) -> Optional[List[str]]:
    """Coerce a list-ish field to a list of non-blank strings (None when absent)."""
    if value is None:
        return None
    items = list(value) if isinstance(value, (list, tuple)) else [value]
    out = [formatter(item) for item in items]
    return [s for s in out if s and s.strip()]


def optional_bool(value: Any) -> Optional[bool]:
    return value if isinstance(value, bool) else None


def optional_id(value: Any) -> Any:
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        return None
    return value


def regex_fields(text: str, table: Mapping[str, Iterable[str]], ignore_case: bool = False) -> Dict[str, str]:
    """Last-resort extraction of `"key": "value"` pairs from JSON too broken to parse."""
    flags = re.IGNORECASE if ignore_case else 0
    found: Dict[str, str] = {}
    for field, keys in table.items():
        for key in keys:
            m = re.search(r'"%s"\s*:\s*"([^"]+)"' % re.escape(key), text, flags)
            if m:
                found[field] = m.group(1)
                break
    return found


_LIST_MARKER_RE = re.compile(r"^\s*(?:[-*•]|\d+[.)])\s+")
_SENTENCE_BREAK_RE = re.compile(r"[.!?]\s")


def _strip_marker(line: str) -> str:
    return _LIST_MARKER_RE.sub("", line).strip()


def split_list_text(text: str) -> List[str]:
    """Split plain text into items when it reads like a list.

    Several non-empty lines are a list. A single line is a list when it is a
    comma-separated run of short fragments; anything sentence-like stays whole.
    """
    lines = [_strip_marker(ln) for ln in text.splitlines() if ln.strip()]
    lines = [ln for ln in lines if ln]
    if len(lines) > 1:
        return lines
    single = lines[0] if lines else text.strip()
    parts = [p.strip() for p in single.rstrip(".").split(",")]
    if (
        len(parts) > 1
        and all(p and len(p.split()) <= 6 for p in parts)
        and not _SENTENCE_BREAK_RE.search(single)
    ):
        return parts
    return [single] if single else []


def looks_like_json(text: str) -> bool:
    t = text.strip()
    return t.startswith("{") or t.startswith("[")


@dataclass
class Ladder:
    """Decision ladder shared by the list-valued extractors.

    from_record: builds records from a dict (containers, canonical shape,
        stringify fallback) and may call back into `run` for containers.
    from_fields: builds one record from regex-recovered fields, using the raw
        text as the primary field when the regex found none.
    from_text: builds one record from plain text.
    """

    name: str
    from_record: Callable[[Dict[str, Any]], List[Any]]
    from_fields: Callable[[Dict[str, str], str], Optional[Any]]
    from_text: Callable[[str], Optional[Any]]
    regex_table: Mapping[str, Iterable[str]]
    split_text: bool = False
    ignore_case: bool = False

    def parse(self, value: Any) -> List[Any]:
        """Entry point: `run` that keeps pathologically nested input as one text record."""
        try:
            return self.run(value)
        except RecursionError:
            logger.warning("input nested too deeply; kept as text", extra={"fields": {"category": self.name}})
            return self._text(safe_text(value))

    def run(self, value: Any, reparsed: bool = False) -> List[Any]:
        shape = classify(value)
        if shape is Shape.NULL:
            return []
        if shape is Shape.RECORD:
            return self.from_record(as_record(value))
        if shape is Shape.SEQUENCE:
            items = list(value)
            if not reparsed:
                parsed = try_parse_json_from_array(items)
                if parsed is not None:
                    return self.run(parsed, reparsed=True)
            out: List[Any] = []
            for item in items:
                out.extend(self.element(item))
            return out
        if shape is Shape.STRING:
            return self._from_string(value, reparsed)
        return self._text(str(value))

    def element(self, item: Any) -> List[Any]:
        shape = classify(item)
        if shape is Shape.NULL:
            return []
        if shape is Shape.RECORD:
            return self.from_record(as_record(item))
        if shape is Shape.SEQUENCE:
            return self.run(item, reparsed=True)
        if shape is Shape.STRING:
            return self._element_string(item)
        return self._text(str(item))

    def _from_string(self, value: str, reparsed: bool) -> List[Any]:
        text = value.strip()
        if not text:
            return []
        if not reparsed:
            blocks = extract_fenced_json(text)
            if len(blocks) > 1:
                out: List[Any] = []
                for block in blocks:
                    out.extend(self.run(block, reparsed=True))
                return out
            parsed = try_parse_json(text)
            if parsed is not None:
                return self.run(parsed, reparsed=True)
        if "```" in text:
            text = strip_markdown(text)
        pieces = split_list_text(text) if self.split_text else [text]
        out = []
        for piece in pieces:
            out.extend(self._element_string(piece))
        return out

    def _element_string(self, item: str) -> List[Any]:
        text = item.strip()
        if "```" in text:
            text = strip_markdown(text)
        if not text:
            return []
        if looks_like_json(text):
            parsed = try_parse_json(text)
            if classify(parsed) is Shape.RECORD:
                return self.from_record(parsed)
            if classify(parsed) is Shape.SEQUENCE:
                return self.run(parsed, reparsed=True)
            fields = regex_fields(text, self.regex_table, self.ignore_case)
            logger.debug(
                "regex fallback used",
                extra={"fields": {"category": self.name, "recovered": sorted(fields)}},
            )
            record = self.from_fields(fields, text)
            return [record] if record is not None else []
        return self._text(text)

    def _text(self, text: str) -> List[Any]:
        record = self.from_text(text)
        return [record] if record is not None else []
