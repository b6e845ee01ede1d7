from __future__ import annotations

import logging
from typing import Any, Dict, List

from ..models.analysis import NO_SUMMARY_TEXT, SummaryData
from . import aliases
from .json_recovery import strip_markdown, try_parse_json, try_parse_json_from_array
from .shapes import (
    Shape,
    as_record,
    best_text,
    classify,
    first_present,
    first_text,
    has_key,
    looks_like_json,
    safe_text,
)

logger = logging.getLogger("app.parsing")


def _default() -> SummaryData:
    return SummaryData(text=NO_SUMMARY_TEXT, bullets=[])


def _clean_bullets(items: Any) -> List[str]:
    if not isinstance(items, (list, tuple)):
        return []
    return [b.strip() for b in items if isinstance(b, str) and b.strip()]


def _decision_bullets(decisions: Any) -> List[str]:
    if not isinstance(decisions, (list, tuple)):
        return []
    bullets: List[str] = []
    for d in decisions:
        if classify(d) is Shape.RECORD:
            obj = as_record(d)
            item = first_text(obj, aliases.DECISION_TEXT) or best_text(obj)
            ref = first_text(obj, ("reference",))
            line = f"{item} {ref}" if item and ref else item
        else:
            line = best_text(d)
        if line and line.strip():
            bullets.append(line.strip())
    return bullets


def _from_container(container: Any, reparsed: bool) -> SummaryData | None:
    """Unwrap a meetingSummary/meeting_summary container; None when it holds nothing usable."""
    if isinstance(container, str):
        text = container.strip()
        if "```" in text:
            text = strip_markdown(text)
        if not reparsed and looks_like_json(text):
            parsed = try_parse_json(text)
            if parsed is not None:
                return _parse(parsed, reparsed=True)
        return SummaryData(text=text) if text else None
    if classify(container) is not Shape.RECORD:
        return None

    obj = as_record(container)
    display = first_text(obj, aliases.SUMMARY_DISPLAY)
    if display:
        return SummaryData(text=display)
    inner_value = first_present(obj, aliases.SUMMARY_CONTAINER)
    inner = as_record(inner_value) if classify(inner_value) is Shape.RECORD else obj
    text = first_text(inner, aliases.SUMMARY_TEXT) or ""
    bullets = _decision_bullets(first_present(inner, aliases.SUMMARY_DECISIONS))
    if not text and not bullets:
        return None
    return SummaryData(text=text or best_text(inner), bullets=bullets)


def _from_record(obj: Dict[str, Any], reparsed: bool) -> SummaryData:
    # Already canonical, e.g. a previous parse fed back in
    if isinstance(obj.get("text"), str) and isinstance(obj.get("bullets"), (list, tuple)):
        return SummaryData(text=obj["text"].strip(), bullets=_clean_bullets(obj["bullets"]))
    if obj.get("summary") and isinstance(obj.get("bullets"), (list, tuple)):
        return SummaryData(text=best_text(obj["summary"]), bullets=_clean_bullets(obj["bullets"]))

    display = first_text(obj, aliases.SUMMARY_DISPLAY)
    if display:
        return SummaryData(text=display)

    container = first_present(obj, aliases.SUMMARY_CONTAINER)
    if container is not None:
        found = _from_container(container, reparsed)
        if found is not None:
            return found

    summary = first_present(obj, ("summary",))
    if summary is not None:
        if classify(summary) in (Shape.RECORD, Shape.SEQUENCE):
            return _parse(summary, reparsed)
        return SummaryData(text=best_text(summary))
    text = first_present(obj, ("text",))
    if text is not None:
        return SummaryData(text=best_text(text))
    # Summary keys present but blank: nothing was generated
    if has_key(obj, aliases.SUMMARY_TEXT + aliases.SUMMARY_DISPLAY + aliases.SUMMARY_CONTAINER):
        return SummaryData(text="", bullets=_clean_bullets(obj.get("bullets")))
    return SummaryData(text=best_text(obj))


def _parse(value: Any, reparsed: bool = False) -> SummaryData:
    shape = classify(value)
    if shape is Shape.NULL:
        return _default()
    if shape is Shape.SEQUENCE:
        if not reparsed:
            parsed = try_parse_json_from_array(list(value))
            if parsed is not None:
                return _parse(parsed, reparsed=True)
        text = best_text(value)
        return SummaryData(text=text) if text else _default()
    if shape is Shape.RECORD:
        result = _from_record(as_record(value), reparsed)
        return result if result.text or result.bullets else _default()
    if shape is Shape.STRING:
        trimmed = value.strip()
        if not trimmed:
            return _default()
        if not reparsed:
            parsed = try_parse_json(trimmed)
            if parsed is not None:
                return _parse(parsed, reparsed=True)
        return SummaryData(text=strip_markdown(trimmed) if "```" in trimmed else trimmed)
    return SummaryData(text=str(value))


def parse_summary(value: Any) -> SummaryData:
    """Reduce a summary payload of any shape to SummaryData.

    Accepts plain text, fenced or embedded JSON, the nested
    meetingSummary/meeting_summary layouts, and already-canonical
    {"text", "bullets"} records (so parsing twice is harmless). Input
    nested too deeply to walk is kept as plain text.
    """
    try:
        return _parse(value)
    except RecursionError:
        logger.warning("input nested too deeply; kept as text", extra={"fields": {"category": "summary"}})
        text = safe_text(value)
        return SummaryData(text=text) if text else _default()
