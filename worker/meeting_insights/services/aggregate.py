from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, TypeVar

from ..models.analysis import AnalysisResults, RawAnalysis, SummaryData, NO_SUMMARY_TEXT
from .blockers import parse_blockers
from .calendar_events import parse_calendar_events
from .emails import parse_emails
from .json_recovery import try_parse_json
from .summary import parse_summary
from .tasks import parse_tasks

logger = logging.getLogger("app.parsing")

NO_SUMMARY_PREVIEW = "No summary available"

T = TypeVar("T")


def _guarded(category: str, fn: Callable[[Any], T], value: Any, default: Callable[[], T]) -> T:
    # A failure empties this category only
    try:
        return fn(value)
    except Exception:
        logger.exception("extraction failed; using empty result", extra={"fields": {"category": category}})
        return default()


def _coerce_raw(raw: Any) -> RawAnalysis:
    if raw is None:
        return RawAnalysis()
    if isinstance(raw, RawAnalysis):
        return raw
    if isinstance(raw, AnalysisResults):
        return RawAnalysis.model_validate(raw.dump())
    if isinstance(raw, str):
        parsed = try_parse_json(raw)
        raw = parsed if isinstance(parsed, Mapping) else {}
    if isinstance(raw, Mapping):
        return RawAnalysis.model_validate(dict(raw))
    logger.debug("ignoring raw analysis", extra={"fields": {"type": type(raw).__name__}})
    return RawAnalysis()


def parse_analysis_results(raw: Any) -> AnalysisResults:
    """Apply each category extractor to its field of a raw analysis payload.

    `raw` may be a mapping with any of summary/nextTasks/email/calendar/
    blockers, a RawAnalysis, an AnalysisResults, a JSON string of either, or
    None. Missing categories come back empty (summary: placeholder text).
    """
    payload = _coerce_raw(raw)
    return AnalysisResults(
        summary=_guarded("summary", parse_summary, payload.summary, lambda: SummaryData(text=NO_SUMMARY_TEXT)),
        next_tasks=_guarded("nextTasks", parse_tasks, payload.next_tasks, list),
        email=_guarded("email", parse_emails, payload.email, list),
        calendar=_guarded("calendar", parse_calendar_events, payload.calendar, list),
        blockers=_guarded("blockers", parse_blockers, payload.blockers, list),
    )


def summary_preview(summary: Any, placeholder: str = NO_SUMMARY_PREVIEW) -> str:
    """One-line-ish summary text for meeting lists."""
    if summary is None or (isinstance(summary, str) and not summary.strip()):
        return placeholder
    text = _guarded("summary", parse_summary, summary, lambda: SummaryData(text="")).text
    return text or placeholder
