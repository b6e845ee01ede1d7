"""Merge persisted meeting rows with the freeform analysis.

Rows own existence, identity and state (completed, resolved, status); the
analysis only contributes metadata (rationale, priority, references, ...).
Entries are joined on a normalized copy of each category's primary text.
The merged view is rebuilt on every read because rows change independently
of the frozen analysis blob.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, TypeVar

from pydantic import BaseModel

from ..models.analysis import (
    NO_SUMMARY_TEXT,
    AnalysisResults,
    BlockerItem,
    CalendarEvent,
    EmailData,
    SummaryData,
    TaskItem,
)
from ..models.meeting import (
    MeetingBlocker,
    MeetingCalendarEvent,
    MeetingEmailDraft,
    MeetingTask,
    MeetingWithRelations,
)
from .aggregate import parse_analysis_results
from .blockers import parse_blockers
from .calendar_events import parse_calendar_events
from .emails import parse_emails
from .json_recovery import strip_markdown, try_parse_json
from .shapes import looks_like_json
from .summary import parse_summary
from .tasks import parse_tasks

logger = logging.getLogger("app.reconcile")

FOLLOW_UP_SUBJECT = "Meeting Follow-up"

_CALENDAR_FIELD_RE = re.compile(
    r'"(title|description|start|end|timezone|attendees|status|suggestedEvents|events|missing_info|references)"\s*:'
)

R = TypeVar("R", bound=BaseModel)


def normalize_key(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def looks_like_calendar_fragment(value: Optional[str]) -> bool:
    text = (value or "").strip()
    if not text:
        return False
    return text.startswith(("{", "}", "[", '"')) or bool(_CALENDAR_FIELD_RE.search(text))


def _summary_present(summary: Optional[SummaryData]) -> bool:
    if summary is None:
        return False
    if summary.bullets:
        return True
    text = summary.text.strip()
    return bool(text) and text != NO_SUMMARY_TEXT


def merge_overrides(
    raw_overrides: Optional[AnalysisResults],
    overrides: Optional[AnalysisResults],
) -> Optional[AnalysisResults]:
    """Per category, a non-empty fresh override beats the stored blob."""
    if raw_overrides is None and overrides is None:
        return None
    fresh = overrides or AnalysisResults()
    stored = raw_overrides or AnalysisResults()
    if _summary_present(fresh.summary):
        summary = fresh.summary
    elif _summary_present(stored.summary):
        summary = stored.summary
    else:
        summary = SummaryData(text=NO_SUMMARY_TEXT)
    return AnalysisResults(
        summary=summary,
        next_tasks=fresh.next_tasks or stored.next_tasks,
        email=fresh.email or stored.email,
        calendar=fresh.calendar or stored.calendar,
        blockers=fresh.blockers or stored.blockers,
    )


def _index(records: Iterable[R], key: Callable[[R], Optional[str]]) -> Dict[str, R]:
    out: Dict[str, R] = {}
    for record in records:
        k = normalize_key(key(record))
        if k:
            out[k] = record
    return out


def _lookup(keys: Iterable[Optional[str]], *maps: Mapping[str, R]) -> Optional[R]:
    normalized = [normalize_key(k) for k in keys if k]
    for table in maps:
        for k in normalized:
            if k and k in table:
                return table[k]
    return None


def _recover(text: Optional[str], parser: Callable[[Any], List[R]]) -> Optional[R]:
    """First record held by a row whose text column is itself model JSON."""
    if not text:
        return None
    candidate = strip_markdown(text) if "```" in text else text
    if not looks_like_json(candidate):
        return None
    parsed = try_parse_json(candidate)
    if parsed is None:
        return None
    records = parser(parsed)
    return records[0] if records else None


def _details(*records: Optional[BaseModel]) -> Dict[str, Any]:
    """Field values of the given records, later records taking precedence."""
    merged: Dict[str, Any] = {}
    for record in records:
        if record is not None:
            merged.update(record.model_dump(exclude_none=True))
    return merged


def _calendar_row_text(row: MeetingCalendarEvent) -> str:
    return "\n".join(part for part in (row.title, row.description) if part)


def _base_calendar(rows: List[MeetingCalendarEvent]) -> List[CalendarEvent]:
    has_fragments = any(
        looks_like_calendar_fragment(row.title) or looks_like_calendar_fragment(row.description) for row in rows
    )
    if has_fragments:
        logger.debug("calendar rows hold json fragments; re-parsing as text", extra={"fields": {"rows": len(rows)}})
        # Joined first; when several fragments don't form one document each row parses on its own
        return parse_calendar_events([_calendar_row_text(row) for row in rows])
    return parse_calendar_events([row.model_dump(exclude_none=True) for row in rows])


def _reconcile_tasks(
    rows: List[MeetingTask], overrides: List[TaskItem], base: List[TaskItem]
) -> List[TaskItem]:
    override_map = _index(overrides, lambda t: t.task)
    base_map = _index(base, lambda t: t.task)
    out: List[TaskItem] = []
    for row in rows:
        recovered = _recover(row.description, parse_tasks)
        text = recovered.task if recovered else (row.description or "")
        if not text.strip():
            continue
        details = _lookup([text, row.description], override_map, base_map)
        fields = _details(recovered, details)
        fields.update(
            id=row.id,
            task=text,
            completed=row.completed,
            priority=fields.get("priority") or row.priority,
        )
        out.append(TaskItem(**fields))
    return out


def _reconcile_emails(
    rows: List[MeetingEmailDraft], overrides: List[EmailData], base: List[EmailData]
) -> List[EmailData]:
    override_map = _index(overrides, lambda e: e.subject or e.body)
    base_map = _index(base, lambda e: e.subject or e.body)
    out: List[EmailData] = []
    for row in rows:
        recovered = _recover(row.body, parse_emails)
        body = recovered.body if recovered else (row.body or "")
        if not body.strip():
            continue
        details = _lookup([row.subject or body, body], override_map, base_map)
        fields = _details(recovered, details)
        recipients = fields.get("recipients") or ([row.recipient] if row.recipient else [])
        fields.update(
            id=row.id,
            body=body,
            subject=row.subject or fields.get("subject") or FOLLOW_UP_SUBJECT,
            recipients=recipients,
            status=row.status or fields.get("status"),
        )
        out.append(EmailData(**fields))
    return out


def _reconcile_calendar(
    rows: List[MeetingCalendarEvent], overrides: List[CalendarEvent], base: List[CalendarEvent]
) -> List[CalendarEvent]:
    override_map = _index(overrides, lambda e: e.title)
    base_map = _index(base, lambda e: e.title)
    out: List[CalendarEvent] = []
    for row in rows:
        recovered = None
        if looks_like_calendar_fragment(row.title):
            # A fragment may continue into the description column
            recovered = _recover(_calendar_row_text(row), parse_calendar_events) or _recover(
                row.title, parse_calendar_events
            )
        title = recovered.title if recovered else (row.title or "")
        if not title.strip():
            continue
        details = _lookup([title, row.title], override_map, base_map)
        fields = _details(recovered, details)
        description = None if looks_like_calendar_fragment(row.description) else row.description
        fields.update(
            id=row.id,
            title=title,
            description=fields.get("description") or description or None,
            start_time=fields.get("start_time") or row.start_time,
            end_time=fields.get("end_time") or row.end_time,
            timezone=fields.get("timezone") or row.timezone,
            status=row.status or fields.get("status"),
        )
        out.append(CalendarEvent(**fields))
    return out


def _reconcile_blockers(
    rows: List[MeetingBlocker], overrides: List[BlockerItem], base: List[BlockerItem]
) -> List[BlockerItem]:
    override_map = _index(overrides, lambda b: b.description)
    base_map = _index(base, lambda b: b.description)
    out: List[BlockerItem] = []
    for row in rows:
        recovered = _recover(row.description, parse_blockers)
        text = recovered.description if recovered else (row.description or "")
        if not text.strip():
            continue
        details = _lookup([text, row.description], override_map, base_map)
        fields = _details(recovered, details)
        fields.update(
            id=row.id,
            description=text,
            severity=fields.get("severity") or row.severity,
            resolved=row.resolved,
        )
        out.append(BlockerItem(**fields))
    return out


def _coerce_meeting(meeting: Any) -> MeetingWithRelations:
    if isinstance(meeting, MeetingWithRelations):
        return meeting
    return MeetingWithRelations.model_validate(meeting)


def _coerce_overrides(overrides: Any) -> Optional[AnalysisResults]:
    if overrides is None or isinstance(overrides, AnalysisResults):
        return overrides
    return parse_analysis_results(overrides)


def build_results_from_meeting(meeting: Any, overrides: Any = None) -> AnalysisResults:
    """Merged AnalysisResults for a stored meeting.

    Task, email, event and blocker entries correspond one-to-one to the
    meeting's rows (blank rows aside) and always carry the row id; the
    stored raw analysis and `overrides` (a just-finished analysis not yet
    read back from storage) only enrich them. `meeting` may be a mapping or
    a MeetingWithRelations; a mapping with malformed rows raises
    pydantic.ValidationError.
    """
    m = _coerce_meeting(meeting)
    raw_overrides = parse_analysis_results(m.raw_analysis) if m.raw_analysis else None
    effective = merge_overrides(raw_overrides, _coerce_overrides(overrides)) or AnalysisResults()

    base_tasks = parse_tasks([row.description for row in m.tasks])
    base_emails = parse_emails([row.body for row in m.email_drafts])
    base_blockers = parse_blockers([row.description for row in m.blockers])
    base_calendar = _base_calendar(m.calendar_events)

    summary = effective.summary if _summary_present(effective.summary) else parse_summary(m.summary)
    results = AnalysisResults(
        summary=summary,
        next_tasks=_reconcile_tasks(m.tasks, effective.next_tasks, base_tasks),
        email=_reconcile_emails(m.email_drafts, effective.email, base_emails),
        calendar=_reconcile_calendar(m.calendar_events, effective.calendar, base_calendar),
        blockers=_reconcile_blockers(m.blockers, effective.blockers, base_blockers),
    )
    logger.debug(
        "meeting reconciled",
        extra={"fields": {
            "meeting_id": m.id,
            "tasks": len(results.next_tasks),
            "emails": len(results.email),
            "events": len(results.calendar),
            "blockers": len(results.blockers),
            "enriched_from": "overrides" if overrides is not None else ("raw_analysis" if m.raw_analysis else "rows"),
        }},
    )
    return results
