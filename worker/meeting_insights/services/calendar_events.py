from __future__ import annotations

import re
from typing import Any, Dict, List, Optional, Tuple

from ..models.analysis import CalendarEvent
from . import aliases
from .shapes import (
    Ladder,
    Shape,
    as_record,
    best_text,
    classify,
    first_present,
    first_text,
    has_key,
    optional_id,
    str_list,
)

_FIELDS = aliases.CALENDAR_FIELDS
_ATTENDEE_SPLIT_RE = re.compile(r"[,;]")


def _attendee_text(value: Any) -> str:
    if classify(value) is Shape.RECORD:
        return first_text(as_record(value), aliases.ATTENDEE_TEXT) or ""
    return best_text(value)


def _attendees(value: Any) -> List[str]:
    """Attendees as a list of strings; anything unusable becomes an empty list."""
    if isinstance(value, str):
        return [a.strip() for a in _ATTENDEE_SPLIT_RE.split(value) if a.strip()]
    if isinstance(value, (list, tuple)):
        return str_list(value, formatter=_attendee_text) or []
    return []


def _event_time(value: Any) -> Tuple[Optional[str], Optional[str]]:
    """(timestamp, timezone) from a string or a {"dateTime", "timeZone"} object."""
    if classify(value) is Shape.RECORD:
        obj = as_record(value)
        return first_text(obj, aliases.EVENT_TIME_VALUE), first_text(obj, aliases.EVENT_TIME_ZONE)
    if value is None:
        return None, None
    return best_text(value) or None, None


def _event_from_fields(obj: Dict[str, Any]) -> Optional[CalendarEvent]:
    title = first_text(obj, _FIELDS["title"])
    if not title or not title.strip():
        return None
    start, start_tz = _event_time(first_present(obj, _FIELDS["start_time"]))
    end, end_tz = _event_time(first_present(obj, _FIELDS["end_time"]))
    return CalendarEvent(
        id=optional_id(obj.get("id")),
        title=title,
        description=first_text(obj, _FIELDS["description"]),
        start_time=start,
        end_time=end,
        timezone=first_text(obj, _FIELDS["timezone"]) or start_tz or end_tz,
        attendees=_attendees(first_present(obj, _FIELDS["attendees"])),
        status=first_text(obj, _FIELDS["status"]),
        references=str_list(first_present(obj, _FIELDS["references"])),
        missing_info=str_list(first_present(obj, _FIELDS["missing_info"])),
    )


def _from_record(obj: Dict[str, Any]) -> List[CalendarEvent]:
    for key in aliases.CALENDAR_CONTAINER:
        container = obj.get(key)
        if isinstance(container, (list, tuple)):
            return _LADDER.run(container, reparsed=True)
    if has_key(obj, _FIELDS["title"]):
        record = _event_from_fields(obj)
        return [record] if record else []
    # Only name-like text is promoted to a title; a dump of arbitrary keys is not an event
    fallback = first_text(obj, aliases.TEXT_FALLBACK)
    record = _from_text(fallback) if fallback else None
    return [record] if record else []


def _from_fields(fields: Dict[str, str], raw: str) -> Optional[CalendarEvent]:
    return _event_from_fields({"title": raw, **fields})


def _from_text(text: str) -> Optional[CalendarEvent]:
    return CalendarEvent(title=text) if text.strip() else None


_LADDER = Ladder(
    name="calendar",
    from_record=_from_record,
    from_fields=_from_fields,
    from_text=_from_text,
    regex_table=aliases.CALENDAR_REGEX_FIELDS,
    ignore_case=True,
)


def parse_calendar_events(value: Any) -> List[CalendarEvent]:
    """Normalize suggested/extracted events to CalendarEvents.

    Handles the suggestedEvents layout (start/end/missing_info), the
    spreadsheet-style events layout ("Start time", Attendees, ...), bare
    event records and lists of them. Events without a title are dropped.
    """
    return [e for e in _LADDER.parse(value) if e.title.strip()]
