"""Field-name alias tables.

Each tuple lists candidate keys in priority order; the first key present on a
record wins. Model output has used several naming conventions over time, so
adding a convention is a change here, not in the extractors.
"""

from __future__ import annotations

from typing import Dict, Tuple

Aliases = Tuple[str, ...]

# Generic keys tried when a record matches nothing category-specific
TEXT_FALLBACK: Aliases = ("summary", "text", "content", "description", "body", "task", "title", "name")

REFERENCE_SPEAKER: Aliases = ("speaker", "Speaker")
REFERENCE_TIMESTAMP: Aliases = ("timestamp", "Timestamp", "time")
REFERENCE_TEXT: Aliases = ("text", "Text", "message", "content")

# Summary
SUMMARY_TEXT: Aliases = ("summary", "text")
SUMMARY_DISPLAY: Aliases = ("display_text", "displayText")
SUMMARY_CONTAINER: Aliases = ("meetingSummary", "meeting_summary")
SUMMARY_DECISIONS: Aliases = ("decisions_goals_outcomes",)
DECISION_TEXT: Aliases = ("item", "text", "description")

# Tasks
TASK_CONTAINER: Aliases = ("next_steps", "nextSteps", "tasks", "nextTasks", "action_items")
TASK_TEXT: Aliases = ("task", "item", "description")
TASK_OWNER: Aliases = ("owner", "assignee")

# Blockers
BLOCKER_ITEMS: Aliases = ("items",)
BLOCKER_GROUPS: Aliases = ("open_questions", "uncertainties", "risks", "blockers")
BLOCKER_TEXT: Aliases = ("description", "text")
BLOCKER_EVIDENCE: Aliases = ("evidence_quotes", "evidenceQuotes")
BLOCKER_MISSING: Aliases = ("missing_info_to_resolve", "missingInfo", "missing_info")

# Calendar events
CALENDAR_CONTAINER: Aliases = ("suggestedEvents", "events")
CALENDAR_FIELDS: Dict[str, Aliases] = {
    "title": ("title", "Title", "summary"),
    "description": ("description", "Description"),
    "start_time": ("start", "startTime", "start_time", "Start time"),
    "end_time": ("end", "endTime", "end_time", "End time"),
    "timezone": ("timezone", "Timezone", "timeZone"),
    "attendees": ("attendees", "Attendees"),
    "status": ("status", "Status"),
    "references": ("references", "References"),
    "missing_info": ("missing_info", "missingInfo"),
}
# Google-style {"dateTime": ..., "timeZone": ...} time objects
EVENT_TIME_VALUE: Aliases = ("dateTime", "date")
EVENT_TIME_ZONE: Aliases = ("timeZone", "timezone")
ATTENDEE_TEXT: Aliases = ("email", "name", "displayName")

# Emails
EMAIL_CONTAINER: Aliases = ("allEmails", "emails")
EMAIL_FIELDS: Dict[str, Aliases] = {
    "reason": ("reason", "Reason"),
    "recipients": ("recipients", "Recipients"),
    "subject": ("subject", "Subject", "SubjectLine"),
    "body": ("body", "Body", "text", "content"),
    "references": ("references", "References"),
}

# Regex fallback: canonical field -> aliases probed in broken JSON text
TASK_REGEX_FIELDS: Dict[str, Aliases] = {
    "task": TASK_TEXT,
    "owner": TASK_OWNER,
    "rationale": ("rationale",),
    "priority": ("priority",),
}
BLOCKER_REGEX_FIELDS: Dict[str, Aliases] = {
    "description": BLOCKER_TEXT,
    "quote": ("quote",),
    "timestamp": ("timestamp",),
    "severity": ("severity",),
}
CALENDAR_REGEX_FIELDS: Dict[str, Aliases] = {
    "title": CALENDAR_FIELDS["title"],
    "description": CALENDAR_FIELDS["description"],
    "start_time": CALENDAR_FIELDS["start_time"],
    "end_time": CALENDAR_FIELDS["end_time"],
}
EMAIL_REGEX_FIELDS: Dict[str, Aliases] = {
    "body": EMAIL_FIELDS["body"],
    "subject": EMAIL_FIELDS["subject"],
    "reason": EMAIL_FIELDS["reason"],
}
