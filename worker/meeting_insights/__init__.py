"""Normalization and reconciliation of LLM meeting analyses.

The parsing core can be used without the HTTP worker:

    from meeting_insights import parse_analysis_results
    results = parse_analysis_results({"summary": "...", "nextTasks": [...]})
"""

from .services.aggregate import parse_analysis_results, summary_preview
from .services.blockers import parse_blockers
from .services.calendar_events import parse_calendar_events
from .services.emails import parse_emails
from .services.json_recovery import try_parse_json
from .services.reconcile import build_results_from_meeting
from .services.summary import parse_summary
from .services.tasks import parse_tasks

__all__ = [
    "build_results_from_meeting",
    "parse_analysis_results",
    "parse_blockers",
    "parse_calendar_events",
    "parse_emails",
    "parse_summary",
    "parse_tasks",
    "summary_preview",
    "try_parse_json",
]
