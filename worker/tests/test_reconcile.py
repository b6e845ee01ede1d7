import pytest
from pydantic import ValidationError

from meeting_insights.models.analysis import AnalysisResults, SummaryData, TaskItem
from meeting_insights.models.meeting import MeetingWithRelations
from meeting_insights.services.reconcile import (
    build_results_from_meeting,
    looks_like_calendar_fragment,
    merge_overrides,
    normalize_key,
)


def _meeting(**kwargs):
    base = {"id": 1, "tasks": [], "email_drafts": [], "calendar_events": [], "blockers": []}
    base.update(kwargs)
    return base


def test_rows_define_cardinality_and_identity():
    meeting = _meeting(
        tasks=[
            {"id": 11, "description": "Ship report"},
            {"id": 12, "description": "Book room", "completed": True},
            {"id": 13, "description": "Call vendor"},
        ],
        email_drafts=[{"id": "e1", "subject": "Recap", "body": "Thanks all"}],
        calendar_events=[{"id": 21, "title": "Retro"}],
        blockers=[{"id": 31, "description": "Waiting on legal"}],
        raw_analysis={
            "nextTasks": [{"task": "Ship report", "id": 999}, {"task": "Invented task"}],
            "email": [{"subject": "Other", "body": "Unrelated"}],
            "calendar": [{"title": "Retro"}, {"title": "Extra event"}],
            "blockers": ["Something else"],
        },
    )
    results = build_results_from_meeting(meeting)
    assert [t.id for t in results.next_tasks] == [11, 12, 13]
    assert [e.id for e in results.email] == ["e1"]
    assert [c.id for c in results.calendar] == [21]
    assert [b.id for b in results.blockers] == [31]


def test_tasks_are_enriched_by_normalized_key():
    meeting = _meeting(
        tasks=[{"id": 7, "description": "Ship report", "completed": True, "priority": "low"}],
        raw_analysis={"nextTasks": [{"task": "  ship REPORT ", "rationale": "Q4 close", "priority": "high"}]},
    )
    t = build_results_from_meeting(meeting).next_tasks[0]
    assert (t.id, t.task, t.completed) == (7, "Ship report", True)
    assert t.rationale == "Q4 close"
    assert t.priority == "high"


def test_row_priority_used_without_enrichment():
    meeting = _meeting(tasks=[{"id": 1, "description": "Plain", "priority": "low"}])
    t = build_results_from_meeting(meeting).next_tasks[0]
    assert t.priority == "low"
    assert t.completed is False


def test_overrides_take_precedence_over_stored_analysis():
    meeting = _meeting(
        tasks=[{"id": 1, "description": "Ship report"}],
        raw_analysis={"nextTasks": [{"task": "Ship report", "rationale": "old"}]},
    )
    overrides = AnalysisResults(next_tasks=[TaskItem(task="Ship report", rationale="new")])
    assert build_results_from_meeting(meeting, overrides).next_tasks[0].rationale == "new"
    assert build_results_from_meeting(meeting).next_tasks[0].rationale == "old"


def test_calendar_fragment_row_is_reparsed():
    meeting = _meeting(
        calendar_events=[{"id": 5, "title": '{"title":"Standup","start":"2024-01-01T09:00:00Z"}', "description": ""}]
    )
    events = build_results_from_meeting(meeting).calendar
    assert len(events) == 1
    assert events[0].title == "Standup"
    assert events[0].id == 5
    assert events[0].start_time == "2024-01-01T09:00:00Z"


def test_clean_calendar_rows_are_enriched():
    meeting = _meeting(
        calendar_events=[{"id": 2, "title": "Retro", "start_time": "2024-01-05T10:00:00Z", "status": "created"}],
        raw_analysis={"calendar": [{"title": "retro", "description": "Sprint retro", "attendees": ["a@example.com"], "status": "pending"}]},
    )
    e = build_results_from_meeting(meeting).calendar[0]
    assert e.title == "Retro"
    assert e.description == "Sprint retro"
    assert e.attendees == ["a@example.com"]
    assert e.start_time == "2024-01-05T10:00:00Z"
    assert e.status == "created"


def test_email_subject_recipients_and_status():
    meeting = _meeting(
        email_drafts=[
            {"id": 3, "subject": None, "body": "Thanks for joining", "recipient": "ana@example.com", "status": "sent"},
            {"id": 4, "subject": "Recap", "body": "Notes attached", "status": "draft"},
        ],
        raw_analysis={"email": [{"subject": "Recap", "body": "x", "reason": "follow-up", "recipients": ["team@example.com"]}]},
    )
    first, second = build_results_from_meeting(meeting).email
    assert first.subject == "Meeting Follow-up"
    assert first.recipients == ["ana@example.com"]
    assert first.status == "sent"
    assert second.body == "Notes attached"
    assert second.reason == "follow-up"
    assert second.recipients == ["team@example.com"]
    assert second.status == "draft"


def test_blockers_take_severity_from_analysis_and_resolved_from_row():
    meeting = _meeting(
        blockers=[{"id": 9, "description": "Waiting on legal", "resolved": True}],
        raw_analysis={"blockers": {"items": [{"description": "Waiting on legal", "severity": "high", "impact": "launch slips"}]}},
    )
    b = build_results_from_meeting(meeting).blockers[0]
    assert (b.id, b.severity, b.impact, b.resolved) == (9, "high", "launch slips", True)


def test_row_holding_json_fragment_recovers_rich_fields():
    meeting = _meeting(tasks=[{"id": 8, "description": '{"task": "Migrate DB", "rationale": "EOL"}'}])
    t = build_results_from_meeting(meeting).next_tasks[0]
    assert (t.id, t.task, t.rationale) == (8, "Migrate DB", "EOL")


def test_blank_rows_are_dropped():
    meeting = _meeting(tasks=[{"id": 1, "description": "  "}, {"id": 2, "description": "Real"}])
    assert [t.id for t in build_results_from_meeting(meeting).next_tasks] == [2]


def test_summary_falls_back_to_meeting_column():
    meeting = _meeting(
        summary='```json\n{"summary": "Stored summary"}\n```',
        raw_analysis={"nextTasks": ["Anything"]},
    )
    assert build_results_from_meeting(meeting).summary.text == "Stored summary"


def test_summary_prefers_overrides():
    meeting = _meeting(summary="Stored summary", raw_analysis={"summary": "Blob summary"})
    assert build_results_from_meeting(meeting).summary.text == "Blob summary"
    overrides = AnalysisResults(summary=SummaryData(text="Fresh summary"))
    assert build_results_from_meeting(meeting, overrides).summary.text == "Fresh summary"


def test_accepts_model_instances():
    meeting = MeetingWithRelations.model_validate(_meeting(tasks=[{"id": 1, "description": "A"}]))
    assert build_results_from_meeting(meeting).next_tasks[0].task == "A"


def test_malformed_rows_raise_validation_error():
    with pytest.raises(ValidationError):
        build_results_from_meeting({"tasks": [{"description": "no id"}]})


def test_merge_overrides_per_category():
    stored = AnalysisResults(summary=SummaryData(text="Stored"), next_tasks=[TaskItem(task="A")])
    fresh = AnalysisResults(next_tasks=[])
    merged = merge_overrides(stored, fresh)
    assert merged.summary.text == "Stored"
    assert [t.task for t in merged.next_tasks] == ["A"]
    assert merge_overrides(None, None) is None


def test_fragment_heuristic_and_key_normalization():
    assert looks_like_calendar_fragment('{"title": "x"}')
    assert looks_like_calendar_fragment('Retro "start": "2024"')
    assert not looks_like_calendar_fragment("Team sync")
    assert not looks_like_calendar_fragment(None)
    assert normalize_key("  Ship Report ") == "ship report"
    assert normalize_key(None) == ""


def test_deep_summary_column_does_not_raise():
    deep = '{"summary":' * 900 + '"x"' + "}" * 900
    assert build_results_from_meeting(_meeting(summary=deep)).summary.text == deep


def test_blank_stored_summary_does_not_hide_column():
    meeting = _meeting(summary="Stored summary", raw_analysis={"summary": {"summary": ""}})
    assert build_results_from_meeting(meeting).summary.text == "Stored summary"


def test_each_calendar_fragment_row_keeps_its_details():
    meeting = _meeting(calendar_events=[
        {"id": 5, "title": '{"title":"Standup","start":"2024-01-01T09:00:00Z"}', "description": ""},
        {"id": 6, "title": '{"title":"Retro","description":"Sprint retro",', "description": '"attendees":["b@example.com"]}'},
        {"id": 7, "title": "Planning"},
    ])
    standup, retro, planning = build_results_from_meeting(meeting).calendar
    assert (standup.id, standup.title, standup.start_time) == (5, "Standup", "2024-01-01T09:00:00Z")
    assert (retro.id, retro.title, retro.description) == (6, "Retro", "Sprint retro")
    assert retro.attendees == ["b@example.com"]
    assert (planning.id, planning.title) == (7, "Planning")
