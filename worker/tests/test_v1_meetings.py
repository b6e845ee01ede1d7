from fastapi.testclient import TestClient

from meeting_insights.app import app


client = TestClient(app)


MEETING = {
    "id": 42,
    "title": "Weekly",
    "summary": "Weekly sync",
    "tasks": [
        {"id": 1, "description": "Low thing", "priority": "low"},
        {"id": 2, "description": "Urgent thing", "priority": "urgent"},
        {"id": 3, "description": "Done thing", "completed": True},
    ],
    "email_drafts": [
        {"id": 1, "subject": "Recap", "body": "Thanks", "status": "sent"},
        {"id": 2, "body": "Follow up on budget", "status": "draft"},
    ],
    "calendar_events": [
        {"id": 1, "title": "Retro", "status": "created"},
        {"id": 2, "title": "Planning"},
    ],
    "blockers": [
        {"id": 1, "description": "Minor issue", "severity": "low"},
        {"id": 2, "description": "Prod outage", "severity": "critical"},
        {"id": 3, "description": "Old issue", "resolved": True},
    ],
    "raw_analysis": {"nextTasks": [{"task": "Low thing", "rationale": "cleanup"}]},
}


def test_meeting_results_keep_row_identity():
    r = client.post("/v1/meeting/results", json={"meeting": MEETING})
    assert r.status_code == 200
    body = r.json()
    assert body["summary"]["text"] == "Weekly sync"
    assert [t["id"] for t in body["nextTasks"]] == [1, 2, 3]
    assert body["nextTasks"][0]["rationale"] == "cleanup"
    assert [e["subject"] for e in body["email"]] == ["Recap", "Meeting Follow-up"]
    assert [c["id"] for c in body["calendar"]] == [1, 2]
    assert [b["id"] for b in body["blockers"]] == [1, 2, 3]


def test_meeting_results_with_overrides():
    overrides = {"summary": {"text": "Fresh", "bullets": ["one"]}, "nextTasks": [{"task": "Urgent thing", "owner": "Ana"}]}
    r = client.post("/v1/meeting/results", json={"meeting": MEETING, "overrides": overrides})
    assert r.status_code == 200
    body = r.json()
    assert body["summary"] == {"text": "Fresh", "bullets": ["one"]}
    assert body["nextTasks"][1]["owner"] == "Ana"


def test_meeting_triage():
    r = client.post("/v1/meeting/triage", json={"meeting": MEETING})
    assert r.status_code == 200
    body = r.json()
    assert body["ok"] is True
    assert [t["id"] for t in body["tasks"]] == [2, 1]
    assert [b["id"] for b in body["blockers"]] == [2, 1]
    assert body["pending_emails"] == 1
    assert body["pending_events"] == 1
    assert body["completion_rate"] == 33


def test_malformed_meeting_is_422():
    r = client.post("/v1/meeting/results", json={"meeting": {"tasks": [{"description": "no id"}]}})
    assert r.status_code == 422
    body = r.json()
    assert body["ok"] is False
    assert "tasks" in body["error"]
