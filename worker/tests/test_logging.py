import json
import logging

from fastapi.testclient import TestClient

from meeting_insights.app import app
from meeting_insights.logging import JsonFormatter, resolve_level


client = TestClient(app)


def _record(**extra):
    record = logging.LogRecord("app.reconcile", logging.DEBUG, __file__, 1, "meeting reconciled", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_merges_structured_fields():
    line = JsonFormatter().format(_record(fields={"meeting_id": 4, "tasks": 3, "level": "spoofed"}))
    data = json.loads(line)
    assert data["logger"] == "app.reconcile"
    assert data["message"] == "meeting reconciled"
    assert data["meeting_id"] == 4 and data["tasks"] == 3
    assert data["level"] == "DEBUG"


def test_formatter_without_fields():
    data = json.loads(JsonFormatter().format(_record()))
    assert set(data) == {"level", "ts", "logger", "message"}


def test_resolve_level():
    assert resolve_level("debug") == logging.DEBUG
    assert resolve_level("15") == 15
    assert resolve_level("nonsense") == logging.INFO
    assert resolve_level(None, default=logging.WARNING) == logging.WARNING


def test_responses_carry_request_id():
    r = client.get("/health")
    assert len(r.headers["x-request-id"]) == 12
