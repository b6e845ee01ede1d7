from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..models.analysis import BlockerItem, CalendarEvent, EmailData, TaskItem
from .shapes import Shape, as_record, classify, first_text

_PRIORITY_RANK: Dict[str, int] = {"urgent": 3, "high": 3, "medium": 2, "normal": 2, "low": 1}
_SEVERITY_RANK: Dict[str, int] = {"critical": 3, "high": 3, "medium": 2, "low": 1}

STORAGE_PRIORITIES = ("low", "normal", "high", "urgent")


def priority_rank(value: Optional[str]) -> int:
    return _PRIORITY_RANK.get((value or "").strip().lower(), 0)


def severity_rank(value: Optional[str]) -> int:
    return _SEVERITY_RANK.get((value or "").strip().lower(), 0)


def sort_tasks_by_priority(tasks: List[TaskItem]) -> List[TaskItem]:
    # sorted() is stable: equal ranks keep their original order
    return sorted(tasks, key=lambda t: priority_rank(t.priority), reverse=True)


def sort_blockers_by_severity(blockers: List[BlockerItem]) -> List[BlockerItem]:
    return sorted(blockers, key=lambda b: severity_rank(b.severity), reverse=True)


def pending_tasks(tasks: List[TaskItem]) -> List[TaskItem]:
    return [t for t in tasks if not t.completed]


def pending_blockers(blockers: List[BlockerItem]) -> List[BlockerItem]:
    return [b for b in blockers if not b.resolved]


def pending_emails(emails: List[EmailData]) -> List[EmailData]:
    return [e for e in emails if e.status != "sent"]


def pending_events(events: List[CalendarEvent]) -> List[CalendarEvent]:
    return [e for e in events if e.status != "created"]


def completion_rate(tasks: List[TaskItem]) -> int:
    """Percentage of completed tasks, halves rounded up; 0 for no tasks."""
    if not tasks:
        return 0
    done = sum(1 for t in tasks if t.completed)
    return int(done * 100 / len(tasks) + 0.5)


def storage_priority(task: Any) -> str:
    """Priority label as the tasks table accepts it: low|normal|high|urgent.

    Reads priority, then importance, then severity; anything else is "normal".
    """
    if classify(task) is not Shape.RECORD:
        return "normal"
    label = (first_text(as_record(task), ("priority", "importance", "severity")) or "normal").strip().lower()
    return label if label in STORAGE_PRIORITIES else "normal"
