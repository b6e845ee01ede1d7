from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..models.analysis import TaskItem
from . import aliases
from .shapes import Ladder, best_text, first_present, first_text, has_key, optional_bool, optional_id, str_list, text_or_none


def _task_from_fields(obj: Dict[str, Any]) -> Optional[TaskItem]:
    task = first_text(obj, aliases.TASK_TEXT)
    if not task or not task.strip():
        return None
    return TaskItem(
        id=optional_id(obj.get("id")),
        task=task,
        owner=first_text(obj, aliases.TASK_OWNER),
        rationale=text_or_none(obj.get("rationale")),
        priority=text_or_none(obj.get("priority")),
        references=str_list(obj.get("references")),
        completed=optional_bool(obj.get("completed")),
    )


def _from_record(obj: Dict[str, Any]) -> List[TaskItem]:
    container = first_present(obj, aliases.TASK_CONTAINER)
    if container is not None:
        return _LADDER.run(container, reparsed=True)
    if has_key(obj, aliases.TASK_TEXT):
        record = _task_from_fields(obj)
        return [record] if record else []
    record = _from_text(best_text(obj))
    return [record] if record else []


def _from_fields(fields: Dict[str, str], raw: str) -> Optional[TaskItem]:
    return _task_from_fields({"task": raw, **fields})


def _from_text(text: str) -> Optional[TaskItem]:
    return TaskItem(task=text) if text.strip() else None


_LADDER = Ladder(
    name="tasks",
    from_record=_from_record,
    from_fields=_from_fields,
    from_text=_from_text,
    regex_table=aliases.TASK_REGEX_FIELDS,
    split_text=True,
)


def parse_tasks(value: Any) -> List[TaskItem]:
    """Normalize next-step/action-item output to TaskItems.

    Fields beyond the task text (rationale, priority, references, id,
    completed) are carried through when present; entries with blank task
    text are dropped.
    """
    return [t for t in _LADDER.parse(value) if t.task.strip()]
