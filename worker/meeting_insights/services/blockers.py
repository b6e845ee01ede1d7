from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..models.analysis import BlockerItem
from . import aliases
from .shapes import (
    Ladder,
    best_text,
    first_present,
    first_text,
    has_key,
    optional_bool,
    optional_id,
    str_list,
    text_or_none,
)


def _blocker_from_fields(obj: Dict[str, Any]) -> Optional[BlockerItem]:
    description = first_text(obj, aliases.BLOCKER_TEXT)
    if not description or not description.strip():
        return None
    return BlockerItem(
        id=optional_id(obj.get("id")),
        type=text_or_none(obj.get("type")),
        title=text_or_none(obj.get("title")),
        description=description,
        quote=text_or_none(obj.get("quote")),
        timestamp=text_or_none(obj.get("timestamp")),
        severity=text_or_none(obj.get("severity")),
        impact=text_or_none(obj.get("impact")),
        references=str_list(obj.get("references")),
        evidence_quotes=str_list(first_present(obj, aliases.BLOCKER_EVIDENCE)),
        missing_info=str_list(first_present(obj, aliases.BLOCKER_MISSING)),
        resolved=optional_bool(obj.get("resolved")),
    )


def _from_record(obj: Dict[str, Any]) -> List[BlockerItem]:
    items = first_present(obj, aliases.BLOCKER_ITEMS)
    if isinstance(items, (list, tuple)):
        return _LADDER.run(items, reparsed=True)

    # open_questions, uncertainties, risks and blockers all read as blockers
    groups = [obj[key] for key in aliases.BLOCKER_GROUPS if isinstance(obj.get(key), (list, tuple))]
    if groups:
        out: List[BlockerItem] = []
        for group in groups:
            out.extend(_LADDER.run(group, reparsed=True))
        return out

    if has_key(obj, aliases.BLOCKER_TEXT):
        record = _blocker_from_fields(obj)
        return [record] if record else []
    record = _from_text(best_text(obj))
    return [record] if record else []


def _from_fields(fields: Dict[str, str], raw: str) -> Optional[BlockerItem]:
    return _blocker_from_fields({"description": raw, **fields})


def _from_text(text: str) -> Optional[BlockerItem]:
    return BlockerItem(description=text) if text.strip() else None


_LADDER = Ladder(
    name="blockers",
    from_record=_from_record,
    from_fields=_from_fields,
    from_text=_from_text,
    regex_table=aliases.BLOCKER_REGEX_FIELDS,
    split_text=True,
)


def parse_blockers(value: Any) -> List[BlockerItem]:
    return [b for b in _LADDER.parse(value) if b.description.strip()]
