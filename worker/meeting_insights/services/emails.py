from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..models.analysis import EmailData
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
    text_or_none,
)

_FIELDS = aliases.EMAIL_FIELDS


def _recipient_text(value: Any) -> str:
    if classify(value) is Shape.RECORD:
        return first_text(as_record(value), aliases.ATTENDEE_TEXT) or ""
    return best_text(value)


def _email_from_fields(obj: Dict[str, Any]) -> Optional[EmailData]:
    body = first_text(obj, _FIELDS["body"])
    if not body or not body.strip():
        return None
    return EmailData(
        id=optional_id(obj.get("id")),
        reason=first_text(obj, _FIELDS["reason"]),
        recipients=str_list(first_present(obj, _FIELDS["recipients"]), formatter=_recipient_text) or [],
        subject=first_text(obj, _FIELDS["subject"]),
        body=body,
        references=str_list(first_present(obj, _FIELDS["references"])),
        status=text_or_none(obj.get("status")),
    )


def _from_record(obj: Dict[str, Any]) -> List[EmailData]:
    container = first_present(obj, aliases.EMAIL_CONTAINER)
    if isinstance(container, (list, tuple)):
        return _LADDER.run(container, reparsed=True)
    if has_key(obj, _FIELDS["body"]) or has_key(obj, _FIELDS["subject"]):
        record = _email_from_fields(obj)
        return [record] if record else []
    record = _from_text(best_text(obj))
    return [record] if record else []


def _from_fields(fields: Dict[str, str], raw: str) -> Optional[EmailData]:
    return _email_from_fields({"body": raw, **fields})


def _from_text(text: str) -> Optional[EmailData]:
    return EmailData(body=text) if text.strip() else None


_LADDER = Ladder(
    name="email",
    from_record=_from_record,
    from_fields=_from_fields,
    from_text=_from_text,
    regex_table=aliases.EMAIL_REGEX_FIELDS,
)


def parse_emails(value: Any) -> List[EmailData]:
    """Normalize follow-up email drafts to EmailData.

    A reply holding several fenced JSON drafts yields one entry per draft;
    plain text becomes the body of a single draft.
    """
    return [e for e in _LADDER.parse(value) if e.body.strip()]
