from __future__ import annotations

from typing import Any, List, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

RowId = Union[int, str]

NO_SUMMARY_TEXT = "No summary generated"


class _Record(BaseModel):
    # Records are values: build a new one with model_copy(update=...) instead of mutating
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    def dump(self) -> dict:
        """Serialized (camelCase) form without unset optional fields."""
        return self.model_dump(by_alias=True, exclude_none=True)


class SummaryData(_Record):
    text: str
    bullets: List[str] = Field(default_factory=list)


class TaskItem(_Record):
    id: Optional[RowId] = Field(None, description="Row id, present once reconciled against storage")
    task: str
    owner: Optional[str] = None
    rationale: Optional[str] = None
    priority: Optional[str] = Field(None, description="Free-form label, ranked by triage")
    references: Optional[List[str]] = None
    completed: Optional[bool] = None


class BlockerItem(_Record):
    id: Optional[RowId] = None
    type: Optional[str] = None
    title: Optional[str] = None
    description: str
    quote: Optional[str] = None
    timestamp: Optional[str] = None
    severity: Optional[str] = None
    impact: Optional[str] = None
    references: Optional[List[str]] = None
    evidence_quotes: Optional[List[str]] = Field(None, alias="evidenceQuotes")
    missing_info: Optional[List[str]] = Field(None, alias="missingInfo")
    resolved: Optional[bool] = None


class CalendarEvent(_Record):
    id: Optional[RowId] = None
    title: str
    description: Optional[str] = None
    start_time: Optional[str] = Field(None, alias="startTime", description="ISO-8601")
    end_time: Optional[str] = Field(None, alias="endTime", description="ISO-8601")
    timezone: Optional[str] = None
    attendees: List[str] = Field(default_factory=list)
    status: Optional[str] = None
    references: Optional[List[str]] = None
    missing_info: Optional[List[str]] = Field(None, alias="missingInfo")


class EmailData(_Record):
    id: Optional[RowId] = None
    reason: Optional[str] = None
    recipients: List[str] = Field(default_factory=list)
    subject: Optional[str] = None
    body: str
    references: Optional[List[str]] = None
    status: Optional[str] = Field(None, description="Draft state carried over from storage")


class AnalysisResults(_Record):
    summary: SummaryData = Field(default_factory=lambda: SummaryData(text=NO_SUMMARY_TEXT))
    next_tasks: List[TaskItem] = Field(default_factory=list, alias="nextTasks")
    email: List[EmailData] = Field(default_factory=list)
    calendar: List[CalendarEvent] = Field(default_factory=list)
    blockers: List[BlockerItem] = Field(default_factory=list)


class RawAnalysis(BaseModel):
    """Freeform analysis payload; every field may hold any shape."""

    summary: Any = None
    next_tasks: Any = Field(None, validation_alias=AliasChoices("nextTasks", "next_tasks"))
    email: Any = Field(None, validation_alias=AliasChoices("email", "emails"))
    calendar: Any = None
    blockers: Any = None
