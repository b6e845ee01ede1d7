from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, Field

from .analysis import AnalysisResults, BlockerItem, RowId, TaskItem


class MeetingTask(BaseModel):
    id: RowId
    description: str = ""
    completed: bool = False
    priority: Optional[str] = None


class MeetingEmailDraft(BaseModel):
    id: RowId
    subject: Optional[str] = None
    body: str = ""
    recipient: Optional[str] = None
    status: Optional[str] = Field(None, description="draft|sent")


class MeetingCalendarEvent(BaseModel):
    id: RowId
    title: str = ""
    description: Optional[str] = None
    start_time: Optional[str] = Field(None, description="ISO timestamp")
    end_time: Optional[str] = Field(None, description="ISO timestamp")
    timezone: Optional[str] = None
    status: Optional[str] = Field(None, description="pending|created")


class MeetingBlocker(BaseModel):
    id: RowId
    description: str = ""
    severity: Optional[str] = None
    resolved: bool = False


class MeetingWithRelations(BaseModel):
    """A persisted meeting with its relational rows, as read from storage."""

    id: Optional[RowId] = None
    title: Optional[str] = None
    transcript: Optional[str] = None
    summary: Optional[str] = Field(None, description="Summary column; may still hold model JSON")
    status: Optional[str] = Field(None, description="pending|analyzing|analyzed|failed|resolved")
    created_at: Optional[str] = Field(None, description="ISO timestamp if available")
    raw_analysis: Any = Field(None, description="Frozen freeform payload captured at analysis time")
    tasks: List[MeetingTask] = Field(default_factory=list)
    email_drafts: List[MeetingEmailDraft] = Field(default_factory=list)
    calendar_events: List[MeetingCalendarEvent] = Field(default_factory=list)
    blockers: List[MeetingBlocker] = Field(default_factory=list)


class MeetingResultsRequest(BaseModel):
    meeting: MeetingWithRelations
    overrides: Optional[AnalysisResults] = None


class TriageResponse(BaseModel):
    ok: bool = True
    tasks: List[TaskItem]
    blockers: List[BlockerItem]
    pending_emails: int
    pending_events: int
    completion_rate: int
