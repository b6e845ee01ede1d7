from __future__ import annotations

from fastapi import APIRouter, Depends

from ..models.analysis import AnalysisResults
from ..models.meeting import MeetingResultsRequest, TriageResponse
from ..services import triage
from ..services.reconcile import build_results_from_meeting
from . import check_payload_size

router = APIRouter(tags=["meetings"], dependencies=[Depends(check_payload_size)])


@router.post("/meeting/results", response_model=AnalysisResults, response_model_exclude_none=True)
def v1_meeting_results(payload: MeetingResultsRequest) -> AnalysisResults:
    return build_results_from_meeting(payload.meeting, payload.overrides)


@router.post("/meeting/triage", response_model=TriageResponse, response_model_exclude_none=True)
def v1_meeting_triage(payload: MeetingResultsRequest) -> TriageResponse:
    results = build_results_from_meeting(payload.meeting, payload.overrides)
    return TriageResponse(
        tasks=triage.pending_tasks(triage.sort_tasks_by_priority(results.next_tasks)),
        blockers=triage.pending_blockers(triage.sort_blockers_by_severity(results.blockers)),
        pending_emails=len(triage.pending_emails(results.email)),
        pending_events=len(triage.pending_events(results.calendar)),
        completion_rate=triage.completion_rate(results.next_tasks),
    )
