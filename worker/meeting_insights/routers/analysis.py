from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field

from ..config import Settings
from ..models.analysis import AnalysisResults, RawAnalysis
from ..services.aggregate import parse_analysis_results, summary_preview
from . import check_payload_size


class SummaryPreviewRequest(BaseModel):
    summary: Any = Field(default=None, description="Summary column or raw summary output")


router = APIRouter(tags=["analysis"], dependencies=[Depends(check_payload_size)])


@router.post("/analysis/parse", response_model=AnalysisResults, response_model_exclude_none=True)
def v1_parse_analysis(payload: RawAnalysis) -> AnalysisResults:
    return parse_analysis_results(payload)


@router.post("/analysis/summary_preview")
def v1_summary_preview(payload: SummaryPreviewRequest, request: Request) -> Dict[str, Any]:
    settings: Settings = request.app.state.settings
    return {"ok": True, "text": summary_preview(payload.summary, placeholder=settings.summary_placeholder)}
