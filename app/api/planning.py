import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.errors import to_http_error
from app.deps.common import get_db_session, get_planning_config, get_trace_id
from core.config import PlanningSettings
from planning.gap_analyzer import GapReport
from service.dto import (
    GapRequestDTO,
    ScheduleCommitRequestDTO,
    ScheduleCommitResponseDTO,
    ScheduleRequestDTO,
    ScheduleResponseDTO,
)
from service import planning_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/planning", tags=["planning"])


@router.post("/gap", response_model=GapReport)
def analyze_gap(
    request: GapRequestDTO,
    session: Session = Depends(get_db_session),
    trace_id: str = Depends(get_trace_id),
    settings: PlanningSettings = Depends(get_planning_config)
) -> GapReport:
    """Compare the posts needed until the target date with the unscheduled drafts"""
    try:
        logger.info("Gap analysis API request received", extra={
            "trace_id": trace_id,
            "account_id": request.account_id,
            "language": request.language.value
        })
        return planning_service.analyze_gap(request, trace_id=trace_id, session=session, settings=settings)
    except Exception as e:
        raise to_http_error(e, trace_id)


@router.post("/schedule", response_model=ScheduleResponseDTO)
def generate_schedule(
    request: ScheduleRequestDTO,
    session: Session = Depends(get_db_session),
    trace_id: str = Depends(get_trace_id),
    settings: PlanningSettings = Depends(get_planning_config)
) -> ScheduleResponseDTO:
    """Preview a schedule; nothing is written until it is committed"""
    try:
        return planning_service.generate_schedule(request, trace_id=trace_id, session=session, settings=settings)
    except Exception as e:
        raise to_http_error(e, trace_id)


@router.post("/schedule/commit", response_model=ScheduleCommitResponseDTO)
def commit_schedule(
    request: ScheduleCommitRequestDTO,
    session: Session = Depends(get_db_session),
    trace_id: str = Depends(get_trace_id)
) -> ScheduleCommitResponseDTO:
    try:
        response = planning_service.commit_schedule(request, trace_id=trace_id, session=session)
        logger.info("Schedule committed", extra={
            "trace_id": trace_id,
            "account_id": request.account_id,
            "applied": response.applied
        })
        return response
    except Exception as e:
        raise to_http_error(e, trace_id)
