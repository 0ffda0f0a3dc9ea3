import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.errors import to_http_error
from app.deps.common import get_db_session, get_linking_config, get_trace_id
from core.config import LinkingSettings
from core.schemas import Language
from linking.candidates import Direction
from linking.reconcile import ReconcileReport
from service.dto import (
    AutoLinkRequestDTO,
    AutoLinkResponseDTO,
    CandidatesResponseDTO,
    LinkRequestDTO,
    LinkResponseDTO,
    ReconcileRequestDTO,
    UnlinkRequestDTO,
)
from service import linking_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/links", tags=["links"])


@router.get("/candidates", response_model=CandidatesResponseDTO)
def get_candidates(
    account_id: str,
    direction: Direction,
    source_id: str,
    language: Optional[Language] = None,
    search: Optional[str] = Query(default=None, max_length=200),
    session: Session = Depends(get_db_session),
    trace_id: str = Depends(get_trace_id),
    settings: LinkingSettings = Depends(get_linking_config)
) -> CandidatesResponseDTO:
    """List videos or content records that the source can be linked to"""
    try:
        return linking_service.list_candidates(
            account_id,
            direction,
            source_id,
            language=language,
            search=search,
            trace_id=trace_id,
            session=session,
            settings=settings
        )
    except Exception as e:
        raise to_http_error(e, trace_id)


@router.post("/auto", response_model=AutoLinkResponseDTO)
def auto_link(
    request: AutoLinkRequestDTO,
    session: Session = Depends(get_db_session),
    trace_id: str = Depends(get_trace_id),
    settings: LinkingSettings = Depends(get_linking_config)
) -> AutoLinkResponseDTO:
    """Link the source to its best title match, if any clears the threshold"""
    try:
        logger.info("Auto-link API request received", extra={
            "trace_id": trace_id,
            "account_id": request.account_id,
            "direction": request.direction.value
        })

        response = linking_service.auto_link(request, trace_id=trace_id, session=session, settings=settings)

        logger.info("Auto-link API request completed", extra={
            "trace_id": trace_id,
            "linked": response.linked
        })
        return response

    except Exception as e:
        raise to_http_error(e, trace_id)


@router.post("", response_model=LinkResponseDTO)
def link(
    request: LinkRequestDTO,
    session: Session = Depends(get_db_session),
    trace_id: str = Depends(get_trace_id)
) -> LinkResponseDTO:
    try:
        return linking_service.link_videos(request, trace_id=trace_id, session=session)
    except Exception as e:
        raise to_http_error(e, trace_id)


@router.delete("", response_model=LinkResponseDTO)
def unlink(
    request: UnlinkRequestDTO,
    session: Session = Depends(get_db_session),
    trace_id: str = Depends(get_trace_id)
) -> LinkResponseDTO:
    try:
        return linking_service.unlink_videos(request, trace_id=trace_id, session=session)
    except Exception as e:
        raise to_http_error(e, trace_id)


@router.post("/reconcile", response_model=ReconcileReport)
def reconcile(
    request: ReconcileRequestDTO,
    session: Session = Depends(get_db_session),
    trace_id: str = Depends(get_trace_id)
) -> ReconcileReport:
    """Clear links whose content record is gone or whose titles no longer match"""
    try:
        return linking_service.reconcile_links(request, trace_id=trace_id, session=session)
    except Exception as e:
        raise to_http_error(e, trace_id)
