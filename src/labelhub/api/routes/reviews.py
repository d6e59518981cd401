"""Review endpoints: verdicts, audits and the reviewer queue."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.exceptions import LabelhubError
from ...core.schemas import (
    AuditReviewRequest,
    ChecklistItem,
    ReviewLogResponse,
    ReviewRequest,
    ReviewTaskResponse,
)
from ...core.services import AuditEngine, ProjectionService, ReviewEngine
from ..dependencies import get_current_user_id, get_session

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/submit", response_model=ReviewLogResponse)
async def review_task(
    request: ReviewRequest,
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
):
    """(Reviewer) Approve or reject a submitted assignment."""
    try:
        engine = ReviewEngine(session)
        return await engine.review(
            reviewer_id=user_id,
            assignment_id=request.assignment_id,
            is_approved=request.is_approved,
            error_category=request.error_category,
            comment=request.comment,
        )
    except LabelhubError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception as e:
        await session.rollback()
        logger.error(f"Error reviewing assignment {request.assignment_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/audit", response_model=ReviewLogResponse)
async def audit_review(
    request: AuditReviewRequest,
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
):
    """(Manager) Agree or disagree with a past review to score the reviewer."""
    try:
        return await AuditEngine(session).audit(
            manager_id=user_id,
            review_log_id=request.review_log_id,
            is_correct_decision=request.is_correct_decision,
        )
    except LabelhubError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception as e:
        await session.rollback()
        logger.error(f"Error auditing review log {request.review_log_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/project/{project_id}", response_model=list[ReviewTaskResponse])
async def get_review_queue(
    project_id: int,
    status: Optional[str] = Query(None, description="Filter by assignment status"),
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
):
    """(Reviewer) The caller's assignments in a project with their payloads."""
    try:
        return await ProjectionService(session).list_for_reviewer(project_id, user_id, status)
    except LabelhubError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get("/project/{project_id}/error-categories", response_model=list[ChecklistItem])
async def get_error_categories(
    project_id: int,
    session: AsyncSession = Depends(get_session),
):
    """Checklist codes available when rejecting work in a project."""
    try:
        return await ProjectionService(session).get_error_categories(project_id)
    except LabelhubError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
