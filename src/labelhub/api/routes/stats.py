"""Statistics endpoints"""
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.exceptions import LabelhubError
from ...core.schemas import AnnotatorStatsResponse, UserProjectStatResponse
from ...core.services import ProjectionService
from ..dependencies import get_current_user_id, get_session

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/me", response_model=AnnotatorStatsResponse)
async def get_my_stats(
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
):
    """Statistics of the caller across all projects."""
    try:
        return await ProjectionService(session).get_annotator_stats(user_id)
    except Exception as e:
        logger.error(f"Error getting statistics for {user_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/{user_id}/project/{project_id}", response_model=UserProjectStatResponse)
async def get_user_project_stats(
    user_id: str,
    project_id: int,
    session: AsyncSession = Depends(get_session),
):
    """Statistics of one user in one project."""
    try:
        return await ProjectionService(session).get_user_project_stat(user_id, project_id)
    except LabelhubError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
