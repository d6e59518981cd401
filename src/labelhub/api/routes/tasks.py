"""Task endpoints: allocation by managers, drafting and submission by annotators."""
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.exceptions import LabelhubError
from ...core.schemas import (
    AllocationResponse,
    AssignedProjectResponse,
    AssignmentResponse,
    AssignTaskRequest,
    MessageResponse,
    SubmitAnnotationRequest,
)
from ...core.services import AssignmentAllocator, LifecycleManager, ProjectionService
from ..dependencies import get_current_user_id, get_session

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/assign", response_model=AllocationResponse, status_code=201)
async def assign_tasks(
    request: AssignTaskRequest,
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
):
    """(Manager) Allocate unassigned data items to an annotator/reviewer pair."""
    try:
        allocator = AssignmentAllocator(session)
        assignments = await allocator.allocate(
            project_id=request.project_id,
            annotator_id=request.annotator_id,
            reviewer_id=request.reviewer_id,
            quantity=request.quantity,
        )
        logger.debug(f"Allocation requested by {user_id}")
        return AllocationResponse(
            message="Tasks assigned successfully.",
            project_id=request.project_id,
            assignment_ids=[a.id for a in assignments],
        )
    except LabelhubError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception as e:
        await session.rollback()
        logger.error(f"Error assigning tasks: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/my-projects", response_model=list[AssignedProjectResponse])
async def get_my_projects(
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
):
    """(Annotator) Assigned projects with progress, deadline and status."""
    try:
        return await ProjectionService(session).list_by_annotator(user_id)
    except Exception as e:
        logger.error(f"Error listing projects for {user_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/project/{project_id}/items", response_model=list[AssignmentResponse])
async def get_project_items(
    project_id: int,
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
):
    """(Annotator) Every assignment of the caller in a project, for navigation."""
    try:
        return await ProjectionService(session).list_by_project(project_id, user_id)
    except Exception as e:
        logger.error(f"Error listing items of project {project_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/project/{project_id}/jump/{data_item_id}", response_model=AssignmentResponse)
async def jump_to_item(
    project_id: int,
    data_item_id: int,
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
):
    """(Annotator) Open the assignment for a specific data item."""
    try:
        return await LifecycleManager(session).jump_to_data_item(project_id, data_item_id, user_id)
    except LabelhubError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get("/assignment/{assignment_id}", response_model=AssignmentResponse)
async def get_assignment(
    assignment_id: int,
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
):
    """(Annotator) One assignment with its data item, latest payload and deadline."""
    try:
        return await LifecycleManager(session).get_assignment_detail(assignment_id, user_id)
    except LabelhubError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.post("/save-draft", response_model=MessageResponse)
async def save_draft(
    request: SubmitAnnotationRequest,
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
):
    """(Annotator) Save the current draft; moves the task to in_progress."""
    try:
        await LifecycleManager(session).save_draft(user_id, request.assignment_id, request.data_json)
        return MessageResponse(message="Draft saved successfully.")
    except LabelhubError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception as e:
        await session.rollback()
        logger.error(f"Error saving draft: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/submit", response_model=MessageResponse)
async def submit_task(
    request: SubmitAnnotationRequest,
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
):
    """(Annotator) Submit the annotation for review."""
    try:
        await LifecycleManager(session).submit(user_id, request.assignment_id, request.data_json)
        return MessageResponse(message="Task submitted successfully.")
    except LabelhubError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception as e:
        await session.rollback()
        logger.error(f"Error submitting task: {e}")
        raise HTTPException(status_code=500, detail=str(e))
