"""Repository layer over the async session.

Repositories stage changes (add/update/delete and flush) but never commit;
the calling service owns the commit so each operation's writes land together.
"""
from typing import Any, Generic, Optional, Sequence, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..models import (
    Annotation,
    Assignment,
    DataItem,
    DataItemStatus,
    Project,
    ReviewLog,
    User,
    UserProjectStat,
)
from ..storage.database import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """Generic CRUD store for one entity type."""

    model: type[ModelT]

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, entity_id: Any) -> Optional[ModelT]:
        """Get an entity by primary key."""
        return await self.session.get(self.model, entity_id)

    async def list(self, limit: Optional[int] = None, offset: int = 0) -> list[ModelT]:
        """List entities ordered by primary key."""
        query = select(self.model).order_by(*self.model.__mapper__.primary_key).offset(offset)
        if limit is not None:
            query = query.limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    def add(self, entity: ModelT) -> ModelT:
        """Stage a new entity without flushing."""
        self.session.add(entity)
        return entity

    async def create(self, entity: ModelT) -> ModelT:
        """Stage a new entity and flush so its identifier is populated."""
        self.session.add(entity)
        await self.session.flush()
        return entity

    async def update(self, entity_id: Any, **fields: Any) -> Optional[ModelT]:
        """Set attributes on an existing entity and flush."""
        entity = await self.get(entity_id)
        if entity is None:
            return None
        for name, value in fields.items():
            setattr(entity, name, value)
        await self.session.flush()
        return entity

    async def delete(self, entity_id: Any) -> bool:
        """Delete an entity by primary key. Returns False if it did not exist."""
        entity = await self.get(entity_id)
        if entity is None:
            return False
        await self.session.delete(entity)
        await self.session.flush()
        return True

    async def commit(self) -> None:
        """Commit everything staged in the session."""
        await self.session.commit()


class UserRepository(BaseRepository[User]):
    model = User


class ProjectRepository(BaseRepository[Project]):
    model = Project


class DataItemRepository(BaseRepository[DataItem]):
    model = DataItem

    async def list_unassigned(self, project_id: int, limit: int) -> list[DataItem]:
        """Get up to ``limit`` new data items of a project, oldest first."""
        query = (
            select(DataItem)
            .where(
                DataItem.project_id == project_id,
                DataItem.status == DataItemStatus.NEW.value,
            )
            .order_by(DataItem.id)
            .limit(limit)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())


class AssignmentRepository(BaseRepository[Assignment]):
    model = Assignment

    def _with_details(self):
        return (
            select(Assignment)
            .options(
                selectinload(Assignment.project),
                selectinload(Assignment.data_item),
                selectinload(Assignment.annotations),
                selectinload(Assignment.review_logs),
            )
            .execution_options(populate_existing=True)
        )

    async def get_with_details(self, assignment_id: int) -> Optional[Assignment]:
        """Get an assignment with project, data item, annotations and review logs loaded."""
        result = await self.session.execute(
            self._with_details().where(Assignment.id == assignment_id)
        )
        return result.scalar_one_or_none()

    async def find_for_data_item(
        self, project_id: int, data_item_id: int, annotator_id: str
    ) -> Optional[Assignment]:
        """Find the annotator's assignment for a data item in a project."""
        query = (
            select(Assignment)
            .where(
                Assignment.project_id == project_id,
                Assignment.data_item_id == data_item_id,
                Assignment.annotator_id == annotator_id,
            )
            .order_by(Assignment.id.desc())
            .limit(1)
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def list_by_annotator(
        self, annotator_id: str, project_id: Optional[int] = None
    ) -> list[Assignment]:
        """List an annotator's assignments with details, optionally for one project."""
        query = self._with_details().where(Assignment.annotator_id == annotator_id)
        if project_id is not None:
            query = query.where(Assignment.project_id == project_id)
        result = await self.session.execute(query.order_by(Assignment.id))
        return list(result.scalars().all())

    async def list_for_reviewer(
        self, project_id: int, reviewer_id: str, status: Optional[str] = None
    ) -> list[Assignment]:
        """List a reviewer's assignments in a project, optionally by status."""
        query = self._with_details().where(
            Assignment.project_id == project_id,
            Assignment.reviewer_id == reviewer_id,
        )
        if status:
            query = query.where(Assignment.status == status)
        result = await self.session.execute(query.order_by(Assignment.id))
        return list(result.scalars().all())

    async def count_by_status(self) -> dict[str, int]:
        """Count assignments per status."""
        query = select(Assignment.status, func.count(Assignment.id)).group_by(Assignment.status)
        result = await self.session.execute(query)
        return {status: count for status, count in result.all()}


class AnnotationRepository(BaseRepository[Annotation]):
    model = Annotation

    async def list_by_assignment(self, assignment_id: int) -> list[Annotation]:
        """List annotations of an assignment, newest first."""
        query = (
            select(Annotation)
            .where(Annotation.assignment_id == assignment_id)
            .order_by(Annotation.created_at.desc(), Annotation.id.desc())
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())


class ReviewLogRepository(BaseRepository[ReviewLog]):
    model = ReviewLog

    async def list_by_assignment(self, assignment_id: int) -> list[ReviewLog]:
        """List review logs of an assignment, newest first."""
        query = (
            select(ReviewLog)
            .where(ReviewLog.assignment_id == assignment_id)
            .order_by(ReviewLog.created_at.desc(), ReviewLog.id.desc())
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def list_recent(self, limit: int = 20, verdict: Optional[str] = None) -> list[ReviewLog]:
        """List the most recent review logs."""
        query = select(ReviewLog).order_by(ReviewLog.created_at.desc(), ReviewLog.id.desc())
        if verdict:
            query = query.where(ReviewLog.verdict == verdict)
        result = await self.session.execute(query.limit(limit))
        return list(result.scalars().all())


class UserProjectStatRepository(BaseRepository[UserProjectStat]):
    model = UserProjectStat

    async def get_for(self, user_id: str, project_id: int) -> Optional[UserProjectStat]:
        """Keyed lookup of the stat row for (user, project).

        Always reloads the committed row so counters are incremented from
        the latest values; a concurrent commit after this read still fails
        the version check at flush.
        """
        query = (
            select(UserProjectStat)
            .where(
                UserProjectStat.user_id == user_id,
                UserProjectStat.project_id == project_id,
            )
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_or_create(
        self, user_id: str, project_id: int, **overrides: Any
    ) -> tuple[UserProjectStat, bool]:
        """Get the (user, project) row, staging a fresh one if absent.

        ``overrides`` replace starting values of a newly staged row only.

        Returns:
            Tuple of (stat, created)
        """
        stat = await self.get_for(user_id, project_id)
        if stat is not None:
            return stat, False

        stat = UserProjectStat.fresh(user_id, project_id, **overrides)
        self.session.add(stat)
        return stat, True

    async def list_by_user(self, user_id: str) -> Sequence[UserProjectStat]:
        """List all stat rows of a user ordered by project."""
        query = (
            select(UserProjectStat)
            .where(UserProjectStat.user_id == user_id)
            .order_by(UserProjectStat.project_id)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())
