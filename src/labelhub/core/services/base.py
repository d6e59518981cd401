"""Shared plumbing for the request-scoped services."""
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from ..exceptions import ConflictError
from ..storage.repositories import (
    AnnotationRepository,
    AssignmentRepository,
    DataItemRepository,
    ProjectRepository,
    ReviewLogRepository,
    UserProjectStatRepository,
    UserRepository,
)

logger = logging.getLogger(__name__)


class BaseService:
    """Holds the session and one repository per entity type."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.users = UserRepository(session)
        self.projects = ProjectRepository(session)
        self.data_items = DataItemRepository(session)
        self.assignments = AssignmentRepository(session)
        self.annotations = AnnotationRepository(session)
        self.review_logs = ReviewLogRepository(session)
        self.stats = UserProjectStatRepository(session)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        """Commit everything staged in the block, or nothing at all.

        Any exception rolls the session back. Version mismatches and
        uniqueness violations mean another operation wrote the same rows
        first and surface as ConflictError.
        """
        try:
            yield
            await self.session.commit()
        except (StaleDataError, IntegrityError) as e:
            await self.session.rollback()
            logger.warning(f"Concurrent write conflict: {e}")
            raise ConflictError(
                "The record was modified by another operation. Reload and try again."
            ) from e
        except Exception:
            await self.session.rollback()
            raise
