"""FastAPI dependencies shared by the route modules."""
from typing import AsyncIterator

from fastapi import Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.storage.database import get_db


async def get_session() -> AsyncIterator[AsyncSession]:
    """Get database session dependency."""
    db = get_db()
    async with db.session() as session:
        yield session


async def get_current_user_id(x_user_id: str = Header(default="", alias="X-User-Id")) -> str:
    """Caller identity, already authenticated upstream and forwarded as a header."""
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Missing caller identity")
    return x_user_id
