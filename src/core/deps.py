from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from db.database import get_db
from db.repositories.post_repository import PostRepository, SqlPostRepository


def get_post_repository(db: Annotated[AsyncSession, Depends(get_db)]) -> PostRepository:
    """Request-scoped repository bound to the request's DB session.

    Tests override this dependency with an in-memory repository.
    """
    return SqlPostRepository(db)


PostRepo = Annotated[PostRepository, Depends(get_post_repository)]
