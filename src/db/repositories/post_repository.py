import logging
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from db.models.post import Post, is_post_id, new_post_id, utcnow
from db.repositories.decorators import handle_db_errors
from db.utils import transactional

logger = logging.getLogger(__name__)


class PostRepository(Protocol):
    """Persistence boundary for posts.

    ``None``/``False`` results mean the post does not exist; store failures
    raise ``DatabaseError``.
    """

    async def create(self, title: str, body: str) -> Post: ...

    async def list_all(self) -> list[Post]: ...

    async def find_by_id(self, post_id: str) -> Post | None: ...

    async def update_by_id(self, post_id: str, title: str, body: str) -> Post | None: ...

    async def delete_by_id(self, post_id: str) -> bool: ...


class SqlPostRepository:
    """PostRepository backed by a SQLAlchemy AsyncSession.

    Each write commits on success and rolls back on failure.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @handle_db_errors("post")
    @transactional
    async def create(self, title: str, body: str) -> Post:
        new_post = Post(title=title, body=body)
        self.session.add(new_post)
        await self.session.flush()
        await self.session.refresh(new_post)
        logger.info("Created new post with id %s", new_post.id)
        return new_post

    @handle_db_errors("post")
    async def list_all(self) -> list[Post]:
        stmt = select(Post).order_by(Post.created_at, Post.id)
        res = await self.session.execute(stmt)
        return list(res.scalars().all())

    @handle_db_errors("post")
    async def find_by_id(self, post_id: str) -> Post | None:
        if not is_post_id(post_id):
            # Malformed ids are unknown ids and never reach the store
            logger.info("Post with id %r not found", post_id)
            return None

        stmt = select(Post).where(Post.id == post_id)
        res = await self.session.execute(stmt)
        post = res.scalars().first()
        if not post:
            logger.info("Post with id %s not found", post_id)
        return post

    @handle_db_errors("post")
    @transactional
    async def update_by_id(self, post_id: str, title: str, body: str) -> Post | None:
        post = await self.find_by_id(post_id)
        if not post:
            logger.info("Skip update: post %s not found", post_id)
            return None

        post.title = title
        post.body = body
        await self.session.flush()
        await self.session.refresh(post)
        logger.info("Updated post %s", post_id)
        return post

    @handle_db_errors("post")
    @transactional
    async def delete_by_id(self, post_id: str) -> bool:
        post = await self.find_by_id(post_id)
        if not post:
            logger.info("Skip delete: post %s not found", post_id)
            return False

        await self.session.delete(post)
        await self.session.flush()
        logger.info("Deleted post with id %s", post_id)
        return True


class InMemoryPostRepository:
    """Dict-backed PostRepository for tests and local experiments.

    Every read returns a fresh ``Post`` so callers cannot mutate stored state.
    Listing follows insertion order.
    """

    def __init__(self) -> None:
        self._records: dict[str, dict] = {}

    def __len__(self) -> int:
        return len(self._records)

    @staticmethod
    def _to_post(record: dict) -> Post:
        return Post(**record)

    async def create(self, title: str, body: str) -> Post:
        now = utcnow()
        record = {"id": new_post_id(), "title": title, "body": body, "created_at": now, "updated_at": now}
        self._records[record["id"]] = record
        return self._to_post(record)

    async def list_all(self) -> list[Post]:
        return [self._to_post(record) for record in self._records.values()]

    async def find_by_id(self, post_id: str) -> Post | None:
        record = self._records.get(post_id)
        return self._to_post(record) if record else None

    async def update_by_id(self, post_id: str, title: str, body: str) -> Post | None:
        record = self._records.get(post_id)
        if record is None:
            return None
        record.update(title=title, body=body, updated_at=utcnow())
        return self._to_post(record)

    async def delete_by_id(self, post_id: str) -> bool:
        return self._records.pop(post_id, None) is not None
