from datetime import UTC, datetime
import uuid

from sqlalchemy import Column, DateTime, Index, String, Text

from ..database import Base

POST_ID_LENGTH = 32
TITLE_COLUMN_LENGTH = 200

POST_INDEXES = (
    # Listing walks posts in creation order
    Index("ix_post_created_id", "created_at", "id"),
)


def new_post_id() -> str:
    """Return a fresh opaque identifier for a post."""
    return uuid.uuid4().hex


def is_post_id(value: str) -> bool:
    """True when ``value`` has the shape of an id produced by ``new_post_id``."""
    return len(value) == POST_ID_LENGTH and all(c in "0123456789abcdef" for c in value)


def utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


class Post(Base):
    """SQLAlchemy model representing a blog post.

    Only stored fields live here; the canonical URL and the list summary are
    derived at read time by ``schemas.posts``.

    Attributes:
        id (str): Opaque identifier assigned on insert, never changed.
        title (str): Trimmed, non-empty title of at most 200 characters.
        body (str): Trimmed, non-empty post body.
        created_at (datetime): Insertion timestamp (naive UTC).
        updated_at (datetime): Last modification timestamp (naive UTC).
    """

    __tablename__ = "posts"
    __table_args__ = POST_INDEXES

    id = Column(
        String(POST_ID_LENGTH),
        primary_key=True,
        default=new_post_id,
        doc="Opaque post identifier",
    )
    title = Column(
        String(TITLE_COLUMN_LENGTH),
        nullable=False,
        doc="Post title with maximum 200 characters",
    )
    body = Column(
        Text,
        nullable=False,
        doc="Full post body",
    )
    created_at = Column(
        DateTime,
        default=utcnow,
        nullable=False,
        doc="Post creation timestamp",
    )
    updated_at = Column(
        DateTime,
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
        doc="Last modification timestamp",
    )

    def __repr__(self) -> str:
        title_value = getattr(self, "title", None)
        if isinstance(title_value, str) and title_value:
            title_repr = title_value[:30] + "..." if len(title_value) > 30 else title_value
        else:
            title_repr = ""
        return f"<Post(id={self.id}, title={title_repr!r})>"
