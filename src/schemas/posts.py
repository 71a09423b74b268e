from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict, Field

MAX_TITLE_LENGTH = 200
MAX_BODY_LENGTH = 10000
DEFAULT_SUMMARY_LENGTH = 50
ELLIPSIS = "..."

TITLE_REQUIRED = "Title is required."
BODY_REQUIRED = "Body is required."
TITLE_TOO_LONG = f"Title must be {MAX_TITLE_LENGTH} characters or fewer."
BODY_TOO_LONG = "Body is too long."


def post_url(post_id: object) -> str:
    return f"/posts/{post_id}"


def post_summary(body: str, max_length: int = DEFAULT_SUMMARY_LENGTH) -> str:
    """Return the first ``max_length`` characters of ``body``, marked with an ellipsis when cut."""
    if max_length < 0:
        raise ValueError("max_length must be >= 0")
    if len(body) <= max_length:
        return body
    return body[:max_length] + ELLIPSIS


def normalize_text(value: object) -> str:
    """Coerce raw form input to text: anything that is not a string counts as empty."""
    return value.strip() if isinstance(value, str) else ""


@dataclass(frozen=True)
class PostFormResult:
    """Outcome of validating a submitted post form. Empty ``errors`` means valid."""

    title: str
    body: str
    errors: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def _validate(title: object, body: object, *, limit_body: bool) -> PostFormResult:
    clean_title = normalize_text(title)
    clean_body = normalize_text(body)

    errors: list[str] = []
    if not clean_title:
        errors.append(TITLE_REQUIRED)
    if not clean_body:
        errors.append(BODY_REQUIRED)
    if len(clean_title) > MAX_TITLE_LENGTH:
        errors.append(TITLE_TOO_LONG)
    if limit_body and len(clean_body) > MAX_BODY_LENGTH:
        errors.append(BODY_TOO_LONG)

    return PostFormResult(title=clean_title, body=clean_body, errors=errors)


def validate_new_post(title: object, body: object) -> PostFormResult:
    return _validate(title, body, limit_body=True)


def validate_post_update(title: object, body: object) -> PostFormResult:
    # Edits are not held to MAX_BODY_LENGTH; only new posts are
    return _validate(title, body, limit_body=False)


class PostOut(BaseModel):
    """Post as shown on its detail page."""

    id: str = Field(..., description="Post ID")
    title: str = Field(..., description="Post title")
    body: str = Field(..., description="Post body")
    url: str = Field(..., description="Canonical post location")

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_post(cls, post) -> "PostOut":
        return cls(id=post.id, title=post.title, body=post.body, url=post_url(post.id))


class PostListItem(PostOut):
    """Post as shown in the list, with a truncated body."""

    summary: str = Field(..., description="Truncated body")

    @classmethod
    def from_post(cls, post, summary_length: int = DEFAULT_SUMMARY_LENGTH) -> "PostListItem":
        return cls(
            id=post.id,
            title=post.title,
            body=post.body,
            url=post_url(post.id),
            summary=post_summary(post.body, summary_length),
        )


class PostFormValues(BaseModel):
    """Values that prefill the edit form."""

    id: str = Field(..., description="Post ID")
    title: str = Field(default="", description="Post title")
    body: str = Field(default="", description="Post body")
