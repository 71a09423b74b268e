import logging

from core.exceptions import NotFoundError, PostFormError
from db.models.post import Post
from db.repositories.post_repository import PostRepository
from schemas.posts import (
    DEFAULT_SUMMARY_LENGTH,
    PostFormResult,
    PostFormValues,
    PostListItem,
    PostOut,
    validate_new_post,
    validate_post_update,
)

logger = logging.getLogger(__name__)

POST_NOT_FOUND = "Post not found"


def _reject(result: PostFormResult) -> PostFormError:
    return PostFormError(
        "Post form is invalid",
        details={"errors": list(result.errors)},
        errors=list(result.errors),
        title=result.title,
        body=result.body,
    )


async def list_posts(repo: PostRepository, summary_length: int = DEFAULT_SUMMARY_LENGTH) -> list[PostListItem]:
    posts = await repo.list_all()
    return [PostListItem.from_post(p, summary_length) for p in posts]


async def get_post(repo: PostRepository, post_id: str) -> PostOut:
    post = await repo.find_by_id(post_id)
    if not post:
        raise NotFoundError(POST_NOT_FOUND)
    return PostOut.from_post(post)


async def get_post_for_edit(repo: PostRepository, post_id: str) -> PostFormValues:
    post = await repo.find_by_id(post_id)
    if not post:
        raise NotFoundError(POST_NOT_FOUND)
    return PostFormValues(id=post.id, title=post.title, body=post.body)


async def create_post(repo: PostRepository, title: object, body: object) -> Post:
    """Validate a new post and store it.

    Raises:
        PostFormError: input is invalid; nothing was written.
    """
    result = validate_new_post(title, body)
    if not result.is_valid:
        logger.debug("Rejected new post: %s", result.errors)
        raise _reject(result)
    return await repo.create(result.title, result.body)


async def update_post(repo: PostRepository, post_id: str, title: object, body: object) -> Post:
    """Validate submitted values and replace title and body of an existing post.

    Validation runs before the post is looked up, so invalid input on an
    unknown id still reports PostFormError.
    """
    result = validate_post_update(title, body)
    if not result.is_valid:
        logger.debug("Rejected update of post %s: %s", post_id, result.errors)
        raise _reject(result)

    updated = await repo.update_by_id(post_id, result.title, result.body)
    if not updated:
        raise NotFoundError(POST_NOT_FOUND)
    return updated


async def delete_post(repo: PostRepository, post_id: str) -> None:
    deleted = await repo.delete_by_id(post_id)
    if not deleted:
        raise NotFoundError(POST_NOT_FOUND)
