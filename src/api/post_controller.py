# api/post_controller.py
import logging
from typing import Any

from fastapi import APIRouter, Request, status
from fastapi.responses import HTMLResponse, PlainTextResponse, RedirectResponse, Response

from api.templating import templates
from api.utils.request_context import extract_method_override, read_submission
from core.config import settings
from core.deps import PostRepo
from core.exceptions import PostFormError
from db.repositories.post_repository import PostRepository
from schemas.posts import PostFormValues, post_url
from services import post_service

logger = logging.getLogger(__name__)

posts_router = APIRouter(prefix="/posts", tags=["Posts"])

LIST_LOCATION = "/posts/"
METHOD_NOT_ALLOWED = "Method Not Allowed. Use method-override for PUT/DELETE."


def _redirect(location: str) -> RedirectResponse:
    return RedirectResponse(location, status_code=status.HTTP_302_FOUND)


def _render(request: Request, name: str, context: dict[str, Any], status_code: int = status.HTTP_200_OK) -> HTMLResponse:
    return templates.TemplateResponse(request, name, context, status_code=status_code)


async def _update(request: Request, repo: PostRepository, post_id: str, submission: dict[str, Any]) -> Response:
    try:
        post = await post_service.update_post(repo, post_id, submission.get("title"), submission.get("body"))
    except PostFormError as e:
        values = PostFormValues(id=post_id, title=e.title, body=e.body)
        return _render(
            request,
            "edit.html",
            {"errors": e.errors, "post": values},
            status_code=status.HTTP_400_BAD_REQUEST,
        )
    return _redirect(post_url(post.id))


async def _delete(repo: PostRepository, post_id: str) -> Response:
    await post_service.delete_post(repo, post_id)
    return _redirect(LIST_LOCATION)


@posts_router.get("", response_class=HTMLResponse, include_in_schema=False)
@posts_router.get(
    "/",
    response_class=HTMLResponse,
    summary="List posts",
    description="Render every post with its URL and a truncated summary.",
)
async def list_posts(request: Request, repo: PostRepo) -> HTMLResponse:
    posts = await post_service.list_posts(repo, summary_length=settings.views.summary_length)
    return _render(request, "index.html", {"posts": posts})


@posts_router.get("/new", response_class=HTMLResponse, summary="New post form")
async def show_new_post_form(request: Request) -> HTMLResponse:
    return _render(request, "new.html", {"errors": [], "title": "", "body": ""})


@posts_router.post(
    "/new",
    summary="Create post",
    description="Validate the submitted title and body, store the post and redirect to it.",
)
async def create_post(request: Request, repo: PostRepo) -> Response:
    submission = await read_submission(request)
    try:
        post = await post_service.create_post(repo, submission.get("title"), submission.get("body"))
    except PostFormError as e:
        return _render(
            request,
            "new.html",
            {"errors": e.errors, "title": e.title, "body": e.body},
            status_code=status.HTTP_400_BAD_REQUEST,
        )
    return _redirect(post_url(post.id))


@posts_router.get("/{post_id}", response_class=HTMLResponse, summary="Show post")
async def get_post(request: Request, post_id: str, repo: PostRepo) -> HTMLResponse:
    post = await post_service.get_post(repo, post_id)
    return _render(request, "detail.html", {"post": post})


@posts_router.get("/{post_id}/edit", response_class=HTMLResponse, summary="Edit post form")
async def show_edit_form(request: Request, post_id: str, repo: PostRepo) -> HTMLResponse:
    post = await post_service.get_post_for_edit(repo, post_id)
    return _render(request, "edit.html", {"errors": [], "post": post})


@posts_router.put(
    "/{post_id}",
    summary="Update post",
    description="Replace title and body of a post and redirect to it.",
)
async def update_post(request: Request, post_id: str, repo: PostRepo) -> Response:
    submission = await read_submission(request)
    return await _update(request, repo, post_id, submission)


@posts_router.post("/{post_id}/update", summary="Update post (HTML form)")
async def update_post_form(request: Request, post_id: str, repo: PostRepo) -> Response:
    submission = await read_submission(request)
    return await _update(request, repo, post_id, submission)


@posts_router.delete("/{post_id}", summary="Delete post")
async def delete_post(post_id: str, repo: PostRepo) -> Response:
    return await _delete(repo, post_id)


@posts_router.post("/{post_id}/delete", summary="Delete post (HTML form)")
async def delete_post_form(post_id: str, repo: PostRepo) -> Response:
    return await _delete(repo, post_id)


@posts_router.post(
    "/{post_id}",
    summary="Method override",
    description="HTML forms can only POST; a `_method` field or query parameter selects PUT or DELETE.",
)
async def override_post_method(request: Request, post_id: str, repo: PostRepo) -> Response:
    submission = await read_submission(request)
    method = extract_method_override(request, submission)
    if method == "PUT":
        return await _update(request, repo, post_id, submission)
    if method == "DELETE":
        return await _delete(repo, post_id)

    logger.debug("POST /posts/%s without usable method override (got %r)", post_id, method)
    return PlainTextResponse(METHOD_NOT_ALLOWED, status_code=status.HTTP_405_METHOD_NOT_ALLOWED)
