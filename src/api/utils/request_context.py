import json
import logging
from typing import Any

from fastapi import Request

logger = logging.getLogger(__name__)

METHOD_OVERRIDE_FIELD = "_method"
FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


async def read_submission(request: Request) -> dict[str, Any]:
    """
    Read the submitted fields of a write request as a plain dict.

    Accepts url-encoded and multipart forms as well as JSON objects. Values are
    passed through untouched; anything unreadable yields an empty dict so that
    validation reports the missing fields.
    """
    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()

    if content_type in FORM_CONTENT_TYPES:
        form = await request.form()
        return {key: value for key, value in form.items()}

    if content_type == "application/json" or content_type.endswith("+json"):
        raw = await request.body()
        if not raw:
            return {}
        try:
            payload = json.loads(raw)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.debug("Ignoring malformed JSON body: %s", e)
            return {}
        return payload if isinstance(payload, dict) else {}

    return {}


def extract_method_override(request: Request, submission: dict[str, Any]) -> str | None:
    """
    Resolve the HTTP verb a plain HTML form asks for.
    Priority:
      1) ``_method`` field in the submitted body (removed from ``submission``)
      2) ``_method`` query parameter
    """
    method = submission.pop(METHOD_OVERRIDE_FIELD, None)
    if not isinstance(method, str) or not method.strip():
        method = request.query_params.get(METHOD_OVERRIDE_FIELD)
    if not method or not method.strip():
        return None
    return method.strip().upper()
