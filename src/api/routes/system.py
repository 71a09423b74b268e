from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, status
from fastapi.responses import RedirectResponse

from api.post_controller import LIST_LOCATION
from db.database import check_db_connection

router = APIRouter(tags=["System"])


@router.get("/health", tags=["Health"])
async def health() -> dict[str, Any]:
    ok = await check_db_connection()
    return {
        "success": ok,
        "status": "ok" if ok else "degraded",
        "timestamp": datetime.now(UTC).isoformat(),
    }


@router.get("/", tags=["Root"], include_in_schema=False)
async def root() -> RedirectResponse:
    return RedirectResponse(LIST_LOCATION, status_code=status.HTTP_302_FOUND)
