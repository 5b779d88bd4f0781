from __future__ import annotations

import logging
import secrets
from typing import Any

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from murli.app.api.deps import client_ip, get_murli_store
from murli.app.core.config import settings
from murli.app.middleware.rate_limit import FailedAttemptLimiter
from murli.app.schemas.murli import MurliIn, MurliSavedOut
from murli.app.services.murli_store import MurliStore, MurliStoreError

logger = logging.getLogger(__name__)

router = APIRouter()

# ─── Admin token guard ──────────────────────────────────────────────────────
# Per-IP count of failed admin-token attempts.
_admin_limiter = FailedAttemptLimiter(
    window_seconds=settings.ADMIN_WINDOW_SECONDS,
    max_attempts=settings.ADMIN_MAX_ATTEMPTS,
)


def _token_matches(token: object) -> bool:
    if not isinstance(token, str) or not token or not settings.ADMIN_TOKEN:
        return False
    return secrets.compare_digest(token.encode(), settings.ADMIN_TOKEN.encode())


async def _json_object(request: Request) -> dict[str, Any]:
    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


@router.get("/debug")
async def store_debug(store: MurliStore = Depends(get_murli_store)) -> dict[str, Any]:
    return await store.ping()


@router.get("")
async def get_murli(
    date: str | None = Query(None, description="YYYY-MM-DD; latest when omitted"),
    store: MurliStore = Depends(get_murli_store),
) -> Any:
    try:
        row = await (store.get_by_date(date) if date else store.get_latest())
    except MurliStoreError as exc:
        logger.error("Murli lookup failed: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        )
    if date and row is None:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"error": "No Murli for date", "date": date},
        )
    return row


@router.post("", response_model=MurliSavedOut)
async def save_murli(
    request: Request,
    x_admin_token: str | None = Header(None),
    store: MurliStore = Depends(get_murli_store),
) -> Any:
    """Save a Murli. The admin token is checked before the body is validated."""
    ip = client_ip(request)
    _admin_limiter.check(ip)

    body = await _json_object(request)
    if not _token_matches(body.get("adminToken") or x_admin_token):
        _admin_limiter.record_failure(ip)
        logger.warning("Rejected murli save from %s: bad admin token", ip)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    _admin_limiter.reset(ip)

    try:
        payload = MurliIn.model_validate(body)
    except ValidationError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Malformed request")

    if not payload.content:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing content")

    try:
        inserted = await store.save(payload.content, payload.date, payload.metadata)
    except MurliStoreError as exc:
        logger.error("Murli save failed: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Failed to save murli", "details": exc.details},
        )

    inserted = inserted or {}
    return MurliSavedOut(date=inserted.get("date"), id=inserted.get("id"))
