from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from murli.app.api.v1.api import api_router
from murli.app.core.config import settings
from murli.app.services.murli_store import MurliStore
from murli.app.services.translation.cache import ResultCache
from murli.app.services.translation.resolver import TranslationResolver
from murli.app.services.translation.retry import RetryingTranslator, RetryPolicy
from murli.app.services.translation.upstream import TranslateApiClient

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Composition root: one HTTP pool and one result cache per process."""
    async with httpx.AsyncClient(timeout=settings.TRANSLATE_TIMEOUT_SECONDS) as http:
        translator = RetryingTranslator(
            TranslateApiClient(
                http,
                base_url=settings.TRANSLATE_BASE_URL,
                timeout=settings.TRANSLATE_TIMEOUT_SECONDS,
            ),
            RetryPolicy(
                max_retries=settings.TRANSLATE_MAX_RETRIES,
                base_delay_ms=settings.TRANSLATE_BASE_DELAY_MS,
                max_delay_ms=settings.TRANSLATE_MAX_DELAY_MS,
            ),
        )
        app.state.resolver = TranslationResolver(
            translator, ResultCache(settings.CACHE_MAX_ENTRIES)
        )
        app.state.murli_store = MurliStore(
            settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY, http
        )
        if not app.state.murli_store.configured:
            logger.warning("SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY not set")
        yield


app = FastAPI(title="Murli Reader API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "Accept", "X-Admin-Token"],
)


# ─── Flat {"error": ...} bodies ─────────────────────────────────────────────


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Malformed request"},
    )


@app.get("/health")
async def health_check() -> dict[str, str]:
    return {"status": "ok"}


app.include_router(api_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("murli.app.main:app", host="0.0.0.0", port=8000)
