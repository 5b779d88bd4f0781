from __future__ import annotations

from fastapi import Request

from murli.app.services.murli_store import MurliStore
from murli.app.services.translation.resolver import TranslationResolver


def get_resolver(request: Request) -> TranslationResolver:
    """Resolver built once in the app lifespan (shares one result cache)."""
    return request.app.state.resolver


def get_murli_store(request: Request) -> MurliStore:
    return request.app.state.murli_store


def client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"
