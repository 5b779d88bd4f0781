"""Shared test fixtures.

Upstream providers are replaced with ``httpx.MockTransport`` handlers so no
test touches the network, and backoff sleeps are recorded instead of slept.
"""

from __future__ import annotations

import json
from typing import Any, Generator

import httpx
import pytest
from fastapi.testclient import TestClient

from murli.app.api.deps import get_murli_store, get_resolver
from murli.app.main import app
from murli.app.services.murli_store import MurliStore
from murli.app.services.translation.cache import ResultCache
from murli.app.services.translation.resolver import TranslationResolver
from murli.app.services.translation.retry import RetryingTranslator, RetryPolicy
from murli.app.services.translation.upstream import TranslateApiClient

# (status, body, headers); str bodies are sent as text/html
Reply = tuple[int, Any, dict[str, str]]


# ─── Upstream doubles ───────────────────────────────────────────────────────


def gtx_body(*segments: str) -> list[Any]:
    """Nested-array response as returned by ``translate_a/single``."""
    return [[[seg, "source", None, None] for seg in segments], None, "hi"]


def ok(*segments: str) -> Reply:
    return (200, gtx_body(*segments), {})


def retry_hint(delay: str, status: int = 429) -> Reply:
    return (
        status,
        {
            "error": {
                "code": status,
                "status": "RESOURCE_EXHAUSTED",
                "details": [
                    {"@type": "type.googleapis.com/google.rpc.RetryInfo", "retryDelay": delay}
                ],
            }
        },
        {},
    )


def _build(reply: Reply) -> httpx.Response:
    status, body, headers = reply
    if isinstance(body, str):
        return httpx.Response(
            status, text=body, headers={"content-type": "text/html", **headers}
        )
    return httpx.Response(status, json=body, headers=headers)


class FakeProvider:
    """Scripted translation provider keyed by ``(sl, tl)``.

    Each route holds a queue of replies; the last reply repeats once the
    queue is drained. Unrouted requests get a 500.
    """

    def __init__(self) -> None:
        self.calls: list[dict[str, str]] = []
        self._routes: dict[tuple[str, str], list[Reply]] = {}

    def route(self, source: str, target: str, *replies: Reply) -> None:
        self._routes[(source, target)] = list(replies)

    def calls_to(self, source: str, target: str) -> list[dict[str, str]]:
        return [c for c in self.calls if c["sl"] == source and c["tl"] == target]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        params = dict(request.url.params)
        self.calls.append(params)
        queue = self._routes.get((params["sl"], params["tl"]))
        if not queue:
            return _build((500, {"error": {"code": 500}}, {}))
        reply = queue.pop(0) if len(queue) > 1 else queue[0]
        return _build(reply)


class SleepRecorder:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


# ─── Pipeline fixtures ──────────────────────────────────────────────────────


@pytest.fixture()
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture()
def sleeper() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture()
def api_client(provider: FakeProvider) -> TranslateApiClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(provider))
    return TranslateApiClient(http, base_url="https://translate.test/translate_a/single")


@pytest.fixture()
def translator(api_client: TranslateApiClient, sleeper: SleepRecorder) -> RetryingTranslator:
    return RetryingTranslator(
        api_client,
        RetryPolicy(max_retries=2, base_delay_ms=10, max_delay_ms=100),
        sleep=sleeper,
        rand=lambda: 0.0,
    )


@pytest.fixture()
def cache() -> ResultCache:
    return ResultCache(max_entries=50)


@pytest.fixture()
def resolver(translator: RetryingTranslator, cache: ResultCache) -> TranslationResolver:
    return TranslationResolver(translator, cache)


# ─── Content store double ───────────────────────────────────────────────────


class FakeSupabase:
    """Minimal stand-in for the ``/rest/v1/murlis`` endpoint."""

    def __init__(self) -> None:
        self.rows: list[dict[str, Any]] = []
        self.requests: list[httpx.Request] = []
        self.fail_with: int | None = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with:
            return httpx.Response(self.fail_with, json={"message": "store failure"})
        if request.method == "POST":
            row = {"id": len(self.rows) + 1, **json.loads(request.content)}
            self.rows.append(row)
            return httpx.Response(201, json=[row])
        date_filter = request.url.params.get("date")
        rows = self.rows
        if date_filter:
            rows = [r for r in rows if f"eq.{r.get('date')}" == date_filter]
        return httpx.Response(200, json=rows[-1:])


@pytest.fixture()
def supabase() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture()
def murli_store(supabase: FakeSupabase) -> MurliStore:
    http = httpx.AsyncClient(transport=httpx.MockTransport(supabase))
    return MurliStore("https://store.test/", "service-key", http)


# ─── HTTP client ────────────────────────────────────────────────────────────


@pytest.fixture()
def client(
    resolver: TranslationResolver, murli_store: MurliStore
) -> Generator[TestClient, None, None]:
    """TestClient wired to the scripted provider and fake content store."""
    app.dependency_overrides[get_resolver] = lambda: resolver
    app.dependency_overrides[get_murli_store] = lambda: murli_store
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
