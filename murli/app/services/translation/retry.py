"""Bounded retries around :class:`TranslateApiClient` with hint-aware backoff."""

from __future__ import annotations

import asyncio
import logging
import random
import re
from dataclasses import dataclass
from functools import partial
from typing import Any, Awaitable, Callable

import httpx
from tenacity import AsyncRetrying, RetryCallState, retry_if_result, stop_after_attempt

from murli.app.services.translation.upstream import TranslateApiClient, UpstreamCallResult

logger = logging.getLogger(__name__)

_DURATION = re.compile(r"^(\d+(?:\.\d+)?)(ms|s)?$", re.IGNORECASE)


@dataclass(frozen=True)
class RetryPolicy:
    max_retries: int = 4
    base_delay_ms: int = 500
    max_delay_ms: int = 30000


def parse_retry_delay_ms(body: Any) -> int | None:
    """Read a ``RetryInfo.retryDelay`` hint from a structured error body.

    Accepts ``"37s"``, ``"37.5s"``, ``"250ms"`` and bare numbers (seconds).
    """
    if not isinstance(body, dict) or not isinstance(body.get("error"), dict):
        return None
    details = body["error"].get("details")
    if not isinstance(details, list):
        return None
    for detail in details:
        if not isinstance(detail, dict) or "RetryInfo" not in str(detail.get("@type", "")):
            continue
        value = detail.get("retryDelay")
        if value is None:
            continue
        match = _DURATION.match(str(value).strip())
        if not match:
            continue
        amount = float(match.group(1))
        unit = (match.group(2) or "s").lower()
        return round(amount) if unit == "ms" else round(amount * 1000)
    return None


def parse_retry_after_ms(header: str | None) -> int | None:
    """``Retry-After`` in whole seconds → milliseconds."""
    if not header:
        return None
    try:
        return int(header.strip()) * 1000
    except ValueError:
        return None


def exponential_delay_ms(
    attempt: int, policy: RetryPolicy, rand: Callable[[], float] = random.random
) -> float:
    """Half the capped exponential step plus jitter, i.e. in ``[exp/2, exp)``."""
    exp = min(policy.base_delay_ms * 2 ** (attempt - 1), policy.max_delay_ms)
    return exp / 2 + rand() * (exp / 2)


class RetryingTranslator:
    """Calls the upstream client until it succeeds or the policy runs out.

    Never raises for upstream trouble: when every attempt fails the last
    result is returned and the caller decides on a fallback. Backoff
    sleeps go through *sleep* (``asyncio.sleep`` by default) so a
    cancelled request also cancels its pending wait.
    """

    def __init__(
        self,
        client: TranslateApiClient,
        policy: RetryPolicy | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        rand: Callable[[], float] = random.random,
    ) -> None:
        self.client = client
        self.policy = policy or RetryPolicy()
        self._sleep = sleep
        self._rand = rand

    async def _attempt(
        self, text: str, source_hint: str, target_code: str
    ) -> UpstreamCallResult:
        try:
            return await self.client.translate_once(text, source_hint, target_code)
        except httpx.HTTPError as exc:
            return UpstreamCallResult(status_code=None, raw_body=str(exc))

    def _delay_seconds(self, policy: RetryPolicy, retry_state: RetryCallState) -> float:
        result: UpstreamCallResult = retry_state.outcome.result()  # type: ignore[union-attr]
        delay_ms: float | None = parse_retry_delay_ms(result.parsed_body)
        if not delay_ms:
            delay_ms = parse_retry_after_ms(result.retry_after)
        if not delay_ms:
            delay_ms = exponential_delay_ms(retry_state.attempt_number, policy, self._rand)
        return delay_ms / 1000

    @staticmethod
    def _log_retry(retry_state: RetryCallState) -> None:
        result: UpstreamCallResult = retry_state.outcome.result()  # type: ignore[union-attr]
        delay = retry_state.next_action.sleep if retry_state.next_action else 0
        logger.warning(
            "Translation attempt %d failed (status=%s), retrying in %.0fms",
            retry_state.attempt_number,
            result.status_code,
            delay * 1000,
        )

    async def call_with_retry(
        self,
        text: str,
        source_hint: str,
        target_code: str,
        policy: RetryPolicy | None = None,
    ) -> UpstreamCallResult:
        policy = policy or self.policy
        retrying = AsyncRetrying(
            stop=stop_after_attempt(policy.max_retries + 1),
            wait=partial(self._delay_seconds, policy),
            retry=retry_if_result(lambda result: not result.ok),
            retry_error_callback=lambda state: state.outcome.result(),
            before_sleep=self._log_retry,
            sleep=self._sleep,
        )
        return await retrying(self._attempt, text, source_hint, target_code)
