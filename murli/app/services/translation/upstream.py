"""HTTP client for the upstream translation provider.

One call here is one network attempt. Retrying lives in
:mod:`murli.app.services.translation.retry`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

import httpx

DEFAULT_BASE_URL = "https://translate.googleapis.com/translate_a/single"

_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class UpstreamCallResult:
    """Outcome of a single upstream attempt.

    ``status_code`` is ``None`` when the request never got a response
    (DNS failure, timeout, connection reset).
    """

    status_code: int | None
    raw_body: str
    parsed_body: Any = None
    content_type: str = ""
    retry_after: str | None = None

    @property
    def is_html(self) -> bool:
        return self.raw_body.lstrip().startswith("<")

    @property
    def ok(self) -> bool:
        """2xx and not a provider error page served as 200."""
        return (
            self.status_code is not None
            and 200 <= self.status_code < 300
            and not self.is_html
        )

    @property
    def translated_text(self) -> str:
        return decode_translation(self.parsed_body) or ""


# ─── Response decoding ──────────────────────────────────────────────────────


def _segment_head(segment: Any) -> str:
    if isinstance(segment, list) and segment and isinstance(segment[0], str):
        return segment[0]
    return ""


def _decode_segments(parsed: list[Any]) -> str | None:
    # [[[translated, original, ...], [translated, original, ...]], ...]
    if not parsed or not isinstance(parsed[0], list):
        return None
    return "".join(_segment_head(seg) for seg in parsed[0])


def _decode_cloud_v2(parsed: dict[str, Any]) -> str | None:
    # {"data": {"translations": [{"translatedText": ...}]}}
    data = parsed.get("data")
    if not isinstance(data, dict):
        return None
    translations = data.get("translations")
    if not isinstance(translations, list) or not translations:
        return None
    first = translations[0]
    if isinstance(first, dict) and isinstance(first.get("translatedText"), str):
        return first["translatedText"]
    return None


def _decode_candidates(parsed: dict[str, Any]) -> str | None:
    # {"candidates": [{"content": {"parts": [{"text": ...}]}}]}
    candidates = parsed.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        return None
    content = candidates[0].get("content") if isinstance(candidates[0], dict) else None
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list) or not parts or not isinstance(parts[0], dict):
        return None
    text = parts[0].get("text")
    return text if isinstance(text, str) else None


def decode_translation(parsed: Any) -> str | None:
    """Extract translated text from a known provider response shape.

    Returns ``None`` for unknown shapes instead of guessing.
    """
    if isinstance(parsed, list):
        return _decode_segments(parsed)
    if isinstance(parsed, dict):
        if "data" in parsed:
            return _decode_cloud_v2(parsed)
        if "candidates" in parsed:
            return _decode_candidates(parsed)
    return None


def normalize_whitespace(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


# ─── Client ─────────────────────────────────────────────────────────────────


class TranslateApiClient:
    """Single-attempt client for the ``translate_a/single`` endpoint."""

    def __init__(
        self,
        http: httpx.AsyncClient | None = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10.0,
    ) -> None:
        self.http = http
        self.base_url = base_url
        self.timeout = timeout

    @staticmethod
    def _handle_response(resp: httpx.Response) -> UpstreamCallResult:
        """Wrap a response without raising on HTML or truncated bodies."""
        raw = resp.text
        try:
            parsed: Any = resp.json()
        except ValueError:
            parsed = None
        return UpstreamCallResult(
            status_code=resp.status_code,
            raw_body=raw,
            parsed_body=parsed,
            content_type=resp.headers.get("content-type", ""),
            retry_after=resp.headers.get("retry-after"),
        )

    async def translate_once(
        self, text: str, source_hint: str, target_code: str
    ) -> UpstreamCallResult:
        """Send one translation request.

        Transport failures raise :class:`httpx.HTTPError`; the retrying
        caller turns them into results.
        """
        params = {
            "client": "gtx",
            "sl": source_hint,
            "tl": target_code,
            # translation segments only, no dictionary payload
            "dt": "t",
            "q": normalize_whitespace(text),
        }
        if self.http is not None:
            resp = await self.http.get(self.base_url, params=params, timeout=self.timeout)
            return self._handle_response(resp)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            resp = await client.get(self.base_url, params=params)
            return self._handle_response(resp)
