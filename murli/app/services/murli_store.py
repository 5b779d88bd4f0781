"""Supabase REST client for the ``murlis`` table."""

from __future__ import annotations

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

TABLE = "murlis"


class MurliStoreError(Exception):
    """The content store could not be reached or refused the request."""

    def __init__(self, message: str, status_code: int | None = None, details: Any = None) -> None:
        self.status_code = status_code
        self.details = details
        super().__init__(message)


class MurliStore:
    """Key-value access to daily Murli rows, keyed by date."""

    def __init__(
        self,
        base_url: str,
        service_key: str,
        http: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.service_key = service_key
        self.http = http
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.base_url and self.service_key)

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "apikey": self.service_key,
            "Authorization": f"Bearer {self.service_key}",
            "Prefer": "return=representation",
        }

    @staticmethod
    def _handle_response(resp: httpx.Response) -> Any:
        """Return the JSON body, raising :class:`MurliStoreError` on non-2xx."""
        try:
            data: Any = resp.json()
        except ValueError:
            data = None
        if resp.status_code >= 400:
            raise MurliStoreError(
                f"Store returned HTTP {resp.status_code}",
                status_code=resp.status_code,
                details=data,
            )
        return data

    async def _request(
        self,
        method: str,
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        if not self.configured:
            raise MurliStoreError("Content store is not configured")
        url = f"{self.base_url}/rest/v1/{TABLE}"
        try:
            if self.http is not None:
                resp = await self.http.request(
                    method, url, params=params, json=json,
                    headers=self._headers(), timeout=self.timeout,
                )
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    resp = await client.request(
                        method, url, params=params, json=json, headers=self._headers()
                    )
        except httpx.HTTPError as exc:
            raise MurliStoreError(f"Store request failed: {exc}") from exc
        return self._handle_response(resp)

    async def get_by_date(self, date: str) -> dict[str, Any] | None:
        rows = await self._request(
            "GET", params={"select": "*", "date": f"eq.{date}", "limit": "1"}
        )
        return rows[0] if isinstance(rows, list) and rows else None

    async def get_latest(self) -> dict[str, Any] | None:
        rows = await self._request(
            "GET", params={"select": "*", "order": "created_at.desc", "limit": "1"}
        )
        return rows[0] if isinstance(rows, list) and rows else None

    async def save(
        self, content: str, date: str | None = None, metadata: dict[str, Any] | None = None
    ) -> dict[str, Any] | None:
        """Insert a Murli row and return the stored representation."""
        rows = await self._request(
            "POST", json={"date": date, "content": content, "metadata": metadata}
        )
        inserted = rows[0] if isinstance(rows, list) and rows else None
        logger.info("Saved murli for %s", (inserted or {}).get("date") or date)
        return inserted

    async def ping(self) -> dict[str, Any]:
        """Report store reachability without exposing credentials."""
        if not self.configured:
            return {
                "ok": False,
                "reason": "missing_env",
                "hasSupabaseUrl": bool(self.base_url),
                "hasServiceRole": bool(self.service_key),
            }
        try:
            rows = await self._request("GET", params={"select": "id", "limit": "1"})
        except MurliStoreError as exc:
            return {"ok": False, "reason": "fetch_failed", "status": exc.status_code}
        return {
            "ok": True,
            "returnedCount": len(rows) if isinstance(rows, list) else None,
        }
