from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class MurliIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    date: str | None = None
    content: str | None = None
    metadata: dict[str, Any] | None = None
    admin_token: str | None = Field(None, alias="adminToken")


class MurliSavedOut(BaseModel):
    ok: bool = True
    date: str | None = None
    id: int | str | None = None
