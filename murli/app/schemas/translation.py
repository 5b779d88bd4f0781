from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class TranslateIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    text: str | None = None
    target_language: str | None = Field(None, alias="targetLanguage")


class TranslationOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    primary_translation: str = Field(..., alias="primaryTranslation")
    english_translation: str = Field(..., alias="englishTranslation")
    debug: dict[str, Any] | None = None
