from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from murli.app.api.deps import get_resolver
from murli.app.core.config import settings
from murli.app.schemas.translation import TranslateIn, TranslationOut
from murli.app.services.translation.resolver import (
    InvalidTranslationRequest,
    TranslationResolver,
)

router = APIRouter()


@router.post("", response_model=TranslationOut, response_model_exclude_none=True)
async def translate_selection(
    payload: TranslateIn | None = None,
    resolver: TranslationResolver = Depends(get_resolver),
) -> TranslationOut:
    payload = payload or TranslateIn()
    try:
        pair = await resolver.resolve(payload.text, payload.target_language)
    except InvalidTranslationRequest as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return TranslationOut(
        primary_translation=pair.primary,
        english_translation=pair.english,
        debug=pair.debug if settings.TRANSLATE_DEBUG else None,
    )
