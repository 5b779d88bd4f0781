"""Selection translation: text + target language → ``{primary, english}``.

Resolution order:

1. curated glossary (Tamil short phrases only, never cached)
2. result cache
3. English anchor translation
4. primary translation, re-chained through English when the provider
   answers with a romanized transliteration
5. fallback labels for anything still empty (not cached)
"""

from __future__ import annotations

import asyncio
import logging
import re
import unicodedata
from dataclasses import dataclass, field
from typing import Any

from murli.app.core import glossary
from murli.app.core.languages import language_display_name, resolve_language_code
from murli.app.services.translation.cache import CacheEntry, ResultCache
from murli.app.services.translation.retry import RetryingTranslator
from murli.app.services.translation.upstream import UpstreamCallResult

logger = logging.getLogger(__name__)

DICTIONARY_MARKER = "Dictionary-based translation"
PARAGRAPH_MIN_LENGTH = 25
LATIN_RATIO_THRESHOLD = 0.4

_INVISIBLE = re.compile("[\u200b\u200c\u200d\ufeff]")
_SPACES = re.compile(r"\s+")
_LATIN_LETTER = re.compile(r"[A-Za-z]")


class InvalidTranslationRequest(ValueError):
    """Raised when there is nothing to translate."""


@dataclass
class TranslationPair:
    primary: str
    english: str
    debug: dict[str, Any] = field(default_factory=dict)


# ─── Text heuristics ────────────────────────────────────────────────────────


def clean_selection(text: object) -> str:
    """Normalize text copied out of a rendered page.

    Drops zero-width characters and BOMs, turns NBSP into a space and
    collapses whitespace. Text carrying U+FFFD is treated as unusable.
    """
    if not isinstance(text, str):
        return ""
    cleaned = _INVISIBLE.sub("", text).replace("\u00a0", " ")
    cleaned = _SPACES.sub(" ", cleaned).strip()
    if "\ufffd" in cleaned:
        return ""
    return cleaned


def is_paragraph(text: str) -> bool:
    return " " in text or "\n" in text or len(text) > PARAGRAPH_MIN_LENGTH


def is_mostly_latin(text: str) -> bool:
    """True when ASCII letters make up over 40% of the non-punctuation chars."""
    if not text:
        return False
    kept = [
        ch
        for ch in text
        if not ch.isspace() and unicodedata.category(ch)[0] not in ("P", "S")
    ]
    if not kept:
        return False
    latin = sum(1 for ch in kept if _LATIN_LETTER.match(ch))
    return latin / len(kept) > LATIN_RATIO_THRESHOLD


def fallback_text(language: str, text: str) -> str:
    return f"{language} (fallback): {text}"


# ─── Resolver ───────────────────────────────────────────────────────────────


class TranslationResolver:
    def __init__(self, translator: RetryingTranslator, cache: ResultCache) -> None:
        self.translator = translator
        self.cache = cache

    async def resolve(self, text: object, target_language: object) -> TranslationPair:
        """Resolve a translation pair for the reader's selection.

        Raises :class:`InvalidTranslationRequest` for empty text. Every
        other failure comes back as labelled fallback text.
        """
        cleaned = clean_selection(text)
        if not cleaned:
            raise InvalidTranslationRequest("Missing text")

        target_code = resolve_language_code(target_language)
        language = language_display_name(target_code)
        try:
            return await self._resolve(cleaned, target_code, language)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Translation failed for %s; returning fallback", target_code)
            return TranslationPair(
                primary=fallback_text(language, cleaned),
                english=fallback_text("English", cleaned),
                debug={"error": True},
            )

    async def _resolve(self, text: str, target_code: str, language: str) -> TranslationPair:
        if not is_paragraph(text):
            match = glossary.lookup(text, target_code)
            if match:
                return TranslationPair(
                    primary=match,
                    english=DICTIONARY_MARKER,
                    debug={"dictionaryHit": True},
                )

        key = (target_code, text)
        cached = self.cache.get(key)
        if cached is not None:
            return TranslationPair(
                primary=cached.primary,
                english=cached.english,
                debug={"cached": True, "ts": cached.created_at},
            )

        english_call = await self.translator.call_with_retry(text, "auto", "en")
        english = english_call.translated_text.strip()

        if target_code == "en":
            primary_call = english_call
            primary = english
        else:
            primary_call = await self.translator.call_with_retry(text, "auto", target_code)
            primary = primary_call.translated_text.strip()

        chained = False
        if primary and english and target_code != "en" and is_mostly_latin(primary):
            chain_call = await self.translator.call_with_retry(english, "en", target_code)
            chain_text = chain_call.translated_text.strip()
            if chain_text and not is_mostly_latin(chain_text):
                logger.info("Replaced transliterated %s output via English chain", target_code)
                primary = chain_text
                chained = True

        # labelled fallbacks are not cached
        degraded = False
        if not english:
            english = fallback_text("English", text)
            degraded = True
        if not primary:
            primary = english_call.translated_text.strip()
            if not primary:
                primary = fallback_text(language, text)
                degraded = True

        if degraded:
            logger.warning("Upstream gave no usable %s translation; not caching", target_code)
        else:
            self.cache.put(key, CacheEntry(primary=primary, english=english))
        return TranslationPair(
            primary=primary,
            english=english,
            debug={
                "cached": False,
                "chained": chained,
                **_call_debug("Primary", primary_call),
                **_call_debug("English", english_call),
            },
        )


def _call_debug(label: str, call: UpstreamCallResult) -> dict[str, Any]:
    return {
        f"apiStatus{label}": call.status_code,
        f"apiContentType{label}": call.content_type,
    }
