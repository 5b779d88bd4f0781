"""Curated phrase glossaries used to short-circuit upstream translation."""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path

logger = logging.getLogger(__name__)

_GLOSSARY_DIR = Path(__file__).resolve().parent.parent / "glossaries"

# Languages with a curated glossary file
CURATED_LANGUAGES = frozenset({"ta"})


@lru_cache(maxsize=8)
def _load_glossary(lang: str) -> dict[str, str]:
    """Load the glossary JSON file for the given language."""
    path = _GLOSSARY_DIR / f"{lang}.json"
    if not path.exists():
        logger.warning("Glossary file not found: %s", path)
        return {}
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def lookup(text: str, lang: str) -> str | None:
    """Return the curated translation of *text* in *lang*, if any.

    Only an exact match on the trimmed phrase counts. A longer text that
    merely contains a glossary key is a miss.
    """
    if lang not in CURATED_LANGUAGES:
        return None
    return _load_glossary(lang).get(text.strip())
