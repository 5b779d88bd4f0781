"""Target-language name → canonical short code."""

from __future__ import annotations

_DEFAULT = "en"

# code -> display name
_LANGUAGES: dict[str, str] = {
    "ta": "Tamil",
    "te": "Telugu",
    "kn": "Kannada",
    "ml": "Malayalam",
    "en": "English",
}

_BY_NAME: dict[str, str] = {name.lower(): code for code, name in _LANGUAGES.items()}


def resolve_language_code(name: object) -> str:
    """Return the code for a language name or code, ``en`` when unknown.

    Matching is case-insensitive and ignores surrounding whitespace.
    Empty or non-string input also resolves to ``en``.
    """
    if not isinstance(name, str):
        return _DEFAULT
    tag = name.strip().lower()
    if tag in _LANGUAGES:
        return tag
    return _BY_NAME.get(tag, _DEFAULT)


def language_display_name(code: str) -> str:
    return _LANGUAGES.get(code, _LANGUAGES[_DEFAULT])
