"""Shared parsing helpers for configuration and language-tag normalization."""

from __future__ import annotations

import re

from .errors import UnsupportedLanguage


_LANGUAGE_TAG_PATTERN = re.compile(r"^[a-z]{2,3}(?:-[a-z0-9]{2,8})*$")
_WHITESPACE_RUN_PATTERN = re.compile(r"\s+")

AUTO_LANGUAGE = "auto"


def normalize_optional_string(value: object) -> str | None:
    """Normalize an optional value to a stripped non-empty string.

    Args:
        value: Arbitrary input value.

    Returns:
        Stripped string value, or `None` when the value is empty after trimming.
    """

    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    return text


def collapse_whitespace(text: str) -> str:
    """Collapse whitespace runs to single spaces and trim both ends."""

    return _WHITESPACE_RUN_PATTERN.sub(" ", text).strip()


def normalize_language_tag(value: object, *, allow_auto: bool) -> str:
    """Normalize a BCP-47-like language tag.

    Args:
        value: Raw tag such as ``"EN"``, ``" pt-BR "`` or ``"auto"``.
        allow_auto: Whether ``auto`` (provider-side detection) is acceptable.

    Returns:
        Lowercased tag with surrounding whitespace removed.

    Raises:
        UnsupportedLanguage: If the tag is blank, malformed, or ``auto`` where
            detection is not allowed.
    """

    normalized = normalize_optional_string(value)
    if normalized is None:
        raise UnsupportedLanguage("Language tag must be a non-empty string.")
    tag = normalized.lower().replace("_", "-")
    if tag == AUTO_LANGUAGE:
        if allow_auto:
            return tag
        raise UnsupportedLanguage("`auto` is only valid as a source language.")
    if not _LANGUAGE_TAG_PATTERN.match(tag):
        raise UnsupportedLanguage(f"Unsupported language tag `{normalized}`.")
    return tag
