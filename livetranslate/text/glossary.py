"""Glossary substitution applied after generic translation.

Glossary terms override whatever the provider chose for a word. Matching is
whole-word and case-insensitive; the replacement mirrors the case pattern of
each matched occurrence.
"""

from __future__ import annotations

import re
from typing import Mapping

from ..errors import UnsupportedLanguage
from ..parsing import normalize_optional_string


def _match_case(matched: str, translation: str) -> str:
    """Shape a replacement after the case pattern of the matched occurrence."""

    letters = [character for character in matched if character.isalpha()]
    if not letters:
        return translation
    if matched == matched.upper():
        return translation.upper()
    if letters[0].isupper():
        return translation[:1].upper() + translation[1:].lower()
    return translation


class Glossary:
    """Ordered lowercase term -> canonical translation mapping."""

    def __init__(self, terms: Mapping[str, str] | None = None) -> None:
        """Initialize the glossary with optional starting terms."""

        self._terms: dict[str, str] = {}
        self._patterns: dict[str, re.Pattern[str]] = {}
        for term, translation in (terms or {}).items():
            self.add_term(term, translation)

    def add_term(self, term: str, translation: str) -> None:
        """Store a term mapping, overwriting any previous mapping for the term."""

        normalized_term = normalize_optional_string(term)
        normalized_translation = normalize_optional_string(translation)
        if normalized_term is None or normalized_translation is None:
            raise UnsupportedLanguage("Glossary entries need a non-empty term and translation.")
        key = normalized_term.lower()
        self._terms[key] = normalized_translation
        self._patterns[key] = re.compile(rf"(?<!\w){re.escape(key)}(?!\w)", re.IGNORECASE)

    def remove_term(self, term: str) -> bool:
        """Remove a term and report whether it was present."""

        key = term.strip().lower()
        self._patterns.pop(key, None)
        return self._terms.pop(key, None) is not None

    def clear(self) -> None:
        """Remove every glossary term."""

        self._terms.clear()
        self._patterns.clear()

    def terms(self) -> dict[str, str]:
        """Return a snapshot of the stored term mappings."""

        return dict(self._terms)

    def apply(self, text: str) -> str:
        """Replace every glossary term occurrence in `text`.

        Terms are applied one after another in insertion order; an earlier
        replacement can therefore be matched again by a later term.
        """

        result = text
        for key, translation in self._terms.items():
            result = self._patterns[key].sub(
                lambda match, replacement=translation: _match_case(match.group(0), replacement),
                result,
            )
        return result

    def __len__(self) -> int:
        return len(self._terms)

    def __contains__(self, term: object) -> bool:
        return isinstance(term, str) and term.strip().lower() in self._terms
