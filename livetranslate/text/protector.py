"""Reversible masking of markup and special characters around provider calls.

Responsibilities:
- Replace HTML-like tags, digit runs and punctuation runs with indexed
  placeholders before text is sent to a translation provider.
- Restore the original substrings in translated output, then apply a light
  sentence-capitalization rule.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import re

from ..errors import UnexpectedResponseShape
from ..parsing import collapse_whitespace


_HTML_TAG_PREFIX = "HTML_TAG"
_SPECIAL_CHAR_PREFIX = "SPECIAL_CHAR"
_SPECIAL_CHARACTERS = r"""!@#$%^&*()_+\-=\[\]{};':"\\|,.<>/?"""

_PROTECTED_PATTERN = re.compile(
    rf"(?P<tag><[^>]+>)|(?P<digits>[0-9]+)|(?P<special>[{_SPECIAL_CHARACTERS}]+)"
)
_PLACEHOLDER_PATTERN = re.compile(
    rf"__(?P<kind>{_HTML_TAG_PREFIX}|{_SPECIAL_CHAR_PREFIX})_(?P<index>\d+)__"
)
_SENTENCE_START_PATTERN = re.compile(r"\. ([a-z])")


@dataclass(slots=True)
class ProtectedText:
    """Masked text plus the ordered originals each placeholder stands for.

    Attributes:
        masked_text: Text with `__HTML_TAG_i__` / `__SPECIAL_CHAR_i__` markers.
        html_placeholders: Original tag strings, indexed by placeholder number.
        special_char_placeholders: Original digit/punctuation runs.
    """

    masked_text: str
    html_placeholders: list[str] = field(default_factory=list)
    special_char_placeholders: list[str] = field(default_factory=list)

    @property
    def placeholder_count(self) -> int:
        """Return the total number of masked substrings."""

        return len(self.html_placeholders) + len(self.special_char_placeholders)


class TextProtector:
    """Mask and restore substrings that translation providers must not alter."""

    def protect(self, text: str) -> ProtectedText:
        """Normalize whitespace and mask tags, digits and punctuation in one scan."""

        html_placeholders: list[str] = []
        special_char_placeholders: list[str] = []

        def _mask(match: re.Match[str]) -> str:
            substring = match.group(0)
            if match.lastgroup == "tag":
                html_placeholders.append(substring)
                return f"__{_HTML_TAG_PREFIX}_{len(html_placeholders) - 1}__"
            special_char_placeholders.append(substring)
            return f"__{_SPECIAL_CHAR_PREFIX}_{len(special_char_placeholders) - 1}__"

        masked_text = _PROTECTED_PATTERN.sub(_mask, collapse_whitespace(text))
        return ProtectedText(
            masked_text=masked_text,
            html_placeholders=html_placeholders,
            special_char_placeholders=special_char_placeholders,
        )

    def restore(self, masked_text: str, protected: ProtectedText) -> str:
        """Replace placeholders with their originals and capitalize sentence starts.

        Placeholders are substituted in a single pass, so restored substrings
        are never scanned again.

        Raises:
            UnexpectedResponseShape: If the provider returned a placeholder
                index that was never issued.
        """

        def _unmask(match: re.Match[str]) -> str:
            originals = (
                protected.html_placeholders
                if match.group("kind") == _HTML_TAG_PREFIX
                else protected.special_char_placeholders
            )
            index = int(match.group("index"))
            if index >= len(originals):
                raise UnexpectedResponseShape(
                    f"Provider returned unknown placeholder `{match.group(0)}`."
                )
            return originals[index]

        restored = _PLACEHOLDER_PATTERN.sub(_unmask, masked_text)
        return _SENTENCE_START_PATTERN.sub(lambda match: f". {match.group(1).upper()}", restored)
