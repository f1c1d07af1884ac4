"""Core datatypes shared across livetranslate modules.

Responsibilities:
- Represent per-call options and the payload crossing the async boundary.
- Provide explicit typing in place of loosely shaped option dictionaries.

Key types:
- `TranslateOptions`, `DispatchRequest`.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class TranslateOptions:
    """Per-call switches for translation operations.

    Attributes:
        detect_source: Detect the source language with a separate remote call
            and send it explicitly instead of the configured source language.
        apply_glossary: Enforce glossary terms on the translated output.
        mime_type: Request format override (`text/plain` or `text/html`);
            `None` keeps the configured default.
        cancel_event: Optional signal that stops pending retries when set.
    """

    detect_source: bool = False
    apply_glossary: bool = False
    mime_type: str | None = None
    cancel_event: asyncio.Event | None = None


@dataclass(frozen=True, slots=True)
class DispatchRequest:
    """One unit of remote work handed to the dispatcher.

    Attributes:
        operation: `translate` or `detect`.
        texts: Ordered input texts (one element for `detect`).
        source_language: Source language tag or `auto`.
        target_language: Target language tag.
        mime_type: Request format.
    """

    operation: str
    texts: tuple[str, ...]
    source_language: str = "auto"
    target_language: str = "en"
    mime_type: str = "text/plain"
