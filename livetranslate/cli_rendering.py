"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation for command diagnostics
and translation counter summaries.
"""

from __future__ import annotations

from typing import NoReturn

import typer

from .errors import (
    CommandError,
    NetworkError,
    RateLimitExceeded,
    StorageError,
    UnexpectedResponseShape,
    UnsupportedLanguage,
)
from .telemetry.stats import TranslationStats


def _hint_for_error(exc: Exception) -> str | None:
    """Return an actionable hint for translation error categories."""

    if isinstance(exc, NetworkError):
        if exc.failure_kind == "invalid_api_key":
            return "Set `LIVETRANSLATE_API_KEY` or `api_key` in the config file."
        if exc.failure_kind == "quota":
            return "Wait for provider quota to recover or lower request volume."
        return "Check internet/proxy connectivity and the provider `base_url`, then retry."
    if isinstance(exc, RateLimitExceeded):
        return "Use `--rate-limit-mode block` to wait for tokens instead of failing."
    if isinstance(exc, StorageError):
        return "Verify `cache_path` is writable or omit it to use the in-memory cache."
    if isinstance(exc, UnexpectedResponseShape):
        return "Verify the provider endpoint speaks the expected translation API."
    if isinstance(exc, UnsupportedLanguage):
        return "Use language tags such as `en`, `de` or `pt-br`; `auto` is source-only."
    return None


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, CommandError):
        typer.secho(
            f"{command_name} failed at stage `{exc.stage}`: {exc.detail}",
            fg=typer.colors.RED,
            err=True,
        )
        hint = exc.hint
    else:
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)
        hint = _hint_for_error(exc)
    if hint:
        typer.secho(f"Hint: {hint}", fg=typer.colors.YELLOW, err=True)
    raise typer.Exit(code=1) from exc


def echo_stats_summary(stats: TranslationStats) -> None:
    """Print translation counters in deterministic key order."""

    for key, value in stats.summary().items():
        typer.echo(f"{key}: {value}", err=True)
