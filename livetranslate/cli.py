"""Command-line interface for livetranslate.

Responsibilities:
- Expose user-facing commands for translation, batch and JSON translation,
  language detection and cache maintenance.
- Convert CLI arguments into `TranslationConfig` and run the async client.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Annotated, Any

import typer

from .cli_rendering import echo_stats_summary, exit_with_command_error
from .config import ConfigLoader, TranslationConfig
from .errors import CommandError
from .models.datatypes import TranslateOptions
from .telemetry.logger import configure_logging
from .translation.client import TranslationClient

app = typer.Typer(
    name="livetranslate",
    no_args_is_help=True,
    help="Live conversation translation CLI.",
)

ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", help="Path to YAML config file with client defaults."),
]
SourceOption = Annotated[
    str | None,
    typer.Option("--source", help="Source language tag, or `auto`."),
]
TargetOption = Annotated[
    str | None,
    typer.Option("--target", help="Target language tag."),
]
RateLimitModeOption = Annotated[
    str | None,
    typer.Option(
        "--rate-limit-mode",
        help="Token bucket policy: `block` (wait), `strict` (fail fast) or `test` (bypass).",
    ),
]
CachePathOption = Annotated[
    Path | None,
    typer.Option("--cache-path", help="SQLite cache file; omit for an in-memory cache."),
]
GlossaryOption = Annotated[
    bool,
    typer.Option("--glossary/--no-glossary", help="Enforce configured glossary terms."),
]
StatsOption = Annotated[
    bool,
    typer.Option("--stats", help="Print cache/provider counters to stderr."),
]
VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", help="Emit debug-level translation events to stderr."),
]


def _load_config(
    config_file: Path | None,
    *,
    source: str | None = None,
    target: str | None = None,
    rate_limit_mode: str | None = None,
    cache_path: Path | None = None,
) -> TranslationConfig:
    """Load config from YAML/env and explicit CLI overrides, mapping failures."""

    overrides: dict[str, Any] = {
        "source_language": source,
        "target_language": target,
        "rate_limit_mode": rate_limit_mode,
        "cache_path": str(cache_path) if cache_path is not None else None,
    }
    try:
        return ConfigLoader.load(config_path=config_file, overrides=overrides)
    except FileNotFoundError as exc:
        raise CommandError(
            stage="config",
            detail=f"Config file not found: `{config_file}`.",
            hint="Provide an existing path via `--config <path.yaml>`.",
        ) from exc
    except ValueError as exc:
        raise CommandError(
            stage="config",
            detail=f"Invalid configuration: {exc}",
            hint="Fix config schema/values and rerun.",
        ) from exc


def _read_input_file(path: Path) -> str:
    """Read a UTF-8 input file, mapping failures to command errors."""

    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CommandError(
            stage="input",
            detail=f"Failed to read input file `{path}`: {exc}",
            hint="Verify the input path exists and is readable.",
        ) from exc


def _write_or_echo(content: str, out: Path | None) -> None:
    """Write command output to a file, or print it when no file is given."""

    if out is None:
        typer.echo(content)
        return
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(content + "\n", encoding="utf-8")
    typer.echo(f"Output: {out}")


async def _run_with_client(config: TranslationConfig, action: Any, show_stats: bool) -> Any:
    """Run one async action against a managed client and optionally report stats."""

    async with TranslationClient(config) as client:
        result = await action(client)
        if show_stats:
            echo_stats_summary(client.stats)
        return result


@app.command("translate")
def translate_command(
    text: Annotated[str, typer.Argument(help="Text to translate.")],
    config_file: ConfigOption = None,
    source: SourceOption = None,
    target: TargetOption = None,
    rate_limit_mode: RateLimitModeOption = None,
    cache_path: CachePathOption = None,
    detect_source: Annotated[
        bool,
        typer.Option("--detect-source", help="Detect the source language before translating."),
    ] = False,
    html: Annotated[
        bool, typer.Option("--html", help="Send the text as `text/html`.")
    ] = False,
    glossary: GlossaryOption = True,
    stats: StatsOption = False,
    verbose: VerboseOption = False,
) -> None:
    """Translate one text and print the result."""

    configure_logging(level="DEBUG" if verbose else "WARNING")
    try:
        config = _load_config(
            config_file,
            source=source,
            target=target,
            rate_limit_mode=rate_limit_mode,
            cache_path=cache_path,
        )
        options = TranslateOptions(
            detect_source=detect_source,
            apply_glossary=glossary,
            mime_type="text/html" if html else None,
        )
        translated = asyncio.run(
            _run_with_client(config, lambda client: client.translate(text, options), stats)
        )
    except Exception as exc:
        exit_with_command_error("translate", exc)

    typer.echo(translated)


@app.command("batch")
def batch_command(
    input_file: Annotated[Path, typer.Argument(help="UTF-8 file with one text per line.")],
    out: Annotated[
        Path | None, typer.Option("--out", help="Write translations here, one per line.")
    ] = None,
    config_file: ConfigOption = None,
    source: SourceOption = None,
    target: TargetOption = None,
    rate_limit_mode: RateLimitModeOption = None,
    glossary: GlossaryOption = True,
    stats: StatsOption = False,
    verbose: VerboseOption = False,
) -> None:
    """Translate a line-per-text file in batches of at most 100 texts."""

    configure_logging(level="DEBUG" if verbose else "WARNING")
    try:
        config = _load_config(
            config_file, source=source, target=target, rate_limit_mode=rate_limit_mode
        )
        texts = _read_input_file(input_file).splitlines()
        options = TranslateOptions(apply_glossary=glossary)
        translations = asyncio.run(
            _run_with_client(
                config, lambda client: client.batch_translate(texts, options), stats
            )
        )
        _write_or_echo("\n".join(translations), out)
    except Exception as exc:
        exit_with_command_error("batch", exc)


@app.command("translate-json")
def translate_json_command(
    input_file: Annotated[Path, typer.Argument(help="JSON document to translate.")],
    out: Annotated[
        Path | None, typer.Option("--out", help="Write the translated JSON here.")
    ] = None,
    config_file: ConfigOption = None,
    source: SourceOption = None,
    target: TargetOption = None,
    rate_limit_mode: RateLimitModeOption = None,
    cache_path: CachePathOption = None,
    glossary: GlossaryOption = True,
    stats: StatsOption = False,
    verbose: VerboseOption = False,
) -> None:
    """Translate every string value of a JSON document, keeping its structure."""

    configure_logging(level="DEBUG" if verbose else "WARNING")
    try:
        config = _load_config(
            config_file,
            source=source,
            target=target,
            rate_limit_mode=rate_limit_mode,
            cache_path=cache_path,
        )
        raw_text = _read_input_file(input_file)
        try:
            document = json.loads(raw_text)
        except json.JSONDecodeError as exc:
            raise CommandError(
                stage="input",
                detail=f"Input file `{input_file}` is not valid JSON: {exc}",
                hint="Validate the JSON document and rerun.",
            ) from exc
        options = TranslateOptions(apply_glossary=glossary)
        translated = asyncio.run(
            _run_with_client(
                config, lambda client: client.translate_json(document, options), stats
            )
        )
        _write_or_echo(json.dumps(translated, ensure_ascii=False, indent=2), out)
    except Exception as exc:
        exit_with_command_error("translate-json", exc)


@app.command("detect")
def detect_command(
    text: Annotated[str, typer.Argument(help="Text whose language should be detected.")],
    config_file: ConfigOption = None,
    rate_limit_mode: RateLimitModeOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Detect and print the most probable language tag of a text."""

    configure_logging(level="DEBUG" if verbose else "WARNING")
    try:
        config = _load_config(config_file, rate_limit_mode=rate_limit_mode)
        language = asyncio.run(
            _run_with_client(config, lambda client: client.detect_language(text), False)
        )
    except Exception as exc:
        exit_with_command_error("detect", exc)

    typer.echo(language)


@app.command("cache-clear")
def cache_clear_command(
    config_file: ConfigOption = None,
    cache_path: CachePathOption = None,
) -> None:
    """Remove every cached translation from the configured cache store."""

    configure_logging(level="WARNING")
    try:
        config = _load_config(config_file, cache_path=cache_path)
        asyncio.run(_run_with_client(config, lambda client: client.clear_cache(), False))
    except Exception as exc:
        exit_with_command_error("cache-clear", exc)

    location = str(config.cache_path) if config.cache_path is not None else "memory"
    typer.echo(f"Translation cache cleared: {location}")


def main() -> None:
    """CLI entrypoint for console scripts."""
    app()


if __name__ == "__main__":
    main()
