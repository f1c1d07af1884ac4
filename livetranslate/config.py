"""Configuration model and loaders for livetranslate.

Responsibilities:
- Define translation runtime configuration as a typed dataclass.
- Enumerate every recognized option with a documented default.
- Provide loader entry points for file- and environment-based configuration.

Key types:
- `TranslationConfig`: normalized runtime settings for one translation client.
- `ConfigLoader`: static construction helpers for `TranslationConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from .errors import UnsupportedLanguage
from .parsing import normalize_language_tag, normalize_optional_string


RATE_LIMIT_MODES = frozenset({"block", "strict", "test"})
DISPATCH_MODES = frozenset({"inline", "worker"})
MIME_TYPES = frozenset({"text/plain", "text/html"})
MAX_BATCH_SIZE = 100

_DEFAULT_BASE_URL = "https://translation.googleapis.com/v3/projects"
_DEFAULT_PROJECT_ID = "livetranslate"


@dataclass(slots=True)
class TranslationConfig:
    """Runtime configuration for one translation client.

    Attributes:
        source_language: Source language tag, or `auto` for provider detection.
        target_language: Target language tag.
        rate_limit_mode: `block` waits for tokens, `strict` fails fast with
            `RateLimitExceeded`, `test` bypasses limiting.
        rate_limit_capacity: Token bucket capacity.
        rate_limit_interval_seconds: Seconds needed to refill one token.
        max_attempts: Total attempts per remote call, including the first.
        backoff_base_seconds: Base backoff delay; `0` retries instantly.
        batch_size: Maximum texts per remote batch call (at most 100).
        cache_path: SQLite cache file; `None` selects the in-memory cache.
        cache_name: Logical cache store name recorded in the database.
        cache_version: Cache schema version applied during `init()`.
        dispatch_mode: `worker` hands requests to a thread pool, `inline` runs
            them on the event loop.
        worker_threads: Thread count for the `worker` dispatch mode.
        base_url: Remote translation API base URL.
        project_id: Provider project identifier used in request paths.
        api_key: Provider credential sent as a bearer token.
        timeout_seconds: HTTP timeout for one provider request.
        mime_type: Default request format (`text/plain` or `text/html`).
        glossary: Initial glossary term -> translation mapping.
    """

    source_language: str = "auto"
    target_language: str = "en"
    rate_limit_mode: str = "block"
    rate_limit_capacity: float = 10.0
    rate_limit_interval_seconds: float = 1.0
    max_attempts: int = 3
    backoff_base_seconds: float = 1.0
    batch_size: int = MAX_BATCH_SIZE
    cache_path: Path | None = None
    cache_name: str = "translationCache"
    cache_version: int = 1
    dispatch_mode: str = "worker"
    worker_threads: int = 4
    base_url: str = _DEFAULT_BASE_URL
    project_id: str = _DEFAULT_PROJECT_ID
    api_key: str | None = None
    timeout_seconds: float = 30.0
    mime_type: str = "text/plain"
    glossary: dict[str, str] = field(default_factory=dict)

    def validate(self) -> None:
        """Validate configuration values and normalize language tags in place."""

        self.source_language = normalize_language_tag(self.source_language, allow_auto=True)
        self.target_language = normalize_language_tag(self.target_language, allow_auto=False)
        self._require_choice(self.rate_limit_mode, RATE_LIMIT_MODES, "rate_limit_mode")
        self._require_choice(self.dispatch_mode, DISPATCH_MODES, "dispatch_mode")
        self._require_choice(self.mime_type, MIME_TYPES, "mime_type")
        if self.rate_limit_capacity < 1:
            raise ValueError("`rate_limit_capacity` must be at least 1.")
        if self.rate_limit_interval_seconds <= 0:
            raise ValueError("`rate_limit_interval_seconds` must be positive.")
        if self.max_attempts < 1:
            raise ValueError("`max_attempts` must be a positive integer.")
        if self.backoff_base_seconds < 0:
            raise ValueError("`backoff_base_seconds` must not be negative.")
        if not 1 <= self.batch_size <= MAX_BATCH_SIZE:
            raise ValueError(f"`batch_size` must be between 1 and {MAX_BATCH_SIZE}.")
        if self.cache_version < 1:
            raise ValueError("`cache_version` must be a positive integer.")
        if self.worker_threads < 1:
            raise ValueError("`worker_threads` must be a positive integer.")
        if self.timeout_seconds <= 0:
            raise ValueError("`timeout_seconds` must be positive.")
        self._require_non_empty(self.cache_name, "cache_name")
        self._require_non_empty(self.base_url, "base_url")
        self._require_non_empty(self.project_id, "project_id")
        for term, translation in self.glossary.items():
            if normalize_optional_string(term) is None or normalize_optional_string(
                translation
            ) is None:
                raise UnsupportedLanguage("Glossary entries need a non-empty term and translation.")

    @staticmethod
    def _require_choice(value: str, choices: frozenset[str], field_name: str) -> None:
        """Validate that a string field holds one of the supported values."""

        if value not in choices:
            supported = ", ".join(sorted(choices))
            raise ValueError(f"Unsupported `{field_name}` value `{value}`; supported: {supported}.")

    @staticmethod
    def _require_non_empty(value: str, field_name: str) -> None:
        """Validate that a string field is not empty."""

        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"`{field_name}` must be a non-empty string.")


class ConfigLoader:
    """Factory methods for creating `TranslationConfig` from external sources."""

    _SUPPORTED_YAML_KEYS = frozenset(TranslationConfig.__dataclass_fields__)
    _ENV_PREFIX = "LIVETRANSLATE_"

    @staticmethod
    def from_yaml(path: Path) -> TranslationConfig:
        """Create a validated config from a YAML file."""

        return ConfigLoader.from_mapping(
            ConfigLoader._yaml_payload(path), source_label=f"YAML `{path}`"
        )

    @staticmethod
    def from_env(env: Mapping[str, str] | None = None) -> TranslationConfig:
        """Create a validated config from `LIVETRANSLATE_*` environment variables."""

        return ConfigLoader.from_mapping(
            ConfigLoader._env_payload(env), source_label="environment"
        )

    @staticmethod
    def load(
        config_path: Path | None = None,
        env: Mapping[str, str] | None = None,
        overrides: Mapping[str, Any] | None = None,
    ) -> TranslationConfig:
        """Merge sources with precedence `overrides` > YAML file > environment > defaults."""

        payload: dict[str, Any] = ConfigLoader._env_payload(env)
        source_label = "environment"
        if config_path is not None:
            payload.update(ConfigLoader._yaml_payload(config_path))
            source_label = f"YAML `{config_path}`"
        if overrides:
            payload.update({key: value for key, value in overrides.items() if value is not None})
        return ConfigLoader.from_mapping(payload, source_label=source_label)

    @staticmethod
    def _yaml_payload(path: Path) -> dict[str, Any]:
        """Parse YAML text and enforce a mapping root payload."""

        payload = yaml.safe_load(path.read_text(encoding="utf-8"))
        if payload is None:
            return {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"YAML config `{path}` must contain a top-level mapping/object.")
        return dict(payload)

    @staticmethod
    def _env_payload(env: Mapping[str, str] | None) -> dict[str, Any]:
        """Collect recognized `LIVETRANSLATE_*` variables into a config payload."""

        env_map: Mapping[str, str] = os.environ if env is None else env
        payload: dict[str, Any] = {}
        for key in sorted(ConfigLoader._SUPPORTED_YAML_KEYS - {"glossary"}):
            value = normalize_optional_string(env_map.get(f"{ConfigLoader._ENV_PREFIX}{key.upper()}"))
            if value is not None:
                payload[key] = value
        return payload

    @staticmethod
    def from_mapping(payload: Mapping[str, Any], source_label: str) -> TranslationConfig:
        """Build a validated config from a loosely typed mapping payload."""

        unknown = sorted(set(payload).difference(ConfigLoader._SUPPORTED_YAML_KEYS))
        if unknown:
            raise ValueError(f"{source_label} includes unsupported key(s): {', '.join(unknown)}.")

        defaults = TranslationConfig()
        cache_path_value = ConfigLoader._optional_string(payload, "cache_path")
        config = TranslationConfig(
            source_language=ConfigLoader._optional_string(payload, "source_language")
            or defaults.source_language,
            target_language=ConfigLoader._optional_string(payload, "target_language")
            or defaults.target_language,
            rate_limit_mode=ConfigLoader._optional_string(payload, "rate_limit_mode")
            or defaults.rate_limit_mode,
            rate_limit_capacity=ConfigLoader._optional_number(
                payload, "rate_limit_capacity", source_label, defaults.rate_limit_capacity
            ),
            rate_limit_interval_seconds=ConfigLoader._optional_number(
                payload,
                "rate_limit_interval_seconds",
                source_label,
                defaults.rate_limit_interval_seconds,
            ),
            max_attempts=ConfigLoader._optional_int(
                payload, "max_attempts", source_label, defaults.max_attempts
            ),
            backoff_base_seconds=ConfigLoader._optional_number(
                payload, "backoff_base_seconds", source_label, defaults.backoff_base_seconds
            ),
            batch_size=ConfigLoader._optional_int(
                payload, "batch_size", source_label, defaults.batch_size
            ),
            cache_path=Path(cache_path_value) if cache_path_value is not None else None,
            cache_name=ConfigLoader._optional_string(payload, "cache_name")
            or defaults.cache_name,
            cache_version=ConfigLoader._optional_int(
                payload, "cache_version", source_label, defaults.cache_version
            ),
            dispatch_mode=ConfigLoader._optional_string(payload, "dispatch_mode")
            or defaults.dispatch_mode,
            worker_threads=ConfigLoader._optional_int(
                payload, "worker_threads", source_label, defaults.worker_threads
            ),
            base_url=ConfigLoader._optional_string(payload, "base_url") or defaults.base_url,
            project_id=ConfigLoader._optional_string(payload, "project_id")
            or defaults.project_id,
            api_key=ConfigLoader._optional_string(payload, "api_key"),
            timeout_seconds=ConfigLoader._optional_number(
                payload, "timeout_seconds", source_label, defaults.timeout_seconds
            ),
            mime_type=ConfigLoader._optional_string(payload, "mime_type") or defaults.mime_type,
            glossary=ConfigLoader._optional_string_map(payload, "glossary", source_label),
        )
        config.validate()
        return config

    @staticmethod
    def _optional_string(payload: Mapping[str, Any], key: str) -> str | None:
        """Read an optional string field and normalize blank values to `None`."""

        if key not in payload:
            return None
        return normalize_optional_string(payload[key])

    @staticmethod
    def _optional_int(
        payload: Mapping[str, Any], key: str, source_label: str, default: int
    ) -> int:
        """Read and validate an integer payload field."""

        if key not in payload:
            return default
        raw_value = payload[key]
        if isinstance(raw_value, bool):
            raise ValueError(f"{source_label} field `{key}` must be an integer.")
        if isinstance(raw_value, int):
            return raw_value
        normalized = normalize_optional_string(raw_value)
        if normalized is None:
            return default
        try:
            return int(normalized)
        except ValueError as exc:
            raise ValueError(f"{source_label} field `{key}` must be an integer.") from exc

    @staticmethod
    def _optional_number(
        payload: Mapping[str, Any], key: str, source_label: str, default: float
    ) -> float:
        """Read and validate a numeric payload field."""

        if key not in payload:
            return default
        raw_value = payload[key]
        if isinstance(raw_value, bool):
            raise ValueError(f"{source_label} field `{key}` must be a number.")
        if isinstance(raw_value, int | float):
            return float(raw_value)
        normalized = normalize_optional_string(raw_value)
        if normalized is None:
            return default
        try:
            return float(normalized)
        except ValueError as exc:
            raise ValueError(f"{source_label} field `{key}` must be a number.") from exc

    @staticmethod
    def _optional_string_map(
        payload: Mapping[str, Any], key: str, source_label: str
    ) -> dict[str, str]:
        """Read an optional mapping with non-empty string keys and values."""

        raw = payload.get(key)
        if raw is None:
            return {}
        if not isinstance(raw, Mapping):
            raise ValueError(f"{source_label} field `{key}` must be a mapping/object.")

        normalized: dict[str, str] = {}
        for raw_key, raw_value in raw.items():
            key_value = normalize_optional_string(raw_key)
            value_value = normalize_optional_string(raw_value)
            if key_value is None:
                raise ValueError(f"{source_label} field `{key}` contains a blank key.")
            if value_value is None:
                raise ValueError(
                    f"{source_label} field `{key}` contains blank value for `{key_value}`."
                )
            normalized[key_value] = value_value
        return normalized
