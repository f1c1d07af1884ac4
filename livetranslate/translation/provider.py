"""HTTP client for the remote translation and language-detection API.

Responsibilities:
- Send JSON translate/detect requests to a vendor-neutral REST endpoint.
- Normalize response extraction into ordered translated strings.
- Map transport, HTTP and payload failures onto the domain error taxonomy.

The wire shape follows a Google-Translate-v3-like layout:
``POST {base_url}/{project_id}:translateText`` with
``{"contents": [...], "targetLanguageCode": ..., "mimeType": ...}`` returning
``{"translations": [{"translatedText": ...}, ...]}``.
"""

from __future__ import annotations

import json
import re
import socket
from typing import Any, Protocol

import requests

from ..errors import HttpError, NetworkError, UnexpectedResponseShape
from ..parsing import AUTO_LANGUAGE


class TranslationProvider(Protocol):
    """Protocol for blocking remote translation backends."""

    def translate_texts(
        self,
        texts: list[str],
        *,
        source_language: str,
        target_language: str,
        mime_type: str = "text/plain",
    ) -> list[str]:
        """Translate texts and return results aligned to request order."""

    def detect_language(self, text: str) -> str:
        """Return the most probable language tag for `text`."""


class HttpTranslationProvider:
    """Minimal requests-based HTTP client for the translation API."""

    _MAX_PROVIDER_MESSAGE_CHARS = 180

    def __init__(
        self,
        *,
        api_key: str | None,
        base_url: str = "https://translation.googleapis.com/v3/projects",
        project_id: str = "livetranslate",
        timeout_seconds: float = 30.0,
    ) -> None:
        """Initialize HTTP client settings."""

        self.api_key = api_key.strip() if isinstance(api_key, str) else ""
        self.base_url = base_url.rstrip("/")
        self.project_id = project_id
        self.timeout_seconds = timeout_seconds

    def translate_texts(
        self,
        texts: list[str],
        *,
        source_language: str,
        target_language: str,
        mime_type: str = "text/plain",
    ) -> list[str]:
        """Return translated strings aligned to `texts` order."""

        payload: dict[str, Any] = {
            "contents": list(texts),
            "targetLanguageCode": target_language,
            "mimeType": mime_type,
        }
        if source_language != AUTO_LANGUAGE:
            payload["sourceLanguageCode"] = source_language
        response_payload = self._post_json(method="translateText", payload=payload)
        return self._extract_translations(response_payload)

    def detect_language(self, text: str) -> str:
        """Return the best-guess language tag from the detection endpoint."""

        response_payload = self._post_json(
            method="detectLanguage",
            payload={"content": text, "mimeType": "text/plain"},
        )
        return self._extract_language_code(response_payload)

    def _post_json(self, *, method: str, payload: dict[str, Any]) -> Any:
        """POST a JSON payload and decode the JSON response body."""

        endpoint = f"{self.base_url}/{self.project_id}:{method}"
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        try:
            response = requests.post(
                endpoint,
                headers=headers,
                json=payload,
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
            body = bytes(response.content)
        except requests.HTTPError as exc:
            raise self._http_error_to_provider_error(exc) from exc
        except requests.RequestException as exc:
            failure_kind = self._classify_transport_failure(exc)
            if failure_kind == "timeout":
                detail = "Translation request timed out."
            else:
                detail = f"Translation request transport error: {self._short_message(str(exc))}"
            raise NetworkError(detail, failure_kind=failure_kind) from exc
        except TimeoutError as exc:
            raise NetworkError("Translation request timed out.", failure_kind="timeout") from exc

        try:
            return json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise UnexpectedResponseShape("Provider returned invalid JSON payload.") from exc

    @staticmethod
    def _extract_translations(payload: Any) -> list[str]:
        """Extract ordered translated strings from a translate response payload."""

        if not isinstance(payload, dict):
            raise UnexpectedResponseShape("Provider response must be a JSON object.")
        translations = payload.get("translations")
        if translations is None and isinstance(payload.get("data"), dict):
            translations = payload["data"].get("translations")
        if not isinstance(translations, list):
            raise UnexpectedResponseShape("Provider response missing `translations` list.")

        results: list[str] = []
        for index, item in enumerate(translations):
            if not isinstance(item, dict) or not isinstance(item.get("translatedText"), str):
                raise UnexpectedResponseShape(
                    f"Provider response `translations[{index}].translatedText` is malformed."
                )
            results.append(item["translatedText"])
        return results

    @staticmethod
    def _extract_language_code(payload: Any) -> str:
        """Extract the first language code from a detect response payload."""

        languages = payload.get("languages") if isinstance(payload, dict) else None
        if not isinstance(languages, list) or not languages:
            raise UnexpectedResponseShape("Provider response missing non-empty `languages` list.")
        first = languages[0]
        code = first.get("languageCode") if isinstance(first, dict) else None
        if not isinstance(code, str) or not code.strip():
            raise UnexpectedResponseShape("Provider response `languages[0].languageCode` is malformed.")
        return code.strip()

    @staticmethod
    def _decode_error_body(exc: requests.HTTPError) -> str:
        """Decode an HTTP error body into a best-effort UTF-8 payload string."""

        response = exc.response
        if response is None:
            return ""
        return bytes(response.content).decode("utf-8", errors="replace").strip()

    @classmethod
    def _redact_sensitive_tokens(cls, text: str) -> str:
        """Redact API-key-like tokens from provider error content."""

        redacted = re.sub(r"\bAIza[A-Za-z0-9_-]{20,}\b", "[redacted-key]", text)
        redacted = re.sub(
            r"(?i)bearer\s+[A-Za-z0-9._-]{12,}",
            "Bearer [redacted-token]",
            redacted,
        )
        return redacted

    @classmethod
    def _short_message(cls, text: str) -> str:
        """Normalize and cap user-facing provider message length."""

        compact = " ".join(text.split())
        if len(compact) <= cls._MAX_PROVIDER_MESSAGE_CHARS:
            return compact
        return f"{compact[: cls._MAX_PROVIDER_MESSAGE_CHARS - 1]}..."

    @classmethod
    def _extract_provider_message(cls, body: str) -> str:
        """Extract a concise provider-facing message from an error body."""

        if not body:
            return ""
        try:
            payload = json.loads(body)
        except json.JSONDecodeError:
            return cls._short_message(cls._redact_sensitive_tokens(body))

        message = body
        if isinstance(payload, dict):
            error_payload = payload.get("error")
            if isinstance(error_payload, dict):
                message_value = error_payload.get("message")
                if isinstance(message_value, str) and message_value.strip():
                    message = message_value.strip()
        return cls._short_message(cls._redact_sensitive_tokens(message))

    @staticmethod
    def _classify_http_failure(status_code: int, provider_message: str) -> str:
        """Classify HTTP errors into deterministic diagnostic kinds."""

        message_lower = provider_message.lower()
        if status_code in {401, 403} or "api key" in message_lower:
            return "invalid_api_key"
        if status_code == 429 or "quota" in message_lower:
            return "quota"
        if status_code in {408, 504} or "timeout" in message_lower or "timed out" in message_lower:
            return "timeout"
        return "http_error"

    @staticmethod
    def _classify_transport_failure(reason: object) -> str:
        """Classify network-layer failures into deterministic diagnostic kinds."""

        if isinstance(reason, TimeoutError | socket.timeout | requests.Timeout):
            return "timeout"
        return "transport"

    @classmethod
    def _http_error_to_provider_error(cls, exc: requests.HTTPError) -> HttpError:
        """Convert HTTP errors into normalized provider exceptions with metadata."""

        status_code = exc.response.status_code if exc.response is not None else 0
        provider_message = cls._extract_provider_message(cls._decode_error_body(exc))
        failure_kind = cls._classify_http_failure(status_code, provider_message)

        headline = {
            "invalid_api_key": "Translation provider authentication failed",
            "quota": "Translation provider quota or rate limit reached",
            "timeout": "Translation request timed out",
        }.get(failure_kind, "Translation request failed")

        if provider_message:
            detail = f"{headline} (HTTP {status_code}): {provider_message}"
        else:
            detail = f"{headline} (HTTP {status_code})."
        return HttpError(detail, failure_kind=failure_kind, status_code=status_code)
