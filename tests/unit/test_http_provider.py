"""Unit tests for the requests-based translation provider adapter."""

from __future__ import annotations

import json

import pytest
import requests

from livetranslate.errors import HttpError, NetworkError, UnexpectedResponseShape
from livetranslate.translation.provider import HttpTranslationProvider


class _MockRequestsResponse:
    """Minimal requests response mock used by provider tests."""

    def __init__(self, *, payload: bytes, status_code: int = 200) -> None:
        """Initialize response with payload bytes and status code."""

        self.content = payload
        self.status_code = status_code

    def raise_for_status(self) -> None:
        """Raise HTTP error when status code indicates failure."""

        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}", response=self)


def _json_response(payload: object, status_code: int = 200) -> _MockRequestsResponse:
    """Encode a JSON payload into a mock response."""

    return _MockRequestsResponse(
        payload=json.dumps(payload).encode("utf-8"), status_code=status_code
    )


def _provider() -> HttpTranslationProvider:
    """Build a provider with a fixed endpoint layout."""

    return HttpTranslationProvider(
        api_key=" secret-token ",
        base_url="https://translate.example.test/v3/projects/",
        project_id="demo",
        timeout_seconds=5.0,
    )


def test_translate_texts_posts_contents_and_returns_ordered_results(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Translate should send the batch payload and keep response order."""

    captured: dict[str, object] = {}

    def _mock_post(url: str, **kwargs: object) -> _MockRequestsResponse:
        """Capture request arguments and return two translations."""

        captured["url"] = url
        captured.update(kwargs)
        return _json_response(
            {"translations": [{"translatedText": "hola"}, {"translatedText": "mundo"}]}
        )

    monkeypatch.setattr("livetranslate.translation.provider.requests.post", _mock_post)

    result = _provider().translate_texts(
        ["hello", "world"], source_language="en", target_language="es"
    )

    assert result == ["hola", "mundo"]
    assert captured["url"] == "https://translate.example.test/v3/projects/demo:translateText"
    assert captured["json"] == {
        "contents": ["hello", "world"],
        "targetLanguageCode": "es",
        "mimeType": "text/plain",
        "sourceLanguageCode": "en",
    }
    assert captured["headers"] == {
        "Content-Type": "application/json",
        "Authorization": "Bearer secret-token",
    }
    assert captured["timeout"] == 5.0


def test_translate_texts_omits_source_for_auto_and_accepts_data_envelope(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Auto source should be left to the provider; `data.translations` is accepted."""

    captured: dict[str, object] = {}

    def _mock_post(_url: str, **kwargs: object) -> _MockRequestsResponse:
        """Capture the payload and answer with a wrapped translations list."""

        captured.update(kwargs)
        return _json_response({"data": {"translations": [{"translatedText": "<b>hola</b>"}]}})

    monkeypatch.setattr("livetranslate.translation.provider.requests.post", _mock_post)

    result = _provider().translate_texts(
        ["<b>hello</b>"], source_language="auto", target_language="es", mime_type="text/html"
    )

    assert result == ["<b>hola</b>"]
    assert "sourceLanguageCode" not in captured["json"]
    assert captured["json"]["mimeType"] == "text/html"


def test_detect_language_returns_first_language_code(monkeypatch: pytest.MonkeyPatch) -> None:
    """Detection should return the first reported language code."""

    def _mock_post(url: str, **_kwargs: object) -> _MockRequestsResponse:
        """Answer the detect endpoint with two candidates."""

        assert url.endswith("demo:detectLanguage")
        return _json_response(
            {"languages": [{"languageCode": " fr "}, {"languageCode": "it"}]}
        )

    monkeypatch.setattr("livetranslate.translation.provider.requests.post", _mock_post)

    assert _provider().detect_language("bonjour") == "fr"


@pytest.mark.parametrize(
    ("status_code", "body", "expected_kind"),
    [
        (401, {"error": {"message": "Request had invalid credentials."}}, "invalid_api_key"),
        (429, {"error": {"message": "Too many requests."}}, "quota"),
        (504, {"error": {"message": "Gateway timeout."}}, "timeout"),
        (500, {"error": {"message": "Internal error."}}, "http_error"),
    ],
)
def test_http_errors_map_to_classified_http_error(
    monkeypatch: pytest.MonkeyPatch,
    status_code: int,
    body: dict[str, object],
    expected_kind: str,
) -> None:
    """Non-2xx responses should raise retryable `HttpError` with a failure kind."""

    def _mock_post(_url: str, **_kwargs: object) -> _MockRequestsResponse:
        """Return the parametrized error response."""

        return _json_response(body, status_code=status_code)

    monkeypatch.setattr("livetranslate.translation.provider.requests.post", _mock_post)

    with pytest.raises(HttpError) as exc_info:
        _provider().translate_texts(["hi"], source_language="en", target_language="es")

    assert isinstance(exc_info.value, NetworkError)
    assert exc_info.value.status_code == status_code
    assert exc_info.value.failure_kind == expected_kind
    assert f"HTTP {status_code}" in str(exc_info.value)


def test_http_error_message_redacts_api_keys(monkeypatch: pytest.MonkeyPatch) -> None:
    """Provider error text must never echo key-like tokens."""

    leaked_key = "AIzaSyA1234567890abcdefghijklmn"

    def _mock_post(_url: str, **_kwargs: object) -> _MockRequestsResponse:
        """Return an error echoing the credential."""

        return _json_response(
            {"error": {"message": f"API key {leaked_key} not valid."}}, status_code=400
        )

    monkeypatch.setattr("livetranslate.translation.provider.requests.post", _mock_post)

    with pytest.raises(HttpError) as exc_info:
        _provider().translate_texts(["hi"], source_language="en", target_language="es")

    assert leaked_key not in str(exc_info.value)
    assert "[redacted-key]" in str(exc_info.value)
    assert exc_info.value.failure_kind == "invalid_api_key"


def test_transport_timeout_maps_to_network_error(monkeypatch: pytest.MonkeyPatch) -> None:
    """Timeouts without an HTTP response should raise plain `NetworkError`."""

    def _mock_post(_url: str, **_kwargs: object) -> _MockRequestsResponse:
        """Simulate a socket timeout."""

        raise requests.Timeout("socket timed out")

    monkeypatch.setattr("livetranslate.translation.provider.requests.post", _mock_post)

    with pytest.raises(NetworkError) as exc_info:
        _provider().detect_language("hello")

    assert not isinstance(exc_info.value, HttpError)
    assert exc_info.value.failure_kind == "timeout"


def test_connection_failure_maps_to_transport_network_error(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Connection errors should be classified as transport failures."""

    def _mock_post(_url: str, **_kwargs: object) -> _MockRequestsResponse:
        """Simulate a refused connection."""

        raise requests.ConnectionError("connection refused")

    monkeypatch.setattr("livetranslate.translation.provider.requests.post", _mock_post)

    with pytest.raises(NetworkError, match="transport error") as exc_info:
        _provider().translate_texts(["hi"], source_language="en", target_language="es")

    assert exc_info.value.failure_kind == "transport"


@pytest.mark.parametrize(
    "payload",
    [
        b"not json",
        json.dumps({"translations": "hola"}).encode("utf-8"),
        json.dumps({"translations": [{"text": "hola"}]}).encode("utf-8"),
        json.dumps(["hola"]).encode("utf-8"),
    ],
)
def test_malformed_translate_payloads_raise_unexpected_shape(
    monkeypatch: pytest.MonkeyPatch, payload: bytes
) -> None:
    """Unparseable or misshapen bodies should raise `UnexpectedResponseShape`."""

    def _mock_post(_url: str, **_kwargs: object) -> _MockRequestsResponse:
        """Return the parametrized malformed body."""

        return _MockRequestsResponse(payload=payload)

    monkeypatch.setattr("livetranslate.translation.provider.requests.post", _mock_post)

    with pytest.raises(UnexpectedResponseShape):
        _provider().translate_texts(["hi"], source_language="en", target_language="es")


def test_malformed_detect_payload_raises_unexpected_shape(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """An empty language list should raise `UnexpectedResponseShape`."""

    def _mock_post(_url: str, **_kwargs: object) -> _MockRequestsResponse:
        """Return no detected languages."""

        return _json_response({"languages": []})

    monkeypatch.setattr("livetranslate.translation.provider.requests.post", _mock_post)

    with pytest.raises(UnexpectedResponseShape):
        _provider().detect_language("hello")
