"""Live capture -> transcribe -> translate -> speak pipeline wiring.

Responsibilities:
- Start and stop the external audio-capture and speech-recognition
  collaborators together.
- Translate final transcripts through the owned `TranslationClient`.
- Deliver translations and failures to explicitly registered handlers, and
  optionally hand translations to a speech synthesizer.

Audio capture, recognition and synthesis are adapters over host capabilities;
only their narrow interfaces are described here.
"""

from __future__ import annotations

from typing import Awaitable, Callable, Protocol

from .translation.client import TranslationClient

TranscriptHandler = Callable[[str, str, bool], Awaitable[None]]
TranslatedTextHandler = Callable[[str], Awaitable[None] | None]
ErrorHandler = Callable[[Exception], Awaitable[None] | None]


class AudioSource(Protocol):
    """Microphone or tab audio capture collaborator."""

    async def start(self) -> None:
        """Begin capturing audio."""

    async def stop(self) -> None:
        """Stop capturing audio."""


class SpeechRecognizer(Protocol):
    """Continuous speech recognition collaborator."""

    def set_result_handler(self, handler: TranscriptHandler) -> None:
        """Register `handler(transcript, session_id, is_final)` for results."""

    def set_language(self, language: str) -> None:
        """Select the recognition language."""

    async def start(self) -> None:
        """Begin recognizing speech."""

    async def stop(self) -> None:
        """Stop recognizing speech."""


class SpeechSynthesizer(Protocol):
    """Voice synthesis collaborator."""

    async def speak(self, text: str, language: str) -> None:
        """Speak `text` in `language`."""


class LiveTranslationPipeline:
    """Coordinate collaborators around one translation client."""

    def __init__(
        self,
        translation: TranslationClient,
        recognizer: SpeechRecognizer,
        audio_source: AudioSource | None = None,
        synthesizer: SpeechSynthesizer | None = None,
    ) -> None:
        self.translation = translation
        self.recognizer = recognizer
        self.audio_source = audio_source
        self.synthesizer = synthesizer
        self.is_running = False
        self._translated_handlers: list[TranslatedTextHandler] = []
        self._error_handlers: list[ErrorHandler] = []

    def add_translated_text_handler(self, handler: TranslatedTextHandler) -> None:
        self._translated_handlers.append(handler)

    def add_error_handler(self, handler: ErrorHandler) -> None:
        self._error_handlers.append(handler)

    async def start(self) -> None:
        """Start capture and recognition; a second call is a no-op."""

        if self.is_running:
            return
        await self.translation.init()
        self.recognizer.set_result_handler(self.handle_transcript)
        if self.audio_source is not None:
            await self.audio_source.start()
        await self.recognizer.start()
        self.is_running = True

    async def stop(self) -> None:
        """Stop capture and recognition; a second call is a no-op."""

        if not self.is_running:
            return
        self.is_running = False
        if self.audio_source is not None:
            await self.audio_source.stop()
        await self.recognizer.stop()

    async def handle_transcript(self, transcript: str, session_id: str, is_final: bool) -> None:
        """Translate a final transcript and fan the result out to handlers.

        Interim transcripts are ignored. A translation failure is passed to the
        registered error handlers; with none registered it propagates.
        """

        if not is_final:
            return
        try:
            translated = await self.translation.translate(transcript)
        except Exception as exc:
            if not self._error_handlers:
                raise
            for error_handler in self._error_handlers:
                await _maybe_await(error_handler(exc))
            return

        for handler in self._translated_handlers:
            await _maybe_await(handler(translated))
        if self.synthesizer is not None:
            await self.synthesizer.speak(translated, self.translation.target_language)

    def set_source_language(self, language: str) -> None:
        """Switch the spoken language for both recognition and translation."""

        self.translation.set_source_language(language)
        if self.translation.source_language != "auto":
            self.recognizer.set_language(self.translation.source_language)

    def set_target_language(self, language: str) -> None:
        self.translation.set_target_language(language)

    async def clear_cache(self) -> None:
        await self.translation.clear_cache()

    def add_glossary_term(self, term: str, translation: str) -> None:
        self.translation.add_glossary_term(term, translation)


async def _maybe_await(result: Awaitable[None] | None) -> None:
    if result is not None:
        await result
