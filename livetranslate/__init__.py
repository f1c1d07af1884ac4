"""Top-level package for livetranslate.

This package provides the translation service behind a live
capture -> transcribe -> translate -> speak pipeline. The main entry point is
`TranslationClient`; `LiveTranslationPipeline` wires it to external audio,
speech-recognition and speech-synthesis collaborators.
"""

from .pipeline import LiveTranslationPipeline
from .translation.client import TranslationClient

__all__ = ["LiveTranslationPipeline", "TranslationClient", "__version__"]

__version__ = "0.1.0"
