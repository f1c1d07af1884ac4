"""Telemetry and observability helpers.

This package emits structured translation events and tracks client counters.
"""

from .logger import TranslationEventLogger, configure_logging
from .stats import TranslationStats

__all__ = ["TranslationEventLogger", "TranslationStats", "configure_logging"]
