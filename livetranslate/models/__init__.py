"""Public datatypes used by livetranslate."""

from .datatypes import DispatchRequest, TranslateOptions

__all__ = ["DispatchRequest", "TranslateOptions"]
