"""Text transformations applied around provider calls.

This package masks structural substrings before translation and enforces
glossary terms afterwards.
"""

from .glossary import Glossary
from .protector import ProtectedText, TextProtector

__all__ = ["Glossary", "ProtectedText", "TextProtector"]
