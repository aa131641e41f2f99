"""Built-in format parsers, one per xcresulttool generation."""

from .legacy import LegacyParser
from .xcode15 import Xcode15Parser
from .xcode16 import Xcode16Parser, Xcode16SummaryParser

__all__ = [
    "LegacyParser",
    "Xcode15Parser",
    "Xcode16Parser",
    "Xcode16SummaryParser",
]
