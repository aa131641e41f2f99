"""Abstract base class for xcresult format parsers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from types import MappingProxyType
from typing import Any

from .models import Report, TestStatus

# Both the Xcode 16 ("Passed") and object-format ("Success") token families
STATUS_TOKENS: MappingProxyType[str, TestStatus] = MappingProxyType(
    {
        "Passed": TestStatus.SUCCESS,
        "Success": TestStatus.SUCCESS,
        "Failed": TestStatus.FAILURE,
        "Failure": TestStatus.FAILURE,
        "Skipped": TestStatus.SKIPPED,
    }
)


def map_status(token: Any) -> TestStatus:
    """Map a source status token to TestStatus.

    Unrecognized or missing tokens are treated as failures.
    """
    if isinstance(token, str):
        return STATUS_TOKENS.get(token, TestStatus.FAILURE)
    return TestStatus.FAILURE


class FormatParser(ABC):
    """Abstract base class for xcresult format parsers.

    Each xcresulttool generation (Xcode 16 test-results, Xcode 15 object
    graph, legacy fixtures) has a concrete implementation of this class.
    Parsers are tried by a ParserRegistry in descending ``priority``.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the unique name of the format this parser supports."""

    @property
    @abstractmethod
    def priority(self) -> int:
        """Return the detection priority (higher is tried first)."""

    @abstractmethod
    def can_parse(self, data: Any) -> bool:
        """Check if this parser recognizes the given raw data.

        Must be deterministic and must never raise, whatever the shape of
        ``data`` (None, scalars, lists, wrongly shaped objects).

        Args:
            data: Raw JSON value from a DataSource.

        Returns:
            True if this parser recognizes the format.
        """

    @abstractmethod
    async def parse(self, bundle_path: str, data: Any) -> Report:
        """Convert raw data into a Report.

        Callers must check ``can_parse`` first; behavior for unrecognized
        shapes is undefined.

        Args:
            bundle_path: The bundle the data was read from, for detail lookups.
            data: Raw JSON value accepted by ``can_parse``.

        Returns:
            A freshly built Report.
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, priority={self.priority})"
