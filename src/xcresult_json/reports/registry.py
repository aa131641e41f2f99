"""Format parser registry for detecting and parsing xcresult payloads."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from xcresult_json.core.exceptions import UnsupportedFormatError

from .base import FormatParser

if TYPE_CHECKING:
    from xcresult_json.sources.base import DataSource

    from .models import Report

logger = logging.getLogger(__name__)


class ParserRegistry:
    """Registry for format parsers.

    The registry keeps parsers sorted by descending priority and hands raw
    data to the first one that both recognizes it and parses it without
    error. A parser that claims the data but then fails does not abort the
    parse: the next candidate in priority order gets a chance.
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._parsers: list[FormatParser] = []

    @property
    def parsers(self) -> tuple[FormatParser, ...]:
        """Return the registered parsers in priority order."""
        return tuple(self._parsers)

    def get_parsers(self) -> tuple[FormatParser, ...]:
        """Return the registered parsers in priority order."""
        return self.parsers

    def register(self, parser: FormatParser) -> None:
        """Register a parser and keep the list sorted by priority.

        Registering the same instance twice is not deduplicated.

        Args:
            parser: The parser to register.
        """
        self._parsers.append(parser)
        # Stable sort keeps insertion order for equal priorities
        self._parsers.sort(key=lambda p: p.priority, reverse=True)

    def clear(self) -> None:
        """Remove all registered parsers."""
        self._parsers.clear()

    def identify(self, data: Any) -> FormatParser | None:
        """Return the highest-priority parser that recognizes the data, or None."""
        for parser in self._parsers:
            if parser.can_parse(data):
                return parser
        return None

    async def parse(self, bundle_path: str, data: Any) -> Report:
        """Parse raw data with the first parser that succeeds.

        Args:
            bundle_path: The bundle the data was read from.
            data: Raw JSON value.

        Returns:
            The Report from the first successful parser.

        Raises:
            UnsupportedFormatError: If no parser recognized the data, or every
                parser that recognized it failed. A parser whose ``can_parse``
                raises counts as failed.
        """
        attempted: list[tuple[str, str]] = []

        for parser in self._parsers:
            try:
                if not parser.can_parse(data):
                    continue
                logger.debug("parser_attempt: parser=%s, bundle=%s", parser.name, bundle_path)
                report = await parser.parse(bundle_path, data)
            except Exception as e:  # noqa: BLE001 - degrade to the next parser
                attempted.append((parser.name, str(e) or type(e).__name__))
                logger.warning("parser_failed: parser=%s, error=%s", parser.name, e)
                continue

            logger.debug(
                "parser_success: parser=%s, suites=%d, tests=%d",
                parser.name,
                report.total_suites,
                report.total_tests,
            )
            return report

        available = [p.name for p in self._parsers]
        logger.error("parser_all_failed: attempted=%s, available=%s", attempted, available)
        raise UnsupportedFormatError(attempted, available)


def create_format_parsers(data_source: DataSource) -> list[FormatParser]:
    """Create every built-in format parser, highest priority first."""
    from .handlers.legacy import LegacyParser
    from .handlers.xcode15 import Xcode15Parser
    from .handlers.xcode16 import Xcode16Parser, Xcode16SummaryParser

    return [
        Xcode16Parser(),
        Xcode16SummaryParser(data_source),
        Xcode15Parser(data_source),
        LegacyParser(),
    ]


def get_default_registry(data_source: DataSource) -> ParserRegistry:
    """Create a registry with all built-in parsers registered.

    Args:
        data_source: Source used by parsers that need secondary fetches.

    Returns:
        A ParserRegistry with the Xcode 16, Xcode 15 and legacy parsers.
    """
    registry = ParserRegistry()
    for parser in create_format_parsers(data_source):
        registry.register(parser)
    return registry
