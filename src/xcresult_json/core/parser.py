"""Top-level bundle parser: fetch raw data, then detect and normalize its format."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .exceptions import XCResultError

if TYPE_CHECKING:
    from xcresult_json.reports.models import Report
    from xcresult_json.reports.registry import ParserRegistry
    from xcresult_json.sources.base import DataSource

logger = logging.getLogger(__name__)


class XCResultParser:
    """Parses xcresult bundles with an injected data source and parser registry."""

    def __init__(self, data_source: DataSource, registry: ParserRegistry) -> None:
        self._data_source = data_source
        self._registry = registry

    @property
    def registry(self) -> ParserRegistry:
        return self._registry

    async def parse(self, bundle_path: str) -> Report:
        """Parse an xcresult bundle into a Report.

        Args:
            bundle_path: Path to the .xcresult bundle (or a JSON fixture).

        Returns:
            The normalized Report.

        Raises:
            XCResultError: INVALID_BUNDLE for an empty or invalid path,
                XCRESULTTOOL_* when fetching fails, UNSUPPORTED_FORMAT
                (as UnsupportedFormatError) when no parser handles the data.
        """
        if not bundle_path:
            raise XCResultError.invalid_bundle("Path is required")

        try:
            data = await self._data_source.get_data(bundle_path)
        except XCResultError:
            raise
        except Exception as e:  # noqa: BLE001 - normalize collaborator failures
            raise XCResultError.xcresulttool_failed(e) from e

        report = await self._registry.parse(bundle_path, data)
        logger.info(
            "bundle_parsed: bundle=%s, suites=%d, tests=%d",
            bundle_path,
            report.total_suites,
            report.total_tests,
        )
        return report
