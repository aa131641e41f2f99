"""Legacy format parser for ``issues.testableSummaries`` payloads.

This shape comes from older xcresulttool versions and from JSON test
fixtures. It carries no references to richer failure details, so every
failing test gets the same static message.
"""

from __future__ import annotations

from typing import Any

from ..base import FormatParser
from ..models import Report, SuiteResult, TestResult, TestStatus
from ...utils.values import dig
from .testable import FALLBACK_FAILURE_MESSAGE, iter_leaf_tests, suite_name


class LegacyParser(FormatParser):
    """Parser for the legacy wrapped-array format."""

    @property
    def name(self) -> str:
        return "legacy"

    @property
    def priority(self) -> int:
        return 80

    def can_parse(self, data: Any) -> bool:
        return isinstance(dig(data, "issues", "testableSummaries", "_values"), list)

    async def parse(self, bundle_path: str, data: Any) -> Report:
        suites = [
            self._parse_suite(summary)
            for summary in dig(data, "issues", "testableSummaries", "_values") or []
        ]
        return Report.from_suites(suites)

    def _parse_suite(self, summary: Any) -> SuiteResult:
        tests = [
            TestResult(
                name=leaf.name,
                status=leaf.status,
                duration=leaf.duration,
                failure_message=(
                    FALLBACK_FAILURE_MESSAGE if leaf.status is TestStatus.FAILURE else None
                ),
            )
            for leaf in iter_leaf_tests(summary)
        ]
        return SuiteResult.from_tests(suite_name(summary), tests)
