"""Xcode 15.x object-graph format parser.

The top-level payload (``xcresulttool get object``) only holds the action
record. Test summaries live behind ``actionResult.testsRef`` and failure
details behind each failing test's ``summaryRef``; both are fetched through
the data source.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any

from xcresult_json.core.exceptions import XCRESULTTOOL_FAILED, XCResultError

from ..base import FormatParser
from ..models import Report, SuiteResult, TestResult, TestStatus
from ...utils.values import dig, wrapped_str, wrapped_values
from .testable import FALLBACK_FAILURE_MESSAGE, LeafTest, iter_leaf_tests, suite_name

if TYPE_CHECKING:
    from xcresult_json.sources.base import DataSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DetailLookup:
    """Outcome of resolving a failing test's message from its detail payload.

    ``fetched`` is False when the payload could not be retrieved; the test is
    then reported without any message, not even the generic fallback.
    """

    message: str | None
    fetched: bool

    @classmethod
    def resolved(cls, message: str) -> DetailLookup:
        return cls(message=message, fetched=True)

    @classmethod
    def unavailable(cls) -> DetailLookup:
        return cls(message=None, fetched=False)


def resolve_failure_message(details: Any) -> str:
    """Pick the most specific failure message from a test detail payload.

    Lookup order: first ``failureSummaries`` entry, then the first entry of
    ``summaries`` + ``testFailureSummaries`` (message, else title), then any
    ``activitySummaries`` title mentioning "failed", then a generic message.
    """
    failure_summaries = wrapped_values(details, "failureSummaries")
    if failure_summaries:
        return wrapped_str(failure_summaries[0], "message") or FALLBACK_FAILURE_MESSAGE

    other_summaries = wrapped_values(details, "summaries") + wrapped_values(
        details, "testFailureSummaries"
    )
    if other_summaries:
        first = other_summaries[0]
        return (
            wrapped_str(first, "message") or wrapped_str(first, "title") or FALLBACK_FAILURE_MESSAGE
        )

    for activity in wrapped_values(details, "activitySummaries"):
        title = wrapped_str(activity, "title")
        if title and "failed" in title:
            return title

    return FALLBACK_FAILURE_MESSAGE


def _parse_timestamp(value: Any) -> datetime | None:
    if not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None


def action_duration(action: Any) -> float:
    """Seconds between an action's startedTime and endedTime, or 0."""
    started = _parse_timestamp(wrapped_str(action, "startedTime"))
    ended = _parse_timestamp(wrapped_str(action, "endedTime"))
    if started is None or ended is None:
        return 0.0
    try:
        return max((ended - started).total_seconds(), 0.0)
    except TypeError:
        # One timestamp is naive, the other aware
        return 0.0


class Xcode15Parser(FormatParser):
    """Parser for the Xcode 15.x ``actions`` object graph."""

    def __init__(self, data_source: DataSource) -> None:
        self._data_source = data_source

    @property
    def name(self) -> str:
        return "xcode15"

    @property
    def priority(self) -> int:
        return 90

    def can_parse(self, data: Any) -> bool:
        return isinstance(dig(data, "actions", "_values"), list)

    async def parse(self, bundle_path: str, data: Any) -> Report:
        action = next(iter(wrapped_values(data, "actions")), None)
        total_duration = action_duration(action)

        tests_ref = wrapped_str(action, "actionResult", "testsRef", "id")
        if tests_ref is None:
            # Action ran but produced no tests (e.g. build-only)
            return Report.from_suites([], total_duration=total_duration)

        plan_summaries = await self._data_source.get_detail(bundle_path, tests_ref)
        if plan_summaries is None:
            raise XCResultError(
                f"Could not fetch test summaries {tests_ref} from {bundle_path}",
                XCRESULTTOOL_FAILED,
            )

        suites = []
        for summary in wrapped_values(plan_summaries, "summaries"):
            for testable in wrapped_values(summary, "testableSummaries"):
                suites.append(await self._parse_suite(bundle_path, testable))

        return Report.from_suites(suites, total_duration=total_duration)

    async def _parse_suite(self, bundle_path: str, testable: Any) -> SuiteResult:
        leaves = list(iter_leaf_tests(testable))
        # gather() returns results in argument order, so traversal order is kept
        tests = await asyncio.gather(*(self._build_result(bundle_path, leaf) for leaf in leaves))
        return SuiteResult.from_tests(suite_name(testable), tests)

    async def _build_result(self, bundle_path: str, leaf: LeafTest) -> TestResult:
        message = None
        if leaf.status is TestStatus.FAILURE and leaf.summary_ref:
            lookup = await self.lookup_failure(bundle_path, leaf.summary_ref, leaf.name)
            message = lookup.message
        return TestResult(
            name=leaf.name,
            status=leaf.status,
            duration=leaf.duration,
            failure_message=message,
        )

    async def lookup_failure(
        self, bundle_path: str, reference_id: str, test_name: str
    ) -> DetailLookup:
        """Fetch a failing test's detail payload and resolve its message."""
        try:
            details = await self._data_source.get_detail(bundle_path, reference_id)
        except Exception as e:  # noqa: BLE001 - one bad detail must not fail the parse
            logger.warning(
                "failure_detail_error: test=%s, ref=%s, error=%s", test_name, reference_id, e
            )
            return DetailLookup.unavailable()

        if details is None:
            logger.warning("failure_detail_missing: test=%s, ref=%s", test_name, reference_id)
            return DetailLookup.unavailable()

        return DetailLookup.resolved(resolve_failure_message(details))
