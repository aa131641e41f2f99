"""Xcode 16+ test-results format parsers.

``xcresulttool get test-results tests`` emits a tree of typed nodes::

    Test Plan > Unit test bundle > Test Suite > Test Case > Failure Message

Every ``Test Suite`` becomes one SuiteResult holding all ``Test Case``
nodes below it; other container types are walked through transparently.
``get test-results summary`` only carries aggregate counts and a
``testFailures`` list, so the summary parser fetches the tree separately.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Iterator, Mapping
from typing import TYPE_CHECKING, Any

from ..base import FormatParser, map_status
from ..models import UNKNOWN_TEST, Report, SuiteResult, TestResult, TestStatus
from ...utils.values import as_list, dig, is_number

if TYPE_CHECKING:
    from xcresult_json.sources.base import DataSource

logger = logging.getLogger(__name__)

TEST_SUITE = "Test Suite"
TEST_CASE = "Test Case"
FAILURE_MESSAGE = "Failure Message"


def build_failure_map(test_failures: Any) -> dict[str, str]:
    """Index ``testFailures`` entries' text by test identifier."""
    failures: dict[str, str] = {}
    for failure in as_list(test_failures):
        if not isinstance(failure, dict):
            continue
        text = failure.get("failureText")
        if not isinstance(text, str) or not text:
            continue
        for key in ("testIdentifierString", "testIdentifier"):
            identifier = failure.get(key)
            if isinstance(identifier, str | int) and not isinstance(identifier, bool):
                # First reported failure wins
                failures.setdefault(str(identifier), text)
    return failures


def _children(node: dict) -> list[dict]:
    return [child for child in as_list(node.get("children")) if isinstance(child, dict)]


def _node_name(node: dict) -> str | None:
    name = node.get("name")
    return name if isinstance(name, str) and name else None


def _finite(value: Any) -> bool:
    return is_number(value) and math.isfinite(value)


def _node_duration(node: dict) -> float:
    seconds = node.get("durationInSeconds")
    if _finite(seconds) and seconds >= 0:
        return float(seconds)
    return 0.0


def _failure_message(node: dict, name: str, failures: Mapping[str, str]) -> str:
    identifier = node.get("nodeIdentifier")
    for key in (identifier, _node_name(node)):
        if isinstance(key, str) and key in failures:
            return failures[key]

    for child in _children(node):
        if child.get("nodeType") == FAILURE_MESSAGE and _node_name(child):
            return _node_name(child)

    return f"Test '{name}' failed"


def _test_result(node: dict, failures: Mapping[str, str]) -> TestResult:
    name = _node_name(node)
    if name is None:
        identifier = node.get("nodeIdentifier")
        name = identifier if isinstance(identifier, str) and identifier else UNKNOWN_TEST
    status = map_status(node.get("result"))
    message = _failure_message(node, name, failures) if status is TestStatus.FAILURE else None
    return TestResult(
        name=name,
        status=status,
        duration=_node_duration(node),
        failure_message=message,
    )


def iter_test_cases(node: dict, failures: Mapping[str, str]) -> Iterator[TestResult]:
    """Yield every Test Case at or below node, depth-first, including nested cases."""
    if node.get("nodeType") == TEST_CASE:
        yield _test_result(node, failures)
    for child in _children(node):
        yield from iter_test_cases(child, failures)


def iter_suites(nodes: Iterable[Any], failures: Mapping[str, str]) -> Iterator[SuiteResult]:
    """Yield a SuiteResult for every outermost Test Suite in the tree."""
    for node in nodes:
        if not isinstance(node, dict):
            continue
        if node.get("nodeType") == TEST_SUITE:
            yield SuiteResult.from_tests(_node_name(node), iter_test_cases(node, failures))
        else:
            yield from iter_suites(_children(node), failures)


class Xcode16Parser(FormatParser):
    """Parser for the Xcode 16 nested ``testNodes`` tree."""

    @property
    def name(self) -> str:
        return "xcode16"

    @property
    def priority(self) -> int:
        return 100

    def can_parse(self, data: Any) -> bool:
        return isinstance(dig(data, "testNodes"), list)

    async def parse(self, bundle_path: str, data: Any) -> Report:
        failures = build_failure_map(dig(data, "testFailures"))
        suites = list(iter_suites(dig(data, "testNodes") or [], failures))
        return Report.from_suites(suites)


class Xcode16SummaryParser(FormatParser):
    """Parser for the Xcode 16 ``test-results summary`` payload.

    The summary reports aggregate counts, so ``total_tests`` reflects what
    xcresulttool counted (passed + failed + skipped) rather than the
    per-suite buckets.
    """

    def __init__(self, data_source: DataSource) -> None:
        self._data_source = data_source

    @property
    def name(self) -> str:
        return "xcode16-summary"

    @property
    def priority(self) -> int:
        return 95

    def can_parse(self, data: Any) -> bool:
        return (
            isinstance(dig(data, "devicesAndConfigurations"), list)
            and is_number(dig(data, "passedTests"))
            and is_number(dig(data, "failedTests"))
        )

    async def parse(self, bundle_path: str, data: Any) -> Report:
        tree = await self._data_source.get_test_tree(bundle_path)
        if tree is None:
            logger.warning("test_tree_unavailable: bundle=%s, using summary only", bundle_path)

        failures = build_failure_map(dig(data, "testFailures"))
        suites = list(iter_suites(as_list(dig(tree, "testNodes")), failures))

        counts = (dig(data, key) for key in ("passedTests", "failedTests", "skippedTests"))
        total_tests = sum(int(count) for count in counts if _finite(count))
        return Report.from_suites(
            suites,
            total_duration=self._summary_duration(data),
            total_tests=total_tests,
        )

    @staticmethod
    def _summary_duration(data: Any) -> float | None:
        start, finish = dig(data, "startTime"), dig(data, "finishTime")
        if _finite(start) and _finite(finish) and finish >= start:
            return float(finish - start)
        # Fall back to the sum of suite durations
        return None
