"""Test data factories for xcresult-json tests.

This module provides builders for raw xcresulttool payloads in each
supported shape, plus an in-memory DataSource.

Usage:
    from tests.factories import make_legacy_payload, make_legacy_test, make_testable

    payload = make_legacy_payload(make_testable("S", [make_legacy_test("t1")]))
"""

from __future__ import annotations

from typing import Any

from xcresult_json.sources.base import DataSource


def wrap(value: Any) -> dict:
    """Wrap a scalar the way the object format does: {"_value": x}."""
    return {"_value": value}


def wrap_list(items: list) -> dict:
    """Wrap an array the way the object format does: {"_values": [...]}."""
    return {"_values": list(items)}


# =============================================================================
# LEGACY / XCODE 15 TESTABLE SUMMARIES
# =============================================================================


def make_legacy_test(
    identifier: str | None = "testExample()",
    status: str | None = "Success",
    duration: float | None = 0.1,
    summary_ref: str | None = None,
    subtests: list[dict] | None = None,
    children: list[dict] | None = None,
) -> dict:
    """Create a test node in the wrapped object format."""
    node: dict = {}
    if identifier is not None:
        node["identifier"] = wrap(identifier)
    if status is not None:
        node["testStatus"] = wrap(status)
    if duration is not None:
        node["duration"] = wrap(duration)
    if summary_ref is not None:
        node["summaryRef"] = {"id": wrap(summary_ref)}
    if subtests is not None:
        node["subtests"] = wrap_list(subtests)
    if children is not None:
        node["children"] = wrap_list(children)
    return node


def make_testable(name: str | None, tests: list[dict]) -> dict:
    """Create a testable summary (one suite)."""
    summary: dict = {"tests": wrap_list(tests)}
    if name is not None:
        summary["name"] = wrap(name)
    return summary


def make_legacy_payload(*testables: dict) -> dict:
    """Create a legacy ``issues.testableSummaries`` payload."""
    return {"issues": {"testableSummaries": wrap_list(testables)}}


def make_xcode15_payload(
    tests_ref: str | None = "tests-ref-1",
    started: str | None = "2024-01-15T10:00:00.000+00:00",
    ended: str | None = "2024-01-15T10:00:12.500+00:00",
) -> dict:
    """Create an Xcode 15 ``actions`` payload with one action."""
    action: dict = {"actionResult": {}}
    if started is not None:
        action["startedTime"] = wrap(started)
    if ended is not None:
        action["endedTime"] = wrap(ended)
    if tests_ref is not None:
        action["actionResult"]["testsRef"] = {"id": wrap(tests_ref)}
    return {"actions": wrap_list([action])}


def make_plan_summaries(*testables: dict) -> dict:
    """Create the payload behind an Xcode 15 testsRef."""
    return {"summaries": wrap_list([{"testableSummaries": wrap_list(testables)}])}


# =============================================================================
# XCODE 16 TEST NODES
# =============================================================================


def make_node(
    node_type: str,
    name: str | None,
    result: str | None = None,
    duration: float | None = None,
    children: list[dict] | None = None,
    identifier: str | None = None,
) -> dict:
    """Create an Xcode 16 test node."""
    node: dict = {"nodeType": node_type}
    if name is not None:
        node["name"] = name
    if result is not None:
        node["result"] = result
    if duration is not None:
        node["durationInSeconds"] = duration
    if children is not None:
        node["children"] = children
    if identifier is not None:
        node["nodeIdentifier"] = identifier
    return node


def make_test_case(
    name: str, result: str = "Passed", duration: float = 0.1, **kwargs: Any
) -> dict:
    return make_node("Test Case", name, result=result, duration=duration, **kwargs)


def make_suite_node(name: str | None, children: list[dict], **kwargs: Any) -> dict:
    return make_node("Test Suite", name, children=children, **kwargs)


def make_xcode16_payload(*nodes: dict, failures: list[dict] | None = None) -> dict:
    """Create an Xcode 16 ``testNodes`` payload."""
    payload: dict = {"testNodes": list(nodes)}
    if failures is not None:
        payload["testFailures"] = failures
    return payload


def make_xcode16_summary(
    passed: int = 1,
    failed: int = 1,
    skipped: int = 0,
    start: float | None = 1_700_000_000.0,
    finish: float | None = 1_700_000_042.5,
    failures: list[dict] | None = None,
) -> dict:
    """Create an Xcode 16 ``test-results summary`` payload."""
    summary: dict = {
        "title": "Test - App",
        "result": "Failed" if failed else "Passed",
        "devicesAndConfigurations": [{"device": {"deviceName": "iPhone 15"}}],
        "passedTests": passed,
        "failedTests": failed,
        "skippedTests": skipped,
        "totalTestCount": passed + failed + skipped,
        "testFailures": failures or [],
    }
    if start is not None:
        summary["startTime"] = start
    if finish is not None:
        summary["finishTime"] = finish
    return summary


# =============================================================================
# DATA SOURCE
# =============================================================================


class StubDataSource(DataSource):
    """In-memory DataSource recording every call.

    Args:
        data: Top-level payload returned by get_data.
        details: reference id -> payload for get_detail; missing ids return None.
        tree: Payload returned by get_test_tree.
        raise_for: reference ids whose lookup raises OSError.
    """

    def __init__(
        self,
        data: Any = None,
        details: dict[str, Any] | None = None,
        tree: Any = None,
        raise_for: set[str] | None = None,
    ) -> None:
        self.data = data
        self.details = details or {}
        self.tree = tree
        self.raise_for = raise_for or set()
        self.detail_calls: list[str] = []

    async def get_data(self, bundle_path: str) -> Any:
        return self.data

    async def get_detail(self, bundle_path: str, reference_id: str) -> Any | None:
        self.detail_calls.append(reference_id)
        if reference_id in self.raise_for:
            raise OSError(f"cannot read {reference_id}")
        return self.details.get(reference_id)

    async def get_test_tree(self, bundle_path: str) -> Any | None:
        return self.tree
