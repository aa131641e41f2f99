"""Traversal of the wrapped ``testableSummaries`` tree.

Both the Xcode 15 object graph and the legacy fixture format describe
tests as testable summaries whose ``tests`` recursively contain
``subtests`` and/or ``children``. Only leaves become test results.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Any

from ..base import map_status
from ..models import UNKNOWN_TEST, TestStatus
from ...utils.values import wrapped_number, wrapped_str, wrapped_values

FALLBACK_FAILURE_MESSAGE = "Test failed"


@dataclass(frozen=True)
class LeafTest:
    """A leaf test node read out of the raw tree."""

    name: str
    status: TestStatus
    duration: float
    summary_ref: str | None = None


def is_container(node: dict) -> bool:
    """A node with any subtests or children is a container, not a test."""
    return bool(wrapped_values(node, "subtests") or wrapped_values(node, "children"))


def iter_leaf_nodes(nodes: Iterable[Any]) -> Iterator[dict]:
    """Yield leaf test nodes depth-first: the node, then its subtests, then its children."""
    for node in nodes:
        if not isinstance(node, dict):
            continue
        if not is_container(node):
            yield node
        yield from iter_leaf_nodes(wrapped_values(node, "subtests"))
        yield from iter_leaf_nodes(wrapped_values(node, "children"))


def read_leaf(node: dict) -> LeafTest:
    """Read name, status, duration and summary reference from a leaf node."""
    return LeafTest(
        name=wrapped_str(node, "identifier") or UNKNOWN_TEST,
        status=map_status(wrapped_str(node, "testStatus")),
        duration=max(wrapped_number(node, "duration"), 0.0),
        summary_ref=wrapped_str(node, "summaryRef", "id"),
    )


def iter_leaf_tests(testable_summary: Any) -> Iterator[LeafTest]:
    """Yield every leaf test under a testable summary, in traversal order."""
    for node in iter_leaf_nodes(wrapped_values(testable_summary, "tests")):
        yield read_leaf(node)


def suite_name(testable_summary: Any) -> str | None:
    return wrapped_str(testable_summary, "name")
