"""Data models for normalized xcresult reports."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

UNKNOWN_TEST = "Unknown Test"
UNKNOWN_SUITE = "Unknown Suite"


class TestStatus(Enum):
    """Status of a test case."""

    __test__ = False

    SUCCESS = "Success"
    FAILURE = "Failure"
    SKIPPED = "Skipped"


@dataclass(frozen=True)
class TestResult:
    """A single test case result."""

    __test__ = False

    name: str
    status: TestStatus
    duration: float = 0.0
    failure_message: str | None = None

    def __post_init__(self) -> None:
        if self.duration < 0:
            object.__setattr__(self, "duration", 0.0)
        # Only failures carry a message, and never an empty one
        if self.status is not TestStatus.FAILURE or not self.failure_message:
            object.__setattr__(self, "failure_message", None)

    def to_dict(self) -> dict:
        """Convert to dictionary, omitting failureMessage when there is none."""
        data: dict = {
            "name": self.name,
            "status": self.status.value,
            "duration": self.duration,
        }
        if self.failure_message is not None:
            data["failureMessage"] = self.failure_message
        return data


@dataclass(frozen=True)
class SuiteResult:
    """A named group of tests split into failed and passed buckets."""

    suite_name: str
    duration: float = 0.0
    failed: tuple[TestResult, ...] = ()
    passed: tuple[TestResult, ...] = ()

    @classmethod
    def from_tests(cls, suite_name: str | None, tests: Iterable[TestResult]) -> SuiteResult:
        """Bucket tests by status; skipped tests are counted in neither bucket.

        Duration is the sum of every collected test, skipped ones included.
        """
        tests = list(tests)
        return cls(
            suite_name=suite_name or UNKNOWN_SUITE,
            duration=sum(t.duration for t in tests),
            failed=tuple(t for t in tests if t.status is TestStatus.FAILURE),
            passed=tuple(t for t in tests if t.status is TestStatus.SUCCESS),
        )

    @property
    def test_count(self) -> int:
        return len(self.failed) + len(self.passed)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "suiteName": self.suite_name,
            "duration": self.duration,
            "failed": [t.to_dict() for t in self.failed],
            "passed": [t.to_dict() for t in self.passed],
        }


@dataclass(frozen=True)
class Report:
    """Version-independent test report produced by every format parser.

    ``total_suites`` always matches ``len(suites)``. ``total_tests`` is the
    passed + failed count unless a format only exposes aggregate counts.
    """

    total_tests: int
    total_duration: float
    suites: tuple[SuiteResult, ...] = field(default_factory=tuple)

    @property
    def total_suites(self) -> int:
        return len(self.suites)

    @property
    def failed_count(self) -> int:
        return sum(len(s.failed) for s in self.suites)

    @property
    def has_failures(self) -> bool:
        return any(s.failed for s in self.suites)

    @classmethod
    def from_suites(
        cls,
        suites: Iterable[SuiteResult],
        total_duration: float | None = None,
        total_tests: int | None = None,
    ) -> Report:
        """Build a report, deriving totals from the suites unless given."""
        suites = tuple(suites)
        return cls(
            total_tests=sum(s.test_count for s in suites) if total_tests is None else total_tests,
            total_duration=(
                sum(s.duration for s in suites) if total_duration is None else total_duration
            ),
            suites=suites,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "totalSuites": self.total_suites,
            "totalTests": self.total_tests,
            "totalDuration": self.total_duration,
            "suites": [s.to_dict() for s in self.suites],
        }
