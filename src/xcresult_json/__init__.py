"""xcresult-json - stable JSON test reports from any xcresulttool version."""

__version__ = "1.0.0"

from xcresult_json.api import parse_xcresult, parse_xcresult_sync
from xcresult_json.core.exceptions import UnsupportedFormatError, XCResultError
from xcresult_json.reports.models import Report, SuiteResult, TestResult, TestStatus

__all__ = [
    "parse_xcresult",
    "parse_xcresult_sync",
    "Report",
    "SuiteResult",
    "TestResult",
    "TestStatus",
    "UnsupportedFormatError",
    "XCResultError",
]
