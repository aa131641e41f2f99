"""Version-independent xcresult report parsing.

This module turns the JSON emitted by any supported xcresulttool version
into one stable Report structure.

Usage:
    from xcresult_json.reports import get_default_registry

    registry = get_default_registry(data_source)
    report = await registry.parse(bundle_path, raw_data)
"""

from .base import FormatParser, map_status
from .models import Report, SuiteResult, TestResult, TestStatus
from .registry import ParserRegistry, create_format_parsers, get_default_registry

__all__ = [
    "FormatParser",
    "ParserRegistry",
    "create_format_parsers",
    "get_default_registry",
    "map_status",
    "Report",
    "SuiteResult",
    "TestResult",
    "TestStatus",
]
