"""Public API for xcresult-json.

This is the interface external users should depend on.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from xcresult_json.config import Settings, get_settings
from xcresult_json.core.parser import XCResultParser
from xcresult_json.reports.registry import get_default_registry
from xcresult_json.sources.xcresulttool import XCResultToolDataSource

if TYPE_CHECKING:
    from xcresult_json.reports.models import Report
    from xcresult_json.validator import SchemaValidator


async def build_validator(tool: XCResultToolDataSource, settings: Settings) -> SchemaValidator:
    """Create a validator from the live (or previously saved) xcresulttool schema."""
    from xcresult_json.schema import get_live_schema
    from xcresult_json.validator import SchemaValidator

    return SchemaValidator(await get_live_schema(tool, settings.schema_path))


async def parse_xcresult(
    bundle_path: str,
    *,
    cache: bool | None = None,
    validate: bool | None = None,
    settings: Settings | None = None,
) -> Report:
    """Parse an xcresult bundle and return structured test results.

    Args:
        bundle_path: Path to a .xcresult bundle, or a recorded .json payload.
        cache: Cache xcresulttool responses (defaults to settings.cache_enabled).
        validate: Check payloads against the live schema, warnings only
            (defaults to settings.validate_schema).
        settings: Settings to use instead of the environment-derived ones.

    Returns:
        The normalized Report.

    Raises:
        XCResultError: For invalid bundles, xcresulttool problems or
            unsupported formats.
    """
    settings = settings or get_settings()
    overrides = {}
    if cache is not None:
        overrides["cache_enabled"] = cache
    if validate is not None:
        overrides["validate_schema"] = validate
    if overrides:
        settings = settings.model_copy(update=overrides)

    data_source = XCResultToolDataSource(settings)
    if settings.validate_schema:
        data_source.validator = await build_validator(data_source, settings)

    parser = XCResultParser(data_source, get_default_registry(data_source))
    return await parser.parse(bundle_path)


def parse_xcresult_sync(bundle_path: str, **kwargs) -> Report:
    """Blocking wrapper around parse_xcresult."""
    return asyncio.run(parse_xcresult(bundle_path, **kwargs))
