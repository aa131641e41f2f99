"""Tests for extracting and storing the xcresulttool JSON Schema."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from xcresult_json.core.exceptions import XCRESULTTOOL_NOT_FOUND, XCResultError, XcjsonError
from xcresult_json.schema import (
    SCHEMA_MARKER,
    extract_schema,
    fetch_schema,
    get_live_schema,
    load_schema,
    save_schema,
)
from xcresult_json.sources.xcresulttool import ToolInvocationError

SCHEMA = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "properties": {"name": {"type": "string", "description": "braces } and { in text"}},
}


def help_text(schema_json: str) -> str:
    return (
        "OVERVIEW: Get test results\n\n"
        "USAGE: xcresulttool get test-results tests --path <path>\n\n"
        f"{SCHEMA_MARKER}\n{schema_json}\n\nSee 'xcresulttool help' for more."
    )


def tool_returning(output=None, error=None) -> MagicMock:
    tool = MagicMock()
    tool.run_tool = AsyncMock(return_value=output, side_effect=error)
    return tool


class TestExtractSchema:
    """Tests for extract_schema."""

    def test_extracts_object(self):
        assert extract_schema(help_text(json.dumps(SCHEMA, indent=2))) == SCHEMA

    def test_handles_escaped_quotes(self):
        schema = {"description": 'say \\"hi\\" {'}
        assert extract_schema(help_text(json.dumps(schema))) == schema

    def test_missing_marker(self):
        with pytest.raises(XcjsonError) as exc_info:
            extract_schema("USAGE: xcresulttool get")
        assert exc_info.value.code == "SCHEMA_NOT_FOUND"

    def test_missing_opening_brace(self):
        with pytest.raises(XcjsonError) as exc_info:
            extract_schema(f"{SCHEMA_MARKER}\nnothing here")
        assert exc_info.value.code == "SCHEMA_NOT_FOUND"

    def test_unterminated_object(self):
        with pytest.raises(XcjsonError) as exc_info:
            extract_schema(help_text('{"type": "object"'))
        assert exc_info.value.code == "SCHEMA_PARSE_ERROR"

    def test_invalid_json(self):
        with pytest.raises(XcjsonError) as exc_info:
            extract_schema(help_text("{type: object}"))
        assert exc_info.value.code == "SCHEMA_PARSE_ERROR"


class TestFetchSchema:
    """Tests for fetch_schema."""

    @pytest.mark.asyncio
    async def test_runs_help_command(self):
        tool = tool_returning(help_text(json.dumps(SCHEMA)))

        assert await fetch_schema(tool) == SCHEMA
        tool.run_tool.assert_awaited_once_with("help", "get", "test-results", "tests")

    @pytest.mark.asyncio
    async def test_missing_tool(self):
        tool = tool_returning(error=XCResultError.xcresulttool_not_found())

        with pytest.raises(XcjsonError) as exc_info:
            await fetch_schema(tool)

        assert exc_info.value.code == XCRESULTTOOL_NOT_FOUND
        assert exc_info.value.exit_code == 1
        assert "Ensure Xcode is installed" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_tool_failure(self):
        tool = tool_returning(error=ToolInvocationError(["help"], 3, "boom"))

        with pytest.raises(XcjsonError) as exc_info:
            await fetch_schema(tool)

        assert exc_info.value.code == "SCHEMA_FETCH_ERROR"
        assert exc_info.value.exit_code == 3


class TestSchemaStorage:
    """Tests for saving, loading and live fallback."""

    def test_save_and_load(self, tmp_path):
        path = tmp_path / "nested" / "schema.json"
        save_schema(SCHEMA, path)
        assert load_schema(path) == SCHEMA

    def test_load_missing(self, tmp_path):
        assert load_schema(tmp_path / "missing.json") is None

    def test_load_non_object(self, tmp_path):
        path = tmp_path / "schema.json"
        path.write_text("[1, 2]")
        assert load_schema(path) is None

    @pytest.mark.asyncio
    async def test_live_schema_is_saved(self, tmp_path):
        path = tmp_path / "schema.json"
        tool = tool_returning(help_text(json.dumps(SCHEMA)))

        assert await get_live_schema(tool, path) == SCHEMA
        assert load_schema(path) == SCHEMA

    @pytest.mark.asyncio
    async def test_falls_back_to_saved_schema(self, tmp_path):
        path = tmp_path / "schema.json"
        save_schema(SCHEMA, path)
        tool = tool_returning(error=XCResultError.xcresulttool_not_found())

        assert await get_live_schema(tool, path) == SCHEMA

    @pytest.mark.asyncio
    async def test_nothing_available(self, tmp_path):
        tool = tool_returning(error=XCResultError.xcresulttool_not_found())
        assert await get_live_schema(tool, tmp_path / "schema.json") is None
