"""Fetch and store the JSON Schema published by xcresulttool's help text."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from xcresult_json.core.exceptions import XCResultError, XcjsonError

if TYPE_CHECKING:
    from xcresult_json.sources.xcresulttool import XCResultToolDataSource

logger = logging.getLogger(__name__)

SCHEMA_MARKER = "Command output structure (JSON Schema):"


def extract_schema(help_text: str) -> dict:
    """Extract the JSON Schema object embedded in xcresulttool help output.

    Raises:
        XcjsonError: SCHEMA_NOT_FOUND if the marker or opening brace is
            missing, SCHEMA_PARSE_ERROR if the object does not decode.
    """
    marker = help_text.find(SCHEMA_MARKER)
    if marker == -1:
        raise XcjsonError(
            "Could not find JSON Schema in xcresulttool help output", "SCHEMA_NOT_FOUND"
        )

    start = help_text.find("{", marker)
    if start == -1:
        raise XcjsonError("Could not find JSON Schema start in help output", "SCHEMA_NOT_FOUND")

    depth = 0
    in_string = False
    escaped = False
    end = -1
    for i in range(start, len(help_text)):
        char = help_text[i]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
        elif char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                end = i
                break

    if end == -1:
        raise XcjsonError("Unterminated JSON Schema in help output", "SCHEMA_PARSE_ERROR")

    try:
        schema = json.loads(help_text[start : end + 1])
    except json.JSONDecodeError as e:
        raise XcjsonError(f"Failed to parse JSON Schema: {e}", "SCHEMA_PARSE_ERROR") from e
    if not isinstance(schema, dict):
        raise XcjsonError("JSON Schema is not an object", "SCHEMA_PARSE_ERROR")
    return schema


async def fetch_schema(tool: XCResultToolDataSource, subcommand: str = "tests") -> dict:
    """Fetch the live schema for ``xcresulttool get test-results <subcommand>``.

    Raises:
        XcjsonError: If xcresulttool is missing, fails, or prints no schema.
    """
    try:
        help_text = await tool.run_tool("help", "get", "test-results", subcommand)
    except XCResultError as e:
        raise XcjsonError(
            "Failed to run xcresulttool. Ensure Xcode is installed.", e.code, exit_code=1
        ) from e
    except Exception as e:  # noqa: BLE001 - any tool failure becomes a fetch error
        raise XcjsonError(
            f"Failed to get schema: {e}",
            "SCHEMA_FETCH_ERROR",
            exit_code=getattr(e, "returncode", None),
        ) from e
    return extract_schema(help_text)


def save_schema(schema: dict, path: Path) -> None:
    """Write a schema to disk, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(schema, indent=2))
    logger.info("schema_saved: path=%s", path)


def load_schema(path: Path) -> dict | None:
    """Load a previously saved schema, or None if missing or unreadable."""
    try:
        data: Any = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        logger.debug("schema_load_failed: path=%s, error=%s", path, e)
        return None
    return data if isinstance(data, dict) else None


async def get_live_schema(tool: XCResultToolDataSource, path: Path) -> dict | None:
    """Fetch the live schema and save it, falling back to the saved copy.

    Returns None when neither is available; validation is advisory, so the
    caller simply skips it.
    """
    try:
        schema = await fetch_schema(tool)
    except XcjsonError as e:
        logger.warning("live_schema_unavailable: error=%s, falling back to %s", e, path)
        return load_schema(path)

    try:
        save_schema(schema, path)
    except OSError as e:
        logger.warning("schema_save_failed: path=%s, error=%s", path, e)
    return schema
