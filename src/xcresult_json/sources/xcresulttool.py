"""Data source that shells out to ``xcrun xcresulttool``."""

from __future__ import annotations

import asyncio
import json
import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from xcresult_json.cache import ResponseCache
from xcresult_json.config import Settings, get_settings
from xcresult_json.core.exceptions import XCResultError

from .base import DataSource
from .fixture import JSON_EXT, FixtureDataSource

if TYPE_CHECKING:
    from xcresult_json.validator import SchemaValidator

logger = logging.getLogger(__name__)

BUNDLE_EXT = ".xcresult"
VERSION_PATTERN = re.compile(r"version (\d+)")
INVALID_BUNDLE_MARKER = "not a valid"

# xcresulttool versions that introduced each command family
TEST_RESULTS_MIN_VERSION = 23000  # Xcode 16
GET_OBJECT_MIN_VERSION = 22000  # Xcode 15

# Some xcresulttool builds emit a raw newline inside one schema description
_UNESCAPED_NEWLINE = re.compile(
    r'"Human-readable duration with optional\ncomponents of days, hours, minutes and seconds"'
)
_ESCAPED_NEWLINE = (
    '"Human-readable duration with optional\\\\ncomponents of days, hours, minutes and seconds"'
)


class ToolInvocationError(Exception):
    """xcresulttool exited with a non-zero status."""

    def __init__(self, args: list[str], returncode: int | None, stderr: str) -> None:
        super().__init__(
            f"xcresulttool {' '.join(args)} exited with {returncode}: {stderr.strip()}"
        )
        self.returncode = returncode
        self.stderr = stderr


@dataclass(frozen=True)
class ToolCapabilities:
    """What the installed xcresulttool supports, derived from its version."""

    version: int

    @property
    def supports_test_results(self) -> bool:
        return self.version >= TEST_RESULTS_MIN_VERSION

    @property
    def supports_get_object(self) -> bool:
        return self.version >= GET_OBJECT_MIN_VERSION


def decode_tool_output(stdout: str) -> Any:
    """Decode xcresulttool JSON, repairing the known unescaped-newline defect."""
    try:
        return json.loads(stdout)
    except json.JSONDecodeError:
        repaired = _UNESCAPED_NEWLINE.sub(_ESCAPED_NEWLINE, stdout)
        if repaired == stdout:
            raise
        return json.loads(repaired)


def is_bundle_path(path: str) -> bool:
    return path.rstrip("/").endswith(BUNDLE_EXT)


def _path_args(bundle_path: str) -> list[str]:
    return ["--path", bundle_path, "--format", "json"]


class XCResultToolDataSource(DataSource):
    """xcresulttool-based data source implementation.

    Paths ending in ``.json`` are served as fixtures without touching
    xcresulttool. Responses are cached in a ResponseCache unless caching is
    disabled, and top-level payloads can be checked against the live JSON
    Schema (warnings only).
    """

    def __init__(
        self,
        settings: Settings | None = None,
        cache: ResponseCache | None = None,
        validator: SchemaValidator | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        if cache is None and self._settings.cache_enabled:
            cache = ResponseCache(self._settings.cache_size, self._settings.cache_path)
        self._cache = cache
        self._validator = validator
        self._fixtures = FixtureDataSource()
        self._capabilities: ToolCapabilities | None = None

    @property
    def cache(self) -> ResponseCache | None:
        return self._cache

    @property
    def validator(self) -> SchemaValidator | None:
        return self._validator

    @validator.setter
    def validator(self, validator: SchemaValidator | None) -> None:
        self._validator = validator

    async def run_tool(self, *args: str) -> str:
        """Run ``xcrun xcresulttool <args>`` and return its stdout.

        Raises:
            XCResultError: XCRESULTTOOL_NOT_FOUND if xcrun cannot be executed,
                XCRESULTTOOL_FAILED on timeout.
            ToolInvocationError: If the tool exits with a non-zero status.
        """
        cmd = [self._settings.xcrun_path, "xcresulttool", *args]
        logger.debug("xcresulttool_run: args=%s", args)
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise XCResultError.xcresulttool_not_found() from e

        try:
            stdout, stderr = await asyncio.wait_for(
                proc.communicate(), timeout=self._settings.tool_timeout
            )
        except TimeoutError as e:
            proc.kill()
            raise XCResultError.xcresulttool_failed(
                TimeoutError(f"timed out after {self._settings.tool_timeout}s")
            ) from e

        if proc.returncode != 0:
            raise ToolInvocationError(list(args), proc.returncode, stderr.decode(errors="replace"))
        return stdout.decode(errors="replace")

    async def detect_capabilities(self) -> ToolCapabilities:
        """Detect and remember xcresulttool capabilities from its version."""
        if self._capabilities is not None:
            return self._capabilities

        try:
            output = await self.run_tool("version")
        except (XCResultError, ToolInvocationError) as e:
            raise XCResultError.xcresulttool_not_found() from e

        match = VERSION_PATTERN.search(output)
        self._capabilities = ToolCapabilities(version=int(match.group(1)) if match else 0)
        logger.debug("xcresulttool_capabilities: version=%d", self._capabilities.version)
        return self._capabilities

    async def get_data(self, bundle_path: str) -> Any:
        if bundle_path.endswith(JSON_EXT):
            return await self._fixtures.get_data(bundle_path)
        if not is_bundle_path(bundle_path):
            raise XCResultError.invalid_bundle(bundle_path)

        cache_key = f"data:{bundle_path}"
        if self._cache is not None and cache_key in self._cache:
            return self._cache.get(cache_key)

        try:
            capabilities = await self.detect_capabilities()
            data = await self._fetch_top_level(bundle_path, capabilities)
        except XCResultError:
            raise
        except ToolInvocationError as e:
            if INVALID_BUNDLE_MARKER in e.stderr:
                raise XCResultError.invalid_bundle(bundle_path) from e
            raise XCResultError.xcresulttool_failed(e) from e
        except json.JSONDecodeError as e:
            raise XCResultError.xcresulttool_failed(e) from e

        if self._validator is not None:
            self._validator.validate(data, f"summary of {bundle_path}")
        if self._cache is not None:
            self._cache.set(cache_key, data)
        return data

    async def _fetch_top_level(self, bundle_path: str, capabilities: ToolCapabilities) -> Any:
        """Try the newest command first and fall back to older ones."""
        attempts: list[list[str]] = []
        if capabilities.supports_test_results:
            attempts.append(["get", "test-results", "summary"])
        if capabilities.supports_get_object:
            attempts.append(["get", "object"])
        last = ["get", "object", "--legacy"]

        for command in attempts:
            try:
                return decode_tool_output(await self.run_tool(*command, *_path_args(bundle_path)))
            except ToolInvocationError as e:
                if INVALID_BUNDLE_MARKER in e.stderr:
                    raise
                logger.warning("xcresulttool_fallback: command=%s, error=%s", command, e)
            except json.JSONDecodeError as e:
                logger.warning("xcresulttool_fallback: command=%s, error=%s", command, e)

        return decode_tool_output(await self.run_tool(*last, *_path_args(bundle_path)))

    async def get_detail(self, bundle_path: str, reference_id: str) -> Any | None:
        if bundle_path.endswith(JSON_EXT):
            return await self._fixtures.get_detail(bundle_path, reference_id)

        cache_key = f"detail:{bundle_path}:{reference_id}"
        if self._cache is not None and cache_key in self._cache:
            return self._cache.get(cache_key)

        try:
            capabilities = await self.detect_capabilities()
            command = ["get", "object"]
            if capabilities.supports_test_results:
                # Xcode 16 only serves object references in legacy mode
                command.append("--legacy")
            args = [*command, "--path", bundle_path, "--id", reference_id, "--format", "json"]
            data = decode_tool_output(await self.run_tool(*args))
        except (XCResultError, ToolInvocationError, json.JSONDecodeError) as e:
            logger.warning("detail_fetch_failed: ref=%s, error=%s", reference_id, e)
            return None

        if self._cache is not None:
            self._cache.set(cache_key, data)
        return data

    async def get_test_tree(self, bundle_path: str) -> Any | None:
        if bundle_path.endswith(JSON_EXT):
            return await self._fixtures.get_test_tree(bundle_path)

        cache_key = f"tests:{bundle_path}"
        if self._cache is not None and cache_key in self._cache:
            return self._cache.get(cache_key)

        try:
            capabilities = await self.detect_capabilities()
            if not capabilities.supports_test_results:
                return None
            data = decode_tool_output(
                await self.run_tool("get", "test-results", "tests", *_path_args(bundle_path))
            )
        except (XCResultError, ToolInvocationError, json.JSONDecodeError) as e:
            logger.warning("test_tree_fetch_failed: bundle=%s, error=%s", bundle_path, e)
            return None

        if self._cache is not None:
            self._cache.set(cache_key, data)
        return data

    def clear_cache(self) -> None:
        """Clear cached responses."""
        if self._cache is not None:
            self._cache.clear()
