"""Data source backed by static JSON fixture files."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from xcresult_json.core.exceptions import INVALID_BUNDLE, XCResultError

from .base import DataSource

logger = logging.getLogger(__name__)

JSON_EXT = ".json"
DETAILS_KEY = "details"
TEST_TREE_KEY = "testTree"


def load_json_file(path: str | Path) -> Any:
    """Read and decode a JSON file, raising INVALID_BUNDLE on any failure."""
    try:
        return json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise XCResultError(
            f"Invalid xcresult bundle: {path} ({e})", INVALID_BUNDLE, e
        ) from e


class FixtureDataSource(DataSource):
    """Serves payloads recorded from xcresulttool as JSON files.

    The fixture file holds the top-level payload. Secondary payloads are
    looked up, in order, in an optional ``"details"`` map inside the fixture
    (keyed by reference id) and in a sibling file ``<stem>.<id>.json``.
    A fixture may also embed the Xcode 16 test tree under ``"testTree"`` or
    ship it as ``<stem>.tests.json``.
    """

    def __init__(self) -> None:
        self._loaded: dict[str, Any] = {}

    async def get_data(self, bundle_path: str) -> Any:
        return self._load(bundle_path)

    async def get_detail(self, bundle_path: str, reference_id: str) -> Any | None:
        return self._lookup(bundle_path, DETAILS_KEY, reference_id)

    async def get_test_tree(self, bundle_path: str) -> Any | None:
        return self._lookup(bundle_path, TEST_TREE_KEY, "tests")

    def _load(self, bundle_path: str) -> Any:
        if bundle_path not in self._loaded:
            self._loaded[bundle_path] = load_json_file(bundle_path)
        return self._loaded[bundle_path]

    def _lookup(self, bundle_path: str, embedded_key: str, suffix: str) -> Any | None:
        try:
            data = self._load(bundle_path)
        except XCResultError as e:
            logger.warning("fixture_unreadable: path=%s, error=%s", bundle_path, e)
            return None

        if isinstance(data, dict):
            embedded = data.get(embedded_key)
            if embedded_key == TEST_TREE_KEY and embedded is not None:
                return embedded
            if isinstance(embedded, dict) and suffix in embedded:
                return embedded[suffix]

        path = Path(bundle_path)
        sibling = path.with_name(f"{path.stem}.{suffix}{JSON_EXT}")
        if not sibling.exists():
            return None
        try:
            return load_json_file(sibling)
        except XCResultError as e:
            logger.warning("fixture_detail_unreadable: path=%s, error=%s", sibling, e)
            return None
