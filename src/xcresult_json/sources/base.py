"""Abstract base class for raw xcresult data sources."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class DataSource(ABC):
    """Supplies the untyped JSON for an xcresult bundle.

    This is the only coupling point between the parsing core and the
    outside world: implementations may run xcresulttool, consult a cache
    or read a static fixture file.
    """

    @abstractmethod
    async def get_data(self, bundle_path: str) -> Any:
        """Return the top-level raw JSON payload for a bundle.

        Args:
            bundle_path: Path to the .xcresult bundle (or fixture file).

        Returns:
            The decoded JSON value.

        Raises:
            XCResultError: With code INVALID_BUNDLE, XCRESULTTOOL_NOT_FOUND
                or XCRESULTTOOL_FAILED.
        """

    @abstractmethod
    async def get_detail(self, bundle_path: str, reference_id: str) -> Any | None:
        """Return the payload behind a reference id, or None if it cannot be fetched."""

    async def get_test_tree(self, bundle_path: str) -> Any | None:
        """Return the nested test tree for a summary payload, or None.

        Only sources backed by an Xcode 16+ xcresulttool can provide this.
        """
        return None
