"""Raw data sources that resolve a bundle path into xcresulttool JSON."""

from .base import DataSource
from .fixture import FixtureDataSource
from .xcresulttool import ToolCapabilities, XCResultToolDataSource

__all__ = [
    "DataSource",
    "FixtureDataSource",
    "ToolCapabilities",
    "XCResultToolDataSource",
]
