"""CLI package for xcresult-json."""

from xcresult_json.cli.app import app, main

__all__ = ["app", "main"]
