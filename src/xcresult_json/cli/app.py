"""Main Typer CLI application for xcresult-json."""

from __future__ import annotations

import asyncio
import json
from typing import Annotated

import typer
from rich.console import Console

from xcresult_json.config import Settings, get_settings
from xcresult_json.core.exceptions import INVALID_BUNDLE, XCResultError, XcjsonError
from xcresult_json.logging import configure_logging, get_logger

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INVALID_BUNDLE = 2
EXIT_TEST_FAILURES = 10

app = typer.Typer(
    name="xcresult-json",
    help="Convert xcresult bundles from any Xcode version into one stable JSON report",
    add_completion=False,
)

err_console = Console(stderr=True, highlight=False)
logger = get_logger(__name__)


def _print_error(message: str) -> None:
    err_console.print(f"[red]Error: {message}[/red]", markup=True, soft_wrap=True)


def _run_schema(settings: Settings) -> int:
    """Print the live xcresulttool JSON Schema."""
    from xcresult_json.schema import fetch_schema
    from xcresult_json.sources.xcresulttool import XCResultToolDataSource

    try:
        schema = asyncio.run(fetch_schema(XCResultToolDataSource(settings)))
    except XcjsonError as e:
        _print_error(e.message)
        return EXIT_INVALID_BUNDLE

    typer.echo(json.dumps(schema, indent=2))
    return EXIT_OK


def _run_parse(path: str, settings: Settings, pretty: bool) -> int:
    """Parse a bundle, print its report and map the outcome to an exit code."""
    from xcresult_json.api import parse_xcresult

    try:
        report = asyncio.run(parse_xcresult(path, settings=settings))
    except XCResultError as e:
        _print_error(e.message)
        return EXIT_INVALID_BUNDLE if e.code == INVALID_BUNDLE else EXIT_ERROR
    except Exception as e:  # noqa: BLE001 - last-resort CLI error reporting
        logger.exception("unexpected_error", bundle=path)
        err_console.print(f"[red]Unexpected error: {e}[/red]", soft_wrap=True)
        return EXIT_ERROR

    payload = report.to_dict()
    typer.echo(json.dumps(payload, indent=2) if pretty else json.dumps(payload))

    return EXIT_TEST_FAILURES if report.has_failures else EXIT_OK


@app.command()
def run(
    path: Annotated[
        str | None,
        typer.Option(
            "--path",
            help="Path to .xcresult bundle (or a recorded .json payload)",
        ),
    ] = None,
    pretty: Annotated[
        bool,
        typer.Option(
            "--pretty",
            help="Pretty-print JSON output",
        ),
    ] = False,
    schema: Annotated[
        bool,
        typer.Option(
            "--schema",
            help="Print live JSON-Schema and exit",
        ),
    ] = False,
    validate: Annotated[
        bool,
        typer.Option(
            "--validate",
            help="Validate xcresulttool output against its schema (warns only)",
        ),
    ] = False,
    no_cache: Annotated[
        bool,
        typer.Option(
            "--no-cache",
            help="Disable caching of xcresulttool responses",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "-v",
            "--verbose",
            help="Log debug output to stderr",
        ),
    ] = False,
) -> None:
    """Print a JSON test report for an xcresult bundle.

    Exit codes: 0 all tests passed, 10 some tests failed,
    2 invalid bundle or schema error, 1 any other error.
    """
    settings = get_settings()
    updates: dict = {}
    if validate:
        updates["validate_schema"] = True
    if no_cache:
        updates["cache_enabled"] = False
    if verbose:
        updates["log_level"] = "DEBUG"
    if updates:
        settings = settings.model_copy(update=updates)

    configure_logging(settings.log_level, json_format=settings.log_json_format)

    if schema:
        raise typer.Exit(code=_run_schema(settings))

    if not path:
        raise typer.BadParameter("--path is required unless using --schema", param_hint="--path")

    raise typer.Exit(code=_run_parse(path, settings, pretty))


def main() -> None:
    """Entry point for the Typer CLI."""
    app()
