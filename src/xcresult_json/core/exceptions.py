"""Shared exceptions for the xcresult_json package."""

from __future__ import annotations

INVALID_BUNDLE = "INVALID_BUNDLE"
XCRESULTTOOL_NOT_FOUND = "XCRESULTTOOL_NOT_FOUND"
XCRESULTTOOL_FAILED = "XCRESULTTOOL_FAILED"
UNSUPPORTED_FORMAT = "UNSUPPORTED_FORMAT"


class XCResultError(Exception):
    """Error raised while fetching or parsing an xcresult bundle.

    The ``code`` attribute lets callers (the CLI in particular) tell an
    invalid bundle apart from a missing or failing xcresulttool.
    """

    def __init__(
        self,
        message: str,
        code: str,
        original_error: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.original_error = original_error

    @classmethod
    def invalid_bundle(cls, path: str) -> XCResultError:
        return cls(f"Invalid xcresult bundle: {path}", INVALID_BUNDLE)

    @classmethod
    def xcresulttool_not_found(cls) -> XCResultError:
        return cls(
            "xcresulttool not found. Ensure Xcode is installed.",
            XCRESULTTOOL_NOT_FOUND,
        )

    @classmethod
    def xcresulttool_failed(cls, error: BaseException) -> XCResultError:
        return cls(
            f"xcresulttool execution failed: {error}",
            XCRESULTTOOL_FAILED,
            error,
        )

    @classmethod
    def unsupported_format(cls) -> XCResultError:
        return cls(
            "Unsupported xcresult format. No parser could handle the data.",
            UNSUPPORTED_FORMAT,
        )


class UnsupportedFormatError(XCResultError):
    """No registered format parser produced a report for the raw data.

    Attributes:
        attempted: (parser name, error message) for every parser that claimed
            the data and then failed, in the order they were tried.
        available: Names of all registered parsers, in priority order.
    """

    def __init__(
        self,
        attempted: list[tuple[str, str]],
        available: list[str],
    ) -> None:
        self.attempted = attempted
        self.available = available

        if attempted:
            tried = "\n  ".join(f"{name} parser failed: {error}" for name, error in attempted)
        else:
            tried = "(no parser recognized the data)"
        message = (
            f"No parser could handle the xcresult format. Tried parsers in order:\n  {tried}\n"
            f"Available parsers: {', '.join(available) if available else '(none registered)'}"
        )
        super().__init__(message, UNSUPPORTED_FORMAT)


class XcjsonError(Exception):
    """Error raised while fetching the live JSON Schema from xcresulttool."""

    def __init__(self, message: str, code: str, exit_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.exit_code = exit_code
