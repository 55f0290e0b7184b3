"""Parser error types."""


class ParseError(Exception):
    """Raised when a JS expression or CSS template cannot be parsed."""

    def __init__(
        self, message: str, line: int | None = None, column: int | None = None
    ):
        self.line = line
        self.column = column
        super().__init__(message)


class SourceScanError(ParseError):
    """Raised when a source file cannot be scanned for styled declarations."""
