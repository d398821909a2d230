"""
Error types for Oracle.
"""


class OracleError(Exception):
    """Base class for all Oracle errors."""


class ParseFailure(OracleError):
    """The parser could not produce a syntax tree for a source unit."""

    def __init__(self, message: str, path: str | None = None, line: int | None = None):
        self.path = path
        self.line = line
        location = path or "<source>"
        if line is not None:
            location = f"{location}:{line}"
        super().__init__(f"Parse error in {location}: {message}")


class MetadataError(OracleError):
    """Cargo metadata could not be obtained or decoded."""


class ConfigError(OracleError):
    """An environment setting has an invalid value."""
