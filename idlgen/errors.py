"""Error hierarchy for the IDL generation pipeline.

Every failure is fatal to the run: library code raises one of these and the
CLI reports it and exits non-zero.
"""

from __future__ import annotations


class IdlGenError(Exception):
    """Base idlgen error."""


class ExpansionFailure(IdlGenError):
    """Raised when macro expansion of the crate fails."""

    def __init__(self, message: str, stderr: str = ""):
        super().__init__(message)
        self.stderr = stderr


class ParseFailure(IdlGenError):
    """Raised when the expanded source is not syntactically valid Rust."""

    def __init__(self, message: str, line: int = 0, column: int = 0):
        super().__init__(message)
        self.line = line
        self.column = column


class ConfigError(IdlGenError):
    """Raised when the Cargo manifest is missing, unreadable or malformed."""


class WriteFailure(IdlGenError):
    """Raised when the IDL document cannot be persisted."""
