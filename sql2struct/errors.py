"""
Exceptions raised by sql2struct.

Every failure the generator reports derives from Sql2StructError, so
callers (and the CLI) can catch one type.
"""
from __future__ import annotations

from typing import Optional, Sequence


class Sql2StructError(Exception):
    """Base exception for all sql2struct errors."""


class SchemaReadError(Sql2StructError):
    """
    The SQL schema file could not be read.

    Attributes:
        path: Path that was being read
    """

    def __init__(self, path: str, reason: Optional[str] = None):
        self.path = path
        message = f"Failed to read SQL file {path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class OutputWriteError(Sql2StructError):
    """
    The rendered document could not be written.

    Attributes:
        path: Destination path
    """

    def __init__(self, path: str, reason: Optional[str] = None):
        self.path = path
        message = f"Failed to write {path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class MissingStructNameError(Sql2StructError):
    """No CREATE TABLE name was found and no PO struct name was given."""

    def __init__(self):
        super().__init__(
            "No CREATE TABLE statement found and no PO struct name configured"
        )


class UnmappedTypeError(Sql2StructError):
    """
    One or more columns use a SQL type with no target-language mapping.

    Attributes:
        columns: The offending column descriptors
    """

    def __init__(self, columns: Sequence):
        self.columns = list(columns)
        listing = ", ".join(f"{c.sql_name} ({c.sql_type})" for c in self.columns)
        super().__init__(f"Unmapped SQL type for column(s): {listing}")


class ParseError(Sql2StructError):
    """Error during parsing with line information."""

    def __init__(self, message: str, line: int, col: int = 0):
        self.line = line
        self.col = col
        super().__init__(f"Line {line}: {message}")
