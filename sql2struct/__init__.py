"""
sql2struct - Go struct generation from SQL schemas

Reads a MySQL-style CREATE TABLE statement and generates a persistence
(PO) struct, a domain entity struct and the conversions between them.

Example usage:
    >>> from sql2struct import parse_sql, generate_go_source
    >>> context = parse_sql(ddl, struct_name="UserPO", second_struct_name="User")
    >>> print(generate_go_source(context))
"""

__version__ = "1.0.0"

from sql2struct.parser import (
    parse_sql,
    parse_file,
    ensure_clean,
    SchemaExtractor,
    Tokenizer,
    ColumnDescriptor,
    ExtractionIssue,
    GenerationContext,
)
from sql2struct.typemap import TypeMapper, TypeProfile, GO_PROFILE
from sql2struct.naming import to_pascal_case, to_snake_case
from sql2struct.document import Document, build_document
from sql2struct.go_generator import (
    GoGenerator,
    generate_go_source,
    generate_go_file,
    output_file_name,
)
from sql2struct.errors import (
    Sql2StructError,
    SchemaReadError,
    OutputWriteError,
    MissingStructNameError,
    UnmappedTypeError,
    ParseError,
)
from sql2struct._logging import configure_logging

__all__ = [
    "__version__",
    "parse_sql",
    "parse_file",
    "ensure_clean",
    "SchemaExtractor",
    "Tokenizer",
    "ColumnDescriptor",
    "ExtractionIssue",
    "GenerationContext",
    "TypeMapper",
    "TypeProfile",
    "GO_PROFILE",
    "to_pascal_case",
    "to_snake_case",
    "Document",
    "build_document",
    "GoGenerator",
    "generate_go_source",
    "generate_go_file",
    "output_file_name",
    "Sql2StructError",
    "SchemaReadError",
    "OutputWriteError",
    "MissingStructNameError",
    "UnmappedTypeError",
    "ParseError",
    "configure_logging",
]
