"""
SQL Schema Parser

Extracts the table name and column metadata from a MySQL-style
``CREATE TABLE`` statement into a GenerationContext that the code
generators consume.

Dialect understood:
    create_table    = 'CREATE' 'TABLE' ('IF' 'NOT' 'EXISTS')? qualified_name '(' column* ...
    qualified_name  = name_part ('.' name_part)*
    name_part       = (IDENT | QUOTED_IDENT | PLACEHOLDER)+      adjacent, no spaces
    column          = QUOTED_IDENT TYPE params? other* 'COMMENT' STRING
    params          = '(' ... ')'                                balanced

The table body is split into definitions at top-level commas, so a
column may wrap across lines and backticks inside key lists are never
taken for columns. A definition starting with a backtick identifier is
a column; anything else (PRIMARY KEY, KEY, CONSTRAINT) is skipped.
A column that does not complete is recorded as an ExtractionIssue
instead of being dropped silently. A type parameter list must close
before the COMMENT keyword; if it does not, matching resumes on the
next line.
"""

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .errors import MissingStructNameError, ParseError, SchemaReadError, UnmappedTypeError
from .naming import to_pascal_case
from .typemap import TypeMapper

logger = logging.getLogger(__name__)

# Marks a column as holding encrypted content ("加密" = "encrypted")
ENCRYPTION_MARKERS = ("加密",)

_PLACEHOLDER_SUFFIX = re.compile(r'_?\{[A-Za-z_][A-Za-z0-9_]*\}$')
_SIZE = re.compile(r'\d+')
_STRING_ESCAPE = re.compile(r"''|\\(.)", re.DOTALL)
_ESCAPES = {
    '0': '\0', 'b': '\b', 'n': '\n', 'r': '\r', 't': '\t', 'Z': '\x1a',
}


@dataclass(frozen=True)
class Token:
    kind: str
    value: str
    line: int
    col: int
    start: int
    end: int

    def is_word(self, word: str) -> bool:
        """Case-insensitive keyword check."""
        return self.kind == 'IDENT' and self.value.upper() == word


@dataclass(frozen=True)
class ColumnDescriptor:
    """One column of the table, ready for code generation."""
    sql_name: str                           # Column name as written in the schema
    field_name: str                         # PascalCase PO field name
    target_type: str                        # Empty when the SQL type is unmapped
    comment: str
    validation_tag: Optional[str] = None    # Tag body, e.g. "max=64" or "omitempty"
    sql_type: str = ""                      # Raw type token, e.g. "VARCHAR(64)"
    nullable: bool = False
    line: int = 0

    @property
    def mapped(self) -> bool:
        return bool(self.target_type)


@dataclass(frozen=True)
class ExtractionIssue:
    """A column-shaped line that could not be matched completely."""
    line: int
    col: int
    text: str
    reason: str


@dataclass(frozen=True)
class GenerationContext:
    """Everything the generators need from one schema file."""
    table_name: str
    struct_name: str
    second_struct_name: Optional[str] = None
    columns: Tuple[ColumnDescriptor, ...] = ()
    issues: Tuple[ExtractionIssue, ...] = ()

    @property
    def unmapped_columns(self) -> List[ColumnDescriptor]:
        return [c for c in self.columns if not c.mapped]


class Tokenizer:
    """Tokenizer for the CREATE TABLE dialect. Comments and whitespace are dropped."""

    TOKEN_PATTERNS = [
        ('BLOCK_COMMENT', r'/\*.*?\*/'),
        ('LINE_COMMENT', r'(?:--|#)[^\n]*'),
        ('WHITESPACE', r'\s+'),
        ('QUOTED_IDENT', r'`[^`\n]*`'),
        ('STRING', r"'(?:[^'\\]|\\.|'')*'"),
        ('PLACEHOLDER', r'\{[A-Za-z_][A-Za-z0-9_]*\}'),
        ('NUMBER', r'\d+(?:\.\d+)?'),
        ('IDENT', r'[A-Za-z_][A-Za-z0-9_$]*'),
        ('LPAREN', r'\('),
        ('RPAREN', r'\)'),
        ('COMMA', r','),
        ('DOT', r'\.'),
        ('SEMICOLON', r';'),
        ('EQUALS', r'='),
        ('OTHER', r'.'),
    ]

    SKIP = {'BLOCK_COMMENT', 'LINE_COMMENT', 'WHITESPACE'}

    def __init__(self, text: str):
        self.text = text
        self.tokens: List[Token] = []
        self._tokenize()

    def _tokenize(self):
        combined = '|'.join(f'(?P<{name}>{pattern})' for name, pattern in self.TOKEN_PATTERNS)
        regex = re.compile(combined, re.DOTALL)

        line = 1
        line_start = 0
        for match in regex.finditer(self.text):
            kind = match.lastgroup
            value = match.group()
            start = match.start()

            if kind not in self.SKIP:
                self.tokens.append(
                    Token(kind, value, line, start - line_start + 1, start, match.end())
                )

            newlines = value.count('\n')
            if newlines:
                line += newlines
                line_start = start + value.rfind('\n') + 1

    def __iter__(self):
        return iter(self.tokens)


class SchemaExtractor:
    """
    Turn SQL text into a GenerationContext.

    Args:
        mapper: Type mapper used to resolve column types (default: Go profile)
        encrypt_markers: Keywords in a column's other clause that mark it
            as encrypted and earn it an "omitempty" tag
    """

    NAME_KINDS = {'IDENT', 'QUOTED_IDENT', 'PLACEHOLDER'}

    def __init__(
        self,
        mapper: Optional[TypeMapper] = None,
        encrypt_markers: Sequence[str] = ENCRYPTION_MARKERS,
    ):
        self.mapper = mapper or TypeMapper()
        self.encrypt_markers = tuple(encrypt_markers)

    def extract(
        self,
        text: str,
        struct_name: str = "",
        second_struct_name: Optional[str] = None,
    ) -> GenerationContext:
        tokens = list(Tokenizer(text))
        table_name, body_start = self._find_table(tokens)

        if not struct_name:
            if not table_name:
                raise MissingStructNameError()
            struct_name = to_pascal_case(table_name)

        columns, issues = self._match_columns(text, tokens, body_start)

        for column in columns:
            if not column.mapped:
                logger.warning(
                    "Line %d: column '%s' has unmapped SQL type %s",
                    column.line, column.sql_name, column.sql_type,
                )
        for issue in issues:
            logger.warning("Line %d: skipped column (%s): %s", issue.line, issue.reason, issue.text)

        logger.info("Parsed table '%s': %d columns", table_name, len(columns))
        return GenerationContext(
            table_name=table_name,
            struct_name=struct_name,
            second_struct_name=second_struct_name or None,
            columns=tuple(columns),
            issues=tuple(issues),
        )

    # ============== Table name ==============

    def _find_table(self, tokens: List[Token]) -> Tuple[str, Optional[int]]:
        """Return (table name, index of the first token after the body's '(')."""
        for i in range(len(tokens) - 1):
            if not (tokens[i].is_word('CREATE') and tokens[i + 1].is_word('TABLE')):
                continue

            j = i + 2
            if (j + 2 < len(tokens) and tokens[j].is_word('IF')
                    and tokens[j + 1].is_word('NOT') and tokens[j + 2].is_word('EXISTS')):
                j += 3

            if j >= len(tokens) or tokens[j].kind not in self.NAME_KINDS:
                continue

            parts = [tokens[j]]
            j += 1
            while (j < len(tokens) and tokens[j].start == parts[-1].end
                   and (tokens[j].kind in self.NAME_KINDS or tokens[j].kind == 'DOT')):
                parts.append(tokens[j])
                j += 1

            qualified = ''.join(
                t.value[1:-1] if t.kind == 'QUOTED_IDENT' else t.value for t in parts
            )
            name = _PLACEHOLDER_SUFFIX.sub('', qualified.split('.')[-1])

            body_start = None
            if j < len(tokens) and tokens[j].kind == 'LPAREN':
                body_start = j + 1
            logger.debug("Found table '%s' (qualified: %s)", name, qualified)
            return name, body_start

        logger.debug("No CREATE TABLE statement found")
        return "", None

    # ============== Columns ==============

    def _match_columns(
        self, text: str, tokens: List[Token], body_start: Optional[int]
    ) -> Tuple[List[ColumnDescriptor], List[ExtractionIssue]]:
        columns: List[ColumnDescriptor] = []
        issues: List[ExtractionIssue] = []
        source_lines = text.split('\n')

        pos = 0 if body_start is None else body_start
        while pos < len(tokens):
            tok = tokens[pos]
            if tok.kind == 'RPAREN':
                if body_start is not None:
                    break
                pos += 1
            elif tok.kind == 'QUOTED_IDENT':
                column, issue, pos = self._match_column(text, tokens, pos)
                if column is not None:
                    columns.append(column)
                else:
                    issues.append(ExtractionIssue(
                        line=issue[0].line,
                        col=issue[0].col,
                        text=source_lines[issue[0].line - 1].strip(),
                        reason=issue[1],
                    ))
            else:
                pos = _skip_definition(tokens, pos)

        return columns, issues

    def _match_column(self, text: str, tokens: List[Token], pos: int):
        """
        Match one column definition starting at tokens[pos].

        Returns (descriptor or None, (token, reason) or None, index of the
        next definition).
        """
        name_tok = tokens[pos]
        sql_name = name_tok.value[1:-1]
        if not sql_name:
            return None, (name_tok, "empty column name"), _skip_definition(tokens, pos + 1)

        i = pos + 1
        if i >= len(tokens) or tokens[i].kind != 'IDENT':
            return None, (name_tok, "missing column type"), _skip_definition(tokens, i)

        type_tok = tokens[i]
        type_end = type_tok.end
        i += 1
        if i < len(tokens) and tokens[i].kind == 'LPAREN':
            close = _type_params_end(tokens, i)
            if close is None:
                return None, (type_tok, "unbalanced type parameters"), _next_line(tokens, i)
            type_end = tokens[close].end
            i = close + 1
        raw_type = text[type_tok.start:type_end]

        comment_at = None
        depth = 0
        j = i
        while j < len(tokens):
            tok = tokens[j]
            if tok.kind == 'LPAREN':
                depth += 1
            elif tok.kind == 'RPAREN':
                if depth == 0:
                    break
                depth -= 1
            elif depth == 0 and tok.kind == 'COMMA':
                break
            elif tok.is_word('COMMENT') and j + 1 < len(tokens) and tokens[j + 1].kind == 'STRING':
                comment_at = j
                break
            j += 1

        if comment_at is None:
            return None, (name_tok, "no COMMENT clause"), _skip_definition(tokens, j)

        other = tokens[i:comment_at]
        other_text = text[type_end:tokens[comment_at].start].strip()
        nullable = _is_nullable(other)
        comment = unquote(tokens[comment_at + 1].value)

        column = ColumnDescriptor(
            sql_name=sql_name,
            field_name=to_pascal_case(sql_name),
            target_type=self.mapper.resolve(raw_type, nullable),
            comment=comment,
            validation_tag=self._validation_tag(raw_type, other_text),
            sql_type=raw_type,
            nullable=nullable,
            line=name_tok.line,
        )
        logger.debug(
            "Column '%s' %s%s -> %s %r",
            sql_name, raw_type, " NULL" if nullable else "", column.field_name, column.target_type,
        )
        return column, None, _skip_definition(tokens, comment_at + 2)

    def _validation_tag(self, raw_type: str, other_text: str) -> Optional[str]:
        if raw_type.upper().startswith('VARCHAR'):
            size = _SIZE.search(raw_type)
            if size:
                return f"max={size.group()}"
        if any(marker in other_text for marker in self.encrypt_markers):
            return "omitempty"
        return None


def unquote(literal: str) -> str:
    """Strip the quotes from a SQL string literal and resolve its escapes."""
    def replace(match):
        if match.group(0) == "''":
            return "'"
        ch = match.group(1)
        if ch in '%_':
            return '\\' + ch
        return _ESCAPES.get(ch, ch)

    return _STRING_ESCAPE.sub(replace, literal[1:-1])


def _skip_definition(tokens: List[Token], pos: int) -> int:
    """
    Index of the next definition in the table body.

    That is just past the next depth-0 comma, or the body's closing ')'.
    """
    depth = 0
    for k in range(pos, len(tokens)):
        kind = tokens[k].kind
        if kind == 'LPAREN':
            depth += 1
        elif kind == 'RPAREN':
            if depth == 0:
                return k
            depth -= 1
        elif kind == 'COMMA' and depth == 0:
            return k + 1
    return len(tokens)


def _type_params_end(tokens: List[Token], open_at: int) -> Optional[int]:
    """Matching ')' of a type parameter list; None if a COMMENT or column name comes first."""
    depth = 0
    for k in range(open_at, len(tokens)):
        tok = tokens[k]
        if tok.kind == 'LPAREN':
            depth += 1
        elif tok.kind == 'RPAREN':
            depth -= 1
            if depth == 0:
                return k
        elif tok.kind == 'QUOTED_IDENT' or tok.is_word('COMMENT'):
            return None
    return None


def _next_line(tokens: List[Token], pos: int) -> int:
    """Index of the first token on a later line than tokens[pos]."""
    line = tokens[pos].line
    for k in range(pos, len(tokens)):
        if tokens[k].line > line:
            return k
    return len(tokens)


def _is_nullable(other: Sequence[Token]) -> bool:
    """NOT NULL wins; otherwise any NULL keyword (DEFAULT NULL, NULL) makes it nullable."""
    for a, b in zip(other, other[1:]):
        if a.is_word('NOT') and b.is_word('NULL'):
            return False
    return any(t.is_word('NULL') for t in other)


def parse_sql(
    text: str,
    struct_name: str = "",
    second_struct_name: Optional[str] = None,
    mapper: Optional[TypeMapper] = None,
    encrypt_markers: Sequence[str] = ENCRYPTION_MARKERS,
) -> GenerationContext:
    """Parse CREATE TABLE text and return a GenerationContext."""
    extractor = SchemaExtractor(mapper=mapper, encrypt_markers=encrypt_markers)
    return extractor.extract(text, struct_name, second_struct_name)


def parse_file(path, **kwargs) -> GenerationContext:
    """Parse a SQL schema file from disk. Keyword arguments go to parse_sql()."""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            text = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise SchemaReadError(str(path), str(e)) from e
    return parse_sql(text, **kwargs)


def ensure_clean(context: GenerationContext) -> None:
    """
    Raise if extraction was not clean.

    Raises:
        ParseError: for the first partially matched column
        UnmappedTypeError: if any column type has no mapping
    """
    if context.issues:
        issue = context.issues[0]
        raise ParseError(f"{issue.reason}: {issue.text}", issue.line, issue.col)
    if context.unmapped_columns:
        raise UnmappedTypeError(context.unmapped_columns)
