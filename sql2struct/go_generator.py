"""
Go code generator.

Renders a Document as one Go source template holding the PO struct,
the entity struct, a Validate() stub and the two conversion functions
(PO -> entity through the entity builder, entity -> PO as a struct
literal).
"""
import logging
import re
from pathlib import Path
from typing import List, Optional

from .document import ConversionDecl, Document, FieldMapping, MethodDecl, StructDecl, build_document
from .errors import OutputWriteError
from .naming import to_snake_case, upper_first
from .parser import GenerationContext
from .typemap import TypeMapper

logger = logging.getLogger(__name__)

DEFAULT_DATETIME_IMPORT = "git.woa.com/prd_base_pay_go/paycomm/datetime"
TEMPLATE_SUFFIX = "_template.go"

DATETIME = "datetime.DateTime"
NULL_DATETIME = "datetime.NullDateTime"

_LINE_BREAK = re.compile(r"\s*[\r\n]+\s*")

# sql.NullX wrapper -> field holding the value (read as p.F.X, written as sql.NullX{X: v})
WRAPPER_VALUE_FIELDS = {
    "sql.NullString": "String",
    "sql.NullInt32": "Int32",
    "sql.NullInt64": "Int64",
    "sql.NullFloat32": "Float32",
    "sql.NullFloat64": "Float64",
}


class GoGenerator:
    """Generate Go source from a Document."""

    def __init__(self, datetime_import: str = DEFAULT_DATETIME_IMPORT):
        self.datetime_import = datetime_import

    def generate(self, document: Document) -> str:
        lines = []
        lines.extend(self._generate_po(document.po))

        if document.entity is not None:
            lines.extend(self._generate_entity(document.entity))
            if document.validate is not None:
                lines.extend(self._generate_validate(document.validate))
            if document.to_entity is not None:
                lines.extend(self._generate_to_entity(document.to_entity))
            if document.to_po is not None:
                lines.extend(self._generate_to_po(document.to_po))
            if document.uses_type(NULL_DATETIME):
                lines.extend(self._generate_null_datetime_helper())

        return "\n".join(lines).rstrip("\n") + "\n"

    def _imports(self, struct: StructDecl) -> List[str]:
        types = {f.type for f in struct.fields}
        imports = []
        if any(t.startswith("sql.") for t in types):
            imports.append("database/sql")
        if any(t.startswith("datetime.") for t in types):
            imports.append(self.datetime_import)
        return imports

    def _generate_po(self, struct: StructDecl) -> List[str]:
        lines = [f"package {struct.package}", ""]

        imports = self._imports(struct)
        if imports:
            lines.append("import (")
            for path in imports:
                lines.append(f'\t"{path}"')
            lines.append(")")
            lines.append("")

        lines.append(f"// {struct.doc}")
        lines.append(f"type {struct.name} struct {{")
        for f in struct.fields:
            tags = f'db:"{f.column}"'
            if f.validation:
                tags += f' validate:"{f.validation}"'
            line = f"\t{f.name:<30} {f.type:<20} `{tags}`"
            if f.comment:
                line += f" // {_one_line(f.comment)}"
            lines.append(line)
        lines.append("}")
        lines.append("")
        lines.append("")
        return lines

    def _generate_entity(self, struct: StructDecl) -> List[str]:
        lines = [
            f"package {struct.package}",
            "",
            f"//go:generate entitytool -source=$GOFILE -entity={struct.name}",
            "",
            f"// {struct.doc}",
            f"type {struct.name} struct {{",
        ]
        for f in struct.fields:
            line = f"\t{f.name:<30} {f.type:<20}"
            if f.comment:
                line += f" // {_one_line(f.comment)}"
            lines.append(line.rstrip())
        lines.append("}")
        lines.append("")
        return lines

    def _generate_validate(self, method: MethodDecl) -> List[str]:
        return [
            f"func (e *{method.receiver}) {method.name}() error {{",
            "\treturn nil",
            "}",
            "",
        ]

    def _generate_to_entity(self, conv: ConversionDecl) -> List[str]:
        lines = [
            f"// {conv.name} {conv.doc}",
            f"func {conv.name}(p *po.{conv.po_struct}) (*entity.{conv.entity_struct}, error) {{",
            f"\treturn entity.New{conv.entity_struct}Builder().",
        ]
        for m in conv.mappings:
            lines.append(f"\t\tWith{upper_first(m.entity_field)}({self._read_po(m)}).")
        lines.append("\t\tBuild()")
        lines.append("}")
        lines.append("")
        return lines

    def _generate_to_po(self, conv: ConversionDecl) -> List[str]:
        lines = [
            f"// {conv.name} {conv.doc}",
            f"func {conv.name}(e *entity.{conv.entity_struct}) (*po.{conv.po_struct}, error) {{",
            f"\treturn &po.{conv.po_struct}{{",
        ]
        for m in conv.mappings:
            lines.append(f"\t\t{m.po_field:<15}: {self._write_po(m)},")
        lines.append("\t}, nil")
        lines.append("}")
        lines.append("")
        return lines

    def _read_po(self, m: FieldMapping) -> str:
        """Expression reading the plain value of a PO field."""
        expr = f"p.{m.po_field}"
        if m.po_type in WRAPPER_VALUE_FIELDS:
            return f"{expr}.{WRAPPER_VALUE_FIELDS[m.po_type]}"
        if m.po_type == NULL_DATETIME:
            return f"{expr}.Time.Time()"
        if m.po_type == DATETIME:
            return f"{expr}.Time()"
        return expr

    def _write_po(self, m: FieldMapping) -> str:
        """Expression producing the PO field value from the entity getter."""
        value = f"e.{upper_first(m.entity_field)}()"
        if m.po_type in WRAPPER_VALUE_FIELDS:
            return f"{m.po_type}{{{WRAPPER_VALUE_FIELDS[m.po_type]}: {value}, Valid: true}}"
        if m.po_type == NULL_DATETIME:
            return f"TimeToNullDateTime({value})"
        if m.po_type == DATETIME:
            return f"datetime.NewDateTime({value})"
        return value

    def _generate_null_datetime_helper(self) -> List[str]:
        return [
            "// TimeToNullDateTime converts time.Time to datetime.NullDateTime, zero time is NULL",
            "func TimeToNullDateTime(t time.Time) datetime.NullDateTime {",
            "\tif !t.IsZero() {",
            "\t\treturn datetime.NullDateTime{Time: datetime.NewDateTime(t), Valid: true}",
            "\t}",
            "\treturn datetime.NullDateTime{Valid: false}",
            "}",
        ]


def _one_line(comment: str) -> str:
    """Join a multi-line column comment so it stays inside a // comment."""
    return _LINE_BREAK.sub(" ", comment).strip()


def output_file_name(context: GenerationContext) -> str:
    """File name for the generated template, e.g. ``user_info_template.go``."""
    return to_snake_case(context.second_struct_name or "") + TEMPLATE_SUFFIX


def generate_go_source(
    context: GenerationContext,
    mapper: Optional[TypeMapper] = None,
    datetime_import: str = DEFAULT_DATETIME_IMPORT,
) -> str:
    """Render the Go template for a parsed schema."""
    document = build_document(context, mapper)
    return GoGenerator(datetime_import=datetime_import).generate(document)


def generate_go_file(
    context: GenerationContext,
    output_dir,
    mapper: Optional[TypeMapper] = None,
    datetime_import: str = DEFAULT_DATETIME_IMPORT,
) -> Path:
    """
    Render and write the Go template into output_dir.

    The directory must exist. Returns the written path.

    Raises:
        OutputWriteError: if the file cannot be written
    """
    source = generate_go_source(context, mapper, datetime_import)
    path = Path(output_dir) / output_file_name(context)
    try:
        path.write_text(source, encoding="utf-8")
    except OSError as e:
        raise OutputWriteError(str(path), str(e)) from e
    logger.info("Wrote %s (%d columns)", path, len(context.columns))
    return path
