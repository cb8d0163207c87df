"""
Language-neutral document model for generated code.

build_document() turns a GenerationContext into declarations (structs,
a method stub, conversion functions). A renderer such as GoGenerator
owns all target syntax; nothing here knows about braces or tags.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from .naming import lower_first
from .parser import GenerationContext
from .typemap import TypeMapper


class ConversionKind(Enum):
    TO_ENTITY = "to_entity"     # PO -> entity, via the entity builder
    TO_PO = "to_po"             # entity -> PO, as a struct literal


@dataclass(frozen=True)
class FieldDecl:
    name: str
    type: str
    comment: str = ""
    column: Optional[str] = None            # Persistence-mapping key (PO only)
    validation: Optional[str] = None


@dataclass(frozen=True)
class StructDecl:
    name: str
    package: str
    fields: Tuple[FieldDecl, ...]
    doc: str = ""


@dataclass(frozen=True)
class MethodDecl:
    """A method whose body only reports success; hand-written rules go there later."""
    receiver: str
    name: str
    doc: str = ""


@dataclass(frozen=True)
class FieldMapping:
    po_field: str
    entity_field: str
    po_type: str
    nullable_wrapper: bool


@dataclass(frozen=True)
class ConversionDecl:
    name: str
    kind: ConversionKind
    po_struct: str
    entity_struct: str
    mappings: Tuple[FieldMapping, ...]
    doc: str = ""


@dataclass(frozen=True)
class Document:
    po: StructDecl
    entity: Optional[StructDecl] = None
    validate: Optional[MethodDecl] = None
    to_entity: Optional[ConversionDecl] = None
    to_po: Optional[ConversionDecl] = None

    def uses_type(self, type_name: str) -> bool:
        return any(f.type == type_name for f in self.po.fields)


def build_document(context: GenerationContext, mapper: Optional[TypeMapper] = None) -> Document:
    """
    Build the declarations for one table.

    Without a second struct name only the PO struct is declared.
    """
    mapper = mapper or TypeMapper()
    po_name = context.struct_name

    po = StructDecl(
        name=po_name,
        package="po",
        doc=f"{po_name} PO struct",
        fields=tuple(
            FieldDecl(
                name=c.field_name,
                type=c.target_type,
                comment=c.comment,
                column=c.sql_name,
                validation=c.validation_tag,
            )
            for c in context.columns
        ),
    )

    entity_name = context.second_struct_name
    if not entity_name:
        return Document(po=po)

    entity = StructDecl(
        name=entity_name,
        package="entity",
        doc=f"{entity_name} entity struct",
        fields=tuple(
            FieldDecl(
                name=lower_first(c.field_name),
                type=mapper.plain_type(c.target_type),
                comment=c.comment,
            )
            for c in context.columns
        ),
    )

    mappings = tuple(
        FieldMapping(
            po_field=c.field_name,
            entity_field=lower_first(c.field_name),
            po_type=c.target_type,
            nullable_wrapper=mapper.is_nullable_wrapper(c.target_type),
        )
        for c in context.columns
    )

    return Document(
        po=po,
        entity=entity,
        validate=MethodDecl(receiver=entity_name, name="Validate"),
        to_entity=ConversionDecl(
            name=f"To{entity_name}Entity",
            kind=ConversionKind.TO_ENTITY,
            po_struct=po_name,
            entity_struct=entity_name,
            mappings=mappings,
            doc="po to entity",
        ),
        to_po=ConversionDecl(
            name=f"To{po_name}",
            kind=ConversionKind.TO_PO,
            po_struct=po_name,
            entity_struct=entity_name,
            mappings=mappings,
            doc="entity to po",
        ),
    )
