"""
SQL to target-language type mapping.

A TypeProfile is plain, read-only data: which target type each SQL type
keyword maps to, once for NOT NULL columns and once for nullable ones,
plus how each persistence type collapses to the plain type exposed on
the entity. TypeMapper answers lookups against one profile, so another
profile can be swapped in without touching the extractor.
"""
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping


@dataclass(frozen=True)
class TypeProfile:
    """Type tables for one target language."""
    name: str
    types: Mapping[str, str]             # SQL keyword -> non-nullable type
    nullable_types: Mapping[str, str]    # SQL keyword -> nullable wrapper
    plain_types: Mapping[str, str]       # PO type -> entity type

    def __post_init__(self):
        for attr in ("types", "nullable_types", "plain_types"):
            object.__setattr__(self, attr, MappingProxyType(dict(getattr(self, attr))))


GO_PROFILE = TypeProfile(
    name="go",
    types={
        "INT": "int32",
        "SMALLINT": "int32",
        "TINYINT": "int32",
        "MEDIUMINT": "int32",
        "BIGINT": "int64",
        "VARCHAR": "string",
        "CHAR": "string",
        "TEXT": "string",
        "JSON": "string",
        "DATETIME": "datetime.DateTime",
        "DOUBLE": "float64",
        "FLOAT": "float32",
    },
    nullable_types={
        "INT": "sql.NullInt32",
        "SMALLINT": "sql.NullInt32",
        "TINYINT": "sql.NullInt32",
        "MEDIUMINT": "sql.NullInt32",
        "BIGINT": "sql.NullInt64",
        "VARCHAR": "sql.NullString",
        "CHAR": "sql.NullString",
        "TEXT": "sql.NullString",
        "JSON": "sql.NullString",
        "DATETIME": "datetime.NullDateTime",
        "DOUBLE": "sql.NullFloat64",
        "FLOAT": "sql.NullFloat32",
    },
    plain_types={
        "sql.NullString": "string",
        "sql.NullInt32": "int32",
        "sql.NullInt64": "int64",
        "sql.NullFloat32": "float32",
        "sql.NullFloat64": "float64",
        "datetime.NullDateTime": "time.Time",
        "datetime.DateTime": "time.Time",
    },
)


class TypeMapper:
    """Resolve SQL column types against a TypeProfile."""

    def __init__(self, profile: TypeProfile = GO_PROFILE):
        self.profile = profile
        self._wrappers = frozenset(profile.nullable_types.values())

    @staticmethod
    def base_keyword(sql_type: str) -> str:
        """Strip a parameter list and uppercase: ``varchar(64)`` -> ``VARCHAR``."""
        return sql_type.split("(", 1)[0].strip().upper()

    def resolve(self, sql_type: str, nullable: bool = False) -> str:
        """
        Return the target type for a SQL type.

        An unknown keyword resolves to an empty string; callers decide
        whether that is an error.
        """
        table = self.profile.nullable_types if nullable else self.profile.types
        return table.get(self.base_keyword(sql_type), "")

    def is_known(self, sql_type: str) -> bool:
        return self.base_keyword(sql_type) in self.profile.types

    def is_nullable_wrapper(self, target_type: str) -> bool:
        return target_type in self._wrappers

    def plain_type(self, target_type: str) -> str:
        """Entity-side type for a PO type; unknown types pass through."""
        return self.profile.plain_types.get(target_type, target_type)
