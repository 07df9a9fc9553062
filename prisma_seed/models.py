"""Data models and type definitions.

Schema descriptors are produced once per parse pass and never mutated afterwards,
so they are frozen dataclasses holding tuples.
"""

from dataclasses import dataclass, field
from typing import Any, Literal

SemanticType = Literal["string", "number", "boolean", "date", "enum", "relation", "unknown"]
RelationType = Literal["oneToOne", "oneToMany", "manyToMany"]


@dataclass(frozen=True)
class SchemaField:
    """
    One declared attribute of a model.

    Attributes:
        name: Field name (unique within its model)
        type: Semantic type tag (string, number, boolean, date, enum, relation, ...)
        is_required: False when the declared type carries the optional modifier
        is_unique: Whether the field has a @unique attribute
        is_primary_key: Whether the field is (part of) the primary key
        is_foreign_key: Whether the field holds another record's identifier
        relation_model: Referenced model name (foreign keys and relation fields)
        relation_field: Referenced field name in relation_model
        default_value: Literal schema default (None for generated defaults)
        enum_values: Candidate literals when the field type is a declared enum
        native_type: Type name exactly as declared (without modifiers)
        is_list: Whether the declared type carries the list modifier
        default_function: Name of a generated default (uuid, cuid, autoincrement, ...)
    """

    name: str
    type: str
    is_required: bool = True
    is_unique: bool = False
    is_primary_key: bool = False
    is_foreign_key: bool = False
    relation_model: str | None = None
    relation_field: str | None = None
    default_value: Any = None
    enum_values: tuple[str, ...] | None = None
    native_type: str = ""
    is_list: bool = False
    default_function: str | None = None

    @property
    def is_relation(self) -> bool:
        """Virtual navigation field pointing at another model (never stored)."""
        return self.type == "relation"

    @property
    def is_generated_by_store(self) -> bool:
        """Whether the store assigns this value (autoincrement, auto, dbgenerated)."""
        return self.default_function in ("autoincrement", "dbgenerated", "auto")


@dataclass(frozen=True)
class SchemaRelation:
    """
    A named edge between two models.

    Attributes:
        name: Relation (field) name in the source model
        type: oneToOne, oneToMany or manyToMany
        model: Target model name
        field: Source field name
        foreign_key: Comma-separated source columns from @relation(fields: [...])
    """

    name: str
    type: RelationType
    model: str
    field: str
    foreign_key: str | None = None


@dataclass(frozen=True)
class SchemaEnum:
    """A declared enum block and its members in source order."""

    name: str
    values: tuple[str, ...] = ()


@dataclass(frozen=True)
class SchemaModel:
    """
    A named entity type with its fields and relations in source order.

    Attributes:
        name: Model name (lookup key everywhere)
        fields: Declared fields
        relations: Relations to other models
    """

    name: str
    fields: tuple[SchemaField, ...] = ()
    relations: tuple[SchemaRelation, ...] = ()

    @property
    def primary_key(self) -> SchemaField | None:
        """
        Get the primary key field.

        Returns:
            First field marked as primary key, or None if the model declares none
        """
        for schema_field in self.fields:
            if schema_field.is_primary_key:
                return schema_field
        return None

    @property
    def foreign_keys(self) -> list[SchemaField]:
        """Get all foreign key fields."""
        return [f for f in self.fields if f.is_foreign_key]

    def get_field(self, name: str) -> SchemaField | None:
        """Get field by name, or None."""
        for schema_field in self.fields:
            if schema_field.name == name:
                return schema_field
        return None

    def get_self_referencing_fks(self) -> list[SchemaField]:
        """Get foreign keys pointing back at this model."""
        return [f for f in self.foreign_keys if f.relation_model == self.name]


@dataclass(frozen=True)
class SeedResult:
    """
    Outcome of seeding one model.

    Attributes:
        model: Model name
        count: Number of records actually created
        success: True when at least one record was created (or none was requested)
        error: Message of the last failure, if any failure occurred
    """

    model: str
    count: int
    success: bool
    error: str | None = None


@dataclass
class GeneratedRecords:
    """
    Identifier rows retained per model for the duration of one seeding run.

    Each row maps the primary key and any field referenced by another model's
    foreign key to its created value.
    """

    _rows: dict[str, list[dict[str, Any]]] = field(default_factory=dict)

    def add(self, model: str, row: dict[str, Any]) -> None:
        """Retain one created parent row."""
        self._rows.setdefault(model, []).append(row)

    def get(self, model: str) -> list[dict[str, Any]]:
        """Get retained rows for a model (empty list if none)."""
        return self._rows.get(model, [])

    def clear(self) -> None:
        """Forget all retained rows."""
        self._rows.clear()
