"""Base classes for the generic schema document.

Provides the format-agnostic model that every importer (SQL DDL, Avro,
Protobuf, JSON Schema, OpenAPI, ODCS, ODCL) produces. Field types are kept
in the source format's own vocabulary; mapping them to canonical logical
types is the converter's job.
"""

from enum import Enum
from typing import Any, Iterator

from pydantic import BaseModel, Field

from contract_kit.errors import UnsupportedFormatError
from contract_kit.models.tag import TagList


class SchemaFormat(str, Enum):
    """Supported document formats."""

    ODCS = "odcs"
    ODCL = "odcl"
    SQL = "sql"
    AVRO = "avro"
    PROTOBUF = "protobuf"
    JSON_SCHEMA = "jsonschema"
    OPENAPI = "openapi"
    CADS = "cads"
    ODPS = "odps"

    @classmethod
    def parse(cls, value: "SchemaFormat | str") -> "SchemaFormat":
        """Resolve a format name, accepting common aliases."""
        if isinstance(value, SchemaFormat):
            return value

        name = value.strip().lower().replace("-", "_")
        aliases = {
            "ddl": "sql",
            "swagger": "openapi",
            "json_schema": "jsonschema",
            "proto": "protobuf",
            "avsc": "avro",
            "data_contract": "odcl",
        }
        name = aliases.get(name, name)
        try:
            return cls(name)
        except ValueError:
            available = ", ".join(f.value for f in cls)
            raise UnsupportedFormatError(
                f"Unsupported format '{value}'. Available: {available}",
                format=value,
            )

    @property
    def has_table_schema(self) -> bool:
        """Whether documents of this format describe tables/records."""
        return self not in (SchemaFormat.CADS, SchemaFormat.ODPS)


class FieldSchema(BaseModel):
    """Schema definition for a single field.

    A field with ``properties`` is an object; a field with ``items`` is an
    array whose element is described by ``items``.
    """

    name: str = Field(..., description="Field name")
    type: str = Field(..., description="Source-native type (varchar, long, int32, string, ...)")
    format: str | None = Field(default=None, description="Format hint or logical type annotation")
    physical_type: str | None = Field(default=None, description="Type as spelled in the source")
    description: str | None = Field(default=None, description="Field description")
    required: bool = Field(default=False, description="Whether field is required")
    nullable: bool = Field(default=True, description="Whether field can be null")
    primary_key: bool = Field(default=False, description="Whether field is part of the primary key")
    unique: bool = Field(default=False, description="Whether field values are unique")

    # Enum constraints
    enum: list[Any] | None = Field(default=None, description="Allowed enum values")

    # String constraints
    min_length: int | None = Field(default=None, description="Minimum string length")
    max_length: int | None = Field(default=None, description="Maximum string length")
    pattern: str | None = Field(default=None, description="Regex pattern for validation")

    # Numeric constraints
    minimum: float | None = Field(default=None, description="Minimum numeric value")
    maximum: float | None = Field(default=None, description="Maximum numeric value")
    precision: int | None = Field(default=None, description="Decimal precision")
    scale: int | None = Field(default=None, description="Decimal scale")

    # Array constraints
    items: "FieldSchema | None" = Field(default=None, description="Schema for array items")
    min_items: int | None = Field(default=None, description="Minimum array length")
    max_items: int | None = Field(default=None, description="Maximum array length")
    unique_items: bool = Field(default=False, description="Whether array items must be unique")

    # Object constraints
    properties: list["FieldSchema"] | None = Field(default=None, description="Nested object fields, in order")
    reference: str | None = Field(default=None, description="Name of the referenced named type")

    default: Any | None = Field(default=None, description="Default value")
    example: Any | None = Field(default=None, description="Example value")
    tags: TagList = Field(default_factory=list, description="Field tags")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Format-specific extras")

    @property
    def is_object(self) -> bool:
        return self.properties is not None

    @property
    def is_array(self) -> bool:
        return self.items is not None

    def child_fields(self) -> list["FieldSchema"]:
        """Named children: object properties, or the properties of array items."""
        if self.properties is not None:
            return self.properties
        if self.items is not None:
            return self.items.child_fields()
        return []

    def iter_fields(self) -> Iterator["FieldSchema"]:
        """Yield this field and every nested field, depth-first."""
        yield self
        for child in self.child_fields():
            yield from child.iter_fields()

    def count_fields(self) -> int:
        """Count this field plus all nested named fields."""
        return sum(1 for _ in self.iter_fields())


class SchemaDefinition(BaseModel):
    """Complete schema definition for an entity/table/message."""

    name: str = Field(..., description="Schema/entity name")
    description: str | None = Field(default=None, description="Schema description")
    fields: list[FieldSchema] = Field(default_factory=list, description="Field definitions")

    # Source information
    source_format: SchemaFormat = Field(..., description="Original schema format")
    source_file: str | None = Field(default=None, description="Source file path")
    source_entity: str | None = Field(default=None, description="Entity name in source (table, message, etc.)")

    tags: TagList = Field(default_factory=list, description="Entity tags")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Additional metadata")

    def get_required_fields(self) -> list[FieldSchema]:
        """Get all required fields."""
        return [f for f in self.fields if f.required]

    def get_field(self, name: str) -> FieldSchema | None:
        """Get a top-level field by name."""
        for field in self.fields:
            if field.name == name:
                return field
        return None

    def iter_fields(self) -> Iterator[FieldSchema]:
        """Yield every field, nested ones included, in declaration order."""
        for field in self.fields:
            yield from field.iter_fields()

    def count_fields(self) -> int:
        return sum(1 for _ in self.iter_fields())


class SchemaDocument(BaseModel):
    """Format-agnostic document: an ordered sequence of entities.

    A document with no entities is valid.
    """

    source_format: SchemaFormat = Field(..., description="Original document format")
    entities: list[SchemaDefinition] = Field(default_factory=list, description="Entities in declaration order")
    source_file: str | None = Field(default=None, description="Source file path")
    name: str | None = Field(default=None, description="Document name, when the format has one")
    tags: TagList = Field(default_factory=list, description="Document-level tags")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Document-level metadata")

    def list_entities(self) -> list[str]:
        return [e.name for e in self.entities]

    def get_entity(self, name: str) -> SchemaDefinition | None:
        for entity in self.entities:
            if entity.name == name:
                return entity
        return None

    def count_fields(self) -> int:
        """Count every named field across all entities."""
        return sum(e.count_fields() for e in self.entities)


FieldSchema.model_rebuild()
