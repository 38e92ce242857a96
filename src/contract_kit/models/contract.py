"""Canonical contract document (ODCS v3.1.0 shaped).

The converter produces a :class:`ContractDocument`; exporters render it.
``to_dict`` gives the camelCase ODCS mapping with empty values left out.
"""

import re
from typing import Any, Iterator

from pydantic import BaseModel, Field

from contract_kit.models.tag import TagList, tags_to_strings

ODCS_API_VERSION = "v3.1.0"

LOGICAL_TYPES = (
    "string",
    "integer",
    "number",
    "boolean",
    "date",
    "timestamp",
    "time",
    "object",
    "array",
)

ENUM_QUERY_PATTERN = re.compile(r"NOT\s+IN\s*\((.*)\)", re.IGNORECASE | re.DOTALL)


def _compact(data: dict[str, Any]) -> dict[str, Any]:
    """Drop keys whose value is None, False or an empty collection."""
    return {
        k: v for k, v in data.items()
        if v is not None and v is not False and v != [] and v != {}
    }


def enum_to_quality_rule(values: list[Any]) -> dict[str, Any]:
    """Express enum values as an ODCS SQL quality rule.

    ODCS properties have no ``enum`` key, so allowed values travel as a
    ``NOT IN`` check that must return zero rows.
    """
    quoted = ", ".join("'" + str(v).replace("'", "''") + "'" for v in values)
    return {
        "type": "sql",
        "description": f"Value must be one of: {', '.join(str(v) for v in values)}",
        "query": f"SELECT COUNT(*) FROM ${{table}} WHERE ${{column}} NOT IN ({quoted})",
        "mustBe": 0,
    }


def enum_from_quality_rule(rule: dict[str, Any]) -> list[str] | None:
    """Recover enum values from a rule made by :func:`enum_to_quality_rule`."""
    if not isinstance(rule, dict) or rule.get("type") != "sql" or rule.get("mustBe") != 0:
        return None
    match = ENUM_QUERY_PATTERN.search(str(rule.get("query", "")))
    if not match:
        return None
    return [v.replace("''", "'") for v in re.findall(r"'((?:[^']|'')*)'", match.group(1))]


class Relationship(BaseModel):
    """Link from a property to another schema object or property."""

    type: str = Field(default="foreignKey", description="Relationship type: foreignKey or reference")
    to: str = Field(..., description="Target, e.g. 'customers.id' or a lifted object name")

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "to": self.to}


class SchemaProperty(BaseModel):
    """A property of a schema object; may nest properties or array items."""

    name: str = Field(..., description="Property name")
    logical_type: str = Field(default="string", description="Canonical logical type")
    physical_type: str | None = Field(default=None, description="Type in the source or target system")
    physical_name: str | None = Field(default=None, description="Physical column name")
    description: str | None = Field(default=None, description="Property description")
    required: bool = Field(default=False, description="Whether a value is required")
    primary_key: bool = Field(default=False, description="Whether the property is part of the primary key")
    primary_key_position: int | None = Field(default=None, description="Position within a composite key")
    unique: bool = Field(default=False, description="Whether values are unique")
    enum: list[Any] | None = Field(default=None, description="Allowed values")
    logical_type_options: dict[str, Any] = Field(
        default_factory=dict,
        description="Constraints such as maxLength, minimum or format",
    )
    default: Any | None = Field(default=None, description="Default value")
    examples: list[Any] = Field(default_factory=list, description="Example values")
    tags: TagList = Field(default_factory=list, description="Property tags")
    properties: list["SchemaProperty"] | None = Field(default=None, description="Nested properties of an object")
    items: "SchemaProperty | None" = Field(default=None, description="Element of an array")
    relationships: list[Relationship] = Field(default_factory=list, description="Outgoing relationships")
    quality: list[dict[str, Any]] = Field(default_factory=list, description="Quality rules")
    custom_properties: dict[str, Any] = Field(default_factory=dict, description="Extra properties")

    def iter_properties(self) -> Iterator["SchemaProperty"]:
        """Yield this property and every nested one, depth-first."""
        yield self
        children = self.properties
        if children is None and self.items is not None:
            children = self.items.properties
        for child in children or []:
            yield from child.iter_properties()

    def to_dict(self) -> dict[str, Any]:
        quality = list(self.quality)
        if self.enum:
            quality.append(enum_to_quality_rule(self.enum))

        return _compact({
            "name": self.name,
            "logicalType": self.logical_type,
            "physicalType": self.physical_type,
            "physicalName": self.physical_name,
            "description": self.description,
            "required": self.required,
            "primaryKey": self.primary_key,
            "primaryKeyPosition": self.primary_key_position if self.primary_key else None,
            "unique": self.unique,
            "logicalTypeOptions": self.logical_type_options,
            "defaultValue": self.default,
            "examples": self.examples,
            "tags": tags_to_strings(self.tags),
            "properties": [p.to_dict() for p in self.properties] if self.properties is not None else None,
            "items": self.items.to_dict() if self.items is not None else None,
            "relationships": [r.to_dict() for r in self.relationships],
            "quality": quality,
            "customProperties": [
                {"property": k, "value": v} for k, v in self.custom_properties.items()
            ],
        })


class SchemaObject(BaseModel):
    """A table/record-level object of the contract."""

    name: str = Field(..., description="Object name")
    physical_name: str | None = Field(default=None, description="Physical table name")
    logical_type: str = Field(default="object", description="Always object")
    physical_type: str = Field(default="table", description="Physical kind, e.g. table")
    description: str | None = Field(default=None, description="Object description")
    tags: TagList = Field(default_factory=list, description="Object tags")
    properties: list[SchemaProperty] = Field(default_factory=list, description="Properties in order")
    quality: list[dict[str, Any]] = Field(default_factory=list, description="Quality rules")
    custom_properties: dict[str, Any] = Field(default_factory=dict, description="Extra properties")

    def get_property(self, name: str) -> SchemaProperty | None:
        for prop in self.properties:
            if prop.name == name:
                return prop
        return None

    def iter_properties(self) -> Iterator[SchemaProperty]:
        for prop in self.properties:
            yield from prop.iter_properties()

    def to_dict(self) -> dict[str, Any]:
        return _compact({
            "name": self.name,
            "physicalName": self.physical_name,
            "logicalType": self.logical_type,
            "physicalType": self.physical_type,
            "description": self.description,
            "tags": tags_to_strings(self.tags),
            "properties": [p.to_dict() for p in self.properties],
            "quality": self.quality,
            "customProperties": [
                {"property": k, "value": v} for k, v in self.custom_properties.items()
            ],
        })


class ContractDocument(BaseModel):
    """Canonical data contract."""

    api_version: str = Field(default=ODCS_API_VERSION, description="ODCS version")
    kind: str = Field(default="DataContract", description="Document kind")
    id: str | None = Field(default=None, description="Contract identifier")
    name: str | None = Field(default=None, description="Contract name")
    version: str = Field(default="1.0.0", description="Contract version")
    status: str = Field(default="draft", description="Lifecycle status")
    domain: str | None = Field(default=None, description="Business domain")
    data_product: str | None = Field(default=None, description="Owning data product")
    description: str | None = Field(default=None, description="Contract description")
    tags: TagList = Field(default_factory=list, description="Contract tags")
    schema_objects: list[SchemaObject] = Field(default_factory=list, description="Schema objects in order")
    custom_properties: dict[str, Any] = Field(default_factory=dict, description="Extra properties, e.g. sourceFormat")

    @property
    def source_format(self) -> str | None:
        return self.custom_properties.get("sourceFormat")

    def get_object(self, name: str) -> SchemaObject | None:
        for obj in self.schema_objects:
            if obj.name == name:
                return obj
        return None

    def list_objects(self) -> list[str]:
        return [obj.name for obj in self.schema_objects]

    def to_dict(self) -> dict[str, Any]:
        """Render the ODCS mapping."""
        data = _compact({
            "apiVersion": self.api_version,
            "kind": self.kind,
            "id": self.id,
            "name": self.name,
            "version": self.version,
            "status": self.status,
            "domain": self.domain,
            "dataProduct": self.data_product,
            "description": {"purpose": self.description} if self.description else None,
            "tags": tags_to_strings(self.tags),
            "schema": [obj.to_dict() for obj in self.schema_objects],
            "customProperties": [
                {"property": k, "value": v} for k, v in self.custom_properties.items()
            ],
        })
        return data


SchemaProperty.model_rebuild()
