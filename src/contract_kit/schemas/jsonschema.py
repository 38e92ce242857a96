"""JSON Schema parser.

Parses JSON Schema draft-04, draft-06, draft-07, and 2019-09/2020-12.
"""

import json
from pathlib import Path
from typing import Any

from contract_kit.errors import SchemaImportError
from contract_kit.schemas.base import (
    FieldSchema,
    SchemaDefinition,
    SchemaDocument,
    SchemaFormat,
)


def is_object_schema(schema: Any) -> bool:
    """Whether a schema describes an object with named properties."""
    if not isinstance(schema, dict):
        return False
    return schema.get("type") == "object" or "properties" in schema or "allOf" in schema


class SchemaObjectReader:
    """Reads JSON-Schema-style property trees into FieldSchema lists.

    Shared by the JSON Schema and OpenAPI parsers. ``$ref`` targets are
    looked up by their last path segment in ``definitions``; a reference
    already being expanded on the current path is kept by name only.
    """

    def __init__(self, definitions: dict[str, Any], source_format: SchemaFormat):
        self.definitions = definitions
        self.source_format = source_format

    def resolve_ref(self, schema: dict[str, Any]) -> tuple[dict[str, Any], str | None]:
        """Resolve a local $ref reference.

        Args:
            schema: Schema that may contain $ref

        Returns:
            Tuple of (resolved schema, referenced name or None)
        """
        if not isinstance(schema, dict) or "$ref" not in schema:
            return schema, None

        ref = schema["$ref"]
        ref_name = ref.rsplit("/", 1)[-1]
        if not ref.startswith("#/") or ref_name not in self.definitions:
            raise SchemaImportError(
                f"Cannot resolve reference '{ref}'",
                format=self.source_format.value,
            )
        return self.definitions[ref_name], ref_name

    def merge_all_of(self, schema: dict[str, Any], stack: tuple[str, ...]) -> dict[str, Any]:
        """Merge ``allOf`` members into one object schema."""
        if "allOf" not in schema:
            return schema

        merged: dict[str, Any] = {k: v for k, v in schema.items() if k != "allOf"}
        properties: dict[str, Any] = {}
        required: list[str] = []
        for member in schema["allOf"]:
            member, ref_name = self.resolve_ref(member)
            if ref_name and ref_name in stack:
                continue
            member = self.merge_all_of(member, stack + ((ref_name,) if ref_name else ()))
            properties.update(member.get("properties", {}))
            required.extend(member.get("required", []))
            merged.setdefault("type", member.get("type"))
        properties.update(schema.get("properties", {}))
        required.extend(schema.get("required", []))
        merged["properties"] = properties
        merged["required"] = required
        merged["type"] = merged.get("type") or "object"
        return merged

    def parse_object_schema(
        self,
        schema: dict[str, Any],
        stack: tuple[str, ...] = (),
    ) -> list[FieldSchema]:
        """Parse an object schema into a list of FieldSchema.

        Args:
            schema: The object schema dict
            stack: Reference names being expanded

        Returns:
            List of FieldSchema in property order
        """
        schema = self.merge_all_of(schema, stack)
        required_fields = set(schema.get("required", []))
        properties = schema.get("properties", {}) or {}

        return [
            self.parse_field(name, prop, name in required_fields, stack)
            for name, prop in properties.items()
        ]

    def parse_field(
        self,
        name: str,
        schema: dict[str, Any],
        required: bool,
        stack: tuple[str, ...] = (),
    ) -> FieldSchema:
        """Parse a single field schema.

        Args:
            name: Field name
            schema: Field schema dict
            required: Whether the field is required
            stack: Reference names being expanded

        Returns:
            FieldSchema
        """
        if not isinstance(schema, dict):
            raise SchemaImportError(
                f"Property '{name}' must be a schema object",
                format=self.source_format.value,
            )

        description = schema.get("description")
        schema, ref_name = self.resolve_ref(schema)
        nullable = False

        # oneOf/anyOf: the first non-null branch wins
        for key in ("oneOf", "anyOf"):
            if key in schema and "type" not in schema:
                branches = schema[key]
                non_null = [b for b in branches if not (isinstance(b, dict) and b.get("type") == "null")]
                nullable = len(non_null) < len(branches)
                if non_null:
                    schema, branch_ref = self.resolve_ref(non_null[0])
                    ref_name = ref_name or branch_ref
                break

        if ref_name and ref_name in stack:
            # Recursive reference: keep the name, stop expanding
            return FieldSchema(
                name=name,
                type="object",
                required=required,
                nullable=not required,
                reference=ref_name,
                description=description,
            )
        child_stack = stack + (ref_name,) if ref_name else stack

        schema = self.merge_all_of(schema, child_stack)

        # Handle type which can be a string or array
        type_value = schema.get("type")
        if isinstance(type_value, list):
            nullable = nullable or "null" in type_value
            field_type = next((t for t in type_value if t != "null"), "null")
        elif type_value:
            field_type = type_value
        elif "properties" in schema:
            field_type = "object"
        elif "enum" in schema:
            field_type = "string"
        else:
            field_type = "string"

        nullable = nullable or bool(schema.get("nullable", False))

        # Handle nested objects
        properties = None
        if field_type == "object" and "properties" in schema:
            properties = self.parse_object_schema(schema, child_stack)

        # Handle arrays
        items = None
        if field_type == "array":
            items = self.parse_field("item", schema.get("items", {}), False, child_stack)

        examples = schema.get("examples")
        example = examples[0] if isinstance(examples, list) and examples else schema.get("example")

        return FieldSchema(
            name=name,
            type=field_type,
            format=schema.get("format"),
            physical_type=schema.get("x-physical-type"),
            description=description or schema.get("description"),
            required=required,
            nullable=nullable or not required,
            enum=schema.get("enum"),
            min_length=schema.get("minLength"),
            max_length=schema.get("maxLength"),
            pattern=schema.get("pattern"),
            minimum=schema.get("minimum"),
            maximum=schema.get("maximum"),
            items=items,
            min_items=schema.get("minItems"),
            max_items=schema.get("maxItems"),
            unique_items=schema.get("uniqueItems", False),
            properties=properties,
            reference=ref_name,
            default=schema.get("default"),
            example=example,
            tags=schema.get("tags"),
        )


class JsonSchemaParser:
    """Parser for JSON Schema specifications."""

    def __init__(self, schema: dict[str, Any]):
        """Initialize parser with a parsed schema.

        Args:
            schema: Parsed JSON Schema dict
        """
        if not isinstance(schema, dict):
            raise SchemaImportError(
                "JSON Schema document must be an object",
                format=SchemaFormat.JSON_SCHEMA.value,
            )
        self.schema = schema
        self._definitions = self._get_definitions()
        self._reader = SchemaObjectReader(self._definitions, SchemaFormat.JSON_SCHEMA)

    @classmethod
    def from_file(cls, path: Path | str) -> "JsonSchemaParser":
        """Load parser from a file.

        Args:
            path: Path to JSON Schema file

        Returns:
            Initialized parser
        """
        path = Path(path)
        return cls.from_string(path.read_text())

    @classmethod
    def from_string(cls, content: str) -> "JsonSchemaParser":
        """Load parser from a string.

        Args:
            content: JSON Schema as string

        Returns:
            Initialized parser
        """
        try:
            schema = json.loads(content)
        except json.JSONDecodeError as e:
            raise SchemaImportError(
                f"Invalid JSON: {e}",
                format=SchemaFormat.JSON_SCHEMA.value,
            ) from e
        return cls(schema)

    def _get_definitions(self) -> dict[str, Any]:
        """Get all definitions/defs from the schema.

        Returns:
            Dict of definition name to schema
        """
        # JSON Schema draft-07 and earlier use "definitions"
        # JSON Schema 2019-09+ use "$defs"
        definitions = dict(self.schema.get("definitions", {}))
        definitions.update(self.schema.get("$defs", {}))
        return definitions

    @property
    def root_name(self) -> str:
        return self.schema.get("title", "Schema")

    def _has_root_entity(self) -> bool:
        return is_object_schema(self.schema) or not self._definitions

    def list_definitions(self) -> list[str]:
        """List all available definition names.

        Returns:
            List of definition names
        """
        return list(self._definitions.keys())

    def list_entities(self) -> list[str]:
        """List entities: the root object (when it is one), then definitions."""
        names = [self.root_name] if self._has_root_entity() else []
        return names + [n for n, d in self._definitions.items() if is_object_schema(d)]

    def parse(self, source_file: str | None = None) -> SchemaDefinition:
        """Parse the root schema.

        Args:
            source_file: Optional source file path for metadata

        Returns:
            Parsed SchemaDefinition
        """
        name = self.root_name

        if is_object_schema(self.schema):
            fields = self._reader.parse_object_schema(self.schema)
        else:
            # Single field schema
            fields = [self._reader.parse_field("value", self.schema, True)]

        return SchemaDefinition(
            name=name,
            description=self.schema.get("description"),
            fields=fields,
            source_format=SchemaFormat.JSON_SCHEMA,
            source_file=source_file,
            source_entity=name,
            tags=self.schema.get("tags"),
            metadata={
                "schema_version": self.schema.get("$schema"),
                "id": self.schema.get("$id") or self.schema.get("id"),
            },
        )

    def parse_definition(
        self,
        definition_name: str,
        source_file: str | None = None,
    ) -> SchemaDefinition:
        """Parse a specific definition by name.

        Args:
            definition_name: Name of the definition to parse
            source_file: Optional source file path

        Returns:
            Parsed SchemaDefinition
        """
        if definition_name not in self._definitions:
            available = ", ".join(self._definitions.keys())
            raise SchemaImportError(
                f"Definition '{definition_name}' not found. Available: {available}",
                format=SchemaFormat.JSON_SCHEMA.value,
                entity=definition_name,
            )

        def_schema = self._definitions[definition_name]
        fields = self._reader.parse_object_schema(def_schema, (definition_name,))

        return SchemaDefinition(
            name=definition_name,
            description=def_schema.get("description"),
            fields=fields,
            source_format=SchemaFormat.JSON_SCHEMA,
            source_file=source_file,
            source_entity=definition_name,
            tags=def_schema.get("tags"),
            metadata={
                "schema_version": self.schema.get("$schema"),
            },
        )

    def parse_entity(self, name: str, source_file: str | None = None) -> SchemaDefinition:
        if name == self.root_name and self._has_root_entity():
            return self.parse(source_file)
        return self.parse_definition(name, source_file)

    def parse_document(self, source_file: str | None = None) -> SchemaDocument:
        """Parse the root and every object definition, root first."""
        entities = [self.parse(source_file)] if self._has_root_entity() else []
        entities.extend(
            self.parse_definition(name, source_file)
            for name, definition in self._definitions.items()
            if is_object_schema(definition)
        )
        return SchemaDocument(
            source_format=SchemaFormat.JSON_SCHEMA,
            entities=entities,
            source_file=source_file,
            name=self.schema.get("title"),
            metadata={"schema_version": self.schema.get("$schema")},
        )
