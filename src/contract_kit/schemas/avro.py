"""Avro schema parser.

Parses Apache Avro schema files (.avsc). A top-level record is a single
entity; a top-level JSON array of records is a multi-entity document.
"""

import json
from pathlib import Path
from typing import Any

from contract_kit.errors import SchemaImportError
from contract_kit.models.tag import parse_tags
from contract_kit.schemas.base import (
    FieldSchema,
    SchemaDefinition,
    SchemaDocument,
    SchemaFormat,
)

PRIMITIVE_TYPES = {"null", "boolean", "int", "long", "float", "double", "bytes", "string"}


class AvroParser:
    """Parser for Apache Avro schemas."""

    def __init__(self, schema: dict[str, Any] | list):
        """Initialize parser with a parsed schema.

        Args:
            schema: Parsed Avro schema (a record dict or a list of them)
        """
        if not isinstance(schema, (dict, list)):
            raise SchemaImportError(
                "Avro schema must be a JSON object or array",
                format=SchemaFormat.AVRO.value,
            )
        self.schema = schema
        self._named_types: dict[str, dict[str, Any]] = {}
        self._collect_named_types(schema)

    @classmethod
    def from_file(cls, path: Path | str) -> "AvroParser":
        """Load parser from a file.

        Args:
            path: Path to .avsc file

        Returns:
            Initialized parser
        """
        path = Path(path)
        return cls.from_string(path.read_text())

    @classmethod
    def from_string(cls, content: str) -> "AvroParser":
        """Load parser from a string.

        Args:
            content: Avro schema as JSON string

        Returns:
            Initialized parser
        """
        try:
            schema = json.loads(content)
        except json.JSONDecodeError as e:
            raise SchemaImportError(
                f"Invalid Avro JSON: {e}",
                format=SchemaFormat.AVRO.value,
            ) from e
        return cls(schema)

    def _collect_named_types(self, schema: dict[str, Any] | list | str, namespace: str = "") -> None:
        """Recursively collect all named types (records, enums, fixed).

        Args:
            schema: Schema to traverse
            namespace: Enclosing namespace
        """
        if isinstance(schema, str):
            return

        if isinstance(schema, list):
            for item in schema:
                self._collect_named_types(item, namespace)
            return

        if isinstance(schema, dict):
            schema_type = schema.get("type")

            # Named types
            if schema_type in ("record", "error", "enum", "fixed"):
                name = schema.get("name")
                if not name:
                    raise SchemaImportError(
                        f"Avro {schema_type} without a name",
                        format=SchemaFormat.AVRO.value,
                    )
                namespace = schema.get("namespace", namespace)
                short_name = name.rsplit(".", 1)[-1]
                full_name = name if "." in name else (f"{namespace}.{name}" if namespace else name)
                self._named_types[short_name] = schema
                self._named_types[full_name] = schema

            # Recurse into fields
            if schema_type in ("record", "error"):
                for field in schema.get("fields", []):
                    self._collect_named_types(field.get("type", {}), namespace)

            # Recurse into array/map items
            if schema_type == "array":
                self._collect_named_types(schema.get("items", {}), namespace)
            if schema_type == "map":
                self._collect_named_types(schema.get("values", {}), namespace)

    def _root_records(self) -> list[dict[str, Any]]:
        roots = self.schema if isinstance(self.schema, list) else [self.schema]
        return [r for r in roots if isinstance(r, dict) and r.get("type") in ("record", "error")]

    def list_records(self) -> list[str]:
        """List all record type names.

        Returns:
            List of record names
        """
        seen = []
        for name, schema in self._named_types.items():
            if schema.get("type") in ("record", "error") and "." not in name and name not in seen:
                seen.append(name)
        return seen

    def list_entities(self) -> list[str]:
        """List the top-level records, which are the document's entities."""
        return [r["name"].rsplit(".", 1)[-1] for r in self._root_records()]

    def parse(self, source_file: str | None = None) -> SchemaDefinition:
        """Parse the first top-level record.

        Args:
            source_file: Optional source file path for metadata

        Returns:
            Parsed SchemaDefinition
        """
        roots = self._root_records()
        if not roots:
            raise SchemaImportError(
                "Root Avro schema must be a record type",
                format=SchemaFormat.AVRO.value,
            )

        return self._parse_record(roots[0], source_file)

    def parse_record(
        self,
        record_name: str,
        source_file: str | None = None,
    ) -> SchemaDefinition:
        """Parse a specific record by name.

        Args:
            record_name: Name of the record to parse
            source_file: Optional source file path

        Returns:
            Parsed SchemaDefinition
        """
        record_schema = self._named_types.get(record_name)
        if record_schema is None or record_schema.get("type") not in ("record", "error"):
            available = ", ".join(self.list_records())
            raise SchemaImportError(
                f"Record '{record_name}' not found. Available: {available}",
                format=SchemaFormat.AVRO.value,
                entity=record_name,
            )

        return self._parse_record(record_schema, source_file)

    def parse_entity(self, name: str, source_file: str | None = None) -> SchemaDefinition:
        return self.parse_record(name, source_file)

    def parse_document(self, source_file: str | None = None) -> SchemaDocument:
        """Parse all top-level records, in declaration order."""
        if isinstance(self.schema, dict) and self.schema.get("type") not in ("record", "error"):
            raise SchemaImportError(
                "Root Avro schema must be a record type",
                format=SchemaFormat.AVRO.value,
            )

        return SchemaDocument(
            source_format=SchemaFormat.AVRO,
            entities=[self._parse_record(r, source_file) for r in self._root_records()],
            source_file=source_file,
        )

    def _parse_record(
        self,
        record_schema: dict[str, Any],
        source_file: str | None = None,
    ) -> SchemaDefinition:
        """Parse a record schema into SchemaDefinition.

        Args:
            record_schema: Avro record schema
            source_file: Optional source file path

        Returns:
            Parsed SchemaDefinition
        """
        full_name = record_schema.get("name", "Record")
        name = full_name.rsplit(".", 1)[-1]
        namespace = record_schema.get("namespace", full_name.rpartition(".")[0])

        fields = [
            self._parse_field(field, stack=(name,))
            for field in record_schema.get("fields", [])
        ]

        return SchemaDefinition(
            name=name,
            description=record_schema.get("doc"),
            fields=fields,
            source_format=SchemaFormat.AVRO,
            source_file=source_file,
            source_entity=f"{namespace}.{name}" if namespace else name,
            tags=record_schema.get("tags"),
            metadata={
                "namespace": namespace,
                "aliases": record_schema.get("aliases", []),
            },
        )

    def _parse_field(self, field: dict[str, Any], stack: tuple[str, ...]) -> FieldSchema:
        """Parse an Avro field into FieldSchema.

        Args:
            field: Avro field definition
            stack: Names of the records being expanded, for cycle detection

        Returns:
            Parsed FieldSchema
        """
        if "name" not in field or "type" not in field:
            raise SchemaImportError(
                f"Avro field must have 'name' and 'type': {json.dumps(field)}",
                format=SchemaFormat.AVRO.value,
                entity=stack[0] if stack else None,
            )

        parsed = self._parse_type(field["name"], field["type"], stack)
        return parsed.model_copy(update={
            "description": field.get("doc"),
            "default": field.get("default"),
            "tags": parsed.tags + parse_tags(field.get("tags")),
            "metadata": {**parsed.metadata, **({"aliases": field["aliases"]} if field.get("aliases") else {})},
        })

    def _parse_type(
        self,
        name: str,
        avro_type: str | list | dict,
        stack: tuple[str, ...],
    ) -> FieldSchema:
        """Parse an Avro type into a FieldSchema.

        The FieldSchema ``type`` stays in Avro's vocabulary (``long``,
        ``record``, ``enum``, ...); logical types go to ``format``.
        """
        # Union type (e.g., ["null", "string"])
        if isinstance(avro_type, list):
            return self._parse_union_type(name, avro_type, stack)

        if isinstance(avro_type, str):
            if avro_type in PRIMITIVE_TYPES:
                return FieldSchema(
                    name=name,
                    type=avro_type,
                    physical_type=avro_type,
                    required=True,
                    nullable=avro_type == "null",
                )
            # Named type reference
            named = self._named_types.get(avro_type)
            if named is None:
                raise SchemaImportError(
                    f"Unknown Avro type '{avro_type}' for field '{name}'",
                    format=SchemaFormat.AVRO.value,
                    entity=stack[0] if stack else None,
                )
            return self._parse_complex_type(name, named, stack)

        if isinstance(avro_type, dict):
            return self._parse_complex_type(name, avro_type, stack)

        raise SchemaImportError(
            f"Invalid Avro type for field '{name}': {avro_type!r}",
            format=SchemaFormat.AVRO.value,
            entity=stack[0] if stack else None,
        )

    def _parse_union_type(self, name: str, types: list, stack: tuple[str, ...]) -> FieldSchema:
        """Parse an Avro union type.

        Args:
            name: Field name
            types: List of union types

        Returns:
            FieldSchema of the first non-null branch, marked nullable
        """
        nullable = "null" in types
        non_null_types = [t for t in types if t != "null"]

        if not non_null_types:
            return FieldSchema(name=name, type="null", physical_type="null")

        parsed = self._parse_type(name, non_null_types[0], stack)
        metadata = dict(parsed.metadata)
        if len(non_null_types) > 1:
            metadata["union"] = types

        return parsed.model_copy(update={
            "required": not nullable,
            "nullable": nullable,
            "metadata": metadata,
        })

    def _parse_complex_type(
        self,
        name: str,
        type_schema: dict[str, Any],
        stack: tuple[str, ...],
    ) -> FieldSchema:
        """Parse a complex Avro type.

        Args:
            name: Field name
            type_schema: Complex type schema dict

        Returns:
            Parsed FieldSchema
        """
        type_name = type_schema.get("type", "")
        if isinstance(type_name, (dict, list)):
            # {"type": {"type": "string"}} wraps another type
            return self._parse_type(name, type_name, stack)

        logical_type = type_schema.get("logicalType")

        # Record type
        if type_name in ("record", "error"):
            record_name = type_schema.get("name", "").rsplit(".", 1)[-1]
            if record_name in stack:
                # Recursive reference: keep the name, stop expanding
                return FieldSchema(name=name, type="record", physical_type="record", reference=record_name, required=True, nullable=False)
            nested = [
                self._parse_field(field, stack + (record_name,))
                for field in type_schema.get("fields", [])
            ]
            return FieldSchema(
                name=name,
                type="record",
                physical_type="record",
                required=True,
                nullable=False,
                properties=nested,
                reference=record_name,
                description=type_schema.get("doc"),
            )

        # Enum type
        if type_name == "enum":
            return FieldSchema(
                name=name,
                type="enum",
                physical_type="enum",
                required=True,
                nullable=False,
                enum=type_schema.get("symbols", []),
                reference=type_schema.get("name", "").rsplit(".", 1)[-1] or None,
            )

        # Array type
        if type_name == "array":
            items = self._parse_type("item", type_schema.get("items", "string"), stack)
            return FieldSchema(
                name=name,
                type="array",
                physical_type="array",
                required=True,
                nullable=False,
                items=items,
            )

        # Map type
        if type_name == "map":
            values = self._parse_type("value", type_schema.get("values", "string"), stack)
            return FieldSchema(
                name=name,
                type="map",
                physical_type="map",
                required=True,
                nullable=False,
                metadata={"values": values.type},
            )

        # Fixed type
        if type_name == "fixed":
            size = type_schema.get("size", 0)
            return FieldSchema(
                name=name,
                type="fixed",
                format=logical_type,
                physical_type="fixed",
                required=True,
                nullable=False,
                min_length=size,
                max_length=size,
                reference=type_schema.get("name", "").rsplit(".", 1)[-1] or None,
            )

        if type_name in PRIMITIVE_TYPES:
            return FieldSchema(
                name=name,
                type=type_name,
                format=logical_type,
                physical_type=type_name,
                required=True,
                nullable=type_name == "null",
                precision=type_schema.get("precision"),
                scale=type_schema.get("scale"),
            )

        named = self._named_types.get(type_name)
        if named is not None:
            return self._parse_complex_type(name, named, stack)

        raise SchemaImportError(
            f"Unknown Avro type '{type_name}' for field '{name}'",
            format=SchemaFormat.AVRO.value,
            entity=stack[0] if stack else None,
        )
