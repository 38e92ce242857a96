"""Swagger/OpenAPI schema parser.

Parses OpenAPI 2.0 (Swagger) and OpenAPI 3.x specifications. Every object
schema under ``components.schemas`` (or ``definitions`` for Swagger 2) is an
entity; paths are not read.
"""

import json
from pathlib import Path
from typing import Any

import yaml

from contract_kit.errors import SchemaImportError
from contract_kit.schemas.base import SchemaDefinition, SchemaDocument, SchemaFormat
from contract_kit.schemas.jsonschema import SchemaObjectReader, is_object_schema


class OpenAPIParser:
    """Parser for Swagger/OpenAPI specifications."""

    def __init__(self, spec: dict[str, Any]):
        """Initialize parser with a parsed document.

        Args:
            spec: Parsed OpenAPI document dict
        """
        if not isinstance(spec, dict) or not ("openapi" in spec or "swagger" in spec):
            raise SchemaImportError(
                "Not an OpenAPI document: missing 'openapi' or 'swagger' version key",
                format=SchemaFormat.OPENAPI.value,
            )
        self.spec = spec
        self._is_openapi3 = str(spec.get("openapi", "")).startswith("3.")
        self._schemas = self._get_schemas()
        self._reader = SchemaObjectReader(self._schemas, SchemaFormat.OPENAPI)

    @classmethod
    def from_file(cls, path: Path | str) -> "OpenAPIParser":
        """Load parser from a file.

        Args:
            path: Path to JSON or YAML OpenAPI document

        Returns:
            Initialized parser
        """
        path = Path(path)
        content = path.read_text()
        fmt = "yaml" if path.suffix.lower() in (".yaml", ".yml") else "json"
        return cls.from_string(content, format=fmt)

    @classmethod
    def from_string(cls, content: str, format: str | None = None) -> "OpenAPIParser":
        """Load parser from a string.

        Args:
            content: OpenAPI document as string
            format: "json" or "yaml"; detected from the content when omitted

        Returns:
            Initialized parser
        """
        if format is None:
            format = "json" if content.lstrip().startswith("{") else "yaml"

        try:
            if format.lower() in ("yaml", "yml"):
                spec = yaml.safe_load(content)
            else:
                spec = json.loads(content)
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise SchemaImportError(
                f"Invalid OpenAPI {format.upper()}: {e}",
                format=SchemaFormat.OPENAPI.value,
            ) from e

        return cls(spec)

    def _get_schemas(self) -> dict[str, Any]:
        if self._is_openapi3:
            section = "components.schemas"
            components = self.spec.get("components") or {}
            schemas = components.get("schemas") if isinstance(components, dict) else components
        else:
            section = "definitions"
            schemas = self.spec.get("definitions")
        schemas = schemas or {}
        if not isinstance(schemas, dict):
            raise SchemaImportError(
                f"'{section}' must be a mapping, got {type(schemas).__name__}",
                format=SchemaFormat.OPENAPI.value,
            )
        return dict(schemas)

    def list_schemas(self) -> list[str]:
        """List all available schema names in the document.

        Returns:
            List of schema names
        """
        return list(self._schemas.keys())

    def list_entities(self) -> list[str]:
        """List object schemas, which are the document's entities."""
        return [name for name, schema in self._schemas.items() if is_object_schema(schema)]

    def parse_schema(self, schema_name: str, source_file: str | None = None) -> SchemaDefinition:
        """Parse a specific schema by name.

        Args:
            schema_name: Name of the schema to parse
            source_file: Optional source file path for metadata

        Returns:
            Parsed SchemaDefinition
        """
        if schema_name not in self._schemas:
            available = ", ".join(self._schemas.keys())
            raise SchemaImportError(
                f"Schema '{schema_name}' not found. Available: {available}",
                format=SchemaFormat.OPENAPI.value,
                entity=schema_name,
            )

        schema_data = self._schemas[schema_name]
        try:
            fields = self._reader.parse_object_schema(schema_data, (schema_name,))
        except SchemaImportError as e:
            raise SchemaImportError(str(e), format=e.format, entity=schema_name) from e

        return SchemaDefinition(
            name=schema_name,
            description=schema_data.get("description"),
            fields=fields,
            source_format=SchemaFormat.OPENAPI,
            source_file=source_file,
            source_entity=schema_name,
            tags=schema_data.get("tags") or schema_data.get("x-tags"),
            metadata={
                "openapi_version": self.spec.get("openapi") or self.spec.get("swagger"),
            },
        )

    def parse_entity(self, name: str, source_file: str | None = None) -> SchemaDefinition:
        return self.parse_schema(name, source_file)

    def parse(self, source_file: str | None = None) -> SchemaDefinition:
        """Parse the first object schema in the document."""
        entities = self.list_entities()
        if not entities:
            raise SchemaImportError("No object schemas found", format=SchemaFormat.OPENAPI.value)
        return self.parse_schema(entities[0], source_file)

    def parse_document(self, source_file: str | None = None) -> SchemaDocument:
        """Parse every object schema, in document order."""
        info = self.spec.get("info") or {}
        return SchemaDocument(
            source_format=SchemaFormat.OPENAPI,
            entities=[self.parse_schema(name, source_file) for name in self.list_entities()],
            source_file=source_file,
            name=info.get("title"),
            metadata={
                "openapi_version": self.spec.get("openapi") or self.spec.get("swagger"),
                "info": info,
                "non_object_schemas": [n for n in self._schemas if n not in self.list_entities()],
            },
        )
