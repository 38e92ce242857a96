"""Main schema parser module.

Provides a unified interface to parse schemas from various formats, and
format detection from file extensions and content.
"""

import json
import logging
import re
from pathlib import Path

import yaml

from contract_kit.errors import UnsupportedFormatError
from contract_kit.models.cads import CADSKind
from contract_kit.schemas.avro import AvroParser
from contract_kit.schemas.base import SchemaDefinition, SchemaDocument, SchemaFormat
from contract_kit.schemas.cads import CADSParser
from contract_kit.schemas.ddl import DDLParser
from contract_kit.schemas.jsonschema import JsonSchemaParser
from contract_kit.schemas.odcl import ODCLParser
from contract_kit.schemas.odcs import ODCSParser
from contract_kit.schemas.odps import ODPSParser
from contract_kit.schemas.openapi import OpenAPIParser
from contract_kit.schemas.protobuf import ProtobufParser

logger = logging.getLogger(__name__)

PARSERS = {
    SchemaFormat.ODCS: ODCSParser,
    SchemaFormat.ODCL: ODCLParser,
    SchemaFormat.SQL: DDLParser,
    SchemaFormat.AVRO: AvroParser,
    SchemaFormat.PROTOBUF: ProtobufParser,
    SchemaFormat.JSON_SCHEMA: JsonSchemaParser,
    SchemaFormat.OPENAPI: OpenAPIParser,
    SchemaFormat.CADS: CADSParser,
    SchemaFormat.ODPS: ODPSParser,
}

# File extensions with an unambiguous format
EXTENSION_FORMATS = {
    ".avsc": SchemaFormat.AVRO,
    ".sql": SchemaFormat.SQL,
    ".ddl": SchemaFormat.SQL,
    ".proto": SchemaFormat.PROTOBUF,
}

_KIND_PATTERN = re.compile(r"^kind:\s*['\"]?(\w+)['\"]?\s*$", re.MULTILINE)


def detect_format(content: str) -> SchemaFormat:
    """Detect a document's format from its content.

    Args:
        content: Document text

    Returns:
        Detected SchemaFormat

    Raises:
        UnsupportedFormatError: If no format matches
    """
    stripped = content.strip()

    if not stripped.startswith(("{", "[")):
        kind_match = _KIND_PATTERN.search(content)
        kind = kind_match.group(1) if kind_match else None

        if re.search(r"^dataContractSpecification:", content, re.MULTILINE):
            return SchemaFormat.ODCL
        if re.search(r"^apiVersion:", content, re.MULTILINE) and kind == "DataContract":
            return SchemaFormat.ODCS
        if kind == "DataProduct":
            return SchemaFormat.ODPS
        if kind in {k.value for k in CADSKind}:
            return SchemaFormat.CADS
        if re.search(r"\bCREATE\s+(?:OR\s+REPLACE\s+)?(?:\w+\s+)?TABLE\b", content, re.IGNORECASE):
            return SchemaFormat.SQL
        if re.search(r"^\s*syntax\s*=\s*[\"']proto[23][\"']", content, re.MULTILINE) or re.search(
            r"^\s*message\s+\w+\s*\{", content, re.MULTILINE
        ):
            return SchemaFormat.PROTOBUF

    try:
        data = json.loads(stripped) if stripped.startswith(("{", "[")) else yaml.safe_load(stripped)
    except (json.JSONDecodeError, yaml.YAMLError):
        data = None

    if isinstance(data, list) and data and all(isinstance(d, dict) and d.get("type") == "record" for d in data):
        return SchemaFormat.AVRO

    if isinstance(data, dict):
        # OpenAPI/Swagger detection
        if "openapi" in data or "swagger" in data:
            return SchemaFormat.OPENAPI

        # Avro detection
        if data.get("type") == "record" and "fields" in data:
            return SchemaFormat.AVRO

        # JSON Schema detection
        if "$schema" in data or "properties" in data or "$defs" in data or "definitions" in data or "type" in data:
            return SchemaFormat.JSON_SCHEMA

    raise UnsupportedFormatError("Could not detect the document format; pass it explicitly")


class SchemaParser:
    """Unified schema parser supporting multiple formats."""

    def __init__(
        self,
        content: str,
        format: SchemaFormat | str | None = None,
        source_file: str | None = None,
    ):
        """Initialize parser with content and format.

        Args:
            content: Schema content as string
            format: Schema format; detected from the content when None or "auto"
            source_file: Optional source file path for metadata
        """
        if format is None or format == "auto":
            format = detect_format(content)
            logger.debug("Detected format: %s", format.value)
        else:
            format = SchemaFormat.parse(format)

        self.content = content
        self.format = format
        self.source_file = source_file
        self._parser = PARSERS[format].from_string(content)

    @classmethod
    def from_file(
        cls,
        path: Path | str,
        format: SchemaFormat | str | None = None,
    ) -> "SchemaParser":
        """Create parser from a file.

        Args:
            path: Path to schema file
            format: Optional explicit format (auto-detected if not provided)

        Returns:
            Initialized SchemaParser
        """
        path = Path(path)
        content = path.read_text()

        if format is None:
            format = EXTENSION_FORMATS.get(path.suffix.lower())

        return cls(content, format, str(path))

    @property
    def parser(self):
        """The format-specific parser."""
        return self._parser

    def list_entities(self) -> list[str]:
        """List available entities (schemas, tables, messages) in the file.

        Returns:
            List of entity names
        """
        return self._parser.list_entities()

    def _require_table_schema(self) -> None:
        if not self.format.has_table_schema:
            raise UnsupportedFormatError(
                f"{self.format.value.upper()} documents have no table schema",
                format=self.format.value,
            )

    def parse(self, entity: str | None = None) -> SchemaDefinition:
        """Parse a schema entity.

        Args:
            entity: Optional entity name. If not provided, parses the first/root entity.

        Returns:
            Parsed SchemaDefinition
        """
        self._require_table_schema()
        if entity:
            return self._parser.parse_entity(entity, self.source_file)
        return self._parser.parse(self.source_file)

    def parse_document(self) -> SchemaDocument:
        """Parse all entities into a generic document."""
        self._require_table_schema()
        return self._parser.parse_document(self.source_file)


def parse_schema_file(
    path: Path | str,
    format: SchemaFormat | str | None = None,
    entity: str | None = None,
) -> SchemaDefinition:
    """Convenience function to parse a schema file.

    Args:
        path: Path to schema file
        format: Optional explicit format (auto-detected if not provided)
        entity: Optional entity name to parse

    Returns:
        Parsed SchemaDefinition
    """
    parser = SchemaParser.from_file(path, format)
    return parser.parse(entity)
