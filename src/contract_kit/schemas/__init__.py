"""Schema importers for external document formats.

Each importer reads one format into the generic :class:`SchemaDocument`:
an ordered list of entities whose fields keep their source-native types.

Example usage:
    from contract_kit.schemas import SchemaParser, parse_schema_file

    # Parse the first table of a DDL file
    schema = parse_schema_file("users.sql")

    # Parse every entity of an Avro file
    document = SchemaParser.from_file("events.avsc").parse_document()
"""

from contract_kit.schemas.base import (
    FieldSchema,
    SchemaDefinition,
    SchemaDocument,
    SchemaFormat,
)
from contract_kit.schemas.parser import SchemaParser, detect_format, parse_schema_file

__all__ = [
    "FieldSchema",
    "SchemaDefinition",
    "SchemaDocument",
    "SchemaFormat",
    "SchemaParser",
    "detect_format",
    "parse_schema_file",
]
