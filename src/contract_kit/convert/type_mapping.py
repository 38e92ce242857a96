"""Built-in source type to logical type tables.

Lookups use the normalized source type: lowercased, with size/precision
arguments and array suffixes removed. A ``(type, format)`` entry beats a
plain ``type`` entry.
"""

import re

from contract_kit.schemas.base import SchemaFormat

_SQL_TYPES = {
    # Integers
    "int": "integer",
    "integer": "integer",
    "smallint": "integer",
    "bigint": "integer",
    "tinyint": "integer",
    "mediumint": "integer",
    "int2": "integer",
    "int4": "integer",
    "int8": "integer",
    "serial": "integer",
    "smallserial": "integer",
    "bigserial": "integer",
    "int unsigned": "integer",
    "bigint unsigned": "integer",
    # Numbers
    "decimal": "number",
    "numeric": "number",
    "number": "number",
    "float": "number",
    "float4": "number",
    "float8": "number",
    "real": "number",
    "double": "number",
    "double precision": "number",
    "money": "number",
    "smallmoney": "number",
    # Strings
    "varchar": "string",
    "char": "string",
    "character": "string",
    "character varying": "string",
    "nvarchar": "string",
    "nchar": "string",
    "text": "string",
    "tinytext": "string",
    "mediumtext": "string",
    "longtext": "string",
    "ntext": "string",
    "string": "string",
    "clob": "string",
    "citext": "string",
    "uuid": "string",
    "uniqueidentifier": "string",
    "enum": "string",
    "json": "string",
    "jsonb": "string",
    "xml": "string",
    "inet": "string",
    "interval": "string",
    "bytea": "string",
    "blob": "string",
    "binary": "string",
    "varbinary": "string",
    # Booleans
    "boolean": "boolean",
    "bool": "boolean",
    "bit": "boolean",
    # Temporal
    "date": "date",
    "timestamp": "timestamp",
    "timestamptz": "timestamp",
    "timestamp with time zone": "timestamp",
    "timestamp without time zone": "timestamp",
    "timestamp_ntz": "timestamp",
    "timestamp_ltz": "timestamp",
    "datetime": "timestamp",
    "datetime2": "timestamp",
    "smalldatetime": "timestamp",
    "datetimeoffset": "timestamp",
    "time": "time",
    "timetz": "time",
    "time with time zone": "time",
    "time without time zone": "time",
    # Complex
    "struct": "object",
    "array": "array",
    "map": "object",
}

_SQL_LOSSY = {
    "money",
    "smallmoney",
    "json",
    "jsonb",
    "xml",
    "inet",
    "interval",
    "bytea",
    "blob",
    "binary",
    "varbinary",
    "bit",
    "map",
}

_AVRO_TYPES = {
    "boolean": "boolean",
    "int": "integer",
    "long": "integer",
    "float": "number",
    "double": "number",
    "bytes": "string",
    "string": "string",
    "record": "object",
    "enum": "string",
    "fixed": "string",
    "map": "object",
    "array": "array",
    ("int", "date"): "date",
    ("int", "time-millis"): "time",
    ("long", "time-micros"): "time",
    ("long", "timestamp-millis"): "timestamp",
    ("long", "timestamp-micros"): "timestamp",
    ("long", "timestamp-nanos"): "timestamp",
    ("long", "local-timestamp-millis"): "timestamp",
    ("long", "local-timestamp-micros"): "timestamp",
    ("bytes", "decimal"): "number",
    ("fixed", "decimal"): "number",
    ("string", "uuid"): "string",
}

_AVRO_LOSSY = {"bytes", "fixed", "map", ("bytes", "decimal"), ("fixed", "decimal")}

_PROTOBUF_TYPES = {
    "double": "number",
    "float": "number",
    "int32": "integer",
    "int64": "integer",
    "uint32": "integer",
    "uint64": "integer",
    "sint32": "integer",
    "sint64": "integer",
    "fixed32": "integer",
    "fixed64": "integer",
    "sfixed32": "integer",
    "sfixed64": "integer",
    "bool": "boolean",
    "string": "string",
    "bytes": "string",
    "enum": "string",
    "message": "object",
    "map": "object",
    "array": "array",
    "google.protobuf.timestamp": "timestamp",
    "google.protobuf.duration": "string",
    "google.protobuf.stringvalue": "string",
    "google.protobuf.bytesvalue": "string",
    "google.protobuf.boolvalue": "boolean",
    "google.protobuf.int32value": "integer",
    "google.protobuf.int64value": "integer",
    "google.protobuf.uint32value": "integer",
    "google.protobuf.uint64value": "integer",
    "google.protobuf.floatvalue": "number",
    "google.protobuf.doublevalue": "number",
    "google.protobuf.struct": "object",
}

_PROTOBUF_LOSSY = {
    "bytes",
    "map",
    "uint64",
    "google.protobuf.duration",
    "google.protobuf.bytesvalue",
    "google.protobuf.struct",
}

# JSON Schema and OpenAPI share a vocabulary
_JSON_TYPES = {
    "string": "string",
    "integer": "integer",
    "number": "number",
    "boolean": "boolean",
    "object": "object",
    "array": "array",
    ("string", "date"): "date",
    ("string", "date-time"): "timestamp",
    ("string", "time"): "time",
    ("string", "byte"): "string",
    ("string", "binary"): "string",
}

_JSON_LOSSY = {("string", "byte"), ("string", "binary")}

_ODCS_TYPES = {
    "string": "string",
    "integer": "integer",
    "number": "number",
    "boolean": "boolean",
    "date": "date",
    "timestamp": "timestamp",
    "time": "time",
    "object": "object",
    "array": "array",
}

# Data Contract Specification field types
_ODCL_TYPES = {
    "string": "string",
    "text": "string",
    "varchar": "string",
    "number": "number",
    "decimal": "number",
    "numeric": "number",
    "float": "number",
    "double": "number",
    "int": "integer",
    "integer": "integer",
    "long": "integer",
    "bigint": "integer",
    "boolean": "boolean",
    "timestamp": "timestamp",
    "timestamp_tz": "timestamp",
    "timestamp_ntz": "timestamp",
    "date": "date",
    "time": "time",
    "bytes": "string",
    "object": "object",
    "record": "object",
    "struct": "object",
    "map": "object",
    "array": "array",
}

_ODCL_LOSSY = {"bytes", "map", "timestamp_ntz"}

DEFAULT_TYPE_TABLES: dict[SchemaFormat, dict] = {
    SchemaFormat.SQL: _SQL_TYPES,
    SchemaFormat.AVRO: _AVRO_TYPES,
    SchemaFormat.PROTOBUF: _PROTOBUF_TYPES,
    SchemaFormat.JSON_SCHEMA: _JSON_TYPES,
    SchemaFormat.OPENAPI: _JSON_TYPES,
    SchemaFormat.ODCS: _ODCS_TYPES,
    SchemaFormat.ODCL: _ODCL_TYPES,
}

LOSSY_DEFAULTS: dict[SchemaFormat, set] = {
    SchemaFormat.SQL: _SQL_LOSSY,
    SchemaFormat.AVRO: _AVRO_LOSSY,
    SchemaFormat.PROTOBUF: _PROTOBUF_LOSSY,
    SchemaFormat.JSON_SCHEMA: _JSON_LOSSY,
    SchemaFormat.OPENAPI: _JSON_LOSSY,
    SchemaFormat.ODCS: set(),
    SchemaFormat.ODCL: _ODCL_LOSSY,
}


def normalize_type(source_type: str) -> str:
    """Normalize a source type for table lookup.

    >>> normalize_type("VARCHAR(100)")
    'varchar'
    >>> normalize_type("Numeric(10, 2)")
    'numeric'
    """
    normalized = re.sub(r"\([^)]*\)", " ", source_type.lower())
    normalized = re.sub(r"(\s*\[\s*\d*\s*\])+\s*$", "", normalized)
    return " ".join(normalized.split())


def lookup_default(
    source_format: SchemaFormat,
    source_type: str,
    format: str | None = None,
) -> tuple[str, bool] | None:
    """Look up the built-in logical type for a source type.

    Args:
        source_format: Format the field was imported from
        source_type: Source-native type
        format: Format hint, if any

    Returns:
        Tuple of (logical type, lossy) or None when the type is unknown
    """
    table = DEFAULT_TYPE_TABLES.get(source_format, {})
    lossy = LOSSY_DEFAULTS.get(source_format, set())
    normalized = normalize_type(source_type)

    if format is not None:
        key = (normalized, format.lower())
        if key in table:
            return table[key], key in lossy

    if normalized in table:
        return table[normalized], normalized in lossy

    return None
