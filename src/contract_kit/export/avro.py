"""Avro schema exporter."""

import json
import re
from typing import Any

from contract_kit.export.base import (
    FLOAT32_HINTS,
    INT32_HINTS,
    UniqueNames,
    pascal_case,
    reference_target,
    referenced_objects,
    reuses_physical_types,
    sanitize_identifier,
    type_hint,
)
from contract_kit.models.contract import ContractDocument, SchemaProperty
from contract_kit.models.tag import tags_to_strings
from contract_kit.schemas.base import SchemaFormat

AVRO_PRIMITIVES = {"string", "bytes", "int", "long", "float", "double", "boolean"}

ENUM_SYMBOL = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class AvroExporter:
    """Renders schema objects as Avro records.

    One object gives a single record; several give a JSON array of records.
    Optional properties become ``["null", T]`` unions defaulting to null.
    Properties linked by name to a lifted object inline that record at
    first use and refer to it by name afterwards.
    """

    format = SchemaFormat.AVRO

    def __init__(self, namespace: str = "com.datamodel"):
        self.namespace = namespace

    def render(self, document: ContractDocument) -> str:
        records = self.to_records(document)
        if len(records) == 1:
            return json.dumps(records[0], indent=2) + "\n"
        return json.dumps(records, indent=2) + "\n"

    def to_records(self, document: ContractDocument) -> list[dict[str, Any]]:
        """Build the Avro record dicts for a document."""
        return _AvroBuild(document, self.namespace).records()


class _AvroBuild:
    """State of one Avro rendering: named types already defined."""

    def __init__(self, document: ContractDocument, namespace: str):
        self.document = document
        self.namespace = namespace
        self.reuse = reuses_physical_types(document, SchemaFormat.AVRO)
        self.names = UniqueNames()
        self.defined: dict[str, str] = {}

    def records(self) -> list[dict[str, Any]]:
        referenced = referenced_objects(self.document)
        top_level = [
            obj for obj in self.document.schema_objects
            if not (obj.name in referenced and "liftedFrom" in obj.custom_properties)
        ]
        for obj in top_level:
            self.defined[obj.name] = self.names.reserve(sanitize_identifier(obj.name))

        records = []
        for obj in top_level:
            record = self.record(self.defined[obj.name], obj.description, obj.properties)
            record["namespace"] = self.namespace
            if obj.tags:
                record["tags"] = tags_to_strings(obj.tags)
            records.append(record)
        return records

    def record(self, name: str, doc: str | None, properties: list[SchemaProperty]) -> dict[str, Any]:
        record: dict[str, Any] = {"type": "record", "name": name}
        if doc:
            record["doc"] = doc
        record["fields"] = [self.field(prop) for prop in properties]
        return record

    def field(self, prop: SchemaProperty) -> dict[str, Any]:
        avro_type = self.type_of(prop)
        field: dict[str, Any] = {"name": sanitize_identifier(prop.name)}

        if prop.required or avro_type == "null":
            field["type"] = avro_type
            if prop.default is not None:
                field["default"] = prop.default
        elif prop.default is not None:
            field["type"] = [avro_type, "null"]
            field["default"] = prop.default
        else:
            field["type"] = ["null", avro_type]
            field["default"] = None

        if prop.description:
            field["doc"] = prop.description
        if prop.tags:
            field["tags"] = tags_to_strings(prop.tags)
        return field

    def _named_reference(self, target: str) -> Any:
        """Inline the lifted record the first time, then use its name."""
        if target in self.defined:
            return self.defined[target]
        obj = self.document.get_object(target)
        name = self.names.take(pascal_case(target))
        self.defined[target] = name
        if obj is None:
            return {"type": "map", "values": "string"}
        return self.record(name, obj.description, obj.properties)

    def type_of(self, prop: SchemaProperty) -> Any:
        """Avro type (without nullability) of a property."""
        target = reference_target(prop)

        if prop.items is not None or prop.logical_type == "array":
            if prop.items is None:
                return {"type": "array", "items": "string"}
            if target and prop.items.properties is None:
                return {"type": "array", "items": self._named_reference(target)}
            if prop.items.properties is not None:
                name = self.names.take(pascal_case(prop.name))
                return {"type": "array", "items": self.record(name, None, prop.items.properties)}
            return {"type": "array", "items": self.type_of(prop.items)}

        if prop.properties is not None:
            name = self.names.take(pascal_case(prop.name))
            return self.record(name, None, prop.properties)

        if target:
            return self._named_reference(target)

        if prop.enum and all(isinstance(v, str) and ENUM_SYMBOL.match(v) for v in prop.enum):
            return {
                "type": "enum",
                "name": self.names.take(pascal_case(prop.name)),
                "symbols": list(prop.enum),
            }

        return self.scalar(prop)

    def scalar(self, prop: SchemaProperty) -> Any:
        options = prop.logical_type_options
        logical_format = options.get("format")

        if self.reuse and prop.physical_type == "null":
            return "null"
        if self.reuse and prop.physical_type in AVRO_PRIMITIVES:
            if not logical_format:
                return prop.physical_type
            avro_type: dict[str, Any] = {"type": prop.physical_type, "logicalType": logical_format}
            if options.get("precision"):
                avro_type["precision"] = options["precision"]
                avro_type["scale"] = options.get("scale") or 0
            return avro_type

        logical = prop.logical_type
        hint = type_hint(prop)

        if logical == "integer":
            return "int" if hint in INT32_HINTS else "long"
        if logical == "number":
            if options.get("precision"):
                return {
                    "type": "bytes",
                    "logicalType": "decimal",
                    "precision": options["precision"],
                    "scale": options.get("scale") or 0,
                }
            return "float" if hint in FLOAT32_HINTS else "double"
        if logical == "boolean":
            return "boolean"
        if logical == "date":
            return {"type": "int", "logicalType": "date"}
        if logical == "timestamp":
            if logical_format in ("timestamp-micros", "local-timestamp-millis", "local-timestamp-micros"):
                return {"type": "long", "logicalType": logical_format}
            return {"type": "long", "logicalType": "timestamp-millis"}
        if logical == "time":
            if logical_format == "time-micros":
                return {"type": "long", "logicalType": "time-micros"}
            return {"type": "int", "logicalType": "time-millis"}
        if logical == "object":
            return {"type": "map", "values": "string"}
        if logical == "string" and logical_format == "uuid":
            return {"type": "string", "logicalType": "uuid"}
        return "string"
