"""Protocol Buffers exporter."""

import re
from typing import Any

from contract_kit.errors import ExportError
from contract_kit.export.base import (
    FLOAT32_HINTS,
    INT32_HINTS,
    UniqueNames,
    pascal_case,
    reference_target,
    reuses_physical_types,
    sanitize_identifier,
    type_hint,
)
from contract_kit.models.contract import ContractDocument, SchemaProperty
from contract_kit.schemas.base import SchemaFormat
from contract_kit.schemas.protobuf import SCALAR_TYPES

SYNTAXES = ("proto2", "proto3")

RESERVED_WORDS = {
    "syntax", "import", "weak", "public", "package", "option", "message",
    "enum", "service", "rpc", "returns", "stream", "repeated", "optional",
    "required", "reserved", "oneof", "map", "extensions", "extend", "to",
    "max", "group", "true", "false", "inf", "nan",
} | SCALAR_TYPES

TIMESTAMP_TYPE = "google.protobuf.Timestamp"
TIMESTAMP_IMPORT = "google/protobuf/timestamp.proto"


def field_name(name: str) -> str:
    """Sanitize a field name, prefixing reserved words with ``_``."""
    sanitized = sanitize_identifier(name)
    if sanitized.lower() in RESERVED_WORDS:
        sanitized = f"_{sanitized}"
    return sanitized


def enum_value_name(value: Any) -> str:
    name = re.sub(r"\W", "_", str(value)).upper()
    if not name or name[0].isdigit():
        name = f"_{name}"
    return name


class ProtobufExporter:
    """Renders schema objects as ``.proto`` messages.

    Nested objects become nested messages, arrays become ``repeated``
    fields and properties linked by name use the lifted object's message.
    """

    format = SchemaFormat.PROTOBUF

    def __init__(self, syntax: str = "proto3", package: str | None = "com.datamodel"):
        """Initialize the exporter.

        Args:
            syntax: proto2 or proto3

        Raises:
            ExportError: For any other syntax
        """
        if syntax not in SYNTAXES:
            raise ExportError(f"Unknown protobuf syntax '{syntax}'. Available: {', '.join(SYNTAXES)}")
        self.syntax = syntax
        self.package = package

    def render(self, document: ContractDocument) -> str:
        build = _ProtoBuild(document, self.syntax)
        body = build.messages()

        lines = [f'syntax = "{self.syntax}";', ""]
        if self.package:
            lines += [f"package {self.package};", ""]
        if build.imports:
            lines += [f'import "{path}";' for path in sorted(build.imports)] + [""]
        return "\n".join(lines + body).rstrip("\n") + "\n"


class _ProtoBuild:
    """State of one rendering: message names and required imports."""

    def __init__(self, document: ContractDocument, syntax: str):
        self.document = document
        self.syntax = syntax
        self.reuse = reuses_physical_types(document, SchemaFormat.PROTOBUF)
        self.imports: set[str] = set()
        self.names = UniqueNames()
        self.message_names = {
            obj.name: self.names.take(pascal_case(obj.name)) for obj in document.schema_objects
        }

    def messages(self) -> list[str]:
        lines = []
        for obj in self.document.schema_objects:
            lines += self.message(self.message_names[obj.name], obj.description, obj.properties, 0)
            lines.append("")
        return lines

    def message(
        self,
        name: str,
        description: str | None,
        properties: list[SchemaProperty],
        depth: int,
    ) -> list[str]:
        indent = "  " * depth
        lines = []
        if description:
            lines += [f"{indent}// {line}" for line in description.splitlines()]
        lines.append(f"{indent}message {name} {{")

        nested: list[str] = []
        fields: list[str] = []
        local = UniqueNames()
        for number, prop in enumerate(properties, start=1):
            type_name = self.type_of(prop, nested, local, depth + 1)
            fields += self.field(prop, type_name, number, depth + 1)

        lines += nested + fields
        lines.append(f"{indent}}}")
        return lines

    def field(self, prop: SchemaProperty, type_name: str, number: int, depth: int) -> list[str]:
        indent = "  " * depth
        lines = []
        if prop.description:
            lines += [f"{indent}// {line}" for line in prop.description.splitlines()]

        repeated = type_name.startswith("repeated ")
        label = ""
        if self.syntax == "proto2" and not repeated and not type_name.startswith("map<"):
            label = "required " if prop.required else "optional "

        option = ""
        if (
            self.syntax == "proto2"
            and prop.default is not None
            and not repeated
            and type_name in SCALAR_TYPES
        ):
            option = f" [default = {self._literal(prop.default, type_name)}]"

        lines.append(f"{indent}{label}{type_name} {field_name(prop.name)} = {number}{option};")
        return lines

    @staticmethod
    def _literal(value: Any, type_name: str) -> str:
        if isinstance(value, bool):
            return "true" if value else "false"
        if type_name in ("string", "bytes"):
            escaped = str(value).replace("\\", "\\\\").replace('"', '\\"')
            return f'"{escaped}"'
        return str(value)

    def type_of(self, prop: SchemaProperty, nested: list[str], local: UniqueNames, depth: int) -> str:
        """Proto type of a property, appending nested definitions to ``nested``."""
        target = reference_target(prop)

        if prop.items is not None or prop.logical_type == "array":
            if prop.items is None:
                return "repeated string"
            if target and prop.items.properties is None:
                return f"repeated {self.message_names.get(target, 'string')}"
            if prop.items.items is not None or prop.items.logical_type == "array":
                # Nested arrays need a wrapper message
                wrapper = local.take(pascal_case(f"{prop.name}_list"))
                element = self.type_of(prop.items, nested, local, depth)
                nested += self.message_body(wrapper, [f"{element} values = 1;"], depth)
                return f"repeated {wrapper}"
            if prop.items.properties is not None:
                name = local.take(pascal_case(prop.name))
                nested += self.message(name, None, prop.items.properties, depth)
                return f"repeated {name}"
            return f"repeated {self.type_of(prop.items, nested, local, depth)}"

        if prop.properties is not None:
            name = local.take(pascal_case(prop.name))
            nested += self.message(name, None, prop.properties, depth)
            return name

        if target:
            return self.message_names.get(target, "string")

        if prop.enum:
            name = local.take(pascal_case(prop.name))
            nested += self.enum(name, prop.enum, depth)
            return name

        return self.scalar(prop)

    def message_body(self, name: str, field_lines: list[str], depth: int) -> list[str]:
        indent = "  " * depth
        return [f"{indent}message {name} {{"] + [f"{indent}  {line}" for line in field_lines] + [f"{indent}}}"]

    def enum(self, name: str, values: list[Any], depth: int) -> list[str]:
        indent = "  " * depth
        lines = [f"{indent}enum {name} {{"]
        seen = UniqueNames()
        for index, value in enumerate(values):
            lines.append(f"{indent}  {seen.take(enum_value_name(value))} = {index};")
        lines.append(f"{indent}}}")
        return lines

    def scalar(self, prop: SchemaProperty) -> str:
        physical = prop.physical_type or ""
        if self.reuse and (physical in SCALAR_TYPES or physical.startswith("map<")):
            return physical
        if self.reuse and physical.startswith("google.protobuf."):
            if physical == TIMESTAMP_TYPE:
                self.imports.add(TIMESTAMP_IMPORT)
            return physical

        logical = prop.logical_type
        hint = type_hint(prop)

        if logical == "integer":
            return "int32" if hint in INT32_HINTS else "int64"
        if logical == "number":
            return "float" if hint in FLOAT32_HINTS else "double"
        if logical == "boolean":
            return "bool"
        if logical == "timestamp":
            self.imports.add(TIMESTAMP_IMPORT)
            return TIMESTAMP_TYPE
        if logical == "object":
            return "map<string, string>"
        if hint == "bytes":
            return "bytes"
        return "string"
