"""Protobuf schema parser.

Parses Protocol Buffer (.proto) files. Top-level messages are entities;
nested message and enum definitions are named types that fields can refer
to. A field of message type becomes a nested object field, expanded until a
message would be entered a second time on the same path.
"""

import re
from pathlib import Path
from typing import Any

from contract_kit.errors import SchemaImportError
from contract_kit.schemas.base import (
    FieldSchema,
    SchemaDefinition,
    SchemaDocument,
    SchemaFormat,
)

SCALAR_TYPES = {
    "double",
    "float",
    "int32",
    "int64",
    "uint32",
    "uint64",
    "sint32",
    "sint64",
    "fixed32",
    "fixed64",
    "sfixed32",
    "sfixed64",
    "bool",
    "string",
    "bytes",
}

BLOCK_PATTERN = re.compile(r"(message|enum|oneof|service|extend)\s+([\w.]+)\s*\{")

FIELD_PATTERN = re.compile(
    r"^(?:(repeated|optional|required)\s+)?"  # Optional label
    r"(map\s*<\s*[\w.]+\s*,\s*[\w.]+\s*>|[\w.]+)\s+"  # Type (including map)
    r"(\w+)\s*=\s*(\d+)"  # Name and field number
    r"\s*(?:\[(.*)\])?$",  # Optional field options
    re.DOTALL,
)


class ProtobufParser:
    """Parser for Protocol Buffer schemas."""

    def __init__(self, proto_content: str):
        """Initialize parser with .proto content.

        Args:
            proto_content: Protocol buffer content as string
        """
        self.proto_content = proto_content
        content = re.sub(r"/\*.*?\*/", "", proto_content, flags=re.DOTALL)
        content = re.sub(r"//[^\n]*", "", content)

        syntax_match = re.search(r"syntax\s*=\s*[\"'](\w+)[\"']\s*;", content)
        self._syntax = syntax_match.group(1) if syntax_match else "proto2"
        package_match = re.search(r"\bpackage\s+([\w.]+)\s*;", content)
        self._package = package_match.group(1) if package_match else None

        # Qualified name (Outer.Inner) -> definition
        self._messages: dict[str, dict[str, Any]] = {}
        self._enums: dict[str, list[str]] = {}
        self._top_level: list[str] = []

        self._parse_block(content, scope="")

    @classmethod
    def from_file(cls, path: Path | str) -> "ProtobufParser":
        """Load parser from a file.

        Args:
            path: Path to .proto file

        Returns:
            Initialized parser
        """
        path = Path(path)
        content = path.read_text()
        return cls(content)

    @classmethod
    def from_string(cls, content: str) -> "ProtobufParser":
        """Load parser from a string.

        Args:
            content: Protobuf schema as string

        Returns:
            Initialized parser
        """
        return cls(content)

    @property
    def syntax(self) -> str:
        return self._syntax

    def _find_block_end(self, content: str, start_pos: int, name: str) -> int:
        depth = 1
        pos = start_pos
        while depth > 0 and pos < len(content):
            if content[pos] == "{":
                depth += 1
            elif content[pos] == "}":
                depth -= 1
            pos += 1

        if depth != 0:
            raise SchemaImportError(
                f"Unbalanced braces in definition of '{name}'",
                format=SchemaFormat.PROTOBUF.value,
                entity=name,
            )
        return pos

    def _parse_block(self, content: str, scope: str) -> list[dict[str, Any]]:
        """Parse the statements of a file or message body.

        Args:
            content: Comment-free text of the block
            scope: Qualified name of the enclosing message ("" at file level)

        Returns:
            Raw field definitions found directly in the block
        """
        fields: list[dict[str, Any]] = []
        pos = 0

        while pos < len(content):
            while pos < len(content) and (content[pos].isspace() or content[pos] == ";"):
                pos += 1
            if pos >= len(content):
                break

            block_match = BLOCK_PATTERN.match(content, pos)
            if block_match:
                kind, name = block_match.group(1), block_match.group(2)
                body_start = block_match.end()
                body_end = self._find_block_end(content, body_start, name)
                body = content[body_start:body_end - 1]
                qualified = f"{scope}.{name}" if scope else name

                if kind == "message":
                    self._messages[qualified] = {"name": name, "fields": []}
                    if not scope:
                        self._top_level.append(qualified)
                    self._messages[qualified]["fields"] = self._parse_block(body, qualified)
                elif kind == "enum":
                    self._enums[qualified] = re.findall(r"(\w+)\s*=\s*-?\d+", body)
                elif kind == "oneof":
                    # oneof members are plain optional fields of the message
                    for field in self._parse_block(body, scope):
                        field["label"] = "optional"
                        field["oneof"] = name
                        fields.append(field)
                # service/extend blocks carry no table schema

                pos = body_end
                continue

            end = content.find(";", pos)
            if end == -1:
                raise SchemaImportError(
                    f"Unterminated statement: '{content[pos:pos + 40].strip()}'",
                    format=SchemaFormat.PROTOBUF.value,
                    entity=scope or None,
                )
            statement = " ".join(content[pos:end].split())
            pos = end + 1

            if not scope or re.match(r"(option|reserved|extensions)\b", statement):
                continue

            field_match = FIELD_PATTERN.match(statement)
            if not field_match:
                raise SchemaImportError(
                    f"Cannot parse field definition '{statement}' in message '{scope}'",
                    format=SchemaFormat.PROTOBUF.value,
                    entity=scope,
                )

            fields.append({
                "label": field_match.group(1),
                "type": field_match.group(2).replace(" ", ""),
                "name": field_match.group(3),
                "number": int(field_match.group(4)),
                "options": field_match.group(5),
            })

        return fields

    def _resolve(self, type_name: str, scope: str) -> tuple[str, str] | None:
        """Resolve a type name against nested scopes.

        Returns:
            ``("message" | "enum", qualified_name)`` or None
        """
        name = type_name.lstrip(".")
        if self._package and name.startswith(self._package + "."):
            name = name[len(self._package) + 1:]

        parts = scope.split(".") if scope else []
        for depth in range(len(parts), -1, -1):
            candidate = ".".join(parts[:depth] + [name])
            if candidate in self._messages:
                return ("message", candidate)
            if candidate in self._enums:
                return ("enum", candidate)
        return None

    def list_messages(self) -> list[str]:
        """List all message names found in the proto file, nested ones qualified.

        Returns:
            List of message names
        """
        return list(self._messages.keys())

    def list_enums(self) -> list[str]:
        """List all enum names found in the proto file.

        Returns:
            List of enum names
        """
        return list(self._enums.keys())

    def list_entities(self) -> list[str]:
        """List top-level messages, which are the document's entities."""
        return list(self._top_level)

    def _build_field(self, raw: dict[str, Any], scope: str, stack: tuple[str, ...]) -> FieldSchema:
        type_str = raw["type"]
        label = raw["label"]
        metadata: dict[str, Any] = {"field_number": raw["number"]}
        if raw.get("oneof"):
            metadata["oneof"] = raw["oneof"]
        options = raw.get("options") or ""
        if re.search(r"deprecated\s*=\s*true", options, re.IGNORECASE):
            metadata["deprecated"] = True
        default_match = re.search(r"\bdefault\s*=\s*(\"[^\"]*\"|[\w.\-]+)", options)

        element = self._build_type(raw["name"], type_str, scope, stack)

        if label == "repeated":
            return FieldSchema(
                name=raw["name"],
                type="array",
                physical_type=f"repeated {type_str}",
                items=element.model_copy(update={"name": "item"}),
                required=False,
                nullable=True,
                metadata=metadata,
            )

        required = label == "required"
        return element.model_copy(update={
            "required": required,
            "nullable": not required,
            "default": default_match.group(1).strip('"') if default_match else None,
            "metadata": {**element.metadata, **metadata, **({"label": label} if label else {})},
        })

    def _build_type(self, name: str, type_str: str, scope: str, stack: tuple[str, ...]) -> FieldSchema:
        map_match = re.match(r"map<([\w.]+),([\w.]+)>", type_str)
        if map_match:
            return FieldSchema(
                name=name,
                type="map",
                physical_type=f"map<{map_match.group(1)}, {map_match.group(2)}>",
                metadata={"key_type": map_match.group(1), "value_type": map_match.group(2)},
            )

        if type_str in SCALAR_TYPES:
            return FieldSchema(name=name, type=type_str, physical_type=type_str)

        resolved = self._resolve(type_str, scope)
        if resolved is None:
            # Imported or well-known type (google.protobuf.Timestamp, ...)
            return FieldSchema(name=name, type=type_str, physical_type=type_str)

        kind, qualified = resolved
        short_name = qualified.rsplit(".", 1)[-1]

        if kind == "enum":
            return FieldSchema(
                name=name,
                type="enum",
                physical_type=type_str,
                enum=self._enums[qualified],
                reference=short_name,
            )

        if qualified in stack:
            # Recursive reference: keep the name, stop expanding
            return FieldSchema(name=name, type="message", physical_type=type_str, reference=short_name)

        nested = [
            self._build_field(raw, qualified, stack + (qualified,))
            for raw in self._messages[qualified]["fields"]
        ]
        return FieldSchema(
            name=name,
            type="message",
            physical_type=type_str,
            properties=nested,
            reference=short_name,
        )

    def parse_message(
        self,
        message_name: str,
        source_file: str | None = None,
    ) -> SchemaDefinition:
        """Parse a specific message by name.

        Args:
            message_name: Name of the message to parse (``Outer.Inner`` for nested)
            source_file: Optional source file path

        Returns:
            Parsed SchemaDefinition
        """
        if message_name not in self._messages:
            available = ", ".join(self._messages.keys())
            raise SchemaImportError(
                f"Message '{message_name}' not found. Available: {available}",
                format=SchemaFormat.PROTOBUF.value,
                entity=message_name,
            )

        message_info = self._messages[message_name]
        fields = [
            self._build_field(raw, message_name, (message_name,))
            for raw in message_info["fields"]
        ]

        full_name = f"{self._package}.{message_name}" if self._package else message_name

        return SchemaDefinition(
            name=message_info["name"],
            fields=fields,
            source_format=SchemaFormat.PROTOBUF,
            source_file=source_file,
            source_entity=full_name,
            metadata={
                "package": self._package,
                "syntax": self._syntax,
            },
        )

    def parse_entity(self, name: str, source_file: str | None = None) -> SchemaDefinition:
        return self.parse_message(name, source_file)

    def parse(self, source_file: str | None = None) -> SchemaDefinition:
        """Parse the first message found in the proto file.

        Args:
            source_file: Optional source file path

        Returns:
            Parsed SchemaDefinition
        """
        if not self._top_level:
            raise SchemaImportError("No messages found in proto file", format=SchemaFormat.PROTOBUF.value)

        return self.parse_message(self._top_level[0], source_file)

    def parse_document(self, source_file: str | None = None) -> SchemaDocument:
        """Parse all top-level messages, in declaration order."""
        return SchemaDocument(
            source_format=SchemaFormat.PROTOBUF,
            entities=[self.parse_message(name, source_file) for name in self._top_level],
            source_file=source_file,
            metadata={"package": self._package, "syntax": self._syntax},
        )
