"""Helpers shared by the exporters."""

import re
from typing import Any

import yaml

from contract_kit.convert.type_mapping import normalize_type
from contract_kit.models.contract import ContractDocument, SchemaProperty
from contract_kit.schemas.base import SchemaFormat

# Physical types that fit in 32 bits
INT32_HINTS = {
    "int",
    "int4",
    "int32",
    "integer",
    "smallint",
    "tinyint",
    "mediumint",
    "serial",
    "smallserial",
    "sint32",
    "sfixed32",
    "fixed32",
    "google.protobuf.int32value",
}

FLOAT32_HINTS = {"float", "float4", "real", "google.protobuf.floatvalue"}


def dump_yaml(data: Any) -> str:
    """Render YAML keeping key order."""
    return yaml.dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)


def reuses_physical_types(document: ContractDocument, format: SchemaFormat) -> bool:
    """Whether the document came from ``format``, so stored physical types apply."""
    return document.source_format == format.value


def type_hint(prop: SchemaProperty) -> str:
    """Normalized physical type of a property, or "" when it has none."""
    return normalize_type(prop.physical_type) if prop.physical_type else ""


def reference_target(prop: SchemaProperty) -> str | None:
    """Name of the schema object a lifted property refers to."""
    for relationship in prop.relationships:
        if relationship.type == "reference":
            return relationship.to
    return None


def referenced_objects(document: ContractDocument) -> set[str]:
    """Names of schema objects that some property refers to by name."""
    names = set()
    for obj in document.schema_objects:
        for prop in obj.iter_properties():
            target = reference_target(prop)
            if target:
                names.add(target)
    return names


def sanitize_identifier(name: str) -> str:
    """Replace characters that are not valid in identifiers with ``_``."""
    sanitized = re.sub(r"\W", "_", name)
    if not sanitized or sanitized[0].isdigit():
        sanitized = f"_{sanitized}"
    return sanitized


def pascal_case(name: str) -> str:
    """``shipping_address`` -> ``ShippingAddress``."""
    parts = [p for p in re.split(r"[^A-Za-z0-9]+", name) if p]
    result = "".join(p[0].upper() + p[1:] for p in parts)
    return sanitize_identifier(result or name)


class UniqueNames:
    """Hands out names that are unique within one output document."""

    def __init__(self):
        self._used: set[str] = set()

    def reserve(self, name: str) -> str:
        self._used.add(name)
        return name

    def take(self, name: str) -> str:
        candidate = name
        counter = 1
        while candidate in self._used:
            counter += 1
            candidate = f"{name}{counter}"
        self._used.add(candidate)
        return candidate

    def __contains__(self, name: str) -> bool:
        return name in self._used
