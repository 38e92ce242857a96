"""JSON Schema exporter."""

import json
from typing import Any

from contract_kit.export.base import reference_target, reuses_physical_types
from contract_kit.models.contract import ContractDocument, SchemaObject, SchemaProperty
from contract_kit.models.tag import tags_to_strings
from contract_kit.schemas.base import SchemaFormat

JSON_SCHEMA_DRAFT = "https://json-schema.org/draft/2020-12/schema"

# logical type -> (JSON type, format)
LOGICAL_JSON_TYPES = {
    "string": ("string", None),
    "integer": ("integer", None),
    "number": ("number", None),
    "boolean": ("boolean", None),
    "date": ("string", "date"),
    "timestamp": ("string", "date-time"),
    "time": ("string", "time"),
    "object": ("object", None),
    "array": ("array", None),
}

# logicalTypeOptions keys that are JSON Schema keywords
CONSTRAINT_KEYS = (
    "minLength",
    "maxLength",
    "pattern",
    "minimum",
    "maximum",
    "minItems",
    "maxItems",
    "uniqueItems",
)


class SchemaBuilder:
    """Builds JSON-Schema-style property trees from canonical objects.

    Shared by the JSON Schema and OpenAPI exporters; they differ in where
    named schemas live (``ref_prefix``) and in how examples are spelled.
    """

    def __init__(self, ref_prefix: str, keep_physical_types: bool = False, single_example: bool = False):
        self.ref_prefix = ref_prefix
        self.keep_physical_types = keep_physical_types
        self.single_example = single_example

    def object_schema(self, obj: SchemaObject) -> dict[str, Any]:
        schema = self._properties_schema(obj.properties)
        if obj.description:
            schema = {"description": obj.description, **schema}
        if obj.tags:
            schema["tags"] = tags_to_strings(obj.tags)
        return schema

    def _properties_schema(self, properties: list[SchemaProperty]) -> dict[str, Any]:
        schema: dict[str, Any] = {
            "type": "object",
            "properties": {prop.name: self.property_schema(prop) for prop in properties},
        }
        required = [prop.name for prop in properties if prop.required]
        if required:
            schema["required"] = required
        return schema

    def property_schema(self, prop: SchemaProperty) -> dict[str, Any]:
        """Schema of one property, including its nested properties or items."""
        target = reference_target(prop)

        if target and prop.items is None:
            schema: dict[str, Any] = {"$ref": f"{self.ref_prefix}{target}"}
            if prop.description:
                schema["description"] = prop.description
            return schema

        if prop.items is not None:
            schema = {"type": "array"}
            if target and prop.items.properties is None:
                schema["items"] = {"$ref": f"{self.ref_prefix}{target}"}
            else:
                schema["items"] = self.property_schema(prop.items)
        elif prop.properties is not None:
            schema = self._properties_schema(prop.properties)
        else:
            json_type, json_format = LOGICAL_JSON_TYPES.get(prop.logical_type, ("string", None))
            schema = {"type": json_type}
            option_format = prop.logical_type_options.get("format")
            if json_format:
                schema["format"] = json_format
            elif option_format and prop.logical_type in ("string", "integer", "number"):
                schema["format"] = option_format

        if (
            self.keep_physical_types
            and prop.physical_type
            and prop.physical_type != schema.get("type")
        ):
            schema["x-physical-type"] = prop.physical_type

        for key in CONSTRAINT_KEYS:
            if key in prop.logical_type_options:
                schema[key] = prop.logical_type_options[key]

        if prop.description:
            schema["description"] = prop.description
        if prop.enum:
            schema["enum"] = list(prop.enum)
        if prop.default is not None:
            schema["default"] = prop.default
        if prop.examples:
            if self.single_example:
                schema["example"] = prop.examples[0]
            else:
                schema["examples"] = list(prop.examples)
        if prop.tags:
            schema["tags"] = tags_to_strings(prop.tags)
        return schema


def root_object(document: ContractDocument) -> SchemaObject | None:
    """First schema object that was not lifted out of another one."""
    for obj in document.schema_objects:
        if "liftedFrom" not in obj.custom_properties:
            return obj
    return document.schema_objects[0] if document.schema_objects else None


class JsonSchemaExporter:
    """Renders a document as a draft 2020-12 JSON Schema.

    The first object is the root schema; the others go under ``$defs``.
    """

    format = SchemaFormat.JSON_SCHEMA

    def to_schema(self, document: ContractDocument) -> dict[str, Any]:
        builder = SchemaBuilder(
            "#/$defs/",
            keep_physical_types=reuses_physical_types(document, SchemaFormat.JSON_SCHEMA),
        )
        schema: dict[str, Any] = {"$schema": JSON_SCHEMA_DRAFT}

        root = root_object(document)
        if root is None:
            schema["type"] = "object"
            return schema

        schema["title"] = root.name
        schema.update(builder.object_schema(root))

        definitions = {
            obj.name: builder.object_schema(obj)
            for obj in document.schema_objects
            if obj is not root
        }
        if definitions:
            schema["$defs"] = definitions
        return schema

    def render(self, document: ContractDocument) -> str:
        return json.dumps(self.to_schema(document), indent=2) + "\n"
