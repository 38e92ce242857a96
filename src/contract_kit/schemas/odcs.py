"""ODCS data contract parser.

Parses Open Data Contract Standard v3.x YAML (or JSON) documents, either
into the generic :class:`SchemaDocument` consumed by the converter or
directly into a :class:`ContractDocument`.
"""

from pathlib import Path
from typing import Any

import yaml

from contract_kit.errors import SchemaImportError
from contract_kit.models.contract import (
    ContractDocument,
    Relationship,
    SchemaObject,
    SchemaProperty,
    enum_from_quality_rule,
)
from contract_kit.schemas.base import (
    FieldSchema,
    SchemaDefinition,
    SchemaDocument,
    SchemaFormat,
)

# logicalTypeOptions keys that map onto FieldSchema constraints
CONSTRAINT_KEYS = {
    "minLength": "min_length",
    "maxLength": "max_length",
    "pattern": "pattern",
    "minimum": "minimum",
    "maximum": "maximum",
    "minItems": "min_items",
    "maxItems": "max_items",
    "uniqueItems": "unique_items",
    "precision": "precision",
    "scale": "scale",
}


def custom_properties_to_dict(value: Any) -> dict[str, Any]:
    """Normalize ``customProperties`` (list of property/value pairs or a mapping)."""
    if not value:
        return {}
    if isinstance(value, dict):
        return dict(value)
    result = {}
    for item in value:
        if isinstance(item, dict) and "property" in item:
            result[item["property"]] = item.get("value")
    return result


def _split_quality(rules: Any) -> tuple[list[Any] | None, list[dict[str, Any]]]:
    """Separate enum-carrying quality rules from the others."""
    enum_values = None
    others = []
    for rule in rules or []:
        values = enum_from_quality_rule(rule)
        if values is not None and enum_values is None:
            enum_values = values
        else:
            others.append(rule)
    return enum_values, others


def _description(value: Any) -> str | None:
    if isinstance(value, dict):
        return value.get("purpose") or value.get("usage")
    return value


class ODCSParser:
    """Parser for ODCS v3.x data contracts."""

    def __init__(self, contract: dict[str, Any]):
        """Initialize parser with a parsed contract.

        Args:
            contract: Parsed ODCS mapping
        """
        if not isinstance(contract, dict):
            raise SchemaImportError("ODCS document must be a mapping", format=SchemaFormat.ODCS.value)
        if "dataContractSpecification" in contract:
            raise SchemaImportError(
                "ODCL (dataContractSpecification) documents are read with the 'odcl' format",
                format=SchemaFormat.ODCS.value,
            )
        if contract.get("kind", "DataContract") != "DataContract":
            raise SchemaImportError(
                f"Expected kind 'DataContract', got '{contract.get('kind')}'",
                format=SchemaFormat.ODCS.value,
            )

        schema = contract.get("schema") or []
        if not isinstance(schema, list):
            raise SchemaImportError("'schema' must be a list of objects", format=SchemaFormat.ODCS.value)

        self.contract = contract
        self._objects = schema

    @classmethod
    def from_file(cls, path: Path | str) -> "ODCSParser":
        """Load parser from a file.

        Args:
            path: Path to ODCS YAML file

        Returns:
            Initialized parser
        """
        path = Path(path)
        return cls.from_string(path.read_text())

    @classmethod
    def from_string(cls, content: str) -> "ODCSParser":
        """Load parser from a YAML (or JSON) string.

        Args:
            content: ODCS document

        Returns:
            Initialized parser
        """
        try:
            contract = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise SchemaImportError(f"Invalid ODCS YAML: {e}", format=SchemaFormat.ODCS.value) from e
        return cls(contract)

    def list_entities(self) -> list[str]:
        """List schema object names.

        Returns:
            List of object names
        """
        return [obj.get("name", "") for obj in self._objects]

    def _find_object(self, name: str) -> dict[str, Any]:
        for obj in self._objects:
            if obj.get("name") == name:
                return obj
        available = ", ".join(self.list_entities())
        raise SchemaImportError(
            f"Schema object '{name}' not found. Available: {available}",
            format=SchemaFormat.ODCS.value,
            entity=name,
        )

    def _parse_field(self, prop: dict[str, Any], entity: str) -> FieldSchema:
        """Parse an ODCS property into FieldSchema.

        Args:
            prop: ODCS property mapping
            entity: Owning schema object name, for error messages

        Returns:
            Parsed FieldSchema
        """
        if not isinstance(prop, dict) or not prop.get("name"):
            raise SchemaImportError(
                f"Property without a name in schema object '{entity}'",
                format=SchemaFormat.ODCS.value,
                entity=entity,
            )

        nested = prop.get("properties")
        items = prop.get("items")

        logical_type = prop.get("logicalType")
        if not logical_type:
            logical_type = "object" if nested else "array" if items else "string"

        options = prop.get("logicalTypeOptions") or {}
        constraints = {
            CONSTRAINT_KEYS[k]: v for k, v in options.items() if k in CONSTRAINT_KEYS
        }
        enum_values, quality = _split_quality(prop.get("quality"))
        custom = custom_properties_to_dict(prop.get("customProperties"))

        metadata: dict[str, Any] = {}
        if prop.get("physicalName"):
            metadata["physical_name"] = prop["physicalName"]
        if prop.get("primaryKeyPosition") is not None:
            metadata["primary_key_position"] = prop["primaryKeyPosition"]
        if prop.get("relationships"):
            metadata["relationships"] = prop["relationships"]
        if quality:
            metadata["quality"] = quality
        if custom:
            metadata["custom_properties"] = custom

        examples = prop.get("examples") or []

        return FieldSchema(
            name=prop["name"],
            type=logical_type,
            format=options.get("format"),
            physical_type=prop.get("physicalType"),
            description=prop.get("description"),
            required=bool(prop.get("required", False)),
            nullable=not prop.get("required", False),
            primary_key=bool(prop.get("primaryKey", False)),
            unique=bool(prop.get("unique", False)),
            enum=prop.get("enum") or enum_values,
            properties=[self._parse_field(p, entity) for p in nested] if nested is not None else None,
            items=self._parse_field({"name": "item", **items}, entity) if items else None,
            default=prop.get("defaultValue"),
            example=examples[0] if examples else None,
            tags=prop.get("tags"),
            metadata=metadata,
            **constraints,
        )

    def _parse_object(self, obj: dict[str, Any], source_file: str | None) -> SchemaDefinition:
        name = obj.get("name")
        if not name:
            raise SchemaImportError("Schema object without a name", format=SchemaFormat.ODCS.value)

        _, quality = _split_quality(obj.get("quality"))
        custom = custom_properties_to_dict(obj.get("customProperties"))

        return SchemaDefinition(
            name=name,
            description=obj.get("description"),
            fields=[self._parse_field(p, name) for p in obj.get("properties") or []],
            source_format=SchemaFormat.ODCS,
            source_file=source_file,
            source_entity=obj.get("physicalName") or name,
            tags=obj.get("tags"),
            metadata={
                k: v for k, v in {
                    "physical_name": obj.get("physicalName"),
                    "physical_type": obj.get("physicalType"),
                    "quality": quality,
                    "custom_properties": custom,
                }.items() if v
            },
        )

    def parse_entity(self, name: str, source_file: str | None = None) -> SchemaDefinition:
        """Parse a schema object by name."""
        return self._parse_object(self._find_object(name), source_file)

    def parse(self, source_file: str | None = None) -> SchemaDefinition:
        """Parse the first schema object."""
        if not self._objects:
            raise SchemaImportError("Contract has no schema objects", format=SchemaFormat.ODCS.value)
        return self._parse_object(self._objects[0], source_file)

    def _contract_tags(self) -> list[Any]:
        tags = list(self.contract.get("tags") or [])
        custom_tags = custom_properties_to_dict(self.contract.get("customProperties")).get("tags")
        if isinstance(custom_tags, list):
            tags.extend(t for t in custom_tags if t not in tags)
        return tags

    def parse_document(self, source_file: str | None = None) -> SchemaDocument:
        """Parse all schema objects, in document order."""
        custom = custom_properties_to_dict(self.contract.get("customProperties"))
        custom.pop("tags", None)

        return SchemaDocument(
            source_format=SchemaFormat.ODCS,
            entities=[self._parse_object(obj, source_file) for obj in self._objects],
            source_file=source_file,
            name=self.contract.get("name"),
            tags=self._contract_tags(),
            metadata={
                "id": self.contract.get("id"),
                "version": self.contract.get("version"),
                "status": self.contract.get("status"),
                "domain": self.contract.get("domain"),
                "data_product": self.contract.get("dataProduct"),
                "description": _description(self.contract.get("description")),
                "custom_properties": custom,
            },
        )

    def _property_from_dict(self, prop: dict[str, Any]) -> SchemaProperty:
        items = prop.get("items")
        nested = prop.get("properties")
        enum_values, quality = _split_quality(prop.get("quality"))
        examples = prop.get("examples") or []

        return SchemaProperty(
            name=prop["name"],
            logical_type=prop.get("logicalType") or ("object" if nested else "array" if items else "string"),
            physical_type=prop.get("physicalType"),
            physical_name=prop.get("physicalName"),
            description=prop.get("description"),
            required=bool(prop.get("required", False)),
            primary_key=bool(prop.get("primaryKey", False)),
            primary_key_position=prop.get("primaryKeyPosition"),
            unique=bool(prop.get("unique", False)),
            enum=prop.get("enum") or enum_values,
            logical_type_options=dict(prop.get("logicalTypeOptions") or {}),
            default=prop.get("defaultValue"),
            examples=examples if isinstance(examples, list) else [examples],
            tags=prop.get("tags"),
            properties=[self._property_from_dict(p) for p in nested] if nested is not None else None,
            items=self._property_from_dict({"name": "item", **items}) if items else None,
            relationships=[
                Relationship(type=r.get("type", "foreignKey"), to=r["to"])
                for r in prop.get("relationships") or [] if isinstance(r, dict) and r.get("to")
            ],
            quality=quality,
            custom_properties=custom_properties_to_dict(prop.get("customProperties")),
        )

    def parse_contract(self) -> ContractDocument:
        """Parse the document straight into a ContractDocument."""
        custom = custom_properties_to_dict(self.contract.get("customProperties"))
        custom.pop("tags", None)

        objects = []
        for obj in self._objects:
            if not obj.get("name"):
                raise SchemaImportError("Schema object without a name", format=SchemaFormat.ODCS.value)
            for prop in obj.get("properties") or []:
                if not isinstance(prop, dict) or not prop.get("name"):
                    raise SchemaImportError(
                        f"Property without a name in schema object '{obj['name']}'",
                        format=SchemaFormat.ODCS.value,
                        entity=obj["name"],
                    )
            objects.append(SchemaObject(
                name=obj["name"],
                physical_name=obj.get("physicalName"),
                logical_type=obj.get("logicalType", "object"),
                physical_type=obj.get("physicalType", "table"),
                description=obj.get("description"),
                tags=obj.get("tags"),
                properties=[self._property_from_dict(p) for p in obj.get("properties") or []],
                quality=_split_quality(obj.get("quality"))[1],
                custom_properties=custom_properties_to_dict(obj.get("customProperties")),
            ))

        return ContractDocument(
            api_version=self.contract.get("apiVersion", "v3.1.0"),
            kind=self.contract.get("kind", "DataContract"),
            id=self.contract.get("id"),
            name=self.contract.get("name"),
            version=str(self.contract.get("version", "1.0.0")),
            status=self.contract.get("status", "draft"),
            domain=self.contract.get("domain"),
            data_product=self.contract.get("dataProduct"),
            description=_description(self.contract.get("description")),
            tags=self._contract_tags(),
            schema_objects=objects,
            custom_properties=custom,
        )


def load_contract(path: Path | str) -> ContractDocument:
    """Load an ODCS file as a ContractDocument.

    Args:
        path: Path to ODCS YAML file

    Returns:
        Parsed contract
    """
    return ODCSParser.from_file(path).parse_contract()
