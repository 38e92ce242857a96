"""ODCL data contract parser.

Reads Data Contract Specification documents (``dataContractSpecification``
with a ``models`` mapping of models to ``fields``) and the older
single-table ODCL layout (``name`` plus a ``columns`` list). Field types are
kept as written; ``$ref`` fields are resolved against ``definitions``.
"""

from pathlib import Path
from typing import Any

import yaml

from contract_kit.errors import SchemaImportError
from contract_kit.schemas.base import (
    FieldSchema,
    SchemaDefinition,
    SchemaDocument,
    SchemaFormat,
)

# Field keys that map onto FieldSchema constraints
CONSTRAINT_KEYS = {
    "minLength": "min_length",
    "maxLength": "max_length",
    "pattern": "pattern",
    "minimum": "minimum",
    "maximum": "maximum",
    "precision": "precision",
    "scale": "scale",
    "minItems": "min_items",
    "maxItems": "max_items",
    "uniqueItems": "unique_items",
}

# Field keys kept as custom properties
CUSTOM_KEYS = ("pii", "classification", "title", "config", "lineage")

OBJECT_TYPES = {"object", "record", "struct"}


def _simple_column(column: dict[str, Any]) -> dict[str, Any]:
    """Rewrite a simple-layout column as a Data Contract field."""
    field: dict[str, Any] = {
        "type": column.get("data_type") or "string",
        "required": not column.get("nullable", True),
        "primaryKey": bool(column.get("primary_key", False)),
    }
    if column.get("description"):
        field["description"] = column["description"]
    foreign_key = column.get("foreign_key")
    if isinstance(foreign_key, dict) and foreign_key.get("table"):
        field["references"] = f"{foreign_key['table']}.{foreign_key.get('column', 'id')}"
    return field


class ODCLParser:
    """Parser for ODCL / Data Contract Specification documents."""

    def __init__(self, contract: dict[str, Any]):
        """Initialize parser with a parsed contract.

        Args:
            contract: Parsed ODCL mapping
        """
        if not isinstance(contract, dict):
            raise SchemaImportError("ODCL document must be a mapping", format=SchemaFormat.ODCL.value)

        if "dataContractSpecification" in contract or "models" in contract:
            models = contract.get("models")
            if not isinstance(models, dict):
                raise SchemaImportError(
                    "Data contract is missing the 'models' mapping",
                    format=SchemaFormat.ODCL.value,
                )
        elif contract.get("name") and isinstance(contract.get("columns"), list):
            columns = contract["columns"]
            models = {
                contract["name"]: {
                    "description": contract.get("description"),
                    "fields": {
                        col["name"]: _simple_column(col)
                        for col in columns
                        if isinstance(col, dict) and col.get("name")
                    },
                },
            }
        else:
            raise SchemaImportError(
                "Not an ODCL document: expected 'dataContractSpecification' with 'models', "
                "or 'name' with 'columns'",
                format=SchemaFormat.ODCL.value,
            )

        self.contract = contract
        self._models: dict[str, Any] = models
        self._definitions: dict[str, Any] = contract.get("definitions") or {}

    @classmethod
    def from_file(cls, path: Path | str) -> "ODCLParser":
        """Load parser from a file.

        Args:
            path: Path to ODCL YAML file

        Returns:
            Initialized parser
        """
        path = Path(path)
        return cls.from_string(path.read_text())

    @classmethod
    def from_string(cls, content: str) -> "ODCLParser":
        try:
            contract = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise SchemaImportError(f"Invalid ODCL YAML: {e}", format=SchemaFormat.ODCL.value) from e
        return cls(contract)

    def list_entities(self) -> list[str]:
        """List model names in document order."""
        return list(self._models.keys())

    def _resolve_ref(self, ref: str, entity: str, seen: tuple[str, ...]) -> tuple[str, dict[str, Any]]:
        """Look up a ``#/definitions/<name>`` reference.

        Returns:
            Tuple of (definition name, definition mapping)
        """
        name = ref.split("/")[-1]
        definition = self._definitions.get(name)
        if not ref.startswith("#/definitions/") or not isinstance(definition, dict):
            raise SchemaImportError(
                f"Unresolved reference '{ref}' in model '{entity}'",
                format=SchemaFormat.ODCL.value,
                entity=entity,
            )
        if name in seen:
            raise SchemaImportError(
                f"Circular reference to definition '{name}' in model '{entity}'",
                format=SchemaFormat.ODCL.value,
                entity=entity,
            )
        return name, definition

    def _parse_field(
        self,
        name: str,
        data: Any,
        entity: str,
        seen: tuple[str, ...] = (),
    ) -> FieldSchema:
        """Parse an ODCL field into FieldSchema.

        Args:
            name: Field name
            data: Field mapping
            entity: Owning model name, for error messages
            seen: Definitions being expanded, for cycle detection

        Returns:
            Parsed FieldSchema
        """
        if not isinstance(data, dict):
            raise SchemaImportError(
                f"Field '{name}' in model '{entity}' must be a mapping",
                format=SchemaFormat.ODCL.value,
                entity=entity,
            )

        reference = None
        if isinstance(data.get("$ref"), str):
            reference, definition = self._resolve_ref(data["$ref"], entity, seen)
            seen = seen + (reference,)
            # Keys on the field win over the definition
            data = {**definition, **{k: v for k, v in data.items() if k != "$ref"}}

        nested = data.get("fields")
        items = data.get("items")
        field_type = str(data.get("type") or ("object" if nested else "array" if items else "string"))

        properties = None
        if isinstance(nested, dict) and (nested or field_type.lower() in OBJECT_TYPES):
            properties = [self._parse_field(n, f, entity, seen) for n, f in nested.items()]

        constraints = {
            attr: data[key] for key, attr in CONSTRAINT_KEYS.items() if data.get(key) is not None
        }

        metadata: dict[str, Any] = {}
        if data.get("references"):
            metadata["references"] = data["references"]
        custom = {key: data[key] for key in CUSTOM_KEYS if data.get(key) is not None}
        if custom:
            metadata["custom_properties"] = custom

        examples = data.get("examples") or []
        required = bool(data.get("required", False))
        primary_key = bool(data.get("primaryKey", data.get("primary", False)))

        return FieldSchema(
            name=name,
            type=field_type,
            format=data.get("format"),
            physical_type=field_type,
            description=data.get("description"),
            required=required or primary_key,
            nullable=not (required or primary_key),
            primary_key=primary_key,
            unique=bool(data.get("unique", False)),
            enum=data.get("enum"),
            properties=properties,
            items=self._parse_field("item", items, entity, seen) if isinstance(items, dict) else None,
            reference=reference,
            default=data.get("default"),
            example=data.get("example", examples[0] if examples else None),
            tags=data.get("tags"),
            metadata=metadata,
            **constraints,
        )

    def _parse_model(self, name: str, model: Any, source_file: str | None) -> SchemaDefinition:
        if not isinstance(model, dict):
            raise SchemaImportError(
                f"Model '{name}' must be a mapping",
                format=SchemaFormat.ODCL.value,
                entity=name,
            )

        fields = [self._parse_field(n, f, name) for n, f in (model.get("fields") or {}).items()]

        # Model-level primaryKey lists composite keys in order
        key_columns = model.get("primaryKey")
        if isinstance(key_columns, str):
            key_columns = [key_columns]
        if isinstance(key_columns, list):
            fields = [
                f.model_copy(update={
                    "primary_key": True,
                    "required": True,
                    "nullable": False,
                    "metadata": {**f.metadata, "primary_key_position": key_columns.index(f.name) + 1},
                })
                if f.name in key_columns else f
                for f in fields
            ]

        return SchemaDefinition(
            name=name,
            description=model.get("description"),
            fields=fields,
            source_format=SchemaFormat.ODCL,
            source_file=source_file,
            source_entity=name,
            tags=model.get("tags"),
            metadata={"physical_type": model["type"]} if model.get("type") else {},
        )

    def parse_entity(self, name: str, source_file: str | None = None) -> SchemaDefinition:
        """Parse a model by name."""
        if name not in self._models:
            available = ", ".join(self._models.keys())
            raise SchemaImportError(
                f"Model '{name}' not found. Available: {available}",
                format=SchemaFormat.ODCL.value,
                entity=name,
            )
        return self._parse_model(name, self._models[name], source_file)

    def parse(self, source_file: str | None = None) -> SchemaDefinition:
        """Parse the first model."""
        if not self._models:
            raise SchemaImportError("Data contract has no models", format=SchemaFormat.ODCL.value)
        name = next(iter(self._models))
        return self._parse_model(name, self._models[name], source_file)

    def parse_document(self, source_file: str | None = None) -> SchemaDocument:
        """Parse all models, in document order."""
        info = self.contract.get("info") or {}
        custom = {
            k: v for k, v in {
                "dataContractSpecification": self.contract.get("dataContractSpecification"),
                "owner": info.get("owner"),
            }.items() if v is not None
        }

        return SchemaDocument(
            source_format=SchemaFormat.ODCL,
            entities=[self._parse_model(n, m, source_file) for n, m in self._models.items()],
            source_file=source_file,
            name=info.get("title") or self.contract.get("name"),
            tags=self.contract.get("tags"),
            metadata={
                "id": self.contract.get("id"),
                "version": info.get("version"),
                "status": info.get("status"),
                "domain": self.contract.get("domain"),
                "description": info.get("description") or self.contract.get("description"),
                "custom_properties": custom,
            },
        )
