"""JSON Schema for the subset of ODCS v3.1.0 that contract-kit reads and writes."""

from contract_kit.models.contract import LOGICAL_TYPES

ODCS_SCHEMA = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "ODCS data contract (v3.1.0 subset)",
    "type": "object",
    "required": ["apiVersion", "kind", "id", "version", "status"],
    "properties": {
        "apiVersion": {"type": "string", "pattern": "^v3\\.[0-9]+\\.[0-9]+$"},
        "kind": {"const": "DataContract"},
        "id": {"type": "string", "minLength": 1},
        "name": {"type": "string"},
        "version": {"type": "string", "minLength": 1},
        "status": {"type": "string", "minLength": 1},
        "domain": {"type": "string"},
        "dataProduct": {"type": "string"},
        "description": {
            "type": "object",
            "properties": {
                "purpose": {"type": "string"},
                "usage": {"type": "string"},
                "limitations": {"type": "string"},
            },
        },
        "tags": {"$ref": "#/$defs/tags"},
        "schema": {"type": "array", "items": {"$ref": "#/$defs/schemaObject"}},
        "customProperties": {"$ref": "#/$defs/customProperties"},
    },
    "$defs": {
        "tags": {"type": "array", "items": {"type": "string"}},
        "customProperties": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["property", "value"],
                "properties": {"property": {"type": "string"}},
            },
        },
        "quality": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "type": {"enum": ["text", "library", "sql", "custom"]},
                    "query": {"type": "string"},
                },
            },
        },
        "relationship": {
            "type": "object",
            "required": ["to"],
            "properties": {
                "type": {"type": "string"},
                "to": {"type": "string"},
            },
        },
        "schemaObject": {
            "type": "object",
            "required": ["name"],
            "properties": {
                "name": {"type": "string", "minLength": 1},
                "physicalName": {"type": "string"},
                "logicalType": {"const": "object"},
                "physicalType": {"type": "string"},
                "description": {"type": "string"},
                "tags": {"$ref": "#/$defs/tags"},
                "properties": {"type": "array", "items": {"$ref": "#/$defs/namedProperty"}},
                "quality": {"$ref": "#/$defs/quality"},
                "customProperties": {"$ref": "#/$defs/customProperties"},
            },
        },
        "namedProperty": {
            "allOf": [{"$ref": "#/$defs/property"}],
            "required": ["name"],
        },
        "property": {
            "type": "object",
            "properties": {
                "name": {"type": "string", "minLength": 1},
                "logicalType": {"enum": list(LOGICAL_TYPES)},
                "physicalType": {"type": "string"},
                "physicalName": {"type": "string"},
                "description": {"type": "string"},
                "required": {"type": "boolean"},
                "primaryKey": {"type": "boolean"},
                "primaryKeyPosition": {"type": "integer", "minimum": 1},
                "unique": {"type": "boolean"},
                "logicalTypeOptions": {"type": "object"},
                "examples": {"type": "array"},
                "tags": {"$ref": "#/$defs/tags"},
                "properties": {"type": "array", "items": {"$ref": "#/$defs/namedProperty"}},
                "items": {"$ref": "#/$defs/property"},
                "relationships": {"type": "array", "items": {"$ref": "#/$defs/relationship"}},
                "quality": {"$ref": "#/$defs/quality"},
                "customProperties": {"$ref": "#/$defs/customProperties"},
            },
        },
    },
}
