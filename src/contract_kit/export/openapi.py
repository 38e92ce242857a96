"""OpenAPI exporter."""

from typing import Any

from contract_kit.export.base import dump_yaml, reuses_physical_types
from contract_kit.export.jsonschema import SchemaBuilder
from contract_kit.models.contract import ContractDocument
from contract_kit.schemas.base import SchemaFormat

OPENAPI_VERSION = "3.0.3"


class OpenAPIExporter:
    """Renders every schema object under ``components.schemas`` of an
    OpenAPI 3.0.3 document with no paths."""

    format = SchemaFormat.OPENAPI

    def to_spec(self, document: ContractDocument) -> dict[str, Any]:
        builder = SchemaBuilder(
            "#/components/schemas/",
            keep_physical_types=reuses_physical_types(document, SchemaFormat.OPENAPI),
            single_example=True,
        )

        info: dict[str, Any] = {
            "title": document.name or "Data Contract",
            "version": document.version,
        }
        if document.description:
            info["description"] = document.description

        return {
            "openapi": OPENAPI_VERSION,
            "info": info,
            "paths": {},
            "components": {
                "schemas": {obj.name: builder.object_schema(obj) for obj in document.schema_objects},
            },
        }

    def render(self, document: ContractDocument) -> str:
        return dump_yaml(self.to_spec(document))
