"""ODCS YAML exporter."""

from contract_kit.export.base import dump_yaml
from contract_kit.models.contract import ContractDocument
from contract_kit.schemas.base import SchemaFormat


class ODCSExporter:
    """Renders the canonical document as ODCS v3.1.0 YAML."""

    format = SchemaFormat.ODCS

    def render(self, document: ContractDocument) -> str:
        return dump_yaml(document.to_dict())
