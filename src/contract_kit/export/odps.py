"""ODPS YAML exporter."""

from contract_kit.errors import ExportError
from contract_kit.export.base import dump_yaml
from contract_kit.models.contract import ContractDocument
from contract_kit.models.odps import ODPSDataProduct, ODPSOutputPort, ODPSStatus
from contract_kit.schemas.base import SchemaFormat


class ODPSExporter:
    """Renders an ODPS data product as YAML.

    A contract is wrapped in a data product with one output port that
    publishes it.
    """

    format = SchemaFormat.ODPS

    def to_product(self, contract: ContractDocument) -> ODPSDataProduct:
        """Wrap a contract in a data product."""
        try:
            status = ODPSStatus(contract.status)
        except ValueError:
            status = ODPSStatus.DRAFT

        return ODPSDataProduct(
            id=f"{contract.id}-product" if contract.id else "data-product",
            name=contract.name,
            version=contract.version,
            status=status,
            domain=contract.domain,
            tags=contract.tags,
            output_ports=[
                ODPSOutputPort(
                    name=contract.name or "default",
                    version=contract.version,
                    contract_id=contract.id,
                )
            ],
        )

    def render(self, document: ODPSDataProduct | ContractDocument) -> str:
        if isinstance(document, ContractDocument):
            document = self.to_product(document)
        if not isinstance(document, ODPSDataProduct):
            raise ExportError(
                f"ODPS export needs a data product or contract, got {type(document).__name__}"
            )
        return dump_yaml(document.to_dict())
