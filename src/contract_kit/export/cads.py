"""CADS YAML exporter."""

from contract_kit.errors import ExportError
from contract_kit.export.base import dump_yaml
from contract_kit.models.cads import CADSAsset
from contract_kit.schemas.base import SchemaFormat


class CADSExporter:
    """Renders a CADS asset as YAML.

    Data contracts describe data, not compute, so a contract cannot be
    rendered as a CADS asset.
    """

    format = SchemaFormat.CADS

    def render(self, document: CADSAsset) -> str:
        if not isinstance(document, CADSAsset):
            raise ExportError(
                f"CADS export needs a CADSAsset, got {type(document).__name__}"
            )
        return dump_yaml(document.to_dict())
