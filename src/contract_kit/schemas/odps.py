"""ODPS data product parser.

Reads ODPS YAML into an :class:`ODPSDataProduct`. A data product only
refers to contracts through its ports, so there is no generic schema
document for it.
"""

from pathlib import Path

import yaml
from pydantic import ValidationError

from contract_kit.errors import SchemaImportError
from contract_kit.models.odps import ODPSDataProduct
from contract_kit.schemas.base import SchemaFormat


class ODPSParser:
    """Parser for ODPS data product documents."""

    def __init__(self, data: dict):
        if not isinstance(data, dict):
            raise SchemaImportError("ODPS document must be a mapping", format=SchemaFormat.ODPS.value)
        if data.get("kind", "DataProduct") != "DataProduct":
            raise SchemaImportError(
                f"Expected kind 'DataProduct', got '{data.get('kind')}'",
                format=SchemaFormat.ODPS.value,
            )
        self.data = data

    @classmethod
    def from_file(cls, path: Path | str) -> "ODPSParser":
        return cls.from_string(Path(path).read_text())

    @classmethod
    def from_string(cls, content: str) -> "ODPSParser":
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise SchemaImportError(f"Invalid ODPS YAML: {e}", format=SchemaFormat.ODPS.value) from e
        return cls(data)

    def list_entities(self) -> list[str]:
        return []

    def parse(self) -> ODPSDataProduct:
        """Parse the data product.

        Returns:
            Parsed ODPSDataProduct

        Raises:
            SchemaImportError: If required keys are missing or invalid
        """
        try:
            return ODPSDataProduct.model_validate(self.data)
        except ValidationError as e:
            raise SchemaImportError(
                f"Invalid ODPS data product: {e}",
                format=SchemaFormat.ODPS.value,
                entity=self.data.get("name"),
            ) from e
