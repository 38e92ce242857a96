"""CADS asset parser.

Reads CADS YAML into a :class:`CADSAsset`. CADS assets describe compute,
not data, so there is no generic schema document for them.
"""

from pathlib import Path

import yaml
from pydantic import ValidationError

from contract_kit.errors import SchemaImportError
from contract_kit.models.cads import CADSAsset, CADSKind
from contract_kit.schemas.base import SchemaFormat

CADS_KINDS = {k.value for k in CADSKind}


class CADSParser:
    """Parser for CADS asset documents."""

    def __init__(self, data: dict):
        if not isinstance(data, dict):
            raise SchemaImportError("CADS document must be a mapping", format=SchemaFormat.CADS.value)
        self.data = data

    @classmethod
    def from_file(cls, path: Path | str) -> "CADSParser":
        return cls.from_string(Path(path).read_text())

    @classmethod
    def from_string(cls, content: str) -> "CADSParser":
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise SchemaImportError(f"Invalid CADS YAML: {e}", format=SchemaFormat.CADS.value) from e
        return cls(data)

    def list_entities(self) -> list[str]:
        return []

    def parse(self) -> CADSAsset:
        """Parse the asset.

        Returns:
            Parsed CADSAsset

        Raises:
            SchemaImportError: If required keys are missing or invalid
        """
        try:
            return CADSAsset.model_validate(self.data)
        except ValidationError as e:
            raise SchemaImportError(
                f"Invalid CADS asset: {e}",
                format=SchemaFormat.CADS.value,
                entity=self.data.get("name"),
            ) from e
