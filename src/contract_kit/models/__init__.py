"""Document models: tags, the canonical contract, CADS assets and ODPS products."""

from contract_kit.models.cads import CADSAsset, CADSKind, CADSStatus
from contract_kit.models.contract import (
    ContractDocument,
    Relationship,
    SchemaObject,
    SchemaProperty,
)
from contract_kit.models.odps import ODPSDataProduct, ODPSStatus
from contract_kit.models.tag import (
    ListTag,
    PairTag,
    SimpleTag,
    Tag,
    parse_tag,
    parse_tags,
    serialize_tag,
)

__all__ = [
    "CADSAsset",
    "CADSKind",
    "CADSStatus",
    "ContractDocument",
    "ListTag",
    "ODPSDataProduct",
    "ODPSStatus",
    "PairTag",
    "Relationship",
    "SchemaObject",
    "SchemaProperty",
    "SimpleTag",
    "Tag",
    "parse_tag",
    "parse_tags",
    "serialize_tag",
]
