"""
contract-kit - A multi-format data contract toolkit.

Imports SQL DDL, Avro, Protobuf, JSON Schema, OpenAPI and ODCS documents,
converts them to canonical ODCS data contracts with a conversion report,
and exports contracts back to any of those formats.
"""

__version__ = "0.1.0"

from contract_kit.convert import ConversionOptions, ConversionResult, UniversalConverter, convert, convert_to_odcs
from contract_kit.models import ContractDocument, Tag, parse_tag, serialize_tag
from contract_kit.registry import FormatRegistry, get_global_registry
from contract_kit.schemas import SchemaFormat, SchemaParser
from contract_kit.validation import ContractValidator

__all__ = [
    "ContractDocument",
    "ContractValidator",
    "ConversionOptions",
    "ConversionResult",
    "FormatRegistry",
    "SchemaFormat",
    "SchemaParser",
    "Tag",
    "UniversalConverter",
    "convert",
    "convert_to_odcs",
    "get_global_registry",
    "parse_tag",
    "serialize_tag",
]
