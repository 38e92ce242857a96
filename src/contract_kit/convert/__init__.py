"""Universal converter - generic schema documents to canonical contracts.

The converter maps every source field to a canonical logical type, lays
nested objects out with the chosen strategy and reports each decision.
"""

from contract_kit.convert.converter import (
    ConversionResult,
    UniversalConverter,
    convert,
    convert_to_odcs,
)
from contract_kit.convert.options import (
    ConversionOptions,
    NestedObjectStrategy,
    OptionsLoader,
    TypeMappingRule,
    load_options,
)
from contract_kit.convert.report import ConversionReport, FieldMapping, MappingRule

__all__ = [
    "ConversionOptions",
    "ConversionReport",
    "ConversionResult",
    "FieldMapping",
    "MappingRule",
    "NestedObjectStrategy",
    "OptionsLoader",
    "TypeMappingRule",
    "UniversalConverter",
    "convert",
    "convert_to_odcs",
    "load_options",
]
