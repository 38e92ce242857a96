"""Exporters - render canonical contract documents in other formats.

Every exporter has a ``format`` attribute and ``render(document) -> str``.
They are normally obtained through the format registry:

    from contract_kit.registry import get_global_registry

    sql = get_global_registry().get_exporter("sql", dialect="mysql").render(contract)
"""

from contract_kit.export.avro import AvroExporter
from contract_kit.export.cads import CADSExporter
from contract_kit.export.jsonschema import JsonSchemaExporter
from contract_kit.export.odcs import ODCSExporter
from contract_kit.export.odps import ODPSExporter
from contract_kit.export.openapi import OpenAPIExporter
from contract_kit.export.protobuf import ProtobufExporter
from contract_kit.export.sql import SQLExporter

__all__ = [
    "AvroExporter",
    "CADSExporter",
    "JsonSchemaExporter",
    "ODCSExporter",
    "ODPSExporter",
    "OpenAPIExporter",
    "ProtobufExporter",
    "SQLExporter",
]
