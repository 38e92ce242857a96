"""Format Registry for managing available importers and exporters."""

from typing import Any, Callable, Protocol

from contract_kit.errors import UnsupportedFormatError
from contract_kit.models.contract import ContractDocument
from contract_kit.schemas.base import SchemaDocument, SchemaFormat

Importer = Callable[[str], SchemaDocument]


class Exporter(Protocol):
    """Renders a canonical document in one format."""

    def render(self, document: ContractDocument) -> str:
        ...


class FormatRegistry:
    """Registry of importers and exporters keyed by format.

    Importers are callables turning source text into a generic document;
    exporters are classes with a ``render`` method, instantiated per use
    with the caller's options.
    """

    def __init__(self):
        self._importers: dict[SchemaFormat, Importer] = {}
        self._exporters: dict[SchemaFormat, type] = {}
        self._register_defaults()

    def _register_defaults(self) -> None:
        """Register the default importers and exporters."""
        from contract_kit.export.avro import AvroExporter
        from contract_kit.export.cads import CADSExporter
        from contract_kit.export.jsonschema import JsonSchemaExporter
        from contract_kit.export.odcs import ODCSExporter
        from contract_kit.export.odps import ODPSExporter
        from contract_kit.export.openapi import OpenAPIExporter
        from contract_kit.export.protobuf import ProtobufExporter
        from contract_kit.export.sql import SQLExporter
        from contract_kit.schemas.parser import PARSERS

        for fmt, parser_class in PARSERS.items():
            if fmt.has_table_schema:
                self.register_importer(fmt, _document_importer(parser_class))

        self.register_exporter(SchemaFormat.ODCS, ODCSExporter)
        self.register_exporter(SchemaFormat.SQL, SQLExporter)
        self.register_exporter(SchemaFormat.AVRO, AvroExporter)
        self.register_exporter(SchemaFormat.PROTOBUF, ProtobufExporter)
        self.register_exporter(SchemaFormat.JSON_SCHEMA, JsonSchemaExporter)
        self.register_exporter(SchemaFormat.OPENAPI, OpenAPIExporter)
        self.register_exporter(SchemaFormat.CADS, CADSExporter)
        self.register_exporter(SchemaFormat.ODPS, ODPSExporter)

    def register_importer(self, format: SchemaFormat | str, importer: Importer) -> None:
        """Register an importer for a format.

        Args:
            format: The format the importer reads
            importer: Callable turning text into a SchemaDocument
        """
        self._importers[SchemaFormat.parse(format)] = importer

    def register_exporter(self, format: SchemaFormat | str, exporter_class: type) -> None:
        """Register an exporter for a format.

        Args:
            format: The format the exporter writes
            exporter_class: Class with a ``render(document)`` method
        """
        self._exporters[SchemaFormat.parse(format)] = exporter_class

    def get_importer(self, format: SchemaFormat | str) -> Importer:
        """Get the importer for a format.

        Raises:
            UnsupportedFormatError: If no importer is registered
        """
        fmt = SchemaFormat.parse(format)
        if fmt not in self._importers:
            available = ", ".join(f.value for f in self._importers)
            raise UnsupportedFormatError(
                f"No importer for format '{fmt.value}'. Available: {available}",
                format=fmt.value,
            )
        return self._importers[fmt]

    def get_exporter(self, format: SchemaFormat | str, **options: Any) -> Exporter:
        """Create the exporter for a format.

        Args:
            format: Target format
            **options: Exporter options (e.g. ``dialect`` for SQL)

        Raises:
            UnsupportedFormatError: If no exporter is registered
        """
        fmt = SchemaFormat.parse(format)
        if fmt not in self._exporters:
            available = ", ".join(f.value for f in self._exporters)
            raise UnsupportedFormatError(
                f"No exporter for format '{fmt.value}'. Available: {available}",
                format=fmt.value,
            )
        return self._exporters[fmt](**options)

    def list_formats(self) -> list[SchemaFormat]:
        """List formats with an importer or an exporter."""
        return [f for f in SchemaFormat if f in self._importers or f in self._exporters]

    def list_importers(self) -> list[SchemaFormat]:
        return list(self._importers.keys())

    def list_exporters(self) -> list[SchemaFormat]:
        return list(self._exporters.keys())

    def unregister(self, format: SchemaFormat | str) -> bool:
        """Remove a format's importer and exporter.

        Args:
            format: The format to remove

        Returns:
            True if anything was removed, False if not found
        """
        fmt = SchemaFormat.parse(format)
        removed = False
        if fmt in self._importers:
            del self._importers[fmt]
            removed = True
        if fmt in self._exporters:
            del self._exporters[fmt]
            removed = True
        return removed

    def __contains__(self, format: SchemaFormat | str) -> bool:
        """Check if a format has an importer or exporter registered."""
        try:
            fmt = SchemaFormat.parse(format)
        except UnsupportedFormatError:
            return False
        return fmt in self._importers or fmt in self._exporters


def _document_importer(parser_class: type) -> Importer:
    def importer(text: str) -> SchemaDocument:
        return parser_class.from_string(text).parse_document()

    return importer


_global_registry: FormatRegistry | None = None


def get_global_registry() -> FormatRegistry:
    """Get the global format registry singleton."""
    global _global_registry
    if _global_registry is None:
        _global_registry = FormatRegistry()
    return _global_registry
