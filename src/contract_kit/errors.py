"""Error types raised by the toolkit.

Importer and tag errors subclass ``ValueError`` so callers that already
catch ``ValueError`` around parsing keep working.
"""


class ContractKitError(Exception):
    """Base class for all toolkit errors."""


class EmptyTagError(ContractKitError, ValueError):
    """Raised when a tag string is empty or whitespace-only."""

    def __init__(self, text: str = ""):
        self.text = text
        super().__init__("Tag must not be empty")


class SchemaImportError(ContractKitError, ValueError):
    """Raised when an importer cannot parse its input."""

    def __init__(
        self,
        message: str,
        format: str | None = None,
        entity: str | None = None,
    ):
        self.format = format
        self.entity = entity
        super().__init__(message)


class ExportError(ContractKitError, ValueError):
    """Raised when an exporter is given invalid arguments."""


class ConversionError(ContractKitError):
    """Base class for converter errors."""


class SourceParseFailedError(ConversionError):
    """The source document could not be imported.

    Wraps the importer's message together with the source format and the
    offending entity, when the importer could identify one.
    """

    def __init__(
        self,
        source_format: str,
        message: str,
        entity: str | None = None,
    ):
        self.source_format = source_format
        self.entity = entity
        self.original_message = message
        location = f" (entity '{entity}')" if entity else ""
        super().__init__(f"Failed to parse {source_format} source{location}: {message}")


class UnsupportedFormatError(ConversionError, ValueError):
    """Unknown format, failed auto-detection, or a format with no table schema."""

    def __init__(self, message: str, format: str | None = None):
        self.format = format
        super().__init__(message)
