"""SQL DDL exporter."""

import re

from contract_kit.errors import ExportError
from contract_kit.export.base import reuses_physical_types, type_hint
from contract_kit.models.contract import ContractDocument, SchemaObject, SchemaProperty
from contract_kit.schemas.base import SchemaFormat

DIALECTS = ("postgres", "mysql", "sqlite", "sqlserver", "databricks")

# Per-dialect spelling of logical types without size arguments
DIALECT_TYPES = {
    "postgres": {"string": "TEXT", "number": "DOUBLE PRECISION", "boolean": "BOOLEAN", "timestamp": "TIMESTAMP", "json": "JSONB"},
    "mysql": {"string": "TEXT", "number": "DOUBLE", "boolean": "BOOLEAN", "timestamp": "DATETIME", "json": "JSON"},
    "sqlite": {"string": "TEXT", "number": "REAL", "boolean": "BOOLEAN", "timestamp": "TIMESTAMP", "json": "TEXT"},
    "sqlserver": {"string": "NVARCHAR(MAX)", "number": "FLOAT", "boolean": "BIT", "timestamp": "DATETIME2", "json": "NVARCHAR(MAX)"},
    "databricks": {"string": "STRING", "number": "DOUBLE", "boolean": "BOOLEAN", "timestamp": "TIMESTAMP", "json": "STRING"},
}

BIGINT_HINTS = {"bigint", "int8", "long", "int64", "uint32", "uint64", "sint64", "fixed64", "sfixed64", "bigserial"}

SIMPLE_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class SQLExporter:
    """Renders each schema object as a ``CREATE TABLE`` statement.

    Nested objects become ``STRUCT<...>`` columns and arrays become
    ``ARRAY<...>`` columns.
    """

    format = SchemaFormat.SQL

    def __init__(self, dialect: str = "postgres"):
        """Initialize the exporter.

        Args:
            dialect: One of postgres, mysql, sqlite, sqlserver, databricks
        """
        dialect = dialect.lower()
        if dialect not in DIALECTS:
            raise ExportError(f"Unknown SQL dialect '{dialect}'. Available: {', '.join(DIALECTS)}")
        self.dialect = dialect
        self._types = DIALECT_TYPES[dialect]

    def quote(self, name: str) -> str:
        """Quote an identifier when it is not a plain word."""
        if SIMPLE_IDENTIFIER.match(name):
            return name
        if self.dialect in ("mysql", "databricks"):
            return f"`{name}`"
        if self.dialect == "sqlserver":
            return f"[{name}]"
        return '"' + name.replace('"', '""') + '"'

    def _table_name(self, obj: SchemaObject, reuse: bool) -> str:
        if reuse and obj.physical_name:
            return ".".join(self.quote(part) for part in obj.physical_name.split("."))
        return self.quote(obj.name)

    def column_type(self, prop: SchemaProperty, reuse: bool) -> str:
        """SQL type for a property."""
        if reuse and prop.physical_type:
            return prop.physical_type

        if prop.properties is not None:
            members = ", ".join(
                f"{self.quote(child.name)}: {self.column_type(child, reuse)}"
                for child in prop.properties
            )
            return f"STRUCT<{members}>"

        if prop.items is not None:
            return f"ARRAY<{self.column_type(prop.items, reuse)}>"

        options = prop.logical_type_options
        logical = prop.logical_type

        if logical == "string":
            if options.get("maxLength"):
                return f"VARCHAR({options['maxLength']})"
            return self._types["string"]
        if logical == "integer":
            return "BIGINT" if type_hint(prop) in BIGINT_HINTS else "INTEGER"
        if logical == "number":
            if options.get("precision"):
                scale = options.get("scale")
                args = f"{options['precision']}, {scale}" if scale is not None else f"{options['precision']}"
                return f"DECIMAL({args})"
            return self._types["number"]
        if logical == "boolean":
            return self._types["boolean"]
        if logical == "date":
            return "DATE"
        if logical == "timestamp":
            return self._types["timestamp"]
        if logical == "time":
            return "TIME"
        if logical == "array":
            return f"ARRAY<{self._types['string']}>"
        return self._types["json"]

    def _literal(self, value) -> str:
        if isinstance(value, bool):
            return "TRUE" if value else "FALSE"
        if isinstance(value, (int, float)):
            return str(value)
        return "'" + str(value).replace("'", "''") + "'"

    def _column(self, prop: SchemaProperty, reuse: bool, inline_pk: bool) -> str:
        parts = [self.quote(prop.name), self.column_type(prop, reuse)]

        if prop.required or (prop.primary_key and inline_pk):
            parts.append("NOT NULL")
        if prop.primary_key and inline_pk:
            parts.append("PRIMARY KEY")
        elif prop.unique:
            parts.append("UNIQUE")
        if prop.default is not None:
            parts.append(f"DEFAULT {self._literal(prop.default)}")
        if prop.enum:
            values = ", ".join(self._literal(v) for v in prop.enum)
            parts.append(f"CHECK ({self.quote(prop.name)} IN ({values}))")
        for relationship in prop.relationships:
            if relationship.type == "foreignKey" and "." in relationship.to:
                table, _, column = relationship.to.rpartition(".")
                parts.append(f"REFERENCES {self.quote(table)}({self.quote(column)})")
                break
        if prop.description and self.dialect in ("mysql", "databricks"):
            parts.append(f"COMMENT {self._literal(prop.description)}")

        return " ".join(parts)

    def render_table(self, obj: SchemaObject, reuse: bool = False) -> str:
        """Render one ``CREATE TABLE`` statement (plus PostgreSQL comments)."""
        table_name = self._table_name(obj, reuse)
        primary_keys = [p for p in obj.properties if p.primary_key]
        primary_keys.sort(key=lambda p: p.primary_key_position or 0)
        inline_pk = len(primary_keys) == 1

        lines = [f"    {self._column(p, reuse, inline_pk)}" for p in obj.properties]
        if len(primary_keys) > 1:
            keys = ", ".join(self.quote(p.name) for p in primary_keys)
            lines.append(f"    PRIMARY KEY ({keys})")

        statement = f"CREATE TABLE {table_name} (\n" + ",\n".join(lines) + "\n)"
        if obj.description and self.dialect == "mysql":
            statement += f" COMMENT={self._literal(obj.description)}"
        elif obj.description and self.dialect == "databricks":
            statement += f" COMMENT {self._literal(obj.description)}"
        statements = [statement + ";"]

        if self.dialect == "postgres":
            if obj.description:
                statements.append(f"COMMENT ON TABLE {table_name} IS {self._literal(obj.description)};")
            for prop in obj.properties:
                if prop.description:
                    statements.append(
                        f"COMMENT ON COLUMN {table_name}.{self.quote(prop.name)} IS {self._literal(prop.description)};"
                    )

        return "\n".join(statements)

    def render(self, document: ContractDocument) -> str:
        reuse = reuses_physical_types(document, SchemaFormat.SQL)
        tables = [self.render_table(obj, reuse) for obj in document.schema_objects]
        return "\n\n".join(tables) + ("\n" if tables else "")
