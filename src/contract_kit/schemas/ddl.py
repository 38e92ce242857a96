"""SQL DDL schema parser.

Parses CREATE TABLE statements from SQL DDL files.
Supports common SQL dialects (PostgreSQL, MySQL, SQLite, SQL Server) and the
STRUCT<...>/ARRAY<...>/MAP<...> column types of Spark/Databricks SQL.
"""

import re
from pathlib import Path
from typing import Any

from contract_kit.errors import SchemaImportError
from contract_kit.schemas.base import (
    FieldSchema,
    SchemaDefinition,
    SchemaDocument,
    SchemaFormat,
)


class DDLParser:
    """Parser for SQL DDL CREATE TABLE statements."""

    # Longest first so "timestamp with time zone" wins over "timestamp"
    MULTI_WORD_TYPES = [
        "timestamp without time zone",
        "timestamp with time zone",
        "time without time zone",
        "time with time zone",
        "character varying",
        "double precision",
        "bit varying",
    ]

    CONSTRAINT_PATTERN = re.compile(
        r"^(PRIMARY\s+KEY|FOREIGN\s+KEY|UNIQUE\b|CHECK\b|CONSTRAINT\b|INDEX\b|KEY\b)",
        re.IGNORECASE,
    )

    NAME_PATTERN = re.compile(
        r'^\s*(?:"([^"]+)"|`([^`]+)`|\[([^\]]+)\]|(\w+))\s*'
    )

    TABLE_START_PATTERN = re.compile(
        r"CREATE\s+(?:OR\s+REPLACE\s+)?(?:(?:GLOBAL\s+|LOCAL\s+)?TEMP(?:ORARY)?\s+)?TABLE\s+"
        r"(?:IF\s+NOT\s+EXISTS\s+)?"
        r"((?:[`\"\[]?\w+[`\"\]]?\.){0,2})"  # Optional catalog/schema
        r"[`\"\[]?(\w+)[`\"\]]?"             # Table name
        r"\s*\(",
        re.IGNORECASE,
    )

    def __init__(self, ddl_content: str):
        """Initialize parser with DDL content.

        Args:
            ddl_content: SQL DDL content as string
        """
        self.ddl_content = ddl_content
        self._content = self._strip_comments(ddl_content)
        self._tables = self._parse_all_tables()
        self._apply_comment_statements()

    @classmethod
    def from_file(cls, path: Path | str) -> "DDLParser":
        """Load parser from a file.

        Args:
            path: Path to SQL DDL file

        Returns:
            Initialized parser
        """
        path = Path(path)
        content = path.read_text()
        return cls(content)

    @classmethod
    def from_string(cls, content: str) -> "DDLParser":
        """Load parser from a string.

        Args:
            content: SQL DDL as string

        Returns:
            Initialized parser
        """
        return cls(content)

    @staticmethod
    def _strip_comments(content: str) -> str:
        content = re.sub(r"/\*.*?\*/", "", content, flags=re.DOTALL)
        return re.sub(r"--[^\n]*", "", content)

    def _parse_all_tables(self) -> dict[str, dict[str, Any]]:
        """Parse all CREATE TABLE statements from the DDL.

        Returns:
            Dict of table name to table info, in declaration order
        """
        tables: dict[str, dict[str, Any]] = {}

        for match in self.TABLE_START_PATTERN.finditer(self._content):
            schema_name = re.sub(r'[`"\[\]]', "", match.group(1)).rstrip(".") or None
            table_name = match.group(2)
            start_pos = match.end()

            # Find matching closing parenthesis (handling nested parens)
            columns_str = self._extract_balanced(self._content, start_pos, "(", ")")
            if columns_str is None:
                raise SchemaImportError(
                    f"Unterminated CREATE TABLE statement for '{table_name}'",
                    format=SchemaFormat.SQL.value,
                    entity=table_name,
                )

            if table_name in tables:
                raise SchemaImportError(
                    f"Table '{table_name}' is defined more than once",
                    format=SchemaFormat.SQL.value,
                    entity=table_name,
                )

            table_end = start_pos + len(columns_str) + 1
            tail = self._content[table_end:].split(";", 1)[0]
            comment_match = re.search(r"COMMENT\s*=?\s*'((?:[^']|'')*)'", tail, re.IGNORECASE)

            columns = self._parse_columns(columns_str, table_name)

            tables[table_name] = {
                "schema": schema_name,
                "columns": columns,
                "description": comment_match.group(1).replace("''", "'") if comment_match else None,
            }

        return tables

    def _extract_balanced(
        self,
        content: str,
        start_pos: int,
        open_char: str,
        close_char: str,
    ) -> str | None:
        """Extract content up to the matching closing character.

        Args:
            content: Full DDL content
            start_pos: Position after the opening character

        Returns:
            Content between the delimiters or None if not found
        """
        depth = 1
        pos = start_pos
        in_quote = None

        while depth > 0 and pos < len(content):
            char = content[pos]
            if in_quote:
                if char == in_quote:
                    in_quote = None
            elif char == "'":
                in_quote = char
            elif char == open_char:
                depth += 1
            elif char == close_char:
                depth -= 1
            pos += 1

        if depth == 0:
            return content[start_pos:pos - 1]
        return None

    def _split_top_level(self, text: str) -> list[str]:
        """Split on commas that are outside parentheses, angle brackets and quotes.

        Args:
            text: Text to split

        Returns:
            List of parts
        """
        parts = []
        current = []
        depth = 0
        in_quote = None

        for char in text:
            if in_quote:
                current.append(char)
                if char == in_quote:
                    in_quote = None
                continue
            if char == "'":
                in_quote = char
                current.append(char)
            elif char in "(<":
                depth += 1
                current.append(char)
            elif char in ")>":
                depth -= 1
                current.append(char)
            elif char == "," and depth == 0:
                parts.append("".join(current))
                current = []
            else:
                current.append(char)

        if current:
            parts.append("".join(current))

        return parts

    def _parse_columns(self, columns_str: str, table_name: str) -> list[dict[str, Any]]:
        """Parse column definitions and table constraints.

        Args:
            columns_str: Content between parentheses in CREATE TABLE
            table_name: Table being parsed, for error messages

        Returns:
            List of column definitions
        """
        columns = []
        constraints = []

        for part in self._split_top_level(columns_str):
            part = part.strip()
            if not part:
                continue

            if self.CONSTRAINT_PATTERN.match(part):
                constraints.append(part)
                continue

            columns.append(self._parse_column(part, table_name))

        by_name = {c["name"].lower(): c for c in columns}
        for constraint in constraints:
            self._apply_table_constraint(constraint, by_name)

        return columns

    def _apply_table_constraint(self, constraint: str, columns: dict[str, dict[str, Any]]) -> None:
        """Apply a table-level PRIMARY KEY / UNIQUE / FOREIGN KEY constraint."""
        names_pattern = r"\(([^)]+)\)"

        pk_match = re.search(r"PRIMARY\s+KEY\s*" + names_pattern, constraint, re.IGNORECASE)
        if pk_match:
            for position, name in enumerate(self._column_list(pk_match.group(1)), start=1):
                column = columns.get(name.lower())
                if column:
                    column["primary_key"] = True
                    column["primary_key_position"] = position
                    column["required"] = True
                    column["nullable"] = False
            return

        unique_match = re.search(r"UNIQUE\s*(?:KEY\s+\w+\s*)?" + names_pattern, constraint, re.IGNORECASE)
        if unique_match:
            names = self._column_list(unique_match.group(1))
            if len(names) == 1 and names[0].lower() in columns:
                columns[names[0].lower()]["unique"] = True
            return

        fk_match = re.search(
            r"FOREIGN\s+KEY\s*" + names_pattern + r"\s*REFERENCES\s+([\w.\"`]+)\s*" + names_pattern,
            constraint,
            re.IGNORECASE,
        )
        if fk_match:
            local = self._column_list(fk_match.group(1))
            target_table = re.sub(r'[`"]', "", fk_match.group(2))
            remote = self._column_list(fk_match.group(3))
            for local_name, remote_name in zip(local, remote):
                column = columns.get(local_name.lower())
                if column:
                    column["references"] = f"{target_table}.{remote_name}"

    @staticmethod
    def _column_list(text: str) -> list[str]:
        return [re.sub(r'[`"\[\]]', "", n).strip() for n in text.split(",") if n.strip()]

    def _split_type(self, rest: str) -> tuple[str, str]:
        """Split ``TYPE [(args)|<...>] [[]] constraints`` into type and constraints."""
        lower = rest.lower()
        pos = 0
        for multi in self.MULTI_WORD_TYPES:
            if lower.startswith(multi) and (len(rest) == len(multi) or not (rest[len(multi)].isalnum() or rest[len(multi)] == "_")):
                pos = len(multi)
                break
        else:
            word = re.match(r"\w+", rest)
            if not word:
                return "", rest
            pos = word.end()

        # Size/precision or generic arguments
        skipped = len(rest[pos:]) - len(rest[pos:].lstrip())
        if pos + skipped < len(rest) and rest[pos + skipped] in "(<":
            open_char = rest[pos + skipped]
            close_char = ")" if open_char == "(" else ">"
            inner = self._extract_balanced(rest, pos + skipped + 1, open_char, close_char)
            if inner is not None:
                pos = pos + skipped + len(inner) + 2

        zone = re.match(r"\s+(with(?:out)?\s+time\s+zone)\b", rest[pos:], re.IGNORECASE)
        if zone:
            pos += zone.end()

        array_suffix = re.match(r"(?:\s*\[\s*\d*\s*\])+", rest[pos:])
        if array_suffix:
            pos += array_suffix.end()

        return rest[:pos].strip(), rest[pos:]

    def _parse_column(self, column_str: str, table_name: str) -> dict[str, Any]:
        """Parse a single column definition.

        Args:
            column_str: Column definition string
            table_name: Table being parsed, for error messages

        Returns:
            Column info dict
        """
        name_match = self.NAME_PATTERN.match(column_str)
        if not name_match:
            raise SchemaImportError(
                f"Cannot parse column definition '{column_str}' in table '{table_name}'",
                format=SchemaFormat.SQL.value,
                entity=table_name,
            )

        name = next(g for g in name_match.groups() if g)
        type_str, constraints_str = self._split_type(column_str[name_match.end():])
        if not type_str:
            raise SchemaImportError(
                f"Column '{name}' in table '{table_name}' has no type",
                format=SchemaFormat.SQL.value,
                entity=table_name,
            )

        constraints_upper = constraints_str.upper()

        required = bool(re.search(r"\bNOT\s+NULL\b", constraints_upper))
        is_primary_key = bool(re.search(r"\bPRIMARY\s+KEY\b", constraints_upper))
        if is_primary_key:
            required = True

        default_value = None
        default_match = re.search(r"\bDEFAULT\s+('(?:[^']|'')*'|[^\s,]+)", constraints_str, re.IGNORECASE)
        if default_match:
            default_value = default_match.group(1).strip("'\"")

        # Extract enum values from CHECK constraint
        enum_values = None
        check_match = re.search(r"CHECK\s*\([^)]*\bIN\s*\(([^)]+)\)", constraints_str, re.IGNORECASE)
        if check_match:
            enum_values = [v.strip().strip("'\"") for v in check_match.group(1).split(",")]

        comment_match = re.search(r"\bCOMMENT\s+'((?:[^']|'')*)'", constraints_str, re.IGNORECASE)

        references = None
        ref_match = re.search(r"\bREFERENCES\s+([\w.\"`]+)\s*\(\s*[`\"]?(\w+)", constraints_str, re.IGNORECASE)
        if ref_match:
            target_table = re.sub(r'[`"]', "", ref_match.group(1))
            references = f"{target_table}.{ref_match.group(2)}"

        return {
            "name": name,
            "type_str": type_str,
            "required": required,
            "nullable": not required,
            "primary_key": is_primary_key,
            "primary_key_position": 1 if is_primary_key else None,
            "unique": bool(re.search(r"\bUNIQUE\b", constraints_upper)),
            "default": default_value,
            "enum": enum_values,
            "description": comment_match.group(1).replace("''", "'") if comment_match else None,
            "references": references,
        }

    def _build_field(self, name: str, type_str: str) -> FieldSchema:
        """Build a FieldSchema from a SQL type expression.

        Args:
            name: Field name
            type_str: Type as written, e.g. ``VARCHAR(100)`` or ``STRUCT<a: INT>``

        Returns:
            FieldSchema (nested for STRUCT and ARRAY types)
        """
        type_str = type_str.strip()
        upper = type_str.upper()

        if upper.startswith("STRUCT<") and upper.endswith(">"):
            members = []
            for member in self._split_top_level(type_str[len("STRUCT<"):-1]):
                member_match = re.match(r'^\s*[`"]?(\w+)[`"]?\s*:?\s*(.+?)\s*$', member, re.DOTALL)
                if not member_match:
                    raise SchemaImportError(
                        f"Cannot parse STRUCT member '{member.strip()}' of '{name}'",
                        format=SchemaFormat.SQL.value,
                    )
                members.append(self._build_field(member_match.group(1), member_match.group(2)))
            return FieldSchema(name=name, type="struct", physical_type=type_str, properties=members)

        if upper.startswith("ARRAY<") and upper.endswith(">"):
            items = self._build_field("item", type_str[len("ARRAY<"):-1])
            return FieldSchema(name=name, type="array", physical_type=type_str, items=items)

        array_suffix = re.search(r"\[\s*\d*\s*\]$", type_str)
        if array_suffix:
            items = self._build_field("item", type_str[:array_suffix.start()])
            return FieldSchema(name=name, type="array", physical_type=type_str, items=items)

        if upper.startswith("MAP<") and upper.endswith(">"):
            return FieldSchema(
                name=name,
                type="map",
                physical_type=type_str,
                metadata={"map_types": type_str[len("MAP<"):-1].strip()},
            )

        args_match = re.search(r"\(([^)]*)\)", type_str)
        base_type = " ".join(re.sub(r"\([^)]*\)", " ", type_str).lower().split())

        max_length = None
        precision = None
        scale = None
        if args_match:
            args = [a.strip() for a in args_match.group(1).split(",")]
            if all(a.isdigit() for a in args):
                if base_type in ("decimal", "numeric", "number"):
                    precision = int(args[0])
                    scale = int(args[1]) if len(args) > 1 else None
                else:
                    max_length = int(args[0])

        return FieldSchema(
            name=name,
            type=base_type,
            physical_type=type_str,
            max_length=max_length,
            precision=precision,
            scale=scale,
        )

    def _apply_comment_statements(self) -> None:
        """Apply PostgreSQL ``COMMENT ON TABLE/COLUMN ... IS '...'`` statements."""
        table_pattern = re.compile(
            r"COMMENT\s+ON\s+TABLE\s+([\w.\"`]+)\s+IS\s+'((?:[^']|'')*)'",
            re.IGNORECASE,
        )
        column_pattern = re.compile(
            r"COMMENT\s+ON\s+COLUMN\s+([\w.\"`]+)\.[\"`]?(\w+)[\"`]?\s+IS\s+'((?:[^']|'')*)'",
            re.IGNORECASE,
        )

        for match in table_pattern.finditer(self._content):
            table = self._tables.get(re.sub(r'[`"]', "", match.group(1)).split(".")[-1])
            if table:
                table["description"] = match.group(2).replace("''", "'")

        for match in column_pattern.finditer(self._content):
            table = self._tables.get(re.sub(r'[`"]', "", match.group(1)).split(".")[-1])
            if not table:
                continue
            for column in table["columns"]:
                if column["name"] == match.group(2):
                    column["description"] = match.group(3).replace("''", "'")

    def list_tables(self) -> list[str]:
        """List all table names found in the DDL.

        Returns:
            List of table names
        """
        return list(self._tables.keys())

    def list_entities(self) -> list[str]:
        return self.list_tables()

    def parse_table(
        self,
        table_name: str,
        source_file: str | None = None,
    ) -> SchemaDefinition:
        """Parse a specific table by name.

        Args:
            table_name: Name of the table to parse
            source_file: Optional source file path

        Returns:
            Parsed SchemaDefinition
        """
        if table_name not in self._tables:
            available = ", ".join(self._tables.keys())
            raise SchemaImportError(
                f"Table '{table_name}' not found. Available: {available}",
                format=SchemaFormat.SQL.value,
                entity=table_name,
            )

        table_info = self._tables[table_name]
        columns = table_info["columns"]

        fields = []
        for col in columns:
            field = self._build_field(col["name"], col["type_str"])
            metadata = dict(field.metadata)
            if col.get("references"):
                metadata["references"] = col["references"]
            if col.get("primary_key_position"):
                metadata["primary_key_position"] = col["primary_key_position"]

            fields.append(field.model_copy(update={
                "required": col["required"],
                "nullable": col["nullable"],
                "primary_key": col["primary_key"],
                "unique": col["unique"],
                "enum": col["enum"],
                "default": col["default"],
                "description": col["description"],
                "metadata": metadata,
            }))

        return SchemaDefinition(
            name=table_name,
            description=table_info.get("description"),
            fields=fields,
            source_format=SchemaFormat.SQL,
            source_file=source_file,
            source_entity=f"{table_info['schema']}.{table_name}" if table_info.get("schema") else table_name,
            metadata={
                "schema": table_info.get("schema"),
                "primary_keys": [c["name"] for c in columns if c.get("primary_key")],
            },
        )

    def parse_entity(self, name: str, source_file: str | None = None) -> SchemaDefinition:
        return self.parse_table(name, source_file)

    def parse(self, source_file: str | None = None) -> SchemaDefinition:
        """Parse the first table found in the DDL.

        Args:
            source_file: Optional source file path

        Returns:
            Parsed SchemaDefinition
        """
        if not self._tables:
            raise SchemaImportError("No tables found in DDL", format=SchemaFormat.SQL.value)

        first_table = next(iter(self._tables.keys()))
        return self.parse_table(first_table, source_file)

    def parse_document(self, source_file: str | None = None) -> SchemaDocument:
        """Parse every table, in declaration order."""
        return SchemaDocument(
            source_format=SchemaFormat.SQL,
            entities=[self.parse_table(name, source_file) for name in self._tables],
            source_file=source_file,
        )
