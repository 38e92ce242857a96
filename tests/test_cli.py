"""Tests for the contract-kit CLI.

Tests cover:
- convert to files and stdout, with strategies, options files and reports
- Conversion errors and exit codes
- list-entities as a table and as JSON
- validate for valid and invalid contracts
- parse-tag
"""

import json
from pathlib import Path

import pytest
import yaml
from click.testing import CliRunner

from contract_kit import __version__
from contract_kit.cli.main import cli
from contract_kit.logging_config import stop_logging


# Test data paths
SCHEMAS_DIR = Path(__file__).parent.parent / "examples" / "schemas"
OPTIONS_FILE = Path(__file__).parent.parent / "examples" / "options" / "conversion-options.yaml"
ODCS_FILE = SCHEMAS_DIR / "orders.odcs.yaml"
ODCL_FILE = SCHEMAS_DIR / "shipments.odcl.yaml"
DDL_FILE = SCHEMAS_DIR / "users.sql"
AVRO_FILE = SCHEMAS_DIR / "user-event.avsc"
PROTOBUF_FILE = SCHEMAS_DIR / "user.proto"
JSON_SCHEMA_FILE = SCHEMAS_DIR / "user.schema.json"
OPENAPI_FILE = SCHEMAS_DIR / "openapi-users.yaml"
CADS_FILE = SCHEMAS_DIR / "churn-model.cads.yaml"
ODPS_FILE = SCHEMAS_DIR / "customer-360.odps.yaml"


@pytest.fixture
def runner():
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def reset_logging():
    """Remove the handler the CLI installs on the runner's stderr."""
    yield
    stop_logging()


# =============================================================================
# Convert Tests
# =============================================================================

class TestConvert:
    """Tests for the convert command."""

    def test_convert_to_odcs_file(self, runner, tmp_path):
        """Test converting SQL DDL to an ODCS file."""
        output_file = tmp_path / "users.odcs.yaml"

        result = runner.invoke(cli, ["convert", str(DDL_FILE), "-o", str(output_file)])

        assert result.exit_code == 0
        assert "Conversion Complete" in result.output
        data = yaml.safe_load(output_file.read_text())
        assert data["kind"] == "DataContract"
        assert [obj["name"] for obj in data["schema"]] == ["users", "orders"]

    def test_convert_to_stdout(self, runner):
        """Test the rendered document goes to stdout without --output."""
        result = runner.invoke(cli, ["convert", str(PROTOBUF_FILE), "--to", "jsonschema"])

        assert result.exit_code == 0
        assert '"$schema": "https://json-schema.org/draft/2020-12/schema"' in result.output
        assert '"title": "User"' in result.output

    def test_convert_creates_output_dirs(self, runner, tmp_path):
        """Test missing output directories are created."""
        output_file = tmp_path / "out" / "nested" / "user.avsc"

        result = runner.invoke(cli, ["convert", str(JSON_SCHEMA_FILE), "-t", "avro", "-o", str(output_file)])

        assert result.exit_code == 0
        assert json.loads(output_file.read_text())[0]["name"] == "User"

    def test_convert_sql_dialect(self, runner, tmp_path):
        """Test --dialect is passed to the SQL exporter."""
        output_file = tmp_path / "events.sql"

        result = runner.invoke(cli, [
            "convert", str(AVRO_FILE),
            "--to", "sql",
            "--dialect", "mysql",
            "-o", str(output_file),
        ])

        assert result.exit_code == 0
        assert "occurred_at DATETIME NOT NULL" in output_file.read_text()

    def test_convert_protobuf_syntax(self, runner, tmp_path):
        """Test --syntax is passed to the Protobuf exporter."""
        output_file = tmp_path / "users.proto"

        result = runner.invoke(cli, [
            "convert", str(DDL_FILE),
            "-t", "protobuf",
            "--syntax", "proto2",
            "-o", str(output_file),
        ])

        assert result.exit_code == 0
        proto = output_file.read_text()
        assert proto.startswith('syntax = "proto2";')
        assert "required int64 id = 1;" in proto

    def test_convert_with_strategy(self, runner, tmp_path):
        """Test --strategy flattens nested objects."""
        output_file = tmp_path / "user.odcs.yaml"

        result = runner.invoke(cli, [
            "convert", str(JSON_SCHEMA_FILE),
            "--strategy", "flatten",
            "-o", str(output_file),
        ])

        assert result.exit_code == 0
        user = yaml.safe_load(output_file.read_text())["schema"][0]
        names = [p["name"] for p in user["properties"]]
        assert "address.city" in names
        assert "phones.[].kind" in names

    def test_convert_with_options_file(self, runner, tmp_path):
        """Test an options file sets contract metadata and type rules."""
        output_file = tmp_path / "shop.odcs.yaml"

        result = runner.invoke(cli, [
            "convert", str(DDL_FILE),
            "--options", str(OPTIONS_FILE),
            "-o", str(output_file),
        ])

        assert result.exit_code == 0
        data = yaml.safe_load(output_file.read_text())
        assert data["name"] == "shop"
        assert data["version"] == "2.0.0"
        assert data["status"] == "active"

    def test_strategy_overrides_options_file(self, runner, tmp_path):
        """Test --strategy wins over the options file."""
        output_file = tmp_path / "user.odcs.yaml"

        result = runner.invoke(cli, [
            "convert", str(JSON_SCHEMA_FILE),
            "--options", str(OPTIONS_FILE),
            "--strategy", "reference_by_name",
            "-o", str(output_file),
        ])

        assert result.exit_code == 0
        names = [obj["name"] for obj in yaml.safe_load(output_file.read_text())["schema"]]
        assert names == ["User", "Address", "user_address", "user_phones"]

    def test_convert_with_report(self, runner, tmp_path):
        """Test --report prints the conversion report."""
        output_file = tmp_path / "users.odcs.yaml"

        result = runner.invoke(cli, ["convert", str(DDL_FILE), "-o", str(output_file), "--report"])

        assert result.exit_code == 0
        assert "Conversion Report" in result.output
        assert "17 fields, 2 heuristic, 1 unmapped, 0 dropped" in result.output

    def test_explicit_format(self, runner, tmp_path):
        """Test --from overrides detection."""
        source = tmp_path / "schema.txt"
        source.write_text(DDL_FILE.read_text())
        output_file = tmp_path / "out.yaml"

        result = runner.invoke(cli, ["convert", str(source), "--from", "sql", "-o", str(output_file)])

        assert result.exit_code == 0
        assert yaml.safe_load(output_file.read_text())["name"] == "users"

    def test_wrong_format_fails(self, runner):
        """Test a parse failure exits with an error."""
        result = runner.invoke(cli, ["convert", str(DDL_FILE), "--from", "avro"])

        assert result.exit_code == 1
        assert "Failed to parse avro source" in result.output

    def test_cads_refused(self, runner):
        """Test CADS assets cannot be converted."""
        result = runner.invoke(cli, ["convert", str(CADS_FILE)])

        assert result.exit_code == 1
        assert "requires data schema information" in result.output

    def test_odps_lists_contracts(self, runner):
        """Test ODPS conversion names the contracts it needs."""
        result = runner.invoke(cli, ["convert", str(ODPS_FILE)])

        assert result.exit_code == 1
        assert "crm-customers" in result.output

    def test_missing_source(self, runner):
        """Test a missing source file is a usage error."""
        result = runner.invoke(cli, ["convert", "does-not-exist.sql"])

        assert result.exit_code == 2

    def test_unknown_target_format(self, runner):
        """Test target formats are restricted to known ones."""
        result = runner.invoke(cli, ["convert", str(DDL_FILE), "--to", "cobol"])

        assert result.exit_code == 2

    def test_convert_odcl_contract(self, runner, tmp_path):
        """Test an ODCL data contract is detected and converted to ODCS."""
        output_file = tmp_path / "shipments.odcs.yaml"

        result = runner.invoke(cli, ["convert", str(ODCL_FILE), "-o", str(output_file)])

        assert result.exit_code == 0
        contract = yaml.safe_load(output_file.read_text())
        assert contract["id"] == "urn:datacontract:logistics:shipments"
        assert [obj["name"] for obj in contract["schema"]] == ["shipments", "carriers"]

    def test_odcl_is_not_a_target(self, runner):
        """Test ODCL can be read but not written."""
        result = runner.invoke(cli, ["convert", str(DDL_FILE), "--to", "odcl"])

        assert result.exit_code == 2


# =============================================================================
# List Entities Tests
# =============================================================================

class TestListEntities:
    """Tests for the list-entities command."""

    def test_list_ddl_entities(self, runner):
        """Test listing tables from SQL DDL."""
        result = runner.invoke(cli, ["list-entities", str(DDL_FILE)])

        assert result.exit_code == 0
        assert "users" in result.output
        assert "orders" in result.output
        assert "sql" in result.output

    def test_list_openapi_entities(self, runner):
        """Test listing schemas from OpenAPI."""
        result = runner.invoke(cli, ["list-entities", str(OPENAPI_FILE)])

        assert result.exit_code == 0
        assert "User" in result.output
        assert "openapi" in result.output

    def test_list_as_json(self, runner):
        """Test --json prints a JSON list."""
        result = runner.invoke(cli, ["list-entities", str(PROTOBUF_FILE), "--json"])

        assert result.exit_code == 0
        assert json.loads(result.output) == ["User", "Address"]

    def test_list_with_format(self, runner, tmp_path):
        """Test --from for files without a known extension."""
        source = tmp_path / "events.txt"
        source.write_text(AVRO_FILE.read_text())

        result = runner.invoke(cli, ["list-entities", str(source), "-f", "avro", "--json"])

        assert result.exit_code == 0
        assert json.loads(result.output) == ["UserEvent"]

    def test_list_cads_has_no_entities(self, runner):
        """Test documents without table schemas list nothing."""
        result = runner.invoke(cli, ["list-entities", str(CADS_FILE)])

        assert result.exit_code == 0
        assert "No entities found" in result.output

    def test_list_invalid_document_fails(self, runner, tmp_path):
        """Test an unparseable document exits with an error."""
        source = tmp_path / "broken.avsc"
        source.write_text("{not json")

        result = runner.invoke(cli, ["list-entities", str(source)])

        assert result.exit_code == 1
        assert "Error" in result.output


# =============================================================================
# Validate Tests
# =============================================================================

class TestValidate:
    """Tests for the validate command."""

    def test_valid_contract(self, runner):
        """Test a valid contract exits 0."""
        result = runner.invoke(cli, ["validate", str(ODCS_FILE)])

        assert result.exit_code == 0
        assert "VALID" in result.output
        assert "INVALID" not in result.output

    def test_invalid_contract(self, runner, tmp_path):
        """Test an invalid contract exits 1 and lists the issues."""
        contract = tmp_path / "bad.yaml"
        contract.write_text(
            "apiVersion: v3.1.0\n"
            "kind: DataContract\n"
            "id: bad\n"
            "version: 1.0.0\n"
            "tags: ['']\n"
        )

        result = runner.invoke(cli, ["validate", str(contract)])

        assert result.exit_code == 1
        assert "INVALID" in result.output
        assert "'status' is a required property" in result.output
        assert "Tag must not be empty" in result.output

    def test_converted_contract_is_valid(self, runner, tmp_path):
        """Test converter output passes validation."""
        output_file = tmp_path / "user.odcs.yaml"
        runner.invoke(cli, ["convert", str(AVRO_FILE), "-o", str(output_file)])

        result = runner.invoke(cli, ["validate", str(output_file)])

        assert result.exit_code == 0


# =============================================================================
# Parse Tag Tests
# =============================================================================

class TestParseTag:
    """Tests for the parse-tag command."""

    def test_parse_tags(self, runner):
        """Test kinds and canonical forms are shown."""
        result = runner.invoke(cli, ["parse-tag", "pii", "owner:data", "regions:[eu,us]"])

        assert result.exit_code == 0
        assert "simple" in result.output
        assert "pair" in result.output
        assert "list" in result.output

    def test_empty_tag_fails(self, runner):
        """Test an empty tag is an error."""
        result = runner.invoke(cli, ["parse-tag", "  "])

        assert result.exit_code == 1
        assert "Tag must not be empty" in result.output


# =============================================================================
# CLI Options Tests
# =============================================================================

class TestCLIOptions:
    """Tests for global CLI options."""

    def test_version(self, runner):
        """Test --version prints the package version."""
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help_lists_commands(self, runner):
        """Test --help lists every command."""
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        for command in ("convert", "list-entities", "validate", "parse-tag"):
            assert command in result.output
