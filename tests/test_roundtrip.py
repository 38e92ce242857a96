"""Round-trip tests through the canonical contract.

Tests cover:
- ODCS in, ODCS out keeps the contract
- ODCS output is a fixed point of conversion
- SQL, Avro, Protobuf and JSON Schema definitions survive a trip through ODCS
  or back into their own format
"""

from pathlib import Path

import yaml

from contract_kit.convert import convert, convert_to_odcs
from contract_kit.export import AvroExporter
from contract_kit.schemas import SchemaParser


SCHEMAS_DIR = Path(__file__).parent.parent / "examples" / "schemas"
ODCS_FILE = SCHEMAS_DIR / "orders.odcs.yaml"
DDL_FILE = SCHEMAS_DIR / "users.sql"
AVRO_FILE = SCHEMAS_DIR / "user-event.avsc"
PROTOBUF_FILE = SCHEMAS_DIR / "user.proto"
JSON_SCHEMA_FILE = SCHEMAS_DIR / "user.schema.json"


def _without_source_format(data):
    data = dict(data)
    data["customProperties"] = [
        p for p in data.get("customProperties", []) if p["property"] != "sourceFormat"
    ]
    return data


def _field_summary(definition):
    return [(f.name, f.type, f.format, f.required) for f in definition.fields]


# =============================================================================
# ODCS Round Trips
# =============================================================================

class TestODCSRoundTrip:
    """ODCS documents through the converter."""

    def test_odcs_to_odcs(self):
        """Test an ODCS contract comes back unchanged apart from the source marker."""
        original = yaml.safe_load(ODCS_FILE.read_text())
        result = yaml.safe_load(convert_to_odcs(ODCS_FILE.read_text()))

        expected = dict(original)
        expected["schema"] = [dict(original["schema"][0], logicalType="object")]
        expected["customProperties"] = original["customProperties"] + [
            {"property": "sourceFormat", "value": "odcs"},
        ]
        assert result == expected

    def test_odcs_output_is_fixed_point(self):
        """Test converting generated ODCS again changes nothing but the source marker."""
        first = convert_to_odcs(DDL_FILE.read_text())
        second = convert_to_odcs(first)

        assert _without_source_format(yaml.safe_load(second)) == _without_source_format(yaml.safe_load(first))

    def test_enum_survives_odcs(self):
        """Test enum values make it through the quality rule and back."""
        odcs = convert_to_odcs(DDL_FILE.read_text())
        status = convert("odcs", odcs).document.get_object("users").get_property("status")

        assert status.enum == ["active", "suspended", "deleted"]
        assert status.default == "active"


# =============================================================================
# Cross-format Round Trips
# =============================================================================

class TestCrossFormatRoundTrip:
    """Definitions through ODCS and back to their own format."""

    def test_sql_through_odcs(self):
        """Test SQL columns survive a trip through ODCS."""
        odcs = convert_to_odcs(DDL_FILE.read_text())
        sql = convert("odcs", odcs).render("sql")

        assert "    id BIGINT NOT NULL PRIMARY KEY," in sql
        assert "    email VARCHAR(255) NOT NULL UNIQUE," in sql
        assert "status VARCHAR(20) DEFAULT 'active' CHECK (status IN ('active', 'suspended', 'deleted'))" in sql
        assert "    balance DECIMAL(12, 2)," in sql
        assert "COMMENT ON COLUMN users.email IS 'Login email address';" in sql
        assert "user_id BIGINT NOT NULL REFERENCES users(id)" in sql
        assert "    PRIMARY KEY (order_id, line_no)" in sql

    def test_avro_through_odcs(self):
        """Test Avro logical types survive a trip through ODCS."""
        odcs = convert_to_odcs(AVRO_FILE.read_text(), "avro")
        record = AvroExporter().to_records(convert("odcs", odcs).document)[0]
        fields = {f["name"]: f["type"] for f in record["fields"]}

        assert fields["event_id"] == {"type": "string", "logicalType": "uuid"}
        assert fields["user_id"] == "long"
        assert fields["occurred_at"] == {"type": "long", "logicalType": "timestamp-millis"}
        assert fields["amount"][1] == {"type": "bytes", "logicalType": "decimal", "precision": 10, "scale": 2}
        assert fields["event_type"]["symbols"] == ["LOGIN", "LOGOUT", "PURCHASE"]

    def test_protobuf_to_protobuf(self):
        """Test re-importing exported proto gives the same field types."""
        original = SchemaParser.from_file(PROTOBUF_FILE).parse("User")
        proto = convert("protobuf", PROTOBUF_FILE.read_text()).render("protobuf")
        reparsed = SchemaParser(proto, "protobuf").parse("User")

        assert [(f.name, f.physical_type) for f in reparsed.fields] == [
            (f.name, f.physical_type) for f in original.fields
        ]

    def test_json_schema_to_json_schema(self):
        """Test re-importing exported JSON Schema gives the same fields."""
        original = SchemaParser.from_file(JSON_SCHEMA_FILE)
        exported = convert("jsonschema", JSON_SCHEMA_FILE.read_text()).render("jsonschema")
        reparsed = SchemaParser(exported, "jsonschema")

        assert reparsed.list_entities() == original.list_entities()
        for entity in original.list_entities():
            assert _field_summary(reparsed.parse(entity)) == _field_summary(original.parse(entity))
