"""Tests for the universal converter.

Tests cover:
- Field type resolution: overrides, built-in tables, passthrough, union narrowing
- The conversion report and its counting rule
- Nested object strategies: preserve, flatten, reference_by_name
- Contract metadata and option precedence
- CADS/ODPS refusals and import errors
"""

import json
import logging
from pathlib import Path

import pytest
import yaml

from contract_kit.convert import (
    ConversionOptions,
    MappingRule,
    NestedObjectStrategy,
    TypeMappingRule,
    UniversalConverter,
    convert,
    convert_to_odcs,
    load_options,
)
from contract_kit.errors import SourceParseFailedError, UnsupportedFormatError
from contract_kit.models.tag import PairTag, SimpleTag
from contract_kit.schemas import SchemaFormat, SchemaParser


SCHEMAS_DIR = Path(__file__).parent.parent / "examples" / "schemas"
OPTIONS_DIR = Path(__file__).parent.parent / "examples" / "options"
DDL_FILE = SCHEMAS_DIR / "users.sql"
AVRO_FILE = SCHEMAS_DIR / "user-event.avsc"
PROTOBUF_FILE = SCHEMAS_DIR / "user.proto"
JSON_SCHEMA_FILE = SCHEMAS_DIR / "user.schema.json"
OPENAPI_FILE = SCHEMAS_DIR / "openapi-users.yaml"
ODCS_FILE = SCHEMAS_DIR / "orders.odcs.yaml"
ODCL_FILE = SCHEMAS_DIR / "shipments.odcl.yaml"
CADS_FILE = SCHEMAS_DIR / "churn-model.cads.yaml"
ODPS_FILE = SCHEMAS_DIR / "customer-360.odps.yaml"


def _convert(path: Path, fmt: str, **options):
    return UniversalConverter(ConversionOptions(**options)).convert(fmt, path.read_text())


def _entry(report, entity, path):
    for entry in report.entries:
        if entry.entity == entity and entry.path == path:
            return entry
    raise AssertionError(f"No report entry for {entity}.{path}")


# =============================================================================
# SQL Conversion Tests
# =============================================================================

class TestSQLConversion:
    """Tests for converting SQL DDL."""

    @pytest.fixture
    def result(self):
        """Convert the users/orders DDL with default options."""
        return _convert(DDL_FILE, "sql")

    def test_objects_in_order(self, result):
        """Test tables become schema objects in declaration order."""
        assert result.document.list_objects() == ["users", "orders"]
        assert result.document.source_format == "sql"

    def test_default_mapping(self, result):
        """Test built-in table lookups."""
        users = result.document.get_object("users")

        assert users.get_property("id").logical_type == "integer"
        assert users.get_property("email").logical_type == "string"
        assert users.get_property("balance").logical_type == "number"
        assert users.get_property("created_at").logical_type == "timestamp"

        entry = _entry(result.report, "users", "id")
        assert entry.rule == MappingRule.DEFAULT
        assert not entry.heuristic

    def test_physical_type_kept(self, result):
        """Test the declared SQL type is kept as physical type."""
        users = result.document.get_object("users")

        assert users.get_property("email").physical_type == "VARCHAR(255)"
        assert users.get_property("created_at").physical_type == "TIMESTAMP WITH TIME ZONE"

    def test_constraints_become_options(self, result):
        """Test length and precision become logicalTypeOptions."""
        users = result.document.get_object("users")

        assert users.get_property("email").logical_type_options == {"maxLength": 255}
        assert users.get_property("balance").logical_type_options == {"precision": 12, "scale": 2}

    def test_keys_and_constraints(self, result):
        """Test primary key, unique, default and enum survive."""
        users = result.document.get_object("users")

        assert users.get_property("id").primary_key
        assert users.get_property("id").primary_key_position == 1
        assert users.get_property("email").unique
        assert users.get_property("email").description == "Login email address"
        assert users.get_property("status").default == "active"
        assert users.get_property("status").enum == ["active", "suspended", "deleted"]
        assert users.description == "Registered users"

    def test_composite_key_positions(self, result):
        """Test composite primary key positions."""
        orders = result.document.get_object("orders")

        assert orders.get_property("order_id").primary_key_position == 1
        assert orders.get_property("line_no").primary_key_position == 2

    def test_foreign_key_relationship(self, result):
        """Test REFERENCES becomes a foreignKey relationship."""
        user_id = result.document.get_object("orders").get_property("user_id")

        assert [(r.type, r.to) for r in user_id.relationships] == [("foreignKey", "users.id")]

    def test_lossy_default_is_heuristic(self, result):
        """Test lossy built-in mappings are flagged."""
        entry = _entry(result.report, "users", "last_ip")

        assert entry.rule == MappingRule.DEFAULT
        assert entry.target_type == "string"
        assert entry.heuristic

    def test_unmapped_passthrough(self, result):
        """Test unknown types pass through as string with their physical type."""
        location = result.document.get_object("users").get_property("location")
        entry = _entry(result.report, "users", "location")

        assert location.logical_type == "string"
        assert location.physical_type == "POINT"
        assert entry.rule == MappingRule.UNMAPPED
        assert entry.heuristic
        assert result.report.unmapped == [entry]

    def test_unmapped_is_logged(self, caplog):
        """Test unmapped types are logged as warnings."""
        with caplog.at_level(logging.WARNING, logger="contract_kit.convert.converter"):
            _convert(DDL_FILE, "sql")
        assert "Unmapped type 'POINT'" in caplog.text

    def test_struct_and_array(self, result):
        """Test STRUCT and ARRAY columns are structural."""
        orders = result.document.get_object("orders")

        shipping = orders.get_property("shipping")
        assert shipping.logical_type == "object"
        assert [p.name for p in shipping.properties] == ["street", "city", "zip"]
        assert _entry(result.report, "orders", "shipping").rule == MappingRule.STRUCTURAL
        assert _entry(result.report, "orders", "shipping.city").target_type == "string"

        labels = orders.get_property("labels")
        assert labels.logical_type == "array"
        assert labels.items.logical_type == "string"
        assert _entry(result.report, "orders", "labels").detail == "items: STRING -> string (default)"

    def test_report_counts_every_named_field(self, result):
        """Test one report entry per named source field."""
        imported = SchemaParser.from_file(DDL_FILE).parse_document()

        assert result.report.field_count == imported.count_fields() == 17
        assert result.report.heuristic_count == 2

    def test_contract_defaults(self, result):
        """Test contract metadata when the source has none."""
        document = result.document

        assert document.name == "users"
        assert document.version == "1.0.0"
        assert document.status == "draft"
        assert document.id


# =============================================================================
# Type Override Tests
# =============================================================================

class TestTypeOverrides:
    """Tests for user type mapping rules."""

    def test_override_beats_default(self):
        """Test a rule wins over the built-in table."""
        result = _convert(
            DDL_FILE,
            "sql",
            type_mapping_rules=[TypeMappingRule(pattern="inet", target_type="string")],
        )
        entry = _entry(result.report, "users", "last_ip")

        assert entry.rule == MappingRule.OVERRIDE
        assert entry.rule_pattern == "inet"
        assert not entry.heuristic

    def test_override_maps_unknown_type(self):
        """Test a rule gives an unknown type a logical type."""
        result = _convert(
            DDL_FILE,
            "sql",
            type_mapping_rules=[TypeMappingRule(pattern="point|geometry", target_type="object")],
        )

        assert result.document.get_object("users").get_property("location").logical_type == "object"
        assert result.report.unmapped == []

    def test_rule_must_match_whole_type(self):
        """Test a pattern matching only part of the type does not apply."""
        result = _convert(
            DDL_FILE,
            "sql",
            type_mapping_rules=[TypeMappingRule(pattern="var", target_type="integer")],
        )
        assert result.document.get_object("users").get_property("email").logical_type == "string"

    def test_first_matching_rule_wins(self):
        """Test rules are tried in order."""
        result = _convert(
            DDL_FILE,
            "sql",
            type_mapping_rules=[
                TypeMappingRule(pattern="big.*", target_type="number"),
                TypeMappingRule(pattern="bigint", target_type="string"),
            ],
        )
        entry = _entry(result.report, "users", "id")

        assert entry.target_type == "number"
        assert entry.rule_pattern == "big.*"

    def test_rule_order_beats_type_spelling(self):
        """Test an earlier rule on the declared type beats a later rule on the base type."""
        result = UniversalConverter(ConversionOptions(type_mapping_rules=[
            TypeMappingRule(pattern=r"VARCHAR\(100\)", target_type="integer"),
            TypeMappingRule(pattern="varchar", target_type="date"),
        ])).convert("sql", "CREATE TABLE t (c VARCHAR(100));")
        entry = _entry(result.report, "t", "c")

        assert entry.rule_pattern == r"VARCHAR\(100\)"
        assert entry.target_type == "integer"

    def test_rule_scoped_to_other_format(self):
        """Test a rule for another source format is skipped."""
        result = _convert(
            DDL_FILE,
            "sql",
            type_mapping_rules=[TypeMappingRule(pattern="bigint", target_type="string", source_format="avro")],
        )
        assert _entry(result.report, "users", "id").rule == MappingRule.DEFAULT

    def test_rule_matches_declared_type(self):
        """Test rules also see the type as declared, with arguments."""
        result = _convert(
            DDL_FILE,
            "sql",
            type_mapping_rules=[TypeMappingRule(pattern=r"varchar\(255\)", target_type="integer")],
        )
        users = result.document.get_object("users")

        assert users.get_property("email").logical_type == "integer"
        assert users.get_property("display_name").logical_type == "string"


# =============================================================================
# Avro, Protobuf, JSON Schema and OpenAPI Conversion Tests
# =============================================================================

class TestAvroConversion:
    """Tests for converting Avro."""

    @pytest.fixture
    def result(self):
        """Convert the user event record."""
        return _convert(AVRO_FILE, "avro")

    def test_null_field_passed_through(self, result):
        """Test null-typed fields pass through with their physical type."""
        placeholder = result.document.get_object("UserEvent").get_property("placeholder")
        entry = _entry(result.report, "UserEvent", "placeholder")

        assert placeholder.logical_type == "string"
        assert placeholder.physical_type == "null"
        assert entry.rule == MappingRule.UNMAPPED
        assert entry.target_type == "string"
        assert result.report.dropped == []

    def test_null_field_survives_avro_round_trip(self):
        """Test a null field keeps its place when exported back to Avro."""
        source = json.dumps({
            "type": "record",
            "name": "R",
            "fields": [
                {"name": "a", "type": "int"},
                {"name": "p", "type": "null"},
                {"name": "u", "type": "string"},
            ],
        })
        rendered = convert("avro", source).render("avro")
        fields = json.loads(rendered)["fields"]

        assert [f["name"] for f in fields] == ["a", "p", "u"]
        assert fields[1]["type"] == "null"
        again = convert("avro", rendered).document.get_object("R")
        assert [p.name for p in again.properties] == ["a", "p", "u"]

    def test_union_narrowing_is_heuristic(self):
        """Test a union with several non-null branches is flagged and named."""
        result = convert(
            "avro",
            '{"type": "record", "name": "R", "fields": ['
            '{"name": "v", "type": ["null", "string", "int"]}]}',
        )
        entry = _entry(result.report, "R", "v")

        assert entry.target_type == "string"
        assert entry.heuristic
        assert "Union [null, string, int] narrowed to 'string'" in entry.detail

    def test_nullable_union_not_heuristic(self, result):
        """Test a plain optional union keeps its default mapping."""
        entry = _entry(result.report, "UserEvent", "device.version")

        assert not entry.heuristic
        assert entry.detail is None

    def test_logical_types(self, result):
        """Test Avro logical types map to canonical types."""
        event = result.document.get_object("UserEvent")

        assert event.get_property("occurred_at").logical_type == "timestamp"
        assert event.get_property("occurred_at").logical_type_options["format"] == "timestamp-millis"
        assert event.get_property("event_id").logical_type_options["format"] == "uuid"
        amount = event.get_property("amount")
        assert amount.logical_type == "number"
        assert amount.logical_type_options["precision"] == 10
        assert not amount.required

    def test_enum_property(self, result):
        """Test Avro enums are strings with allowed values."""
        event_type = result.document.get_object("UserEvent").get_property("event_type")

        assert event_type.logical_type == "string"
        assert event_type.enum == ["LOGIN", "LOGOUT", "PURCHASE"]

    def test_tags_carried(self, result):
        """Test field tags reach the property."""
        labels = result.document.get_object("UserEvent").get_property("labels")
        assert labels.tags == [SimpleTag("pii"), PairTag("owner", "analytics")]

    def test_counts(self, result):
        """Test the report counts passthrough fields too."""
        assert result.report.field_count == 10
        assert result.report.heuristic_count == 2

    def test_recursive_record(self):
        """Test a recursive reference converts to an object without properties."""
        result = convert(
            "avro",
            '{"type": "record", "name": "Node", "fields": ['
            '{"name": "value", "type": "int"},'
            '{"name": "next", "type": ["null", "Node"]}]}',
        )
        next_prop = result.document.get_object("Node").get_property("next")

        assert next_prop.logical_type == "object"
        assert next_prop.properties is None


class TestProtobufConversion:
    """Tests for converting Protobuf."""

    @pytest.fixture
    def result(self):
        """Convert the user proto."""
        return _convert(PROTOBUF_FILE, "protobuf")

    def test_types(self, result):
        """Test proto scalar and well-known types."""
        user = result.document.get_object("User")

        assert user.get_property("age").logical_type == "integer"
        assert user.get_property("created_at").logical_type == "timestamp"
        assert user.get_property("status").enum == ["STATUS_UNKNOWN", "ACTIVE", "SUSPENDED"]
        assert user.get_property("roles").items.logical_type == "string"

    def test_map_is_lossy(self, result):
        """Test map fields become objects, flagged as heuristic."""
        entry = _entry(result.report, "User", "attributes")

        assert entry.target_type == "object"
        assert entry.heuristic

    def test_physical_name_is_qualified(self, result):
        """Test the package-qualified message name becomes the physical name."""
        assert result.document.get_object("User").physical_name == "example.users.User"

    def test_count(self, result):
        """Test message fields are counted with their nested fields."""
        assert result.report.field_count == 14


class TestJsonSchemaConversion:
    """Tests for converting JSON Schema."""

    def test_contract_named_after_title(self):
        """Test the schema title names the contract."""
        result = _convert(JSON_SCHEMA_FILE, "jsonschema")

        assert result.document.name == "User"
        assert result.document.list_objects() == ["User", "Address"]

    def test_formats(self):
        """Test date formats and constraints."""
        user = _convert(JSON_SCHEMA_FILE, "jsonschema").document.get_object("User")

        assert user.get_property("birth_date").logical_type == "date"
        assert user.get_property("age").logical_type_options == {"minimum": 0, "maximum": 150}
        assert user.get_property("id").required


class TestOpenAPIConversion:
    """Tests for converting OpenAPI."""

    def test_formats(self):
        """Test int64 stays integer and byte strings are lossy."""
        result = _convert(OPENAPI_FILE, "openapi")
        user = result.document.get_object("User")

        assert user.get_property("id").logical_type == "integer"
        assert user.get_property("id").logical_type_options["format"] == "int64"
        assert user.get_property("created_at").logical_type == "timestamp"
        assert _entry(result.report, "User", "avatar").heuristic

    def test_contract_named_after_api(self):
        """Test the API title names the contract."""
        assert _convert(OPENAPI_FILE, "openapi").document.name == "Users API"

    def test_non_mapping_schemas_wrapped(self):
        """Test a malformed components section fails as a source parse error."""
        with pytest.raises(SourceParseFailedError) as exc_info:
            convert("openapi", "openapi: 3.0.0\ncomponents:\n  schemas: [1]\n")

        assert exc_info.value.source_format == "openapi"
        assert "'components.schemas' must be a mapping" in str(exc_info.value)


class TestODCLConversion:
    """Tests for converting ODCL data contracts."""

    @pytest.fixture
    def result(self):
        """Convert the shipments contract, detecting its format."""
        return convert(None, ODCL_FILE.read_text())

    def test_contract_metadata(self, result):
        """Test contract id, version and status come from the data contract."""
        document = result.document

        assert document.id == "urn:datacontract:logistics:shipments"
        assert document.name == "shipments"
        assert document.version == "1.2.0"
        assert document.status == "active"
        assert document.custom_properties["sourceFormat"] == "odcl"
        assert document.custom_properties["owner"] == "logistics-team"
        assert document.tags == [SimpleTag("logistics"), PairTag("owner", "fulfilment")]

    def test_models_in_order(self, result):
        """Test each model becomes a schema object."""
        assert result.document.list_objects() == ["shipments", "carriers"]

    def test_types(self, result):
        """Test data contract types map to canonical types."""
        shipments = result.document.get_object("shipments")

        assert shipments.get_property("shipped_at").logical_type == "timestamp"
        assert shipments.get_property("leg_no").logical_type == "integer"
        weight = shipments.get_property("weight_kg")
        assert weight.logical_type == "number"
        assert weight.logical_type_options["precision"] == 8
        assert weight.description == "Gross weight in kilograms"

    def test_map_is_lossy(self, result):
        """Test map fields become objects, flagged as heuristic."""
        entry = _entry(result.report, "shipments", "attributes")

        assert entry.target_type == "object"
        assert entry.heuristic

    def test_keys_and_references(self, result):
        """Test model keys and field references."""
        shipments = result.document.get_object("shipments")
        carrier_id = shipments.get_property("carrier_id")

        assert shipments.get_property("leg_no").primary_key_position == 2
        assert [(r.type, r.to) for r in carrier_id.relationships] == [("foreignKey", "carriers.id")]
        assert result.document.get_object("carriers").get_property("id").primary_key

    def test_count(self, result):
        """Test nested and array item fields are counted."""
        assert result.report.field_count == 15
        assert result.report.source_format == "odcl"


# =============================================================================
# Nested Object Strategy Tests
# =============================================================================

class TestNestedObjectStrategies:
    """Tests for preserve, flatten and reference_by_name."""

    def test_default_is_preserve(self):
        """Test nested objects stay nested by default."""
        result = _convert(JSON_SCHEMA_FILE, "jsonschema")

        assert result.report.strategy == "preserve"
        address = result.document.get_object("User").get_property("address")
        assert [p.name for p in address.properties] == ["street", "city", "country"]

    def test_flatten(self):
        """Test flatten replaces objects by dotted leaves."""
        result = _convert(JSON_SCHEMA_FILE, "jsonschema", nested_object_strategy=NestedObjectStrategy.FLATTEN)
        user = result.document.get_object("User")
        names = [p.name for p in user.properties]

        assert "address" not in names
        assert "address.street" in names
        assert "address.city" in names

    def test_flatten_array_of_objects(self):
        """Test arrays of objects keep the array and flatten its members."""
        user = _convert(
            JSON_SCHEMA_FILE,
            "jsonschema",
            nested_object_strategy=NestedObjectStrategy.FLATTEN,
        ).document.get_object("User")
        names = [p.name for p in user.properties]

        assert names[-3:] == ["phones", "phones.[].kind", "phones.[].number"]
        assert user.get_property("phones").items.properties is None

    def test_flatten_does_not_change_report(self):
        """Test the report is the same whatever the strategy."""
        preserved = _convert(DDL_FILE, "sql")
        flattened = _convert(DDL_FILE, "sql", nested_object_strategy=NestedObjectStrategy.FLATTEN)

        assert flattened.report.field_count == preserved.report.field_count
        assert [e.path for e in flattened.report.entries] == [e.path for e in preserved.report.entries]

    def test_reference_by_name(self):
        """Test nested objects are lifted into their own objects."""
        result = _convert(PROTOBUF_FILE, "protobuf", nested_object_strategy=NestedObjectStrategy.REFERENCE_BY_NAME)
        document = result.document

        assert document.list_objects() == ["User", "Address", "user_address"]
        assert result.report.lifted_entities == ["user_address"]

        address = document.get_object("User").get_property("address")
        assert address.properties is None
        assert [(r.type, r.to) for r in address.relationships] == [("reference", "user_address")]

        lifted = document.get_object("user_address")
        assert lifted.custom_properties == {"liftedFrom": "User.address"}
        assert [p.name for p in lifted.properties] == ["street", "city", "postal_code"]

    def test_reference_by_name_array_items(self):
        """Test object array items are lifted too."""
        result = _convert(
            JSON_SCHEMA_FILE,
            "jsonschema",
            nested_object_strategy=NestedObjectStrategy.REFERENCE_BY_NAME,
        )

        assert result.document.list_objects() == ["User", "Address", "user_address", "user_phones"]
        phones = result.document.get_object("User").get_property("phones")
        assert phones.items.properties is None
        assert phones.relationships[0].to == "user_phones"

    def test_lifted_parents_before_children(self):
        """Test a lifted object precedes the objects lifted out of it."""
        result = convert(
            "jsonschema",
            '{"title": "A", "type": "object", "properties": {'
            '"b": {"type": "object", "properties": {'
            '"c": {"type": "object", "properties": {"d": {"type": "string"}}}}}}}',
            ConversionOptions(nested_object_strategy="reference_by_name"),
        )

        assert result.document.list_objects() == ["A", "a_b", "a_b_c"]
        assert result.document.get_object("a_b").get_property("c").relationships[0].to == "a_b_c"

    def test_lifted_name_clash(self):
        """Test a lifted name never collides with an existing entity."""
        result = convert(
            "jsonschema",
            '{"title": "A", "type": "object",'
            ' "properties": {"b": {"type": "object", "properties": {"x": {"type": "string"}}}},'
            ' "$defs": {"a_b": {"type": "object", "properties": {"y": {"type": "string"}}}}}',
            ConversionOptions(nested_object_strategy="reference_by_name"),
        )

        assert result.document.list_objects() == ["A", "a_b", "a_b_2"]


# =============================================================================
# Contract Metadata Tests
# =============================================================================

class TestContractMetadata:
    """Tests for contract-level fields."""

    def test_odcs_metadata_kept(self):
        """Test an ODCS source keeps its contract fields."""
        document = _convert(ODCS_FILE, "odcs").document

        assert document.id == "orders-contract"
        assert document.version == "1.2.0"
        assert document.status == "active"
        assert document.domain == "sales"
        assert document.tags == [SimpleTag("finance"), PairTag("owner", "sales-data")]
        assert document.custom_properties == {"owner": "sales-data", "sourceFormat": "odcs"}

    def test_odcs_properties_kept(self):
        """Test ODCS properties survive conversion."""
        orders = _convert(ODCS_FILE, "odcs").document.get_object("orders")

        assert orders.physical_name == "sales.orders"
        assert orders.get_property("status").enum == ["open", "shipped", "cancelled"]
        assert orders.get_property("order_id").primary_key_position == 1
        assert orders.get_property("customer_id").relationships[0].to == "customers.id"
        assert orders.get_property("ordered_at").tags == [SimpleTag("pii")]

    def test_explicit_options_win(self):
        """Test explicitly set options override source metadata."""
        document = _convert(ODCS_FILE, "odcs", contract_version="9.0.0", contract_name="renamed").document

        assert document.version == "9.0.0"
        assert document.name == "renamed"
        assert document.status == "active"

    def test_options_fill_missing_metadata(self):
        """Test options supply what the source does not carry."""
        document = _convert(DDL_FILE, "sql", domain="sales", status="active").document

        assert document.domain == "sales"
        assert document.status == "active"

    def test_stable_generated_id(self):
        """Test generated ids are stable for the same name."""
        first = _convert(DDL_FILE, "sql").document.id
        second = _convert(DDL_FILE, "sql").document.id
        assert first == second

    def test_empty_document(self):
        """Test a source with no entities gives an empty contract."""
        result = convert("sql", "-- no tables")

        assert result.document.schema_objects == []
        assert result.report.field_count == 0


# =============================================================================
# Error Handling Tests
# =============================================================================

class TestConversionErrors:
    """Tests for refused and failed conversions."""

    def test_cads_refused(self):
        """Test CADS assets cannot become contracts."""
        with pytest.raises(UnsupportedFormatError, match="CADS assets describe compute"):
            convert("cads", CADS_FILE.read_text())

    def test_odps_refused_with_contract_ids(self):
        """Test ODPS conversion names the referenced contracts."""
        with pytest.raises(UnsupportedFormatError) as exc_info:
            convert(None, ODPS_FILE.read_text())

        message = str(exc_info.value)
        assert "crm-customers, orders-contract, customer-profile" in message
        assert exc_info.value.format == "odps"

    def test_import_error_wrapped(self):
        """Test importer failures become SourceParseFailedError."""
        with pytest.raises(SourceParseFailedError) as exc_info:
            convert(
                "avro",
                '{"type": "record", "name": "R", "fields": [{"name": "x", "type": "Missing"}]}',
            )

        error = exc_info.value
        assert error.source_format == "avro"
        assert error.entity == "R"
        assert "Unknown Avro type 'Missing'" in str(error)

    def test_undetectable_source(self):
        """Test auto-detection failure."""
        with pytest.raises(UnsupportedFormatError):
            convert(None, "plain words")

    def test_unknown_format_name(self):
        """Test an unknown explicit format."""
        with pytest.raises(UnsupportedFormatError):
            convert("cobol", "01 RECORD.")


# =============================================================================
# Convenience Function Tests
# =============================================================================

class TestConvenienceFunctions:
    """Tests for convert, convert_to_odcs and ConversionResult.render."""

    def test_auto_detect(self):
        """Test the source format is detected when omitted."""
        result = convert(None, DDL_FILE.read_text())
        assert result.report.source_format == "sql"

    def test_convert_to_odcs(self):
        """Test ODCS YAML output."""
        data = yaml.safe_load(convert_to_odcs(DDL_FILE.read_text(), "sql"))

        assert data["apiVersion"] == "v3.1.0"
        assert data["kind"] == "DataContract"
        assert [obj["name"] for obj in data["schema"]] == ["users", "orders"]

    def test_options_file(self):
        """Test the example options file drives a conversion."""
        result = UniversalConverter(load_options(OPTIONS_DIR / "conversion-options.yaml")).convert(
            "sql", DDL_FILE.read_text()
        )
        document = result.document

        assert document.name == "shop"
        assert document.version == "2.0.0"
        assert _entry(result.report, "users", "location").rule == MappingRule.OVERRIDE
        assert "shipping.city" in [p.name for p in document.get_object("orders").properties]

    def test_result_render(self):
        """Test rendering a result in another format."""
        result = convert("sql", DDL_FILE.read_text())
        assert result.render(SchemaFormat.SQL).startswith("CREATE TABLE users (")
