"""Universal converter: generic schema documents to canonical contracts.

A conversion imports the source text, maps every field's type to a
canonical logical type, lays nested objects out according to the chosen
strategy and records each decision in a :class:`ConversionReport`. It either
returns the full result or raises; nothing is partially applied.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Any

from contract_kit.convert.naming import SyntheticNamer
from contract_kit.convert.options import ConversionOptions, NestedObjectStrategy
from contract_kit.convert.report import ConversionReport, FieldMapping, MappingRule
from contract_kit.convert.type_mapping import lookup_default
from contract_kit.errors import SchemaImportError, SourceParseFailedError, UnsupportedFormatError
from contract_kit.models.contract import (
    ContractDocument,
    Relationship,
    SchemaObject,
    SchemaProperty,
)
from contract_kit.registry import FormatRegistry, get_global_registry
from contract_kit.schemas.base import FieldSchema, SchemaDefinition, SchemaDocument, SchemaFormat
from contract_kit.schemas.odps import ODPSParser
from contract_kit.schemas.parser import detect_format

logger = logging.getLogger(__name__)

# FieldSchema constraint attributes -> logicalTypeOptions keys
_LOGICAL_OPTION_KEYS = {
    "min_length": "minLength",
    "max_length": "maxLength",
    "pattern": "pattern",
    "minimum": "minimum",
    "maximum": "maximum",
    "precision": "precision",
    "scale": "scale",
    "min_items": "minItems",
    "max_items": "maxItems",
}


@dataclass
class ConversionResult:
    """Canonical document plus the report of how it was built."""

    document: ContractDocument
    report: ConversionReport
    registry: FormatRegistry | None = None

    def render(self, target_format: SchemaFormat | str) -> str:
        """Render the canonical document in a target format.

        Args:
            target_format: Format name or SchemaFormat

        Returns:
            Rendered document text
        """
        registry = self.registry or get_global_registry()
        return registry.get_exporter(target_format).render(self.document)


class _Conversion:
    """State of a single conversion run."""

    def __init__(self, document: SchemaDocument, options: ConversionOptions):
        self.document = document
        self.options = options
        self.source_format = document.source_format
        self.strategy = options.nested_object_strategy
        self.report = ConversionReport(
            source_format=self.source_format.value,
            strategy=self.strategy.value,
        )
        self.namer = SyntheticNamer(document.list_entities())
        self.lifted: list[SchemaObject] = []

    def run(self) -> ContractDocument:
        objects = []
        for entity in self.document.entities:
            logger.debug("Converting entity '%s' (%d fields)", entity.name, entity.count_fields())
            objects.append(self._convert_entity(entity))

        objects.extend(self.lifted)
        self.report.lifted_entities = [obj.name for obj in self.lifted]

        return self._build_contract(objects)

    def _build_contract(self, objects: list[SchemaObject]) -> ContractDocument:
        metadata = self.document.metadata
        options = self.options
        explicit = options.model_fields_set

        name = (
            options.contract_name
            or self.document.name
            or (self.document.entities[0].name if self.document.entities else None)
        )

        def pick(option: str, meta_key: str) -> Any:
            if option in explicit:
                return getattr(options, option)
            return metadata.get(meta_key) or getattr(options, option)

        custom = dict(metadata.get("custom_properties") or {})
        custom["sourceFormat"] = self.source_format.value

        return ContractDocument(
            id=metadata.get("id") or str(uuid.uuid5(uuid.NAMESPACE_URL, f"contract-kit:{name or ''}")),
            name=name,
            version=str(pick("contract_version", "version")),
            status=pick("status", "status"),
            domain=pick("domain", "domain"),
            data_product=metadata.get("data_product"),
            description=metadata.get("description"),
            tags=self.document.tags,
            schema_objects=objects,
            custom_properties=custom,
        )

    def _convert_entity(self, entity: SchemaDefinition) -> SchemaObject:
        properties = [self._convert_field(entity.name, field, field.name) for field in entity.fields]

        if self.strategy == NestedObjectStrategy.FLATTEN:
            properties = [leaf for prop in properties for leaf in _flatten(prop, "")]
        elif self.strategy == NestedObjectStrategy.REFERENCE_BY_NAME:
            properties = self._lift(properties, entity.name)

        physical_name = entity.metadata.get("physical_name")
        if not physical_name and entity.source_entity and entity.source_entity != entity.name:
            physical_name = entity.source_entity

        return SchemaObject(
            name=entity.name,
            physical_name=physical_name,
            physical_type=entity.metadata.get("physical_type") or "table",
            description=entity.description,
            tags=entity.tags,
            properties=properties,
            quality=entity.metadata.get("quality") or [],
            custom_properties=entity.metadata.get("custom_properties") or {},
        )

    def _resolve_type(self, field: FieldSchema) -> tuple[str, MappingRule, bool, str | None]:
        """Pick the logical type of a scalar field.

        Order: first matching override rule, then the built-in table, then
        passthrough as ``string``.

        Returns:
            Tuple of (logical type, rule, heuristic, rule pattern)
        """
        candidates = [field.type]
        if field.physical_type and field.physical_type != field.type:
            candidates.append(field.physical_type)

        rule = self.options.find_rule(candidates, self.source_format, field.format)
        if rule is not None:
            return rule.target_type, MappingRule.OVERRIDE, False, rule.pattern

        default = lookup_default(self.source_format, field.type, field.format)
        if default is not None:
            logical_type, lossy = default
            return logical_type, MappingRule.DEFAULT, lossy, None

        return "string", MappingRule.UNMAPPED, True, None

    def _convert_field(self, entity: str, field: FieldSchema, path: str) -> SchemaProperty:
        """Convert a field (and its nested fields), adding report entries."""
        source_type = field.physical_type or field.type

        # Only the first non-null branch of a union survives import
        union = field.metadata.get("union")
        detail = None
        if union:
            branches = ", ".join(
                b if isinstance(b, str) else str(b.get("name") or b.get("type")) for b in union
            )
            detail = f"Union [{branches}] narrowed to '{source_type}'"

        if field.is_object:
            self.report.add(FieldMapping(
                entity=entity,
                path=path,
                source_type=source_type,
                target_type="object",
                rule=MappingRule.STRUCTURAL,
                heuristic=bool(union),
                detail=detail,
            ))
            children = self._convert_children(entity, field.properties, path)
            return self._make_property(field, "object", properties=children)

        if field.is_array:
            entry = FieldMapping(
                entity=entity,
                path=path,
                source_type=source_type,
                target_type="array",
                rule=MappingRule.STRUCTURAL,
            )
            self.report.add(entry)
            items = self._convert_items(entity, field.items, path, entry)
            if union:
                entry.heuristic = True
                entry.detail = f"{detail}; {entry.detail}"
            return self._make_property(field, "array", items=items)

        logical_type, rule, heuristic, pattern = self._resolve_type(field)
        self.report.add(FieldMapping(
            entity=entity,
            path=path,
            source_type=source_type,
            target_type=logical_type,
            rule=rule,
            heuristic=heuristic or bool(union),
            rule_pattern=pattern,
            detail=detail,
        ))
        if rule == MappingRule.UNMAPPED:
            logger.warning(
                "Unmapped type '%s' for field '%s.%s'; passing through as string",
                source_type,
                entity,
                path,
            )
        return self._make_property(field, logical_type, passthrough=rule == MappingRule.UNMAPPED)

    def _convert_children(
        self,
        entity: str,
        fields: list[FieldSchema],
        path: str,
    ) -> list[SchemaProperty]:
        return [self._convert_field(entity, child, f"{path}.{child.name}") for child in fields]

    def _convert_items(
        self,
        entity: str,
        items: FieldSchema,
        path: str,
        entry: FieldMapping,
    ) -> SchemaProperty:
        """Convert an array element. The element has no report entry of its own."""
        item_path = f"{path}.[]"

        if items.is_object:
            entry.detail = "items: object"
            children = self._convert_children(entity, items.properties, item_path)
            return self._make_property(items, "object", properties=children)

        if items.is_array:
            entry.detail = "items: array"
            nested_entry = FieldMapping(entity, item_path, items.type, "array", MappingRule.STRUCTURAL)
            nested = self._convert_items(entity, items.items, item_path, nested_entry)
            entry.detail = f"items: array ({nested_entry.detail})"
            return self._make_property(items, "array", items=nested)

        logical_type, rule, heuristic, pattern = self._resolve_type(items)
        entry.detail = f"items: {items.physical_type or items.type} -> {logical_type} ({rule.value})"
        if heuristic:
            entry.heuristic = True
        if pattern:
            entry.rule_pattern = pattern
        return self._make_property(items, logical_type, passthrough=rule == MappingRule.UNMAPPED)

    def _make_property(
        self,
        field: FieldSchema,
        logical_type: str,
        properties: list[SchemaProperty] | None = None,
        items: SchemaProperty | None = None,
        passthrough: bool = False,
    ) -> SchemaProperty:
        physical_type = field.physical_type
        if physical_type is None and (passthrough or self.source_format != SchemaFormat.ODCS):
            physical_type = field.type

        options = {
            key: getattr(field, attr)
            for attr, key in _LOGICAL_OPTION_KEYS.items()
            if getattr(field, attr) is not None
        }
        if field.unique_items:
            options["uniqueItems"] = True
        if field.format:
            options["format"] = field.format

        metadata = field.metadata
        relationships = [
            Relationship(type=r.get("type", "foreignKey"), to=r["to"])
            for r in metadata.get("relationships") or []
            if isinstance(r, dict) and r.get("to")
        ]
        if metadata.get("references"):
            relationships.append(Relationship(type="foreignKey", to=metadata["references"]))

        return SchemaProperty(
            name=field.name,
            logical_type=logical_type,
            physical_type=physical_type,
            physical_name=metadata.get("physical_name"),
            description=field.description,
            required=field.required,
            primary_key=field.primary_key,
            primary_key_position=metadata.get("primary_key_position"),
            unique=field.unique,
            enum=field.enum,
            logical_type_options=options,
            default=field.default,
            examples=[field.example] if field.example is not None else [],
            tags=field.tags,
            properties=properties,
            items=items,
            relationships=relationships,
            quality=metadata.get("quality") or [],
            custom_properties=metadata.get("custom_properties") or {},
        )

    def _lift(self, properties: list[SchemaProperty], parent: str) -> list[SchemaProperty]:
        """Move nested objects into their own schema objects, linked by name."""
        result = []
        for prop in properties:
            if prop.properties is not None:
                lifted_name = self._lift_object(prop.properties, parent, prop.name)
                prop = prop.model_copy(update={
                    "properties": None,
                    "relationships": prop.relationships + [Relationship(type="reference", to=lifted_name)],
                })
            elif prop.items is not None and prop.items.properties is not None:
                lifted_name = self._lift_object(prop.items.properties, parent, prop.name)
                prop = prop.model_copy(update={
                    "items": prop.items.model_copy(update={"properties": None}),
                    "relationships": prop.relationships + [Relationship(type="reference", to=lifted_name)],
                })
            result.append(prop)
        return result

    def _lift_object(self, properties: list[SchemaProperty], parent: str, field_name: str) -> str:
        name = self.namer.name(parent, field_name)
        lifted = SchemaObject(
            name=name,
            physical_type="object",
            custom_properties={"liftedFrom": f"{parent}.{field_name}"},
        )
        # Appended before recursing so parents precede their own lifted children
        self.lifted.append(lifted)
        logger.debug("Lifted '%s.%s' into '%s'", parent, field_name, name)
        lifted.properties = self._lift(properties, name)
        return name


def _flatten(prop: SchemaProperty, prefix: str) -> list[SchemaProperty]:
    """Replace object properties by their leaves, named with dotted paths."""
    name = prefix + prop.name

    if prop.properties:
        leaves = []
        for child in prop.properties:
            leaves.extend(_flatten(child, name + "."))
        return leaves

    if prop.items is not None and prop.items.properties:
        array = prop.model_copy(update={
            "name": name,
            "items": prop.items.model_copy(update={"properties": None}),
        })
        leaves = [array]
        for child in prop.items.properties:
            leaves.extend(_flatten(child, name + ".[]."))
        return leaves

    return [prop.model_copy(update={"name": name})]


class UniversalConverter:
    """Converts documents of any supported format to canonical contracts."""

    def __init__(
        self,
        options: ConversionOptions | None = None,
        registry: FormatRegistry | None = None,
    ):
        """Initialize the converter.

        Args:
            options: Conversion options (defaults when omitted)
            registry: Format registry (the global one when omitted)
        """
        self.options = options or ConversionOptions()
        self.registry = registry

    def _registry(self) -> FormatRegistry:
        return self.registry or get_global_registry()

    def convert(self, source_format: SchemaFormat | str | None, source_text: str) -> ConversionResult:
        """Import source text and convert it.

        Args:
            source_format: Source format; None or "auto" detects it
            source_text: Document text

        Returns:
            ConversionResult

        Raises:
            UnsupportedFormatError: Unknown or undetectable format, or a
                format without table schemas (CADS, ODPS)
            SourceParseFailedError: The importer rejected the input
        """
        if source_format is None or source_format == "auto":
            fmt = detect_format(source_text)
            logger.debug("Detected source format: %s", fmt.value)
        else:
            fmt = SchemaFormat.parse(source_format)

        if fmt == SchemaFormat.CADS:
            raise UnsupportedFormatError(
                "CADS → ODCS conversion requires data schema information; "
                "CADS assets describe compute resources, not data structures",
                format=fmt.value,
            )
        if fmt == SchemaFormat.ODPS:
            try:
                product = ODPSParser.from_string(source_text).parse()
            except SchemaImportError as e:
                raise SourceParseFailedError(fmt.value, str(e), e.entity) from e
            contract_ids = product.referenced_contract_ids()
            listed = ", ".join(contract_ids) if contract_ids else "none"
            raise UnsupportedFormatError(
                "ODPS → ODCS conversion requires the referenced contract definitions; "
                f"referenced contractIds: {listed}",
                format=fmt.value,
            )

        importer = self._registry().get_importer(fmt)
        try:
            document = importer(source_text)
        except SchemaImportError as e:
            raise SourceParseFailedError(fmt.value, str(e), e.entity) from e

        return self.convert_document(document)

    def convert_document(self, document: SchemaDocument) -> ConversionResult:
        """Convert an already imported generic document.

        Args:
            document: Generic schema document

        Returns:
            ConversionResult
        """
        run = _Conversion(document, self.options)
        contract = run.run()
        logger.debug(
            "Converted %d entities, %d fields (%d heuristic)",
            len(document.entities),
            run.report.field_count,
            run.report.heuristic_count,
        )
        return ConversionResult(document=contract, report=run.report, registry=self.registry)


def convert(
    source_format: SchemaFormat | str | None,
    source_text: str,
    options: ConversionOptions | None = None,
) -> ConversionResult:
    """Convert source text to a canonical contract.

    Args:
        source_format: Source format; None or "auto" detects it
        source_text: Document text
        options: Conversion options

    Returns:
        ConversionResult
    """
    return UniversalConverter(options).convert(source_format, source_text)


def convert_to_odcs(
    text: str,
    format: SchemaFormat | str | None = None,
    options: ConversionOptions | None = None,
) -> str:
    """Convert any supported document to ODCS YAML.

    Args:
        text: Document text
        format: Source format; detected when omitted

    Returns:
        ODCS YAML of the canonical document
    """
    return convert(format, text, options).render(SchemaFormat.ODCS)
