"""Contract Validator - checks ODCS documents and canonical contracts.

The validator ensures:
- ODCS mappings match the bundled ODCS v3.1.0 subset schema
- Object names and property names are unique
- Tags follow the tag grammar
- Conversions left no unmapped fields unnoticed
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

import jsonschema
import yaml

from contract_kit.convert.report import ConversionReport
from contract_kit.errors import EmptyTagError
from contract_kit.models.contract import ContractDocument
from contract_kit.models.tag import parse_tag
from contract_kit.validation.odcs_schema import ODCS_SCHEMA

logger = logging.getLogger(__name__)


class ValidationSeverity(str, Enum):
    """Severity levels for validation issues."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass
class ValidationIssue:
    """A single validation issue."""

    severity: ValidationSeverity
    message: str
    path: str = ""
    context: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "severity": self.severity.value,
            "message": self.message,
            "path": self.path,
            "context": self.context,
        }


@dataclass
class ValidationResult:
    """Result of a validation operation."""

    valid: bool
    issues: list[ValidationIssue] = field(default_factory=list)

    @property
    def errors(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == ValidationSeverity.ERROR]

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == ValidationSeverity.WARNING]

    def add_issue(
        self,
        severity: ValidationSeverity,
        message: str,
        path: str = "",
        **context: Any,
    ) -> None:
        self.issues.append(
            ValidationIssue(
                severity=severity,
                message=message,
                path=path,
                context=context,
            )
        )
        if severity == ValidationSeverity.ERROR:
            self.valid = False

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        """Merge another validation result into this one."""
        return ValidationResult(
            valid=self.valid and other.valid,
            issues=self.issues + other.issues,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "error_count": len(self.errors),
            "warning_count": len(self.warnings),
            "issues": [i.to_dict() for i in self.issues],
        }


class ContractValidator:
    """Validates ODCS mappings, ODCS YAML text and canonical contracts."""

    def __init__(self, schema: dict[str, Any] | None = None):
        """Initialize the validator.

        Args:
            schema: JSON Schema to validate ODCS mappings against
                (the bundled ODCS subset when omitted)
        """
        self.schema = schema or ODCS_SCHEMA
        self._validator = jsonschema.Draft202012Validator(self.schema)

    def validate_mapping(self, data: Any) -> ValidationResult:
        """Validate an ODCS mapping (parsed YAML/JSON).

        Every schema violation is reported, not only the first one.
        """
        result = ValidationResult(valid=True)

        errors = sorted(self._validator.iter_errors(data), key=lambda e: _format_path(e.absolute_path))
        for error in errors:
            result.add_issue(
                ValidationSeverity.ERROR,
                f"Schema validation failed: {error.message}",
                path=_format_path(error.absolute_path),
                schema_path=list(error.schema_path),
            )

        if isinstance(data, dict):
            self._check_mapping_tags(data, result)
            self._check_mapping_names(data, result)

        logger.debug("Validated ODCS mapping: %d issue(s)", len(result.issues))
        return result

    def validate_yaml(self, content: str) -> ValidationResult:
        """Validate ODCS YAML text."""
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            result = ValidationResult(valid=True)
            result.add_issue(ValidationSeverity.ERROR, f"Invalid YAML: {e}")
            return result

        if not isinstance(data, dict):
            result = ValidationResult(valid=True)
            result.add_issue(ValidationSeverity.ERROR, "ODCS document must be a mapping")
            return result

        return self.validate_mapping(data)

    def validate_file(self, path: Path | str) -> ValidationResult:
        """Validate an ODCS YAML file.

        Raises:
            FileNotFoundError: If the file does not exist
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Contract file not found: {path}")
        return self.validate_yaml(path.read_text())

    def validate_contract(
        self,
        document: ContractDocument,
        report: ConversionReport | None = None,
    ) -> ValidationResult:
        """Validate a canonical contract (and optionally its conversion report).

        Checks:
        - The rendered ODCS mapping matches the schema
        - No duplicate object names
        - No duplicate property names within an object or nested object
        - Objects with no properties (warning)
        - Unmapped and dropped fields of the report (warning)
        """
        result = self.validate_mapping(document.to_dict())

        if not document.schema_objects:
            result.add_issue(ValidationSeverity.WARNING, "Contract has no schema objects", path="schema")

        for i, obj in enumerate(document.schema_objects):
            if not obj.properties:
                result.add_issue(
                    ValidationSeverity.WARNING,
                    f"Schema object '{obj.name}' has no properties",
                    path=f"schema[{i}]",
                )

        if report is not None:
            for entry in report.unmapped:
                result.add_issue(
                    ValidationSeverity.WARNING,
                    f"Type '{entry.source_type}' was not mapped; passed through as {entry.target_type}",
                    path=f"{entry.entity}.{entry.path}",
                )
            for entry in report.dropped:
                result.add_issue(
                    ValidationSeverity.WARNING,
                    f"Field dropped: {entry.detail or entry.source_type}",
                    path=f"{entry.entity}.{entry.path}",
                )

        return result

    def _check_mapping_names(self, data: dict[str, Any], result: ValidationResult) -> None:
        objects = data.get("schema")
        if not isinstance(objects, list):
            return

        seen = set()
        for i, obj in enumerate(objects):
            if not isinstance(obj, dict):
                continue
            name = obj.get("name")
            if name in seen:
                result.add_issue(
                    ValidationSeverity.ERROR,
                    f"Duplicate schema object name: {name}",
                    path=f"schema[{i}].name",
                )
            seen.add(name)
            _check_property_names(obj.get("properties"), f"schema[{i}]", result)

    def _check_mapping_tags(self, data: dict[str, Any], result: ValidationResult) -> None:
        for path, tags in _iter_tag_lists(data, ""):
            if not isinstance(tags, list):
                continue
            for j, tag in enumerate(tags):
                try:
                    parse_tag(str(tag))
                except EmptyTagError:
                    result.add_issue(
                        ValidationSeverity.ERROR,
                        "Tag must not be empty",
                        path=f"{path}tags[{j}]",
                    )


def _format_path(path: Any) -> str:
    parts = []
    for part in path:
        if isinstance(part, int):
            parts.append(f"[{part}]")
        else:
            parts.append(f".{part}" if parts else str(part))
    return "".join(parts)


def _check_property_names(properties: Any, path: str, result: ValidationResult) -> None:
    if not isinstance(properties, list):
        return

    seen = set()
    for i, prop in enumerate(properties):
        if not isinstance(prop, dict):
            continue
        prop_path = f"{path}.properties[{i}]"
        name = prop.get("name")
        if name in seen:
            result.add_issue(
                ValidationSeverity.ERROR,
                f"Duplicate property name: {name}",
                path=f"{prop_path}.name",
            )
        seen.add(name)
        _check_property_names(prop.get("properties"), prop_path, result)
        items = prop.get("items")
        if isinstance(items, dict):
            _check_property_names(items.get("properties"), f"{prop_path}.items", result)


def _iter_tag_lists(node: Any, path: str):
    """Yield ``(path prefix, tags)`` for every ``tags`` key in a mapping tree."""
    if isinstance(node, dict):
        if "tags" in node:
            yield path + ("." if path else ""), node["tags"]
        for key, value in node.items():
            if key != "tags":
                yield from _iter_tag_lists(value, f"{path}.{key}" if path else key)
    elif isinstance(node, list):
        for i, value in enumerate(node):
            yield from _iter_tag_lists(value, f"{path}[{i}]")


def validate_contract_file(path: Path | str) -> ValidationResult:
    """Validate an ODCS YAML file with the bundled schema."""
    return ContractValidator().validate_file(path)
