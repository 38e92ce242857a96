"""Conversion options and their YAML loader."""

import re
from enum import Enum
from pathlib import Path
from typing import Any, Iterable

import yaml
from pydantic import BaseModel, Field, field_validator

from contract_kit.models.contract import LOGICAL_TYPES
from contract_kit.schemas.base import SchemaFormat


class NestedObjectStrategy(str, Enum):
    """How nested objects are laid out in the canonical document."""

    FLATTEN = "flatten"
    PRESERVE = "preserve"
    REFERENCE_BY_NAME = "reference_by_name"


class TypeMappingRule(BaseModel):
    """User override mapping source types to a canonical logical type.

    ``pattern`` is a regular expression matched against the whole source
    type, ignoring case. Rules are tried in order; the first match wins.
    """

    pattern: str = Field(..., description="Regular expression for the source type")
    target_type: str = Field(..., description="Canonical logical type")
    source_format: SchemaFormat | None = Field(
        default=None,
        description="Only apply to fields imported from this format",
    )
    format: str | None = Field(
        default=None,
        description="Only apply when the field's format hint equals this",
    )

    @field_validator("pattern")
    @classmethod
    def _check_pattern(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as e:
            raise ValueError(f"Invalid pattern '{value}': {e}") from e
        return value

    @field_validator("target_type")
    @classmethod
    def _check_target_type(cls, value: str) -> str:
        value = value.lower()
        if value not in LOGICAL_TYPES:
            raise ValueError(
                f"Unknown logical type '{value}'. Available: {', '.join(LOGICAL_TYPES)}"
            )
        return value

    @field_validator("source_format", mode="before")
    @classmethod
    def _parse_source_format(cls, value: Any) -> Any:
        if isinstance(value, str):
            return SchemaFormat.parse(value)
        return value

    def matches(
        self,
        source_type: str,
        source_format: SchemaFormat | None = None,
        format: str | None = None,
    ) -> bool:
        """Whether this rule applies to a field."""
        if self.source_format is not None and self.source_format != source_format:
            return False
        if self.format is not None and self.format != format:
            return False
        return re.fullmatch(self.pattern, source_type, re.IGNORECASE) is not None


class ConversionOptions(BaseModel):
    """Options for one conversion."""

    nested_object_strategy: NestedObjectStrategy = Field(
        default=NestedObjectStrategy.PRESERVE,
        description="Layout of nested objects",
    )
    type_mapping_rules: list[TypeMappingRule] = Field(
        default_factory=list,
        description="Ordered type overrides, tried before the built-in tables",
    )
    contract_name: str | None = Field(default=None, description="Name for the canonical contract")
    contract_version: str = Field(default="1.0.0", description="Version for the canonical contract")
    status: str = Field(default="draft", description="Status for the canonical contract")
    domain: str | None = Field(default=None, description="Domain for the canonical contract")

    def find_rule(
        self,
        source_types: str | Iterable[str],
        source_format: SchemaFormat | None = None,
        format: str | None = None,
    ) -> TypeMappingRule | None:
        """Return the first rule matching a field, or None.

        Rules are tried in order; each rule is checked against every
        candidate spelling of the source type before the next rule is tried.
        """
        candidates = [source_types] if isinstance(source_types, str) else list(source_types)
        for rule in self.type_mapping_rules:
            if any(rule.matches(candidate, source_format, format) for candidate in candidates):
                return rule
        return None


class OptionsLoader:
    """Loads conversion options from YAML files."""

    def load_file(self, path: Path | str) -> ConversionOptions:
        """Load options from a YAML file.

        Args:
            path: Path to the YAML file

        Returns:
            Loaded ConversionOptions
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Options file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f)

        return self._parse_options(data)

    def load_from_string(self, content: str) -> ConversionOptions:
        """Load options from a YAML string.

        Args:
            content: YAML content as string

        Returns:
            Loaded ConversionOptions
        """
        data = yaml.safe_load(content)
        return self._parse_options(data)

    def _parse_options(self, data: dict[str, Any] | None) -> ConversionOptions:
        """Parse options data from YAML structure."""
        if data is None:
            return ConversionOptions()
        if not isinstance(data, dict):
            raise ValueError("Options file must contain a mapping")
        return ConversionOptions.model_validate(data)

    def save_file(self, options: ConversionOptions, path: Path | str) -> None:
        """Save options to a YAML file.

        Args:
            options: The options to save
            path: Path for the output file
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        data = self._options_to_dict(options)

        with open(path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    def _options_to_dict(self, options: ConversionOptions) -> dict[str, Any]:
        """Convert options to a dictionary for YAML serialization."""
        return options.model_dump(mode="json", exclude_none=True)


def load_options(path: Path | str) -> ConversionOptions:
    """Convenience function to load conversion options.

    Args:
        path: Path to the YAML file

    Returns:
        Loaded ConversionOptions
    """
    loader = OptionsLoader()
    return loader.load_file(path)
