"""Contract validation against the bundled ODCS schema."""

from contract_kit.validation.validator import (
    ContractValidator,
    ValidationIssue,
    ValidationResult,
    ValidationSeverity,
    validate_contract_file,
)

__all__ = [
    "ContractValidator",
    "ValidationIssue",
    "ValidationResult",
    "ValidationSeverity",
    "validate_contract_file",
]
