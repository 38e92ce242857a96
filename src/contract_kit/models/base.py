"""Shared pydantic base for YAML documents with camelCase keys."""

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Model whose fields read and write camelCase keys.

    Unknown keys are kept, so a document survives a load/dump cycle even
    when it carries fields this package does not model.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    def to_dict(self) -> dict[str, Any]:
        """Dump with camelCase keys, leaving out unset optional values."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
