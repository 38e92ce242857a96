"""Conversion report: how each source field was mapped."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class MappingRule(str, Enum):
    """Which rule decided a field's logical type."""

    OVERRIDE = "override"
    DEFAULT = "default"
    STRUCTURAL = "structural"
    UNMAPPED = "unmapped"
    DROPPED = "dropped"


@dataclass
class FieldMapping:
    """Mapping decision for one source field."""

    entity: str
    path: str
    source_type: str
    target_type: str | None
    rule: MappingRule
    heuristic: bool = False
    rule_pattern: str | None = None
    detail: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "entity": self.entity,
            "path": self.path,
            "source_type": self.source_type,
            "target_type": self.target_type,
            "rule": self.rule.value,
            "heuristic": self.heuristic,
            "rule_pattern": self.rule_pattern,
            "detail": self.detail,
        }


@dataclass
class ConversionReport:
    """Report of a conversion, one entry per source field in source order."""

    source_format: str
    strategy: str
    entries: list[FieldMapping] = field(default_factory=list)
    lifted_entities: list[str] = field(default_factory=list)

    @property
    def field_count(self) -> int:
        return len(self.entries)

    @property
    def heuristic_count(self) -> int:
        return sum(1 for e in self.entries if e.heuristic)

    @property
    def unmapped(self) -> list[FieldMapping]:
        return [e for e in self.entries if e.rule == MappingRule.UNMAPPED]

    @property
    def dropped(self) -> list[FieldMapping]:
        return [e for e in self.entries if e.rule == MappingRule.DROPPED]

    def add(self, entry: FieldMapping) -> None:
        self.entries.append(entry)

    def entries_for(self, entity: str) -> list[FieldMapping]:
        return [e for e in self.entries if e.entity == entity]

    def to_dict(self) -> dict[str, Any]:
        return {
            "source_format": self.source_format,
            "strategy": self.strategy,
            "field_count": self.field_count,
            "heuristic_count": self.heuristic_count,
            "unmapped_count": len(self.unmapped),
            "dropped_count": len(self.dropped),
            "lifted_entities": list(self.lifted_entities),
            "entries": [e.to_dict() for e in self.entries],
        }
