"""Names for schema objects lifted out of nested fields."""

import re


class SyntheticNamer:
    """Hands out unique ``{parent}_{field}`` names.

    Names are lowercased with every non-alphanumeric character replaced by
    ``_``. A clash with a taken name gets ``_2``, ``_3``, ... appended,
    counted per base name. Comparisons ignore case.
    """

    def __init__(self, taken: list[str] | None = None):
        self._taken: set[str] = {name.lower() for name in taken or []}
        self._counters: dict[str, int] = {}

    @staticmethod
    def base_name(parent: str, field: str) -> str:
        return re.sub(r"[^a-z0-9]", "_", f"{parent}_{field}".lower())

    def reserve(self, name: str) -> None:
        self._taken.add(name.lower())

    def name(self, parent: str, field: str) -> str:
        """Return a fresh name for a field lifted out of ``parent``."""
        base = self.base_name(parent, field)
        candidate = base

        while candidate in self._taken:
            counter = self._counters.get(base, 1) + 1
            self._counters[base] = counter
            candidate = f"{base}_{counter}"

        self._taken.add(candidate)
        return candidate
