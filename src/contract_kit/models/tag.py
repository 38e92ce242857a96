"""Tag support with Simple, Pair, and List forms.

Tags are free-form labels attached to contracts, schema objects, properties,
assets and ports. Three surface forms are recognised:

- Simple: ``finance``
- Pair: ``Environment:Dev``
- List: ``SecondaryDomains:[XXXXX, PPPP]``

Parsing never fails on odd input: anything that does not cleanly match the
Pair or List form becomes a Simple tag holding the trimmed text. Only the
empty string is rejected, with :class:`EmptyTagError`.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Annotated, Any, Iterable

from pydantic import BeforeValidator, PlainSerializer, PlainValidator

from contract_kit.errors import EmptyTagError

logger = logging.getLogger(__name__)

SIMPLE = "simple"
PAIR = "pair"
LIST = "list"


def _classify(text: str) -> tuple:
    """Classify tag text without building a Tag.

    Returns one of ``(SIMPLE, text)``, ``(PAIR, key, value)`` or
    ``(LIST, key, values)``.
    """
    text = text.strip()
    if not text:
        raise EmptyTagError(text)

    key, sep, remainder = text.partition(":")
    if not sep:
        return (SIMPLE, text)

    key = key.strip()
    remainder = remainder.strip()

    if remainder.startswith("[") and remainder.endswith("]"):
        values = tuple(
            v.strip() for v in remainder[1:-1].split(",") if v.strip()
        )
        if key and values:
            return (LIST, key, values)
        # Bracket form with no key or no values is never a Pair
        return (SIMPLE, text)

    # More than one colon outside the bracket form is ambiguous
    if ":" in remainder:
        return (SIMPLE, text)

    if key and remainder:
        return (PAIR, key, remainder)

    return (SIMPLE, text)


@dataclass(frozen=True)
class Tag(ABC):
    """Base class for the three tag forms.

    Tags are immutable values; change one by replacing it.
    """

    @property
    @abstractmethod
    def kind(self) -> str:
        """One of ``simple``, ``pair`` or ``list``."""

    @classmethod
    def parse(cls, text: str) -> "Tag":
        """Parse tag text. See :func:`parse_tag`."""
        return parse_tag(text)

    def __str__(self) -> str:
        return serialize_tag(self)


@dataclass(frozen=True)
class SimpleTag(Tag):
    """A single opaque label."""

    text: str

    def __post_init__(self):
        if not isinstance(self.text, str):
            raise TypeError("Simple tag text must be a string")
        if _classify(self.text) != (SIMPLE, self.text):
            raise ValueError(f"'{self.text}' is not a canonical simple tag")

    @property
    def kind(self) -> str:
        return SIMPLE


@dataclass(frozen=True)
class PairTag(Tag):
    """A ``key:value`` tag."""

    key: str
    value: str

    def __post_init__(self):
        if _classify(f"{self.key}:{self.value}") != (PAIR, self.key, self.value):
            raise ValueError(
                f"'{self.key}:{self.value}' is not a canonical pair tag"
            )

    @property
    def kind(self) -> str:
        return PAIR


@dataclass(frozen=True)
class ListTag(Tag):
    """A ``key:[v1, v2, ...]`` tag. Values keep declaration order and duplicates."""

    key: str
    values: tuple[str, ...]

    def __post_init__(self):
        object.__setattr__(self, "values", tuple(self.values))
        serialized = f"{self.key}:[{', '.join(self.values)}]"
        if _classify(serialized) != (LIST, self.key, self.values):
            raise ValueError(f"'{serialized}' is not a canonical list tag")

    @property
    def kind(self) -> str:
        return LIST


def parse_tag(text: str) -> Tag:
    """Parse a tag string.

    Args:
        text: Tag text, e.g. ``finance``, ``Environment:Dev`` or
            ``Domains:[A, B]``

    Returns:
        The parsed Tag

    Raises:
        EmptyTagError: If the text is empty or whitespace-only
    """
    parsed = _classify(text)
    if parsed[0] == LIST:
        return ListTag(parsed[1], parsed[2])
    if parsed[0] == PAIR:
        return PairTag(parsed[1], parsed[2])
    return SimpleTag(parsed[1])


def serialize_tag(tag: Tag) -> str:
    """Render a tag in canonical form.

    List values are always joined with ``", "`` whatever the original
    spacing was.
    """
    if isinstance(tag, SimpleTag):
        return tag.text
    if isinstance(tag, PairTag):
        return f"{tag.key}:{tag.value}"
    if isinstance(tag, ListTag):
        return f"{tag.key}:[{', '.join(tag.values)}]"
    raise TypeError(f"Not a tag: {tag!r}")


def split_tag_string(text: str) -> list[str]:
    """Split a comma-separated tag string on commas outside brackets."""
    parts = []
    current = []
    depth = 0

    for char in text:
        if char == "[":
            depth += 1
            current.append(char)
        elif char == "]":
            depth = max(depth - 1, 0)
            current.append(char)
        elif char == "," and depth == 0:
            parts.append("".join(current))
            current = []
        else:
            current.append(char)

    if current:
        parts.append("".join(current))

    return parts


def parse_tags(values: Iterable[Any] | str | None) -> list[Tag]:
    """Parse a collection of tags, skipping empty ones.

    One bad tag must not block a whole document import, so empty entries are
    logged and dropped while the rest keep their order.

    Args:
        values: Tag strings or Tag instances, a single comma-separated
            string, or None

    Returns:
        List of parsed tags
    """
    if values is None:
        return []
    if isinstance(values, str):
        values = split_tag_string(values)

    tags: list[Tag] = []
    for value in values:
        if isinstance(value, Tag):
            tags.append(value)
            continue
        if value is None:
            logger.warning("Skipping empty tag")
            continue
        try:
            tags.append(parse_tag(str(value)))
        except EmptyTagError:
            logger.warning("Skipping empty tag")

    return tags


def tags_to_strings(tags: Iterable[Tag]) -> list[str]:
    """Serialize tags to their canonical strings."""
    return [serialize_tag(t) for t in tags]


def _coerce_tag(value: Any) -> Tag:
    if isinstance(value, Tag):
        return value
    if isinstance(value, str):
        return parse_tag(value)
    raise ValueError(f"Tag must be a string, got {type(value).__name__}")


# Model field types: strings are parsed on input, tags render back to strings
TagValue = Annotated[
    Tag,
    PlainValidator(_coerce_tag),
    PlainSerializer(serialize_tag, return_type=str),
]
TagList = Annotated[list[TagValue], BeforeValidator(parse_tags)]
