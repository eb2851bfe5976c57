"""Attribute storage for imported credential entries.

Every value that does not map to a first-class entry field (custom fields,
secondary URLs, synthesized identity data) lands in an entry's
AttributeCollection as a named value with a protected flag.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass


@dataclass
class Attribute:
    """A single named attribute value.

    Attributes:
        value: The stored string value.
        protected: Whether the value is sensitive and should be hidden.
    """

    value: str
    protected: bool = False


class AttributeCollection:
    """Ordered mapping of attribute name to value and protected flag.

    Keys are unique within one collection. Use unique_key() to derive a
    free name before inserting values that must not replace existing ones.

    Example:
        >>> attributes = AttributeCollection()
        >>> attributes.set("color", "blue")
        >>> attributes.unique_key("color")
        'color_1'
        >>> attributes.has_key("color")
        True
    """

    def __init__(self) -> None:
        """Initialize an empty collection."""
        self._attributes: dict[str, Attribute] = {}

    def set(self, name: str, value: str, protected: bool = False) -> None:
        """Insert or replace the value stored under name.

        Args:
            name: Attribute name.
            value: Attribute value. None is stored as an empty string.
            protected: Whether the value is sensitive.
        """
        self._attributes[name] = Attribute(
            value="" if value is None else str(value),
            protected=protected,
        )

    def has_key(self, name: str) -> bool:
        """Check whether an attribute with this name exists."""
        return name in self._attributes

    def get(self, name: str, default: str | None = None) -> str | None:
        """Get the value stored under name, or default if absent."""
        attribute = self._attributes.get(name)
        if attribute is None:
            return default
        return attribute.value

    def is_protected(self, name: str) -> bool:
        """Return the protected flag for name (False when absent)."""
        attribute = self._attributes.get(name)
        return attribute.protected if attribute is not None else False

    def unique_key(self, name: str) -> str:
        """Return a name that is not yet used in this collection.

        The name itself is returned when free. Otherwise a numeric suffix
        is appended, trying name_1, name_2, ... until a free key is found.

        Args:
            name: The preferred attribute name.

        Returns:
            A key that has_key() reports as absent.
        """
        if name not in self._attributes:
            return name

        counter = 1
        while f"{name}_{counter}" in self._attributes:
            counter += 1
        return f"{name}_{counter}"

    def keys(self) -> list[str]:
        """Return attribute names in insertion order."""
        return list(self._attributes)

    def items(self) -> list[tuple[str, Attribute]]:
        """Return (name, Attribute) pairs in insertion order."""
        return list(self._attributes.items())

    def __contains__(self, name: object) -> bool:
        return name in self._attributes

    def __iter__(self) -> Iterator[str]:
        return iter(self._attributes)

    def __len__(self) -> int:
        return len(self._attributes)

    def __repr__(self) -> str:
        return f"AttributeCollection(keys={self.keys()!r})"
