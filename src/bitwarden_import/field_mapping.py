"""Mapping tables from Bitwarden sub-objects to entry attributes.

Identity and card sub-objects are mapped through declarative tables so that
extending coverage means adding rows here, not branching in the entry
builder. Only the postal address is mapped for identities; cards are
recognized but contribute nothing yet.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from bitwarden_import.attributes import AttributeCollection


def source_text(source: dict[str, Any], key: str) -> str:
    """Return source[key] as a string, mapping missing/null values to ""."""
    value = source.get(key)
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


@dataclass(frozen=True)
class FieldMapping:
    """Copies one source key into one attribute."""

    source_key: str
    attribute: str
    protected: bool = False

    def render(self, source: dict[str, Any]) -> str:
        return source_text(source, self.source_key)


@dataclass(frozen=True)
class CompositeMapping:
    """Renders several source keys into one attribute through a template.

    The template uses str.format() placeholders named after source keys.
    """

    template: str
    source_keys: tuple[str, ...]
    attribute: str
    protected: bool = False

    def render(self, source: dict[str, Any]) -> str:
        return self.template.format(**{key: source_text(source, key) for key in self.source_keys})


Mapping = FieldMapping | CompositeMapping

IDENTITY_MAPPINGS: tuple[Mapping, ...] = (
    CompositeMapping(
        template="{address1}\n{city}, {state} {postalCode}\n{country}",
        source_keys=("address1", "city", "state", "postalCode", "country"),
        attribute="identity_address",
    ),
)

# cardholderName, brand, number, expMonth, expYear, code are not mapped yet
CARD_MAPPINGS: tuple[Mapping, ...] = ()


def apply_mappings(
    source: Any,
    mappings: tuple[Mapping, ...],
    attributes: AttributeCollection,
) -> list[str]:
    """Write every mapping in the table into attributes.

    Args:
        source: The sub-object from the export. Anything that is not a dict
            is treated as empty.
        mappings: The table to apply.
        attributes: Destination collection.

    Returns:
        Names of the attributes that were set, in table order.
    """
    if not isinstance(source, dict):
        source = {}

    written: list[str] = []
    for mapping in mappings:
        attributes.set(mapping.attribute, mapping.render(source), mapping.protected)
        written.append(mapping.attribute)
    return written
