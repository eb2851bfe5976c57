"""In-memory credential store built by the importer.

A Store owns exactly one root Group. Imported folders become direct
children of the root and entries are owned through group membership.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol
from uuid import uuid4

from bitwarden_import.attributes import AttributeCollection
from bitwarden_import.totp import TotpSettings

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)

ROOT_GROUP_NAME = "Root"


class IdGenerator(Protocol):
    """Produces fresh unique identifiers for groups and entries."""

    def __call__(self) -> str: ...


def uuid4_generator() -> str:
    """Default id generator backed by random UUIDs."""
    return str(uuid4())


class SequentialIdGenerator:
    """Deterministic id generator for reproducible imports.

    Example:
        >>> ids = SequentialIdGenerator(prefix="id")
        >>> ids(), ids()
        ('id-1', 'id-2')
    """

    def __init__(self, prefix: str = "id", start: int = 1) -> None:
        self.prefix = prefix
        self._counter = itertools.count(start)

    def __call__(self) -> str:
        return f"{self.prefix}-{next(self._counter)}"


@dataclass
class TimeInfo:
    """Creation, modification and access timestamps of an entry (UTC)."""

    creation_time: datetime = EPOCH
    last_modification_time: datetime = EPOCH
    last_access_time: datetime = EPOCH


@dataclass(eq=False)
class Entry:
    """A credential record.

    Attributes:
        uuid: Unique identifier, generated at import time.
        title: Display title.
        username: Login username.
        password: Login password.
        url: Primary URL.
        notes: Free-form notes.
        tags: Ordered tags without duplicates.
        time_info: Creation/modification/access timestamps.
        attributes: Everything that has no first-class field.
        totp: Parsed TOTP settings, None when unset.
        history: Prior versions of this entry.
    """

    uuid: str
    title: str = ""
    username: str = ""
    password: str = ""
    url: str = ""
    notes: str = ""
    tags: list[str] = field(default_factory=list)
    time_info: TimeInfo = field(default_factory=TimeInfo)
    attributes: AttributeCollection = field(default_factory=AttributeCollection)
    totp: TotpSettings | None = None
    history: list[Entry] = field(default_factory=list)
    group: Group | None = field(default=None, repr=False)

    def add_tag(self, tag: str) -> None:
        """Add a tag unless it is already present or blank."""
        tag = tag.strip()
        if tag and tag not in self.tags:
            self.tags.append(tag)

    def remove_history_items(self, items: list[Entry] | None = None) -> None:
        """Drop the given history items, or all of them when items is None."""
        if items is None:
            self.history.clear()
            return
        self.history = [h for h in self.history if not any(h is i for i in items)]

    def set_group(self, group: Group) -> None:
        """Move this entry into group, leaving its previous group."""
        if self.group is group:
            return
        if self.group is not None:
            self.group._remove_entry(self)
        group.entries.append(self)
        self.group = group


@dataclass(eq=False)
class Group:
    """A node in the group hierarchy.

    Attributes:
        uuid: Unique identifier, generated at import time.
        name: Display name.
        parent: Parent group, None only for the root.
        groups: Child groups in insertion order.
        entries: Entries directly inside this group.
    """

    uuid: str
    name: str = ""
    parent: Group | None = field(default=None, repr=False)
    groups: list[Group] = field(default_factory=list, repr=False)
    entries: list[Entry] = field(default_factory=list, repr=False)

    def set_parent(self, parent: Group) -> None:
        """Attach this group as the last child of parent."""
        if parent is self:
            raise ValueError("A group cannot be its own parent")
        if self.parent is not None:
            self.parent.groups = [g for g in self.parent.groups if g is not self]
        parent.groups.append(self)
        self.parent = parent

    def _remove_entry(self, entry: Entry) -> None:
        self.entries = [e for e in self.entries if e is not entry]

    def entries_recursive(self) -> list[Entry]:
        """Return entries of this group and all descendants, depth first."""
        result = list(self.entries)
        for child in self.groups:
            result.extend(child.entries_recursive())
        return result

    def groups_recursive(self) -> list[Group]:
        """Return all descendant groups, depth first, excluding self."""
        result: list[Group] = []
        for child in self.groups:
            result.append(child)
            result.extend(child.groups_recursive())
        return result


class Store:
    """Destination credential store owning a single root group."""

    def __init__(self, id_generator: IdGenerator | None = None) -> None:
        self.id_generator: IdGenerator = id_generator or uuid4_generator
        self.root_group = Group(uuid=self.id_generator(), name=ROOT_GROUP_NAME)

    def create_group(self, name: str, parent: Group | None = None) -> Group:
        """Create a group with a fresh id under parent (root by default)."""
        group = Group(uuid=self.id_generator(), name=name)
        group.set_parent(parent or self.root_group)
        return group

    def create_entry(self) -> Entry:
        """Create an unattached entry with a fresh id."""
        return Entry(uuid=self.id_generator())

    def entries(self) -> list[Entry]:
        """Return every entry in the store."""
        return self.root_group.entries_recursive()

    def groups(self) -> list[Group]:
        """Return every group except the root."""
        return self.root_group.groups_recursive()

    def is_empty(self) -> bool:
        """True when the root has neither child groups nor entries."""
        return not self.root_group.groups and not self.root_group.entries

    def __repr__(self) -> str:
        return f"Store(groups={len(self.groups())}, entries={len(self.entries())})"
