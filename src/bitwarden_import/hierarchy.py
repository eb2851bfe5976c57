"""Folder to group mapping for Bitwarden imports.

Each source folder becomes a direct child of the store's root group. The
FolderMap built here resolves an item's folderId to its destination group
and lives only for the duration of one import run.
"""

from __future__ import annotations

import logging
from typing import Any

from bitwarden_import.field_mapping import source_text
from bitwarden_import.store import Group, Store
from bitwarden_import.warnings import ImportWarning

logger = logging.getLogger(__name__)


class FolderMap:
    """Maps Bitwarden folder IDs to destination groups.

    Example:
        >>> folders = FolderMap()
        >>> folders.add("f-1", group)
        >>> folders.get("f-1") is group
        True
        >>> folders.get("unknown") is None
        True
    """

    def __init__(self) -> None:
        """Initialize an empty folder map."""
        self._groups: dict[str, Group] = {}

    def add(self, folder_id: str, group: Group) -> Group | None:
        """Map a source folder ID to a group.

        An existing mapping for the same ID is replaced.

        Args:
            folder_id: The Bitwarden folder ID.
            group: The destination group.

        Returns:
            The group previously mapped to folder_id, or None.
        """
        folder_id_str = str(folder_id)
        previous = self._groups.get(folder_id_str)
        self._groups[folder_id_str] = group
        return previous

    def get(self, folder_id: str | None) -> Group | None:
        """Get the group for a folder ID, or None if unmapped or empty."""
        if not folder_id:
            return None
        return self._groups.get(str(folder_id))

    def __len__(self) -> int:
        return len(self._groups)

    def __repr__(self) -> str:
        return f"FolderMap(total_mappings={len(self._groups)})"


def build_groups(
    folders: list[Any],
    store: Store,
    warnings: list[ImportWarning] | None = None,
) -> FolderMap:
    """Create one root-level group per Bitwarden folder.

    Groups are created in source order with fresh ids. Folder names that
    contain "/" are kept verbatim; no nested hierarchy is rebuilt.

    Args:
        folders: The export's "folders" array.
        store: Destination store whose root receives the groups.
        warnings: List that receives duplicate/invalid folder warnings.

    Returns:
        FolderMap from source folder ID to the created group.
    """
    if warnings is None:
        warnings = []

    folder_map = FolderMap()
    created = 0
    for folder in folders:
        if not isinstance(folder, dict):
            warnings.append(
                ImportWarning(
                    category="invalid_value",
                    severity="warning",
                    message="Skipped folder that is not an object",
                    entity_type="folder",
                )
            )
            continue

        folder_id = source_text(folder, "id")
        group = store.create_group(source_text(folder, "name"), store.root_group)
        created += 1

        previous = folder_map.add(folder_id, group)
        if previous is not None:
            logger.warning(f"Duplicate folder id {folder_id!r}, later folder wins")
            warnings.append(
                ImportWarning(
                    category="duplicate",
                    severity="warning",
                    message=f"Duplicate folder id '{folder_id}'",
                    entity_type="folder",
                    entity_id=folder_id,
                    details={"kept": group.name, "replaced": previous.name},
                )
            )
        logger.debug(f"Mapped folder {folder_id!r} -> group {group.uuid}")

    logger.info(f"Created {created} groups from folders")
    return folder_map
