"""Vault importer: turns a parsed Bitwarden export into groups and entries.

The importer performs a minimal shape check, creates one group per folder,
then builds and attaches one entry per item. Documents that are not vault
exports produce an empty import plus an error-level warning, never an
exception.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any

from bitwarden_import.entry_builder import read_item
from bitwarden_import.hierarchy import build_groups
from bitwarden_import.store import Store
from bitwarden_import.warnings import ImportWarning

logger = logging.getLogger(__name__)

REQUIRED_KEYS = ("folders", "items")


@dataclass
class ImportReport:
    """Outcome of one import run.

    Attributes:
        groups_created: Number of groups created from folders.
        entries_created: Number of entries created from items.
        entries_in_root: Entries attached to the root group.
        warnings: Degradations recorded during the run.
    """

    groups_created: int = 0
    entries_created: int = 0
    entries_in_root: int = 0
    warnings: list[ImportWarning] = field(default_factory=list)

    @property
    def is_vault(self) -> bool:
        """False when the document failed the shape check."""
        return not any(
            w.category in ("invalid_json", "invalid_shape", "unsupported")
            for w in self.warnings
        )

    @property
    def has_blockers(self) -> bool:
        """True when any error-severity warning was recorded."""
        return any(w.severity == "error" for w in self.warnings)

    def summary(self) -> dict[str, Any]:
        """Count warnings per severity and per category.

        Every severity is present in by_severity, zero when unused.
        by_category only lists categories that occurred, in first-seen order.
        """
        severities = Counter(w.severity for w in self.warnings)
        return {
            "total": len(self.warnings),
            "by_severity": {level: severities[level] for level in ("info", "warning", "error")},
            "by_category": dict(Counter(w.category for w in self.warnings)),
            "has_blockers": self.has_blockers,
        }

    def to_dict(self) -> dict[str, Any]:
        """Convert the report to a JSON-serializable dictionary."""
        return {
            "groups_created": self.groups_created,
            "entries_created": self.entries_created,
            "entries_in_root": self.entries_in_root,
            "is_vault": self.is_vault,
            "warnings": [w.to_dict() for w in self.warnings],
            "summary": self.summary(),
        }


class VaultImporter:
    """Writes a parsed Bitwarden vault into a Store.

    Example:
        >>> store = Store()
        >>> report = VaultImporter().write_vault({"folders": [], "items": []}, store)
        >>> report.entries_created
        0
    """

    def write_vault(
        self,
        vault: Any,
        store: Store,
        report: ImportReport | None = None,
    ) -> ImportReport:
        """Populate store from a parsed vault document.

        The vault is not modified.

        Args:
            vault: The parsed JSON document.
            store: Destination store, populated in place.
            report: Report to extend. A new one is created when omitted.

        Returns:
            The import report for this run.
        """
        if report is None:
            report = ImportReport()
        warnings = report.warnings

        if not self._check_shape(vault, warnings):
            return report

        folders = vault["folders"] if isinstance(vault["folders"], list) else []
        folder_map = build_groups(folders, store, warnings)
        report.groups_created = len(store.root_group.groups)

        items = vault["items"] if isinstance(vault["items"], list) else []
        for index, item in enumerate(items):
            if not isinstance(item, dict):
                warnings.append(
                    ImportWarning(
                        category="invalid_value",
                        severity="warning",
                        message=f"Skipped item at index {index} that is not an object",
                        entity_type="item",
                        details={"index": index},
                    )
                )
                continue

            entry, folder_id = read_item(item, store, warnings)

            group = folder_map.get(folder_id)
            if group is None:
                if folder_id:
                    warnings.append(
                        ImportWarning(
                            category="missing_reference",
                            severity="warning",
                            message=f"Item references unknown folder '{folder_id}', placed in root",
                            entity_type="item",
                            entity_id=item.get("id"),
                            details={"folder_id": folder_id},
                        )
                    )
                group = store.root_group
                report.entries_in_root += 1

            entry.set_group(group)
            report.entries_created += 1

        logger.info(
            f"Imported {report.entries_created} entries into "
            f"{report.groups_created} groups ({len(warnings)} warnings)"
        )
        return report

    def _check_shape(self, vault: Any, warnings: list[ImportWarning]) -> bool:
        if not isinstance(vault, dict):
            warnings.append(
                ImportWarning(
                    category="invalid_shape",
                    severity="error",
                    message="Document is not a JSON object",
                )
            )
            return False

        if vault.get("encrypted") is True:
            logger.warning("Encrypted Bitwarden exports are not supported")
            warnings.append(
                ImportWarning(
                    category="unsupported",
                    severity="error",
                    message="Encrypted exports are not supported, export the vault unencrypted",
                )
            )
            return False

        missing = [key for key in REQUIRED_KEYS if key not in vault]
        if missing:
            logger.info(f"Document is missing {missing}, nothing to import")
            warnings.append(
                ImportWarning(
                    category="invalid_shape",
                    severity="error",
                    message=f"Document is not a Bitwarden vault export (missing {', '.join(missing)})",
                    details={"missing_keys": missing},
                )
            )
            return False

        return True
