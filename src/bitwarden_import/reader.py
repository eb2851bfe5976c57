"""Bitwarden JSON export reader.

BitwardenReader.convert() resolves an export file, parses it and hands the
document to VaultImporter. Artifact problems (missing or unreadable file)
are reported through has_error()/error_string(); malformed content only
produces warnings on the import report.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from bitwarden_import.importer import ImportReport, VaultImporter
from bitwarden_import.store import IdGenerator, Store
from bitwarden_import.warnings import ImportWarning

logger = logging.getLogger(__name__)


class ReaderError(Exception):
    """Base exception for export reading errors."""

    pass


class SourceNotFoundError(ReaderError):
    """Raised when the export file does not exist."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__("File does not exist.")


class SourceUnreadableError(ReaderError):
    """Raised when the export file cannot be opened for reading."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot open file: {reason}")


def read_source(path: str | Path) -> bytes:
    """Read the raw bytes of an export file.

    Args:
        path: Location of the export.

    Returns:
        The file contents.

    Raises:
        SourceNotFoundError: If the path does not exist.
        SourceUnreadableError: If the path cannot be opened for reading.
    """
    path = Path(path)
    if not path.exists():
        raise SourceNotFoundError(path)

    try:
        with path.resolve().open("rb") as f:
            return f.read()
    except OSError as e:
        raise SourceUnreadableError(path, e.strerror or str(e)) from e


def _reject_constant(token: str) -> Any:
    raise ValueError(f"Non-standard JSON constant: {token}")


def parse_document(content: bytes, warnings: list[ImportWarning]) -> dict[str, Any]:
    """Parse export bytes as a JSON object.

    Malformed JSON (including the non-standard NaN and Infinity tokens)
    and non-object documents parse to an empty dict and record an
    invalid_json warning.

    Args:
        content: Raw file contents.
        warnings: List that receives the invalid_json warning.

    Returns:
        The parsed document, or {} when it is not a JSON object.
    """
    try:
        document = json.loads(content.decode("utf-8-sig"), parse_constant=_reject_constant)
    except (ValueError, RecursionError) as e:
        logger.warning(f"Export is not valid JSON: {e}")
        warnings.append(
            ImportWarning(
                category="invalid_json",
                severity="error",
                message=f"Invalid JSON: {e}",
            )
        )
        return {}

    if not isinstance(document, dict):
        warnings.append(
            ImportWarning(
                category="invalid_json",
                severity="error",
                message=f"Expected a JSON object, got {type(document).__name__}",
            )
        )
        return {}

    return document


class BitwardenReader:
    """Converts Bitwarden JSON exports into Store objects.

    Error state describes the most recent convert() call only.

    Example:
        >>> reader = BitwardenReader()
        >>> store = reader.convert("bitwarden_export.json")
        >>> if reader.has_error():
        ...     print(reader.error_string())
    """

    def __init__(
        self,
        id_generator: IdGenerator | None = None,
        importer: VaultImporter | None = None,
    ) -> None:
        """Initialize the reader.

        Args:
            id_generator: Id generator for new stores. Random UUIDs by default.
            importer: Importer used to populate stores.
        """
        self._id_generator = id_generator
        self._importer = importer or VaultImporter()
        self._error = ""
        self.report = ImportReport()

    def has_error(self) -> bool:
        """True when the last convert() failed to read its source."""
        return bool(self._error)

    def error_string(self) -> str:
        """Human-readable error from the last convert(), "" if none."""
        return self._error

    @property
    def warnings(self) -> list[ImportWarning]:
        """Warnings recorded by the last convert()."""
        return self.report.warnings

    def convert(self, path: str | Path) -> Store | None:
        """Convert a Bitwarden JSON export into a new Store.

        Args:
            path: Location of the export file.

        Returns:
            The populated store, or None when the file could not be read.
        """
        self._error = ""
        self.report = ImportReport()

        try:
            content = read_source(path)
        except ReaderError as e:
            logger.error(f"Failed to read {path}: {e}")
            self._error = str(e)
            return None

        store = Store(id_generator=self._id_generator)
        document = parse_document(content, self.report.warnings)
        self._importer.write_vault(document, store, self.report)
        return store
