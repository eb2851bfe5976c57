"""Import warnings for degraded Bitwarden imports.

The importer never aborts on malformed content. Instead every degradation
(unparsable JSON, a document that is not a vault export, an unknown folder
reference, a renamed attribute, an unparsable TOTP value) is recorded as an
ImportWarning so callers can inspect what was lost or changed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

# Severity levels
Severity = Literal["info", "warning", "error"]

# Warning categories
Category = Literal[
    "invalid_json",
    "invalid_shape",
    "missing_reference",
    "duplicate",
    "invalid_value",
    "unsupported",
]


@dataclass
class ImportWarning:
    """Represents a degradation detected during an import run.

    Attributes:
        category: The type of warning (e.g., "missing_reference", "duplicate").
        severity: Impact level ("info", "warning", "error").
        message: Human-readable description of the issue.
        entity_type: The type of source object affected ("folder", "item", ...).
        entity_id: The source id of the affected object (if applicable).
        details: Additional context about the warning.
    """

    category: Category
    severity: Severity
    message: str
    entity_type: str | None = None
    entity_id: str | None = None
    details: dict[str, Any] | None = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        """Convert warning to dictionary representation, omitting unset context."""
        context = {
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "details": self.details,
        }
        return {
            "category": self.category,
            "severity": self.severity,
            "message": self.message,
            **{key: value for key, value in context.items() if value is not None},
        }
