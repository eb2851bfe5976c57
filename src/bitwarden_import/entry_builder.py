"""Entry builder: maps one Bitwarden item to one credential entry.

Every optional sub-object (login, identity, card, fields) degrades to an
empty value when it is missing or malformed. Nothing in here raises for
bad input; problems are recorded as ImportWarning objects instead.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

from bitwarden_import.field_mapping import (
    CARD_MAPPINGS,
    IDENTITY_MAPPINGS,
    apply_mappings,
    source_text,
)
from bitwarden_import.store import EPOCH, Entry, Store, TimeInfo
from bitwarden_import.totp import TotpParseError, parse_settings
from bitwarden_import.warnings import ImportWarning

logger = logging.getLogger(__name__)

FAVORITE_TAG = "Favorite"

# Secondary login URIs are stored as KP2A_URL_1, KP2A_URL_2, ...
EXTRA_URL_PREFIX = "KP2A_URL_"

# Bitwarden custom field type codes: 0 text, 1 hidden, 2 boolean, 3 linked
HIDDEN_FIELD_TYPE = 1

DEFAULT_FIELD_NAME = "field"


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def parse_timestamp(
    item: dict[str, Any],
    epoch_key: str,
    iso_key: str,
    warnings: list[ImportWarning],
) -> datetime:
    """Read an item timestamp as a UTC datetime.

    Epoch seconds under epoch_key take precedence. ISO-8601 strings under
    iso_key (used by newer exports) are accepted as a fallback. Missing or
    invalid values map to the epoch.

    Args:
        item: The source item.
        epoch_key: Key holding epoch seconds ("createdAt" / "updatedAt").
        iso_key: Key holding an ISO-8601 string ("creationDate" / "revisionDate").
        warnings: List that receives a warning for unparsable values.

    Returns:
        A timezone-aware datetime in UTC.
    """
    raw = item.get(epoch_key)
    if raw is not None and not isinstance(raw, bool):
        try:
            return datetime.fromtimestamp(int(raw), tz=UTC)
        except (TypeError, ValueError, OverflowError, OSError):
            warnings.append(
                ImportWarning(
                    category="invalid_value",
                    severity="warning",
                    message=f"Invalid timestamp in '{epoch_key}', using epoch",
                    entity_type="item",
                    entity_id=item.get("id"),
                    details={"field": epoch_key, "value": str(raw)},
                )
            )
            return EPOCH

    iso_value = item.get(iso_key)
    if isinstance(iso_value, str) and iso_value:
        try:
            parsed = datetime.fromisoformat(iso_value.replace("Z", "+00:00"))
        except ValueError:
            logger.debug(f"Ignoring unparsable {iso_key} value {iso_value!r}")
            return EPOCH
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=UTC)
        return parsed.astimezone(UTC)

    return EPOCH


def _read_login(
    entry: Entry,
    login: dict[str, Any],
    item_id: str | None,
    warnings: list[ImportWarning],
) -> None:
    entry.username = source_text(login, "username")
    entry.password = source_text(login, "password")

    if "totp" in login and login["totp"] is not None:
        try:
            entry.totp = parse_settings(login["totp"])
        except TotpParseError as e:
            logger.warning(f"Could not parse TOTP for item {item_id}: {e}")
            warnings.append(
                ImportWarning(
                    category="invalid_value",
                    severity="warning",
                    message=f"TOTP value could not be parsed: {e}",
                    entity_type="item",
                    entity_id=item_id,
                )
            )

    counter = 1
    for uri_obj in _as_list(login.get("uris")):
        url = source_text(_as_dict(uri_obj), "uri").strip()
        # empty URIs neither become the url nor take a KP2A_URL number
        if not url:
            continue
        if not entry.url:
            entry.url = url
        else:
            entry.attributes.set(f"{EXTRA_URL_PREFIX}{counter}", url)
            counter += 1


def _read_fields(
    entry: Entry,
    fields: list[Any],
    item_id: str | None,
    warnings: list[ImportWarning],
) -> None:
    for field_obj in fields:
        field_map = _as_dict(field_obj)
        requested = source_text(field_map, "name") or DEFAULT_FIELD_NAME
        name = entry.attributes.unique_key(requested)
        if name != requested:
            warnings.append(
                ImportWarning(
                    category="duplicate",
                    severity="info",
                    message=f"Custom field '{requested}' renamed to '{name}'",
                    entity_type="item",
                    entity_id=item_id,
                    details={"field": requested, "renamed_to": name},
                )
            )

        raw_type = field_map.get("type")
        if isinstance(raw_type, bool):
            field_type = 0
        else:
            try:
                field_type = int(raw_type or 0)
            except (TypeError, ValueError, OverflowError):
                field_type = 0

        entry.attributes.set(
            name,
            source_text(field_map, "value"),
            protected=field_type == HIDDEN_FIELD_TYPE,
        )


def read_item(
    item: dict[str, Any],
    store: Store,
    warnings: list[ImportWarning] | None = None,
) -> tuple[Entry, str]:
    """Build an entry from a Bitwarden item.

    The entry receives a fresh id from the store's id generator and is not
    attached to any group.

    Args:
        item: One object from the export's "items" array.
        store: Destination store, used only to allocate the entry.
        warnings: List that receives degradation warnings.

    Returns:
        Tuple of (entry, folder_id). folder_id is "" when the item has none.
    """
    if warnings is None:
        warnings = []

    item_id = item.get("id")
    folder_id = source_text(item, "folderId")

    entry = store.create_entry()
    entry.title = source_text(item, "name")
    entry.notes = source_text(item, "notes")

    if item.get("favorite") is True:
        entry.add_tag(FAVORITE_TAG)

    if "login" in item:
        _read_login(entry, _as_dict(item["login"]), item_id, warnings)

    if "identity" in item:
        apply_mappings(item["identity"], IDENTITY_MAPPINGS, entry.attributes)

    if "card" in item:
        apply_mappings(item["card"], CARD_MAPPINGS, entry.attributes)

    _read_fields(entry, _as_list(item.get("fields")), item_id, warnings)

    entry.remove_history_items()

    created = parse_timestamp(item, "createdAt", "creationDate", warnings)
    modified = parse_timestamp(item, "updatedAt", "revisionDate", warnings)
    entry.time_info = TimeInfo(
        creation_time=created,
        last_modification_time=modified,
        last_access_time=modified,
    )

    logger.debug(f"Built entry {entry.uuid} from item {item_id} ({entry.title!r})")
    return entry, folder_id
