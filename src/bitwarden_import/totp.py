"""TOTP settings parsing.

Bitwarden stores a login's one-time password as either an otpauth:// URI,
a steam:// URI, or a bare base32 secret. parse_settings() turns any of these
into TotpSettings or raises TotpParseError.
"""

from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass
from typing import Literal
from urllib.parse import parse_qs, unquote, urlparse

DEFAULT_DIGITS = 6
DEFAULT_PERIOD = 30
STEAM_DIGITS = 5

Algorithm = Literal["SHA1", "SHA256", "SHA512"]
Encoder = Literal["", "steam"]

VALID_ALGORITHMS: frozenset[str] = frozenset(["SHA1", "SHA256", "SHA512"])

# KeeOTP style: key=SECRET&step=30&size=6
_KEY_FORMAT_PATTERN = re.compile(r"^key=", re.IGNORECASE)


class TotpParseError(Exception):
    """Raised when a TOTP string cannot be parsed."""

    def __init__(self, message: str, raw: str | None = None) -> None:
        self.raw = raw
        super().__init__(message)


@dataclass(frozen=True)
class TotpSettings:
    """Parsed TOTP configuration.

    Attributes:
        secret: Normalized base32 secret (upper case, no spaces or padding).
        digits: Number of digits in each generated code.
        period: Code validity window in seconds.
        algorithm: HMAC hash algorithm.
        encoder: "" for RFC 6238 codes, "steam" for Steam Guard codes.
        issuer: Issuer label from the URI, if any.
        account: Account label from the URI, if any.
    """

    secret: str
    digits: int = DEFAULT_DIGITS
    period: int = DEFAULT_PERIOD
    algorithm: Algorithm = "SHA1"
    encoder: Encoder = ""
    issuer: str = ""
    account: str = ""


def normalize_secret(secret: str) -> str:
    """Normalize and validate a base32 secret.

    Args:
        secret: Raw secret, possibly lower case, spaced or padded.

    Returns:
        The upper-case secret without whitespace or padding.

    Raises:
        TotpParseError: If the secret is empty or not valid base32.
    """
    normalized = re.sub(r"\s+", "", secret).upper().rstrip("=")
    if not normalized:
        raise TotpParseError("TOTP secret is empty", raw=secret)

    padding = "=" * (-len(normalized) % 8)
    try:
        base64.b32decode(normalized + padding)
    except (binascii.Error, ValueError) as e:
        raise TotpParseError(f"TOTP secret is not valid base32: {e}", raw=secret) from e
    return normalized


def _parse_int(value: str | None, default: int, name: str, raw: str) -> int:
    if value is None or value == "":
        return default
    try:
        parsed = int(value)
    except ValueError:
        raise TotpParseError(f"Invalid TOTP {name}: {value!r}", raw=raw) from None
    if parsed <= 0:
        raise TotpParseError(f"Invalid TOTP {name}: {value!r}", raw=raw)
    return parsed


def _first(query: dict[str, list[str]], key: str) -> str | None:
    values = query.get(key)
    return values[0] if values else None


def _parse_otpauth(raw: str) -> TotpSettings:
    parsed = urlparse(raw)
    if parsed.netloc.lower() != "totp":
        raise TotpParseError(f"Unsupported OTP type: {parsed.netloc!r}", raw=raw)

    query = parse_qs(parsed.query)
    secret = _first(query, "secret")
    if not secret:
        raise TotpParseError("otpauth URI has no secret", raw=raw)

    algorithm = (_first(query, "algorithm") or "SHA1").upper()
    if algorithm not in VALID_ALGORITHMS:
        raise TotpParseError(f"Unsupported TOTP algorithm: {algorithm!r}", raw=raw)

    label = unquote(parsed.path.lstrip("/"))
    issuer = _first(query, "issuer") or ""
    account = label
    if ":" in label:
        label_issuer, account = label.split(":", 1)
        issuer = issuer or label_issuer
    account = account.strip()

    digits = _parse_int(_first(query, "digits"), DEFAULT_DIGITS, "digits", raw)
    encoder: Encoder = ""
    if (_first(query, "encoder") or "").lower() == "steam":
        encoder = "steam"
        digits = STEAM_DIGITS

    return TotpSettings(
        secret=normalize_secret(secret),
        digits=digits,
        period=_parse_int(_first(query, "period"), DEFAULT_PERIOD, "period", raw),
        algorithm=algorithm,  # type: ignore[arg-type]
        encoder=encoder,
        issuer=issuer.strip(),
        account=account,
    )


def _parse_key_format(raw: str) -> TotpSettings:
    query = parse_qs(raw)
    secret = _first(query, "key")
    if not secret:
        raise TotpParseError("TOTP key string has no key", raw=raw)
    return TotpSettings(
        secret=normalize_secret(secret),
        digits=_parse_int(_first(query, "size"), DEFAULT_DIGITS, "digits", raw),
        period=_parse_int(_first(query, "step"), DEFAULT_PERIOD, "period", raw),
    )


def parse_settings(raw: str | None) -> TotpSettings:
    """Parse a TOTP string as stored in a Bitwarden export.

    Accepted forms:
        - otpauth://totp/Issuer:account?secret=...&period=30&digits=6
        - steam://SECRET
        - key=SECRET&step=30&size=6
        - a bare base32 secret

    Args:
        raw: The stored TOTP string.

    Returns:
        The parsed settings.

    Raises:
        TotpParseError: If the string is empty or cannot be parsed.
    """
    if raw is None or not str(raw).strip():
        raise TotpParseError("TOTP value is empty", raw=raw)

    raw = str(raw).strip()
    scheme = raw.split(":", 1)[0].lower() if "://" in raw else ""

    if scheme == "otpauth":
        return _parse_otpauth(raw)
    if scheme == "steam":
        return TotpSettings(
            secret=normalize_secret(raw.split("://", 1)[1]),
            digits=STEAM_DIGITS,
            encoder="steam",
        )
    if scheme:
        raise TotpParseError(f"Unsupported TOTP URI scheme: {scheme!r}", raw=raw)
    if _KEY_FORMAT_PATTERN.match(raw):
        return _parse_key_format(raw)
    return TotpSettings(secret=normalize_secret(raw))
