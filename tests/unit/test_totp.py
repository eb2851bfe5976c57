"""Unit tests for TOTP settings parsing."""

import pytest

from bitwarden_import.totp import (
    DEFAULT_DIGITS,
    DEFAULT_PERIOD,
    STEAM_DIGITS,
    TotpParseError,
    TotpSettings,
    normalize_secret,
    parse_settings,
)

SECRET = "JBSWY3DPEHPK3PXP"


class TestNormalizeSecret:
    """Tests for base32 secret normalization."""

    def test_valid_secret_unchanged(self) -> None:
        """An already normalized secret should be returned as-is."""
        assert normalize_secret(SECRET) == SECRET

    def test_lowercase_and_spaces(self) -> None:
        """Lower case and spaced secrets should be normalized."""
        assert normalize_secret("jbsw y3dp ehpk 3pxp") == SECRET

    def test_padding_stripped(self) -> None:
        """Trailing padding should be removed."""
        assert normalize_secret("JBSWY3DPEH======") == "JBSWY3DPEH"

    def test_empty_secret_raises(self) -> None:
        """An empty secret should raise TotpParseError."""
        with pytest.raises(TotpParseError):
            normalize_secret("   ")

    def test_invalid_characters_raise(self) -> None:
        """Characters outside the base32 alphabet should raise."""
        with pytest.raises(TotpParseError) as exc_info:
            normalize_secret("not-base32!")

        assert "base32" in str(exc_info.value)


class TestParseOtpauth:
    """Tests for otpauth:// URIs."""

    def test_minimal_uri_uses_defaults(self) -> None:
        """A URI with only a secret should use default settings."""
        settings = parse_settings(f"otpauth://totp/?secret={SECRET}")

        assert settings == TotpSettings(secret=SECRET)
        assert settings.digits == DEFAULT_DIGITS
        assert settings.period == DEFAULT_PERIOD
        assert settings.algorithm == "SHA1"

    def test_full_uri(self) -> None:
        """All supported query parameters should be honored."""
        settings = parse_settings(
            "otpauth://totp/ACME%20Co:john@example.com"
            f"?secret={SECRET}&issuer=ACME%20Co&algorithm=sha256&digits=8&period=60"
        )

        assert settings.secret == SECRET
        assert settings.digits == 8
        assert settings.period == 60
        assert settings.algorithm == "SHA256"
        assert settings.issuer == "ACME Co"
        assert settings.account == "john@example.com"

    def test_issuer_from_label(self) -> None:
        """The label prefix should be used when no issuer parameter exists."""
        settings = parse_settings(f"otpauth://totp/GitHub:octocat?secret={SECRET}")

        assert settings.issuer == "GitHub"
        assert settings.account == "octocat"

    def test_steam_encoder(self) -> None:
        """encoder=steam should force Steam settings."""
        settings = parse_settings(f"otpauth://totp/Steam:me?secret={SECRET}&encoder=steam")

        assert settings.encoder == "steam"
        assert settings.digits == STEAM_DIGITS

    def test_hotp_rejected(self) -> None:
        """Counter-based OTP is not supported."""
        with pytest.raises(TotpParseError):
            parse_settings(f"otpauth://hotp/x?secret={SECRET}&counter=1")

    def test_missing_secret_rejected(self) -> None:
        """A URI without secret should fail."""
        with pytest.raises(TotpParseError):
            parse_settings("otpauth://totp/x?digits=6")

    def test_unknown_algorithm_rejected(self) -> None:
        """Unsupported algorithms should fail."""
        with pytest.raises(TotpParseError):
            parse_settings(f"otpauth://totp/x?secret={SECRET}&algorithm=MD5")

    @pytest.mark.parametrize("digits", ["abc", "0", "-6"])
    def test_invalid_digits_rejected(self, digits: str) -> None:
        """Non-positive or non-numeric digits should fail."""
        with pytest.raises(TotpParseError):
            parse_settings(f"otpauth://totp/x?secret={SECRET}&digits={digits}")


class TestParseOtherFormats:
    """Tests for steam URIs, key strings and bare secrets."""

    def test_steam_uri(self) -> None:
        """steam:// URIs should produce Steam settings."""
        settings = parse_settings(f"steam://{SECRET}")

        assert settings.secret == SECRET
        assert settings.encoder == "steam"
        assert settings.digits == STEAM_DIGITS

    def test_key_format(self) -> None:
        """KeeOTP key strings should be parsed."""
        settings = parse_settings(f"key={SECRET}&step=60&size=8")

        assert settings.secret == SECRET
        assert settings.period == 60
        assert settings.digits == 8

    def test_bare_secret(self) -> None:
        """A bare base32 secret should use default settings."""
        assert parse_settings(" jbswy3dpehpk3pxp ") == TotpSettings(secret=SECRET)

    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_empty_value_rejected(self, raw: str | None) -> None:
        """Empty values should fail."""
        with pytest.raises(TotpParseError):
            parse_settings(raw)

    def test_unknown_scheme_rejected(self) -> None:
        """Other URI schemes should fail."""
        with pytest.raises(TotpParseError) as exc_info:
            parse_settings("https://example.com/totp")

        assert exc_info.value.raw == "https://example.com/totp"

    def test_garbage_rejected(self) -> None:
        """Free text that is not base32 should fail."""
        with pytest.raises(TotpParseError):
            parse_settings("not a totp value!")

