"""Unit tests for the attribute collection module."""

from bitwarden_import.attributes import Attribute, AttributeCollection


class TestAttributeCollectionSet:
    """Tests for inserting and replacing attributes."""

    def test_set_creates_attribute(self) -> None:
        """Setting a value should make it retrievable."""
        attributes = AttributeCollection()
        attributes.set("color", "blue")

        assert attributes.has_key("color")
        assert attributes.get("color") == "blue"
        assert attributes.is_protected("color") is False

    def test_set_protected(self) -> None:
        """Protected flag should be stored with the value."""
        attributes = AttributeCollection()
        attributes.set("pin", "1234", protected=True)

        assert attributes.is_protected("pin") is True

    def test_set_replaces_existing(self) -> None:
        """Setting an existing name should replace value and flag."""
        attributes = AttributeCollection()
        attributes.set("pin", "1234", protected=True)
        attributes.set("pin", "5678")

        assert attributes.get("pin") == "5678"
        assert attributes.is_protected("pin") is False
        assert len(attributes) == 1

    def test_set_none_stores_empty_string(self) -> None:
        """None values should be stored as empty strings."""
        attributes = AttributeCollection()
        attributes.set("empty", None)  # type: ignore[arg-type]

        assert attributes.get("empty") == ""

    def test_preserves_insertion_order(self) -> None:
        """Keys should be returned in insertion order."""
        attributes = AttributeCollection()
        attributes.set("b", "2")
        attributes.set("a", "1")
        attributes.set("c", "3")

        assert attributes.keys() == ["b", "a", "c"]
        assert list(attributes) == ["b", "a", "c"]


class TestAttributeCollectionLookup:
    """Tests for lookups on missing keys."""

    def test_has_key_missing(self) -> None:
        """has_key should be False for unknown names."""
        assert AttributeCollection().has_key("missing") is False

    def test_get_missing_returns_default(self) -> None:
        """get should return the default for unknown names."""
        attributes = AttributeCollection()

        assert attributes.get("missing") is None
        assert attributes.get("missing", "fallback") == "fallback"

    def test_is_protected_missing(self) -> None:
        """is_protected should be False for unknown names."""
        assert AttributeCollection().is_protected("missing") is False

    def test_contains(self) -> None:
        """The in operator should mirror has_key."""
        attributes = AttributeCollection()
        attributes.set("x", "1")

        assert "x" in attributes
        assert "y" not in attributes


class TestUniqueKey:
    """Tests for collision-free key derivation."""

    def test_free_name_returned_unchanged(self) -> None:
        """A free name should be returned as-is."""
        assert AttributeCollection().unique_key("color") == "color"

    def test_taken_name_gets_suffix(self) -> None:
        """A taken name should get the first free numeric suffix."""
        attributes = AttributeCollection()
        attributes.set("color", "blue")

        assert attributes.unique_key("color") == "color_1"

    def test_skips_taken_suffixes(self) -> None:
        """Suffixes already in use should be skipped."""
        attributes = AttributeCollection()
        attributes.set("color", "blue")
        attributes.set("color_1", "red")
        attributes.set("color_2", "green")

        assert attributes.unique_key("color") == "color_3"

    def test_unique_key_does_not_insert(self) -> None:
        """Deriving a key should not modify the collection."""
        attributes = AttributeCollection()
        attributes.set("color", "blue")
        attributes.unique_key("color")

        assert len(attributes) == 1


class TestAttributeCollectionExport:
    """Tests for reading the collection back out."""

    def test_items(self) -> None:
        """items should return Attribute objects."""
        attributes = AttributeCollection()
        attributes.set("a", "1", protected=True)

        assert attributes.items() == [("a", Attribute(value="1", protected=True))]
