"""Tests for custom field storage slots."""

from decimal import Decimal

import pytest

from inventory_data.fields import (
    FIELD_SLOTS,
    convert_value,
    hydrate_item,
    next_free_slot,
    read_fields,
    slots_for,
)
from inventory_data.models import CustomField, FieldType, Item


class TestSlots:
    """Tests for the slot table."""

    def test_three_slots_per_type(self) -> None:
        """Test every type has three slots."""
        assert len(FIELD_SLOTS) == 15
        assert [s.column for s in slots_for(FieldType.FILE_URL)] == [
            "custom_file_url1",
            "custom_file_url2",
            "custom_file_url3",
        ]

    def test_next_free_slot(self) -> None:
        """Test first unused slot of a type."""
        assert next_free_slot(FieldType.TEXT, ["custom_text1", "custom_text3"]) == "custom_text2"
        assert next_free_slot(FieldType.TEXT, [f"custom_text{n}" for n in (1, 2, 3)]) is None


class TestConvertValue:
    """Tests for convert_value()."""

    @pytest.mark.parametrize(
        "column,raw,expected",
        [
            ("custom_numeric1", "3.50", Decimal("3.50")),
            ("custom_numeric1", 7, Decimal(7)),
            ("custom_bool1", "on", True),
            ("custom_bool1", "TRUE", True),
            ("custom_bool1", "off", False),
            ("custom_bool1", False, False),
            ("custom_string1", 42, "42"),
            ("custom_text2", "", None),
            ("custom_numeric3", None, None),
        ],
    )
    def test_conversions(self, column: str, raw: object, expected: object) -> None:
        """Test raw values convert per slot type."""
        assert convert_value(column, raw) == expected

    @pytest.mark.parametrize("raw", ["abc", "NaN", "Infinity", True])
    def test_invalid_numbers(self, raw: object) -> None:
        """Test non-finite and non-numeric input is rejected."""
        with pytest.raises(ValueError):
            convert_value("custom_numeric1", raw)

    def test_unknown_column(self) -> None:
        """Test unknown slot column."""
        with pytest.raises(KeyError):
            convert_value("custom_color1", "red")


class TestHydrateItem:
    """Tests for hydrate_item() and read_fields()."""

    def test_hydrate_and_read(self) -> None:
        """Test values move between field ids and slots."""
        price = CustomField("inv", "Price", FieldType.NUMERIC, "custom_numeric1")
        note = CustomField("inv", "Note", FieldType.TEXT, "custom_text1")
        item = Item(inventory_id="inv")

        errors = hydrate_item(item, {price.id: "9.99", "unknown": "x"}, [price, note])

        assert errors == {}
        assert read_fields(item, [price, note]) == {price.id: Decimal("9.99"), note.id: None}

    def test_none_leaves_slot_untouched(self) -> None:
        """Test None means no change."""
        note = CustomField("inv", "Note", FieldType.TEXT, "custom_text1")
        item = Item(inventory_id="inv", field_values={"custom_text1": "keep"})

        hydrate_item(item, {note.id: None}, [note])

        assert item.field_values["custom_text1"] == "keep"

    def test_errors_keyed_by_field(self) -> None:
        """Test conversion failures name the field."""
        price = CustomField("inv", "Price", FieldType.NUMERIC, "custom_numeric1")

        errors = hydrate_item(Item(inventory_id="inv"), {price.id: "cheap"}, [price])

        assert errors == {price.id: "Invalid value for 'Price'."}
