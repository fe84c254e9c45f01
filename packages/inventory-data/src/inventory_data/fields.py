"""Custom field storage slots.

Every inventory may define up to three fields per type. Each field is bound to
one fixed storage slot column (``custom_string1`` ... ``custom_file_url3``);
the slot table below maps a column to its type and value converter.
"""

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

from inventory_data.models import CustomField, FieldType, Item

MAX_FIELDS_PER_TYPE = 3

TRUE_VALUES = frozenset({"true", "on"})


def _to_text(raw: Any) -> str:
    return str(raw)


def _to_numeric(raw: Any) -> Decimal:
    if isinstance(raw, bool):
        raise ValueError(f"Not a number: {raw!r}")
    try:
        value = Decimal(str(raw).strip())
    except InvalidOperation as e:
        raise ValueError(f"Not a number: {raw!r}") from e
    if not value.is_finite():
        raise ValueError(f"Not a finite number: {raw!r}")
    return value


def _to_bool(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    return str(raw).strip().lower() in TRUE_VALUES


@dataclass(frozen=True)
class FieldSlot:
    """
    One storage slot.

    Attributes:
        column: Slot column name
        field_type: Type of field the slot can hold
        sql_type: PostgreSQL column type
        convert: Converts a submitted raw value, raises ValueError if invalid
    """

    column: str
    field_type: FieldType
    sql_type: str
    convert: Callable[[Any], Any]


_SLOT_KINDS: dict[FieldType, tuple[str, str, Callable[[Any], Any]]] = {
    FieldType.STRING: ("custom_string", "TEXT", _to_text),
    FieldType.TEXT: ("custom_text", "TEXT", _to_text),
    FieldType.NUMERIC: ("custom_numeric", "NUMERIC", _to_numeric),
    FieldType.BOOL: ("custom_bool", "BOOLEAN", _to_bool),
    FieldType.FILE_URL: ("custom_file_url", "TEXT", _to_text),
}

FIELD_SLOTS: dict[str, FieldSlot] = {
    f"{prefix}{n}": FieldSlot(f"{prefix}{n}", field_type, sql_type, convert)
    for field_type, (prefix, sql_type, convert) in _SLOT_KINDS.items()
    for n in range(1, MAX_FIELDS_PER_TYPE + 1)
}


def slots_for(field_type: FieldType) -> list[FieldSlot]:
    """Slots available to a field type, in allocation order."""
    return [slot for slot in FIELD_SLOTS.values() if slot.field_type == field_type]


def next_free_slot(field_type: FieldType, used_columns: Iterable[str]) -> str | None:
    """First slot of ``field_type`` not in ``used_columns``, None if all are taken."""
    used = set(used_columns)
    for slot in slots_for(field_type):
        if slot.column not in used:
            return slot.column
    return None


def convert_value(column: str, raw: Any) -> Any:
    """
    Convert a submitted value for a slot.

    Returns:
        Converted value, None for None or empty input

    Raises:
        KeyError: If the column is not a known slot
        ValueError: If the value cannot be converted
    """
    slot = FIELD_SLOTS[column]
    if raw is None or (isinstance(raw, str) and raw == ""):
        return None
    return slot.convert(raw)


def hydrate_item(
    item: Item,
    values: Mapping[str, Any],
    fields: Iterable[CustomField],
) -> dict[str, str]:
    """
    Copy submitted field values (keyed by field id) into an item's slots.

    Values for unknown field ids are ignored; a value of None leaves the slot
    untouched.

    Returns:
        Validation errors keyed by field id (empty if all values converted)
    """
    errors: dict[str, str] = {}
    for custom_field in fields:
        if custom_field.id not in values or values[custom_field.id] is None:
            continue
        try:
            item.field_values[custom_field.target_column] = convert_value(
                custom_field.target_column, values[custom_field.id]
            )
        except (KeyError, ValueError):
            errors[custom_field.id] = f"Invalid value for '{custom_field.name}'."
    return errors


def read_fields(item: Item, fields: Iterable[CustomField]) -> dict[str, Any]:
    """Item values keyed by field id."""
    return {
        custom_field.id: item.field_values.get(custom_field.target_column)
        for custom_field in fields
    }
