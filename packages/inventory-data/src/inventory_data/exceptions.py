"""Custom exceptions with helpful error messages."""

from custom_ids import MalformedFormatError


class InventoryDataError(Exception):
    """Base exception for inventory-data errors."""

    pass


class InventoryNotFoundError(InventoryDataError):
    """Inventory does not exist."""

    def __init__(self, inventory_id: str):
        self.inventory_id = inventory_id
        super().__init__(f"Inventory '{inventory_id}' not found.")


class ItemNotFoundError(InventoryDataError):
    """One or more items do not exist."""

    def __init__(self, item_ids: list[str]):
        self.item_ids = item_ids
        super().__init__(f"Item(s) not found: {', '.join(item_ids)}")


class FieldNotFoundError(InventoryDataError):
    """Custom field does not exist."""

    def __init__(self, field_id: str):
        self.field_id = field_id
        super().__init__(f"Custom field '{field_id}' not found.")


class ConcurrencyError(InventoryDataError):
    """Record was modified by another writer since it was read."""

    def __init__(self, entity: str, entity_id: str, expected: int, actual: int | None):
        self.entity = entity
        self.entity_id = entity_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Data conflict: {entity} '{entity_id}' was modified by another user "
            f"(expected version {expected}, found {actual}).\n\n"
            f"Suggestions:\n"
            f"1. Reload the {entity} and apply the change again"
        )


class DuplicateIdError(InventoryDataError):
    """Custom id already used by another item of the same inventory."""

    def __init__(self, inventory_id: str, custom_id: str | None = None):
        self.inventory_id = inventory_id
        self.custom_id = custom_id
        super().__init__(
            f"Custom ID {custom_id!r} is already in use in inventory '{inventory_id}'."
            if custom_id is not None
            else f"Custom ID is already in use in inventory '{inventory_id}'."
        )


class SequenceConflictError(InventoryDataError):
    """A concurrent writer advanced the same sequence counter first."""

    def __init__(self, inventory_id: str | None, detail: str = ""):
        self.inventory_id = inventory_id
        owner = f" of inventory '{inventory_id}'" if inventory_id else ""
        super().__init__(
            f"Sequence counter{owner} was advanced concurrently"
            + (f": {detail}" if detail else ".")
        )


class IdGenerationError(InventoryDataError):
    """Could not generate a unique custom id within the retry budget."""

    def __init__(self, inventory_id: str, attempts: int):
        self.inventory_id = inventory_id
        self.attempts = attempts
        super().__init__(
            f"Could not generate a unique custom ID for inventory '{inventory_id}' "
            f"after {attempts} attempts.\n\n"
            f"Suggestions:\n"
            f"1. Save the item again\n"
            f"2. Add a Sequence or wider RandomNumbers/Guid segment to the id format"
        )


class SequenceExhaustedError(InventoryDataError):
    """A sequence counter has no storable value left."""

    def __init__(self, inventory_id: str, segment_id: str):
        self.inventory_id = inventory_id
        self.segment_id = segment_id
        super().__init__(
            f"Sequence counter '{segment_id}' of inventory '{inventory_id}' is exhausted.\n\n"
            f"Suggestions:\n"
            f"1. Give the Sequence segment a new id to start a fresh counter"
        )


class ItemValidationError(InventoryDataError):
    """Submitted item data failed validation (errors keyed by field)."""

    def __init__(self, errors: dict[str, str]):
        self.errors = errors
        details = "\n".join(f"- {key}: {message}" for key, message in errors.items())
        super().__init__(f"Item validation failed:\n{details}")


class FieldLimitError(InventoryDataError):
    """No free slot left for another custom field of a type."""

    def __init__(self, field_type: str, limit: int):
        self.field_type = field_type
        self.limit = limit
        super().__init__(
            f"Cannot add another field of type '{field_type}'. Maximum of {limit} reached.\n\n"
            f"Suggestions:\n"
            f"1. Delete an unused '{field_type}' field\n"
            f"2. Use a field of another type"
        )


__all__ = [
    "InventoryDataError",
    "InventoryNotFoundError",
    "ItemNotFoundError",
    "FieldNotFoundError",
    "ConcurrencyError",
    "DuplicateIdError",
    "SequenceConflictError",
    "IdGenerationError",
    "SequenceExhaustedError",
    "ItemValidationError",
    "FieldLimitError",
    "MalformedFormatError",
]
