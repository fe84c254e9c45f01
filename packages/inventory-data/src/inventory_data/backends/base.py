"""Storage backend interface.

A backend hands out sessions, one per transaction. Everything done through a
session commits together when the ``transaction()`` block exits normally and
rolls back together when it raises, so an item and the sequence counters used
for its custom id are persisted atomically or not at all.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager

from inventory_data.models import CustomField, Inventory, InventoryPermission, Item


class Session(ABC):
    """Storage operations available inside one transaction."""

    # Inventories

    @abstractmethod
    def get_inventory(self, inventory_id: str, for_update: bool = False) -> Inventory | None:
        """Load an inventory, optionally locking it until the transaction ends."""
        pass

    @abstractmethod
    def insert_inventory(self, inventory: Inventory) -> None:
        pass

    @abstractmethod
    def update_inventory(self, inventory: Inventory) -> None:
        """
        Write an inventory if its stored version equals ``inventory.version``.

        On success ``inventory.version`` is incremented in place.

        Raises:
            ConcurrencyError: If the stored version differs
        """
        pass

    @abstractmethod
    def bump_inventory_version(self, inventory_id: str) -> int:
        """Increment the inventory version unconditionally and return it."""
        pass

    @abstractmethod
    def delete_inventory(self, inventory_id: str) -> None:
        """Delete an inventory with its fields, items, counters and grants."""
        pass

    # Custom fields

    @abstractmethod
    def list_fields(self, inventory_id: str) -> list[CustomField]:
        """Fields of an inventory ordered by position."""
        pass

    @abstractmethod
    def get_field(self, field_id: str) -> CustomField | None:
        pass

    @abstractmethod
    def insert_field(self, custom_field: CustomField) -> None:
        pass

    @abstractmethod
    def update_field(self, custom_field: CustomField) -> None:
        pass

    @abstractmethod
    def delete_fields(self, field_ids: list[str]) -> None:
        pass

    # Items

    @abstractmethod
    def get_items(self, item_ids: list[str], for_update: bool = False) -> list[Item]:
        """Load items by id (missing ids are skipped)."""
        pass

    @abstractmethod
    def list_items(self, inventory_id: str) -> list[Item]:
        """Items of an inventory, newest first."""
        pass

    @abstractmethod
    def insert_item(self, item: Item) -> None:
        """
        Raises:
            DuplicateIdError: If a non-empty custom id is already used in the inventory
        """
        pass

    @abstractmethod
    def update_item(self, item: Item) -> None:
        """
        Write an item if its stored version equals ``item.version``.

        On success ``item.version`` is incremented in place.

        Raises:
            ConcurrencyError: If the stored version differs
            DuplicateIdError: If a non-empty custom id is already used in the inventory
        """
        pass

    @abstractmethod
    def delete_items(self, item_ids: list[str]) -> None:
        pass

    @abstractmethod
    def clear_field_values(self, inventory_id: str, column: str) -> None:
        """Reset one slot column to None on every item of an inventory."""
        pass

    # Sequence counters

    @abstractmethod
    def get_sequence_value(self, inventory_id: str, segment_id: str) -> int | None:
        """
        Last value of a counter, locking the counter until the transaction ends.

        Returns:
            Last value, None if the counter was never used
        """
        pass

    @abstractmethod
    def insert_sequence_value(self, inventory_id: str, segment_id: str, value: int) -> None:
        """
        Create a counter.

        Raises:
            SequenceConflictError: If a concurrent writer created it first
        """
        pass

    @abstractmethod
    def update_sequence_value(self, inventory_id: str, segment_id: str, value: int) -> None:
        pass

    @abstractmethod
    def list_sequence_values(self, inventory_id: str) -> dict[str, int]:
        """All counters of an inventory keyed by segment id."""
        pass

    # Write grants

    @abstractmethod
    def list_permissions(self, inventory_id: str) -> list[InventoryPermission]:
        """Grants of an inventory ordered by user id."""
        pass

    @abstractmethod
    def get_permission(self, inventory_id: str, user_id: str) -> InventoryPermission | None:
        pass

    @abstractmethod
    def insert_permission(self, permission: InventoryPermission) -> None:
        pass

    @abstractmethod
    def delete_permissions(self, inventory_id: str, user_ids: list[str]) -> int:
        """Remove the grants of the given users and return how many existed."""
        pass


class Backend(ABC):
    """Factory of transactional sessions."""

    @abstractmethod
    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """
        Run a block inside one transaction.

        Raises:
            SequenceConflictError: If the store aborted the transaction because of
                a concurrent writer (serialization failure, deadlock)
        """
        pass
