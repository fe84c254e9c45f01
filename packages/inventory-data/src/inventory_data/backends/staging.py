"""Staging backend - in-memory backend for testing without database."""

import copy
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

from inventory_data.backends.base import Backend, Session
from inventory_data.exceptions import (
    ConcurrencyError,
    DuplicateIdError,
    SequenceConflictError,
)
from inventory_data.models import CustomField, Inventory, InventoryPermission, Item


@dataclass
class _State:
    inventories: dict[str, Inventory] = field(default_factory=dict)
    fields: dict[str, CustomField] = field(default_factory=dict)
    items: dict[str, Item] = field(default_factory=dict)
    sequences: dict[tuple[str, str], int] = field(default_factory=dict)
    permissions: dict[tuple[str, str], InventoryPermission] = field(default_factory=dict)


class StagingSession(Session):
    """Session over a private copy of the staging state."""

    def __init__(self, state: _State):
        self._state = state

    def get_inventory(self, inventory_id: str, for_update: bool = False) -> Inventory | None:
        inventory = self._state.inventories.get(inventory_id)
        return copy.deepcopy(inventory) if inventory else None

    def insert_inventory(self, inventory: Inventory) -> None:
        self._state.inventories[inventory.id] = copy.deepcopy(inventory)

    def update_inventory(self, inventory: Inventory) -> None:
        stored = self._state.inventories.get(inventory.id)
        if stored is None or stored.version != inventory.version:
            raise ConcurrencyError(
                "inventory", inventory.id, inventory.version, stored.version if stored else None
            )
        inventory.version += 1
        self._state.inventories[inventory.id] = copy.deepcopy(inventory)

    def bump_inventory_version(self, inventory_id: str) -> int:
        stored = self._state.inventories[inventory_id]
        stored.version += 1
        return stored.version

    def delete_inventory(self, inventory_id: str) -> None:
        state = self._state
        state.inventories.pop(inventory_id, None)
        state.fields = {k: f for k, f in state.fields.items() if f.inventory_id != inventory_id}
        state.items = {k: i for k, i in state.items.items() if i.inventory_id != inventory_id}
        state.sequences = {k: v for k, v in state.sequences.items() if k[0] != inventory_id}
        state.permissions = {k: p for k, p in state.permissions.items() if k[0] != inventory_id}

    def list_fields(self, inventory_id: str) -> list[CustomField]:
        fields = [f for f in self._state.fields.values() if f.inventory_id == inventory_id]
        return copy.deepcopy(sorted(fields, key=lambda f: f.position))

    def get_field(self, field_id: str) -> CustomField | None:
        custom_field = self._state.fields.get(field_id)
        return copy.deepcopy(custom_field) if custom_field else None

    def insert_field(self, custom_field: CustomField) -> None:
        self._state.fields[custom_field.id] = copy.deepcopy(custom_field)

    def update_field(self, custom_field: CustomField) -> None:
        self._state.fields[custom_field.id] = copy.deepcopy(custom_field)

    def delete_fields(self, field_ids: list[str]) -> None:
        for field_id in field_ids:
            self._state.fields.pop(field_id, None)

    def get_items(self, item_ids: list[str], for_update: bool = False) -> list[Item]:
        return [
            copy.deepcopy(self._state.items[item_id])
            for item_id in item_ids
            if item_id in self._state.items
        ]

    def list_items(self, inventory_id: str) -> list[Item]:
        items = [i for i in self._state.items.values() if i.inventory_id == inventory_id]
        return copy.deepcopy(sorted(items, key=lambda i: i.created_at, reverse=True))

    def _check_custom_id(self, item: Item) -> None:
        # Mirrors the partial unique index on (inventory_id, custom_id) WHERE custom_id <> ''
        if not item.custom_id:
            return
        for other in self._state.items.values():
            if (
                other.id != item.id
                and other.inventory_id == item.inventory_id
                and other.custom_id == item.custom_id
            ):
                raise DuplicateIdError(item.inventory_id, item.custom_id)

    def insert_item(self, item: Item) -> None:
        self._check_custom_id(item)
        self._state.items[item.id] = copy.deepcopy(item)

    def update_item(self, item: Item) -> None:
        stored = self._state.items.get(item.id)
        if stored is None or stored.version != item.version:
            raise ConcurrencyError("item", item.id, item.version, stored.version if stored else None)
        self._check_custom_id(item)
        item.version += 1
        self._state.items[item.id] = copy.deepcopy(item)

    def delete_items(self, item_ids: list[str]) -> None:
        for item_id in item_ids:
            self._state.items.pop(item_id, None)

    def clear_field_values(self, inventory_id: str, column: str) -> None:
        for item in self._state.items.values():
            if item.inventory_id == inventory_id:
                item.field_values.pop(column, None)

    def get_sequence_value(self, inventory_id: str, segment_id: str) -> int | None:
        return self._state.sequences.get((inventory_id, segment_id))

    def insert_sequence_value(self, inventory_id: str, segment_id: str, value: int) -> None:
        key = (inventory_id, segment_id)
        if key in self._state.sequences:
            raise SequenceConflictError(inventory_id, f"counter '{segment_id}' already exists")
        self._state.sequences[key] = value

    def update_sequence_value(self, inventory_id: str, segment_id: str, value: int) -> None:
        self._state.sequences[(inventory_id, segment_id)] = value

    def list_sequence_values(self, inventory_id: str) -> dict[str, int]:
        return {
            segment_id: value
            for (owner_id, segment_id), value in self._state.sequences.items()
            if owner_id == inventory_id
        }

    def list_permissions(self, inventory_id: str) -> list[InventoryPermission]:
        permissions = [p for p in self._state.permissions.values() if p.inventory_id == inventory_id]
        return copy.deepcopy(sorted(permissions, key=lambda p: p.user_id))

    def get_permission(self, inventory_id: str, user_id: str) -> InventoryPermission | None:
        permission = self._state.permissions.get((inventory_id, user_id))
        return copy.deepcopy(permission) if permission else None

    def insert_permission(self, permission: InventoryPermission) -> None:
        key = (permission.inventory_id, permission.user_id)
        self._state.permissions[key] = copy.deepcopy(permission)

    def delete_permissions(self, inventory_id: str, user_ids: list[str]) -> int:
        removed = 0
        for user_id in set(user_ids):
            if self._state.permissions.pop((inventory_id, user_id), None) is not None:
                removed += 1
        return removed


class StagingBackend(Backend):
    """
    In-memory backend for testing without database.

    Simulates database behavior:
    - Transactions see a private copy of the state, committed on success and
      discarded on error
    - Transactions are serialized with a lock, so counters never hand out the
      same value twice
    - Enforces the per-inventory uniqueness of non-empty custom ids

    Use case: Fast unit tests, offline development, prototyping.
    """

    def __init__(self):
        """Initialize staging backend with empty state."""
        self._state = _State()
        self._lock = threading.RLock()

    @contextmanager
    def transaction(self) -> Iterator[StagingSession]:
        with self._lock:
            working = copy.deepcopy(self._state)
            yield StagingSession(working)
            self._state = working

    def get_data(self) -> _State:
        """Snapshot of the committed state for inspection."""
        with self._lock:
            return copy.deepcopy(self._state)

    def clear(self) -> None:
        """Clear all in-memory data."""
        with self._lock:
            self._state = _State()
