"""Inventory lifecycle and settings: name, visibility, ownership and custom id format."""

import logging
from collections.abc import Sequence
from typing import Any

from custom_ids import MalformedFormatError, Segment, canonicalize

from inventory_data.backends.base import Backend, Session
from inventory_data.exceptions import ConcurrencyError, InventoryNotFoundError
from inventory_data.models import Inventory

logger = logging.getLogger(__name__)


class InventoryService:
    """Create inventories and change their settings under optimistic concurrency."""

    def __init__(self, backend: Backend):
        self.backend = backend

    def create_inventory(self, name: str, owner_id: str = "", is_public: bool = False) -> Inventory:
        """
        Create an inventory without an id format.

        Raises:
            ValueError: If the name is blank
        """
        if not name or not name.strip():
            raise ValueError("Inventory name is required.")

        inventory = Inventory(name=name.strip(), owner_id=owner_id, is_public=is_public)
        with self.backend.transaction() as session:
            session.insert_inventory(inventory)

        logger.info(f"Created inventory '{inventory.id}' ({inventory.name})")
        return inventory

    def get_inventory(self, inventory_id: str) -> Inventory:
        """
        Load an inventory.

        Raises:
            InventoryNotFoundError: If the inventory does not exist
        """
        with self.backend.transaction() as session:
            return self._load(session, inventory_id)

    def rename_inventory(self, inventory_id: str, name: str, expected_version: int) -> Inventory:
        """
        Rename an inventory.

        Raises:
            ValueError: If the name is blank
            ConcurrencyError: If the inventory changed since ``expected_version``
        """
        if not name or not name.strip():
            raise ValueError("Inventory name is required.")

        with self.backend.transaction() as session:
            inventory = self._load_for_update(session, inventory_id, expected_version)
            inventory.name = name.strip()
            session.update_inventory(inventory)
        return inventory

    def set_visibility(self, inventory_id: str, is_public: bool, expected_version: int) -> Inventory:
        """Make an inventory public or private."""
        with self.backend.transaction() as session:
            inventory = self._load_for_update(session, inventory_id, expected_version)
            inventory.is_public = is_public
            session.update_inventory(inventory)
        return inventory

    def transfer_ownership(
        self,
        inventory_id: str,
        new_owner_id: str,
        expected_version: int,
    ) -> Inventory:
        """
        Hand an inventory over to another user.

        Write grants held by the previous or the new owner are dropped.

        Raises:
            ValueError: If the new owner is blank or already owns the inventory
            ConcurrencyError: If the inventory changed since ``expected_version``
        """
        if not new_owner_id or not new_owner_id.strip():
            raise ValueError("The new owner is required.")

        with self.backend.transaction() as session:
            inventory = self._load_for_update(session, inventory_id, expected_version)
            if inventory.owner_id == new_owner_id:
                raise ValueError("This user is already the owner.")

            previous_owner_id = inventory.owner_id
            session.delete_permissions(inventory_id, [previous_owner_id, new_owner_id])
            inventory.owner_id = new_owner_id
            session.update_inventory(inventory)

        logger.info(
            f"Transferred inventory '{inventory_id}' from '{previous_owner_id}' to '{new_owner_id}'"
        )
        return inventory

    def delete_inventory(self, inventory_id: str, expected_version: int) -> None:
        """
        Permanently delete an inventory with its fields, items, sequence
        counters and write grants.

        Raises:
            ConcurrencyError: If the inventory changed since ``expected_version``
        """
        with self.backend.transaction() as session:
            self._load_for_update(session, inventory_id, expected_version)
            session.delete_inventory(inventory_id)

        logger.info(f"Deleted inventory '{inventory_id}' and all its data")

    def get_id_format(self, inventory_id: str) -> list[Segment]:
        """
        Parsed id format of an inventory.

        Raises:
            MalformedFormatError: If the stored document is corrupted
        """
        inventory = self.get_inventory(inventory_id)
        try:
            return inventory.segments
        except MalformedFormatError:
            logger.warning(f"Inventory '{inventory_id}' has a corrupted custom ID format")
            raise

    def save_id_format(
        self,
        inventory_id: str,
        document: str | bytes | Sequence[Any] | None,
        expected_version: int,
    ) -> Inventory:
        """
        Replace the id format of an inventory.

        The document is stored in canonical form together with its hash. A
        document without any supported segment clears the format. Existing items
        keep their ids and are reported as stale until refreshed.

        Args:
            inventory_id: Inventory id
            document: Format document (JSON text or decoded array)
            expected_version: Version the caller last read

        Returns:
            Updated inventory

        Raises:
            MalformedFormatError: If the document is not an array of segment objects
            ConcurrencyError: If the inventory changed since ``expected_version``
        """
        try:
            canonical, digest = canonicalize(document)
        except MalformedFormatError as e:
            logger.warning(f"Rejected custom ID format for inventory '{inventory_id}': {e.reason}")
            raise

        with self.backend.transaction() as session:
            inventory = self._load_for_update(session, inventory_id, expected_version)
            inventory.custom_id_format = canonical
            inventory.custom_id_format_hash = digest
            session.update_inventory(inventory)

        logger.info(f"Saved custom ID format of inventory '{inventory_id}' (hash {digest})")
        return inventory

    def list_sequence_values(self, inventory_id: str) -> dict[str, int]:
        """Sequence counters of an inventory keyed by segment id."""
        with self.backend.transaction() as session:
            self._load(session, inventory_id)
            return session.list_sequence_values(inventory_id)

    def _load(self, session: Session, inventory_id: str) -> Inventory:
        inventory = session.get_inventory(inventory_id)
        if inventory is None:
            raise InventoryNotFoundError(inventory_id)
        return inventory

    def _load_for_update(self, session: Session, inventory_id: str, expected_version: int) -> Inventory:
        inventory = session.get_inventory(inventory_id, for_update=True)
        if inventory is None:
            raise InventoryNotFoundError(inventory_id)
        if inventory.version != expected_version:
            raise ConcurrencyError("inventory", inventory_id, expected_version, inventory.version)
        return inventory
