"""Inventory sharing: write grants and the rules deciding who may write."""

import logging

from inventory_data.backends.base import Backend, Session
from inventory_data.exceptions import InventoryNotFoundError
from inventory_data.models import Inventory, InventoryPermission, PermissionLevel

logger = logging.getLogger(__name__)


class AccessService:
    """Grant and revoke write access, and answer access questions."""

    def __init__(self, backend: Backend):
        self.backend = backend

    def can_manage_settings(self, inventory: Inventory, user_id: str, is_admin: bool = False) -> bool:
        """Owners and administrators manage an inventory's settings."""
        return inventory.owner_id == user_id or is_admin

    def can_write(self, inventory: Inventory, user_id: str, is_admin: bool = False) -> bool:
        """
        Whether a user may add, edit and delete items of an inventory.

        Args:
            inventory: Inventory
            user_id: User id, empty for anonymous users
            is_admin: Whether the user is an administrator

        Returns:
            True for settings managers, for any signed-in user on a public
            inventory, and for users holding a Write grant
        """
        if not user_id:
            return False
        if self.can_manage_settings(inventory, user_id, is_admin) or inventory.is_public:
            return True

        with self.backend.transaction() as session:
            permission = session.get_permission(inventory.id, user_id)
        return permission is not None and permission.level == PermissionLevel.WRITE

    def list_permissions(self, inventory_id: str) -> list[InventoryPermission]:
        """Write grants of an inventory ordered by user id."""
        with self.backend.transaction() as session:
            self._load(session, inventory_id)
            return session.list_permissions(inventory_id)

    def grant_write(self, inventory_id: str, user_id: str) -> InventoryPermission:
        """
        Give a user write access to an inventory.

        Granting twice returns the existing grant.

        Raises:
            InventoryNotFoundError: If the inventory does not exist
            ValueError: If the user is blank or owns the inventory
        """
        if not user_id or not user_id.strip():
            raise ValueError("Invalid user specified.")

        with self.backend.transaction() as session:
            inventory = self._load(session, inventory_id)
            if inventory.owner_id == user_id:
                raise ValueError("Invalid user specified.")

            existing = session.get_permission(inventory_id, user_id)
            if existing is not None:
                return existing

            permission = InventoryPermission(inventory_id=inventory_id, user_id=user_id)
            session.insert_permission(permission)

        logger.info(f"Granted write access on inventory '{inventory_id}' to '{user_id}'")
        return permission

    def revoke(self, inventory_id: str, user_ids: list[str]) -> int:
        """
        Remove the write grants of several users.

        Returns:
            Number of grants removed (users without a grant are ignored)

        Raises:
            InventoryNotFoundError: If the inventory does not exist
            ValueError: If no user ids are given
        """
        if not user_ids:
            raise ValueError("No user IDs provided.")

        with self.backend.transaction() as session:
            self._load(session, inventory_id)
            removed = session.delete_permissions(inventory_id, user_ids)

        if removed:
            logger.info(f"Revoked {removed} write grant(s) on inventory '{inventory_id}'")
        return removed

    def _load(self, session: Session, inventory_id: str) -> Inventory:
        inventory = session.get_inventory(inventory_id)
        if inventory is None:
            raise InventoryNotFoundError(inventory_id)
        return inventory
