"""Custom field definitions of an inventory."""

import logging

from inventory_data.backends.base import Backend, Session
from inventory_data.exceptions import (
    FieldLimitError,
    FieldNotFoundError,
    InventoryNotFoundError,
)
from inventory_data.fields import MAX_FIELDS_PER_TYPE, next_free_slot
from inventory_data.models import CustomField, FieldType

logger = logging.getLogger(__name__)


class CustomFieldService:
    """Add, edit, reorder and delete custom fields."""

    def __init__(self, backend: Backend):
        self.backend = backend

    def list_fields(self, inventory_id: str) -> list[CustomField]:
        """Fields of an inventory ordered by position."""
        with self.backend.transaction() as session:
            self._require_inventory(session, inventory_id)
            return session.list_fields(inventory_id)

    def add_field(
        self,
        inventory_id: str,
        name: str,
        field_type: FieldType | str,
        description: str = "",
        is_visible_in_table: bool = True,
    ) -> CustomField:
        """
        Add a field bound to the first free slot of its type.

        Args:
            inventory_id: Owning inventory
            name: Display name
            field_type: Value type (enum member or its value, e.g. "Numeric")
            description: Help text
            is_visible_in_table: Whether the field is shown in item tables

        Returns:
            Created field, positioned after the existing ones

        Raises:
            ValueError: If the name is blank or the type unknown
            FieldLimitError: If all slots of the type are taken
        """
        field_type = FieldType(field_type)
        if not name or not name.strip():
            raise ValueError("Field name is required.")

        with self.backend.transaction() as session:
            self._require_inventory(session, inventory_id)
            existing = session.list_fields(inventory_id)

            column = next_free_slot(field_type, (f.target_column for f in existing))
            if column is None:
                raise FieldLimitError(field_type.value, MAX_FIELDS_PER_TYPE)

            custom_field = CustomField(
                inventory_id=inventory_id,
                name=name.strip(),
                field_type=field_type,
                target_column=column,
                position=max((f.position for f in existing), default=0) + 1,
                description=description,
                is_visible_in_table=is_visible_in_table,
            )
            session.insert_field(custom_field)
            session.bump_inventory_version(inventory_id)

        logger.info(f"Added {field_type.value} field '{custom_field.name}' in slot {column}")
        return custom_field

    def update_field(
        self,
        field_id: str,
        name: str | None = None,
        description: str | None = None,
        is_visible_in_table: bool | None = None,
    ) -> CustomField:
        """
        Edit a field's presentation. Type and slot never change.

        Raises:
            FieldNotFoundError: If the field does not exist
            ValueError: If the new name is blank
        """
        if name is not None and not name.strip():
            raise ValueError("Field name is required.")

        with self.backend.transaction() as session:
            custom_field = session.get_field(field_id)
            if custom_field is None:
                raise FieldNotFoundError(field_id)

            if name is not None:
                custom_field.name = name.strip()
            if description is not None:
                custom_field.description = description
            if is_visible_in_table is not None:
                custom_field.is_visible_in_table = is_visible_in_table

            session.update_field(custom_field)
            session.bump_inventory_version(custom_field.inventory_id)
        return custom_field

    def reorder_fields(self, inventory_id: str, field_ids: list[str]) -> list[CustomField]:
        """
        Set field positions from the given order.

        Fields missing from ``field_ids`` keep their relative order after the
        listed ones.
        """
        with self.backend.transaction() as session:
            self._require_inventory(session, inventory_id)
            fields = session.list_fields(inventory_id)
            by_id = {f.id: f for f in fields}

            unknown = [field_id for field_id in field_ids if field_id not in by_id]
            if unknown:
                raise FieldNotFoundError(unknown[0])

            ordered = [by_id[field_id] for field_id in dict.fromkeys(field_ids)]
            ordered += [f for f in fields if f.id not in set(field_ids)]
            for position, custom_field in enumerate(ordered, start=1):
                if custom_field.position != position:
                    custom_field.position = position
                    session.update_field(custom_field)

            session.bump_inventory_version(inventory_id)
        return ordered

    def delete_fields(self, field_ids: list[str]) -> int:
        """
        Delete fields of one inventory and clear their slot on every item.

        Returns:
            The inventory's new version

        Raises:
            FieldNotFoundError: If any field does not exist
            ValueError: If the fields belong to different inventories
        """
        if not field_ids:
            raise ValueError("No fields to delete.")

        with self.backend.transaction() as session:
            fields = []
            for field_id in field_ids:
                custom_field = session.get_field(field_id)
                if custom_field is None:
                    raise FieldNotFoundError(field_id)
                fields.append(custom_field)

            inventory_ids = {f.inventory_id for f in fields}
            if len(inventory_ids) > 1:
                raise ValueError("Fields to delete must belong to the same inventory.")
            inventory_id = inventory_ids.pop()

            for custom_field in fields:
                session.clear_field_values(inventory_id, custom_field.target_column)
            session.delete_fields(field_ids)
            version = session.bump_inventory_version(inventory_id)

        logger.info(f"Deleted {len(field_ids)} field(s) from inventory '{inventory_id}'")
        return version

    def _require_inventory(self, session: Session, inventory_id: str) -> None:
        if session.get_inventory(inventory_id) is None:
            raise InventoryNotFoundError(inventory_id)
