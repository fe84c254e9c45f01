"""Item persistence with custom id assignment."""

import logging
from collections.abc import Callable, Mapping
from typing import Any

from custom_ids import (
    GeneratedId,
    IdGenerator,
    IdValidator,
    ValidationResult,
    parse_boundaries,
    split_id,
)

from inventory_data.backends.base import Backend, Session
from inventory_data.exceptions import (
    ConcurrencyError,
    DuplicateIdError,
    IdGenerationError,
    InventoryNotFoundError,
    ItemNotFoundError,
    ItemValidationError,
    SequenceConflictError,
)
from inventory_data.fields import hydrate_item
from inventory_data.models import Inventory, Item
from inventory_data.sequences import SequenceCoordinator

logger = logging.getLogger(__name__)

# Maximum attempts to persist an item with a freshly generated custom id
MAX_ID_RETRIES = 3

DUPLICATE_ID_MESSAGE = "This Custom ID is already in use in this inventory."
NO_FORMAT_MESSAGE = "A Custom ID is not allowed because no format is defined for this inventory."


class ItemService:
    """Create, update and delete items, assigning custom ids on the way."""

    def __init__(
        self,
        backend: Backend,
        generator: IdGenerator | None = None,
        max_retries: int = MAX_ID_RETRIES,
    ):
        """
        Initialize ItemService.

        Args:
            backend: Storage backend
            generator: Id generator (default: UTC clock, system random source)
            max_retries: Attempts before giving up on a colliding generated id
        """
        self.backend = backend
        self.sequences = SequenceCoordinator(generator)
        self.validator = IdValidator()
        self.max_retries = max_retries

    # Queries

    def get_item(self, item_id: str) -> Item:
        """
        Load one item.

        Raises:
            ItemNotFoundError: If the item does not exist
        """
        with self.backend.transaction() as session:
            items = session.get_items([item_id])
        if not items:
            raise ItemNotFoundError([item_id])
        return items[0]

    def list_items(self, inventory_id: str) -> list[Item]:
        """Items of an inventory, newest first."""
        with self.backend.transaction() as session:
            self._load_inventory(session, inventory_id)
            return session.list_items(inventory_id)

    def preview_id(
        self,
        inventory_id: str,
        last_known: Mapping[str, int] | None = None,
    ) -> GeneratedId | None:
        """
        Render the id the next item would receive, without claiming it.

        Args:
            inventory_id: Inventory id
            last_known: Counter values of a previous preview, reused to re-roll
                random parts without moving the sequence numbers

        Returns:
            Preview, None when the inventory has no id format
        """
        with self.backend.transaction() as session:
            inventory = self._load_inventory(session, inventory_id)
            segments = inventory.segments
            if not segments:
                return None
            return self.sequences.preview(session, inventory_id, segments, last_known)

    def validate_custom_id(
        self,
        inventory_id: str,
        custom_id: str,
        boundaries: str | None = None,
    ) -> ValidationResult:
        """Check an id against the inventory's current format."""
        with self.backend.transaction() as session:
            inventory = self._load_inventory(session, inventory_id)
        return self.validator.validate(custom_id, inventory.segments, boundaries)

    # Commands

    def create_item(
        self,
        inventory_id: str,
        field_values: Mapping[str, Any] | None = None,
        custom_id: str | None = None,
        boundaries: str | None = None,
    ) -> Item:
        """
        Create an item.

        Without ``custom_id`` an id is generated from the inventory's format and
        its sequence counters are advanced in the same transaction as the insert.
        A generated id that collides with an existing one is regenerated, up to
        ``max_retries`` attempts.

        Args:
            inventory_id: Owning inventory
            field_values: Custom field values keyed by field id
            custom_id: Manually entered id (validated against ``boundaries``)
            boundaries: Per-segment lengths of ``custom_id``

        Returns:
            Persisted item

        Raises:
            InventoryNotFoundError: If the inventory does not exist
            ItemValidationError: If a field value or the manual id is invalid
            IdGenerationError: If no unique id could be generated
        """
        values = field_values or {}
        manual = bool(custom_id)

        def attempt(session: Session, burned: dict[str, int]) -> Item:
            inventory = self._load_inventory(session, inventory_id)
            item = Item(inventory_id=inventory_id)
            errors = hydrate_item(item, values, session.list_fields(inventory_id))
            if manual:
                self._apply_manual_id(session, inventory, item, custom_id, boundaries, errors)
            else:
                self._apply_generated_id(session, inventory, item, burned)
            if errors:
                raise ItemValidationError(errors)

            session.insert_item(item)
            session.bump_inventory_version(inventory_id)
            return item

        item = self._with_retries("create", inventory_id, manual, attempt)
        logger.info(f"Created item '{item.id}' with custom ID {item.custom_id!r}")
        return item

    def update_item(
        self,
        item_id: str,
        expected_version: int,
        field_values: Mapping[str, Any] | None = None,
        custom_id: str | None = None,
        boundaries: str | None = None,
        regenerate_id: bool = False,
    ) -> Item:
        """
        Update an item.

        The custom id is kept when ``custom_id`` is None, regenerated when it is
        empty or ``regenerate_id`` is set, and otherwise validated as a manual id.
        Boundaries default to the stored ones when the id is submitted unchanged.

        Args:
            item_id: Item id
            expected_version: Version the caller last read
            field_values: Custom field values keyed by field id
            custom_id: New custom id
            boundaries: Per-segment lengths of ``custom_id``
            regenerate_id: Force a freshly generated id

        Returns:
            Updated item

        Raises:
            ItemNotFoundError: If the item does not exist
            ConcurrencyError: If the item changed since ``expected_version``
            ItemValidationError: If a field value or the manual id is invalid
            IdGenerationError: If no unique id could be generated
        """
        values = field_values or {}
        generate = regenerate_id or custom_id == ""
        manual = custom_id is not None and not generate

        def attempt(session: Session, burned: dict[str, int]) -> Item:
            items = session.get_items([item_id], for_update=True)
            if not items:
                raise ItemNotFoundError([item_id])
            item = items[0]
            if item.version != expected_version:
                raise ConcurrencyError("item", item_id, expected_version, item.version)

            inventory = self._load_inventory(session, item.inventory_id)
            errors = hydrate_item(item, values, session.list_fields(item.inventory_id))
            if generate:
                self._apply_generated_id(session, inventory, item, burned)
            elif manual:
                item_boundaries = boundaries
                if item_boundaries is None and custom_id == item.custom_id:
                    item_boundaries = item.custom_id_segment_boundaries
                self._apply_manual_id(session, inventory, item, custom_id, item_boundaries, errors)
            if errors:
                raise ItemValidationError(errors)

            session.update_item(item)
            session.bump_inventory_version(item.inventory_id)
            return item

        return self._with_retries("update", item_id, manual, attempt)

    def delete_items(self, item_ids: list[str]) -> int:
        """
        Delete items of one inventory.

        Returns:
            The inventory's new version

        Raises:
            ItemNotFoundError: If any item does not exist
            ValueError: If the items belong to different inventories
        """
        if not item_ids:
            raise ValueError("No items to delete.")

        with self.backend.transaction() as session:
            items = session.get_items(item_ids, for_update=True)
            found = {item.id for item in items}
            missing = [item_id for item_id in item_ids if item_id not in found]
            if missing:
                raise ItemNotFoundError(missing)

            inventory_ids = {item.inventory_id for item in items}
            if len(inventory_ids) > 1:
                raise ValueError("Items to delete must belong to the same inventory.")

            inventory_id = inventory_ids.pop()
            session.delete_items(item_ids)
            version = session.bump_inventory_version(inventory_id)

        logger.info(f"Deleted {len(item_ids)} item(s) from inventory '{inventory_id}'")
        return version

    def refresh_stale_ids(self, inventory_id: str) -> int:
        """
        Bring the custom ids of an inventory in line with its current format.

        Items whose id still matches the format are only re-stamped with the
        current format hash; the others receive a freshly generated id.

        Returns:
            Number of items touched
        """
        with self.backend.transaction() as session:
            inventory = self._load_inventory(session, inventory_id)
            stale = [item for item in session.list_items(inventory_id) if item.is_stale(inventory)]

        segments = inventory.segments
        refreshed = 0
        for item in reversed(stale):
            if self.validator.is_valid(item.custom_id, segments):
                self._restamp(item.id, item.version)
            else:
                self.update_item(item.id, item.version, regenerate_id=True)
            refreshed += 1

        if refreshed:
            logger.info(f"Refreshed {refreshed} stale custom ID(s) in inventory '{inventory_id}'")
        return refreshed

    # Internals

    def _load_inventory(self, session: Session, inventory_id: str) -> Inventory:
        inventory = session.get_inventory(inventory_id)
        if inventory is None:
            raise InventoryNotFoundError(inventory_id)
        return inventory

    def _with_retries(
        self,
        action: str,
        target_id: str,
        manual: bool,
        attempt: Callable[[Session, dict[str, int]], Item],
    ) -> Item:
        burned: dict[str, int] = {}
        for number in range(1, self.max_retries + 1):
            try:
                with self.backend.transaction() as session:
                    return attempt(session, burned)
            except DuplicateIdError as e:
                if manual:
                    raise ItemValidationError({"custom_id": DUPLICATE_ID_MESSAGE}) from e
                logger.warning(
                    f"Generated custom ID collided on {action} of '{target_id}' "
                    f"(attempt {number}/{self.max_retries})"
                )
            except SequenceConflictError as e:
                logger.warning(
                    f"Sequence conflict on {action} of '{target_id}' "
                    f"(attempt {number}/{self.max_retries}): {e}"
                )
        raise IdGenerationError(target_id, self.max_retries)

    def _apply_generated_id(
        self,
        session: Session,
        inventory: Inventory,
        item: Item,
        burned: dict[str, int],
    ) -> None:
        segments = inventory.segments
        if not segments:
            item.custom_id = ""
            item.custom_id_segment_boundaries = None
        else:
            generated = self.sequences.claim(session, inventory.id, segments, burned)
            # A failed attempt still used these values; the retry starts past them
            burned.update(generated.sequence_values)
            item.custom_id = generated.value
            item.custom_id_segment_boundaries = generated.boundaries_text
        item.custom_id_format_hash_applied = inventory.custom_id_format_hash

    def _apply_manual_id(
        self,
        session: Session,
        inventory: Inventory,
        item: Item,
        custom_id: str,
        boundaries: str | None,
        errors: dict[str, str],
    ) -> None:
        segments = inventory.segments
        if not segments:
            errors["custom_id"] = NO_FORMAT_MESSAGE
            return

        result = self.validator.validate_segmented(custom_id, boundaries, segments)
        if not result.valid:
            errors["custom_id"] = result.error or "Invalid Custom ID."
            return

        parts = split_id(custom_id, parse_boundaries(boundaries))
        self.sequences.observe(session, inventory.id, segments, parts)
        item.custom_id = custom_id
        item.custom_id_segment_boundaries = boundaries
        item.custom_id_format_hash_applied = inventory.custom_id_format_hash

    def _restamp(self, item_id: str, version: int) -> None:
        with self.backend.transaction() as session:
            items = session.get_items([item_id], for_update=True)
            if not items:
                return
            item = items[0]
            if item.version != version:
                raise ConcurrencyError("item", item_id, version, item.version)
            inventory = self._load_inventory(session, item.inventory_id)
            item.custom_id_format_hash_applied = inventory.custom_id_format_hash
            session.update_item(item)
