"""Data models and type definitions."""

import enum
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from custom_ids import Segment, parse_format


def new_id() -> str:
    """Fresh primary key (UUID string)."""
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class FieldType(str, enum.Enum):
    """Custom field value types."""

    STRING = "String"
    TEXT = "Text"
    NUMERIC = "Numeric"
    BOOL = "Bool"
    FILE_URL = "FileUrl"


class PermissionLevel(str, enum.Enum):
    """Access levels a user can be granted on an inventory."""

    WRITE = "Write"


@dataclass
class Inventory:
    """
    A collection of items sharing one schema and one custom id format.

    Attributes:
        name: Display name
        owner_id: Owning user id
        id: Primary key
        is_public: Whether any user may write to the inventory
        created_at: Creation time (UTC)
        custom_id_format: Canonical format document, None if no format is set
        custom_id_format_hash: SHA-256 of ``custom_id_format``
        version: Optimistic-concurrency counter, bumped on every change to the
            inventory, its fields or its item collection
    """

    name: str
    owner_id: str = ""
    id: str = field(default_factory=new_id)
    is_public: bool = False
    created_at: datetime = field(default_factory=utc_now)
    custom_id_format: str | None = None
    custom_id_format_hash: str | None = None
    version: int = 1

    @property
    def segments(self) -> list[Segment]:
        """
        Parsed id format.

        Raises:
            MalformedFormatError: If the stored document is corrupted
        """
        return parse_format(self.custom_id_format)


@dataclass
class InventoryPermission:
    """A user's granted access to an inventory they do not own."""

    inventory_id: str
    user_id: str
    level: PermissionLevel = PermissionLevel.WRITE


@dataclass
class CustomField:
    """
    A user-defined item field bound to one storage slot.

    Attributes:
        inventory_id: Owning inventory
        name: Display name
        field_type: Value type
        target_column: Storage slot (see ``inventory_data.fields.FIELD_SLOTS``)
        id: Primary key
        position: Display order within the inventory
        description: Help text
        is_visible_in_table: Whether the field is shown in item tables
    """

    inventory_id: str
    name: str
    field_type: FieldType
    target_column: str
    id: str = field(default_factory=new_id)
    position: int = 0
    description: str = ""
    is_visible_in_table: bool = True


@dataclass
class Item:
    """
    An inventory item.

    Attributes:
        inventory_id: Owning inventory
        id: Primary key
        custom_id: Generated or user-edited id, "" when no format is set
        created_at: Creation time (UTC)
        custom_id_format_hash_applied: Format hash in effect when ``custom_id``
            was last computed
        custom_id_segment_boundaries: Per-segment lengths of ``custom_id``
            (comma-separated)
        version: Optimistic-concurrency counter
        field_values: Custom field values keyed by storage slot column
    """

    inventory_id: str
    id: str = field(default_factory=new_id)
    custom_id: str = ""
    created_at: datetime = field(default_factory=utc_now)
    custom_id_format_hash_applied: str | None = None
    custom_id_segment_boundaries: str | None = None
    version: int = 1
    field_values: dict[str, Any] = field(default_factory=dict)

    def is_stale(self, inventory: Inventory) -> bool:
        """Whether the custom id predates the inventory's current format."""
        return self.custom_id_format_hash_applied != inventory.custom_id_format_hash
