"""
inventory-data - Inventory Items with Custom Ids

Stores inventories, their custom fields and items, and assigns each item a
custom id from the inventory's id format. Sequence counters are strictly
increasing (gaps allowed) and colliding ids are retried.
"""

from inventory_data.access import AccessService
from inventory_data.backends import DirectBackend, StagingBackend, get_backend
from inventory_data.custom_fields import CustomFieldService
from inventory_data.exceptions import (
    ConcurrencyError,
    DuplicateIdError,
    FieldLimitError,
    FieldNotFoundError,
    IdGenerationError,
    InventoryDataError,
    InventoryNotFoundError,
    ItemNotFoundError,
    ItemValidationError,
    MalformedFormatError,
    SequenceConflictError,
    SequenceExhaustedError,
)
from inventory_data.inventories import InventoryService
from inventory_data.items import ItemService
from inventory_data.models import (
    CustomField,
    FieldType,
    Inventory,
    InventoryPermission,
    Item,
    PermissionLevel,
)
from inventory_data.seeder import InventorySeeder
from inventory_data.sequences import SequenceCoordinator

__version__ = "0.1.0"

__all__ = [
    "InventoryService",
    "AccessService",
    "CustomFieldService",
    "ItemService",
    "InventorySeeder",
    "SequenceCoordinator",
    "DirectBackend",
    "StagingBackend",
    "get_backend",
    "Inventory",
    "InventoryPermission",
    "PermissionLevel",
    "CustomField",
    "Item",
    "FieldType",
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
