"""Faker-based inventory seeding."""

import logging
from typing import Any

from faker import Faker

from inventory_data.custom_fields import CustomFieldService
from inventory_data.items import ItemService
from inventory_data.models import CustomField, FieldType, Item

logger = logging.getLogger(__name__)

fake = Faker()


class InventorySeeder:
    """Fill an inventory with realistic items."""

    # Field type → Faker method mapping
    TYPE_GENERATORS = {
        FieldType.STRING: lambda: fake.catch_phrase(),
        FieldType.TEXT: lambda: fake.text(max_nb_chars=200),
        FieldType.NUMERIC: lambda: fake.pydecimal(left_digits=4, right_digits=2, positive=True),
        FieldType.BOOL: lambda: fake.boolean(),
        FieldType.FILE_URL: lambda: fake.image_url(),
    }

    # Field name → Faker method mapping, checked first
    NAME_MAPPINGS = {
        "name": lambda: fake.name(),
        "title": lambda: fake.sentence(nb_words=4).rstrip("."),
        "author": lambda: fake.name(),
        "company": lambda: fake.company(),
        "manufacturer": lambda: fake.company(),
        "color": lambda: fake.color_name(),
        "description": lambda: fake.text(max_nb_chars=200),
        "email": lambda: fake.email(),
        "url": lambda: fake.url(),
    }

    def __init__(self, items: ItemService, fields: CustomFieldService):
        """
        Initialize InventorySeeder.

        Args:
            items: Item service used to persist items (assigns custom ids)
            fields: Field service used to read the inventory's fields
        """
        self.items = items
        self.fields = fields

    def generate_value(self, custom_field: CustomField) -> Any:
        """Generate a value for a field based on its name and type."""
        key = custom_field.name.strip().lower()
        if key in self.NAME_MAPPINGS and custom_field.field_type in (
            FieldType.STRING,
            FieldType.TEXT,
        ):
            return self.NAME_MAPPINGS[key]()
        return self.TYPE_GENERATORS[custom_field.field_type]()

    def seed(self, inventory_id: str, count: int) -> list[Item]:
        """
        Create ``count`` items with generated field values.

        Raises:
            ValueError: If count is negative
        """
        if count < 0:
            raise ValueError(f"Count must be non-negative, got {count}")

        fields = self.fields.list_fields(inventory_id)
        items = [
            self.items.create_item(inventory_id, {f.id: self.generate_value(f) for f in fields})
            for _ in range(count)
        ]
        logger.info(f"Seeded {len(items)} item(s) into inventory '{inventory_id}'")
        return items
