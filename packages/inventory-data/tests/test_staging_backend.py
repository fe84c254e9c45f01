"""Test staging backend for in-memory storage without database."""

import pytest

from inventory_data import (
    ConcurrencyError,
    CustomField,
    DuplicateIdError,
    FieldType,
    Inventory,
    InventoryPermission,
    Item,
    SequenceConflictError,
    StagingBackend,
    get_backend,
)


class TestStagingTransactions:
    """Tests for StagingBackend transactions."""

    def test_commit(self, backend: StagingBackend) -> None:
        """Test changes are visible after the block exits."""
        inventory = Inventory(name="Books")
        with backend.transaction() as session:
            session.insert_inventory(inventory)

        assert backend.get_data().inventories[inventory.id].name == "Books"

    def test_rollback(self, backend: StagingBackend) -> None:
        """Test changes are discarded when the block raises."""
        with pytest.raises(RuntimeError):
            with backend.transaction() as session:
                session.insert_inventory(Inventory(name="Books"))
                raise RuntimeError("boom")

        assert backend.get_data().inventories == {}

    def test_returned_objects_are_copies(self, backend: StagingBackend) -> None:
        """Test mutating a loaded object does not change stored state."""
        inventory = Inventory(name="Books")
        with backend.transaction() as session:
            session.insert_inventory(inventory)
            session.get_inventory(inventory.id).name = "Changed"

        assert backend.get_data().inventories[inventory.id].name == "Books"

    def test_clear(self, backend: StagingBackend) -> None:
        """Test clearing all data."""
        with backend.transaction() as session:
            session.insert_inventory(Inventory(name="Books"))
        backend.clear()

        assert backend.get_data().inventories == {}


class TestStagingConstraints:
    """Tests for constraints enforced by the staging session."""

    def test_duplicate_custom_id(self, backend: StagingBackend) -> None:
        """Test non-empty custom ids are unique per inventory."""
        with backend.transaction() as session:
            session.insert_item(Item(inventory_id="a", custom_id="X"))
            session.insert_item(Item(inventory_id="b", custom_id="X"))
            session.insert_item(Item(inventory_id="a", custom_id=""))
            session.insert_item(Item(inventory_id="a", custom_id=""))

            with pytest.raises(DuplicateIdError):
                session.insert_item(Item(inventory_id="a", custom_id="X"))

    def test_item_version_check(self, backend: StagingBackend) -> None:
        """Test item updates compare and bump the version."""
        item = Item(inventory_id="a")
        with backend.transaction() as session:
            session.insert_item(item)
            session.update_item(item)

            assert item.version == 2
            item.version = 1
            with pytest.raises(ConcurrencyError):
                session.update_item(item)

    def test_counter_created_twice(self, backend: StagingBackend) -> None:
        """Test creating an existing counter is a sequence conflict."""
        with backend.transaction() as session:
            session.insert_sequence_value("a", "s", 1)

            with pytest.raises(SequenceConflictError):
                session.insert_sequence_value("a", "s", 1)


class TestStagingDeletes:
    """Tests for deleting inventories and grants."""

    def test_delete_inventory_keeps_other_inventories(self, backend: StagingBackend) -> None:
        """Test only the deleted inventory's rows are removed."""
        with backend.transaction() as session:
            for inventory_id in ("a", "b"):
                session.insert_inventory(Inventory(name=inventory_id, id=inventory_id))
                session.insert_field(
                    CustomField(inventory_id, "Color", FieldType.STRING, "custom_string1")
                )
                session.insert_item(Item(inventory_id=inventory_id, custom_id="X"))
                session.insert_sequence_value(inventory_id, "s", 3)
                session.insert_permission(InventoryPermission(inventory_id, "user-2"))

            session.delete_inventory("a")

        data = backend.get_data()
        assert list(data.inventories) == ["b"]
        assert {f.inventory_id for f in data.fields.values()} == {"b"}
        assert {i.inventory_id for i in data.items.values()} == {"b"}
        assert list(data.sequences) == [("b", "s")]
        assert list(data.permissions) == [("b", "user-2")]

    def test_permissions(self, backend: StagingBackend) -> None:
        """Test grants are listed by user and deleted by count."""
        with backend.transaction() as session:
            session.insert_permission(InventoryPermission("a", "user-3"))
            session.insert_permission(InventoryPermission("a", "user-2"))
            session.insert_permission(InventoryPermission("b", "user-2"))

            assert [p.user_id for p in session.list_permissions("a")] == ["user-2", "user-3"]
            assert session.get_permission("a", "user-9") is None
            assert session.delete_permissions("a", ["user-2", "user-2", "user-9"]) == 1
            assert session.get_permission("a", "user-2") is None
            assert session.get_permission("b", "user-2") is not None


class TestGetBackend:
    """Tests for get_backend()."""

    def test_staging(self) -> None:
        """Test staging backend needs no connection."""
        assert isinstance(get_backend("staging"), StagingBackend)

    def test_direct_requires_connection(self) -> None:
        """Test direct backend without connection."""
        with pytest.raises(ValueError, match="requires a database connection"):
            get_backend("direct")

    def test_unknown(self) -> None:
        """Test unknown backend names."""
        with pytest.raises(ValueError, match="Unknown backend"):
            get_backend("sqlite")
