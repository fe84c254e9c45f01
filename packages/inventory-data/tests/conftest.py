"""Pytest configuration and shared fixtures."""

import json
import os
import random
from datetime import datetime, timezone

import psycopg
import pytest
from psycopg import Connection

from custom_ids import IdGenerator
from inventory_data import (
    AccessService,
    CustomFieldService,
    DirectBackend,
    Inventory,
    InventoryService,
    ItemService,
    StagingBackend,
)

TEST_DATABASE_URL_ENV = "STOCKROOM_TEST_DATABASE_URL"

INVENTORY_FORMAT = json.dumps(
    [
        {"id": "prefix", "type": "FixedText", "value": "INV-"},
        {"id": "seq", "type": "Sequence", "startValue": 1, "step": 1, "padding": 3},
    ]
)


@pytest.fixture
def backend() -> StagingBackend:
    """In-memory backend, empty for every test."""
    return StagingBackend()


@pytest.fixture
def generator() -> IdGenerator:
    """Generator with a fixed clock and seeded random source."""
    return IdGenerator(
        clock=lambda: datetime(2025, 9, 5, 14, 30, tzinfo=timezone.utc),
        rng=random.Random(2025),
    )


@pytest.fixture
def inventories(backend: StagingBackend) -> InventoryService:
    return InventoryService(backend)


@pytest.fixture
def fields(backend: StagingBackend) -> CustomFieldService:
    return CustomFieldService(backend)


@pytest.fixture
def items(backend: StagingBackend, generator: IdGenerator) -> ItemService:
    return ItemService(backend, generator)


@pytest.fixture
def access(backend: StagingBackend) -> AccessService:
    return AccessService(backend)


@pytest.fixture
def inventory(inventories: InventoryService) -> Inventory:
    """Inventory with format INV-### (sequence segment id "seq")."""
    created = inventories.create_inventory("Office equipment", owner_id="user-1")
    return inventories.save_id_format(created.id, INVENTORY_FORMAT, created.version)


@pytest.fixture
def db_url() -> str:
    """
    URL of the test database.

    Tests using it are skipped unless STOCKROOM_TEST_DATABASE_URL points to a
    reachable PostgreSQL database.
    """
    url = os.environ.get(TEST_DATABASE_URL_ENV)
    if not url:
        pytest.skip(f"{TEST_DATABASE_URL_ENV} is not set")
    return url


@pytest.fixture
def db_conn(db_url: str) -> Connection:
    """Provide a test database connection in autocommit mode."""
    try:
        conn = psycopg.connect(db_url, autocommit=True)
    except psycopg.OperationalError as e:
        pytest.skip(f"Test database unreachable: {e}")

    yield conn

    conn.close()


@pytest.fixture
def test_schema(db_conn: Connection) -> str:
    """
    Create a fresh schema with the stockroom tables.

    Returns the schema name.
    """
    schema_name = "test_stockroom"

    with db_conn.cursor() as cur:
        cur.execute(f"DROP SCHEMA IF EXISTS {schema_name} CASCADE")
    DirectBackend(db_conn, schema_name).create_tables()

    yield schema_name

    with db_conn.cursor() as cur:
        cur.execute(f"DROP SCHEMA IF EXISTS {schema_name} CASCADE")


@pytest.fixture
def direct_backend(db_conn: Connection, test_schema: str) -> DirectBackend:
    return DirectBackend(db_conn, test_schema)
