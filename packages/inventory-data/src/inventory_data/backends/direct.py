"""Direct backend - PostgreSQL storage through psycopg."""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import psycopg
from psycopg import Connection
from psycopg.rows import dict_row

from inventory_data.backends.base import Backend, Session
from inventory_data.exceptions import (
    ConcurrencyError,
    DuplicateIdError,
    SequenceConflictError,
)
from inventory_data.fields import FIELD_SLOTS
from inventory_data.models import (
    CustomField,
    FieldType,
    Inventory,
    InventoryPermission,
    Item,
    PermissionLevel,
)

ITEM_CUSTOM_ID_INDEX = "ux_item_inventory_custom_id"
SEQUENCE_PRIMARY_KEY = "pk_inventory_sequence"

INVENTORY_COLUMNS = [
    "id",
    "name",
    "owner_id",
    "is_public",
    "created_at",
    "custom_id_format",
    "custom_id_format_hash",
    "version",
]
FIELD_COLUMNS = [
    "id",
    "inventory_id",
    "name",
    "field_type",
    "target_column",
    "position",
    "description",
    "is_visible_in_table",
]
ITEM_COLUMNS = [
    "id",
    "inventory_id",
    "custom_id",
    "created_at",
    "custom_id_format_hash_applied",
    "custom_id_segment_boundaries",
    "version",
]
SLOT_COLUMNS = list(FIELD_SLOTS)


def schema_ddl(schema: str) -> list[str]:
    """
    CREATE statements for the tables used by DirectBackend.

    Args:
        schema: Schema name for qualified table names

    Returns:
        Statements in dependency order
    """
    slot_columns = ",\n".join(
        f"                {slot.column} {slot.sql_type}" for slot in FIELD_SLOTS.values()
    )
    return [
        f"CREATE SCHEMA IF NOT EXISTS {schema}",
        f"""
            CREATE TABLE IF NOT EXISTS {schema}.inventory (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                owner_id TEXT NOT NULL DEFAULT '',
                is_public BOOLEAN NOT NULL DEFAULT FALSE,
                created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
                custom_id_format TEXT,
                custom_id_format_hash TEXT,
                version INTEGER NOT NULL DEFAULT 1
            )
        """,
        f"""
            CREATE TABLE IF NOT EXISTS {schema}.custom_field (
                id TEXT PRIMARY KEY,
                inventory_id TEXT NOT NULL REFERENCES {schema}.inventory(id) ON DELETE CASCADE,
                name TEXT NOT NULL,
                field_type TEXT NOT NULL,
                target_column TEXT NOT NULL,
                position INTEGER NOT NULL DEFAULT 0,
                description TEXT NOT NULL DEFAULT '',
                is_visible_in_table BOOLEAN NOT NULL DEFAULT TRUE,
                CONSTRAINT ux_custom_field_slot UNIQUE (inventory_id, target_column)
            )
        """,
        f"""
            CREATE TABLE IF NOT EXISTS {schema}.item (
                id TEXT PRIMARY KEY,
                inventory_id TEXT NOT NULL REFERENCES {schema}.inventory(id) ON DELETE CASCADE,
                custom_id TEXT NOT NULL DEFAULT '',
                created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
                custom_id_format_hash_applied TEXT,
                custom_id_segment_boundaries TEXT,
                version INTEGER NOT NULL DEFAULT 1,
{slot_columns}
            )
        """,
        f"""
            CREATE UNIQUE INDEX IF NOT EXISTS {ITEM_CUSTOM_ID_INDEX}
            ON {schema}.item (inventory_id, custom_id) WHERE custom_id <> ''
        """,
        f"""
            CREATE TABLE IF NOT EXISTS {schema}.inventory_sequence (
                inventory_id TEXT NOT NULL REFERENCES {schema}.inventory(id) ON DELETE CASCADE,
                segment_id TEXT NOT NULL,
                last_value BIGINT NOT NULL,
                CONSTRAINT {SEQUENCE_PRIMARY_KEY} PRIMARY KEY (inventory_id, segment_id)
            )
        """,
        f"""
            CREATE TABLE IF NOT EXISTS {schema}.inventory_user_permission (
                inventory_id TEXT NOT NULL REFERENCES {schema}.inventory(id) ON DELETE CASCADE,
                user_id TEXT NOT NULL,
                level TEXT NOT NULL DEFAULT 'Write',
                PRIMARY KEY (inventory_id, user_id)
            )
        """,
    ]


def _constraint_name(error: psycopg.Error) -> str | None:
    return error.diag.constraint_name


class DirectSession(Session):
    """Session executing statements on a psycopg connection."""

    def __init__(self, conn: Connection, schema: str):
        self.conn = conn
        self.schema = schema

    def _fetchone(self, sql: str, params: list[Any]) -> dict[str, Any] | None:
        with self.conn.cursor(row_factory=dict_row) as cur:
            cur.execute(sql, params)
            return cur.fetchone()

    def _fetchall(self, sql: str, params: list[Any]) -> list[dict[str, Any]]:
        with self.conn.cursor(row_factory=dict_row) as cur:
            cur.execute(sql, params)
            return cur.fetchall()

    def _execute(self, sql: str, params: list[Any]) -> int:
        with self.conn.cursor() as cur:
            cur.execute(sql, params)
            return cur.rowcount

    # Inventories

    def get_inventory(self, inventory_id: str, for_update: bool = False) -> Inventory | None:
        sql = f"""
            SELECT {', '.join(INVENTORY_COLUMNS)}
            FROM {self.schema}.inventory
            WHERE id = %s
        """
        if for_update:
            sql += " FOR UPDATE"
        row = self._fetchone(sql, [inventory_id])
        return Inventory(**row) if row else None

    def insert_inventory(self, inventory: Inventory) -> None:
        placeholders = ", ".join(["%s"] * len(INVENTORY_COLUMNS))
        self._execute(
            f"""
            INSERT INTO {self.schema}.inventory ({', '.join(INVENTORY_COLUMNS)})
            VALUES ({placeholders})
            """,
            [getattr(inventory, col) for col in INVENTORY_COLUMNS],
        )

    def update_inventory(self, inventory: Inventory) -> None:
        row = self._fetchone(
            f"""
            UPDATE {self.schema}.inventory
            SET name = %s, owner_id = %s, is_public = %s,
                custom_id_format = %s, custom_id_format_hash = %s,
                version = version + 1
            WHERE id = %s AND version = %s
            RETURNING version
            """,
            [
                inventory.name,
                inventory.owner_id,
                inventory.is_public,
                inventory.custom_id_format,
                inventory.custom_id_format_hash,
                inventory.id,
                inventory.version,
            ],
        )
        if row is None:
            current = self._fetchone(
                f"SELECT version FROM {self.schema}.inventory WHERE id = %s", [inventory.id]
            )
            raise ConcurrencyError(
                "inventory", inventory.id, inventory.version, current["version"] if current else None
            )
        inventory.version = row["version"]

    def bump_inventory_version(self, inventory_id: str) -> int:
        row = self._fetchone(
            f"""
            UPDATE {self.schema}.inventory SET version = version + 1
            WHERE id = %s
            RETURNING version
            """,
            [inventory_id],
        )
        return row["version"]

    def delete_inventory(self, inventory_id: str) -> None:
        # Fields, items, counters and grants go with it through ON DELETE CASCADE
        self._execute(f"DELETE FROM {self.schema}.inventory WHERE id = %s", [inventory_id])

    # Custom fields

    def _to_field(self, row: dict[str, Any]) -> CustomField:
        return CustomField(**{**row, "field_type": FieldType(row["field_type"])})

    def list_fields(self, inventory_id: str) -> list[CustomField]:
        rows = self._fetchall(
            f"""
            SELECT {', '.join(FIELD_COLUMNS)}
            FROM {self.schema}.custom_field
            WHERE inventory_id = %s
            ORDER BY position
            """,
            [inventory_id],
        )
        return [self._to_field(row) for row in rows]

    def get_field(self, field_id: str) -> CustomField | None:
        row = self._fetchone(
            f"SELECT {', '.join(FIELD_COLUMNS)} FROM {self.schema}.custom_field WHERE id = %s",
            [field_id],
        )
        return self._to_field(row) if row else None

    def insert_field(self, custom_field: CustomField) -> None:
        values = [getattr(custom_field, col) for col in FIELD_COLUMNS]
        values[FIELD_COLUMNS.index("field_type")] = custom_field.field_type.value
        placeholders = ", ".join(["%s"] * len(FIELD_COLUMNS))
        self._execute(
            f"""
            INSERT INTO {self.schema}.custom_field ({', '.join(FIELD_COLUMNS)})
            VALUES ({placeholders})
            """,
            values,
        )

    def update_field(self, custom_field: CustomField) -> None:
        self._execute(
            f"""
            UPDATE {self.schema}.custom_field
            SET name = %s, description = %s, position = %s, is_visible_in_table = %s
            WHERE id = %s
            """,
            [
                custom_field.name,
                custom_field.description,
                custom_field.position,
                custom_field.is_visible_in_table,
                custom_field.id,
            ],
        )

    def delete_fields(self, field_ids: list[str]) -> None:
        self._execute(
            f"DELETE FROM {self.schema}.custom_field WHERE id = ANY(%s)", [list(field_ids)]
        )

    # Items

    def _to_item(self, row: dict[str, Any]) -> Item:
        field_values = {col: row.pop(col) for col in SLOT_COLUMNS if row.get(col) is not None}
        return Item(**{col: row[col] for col in ITEM_COLUMNS}, field_values=field_values)

    def get_items(self, item_ids: list[str], for_update: bool = False) -> list[Item]:
        sql = f"""
            SELECT {', '.join(ITEM_COLUMNS + SLOT_COLUMNS)}
            FROM {self.schema}.item
            WHERE id = ANY(%s)
        """
        if for_update:
            sql += " FOR UPDATE"
        return [self._to_item(row) for row in self._fetchall(sql, [list(item_ids)])]

    def list_items(self, inventory_id: str) -> list[Item]:
        rows = self._fetchall(
            f"""
            SELECT {', '.join(ITEM_COLUMNS + SLOT_COLUMNS)}
            FROM {self.schema}.item
            WHERE inventory_id = %s
            ORDER BY created_at DESC
            """,
            [inventory_id],
        )
        return [self._to_item(row) for row in rows]

    def _raise_for_unique_violation(self, error: psycopg.errors.UniqueViolation, item: Item) -> None:
        if _constraint_name(error) == ITEM_CUSTOM_ID_INDEX:
            raise DuplicateIdError(item.inventory_id, item.custom_id) from error
        raise error

    def insert_item(self, item: Item) -> None:
        columns = ITEM_COLUMNS + SLOT_COLUMNS
        values = [getattr(item, col) for col in ITEM_COLUMNS]
        values += [item.field_values.get(col) for col in SLOT_COLUMNS]
        placeholders = ", ".join(["%s"] * len(columns))
        try:
            self._execute(
                f"""
                INSERT INTO {self.schema}.item ({', '.join(columns)})
                VALUES ({placeholders})
                """,
                values,
            )
        except psycopg.errors.UniqueViolation as e:
            self._raise_for_unique_violation(e, item)

    def update_item(self, item: Item) -> None:
        assignments = ", ".join(
            f"{col} = %s"
            for col in [
                "custom_id",
                "custom_id_format_hash_applied",
                "custom_id_segment_boundaries",
                *SLOT_COLUMNS,
            ]
        )
        values = [
            item.custom_id,
            item.custom_id_format_hash_applied,
            item.custom_id_segment_boundaries,
            *[item.field_values.get(col) for col in SLOT_COLUMNS],
            item.id,
            item.version,
        ]
        try:
            row = self._fetchone(
                f"""
                UPDATE {self.schema}.item
                SET {assignments}, version = version + 1
                WHERE id = %s AND version = %s
                RETURNING version
                """,
                values,
            )
        except psycopg.errors.UniqueViolation as e:
            self._raise_for_unique_violation(e, item)
            return

        if row is None:
            current = self._fetchone(
                f"SELECT version FROM {self.schema}.item WHERE id = %s", [item.id]
            )
            raise ConcurrencyError(
                "item", item.id, item.version, current["version"] if current else None
            )
        item.version = row["version"]

    def delete_items(self, item_ids: list[str]) -> None:
        self._execute(f"DELETE FROM {self.schema}.item WHERE id = ANY(%s)", [list(item_ids)])

    def clear_field_values(self, inventory_id: str, column: str) -> None:
        if column not in FIELD_SLOTS:
            raise ValueError(f"Unknown field slot column: {column}")
        self._execute(
            f"UPDATE {self.schema}.item SET {column} = NULL WHERE inventory_id = %s",
            [inventory_id],
        )

    # Sequence counters

    def get_sequence_value(self, inventory_id: str, segment_id: str) -> int | None:
        row = self._fetchone(
            f"""
            SELECT last_value FROM {self.schema}.inventory_sequence
            WHERE inventory_id = %s AND segment_id = %s
            FOR UPDATE
            """,
            [inventory_id, segment_id],
        )
        return row["last_value"] if row else None

    def insert_sequence_value(self, inventory_id: str, segment_id: str, value: int) -> None:
        try:
            self._execute(
                f"""
                INSERT INTO {self.schema}.inventory_sequence (inventory_id, segment_id, last_value)
                VALUES (%s, %s, %s)
                """,
                [inventory_id, segment_id, value],
            )
        except psycopg.errors.UniqueViolation as e:
            if _constraint_name(e) == SEQUENCE_PRIMARY_KEY:
                raise SequenceConflictError(
                    inventory_id, f"counter '{segment_id}' created concurrently"
                ) from e
            raise

    def update_sequence_value(self, inventory_id: str, segment_id: str, value: int) -> None:
        self._execute(
            f"""
            UPDATE {self.schema}.inventory_sequence SET last_value = %s
            WHERE inventory_id = %s AND segment_id = %s
            """,
            [value, inventory_id, segment_id],
        )

    def list_sequence_values(self, inventory_id: str) -> dict[str, int]:
        rows = self._fetchall(
            f"""
            SELECT segment_id, last_value FROM {self.schema}.inventory_sequence
            WHERE inventory_id = %s
            """,
            [inventory_id],
        )
        return {row["segment_id"]: row["last_value"] for row in rows}

    # Write grants

    def _to_permission(self, row: dict[str, Any]) -> InventoryPermission:
        return InventoryPermission(**{**row, "level": PermissionLevel(row["level"])})

    def list_permissions(self, inventory_id: str) -> list[InventoryPermission]:
        rows = self._fetchall(
            f"""
            SELECT inventory_id, user_id, level FROM {self.schema}.inventory_user_permission
            WHERE inventory_id = %s
            ORDER BY user_id
            """,
            [inventory_id],
        )
        return [self._to_permission(row) for row in rows]

    def get_permission(self, inventory_id: str, user_id: str) -> InventoryPermission | None:
        row = self._fetchone(
            f"""
            SELECT inventory_id, user_id, level FROM {self.schema}.inventory_user_permission
            WHERE inventory_id = %s AND user_id = %s
            """,
            [inventory_id, user_id],
        )
        return self._to_permission(row) if row else None

    def insert_permission(self, permission: InventoryPermission) -> None:
        self._execute(
            f"""
            INSERT INTO {self.schema}.inventory_user_permission (inventory_id, user_id, level)
            VALUES (%s, %s, %s)
            ON CONFLICT (inventory_id, user_id) DO NOTHING
            """,
            [permission.inventory_id, permission.user_id, permission.level.value],
        )

    def delete_permissions(self, inventory_id: str, user_ids: list[str]) -> int:
        return self._execute(
            f"""
            DELETE FROM {self.schema}.inventory_user_permission
            WHERE inventory_id = %s AND user_id = ANY(%s)
            """,
            [inventory_id, list(user_ids)],
        )


class DirectBackend(Backend):
    """
    Execute storage operations directly against PostgreSQL.

    The connection must be in autocommit mode: every ``transaction()`` block
    opens its own BEGIN/COMMIT through ``Connection.transaction()``. Counter
    rows are locked with ``SELECT ... FOR UPDATE`` for the rest of the
    transaction; a concurrent first use of the same counter fails on its
    primary key and surfaces as SequenceConflictError.
    """

    def __init__(self, conn: Connection, schema: str = "public"):
        """
        Initialize backend.

        Args:
            conn: PostgreSQL connection (autocommit mode)
            schema: Schema name for qualified table names
        """
        self.conn = conn
        self.schema = schema

    @contextmanager
    def transaction(self) -> Iterator[DirectSession]:
        try:
            with self.conn.transaction():
                yield DirectSession(self.conn, self.schema)
        except (psycopg.errors.SerializationFailure, psycopg.errors.DeadlockDetected) as e:
            raise SequenceConflictError(None, str(e).strip()) from e

    def create_tables(self) -> None:
        """Create the schema and tables if they do not exist."""
        with self.conn.transaction():
            with self.conn.cursor() as cur:
                for statement in schema_ddl(self.schema):
                    cur.execute(statement)
