"""Backend implementations for inventory storage."""

from psycopg import Connection

from inventory_data.backends.base import Backend, Session
from inventory_data.backends.direct import DirectBackend
from inventory_data.backends.staging import StagingBackend

__all__ = ["Backend", "Session", "DirectBackend", "StagingBackend", "get_backend"]


def get_backend(name: str, conn: Connection | None = None, schema: str = "public") -> Backend:
    """
    Create a backend by name.

    Args:
        name: "direct" (PostgreSQL) or "staging" (in-memory)
        conn: PostgreSQL connection, required for "direct"
        schema: Schema name for "direct"

    Raises:
        ValueError: If the name is unknown or a connection is missing
    """
    if name == "staging":
        return StagingBackend()
    if name == "direct":
        if conn is None:
            raise ValueError("The 'direct' backend requires a database connection.")
        return DirectBackend(conn, schema)
    raise ValueError(f"Unknown backend '{name}'. Available: 'direct', 'staging'.")
