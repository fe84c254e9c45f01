"""
Stockroom - inventories with user-defined custom item ids.

This package provides:
- Configuration loading from stockroom.toml
- The ``stockroom`` command line (database setup, demo seeding, id refresh)
"""

__version__ = "0.1.0"

from stockroom.config import Config

__all__ = ["Config", "__version__"]
