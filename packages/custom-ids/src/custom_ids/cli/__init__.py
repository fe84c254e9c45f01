"""Command-line interface for custom-ids."""
