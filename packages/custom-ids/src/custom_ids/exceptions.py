"""Exceptions raised by the custom id engine."""


class CustomIdError(Exception):
    """Base exception for custom-ids errors."""

    pass


class MalformedFormatError(CustomIdError):
    """Format document is not a JSON array of segment objects."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(
            f"Malformed id format document: {reason}\n\n"
            f"Suggestions:\n"
            f"1. The document must be a JSON array of objects\n"
            f'2. Each object needs a "type" (FixedText, Sequence, Date, RandomNumbers, Guid)\n'
            f"3. Re-save the format from the inventory settings if the stored copy is corrupted"
        )


class BoundaryError(CustomIdError, ValueError):
    """Segment boundary list does not describe the id string."""

    pass
