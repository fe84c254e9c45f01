"""Sequence segment."""

import re
from dataclasses import dataclass

from custom_ids.segments.base import RenderContext, Segment

DIGITS_REGEX = re.compile(r"[0-9]+")

# Largest counter value that fits the counter store (signed 64-bit)
MAX_SEQUENCE_VALUE = 2**63 - 1


@dataclass(frozen=True)
class SequenceSegment(Segment):
    """Monotonic counter rendered with a minimum number of digits.

    The counter itself is stored outside the format, keyed by
    (inventory, segment id). Padding never truncates: value 12345 with
    ``padding=4`` renders as ``12345``.
    """

    TYPE = "Sequence"

    id: str = ""
    start_value: int = 1
    step: int = 1
    padding: int = 1

    def next_value(self, last_value: int | None) -> int:
        """Value to hand out after ``last_value``.

        Args:
            last_value: Last persisted value, None if the counter was never used

        Returns:
            ``start_value`` for a fresh (or lagging) counter, else the next step
        """
        if last_value is None or last_value < self.start_value:
            return self.start_value
        # A non-positive step would stall the counter
        return last_value + max(self.step, 1)

    def format_value(self, value: int) -> str:
        """Zero-pad ``value`` to at least ``padding`` digits."""
        if value < 0:
            return "-" + str(-value).zfill(self.padding)
        return str(value).zfill(self.padding)

    def parse_part(self, part: str) -> int | None:
        """Numeric value of a rendered part, or None if it is not a storable counter value."""
        if not DIGITS_REGEX.fullmatch(part):
            return None
        value = int(part)
        return value if value <= MAX_SEQUENCE_VALUE else None

    def render(self, context: RenderContext) -> str:
        value = context.sequence_values.get(self.id)
        if value is None:
            value = self.next_value(None)
        return self.format_value(value)

    def regex(self) -> str:
        return f"[0-9]{{{max(self.padding, 1)},}}"

    def matches_part(self, part: str) -> bool:
        if self.parse_part(part) is None or len(part) < self.padding:
            return False
        # Zero-padded values must be padded to exactly the configured width
        if len(part) > 1 and part.startswith("0"):
            return len(part) == self.padding
        return True
