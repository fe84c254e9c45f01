"""Sequence counter coordination.

Counters live in the backend, one per (inventory id, segment id). They are read
and written through the session of the transaction that persists the item
carrying the generated id, so a rolled back item never consumes a value.
"""

from collections.abc import Mapping, Sequence

from custom_ids import (
    MAX_SEQUENCE_VALUE,
    GeneratedId,
    IdGenerator,
    Segment,
    SequenceSegment,
    sequence_segments,
)

from inventory_data.backends.base import Session
from inventory_data.exceptions import SequenceExhaustedError


class SequenceCoordinator:
    """Claim, preview and observe sequence counter values."""

    def __init__(self, generator: IdGenerator | None = None):
        """
        Initialize coordinator.

        Args:
            generator: Id generator (default: UTC clock, system random source)
        """
        self.generator = generator or IdGenerator()

    def claim(
        self,
        session: Session,
        inventory_id: str,
        segments: Sequence[Segment],
        floor: Mapping[str, int] | None = None,
    ) -> GeneratedId:
        """
        Generate an id and advance its counters within the session's transaction.

        Args:
            session: Open session (counters stay locked until it ends)
            inventory_id: Owning inventory
            segments: Format segments
            floor: Values already handed out by failed attempts; the next values
                are computed past them so a retry always makes progress

        Returns:
            Generated id with the claimed counter values

        Raises:
            SequenceExhaustedError: If a counter would pass the largest storable value
        """
        floor = floor or {}
        stored: dict[str, int | None] = {}
        last_values: dict[str, int] = {}

        for segment in sequence_segments(segments):
            value = session.get_sequence_value(inventory_id, segment.id)
            stored[segment.id] = value
            candidates = [v for v in (value, floor.get(segment.id)) if v is not None]
            if candidates:
                last_values[segment.id] = max(candidates)

        generated = self.generator.generate(segments, last_values)

        for segment_id, new_value in generated.sequence_values.items():
            if new_value > MAX_SEQUENCE_VALUE:
                raise SequenceExhaustedError(inventory_id, segment_id)
            if stored[segment_id] is None:
                session.insert_sequence_value(inventory_id, segment_id, new_value)
            else:
                session.update_sequence_value(inventory_id, segment_id, new_value)

        return generated

    def preview(
        self,
        session: Session,
        inventory_id: str,
        segments: Sequence[Segment],
        last_known: Mapping[str, int] | None = None,
    ) -> GeneratedId:
        """
        Render an id without advancing any counter.

        Args:
            session: Open session
            inventory_id: Owning inventory
            segments: Format segments
            last_known: Counter values returned by an earlier preview; when given
                they are reused as-is so that re-rolling random parts keeps the
                same sequence numbers

        Returns:
            Rendered id and the counter values it used
        """
        values = self.generator.next_sequence_values(
            segments, session.list_sequence_values(inventory_id)
        )
        if last_known:
            values.update({k: v for k, v in last_known.items() if k in values})
        return self.generator.render(segments, values)

    def observe(
        self,
        session: Session,
        inventory_id: str,
        segments: Sequence[Segment],
        parts: Sequence[str],
    ) -> dict[str, int]:
        """
        Raise counters to the sequence values found in a user-supplied id.

        Counters never decrease: a value below the stored one is ignored.

        Args:
            session: Open session
            inventory_id: Owning inventory
            segments: Format segments
            parts: The id sliced per segment

        Returns:
            Counters that were raised, keyed by segment id
        """
        raised: dict[str, int] = {}
        for segment, part in zip(segments, parts):
            if not isinstance(segment, SequenceSegment) or segment.id in raised:
                continue
            value = segment.parse_part(part)
            if value is None:
                continue

            current = session.get_sequence_value(inventory_id, segment.id)
            if current is None:
                session.insert_sequence_value(inventory_id, segment.id, value)
            elif value > current:
                session.update_sequence_value(inventory_id, segment.id, value)
            else:
                continue
            raised[segment.id] = value
        return raised
