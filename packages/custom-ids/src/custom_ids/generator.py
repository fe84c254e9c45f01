"""Custom id generator."""

import random
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone

from custom_ids.boundaries import format_boundaries
from custom_ids.segments.base import RenderContext, Segment
from custom_ids.segments.sequence import SequenceSegment

LastValues = Mapping[str, int] | int | None


def utc_now() -> datetime:
    """Current UTC time."""
    return datetime.now(timezone.utc)


@dataclass
class GeneratedId:
    """Result of rendering one id."""

    value: str
    boundaries: list[int] = field(default_factory=list)
    sequence_values: dict[str, int] = field(default_factory=dict)

    @property
    def boundaries_text(self) -> str:
        """Boundaries in their stored comma-separated form."""
        return format_boundaries(self.boundaries)

    @property
    def sequence_value(self) -> int | None:
        """Value of the first sequence segment (single-counter formats)."""
        return next(iter(self.sequence_values.values()), None)


def sequence_segments(segments: Sequence[Segment]) -> list[SequenceSegment]:
    """Sequence segments of a format, in order, one per segment id."""
    seen: dict[str, SequenceSegment] = {}
    for segment in segments:
        if isinstance(segment, SequenceSegment) and segment.id not in seen:
            seen[segment.id] = segment
    return list(seen.values())


class IdGenerator:
    """Render ids from a segment list.

    Each Sequence segment owns an independent counter keyed by its segment id.
    The generator is pure: it computes the next counter values from the last
    values it is given and leaves persisting them to the caller.
    """

    def __init__(
        self,
        clock: Callable[[], datetime] = utc_now,
        rng: random.Random | None = None,
    ):
        """Initialize generator.

        Args:
            clock: Returns the instant rendered by Date segments (default: UTC now)
            rng: Random source for RandomNumbers/Guid segments
                (default: ``random.SystemRandom``)
        """
        self.clock = clock
        self.rng = rng or random.SystemRandom()

    def next_sequence_values(
        self,
        segments: Sequence[Segment],
        last_values: LastValues = None,
    ) -> dict[str, int]:
        """Compute the next value of every sequence counter.

        Args:
            segments: Format segments
            last_values: Last persisted value per segment id; a bare int is
                the last value of the first sequence segment

        Returns:
            Next value per sequence segment id
        """
        sequences = sequence_segments(segments)
        if isinstance(last_values, int):
            last_values = {sequences[0].id: last_values} if sequences else {}
        last_values = last_values or {}

        return {
            segment.id: segment.next_value(last_values.get(segment.id))
            for segment in sequences
        }

    def render(
        self,
        segments: Sequence[Segment],
        sequence_values: Mapping[str, int],
    ) -> GeneratedId:
        """Render an id using already claimed sequence values."""
        context = RenderContext(now=self.clock(), rng=self.rng, sequence_values=sequence_values)

        parts = [segment.render(context) for segment in segments]
        return GeneratedId(
            value="".join(parts),
            boundaries=[len(part) for part in parts],
            sequence_values=dict(sequence_values),
        )

    def generate(
        self,
        segments: Sequence[Segment],
        last_values: LastValues = None,
    ) -> GeneratedId:
        """Generate the next id for a format.

        Args:
            segments: Format segments
            last_values: Last persisted counter values (see ``next_sequence_values``)

        Returns:
            Generated id with boundaries and the advanced counter values

        Example:
            >>> generator.generate([FixedTextSegment(value="INV-"),
            ...                     SequenceSegment(id="s1", padding=3)])
            GeneratedId(value='INV-001', boundaries=[4, 3], sequence_values={'s1': 1})
        """
        return self.render(segments, self.next_sequence_values(segments, last_values))

    def generate_batch(
        self,
        segments: Sequence[Segment],
        count: int,
        last_values: LastValues = None,
    ) -> list[GeneratedId]:
        """Generate ``count`` consecutive ids, threading counters between them."""
        generated = []
        current = last_values
        for _ in range(count):
            result = self.generate(segments, current)
            generated.append(result)
            current = result.sequence_values
        return generated
