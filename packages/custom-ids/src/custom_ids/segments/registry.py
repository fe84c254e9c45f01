"""Segment type registry."""

from collections.abc import Mapping
from typing import Any

from custom_ids.segments.base import Segment
from custom_ids.segments.date import DateSegment
from custom_ids.segments.fixed_text import FixedTextSegment
from custom_ids.segments.guid import GuidSegment
from custom_ids.segments.random_numbers import RandomNumbersSegment
from custom_ids.segments.sequence import SequenceSegment


class SegmentRegistry:
    """Registry mapping ``type`` discriminants to segment classes."""

    BUILTIN_SEGMENTS: dict[str, type[Segment]] = {
        FixedTextSegment.TYPE: FixedTextSegment,
        SequenceSegment.TYPE: SequenceSegment,
        DateSegment.TYPE: DateSegment,
        RandomNumbersSegment.TYPE: RandomNumbersSegment,
        GuidSegment.TYPE: GuidSegment,
    }

    def __init__(self) -> None:
        """Initialize registry with the built-in segment types."""
        self.segments: dict[str, type[Segment]] = dict(self.BUILTIN_SEGMENTS)

    def register(self, type_name: str, segment_class: type[Segment]) -> None:
        """Register a custom segment type.

        Args:
            type_name: Wire discriminant
            segment_class: Segment dataclass

        Raises:
            ValueError: If the class is not a Segment subclass
        """
        if not (isinstance(segment_class, type) and issubclass(segment_class, Segment)):
            raise ValueError(
                f"Segment class must subclass Segment. "
                f"Got {segment_class!r} for type '{type_name}'."
            )
        self.segments[type_name] = segment_class

    def get(self, type_name: str) -> type[Segment] | None:
        """Get segment class by discriminant (case-sensitive)."""
        return self.segments.get(type_name)

    def build(self, props: Mapping[str, Any]) -> Segment | None:
        """Build a segment from lower-cased wire properties.

        Returns:
            Segment, or None when ``type`` is missing or not registered
        """
        type_name = props.get("type")
        if not isinstance(type_name, str):
            return None
        segment_class = self.get(type_name)
        if segment_class is None:
            return None
        return segment_class.from_dict(props)

    def types(self) -> list[str]:
        """List registered discriminants."""
        return list(self.segments.keys())


default_registry = SegmentRegistry()
