"""Id format segments and registry."""

from custom_ids.segments.base import RenderContext, Segment
from custom_ids.segments.date import DateSegment
from custom_ids.segments.fixed_text import FixedTextSegment
from custom_ids.segments.guid import GuidSegment
from custom_ids.segments.random_numbers import RandomNumbersSegment
from custom_ids.segments.registry import SegmentRegistry, default_registry
from custom_ids.segments.sequence import MAX_SEQUENCE_VALUE, SequenceSegment

__all__ = [
    "Segment",
    "RenderContext",
    "FixedTextSegment",
    "SequenceSegment",
    "DateSegment",
    "RandomNumbersSegment",
    "GuidSegment",
    "SegmentRegistry",
    "default_registry",
    "MAX_SEQUENCE_VALUE",
]
