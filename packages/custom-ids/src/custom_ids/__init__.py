"""
custom-ids - Custom Item Id Formats

Renders user-defined item id formats (fixed text, sequences, dates, random
numbers, GUIDs) into identifiers and validates identifiers against them.
"""

from custom_ids.boundaries import (
    coerce_boundaries,
    format_boundaries,
    parse_boundaries,
    split_id,
)
from custom_ids.document import canonicalize, format_hash, parse_format, serialize_format
from custom_ids.exceptions import BoundaryError, CustomIdError, MalformedFormatError
from custom_ids.generator import GeneratedId, IdGenerator, sequence_segments
from custom_ids.segments import (
    MAX_SEQUENCE_VALUE,
    DateSegment,
    FixedTextSegment,
    GuidSegment,
    RandomNumbersSegment,
    Segment,
    SegmentRegistry,
    SequenceSegment,
)
from custom_ids.validator import IdValidator, ValidationResult

__version__ = "0.1.0"

__all__ = [
    "IdGenerator",
    "IdValidator",
    "GeneratedId",
    "ValidationResult",
    "Segment",
    "SegmentRegistry",
    "FixedTextSegment",
    "SequenceSegment",
    "MAX_SEQUENCE_VALUE",
    "DateSegment",
    "RandomNumbersSegment",
    "GuidSegment",
    "parse_format",
    "serialize_format",
    "format_hash",
    "canonicalize",
    "sequence_segments",
    "format_boundaries",
    "parse_boundaries",
    "coerce_boundaries",
    "split_id",
    "CustomIdError",
    "MalformedFormatError",
    "BoundaryError",
]
