"""Format document parsing and canonical serialization.

A format document is a JSON array of segment objects::

    [
        {"id": "5f0c...", "type": "FixedText", "value": "INV-"},
        {"id": "9a1e...", "type": "Sequence", "startValue": 1, "step": 1, "padding": 3}
    ]

Property names are matched case-insensitively on read and written in camelCase
on canonical write. Segments of an unknown type are dropped so that formats
saved by newer clients still load.
"""

import hashlib
import json
import logging
from collections.abc import Iterable, Sequence
from typing import Any

from custom_ids.exceptions import MalformedFormatError
from custom_ids.segments.base import Segment
from custom_ids.segments.registry import SegmentRegistry, default_registry

logger = logging.getLogger(__name__)


def parse_format(
    document: str | bytes | Sequence[Any] | None,
    registry: SegmentRegistry | None = None,
) -> list[Segment]:
    """Parse a format document into an ordered list of segments.

    Args:
        document: JSON text (str or UTF-8 bytes), an already decoded array, or None
        registry: Segment registry (default: built-in segment types)

    Returns:
        Segments in document order; unknown types are skipped

    Raises:
        MalformedFormatError: If the document is not an array of objects

    Example:
        >>> parse_format('[{"type": "FixedText", "value": "INV-"}]')
        [FixedTextSegment(id='', value='INV-')]
    """
    registry = registry or default_registry

    if document is None:
        return []

    if isinstance(document, (str, bytes)):
        if not document.strip():
            return []
        try:
            data = json.loads(document)
        except json.JSONDecodeError as e:
            raise MalformedFormatError(f"invalid JSON ({e.msg} at position {e.pos})") from e
        except UnicodeDecodeError as e:
            raise MalformedFormatError(f"invalid text encoding ({e.reason})") from e
        except RecursionError as e:
            raise MalformedFormatError("document is nested too deeply") from e
    else:
        data = document

    if not isinstance(data, list):
        raise MalformedFormatError(f"expected a JSON array, got {type(data).__name__}")

    segments: list[Segment] = []
    for index, element in enumerate(data):
        if not isinstance(element, dict):
            raise MalformedFormatError(
                f"element {index} is {type(element).__name__}, expected an object"
            )

        props = {str(key).lower(): value for key, value in element.items()}
        segment = registry.build(props)
        if segment is None:
            logger.debug(f"Skipping segment {index} with unsupported type {props.get('type')!r}")
            continue
        segments.append(segment)

    return segments


def serialize_format(segments: Iterable[Segment]) -> str:
    """Serialize segments into their canonical, byte-stable JSON form."""
    return json.dumps(
        [segment.to_dict() for segment in segments],
        separators=(",", ":"),
        ensure_ascii=False,
    )


def hash_document(canonical: str) -> str:
    """SHA-256 hex digest of a canonical document."""
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def format_hash(segments: Sequence[Segment]) -> str | None:
    """Content hash of a segment list, None for an empty format."""
    if not segments:
        return None
    return hash_document(serialize_format(segments))


def canonicalize(
    document: str | bytes | Sequence[Any] | None,
    registry: SegmentRegistry | None = None,
) -> tuple[str | None, str | None]:
    """Parse and re-serialize a submitted document.

    Returns:
        (canonical document, hash); both None when no segment survives parsing

    Raises:
        MalformedFormatError: If the document is not an array of objects
    """
    segments = parse_format(document, registry)
    if not segments:
        return None, None
    canonical = serialize_format(segments)
    return canonical, hash_document(canonical)
