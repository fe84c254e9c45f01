"""Segment boundaries of generated ids.

A generated id remembers how many characters each segment emitted, stored as a
comma-separated list (``"4,3"`` for ``INV-001``). Clients use it to re-slice a
manually edited id into its segments.
"""

from collections.abc import Sequence

from custom_ids.exceptions import BoundaryError
from custom_ids.segments.sequence import DIGITS_REGEX


def format_boundaries(lengths: Sequence[int]) -> str:
    """Serialize per-segment lengths, e.g. ``[4, 3]`` -> ``"4,3"``."""
    return ",".join(str(length) for length in lengths)


def parse_boundaries(text: str | None) -> list[int]:
    """Parse a comma-separated boundary list.

    Raises:
        BoundaryError: If the list is missing or holds a non-integer or negative entry
    """
    if not text:
        raise BoundaryError("ID structure (segment boundaries) is missing.")

    lengths = []
    for part in text.split(","):
        part = part.strip()
        if not DIGITS_REGEX.fullmatch(part):
            raise BoundaryError(f"Invalid segment boundary {part!r} in {text!r}.")
        lengths.append(int(part))
    return lengths


def split_id(candidate: str, lengths: Sequence[int]) -> list[str]:
    """Slice an id into per-segment parts.

    Raises:
        BoundaryError: If the lengths do not add up to the id's length
    """
    if sum(lengths) != len(candidate):
        raise BoundaryError(
            f"ID structure is invalid or does not match the ID string's length "
            f"({sum(lengths)} != {len(candidate)})."
        )

    parts = []
    position = 0
    for length in lengths:
        parts.append(candidate[position : position + length])
        position += length
    return parts


def coerce_boundaries(boundaries: str | Sequence[int] | None) -> list[int]:
    """Boundary lengths from either text or an already split list.

    Raises:
        BoundaryError: If the boundaries are missing or hold a negative or
            non-integer length
    """
    if boundaries is None or isinstance(boundaries, str):
        return parse_boundaries(boundaries)

    lengths = list(boundaries)
    for length in lengths:
        if isinstance(length, bool) or not isinstance(length, int) or length < 0:
            raise BoundaryError(f"Invalid segment boundary {length!r} in {lengths!r}.")
    return lengths
