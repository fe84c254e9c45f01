"""Custom id validator."""

import re
from collections.abc import Sequence
from dataclasses import dataclass
from functools import lru_cache

from custom_ids.boundaries import coerce_boundaries, split_id
from custom_ids.exceptions import BoundaryError
from custom_ids.segments.base import Segment


@dataclass
class ValidationResult:
    """Custom id validation result."""

    valid: bool
    error: str | None = None
    warnings: list[str] | None = None

    def __post_init__(self) -> None:
        """Initialize warnings list."""
        if self.warnings is None:
            self.warnings = []


@lru_cache(maxsize=256)
def _compile(parts: tuple[str, ...]) -> re.Pattern[str]:
    return re.compile("".join(parts))


class IdValidator:
    """Check ids against a segment list."""

    def build_regex(self, segments: Sequence[Segment]) -> re.Pattern[str] | None:
        """Structural matcher for a format.

        Returns:
            Compiled pattern (use with ``fullmatch``), or None when some
            segment has an unknown layout and nothing can match
        """
        parts = []
        for segment in segments:
            part = segment.regex()
            if part is None:
                return None
            parts.append(part)
        return _compile(tuple(parts))

    def is_valid(self, candidate: str, segments: Sequence[Segment]) -> bool:
        """Whether ``candidate`` could have been produced by the format.

        An empty format only accepts the empty id. Date segments accept any
        non-empty text here; use ``validate`` with boundaries for a strict check.
        """
        if not segments:
            return candidate == ""

        regex = self.build_regex(segments)
        return regex is not None and regex.fullmatch(candidate) is not None

    def validate_segmented(
        self,
        candidate: str,
        boundaries: str | Sequence[int] | None,
        segments: Sequence[Segment],
    ) -> ValidationResult:
        """Strict per-segment validation of a manually edited id.

        Args:
            candidate: Id string
            boundaries: Per-segment lengths (list or comma-separated text)
            segments: Format segments

        Returns:
            Validation result naming the first offending part
        """
        try:
            lengths = coerce_boundaries(boundaries)
            if len(lengths) != len(segments):
                raise BoundaryError(
                    "ID structure is invalid or does not match the ID string's length."
                )
            parts = split_id(candidate, lengths)
        except BoundaryError as e:
            return ValidationResult(valid=False, error=str(e))

        for segment, part in zip(segments, parts):
            if not segment.matches_part(part):
                return ValidationResult(
                    valid=False,
                    error=(
                        f"The segment '{part}' is not valid for the type "
                        f"'{segment.type}' with its format constraints."
                    ),
                )

        return ValidationResult(valid=True)

    def validate(
        self,
        candidate: str,
        segments: Sequence[Segment],
        boundaries: str | Sequence[int] | None = None,
    ) -> ValidationResult:
        """Validate an id, strictly when boundaries are supplied."""
        if not segments:
            if candidate:
                return ValidationResult(
                    valid=False,
                    error="A Custom ID is not allowed because no format is defined.",
                )
            return ValidationResult(valid=True)

        if boundaries is not None:
            return self.validate_segmented(candidate, boundaries, segments)

        if not self.is_valid(candidate, segments):
            return ValidationResult(valid=False, error=f"Invalid ID format: {candidate!r}")
        return ValidationResult(valid=True)
