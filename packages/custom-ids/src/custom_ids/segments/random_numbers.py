"""Random numbers segment."""

from dataclasses import dataclass

from custom_ids.segments.base import RenderContext, Segment
from custom_ids.segments.sequence import DIGITS_REGEX

DEFAULT_RANDOM_FORMAT = "6-digit"

# format -> (exclusive upper bound, fixed width or 0 for unpadded)
RANDOM_FORMATS: dict[str, tuple[int, int]] = {
    "20-bit": (1 << 20, 0),
    "32-bit": (1 << 32, 0),
    "6-digit": (10**6, 6),
    "9-digit": (10**9, 9),
}

RANDOM_REGEXES: dict[str, str] = {
    "20-bit": "[0-9]{1,7}",
    "32-bit": "[0-9]{1,10}",
    "6-digit": "[0-9]{6}",
    "9-digit": "[0-9]{9}",
}


@dataclass(frozen=True)
class RandomNumbersSegment(Segment):
    """Uniformly random decimal number.

    Formats:
        20-bit: value in [0, 2^20 - 1], 1-7 digits
        32-bit: value in [0, 2^32 - 1], 1-10 digits
        6-digit: exactly 6 digits (zero-padded)
        9-digit: exactly 9 digits (zero-padded)
    """

    TYPE = "RandomNumbers"

    id: str = ""
    format: str = DEFAULT_RANDOM_FORMAT

    def render(self, context: RenderContext) -> str:
        upper, width = RANDOM_FORMATS.get(self.format, RANDOM_FORMATS[DEFAULT_RANDOM_FORMAT])
        return str(context.rng.randrange(upper)).zfill(width)

    def regex(self) -> str | None:
        return RANDOM_REGEXES.get(self.format)

    def matches_part(self, part: str) -> bool:
        if self.format not in RANDOM_FORMATS or not DIGITS_REGEX.fullmatch(part):
            return False
        upper, width = RANDOM_FORMATS[self.format]
        if width:
            return len(part) == width
        return int(part) < upper
