"""Date segment."""

from dataclasses import dataclass

from custom_ids import dates
from custom_ids.segments.base import RenderContext, Segment

DEFAULT_DATE_FORMAT = "yyyyMMdd"


@dataclass(frozen=True)
class DateSegment(Segment):
    """Current UTC date/time rendered with a date pattern (see ``custom_ids.dates``)."""

    TYPE = "Date"

    id: str = ""
    format: str = DEFAULT_DATE_FORMAT

    @property
    def pattern(self) -> str:
        """Effective pattern; a blank format means the default."""
        return self.format or DEFAULT_DATE_FORMAT

    def render(self, context: RenderContext) -> str:
        return dates.render(self.pattern, context.now)

    def regex(self) -> str:
        # Structural validation accepts any non-empty text for dates
        return ".+"

    def matches_part(self, part: str) -> bool:
        return dates.parse_exact(part, self.pattern) is not None
