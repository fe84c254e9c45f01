"""Fixed text segment."""

import re
from dataclasses import dataclass

from custom_ids.segments.base import RenderContext, Segment


@dataclass(frozen=True)
class FixedTextSegment(Segment):
    """Literal text copied verbatim into every id, e.g. ``INV-``."""

    TYPE = "FixedText"

    id: str = ""
    value: str = ""

    def render(self, context: RenderContext) -> str:
        return self.value

    def regex(self) -> str:
        return re.escape(self.value)

    def matches_part(self, part: str) -> bool:
        return part == self.value
