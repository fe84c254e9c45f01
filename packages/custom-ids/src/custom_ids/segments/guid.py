"""GUID segment."""

import re
import uuid
from dataclasses import dataclass

from custom_ids.segments.base import RenderContext, Segment

DEFAULT_GUID_FORMAT = "N"

_HEX_D = "[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"

GUID_REGEXES: dict[str, str] = {
    "N": "[0-9a-fA-F]{32}",
    "D": _HEX_D,
    "B": rf"\{{{_HEX_D}\}}",
    "P": rf"\({_HEX_D}\)",
}


def format_guid(value: uuid.UUID, layout: str) -> str:
    """Render a GUID in one of the N/D/B/P layouts (unknown layouts render as N)."""
    if layout == "D":
        return str(value)
    if layout == "B":
        return f"{{{value}}}"
    if layout == "P":
        return f"({value})"
    return value.hex


@dataclass(frozen=True)
class GuidSegment(Segment):
    """Fresh random 128-bit identifier.

    Layouts:
        N: 32 hex digits
        D: 8-4-4-4-12 hyphenated
        B: D wrapped in braces
        P: D wrapped in parentheses
    """

    TYPE = "Guid"

    id: str = ""
    format: str = DEFAULT_GUID_FORMAT

    def render(self, context: RenderContext) -> str:
        value = uuid.UUID(int=context.rng.getrandbits(128), version=4)
        return format_guid(value, self.format)

    def regex(self) -> str | None:
        return GUID_REGEXES.get(self.format)

    def matches_part(self, part: str) -> bool:
        pattern = self.regex()
        return pattern is not None and re.fullmatch(pattern, part) is not None
