"""Base segment interface and shared helpers."""

import random
import re
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Any, ClassVar

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1


@dataclass(frozen=True)
class RenderContext:
    """Inputs shared by every segment while one id is rendered."""

    now: datetime
    rng: random.Random
    sequence_values: Mapping[str, int] = field(default_factory=dict)


def camel_case(name: str) -> str:
    """Convert a snake_case field name to its camelCase wire name."""
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def get_string(props: Mapping[str, Any], key: str, default: str = "") -> str:
    """Read a string property, falling back when absent or not a string."""
    value = props.get(key)
    return value if isinstance(value, str) else default


def get_int(props: Mapping[str, Any], key: str, default: int) -> int:
    """Read a 32-bit integer property, falling back when absent or unparsable.

    Values outside the signed 32-bit range count as unparsable.
    """
    value = props.get(key)
    if isinstance(value, bool):
        return default
    if isinstance(value, str) and re.fullmatch(r"\s*[+-]?[0-9]+\s*", value):
        value = int(value)
    if isinstance(value, int) and INT32_MIN <= value <= INT32_MAX:
        return value
    return default


class Segment(ABC):
    """Base class for id format segments.

    Concrete segments are frozen dataclasses whose first field is ``id`` (the
    client-assigned identifier that stays stable across format edits). Every
    other dataclass field is a wire property, serialized in declaration order
    under its camelCase name.
    """

    TYPE: ClassVar[str]

    id: str

    @property
    def type(self) -> str:
        """Wire discriminant of this segment."""
        return self.TYPE

    @abstractmethod
    def render(self, context: RenderContext) -> str:
        """Render this segment's part of a new id.

        Args:
            context: Clock, random source and claimed sequence values

        Returns:
            Rendered substring
        """
        pass

    @abstractmethod
    def regex(self) -> str | None:
        """Regular expression matching any part this segment can render.

        Returns:
            Pattern source, or None when nothing can match (unknown layout)
        """
        pass

    @abstractmethod
    def matches_part(self, part: str) -> bool:
        """Strict check of one already-sliced part of a manually edited id."""
        pass

    def to_dict(self) -> dict[str, Any]:
        """Canonical wire representation (``id``, ``type``, then properties)."""
        data: dict[str, Any] = {"id": self.id, "type": self.TYPE}
        for f in fields(self):  # type: ignore[arg-type]
            if f.name != "id":
                data[camel_case(f.name)] = getattr(self, f.name)
        return data

    @classmethod
    def from_dict(cls, props: Mapping[str, Any]) -> "Segment":
        """Build a segment from wire properties.

        Args:
            props: Properties keyed by lower-cased name

        Returns:
            Segment with per-type defaults for missing or mistyped values
        """
        values: dict[str, Any] = {}
        for f in fields(cls):  # type: ignore[arg-type]
            key = camel_case(f.name).lower()
            if f.type is int:
                values[f.name] = get_int(props, key, f.default)
            else:
                values[f.name] = get_string(props, key, f.default)
        return cls(**values)
