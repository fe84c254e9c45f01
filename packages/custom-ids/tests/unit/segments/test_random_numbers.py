"""Tests for RandomNumbersSegment."""

import random
import re
from datetime import datetime, timezone

import pytest
from custom_ids import RandomNumbersSegment
from custom_ids.segments.base import RenderContext


@pytest.fixture
def context() -> RenderContext:
    """Render context with a seeded random source."""
    return RenderContext(now=datetime(2025, 9, 5, tzinfo=timezone.utc), rng=random.Random(7))


class TestRandomNumbersRender:
    """Tests for RandomNumbersSegment.render()."""

    @pytest.mark.parametrize(
        "fmt,pattern",
        [
            ("6-digit", r"[0-9]{6}"),
            ("9-digit", r"[0-9]{9}"),
            ("20-bit", r"[0-9]{1,7}"),
            ("32-bit", r"[0-9]{1,10}"),
        ],
    )
    def test_render_shape(self, context: RenderContext, fmt: str, pattern: str) -> None:
        """Test each format renders within its documented shape."""
        segment = RandomNumbersSegment(id="r", format=fmt)

        for _ in range(200):
            assert re.fullmatch(pattern, segment.render(context))

    def test_20_bit_range(self, context: RenderContext) -> None:
        """Test 20-bit values stay below 2^20."""
        segment = RandomNumbersSegment(id="r", format="20-bit")

        assert all(int(segment.render(context)) < 2**20 for _ in range(500))

    def test_unknown_format_renders_six_digits(self, context: RenderContext) -> None:
        """Test unknown format falls back to 6-digit rendering."""
        segment = RandomNumbersSegment(id="r", format="12-digit")

        assert re.fullmatch(r"[0-9]{6}", segment.render(context))


class TestRandomNumbersMatching:
    """Tests for RandomNumbersSegment.regex() and matches_part()."""

    def test_unknown_format_has_no_regex(self) -> None:
        """Test nothing can match an unknown format."""
        assert RandomNumbersSegment(id="r", format="bogus").regex() is None
        assert RandomNumbersSegment(id="r", format="bogus").matches_part("123456") is False

    def test_fixed_width_formats(self) -> None:
        """Test 6-digit accepts exactly six digits."""
        segment = RandomNumbersSegment(id="r", format="6-digit")

        assert segment.matches_part("000123") is True
        assert segment.matches_part("123") is False

    def test_bit_formats_check_range(self) -> None:
        """Test 20-bit rejects values of 2^20 and above."""
        segment = RandomNumbersSegment(id="r", format="20-bit")

        assert segment.matches_part(str(2**20 - 1)) is True
        assert segment.matches_part(str(2**20)) is False
