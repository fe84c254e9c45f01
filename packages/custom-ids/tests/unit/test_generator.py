"""Tests for IdGenerator."""

import random
import re
from datetime import datetime, timezone

import pytest
from custom_ids import (
    DateSegment,
    FixedTextSegment,
    GuidSegment,
    IdGenerator,
    IdValidator,
    RandomNumbersSegment,
    SequenceSegment,
    parse_format,
)


NOW = datetime(2025, 9, 5, 14, 30, tzinfo=timezone.utc)


@pytest.fixture
def generator() -> IdGenerator:
    """Generator with a fixed clock and seeded random source."""
    return IdGenerator(clock=lambda: NOW, rng=random.Random(1234))


INVENTORY_FORMAT = [
    FixedTextSegment(id="f", value="INV-"),
    SequenceSegment(id="s", padding=3),
]


class TestGenerate:
    """Tests for IdGenerator.generate()."""

    def test_first_id_starts_at_start_value(self, generator: IdGenerator) -> None:
        """Test fresh counter produces INV-001."""
        generated = generator.generate(INVENTORY_FORMAT)

        assert generated.value == "INV-001"
        assert generated.boundaries == [4, 3]
        assert generated.boundaries_text == "4,3"
        assert generated.sequence_values == {"s": 1}

    def test_next_id_follows_last_value(self, generator: IdGenerator) -> None:
        """Test counter advances from the last persisted value."""
        assert generator.generate(INVENTORY_FORMAT, {"s": 1}).value == "INV-002"

    def test_bare_int_applies_to_first_sequence(self, generator: IdGenerator) -> None:
        """Test a bare int is the last value of the first sequence segment."""
        assert generator.generate(INVENTORY_FORMAT, 41).value == "INV-042"

    @pytest.mark.parametrize("last,expected", [(6, "0007"), (12344, "12345")])
    def test_padding(self, generator: IdGenerator, last: int, expected: str) -> None:
        """Test zero padding never truncates."""
        segments = [SequenceSegment(id="s", padding=4)]

        assert generator.generate(segments, {"s": last}).value == expected

    def test_date_segment_uses_clock(self, generator: IdGenerator) -> None:
        """Test Date segment renders the generator's clock."""
        segments = [DateSegment(id="d", format="yyMMdd"), FixedTextSegment(value="-X")]

        assert generator.generate(segments).value == "250905-X"

    def test_independent_counters(self, generator: IdGenerator) -> None:
        """Test every sequence segment owns its counter."""
        segments = [
            SequenceSegment(id="a", padding=2),
            FixedTextSegment(value="/"),
            SequenceSegment(id="b", start_value=100, step=10),
        ]

        generated = generator.generate(segments, {"a": 4, "b": 150})

        assert generated.value == "05/160"
        assert generated.sequence_values == {"a": 5, "b": 160}

    def test_format_without_sequence_claims_nothing(self, generator: IdGenerator) -> None:
        """Test formats without Sequence segments report no counter values."""
        segments = [FixedTextSegment(value="R-"), RandomNumbersSegment(id="r")]

        generated = generator.generate(segments, {"stale": 9})

        assert generated.sequence_values == {}
        assert generated.sequence_value is None
        assert re.fullmatch(r"R-[0-9]{6}", generated.value)

    def test_guid_d_layout(self, generator: IdGenerator) -> None:
        """Test Guid D layout renders as hyphenated hex."""
        generated = generator.generate([GuidSegment(id="g", format="D")])

        assert re.fullmatch(
            r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}", generated.value
        )

    def test_empty_format(self, generator: IdGenerator) -> None:
        """Test empty format renders the empty id."""
        generated = generator.generate([])

        assert generated.value == ""
        assert generated.boundaries == []

    @pytest.mark.parametrize(
        "guid_format,random_format,date_format",
        [
            ("N", "20-bit", "yyyy-MM-dd"),
            ("D", "32-bit", "yyy.MMM.d"),
            ("B", "6-digit", "yyMMddHHmmss"),
            ("P", "9-digit", "dddd, dd MMMM yyyy hh:mm tt"),
        ],
    )
    def test_generated_ids_validate(
        self, generator: IdGenerator, guid_format: str, random_format: str, date_format: str
    ) -> None:
        """Test every generated id passes validation of its own format."""
        segments = [
            FixedTextSegment(value="A."),
            DateSegment(id="d", format=date_format),
            RandomNumbersSegment(id="r", format=random_format),
            GuidSegment(id="g", format=guid_format),
            SequenceSegment(id="s", padding=5),
        ]
        validator = IdValidator()

        for generated in generator.generate_batch(segments, 20):
            assert validator.is_valid(generated.value, segments)
            assert validator.validate_segmented(
                generated.value, generated.boundaries, segments
            ).valid

    def test_out_of_range_padding_still_generates(self, generator: IdGenerator) -> None:
        """Test a format with an oversized padding falls back to the default and renders."""
        segments = parse_format('[{"id": "s", "type": "Sequence", "padding": 9223372036854775808}]')

        generated = generator.generate(segments)

        assert generated.value == "1"
        assert IdValidator().is_valid(generated.value, segments)


class TestGenerateBatch:
    """Tests for IdGenerator.generate_batch()."""

    def test_batch_threads_counters(self, generator: IdGenerator) -> None:
        """Test consecutive ids in a batch."""
        values = [g.value for g in generator.generate_batch(INVENTORY_FORMAT, 3, {"s": 9})]

        assert values == ["INV-010", "INV-011", "INV-012"]

    def test_next_sequence_values_ignores_unknown_ids(self, generator: IdGenerator) -> None:
        """Test counters of removed segments are ignored."""
        assert generator.next_sequence_values(INVENTORY_FORMAT, {"gone": 50}) == {"s": 1}
