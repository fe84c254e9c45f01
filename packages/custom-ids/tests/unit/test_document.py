"""Tests for format document parsing and canonical serialization."""

import json

import pytest
from custom_ids import (
    DateSegment,
    FixedTextSegment,
    GuidSegment,
    MalformedFormatError,
    RandomNumbersSegment,
    SequenceSegment,
    canonicalize,
    format_hash,
    parse_format,
    serialize_format,
)


DOCUMENT = json.dumps(
    [
        {"id": "a", "type": "FixedText", "value": "INV-"},
        {"id": "b", "type": "Sequence", "startValue": 1, "step": 1, "padding": 3},
    ]
)


class TestParseFormat:
    """Tests for parse_format()."""

    def test_parse_document(self) -> None:
        """Test parsing segments in document order."""
        segments = parse_format(DOCUMENT)

        assert segments == [
            FixedTextSegment(id="a", value="INV-"),
            SequenceSegment(id="b", start_value=1, step=1, padding=3),
        ]

    def test_property_names_are_case_insensitive(self) -> None:
        """Test property names match regardless of case."""
        segments = parse_format('[{"ID": "b", "Type": "Sequence", "STARTVALUE": 5, "Padding": 2}]')

        assert segments == [SequenceSegment(id="b", start_value=5, padding=2)]

    def test_parse_decoded_array(self) -> None:
        """Test an already decoded array is accepted."""
        assert parse_format([{"type": "Guid", "format": "D"}]) == [GuidSegment(format="D")]

    @pytest.mark.parametrize("document", [None, "", "   ", "[]"])
    def test_empty_documents(self, document: str | None) -> None:
        """Test missing and empty documents mean no format."""
        assert parse_format(document) == []

    def test_unknown_types_are_skipped(self) -> None:
        """Test unknown or missing types are dropped, the rest survive."""
        segments = parse_format(
            '[{"type": "Emoji"}, {"value": "x"}, {"type": "FixedText", "value": "A"}]'
        )

        assert segments == [FixedTextSegment(value="A")]

    @pytest.mark.parametrize(
        "document",
        ['{"type": "FixedText"}', "[1, 2]", "not json", '"text"', '[{"type": "FixedText"'],
    )
    def test_malformed_documents(self, document: str) -> None:
        """Test documents that are not arrays of objects are rejected."""
        with pytest.raises(MalformedFormatError):
            parse_format(document)

    def test_parse_utf8_bytes(self) -> None:
        """Test UTF-8 encoded documents are accepted."""
        document = '[{"type": "FixedText", "value": "Ñ-"}]'.encode("utf-8")

        assert parse_format(document) == [FixedTextSegment(value="Ñ-")]

    @pytest.mark.parametrize(
        "document",
        [b'[{"type": "FixedText", "value": "\xff"}]', "[" * 1_000_000],
        ids=["invalid-utf8", "deeply-nested"],
    )
    def test_undecodable_documents(self, document: str | bytes) -> None:
        """Test undecodable input is reported as a malformed document."""
        with pytest.raises(MalformedFormatError):
            parse_format(document)


class TestIntegerProperties:
    """Tests for integer segment properties."""

    @pytest.mark.parametrize("key", ["startValue", "step", "padding"])
    @pytest.mark.parametrize(
        "value", [2**31, -(2**31) - 1, 9223372036854775808, "99999999999999999999"]
    )
    def test_out_of_range_falls_back_to_default(self, key: str, value: int | str) -> None:
        """Test values outside the 32-bit range are treated as unparsable."""
        segments = parse_format([{"id": "s", "type": "Sequence", key: value}])

        assert segments == [SequenceSegment(id="s")]

    def test_32_bit_bounds_are_kept(self) -> None:
        """Test the extremes of the 32-bit range are accepted."""
        segments = parse_format(
            [{"type": "Sequence", "startValue": -(2**31), "step": "2147483647", "padding": 7}]
        )

        assert segments == [SequenceSegment(start_value=-(2**31), step=2**31 - 1, padding=7)]


class TestCanonicalForm:
    """Tests for serialize_format(), format_hash() and canonicalize()."""

    def test_serialize_is_compact_camel_case(self) -> None:
        """Test canonical JSON layout."""
        canonical = serialize_format(parse_format(DOCUMENT))

        assert canonical == (
            '[{"id":"a","type":"FixedText","value":"INV-"},'
            '{"id":"b","type":"Sequence","startValue":1,"step":1,"padding":3}]'
        )

    def test_serialize_keeps_non_ascii(self) -> None:
        """Test non-ASCII text is written as-is."""
        canonical = serialize_format([FixedTextSegment(id="a", value="Ñ-")])

        assert "Ñ-" in canonical

    def test_hash_ignores_whitespace_and_case(self) -> None:
        """Test equivalent documents hash identically."""
        spaced = """
            [ {"ID": "a", "TYPE": "FixedText", "Value": "INV-"},
              {"id": "b", "type": "Sequence", "padding": 3} ]
        """

        assert format_hash(parse_format(spaced)) == format_hash(parse_format(DOCUMENT))

    def test_hash_changes_with_properties(self) -> None:
        """Test any property change produces a new hash."""
        wider = DOCUMENT.replace('"padding": 3', '"padding": 4')

        assert format_hash(parse_format(wider)) != format_hash(parse_format(DOCUMENT))

    def test_empty_format_has_no_hash(self) -> None:
        """Test empty format hashes to None."""
        assert format_hash([]) is None

    def test_canonicalize(self) -> None:
        """Test canonicalize returns the canonical document and its SHA-256."""
        canonical, digest = canonicalize(DOCUMENT)

        assert canonical == serialize_format(parse_format(DOCUMENT))
        assert len(digest) == 64

    def test_canonicalize_empty(self) -> None:
        """Test a document without supported segments canonicalizes to nothing."""
        assert canonicalize('[{"type": "Emoji"}]') == (None, None)

    def test_canonical_document_is_stable(self) -> None:
        """Test re-canonicalizing the canonical form changes nothing."""
        canonical, digest = canonicalize(DOCUMENT)

        assert canonicalize(canonical) == (canonical, digest)

    def test_parse_reverses_serialize(self) -> None:
        """Test every segment type survives serialization with non-default values."""
        segments = [
            FixedTextSegment(id="a", value='Ñ-"{x}"'),
            SequenceSegment(id="b", start_value=100, step=5, padding=6),
            DateSegment(id="c", format="dd.MM.yy"),
            RandomNumbersSegment(id="d", format="32-bit"),
            GuidSegment(id="e", format="P"),
        ]

        assert parse_format(serialize_format(segments)) == segments
