from __future__ import annotations

import pytest

from istanbul_sourcemap.errors import VlqDecodeError
from istanbul_sourcemap.mappings import decode_mappings
from istanbul_sourcemap.models import MappingSegment, SourceMap


def make_map(mappings: str, sources: tuple[str, ...] = ("a.ts",), names: tuple[str, ...] = ()) -> SourceMap:
    return SourceMap(version=3, sources=sources, names=names, mappings=mappings)


def test_running_totals_carry_across_lines() -> None:
    lines = decode_mappings(make_map("AAAA,EAAE;ACCA", sources=("a.ts", "b.ts")))

    assert lines == [
        [
            MappingSegment(0, 0, "a.ts", 0, 0),
            MappingSegment(0, 2, "a.ts", 0, 2),
        ],
        # Generated column restarts, everything else keeps accumulating.
        [MappingSegment(1, 0, "b.ts", 1, 2)],
    ]


def test_generated_only_segment_is_kept_without_source() -> None:
    lines = decode_mappings(make_map("AAAA,G"))

    assert len(lines[0]) == 2
    assert lines[0][1] == MappingSegment(generated_line=0, generated_column=3)
    assert lines[0][1].source is None


def test_out_of_range_source_index_only_invalidates_that_segment() -> None:
    lines = decode_mappings(make_map("AEAA,CDAA", sources=("a.ts", "b.ts")))

    assert lines[0][0].source is None
    assert lines[0][1].source == "b.ts"
    assert lines[0][1].generated_column == 1


def test_name_index_resolves_through_names() -> None:
    lines = decode_mappings(make_map("AAAAA,CAACC", names=("foo",)))

    assert lines[0][0].name == "foo"
    # Name index 1 is out of range.
    assert lines[0][1].name is None
    assert lines[0][1].source == "a.ts"


def test_empty_lines_and_segments() -> None:
    assert decode_mappings(make_map("")) == [[]]
    assert decode_mappings(make_map(";;")) == [[], [], []]
    assert len(decode_mappings(make_map("AAAA,,CAAC"))[0]) == 2


def test_invalid_character_fails_whole_table() -> None:
    with pytest.raises(VlqDecodeError):
        decode_mappings(make_map("AAAA;AA!A"))


def test_segment_with_two_fields_is_rejected() -> None:
    with pytest.raises(VlqDecodeError):
        decode_mappings(make_map("AAAA,CA"))
