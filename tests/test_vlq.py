from __future__ import annotations

import pytest

from istanbul_sourcemap.errors import ErrorKind, VlqDecodeError
from istanbul_sourcemap.vlq import decode_vlq, decode_vlq_values


@pytest.mark.parametrize(
    ("text", "expected"),
    [("A", 0), ("C", 1), ("D", -1), ("E", 2), ("F", -2), ("2H", 123), ("gqjG", 100000), ("hqjG", -100000)],
)
def test_decode_single_value(text: str, expected: int) -> None:
    assert decode_vlq(text) == (expected, len(text))


def test_decode_from_offset_returns_next_index() -> None:
    assert decode_vlq("AC2H", 1) == (1, 2)
    assert decode_vlq("AC2H", 2) == (123, 4)


def test_decode_all_values_in_segment() -> None:
    assert decode_vlq_values("DFLx+BhqjG") == [-1, -2, -5, -1000, -100000]
    assert decode_vlq_values("CEKw+BgqjG") == [1, 2, 5, 1000, 100000]


def test_invalid_character_is_decode_error() -> None:
    with pytest.raises(VlqDecodeError) as excinfo:
        decode_vlq("A!", 1)
    assert excinfo.value.kind is ErrorKind.VLQ_DECODE
    assert excinfo.value.segment == "A!"


def test_truncated_value_is_decode_error() -> None:
    # 'g' sets the continuation bit with nothing after it.
    with pytest.raises(VlqDecodeError):
        decode_vlq("g")
