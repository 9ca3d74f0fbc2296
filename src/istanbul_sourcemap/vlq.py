"""Base64 VLQ integer decoding for source map segments.

Each base64 character carries 6 bits: the low 5 bits are data and the high
bit marks that another character follows. Groups arrive least significant
first. After accumulation the lowest bit is the sign.
"""

from __future__ import annotations

from .errors import VlqDecodeError

BASE64_CHARS = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
BASE64_VALUES = {char: idx for idx, char in enumerate(BASE64_CHARS)}

VLQ_BASE_SHIFT = 5
VLQ_BASE = 1 << VLQ_BASE_SHIFT
VLQ_BASE_MASK = VLQ_BASE - 1
VLQ_CONTINUATION_BIT = VLQ_BASE


def decode_vlq(text: str, index: int = 0) -> tuple[int, int]:
    """Decode one signed integer starting at index; return (value, next_index)."""
    result = 0
    shift = 0
    while True:
        if index >= len(text):
            raise VlqDecodeError("Truncated VLQ value", segment=text)
        char = text[index]
        digit = BASE64_VALUES.get(char)
        if digit is None:
            raise VlqDecodeError(f"Invalid base64 character {char!r}", segment=text)
        index += 1
        result += (digit & VLQ_BASE_MASK) << shift
        shift += VLQ_BASE_SHIFT
        if not digit & VLQ_CONTINUATION_BIT:
            break

    magnitude = result >> 1
    if result & 1:
        return -magnitude, index
    return magnitude, index


def decode_vlq_values(segment: str) -> list[int]:
    """Decode every integer packed into one segment."""
    values: list[int] = []
    index = 0
    while index < len(segment):
        value, index = decode_vlq(segment, index)
        values.append(value)
    return values
