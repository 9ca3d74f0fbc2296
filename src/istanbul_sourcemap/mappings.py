from __future__ import annotations

from .errors import VlqDecodeError
from .models import MappingSegment, SourceMap
from .vlq import decode_vlq_values


def lookup_index(values: tuple[str, ...], index: int) -> str | None:
    if 0 <= index < len(values):
        return values[index]
    return None


def decode_mappings(source_map: SourceMap) -> list[list[MappingSegment]]:
    """
    Decode the mappings string into per-generated-line segment lists.

    Source index, original line/column and name index are running totals
    across the whole table; generated column restarts on every line.
    """
    result: list[list[MappingSegment]] = []

    source_index = 0
    original_line = 0
    original_column = 0
    name_index = 0

    for line_index, line in enumerate(source_map.mappings.split(";")):
        generated_column = 0
        line_segments: list[MappingSegment] = []

        for segment in line.split(","):
            if not segment:
                continue

            values = decode_vlq_values(segment)
            generated_column += values[0]

            if len(values) == 1:
                # Generated-only position: keeps column tracking, maps nowhere.
                line_segments.append(
                    MappingSegment(generated_line=line_index, generated_column=generated_column)
                )
                continue

            if len(values) < 4:
                raise VlqDecodeError(
                    f"Segment has {len(values)} fields, expected 1, 4 or 5",
                    segment=segment,
                )

            source_index += values[1]
            original_line += values[2]
            original_column += values[3]

            name = None
            if len(values) >= 5:
                name_index += values[4]
                name = lookup_index(source_map.names, name_index)

            line_segments.append(
                MappingSegment(
                    generated_line=line_index,
                    generated_column=generated_column,
                    source=lookup_index(source_map.sources, source_index),
                    original_line=original_line,
                    original_column=original_column,
                    name=name,
                )
            )

        result.append(line_segments)

    return result
