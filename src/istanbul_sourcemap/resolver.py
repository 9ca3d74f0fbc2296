from __future__ import annotations

from bisect import bisect_right

from .mappings import decode_mappings
from .models import Location, Mapping, MappingSegment, Position, ResolvedPosition, SourceMap
from .paths import join_source_root


class SourceMapResolver:
    """
    Generated -> original position lookup over one decoded mapping table.

    Coverage lines are 1-based while mapping-table lines are 0-based, so a
    query for line N reads table line N-1 and the original line is reported
    back 1-based. Columns are 0-based on both sides.
    """

    def __init__(self, source_map: SourceMap, apply_source_root: bool = False) -> None:
        self.source_map = source_map
        self.source_root = source_map.source_root if apply_source_root else None
        self.lines: list[list[MappingSegment]] = []
        self.columns: list[list[int]] = []
        for segments in decode_mappings(source_map):
            ordered = sorted(segments, key=lambda seg: seg.generated_column)
            self.lines.append(ordered)
            self.columns.append([seg.generated_column for seg in ordered])

    def original_position_for(self, line: int, column: int) -> ResolvedPosition | None:
        line_index = line - 1
        if line_index < 0 or line_index >= len(self.lines):
            return None

        idx = bisect_right(self.columns[line_index], column) - 1
        if idx < 0:
            return None

        segment = self.lines[line_index][idx]
        if segment.source is None:
            return None

        return ResolvedPosition(
            source=join_source_root(self.source_root, segment.source),
            line=segment.original_line + 1,
            column=segment.original_column,
            name=segment.name,
        )

    def map_location(self, loc: Location) -> Mapping | None:
        """Map both ends of a location; None unless both land in one source."""
        start = self.original_position_for(loc.start.line, loc.start.column)
        if start is None:
            return None
        end = self.original_position_for(loc.end.line, loc.end.column)
        if end is None or end.source != start.source:
            return None

        return Mapping(
            source=start.source,
            loc=Location(
                start=Position(line=start.line, column=start.column),
                end=Position(line=end.line, column=end.column),
            ),
        )


def resolve(source_map: SourceMap, line: int, column: int) -> ResolvedPosition | None:
    return SourceMapResolver(source_map).original_position_for(line, column)
