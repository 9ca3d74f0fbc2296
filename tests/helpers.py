from __future__ import annotations

from istanbul_sourcemap.models import (
    BranchMeta,
    FileCoverage,
    FunctionMeta,
    Location,
    Position,
    SourceMap,
)
from istanbul_sourcemap.vlq import BASE64_CHARS


def encode_vlq(value: int) -> str:
    raw = (-value << 1) + 1 if value < 0 else value << 1
    chars: list[str] = []
    while True:
        digit = raw & 31
        raw >>= 5
        if raw:
            chars.append(BASE64_CHARS[digit | 32])
        else:
            chars.append(BASE64_CHARS[digit])
            return "".join(chars)


def encode_mappings(lines: list[list[tuple[int, ...]]]) -> str:
    """Encode absolute (gen_col[, src, line, col[, name]]) tuples per generated line."""
    state = [0, 0, 0, 0, 0]
    encoded_lines: list[str] = []
    for segments in lines:
        state[0] = 0
        encoded: list[str] = []
        for segment in segments:
            parts: list[str] = []
            for idx, value in enumerate(segment):
                parts.append(encode_vlq(value - state[idx]))
                state[idx] = value
            encoded.append("".join(parts))
        encoded_lines.append(",".join(encoded))
    return ";".join(encoded_lines)


def loc(start_line: int, start_col: int, end_line: int, end_col: int) -> Location:
    return Location(start=Position(start_line, start_col), end=Position(end_line, end_col))


def source_map(sources: list[str], lines: list[list[tuple[int, ...]]], names: list[str] | None = None,
               source_root: str | None = None) -> SourceMap:
    return SourceMap(
        version=3,
        sources=tuple(sources),
        names=tuple(names or []),
        mappings=encode_mappings(lines),
        source_root=source_root,
    )


def file_coverage(
    path: str,
    statements: list[tuple[Location, int]] | None = None,
    functions: list[tuple[str, Location, Location, int]] | None = None,
    branches: list[tuple[str, Location, list[Location], list[int]]] | None = None,
    input_source_map: SourceMap | None = None,
) -> FileCoverage:
    fc = FileCoverage(path=path, input_source_map=input_source_map)
    for idx, (statement_loc, hits) in enumerate(statements or []):
        fc.statement_map[str(idx)] = statement_loc
        fc.s[str(idx)] = hits
    for idx, (name, decl, span, hits) in enumerate(functions or []):
        fc.fn_map[str(idx)] = FunctionMeta(name=name, decl=decl, loc=span)
        fc.f[str(idx)] = hits
    for idx, (kind, summary, locations, hits) in enumerate(branches or []):
        fc.branch_map[str(idx)] = BranchMeta(kind=kind, loc=summary, locations=tuple(locations))
        fc.b[str(idx)] = list(hits)
    return fc


def statement_hits_by_location(fc: FileCoverage) -> dict[Location, int]:
    return {statement_loc: fc.s[sid] for sid, statement_loc in fc.statement_map.items()}
