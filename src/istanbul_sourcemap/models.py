from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .errors import CoverageFormatError

VERSION = "0.3.0"


@dataclass(frozen=True)
class Position:
    line: int
    column: int

    def is_zero(self) -> bool:
        return self.line == 0 and self.column == 0


@dataclass(frozen=True)
class Location:
    start: Position
    end: Position

    def key(self) -> tuple[int, int, int, int]:
        return (self.start.line, self.start.column, self.end.line, self.end.column)


@dataclass(frozen=True)
class FunctionMeta:
    name: str
    decl: Location
    loc: Location


@dataclass(frozen=True)
class BranchMeta:
    kind: str
    loc: Location
    locations: tuple[Location, ...]


@dataclass(frozen=True)
class SourceMap:
    version: int
    sources: tuple[str, ...]
    names: tuple[str, ...]
    mappings: str
    file: str | None = None
    source_root: str | None = None
    sources_content: tuple[str | None, ...] | None = None


@dataclass
class FileCoverage:
    path: str
    statement_map: dict[str, Location] = field(default_factory=dict)
    fn_map: dict[str, FunctionMeta] = field(default_factory=dict)
    branch_map: dict[str, BranchMeta] = field(default_factory=dict)
    s: dict[str, int] = field(default_factory=dict)
    f: dict[str, int] = field(default_factory=dict)
    b: dict[str, list[int]] = field(default_factory=dict)
    input_source_map: SourceMap | None = None
    # Keys outside the remapped shape (e.g. "hash", "_coverageSchema").
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ResolvedPosition:
    source: str
    line: int
    column: int
    name: str | None = None


@dataclass(frozen=True)
class MappingSegment:
    """One decoded mapping entry; all fields absolute, lines 0-based."""

    generated_line: int
    generated_column: int
    source: str | None = None
    original_line: int = 0
    original_column: int = 0
    name: str | None = None


@dataclass(frozen=True)
class Mapping:
    source: str
    loc: Location


KNOWN_FILE_KEYS = {"path", "statementMap", "fnMap", "branchMap", "s", "f", "b", "inputSourceMap"}


def _require_object(value: object, context: str, path: str | None) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise CoverageFormatError(f"{context} must be an object", path=path)
    return value


def _require_int(value: object, context: str, path: str | None) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise CoverageFormatError(f"{context} must be a non-negative integer", path=path)
    return value


def _require_str(value: object, context: str, path: str | None) -> str:
    if not isinstance(value, str):
        raise CoverageFormatError(f"{context} must be a string", path=path)
    return value


def _string_list(value: object, context: str, path: str | None) -> tuple[str, ...]:
    if not isinstance(value, list) or any(not isinstance(item, str) for item in value):
        raise CoverageFormatError(f"{context} must be a string array", path=path)
    return tuple(value)


def position_from_dict(payload: object, context: str, path: str | None = None) -> Position:
    data = _require_object(payload, context, path)
    return Position(
        line=_require_int(data.get("line"), f"{context}.line", path),
        column=_require_int(data.get("column"), f"{context}.column", path),
    )


def location_from_dict(payload: object, context: str, path: str | None = None) -> Location:
    data = _require_object(payload, context, path)
    return Location(
        start=position_from_dict(data.get("start"), f"{context}.start", path),
        end=position_from_dict(data.get("end"), f"{context}.end", path),
    )


def location_to_dict(loc: Location) -> dict[str, Any]:
    return {
        "start": {"line": loc.start.line, "column": loc.start.column},
        "end": {"line": loc.end.line, "column": loc.end.column},
    }


def source_map_from_dict(payload: object, path: str | None = None) -> SourceMap:
    data = _require_object(payload, "inputSourceMap", path)
    version = _require_int(data.get("version"), "inputSourceMap.version", path)
    sources = _string_list(data.get("sources"), "inputSourceMap.sources", path)
    names = _string_list(data.get("names", []), "inputSourceMap.names", path)
    mappings = _require_str(data.get("mappings"), "inputSourceMap.mappings", path)

    file = data.get("file")
    if file is not None:
        file = _require_str(file, "inputSourceMap.file", path)
    source_root = data.get("sourceRoot")
    if source_root is not None:
        source_root = _require_str(source_root, "inputSourceMap.sourceRoot", path)

    sources_content = data.get("sourcesContent")
    if sources_content is not None:
        # Entries may be null for sources whose text was not embedded.
        if not isinstance(sources_content, list) or any(
            item is not None and not isinstance(item, str) for item in sources_content
        ):
            raise CoverageFormatError(
                "inputSourceMap.sourcesContent must be an array of strings", path=path
            )
        sources_content = tuple(sources_content)

    return SourceMap(
        version=version,
        sources=sources,
        names=names,
        mappings=mappings,
        file=file,
        source_root=source_root,
        sources_content=sources_content,
    )


def source_map_to_dict(source_map: SourceMap) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "version": source_map.version,
        "sources": list(source_map.sources),
        "names": list(source_map.names),
        "mappings": source_map.mappings,
    }
    if source_map.file is not None:
        payload["file"] = source_map.file
    if source_map.source_root is not None:
        payload["sourceRoot"] = source_map.source_root
    if source_map.sources_content is not None:
        payload["sourcesContent"] = list(source_map.sources_content)
    return payload


def file_coverage_from_dict(payload: object, key: str | None = None) -> FileCoverage:
    """Build one FileCoverage from its exchange-format object."""
    data = _require_object(payload, "file coverage", key)
    path = _require_str(data.get("path", key), "path", key)

    statement_map = {
        sid: location_from_dict(loc, f"statementMap[{sid}]", path)
        for sid, loc in _require_object(data.get("statementMap", {}), "statementMap", path).items()
    }

    fn_map: dict[str, FunctionMeta] = {}
    for fid, meta in _require_object(data.get("fnMap", {}), "fnMap", path).items():
        meta = _require_object(meta, f"fnMap[{fid}]", path)
        fn_map[fid] = FunctionMeta(
            name=_require_str(meta.get("name", ""), f"fnMap[{fid}].name", path),
            decl=location_from_dict(meta.get("decl"), f"fnMap[{fid}].decl", path),
            loc=location_from_dict(meta.get("loc"), f"fnMap[{fid}].loc", path),
        )

    branch_map: dict[str, BranchMeta] = {}
    for bid, meta in _require_object(data.get("branchMap", {}), "branchMap", path).items():
        meta = _require_object(meta, f"branchMap[{bid}]", path)
        locations = meta.get("locations", [])
        if not isinstance(locations, list):
            raise CoverageFormatError(f"branchMap[{bid}].locations must be an array", path=path)
        branch_map[bid] = BranchMeta(
            kind=_require_str(meta.get("type", ""), f"branchMap[{bid}].type", path),
            loc=location_from_dict(meta.get("loc"), f"branchMap[{bid}].loc", path),
            locations=tuple(
                location_from_dict(item, f"branchMap[{bid}].locations[{idx}]", path)
                for idx, item in enumerate(locations)
            ),
        )

    s = {
        sid: _require_int(hits, f"s[{sid}]", path)
        for sid, hits in _require_object(data.get("s", {}), "s", path).items()
    }
    f = {
        fid: _require_int(hits, f"f[{fid}]", path)
        for fid, hits in _require_object(data.get("f", {}), "f", path).items()
    }
    b: dict[str, list[int]] = {}
    for bid, hits in _require_object(data.get("b", {}), "b", path).items():
        if not isinstance(hits, list):
            raise CoverageFormatError(f"b[{bid}] must be an array", path=path)
        b[bid] = [_require_int(hit, f"b[{bid}]", path) for hit in hits]

    raw_source_map = data.get("inputSourceMap")
    input_source_map = None if raw_source_map is None else source_map_from_dict(raw_source_map, path)

    return FileCoverage(
        path=path,
        statement_map=statement_map,
        fn_map=fn_map,
        branch_map=branch_map,
        s=s,
        f=f,
        b=b,
        input_source_map=input_source_map,
        extra={k: v for k, v in data.items() if k not in KNOWN_FILE_KEYS},
    )


def file_coverage_to_dict(fc: FileCoverage) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "path": fc.path,
        "statementMap": {sid: location_to_dict(loc) for sid, loc in fc.statement_map.items()},
        "fnMap": {
            fid: {
                "name": meta.name,
                "decl": location_to_dict(meta.decl),
                "loc": location_to_dict(meta.loc),
            }
            for fid, meta in fc.fn_map.items()
        },
        "branchMap": {
            bid: {
                "type": meta.kind,
                "loc": location_to_dict(meta.loc),
                "locations": [location_to_dict(loc) for loc in meta.locations],
            }
            for bid, meta in fc.branch_map.items()
        },
        "s": dict(fc.s),
        "f": dict(fc.f),
        "b": {bid: list(hits) for bid, hits in fc.b.items()},
    }
    if fc.input_source_map is not None:
        payload["inputSourceMap"] = source_map_to_dict(fc.input_source_map)
    payload.update(fc.extra)
    return payload
