from __future__ import annotations

from .aggregator import MappedCoverage
from .models import FileCoverage, Location
from .paths import unique_key
from .resolver import SourceMapResolver


def get_or_create(unique_files: dict[str, MappedCoverage], source: str) -> MappedCoverage:
    key = unique_key(source)
    mapped = unique_files.get(key)
    if mapped is None:
        mapped = MappedCoverage(source)
        unique_files[key] = mapped
    return mapped


def process_file(
    fc: FileCoverage,
    resolver: SourceMapResolver,
    unique_files: dict[str, MappedCoverage],
) -> bool:
    """
    Remap every statement, function and branch of one generated file.

    Mapped records are forwarded into unique_files keyed by their original
    source. Returns True when at least one record was forwarded.
    """
    changes = 0

    for sid, loc in fc.statement_map.items():
        mapping = resolver.map_location(loc)
        if mapping is None:
            continue
        changes += 1
        get_or_create(unique_files, mapping.source).add_statement(mapping.loc, fc.s.get(sid, 0))

    for fid, meta in fc.fn_map.items():
        decl_mapping = resolver.map_location(meta.decl)
        span_mapping = resolver.map_location(meta.loc)
        if decl_mapping is None or span_mapping is None:
            continue
        if decl_mapping.source != span_mapping.source:
            continue
        changes += 1
        get_or_create(unique_files, decl_mapping.source).add_function(
            meta.name,
            decl_mapping.loc,
            span_mapping.loc,
            fc.f.get(fid, 0),
        )

    for bid, meta in fc.branch_map.items():
        hits = fc.b.get(bid, [])
        locs: list[Location] = []
        mapped_hits: list[int] = []
        sources: set[str] = set()

        for idx, loc in enumerate(meta.locations):
            mapping = resolver.map_location(loc)
            if mapping is None:
                continue
            sources.add(mapping.source)
            locs.append(mapping.loc)
            if idx < len(hits):
                mapped_hits.append(hits[idx])

        # A branch spread over several original files cannot be represented.
        if len(sources) != 1:
            continue
        source = sources.pop()

        branch_loc = locs[0]
        if not meta.loc.start.is_zero():
            loc_mapping = resolver.map_location(meta.loc)
            if loc_mapping is not None:
                branch_loc = loc_mapping.loc

        changes += 1
        get_or_create(unique_files, source).add_branch(meta.kind, branch_loc, locs, mapped_hits)

    return changes > 0
