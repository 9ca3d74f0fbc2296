from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field, replace

from .models import BranchMeta, FileCoverage, FunctionMeta, Location

DedupKey = tuple[object, ...]


@dataclass
class LastIndices:
    s: int = 0
    f: int = 0
    b: int = 0


@dataclass
class MappedCoverageMeta:
    last: LastIndices = field(default_factory=LastIndices)
    seen: dict[DedupKey, int] = field(default_factory=dict)


def statement_key(loc: Location) -> DedupKey:
    return ("s", *loc.key())


def function_key(decl: Location) -> DedupKey:
    return ("f", *decl.key())


def branch_key(locations: list[Location] | tuple[Location, ...]) -> DedupKey:
    key: list[object] = ["b"]
    for loc in locations:
        key.extend(loc.key())
    return tuple(key)


def is_numeric_id(item: str) -> bool:
    return item.isascii() and item.isdigit()


def next_numeric_id(ids: Iterable[str]) -> int:
    numeric = [int(item) for item in ids if is_numeric_id(item)]
    return max(numeric) + 1 if numeric else 0


class MappedCoverage:
    """
    Coverage for one destination file under construction.

    Records arriving with a location already seen in this file are merged
    into the existing record by summing hits; new ones get the next id of
    their kind.
    """

    def __init__(self, path: str) -> None:
        self.file_coverage = FileCoverage(path=path)
        self.meta = MappedCoverageMeta()

    @classmethod
    def from_file_coverage(cls, fc: FileCoverage) -> MappedCoverage:
        """Wrap an unmapped file so later mapped records can merge into it."""
        mc = cls(fc.path)
        mc.file_coverage = replace(
            fc,
            statement_map=dict(fc.statement_map),
            fn_map=dict(fc.fn_map),
            branch_map=dict(fc.branch_map),
            s=dict(fc.s),
            f=dict(fc.f),
            b={bid: list(hits) for bid, hits in fc.b.items()},
            extra=dict(fc.extra),
        )

        seen = mc.meta.seen
        for sid, loc in fc.statement_map.items():
            if is_numeric_id(sid):
                seen.setdefault(statement_key(loc), int(sid))
        for fid, meta in fc.fn_map.items():
            if is_numeric_id(fid):
                seen.setdefault(function_key(meta.decl), int(fid))
        for bid, meta in fc.branch_map.items():
            if is_numeric_id(bid):
                seen.setdefault(branch_key(meta.locations), int(bid))

        mc.meta.last = LastIndices(
            s=next_numeric_id(fc.statement_map),
            f=next_numeric_id(fc.fn_map),
            b=next_numeric_id(fc.branch_map),
        )
        return mc

    def absorb(self, fc: FileCoverage) -> None:
        """Merge every record of an unmapped file into this one."""
        for sid, loc in fc.statement_map.items():
            self.add_statement(loc, fc.s.get(sid, 0))
        for fid, meta in fc.fn_map.items():
            self.add_function(meta.name, meta.decl, meta.loc, fc.f.get(fid, 0))
        for bid, meta in fc.branch_map.items():
            self.add_branch(meta.kind, meta.loc, list(meta.locations), fc.b.get(bid, []))

    def add_statement(self, loc: Location, hits: int) -> int:
        key = statement_key(loc)
        index = self.meta.seen.get(key)
        if index is not None:
            index_str = str(index)
            self.file_coverage.s[index_str] = self.file_coverage.s.get(index_str, 0) + hits
            return index

        index = self.meta.last.s
        self.meta.last.s += 1
        self.meta.seen[key] = index

        index_str = str(index)
        self.file_coverage.statement_map[index_str] = loc
        self.file_coverage.s[index_str] = hits
        return index

    def add_function(self, name: str, decl: Location, loc: Location, hits: int) -> int:
        key = function_key(decl)
        index = self.meta.seen.get(key)
        if index is not None:
            index_str = str(index)
            self.file_coverage.f[index_str] = self.file_coverage.f.get(index_str, 0) + hits
            return index

        index = self.meta.last.f
        self.meta.last.f += 1
        self.meta.seen[key] = index

        index_str = str(index)
        self.file_coverage.fn_map[index_str] = FunctionMeta(
            name=name or f"(unknown_{index})",
            decl=decl,
            loc=loc,
        )
        self.file_coverage.f[index_str] = hits
        return index

    def add_branch(
        self,
        kind: str,
        loc: Location,
        branch_locations: list[Location],
        hits: list[int],
    ) -> int:
        key = branch_key(branch_locations)
        index = self.meta.seen.get(key)
        if index is not None:
            existing_hits = self.file_coverage.b.get(str(index))
            if existing_hits is not None:
                # Element-wise by common index; surplus incoming hits are dropped.
                for i, hit in enumerate(hits[: len(existing_hits)]):
                    existing_hits[i] += hit
            return index

        index = self.meta.last.b
        self.meta.last.b += 1
        self.meta.seen[key] = index

        index_str = str(index)
        self.file_coverage.branch_map[index_str] = BranchMeta(
            kind=kind,
            loc=loc,
            locations=tuple(branch_locations),
        )
        self.file_coverage.b[index_str] = list(hits)
        return index
