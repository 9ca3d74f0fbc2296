from __future__ import annotations

from dataclasses import dataclass, field

from .aggregator import MappedCoverage
from .errors import VlqDecodeError
from .models import FileCoverage
from .paths import is_excluded_source, unique_key
from .resolver import SourceMapResolver
from .transformer import process_file

CoverageMap = dict[str, FileCoverage]

DECODE_ERROR_POLICIES = ("fail", "skip")


@dataclass(frozen=True)
class TransformOptions:
    on_decode_error: str = "fail"
    apply_source_root: bool = False
    exclude_sources: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.on_decode_error not in DECODE_ERROR_POLICIES:
            raise ValueError(
                f"on_decode_error must be one of {', '.join(DECODE_ERROR_POLICIES)}, "
                f"got {self.on_decode_error!r}"
            )


@dataclass
class TransformStats:
    mapped_files: list[str] = field(default_factory=list)
    ignored_files: list[str] = field(default_factory=list)
    skipped_files: list[str] = field(default_factory=list)
    passthrough_files: list[str] = field(default_factory=list)
    excluded_files: list[str] = field(default_factory=list)
    output_files: int = 0


def insert_unmapped(unique_files: dict[str, MappedCoverage], file_path: str, fc: FileCoverage) -> None:
    key = unique_key(file_path)
    existing = unique_files.get(key)
    if existing is None:
        unique_files[key] = MappedCoverage.from_file_coverage(fc)
    else:
        existing.absorb(fc)


class SourceMapStore:
    """Remaps a whole coverage collection; holds no state between calls."""

    def __init__(self, options: TransformOptions | None = None) -> None:
        self.options = options or TransformOptions()

    def transform_coverage(self, coverage_map: CoverageMap) -> CoverageMap:
        return self.transform_with_stats(coverage_map)[0]

    def transform_with_stats(self, coverage_map: CoverageMap) -> tuple[CoverageMap, TransformStats]:
        stats = TransformStats()

        if not any(fc.input_source_map is not None for fc in coverage_map.values()):
            stats.passthrough_files.extend(coverage_map)
            stats.output_files = len(coverage_map)
            return coverage_map, stats

        unique_files: dict[str, MappedCoverage] = {}

        for file_path, fc in coverage_map.items():
            if fc.input_source_map is None:
                stats.passthrough_files.append(file_path)
                insert_unmapped(unique_files, file_path, fc)
                continue

            # Decode the whole table before touching any aggregator.
            try:
                resolver = SourceMapResolver(
                    fc.input_source_map, apply_source_root=self.options.apply_source_root
                )
            except VlqDecodeError as exc:
                if self.options.on_decode_error == "fail":
                    raise VlqDecodeError(exc.message, path=file_path, segment=exc.segment) from exc
                stats.skipped_files.append(file_path)
                insert_unmapped(unique_files, file_path, fc)
                continue

            if process_file(fc, resolver, unique_files):
                stats.mapped_files.append(file_path)
            else:
                stats.ignored_files.append(file_path)
                insert_unmapped(unique_files, file_path, fc)

        result: CoverageMap = {}
        for mc in unique_files.values():
            path = mc.file_coverage.path
            if self.options.exclude_sources and is_excluded_source(path, self.options.exclude_sources):
                stats.excluded_files.append(path)
                continue
            result[path] = mc.file_coverage

        stats.output_files = len(result)
        return result, stats


def create_source_map_store(options: TransformOptions | None = None) -> SourceMapStore:
    return SourceMapStore(options)


def transform_coverage(coverage_map: CoverageMap, options: TransformOptions | None = None) -> CoverageMap:
    return create_source_map_store(options).transform_coverage(coverage_map)
