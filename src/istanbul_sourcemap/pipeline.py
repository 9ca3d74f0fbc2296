from __future__ import annotations

from .args_config import build_transform_options, parse_args, resolve_paths
from .codec import read_coverage_file, write_coverage_file
from .command_utils import fail, log, warn
from .errors import SourceMapError
from .store import SourceMapStore


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    options = build_transform_options(args)
    if options.exclude_sources:
        log(f"[0/3] Exclude source patterns: {len(options.exclude_sources)}")
        for pattern in options.exclude_sources:
            log(f"      - {pattern}")

    input_path, output_path = resolve_paths(args)

    try:
        log(f"[1/3] Load coverage -> {input_path}")
        coverage_map = read_coverage_file(input_path)
        with_maps = sum(1 for fc in coverage_map.values() if fc.input_source_map is not None)
        log(f"      {len(coverage_map)} file(s), {with_maps} with inputSourceMap")

        log(f"[2/3] Remap coverage through source maps (on decode error: {options.on_decode_error})")
        transformed, stats = SourceMapStore(options).transform_with_stats(coverage_map)
        for path in stats.ignored_files:
            log(f"File [{path}] ignored, nothing could be mapped")
        for path in stats.skipped_files:
            warn(f"File [{path}] kept unmapped, its source map could not be decoded")
        log(
            f"      mapped: {len(stats.mapped_files)}, ignored: {len(stats.ignored_files)}, "
            f"skipped: {len(stats.skipped_files)}, passthrough: {len(stats.passthrough_files)}"
        )
        if stats.excluded_files:
            log(f"      excluded output files: {len(stats.excluded_files)}")

        log(f"[3/3] Write {stats.output_files} file(s) -> {output_path}")
        write_coverage_file(output_path, transformed, indent=args.indent)
    except SourceMapError as exc:
        fail(str(exc))

    log(f"[OK] Done. Remapped coverage written to {output_path}.")
    return 0
