from __future__ import annotations

import json
from pathlib import Path

from .errors import BoundaryIOError, CoverageFormatError
from .models import file_coverage_from_dict, file_coverage_to_dict
from .store import CoverageMap, TransformOptions, transform_coverage


def load_coverage_map(text: str) -> CoverageMap:
    """Parse coverage JSON text (path -> file coverage object)."""
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise CoverageFormatError(f"Invalid coverage JSON: {exc}") from exc

    if not isinstance(payload, dict):
        raise CoverageFormatError("Coverage JSON must be an object keyed by file path")

    return {key: file_coverage_from_dict(value, key) for key, value in payload.items()}


def dump_coverage_map(coverage_map: CoverageMap, indent: int | None = 2) -> str:
    payload = {key: file_coverage_to_dict(fc) for key, fc in coverage_map.items()}
    return json.dumps(payload, indent=indent)


def transform_istanbul_coverage(text: str, options: TransformOptions | None = None) -> str:
    """Decode coverage JSON, remap it through embedded source maps, encode it again."""
    return dump_coverage_map(transform_coverage(load_coverage_map(text), options))


def read_coverage_file(path: Path) -> CoverageMap:
    try:
        raw_text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise BoundaryIOError("Coverage file not found", path=str(path)) from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise BoundaryIOError(f"Failed to read coverage file: {exc}", path=str(path)) from exc

    try:
        return load_coverage_map(raw_text)
    except CoverageFormatError as exc:
        if exc.path is None:
            raise CoverageFormatError(exc.message, path=str(path)) from exc
        raise


def write_coverage_file(path: Path, coverage_map: CoverageMap, indent: int | None = 2) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(dump_coverage_map(coverage_map, indent=indent) + "\n", encoding="utf-8")
    except OSError as exc:
        raise BoundaryIOError(f"Failed to write coverage file: {exc}", path=str(path)) from exc
