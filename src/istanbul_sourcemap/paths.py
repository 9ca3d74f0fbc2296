from __future__ import annotations

import fnmatch
import posixpath


def unique_key(path: str) -> str:
    """Collapse both path separators so '/' and '\\' spellings share one key."""
    return path.replace("\\", "/")


def join_source_root(source_root: str | None, source: str) -> str:
    if not source_root:
        return source
    if source.startswith("/") or "://" in source:
        return source
    return posixpath.join(source_root, source)


def normalize_source_pattern(pattern: str) -> str:
    return pattern.strip().replace("\\", "/")


def matches_excluded_source(path: str, pattern: str) -> bool:
    """
    Match one resolved source path against an exclude pattern.

    Supports both exact string matches and '*' wildcard matches.
    """
    normalized_path = path.replace("\\", "/")
    normalized_pattern = normalize_source_pattern(pattern)

    if "*" in normalized_pattern:
        return fnmatch.fnmatchcase(normalized_path, normalized_pattern)

    return normalized_path == normalized_pattern


def is_excluded_source(path: str, patterns: tuple[str, ...]) -> bool:
    return any(matches_excluded_source(path, pattern) for pattern in patterns)
