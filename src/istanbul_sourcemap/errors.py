from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    ENCODING = "encoding"
    VLQ_DECODE = "vlq-decode"
    IO = "io"


class SourceMapError(Exception):
    """Base error for all coverage remapping failures."""

    kind = ErrorKind.ENCODING

    def __init__(self, message: str, path: str | None = None, segment: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path
        self.segment = segment

    def __str__(self) -> str:
        parts = [self.message]
        if self.path is not None:
            parts.append(f"file '{self.path}'")
        if self.segment is not None:
            parts.append(f"segment '{self.segment}'")
        return " | ".join(parts)


class CoverageFormatError(SourceMapError):
    """Errors raised while reading coverage or mapping payloads."""

    kind = ErrorKind.ENCODING


class VlqDecodeError(SourceMapError):
    """Errors raised while decoding base64 VLQ mapping segments."""

    kind = ErrorKind.VLQ_DECODE


class BoundaryIOError(SourceMapError):
    """Errors raised while reading or writing coverage files."""

    kind = ErrorKind.IO
