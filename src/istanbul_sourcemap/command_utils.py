from __future__ import annotations

import sys
from typing import NoReturn


def log(message: str) -> None:
    print(message, flush=True)


def warn(message: str) -> None:
    print(f"[WARN] {message}", file=sys.stderr, flush=True)


def fail(message: str) -> NoReturn:
    print(f"[ERROR] {message}", file=sys.stderr, flush=True)
    raise SystemExit(1)
