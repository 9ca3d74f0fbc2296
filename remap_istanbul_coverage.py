#!/usr/bin/env python3
"""Remap Istanbul coverage JSON back to original sources via inputSourceMap."""

from istanbul_sourcemap.pipeline import main

if __name__ == "__main__":
    raise SystemExit(main())
