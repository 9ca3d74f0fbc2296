from __future__ import annotations

import json
from pathlib import Path

import pytest

APP_COVERAGE = {
    "dist/app.js": {
        "path": "dist/app.js",
        "statementMap": {
            "0": {"start": {"line": 1, "column": 0}, "end": {"line": 1, "column": 25}},
            "1": {"start": {"line": 2, "column": 0}, "end": {"line": 2, "column": 20}},
        },
        "fnMap": {
            "0": {
                "name": "myFunction",
                "decl": {"start": {"line": 1, "column": 9}, "end": {"line": 1, "column": 19}},
                "loc": {"start": {"line": 1, "column": 0}, "end": {"line": 3, "column": 1}},
            }
        },
        "branchMap": {},
        "s": {"0": 1, "1": 1},
        "f": {"0": 1},
        "b": {},
        "inputSourceMap": {
            "version": 3,
            "sources": ["src/app.ts"],
            "names": ["myFunction", "console", "log"],
            "mappings": "AAAA,SAASA,WACP,OAAOC,QAAQC,IAAI",
            "file": "app.js",
            "sourceRoot": "",
        },
    },
    "lib/plain.js": {
        "path": "lib/plain.js",
        "statementMap": {"0": {"start": {"line": 1, "column": 0}, "end": {"line": 1, "column": 10}}},
        "fnMap": {},
        "branchMap": {},
        "s": {"0": 4},
        "f": {},
        "b": {},
        "hash": "3f2a",
    },
}


@pytest.fixture
def app_coverage() -> dict:
    return json.loads(json.dumps(APP_COVERAGE))


@pytest.fixture
def coverage_file(tmp_path: Path, app_coverage: dict) -> Path:
    path = tmp_path / "coverage" / "coverage-final.json"
    path.parent.mkdir()
    path.write_text(json.dumps(app_coverage), encoding="utf-8")
    return path
