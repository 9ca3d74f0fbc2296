from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .command_utils import fail
from .models import VERSION
from .store import DECODE_ERROR_POLICIES, TransformOptions

try:
    import yaml
except ModuleNotFoundError:
    fail("Missing required Python package: pyyaml. Install dependencies with: pip install pyyaml")

DEFAULT_INPUT = "coverage/coverage-final.json"
YAML_KEYS = ("input", "output", "on_decode_error", "apply_source_root", "exclude_source", "indent")


def parse_string_list_field(payload: dict[str, object], key: str) -> list[str]:
    """Read an optional string-list field from YAML object with strict type checks."""
    value = payload.get(key, [])
    if value is None:
        return []
    if not isinstance(value, list) or any(not isinstance(item, str) for item in value):
        fail(f"YAML field '{key}' must be a string array")
    return value


def parse_string_field(payload: dict[str, object], key: str) -> str | None:
    value = payload.get(key)
    if value is not None and not isinstance(value, str):
        fail(f"YAML field '{key}' must be a string")
    return value


def load_yaml(yaml_path: Path) -> object:
    """Load args payload from YAML text."""
    try:
        raw_text = yaml_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        fail(f"YAML args file not found: {yaml_path}")
    except OSError as exc:
        fail(f"Failed to read YAML args file {yaml_path}: {exc}")

    try:
        return yaml.safe_load(raw_text)
    except yaml.YAMLError as exc:
        fail(f"Invalid YAML in {yaml_path}: {exc}")


def load_args_from_yaml(yaml_path: Path) -> list[str]:
    """
    Convert YAML object into flat CLI args.

    Supported schema:
    {input, output, on_decode_error, apply_source_root, exclude_source, indent}
    """
    payload = load_yaml(yaml_path)

    if payload is None:
        return []
    if not isinstance(payload, dict):
        fail("YAML args must be an object with keys: " + ", ".join(YAML_KEYS))

    unknown_keys = sorted(str(key) for key in payload if key not in YAML_KEYS)
    if unknown_keys:
        fail("Unsupported key(s) in YAML args: " + ", ".join(unknown_keys))

    args: list[str] = []

    input_path = parse_string_field(payload, "input")
    if input_path is not None:
        args.append(input_path)

    output_path = parse_string_field(payload, "output")
    if output_path is not None:
        args.extend(["--output", output_path])

    policy = parse_string_field(payload, "on_decode_error")
    if policy is not None:
        args.extend(["--on-decode-error", policy])

    apply_source_root = payload.get("apply_source_root")
    if apply_source_root is not None:
        if not isinstance(apply_source_root, bool):
            fail("YAML field 'apply_source_root' must be a boolean")
        if apply_source_root:
            args.append("--apply-source-root")

    for pattern in parse_string_list_field(payload, "exclude_source"):
        args.extend(["--exclude-source", pattern])

    indent = payload.get("indent")
    if indent is not None:
        if isinstance(indent, bool) or not isinstance(indent, int):
            fail("YAML field 'indent' must be an integer")
        args.extend(["--indent", str(indent)])

    return args


def preprocess_argv_with_yaml(argv: list[str]) -> list[str]:
    """Expand --args-yaml before normal argparse parsing."""
    if "-h" in argv or "--help" in argv:
        return argv

    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument("--args-yaml", action="append", metavar="FILE")
    parsed, filtered = parser.parse_known_args(argv)

    yaml_paths = parsed.args_yaml or []
    if len(yaml_paths) > 1:
        fail("--args-yaml can only be provided once")
    if not yaml_paths:
        return filtered

    yaml_args = load_args_from_yaml(Path(yaml_paths[0]))

    # YAML args are applied first so direct CLI flags can override them.
    # A positional input on the command line replaces the YAML one.
    if parse_positional_count(filtered) and yaml_args and not yaml_args[0].startswith("-"):
        yaml_args = yaml_args[1:]
    return yaml_args + filtered


def parse_positional_count(argv: list[str]) -> int:
    parser = build_parser()
    parsed, _ = parser.parse_known_args(argv)
    return 0 if parsed.input is None else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="istanbul-sourcemap",
        description=(
            "Remap Istanbul coverage recorded against generated files back to "
            "original sources using each file's inputSourceMap."
        ),
    )
    parser.add_argument(
        "--args-yaml",
        default=None,
        metavar="FILE",
        help="Load arguments from YAML object file with keys {" + ",".join(YAML_KEYS) + "}.",
    )
    parser.add_argument(
        "input",
        nargs="?",
        default=None,
        help=f"Input coverage JSON (default: {DEFAULT_INPUT}).",
    )
    parser.add_argument(
        "-o",
        "--output",
        default=None,
        metavar="FILE",
        help="Output coverage JSON (default: <input stem>.remapped.json next to the input).",
    )
    parser.add_argument(
        "--on-decode-error",
        choices=DECODE_ERROR_POLICIES,
        default="fail",
        help=(
            "What to do when a file's source map cannot be decoded: "
            "'fail' aborts the run, 'skip' keeps that file unmapped."
        ),
    )
    parser.add_argument(
        "--apply-source-root",
        action="store_true",
        help="Prefix resolved sources with the source map's sourceRoot.",
    )
    parser.add_argument(
        "--exclude-source",
        action="append",
        default=[],
        metavar="PATTERN",
        help="Drop remapped output files matching PATTERN (repeatable, supports '*').",
    )
    parser.add_argument(
        "--indent",
        type=int,
        default=2,
        help="JSON indent for the output file (default: 2).",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    raw_argv = sys.argv[1:] if argv is None else argv
    effective_argv = preprocess_argv_with_yaml(raw_argv)
    return build_parser().parse_args(effective_argv)


def default_output_path(input_path: Path) -> Path:
    return input_path.with_name(f"{input_path.stem}.remapped.json")


def resolve_paths(args: argparse.Namespace) -> tuple[Path, Path]:
    input_path = Path(args.input or DEFAULT_INPUT).expanduser()
    if not input_path.is_file():
        fail(f"Input file not found: {input_path}")

    output_path = Path(args.output).expanduser() if args.output else default_output_path(input_path)
    if output_path.resolve() == input_path.resolve():
        fail(f"Output file must differ from input file: {output_path}")
    return input_path, output_path


def build_transform_options(args: argparse.Namespace) -> TransformOptions:
    patterns = [pattern.strip() for pattern in args.exclude_source]
    if any(not pattern for pattern in patterns):
        fail("Invalid --exclude-source, pattern cannot be empty")
    return TransformOptions(
        on_decode_error=args.on_decode_error,
        apply_source_root=args.apply_source_root,
        # Keep input order while removing duplicates.
        exclude_sources=tuple(dict.fromkeys(patterns)),
    )
