"""Command-line interface for typedhtml."""

from __future__ import annotations

import argparse
import logging
import sys
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from typedhtml.errors import (
    AttributeValueError,
    CompileError,
    ConstructionError,
    LexError,
    MissingOutputTypeError,
    ParseError,
    SchemaError,
)

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "typedhtml.toml"
OUTPUT_TYPES = ("String", "Dom")


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed CLI options."""

    input_file: Path
    output_file: Path | None
    schema_files: list[Path]
    output: str | None
    scope: dict[str, str]
    emit: bool
    check: bool
    debug: bool
    verbose: int


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    p = argparse.ArgumentParser(
        prog="typedhtml",
        description="Typed HTML markup compiler",
    )
    p.add_argument("input", help="Input markup file")
    p.add_argument("-o", "--output-file", help="Output file (default: stdout)")
    p.add_argument(
        "--schema",
        action="append",
        default=[],
        metavar="FILE",
        help="Extra element declaration file (repeatable)",
    )
    p.add_argument(
        "--output",
        choices=OUTPUT_TYPES,
        default=None,
        help="Output type for event handlers (default: from the markup annotation)",
    )
    p.add_argument(
        "-D",
        "--define",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Set a string variable in the expression scope (repeatable)",
    )
    p.add_argument(
        "--config",
        metavar="FILE",
        help=f"Config file (default: auto-discover {CONFIG_FILENAME})",
    )
    mode = p.add_mutually_exclusive_group()
    mode.add_argument("--emit", action="store_true", help="Print generated Python instead of HTML")
    mode.add_argument("--check", action="store_true", help="Validate only, print nothing")
    p.add_argument("--debug", action="store_true", help="Dump AST to stderr")
    p.add_argument("-v", "--verbose", action="count", default=0, help="More logging (repeatable)")
    return p


def configure_logging(level: int) -> None:
    """Send log records to stderr at `level`. Only the CLI configures handlers."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    root = logging.getLogger("typedhtml")
    root.handlers[:] = [handler]
    root.setLevel(level)


def _log_level(verbose: int) -> int:
    if verbose >= 2:
        return logging.DEBUG
    if verbose == 1:
        return logging.INFO
    return logging.WARNING


def parse_define_arg(s: str) -> tuple[str, str]:
    """Parse a NAME=VALUE string into (name, value)."""
    if "=" not in s:
        raise argparse.ArgumentTypeError(f"invalid define format (expected NAME=VALUE): {s}")
    name, _, value = s.partition("=")
    if not name.isidentifier():
        raise argparse.ArgumentTypeError(f"invalid variable name in define: {name!r}")
    return name, value


def load_config(config_path: Path | None, input_dir: Path) -> dict[str, Any]:
    """Load a TOML config file, returning an empty dict on missing/absent file."""
    path = config_path if config_path is not None else input_dir / CONFIG_FILENAME

    if not path.is_file():
        return {}

    with open(path, "rb") as f:
        return tomllib.load(f)


def resolve_options(args: argparse.Namespace) -> CliOptions:
    """Merge config file and CLI args into CliOptions.

    Precedence: config file < CLI flags.
    """
    input_file = Path(args.input)
    input_dir = input_file.parent
    if not input_dir.parts:
        input_dir = Path(".")

    config_path = Path(args.config) if args.config else None
    config = load_config(config_path, input_dir)
    if config:
        logger.info("loaded config from %s", config_path or input_dir / CONFIG_FILENAME)

    # Schema files: config < CLI; config paths are relative to the input
    schema_files: list[Path] = []
    cfg_schema = config.get("schema")
    if isinstance(cfg_schema, dict):
        cfg_files = cfg_schema.get("files")
        if isinstance(cfg_files, list):
            schema_files.extend(input_dir / str(f) for f in cfg_files)
    schema_files.extend(Path(f) for f in args.schema)

    # Output type: config < CLI
    output = None
    cfg_render = config.get("render")
    if isinstance(cfg_render, dict):
        cfg_output = cfg_render.get("output")
        if cfg_output is not None:
            if cfg_output not in OUTPUT_TYPES:
                raise argparse.ArgumentTypeError(
                    f"invalid output type in config: {cfg_output!r} (expected String or Dom)"
                )
            output = cfg_output
    if args.output is not None:
        output = args.output

    # Scope variables: config < CLI
    scope: dict[str, str] = {}
    cfg_scope = config.get("scope")
    if isinstance(cfg_scope, dict):
        for k, v in cfg_scope.items():
            scope[str(k)] = str(v)
    for raw in args.define:
        name, value = parse_define_arg(raw)
        scope[name] = value

    output_file = Path(args.output_file) if args.output_file else None

    return CliOptions(
        input_file=input_file,
        output_file=output_file,
        schema_files=schema_files,
        output=output,
        scope=scope,
        emit=args.emit,
        check=args.check,
        debug=args.debug,
        verbose=args.verbose,
    )


def compile_file(options: CliOptions) -> str:
    """Read and compile a markup file; returns HTML, Python source, or "" for --check."""
    from typedhtml import load_registry
    from typedhtml.debug import dump_ast
    from typedhtml.emit import emit_python
    from typedhtml.generator import generate, resolve_output
    from typedhtml.parser import parse
    from typedhtml.validator import validate

    registry = load_registry(*options.schema_files)
    source = options.input_file.read_text(encoding="utf-8")
    markup = parse(source, str(options.input_file))

    if options.debug:
        dump_ast(markup)

    checked = validate(markup, registry, source)
    plan = generate(checked, resolve_output(markup, options.output, source), source)
    logger.info("compiled %s", options.input_file)

    if options.check:
        return ""
    if options.emit:
        return emit_python(plan, options.input_file.name)
    return plan.build(options.scope).render() + "\n"


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/1/2). Does not call sys.exit()."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(_log_level(args.verbose))

    try:
        options = resolve_options(args)
    except (argparse.ArgumentTypeError, tomllib.TOMLDecodeError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    try:
        result = compile_file(options)
    except (LexError, ParseError) as exc:
        print(exc.format(_error_filename(exc, options)), file=sys.stderr)
        return 1
    except (SchemaError, AttributeValueError, MissingOutputTypeError, ConstructionError) as exc:
        print(exc.format(_error_filename(exc, options)), file=sys.stderr)
        return 2
    except OSError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    if options.output_file:
        options.output_file.write_text(result, encoding="utf-8")
    else:
        sys.stdout.write(result)

    return 0


def _error_filename(exc: CompileError, options: CliOptions) -> str:
    # Schema errors may point into a declaration file rather than the input
    for path in options.schema_files:
        if exc.source and path.is_file() and path.read_text(encoding="utf-8") == exc.source:
            return str(path)
    return str(options.input_file)


def run() -> None:
    sys.exit(main())
