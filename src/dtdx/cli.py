"""Command-line interface for the DTDX tokenizer."""

from __future__ import annotations

import argparse
import io
import json
import logging
import sys
import time
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from dtdx.errors import LexError

FORMATS = ("text", "json")


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed CLI options."""

    input_file: Path
    output_file: Path | None
    format: str
    positions: bool
    buffer_size: int
    watch: bool
    debug: bool


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    p = argparse.ArgumentParser(
        prog="dtdx",
        description="Tokenize a DTDX document model and print the token stream",
    )
    p.add_argument("input", help="Input .dtdx file")
    p.add_argument("-o", "--output", help="Output file (default: stdout)")
    p.add_argument(
        "-f",
        "--format",
        choices=FORMATS,
        default=None,
        help="Output format (default: text)",
    )
    p.add_argument(
        "--positions",
        action="store_true",
        default=None,
        help="Prefix each token with its line:column (text format)",
    )
    p.add_argument(
        "--config",
        metavar="FILE",
        help="Config file (default: auto-discover dtdx.toml)",
    )
    p.add_argument(
        "--buffer-size",
        type=int,
        default=None,
        metavar="N",
        help="Tokens the scanner may run ahead of the consumer (default: 2)",
    )
    p.add_argument("--watch", action="store_true", help="Watch for changes and re-tokenize")
    p.add_argument("--debug", action="store_true", help="Log lexer activity to stderr")
    return p


def load_config(config_path: Path | None, input_dir: Path) -> dict[str, Any]:
    """Load a TOML config file, returning an empty dict on missing/absent file."""
    path = config_path if config_path is not None else input_dir / "dtdx.toml"

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
    try:
        config = load_config(config_path, input_dir)
    except tomllib.TOMLDecodeError as exc:
        raise argparse.ArgumentTypeError(f"invalid config file: {exc}") from exc

    # Lexer settings: config < CLI
    buffer_size = 2
    cfg_lexer = config.get("lexer")
    if isinstance(cfg_lexer, dict):
        cfg_buffer = cfg_lexer.get("buffer_size")
        if isinstance(cfg_buffer, int):
            buffer_size = cfg_buffer
    if args.buffer_size is not None:
        buffer_size = args.buffer_size
    if buffer_size < 1:
        raise argparse.ArgumentTypeError(f"buffer size must be at least 1: {buffer_size}")

    # Output settings: config < CLI
    fmt = "text"
    positions = False
    cfg_output = config.get("output")
    if isinstance(cfg_output, dict):
        cfg_format = cfg_output.get("format")
        if isinstance(cfg_format, str):
            fmt = cfg_format
        cfg_positions = cfg_output.get("positions")
        if isinstance(cfg_positions, bool):
            positions = cfg_positions
    if args.format is not None:
        fmt = args.format
    if args.positions is not None:
        positions = args.positions
    if fmt not in FORMATS:
        raise argparse.ArgumentTypeError(f"unknown output format: {fmt}")

    output_file = Path(args.output) if args.output else None

    return CliOptions(
        input_file=input_file,
        output_file=output_file,
        format=fmt,
        positions=positions,
        buffer_size=buffer_size,
        watch=args.watch,
        debug=args.debug,
    )


def tokenize_file(options: CliOptions) -> str:
    """Read and tokenize a DTDX file, returning the rendered token stream."""
    from dtdx import tokenize
    from dtdx.debug import dump_tokens, token_records
    from dtdx.scanner import TOKEN_NAMES

    source = options.input_file.read_text(encoding="utf-8")
    tokens = tokenize(source, str(options.input_file), buffer_size=options.buffer_size)

    if options.format == "json":
        return json.dumps(token_records(tokens, TOKEN_NAMES), indent=2) + "\n"

    out = io.StringIO()
    dump_tokens(tokens, TOKEN_NAMES, positions=options.positions, file=out)
    return out.getvalue()


def _write(options: CliOptions, text: str) -> None:
    if options.output_file:
        options.output_file.write_text(text, encoding="utf-8")
    else:
        sys.stdout.write(text)
        sys.stdout.flush()


def watch_loop(options: CliOptions) -> None:
    """Poll input file for changes, re-tokenize on each modification."""
    last_mtime = 0.0
    print(f"Watching {options.input_file} for changes...", file=sys.stderr)
    try:
        while True:
            try:
                mtime = options.input_file.stat().st_mtime
            except OSError:
                time.sleep(0.5)
                continue
            if mtime != last_mtime:
                last_mtime = mtime
                try:
                    _write(options, tokenize_file(options))
                    print(f"Tokenized {options.input_file}", file=sys.stderr)
                except LexError as exc:
                    print(str(exc), file=sys.stderr)
            time.sleep(0.5)
    except KeyboardInterrupt:
        pass


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/1/2). Does not call sys.exit()."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        options = resolve_options(args)
    except argparse.ArgumentTypeError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    if options.debug:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    if options.watch:
        watch_loop(options)
        return 0

    try:
        text = tokenize_file(options)
    except OSError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except LexError as exc:
        print(str(exc), file=sys.stderr)
        return 1

    _write(options, text)
    return 0
