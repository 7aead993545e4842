from __future__ import annotations

import argparse
import logging
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .codec import decode_params, encode_params
from .logging_utils import configure_logging, report_failure
from .main import Sound, generate, synthesize
from .rng import resolve_seed
from .templates import TEMPLATE_NAMES, apply_template, parse_template

_LOGGER = logging.getLogger("retrofx.cli")
_CONSOLE = Console()
_ERR_CONSOLE = Console(stderr=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="retrofx",
        description="Render retro game sound effects from templates or ?fx= strings.",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Show debug logging on stderr."
    )
    sub = parser.add_subparsers(dest="command", required=True)

    template = sub.add_parser("template", help="Render a randomized template to a wav file.")
    template.add_argument("name", type=str, help="Template name or ordinal.")
    template.add_argument("--seed", type=int, default=0, help="Seed; 0 picks one from the clock.")
    template.add_argument("--output", type=str, default=None)
    template.add_argument("--print-url", action="store_true", help="Also print the ?fx= string.")

    url = sub.add_parser("url", help="Render the sound encoded in a ?fx= URL.")
    url.add_argument("url", type=str)
    url.add_argument("--output", type=str, default="sound.wav")

    encode = sub.add_parser("encode", help="Print the ?fx= string for a template and seed.")
    encode.add_argument("name", type=str)
    encode.add_argument("--seed", type=int, default=0)

    sub.add_parser("templates", help="List template names.")
    return parser


def _describe(sound: Sound, path: Path) -> str:
    return f"Wrote {path} ({len(sound)} samples, {sound.duration:.3f}s @ {sound.sample_rate} Hz)"


def _templates_table() -> Table:
    table = Table(title="Templates")
    table.add_column("#", justify="right")
    table.add_column("name")
    for index, name in enumerate(TEMPLATE_NAMES):
        table.add_row(str(index), name)
    return table


def _template_arg(value: str) -> str | int:
    return int(value) if value.isdigit() else value


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        configure_logging(force=True, verbose=True)
    else:
        configure_logging()
    try:
        if args.command == "template":
            name = parse_template(_template_arg(args.name))
            seed = resolve_seed(args.seed)
            sound = generate(name, seed)
            output = Path(args.output or f"{name}_{seed}.wav")
            path = sound.save(output)
            _CONSOLE.print(_describe(sound, path), markup=False, soft_wrap=True)
            _CONSOLE.print(f"template={name} seed={seed}")
            if args.print_url:
                _CONSOLE.print(sound.to_url(), markup=False, soft_wrap=True)
            return 0

        if args.command == "url":
            sound = synthesize(decode_params(args.url))
            path = sound.save(args.output)
            _CONSOLE.print(_describe(sound, path), markup=False, soft_wrap=True)
            return 0

        if args.command == "encode":
            name = parse_template(_template_arg(args.name))
            seed = resolve_seed(args.seed)
            _CONSOLE.print(encode_params(apply_template(name, seed)), markup=False, soft_wrap=True)
            return 0

        if args.command == "templates":
            _CONSOLE.print(_templates_table())
            return 0

        parser.print_help()
        return 1
    except Exception as exc:
        report_failure(_LOGGER, "retrofx CLI", exc)
        _ERR_CONSOLE.print(
            f"[bold red]retrofx failed:[/bold red] {escape(str(exc))}", highlight=False
        )
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
