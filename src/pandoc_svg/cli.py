"""Command-line entry point: the pandoc JSON filter process."""
from __future__ import annotations

import argparse
import json
import sys
import traceback
from dataclasses import dataclass, replace
from typing import Iterable, Optional

import pandocfilters

from .config import FilterConfig
from .context import PipelineContext
from .filter import make_action


@dataclass
class CliError(Exception):
    code: str
    message: str
    hint: Optional[str] = None
    exit_code: int = 1


class UsageError(Exception):
    pass


class FriendlyArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # pragma: no cover - argparse callback
        raise UsageError(message)


def _build_parser() -> argparse.ArgumentParser:
    parser = FriendlyArgumentParser(
        prog="pandoc-svg",
        description=(
            "Pandoc filter that inlines, resizes and optimizes SVG images for HTML "
            "output and converts their text to MathJax-ready HTML."
        ),
    )
    parser.add_argument(
        "format",
        nargs="?",
        default="html",
        help="Output format (passed by pandoc)",
    )
    parser.add_argument("--pretty", action="store_true", help="Pretty-print inlined SVGs")
    parser.add_argument("--debug", action="store_true")
    return parser


def _emit_error(err: CliError) -> None:
    sys.stderr.write(f"pandoc-svg: error[{err.code}]: {err.message}\n")
    if err.hint:
        sys.stderr.write(f"hint: {err.hint}\n")


def _read_document(source: str) -> dict:
    if not source.strip():
        raise CliError(
            "E_ARGS",
            "stdin was empty",
            hint="Run through pandoc: pandoc input.md --filter pandoc-svg -t html",
            exit_code=2,
        )
    try:
        doc = json.loads(source)
    except json.JSONDecodeError as exc:
        raise CliError(
            "E_PARSE_JSON",
            f"failed to parse pandoc JSON: {exc}",
            hint="Run through pandoc: pandoc input.md --filter pandoc-svg -t html",
            exit_code=2,
        )
    if not isinstance(doc, dict) or "blocks" not in doc:
        raise CliError(
            "E_PARSE_JSON",
            "input is not a pandoc JSON document",
            hint="pandoc 1.18 or later is required.",
            exit_code=2,
        )
    return doc


def run_filter(doc: dict, fmt: str, context: PipelineContext) -> dict:
    context.pandoc_api_version = doc.get("pandoc-api-version")
    return pandocfilters.walk(doc, make_action(context), fmt, doc.get("meta", {}))


def main(argv: Optional[Iterable[str]] = None) -> int:
    raw_argv = list(argv) if argv is not None else sys.argv[1:]
    debug_enabled = "--debug" in raw_argv or FilterConfig.from_env().debug
    try:
        args = _build_parser().parse_args(raw_argv)
        config = FilterConfig.from_env()
        config = replace(
            config,
            pretty=config.pretty or args.pretty,
            debug=config.debug or args.debug,
        )
        context = PipelineContext.create(config)
        doc = _read_document(sys.stdin.read())
        result = run_filter(doc, args.format, context)
        sys.stdout.write(json.dumps(result))
        return 0
    except UsageError as exc:
        err = CliError("E_ARGS", str(exc), hint="Usage: pandoc-svg [FORMAT]", exit_code=2)
        _emit_error(err)
        return err.exit_code
    except CliError as err:
        _emit_error(err)
        return err.exit_code
    except Exception as exc:  # pragma: no cover - last-resort reporting
        err = CliError(
            "E_INTERNAL",
            str(exc) or exc.__class__.__name__,
            hint="Re-run with --debug to see traceback.",
        )
        _emit_error(err)
        if debug_enabled:
            traceback.print_exc(file=sys.stderr)
        return err.exit_code


if __name__ == "__main__":
    raise SystemExit(main())
