"""Entry point — wires flags/env/YAML → Config → ask() → stdout."""
import argparse
import asyncio
import logging
from typing import Optional, Sequence

from rich.console import Console
from rich.logging import RichHandler

from askimg.config import Config, load_options
from askimg.constants import (
    DEFAULT_LOG_LEVEL,
    EXIT_FAILURE,
    EXIT_INTERRUPTED,
    MSG_FAILED,
    MSG_INTERRUPTED,
    PROG_NAME,
)
from askimg.errors import AskImgError
from askimg.replicate import ask

logger = logging.getLogger(__name__)


def _setup_logging(level: str) -> None:
    # stdout is reserved for the answer
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.WARNING))
    list(map(root.removeHandler, root.handlers[:]))
    root.addHandler(RichHandler(console=Console(stderr=True), rich_tracebacks=True))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG_NAME,
        description="askimg asks a question about an image.",
        epilog="Every flag can also be set as ASKIMG_<FLAG> or as a key in the --config file.",
    )
    parser.add_argument("--config", help="YAML config file (optional)")
    parser.add_argument("--token", help="Replicate API token")
    parser.add_argument("--image", help="url of the image")
    parser.add_argument("--question", help="question to ask, if empty the image is captioned")
    parser.add_argument("--context", help="previous questions and answers to use as context")
    parser.add_argument(
        "--temperature", type=int, help="temperature to use with nucleus sampling (default 1)"
    )
    parser.add_argument(
        "--nucleus",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="use nucleus sampling (--no-nucleus overrides env or config file)",
    )
    parser.add_argument(
        "--timeout", help="timeout of the request, e.g. 30s or 1m30s; 0 disables (default 30s)"
    )
    parser.add_argument(
        "--log-level", dest="log_level", help=f"logging level (default {DEFAULT_LOG_LEVEL})"
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    _setup_logging(args.log_level or DEFAULT_LOG_LEVEL)

    try:
        options = load_options(vars(args))
        _setup_logging(options["log_level"])
        output = asyncio.run(ask(Config.from_options(options)))
    except AskImgError as exc:
        logger.error(MSG_FAILED, exc)
        return EXIT_FAILURE
    except KeyboardInterrupt:
        logger.error(MSG_INTERRUPTED)
        return EXIT_INTERRUPTED

    print(output)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
