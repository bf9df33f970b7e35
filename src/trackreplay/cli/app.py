"""Command line application entry point for trackreplay."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Callable, Optional, Sequence

from ..configuration import load_config
from ..logging.config import setup_logging
from .errors import CliError, log_cli_error
from .parser import build_parser


CommandHandler = Callable[..., str]


def run_cli(args: Optional[Sequence[str]] = None) -> str:
    """Execute the trackreplay command line interface."""

    config_parser = argparse.ArgumentParser(add_help=False)
    config_parser.add_argument("--config", dest="config_path", type=Path, default=None)
    config_parser.add_argument("--log-level", dest="log_level", default=None)
    config_parser.add_argument("--log-output", dest="log_output", default=None)
    config_parser.add_argument("--log-format", dest="log_format", choices=("json", "text"), default=None)
    preliminary, remaining = config_parser.parse_known_args(args)

    config = load_config(preliminary.config_path)
    logging_config = dict(config.get("logging", {}) or {})
    if preliminary.log_level is not None:
        logging_config["level"] = preliminary.log_level
    if preliminary.log_output is not None:
        logging_config["output"] = preliminary.log_output
    if preliminary.log_format is not None:
        logging_config["format"] = preliminary.log_format
    logging_config.setdefault("level", "info")
    logging_config.setdefault("output", "stderr")
    logging_config.setdefault("format", "json")
    config["logging"] = logging_config
    try:
        setup_logging(config)
    except (OSError, ValueError) as exc:
        sys.stderr.write(f"trackreplay: invalid logging configuration: {exc}\n")
        raise SystemExit(2) from exc

    parser = build_parser(config)
    namespace = parser.parse_args(list(remaining), namespace=preliminary)

    handler: CommandHandler | None = getattr(namespace, "handler", None)
    if handler is None:
        raise CliError(
            f"Unknown command '{getattr(namespace, 'command', None)}'.",
            category="usage",
            context={"command": getattr(namespace, "command", None)},
        )

    try:
        result = handler(namespace, config=config)
    except CliError as exc:
        if not exc.logged:
            log_cli_error(exc.payload, exc_info=exc)
            exc.logged = True
        message = exc.payload.message
        if message:
            sys.stdout.write(message)
            if not message.endswith("\n"):
                sys.stdout.write("\n")
        raise SystemExit(exc.status_code) from exc
    if result:
        sys.stdout.write(result)
        if not result.endswith("\n"):
            sys.stdout.write("\n")
    return result


def main() -> None:  # pragma: no cover - thin wrapper
    run_cli()


if __name__ == "__main__":  # pragma: no cover - CLI invocation guard
    main()
