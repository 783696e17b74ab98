"""Command line entry point that serves the backend with uvicorn."""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path

import uvicorn

from penguindaycare.backend.api import create_app
from penguindaycare.backend.config import BackendSettings, load_settings
from penguindaycare.backend.errors import RosterLoadError
from penguindaycare.backend.logging import configure_logging, get_logger

logger = get_logger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Penguin Daycare backend")
    parser.add_argument("--host", default=None)
    parser.add_argument("--port", type=int, default=None)
    parser.add_argument("--roster", type=Path, default=None, help="Path to penguins.json")
    return parser.parse_args(argv)


def resolve_settings(args: argparse.Namespace, settings: BackendSettings) -> BackendSettings:
    overrides = {"roster_path": args.roster, "host": args.host, "port": args.port}
    return replace(settings, **{key: value for key, value in overrides.items() if value is not None})


def main(argv: list[str] | None = None) -> int:
    settings = resolve_settings(parse_args(argv), load_settings())
    configure_logging(level=settings.log_level, json_logs=settings.json_logs)

    try:
        app = create_app(settings=settings)
    except RosterLoadError as exc:
        logger.error("roster_load_failed", path=str(settings.roster_path), error=str(exc))
        return 1

    logger.info("server_starting", host=settings.host, port=settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
