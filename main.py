"""Command-line interface for the Bandboard web application."""

from __future__ import annotations
import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from bandboard.config import Settings, load_settings
from bandboard.database import Database

logger = logging.getLogger("bandboard.main")


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Bandboard music catalogue utilities")
    parser.add_argument(
        "--config",
        default=None,
        help="Path to a YAML configuration file (defaults to BANDBOARD_CONFIG or config/bandboard.yaml)",
    )
    subparsers = parser.add_subparsers(dest="command")

    parser.set_defaults(command="serve")

    subparsers.add_parser("init-db", help="Initialise the Bandboard database")

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP server")
    serve_parser.add_argument("--host", default="0.0.0.0", help="Bind address for the web server")
    serve_parser.add_argument(
        "--port",
        type=int,
        default=3000,
        help="Port for the web server (default: 3000)",
    )

    load_parser = subparsers.add_parser("load-catalog", help="Import bands and artists from a YAML file")
    load_parser.add_argument("path", help="YAML file describing bands, artists and channels")

    args_list = list(argv) if argv is not None else sys.argv[1:]
    known_commands = {"serve", "init-db", "load-catalog"}

    # Global options may precede the subcommand.
    leading: list[str] = []
    rest = list(args_list)
    while rest[:1] == ["--config"] and len(rest) >= 2:
        leading.extend(rest[:2])
        rest = rest[2:]

    if not rest:
        rest = ["serve"]
    else:
        first = rest[0]
        if first in ("-h", "--help"):
            return parser.parse_args([*leading, *rest])
        if first not in known_commands:
            if any(flag in rest for flag in ("-h", "--help")):
                return parser.parse_args([*leading, *rest])
            rest = ["serve", *rest]

    return parser.parse_args([*leading, *rest])


def _initialise_database(settings: Settings) -> Database:
    database = Database(settings.database_path)
    database.initialize()
    logger.info("Database initialised at %s", settings.database_path)
    return database


def _serve(*, settings: Settings, database: Database, host: str, port: int) -> None:
    from bandboard.application import create_app
    import uvicorn

    logger.info("Starting Bandboard on http://%s:%s", host, port)

    app = create_app(settings, database=database, initialize_database=False)
    uvicorn.run(app, host=host, port=port, log_level="info")


def _load_catalog(database: Database, path: str) -> None:
    from bandboard.seed import load_catalog

    bands = load_catalog(database, Path(path).expanduser())
    print(f"Imported {len(bands)} band(s) from {path}.")


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point for CLI usage."""

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")

    args = _parse_args(argv)
    settings = load_settings(Path(args.config).expanduser() if args.config else None)
    database = _initialise_database(settings)

    if args.command == "serve":
        _serve(settings=settings, database=database, host=args.host, port=args.port)
    elif args.command == "load-catalog":
        try:
            _load_catalog(database, args.path)
        except (OSError, ValueError) as exc:
            raise SystemExit(f"Error: {exc}") from exc
    elif args.command == "init-db":
        print("Database initialisation complete.")


if __name__ == "__main__":
    main()
