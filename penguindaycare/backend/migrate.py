"""Create the penguin_stats table in the configured PostgreSQL database."""

from __future__ import annotations

import argparse
from pathlib import Path

from penguindaycare.backend.config import load_settings
from penguindaycare.backend.logging import configure_logging, get_logger

SCHEMA_PATH = Path(__file__).with_name("db_schema.sql")

logger = get_logger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Apply the penguin counter schema")
    parser.add_argument("--database-url", default=None, help="Overrides PENGUINDAYCARE_DATABASE_URL")
    return parser.parse_args(argv)


def apply_schema(database_url: str, schema_path: Path = SCHEMA_PATH) -> None:
    import psycopg

    schema_sql = schema_path.read_text(encoding="utf-8")
    with psycopg.connect(database_url) as conn:
        with conn.cursor() as cur:
            cur.execute(schema_sql)
        conn.commit()
    logger.info("schema_applied", schema=schema_path.name)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    settings = load_settings()
    configure_logging(level=settings.log_level, json_logs=settings.json_logs)
    database_url = args.database_url or settings.database_url
    if not database_url:
        raise RuntimeError("PENGUINDAYCARE_DATABASE_URL is required for migration")
    apply_schema(database_url)


if __name__ == "__main__":
    main()
