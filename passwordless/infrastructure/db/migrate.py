from __future__ import annotations

import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path

import psycopg

from passwordless.logging import setup_logging
from passwordless.settings import get_settings

logger = logging.getLogger("passwordless.migrate")

MIGRATIONS_DIR = Path(os.environ.get("MIGRATIONS_DIR", "migrations"))
SCHEMA_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS schema_migrations (
  version    text PRIMARY KEY,
  applied_at timestamptz NOT NULL DEFAULT now()
);
"""

USAGE = "usage: python -m passwordless.infrastructure.db.migrate [up|status|new <name>]"


class MigrationError(Exception):
    pass


def list_migrations(directory: Path | None = None) -> list[Path]:
    directory = directory or MIGRATIONS_DIR
    if not directory.exists():
        raise MigrationError(f"migrations dir not found: {directory}")
    return sorted(directory.glob("*.sql"))


def applied_versions(conn: psycopg.Connection) -> dict[str, datetime]:
    with conn.cursor() as cur:
        cur.execute(SCHEMA_TABLE_SQL)
        cur.execute(
            "SELECT version, applied_at FROM schema_migrations ORDER BY version;"
        )
        rows = cur.fetchall()
    conn.commit()
    return {version: applied_at for version, applied_at in rows}


def pending_migrations(paths: list[Path], applied: dict[str, datetime]) -> list[Path]:
    return [p for p in paths if p.stem not in applied]


def apply_one(conn: psycopg.Connection, path: Path) -> None:
    version = path.stem
    logger.info("applying migration", extra={"version": version})
    with conn.cursor() as cur:
        cur.execute(path.read_text(encoding="utf-8"))
        cur.execute(
            "INSERT INTO schema_migrations (version, applied_at) VALUES (%s, now());",
            (version,),
        )
    conn.commit()
    logger.info("applied migration", extra={"version": version})


def cmd_up(dsn: str) -> int:
    with psycopg.connect(dsn, autocommit=False) as conn:
        to_run = pending_migrations(list_migrations(), applied_versions(conn))
        if not to_run:
            logger.info("no pending migrations")
            return 0
        for path in to_run:
            try:
                apply_one(conn, path)
            except psycopg.Error:
                conn.rollback()
                logger.exception("migration failed", extra={"version": path.stem})
                return 1
    return 0


def cmd_status(dsn: str) -> int:
    with psycopg.connect(dsn) as conn:
        applied = applied_versions(conn)
    for version, at in applied.items():
        print(f"applied  {version} @ {at.isoformat()}")
    for path in pending_migrations(list_migrations(), applied):
        print(f"pending  {path.stem}")
    return 0


def cmd_new(name: str) -> int:
    ts = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M")
    path = MIGRATIONS_DIR / f"{ts}_{name}.sql"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("-- write your SQL here\n", encoding="utf-8")
    print(str(path))
    return 0


def main(argv: list[str]) -> int:
    settings = get_settings()
    if len(argv) < 2:
        print(USAGE, file=sys.stderr)
        return 2
    cmd = argv[1]
    try:
        if cmd == "up":
            return cmd_up(settings.database_url)
        if cmd == "status":
            return cmd_status(settings.database_url)
        if cmd == "new":
            if len(argv) < 3:
                print(USAGE, file=sys.stderr)
                return 2
            return cmd_new(argv[2])
    except MigrationError as e:
        logger.error(str(e))
        return 2
    print(f"unknown command: {cmd}", file=sys.stderr)
    return 2


if __name__ == "__main__":
    setup_logging(get_settings().log_level)
    raise SystemExit(main(sys.argv))
