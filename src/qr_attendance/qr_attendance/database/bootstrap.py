"""Apply ``database/schema.sql`` and ``seed.sql`` and create the first admin account.

Both SQL files are idempotent, so these helpers run on every dev startup
(``AUTO_INIT_DB`` / ``AUTO_SEED_DB``) and from ``scripts/``.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterator

from werkzeug.security import generate_password_hash

from ..core.enums import Role
from .connection import DatabaseConnection, DBConfig
from .mysql_base import db_cursor, fetchone

logger = logging.getLogger(__name__)

# The files name a database; the configured one is used instead.
_DB_SELECTION = re.compile(r"(?im)^\s*(CREATE\s+DATABASE|USE)\b[^;]*;\s*$")
_LINE_COMMENT = re.compile(r"(?m)^\s*--.*$")
# A quoted literal (with backslash escapes), or any run of other characters except ';'.
_SQL_CHUNK = re.compile(r"'(?:\\.|[^'\\])*'|\"(?:\\.|[^\"\\])*\"|[^;'\"]+|;|['\"]", re.S)


def split_statements(sql: str) -> Iterator[str]:
    """Yield the statements of a SQL script; ';' inside quoted literals does not split."""
    sql = _LINE_COMMENT.sub("", _DB_SELECTION.sub("", sql))
    current: list[str] = []
    for chunk in _SQL_CHUNK.findall(sql):
        if chunk == ";":
            stmt = "".join(current).strip()
            current = []
            if stmt:
                yield stmt
        else:
            current.append(chunk)
    stmt = "".join(current).strip()
    if stmt:
        yield stmt


def _run_script(db_config: dict, path: str | Path) -> int:
    db = DatabaseConnection(DBConfig.from_dict(db_config))
    statements = list(split_statements(Path(path).read_text(encoding="utf-8")))
    with db_cursor(db, dictionary=False) as (_, cur):
        for stmt in statements:
            cur.execute(stmt)
    return len(statements)


def ensure_database_exists(db_config: dict) -> None:
    cfg = DBConfig.from_dict(db_config)
    conn = DatabaseConnection(cfg).connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(f"CREATE DATABASE IF NOT EXISTS `{cfg.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci")
        cur.close()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    count = _run_script(db_config, schema_path)
    logger.info("Applied %s statements from %s", count, schema_path)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    count = _run_script(db_config, seed_path)
    logger.info("Applied %s seed statements from %s", count, seed_path)


def ensure_admin_user(db_config: dict, *, username: str, password: str, full_name: str = "System Administrator") -> bool:
    """Create the admin account if it is missing. Returns True when a row was inserted.

    An existing account is left untouched so a changed password survives restarts.
    """
    db = DatabaseConnection(DBConfig.from_dict(db_config))
    with db_cursor(db) as (_, cur):
        cur.execute("SELECT username FROM users WHERE username=%s", (username,))
        if fetchone(cur):
            return False
        cur.execute(
            "INSERT INTO users (username, full_name, password_hash, role) VALUES (%s, %s, %s, %s)",
            (username, full_name, generate_password_hash(password), Role.ADMIN.value),
        )
    logger.info("Seeded admin user %r", username)
    return True


def list_tables(db_config: dict) -> list[str]:
    db = DatabaseConnection(DBConfig.from_dict(db_config))
    with db_cursor(db, dictionary=False) as (_, cur):
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
