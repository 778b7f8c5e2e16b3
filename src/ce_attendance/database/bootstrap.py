from __future__ import annotations

import logging
import re
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable

import mysql.connector
from werkzeug.security import generate_password_hash

from .connection import DBConfig

logger = logging.getLogger(__name__)


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql usable regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _strip_comments(sql: str) -> str:
    return re.sub(r"(?m)^\s*--.*$", "", sql)


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for schema files (handles ';' inside quotes).
    buf: list[str] = []
    quote = None
    escape = False

    for ch in sql:
        if escape:
            buf.append(ch)
            escape = False
            continue

        if ch == "\\":
            buf.append(ch)
            escape = True
            continue

        if ch in ("'", '"'):
            if quote is None:
                quote = ch
            elif quote == ch:
                quote = None
            buf.append(ch)
            continue

        if ch == ";" and quote is None:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


@contextmanager
def _connect(db_config: dict, *, with_database: bool = True):
    target = DBConfig.from_mapping(db_config)
    kwargs = dict(host=target.host, port=target.port, user=target.user, password=target.password, use_pure=True)
    if with_database:
        kwargs["database"] = target.database
    conn = mysql.connector.connect(**kwargs)
    try:
        yield conn
    finally:
        conn.close()


def ensure_database_exists(db_config: dict) -> None:
    database = DBConfig.from_mapping(db_config).database
    with _connect(db_config, with_database=False) as conn:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    sql = _strip_comments(_strip_create_db_and_use(Path(schema_path).read_text(encoding="utf-8")))

    with _connect(db_config) as conn:
        cur = conn.cursor()
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()
    logger.info("Applied %s", schema_path)


def ensure_admin(db_config: dict, *, email: str, password: str) -> str:
    """Create (or reset the password of) an admin profile and grant it admin capability."""
    if not email or not password:
        raise ValueError("Seed admin email and password are required")
    email = email.strip().lower()

    with _connect(db_config) as conn:
        cur = conn.cursor(dictionary=True)
        cur.execute("SELECT user_id FROM profiles WHERE email=%s", (email,))
        row = cur.fetchone()
        password_hash = generate_password_hash(password)

        if row:
            user_id = row["user_id"]
            cur.execute("UPDATE profiles SET password_hash=%s WHERE user_id=%s", (password_hash, user_id))
        else:
            user_id = str(uuid.uuid4())
            cur.execute(
                """
                INSERT INTO profiles (user_id, email, first_name, last_name, trec_license, password_hash)
                VALUES (%s, %s, %s, %s, %s, %s)
                """,
                (user_id, email, "Admin", "Instructor", f"staff-{user_id[:8]}", password_hash),
            )

        cur.execute("INSERT IGNORE INTO admins (user_id) VALUES (%s)", (user_id,))
        conn.commit()
    return user_id


def grant_admin(db_config: dict, *, email: str) -> bool:
    with _connect(db_config) as conn:
        cur = conn.cursor()
        cur.execute(
            "INSERT IGNORE INTO admins (user_id) SELECT user_id FROM profiles WHERE email=%s",
            (email.strip().lower(),),
        )
        conn.commit()
        return cur.rowcount > 0


def list_tables(db_config: dict) -> list[str]:
    with _connect(db_config) as conn:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
