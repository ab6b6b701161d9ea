from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable

import mysql.connector
from werkzeug.security import generate_password_hash

from ..common.logging_setup import get_logger
from .connection import DBConfig

logger = get_logger(__name__)

DEMO_PASSWORD = "password123"

DEMO_TEACHER = {
    "name": "John Doe",
    "email": "teacher@example.com",
    "department": "Computer Science",
    "employee_id": "EMP001",
}

DEMO_STUDENT = {
    "name": "John Student",
    "email": "student@example.com",
    "student_code": "STU001",
    "roll_number": "R001",
    "course": "Computer Science",
    "year": "3rd Year",
}


def _connect(db_config: dict, *, with_database: bool = True):
    target = DBConfig.from_mapping(db_config)
    kwargs = dict(
        host=target.host,
        port=target.port,
        user=target.user,
        password=target.password,
        use_pure=True,
    )
    if with_database:
        kwargs["database"] = target.database
    return mysql.connector.connect(**kwargs)


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql usable regardless of the configured database name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def iter_sql_statements(sql: str) -> Iterable[str]:
    """Split a script on ``;`` outside quotes. ``--`` comment lines are dropped."""
    sql = "\n".join(line for line in sql.splitlines() if not line.lstrip().startswith("--"))

    buf: list[str] = []
    quote = ""
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
            if not quote:
                quote = ch
            elif quote == ch:
                quote = ""
            buf.append(ch)
            continue

        if ch == ";" and not quote:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def ensure_database_exists(db_config: dict) -> None:
    database = DBConfig.from_mapping(db_config).database
    conn = _connect(db_config, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    sql = _strip_create_db_and_use(Path(schema_path).read_text(encoding="utf-8"))

    conn = _connect(db_config)
    try:
        cur = conn.cursor()
        for stmt in iter_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()
    logger.info("Schema applied from %s", schema_path)


def ensure_demo_users(db_config: dict) -> None:
    """Create the demo teacher and student (password ``password123``) unless they exist."""
    password_hash = generate_password_hash(DEMO_PASSWORD)

    conn = _connect(db_config)
    try:
        cur = conn.cursor(dictionary=True)

        cur.execute("SELECT teacher_id FROM teachers WHERE email=%s", (DEMO_TEACHER["email"],))
        if cur.fetchone():
            logger.info("Demo teacher already exists: %s", DEMO_TEACHER["email"])
        else:
            cur.execute(
                """
                INSERT INTO teachers (name, email, password_hash, department, employee_id)
                VALUES (%s, %s, %s, %s, %s)
                """,
                (
                    DEMO_TEACHER["name"],
                    DEMO_TEACHER["email"],
                    password_hash,
                    DEMO_TEACHER["department"],
                    DEMO_TEACHER["employee_id"],
                ),
            )
            logger.info("Demo teacher created: %s", DEMO_TEACHER["email"])

        cur.execute("SELECT student_id FROM students WHERE email=%s", (DEMO_STUDENT["email"],))
        if cur.fetchone():
            logger.info("Demo student already exists: %s", DEMO_STUDENT["email"])
        else:
            cur.execute(
                """
                INSERT INTO students (name, email, password_hash, student_code, roll_number, course, year)
                VALUES (%s, %s, %s, %s, %s, %s, %s)
                """,
                (
                    DEMO_STUDENT["name"],
                    DEMO_STUDENT["email"],
                    password_hash,
                    DEMO_STUDENT["student_code"],
                    DEMO_STUDENT["roll_number"],
                    DEMO_STUDENT["course"],
                    DEMO_STUDENT["year"],
                ),
            )
            logger.info("Demo student created: %s", DEMO_STUDENT["email"])

        conn.commit()
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    conn = _connect(db_config)
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
