import json
import logging
import os
import sqlite3
from datetime import datetime, timezone

from flask import current_app, g
from werkzeug.security import generate_password_hash

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

DEMO_PASSWORD = "password123"
DEMO_USERS = [
    ("demo_owner@commit.local", "Demo", "Owner"),
    ("demo_supporter@commit.local", "Demo", "Supporter"),
]


def utc_now():
    return datetime.now(timezone.utc).strftime(TIMESTAMP_FORMAT)


def connect(path):
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    conn = sqlite3.connect(path)
    conn.row_factory = sqlite3.Row
    return conn


def get_db():
    """Connection for the current request, opened on first use."""
    if "db" not in g:
        g.db = connect(current_app.config["DATABASE_PATH"])
    return g.db


def close_db(e=None):
    conn = g.pop("db", None)
    if conn is not None:
        conn.close()


def init_db(path, seed=True):
    conn = connect(path)
    c = conn.cursor()

    c.execute("""
    CREATE TABLE IF NOT EXISTS users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        email TEXT UNIQUE NOT NULL,
        first_name TEXT NOT NULL,
        last_name TEXT NOT NULL,
        password_hash TEXT NOT NULL,
        created_at TEXT NOT NULL
    )
    """)

    c.execute("""
    CREATE TABLE IF NOT EXISTS commitments (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        owner_user_id INTEGER NOT NULL,
        title TEXT NOT NULL,
        description TEXT NOT NULL,
        category TEXT NOT NULL DEFAULT 'personal',
        start_date TEXT NOT NULL DEFAULT '',
        end_date TEXT NOT NULL DEFAULT '',
        created_at TEXT NOT NULL
    )
    """)

    # params is a JSON object, e.g. {"count": 2} for post_frequency
    c.execute("""
    CREATE TABLE IF NOT EXISTS requirements (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        commitment_id INTEGER NOT NULL,
        type TEXT NOT NULL,
        params TEXT NOT NULL,
        created_at TEXT NOT NULL
    )
    """)

    c.execute("""
    CREATE TABLE IF NOT EXISTS posts (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        commitment_id INTEGER NOT NULL,
        author_user_id INTEGER NOT NULL,
        type TEXT NOT NULL,
        body_text TEXT NOT NULL,
        image_url TEXT NOT NULL,
        created_at TEXT NOT NULL
    )
    """)

    c.execute("""
    CREATE TABLE IF NOT EXISTS subscriptions (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id INTEGER NOT NULL,
        commitment_id INTEGER NOT NULL,
        created_at TEXT NOT NULL,
        UNIQUE(user_id, commitment_id)
    )
    """)

    c.execute("""
    CREATE TABLE IF NOT EXISTS notifications (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        recipient_user_id INTEGER NOT NULL,
        commitment_id INTEGER NOT NULL,
        post_id INTEGER NOT NULL,
        created_at TEXT NOT NULL,
        read_at TEXT
    )
    """)

    migrate(conn)
    conn.commit()

    if seed:
        seed_demo_data(conn)

    conn.close()
    logger.info("Database ready at %s", path)


def _columns(conn, table):
    return {row["name"] for row in conn.execute(f"PRAGMA table_info({table})")}


def migrate(conn):
    """Add columns missing from databases created by older versions."""
    added = {
        "users": [
            ("first_name", "TEXT NOT NULL DEFAULT ''"),
            ("last_name", "TEXT NOT NULL DEFAULT ''"),
        ],
        "commitments": [
            ("category", "TEXT NOT NULL DEFAULT 'personal'"),
            ("start_date", "TEXT NOT NULL DEFAULT ''"),
            ("end_date", "TEXT NOT NULL DEFAULT ''"),
        ],
    }
    for table, columns in added.items():
        existing = _columns(conn, table)
        for name, ddl in columns:
            if name not in existing:
                conn.execute(f"ALTER TABLE {table} ADD COLUMN {name} {ddl}")
                logger.info("Added column %s.%s", table, name)


def seed_demo_data(conn):
    now = utc_now()

    if conn.execute("SELECT COUNT(*) FROM users").fetchone()[0] == 0:
        for email, first_name, last_name in DEMO_USERS:
            conn.execute(
                "INSERT INTO users (email, first_name, last_name, password_hash, created_at) "
                "VALUES (?, ?, ?, ?, ?)",
                (email, first_name, last_name, generate_password_hash(DEMO_PASSWORD), now),
            )
        conn.commit()
        logger.info("Seeded %d demo users", len(DEMO_USERS))

    if conn.execute("SELECT COUNT(*) FROM commitments").fetchone()[0] > 0:
        return

    owner = conn.execute(
        "SELECT id FROM users WHERE email = ?", (DEMO_USERS[0][0],)
    ).fetchone()
    if not owner:
        return

    today = now[:10]
    cur = conn.execute(
        "INSERT INTO commitments (owner_user_id, title, description, category, start_date, end_date, created_at) "
        "VALUES (?, ?, ?, ?, ?, ?, ?)",
        (
            owner["id"],
            "30-Day Writing Streak",
            "Post at least one daily check-in with a short update about writing progress.",
            "creative",
            today,
            "",
            now,
        ),
    )
    commitment_id = cur.lastrowid

    for req_type, params in [
        ("post_frequency", {"count": 1}),
        ("text_update", {}),
        ("image_required", {}),
    ]:
        conn.execute(
            "INSERT INTO requirements (commitment_id, type, params, created_at) VALUES (?, ?, ?, ?)",
            (commitment_id, req_type, json.dumps(params), now),
        )

    conn.execute(
        "INSERT INTO posts (commitment_id, author_user_id, type, body_text, image_url, created_at) "
        "VALUES (?, ?, ?, ?, ?, ?)",
        (
            commitment_id,
            owner["id"],
            "check_in",
            "Day one: drafted 500 words.",
            "https://placehold.co/600x400",
            now,
        ),
    )
    conn.commit()
    logger.info("Seeded demo commitment %d", commitment_id)
