import json
import logging
import sqlite3

from db import utc_now

logger = logging.getLogger(__name__)

REQUIREMENT_TYPES = ("post_frequency", "text_update", "image_required")
POST_TYPES = ("check_in", "comment")
CATEGORIES = ("health", "fitness", "learning", "creative", "career", "finance", "personal")

COMMITMENT_COLUMNS = """
    c.id, c.owner_user_id, c.title, c.description, c.category,
    c.start_date, c.end_date, c.created_at,
    u.first_name AS owner_first_name, u.last_name AS owner_last_name,
    u.email AS owner_email
"""

# -------------------------
# USERS
# -------------------------


def get_user(conn, user_id):
    return conn.execute(
        "SELECT id, email, first_name, last_name, created_at FROM users WHERE id = ?",
        (user_id,),
    ).fetchone()


def get_user_by_email(conn, email):
    return conn.execute(
        "SELECT id, email, first_name, last_name, password_hash FROM users WHERE email = ?",
        (email,),
    ).fetchone()


def create_user(conn, email, first_name, last_name, password_hash):
    cur = conn.execute(
        "INSERT INTO users (email, first_name, last_name, password_hash, created_at) "
        "VALUES (?, ?, ?, ?, ?)",
        (email, first_name, last_name, password_hash, utc_now()),
    )
    conn.commit()
    return cur.lastrowid


# -------------------------
# COMMITMENTS
# -------------------------


def create_commitment(conn, owner_id, title, description, category, start_date, end_date=""):
    cur = conn.execute(
        "INSERT INTO commitments (owner_user_id, title, description, category, start_date, end_date, created_at) "
        "VALUES (?, ?, ?, ?, ?, ?, ?)",
        (owner_id, title, description, category, start_date, end_date, utc_now()),
    )
    conn.commit()
    return cur.lastrowid


def get_commitment(conn, commitment_id):
    return conn.execute(
        f"SELECT {COMMITMENT_COLUMNS} FROM commitments c "
        "JOIN users u ON u.id = c.owner_user_id WHERE c.id = ?",
        (commitment_id,),
    ).fetchone()


def list_commitments_for_owner(conn, owner_id):
    return conn.execute(
        f"SELECT {COMMITMENT_COLUMNS} FROM commitments c "
        "JOIN users u ON u.id = c.owner_user_id "
        "WHERE c.owner_user_id = ? ORDER BY c.created_at DESC, c.id DESC",
        (owner_id,),
    ).fetchall()


def list_explore_commitments(conn, user_id):
    """Everyone else's commitments, newest first."""
    return conn.execute(
        f"SELECT {COMMITMENT_COLUMNS} FROM commitments c "
        "JOIN users u ON u.id = c.owner_user_id "
        "WHERE c.owner_user_id != ? ORDER BY c.created_at DESC, c.id DESC",
        (user_id,),
    ).fetchall()


def list_subscribed_commitments(conn, user_id):
    return conn.execute(
        f"SELECT {COMMITMENT_COLUMNS} FROM subscriptions s "
        "JOIN commitments c ON c.id = s.commitment_id "
        "JOIN users u ON u.id = c.owner_user_id "
        "WHERE s.user_id = ? ORDER BY s.created_at DESC, s.id DESC",
        (user_id,),
    ).fetchall()


# -------------------------
# REQUIREMENTS
# -------------------------


def add_requirement(conn, commitment_id, req_type, params=None):
    cur = conn.execute(
        "INSERT INTO requirements (commitment_id, type, params, created_at) VALUES (?, ?, ?, ?)",
        (commitment_id, req_type, json.dumps(params or {}), utc_now()),
    )
    conn.commit()
    return cur.lastrowid


def _decode_params(raw):
    try:
        params = json.loads(raw) if raw else {}
    except ValueError:
        logger.warning("Ignoring malformed requirement params: %r", raw)
        return {}
    return params if isinstance(params, dict) else {}


def list_requirements(conn, commitment_id):
    rows = conn.execute(
        "SELECT id, commitment_id, type, params, created_at FROM requirements "
        "WHERE commitment_id = ? ORDER BY id",
        (commitment_id,),
    ).fetchall()
    return [
        {
            "id": row["id"],
            "commitment_id": row["commitment_id"],
            "type": row["type"],
            "params": _decode_params(row["params"]),
            "created_at": row["created_at"],
        }
        for row in rows
    ]


# -------------------------
# POSTS
# -------------------------


def create_post(conn, commitment_id, author_id, post_type, body_text="", image_url=""):
    """Insert a post and notify the commitment's subscribers about it."""
    cur = conn.execute(
        "INSERT INTO posts (commitment_id, author_user_id, type, body_text, image_url, created_at) "
        "VALUES (?, ?, ?, ?, ?, ?)",
        (commitment_id, author_id, post_type, body_text, image_url, utc_now()),
    )
    post_id = cur.lastrowid
    notified = notify_subscribers(conn, commitment_id, post_id, author_id)
    conn.commit()
    logger.info("Post %d on commitment %d notified %d subscriber(s)", post_id, commitment_id, notified)
    return post_id


def list_posts(conn, commitment_id, since=None):
    """Posts on a commitment, newest first. `since` is a YYYY-MM-DD lower bound."""
    query = (
        "SELECT p.id, p.commitment_id, p.author_user_id, p.type, p.body_text, p.image_url, p.created_at, "
        "u.first_name AS author_first_name, u.last_name AS author_last_name "
        "FROM posts p JOIN users u ON u.id = p.author_user_id WHERE p.commitment_id = ?"
    )
    args = [commitment_id]
    if since:
        query += " AND p.created_at >= ?"
        args.append(since)
    query += " ORDER BY p.created_at DESC, p.id DESC"
    return conn.execute(query, args).fetchall()


# -------------------------
# SUBSCRIPTIONS
# -------------------------


def is_subscribed(conn, user_id, commitment_id):
    row = conn.execute(
        "SELECT 1 FROM subscriptions WHERE user_id = ? AND commitment_id = ?",
        (user_id, commitment_id),
    ).fetchone()
    return row is not None


def toggle_subscription(conn, user_id, commitment_id):
    """Subscribe or unsubscribe. Returns True when the user is now subscribed."""
    if is_subscribed(conn, user_id, commitment_id):
        conn.execute(
            "DELETE FROM subscriptions WHERE user_id = ? AND commitment_id = ?",
            (user_id, commitment_id),
        )
        conn.commit()
        return False

    try:
        conn.execute(
            "INSERT INTO subscriptions (user_id, commitment_id, created_at) VALUES (?, ?, ?)",
            (user_id, commitment_id, utc_now()),
        )
    except sqlite3.IntegrityError:
        # another request subscribed first
        pass
    conn.commit()
    return True


def list_subscriber_ids(conn, commitment_id):
    rows = conn.execute(
        "SELECT user_id FROM subscriptions WHERE commitment_id = ? ORDER BY id",
        (commitment_id,),
    ).fetchall()
    return [row["user_id"] for row in rows]


# -------------------------
# NOTIFICATIONS
# -------------------------


def notify_subscribers(conn, commitment_id, post_id, author_id):
    owner = conn.execute(
        "SELECT owner_user_id FROM commitments WHERE id = ?", (commitment_id,)
    ).fetchone()
    owner_id = owner["owner_user_id"] if owner else None

    now = utc_now()
    recipients = [
        user_id
        for user_id in list_subscriber_ids(conn, commitment_id)
        if user_id not in (author_id, owner_id)
    ]
    conn.executemany(
        "INSERT INTO notifications (recipient_user_id, commitment_id, post_id, created_at) "
        "VALUES (?, ?, ?, ?)",
        [(user_id, commitment_id, post_id, now) for user_id in recipients],
    )
    return len(recipients)


def list_notifications(conn, user_id):
    return conn.execute(
        "SELECT n.id, n.commitment_id, n.post_id, n.created_at, n.read_at, "
        "c.title AS commitment_title, p.type AS post_type, p.body_text, "
        "u.id AS author_id, u.first_name AS author_first_name, u.last_name AS author_last_name "
        "FROM notifications n "
        "JOIN commitments c ON c.id = n.commitment_id "
        "JOIN posts p ON p.id = n.post_id "
        "JOIN users u ON u.id = p.author_user_id "
        "WHERE n.recipient_user_id = ? "
        "ORDER BY n.read_at IS NOT NULL, n.created_at DESC, n.id DESC",
        (user_id,),
    ).fetchall()


def count_unread_notifications(conn, user_id):
    return conn.execute(
        "SELECT COUNT(*) FROM notifications WHERE recipient_user_id = ? AND read_at IS NULL",
        (user_id,),
    ).fetchone()[0]


def mark_notification_read(conn, notification_id, user_id):
    """Only the recipient may mark a notification; read_at is set once."""
    cur = conn.execute(
        "UPDATE notifications SET read_at = ? "
        "WHERE id = ? AND recipient_user_id = ? AND read_at IS NULL",
        (utc_now(), notification_id, user_id),
    )
    conn.commit()
    return cur.rowcount > 0


def mark_all_notifications_read(conn, user_id):
    cur = conn.execute(
        "UPDATE notifications SET read_at = ? WHERE recipient_user_id = ? AND read_at IS NULL",
        (utc_now(), user_id),
    )
    conn.commit()
    return cur.rowcount
