import sqlite3

import pytest

import db
import store


@pytest.fixture
def people(make_user):
    return {
        "owner": make_user("owner@example.com", "Olive", "Owner"),
        "alice": make_user("alice@example.com", "Alice", "A"),
        "bob": make_user("bob@example.com", "Bob", "B"),
    }


@pytest.fixture
def commitment_id(conn, people):
    return store.create_commitment(conn, people["owner"], "Read daily", "20 pages", "learning", "2026-01-01")


def test_create_and_get_commitment(conn, people, commitment_id):
    commitment = store.get_commitment(conn, commitment_id)
    assert commitment["title"] == "Read daily"
    assert commitment["category"] == "learning"
    assert commitment["owner_first_name"] == "Olive"
    assert store.get_commitment(conn, 9999) is None


def test_explore_excludes_own_commitments(conn, people, commitment_id):
    assert [c["id"] for c in store.list_explore_commitments(conn, people["alice"])] == [commitment_id]
    assert store.list_explore_commitments(conn, people["owner"]) == []


def test_requirement_params_round_trip(conn, commitment_id):
    store.add_requirement(conn, commitment_id, "post_frequency", {"count": 3})
    store.add_requirement(conn, commitment_id, "image_required")
    reqs = store.list_requirements(conn, commitment_id)
    assert [(r["type"], r["params"]) for r in reqs] == [
        ("post_frequency", {"count": 3}),
        ("image_required", {}),
    ]


def test_malformed_params_decode_to_empty(conn, commitment_id):
    conn.execute(
        "INSERT INTO requirements (commitment_id, type, params, created_at) VALUES (?, ?, ?, ?)",
        (commitment_id, "post_frequency", "{not json", db.utc_now()),
    )
    conn.commit()
    assert store.list_requirements(conn, commitment_id)[0]["params"] == {}


def test_toggle_subscription(conn, people, commitment_id):
    alice = people["alice"]
    assert store.toggle_subscription(conn, alice, commitment_id) is True
    assert store.is_subscribed(conn, alice, commitment_id)
    assert store.toggle_subscription(conn, alice, commitment_id) is False
    assert not store.is_subscribed(conn, alice, commitment_id)


def test_subscription_pair_is_unique(conn, people, commitment_id):
    store.toggle_subscription(conn, people["alice"], commitment_id)
    with pytest.raises(sqlite3.IntegrityError):
        conn.execute(
            "INSERT INTO subscriptions (user_id, commitment_id, created_at) VALUES (?, ?, ?)",
            (people["alice"], commitment_id, db.utc_now()),
        )


def test_fan_out_skips_author_and_owner(conn, people, commitment_id):
    for user in ("alice", "bob"):
        store.toggle_subscription(conn, people[user], commitment_id)
    # owner rows can exist from older data; they still must not be notified
    conn.execute(
        "INSERT INTO subscriptions (user_id, commitment_id, created_at) VALUES (?, ?, ?)",
        (people["owner"], commitment_id, db.utc_now()),
    )
    conn.commit()

    store.create_post(conn, commitment_id, people["owner"], "check_in", "page 1-20")
    assert store.count_unread_notifications(conn, people["alice"]) == 1
    assert store.count_unread_notifications(conn, people["bob"]) == 1
    assert store.count_unread_notifications(conn, people["owner"]) == 0

    store.create_post(conn, commitment_id, people["alice"], "comment", "Keep going")
    assert store.count_unread_notifications(conn, people["alice"]) == 1
    assert store.count_unread_notifications(conn, people["bob"]) == 2
    assert store.count_unread_notifications(conn, people["owner"]) == 0


def test_mark_notification_read_only_by_recipient(conn, people, commitment_id):
    store.toggle_subscription(conn, people["alice"], commitment_id)
    store.create_post(conn, commitment_id, people["owner"], "check_in", "done")
    notification = store.list_notifications(conn, people["alice"])[0]
    assert notification["commitment_title"] == "Read daily"
    assert notification["post_type"] == "check_in"

    assert store.mark_notification_read(conn, notification["id"], people["bob"]) is False
    assert store.mark_notification_read(conn, notification["id"], people["alice"]) is True
    assert store.mark_notification_read(conn, notification["id"], people["alice"]) is False
    assert store.count_unread_notifications(conn, people["alice"]) == 0


def test_unread_notifications_listed_first(conn, people, commitment_id):
    store.toggle_subscription(conn, people["alice"], commitment_id)
    first = store.create_post(conn, commitment_id, people["owner"], "check_in", "one")
    store.create_post(conn, commitment_id, people["owner"], "check_in", "two")
    first_notification = [
        n for n in store.list_notifications(conn, people["alice"]) if n["post_id"] == first
    ][0]
    store.mark_notification_read(conn, first_notification["id"], people["alice"])

    listed = store.list_notifications(conn, people["alice"])
    assert [n["read_at"] is None for n in listed] == [True, False]


def test_mark_all_notifications_read(conn, people, commitment_id):
    store.toggle_subscription(conn, people["alice"], commitment_id)
    store.create_post(conn, commitment_id, people["owner"], "check_in", "one")
    store.create_post(conn, commitment_id, people["owner"], "check_in", "two")
    assert store.mark_all_notifications_read(conn, people["alice"]) == 2
    assert store.mark_all_notifications_read(conn, people["alice"]) == 0


def test_list_posts_since(conn, people, commitment_id):
    post_id = store.create_post(conn, commitment_id, people["owner"], "check_in", "today")
    conn.execute("UPDATE posts SET created_at = ? WHERE id = ?", ("2020-01-01 08:00:00", post_id))
    conn.commit()
    store.create_post(conn, commitment_id, people["owner"], "check_in", "now")

    assert len(store.list_posts(conn, commitment_id)) == 2
    assert [p["body_text"] for p in store.list_posts(conn, commitment_id, since="2021-01-01")] == ["now"]
