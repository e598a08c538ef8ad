import unittest

import status
import store

TODAY = "2026-03-14"
YESTERDAY = "2026-03-13"
OWNER = 1
SUPPORTER = 2


def check_in(body="", image="", author=OWNER, day=TODAY, post_type="check_in"):
    return {
        "type": post_type,
        "author_user_id": author,
        "body_text": body,
        "image_url": image,
        "created_at": f"{day} 09:30:00",
    }


def requirement(req_type, **params):
    return {"id": None, "type": req_type, "params": params}


class TestEvaluate(unittest.TestCase):

    def test_no_requirements_is_neutral(self):
        result = status.evaluate([], [check_in("hi")], OWNER, TODAY)
        self.assertEqual(result["status"], "No requirements yet.")
        self.assertIsNone(result["on_track"])
        self.assertEqual(result["details"], [])

    def test_post_frequency_one_of_two_needs_attention(self):
        result = status.evaluate([requirement("post_frequency", count=2)], [check_in()], OWNER, TODAY)
        self.assertEqual(result["status"], "Needs attention")
        self.assertFalse(result["details"][0]["passed"])
        self.assertEqual(result["details"][0]["detail"], "1 of 2 check-ins today")

    def test_post_frequency_two_of_two_on_track(self):
        result = status.evaluate(
            [requirement("post_frequency", count=2)], [check_in(), check_in()], OWNER, TODAY
        )
        self.assertEqual(result["status"], "On track")
        self.assertTrue(result["on_track"])

    def test_post_frequency_defaults_to_one(self):
        for params in ({}, {"count": "bogus"}, {"count": 0}):
            req = {"type": "post_frequency", "params": params}
            self.assertTrue(status.evaluate([req], [check_in()], OWNER, TODAY)["on_track"], params)
            self.assertFalse(status.evaluate([req], [], OWNER, TODAY)["on_track"], params)

    def test_text_update_empty_body_fails(self):
        result = status.evaluate([requirement("text_update")], [check_in(body="   ")], OWNER, TODAY)
        self.assertFalse(result["details"][0]["passed"])
        self.assertEqual(result["status"], "Needs attention")

    def test_text_update_non_empty_body_passes(self):
        result = status.evaluate(
            [requirement("text_update")], [check_in(), check_in(body="Ran 5k")], OWNER, TODAY
        )
        self.assertTrue(result["details"][0]["passed"])
        self.assertEqual(result["status"], "On track")

    def test_image_required(self):
        req = [requirement("image_required")]
        self.assertFalse(status.evaluate(req, [check_in(body="no pic")], OWNER, TODAY)["on_track"])
        self.assertTrue(
            status.evaluate(req, [check_in(image="https://example.com/a.png")], OWNER, TODAY)["on_track"]
        )

    def test_only_todays_owner_check_ins_count(self):
        posts = [
            check_in(body="old", image="https://example.com/x.png", day=YESTERDAY),
            check_in(body="from a friend", image="https://example.com/y.png", author=SUPPORTER),
            check_in(body="comment", image="https://example.com/z.png", post_type="comment"),
        ]
        reqs = [
            requirement("post_frequency", count=1),
            requirement("text_update"),
            requirement("image_required"),
        ]
        result = status.evaluate(reqs, posts, OWNER, TODAY)
        self.assertEqual(result["check_in_count"], 0)
        self.assertEqual([d["passed"] for d in result["details"]], [False, False, False])

    def test_all_requirements_must_pass(self):
        reqs = [requirement("post_frequency", count=1), requirement("image_required")]
        result = status.evaluate(reqs, [check_in(body="words only")], OWNER, TODAY)
        self.assertEqual([d["passed"] for d in result["details"]], [True, False])
        self.assertEqual(result["status"], "Needs attention")

    def test_unknown_requirement_fails(self):
        result = status.evaluate([requirement("daily_haiku")], [check_in("x")], OWNER, TODAY)
        self.assertEqual(result["details"][0]["detail"], "Unknown requirement type")
        self.assertFalse(result["on_track"])

    def test_labels(self):
        self.assertEqual(
            status.describe_requirement(requirement("post_frequency", count=1)),
            "Post at least 1 check-in per day",
        )
        self.assertEqual(
            status.describe_requirement(requirement("post_frequency", count=3)),
            "Post at least 3 check-ins per day",
        )


def test_commitment_status_reads_database(conn, make_user):
    owner = make_user("owner@example.com")
    friend = make_user("friend@example.com")
    commitment_id = store.create_commitment(conn, owner, "Write", "Every day", "creative", "2026-01-01")
    assert status.commitment_status(conn, commitment_id, owner)["status"] == status.NO_REQUIREMENTS

    store.add_requirement(conn, commitment_id, "post_frequency", {"count": 2})
    store.add_requirement(conn, commitment_id, "text_update")

    store.create_post(conn, commitment_id, owner, "check_in", "Drafted an intro")
    store.create_post(conn, commitment_id, friend, "comment", "Nice!")
    result = status.commitment_status(conn, commitment_id, owner)
    assert result["status"] == status.NEEDS_ATTENTION
    assert result["check_in_count"] == 1

    store.create_post(conn, commitment_id, owner, "check_in", "")
    result = status.commitment_status(conn, commitment_id, owner)
    assert result["status"] == status.ON_TRACK
    assert [d["passed"] for d in result["details"]] == [True, True]


def test_commitment_status_ignores_other_days(conn, make_user):
    owner = make_user("owner@example.com")
    commitment_id = store.create_commitment(conn, owner, "Run", "Daily", "fitness", "2026-01-01")
    store.add_requirement(conn, commitment_id, "post_frequency", {"count": 1})
    store.create_post(conn, commitment_id, owner, "check_in", "done")

    assert status.commitment_status(conn, commitment_id, owner, today="1999-01-01")["on_track"] is False
