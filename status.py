from datetime import datetime, timezone

import store

ON_TRACK = "On track"
NEEDS_ATTENTION = "Needs attention"
NO_REQUIREMENTS = "No requirements yet."


def today_utc():
    return datetime.now(timezone.utc).strftime("%Y-%m-%d")


def _frequency_target(params):
    try:
        count = int(params.get("count", 1))
    except (TypeError, ValueError):
        return 1
    return max(count, 1)


def describe_requirement(requirement):
    req_type = requirement["type"]
    if req_type == "post_frequency":
        count = _frequency_target(requirement["params"])
        return f"Post at least {count} check-in{'s' if count != 1 else ''} per day"
    if req_type == "text_update":
        return "Include a written update in a check-in"
    if req_type == "image_required":
        return "Attach an image to a check-in"
    return f"Unknown requirement ({req_type})"


def todays_check_ins(posts, owner_id, today):
    return [
        post
        for post in posts
        if post["type"] == "check_in"
        and post["author_user_id"] == owner_id
        and (post["created_at"] or "")[:10] == today
    ]


def evaluate_requirement(requirement, check_ins):
    """Return (passed, detail) for one requirement against today's check-ins."""
    req_type = requirement["type"]

    if req_type == "post_frequency":
        target = _frequency_target(requirement["params"])
        return len(check_ins) >= target, f"{len(check_ins)} of {target} check-ins today"

    if req_type == "text_update":
        passed = any((post["body_text"] or "").strip() for post in check_ins)
        return passed, "Written update posted" if passed else "No written update today"

    if req_type == "image_required":
        passed = any((post["image_url"] or "").strip() for post in check_ins)
        return passed, "Image attached" if passed else "No image today"

    return False, "Unknown requirement type"


def evaluate(requirements, posts, owner_id, today=None):
    """Fold requirements over the owner's check-ins for `today`.

    Returns a dict with `status` (one of ON_TRACK, NEEDS_ATTENTION,
    NO_REQUIREMENTS), `on_track` (bool or None when there is nothing to
    evaluate), `check_in_count` and `details`, a list of per-requirement
    dicts with `label`, `passed` and `detail`.
    """
    today = today or today_utc()
    check_ins = todays_check_ins(posts, owner_id, today)

    details = []
    for requirement in requirements:
        passed, detail = evaluate_requirement(requirement, check_ins)
        details.append({
            "id": requirement.get("id"),
            "type": requirement["type"],
            "label": describe_requirement(requirement),
            "passed": passed,
            "detail": detail,
        })

    if not details:
        status, on_track = NO_REQUIREMENTS, None
    elif all(d["passed"] for d in details):
        status, on_track = ON_TRACK, True
    else:
        status, on_track = NEEDS_ATTENTION, False

    return {
        "status": status,
        "on_track": on_track,
        "check_in_count": len(check_ins),
        "details": details,
    }


def commitment_status(conn, commitment_id, owner_id, today=None):
    today = today or today_utc()
    requirements = store.list_requirements(conn, commitment_id)
    posts = store.list_posts(conn, commitment_id, since=today)
    return evaluate(requirements, posts, owner_id, today)
