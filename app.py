from flask import Flask, request, redirect, url_for, flash, abort
import logging
import sqlite3
from datetime import datetime

import auth
import config
import pages
import status
import store
from db import get_db, close_db, init_db

logger = logging.getLogger(__name__)

# -------------------------
# INIT
# -------------------------


def create_app(test_config=None):
    app = Flask(__name__)
    app.config.update(
        SECRET_KEY=config.SECRET_KEY,
        DATABASE_PATH=config.DATABASE_PATH,
        SEED_DEMO_DATA=config.SEED_DEMO_DATA,
    )
    if test_config:
        app.config.update(test_config)

    logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    init_db(app.config["DATABASE_PATH"], seed=app.config["SEED_DEMO_DATA"])
    app.teardown_appcontext(close_db)
    app.context_processor(_layout_context)
    app.add_url_rule("/", "index", index, methods=["GET", "POST"])
    return app


def _layout_context():
    user = auth.current_user()
    unread = store.count_unread_notifications(get_db(), user["id"]) if user else 0
    return {"current_user": user, "unread_count": unread}


def _coerce_int(value):
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _parse_date(value):
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        return None


def _statuses(conn, commitments):
    return {
        c["id"]: status.commitment_status(conn, c["id"], c["owner_user_id"])
        for c in commitments
    }


# -------------------------
# ROUTING
# -------------------------


def index():
    if request.method == "POST":
        handler = ACTIONS.get(request.form.get("action", ""))
        if handler is None:
            abort(400)
        return handler()

    route = request.args.get("r", "")
    if route == "register":
        return pages.register_page()
    if route in PAGES:
        return PAGES[route]()
    if auth.current_user():
        return redirect(url_for("index", r="commitments"))
    return pages.login_page()


# -------------------------
# PAGES
# -------------------------


def _render_commitments(errors=None, form=None):
    conn = get_db()
    user = auth.current_user()
    commitments = store.list_commitments_for_owner(conn, user["id"])
    following = store.list_subscribed_commitments(conn, user["id"])
    statuses = _statuses(conn, list(commitments) + list(following))
    return pages.commitments_page(commitments, following, statuses, errors=errors, form=form)


def _render_commitment(commitment, errors=None, form=None):
    conn = get_db()
    user = auth.current_user()
    result = status.commitment_status(conn, commitment["id"], commitment["owner_user_id"])
    posts = store.list_posts(conn, commitment["id"])
    return pages.commitment_page(
        commitment,
        result,
        posts,
        is_owner=commitment["owner_user_id"] == user["id"],
        subscribed=store.is_subscribed(conn, user["id"], commitment["id"]),
        errors=errors,
        form=form,
    )


@auth.login_required
def commitments_view():
    return _render_commitments()


@auth.login_required
def commitment_view():
    commitment = store.get_commitment(get_db(), _coerce_int(request.args.get("id")))
    if commitment is None:
        return pages.not_found_page("Commitment")
    return _render_commitment(commitment)


@auth.login_required
def person_view():
    conn = get_db()
    person = store.get_user(conn, _coerce_int(request.args.get("id")))
    if person is None:
        return pages.not_found_page("Person")
    commitments = store.list_commitments_for_owner(conn, person["id"])
    return pages.person_page(person, commitments, _statuses(conn, commitments))


@auth.login_required
def explore_view():
    conn = get_db()
    commitments = store.list_explore_commitments(conn, auth.current_user()["id"])
    return pages.explore_page(commitments, _statuses(conn, commitments))


@auth.login_required
def notifications_view(errors=None):
    notifications = store.list_notifications(get_db(), auth.current_user()["id"])
    return pages.notifications_page(notifications, errors=errors)


PAGES = {
    "commitments": commitments_view,
    "commitment": commitment_view,
    "person": person_view,
    "explore": explore_view,
    "notifications": notifications_view,
}

# -------------------------
# AUTH ACTIONS
# -------------------------


def login_action():
    email = request.form.get("email", "").strip()
    password = request.form.get("password", "")
    errors, success_message = auth.handle_login(get_db(), email, password)
    if errors:
        return pages.login_page(errors, email)
    flash(success_message)
    return redirect(url_for("index", r="commitments"))


def register_action():
    form = {
        "email": request.form.get("email", "").strip(),
        "first_name": request.form.get("first_name", "").strip(),
        "last_name": request.form.get("last_name", "").strip(),
    }
    errors, success_message = auth.handle_register(
        get_db(), form["email"], form["first_name"], form["last_name"], request.form.get("password", "")
    )
    if errors:
        return pages.register_page(errors, form)
    flash(success_message)
    return redirect(url_for("index"))


def logout_action():
    flash(auth.handle_logout())
    return redirect(url_for("index"))


# -------------------------
# COMMITMENT ACTIONS
# -------------------------


@auth.login_required
def create_commitment_action():
    form = {
        "title": request.form.get("title", "").strip(),
        "description": request.form.get("description", "").strip(),
        "category": request.form.get("category", "").strip(),
        "start_date": request.form.get("start_date", "").strip() or status.today_utc(),
        "end_date": request.form.get("end_date", "").strip(),
    }

    errors = []
    if not form["title"]:
        errors.append("Please provide a title.")
    if not form["description"]:
        errors.append("Please provide a description.")
    if form["category"] not in store.CATEGORIES:
        errors.append("Please choose a valid category.")
    start = _parse_date(form["start_date"])
    if start is None:
        errors.append("Please provide a valid start date.")
    else:
        form["start_date"] = start.isoformat()
    if form["end_date"]:
        end = _parse_date(form["end_date"])
        if end is None:
            errors.append("Please provide a valid end date.")
        else:
            form["end_date"] = end.isoformat()
            if start is not None and end < start:
                errors.append("End date must be on or after the start date.")

    if errors:
        return _render_commitments(errors, form)

    user = auth.current_user()
    try:
        commitment_id = store.create_commitment(
            get_db(), user["id"], form["title"], form["description"],
            form["category"], form["start_date"], form["end_date"],
        )
    except sqlite3.Error:
        logger.exception("Failed to create commitment for user %d", user["id"])
        return _render_commitments(["Unable to create commitment. Please try again."], form)

    logger.info("User %d created commitment %d", user["id"], commitment_id)
    flash("Commitment created.")
    return redirect(url_for("index", r="commitment", id=commitment_id))


def _posted_commitment():
    commitment = store.get_commitment(get_db(), _coerce_int(request.form.get("commitment_id")))
    if commitment is None:
        abort(404)
    return commitment


def _back_to(commitment):
    return redirect(url_for("index", r="commitment", id=commitment["id"]))


@auth.login_required
def add_requirement_action():
    commitment = _posted_commitment()
    req_type = request.form.get("type", "")
    params = {}

    errors = []
    if commitment["owner_user_id"] != auth.current_user()["id"]:
        errors.append("Only the owner can add requirements.")
    if req_type not in store.REQUIREMENT_TYPES:
        errors.append("Please choose a valid requirement type.")
    elif req_type == "post_frequency":
        count = _coerce_int(request.form.get("count", "1"))
        if count is None or count < 1:
            errors.append("Count must be a whole number of at least 1.")
        else:
            params["count"] = count

    if errors:
        return _render_commitment(commitment, errors)

    try:
        store.add_requirement(get_db(), commitment["id"], req_type, params)
    except sqlite3.Error:
        logger.exception("Failed to add requirement to commitment %d", commitment["id"])
        return _render_commitment(commitment, ["Unable to add requirement. Please try again."])

    flash("Requirement added.")
    return _back_to(commitment)


def _create_post(commitment, post_type, form, label):
    try:
        store.create_post(
            get_db(), commitment["id"], auth.current_user()["id"],
            post_type, form["body_text"], form["image_url"],
        )
    except sqlite3.Error:
        logger.exception("Failed to create %s on commitment %d", post_type, commitment["id"])
        return _render_commitment(commitment, [f"Unable to create {label}. Please try again."], form)
    flash(f"{label.capitalize()} posted.")
    return _back_to(commitment)


@auth.login_required
def create_check_in_action():
    commitment = _posted_commitment()
    form = {
        "body_text": request.form.get("body_text", "").strip(),
        "image_url": request.form.get("image_url", "").strip(),
    }

    errors = []
    if commitment["owner_user_id"] != auth.current_user()["id"]:
        errors.append("Only the owner can post check-ins.")
    if form["image_url"] and not form["image_url"].startswith(("http://", "https://")):
        errors.append("Image URL must start with http:// or https://.")

    if errors:
        return _render_commitment(commitment, errors, form)
    return _create_post(commitment, "check_in", form, "check-in")


@auth.login_required
def create_comment_action():
    commitment = _posted_commitment()
    form = {"body_text": request.form.get("body_text", "").strip(), "image_url": ""}
    if not form["body_text"]:
        return _render_commitment(commitment, ["Please write a comment."], form)
    return _create_post(commitment, "comment", form, "comment")


@auth.login_required
def toggle_subscription_action():
    commitment = _posted_commitment()
    user = auth.current_user()
    if commitment["owner_user_id"] == user["id"]:
        return _render_commitment(commitment, ["You cannot subscribe to your own commitment."])

    subscribed = store.toggle_subscription(get_db(), user["id"], commitment["id"])
    logger.info(
        "User %d %s commitment %d",
        user["id"], "subscribed to" if subscribed else "unsubscribed from", commitment["id"],
    )
    flash("Subscribed." if subscribed else "Unsubscribed.")
    return _back_to(commitment)


# -------------------------
# NOTIFICATION ACTIONS
# -------------------------


@auth.login_required
def mark_notification_read_action():
    notification_id = _coerce_int(request.form.get("notification_id"))
    if not store.mark_notification_read(get_db(), notification_id, auth.current_user()["id"]):
        return notifications_view(["Notification not found or already read."])
    return redirect(url_for("index", r="notifications"))


@auth.login_required
def mark_all_notifications_read_action():
    count = store.mark_all_notifications_read(get_db(), auth.current_user()["id"])
    flash(f"Marked {count} notification{'s' if count != 1 else ''} as read.")
    return redirect(url_for("index", r="notifications"))


ACTIONS = {
    "login": login_action,
    "register": register_action,
    "logout": logout_action,
    "create_commitment": create_commitment_action,
    "add_requirement": add_requirement_action,
    "create_check_in": create_check_in_action,
    "create_comment": create_comment_action,
    "toggle_subscription": toggle_subscription_action,
    "mark_notification_read": mark_notification_read_action,
    "mark_all_notifications_read": mark_all_notifications_read_action,
}

# -------------------------
# RUN
# -------------------------

if __name__ == "__main__":
    create_app().run(host=config.HOST, port=config.PORT, debug=config.DEBUG)
