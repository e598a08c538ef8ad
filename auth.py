import logging
import re
import sqlite3
from functools import wraps

from flask import redirect, session, url_for
from werkzeug.security import check_password_hash, generate_password_hash

import store

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LENGTH = 8


def is_valid_email(email):
    return bool(email) and EMAIL_RE.match(email) is not None


def handle_register(conn, email, first_name, last_name, password):
    errors = []
    success_message = ""

    if not is_valid_email(email):
        errors.append("Please provide a valid email address.")
    if not first_name:
        errors.append("Please provide your first name.")
    if not last_name:
        errors.append("Please provide your last name.")
    if len(password) < MIN_PASSWORD_LENGTH:
        errors.append(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")

    if errors:
        return errors, success_message

    if store.get_user_by_email(conn, email):
        errors.append("An account with that email already exists.")
        return errors, success_message

    try:
        user_id = store.create_user(conn, email, first_name, last_name, generate_password_hash(password))
    except sqlite3.Error:
        logger.exception("Failed to create account for %s", email)
        errors.append("Unable to create account. Please try again.")
    else:
        logger.info("Registered user %d (%s)", user_id, email)
        success_message = "Account created! You can now log in."

    return errors, success_message


def handle_login(conn, email, password):
    errors = []
    success_message = ""

    if not is_valid_email(email):
        errors.append("Please provide a valid email address.")
    if not password:
        errors.append("Please enter your password.")

    if errors:
        return errors, success_message

    user = store.get_user_by_email(conn, email)
    if not user or not check_password_hash(user["password_hash"], password):
        logger.warning("Failed login for %s", email)
        errors.append("Invalid email or password.")
        return errors, success_message

    session.clear()
    session["user"] = {
        "id": user["id"],
        "email": user["email"],
        "first_name": user["first_name"],
        "last_name": user["last_name"],
    }
    logger.info("User %d signed in", user["id"])
    return errors, "Welcome back! You are now signed in."


def handle_logout():
    session.clear()
    return "You have been signed out."


def current_user():
    return session.get("user")


def login_required(view_func):
    @wraps(view_func)
    def _wrapped(*args, **kwargs):
        if not current_user():
            return redirect(url_for("index"))
        return view_func(*args, **kwargs)
    return _wrapped
