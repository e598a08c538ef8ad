from flask import render_template_string

import store

# -------------------------
# LAYOUT
# -------------------------

HEADER = """
<!doctype html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>{{ page_title }} · commit</title>
<link href="https://cdn.jsdelivr.net/npm/bootstrap@5.3.3/dist/css/bootstrap.min.css" rel="stylesheet">
<style>
body { font-family:system-ui, -apple-system, "Segoe UI", sans-serif; color:#0f172a; }
.app-nav { border-bottom:1px solid #e5e7eb; }
.app-brand { font-weight:600; letter-spacing:.08em; text-transform:uppercase; color:#0f172a; }
.app-shell { max-width:920px; margin:48px auto; padding:0 24px 64px; }
.surface { border:1px solid #e5e7eb; border-radius:16px; padding:32px; box-shadow:0 10px 30px rgba(15,23,42,.04); }
.surface + .surface { margin-top:24px; }
.hint { color:#6b7280; font-size:.9rem; }
.btn-neutral { background:#0f172a; color:#fff; border-radius:999px; padding:10px 24px; }
.btn-neutral:hover { background:#1e293b; color:#fff; }
.status-pill { background:#f8fafc; border:1px solid #e2e8f0; border-radius:999px; font-size:.85rem; padding:6px 14px; }
.status-on { color:#166534; background:#f0fdf4; border-color:#bbf7d0; }
.status-off { color:#9a3412; background:#fff7ed; border-color:#fed7aa; }
</style>
</head>
<body>
<nav class="app-nav">
  <div class="container-fluid px-4 py-3 d-flex align-items-center justify-content-between">
    <a class="app-brand text-decoration-none" href="{{ url_for('index') }}">commit</a>
    <div class="d-flex align-items-center gap-3">
      {% if current_user %}
        <a href="{{ url_for('index', r='commitments') }}">My commitments</a>
        <a href="{{ url_for('index', r='explore') }}">Explore</a>
        <a href="{{ url_for('index', r='notifications') }}">Notifications
          {% if unread_count %}<span class="badge bg-dark">{{ unread_count }}</span>{% endif %}</a>
        <span class="status-pill">Signed in as {{ current_user.email }}</span>
        <form method="post" action="{{ url_for('index') }}" class="m-0">
          <input type="hidden" name="action" value="logout">
          <button type="submit" class="btn btn-outline-dark btn-sm">Log out</button>
        </form>
      {% else %}
        <a href="{{ url_for('index') }}">Login</a>
        <a href="{{ url_for('index', r='register') }}">Register</a>
        <span class="status-pill">Not signed in</span>
      {% endif %}
    </div>
  </div>
</nav>
<div class="app-shell">
<header class="mb-4">
  <h1 class="h3 mb-1">{{ page_heading }}</h1>
  {% if page_hint %}<p class="hint">{{ page_hint }}</p>{% endif %}
</header>
{% for message in get_flashed_messages() %}
  <div class="alert alert-success" role="alert">{{ message }}</div>
{% endfor %}
{% if errors %}
  <div class="alert alert-danger" role="alert">
    <ul class="mb-0">{% for error in errors %}<li>{{ error }}</li>{% endfor %}</ul>
  </div>
{% endif %}
"""

FOOTER = """
</div>
</body>
</html>
"""

STATUS_BADGE = """
{% macro status_badge(result) -%}
  {% if result.on_track is none %}
    <span class="status-pill">{{ result.status }}</span>
  {% elif result.on_track %}
    <span class="status-pill status-on">{{ result.status }}</span>
  {% else %}
    <span class="status-pill status-off">{{ result.status }}</span>
  {% endif %}
{%- endmacro %}

{% macro commitment_list(commitments, statuses, show_owner=True) -%}
  {% for c in commitments %}
    <div class="d-flex justify-content-between align-items-start py-3 border-bottom">
      <div>
        <a class="fw-semibold" href="{{ url_for('index', r='commitment', id=c.id) }}">{{ c.title }}</a>
        <div class="hint">
          {{ c.category|capitalize }}
          {% if show_owner %}· by <a href="{{ url_for('index', r='person', id=c.owner_user_id) }}">{{ c.owner_first_name }} {{ c.owner_last_name }}</a>{% endif %}
          {% if c.start_date %}· {{ c.start_date }}{% if c.end_date %} to {{ c.end_date }}{% endif %}{% endif %}
        </div>
      </div>
      {{ status_badge(statuses[c.id]) }}
    </div>
  {% else %}
    <p class="hint mb-0">Nothing here yet.</p>
  {% endfor %}
{%- endmacro %}
"""


def render_page(body, page_title, page_heading, page_hint="", status=200, **context):
    html = render_template_string(
        STATUS_BADGE + HEADER + body + FOOTER,
        page_title=page_title,
        page_heading=page_heading,
        page_hint=page_hint,
        **context,
    )
    return html, status


# -------------------------
# AUTH PAGES
# -------------------------

LOGIN_BODY = """
<section class="surface">
  <h2 class="h5">Log in</h2>
  <form method="post" action="{{ url_for('index') }}" class="d-grid gap-3">
    <input type="hidden" name="action" value="login">
    <div>
      <label class="form-label" for="login-email">Email</label>
      <input class="form-control" type="email" id="login-email" name="email" value="{{ email }}" required>
    </div>
    <div>
      <label class="form-label" for="login-password">Password</label>
      <input class="form-control" type="password" id="login-password" name="password" required>
    </div>
    <button type="submit" class="btn btn-neutral">Log in</button>
  </form>
  <hr>
  <p class="hint mb-0">New here? <a href="{{ url_for('index', r='register') }}">Create an account</a>.</p>
</section>
"""

REGISTER_BODY = """
<section class="surface">
  <h2 class="h5">Register</h2>
  <form method="post" action="{{ url_for('index') }}" class="d-grid gap-3">
    <input type="hidden" name="action" value="register">
    <div>
      <label class="form-label" for="register-email">Email</label>
      <input class="form-control" type="email" id="register-email" name="email" value="{{ email }}" required>
    </div>
    <div class="row g-3">
      <div class="col">
        <label class="form-label" for="register-first-name">First name</label>
        <input class="form-control" type="text" id="register-first-name" name="first_name" value="{{ first_name }}" required>
      </div>
      <div class="col">
        <label class="form-label" for="register-last-name">Last name</label>
        <input class="form-control" type="text" id="register-last-name" name="last_name" value="{{ last_name }}" required>
      </div>
    </div>
    <div>
      <label class="form-label" for="register-password">Password</label>
      <input class="form-control" type="password" id="register-password" name="password" minlength="8" required>
    </div>
    <button type="submit" class="btn btn-neutral">Create account</button>
  </form>
  <hr>
  <p class="hint mb-0">Already have an account? <a href="{{ url_for('index') }}">Log in here</a>.</p>
</section>
"""


def login_page(errors=None, email=""):
    return render_page(
        LOGIN_BODY, "Login", "Welcome back",
        "Sign in to keep track of your commitments.",
        status=400 if errors else 200,
        errors=errors, email=email,
    )


def register_page(errors=None, form=None):
    form = form or {}
    return render_page(
        REGISTER_BODY, "Register", "Create your account",
        "Join with your email and a password of at least 8 characters.",
        status=400 if errors else 200,
        errors=errors,
        email=form.get("email", ""),
        first_name=form.get("first_name", ""),
        last_name=form.get("last_name", ""),
    )


# -------------------------
# COMMITMENT PAGES
# -------------------------

COMMITMENTS_BODY = """
<section class="surface">
  <h2 class="h5">My commitments</h2>
  {{ commitment_list(commitments, statuses, show_owner=False) }}
</section>

<section class="surface">
  <h2 class="h5">Following</h2>
  {{ commitment_list(following, statuses) }}
</section>

<section class="surface">
  <h2 class="h5">New commitment</h2>
  <form method="post" action="{{ url_for('index') }}" class="d-grid gap-3">
    <input type="hidden" name="action" value="create_commitment">
    <div>
      <label class="form-label" for="commitment-title">Title</label>
      <input class="form-control" type="text" id="commitment-title" name="title" value="{{ form.title }}" required>
    </div>
    <div>
      <label class="form-label" for="commitment-description">Description</label>
      <textarea class="form-control" id="commitment-description" name="description" rows="3" required>{{ form.description }}</textarea>
    </div>
    <div class="row g-3">
      <div class="col">
        <label class="form-label" for="commitment-category">Category</label>
        <select class="form-select" id="commitment-category" name="category">
          {% for category in categories %}
            <option value="{{ category }}" {% if form.category == category %}selected{% endif %}>{{ category|capitalize }}</option>
          {% endfor %}
        </select>
      </div>
      <div class="col">
        <label class="form-label" for="commitment-start">Start date</label>
        <input class="form-control" type="date" id="commitment-start" name="start_date" value="{{ form.start_date }}">
      </div>
      <div class="col">
        <label class="form-label" for="commitment-end">End date</label>
        <input class="form-control" type="date" id="commitment-end" name="end_date" value="{{ form.end_date }}">
      </div>
    </div>
    <button type="submit" class="btn btn-neutral">Create commitment</button>
  </form>
</section>
"""

COMMITMENT_BODY = """
<section class="surface">
  <div class="d-flex justify-content-between align-items-start">
    <div>
      <p class="hint mb-1">
        {{ commitment.category|capitalize }} · by
        <a href="{{ url_for('index', r='person', id=commitment.owner_user_id) }}">{{ commitment.owner_first_name }} {{ commitment.owner_last_name }}</a>
        {% if commitment.start_date %}· {{ commitment.start_date }}{% if commitment.end_date %} to {{ commitment.end_date }}{% endif %}{% endif %}
      </p>
      <p class="mb-0">{{ commitment.description }}</p>
    </div>
    {% if not is_owner %}
      <form method="post" action="{{ url_for('index') }}">
        <input type="hidden" name="action" value="toggle_subscription">
        <input type="hidden" name="commitment_id" value="{{ commitment.id }}">
        <button type="submit" class="btn btn-outline-dark btn-sm">{{ 'Unsubscribe' if subscribed else 'Subscribe' }}</button>
      </form>
    {% endif %}
  </div>
</section>

<section class="surface">
  <div class="d-flex justify-content-between align-items-center mb-3">
    <h2 class="h5 mb-0">Today</h2>
    {{ status_badge(result) }}
  </div>
  {% if result.details %}
    <ul class="list-unstyled mb-0">
      {% for d in result.details %}
        <li class="py-1">{{ '✓' if d.passed else '✗' }} {{ d.label }} <span class="hint">({{ d.detail }})</span></li>
      {% endfor %}
    </ul>
  {% else %}
    <p class="hint mb-0">Add a requirement to start tracking.</p>
  {% endif %}
  {% if is_owner %}
    <hr>
    <form method="post" action="{{ url_for('index') }}" class="row g-2 align-items-end">
      <input type="hidden" name="action" value="add_requirement">
      <input type="hidden" name="commitment_id" value="{{ commitment.id }}">
      <div class="col">
        <label class="form-label" for="requirement-type">Requirement</label>
        <select class="form-select" id="requirement-type" name="type">
          <option value="post_frequency">Daily check-ins</option>
          <option value="text_update">Written update</option>
          <option value="image_required">Image attached</option>
        </select>
      </div>
      <div class="col-3">
        <label class="form-label" for="requirement-count">Check-ins per day</label>
        <input class="form-control" type="number" min="1" id="requirement-count" name="count" value="1">
      </div>
      <div class="col-auto"><button type="submit" class="btn btn-outline-dark">Add</button></div>
    </form>
  {% endif %}
</section>

<section class="surface">
  {% if is_owner %}
    <h2 class="h5">Check in</h2>
    <form method="post" action="{{ url_for('index') }}" class="d-grid gap-3">
      <input type="hidden" name="action" value="create_check_in">
      <input type="hidden" name="commitment_id" value="{{ commitment.id }}">
      <textarea class="form-control" name="body_text" rows="3" placeholder="What did you do today?">{{ form.body_text }}</textarea>
      <input class="form-control" type="url" name="image_url" placeholder="Image URL (optional)" value="{{ form.image_url }}">
      <button type="submit" class="btn btn-neutral">Post check-in</button>
    </form>
  {% else %}
    <h2 class="h5">Leave a comment</h2>
    <form method="post" action="{{ url_for('index') }}" class="d-grid gap-3">
      <input type="hidden" name="action" value="create_comment">
      <input type="hidden" name="commitment_id" value="{{ commitment.id }}">
      <textarea class="form-control" name="body_text" rows="2" required>{{ form.body_text }}</textarea>
      <button type="submit" class="btn btn-neutral">Comment</button>
    </form>
  {% endif %}
</section>

<section class="surface">
  <h2 class="h5">Activity</h2>
  {% for post in posts %}
    <div class="py-3 border-bottom">
      <div class="hint">
        <a href="{{ url_for('index', r='person', id=post.author_user_id) }}">{{ post.author_first_name }} {{ post.author_last_name }}</a>
        · {{ 'Check-in' if post.type == 'check_in' else 'Comment' }} · {{ post.created_at }} UTC
      </div>
      {% if post.body_text %}<p class="mb-1">{{ post.body_text }}</p>{% endif %}
      {% if post.image_url %}<img src="{{ post.image_url }}" alt="Check-in image" class="img-fluid rounded">{% endif %}
    </div>
  {% else %}
    <p class="hint mb-0">No posts yet.</p>
  {% endfor %}
</section>
"""

PERSON_BODY = """
<section class="surface">
  <p class="hint mb-0">{{ person.email }} · member since {{ person.created_at[:10] }}</p>
</section>
<section class="surface">
  <h2 class="h5">Commitments</h2>
  {{ commitment_list(commitments, statuses, show_owner=False) }}
</section>
"""

EXPLORE_BODY = """
<section class="surface">
  {{ commitment_list(commitments, statuses) }}
</section>
"""

NOTIFICATIONS_BODY = """
<section class="surface">
  {% if unread_count %}
    <form method="post" action="{{ url_for('index') }}" class="mb-3">
      <input type="hidden" name="action" value="mark_all_notifications_read">
      <button type="submit" class="btn btn-outline-dark btn-sm">Mark all as read</button>
    </form>
  {% endif %}
  {% for n in notifications %}
    <div class="d-flex justify-content-between align-items-start py-3 border-bottom {% if n.read_at %}text-muted{% endif %}">
      <div>
        <a href="{{ url_for('index', r='person', id=n.author_id) }}">{{ n.author_first_name }} {{ n.author_last_name }}</a>
        {{ 'checked in on' if n.post_type == 'check_in' else 'commented on' }}
        <a href="{{ url_for('index', r='commitment', id=n.commitment_id) }}">{{ n.commitment_title }}</a>
        {% if n.body_text %}<div class="hint">{{ n.body_text|truncate(120) }}</div>{% endif %}
        <div class="hint">{{ n.created_at }} UTC</div>
      </div>
      {% if not n.read_at %}
        <form method="post" action="{{ url_for('index') }}">
          <input type="hidden" name="action" value="mark_notification_read">
          <input type="hidden" name="notification_id" value="{{ n.id }}">
          <button type="submit" class="btn btn-outline-dark btn-sm">Mark read</button>
        </form>
      {% endif %}
    </div>
  {% else %}
    <p class="hint mb-0">You're all caught up.</p>
  {% endfor %}
</section>
"""

NOT_FOUND_BODY = """
<section class="surface">
  <p class="mb-0"><a href="{{ url_for('index', r='commitments') }}">Back to your commitments</a></p>
</section>
"""


def commitments_page(commitments, following, statuses, errors=None, form=None, **context):
    return render_page(
        COMMITMENTS_BODY, "Commitments", "Your commitments",
        "Each commitment is checked against today's check-ins.",
        status=400 if errors else 200,
        commitments=commitments, following=following, statuses=statuses,
        categories=store.CATEGORIES, errors=errors, form=form or {},
        **context,
    )


def commitment_page(commitment, result, posts, is_owner, subscribed, errors=None, form=None, **context):
    return render_page(
        COMMITMENT_BODY, commitment["title"], commitment["title"],
        status=400 if errors else 200,
        commitment=commitment, result=result, posts=posts,
        is_owner=is_owner, subscribed=subscribed,
        errors=errors, form=form or {},
        **context,
    )


def person_page(person, commitments, statuses, **context):
    name = f"{person['first_name']} {person['last_name']}".strip() or person["email"]
    return render_page(
        PERSON_BODY, name, name,
        person=person, commitments=commitments, statuses=statuses,
        **context,
    )


def explore_page(commitments, statuses, **context):
    return render_page(
        EXPLORE_BODY, "Explore", "Explore",
        "See what other people have committed to and follow along.",
        commitments=commitments, statuses=statuses,
        **context,
    )


def notifications_page(notifications, errors=None, **context):
    return render_page(
        NOTIFICATIONS_BODY, "Notifications", "Notifications",
        status=400 if errors else 200,
        notifications=notifications, errors=errors,
        **context,
    )


def not_found_page(what, **context):
    return render_page(NOT_FOUND_BODY, "Not found", f"{what} not found", status=404, **context)
