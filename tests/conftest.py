import pytest
from werkzeug.security import generate_password_hash

import db
import store
from app import create_app

PASSWORD = "password123"


@pytest.fixture
def app(tmp_path):
    return create_app({
        "TESTING": True,
        "SECRET_KEY": "test",
        "DATABASE_PATH": str(tmp_path / "test.db"),
        "SEED_DEMO_DATA": False,
    })


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def conn(app):
    connection = db.connect(app.config["DATABASE_PATH"])
    yield connection
    connection.close()


@pytest.fixture
def make_user(conn):
    def _make_user(email, first_name="Test", last_name="User"):
        return store.create_user(conn, email, first_name, last_name, generate_password_hash(PASSWORD))
    return _make_user


@pytest.fixture
def login(client):
    def _login(email):
        return client.post("/", data={"action": "login", "email": email, "password": PASSWORD})
    return _login
