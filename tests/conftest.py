import pytest

from redweb import create_app
from redweb.store import USERS


@pytest.fixture
def app(tmp_path):
    app = create_app("testing", DATA_DIR=str(tmp_path / "data"))
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def store(app):
    return app.extensions["record_store"]


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def signup(client):
    """Sign up a user and return its token, stored fields and auth headers."""
    def _signup(email, password="secret1", **extra):
        payload = {
            "email": email,
            "password": password,
            "firstName": extra.pop("firstName", "Test"),
            "lastName": extra.pop("lastName", "User"),
            "bloodGroup": extra.pop("bloodGroup", "O+"),
            "city": "Pune",
        }
        payload.update(extra)
        resp = client.post("/api/auth/signup", json=payload)
        assert resp.status_code == 201, resp.get_json()
        body = resp.get_json()
        return {
            "token": body["token"],
            "user": body["user"],
            "id": body["user"]["id"],
            "headers": bearer(body["token"]),
        }
    return _signup


@pytest.fixture
def set_role(store):
    def _set_role(user_id, role):
        users = store.load(USERS)
        for user in users:
            if user["id"] == user_id:
                user["role"] = role
        assert store.save(USERS, users)
    return _set_role


@pytest.fixture
def admin(signup, set_role):
    account = signup("admin@example.com", firstName="Ada", lastName="Admin")
    set_role(account["id"], "admin")
    return account


@pytest.fixture
def alice(signup):
    return signup("alice@example.com", firstName="Alice", lastName="Anders", bloodGroup="A+")


@pytest.fixture
def bob(signup):
    return signup("bob@example.com", firstName="Bob", lastName="Brown", bloodGroup="A+")
