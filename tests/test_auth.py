import pytest

from app.spahtmx import create_app
from app.spahtmx.domain import User
from app.spahtmx.errors import UnauthorizedError

HTMX = {"HX-Request": "true"}
COOKIE = "spahtmx_user"


@pytest.fixture()
def app(tmp_path, monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "test-secret")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path/'test.db'}")
    monkeypatch.setenv("ENV", "test")
    monkeypatch.setenv("STORE_BACKEND", "sql")
    monkeypatch.setenv("SEED_DB", "true")
    for k in ("PRIZE_SEED_PATH", "AUTH_COOKIE_NAME", "SESSION_MAX_AGE", "DEBUG_SQL"):
        monkeypatch.delenv(k, raising=False)
    return create_app()


@pytest.fixture()
def auth(app):
    return app.extensions["spahtmx_services"].auth


@pytest.fixture()
def client(app):
    return app.test_client()


def test_login_returns_matching_user(auth):
    user = auth.login("alice", "password")
    assert user.username == "alice"
    assert user.email == "alice@fake.com"


def test_login_wrong_password(auth):
    with pytest.raises(UnauthorizedError):
        auth.login("alice", "wrong")


def test_login_unknown_user(auth):
    with pytest.raises(UnauthorizedError):
        auth.login("mallory", "password")


@pytest.mark.parametrize("username,password", [("", "password"), ("alice", "")])
def test_login_missing_credentials(auth, username, password):
    with pytest.raises(UnauthorizedError):
        auth.login(username, password)


def test_login_user_without_password_hash(app, auth):
    app.extensions["spahtmx_services"].users.create_user(User(id="", username="nopass", email="n@fake.com"))
    with pytest.raises(UnauthorizedError):
        auth.login("nopass", "")
    with pytest.raises(UnauthorizedError):
        auth.login("nopass", "anything")


def test_stored_password_is_hashed(auth):
    user = auth.login("bob", "password")
    assert user.password_hash
    assert user.password_hash != "password"


def test_hash_password_roundtrip(auth, app):
    users = app.extensions["spahtmx_services"].users
    users.create_user(User(id="", username="erin", email="erin@fake.com", password_hash=auth.hash_password("s3cret")))
    assert auth.login("erin", "s3cret").username == "erin"


def test_login_sets_username_cookie(client):
    r = client.post("/login", data={"username": "alice", "password": "password"})
    assert r.status_code == 303
    set_cookie = r.headers["Set-Cookie"]
    assert set_cookie.startswith(f"{COOKIE}=alice")
    assert "HttpOnly" in set_cookie
    assert "Max-Age=28800" in set_cookie
    assert client.get_cookie(COOKIE).value == "alice"


def test_login_failure_renders_form_with_401(client):
    r = client.post("/login", data={"username": "alice", "password": "nope"})
    assert r.status_code == 401
    body = r.get_data(as_text=True)
    assert "Invalid username or password." in body
    assert 'value="alice"' in body
    assert client.get_cookie(COOKIE) is None


def test_login_htmx_uses_hx_redirect(client):
    r = client.post("/login", data={"username": "alice", "password": "password"}, headers=HTMX)
    assert r.status_code == 200
    assert r.headers["HX-Redirect"] == "/admin"


def test_admin_htmx_redirects_to_login(client):
    r = client.get("/admin", headers=HTMX)
    assert r.status_code == 200
    assert r.headers["HX-Redirect"] == "/login"


def test_unknown_cookie_user_is_anonymous(client):
    client.set_cookie(COOKIE, "ghost")
    r = client.get("/admin")
    assert r.status_code == 303


def test_nav_shows_current_user(client):
    client.post("/login", data={"username": "charlie", "password": "password"})
    body = client.get("/", headers=HTMX).get_data(as_text=True)
    assert 'class="nav-user">charlie<' in body
    assert "Log out" in body


def test_logout_clears_cookie(client):
    client.post("/login", data={"username": "alice", "password": "password"})
    assert client.get("/admin").status_code == 200

    r = client.post("/logout")
    assert r.status_code == 303
    assert r.headers["Location"].endswith("/")
    assert client.get_cookie(COOKIE) is None
    assert client.get("/admin").status_code == 303


def test_custom_cookie_name(tmp_path, monkeypatch):
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path/'other.db'}")
    monkeypatch.setenv("STORE_BACKEND", "sql")
    monkeypatch.setenv("SEED_DB", "true")
    monkeypatch.setenv("AUTH_COOKIE_NAME", "who")
    monkeypatch.setenv("SESSION_MAX_AGE", "60")
    client = create_app().test_client()
    r = client.post("/login", data={"username": "bob", "password": "password"})
    assert r.headers["Set-Cookie"].startswith("who=bob")
    assert "Max-Age=60" in r.headers["Set-Cookie"]
