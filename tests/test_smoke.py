import gzip

import pytest

from app.spahtmx import create_app

HTMX = {"HX-Request": "true"}


@pytest.fixture()
def client(tmp_path, monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "test-secret")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path/'test.db'}")
    monkeypatch.setenv("ENV", "test")
    monkeypatch.setenv("STORE_BACKEND", "sql")
    monkeypatch.setenv("SEED_DB", "true")
    for k in ("PRIZE_SEED_PATH", "AUTH_COOKIE_NAME", "SESSION_MAX_AGE", "DEBUG_SQL"):
        monkeypatch.delenv(k, raising=False)

    app = create_app()
    return app.test_client()


def _login(client, username="alice", password="password"):
    return client.post("/login", data={"username": username, "password": password}, follow_redirects=False)


def test_status_ok(client):
    r = client.get("/status")
    assert r.status_code == 200
    assert r.json == {"status": "ok"}


@pytest.mark.parametrize("path", ["/", "/about", "/prize", "/login"])
def test_full_page_without_htmx_header(client, path):
    r = client.get(path)
    assert r.status_code == 200
    body = r.get_data(as_text=True)
    assert body.lstrip().lower().startswith("<!doctype html>")
    assert 'id="content"' in body
    assert 'class="nav"' in body


@pytest.mark.parametrize("path", ["/", "/about", "/prize", "/login"])
def test_fragment_with_htmx_header(client, path):
    r = client.get(path, headers=HTMX)
    assert r.status_code == 200
    body = r.get_data(as_text=True)
    assert "<!doctype" not in body.lower()
    assert "<html" not in body
    assert 'id="content"' not in body
    assert 'class="nav"' in body


def test_nav_marks_active_page(client):
    body = client.get("/about", headers=HTMX).get_data(as_text=True)
    assert 'class="nav-link active" href="/about"' in body
    assert 'class="nav-link active" href="/"' not in body


def test_static_assets_served(client):
    r = client.get("/static/app.css")
    assert r.status_code == 200
    assert b".nav" in r.data


def test_unknown_route_is_404(client):
    r = client.get("/nope")
    assert r.status_code == 404
    assert b"Page not found." in r.data


def test_login_and_admin_access(client):
    # Anonymous is sent to the login page
    r = client.get("/admin")
    assert r.status_code == 303
    assert r.headers["Location"].endswith("/login")

    r = _login(client)
    assert r.status_code == 303
    assert r.headers["Location"].endswith("/admin")

    r = client.get("/admin")
    assert r.status_code == 200
    body = r.get_data(as_text=True)
    for username in ("alice", "bob", "charlie"):
        assert username in body
    assert 'id="user-list"' in body


def test_admin_fragment_with_htmx_header(client):
    _login(client)
    r = client.get("/admin", headers=HTMX)
    assert r.status_code == 200
    body = r.get_data(as_text=True)
    assert "<html" not in body
    assert 'id="user-list"' in body


def test_responses_are_gzipped_when_accepted(client):
    r = client.get("/prize", headers={"Accept-Encoding": "gzip"})
    assert r.status_code == 200
    assert r.headers["Content-Encoding"] == "gzip"
    assert "Accept-Encoding" in r.headers.get("Vary", "")
    body = gzip.decompress(r.data).decode("utf-8")
    assert "12 prizes" in body


def test_responses_are_plain_without_accept_encoding(client):
    r = client.get("/prize")
    assert "Content-Encoding" not in r.headers
    assert "12 prizes" in r.get_data(as_text=True)
