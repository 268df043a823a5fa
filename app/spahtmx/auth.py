from __future__ import annotations

from collections.abc import Callable
from functools import wraps
from typing import Any

from flask import Blueprint, current_app, g, make_response, redirect, request, url_for

from app.spahtmx.errors import UnauthorizedError
from app.spahtmx.rendering import is_htmx, render_page
from app.spahtmx.service import services

bp = Blueprint("auth", __name__)

LOGIN_PAGE = "/login"


def _cookie_name() -> str:
    return current_app.config.get("AUTH_COOKIE_NAME") or "spahtmx_user"


def load_current_user() -> None:
    """
    Resolves g.current_user from the login cookie (plain username, unsigned).
    """
    if request.path.startswith(("/static/", "/status")):
        g.current_user = None
        return
    username = (request.cookies.get(_cookie_name()) or "").strip()
    g.current_user = services().auth.current_user(username) if username else None


def _redirect(location: str, code: int = 303):
    # HTMX follows HX-Redirect client-side instead of swapping a redirect body.
    if is_htmx():
        resp = make_response("", 200)
        resp.headers["HX-Redirect"] = location
        return resp
    return redirect(location, code=code)


def login_required(fn: Callable[..., Any]) -> Callable[..., Any]:
    @wraps(fn)
    def wrapped(*args: Any, **kwargs: Any):
        if getattr(g, "current_user", None) is None:
            return _redirect(url_for("auth.login_get"))
        return fn(*args, **kwargs)

    return wrapped


@bp.get("/login")
def login_get():
    return render_page(LOGIN_PAGE, "login.html", username="", error=None)


@bp.post("/login")
def login_post():
    username = (request.form.get("username") or "").strip()
    password = request.form.get("password") or ""

    try:
        user = services().auth.login(username, password)
    except UnauthorizedError as e:
        current_app.logger.warning("Login failed (username=%s): %s", username, e)
        return render_page(
            LOGIN_PAGE,
            "login.html",
            status=UnauthorizedError.status_code,
            username=username,
            error=UnauthorizedError.public_message,
        )

    current_app.logger.info("Login ok (username=%s)", user.username)
    resp = _redirect(url_for("admin.index"))
    resp.set_cookie(
        _cookie_name(),
        user.username,
        max_age=int(current_app.config.get("SESSION_MAX_AGE") or 0) or None,
        httponly=True,
        samesite="Lax",
        secure=bool(current_app.config.get("AUTH_COOKIE_SECURE")),
    )
    return resp


@bp.post("/logout")
def logout():
    user = getattr(g, "current_user", None)
    if user:
        current_app.logger.info("Logout (username=%s)", user.username)
    resp = _redirect(url_for("routes.index"))
    resp.delete_cookie(_cookie_name())
    return resp
