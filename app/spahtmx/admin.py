from __future__ import annotations

from flask import Blueprint, render_template

from app.spahtmx.auth import login_required
from app.spahtmx.rendering import render_page
from app.spahtmx.service import services

bp = Blueprint("admin", __name__)

ADMIN_PAGE = "/admin"


@bp.get("/admin")
@login_required
def index():
    svc = services().users
    users = svc.get_users()
    return render_page(
        ADMIN_PAGE,
        "admin.html",
        users=users,
        user_count=svc.count_users(),
        active_count=sum(1 for u in users if u.status),
    )


@bp.post("/api/switch/<user_id>")
@login_required
def switch_status(user_id: str):
    svc = services().users
    svc.update_user_status(user_id)
    # Only the list is swapped in place; no nav, no page shell.
    return render_template("user_list.html", users=svc.get_users())
