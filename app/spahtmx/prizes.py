from __future__ import annotations

from flask import Blueprint, render_template, request

from app.spahtmx.rendering import htmx_target, is_htmx, render_page
from app.spahtmx.service import services

bp = Blueprint("prizes", __name__)

PRIZE_PAGE = "/prize"
PRIZE_LIST_TARGET = "prize-list"


@bp.get("/prize")
def prize_page():
    svc = services().prizes
    category = (request.args.get("category") or "").strip()
    year = (request.args.get("year") or "").strip()

    prizes = svc.find_prizes(category=category, year=year)

    # Filter form swaps just the list.
    if is_htmx() and htmx_target() == PRIZE_LIST_TARGET:
        return render_template("prize_list.html", prizes=prizes)

    return render_page(
        PRIZE_PAGE,
        "prize.html",
        prizes=prizes,
        categories=svc.get_categories(),
        years=svc.get_years(),
        selected_category=category,
        selected_year=year,
    )
