from flask import Blueprint

from app.spahtmx.rendering import render_page

bp = Blueprint("routes", __name__)


@bp.get("/")
def index():
    return render_page("/", "index.html")


@bp.get("/about")
def about():
    return render_page("/about", "about.html")


@bp.get("/status")
def status():
    """Health check. No DB access."""
    return {"status": "ok"}
