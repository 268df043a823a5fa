from __future__ import annotations

from flask import g, render_template, request

HTMX_HEADER = "HX-Request"


def is_htmx() -> bool:
    return request.headers.get(HTMX_HEADER, "").lower() == "true"


def htmx_target() -> str:
    return (request.headers.get("HX-Target") or "").strip()


def render_page(page: str, template: str, status: int = 200, **context):
    """
    Render ``template`` as nav + content for HTMX requests, or wrapped in the
    full page shell otherwise. ``page`` is the route the nav marks as active.
    """
    shell = "fragment.html" if is_htmx() else "base.html"
    html = render_template(
        shell,
        page=page,
        content_template=template,
        current_user=getattr(g, "current_user", None),
        **context,
    )
    return html, status
