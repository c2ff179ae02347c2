"""
Minimal server-rendered HTML pages.

Every interpolated value goes through html.escape.
"""

from __future__ import annotations

import html

from fastapi.responses import HTMLResponse

PAGE_STYLE = (
    "body{font-family:system-ui,sans-serif;max-width:40rem;margin:2rem auto;padding:0 1rem}"
    "table{border-collapse:collapse}td,th{padding:.25rem .75rem;text-align:left}"
)


def render_page(title: str, body_html: str) -> str:
    """Wrap pre-escaped body HTML in a page shell."""
    return (
        "<!DOCTYPE html>"
        '<html lang="en"><head><meta charset="utf-8" />'
        '<meta name="viewport" content="width=device-width, initial-scale=1" />'
        f"<title>{html.escape(title)}</title>"
        f"<style>{PAGE_STYLE}</style>"
        f"</head><body>{body_html}</body></html>"
    )


def message_page(title: str, message: str, status_code: int = 200) -> HTMLResponse:
    body = f"<h1>{html.escape(title)}</h1><p>{html.escape(message)}</p>"
    return HTMLResponse(render_page(title, body), status_code=status_code)
