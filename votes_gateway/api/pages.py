"""Tiny HTML pages shown when a browser follows an add-on link."""

from __future__ import annotations

from html import escape
from typing import Iterable, Optional, Tuple

_TEMPLATE = """<!doctype html>
<html lang="en">
<head><meta charset="utf-8"><title>{title}</title></head>
<body>
<h1>{title}</h1>
<p>{message}</p>
{links}
</body>
</html>
"""


def render_page(
    title: str,
    message: str,
    links: Optional[Iterable[Tuple[str, str]]] = None,
) -> str:
    """Render a page with a heading, one paragraph and a list of links."""
    items = "".join(
        f'<li><a href="{escape(href, quote=True)}">{escape(label)}</a></li>'
        for label, href in (links or ())
    )
    return _TEMPLATE.format(
        title=escape(title),
        message=escape(message),
        links=f"<ul>{items}</ul>" if items else "",
    )


__all__ = ["render_page"]
