"""HTML renderer — converts a styled document to a highlighted HTML page."""

from __future__ import annotations

import html

from papylex.document import Document
from papylex.properties import PropertyRegistry
from papylex.styles import STYLE_HOTSPOTS, Style


def css_class(style: Style) -> str:
    """CSS class name of a style, e.g. FOLD_OPEN -> fold-open."""
    return style.name.lower().replace("_", "-")


def render(document: Document, properties: PropertyRegistry, title: str = "") -> str:
    """Render a lexed document to a complete HTML document.

    Each source line becomes a ``<span id="L<n>">`` anchor; property
    occurrences link to the anchor of their declaration line.
    """
    parts: list[str] = ["<!DOCTYPE html>\n", "<html>\n", "<head>\n"]
    parts.append('<meta charset="utf-8">\n')
    if title:
        parts.append(f"<title>{_escape_html(title)}</title>\n")
    parts.append("</head>\n")
    parts.append("<body>\n")
    parts.append('<pre class="papyrus">\n')
    for line in range(document.line_count):
        parts.append(_render_line(document, properties, line))
        parts.append("\n")
    parts.append("</pre>\n")
    parts.append("</body>\n")
    parts.append("</html>\n")

    return "".join(parts)


def _render_line(document: Document, properties: PropertyRegistry, line: int) -> str:
    result: list[str] = [f'<span id="L{line + 1}">']
    for start, end, style in document.style_runs(line):
        text = _escape_html(document.text_range(start, end))
        if style == Style.DEFAULT:
            result.append(text)
            continue
        cls = css_class(style)
        if style in STYLE_HOTSPOTS:
            record = properties.lookup(document.text_range(start, end))
            if record is not None:
                result.append(f'<a class="{cls}" href="#L{record.line + 1}">{text}</a>')
                continue
        result.append(f'<span class="{cls}">{text}</span>')
    result.append("</span>")
    return "".join(result)


# ---------------------------------------------------------------------------
# HTML escaping
# ---------------------------------------------------------------------------


def _escape_html(text: str) -> str:
    """Escape text for HTML body content, writing non-ASCII as character references."""
    return html.escape(text, quote=False).encode("ascii", "xmlcharrefreplace").decode("ascii")
