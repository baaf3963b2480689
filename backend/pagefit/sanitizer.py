"""
HTML Sanitizer - normalize an arbitrary document for single-page capture.

Injects:
    <style data-pagefit-override>   enumerated OVERRIDE_RULES
    <script data-pagefit-fit>       in-page fit routine (see fit.py)

Insertion policy:
    </head> present → style before </head>, script before </body>
                      (appended when there is no </body>)
    otherwise       → style + script prepended (fragment / malformed HTML)

Re-sanitizing is a no-op: previously injected blocks are stripped first.
sanitize() never raises.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Sequence, Union

from .config import PAGE
from .fit import render_fit_script
from .models import Document, SanitizedDocument

logger = logging.getLogger(__name__)

STYLE_MARKER = "data-pagefit-override"
SCRIPT_MARKER = "data-pagefit-fit"


# ---------------------------------------------------------------------------
# Override rules
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class OverrideRule:
    """One named CSS override. Every declaration is emitted with !important."""
    name: str
    selector: str
    declarations: tuple[tuple[str, str], ...]

    def to_css(self) -> str:
        body = " ".join(f"{prop}: {value} !important;" for prop, value in self.declarations)
        return f"{self.selector} {{ {body} }}"


OVERRIDE_RULES: tuple[OverrideRule, ...] = (
    OverrideRule(
        name="page-surface",
        selector="html, body",
        declarations=(
            ("background", "#ffffff"),
            ("padding", "0"),
            ("margin", "0"),
            ("width", f"{PAGE.WIDTH_PX}px"),
            ("overflow", "hidden"),
        ),
    ),
    OverrideRule(
        name="content-wrapper",
        selector=".a4-container",
        declarations=(
            ("box-shadow", "none"),
            ("border-radius", "0"),
            ("border-top", "none"),
            ("max-width", "none"),
            ("width", "100%"),
        ),
    ),
    OverrideRule(
        name="flex-row-lg",
        selector=r".lg\:flex-row",
        declarations=(("flex-direction", "row"),),
    ),
    OverrideRule(
        name="flex-row-md",
        selector=r".md\:flex-row",
        declarations=(("flex-direction", "row"),),
    ),
    OverrideRule(
        name="grid-cols-md",
        selector=r".md\:grid-cols-2",
        declarations=(("grid-template-columns", "repeat(2, minmax(0, 1fr))"),),
    ),
    OverrideRule(
        name="padding-md",
        selector=r".md\:p-10",
        declarations=(("padding", "2.5rem"),),
    ),
    OverrideRule(
        name="no-print",
        selector=".no-print",
        declarations=(("display", "none"),),
    ),
)


def get_rule(name: str) -> OverrideRule:
    for rule in OVERRIDE_RULES:
        if rule.name == name:
            return rule
    raise KeyError(name)


# ---------------------------------------------------------------------------
# Block rendering
# ---------------------------------------------------------------------------

def render_style_block(rules: Iterable[OverrideRule] = OVERRIDE_RULES) -> str:
    css = "\n".join(f"  {rule.to_css()}" for rule in rules)
    return f"<style {STYLE_MARKER}>\n{css}\n</style>"


def render_script_block() -> str:
    return f"<script {SCRIPT_MARKER}>\n{render_fit_script()}\n</script>"


_INJECTED_STYLE_RE = re.compile(
    r"<style\b[^>]*\b" + STYLE_MARKER + r"\b[^>]*>.*?</style\s*>",
    re.IGNORECASE | re.DOTALL,
)
_INJECTED_SCRIPT_RE = re.compile(
    r"<script\b[^>]*\b" + SCRIPT_MARKER + r"\b[^>]*>.*?</script\s*>",
    re.IGNORECASE | re.DOTALL,
)
_HEAD_CLOSE_RE = re.compile(r"</head\s*>", re.IGNORECASE)
_BODY_CLOSE_RE = re.compile(r"</body\s*>", re.IGNORECASE)


def strip_injected(html: str) -> str:
    """Remove blocks injected by a previous sanitize()."""
    html = _INJECTED_STYLE_RE.sub("", html)
    return _INJECTED_SCRIPT_RE.sub("", html)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def sanitize(raw_html: Union[str, bytes, None], rules: Sequence[OverrideRule] = OVERRIDE_RULES) -> str:
    """Return raw_html with the override style block and fit script injected."""
    if raw_html is None:
        raw_html = ""
    elif isinstance(raw_html, bytes):
        raw_html = raw_html.decode("utf-8", errors="replace")

    html = strip_injected(raw_html)
    style = render_style_block(rules)
    script = render_script_block()

    head_close = _HEAD_CLOSE_RE.search(html)
    if head_close is None:
        logger.debug(f"No </head> found, prepending overrides ({len(html)} chars)")
        return style + script + html

    html = html[:head_close.start()] + style + html[head_close.start():]

    body_closes = list(_BODY_CLOSE_RE.finditer(html))
    if not body_closes:
        return html + script
    last = body_closes[-1]
    return html[:last.start()] + script + html[last.start():]


def sanitize_document(document: Document) -> SanitizedDocument:
    return SanitizedDocument(source=document, html=sanitize(document.html))
