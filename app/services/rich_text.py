"""
Rich text rendering for the survey hints and footer.

Content containing both '<' and '>' is treated as HTML; anything else is
read as a small markdown dialect (headings, '-'/'*' lists, paragraphs,
**bold** and [label](url) links). Either way the result goes through an
allow-list sanitizer before it reaches a page.
"""

import html
import re
from html.parser import HTMLParser
from typing import List, Optional, Tuple

ALLOWED_TAGS = {"strong", "b", "em", "h1", "h2", "h3", "ul", "ol", "li", "p", "br", "a"}
VOID_TAGS = {"br"}
DROP_CONTENT_TAGS = {"script", "style"}

SAFE_URL = re.compile(r"^(mailto:|https?://)", re.IGNORECASE)

HEADING = re.compile(r"^(#{1,3})\s+(.*)$")
LIST_ITEM = re.compile(r"^[-*]\s+(.*)$")
BOLD = re.compile(r"\*\*(.+?)\*\*")
LINK = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")


def is_safe_url(url: str) -> bool:
    return bool(SAFE_URL.match(url.strip()))


def render_rich_text(content: Optional[str]) -> str:
    """Convert hints/footer content into sanitized HTML"""
    trimmed = (content or "").strip()
    if trimmed == "":
        return ""

    if "<" in trimmed and ">" in trimmed:
        source = trimmed
    else:
        source = convert_basic_markdown(trimmed)

    return sanitize_rich_html(source)


def convert_basic_markdown(text: str) -> str:
    parts: List[str] = []
    in_list = False

    for line in text.splitlines():
        line = line.strip()

        if line == "":
            if in_list:
                parts.append("</ul>")
                in_list = False
            continue

        heading = HEADING.match(line)
        if heading:
            if in_list:
                parts.append("</ul>")
                in_list = False
            level = len(heading.group(1))
            parts.append(f"<h{level}>{parse_inline_markdown(heading.group(2))}</h{level}>")
            continue

        item = LIST_ITEM.match(line)
        if item:
            if not in_list:
                parts.append("<ul>")
                in_list = True
            parts.append(f"<li>{parse_inline_markdown(item.group(1))}</li>")
            continue

        if in_list:
            parts.append("</ul>")
            in_list = False

        parts.append(f"<p>{parse_inline_markdown(line)}</p>")

    if in_list:
        parts.append("</ul>")

    return "\n".join(parts)


def parse_inline_markdown(text: str) -> str:
    escaped = html.escape(text, quote=True)
    escaped = BOLD.sub(r"<strong>\1</strong>", escaped)

    def _link(match: re.Match) -> str:
        label, url = match.group(1), match.group(2)
        if not is_safe_url(html.unescape(url)):
            return label
        return f'<a href="{url}">{label}</a>'

    return LINK.sub(_link, escaped)


class _AllowListSanitizer(HTMLParser):
    """Rebuilds markup keeping only allow-listed tags, without attributes.

    <a> keeps a single href when it uses an allowed scheme.
    """

    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.parts: List[str] = []
        self._dropping = 0

    def handle_starttag(self, tag: str, attrs: List[Tuple[str, Optional[str]]]) -> None:
        if tag in DROP_CONTENT_TAGS:
            self._dropping += 1
            return
        if self._dropping or tag not in ALLOWED_TAGS:
            return
        if tag == "a":
            href = next((value for name, value in attrs if name == "href" and value), None)
            if href is not None and is_safe_url(href):
                self.parts.append(f'<a href="{html.escape(href.strip(), quote=True)}">')
            else:
                self.parts.append("<a>")
            return
        self.parts.append(f"<{tag}>")

    def handle_startendtag(self, tag: str, attrs: List[Tuple[str, Optional[str]]]) -> None:
        if tag in VOID_TAGS and not self._dropping:
            self.parts.append(f"<{tag}>")
        elif tag not in DROP_CONTENT_TAGS:
            self.handle_starttag(tag, attrs)
            if tag in ALLOWED_TAGS and tag not in VOID_TAGS and not self._dropping:
                self.handle_endtag(tag)

    def handle_endtag(self, tag: str) -> None:
        if tag in DROP_CONTENT_TAGS:
            self._dropping = max(0, self._dropping - 1)
            return
        if self._dropping or tag not in ALLOWED_TAGS or tag in VOID_TAGS:
            return
        self.parts.append(f"</{tag}>")

    def handle_data(self, data: str) -> None:
        if not self._dropping:
            self.parts.append(html.escape(data, quote=False))

    def result(self) -> str:
        return "".join(self.parts)


def sanitize_rich_html(markup: str) -> str:
    """Strip every tag outside the allow-list, and every attribute except a safe <a href>"""
    sanitizer = _AllowListSanitizer()
    sanitizer.feed(markup)
    sanitizer.close()
    return sanitizer.result()
