"""Split a generated answer into titled sections and render its quote markup."""

from __future__ import annotations

import re

from plates_search.models import TopicSection

_LEADING_STRAY_CHAR = re.compile(r"^[a-zA-Z]\s+")
_EXCESS_NEWLINES = re.compile(r"\n{3,}")
_SECTION_BOUNDARY = re.compile(r"(?:^|\n)(?=### .+)")
_HEADING = re.compile(r"^### (.*?)(?:\n|\Z)")
_HEADING_LINE = re.compile(r"^### .+", re.MULTILINE)

# <quote>text<source>src</source></quote>
_TAGGED_QUOTE = re.compile(r"<quote>([\s\S]*?)<source>([\s\S]*?)</source></quote>")
# <quote source="src">text</quote>
_ATTR_QUOTE = re.compile(r'<quote source="([^"]*)">([\s\S]*?)</quote>')
# A run of "> " lines, optionally followed by a "[Source]" line
_BLOCK_QUOTE = re.compile(r"(^|\n)>[ \t]*([\s\S]*?)(?:\n\[([^\]\n]+)\])?(?=\n\n|\n[^>]|\Z)")
_BLOCK_QUOTE_MARKER = re.compile(r"\n>[ \t]?")


def quote_block(text: str, source: str | None = None) -> str:
    html = '<div class="quote-container">'
    if source:
        html += f'<div class="quote-source">{source}</div>'
    html += f'<div class="quote-text">{text}</div></div>'
    return html


def _render_block_quote(match: re.Match) -> str:
    lead, text, source = match.group(1), match.group(2), match.group(3)
    text = _BLOCK_QUOTE_MARKER.sub("\n", text.strip())
    return lead + quote_block(text, source.strip() if source else None)


def render_quotes(content: str) -> str:
    """Rewrite tagged and block-quote notations into quote container markup.

    Unterminated or otherwise malformed tags do not match and stay as literal text.
    """
    content = _TAGGED_QUOTE.sub(lambda m: quote_block(m.group(1).strip(), m.group(2).strip()), content)
    content = _ATTR_QUOTE.sub(lambda m: quote_block(m.group(2).strip(), m.group(1).strip()), content)
    return _BLOCK_QUOTE.sub(_render_block_quote, content)


def normalize_content(content: str) -> str:
    content = content.strip()
    content = _LEADING_STRAY_CHAR.sub("", content, count=1)
    return _EXCESS_NEWLINES.sub("\n\n", content)


def _title_key(title: str) -> str:
    return " ".join(title.lower().split())


def count_headings(content: str) -> int:
    return len(_HEADING_LINE.findall(content))


def organize_topics(content: str) -> list[TopicSection]:
    """Split *content* at ``### `` headings into deduplicated sections.

    Sections without a heading are dropped, as is any section whose title
    repeats an earlier one ignoring case and whitespace. Returns ``[]`` for
    empty or non-string input, or when there are no headings at all.
    """
    if not content or not isinstance(content, str):
        return []

    content = normalize_content(content)
    raw_sections = _SECTION_BOUNDARY.split(content)

    seen: set[str] = set()
    sections: list[TopicSection] = []
    for raw in raw_sections:
        match = _HEADING.match(raw)
        if not match:
            continue
        title = match.group(1).strip()
        key = _title_key(title)
        if not key:
            continue
        if key in seen:
            print(f"[organize] duplicate title {title!r}, skipping")
            continue
        seen.add(key)

        body = raw[match.end():].strip()
        sections.append(
            TopicSection(id=f"topic-{len(sections) + 1}", title=title, content=render_quotes(body))
        )

    print(f"[organize] raw_sections={len(raw_sections)} kept={len(sections)}")
    return sections
