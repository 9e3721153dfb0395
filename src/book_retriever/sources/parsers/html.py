"""BeautifulSoup helpers for scraped product pages."""
from __future__ import annotations

from bs4 import BeautifulSoup, Tag


def parse_html(document: str) -> BeautifulSoup:
    return BeautifulSoup(document, "html.parser")


def inner_text(node: Tag | None) -> str:
    """Text of a node with whitespace collapsed; empty string for None."""
    if node is None:
        return ""
    return " ".join(node.get_text(" ", strip=True).split())


def meta_content(soup: BeautifulSoup, prop: str) -> str | None:
    """Content of ``<meta property=prop>`` (or ``name=prop``), None when absent or empty."""
    meta = soup.find("meta", attrs={"property": prop}) or soup.find("meta", attrs={"name": prop})
    if not isinstance(meta, Tag):
        return None
    content = meta.get("content")
    return content or None


def itemprop(soup: BeautifulSoup, name: str, tag: str | None = None) -> Tag | None:
    node = soup.find(tag, attrs={"itemprop": name}) if tag else soup.find(attrs={"itemprop": name})
    return node if isinstance(node, Tag) else None


def two_cell_rows(soup: BeautifulSoup) -> dict[str, str]:
    """Label/value pairs from every table row holding exactly two cells."""
    pairs: dict[str, str] = {}
    for row in soup.find_all("tr"):
        cells = row.find_all("td")
        if len(cells) != 2:
            continue
        pairs[inner_text(cells[0])] = inner_text(cells[1])
    return pairs
