"""RSS/Atom feed parsing."""

from __future__ import annotations

from dataclasses import dataclass
from xml.etree.ElementTree import Element, ParseError  # nosec B405 - only used for types; parsing goes through defusedxml

import defusedxml.ElementTree as ET  # noqa: N817
from defusedxml import DefusedXmlException

from rssdd.utils.exceptions import FeedError


@dataclass(frozen=True)
class FeedItem:
    """A single entry of a feed."""

    title: str
    link: str


def _local(tag: str) -> str:
    """Strip an XML namespace from a tag name."""
    return tag.rsplit("}", 1)[-1]


def _child_text(element: Element, name: str) -> str:
    for child in element:
        if _local(child.tag) == name:
            return (child.text or "").strip()
    return ""


def _atom_link(entry: Element) -> str:
    fallback = ""
    for child in entry:
        if _local(child.tag) != "link":
            continue
        href = child.get("href", "").strip()
        rel = child.get("rel", "alternate")
        if rel == "enclosure" and href:
            return href
        if href and not fallback:
            fallback = href
    return fallback


def parse_feed(content: bytes) -> list[FeedItem]:
    """Parse RSS 2.0 ``<item>`` and Atom ``<entry>`` elements.

    The document encoding is taken from the XML declaration.

    Raises:
        FeedError: If the document is not well-formed or is unsafe to parse

    """
    try:
        root = ET.fromstring(content)
    except (ParseError, DefusedXmlException) as e:
        msg = f"Failed to parse feed: {e}"
        raise FeedError(msg) from e

    items: list[FeedItem] = []
    for element in root.iter():
        tag = _local(element.tag) if isinstance(element.tag, str) else ""
        if tag == "item":
            link = _child_text(element, "link")
            if not link:
                enclosure = next(
                    (c for c in element if _local(c.tag) == "enclosure"), None
                )
                link = enclosure.get("url", "").strip() if enclosure is not None else ""
            items.append(FeedItem(title=_child_text(element, "title"), link=link))
        elif tag == "entry":
            items.append(
                FeedItem(title=_child_text(element, "title"), link=_atom_link(element))
            )
    return [item for item in items if item.link]
