"""RSS 2.0 feed assembly for a directory of documents."""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, date, datetime, time
from email.utils import format_datetime
from xml.etree import ElementTree as ET

from mdserve.core.listing import DocumentMetadataEntry, sort_key

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'

CONTENT_TYPE = "application/rss+xml"


@dataclass(frozen=True)
class FeedItem:
    """One <item> of a feed."""

    title: str
    link: str
    guid: str
    description: str | None
    pub_date: date | None
    is_permalink: bool = False

    @classmethod
    def from_entry(cls, entry: DocumentMetadataEntry, base_url: str | None) -> "FeedItem":
        link = absolute_link(entry.url_path, base_url)
        return cls(
            title=entry.front_matter.title or entry.display_name,
            link=link,
            guid=link,
            description=entry.front_matter.summary,
            pub_date=entry.front_matter.date,
            is_permalink=is_absolute_base(base_url),
        )


def is_absolute_base(base_url: str | None) -> bool:
    return bool(base_url) and base_url.startswith(("http://", "https://"))


def absolute_link(url_path: str, base_url: str | None) -> str:
    """Prefix a root-relative path with the base URL when it is absolute."""
    if not is_absolute_base(base_url):
        return url_path
    return base_url.rstrip("/") + url_path


def rfc822(value: date) -> str:
    """Format a date as RFC-822 at midnight UTC."""
    return format_datetime(datetime.combine(value, time(), tzinfo=UTC))


def build_feed(
    title: str,
    link: str,
    description: str,
    entries: Iterable[DocumentMetadataEntry],
    base_url: str | None = None,
) -> str:
    """Build an RSS 2.0 document.

    Items are ordered by date descending; documents sharing a date are
    ordered by file name.

    Args:
        title: Channel title
        link: Channel link, root-relative (made absolute with base_url)
        description: Channel description
        entries: Fully inferred documents of the directory
        base_url: Absolute origin such as "https://example.com". Without it
            links and guids stay root-relative.

    Returns:
        Feed XML with declaration
    """
    rss = ET.Element("rss", {"version": "2.0"})
    channel = ET.SubElement(rss, "channel")
    ET.SubElement(channel, "title").text = title
    ET.SubElement(channel, "link").text = absolute_link(link, base_url)
    ET.SubElement(channel, "description").text = description

    for entry in sorted(entries, key=sort_key):
        _add_item(channel, FeedItem.from_entry(entry, base_url))

    ET.indent(rss, space="  ")
    return XML_DECLARATION + ET.tostring(rss, encoding="unicode") + "\n"


def _add_item(channel: ET.Element, item: FeedItem) -> None:
    element = ET.SubElement(channel, "item")
    ET.SubElement(element, "title").text = item.title
    ET.SubElement(element, "link").text = item.link
    ET.SubElement(
        element, "guid", {"isPermaLink": "true" if item.is_permalink else "false"}
    ).text = item.guid
    ET.SubElement(element, "description").text = item.description or ""
    if item.pub_date is not None:
        ET.SubElement(element, "pubDate").text = rfc822(item.pub_date)
