"""XML building blocks shared by the sitemap builders.

Free text (titles, keywords, captions) goes through :class:`CDataText` so that
every builder embeds it the same way: inside a CDATA section when that is
safe, and as ordinary entity-escaped text when the value itself contains the
CDATA terminator ``]]>``.  Either form parses back to the original string.
"""

import re
from datetime import date, datetime, timezone
from typing import Optional, Union

from lxml import etree

from newsmap.models.article import as_utc

SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"
NEWS_NS = "http://www.google.com/schemas/sitemap-news/0.9"
IMAGE_NS = "http://www.google.com/schemas/sitemap-image/1.1"

_CDATA_END = "]]>"

# Characters XML 1.0 does not allow anywhere, CDATA sections included
_ILLEGAL_XML_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")


def strip_illegal_chars(text: str) -> str:
    return _ILLEGAL_XML_CHARS.sub("", text)


class CDataText:
    """An opaque text value destined for a CDATA section."""

    __slots__ = ("value",)

    def __init__(self, value: Optional[str]) -> None:
        self.value = strip_illegal_chars(value or "")

    def node_text(self) -> Union[str, etree.CDATA]:
        if _CDATA_END in self.value:
            # A CDATA section cannot contain its own terminator; plain text is
            # escaped by the serializer and reads back identically.
            return self.value
        return etree.CDATA(self.value)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, CDataText) and other.value == self.value

    def __repr__(self) -> str:
        return f"CDataText({self.value!r})"


TextValue = Union[str, CDataText]


def qname(namespace: str, tag: str) -> str:
    return f"{{{namespace}}}{tag}"


def sub_element(parent: etree._Element, tag: str, text: Optional[TextValue] = None) -> etree._Element:
    """Append a child *tag* to *parent*, optionally with text content."""
    element = etree.SubElement(parent, tag)
    if isinstance(text, CDataText):
        element.text = text.node_text()
    elif text is not None:
        element.text = strip_illegal_chars(text)
    return element


def serialize(root: etree._Element) -> bytes:
    """Serialize *root* as an indented UTF-8 document with an XML declaration."""
    return etree.tostring(root, xml_declaration=True, encoding="UTF-8", pretty_print=True)


def format_date(value: Union[date, datetime]) -> str:
    """``YYYY-MM-DD`` for *value*; datetimes are converted to UTC first."""
    if isinstance(value, datetime):
        return as_utc(value).astimezone(timezone.utc).date().isoformat()
    return value.isoformat()


def format_datetime(value: datetime) -> str:
    """Full ISO-8601 timestamp in UTC with millisecond precision, e.g. ``2024-05-01T08:30:00.000Z``."""
    utc = as_utc(value).astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def format_priority(value: float) -> str:
    """Up to two decimals, never fewer than one: ``1.0``, ``0.8``, ``0.75``."""
    text = f"{value:.2f}".rstrip("0")
    return text + "0" if text.endswith(".") else text
