"""
Narrow HTML access layer over BeautifulSoup.

The parsing components only need to select elements, read text and
attributes, and walk child nodes telling text apart from elements.
"""

from dataclasses import dataclass
from typing import Iterator, Optional, Union

from bs4 import BeautifulSoup, Tag  # type: ignore[import]
from bs4.element import NavigableString, PreformattedString  # type: ignore[import]


@dataclass(frozen=True)
class TextNode:
    """A bare text run between elements."""
    text: str


class HtmlElement:
    """Read-only view of one element of a parsed document."""

    __slots__ = ("_tag",)

    def __init__(self, tag: Tag):
        self._tag = tag

    @property
    def name(self) -> str:
        return self._tag.name or ""

    def select(self, selector: str) -> list["HtmlElement"]:
        return [HtmlElement(tag) for tag in self._tag.select(selector)]

    def select_one(self, selector: str) -> Optional["HtmlElement"]:
        tag = self._tag.select_one(selector)
        return HtmlElement(tag) if tag is not None else None

    def find_all(self, name: str) -> list["HtmlElement"]:
        """Direct children with the given tag name."""
        return [HtmlElement(tag) for tag in self._tag.find_all(name, recursive=False)]

    def text(self) -> str:
        return self._tag.get_text()

    def attr(self, name: str, default: Optional[str] = None) -> Optional[str]:
        value = self._tag.get(name)
        if value is None:
            return default
        # Multi-valued attributes (class) come back as lists
        if isinstance(value, list):
            return " ".join(value)
        return value

    def children(self) -> Iterator[Union["HtmlElement", TextNode]]:
        """Child nodes in document order; comments and doctypes are skipped."""
        for child in self._tag.children:
            if isinstance(child, Tag):
                yield HtmlElement(child)
            elif isinstance(child, NavigableString) and not isinstance(child, PreformattedString):
                yield TextNode(str(child))

    def __repr__(self) -> str:
        return f"HtmlElement(<{self.name}>)"


def load_document(html: str) -> HtmlElement:
    """Parse markup into the root element of the document."""
    return HtmlElement(BeautifulSoup(html, "html.parser"))


def load_fragment(html: str, selector: str) -> HtmlElement:
    """
    Parse markup and return the first element matching selector.

    Raises:
        ValueError: If nothing matches
    """
    element = load_document(html).select_one(selector)
    if element is None:
        raise ValueError(f"No element matches {selector!r}")
    return element
