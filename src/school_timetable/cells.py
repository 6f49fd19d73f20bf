"""
Cell decomposition: one timetable cell -> ordered list of text tokens.

A cell holds zero or more <p> elements. Paragraphs whose text is empty once
normalized (typically a lone "&nbsp;") carry nothing; a cell with no other
paragraph is an empty slot.
"""

from .dom import HtmlElement, TextNode
from .models import ExtractionMode
from .utils import normalize_text


def content_paragraphs(cell: HtmlElement) -> list[HtmlElement]:
    """Paragraphs of the cell with non-empty text."""
    return [p for p in cell.select("p") if normalize_text(p.text())]


def _link_aware_tokens(element: HtmlElement) -> list[str]:
    """
    Tokens of one paragraph: each link is a token, each text run is a token.

    Inline wrappers (<span>, <font>, <b>...) are walked so that the links and
    text runs inside them keep their own tokens.
    """
    tokens: list[str] = []
    for child in element.children():
        if isinstance(child, TextNode):
            text = normalize_text(child.text)
            if text:
                tokens.append(text)
        elif child.name == "a":
            text = normalize_text(child.text())
            if text:
                tokens.append(text)
        else:
            tokens.extend(_link_aware_tokens(child))
    return tokens


def decompose_cell(cell: HtmlElement, mode: ExtractionMode = ExtractionMode.LINKS) -> list[str]:
    """
    Extract the ordered tokens of a cell.

    Args:
        cell: The <td> element
        mode: FLAT gives one token per paragraph, LINKS splits paragraphs
            on links and text runs

    Returns:
        Tokens in document order, [] for an empty slot
    """
    tokens: list[str] = []
    for paragraph in content_paragraphs(cell):
        if mode is ExtractionMode.FLAT:
            tokens.append(normalize_text(paragraph.text()))
        else:
            tokens.extend(_link_aware_tokens(paragraph))
    return tokens
