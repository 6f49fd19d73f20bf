"""
Discovery of class timetable pages on the index page.
"""

import re
from urllib.parse import urljoin

import structlog

from .dom import load_document
from .errors import DiscoveryError
from .models import ScheduleSource

logger = structlog.get_logger()

# "3^AINF", "5BINF", "4AINF-B"
CLASS_NAME_PATTERN = re.compile(r'^\d\^?[A-Z]+(?:-[A-Z]+)?$')


def normalize_class_name(link_text: str) -> str:
    """
    Turn a link caption into a class name.

    Examples:
    - "5BINF" -> "5BINF"
    - "4AINF-B" -> "4AINFB"
    """
    name = re.sub(r'\.html$', '', link_text)
    return name.replace('-', '')


def discover_sources(index_html: str, base_url: str) -> list[ScheduleSource]:
    """
    Extract the class timetable links from the index page.

    Only anchors pointing at .html pages whose caption looks like a class
    name are kept.

    Args:
        index_html: Markup of the index page
        base_url: URL the relative links are resolved against

    Returns:
        Sources in document order (duplicates kept)

    Raises:
        DiscoveryError: No link caption looks like a class name
    """
    document = load_document(index_html)
    sources: list[ScheduleSource] = []

    for anchor in document.select("a[href$='.html']"):
        link_text = anchor.text().strip()
        href = anchor.attr("href")
        if not href or not CLASS_NAME_PATTERN.match(link_text):
            continue

        sources.append(ScheduleSource(
            name=normalize_class_name(link_text),
            url=urljoin(base_url, href),
        ))

    if not sources:
        raise DiscoveryError(f"No class links found on index page ({base_url})")

    logger.info("class_links_discovered", count=len(sources))
    return sources
