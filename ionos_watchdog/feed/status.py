"""
Status Feed Analyzer

Fetches the public IONOS Cloud status page (Atom feed) and classifies
recent entries as active or resolved incidents.
"""

import logging
import xml.etree.ElementTree as ET
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

import requests

from ..config import REQUEST_TIMEOUT, STATUS_FEED_URL
from ..exceptions import FeedError
from ..models import Status
from ..utils.time import parse_rfc3339, utcnow
from .models import FeedEntry, StatusResult

logger = logging.getLogger(__name__)

# Only entries updated within this window are considered
RECENT_WINDOW = timedelta(hours=24)

ACTIVE_KEYWORDS = [
    "investigating",
    "identified",
    "monitoring",
    "in progress",
    "currently",
]

RESOLVED_KEYWORDS = [
    "resolved",
    "completed",
    "no customer impact",
]


def _local_name(tag: str) -> str:
    """Strip an XML namespace: '{http://www.w3.org/2005/Atom}entry' -> 'entry'."""
    return tag.rsplit("}", 1)[-1]


def _child_text(element: ET.Element, name: str) -> str:
    for child in element:
        if _local_name(child.tag) == name:
            # itertext() also covers type="xhtml" content with nested markup
            return "".join(child.itertext()).strip()
    return ""


def _child_attr(element: ET.Element, name: str, attr: str) -> str:
    for child in element:
        if _local_name(child.tag) == name:
            return child.get(attr, "")
    return ""


def parse_feed(xml_text: str) -> List[FeedEntry]:
    """
    Parse an Atom document into feed entries.

    Elements are matched by local name so namespaced and
    un-namespaced feeds are handled alike.

    Raises:
        FeedError: if the document is not well-formed XML
    """
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as e:
        raise FeedError(f"error parsing atom feed: {e}") from e

    entries = []
    for element in root:
        if _local_name(element.tag) != "entry":
            continue
        entries.append(FeedEntry(
            title=_child_text(element, "title"),
            updated=_child_text(element, "updated"),
            content=_child_text(element, "content"),
            link=_child_attr(element, "link", "href"),
        ))

    return entries


def _is_active(content: str) -> bool:
    content_lower = content.lower()

    # A resolved marker wins over any active keyword
    if any(keyword in content_lower for keyword in RESOLVED_KEYWORDS):
        return False

    return any(keyword in content_lower for keyword in ACTIVE_KEYWORDS)


def analyze_entries(
    entries: Iterable[FeedEntry],
    now: Optional[datetime] = None,
) -> StatusResult:
    """
    Classify feed entries into active incidents.

    Args:
        entries: Feed entries in feed order
        now: Reference time (default: current UTC time)

    Returns:
        StatusResult: OK with no active incidents, WARNING with one,
        CRITICAL with two or more
    """
    cutoff = (now or utcnow()) - RECENT_WINDOW
    active_incidents = []

    for entry in entries:
        updated = parse_rfc3339(entry.updated)
        if updated is None:
            logger.debug(f"Skipping feed entry with bad timestamp: {entry.updated!r}")
            continue

        if updated <= cutoff:
            continue

        if _is_active(entry.content):
            active_incidents.append(entry)

    result = StatusResult(status=Status.OK, active_incidents=active_incidents)

    if not active_incidents:
        result.message = "No active incidents"
    elif len(active_incidents) == 1:
        result.status = Status.WARNING
        result.message = f"1 active incident: {active_incidents[0].title}"
    else:
        result.status = Status.CRITICAL
        result.message = f"{len(active_incidents)} active incidents"

    return result


class StatusFeedClient:
    """
    Client for the public status feed.

    Example:
        client = StatusFeedClient()
        result = client.check_status()
        print(result.message)
    """

    def __init__(self, url: str = STATUS_FEED_URL, timeout: int = REQUEST_TIMEOUT):
        self.url = url
        self.timeout = timeout

    def fetch(self) -> List[FeedEntry]:
        """
        Download and parse the feed.

        Raises:
            FeedError: on transport, HTTP or parse failure
        """
        try:
            response = requests.get(self.url, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise FeedError(f"error fetching status page: {e}") from e

        return parse_feed(response.text)

    def check_status(self) -> StatusResult:
        """Fetch the feed and classify its recent entries."""
        entries = self.fetch()
        logger.debug(f"Status feed returned {len(entries)} entries")
        return analyze_entries(entries)
