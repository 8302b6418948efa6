"""
Status Feed Data Models
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from ..models import Status


@dataclass
class FeedEntry:
    """One Atom feed entry from the public status page."""
    title: str
    updated: str
    content: str = ""
    link: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "link": self.link,
            "updated": self.updated,
            "content": self.content,
        }


@dataclass
class StatusResult:
    """
    Classification of the status feed.

    Attributes:
        status: OK / WARNING / CRITICAL
        active_incidents: Entries judged to be ongoing incidents
        message: Human readable summary
    """
    status: Status
    active_incidents: List[FeedEntry] = field(default_factory=list)
    message: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "active_incidents": [e.to_dict() for e in self.active_incidents],
            "message": self.message,
        }
