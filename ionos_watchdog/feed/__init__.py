"""
Status Feed Module

Classifies the public IONOS Cloud status page into OK / WARNING / CRITICAL.
"""

from .models import FeedEntry, StatusResult
from .status import StatusFeedClient, analyze_entries, parse_feed

__all__ = [
    "FeedEntry",
    "StatusResult",
    "StatusFeedClient",
    "analyze_entries",
    "parse_feed",
]
