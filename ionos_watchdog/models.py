"""
Shared Models

Severity classification used by the status feed analyzer and the report.
"""

from enum import Enum


# Issue counts above this threshold escalate WARNING to CRITICAL
WARNING_ISSUE_LIMIT = 3


class Status(Enum):
    """Overall health classification."""
    OK = "OK"
    WARNING = "WARNING"
    CRITICAL = "CRITICAL"

    @property
    def exit_code(self) -> int:
        """Process exit code for this status."""
        return {
            Status.OK: 0,
            Status.WARNING: 1,
            Status.CRITICAL: 2,
        }[self]

    @classmethod
    def from_issue_count(cls, count: int) -> "Status":
        """
        Derive severity from a flat issue count.

        0 issues is OK, 1-3 is WARNING, anything above is CRITICAL.
        """
        if count == 0:
            return cls.OK
        if count <= WARNING_ISSUE_LIMIT:
            return cls.WARNING
        return cls.CRITICAL
