"""
Report Module

Aggregates the status feed, IONOS Cloud and Kubernetes probers into one
Report and renders it as text or JSON.
"""

from .aggregator import CheckRunner, ProbeOutcome, health_issues, run_checks
from .models import Report
from .text import render_json, render_text

__all__ = [
    "CheckRunner",
    "ProbeOutcome",
    "Report",
    "health_issues",
    "render_json",
    "render_text",
    "run_checks",
]
