"""
Thread pool helpers for blocking HTTP calls.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional, Sequence, TypeVar

T = TypeVar("T")
R = TypeVar("R")


def map_concurrently(
    func: Callable[[T], R],
    items: Sequence[T],
    max_workers: Optional[int] = None,
) -> List[R]:
    """
    Apply func to every item in a thread pool, preserving input order.

    One worker per item unless max_workers is given. The first exception
    raised by func propagates to the caller.
    """
    if not items:
        return []

    with ThreadPoolExecutor(max_workers=max_workers or len(items)) as executor:
        return list(executor.map(func, items))
