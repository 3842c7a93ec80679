"""Fan-out helper for stages with no ordering dependency between items."""

from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, TypeVar

T = TypeVar("T")
R = TypeVar("R")


def fan_out(fn: Callable[[T], R], items: Iterable[T], max_workers: int = 4) -> list[R]:
    """
    Apply fn to every item concurrently and join.

    Results come back in input order. If calls fail, the failure of the
    earliest item in input order is re-raised.
    """
    items = list(items)
    if max_workers <= 1 or len(items) <= 1:
        return [fn(item) for item in items]

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [executor.submit(fn, item) for item in items]
        return [future.result() for future in futures]
