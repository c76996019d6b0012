"""
Batching helpers for collaborator queries.
"""

from collections.abc import Iterable, Iterator
from typing import TypeVar

T = TypeVar("T")


def chunked(items: Iterable[T], size: int) -> Iterator[list[T]]:
    """
    Split items into lists of at most size elements.

    Example:
        >>> list(chunked(["a", "b", "c"], 2))
        [['a', 'b'], ['c']]
    """
    if size < 1:
        raise ValueError("chunk size must be at least 1")
    batch: list[T] = []
    for item in items:
        batch.append(item)
        if len(batch) == size:
            yield batch
            batch = []
    if batch:
        yield batch
