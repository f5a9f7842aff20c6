from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")


def swap_in_sequence(items: Sequence[T], first: T, second: T) -> tuple[T, ...]:
    """Return a copy of items with every first and second exchanged (by identity)."""
    swapped: list[T] = []
    for item in items:
        if item is first:
            swapped.append(second)
        elif item is second:
            swapped.append(first)
        else:
            swapped.append(item)
    return tuple(swapped)
