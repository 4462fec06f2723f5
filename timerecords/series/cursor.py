"""
Index Hint: Caller-Owned Search Cursor

Provides:
- IndexHint: mutable integer position threaded through repeated queries
- resolve_hint: normalize the hint argument accepted by query functions

Design:
    Bisection costs O(log n) per query. When queries advance roughly in
    time order, remembering the last resolved index turns each lookup
    into a short local walk (O(1) amortized).

    The hint belongs to the caller, never to the series. One hint serves
    one series and one sequential caller; sharing it across concurrent
    queries is a caller error and is not guarded.

Usage:
    hint = IndexHint()
    for t in sorted_times:
        lo, hi = find_bounds(series, t, hint)   # hint.index advances
"""

from __future__ import annotations

from typing import Optional, Union


class IndexHint:
    """Last resolved index into one series."""

    __slots__ = ("index",)

    def __init__(self, index: int = 0) -> None:
        self.index = int(index)

    def update(self, index: Optional[int]) -> None:
        if index is not None:
            self.index = index

    def __int__(self) -> int:
        return self.index

    def __index__(self) -> int:
        return self.index

    def __eq__(self, other: object) -> bool:
        if isinstance(other, IndexHint):
            return self.index == other.index
        if isinstance(other, int):
            return self.index == other
        return NotImplemented

    def __repr__(self) -> str:
        return f"IndexHint({self.index})"


HintLike = Union[IndexHint, int, None]


def resolve_hint(hint: HintLike) -> Optional[int]:
    """Starting index for a hinted walk, or None for bisection."""
    if hint is None:
        return None
    return int(hint)
