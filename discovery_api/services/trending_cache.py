"""
Trending cache: the one piece of state this subsystem owns.

Written only by the trending worker, read everywhere else. replace_snapshot
swaps all windows at once; readers see either the old or the new snapshot,
never a partial one.
"""

from datetime import datetime
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Protocol

from discovery.models import TimeWindow, TrendingEntry

TrendingSnapshot = Mapping[TimeWindow, List[TrendingEntry]]


class TrendingCache(Protocol):
    async def get_snapshot(self) -> Dict[TimeWindow, List[TrendingEntry]]:
        ...

    async def replace_snapshot(
        self,
        snapshot: Dict[TimeWindow, List[TrendingEntry]],
        computed_at: datetime,
    ) -> None:
        """Replace every window in one step."""
        ...

    async def last_computed_at(self) -> Optional[datetime]:
        ...


class InMemoryTrendingCache:
    """Per-process cache. A single reference swap makes replacement atomic."""

    def __init__(self):
        self._snapshot: TrendingSnapshot = MappingProxyType({})
        self._computed_at: Optional[datetime] = None

    async def get_snapshot(self) -> Dict[TimeWindow, List[TrendingEntry]]:
        return dict(self._snapshot)

    async def replace_snapshot(
        self,
        snapshot: Dict[TimeWindow, List[TrendingEntry]],
        computed_at: datetime,
    ) -> None:
        staged = MappingProxyType({w: list(snapshot.get(w, [])) for w in TimeWindow})
        self._snapshot, self._computed_at = staged, computed_at

    async def last_computed_at(self) -> Optional[datetime]:
        return self._computed_at
