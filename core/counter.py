from __future__ import annotations
from typing import Dict, Hashable, List

from core.util import is_finite

class CounterStat:
    """
    One monotonic energy counter (a CPU package or a sensor) and its latest delta.
    """

    def __init__(self, entity_id: Hashable) -> None:
        self.entity_id = entity_id
        self.previous_raw = 0
        self.current_delta = 0

    def update(self, raw: int | float) -> int:
        """
        Feed a new cumulative reading and compute the interval delta.

        A reading lower than the previous one means the counter restarted,
        so the delta is the new reading itself. NaN or infinite readings
        are treated as absent: delta 0, previous reading kept.

        Args:
            raw: Cumulative counter value as read from the source

        Returns:
            The delta stored for the current interval
        """
        if not is_finite(raw):
            self.current_delta = 0
            return 0
        value = max(int(raw), 0)
        d = value - self.previous_raw
        if d < 0:
            d = value  # reset/wrap
        self.current_delta = d
        self.previous_raw = value
        return d

    def reset(self) -> None:
        self.current_delta = 0

    def __repr__(self) -> str:
        return f"CounterStat({self.entity_id!r}, prev={self.previous_raw}, delta={self.current_delta})"


class DeltaCounter:
    """
    Collection of CounterStat entries for one energy domain, keyed by entity id.

    Entries are created the first time an id is seen and are never dropped,
    so history survives reset() between intervals.
    """

    def __init__(self, name: str = "") -> None:
        self.name = name
        self._stats: Dict[Hashable, CounterStat] = {}

    def update(self, entity_id: Hashable, raw: int | float) -> int:
        stat = self._stats.get(entity_id)
        if stat is None:
            stat = CounterStat(entity_id)
            self._stats[entity_id] = stat
        return stat.update(raw)

    def delta(self, entity_id: Hashable) -> int:
        """Latest delta for an entity, 0 when the entity was never seen."""
        stat = self._stats.get(entity_id)
        return stat.current_delta if stat is not None else 0

    def reset(self) -> None:
        """Zero every delta; previous raw readings are kept."""
        for stat in self._stats.values():
            stat.reset()

    def total(self) -> int:
        return sum(stat.current_delta for stat in self._stats.values())

    def entity_ids(self) -> List[Hashable]:
        return list(self._stats.keys())

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._stats

    def __len__(self) -> int:
        return len(self._stats)

    def __repr__(self) -> str:
        deltas = {k: s.current_delta for k, s in self._stats.items()}
        return f"DeltaCounter({self.name!r}, total={self.total()}, deltas={deltas})"
