"""
Rack bookkeeping for 14.1 continuous.

The first rack holds fifteen balls.  Every later rack is fourteen freshly
racked balls plus the break ball left on the table from the previous rack,
so only fourteen count against its capacity.  Everything here is derived from
the event log on demand and holds no state of its own.
"""

from dataclasses import dataclass
from typing import Iterable

FIRST_RACK_BALLS = 15
RACK_BALLS = 14


@dataclass(frozen=True)
class RackStatus:
    rack: int
    made: int
    capacity: int
    total_pocketed: int

    @property
    def remaining(self) -> int:
        return max(0, self.capacity - self.made)

    @property
    def header_line(self) -> str:
        if self.rack == 1:
            return f"Rack: 1 · {FIRST_RACK_BALLS} balls in rack"
        return f"Rack: {self.rack} · {RACK_BALLS} balls in rack + 1 break ball"

    @property
    def detail_line(self) -> str:
        return f"{self.made} made this rack, {self.remaining} remaining"


def total_pocketed(events: Iterable) -> int:
    """Count pocketed balls: only positive deltas contribute."""
    return sum(max(e.delta, 0) for e in events)


def rack_status(events: Iterable) -> RackStatus:
    total = total_pocketed(events)

    if total < FIRST_RACK_BALLS:
        return RackStatus(rack=1, made=total, capacity=FIRST_RACK_BALLS, total_pocketed=total)

    # Past the opening rack, work in fourteen-ball chunks.
    later = total - FIRST_RACK_BALLS
    return RackStatus(
        rack=2 + later // RACK_BALLS,
        made=later % RACK_BALLS,
        capacity=RACK_BALLS,
        total_pocketed=total,
    )
