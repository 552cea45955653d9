"""Lane allocation within a heat.

Two policies:
- center_out: deterministic middle-out sequence (8 lanes: 4, 5, 3, 6, 2, 7, 1, 8).
- ranking_groups: World Athletics Rules 20.4.3-20.4.8. Ranked athletes are
  placed into lane groups (top / middle / outer) and the lanes inside each
  group are drawn by lot.
"""
from __future__ import annotations

import random

from .errors import InvalidConfiguration
from .types import RaceType

# Lane groups in ranking order, per (lane_count, race_type).
_STRAIGHT_8 = ((3, 4, 5, 6), (2, 7), (1, 8))
_BEND_8 = ((5, 6, 7), (3, 4, 8), (1, 2))
_LONG_8 = ((4, 5, 6, 7), (3, 8), (1, 2))
_STRAIGHT_9 = ((4, 5, 6), (3, 7), (2, 8), (1, 9))
_BEND_9 = ((5, 6, 7, 8), (3, 4, 9), (1, 2))
_LONG_9 = ((5, 6, 7), (4, 8), (3, 9), (1, 2))
_STRAIGHT_6 = ((3, 4), (2, 5), (1, 6))
_LONG_6 = ((3, 4, 5), (2, 6), (1,))

LANE_GROUPS: dict[tuple[int, str], tuple[tuple[int, ...], ...]] = {
    (6, "straight"): _STRAIGHT_6,
    (6, "200m_300m"): _STRAIGHT_6,
    (6, "400m_relay_800m"): _LONG_6,
    (8, "straight"): _STRAIGHT_8,
    (8, "200m_300m"): _BEND_8,
    (8, "400m_relay_800m"): _LONG_8,
    (9, "straight"): _STRAIGHT_9,
    (9, "200m_300m"): _BEND_9,
    (9, "400m_relay_800m"): _LONG_9,
}


def lane_order(lane_count: int, seat_count: int) -> list[int]:
    """Return lanes in the order they are offered to successively ranked athletes.

    Starts at ceil(lane_count / 2) and alternates outward (+1, -1, +2, -2, ...).
    The result holds exactly min(seat_count, lane_count) distinct lanes in
    1..lane_count. Seats beyond lane_count get no lane here; the caller must
    place those athletes as unlaned positions.

    Raises:
        InvalidConfiguration: lane_count < 1 or seat_count < 0.
    """
    if lane_count < 1:
        raise InvalidConfiguration(f"lane_count must be >= 1, got {lane_count}")
    if seat_count < 0:
        raise InvalidConfiguration(f"seat_count must be >= 0, got {seat_count}")

    wanted = min(seat_count, lane_count)
    center = (lane_count + 1) // 2
    order: list[int] = []
    offset = 0
    while len(order) < wanted:
        for lane in ((center,) if offset == 0 else (center + offset, center - offset)):
            if 1 <= lane <= lane_count and len(order) < wanted:
                order.append(lane)
        offset += 1
    return order


def draw_lanes_by_ranking(
    lane_count: int,
    seat_count: int,
    race_type: RaceType = "straight",
    rng: random.Random | None = None,
) -> list[int]:
    """Draw lanes by ranking group for successively ranked athletes.

    Falls back to lane_order() for lane counts without a WA table (anything but
    6, 8 and 9) and for distance races.
    """
    groups = LANE_GROUPS.get((lane_count, race_type))
    if groups is None:
        return lane_order(lane_count, seat_count)
    if seat_count < 0:
        raise InvalidConfiguration(f"seat_count must be >= 0, got {seat_count}")

    rng = rng or random.Random()
    lanes: list[int] = []
    for group in groups:
        drawn = list(group)
        rng.shuffle(drawn)
        lanes.extend(drawn)
    return lanes[: min(seat_count, lane_count)]
