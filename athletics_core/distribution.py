"""Partition ranked entries into heats.

Strategies:
- serpentine: snake dealing (1..H, H..1, ...) so heat strength is balanced.
  Example for 3 heats:
    Heat 1: 1, 6, 7, 12
    Heat 2: 2, 5, 8, 11
    Heat 3: 3, 4, 9, 10
- fastest_last: sequential groups in rank order, best group runs last.
- random: uniform shuffle, then contiguous near-equal groups.
"""
from __future__ import annotations

import logging
import random
from typing import Sequence

from .errors import InvalidConfiguration
from .marks import RankedEntry
from .types import Strategy

logger = logging.getLogger(__name__)

STRATEGIES: tuple[Strategy, ...] = ("random", "serpentine", "fastest_last")


def _even_sizes(total: int, heat_count: int) -> list[int]:
    # Earlier heats take the extra entry: 10 into 3 -> [4, 3, 3]
    base, extra = divmod(total, heat_count)
    return [base + (1 if idx < extra else 0) for idx in range(heat_count)]


def _sequential_sizes(total: int, heat_count: int, group_size: int | None) -> list[int]:
    # Full lane groups with the remainder in the last group (22/8 -> [8, 8, 6]),
    # but only when that layout uses every heat; otherwise fall back to even sizes.
    if (
        group_size is not None
        and group_size * heat_count >= total
        and group_size * (heat_count - 1) < total
    ):
        return [group_size] * (heat_count - 1) + [total - group_size * (heat_count - 1)]
    return _even_sizes(total, heat_count)


def _cut(ranked: Sequence[RankedEntry], sizes: list[int]) -> list[list[RankedEntry]]:
    buckets: list[list[RankedEntry]] = []
    start = 0
    for size in sizes:
        buckets.append(list(ranked[start : start + size]))
        start += size
    return buckets


def _serpentine(ranked: Sequence[RankedEntry], heat_count: int) -> list[list[RankedEntry]]:
    buckets: list[list[RankedEntry]] = [[] for _ in range(heat_count)]
    heat_idx = 0
    direction = 1
    for item in ranked:
        buckets[heat_idx].append(item)
        heat_idx += direction
        # Reverse at the boundaries: the end heat is dealt twice in a row.
        if heat_idx >= heat_count:
            heat_idx = heat_count - 1
            direction = -1
        elif heat_idx < 0:
            heat_idx = 0
            direction = 1
    return buckets


def distribute_to_heats(
    ranked: Sequence[RankedEntry],
    heat_count: int,
    strategy: Strategy = "serpentine",
    *,
    group_size: int | None = None,
    rng: random.Random | None = None,
) -> list[list[RankedEntry]]:
    """Split ranked entries into exactly heat_count buckets (heat 1 first).

    Args:
      ranked: entries in rank order (rank 1 first).
      heat_count: number of heats, >= 1.
      strategy: "serpentine" (default), "fastest_last" or "random".
      group_size: lane count, used by fastest_last to fill full groups.
      rng: random source for the "random" strategy; a fresh Random() when omitted.

    Raises:
      InvalidConfiguration: heat_count < 1 or unknown strategy.
    """
    if heat_count < 1:
        raise InvalidConfiguration(f"heat_count must be >= 1, got {heat_count}")
    if strategy not in STRATEGIES:
        raise InvalidConfiguration(f"strategy must be one of {STRATEGIES}, got {strategy!r}")

    ordered = sorted(ranked, key=lambda item: item.rank)
    if not ordered:
        return [[] for _ in range(heat_count)]

    if strategy == "serpentine":
        buckets = _serpentine(ordered, heat_count)
    elif strategy == "fastest_last":
        buckets = _cut(ordered, _sequential_sizes(len(ordered), heat_count, group_size))
        buckets.reverse()
    else:
        shuffled = list(ordered)
        (rng or random.Random()).shuffle(shuffled)
        buckets = _cut(shuffled, _even_sizes(len(shuffled), heat_count))

    logger.debug(
        f"Distributed {len(ordered)} entries into {heat_count} heats ({strategy}): "
        f"sizes={[len(b) for b in buckets]}"
    )
    return buckets
