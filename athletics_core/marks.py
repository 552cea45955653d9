"""Seed-mark normalisation and entry ranking.

Turns raw seed marks ("10.45", "1:45.32", "7,45m") into comparable numbers and
produces a total order over entries:
- Entries with a seed value first, sorted in the event's direction.
- Equal seed values keep input order (stable sort).
- Entries without a seed value last, in input order.
"""
from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Sequence

from .types import Direction, RaceKind, RaceType

logger = logging.getLogger(__name__)

STARTABLE_STATUSES = frozenset({"active", "registered", "confirmed", "checked_in"})

_MARK_SUFFIX = re.compile(r"\s*(m|s|sec)\.?$", re.IGNORECASE)


@dataclass(frozen=True)
class Entry:
    id: str
    name: str = ""
    club: str | None = None
    seed_mark: str | None = None
    seed_value: float | None = None
    status: str = "active"

    @property
    def is_startable(self) -> bool:
        return self.status in STARTABLE_STATUSES

    @property
    def effective_seed(self) -> float | None:
        if self.seed_value is not None:
            if isinstance(self.seed_value, bool) or not math.isfinite(float(self.seed_value)):
                return None
            return float(self.seed_value)
        return parse_mark(self.seed_mark)


@dataclass(frozen=True)
class RankedEntry:
    entry: Entry
    rank: int
    seed_value: float | None


def parse_mark(text: str | None) -> float | None:
    """Parse a time or distance mark into a float.

    Times are returned in seconds, distances/heights in metres:
        - "10.45"    -> 10.45
        - "1:45.32"  -> 105.32
        - "2:09:45"  -> 7785.0
        - "7,45m"    -> 7.45
        - "NM" / ""  -> None
    """
    if text is None:
        return None
    raw = str(text).strip()
    if not raw:
        return None
    raw = _MARK_SUFFIX.sub("", raw).replace(",", ".")
    parts = raw.split(":")
    if len(parts) > 3:
        return None
    try:
        seconds = float(parts[-1])
        minutes = int(parts[-2]) if len(parts) >= 2 else 0
        hours = int(parts[-3]) if len(parts) == 3 else 0
    except ValueError:
        return None
    if not math.isfinite(seconds) or seconds < 0 or minutes < 0 or hours < 0:
        return None
    value = hours * 3600 + minutes * 60 + seconds
    if len(parts) > 1:
        logger.debug(f"Normalized mark: {text} → {value}")
    return value


def format_time(seconds: float) -> str:
    """Format seconds for display: 10.45, 1:45.32, 2:09:45."""
    # Round first so hundredths never carry into a displayed 60
    seconds = round(seconds, 2)
    if seconds < 60:
        return f"{seconds:.2f}"
    if seconds < 3600:
        minutes = int(seconds // 60)
        return f"{minutes}:{seconds - minutes * 60:05.2f}"
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    return f"{hours}:{minutes:02d}:{int(seconds % 60):02d}"


def direction_for(race_kind: RaceKind) -> Direction:
    # Running events: lower is better. Jumps/throws: higher is better.
    return "descending" if race_kind == "mark" else "ascending"


def race_type_from_event_name(event_name: str) -> RaceType:
    """Guess the lane-rule race type from an event name such as "200m" or "4x100m stafett"."""
    name = (event_name or "").lower()
    is_relay = "relay" in name or "stafett" in name
    if "800" in name and not is_relay:
        return "distance"
    if any(token in name for token in ("1500", "3000", "5000", "10000", "mile")):
        return "distance"
    if is_relay or "400" in name:
        return "400m_relay_800m"
    if "60" in name or "100" in name:
        return "straight"
    if "200" in name or "300" in name:
        return "200m_300m"
    return "straight"


def rank_entries(entries: Sequence[Entry], direction: Direction = "ascending") -> list[RankedEntry]:
    """Rank entries (1 = best). Always total; empty input gives an empty list."""
    seeded: list[tuple[float, Entry]] = []
    unseeded: list[Entry] = []
    for entry in entries:
        value = entry.effective_seed
        if value is None:
            unseeded.append(entry)
        else:
            seeded.append((value, entry))

    # sorted() is stable, so equal seeds keep input order in either direction.
    seeded = sorted(seeded, key=lambda pair: pair[0], reverse=(direction == "descending"))

    ranked = [
        RankedEntry(entry=entry, rank=idx, seed_value=value)
        for idx, (value, entry) in enumerate(seeded, start=1)
    ]
    start = len(ranked) + 1
    ranked.extend(
        RankedEntry(entry=entry, rank=idx, seed_value=None)
        for idx, entry in enumerate(unseeded, start=start)
    )
    return ranked
