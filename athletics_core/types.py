"""Type definitions for rows exchanged with the persistence layer."""
from __future__ import annotations

from typing import Literal, Optional, TypedDict

Direction = Literal["ascending", "descending"]
Strategy = Literal["random", "serpentine", "fastest_last"]
RaceKind = Literal["time", "mark"]
RaceType = Literal["straight", "200m_300m", "400m_relay_800m", "distance"]
LanePolicy = Literal["center_out", "ranking_groups"]
FinishState = Literal["finished", "DNS", "DNF", "DQ"]
Mark = Literal["Q", "q"]


class EntryRow(TypedDict, total=False):
    """An entry row as loaded from the entries table."""
    id: str
    name: str
    club: Optional[str]
    seed_mark: Optional[str]
    seed_mark_value: Optional[float]
    status: str  # 'registered' | 'confirmed' | 'checked_in' | 'withdrawn' | ...


class AssignmentRow(TypedDict):
    """A heat_entries row produced by seeding."""
    entry_id: str
    heat_number: int
    lane: Optional[int]  # None for unlaned seats and distance races
    position: int
    seed_value: Optional[float]
    rank: int


class HeatEntryRow(TypedDict, total=False):
    """A heat_entries row carrying a recorded result."""
    entry_id: str
    heat_number: int
    result_value: Optional[float]
    status: str  # 'finished' | 'DNS' | 'DNF' | 'DQ'


class QualificationRow(TypedDict):
    """Qualification data written back onto a heat_entries row."""
    entry_id: str
    heat_number: int
    result_place: Optional[int]
    qualification_mark: Optional[str]
