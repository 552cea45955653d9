"""Heat seeding: entries + configuration -> heats with lane/position assignments.

The seeder is pure. It never sees "the current heats" of an event; callers must
replace stored heats for the event atomically (delete + insert in one
transaction, or under a per-event lock) and never merge a new result into old
rows.

Pipeline:
1. Validate the configuration (pydantic, see validation.ValidatedSeedingConfig).
2. Drop non-startable entries (withdrawn, scratched, ...) and count them.
3. Rank by seed value (direction from race_kind).
4. Distribute into heats (serpentine / fastest_last / random).
5. Offer lanes to each heat's members in rank order.
"""
from __future__ import annotations

import logging
import math
import random
from dataclasses import asdict, dataclass
from typing import Iterable, Mapping, Sequence

from .distribution import distribute_to_heats
from .errors import EngineError, InvalidConfiguration
from .lanes import draw_lanes_by_ranking, lane_order
from .marks import Entry, RankedEntry, direction_for, rank_entries
from .types import AssignmentRow, EntryRow, LanePolicy, RaceKind, RaceType, Strategy
from .validation import ConfigValidator, ValidatedEntryRow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SeedingConfig:
    lane_count: int
    heat_count: int | None = None
    strategy: Strategy = "serpentine"
    race_kind: RaceKind = "time"
    lane_policy: LanePolicy = "center_out"
    race_type: RaceType = "straight"


@dataclass(frozen=True)
class Assignment:
    entry_id: str
    heat_number: int
    # None when the heat has more athletes than lanes, or for distance races.
    lane: int | None
    position: int
    seed_value: float | None
    rank: int


@dataclass(frozen=True)
class Heat:
    heat_number: int
    assignments: tuple[Assignment, ...]

    @property
    def size(self) -> int:
        return len(self.assignments)


@dataclass(frozen=True)
class SeedingOutcome:
    """Result of a seeding call; ``error`` is set instead of raising."""

    heats: tuple[Heat, ...] = ()
    heat_count: int = 0
    excluded_count: int = 0
    config: SeedingConfig | None = None
    error: EngineError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def assignments(self) -> tuple[Assignment, ...]:
        return tuple(a for heat in self.heats for a in heat.assignments)

    def to_rows(self) -> list[AssignmentRow]:
        return [AssignmentRow(**asdict(a)) for a in self.assignments]


def entries_from_rows(rows: Iterable[EntryRow]) -> list[Entry]:
    """Build Entry snapshots from entry table rows.

    Rows failing validation are skipped with a warning; callers that need
    strictness should validate with ValidatedEntryRow themselves.
    """
    entries: list[Entry] = []
    for idx, row in enumerate(rows):
        try:
            validated = ValidatedEntryRow(**dict(row))
        except ValueError as e:
            logger.warning(f"Skipping entry row {idx}: {e}")
            continue
        entries.append(
            Entry(
                id=validated.id,
                name=validated.name,
                club=validated.club,
                seed_mark=validated.seed_mark,
                seed_value=validated.seed_mark_value,
                status=validated.status,
            )
        )
    return entries


def _resolve_config(config: SeedingConfig | Mapping) -> SeedingConfig:
    raw = asdict(config) if isinstance(config, SeedingConfig) else dict(config)
    validated = ConfigValidator.validate_seeding_config(raw)
    return SeedingConfig(**validated.model_dump())


def _startable(entries: Sequence[Entry]) -> tuple[list[Entry], int]:
    seen: set[str] = set()
    active: list[Entry] = []
    excluded = 0
    for entry in entries:
        if not entry.is_startable:
            excluded += 1
            continue
        if entry.id in seen:
            logger.warning(f"Duplicate entry id {entry.id!r} ignored")
            excluded += 1
            continue
        seen.add(entry.id)
        active.append(entry)
    return active, excluded


def _offered_lanes(config: SeedingConfig, seat_count: int, rng: random.Random) -> list[int]:
    if config.race_type == "distance":
        return []
    if config.lane_policy == "ranking_groups":
        return draw_lanes_by_ranking(config.lane_count, seat_count, config.race_type, rng)
    return lane_order(config.lane_count, seat_count)


def _build_heat(
    heat_number: int,
    members: Sequence[RankedEntry],
    config: SeedingConfig,
    rng: random.Random,
) -> Heat:
    by_rank = sorted(members, key=lambda item: item.rank)
    lanes = _offered_lanes(config, len(by_rank), rng)
    assignments = tuple(
        Assignment(
            entry_id=item.entry.id,
            heat_number=heat_number,
            lane=lanes[idx] if idx < len(lanes) else None,
            position=idx + 1,
            seed_value=item.seed_value,
            rank=item.rank,
        )
        for idx, item in enumerate(by_rank)
    )
    return Heat(heat_number=heat_number, assignments=assignments)


def seed_event(
    entries: Sequence[Entry],
    config: SeedingConfig | Mapping,
    *,
    rng: random.Random | None = None,
    preserve_order: bool = False,
) -> SeedingOutcome:
    """
    Seed an event into heats.

    Args:
      entries: entry snapshots (any status; non-startable ones are excluded).
      config: SeedingConfig or a mapping with the same keys.
      rng: random source for the random strategy and lane draw by lot.
      preserve_order: rank entries in input order instead of by seed value
        (used with advancement.rank_for_next_round, which already applies the
        qualification-round ordering).

    Returns:
      SeedingOutcome with heats, or with error kind "invalid_configuration" /
      "no_eligible_entries".
    """
    try:
        cfg = _resolve_config(config)
    except ValueError as e:
        return SeedingOutcome(error=EngineError(kind="invalid_configuration", message=str(e)))

    active, excluded = _startable(entries)
    if not active:
        logger.info(f"No eligible entries to seed ({excluded} excluded)")
        return SeedingOutcome(
            excluded_count=excluded,
            config=cfg,
            error=EngineError(
                kind="no_eligible_entries",
                message="No startable entries to seed",
                excluded_count=excluded,
            ),
        )

    heat_count = cfg.heat_count or math.ceil(len(active) / cfg.lane_count)
    rng = rng or random.Random()
    if preserve_order:
        ranked = [
            RankedEntry(entry=entry, rank=idx, seed_value=entry.effective_seed)
            for idx, entry in enumerate(active, start=1)
        ]
    else:
        ranked = rank_entries(active, direction_for(cfg.race_kind))

    try:
        buckets = distribute_to_heats(
            ranked,
            heat_count,
            cfg.strategy,
            group_size=cfg.lane_count,
            rng=rng,
        )
        heats = tuple(
            _build_heat(number, members, cfg, rng)
            for number, members in enumerate(buckets, start=1)
        )
    except InvalidConfiguration as e:
        return SeedingOutcome(
            excluded_count=excluded,
            config=cfg,
            error=EngineError(kind="invalid_configuration", message=str(e)),
        )

    logger.info(
        f"Seeded {len(active)} entries into {heat_count} heats "
        f"({cfg.strategy}, {cfg.lane_count} lanes, {excluded} excluded)"
    )
    return SeedingOutcome(
        heats=heats,
        heat_count=heat_count,
        excluded_count=excluded,
        config=cfg,
    )
