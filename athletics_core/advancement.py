"""Advancement (Q/q) from completed heats.

Q = qualified by place: the top ``by_place`` finishers of every heat.
q = qualified by time: the best ``by_time`` of the remaining finishers pooled
    across all heats.

Tie policy at the q cutoff: every finisher whose result equals the last q
result also gets q, so the outcome never depends on input order. The outcome
reports this through ``ties_at_cutoff``. Within a heat, equal results keep the
order supplied by the caller (the photo-finish order), so Q never overflows.

DNS/DNF/DQ never receive a mark and take no part in either step.
"""
from __future__ import annotations

import logging
import math
from collections import defaultdict
from dataclasses import dataclass
from typing import Iterable, Mapping, Sequence

from .errors import EngineError
from .marks import Entry
from .types import Direction, FinishState, HeatEntryRow, Mark, QualificationRow
from .validation import ConfigValidator, ValidatedHeatEntryRow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdvancementRule:
    by_place: int = 0
    by_time: int = 0

    @property
    def label(self) -> str:
        return format_advancement_label(self.by_place, self.by_time)


@dataclass(frozen=True)
class FinishResult:
    entry_id: str
    result_value: float | None = None
    state: FinishState = "finished"


@dataclass(frozen=True)
class HeatResult:
    heat_number: int
    results: tuple[FinishResult, ...]


@dataclass(frozen=True)
class QualifiedResult:
    entry_id: str
    heat_number: int
    place: int | None
    result_value: float | None
    state: FinishState
    mark: Mark | None = None


@dataclass(frozen=True)
class AdvancementOutcome:
    rows: tuple[QualifiedResult, ...] = ()
    qualified_by_place: int = 0
    qualified_by_time: int = 0
    total_finished: int = 0
    ties_at_cutoff: bool = False
    direction: Direction = "ascending"
    warnings: tuple[str, ...] = ()
    error: EngineError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def total_advancing(self) -> int:
        return self.qualified_by_place + self.qualified_by_time

    @property
    def summary(self) -> str:
        """Compact label such as "5Q + 3q"."""
        return f"{self.qualified_by_place}Q + {self.qualified_by_time}q"

    @property
    def marks(self) -> dict[str, Mark | None]:
        return {row.entry_id: row.mark for row in self.rows}

    def to_rows(self) -> list[QualificationRow]:
        return [
            QualificationRow(
                entry_id=row.entry_id,
                heat_number=row.heat_number,
                result_place=row.place,
                qualification_mark=row.mark,
            )
            for row in self.rows
        ]


def format_advancement_label(by_place: int, by_time: int) -> str:
    """Operator label for a rule: "3Q + 2q", "4Q", "6q"."""
    if by_time == 0:
        return f"{by_place}Q"
    if by_place == 0:
        return f"{by_time}q"
    return f"{by_place}Q + {by_time}q"


def heat_results_from_rows(rows: Iterable[HeatEntryRow]) -> list[HeatResult]:
    """Group heat_entries rows into HeatResult snapshots, ordered by heat number.

    Invalid rows are skipped with a warning.
    """
    grouped: dict[int, list[FinishResult]] = defaultdict(list)
    for idx, row in enumerate(rows):
        try:
            validated = ValidatedHeatEntryRow(**dict(row))
        except ValueError as e:
            logger.warning(f"Skipping heat entry row {idx}: {e}")
            continue
        grouped[validated.heat_number].append(
            FinishResult(
                entry_id=validated.entry_id,
                result_value=validated.result_value,
                state=validated.status,
            )
        )
    return [
        HeatResult(heat_number=number, results=tuple(grouped[number]))
        for number in sorted(grouped)
    ]


def _resolve_rule(rule: AdvancementRule | Mapping) -> AdvancementRule:
    if isinstance(rule, AdvancementRule):
        raw = {"by_place": rule.by_place, "by_time": rule.by_time}
    else:
        raw = dict(rule)
    validated = ConfigValidator.validate_advancement_rule(raw)
    return AdvancementRule(by_place=validated.by_place, by_time=validated.by_time)


def _sort_by_result(items: list, direction: Direction) -> list:
    # Stable in both directions: equal results keep their incoming order.
    return sorted(items, key=lambda item: item.result_value, reverse=(direction == "descending"))


def compute_advancement(
    heat_results: Sequence[HeatResult],
    rule: AdvancementRule | Mapping,
    *,
    direction: Direction = "ascending",
) -> AdvancementOutcome:
    """
    Compute Q/q marks for a completed (or partially completed) round.

    Args:
      heat_results: one HeatResult per heat.
      rule: AdvancementRule or mapping with by_place/by_time.
      direction: "ascending" for times (lower is better), "descending" for marks.

    Returns:
      AdvancementOutcome; error kind "invalid_configuration" for a negative
      rule or an unknown direction.
    """
    try:
        resolved = _resolve_rule(rule)
    except ValueError as e:
        return AdvancementOutcome(error=EngineError(kind="invalid_configuration", message=str(e)))
    if direction not in ("ascending", "descending"):
        return AdvancementOutcome(
            error=EngineError(
                kind="invalid_configuration",
                message=f"direction must be 'ascending' or 'descending', got {direction!r}",
            )
        )

    warnings: list[str] = []
    if resolved.by_place == 0 and resolved.by_time == 0:
        logger.warning("Advancement rule 0Q + 0q: nobody advances")
        warnings.append("no_advancement_configured")

    placed: dict[int, list[QualifiedResult]] = {}
    unplaced: dict[int, list[QualifiedResult]] = {}
    total_finished = 0

    # Results reported in several chunks for the same heat are merged.
    merged: dict[int, list[FinishResult]] = defaultdict(list)
    for heat in heat_results:
        merged[heat.heat_number].extend(heat.results)

    # Step 1: places and Q within each heat.
    for heat_number in sorted(merged):
        finishers: list[FinishResult] = []
        rest: list[QualifiedResult] = []
        for result in merged[heat_number]:
            if result.state == "finished":
                total_finished += 1
                if result.result_value is None or not math.isfinite(result.result_value):
                    logger.warning(
                        f"Heat {heat_number}: {result.entry_id} finished without a result"
                    )
                    warnings.append(f"finished_without_result:{result.entry_id}")
                else:
                    finishers.append(result)
                    continue
            rest.append(
                QualifiedResult(
                    entry_id=result.entry_id,
                    heat_number=heat_number,
                    place=None,
                    result_value=None,
                    state=result.state,
                )
            )
        placed[heat_number] = [
            QualifiedResult(
                entry_id=result.entry_id,
                heat_number=heat_number,
                place=place,
                result_value=result.result_value,
                state="finished",
                mark="Q" if place <= resolved.by_place else None,
            )
            for place, result in enumerate(_sort_by_result(finishers, direction), start=1)
        ]
        unplaced[heat_number] = rest

    # Step 2: q across all heats from finishers without Q.
    pool = _sort_by_result(
        [row for rows in placed.values() for row in rows if row.mark is None],
        direction,
    )
    time_qualifiers: set[tuple[int, str]] = set()
    ties_at_cutoff = False
    if resolved.by_time > 0 and pool:
        cut = min(resolved.by_time, len(pool))
        cutoff_value = pool[cut - 1].result_value
        while cut < len(pool) and pool[cut].result_value == cutoff_value:
            cut += 1
            ties_at_cutoff = True
        time_qualifiers = {(row.heat_number, row.entry_id) for row in pool[:cut]}

    rows: list[QualifiedResult] = []
    for number in placed:
        for row in placed[number]:
            if (row.heat_number, row.entry_id) in time_qualifiers:
                row = QualifiedResult(
                    entry_id=row.entry_id,
                    heat_number=row.heat_number,
                    place=row.place,
                    result_value=row.result_value,
                    state=row.state,
                    mark="q",
                )
            rows.append(row)
        rows.extend(unplaced[number])

    by_place = sum(1 for row in rows if row.mark == "Q")
    by_time = sum(1 for row in rows if row.mark == "q")
    if ties_at_cutoff:
        logger.info(f"Tie at q cutoff: {by_time} q marks for {resolved.by_time} places")
    logger.info(
        f"Advancement {resolved.label}: {by_place + by_time} advance "
        f"({by_place}Q + {by_time}q) of {total_finished} finished"
    )

    return AdvancementOutcome(
        rows=tuple(rows),
        qualified_by_place=by_place,
        qualified_by_time=by_time,
        total_finished=total_finished,
        ties_at_cutoff=ties_at_cutoff,
        direction=direction,
        warnings=tuple(warnings),
    )


def rank_for_next_round(outcome: AdvancementOutcome) -> list[Entry]:
    """Order qualifiers for seeding the next round (WA Rule 20.3.2).

    Heat winners first (best result first), then second places, and so on for
    every Q place; then the q qualifiers by result. Each Entry carries its
    round result as seed value. Seed the next round with
    ``seed_event(..., preserve_order=True)`` to keep this order.
    """
    reverse = outcome.direction == "descending"
    by_place: dict[int, list[QualifiedResult]] = defaultdict(list)
    time_qualifiers: list[QualifiedResult] = []
    for row in outcome.rows:
        if row.mark == "Q":
            by_place[row.place or 0].append(row)
        elif row.mark == "q":
            time_qualifiers.append(row)

    ordered: list[QualifiedResult] = []
    for place in sorted(by_place):
        ordered.extend(sorted(by_place[place], key=lambda r: r.result_value, reverse=reverse))
    ordered.extend(sorted(time_qualifiers, key=lambda r: r.result_value, reverse=reverse))

    return [
        Entry(id=row.entry_id, seed_value=row.result_value, status="active")
        for row in ordered
    ]
