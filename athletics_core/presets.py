"""Named advancement rules, seeding presets and round planning.

Qualification tables follow World Athletics practice for a final of 8:
heats -> final, or heats -> semi-finals -> final.
"""
from __future__ import annotations

import math
import re
from dataclasses import dataclass

from .advancement import AdvancementRule, format_advancement_label
from .errors import InvalidConfiguration
from .seeding import SeedingConfig
from .types import LanePolicy, Strategy

ADVANCEMENT_PRESETS: dict[str, AdvancementRule] = {
    "3Q+2q": AdvancementRule(by_place=3, by_time=2),
    "2Q+2q": AdvancementRule(by_place=2, by_time=2),
    "4Q": AdvancementRule(by_place=4, by_time=0),
    "2Q+4q": AdvancementRule(by_place=2, by_time=4),
    "1Q+6q": AdvancementRule(by_place=1, by_time=6),
}

_LABEL_PART = re.compile(r"^(\d+)([Qq])$")


def parse_advancement_label(label: str) -> AdvancementRule:
    """Parse "3Q + 2q", "4Q" or "6q" into an AdvancementRule.

    Raises:
        InvalidConfiguration: malformed label or a repeated Q/q part.
    """
    compact = (label or "").replace(" ", "")
    if not compact:
        raise InvalidConfiguration("advancement label is empty")
    counts: dict[str, int] = {}
    for part in compact.split("+"):
        match = _LABEL_PART.match(part)
        if not match or match.group(2) in counts:
            raise InvalidConfiguration(f"invalid advancement label: {label!r}")
        counts[match.group(2)] = int(match.group(1))
    return AdvancementRule(by_place=counts.get("Q", 0), by_time=counts.get("q", 0))


# (by_place, by_time) keyed by heat count
QUALIFICATION_TABLES: dict[str, dict[int, AdvancementRule]] = {
    # heats -> final
    "two_rounds": {
        2: AdvancementRule(4, 0),
        3: AdvancementRule(2, 2),
        4: AdvancementRule(2, 0),
        5: AdvancementRule(1, 3),
        6: AdvancementRule(1, 2),
    },
    # heats -> semi-finals (16)
    "heats_to_semi": {
        4: AdvancementRule(3, 4),
        5: AdvancementRule(3, 1),
        6: AdvancementRule(2, 4),
        8: AdvancementRule(2, 0),
    },
    # semi-finals -> final
    "semi_to_final": {
        2: AdvancementRule(4, 0),
        3: AdvancementRule(2, 2),
    },
}


@dataclass(frozen=True)
class SeedingPreset:
    id: str
    name: str
    description: str
    strategy: Strategy
    lane_policy: LanePolicy
    default_lane_count: int
    two_rounds: AdvancementRule
    three_rounds: AdvancementRule

    def to_config(self, lane_count: int | None = None, **overrides) -> SeedingConfig:
        """SeedingConfig using this preset's strategy, lane policy and lane count."""
        return SeedingConfig(
            lane_count=lane_count or self.default_lane_count,
            strategy=overrides.pop("strategy", self.strategy),
            lane_policy=overrides.pop("lane_policy", self.lane_policy),
            **overrides,
        )


SEEDING_PRESETS: dict[str, SeedingPreset] = {
    "wa_standard": SeedingPreset(
        id="wa_standard",
        name="World Athletics Standard",
        description="Zigzag distribution and lane draw by ranking groups",
        strategy="serpentine",
        lane_policy="ranking_groups",
        default_lane_count=8,
        two_rounds=AdvancementRule(3, 2),
        three_rounds=AdvancementRule(2, 2),
    ),
    "club_simplified": SeedingPreset(
        id="club_simplified",
        name="Club Meet (Simplified)",
        description="Zigzag distribution with centre-out lanes",
        strategy="serpentine",
        lane_policy="center_out",
        default_lane_count=6,
        two_rounds=AdvancementRule(3, 0),
        three_rounds=AdvancementRule(2, 0),
    ),
    "school_basic": SeedingPreset(
        id="school_basic",
        name="School Competition",
        description="Random heats, centre-out lanes",
        strategy="random",
        lane_policy="center_out",
        default_lane_count=6,
        two_rounds=AdvancementRule(2, 2),
        three_rounds=AdvancementRule(2, 0),
    ),
    "manual": SeedingPreset(
        id="manual",
        name="Manual Assignment",
        description="Sequential heats as a starting point for manual editing",
        strategy="fastest_last",
        lane_policy="center_out",
        default_lane_count=8,
        two_rounds=AdvancementRule(3, 0),
        three_rounds=AdvancementRule(2, 2),
    ),
}


def recommended_preset(competition_type: str) -> str:
    kind = (competition_type or "").lower()
    if "nm" in kind or "mester" in kind or "championship" in kind:
        return "wa_standard"
    if "skole" in kind or "school" in kind:
        return "school_basic"
    # Club meets and anything unrecognised
    return "club_simplified"


@dataclass(frozen=True)
class RoundStructure:
    rounds: int
    heats_per_round: tuple[int, ...]
    qualification_rules: tuple[AdvancementRule, ...]

    @property
    def labels(self) -> tuple[str, ...]:
        return tuple(format_advancement_label(r.by_place, r.by_time) for r in self.qualification_rules)


def calculate_round_structure(
    athlete_count: int,
    lane_count: int,
    target_final_size: int = 8,
) -> RoundStructure:
    """Plan rounds for an event: direct final, heats -> final, or heats -> semi -> final.

    Raises:
        InvalidConfiguration: lane_count < 1 or negative athlete_count.
    """
    if lane_count < 1:
        raise InvalidConfiguration(f"lane_count must be >= 1, got {lane_count}")
    if athlete_count < 0:
        raise InvalidConfiguration(f"athlete_count must be >= 0, got {athlete_count}")

    if athlete_count <= lane_count:
        return RoundStructure(rounds=1, heats_per_round=(1,), qualification_rules=())

    heat_count = math.ceil(athlete_count / lane_count)
    if athlete_count <= lane_count * 3:
        rule = QUALIFICATION_TABLES["two_rounds"].get(heat_count) or AdvancementRule(
            by_place=target_final_size // heat_count,
            by_time=target_final_size % heat_count,
        )
        return RoundStructure(rounds=2, heats_per_round=(heat_count, 1), qualification_rules=(rule,))

    target_semi_size = 16
    semi_count = math.ceil(target_semi_size / lane_count)
    to_semi = QUALIFICATION_TABLES["heats_to_semi"].get(heat_count) or AdvancementRule(
        by_place=2,
        by_time=max(0, target_semi_size - heat_count * 2),
    )
    to_final = QUALIFICATION_TABLES["semi_to_final"].get(semi_count) or AdvancementRule(3, 2)
    return RoundStructure(
        rounds=3,
        heats_per_round=(heat_count, semi_count, 1),
        qualification_rules=(to_semi, to_final),
    )
