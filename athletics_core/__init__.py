from .advancement import (
    AdvancementOutcome,
    AdvancementRule,
    FinishResult,
    HeatResult,
    QualifiedResult,
    compute_advancement,
    format_advancement_label,
    heat_results_from_rows,
    rank_for_next_round,
)
from .distribution import STRATEGIES, distribute_to_heats
from .errors import EngineError, InvalidConfiguration
from .lanes import LANE_GROUPS, draw_lanes_by_ranking, lane_order
from .marks import (
    Entry,
    RankedEntry,
    direction_for,
    format_time,
    parse_mark,
    race_type_from_event_name,
    rank_entries,
)
from .presets import (
    ADVANCEMENT_PRESETS,
    QUALIFICATION_TABLES,
    SEEDING_PRESETS,
    RoundStructure,
    SeedingPreset,
    calculate_round_structure,
    parse_advancement_label,
    recommended_preset,
)
from .seeding import (
    Assignment,
    Heat,
    SeedingConfig,
    SeedingOutcome,
    entries_from_rows,
    seed_event,
)
from .types import AssignmentRow, EntryRow, HeatEntryRow, QualificationRow
from .validation import (
    ConfigValidator,
    InputSanitizer,
    ValidatedAdvancementRule,
    ValidatedEntryRow,
    ValidatedHeatEntryRow,
    ValidatedSeedingConfig,
)

__all__ = [
    "AdvancementOutcome",
    "AdvancementRule",
    "FinishResult",
    "HeatResult",
    "QualifiedResult",
    "compute_advancement",
    "format_advancement_label",
    "heat_results_from_rows",
    "rank_for_next_round",
    "STRATEGIES",
    "distribute_to_heats",
    "EngineError",
    "InvalidConfiguration",
    "LANE_GROUPS",
    "draw_lanes_by_ranking",
    "lane_order",
    "Entry",
    "RankedEntry",
    "direction_for",
    "format_time",
    "parse_mark",
    "race_type_from_event_name",
    "rank_entries",
    "ADVANCEMENT_PRESETS",
    "QUALIFICATION_TABLES",
    "SEEDING_PRESETS",
    "RoundStructure",
    "SeedingPreset",
    "calculate_round_structure",
    "parse_advancement_label",
    "recommended_preset",
    "Assignment",
    "Heat",
    "SeedingConfig",
    "SeedingOutcome",
    "entries_from_rows",
    "seed_event",
    "AssignmentRow",
    "EntryRow",
    "HeatEntryRow",
    "QualificationRow",
    "ConfigValidator",
    "InputSanitizer",
    "ValidatedAdvancementRule",
    "ValidatedEntryRow",
    "ValidatedHeatEntryRow",
    "ValidatedSeedingConfig",
]
