import pytest

from athletics_core import (
    AdvancementRule,
    Entry,
    FinishResult,
    HeatResult,
    SeedingConfig,
    compute_advancement,
    format_advancement_label,
    heat_results_from_rows,
    rank_for_next_round,
    seed_event,
)


def _heat(number, *results):
    # results: (entry_id, value) or (entry_id, value, state)
    return HeatResult(
        heat_number=number,
        results=tuple(FinishResult(*result) for result in results),
    )


def _marked(outcome, mark):
    return sorted(row.entry_id for row in outcome.rows if row.mark == mark)


def _three_heats():
    return [
        _heat(1, ("a1", 10.50), ("a2", 10.70), ("a3", 10.90)),
        _heat(2, ("b1", 10.40), ("b2", 10.60), ("b3", 10.80)),
        _heat(3, ("c1", 10.55), ("c2", 10.65), ("c3", 10.75), ("c4", 11.20)),
    ]


def test_two_q_two_q_over_three_heats():
    outcome = compute_advancement(_three_heats(), AdvancementRule(by_place=2, by_time=2))
    assert outcome.ok
    assert _marked(outcome, "Q") == ["a1", "a2", "b1", "b2", "c1", "c2"]
    assert _marked(outcome, "q") == ["b3", "c3"]
    assert outcome.qualified_by_place == 6
    assert outcome.qualified_by_time == 2
    assert outcome.total_advancing == 8
    assert outcome.total_finished == 10
    assert outcome.summary == "6Q + 2q"
    assert not outcome.ties_at_cutoff


def test_places_are_assigned_within_each_heat():
    outcome = compute_advancement(_three_heats(), AdvancementRule(by_place=1, by_time=0))
    places = {row.entry_id: row.place for row in outcome.rows}
    assert places["b1"] == 1
    assert places["b3"] == 3
    assert places["c4"] == 4


def test_time_only_rule_on_single_heat():
    heat = _heat(1, *[(f"r{i}", 11.0 - i / 10) for i in range(8)])
    outcome = compute_advancement([heat], {"by_place": 0, "by_time": 5})
    assert outcome.qualified_by_place == 0
    assert _marked(outcome, "q") == ["r3", "r4", "r5", "r6", "r7"]
    assert outcome.total_advancing == 5


def test_tie_at_q_cutoff_advances_everyone_tied():
    heats = [
        _heat(1, ("a1", 10.0), ("a2", 10.5)),
        _heat(2, ("b1", 10.1), ("b2", 10.5)),
        _heat(3, ("c1", 10.2), ("c2", 10.9)),
    ]
    outcome = compute_advancement(heats, AdvancementRule(by_place=1, by_time=1))
    assert _marked(outcome, "q") == ["a2", "b2"]
    assert outcome.qualified_by_time == 2
    assert outcome.ties_at_cutoff


def test_tie_inside_heat_keeps_reported_order():
    heat = _heat(1, ("first", 10.3), ("second", 10.3), ("third", 10.4))
    outcome = compute_advancement([heat], AdvancementRule(by_place=1, by_time=0))
    assert _marked(outcome, "Q") == ["first"]
    assert outcome.marks["second"] is None


def test_non_finishers_never_advance():
    heats = [
        _heat(1, ("a1", 10.0), ("a2", None, "DNS"), ("a3", 9.0, "DQ")),
        _heat(2, ("b1", 10.2), ("b2", None, "DNF")),
    ]
    outcome = compute_advancement(heats, AdvancementRule(by_place=2, by_time=5))
    assert outcome.marks == {"a1": "Q", "a2": None, "a3": None, "b1": "Q", "b2": None}
    assert outcome.total_finished == 2
    unplaced = [row for row in outcome.rows if row.state != "finished"]
    assert all(row.place is None for row in unplaced)


def test_more_q_than_heat_size_is_not_an_error():
    heat = _heat(1, ("a1", 10.0), ("a2", 10.1))
    outcome = compute_advancement([heat], AdvancementRule(by_place=4, by_time=3))
    assert outcome.ok
    assert outcome.qualified_by_place == 2
    assert outcome.qualified_by_time == 0


def test_field_event_direction_prefers_longer_marks():
    heats = [
        _heat(1, ("a1", 7.10), ("a2", 7.50)),
        _heat(2, ("b1", 6.90), ("b2", 7.30)),
    ]
    outcome = compute_advancement(
        heats, AdvancementRule(by_place=1, by_time=1), direction="descending"
    )
    assert _marked(outcome, "Q") == ["a2", "b2"]
    assert _marked(outcome, "q") == ["a1"]


@pytest.mark.parametrize(
    "rule",
    [
        AdvancementRule(by_place=-1, by_time=2),
        {"by_place": 2, "by_time": -3},
        {"by_place": 2},
        {"by_place": 2, "by_time": 2, "bonus": 1},
    ],
)
def test_invalid_rule_is_returned(rule):
    outcome = compute_advancement(_three_heats(), rule)
    assert not outcome.ok
    assert outcome.error.kind == "invalid_configuration"
    assert outcome.rows == ()


def test_unknown_direction_is_invalid():
    outcome = compute_advancement(_three_heats(), AdvancementRule(2, 2), direction="sideways")
    assert outcome.error.kind == "invalid_configuration"


def test_zero_rule_warns_and_marks_nobody():
    outcome = compute_advancement(_three_heats(), AdvancementRule(0, 0))
    assert outcome.ok
    assert outcome.total_advancing == 0
    assert "no_advancement_configured" in outcome.warnings


def test_finished_without_result_is_counted_but_unplaced():
    heat = _heat(1, ("a1", 10.0), ("a2", None))
    outcome = compute_advancement([heat], AdvancementRule(by_place=2, by_time=0))
    assert outcome.total_finished == 2
    assert outcome.marks == {"a1": "Q", "a2": None}
    assert "finished_without_result:a2" in outcome.warnings


def test_non_finite_result_is_unplaced_and_does_not_break_ordering():
    heat = _heat(1, ("a", 10.5), ("n", float("nan")), ("b", 10.1), ("c", 10.3))
    outcome = compute_advancement([heat], AdvancementRule(by_place=1, by_time=1))
    assert outcome.marks == {"b": "Q", "c": "q", "a": None, "n": None}
    assert outcome.total_finished == 4
    assert "finished_without_result:n" in outcome.warnings
    places = {row.entry_id: row.place for row in outcome.rows}
    assert places == {"b": 1, "c": 2, "a": 3, "n": None}


def test_rule_larger_than_lane_count_on_unlaned_heat():
    entries = [Entry(id=f"e{i}", seed_value=300.0 + i) for i in range(1, 21)]
    seeded = seed_event(
        entries, SeedingConfig(lane_count=12, heat_count=1, race_type="distance")
    )
    heat = HeatResult(
        heat_number=1,
        results=tuple(FinishResult(a.entry_id, a.seed_value) for a in seeded.assignments),
    )
    outcome = compute_advancement([heat], AdvancementRule(by_place=13, by_time=0))
    assert outcome.ok
    assert outcome.qualified_by_place == 13


def test_seeded_round_two_q_two_q_end_to_end():
    entries = [Entry(id=f"e{i}", seed_value=10.0 + i / 10) for i in range(1, 11)]
    seeded = seed_event(entries, SeedingConfig(lane_count=4, strategy="serpentine"))
    assert seeded.heat_count == 3
    heats = [
        HeatResult(
            heat_number=heat.heat_number,
            results=tuple(FinishResult(a.entry_id, a.seed_value) for a in heat.assignments),
        )
        for heat in seeded.heats
    ]
    outcome = compute_advancement(heats, AdvancementRule(by_place=2, by_time=2))
    assert outcome.qualified_by_place == 6
    assert outcome.qualified_by_time == 2
    assert outcome.total_advancing == 8
    assert outcome.total_finished == 10


def test_empty_round_gives_empty_outcome():
    outcome = compute_advancement([], AdvancementRule(2, 2))
    assert outcome.ok
    assert outcome.rows == ()
    assert outcome.total_advancing == 0


def test_rows_for_same_heat_are_merged():
    heats = [_heat(1, ("a1", 10.2)), _heat(1, ("a2", 10.1))]
    outcome = compute_advancement(heats, AdvancementRule(by_place=1, by_time=0))
    assert outcome.marks == {"a2": "Q", "a1": None}


def test_recompute_is_idempotent():
    rule = AdvancementRule(by_place=2, by_time=2)
    assert compute_advancement(_three_heats(), rule) == compute_advancement(_three_heats(), rule)


def test_to_rows_reports_place_and_mark():
    outcome = compute_advancement(_three_heats(), AdvancementRule(2, 2))
    rows = {row["entry_id"]: row for row in outcome.to_rows()}
    assert rows["b1"] == {
        "entry_id": "b1",
        "heat_number": 2,
        "result_place": 1,
        "qualification_mark": "Q",
    }
    assert rows["c4"]["qualification_mark"] is None


def test_format_advancement_label():
    assert format_advancement_label(3, 2) == "3Q + 2q"
    assert format_advancement_label(4, 0) == "4Q"
    assert format_advancement_label(0, 6) == "6q"
    assert AdvancementRule(2, 4).label == "2Q + 4q"


def test_heat_results_from_rows():
    rows = [
        {"entry_id": "b1", "heat_number": 2, "result_value": 10.4},
        {"entry_id": "a1", "heat_number": 1, "result_value": 10.5, "status": "ok"},
        {"entry_id": "a2", "heat_number": 1, "result_value": 10.9, "status": "dnf"},
        {"entry_id": "a3", "heat_number": 1, "status": "NM"},
        {"entry_id": "bad", "heat_number": 0, "result_value": 10.0},
        {"entry_id": "b2", "heat_number": 2, "status": "withdrawn"},
    ]
    heats = heat_results_from_rows(rows)
    assert [heat.heat_number for heat in heats] == [1, 2]
    assert heats[0].results == (
        FinishResult("a1", 10.5, "finished"),
        FinishResult("a2", None, "DNF"),
        FinishResult("a3", None, "DNF"),
    )
    assert heats[1].results == (FinishResult("b1", 10.4, "finished"),)


def test_rank_for_next_round_orders_by_place_then_time():
    outcome = compute_advancement(_three_heats(), AdvancementRule(by_place=2, by_time=2))
    ranked = rank_for_next_round(outcome)
    assert [entry.id for entry in ranked] == ["b1", "a1", "c1", "b2", "c2", "a2", "c3", "b3"]
    assert ranked[0].seed_value == pytest.approx(10.40)
    assert all(entry.is_startable for entry in ranked)


def test_next_round_seeding_keeps_qualification_order():
    outcome = compute_advancement(_three_heats(), AdvancementRule(by_place=2, by_time=2))
    ranked = rank_for_next_round(outcome)
    final = seed_event(ranked, SeedingConfig(lane_count=8), preserve_order=True)
    assert final.heat_count == 1
    lanes = {a.entry_id: a.lane for a in final.assignments}
    assert lanes["b1"] == 4
    assert lanes["b3"] == 8
