"""
Tests for slot pairing suggestions, infeasibility reasons and
duplicate-matchup conflict remedies
"""

from datetime import datetime

import pytest

from fixture_scheduler.services.constraint_validator import ConflictSuggestion, validate
from fixture_scheduler.services.fixture_schedule import SlotLocation, SlotOutOfRange
from fixture_scheduler.services.suggestions import (
    InfeasibilityReason,
    explain_infeasibility,
    resolve_conflicts,
    slot_guidance,
    suggest_pairings,
)
from fixture_scheduler.services.trackers import derive_trackers
from tests.schedule_factory import fill_slot


def _ids(pairings):
    return [(a.id, b.id) for a, b in pairings]


def test_empty_schedule_suggests_every_pair_in_id_order(empty_schedule):
    trackers = derive_trackers(empty_schedule)
    pairings = suggest_pairings(empty_schedule, trackers, 1, 0)

    assert len(pairings) == 15
    assert _ids(pairings)[0] == ("eng", "fra")
    assert _ids(pairings)[-1] == ("sco", "wal")
    assert explain_infeasibility(empty_schedule, trackers, 1, 0) == []


def test_committed_teams_and_played_pairs_are_excluded(empty_schedule, participants):
    eng, fra, ire, ita, sco, wal = participants
    fill_slot(empty_schedule, 1, 0, eng, wal)
    fill_slot(empty_schedule, 2, 0, fra, ire, datetime(2026, 2, 14, 15, 0))

    pairings = suggest_pairings(empty_schedule, derive_trackers(empty_schedule), 2, 1)
    ids = _ids(pairings)
    # fra and ire are committed in Round 2
    assert all("fra" not in pair and "ire" not in pair for pair in ids)
    # eng-wal met in Round 1
    assert ("eng", "wal") not in ids
    assert ids == [("eng", "ita"), ("eng", "sco"), ("ita", "sco"), ("ita", "wal"), ("sco", "wal")]


def test_last_slot_with_only_played_pair_is_infeasible(empty_schedule, participants):
    """Scenario E: the only free pair in Round 3 already met in Round 1"""
    eng, fra, ire, ita, sco, wal = participants
    fill_slot(empty_schedule, 1, 0, eng, fra)
    fill_slot(empty_schedule, 3, 0, ire, ita)
    fill_slot(empty_schedule, 3, 1, sco, wal)

    trackers = derive_trackers(empty_schedule)
    assert suggest_pairings(empty_schedule, trackers, 3, 2) == []

    explanations = explain_infeasibility(empty_schedule, trackers, 3, 2)
    assert len(explanations) == 1
    assert explanations[0].team_a == eng
    assert explanations[0].team_b == fra
    assert explanations[0].reason == InfeasibilityReason.ALREADY_PLAYED


def test_fully_committed_round_has_nothing_to_explain(full_schedule):
    trackers = derive_trackers(full_schedule)
    assert suggest_pairings(full_schedule, trackers, 2, 1) == []
    assert explain_infeasibility(full_schedule, trackers, 2, 1) == []


def test_suggestions_ignore_incomplete_slots(empty_schedule, participants):
    eng, fra = participants[0], participants[1]
    fill_slot(empty_schedule, 1, 0, eng, fra)
    empty_schedule.rounds[0][0].date = None

    pairings = suggest_pairings(empty_schedule, derive_trackers(empty_schedule), 1, 1)
    assert ("eng", "fra") in _ids(pairings)


@pytest.mark.parametrize("round_number, slot_index", [(0, 0), (6, 1), (2, 3)])
def test_out_of_range_slot_raises(empty_schedule, round_number, slot_index):
    trackers = derive_trackers(empty_schedule)
    with pytest.raises(SlotOutOfRange):
        suggest_pairings(empty_schedule, trackers, round_number, slot_index)
    with pytest.raises(SlotOutOfRange):
        slot_guidance(empty_schedule, round_number, slot_index)


def test_resolve_conflicts_groups_by_slot_to_reset(empty_schedule, participants):
    eng, fra, wal = participants[0], participants[1], participants[5]
    fill_slot(empty_schedule, 1, 0, eng, wal)
    fill_slot(empty_schedule, 1, 1, fra, participants[2])
    fill_slot(empty_schedule, 2, 0, wal, eng)
    fill_slot(empty_schedule, 3, 2, participants[2], fra)

    grouped = resolve_conflicts(validate(empty_schedule).violations)
    assert grouped == {
        SlotLocation(2, 0): [ConflictSuggestion(SlotLocation(2, 0), SlotLocation(1, 0))],
        SlotLocation(3, 2): [ConflictSuggestion(SlotLocation(3, 2), SlotLocation(1, 1))],
    }


def test_resolve_conflicts_without_duplicates(full_schedule):
    assert resolve_conflicts(validate(full_schedule).violations) == {}


def test_slot_guidance_payload(empty_schedule, participants):
    eng, fra, ire, ita, sco, wal = participants
    fill_slot(empty_schedule, 1, 0, eng, fra)
    fill_slot(empty_schedule, 3, 0, ire, ita)
    fill_slot(empty_schedule, 3, 1, sco, wal)
    fill_slot(empty_schedule, 3, 2, fra, eng)

    guidance = slot_guidance(empty_schedule, 3, 2)
    assert guidance["round"] == 3
    assert guidance["slot_index"] == 2
    # Round 3 is full, so nothing is suggested and nothing is left to explain
    assert guidance["suggestions"] == []
    assert guidance["infeasible"] == []
    assert guidance["conflict_suggestions"] == [
        {
            "slot_to_reset": {"round": 3, "slot_index": 2},
            "conflicting_slot": {"round": 1, "slot_index": 0},
        }
    ]


def test_slot_guidance_lists_suggestions(empty_schedule):
    guidance = slot_guidance(empty_schedule, 1, 0)
    assert len(guidance["suggestions"]) == 15
    assert guidance["suggestions"][0] == {
        "home_team": {"id": "eng", "name": "England"},
        "away_team": {"id": "fra", "name": "France"},
    }
    assert guidance["infeasible"] == []
    assert guidance["conflict_suggestions"] == []
