"""
Tests for saving a manual schedule as the season's fixture list

Verifies:
1. A complete, valid schedule is stored slot by slot
2. Saving again replaces the season's fixtures
3. Every blocker is reported and nothing is written when any exists
"""

from datetime import datetime

import pytest
from sqlmodel import select

from fixture_scheduler.models.fixture import Fixture
from fixture_scheduler.services.fixture_finalization import (
    FinalizationError,
    find_save_blockers,
    save_schedule,
)
from fixture_scheduler.services.fixture_schedule import reset_slot
from tests.schedule_factory import add_fixture, build_full_schedule, kickoff, make_participants, seed_directory


def _season_fixtures(session, season):
    return session.exec(
        select(Fixture).where(Fixture.season == season).order_by(Fixture.round, Fixture.sequence_in_round)
    ).all()


def test_save_complete_schedule(session):
    participants = seed_directory(session)
    schedule = build_full_schedule(participants, season=2026)

    assert find_save_blockers(session, schedule) == []
    assert save_schedule(session, schedule) == 15

    fixtures = _season_fixtures(session, 2026)
    assert len(fixtures) == 15
    first = fixtures[0]
    assert (first.round, first.sequence_in_round) == (1, 1)
    assert first.home_team_id == int(participants[0].id)
    assert first.away_team_id == int(participants[5].id)
    assert first.date == kickoff(1, 0)
    last = fixtures[-1]
    assert (last.round, last.sequence_in_round) == (5, 3)


def test_resave_replaces_season_fixtures(session):
    participants = seed_directory(session)
    add_fixture(session, 2025, 1, 1, participants[1], participants[0], datetime(2025, 2, 1, 15, 0))

    save_schedule(session, build_full_schedule(participants, season=2026))
    save_schedule(session, build_full_schedule(participants, season=2026))

    assert len(_season_fixtures(session, 2026)) == 15
    # Other seasons are untouched
    assert len(_season_fixtures(session, 2025)) == 1


def test_incomplete_schedule_is_rejected(session):
    participants = seed_directory(session)
    schedule = build_full_schedule(participants, season=2026)
    reset_slot(schedule, 5, 2)

    with pytest.raises(FinalizationError) as exc_info:
        save_schedule(session, schedule)

    blockers = exc_info.value.blockers
    assert "Round 5 fixture 3 is incomplete." in blockers
    assert "Round 5 does not have all teams scheduled." in blockers
    assert _season_fixtures(session, 2026) == []


def test_missing_season_is_rejected(session):
    participants = seed_directory(session)
    schedule = build_full_schedule(participants, season=None)

    assert find_save_blockers(session, schedule) == ["A season is required to save fixtures."]
    with pytest.raises(FinalizationError):
        save_schedule(session, schedule)


def test_invalid_schedule_reports_violations(session):
    participants = seed_directory(session)
    schedule = build_full_schedule(participants, season=2026)
    schedule.rounds[0][0].date = datetime(2026, 2, 9, 15, 0)  # Monday

    blockers = find_save_blockers(session, schedule)
    assert any(b.startswith("Invalid date/time for England vs Wales") for b in blockers)
    assert "All fixtures in Round 1 must be on the same weekend." in blockers


def test_teams_outside_directory_are_rejected(session):
    seed_directory(session)
    schedule = build_full_schedule(make_participants(), season=2026)

    blockers = find_save_blockers(session, schedule)
    assert blockers == [f"Team {name} is not in the team directory." for name in
                        ["England", "France", "Ireland", "Italy", "Scotland", "Wales"]]


def test_home_advantage_must_alternate(session):
    participants = seed_directory(session)
    eng, wal = participants[0], participants[5]
    # Round 1 of the built schedule has England at home to Wales
    add_fixture(session, 2025, 1, 1, eng, wal, datetime(2025, 2, 1, 15, 0))

    schedule = build_full_schedule(participants, season=2026)
    with pytest.raises(FinalizationError) as exc_info:
        save_schedule(session, schedule)

    assert exc_info.value.blockers == [
        "Home advantage not alternated for England vs Wales: England was at home in 2025."
    ]
    assert _season_fixtures(session, 2026) == []
