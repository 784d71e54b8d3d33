"""
Fixture Finalization

Saves a hand-built schedule as the season's fixture list. A save is only
allowed when:
1. A season is set
2. Every slot is completed
3. The validator reports no violations
4. Every team exists in the team directory
5. Home advantage alternates against last season's meeting of the same pair

Saving replaces all fixtures previously stored for the season.
"""

import logging
from typing import List, Optional

from sqlmodel import Session, select

from fixture_scheduler.models.fixture import Fixture
from fixture_scheduler.models.team import Team
from fixture_scheduler.services.constraint_validator import validate
from fixture_scheduler.services.fixture_schedule import Participant, Schedule, iter_slots
from fixture_scheduler.services.previous_fixture import find_fixture_between
from fixture_scheduler.utils.competition_calendar import to_utc

logger = logging.getLogger(__name__)


class FinalizationError(Exception):
    """Schedule cannot be saved; `blockers` lists every reason"""

    def __init__(self, blockers: List[str]):
        super().__init__("; ".join(blockers))
        self.blockers = blockers


def _as_int(value: str) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _directory_team_id(session: Session, participant: Participant) -> Optional[int]:
    team_id = _as_int(participant.id)
    if team_id is None or session.get(Team, team_id) is None:
        return None
    return team_id


def _directory_blockers(session: Session, schedule: Schedule) -> List[str]:
    blockers: List[str] = []
    for participant in schedule.participants:
        if _directory_team_id(session, participant) is None:
            blockers.append(f"Team {participant.name} is not in the team directory.")
    return blockers


def _home_advantage_blockers(session: Session, schedule: Schedule) -> List[str]:
    blockers: List[str] = []
    previous_season = schedule.season - 1

    for _loc, slot in iter_slots(schedule):
        if not slot.is_completed:
            continue
        home_id = _as_int(slot.home_team.id)
        away_id = _as_int(slot.away_team.id)
        if home_id is None or away_id is None:
            continue

        previous = find_fixture_between(session, previous_season, home_id, away_id)
        if previous is not None and previous.home_team_id == home_id:
            blockers.append(
                f"Home advantage not alternated for {slot.home_team.name} vs {slot.away_team.name}: "
                f"{slot.home_team.name} was at home in {previous_season}."
            )
    return blockers


def find_save_blockers(session: Session, schedule: Schedule) -> List[str]:
    """Every reason the schedule cannot be saved yet (empty when it can)."""
    blockers: List[str] = []

    if schedule.season is None:
        blockers.append("A season is required to save fixtures.")

    for loc, slot in iter_slots(schedule):
        if not slot.is_completed:
            blockers.append(f"Round {loc.round} fixture {loc.slot_index + 1} is incomplete.")

    blockers.extend(v.message for v in validate(schedule).violations)
    blockers.extend(_directory_blockers(session, schedule))

    if schedule.season is not None:
        blockers.extend(_home_advantage_blockers(session, schedule))

    return blockers


def save_schedule(session: Session, schedule: Schedule) -> int:
    """
    Replace the season's fixtures with the schedule.

    Returns:
        Number of fixtures saved

    Raises:
        FinalizationError if any blocker exists (nothing is written)
    """
    blockers = find_save_blockers(session, schedule)
    if blockers:
        logger.warning("Refusing to save season %s fixtures: %d blockers", schedule.season, len(blockers))
        raise FinalizationError(blockers)

    existing = session.exec(select(Fixture).where(Fixture.season == schedule.season)).all()
    for fixture in existing:
        session.delete(fixture)
    # Old rows must be gone before the (season, round, sequence) slots are reused
    session.flush()

    saved = 0
    for loc, slot in iter_slots(schedule):
        session.add(Fixture(
            season=schedule.season,
            round=loc.round,
            sequence_in_round=loc.slot_index + 1,
            date=to_utc(slot.date),
            home_team_id=int(slot.home_team.id),
            away_team_id=int(slot.away_team.id),
            stadium_id=_as_int(slot.stadium.id) if slot.stadium else None,
            location=slot.location,
        ))
        saved += 1

    session.commit()
    logger.info("Saved %d fixtures for season %s (replaced %d)", saved, schedule.season, len(existing))
    return saved
