"""
Previous-Season Fixture Lookup

Once both teams of a slot are chosen, the slot is auto-populated from last
season's meeting between them:
- Home advantage alternates: last season's home side plays away this season
- With no previous meeting, team A is at home
- Venue is the home team's stadium, location is that stadium's city

The schedule engine stores whatever this returns without validating it.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import and_, or_
from sqlmodel import Session, select

from fixture_scheduler.models.fixture import Fixture
from fixture_scheduler.models.stadium import Stadium
from fixture_scheduler.models.team import Team
from fixture_scheduler.services.fixture_schedule import Participant, StadiumRef

logger = logging.getLogger(__name__)


class PreviousFixtureError(Exception):
    """A team referenced by the lookup does not exist"""
    pass


@dataclass
class PreviousFixtureResult:
    home_team: Team
    away_team: Team
    stadium: Optional[Stadium]
    location: Optional[str]
    previous_fixture: Optional[Fixture]


def team_to_participant(team: Team) -> Participant:
    return Participant(id=str(team.id), name=team.name)


def stadium_to_ref(stadium: Optional[Stadium]) -> Optional[StadiumRef]:
    if stadium is None:
        return None
    return StadiumRef(id=str(stadium.id), name=stadium.name)


def find_fixture_between(session: Session, season: int, team_a_id: int, team_b_id: int) -> Optional[Fixture]:
    """Fixture between two teams in a season, in either orientation."""
    return session.exec(
        select(Fixture).where(
            Fixture.season == season,
            or_(
                and_(Fixture.home_team_id == team_a_id, Fixture.away_team_id == team_b_id),
                and_(Fixture.home_team_id == team_b_id, Fixture.away_team_id == team_a_id),
            ),
        )
    ).first()


def lookup_previous_fixture(session: Session, season: int, team_a_id: int, team_b_id: int) -> PreviousFixtureResult:
    """
    Resolve orientation and venue for a pairing in `season`.

    Raises:
        PreviousFixtureError if either team is unknown
    """
    previous = find_fixture_between(session, season - 1, team_a_id, team_b_id)

    if previous is not None and previous.home_team_id == team_a_id:
        home_id, away_id = team_b_id, team_a_id
    else:
        home_id, away_id = team_a_id, team_b_id

    if previous is None:
        logger.debug("No season %d fixture between teams %s and %s", season - 1, team_a_id, team_b_id)

    home_team = session.get(Team, home_id)
    away_team = session.get(Team, away_id)
    if not home_team or not away_team:
        raise PreviousFixtureError("Teams not found")

    stadium = home_team.stadium
    return PreviousFixtureResult(
        home_team=home_team,
        away_team=away_team,
        stadium=stadium,
        location=stadium.city if stadium else None,
        previous_fixture=previous,
    )
