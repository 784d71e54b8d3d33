"""
Team Directory API Routes
Read-only access to the teams a schedule can be built from.
"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlmodel import Session, select

from fixture_scheduler.database import get_session
from fixture_scheduler.models.team import Team

router = APIRouter()


# ============================================================================
# Response Models
# ============================================================================


class StadiumSummary(BaseModel):
    id: int
    name: str
    city: str


class TeamResponse(BaseModel):
    id: int
    name: str
    ranking: Optional[int] = None
    location: Optional[str] = None
    coach: Optional[str] = None
    stadium: Optional[StadiumSummary] = None
    created_at: datetime


def _to_response(team: Team) -> TeamResponse:
    stadium = team.stadium
    return TeamResponse(
        id=team.id,
        name=team.name,
        ranking=team.ranking,
        location=team.location,
        coach=team.coach,
        stadium=StadiumSummary(id=stadium.id, name=stadium.name, city=stadium.city) if stadium else None,
        created_at=team.created_at,
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.get("/teams", response_model=List[TeamResponse])
def get_teams(session: Session = Depends(get_session)):
    """
    Get all teams.

    Returns teams in deterministic order:
    1. ranking ascending (nulls last)
    2. name ascending
    3. id ascending
    """
    teams = session.exec(select(Team)).all()

    def sort_key(team: Team):
        return (
            (team.ranking is None, team.ranking if team.ranking is not None else 0),
            team.name,
            team.id,
        )

    return [_to_response(team) for team in sorted(teams, key=sort_key)]


@router.get("/teams/{team_id}", response_model=TeamResponse)
def get_team(team_id: int, session: Session = Depends(get_session)):
    team = session.get(Team, team_id)
    if not team:
        raise HTTPException(status_code=404, detail="Team not found")
    return _to_response(team)
