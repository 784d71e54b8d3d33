"""
Manual Fixture Scheduler API Routes

Stateless endpoints over the schedule engine. Every request carries the full
schedule snapshot; every response is recomputed from it:
- validate: full constraint report
- suggestions: pairings / infeasibility / conflict remedies for one slot
- previous-fixture: orientation and venue from last season's meeting
- save: finalize and persist the season's fixtures
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlmodel import Session

from fixture_scheduler.database import get_session
from fixture_scheduler.services.constraint_validator import validate
from fixture_scheduler.services.fixture_finalization import FinalizationError, save_schedule
from fixture_scheduler.services.fixture_schedule import (
    FixtureSlot,
    Participant,
    Schedule,
    ScheduleError,
    StadiumRef,
    initialize_schedule,
)
from fixture_scheduler.services.previous_fixture import PreviousFixtureError, lookup_previous_fixture
from fixture_scheduler.services.suggestions import resolve_conflicts, slot_guidance

router = APIRouter()


# ============================================================================
# Request Models
# ============================================================================


class ParticipantPayload(BaseModel):
    id: str
    name: str


class StadiumPayload(BaseModel):
    id: str
    name: str


class FixtureSlotPayload(BaseModel):
    date: Optional[datetime] = None
    home_team: Optional[ParticipantPayload] = None
    away_team: Optional[ParticipantPayload] = None
    stadium: Optional[StadiumPayload] = None
    location: Optional[str] = None
    touched: bool = False


class ScheduleRequest(BaseModel):
    season: Optional[int] = None
    participants: List[ParticipantPayload]
    rounds: List[List[FixtureSlotPayload]]


class SlotGuidanceRequest(ScheduleRequest):
    round: int
    slot_index: int


def _participant(payload: Optional[ParticipantPayload]) -> Optional[Participant]:
    if payload is None:
        return None
    return Participant(id=payload.id, name=payload.name)


def build_schedule(request: ScheduleRequest) -> Schedule:
    """
    Rebuild an engine Schedule from a request snapshot.

    Raises:
        HTTPException 400: bad roster or rounds/slots not matching the roster
    """
    try:
        schedule = initialize_schedule([_participant(p) for p in request.participants], season=request.season)
    except ScheduleError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if len(request.rounds) != schedule.round_count or any(
        len(round_slots) != schedule.slots_per_round for round_slots in request.rounds
    ):
        raise HTTPException(
            status_code=400,
            detail=(
                f"Schedule must have {schedule.round_count} rounds of "
                f"{schedule.slots_per_round} fixtures"
            ),
        )

    for round_idx, round_slots in enumerate(request.rounds):
        for slot_idx, payload in enumerate(round_slots):
            has_data = any(
                value is not None
                for value in (payload.date, payload.home_team, payload.away_team, payload.stadium, payload.location)
            )
            schedule.rounds[round_idx][slot_idx] = FixtureSlot(
                round=round_idx + 1,
                date=payload.date,
                home_team=_participant(payload.home_team),
                away_team=_participant(payload.away_team),
                stadium=StadiumRef(id=payload.stadium.id, name=payload.stadium.name) if payload.stadium else None,
                location=payload.location,
                touched=payload.touched or has_data,
            )

    return schedule


# ============================================================================
# Endpoints
# ============================================================================


@router.post("/manual-fixtures/validate")
def validate_manual_fixtures(request: ScheduleRequest) -> Dict[str, Any]:
    """
    Validate a schedule snapshot.

    Returns the full violation list, the rule-by-rule results, incomplete
    slots, round weekend conflicts and duplicate-matchup remedies.
    """
    schedule = build_schedule(request)
    report = validate(schedule)

    response = report.to_dict()
    response["conflict_suggestions"] = [
        {"slot": loc.to_dict(), "suggestions": [s.to_dict() for s in suggestions]}
        for loc, suggestions in resolve_conflicts(report.violations).items()
    ]
    return response


@router.post("/manual-fixtures/suggestions")
def suggest_for_slot(request: SlotGuidanceRequest) -> Dict[str, Any]:
    """Pairing suggestions (or reasons there are none) for one slot."""
    schedule = build_schedule(request)
    try:
        return slot_guidance(schedule, request.round, request.slot_index)
    except ScheduleError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/manual-fixtures/previous-fixture")
def get_previous_fixture(
    season: Optional[int] = Query(default=None),
    team_a_id: Optional[int] = Query(default=None),
    team_b_id: Optional[int] = Query(default=None),
    session: Session = Depends(get_session),
) -> Dict[str, Any]:
    """
    Orientation and venue for a pairing, based on last season's meeting.

    The side that hosted last season plays away; the venue is the new home
    team's stadium.
    """
    if season is None or team_a_id is None or team_b_id is None:
        raise HTTPException(status_code=400, detail="season, team_a_id, and team_b_id are required")

    try:
        result = lookup_previous_fixture(session, season, team_a_id, team_b_id)
    except PreviousFixtureError as e:
        raise HTTPException(status_code=404, detail=str(e))

    previous = result.previous_fixture
    return {
        "home_team": {"id": str(result.home_team.id), "name": result.home_team.name},
        "away_team": {"id": str(result.away_team.id), "name": result.away_team.name},
        "stadium": {"id": str(result.stadium.id), "name": result.stadium.name} if result.stadium else None,
        "location": result.location,
        "previous_fixture": {
            "season": previous.season,
            "home_team_id": str(previous.home_team_id),
            "away_team_id": str(previous.away_team_id),
        }
        if previous
        else None,
    }


@router.post("/manual-fixtures/save")
def save_manual_fixtures(request: ScheduleRequest, session: Session = Depends(get_session)) -> Dict[str, Any]:
    """
    Save the schedule as the season's fixture list.

    Rejected with 400 and the full blocker list unless the schedule is
    complete and valid.
    """
    schedule = build_schedule(request)
    try:
        saved = save_schedule(session, schedule)
    except FinalizationError as e:
        raise HTTPException(status_code=400, detail={"message": "Validation failed", "errors": e.blockers})

    return {"message": "Fixtures saved successfully", "season": schedule.season, "saved": saved}
