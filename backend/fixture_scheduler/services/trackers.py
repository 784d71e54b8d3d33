"""
Schedule Trackers

Derived views over a schedule, always rebuilt from scratch:
- Matchup tracker: which unordered pairs already have a completed fixture
- Per-round tracker: which participants are committed in each round

Trackers are never the source of truth and are never updated incrementally.
"""

from dataclasses import dataclass
from itertools import combinations
from typing import Dict, Optional, Sequence, Tuple

from fixture_scheduler.services.fixture_schedule import Participant, Schedule

MatchupKey = Tuple[str, str]  # (lower id, higher id)
MatchupTracker = Dict[MatchupKey, bool]
PerRoundTracker = Dict[int, Dict[str, bool]]


@dataclass
class Trackers:
    matchups: MatchupTracker
    per_round: PerRoundTracker


def matchup_key(participant_a_id: str, participant_b_id: str) -> MatchupKey:
    """Order-independent key for a pair of participant ids."""
    return (min(participant_a_id, participant_b_id), max(participant_a_id, participant_b_id))


def derive_matchup_tracker(
    schedule: Schedule, participants: Optional[Sequence[Participant]] = None
) -> MatchupTracker:
    if participants is None:
        participants = schedule.participants

    tracker: MatchupTracker = {}
    for team_a, team_b in combinations(participants, 2):
        tracker[matchup_key(team_a.id, team_b.id)] = False

    for round_slots in schedule.rounds:
        for slot in round_slots:
            if not slot.is_completed:
                continue
            key = matchup_key(slot.home_team.id, slot.away_team.id)
            # Pairs outside the roster (or self-play) are not tracked
            if key in tracker:
                tracker[key] = True
    return tracker


def derive_per_round_tracker(
    schedule: Schedule, participants: Optional[Sequence[Participant]] = None
) -> PerRoundTracker:
    if participants is None:
        participants = schedule.participants

    tracker: PerRoundTracker = {}
    for round_idx, round_slots in enumerate(schedule.rounds):
        round_number = round_idx + 1
        committed = {p.id: False for p in participants}
        for slot in round_slots:
            if slot.is_completed:
                committed[slot.home_team.id] = True
                committed[slot.away_team.id] = True
        tracker[round_number] = committed
    return tracker


def derive_trackers(schedule: Schedule) -> Trackers:
    return Trackers(
        matchups=derive_matchup_tracker(schedule),
        per_round=derive_per_round_tracker(schedule),
    )
