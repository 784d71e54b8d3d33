"""
Pairing Suggestions and Conflict Resolution

Helps an admin fill a slot by hand:
- Suggest pairings of teams still free in the round that have not met yet
- When nothing fits, explain why each free pair is unusable
- Group duplicate-matchup remedies (reset the other fixture) by slot
"""

from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from itertools import combinations
from typing import Any, Dict, Iterable, List, Optional, Tuple

from fixture_scheduler.services.constraint_validator import ConflictSuggestion, Violation, validate
from fixture_scheduler.services.fixture_schedule import Participant, Schedule, SlotLocation, get_slot
from fixture_scheduler.services.trackers import Trackers, derive_trackers, matchup_key

Pairing = Tuple[Participant, Participant]


class InfeasibilityReason(str, Enum):
    ALREADY_PLAYED = "already played"
    # No exclusion rule matched; kept explicit rather than guessed
    UNKNOWN = "unknown"


@dataclass
class InfeasiblePairing:
    team_a: Participant
    team_b: Participant
    reason: InfeasibilityReason

    def to_dict(self) -> Dict[str, Any]:
        return {
            "team_a": {"id": self.team_a.id, "name": self.team_a.name},
            "team_b": {"id": self.team_b.id, "name": self.team_b.name},
            "reason": self.reason.value,
        }


def _available_participants(schedule: Schedule, trackers: Trackers, round_number: int) -> List[Participant]:
    committed = trackers.per_round.get(round_number, {})
    available = [p for p in schedule.participants if not committed.get(p.id, False)]
    return sorted(available, key=lambda p: p.id)


def suggest_pairings(
    schedule: Schedule, trackers: Trackers, round_number: int, slot_index: int
) -> List[Pairing]:
    """
    Pairings that could still go into the given slot.

    Both teams must be uncommitted in the round and must not have met in
    any completed fixture. Ordered by participant id.
    """
    get_slot(schedule, round_number, slot_index)
    available = _available_participants(schedule, trackers, round_number)

    return [
        (team_a, team_b)
        for team_a, team_b in combinations(available, 2)
        if not trackers.matchups.get(matchup_key(team_a.id, team_b.id), False)
    ]


def explain_infeasibility(
    schedule: Schedule, trackers: Trackers, round_number: int, slot_index: int
) -> List[InfeasiblePairing]:
    """Reasons each free pair is unusable; empty when suggestions exist."""
    if suggest_pairings(schedule, trackers, round_number, slot_index):
        return []

    available = _available_participants(schedule, trackers, round_number)
    explanations: List[InfeasiblePairing] = []
    for team_a, team_b in combinations(available, 2):
        if trackers.matchups.get(matchup_key(team_a.id, team_b.id), False):
            reason = InfeasibilityReason.ALREADY_PLAYED
        else:
            reason = InfeasibilityReason.UNKNOWN
        explanations.append(InfeasiblePairing(team_a, team_b, reason))
    return explanations


def resolve_conflicts(violations: Iterable[Violation]) -> Dict[SlotLocation, List[ConflictSuggestion]]:
    """Group duplicate-matchup suggestions by the slot that should be reset."""
    grouped: Dict[SlotLocation, List[ConflictSuggestion]] = defaultdict(list)
    for violation in violations:
        if violation.suggestion is not None:
            grouped[violation.suggestion.slot_to_reset].append(violation.suggestion)
    return dict(grouped)


def slot_guidance(
    schedule: Schedule, round_number: int, slot_index: int, trackers: Optional[Trackers] = None
) -> Dict[str, Any]:
    """Suggestions, infeasibility reasons and conflict remedies for one slot."""
    if trackers is None:
        trackers = derive_trackers(schedule)

    suggestions = suggest_pairings(schedule, trackers, round_number, slot_index)
    explanations = [] if suggestions else explain_infeasibility(schedule, trackers, round_number, slot_index)
    conflicts = resolve_conflicts(validate(schedule).violations)

    return {
        "round": round_number,
        "slot_index": slot_index,
        "suggestions": [
            {"home_team": {"id": a.id, "name": a.name}, "away_team": {"id": b.id, "name": b.name}}
            for a, b in suggestions
        ],
        "infeasible": [e.to_dict() for e in explanations],
        "conflict_suggestions": [
            c.to_dict() for c in conflicts.get(SlotLocation(round_number, slot_index), [])
        ],
    }
