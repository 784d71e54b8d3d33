"""
Manual Fixture Constraint Validator
===================================
Checks a (possibly partial) round-robin schedule against the competition rules
and reports every violation, localized to a slot where possible.

Rule families:
  A) A team plays at most once per round, and a started round lists every team
  B) No team plays itself
  C) Every pairing happens at most once (round robin)
  D) Kick-off inside the weekend window and in February/March
  E) One weekend per round, and no two rounds share a weekend
  F) Rounds are chronological
  G) Round 1 opens the first week of February, and nothing is played the
     weekend before it
  H) Every slot has been touched (informational flag only)

Only completed slots (both teams and a date) take part in rule checks.
Violations are data: the schedule stays editable however invalid it is, and
every call re-evaluates the whole schedule.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, NamedTuple, Optional, Set, Tuple

from fixture_scheduler.services.fixture_schedule import FixtureSlot, Schedule, SlotLocation, iter_slots
from fixture_scheduler.services.trackers import MatchupKey, matchup_key
from fixture_scheduler.utils.competition_calendar import (
    OPENING_MONTH,
    format_weekend,
    is_within_allowed_window,
    is_within_competition_months,
    previous_weekend_anchor,
    to_utc,
    week_of_month,
    weekend_anchor,
)

logger = logging.getLogger(__name__)


class ConstraintRule(str, Enum):
    TEAM_ONCE_PER_ROUND = "team_once_per_round"
    ROUND_COMPLETE = "round_complete"
    NO_SELF_PLAY = "no_self_play"
    UNIQUE_PAIRING = "unique_pairing"
    DATE_WINDOW = "date_window"
    SINGLE_WEEKEND_PER_ROUND = "single_weekend_per_round"
    NO_CROSS_ROUND_COLLISION = "no_cross_round_collision"
    CHRONOLOGICAL_ORDER = "chronological_order"
    ROUND1_PLACEMENT = "round1_placement"
    NO_PRE_ROUND1 = "no_pre_round1"
    ALL_TOUCHED = "all_touched"


ConstraintResults = Dict[ConstraintRule, bool]


# ─── Data structures ─────────────────────────────────────────────────────

class ConflictSuggestion(NamedTuple):
    slot_to_reset: SlotLocation
    conflicting_slot: SlotLocation

    def to_dict(self) -> Dict[str, Any]:
        return {
            "slot_to_reset": self.slot_to_reset.to_dict(),
            "conflicting_slot": self.conflicting_slot.to_dict(),
        }


class RoundConflict(NamedTuple):
    round_a: int
    round_b: int
    weekend: date


@dataclass
class Violation:
    code: ConstraintRule
    message: str
    location: Optional[SlotLocation] = None
    suggestion: Optional[ConflictSuggestion] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code.value,
            "message": self.message,
            "location": self.location.to_dict() if self.location else None,
            "suggestion": self.suggestion.to_dict() if self.suggestion else None,
        }


@dataclass
class ValidationReport:
    violations: List[Violation] = field(default_factory=list)
    results: ConstraintResults = field(default_factory=dict)
    incomplete_slots: List[SlotLocation] = field(default_factory=list)
    round_conflicts: List[RoundConflict] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.violations

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": self.ok,
            "violations": [v.to_dict() for v in self.violations],
            "results": {rule.value: passed for rule, passed in self.results.items()},
            "incomplete_slots": [loc.to_dict() for loc in self.incomplete_slots],
            "round_conflicts": [
                {"round_a": c.round_a, "round_b": c.round_b, "weekend": format_weekend(c.weekend)}
                for c in self.round_conflicts
            ],
        }


CompletedSlot = Tuple[SlotLocation, FixtureSlot]


def _describe(slot: FixtureSlot) -> str:
    return f"{slot.home_team.name} vs {slot.away_team.name}"


def _round_dates(completed: List[CompletedSlot]) -> Dict[int, datetime]:
    """A round's date is the date of its first completed slot."""
    dates: Dict[int, datetime] = {}
    for loc, slot in completed:
        if loc.round not in dates:
            dates[loc.round] = slot.date
    return dates


def _rounds_by_weekend(round_dates: Dict[int, datetime]) -> Dict[date, List[int]]:
    weekends: Dict[date, List[int]] = defaultdict(list)
    for round_number in sorted(round_dates):
        weekends[weekend_anchor(round_dates[round_number])].append(round_number)
    return weekends


# ─── A: Team once per round / round complete ─────────────────────────────

def _check_round_exclusivity(schedule: Schedule) -> List[Violation]:
    roster_ids = {p.id for p in schedule.participants}
    violations: List[Violation] = []

    for round_idx, round_slots in enumerate(schedule.rounds):
        round_number = round_idx + 1
        seen: Set[str] = set()
        started = False
        all_completed = True
        duplicated = False

        for slot_idx, slot in enumerate(round_slots):
            if not slot.is_completed:
                all_completed = False
                continue
            started = True

            sides = [slot.home_team, slot.away_team]
            if slot.home_team.id == slot.away_team.id:
                # Reported once as self-play, not also as a repeat in the round
                sides = [slot.home_team]

            for team in sides:
                if team.id in seen:
                    duplicated = True
                    violations.append(Violation(
                        code=ConstraintRule.TEAM_ONCE_PER_ROUND,
                        message=f"Team {team.name} is scheduled multiple times in Round {round_number}.",
                        location=SlotLocation(round_number, slot_idx),
                    ))
                else:
                    seen.add(team.id)

        if started and (not all_completed or duplicated or seen != roster_ids):
            violations.append(Violation(
                code=ConstraintRule.ROUND_COMPLETE,
                message=f"Round {round_number} does not have all teams scheduled.",
            ))

    return violations


# ─── B/C: Self-play and duplicate pairings ───────────────────────────────

def _check_pairings(completed: List[CompletedSlot]) -> List[Violation]:
    violations: List[Violation] = []
    first_seen: Dict[MatchupKey, SlotLocation] = {}

    for loc, slot in completed:
        if slot.home_team.id == slot.away_team.id:
            violations.append(Violation(
                code=ConstraintRule.NO_SELF_PLAY,
                message=f"Team {slot.home_team.name} is playing itself.",
                location=loc,
            ))
            continue

        key = matchup_key(slot.home_team.id, slot.away_team.id)
        if key not in first_seen:
            first_seen[key] = loc
            continue

        earlier = first_seen[key]
        violations.append(Violation(
            code=ConstraintRule.UNIQUE_PAIRING,
            message=(
                f"Duplicate matchup: {_describe(slot)} is already scheduled in "
                f"Round {earlier.round}, fixture {earlier.slot_index + 1}."
            ),
            location=loc,
            suggestion=ConflictSuggestion(slot_to_reset=loc, conflicting_slot=earlier),
        ))

    return violations


# ─── D/E: Date window and weekend grouping ───────────────────────────────

def _check_date_windows(completed: List[CompletedSlot]) -> List[Violation]:
    violations: List[Violation] = []
    for loc, slot in completed:
        if not is_within_allowed_window(slot.date):
            violations.append(Violation(
                code=ConstraintRule.DATE_WINDOW,
                message=(
                    f"Invalid date/time for {_describe(slot)}: kick-off must be between "
                    "Friday 18:00 and Sunday 20:00."
                ),
                location=loc,
            ))
        if not is_within_competition_months(slot.date):
            violations.append(Violation(
                code=ConstraintRule.DATE_WINDOW,
                message=f"Fixture must be in February or March: {_describe(slot)}.",
                location=loc,
            ))
    return violations


def _check_single_weekend(completed: List[CompletedSlot], round_dates: Dict[int, datetime]) -> List[Violation]:
    violations: List[Violation] = []
    for loc, slot in completed:
        if weekend_anchor(slot.date) != weekend_anchor(round_dates[loc.round]):
            violations.append(Violation(
                code=ConstraintRule.SINGLE_WEEKEND_PER_ROUND,
                message=f"All fixtures in Round {loc.round} must be on the same weekend.",
                location=loc,
            ))
    return violations


def _check_weekend_collisions(
    rounds_by_weekend: Dict[date, List[int]],
) -> Tuple[List[Violation], List[RoundConflict]]:
    violations: List[Violation] = []
    conflicts: List[RoundConflict] = []
    for anchor, rounds in rounds_by_weekend.items():
        for i in range(len(rounds)):
            for j in range(i + 1, len(rounds)):
                conflicts.append(RoundConflict(rounds[i], rounds[j], anchor))
                violations.append(Violation(
                    code=ConstraintRule.NO_CROSS_ROUND_COLLISION,
                    message=(
                        f"Rounds {rounds[i]} and {rounds[j]} share the same weekend "
                        f"({format_weekend(anchor)})."
                    ),
                ))
    return violations, conflicts


# ─── F/G: Round ordering and calendar placement ──────────────────────────

def _check_round_order(round_count: int, round_dates: Dict[int, datetime]) -> List[Violation]:
    violations: List[Violation] = []
    for round_number in range(2, round_count + 1):
        prev = round_dates.get(round_number - 1)
        curr = round_dates.get(round_number)
        if prev is not None and curr is not None and to_utc(curr) <= to_utc(prev):
            violations.append(Violation(
                code=ConstraintRule.CHRONOLOGICAL_ORDER,
                message=f"Round {round_number} must be after Round {round_number - 1}.",
            ))
    return violations


def _check_round1_placement(round_dates: Dict[int, datetime]) -> List[Violation]:
    round1 = round_dates.get(1)
    if round1 is None:
        return []
    if week_of_month(round1) == 1 and to_utc(round1).month == OPENING_MONTH:
        return []
    return [Violation(
        code=ConstraintRule.ROUND1_PLACEMENT,
        message="Round 1 must be in the first week of February.",
    )]


def _check_weekend_before_round1(
    round_dates: Dict[int, datetime], rounds_by_weekend: Dict[date, List[int]]
) -> List[Violation]:
    round1 = round_dates.get(1)
    if round1 is None:
        return []
    rounds = rounds_by_weekend.get(previous_weekend_anchor(round1), [])
    return [
        Violation(
            code=ConstraintRule.NO_PRE_ROUND1,
            message=f"Round {round_number} is on the weekend before Round 1.",
        )
        for round_number in rounds
    ]


# ─── Entry point ─────────────────────────────────────────────────────────

def validate(schedule: Schedule) -> ValidationReport:
    """
    Validate the whole schedule from scratch.

    An untouched schedule is unstarted: empty report. A schedule with touched
    but no completed slots only lists the incomplete slots. Otherwise every
    rule family is evaluated and gets a result flag.
    """
    touched = [(loc, slot) for loc, slot in iter_slots(schedule) if slot.touched]
    if not touched:
        return ValidationReport()

    completed = [(loc, slot) for loc, slot in touched if slot.is_completed]
    incomplete = [loc for loc, slot in touched if not slot.is_completed]
    if not completed:
        return ValidationReport(incomplete_slots=incomplete)

    round_dates = _round_dates(completed)
    rounds_by_weekend = _rounds_by_weekend(round_dates)

    violations: List[Violation] = []
    violations.extend(_check_round_exclusivity(schedule))
    violations.extend(_check_pairings(completed))
    violations.extend(_check_date_windows(completed))
    violations.extend(_check_single_weekend(completed, round_dates))
    collision_violations, round_conflicts = _check_weekend_collisions(rounds_by_weekend)
    violations.extend(collision_violations)
    violations.extend(_check_round_order(schedule.round_count, round_dates))
    violations.extend(_check_round1_placement(round_dates))
    violations.extend(_check_weekend_before_round1(round_dates, rounds_by_weekend))

    failed = {v.code for v in violations}
    results: ConstraintResults = {rule: rule not in failed for rule in ConstraintRule}
    results[ConstraintRule.ALL_TOUCHED] = all(slot.touched for _, slot in iter_slots(schedule))

    logger.debug(
        "Validated schedule: %d completed, %d incomplete, %d violations",
        len(completed), len(incomplete), len(violations),
    )

    return ValidationReport(
        violations=violations,
        results=results,
        incomplete_slots=incomplete,
        round_conflicts=round_conflicts,
    )
