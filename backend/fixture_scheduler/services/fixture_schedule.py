"""
Manual Fixture Schedule Model

In-memory representation of a round-robin schedule being built by hand:
- One round per opponent (participants - 1 rounds)
- participants / 2 fixture slots per round
- Slots start empty and untouched, and are mutated in place

Shape (round and slot counts) is fixed at creation. Only slot contents change.
Structural mistakes (bad roster, out-of-range round/slot) raise immediately and
leave the schedule unchanged; rule violations are left to the validator.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Iterator, List, NamedTuple, Optional, Sequence, Tuple

TOURNAMENT_SIZE = 6


class ScheduleError(Exception):
    """Base exception for structural schedule errors"""
    pass


class InvalidParticipantCount(ScheduleError):
    """Roster cannot form the fixed-size round robin"""
    pass


class SlotOutOfRange(ScheduleError):
    """Round or slot index does not exist in the schedule"""
    pass


@dataclass(frozen=True)
class Participant:
    id: str
    name: str


@dataclass(frozen=True)
class StadiumRef:
    # Opaque to the engine; supplied by the previous-fixture lookup
    id: str
    name: str


class Side(str, Enum):
    HOME = "home"
    AWAY = "away"


class SlotState(str, Enum):
    EMPTY = "empty"
    PARTIALLY_FILLED = "partially_filled"
    COMPLETED = "completed"


class SlotLocation(NamedTuple):
    round: int  # 1-based
    slot_index: int  # 0-based

    def to_dict(self) -> dict:
        return {"round": self.round, "slot_index": self.slot_index}


@dataclass
class FixtureSlot:
    round: int
    date: Optional[datetime] = None
    home_team: Optional[Participant] = None
    away_team: Optional[Participant] = None
    stadium: Optional[StadiumRef] = None
    location: Optional[str] = None
    touched: bool = False

    @property
    def is_completed(self) -> bool:
        return self.home_team is not None and self.away_team is not None and self.date is not None

    @property
    def state(self) -> SlotState:
        if self.is_completed:
            return SlotState.COMPLETED
        if not self.touched:
            return SlotState.EMPTY
        return SlotState.PARTIALLY_FILLED


@dataclass
class Schedule:
    participants: List[Participant]
    rounds: List[List[FixtureSlot]] = field(default_factory=list)
    season: Optional[int] = None

    @property
    def round_count(self) -> int:
        return len(self.rounds)

    @property
    def slots_per_round(self) -> int:
        return len(self.rounds[0]) if self.rounds else 0


def initialize_schedule(participants: Sequence[Participant], season: Optional[int] = None) -> Schedule:
    """
    Build an empty schedule for the chosen roster.

    Raises:
        InvalidParticipantCount: odd count, count other than TOURNAMENT_SIZE,
            or the same participant id listed twice
    """
    count = len(participants)
    if count % 2 != 0 or count != TOURNAMENT_SIZE:
        raise InvalidParticipantCount(
            f"Exactly {TOURNAMENT_SIZE} participants are required, got {count}"
        )
    if len({p.id for p in participants}) != count:
        raise InvalidParticipantCount("Participant ids must be unique")

    rounds: List[List[FixtureSlot]] = []
    for round_number in range(1, count):
        rounds.append([FixtureSlot(round=round_number) for _ in range(count // 2)])

    return Schedule(participants=list(participants), rounds=rounds, season=season)


def get_slot(schedule: Schedule, round_number: int, slot_index: int) -> FixtureSlot:
    """Look up a slot by 1-based round and 0-based slot index."""
    if round_number < 1 or round_number > schedule.round_count:
        raise SlotOutOfRange(f"Round {round_number} does not exist (1..{schedule.round_count})")
    round_slots = schedule.rounds[round_number - 1]
    if slot_index < 0 or slot_index >= len(round_slots):
        raise SlotOutOfRange(
            f"Slot {slot_index} does not exist in Round {round_number} (0..{len(round_slots) - 1})"
        )
    return round_slots[slot_index]


def iter_slots(schedule: Schedule) -> Iterator[Tuple[SlotLocation, FixtureSlot]]:
    """Yield every slot in round-major, slot-index order."""
    for round_idx, round_slots in enumerate(schedule.rounds):
        for slot_idx, slot in enumerate(round_slots):
            yield SlotLocation(round_idx + 1, slot_idx), slot


def assign_team(
    schedule: Schedule, round_number: int, slot_index: int, side: Side, participant: Participant
) -> Schedule:
    """
    Put a participant on one side of a slot.

    Any stadium/location on the slot is cleared: the venue depends on the
    pairing and must be looked up again once both sides are known.
    """
    slot = get_slot(schedule, round_number, slot_index)
    if Side(side) == Side.HOME:
        slot.home_team = participant
    else:
        slot.away_team = participant
    slot.stadium = None
    slot.location = None
    slot.touched = True
    return schedule


def set_date(schedule: Schedule, round_number: int, slot_index: int, timestamp: datetime) -> Schedule:
    slot = get_slot(schedule, round_number, slot_index)
    slot.date = timestamp
    slot.touched = True
    return schedule


def reset_slot(schedule: Schedule, round_number: int, slot_index: int) -> Schedule:
    """Return a slot to its empty, untouched state."""
    slot = get_slot(schedule, round_number, slot_index)
    slot.date = None
    slot.home_team = None
    slot.away_team = None
    slot.stadium = None
    slot.location = None
    slot.touched = False
    return schedule


def apply_venue(
    schedule: Schedule,
    round_number: int,
    slot_index: int,
    home_team: Participant,
    away_team: Participant,
    stadium: Optional[StadiumRef],
    location: Optional[str],
) -> Schedule:
    """
    Store the orientation and venue returned by the previous-fixture lookup.

    Values are taken as-is; stadium correctness is not validated here.
    """
    slot = get_slot(schedule, round_number, slot_index)
    slot.home_team = home_team
    slot.away_team = away_team
    slot.stadium = stadium
    slot.location = location
    slot.touched = True
    return schedule
