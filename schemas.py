from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import TypedDict, List, Optional


class TimeSlot(str, Enum):
    # 순서가 곧 동점 처리 우선순위
    ANY_TIME = "Any Time"
    MORNING = "Morning (9am-12pm)"
    AFTERNOON = "Afternoon (12pm-5pm)"
    EVENING = "Evening (5pm-9pm)"
    LATE_NIGHT = "Late Night (9pm+)"

    @property
    def position(self) -> int:
        return SLOT_ORDER.index(self)


SLOT_ORDER: List[TimeSlot] = list(TimeSlot)
CONCRETE_SLOTS: List[TimeSlot] = [s for s in SLOT_ORDER if s is not TimeSlot.ANY_TIME]


@dataclass
class Availability:
    day: date
    slots: set[TimeSlot]


@dataclass
class ParticipantAvailability:
    id: str
    name: str
    availabilities: List[Availability] = field(default_factory=list)
    notes: Optional[str] = None


@dataclass(frozen=True)
class SlotOption:
    day: date
    slot: TimeSlot
    attendance: int


@dataclass(frozen=True)
class AggregationResult:
    best_options: List[SlotOption]
    ranked_options: List[SlotOption]

    @property
    def max_attendance(self) -> int:
        return self.best_options[0].attendance if self.best_options else 0


class RoomData(TypedDict):
    name: str                                       # 방 이름
    participants: List[ParticipantAvailability]     # 참가자별 가능 일정
