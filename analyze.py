import logging
from datetime import date, datetime, timezone
from typing import Iterable, Optional, Union
from collections import defaultdict
from config import get_next_best_limit
from schemas import (
    CONCRETE_SLOTS,
    AggregationResult,
    ParticipantAvailability,
    SlotOption,
    TimeSlot,
)

logger = logging.getLogger(__name__)

DayLike = Union[date, datetime, str]


# =============================================================================
# 기본 함수
# =============================================================================

def to_day_key(value: DayLike) -> date:
    """
    날짜/시각 값을 하루 단위 키(date)로 잘라냅니다.

    시간대 정보가 있는 datetime은 UTC로 바꾼 뒤 날짜를 취하므로 같은 순간은
    항상 같은 날짜가 됩니다 (예: 2024-06-01T00:00+09:00 → 2024-05-31).
    시간대 정보가 없으면 적힌 달력 날짜를 그대로 씁니다. 문자열은 ISO 형식
    ("2024-06-01", "2024-06-01T15:00:00.000Z" 등)으로 해석합니다.
    """
    if isinstance(value, str):
        value = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    return value


def collect_days(participants: Iterable[ParticipantAvailability]) -> list[date]:
    """모든 참가자가 제시한 날짜들을 중복 없이 오름차순으로 반환합니다. (표의 열)"""
    days = {
        to_day_key(a.day)
        for p in participants
        for a in p.availabilities
    }
    return sorted(days)


def participant_day_slots(
    participant: ParticipantAvailability,
    expand_any_time: bool = False,
) -> dict[date, set[TimeSlot]]:
    """
    참가자 한 명의 가능 일정을 {날짜: 시간대 집합} 형태로 묶습니다.

    같은 날짜가 여러 번 나와도 하나의 집합으로 합쳐지므로 중복 입력이
    집계에 두 번 반영되지 않습니다.

    Args:
        participant: 참가자
        expand_any_time: True이면 "Any Time"을 모든 구체적 시간대로 펼칩니다.
            False이면 입력한 그대로(Any Time 포함) 보존합니다.
    """
    by_day: dict[date, set[TimeSlot]] = defaultdict(set)

    for availability in participant.availabilities:
        day = to_day_key(availability.day)
        for slot in availability.slots:
            if expand_any_time and slot is TimeSlot.ANY_TIME:
                by_day[day].update(CONCRETE_SLOTS)
            else:
                by_day[day].add(slot)

    return dict(by_day)


def _best_order(option: SlotOption) -> tuple[date, int]:
    return option.day, option.slot.position


def _rank_order(option: SlotOption) -> tuple[int, date, int]:
    return -option.attendance, option.day, option.slot.position


# =============================================================================
# 1. 날짜 × 시간대 집계
# =============================================================================

def aggregate(participants: list[ParticipantAvailability]) -> AggregationResult:
    """
    (날짜, 시간대) 조합별 참석 인원을 세고 최적 조합과 전체 순위를 구합니다.

    Args:
        participants: 참가자 리스트 (변경하지 않음)

    Returns:
        AggregationResult
            best_options: 최대 인원 조합 전부 (날짜 → 시간대 순)
            ranked_options: 전체 조합 (인원 내림차순 → 날짜 → 시간대 순)
    """
    counts: dict[tuple[date, TimeSlot], int] = defaultdict(int)

    for participant in participants:
        for day, slots in participant_day_slots(participant, expand_any_time=True).items():
            for slot in slots:
                counts[(day, slot)] += 1

    candidates = [
        SlotOption(day=day, slot=slot, attendance=attendance)
        for (day, slot), attendance in counts.items()
    ]
    max_attendance = max((c.attendance for c in candidates), default=0)

    best_options = sorted(
        (c for c in candidates if c.attendance == max_attendance),
        key=_best_order,
    )
    ranked_options = sorted(candidates, key=_rank_order)

    logger.debug(
        "Aggregated %d participants into %d options (max attendance %d)",
        len(participants), len(ranked_options), max_attendance,
    )
    return AggregationResult(best_options=best_options, ranked_options=ranked_options)


def pick_default(result: AggregationResult) -> Optional[SlotOption]:
    """기본 추천 하나를 고릅니다. 가장 이른 날짜, 가장 이른 시간대."""
    return result.best_options[0] if result.best_options else None


# =============================================================================
# 2. 차선책
# =============================================================================

def next_best_options(
    ranked_options: list[SlotOption],
    best_options: list[SlotOption],
    limit: int = 3,
) -> list[SlotOption]:
    """
    날짜마다 대표 조합 하나를 고른 뒤, 최적 인원보다 적은 대표만 상위 limit개
    반환합니다. 최적 조합이 나온 날짜는 다른 시간대로 다시 나오지 않습니다.

    하루의 네 시간대 인원이 모두 같으면 (= 시간 무관) 그 날짜는 "Any Time"으로
    대표하고, 아니면 그 날짜에서 순위가 가장 높은 시간대를 씁니다.
    """
    if not best_options or limit <= 0:
        return []

    best_attendance = best_options[0].attendance

    by_day: dict[date, list[SlotOption]] = defaultdict(list)
    for option in ranked_options:
        by_day[option.day].append(option)

    picked: list[SlotOption] = []
    seen_days: set[date] = set()

    for option in ranked_options:
        if option.day in seen_days:
            continue
        seen_days.add(option.day)
        if option.attendance >= best_attendance:
            continue

        day_options = by_day[option.day]
        slot_agnostic = (
            len(day_options) == len(CONCRETE_SLOTS)
            and len({o.attendance for o in day_options}) == 1
        )
        if slot_agnostic:
            option = SlotOption(day=option.day, slot=TimeSlot.ANY_TIME, attendance=option.attendance)

        picked.append(option)
        if len(picked) == limit:
            break

    return picked


# =============================================================================
# 3. 참가자별 현황
# =============================================================================

def availability_matrix(
    participants: list[ParticipantAvailability],
) -> tuple[list[date], list[dict[date, set[TimeSlot]]]]:
    """
    참가자 × 날짜 표를 만듭니다.

    Returns:
        (날짜 리스트, 행 리스트). 각 행은 모든 날짜에 대해 참가자가 입력한
        시간대 집합을 가지며 (Any Time 그대로), 제시하지 않은 날짜는 빈 집합입니다.
    """
    days = collect_days(participants)
    rows = []

    for participant in participants:
        raw = participant_day_slots(participant)
        rows.append({day: set(raw.get(day, set())) for day in days})

    return days, rows


def who_can_attend(
    participants: list[ParticipantAvailability],
    day: DayLike,
    slot: TimeSlot,
) -> tuple[list[str], list[str]]:
    """
    특정 날짜·시간대에 올 수 있는 사람과 없는 사람을 나눕니다.

    Returns:
        (가능한 사람 이름들, 불가능한 사람 이름들)
    """
    day = to_day_key(day)
    available, unavailable = [], []

    for participant in participants:
        slots = participant_day_slots(participant, expand_any_time=True).get(day, set())
        if slot is TimeSlot.ANY_TIME:
            ok = bool(slots)
        else:
            ok = slot in slots
        (available if ok else unavailable).append(participant.name)

    return available, unavailable


# =============================================================================
# 4. 텍스트 출력
# =============================================================================

NO_COMMON_SLOT_MESSAGE = "No common date/time found. You might need to add more dates."


def format_option(option: SlotOption, total: Optional[int] = None) -> str:
    """조합 하나를 보기 좋게 포맷팅합니다."""
    people = f"{option.attendance}/{total}" if total else str(option.attendance)
    return f"{option.day.strftime('%a, %b %d %Y')} · {option.slot.value} · {people} people"


def generate_text_output(
    result: AggregationResult,
    participants: list[ParticipantAvailability],
    event_name: str,
) -> str:
    """집계 결과를 공유하기 좋은 텍스트로 변환합니다."""
    total = len(participants)
    lines = []
    lines.append(f"📅 {event_name}")
    lines.append("=" * 40)
    lines.append("")

    best = pick_default(result)
    if best is None:
        lines.append(NO_COMMON_SLOT_MESSAGE)
        return "\n".join(lines)

    lines.append("## Best")
    for option in result.best_options:
        lines.append(f"   {format_option(option, total)}")
    lines.append("")

    runners_up = next_best_options(
        result.ranked_options, result.best_options, limit=get_next_best_limit()
    )
    if runners_up:
        lines.append("## Next best")
        for option in runners_up:
            lines.append(f"   {format_option(option, total)}")
        lines.append("")

    available, unavailable = who_can_attend(participants, best.day, best.slot)
    lines.append(f"Going: {', '.join(available)}")
    if unavailable:
        lines.append(f"Missing: {', '.join(unavailable)}")

    return "\n".join(lines)
