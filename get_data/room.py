"""
Room 데이터 추출 모듈
"""

import logging
import requests
from config import get_api_base, get_request_timeout
from analyze import to_day_key
from schemas import Availability, ParticipantAvailability, RoomData, TimeSlot

logger = logging.getLogger(__name__)

MIN_NAME_LENGTH = 2
MAX_NOTES_LENGTH = 200


class RoomDataError(ValueError):
    """방 데이터 형식이 잘못되었을 때 발생합니다."""


def _get_room_id(room: str) -> str:
    """방 링크 또는 방 ID에서 ID만 추출"""
    return room.strip().strip("/").split("/")[-1]


def _fetch_data(api_url: str) -> dict:
    """API에서 JSON 데이터 가져오기"""
    headers = {
        "Accept": "application/json",
    }
    response = requests.get(api_url, headers=headers, timeout=get_request_timeout())
    response.raise_for_status()
    return response.json()


def _parse_slots(raw: dict, who: str) -> set[TimeSlot]:
    """
    가능 시간대를 TimeSlot 집합으로 변환합니다.

    예전 데이터는 "times" 대신 "time" 하나만 가지고 있을 수 있습니다.
    """
    if isinstance(raw.get("times"), list):
        labels = raw["times"]
    else:
        labels = [raw["time"]] if raw.get("time") else []

    slots = set()
    for label in labels:
        try:
            slots.add(TimeSlot(label))
        except ValueError:
            raise RoomDataError(f"{who}: unknown time slot {label!r}") from None

    if not slots:
        raise RoomDataError(f"{who}: every date needs at least one time slot")
    return slots


def _parse_availabilities(raw: dict, who: str) -> list[Availability]:
    """
    날짜별 가능 일정 리스트를 변환합니다.

    가장 오래된 형식은 "dates": ["2024-06-01", ...] 만 있고 시간대가 없으므로
    Any Time으로 간주합니다.
    """
    if "availabilities" in raw:
        entries = raw["availabilities"] or []
    else:
        dates = raw.get("dates") or []
        if not isinstance(dates, list):
            raise RoomDataError(f"{who}: dates must be a list")
        entries = [{"date": d, "times": [TimeSlot.ANY_TIME.value]} for d in dates]
        if entries:
            logger.warning("%s: converting legacy date-only availability", who)

    if not isinstance(entries, list):
        raise RoomDataError(f"{who}: availabilities must be a list")

    availabilities = []
    for entry in entries:
        if not isinstance(entry, dict):
            raise RoomDataError(f"{who}: availability must be an object, got {entry!r}")
        if not entry.get("date"):
            raise RoomDataError(f"{who}: availability is missing a date")
        if not isinstance(entry["date"], str):
            raise RoomDataError(f"{who}: invalid date {entry['date']!r}")
        try:
            day = to_day_key(entry["date"])
        except ValueError:
            raise RoomDataError(f"{who}: invalid date {entry['date']!r}") from None
        availabilities.append(Availability(day=day, slots=_parse_slots(entry, who)))

    return availabilities


def _parse_participant(raw: dict) -> ParticipantAvailability:
    if not isinstance(raw, dict):
        raise RoomDataError(f"participant must be an object, got {raw!r}")

    name = raw.get("name") or ""
    if not isinstance(name, str):
        raise RoomDataError(f"{raw.get('id') or 'participant'}: name must be a string")
    name = name.strip()
    who = name or str(raw.get("id") or "participant")

    if len(name) < MIN_NAME_LENGTH:
        raise RoomDataError(f"{who}: name must be at least {MIN_NAME_LENGTH} characters")

    notes = raw.get("notes") or None
    if notes is not None and not isinstance(notes, str):
        raise RoomDataError(f"{who}: notes must be a string")
    if notes is not None and len(notes) > MAX_NOTES_LENGTH:
        raise RoomDataError(f"{who}: notes must be under {MAX_NOTES_LENGTH} characters")

    availabilities = _parse_availabilities(raw, who)
    if not availabilities:
        raise RoomDataError(f"{who}: please select at least one date")

    return ParticipantAvailability(
        id=str(raw.get("id") or name),
        name=name,
        availabilities=availabilities,
        notes=notes,
    )


def parse_participants(raw_participants: list[dict]) -> list[ParticipantAvailability]:
    """
    저장된 참가자 JSON 리스트를 검증하고 ParticipantAvailability 리스트로 변환합니다.

    Raises:
        RoomDataError: 이름/날짜/시간대/메모가 규칙에 맞지 않거나 id가 중복될 때
    """
    if not isinstance(raw_participants, list):
        raise RoomDataError("participants must be a list")

    participants = []
    seen_ids = set()

    for raw in raw_participants:
        participant = _parse_participant(raw)
        if participant.id in seen_ids:
            raise RoomDataError(f"{participant.name}: duplicate participant id {participant.id!r}")
        seen_ids.add(participant.id)
        participants.append(participant)

    return participants


def parse_room(payload: dict) -> RoomData:
    """방 API 응답({"name", "participants"})을 정규화합니다."""
    if not isinstance(payload, dict):
        raise RoomDataError("room payload must be an object")
    return {
        "name": payload.get("name") or "Untitled Room",
        "participants": parse_participants(payload.get("participants") or []),
    }


def get_room_data(room: str) -> RoomData:
    """
    방 링크(또는 ID)에서 데이터를 가져와 정규화된 형태로 반환합니다.

    Args:
        room: 방 URL (".../rooms/<id>") 또는 방 ID

    Returns:
        RoomData: 정규화된 데이터 딕셔너리
    """
    room_id = _get_room_id(room)
    api_url = f"{get_api_base()}/rooms/{room_id}"

    logger.info("Fetching room %s", room_id)
    raw_data = _fetch_data(api_url)

    return parse_room(raw_data)
