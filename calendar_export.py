"""
캘린더(.ics) 내보내기 모듈
"""

from datetime import date, datetime, time, timedelta
from typing import Optional
from uuid import uuid4
import pytz
from icalendar import Calendar, Event
from config import get_event_duration_hours, get_event_title, get_timezone
from schemas import TimeSlot

PRODID = "-//when2gather//when2gather//EN"
UID_DOMAIN = "when2gather"

SLOT_START_TIMES = {
    TimeSlot.ANY_TIME: time(12, 0),
    TimeSlot.MORNING: time(9, 0),
    TimeSlot.AFTERNOON: time(12, 0),
    TimeSlot.EVENING: time(17, 0),
    TimeSlot.LATE_NIGHT: time(21, 0),
}


def slot_start(day: date, slot: TimeSlot, tz_name: Optional[str] = None) -> datetime:
    """
    날짜와 시간대로 일정 시작 시각(UTC)을 계산합니다.

    시간대의 시계 시각(예: Evening → 17:00)은 tz_name 기준 현지 시각입니다.
    """
    tz = pytz.timezone(tz_name or get_timezone())
    local = tz.localize(datetime.combine(day, SLOT_START_TIMES[slot]))
    return local.astimezone(pytz.UTC)


def generate_event_ics(
    day: date,
    slot: TimeSlot,
    title: Optional[str] = None,
    duration_hours: Optional[float] = None,
    location: Optional[str] = None,
    tz_name: Optional[str] = None,
    now: Optional[datetime] = None,
    uid: Optional[str] = None,
) -> str:
    """
    선택된 날짜·시간대를 .ics 파일 내용으로 변환합니다.

    Args:
        day: 날짜
        slot: 시간대
        title: 일정 제목 (기본값: 설정값)
        duration_hours: 일정 길이 (시간, 기본값: 설정값)
        location: 장소 (없으면 생략)
        tz_name: 시간대 이름 (예: "Asia/Seoul", 기본값: 설정값)
        now: DTSTAMP 시각 (기본값: 현재 시각)
        uid: 일정 UID (기본값: 새 UUID)

    Returns:
        iCalendar 문자열 (VEVENT 하나)
    """
    start = slot_start(day, slot, tz_name)
    if duration_hours is None:
        duration_hours = get_event_duration_hours()

    cal = Calendar()
    cal.add("prodid", PRODID)
    cal.add("version", "2.0")

    event = Event()
    event.add("uid", uid or f"{uuid4()}@{UID_DOMAIN}")
    event.add("dtstamp", (now or datetime.now(pytz.UTC)).astimezone(pytz.UTC))
    event.add("dtstart", start)
    event.add("dtend", start + timedelta(hours=duration_hours))
    event.add("summary", title or get_event_title())

    if location:
        event.add("location", location)

    cal.add_component(event)
    return cal.to_ical().decode("utf-8")
