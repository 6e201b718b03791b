"""Shared fixtures for the aggregation tests."""

import pytest
from datetime import date

from schemas import Availability, ParticipantAvailability, TimeSlot


def make_participant(pid, name, days, notes=None):
    """Build a participant from {date: [TimeSlot, ...]} (a list of pairs keeps duplicates)."""
    pairs = days.items() if isinstance(days, dict) else days
    return ParticipantAvailability(
        id=pid,
        name=name,
        availabilities=[Availability(day=d, slots=set(slots)) for d, slots in pairs],
        notes=notes,
    )


@pytest.fixture
def june_first():
    return date(2024, 6, 1)


@pytest.fixture
def weekend_poll():
    """Four friends polling over one weekend."""
    sat, sun = date(2024, 6, 1), date(2024, 6, 2)
    return [
        make_participant("p1", "Alice", {sat: [TimeSlot.ANY_TIME], sun: [TimeSlot.MORNING]}),
        make_participant("p2", "Bob", {sat: [TimeSlot.EVENING], sun: [TimeSlot.MORNING, TimeSlot.EVENING]}),
        make_participant("p3", "Carol", {sat: [TimeSlot.EVENING, TimeSlot.LATE_NIGHT]}),
        make_participant("p4", "Dan", {sun: [TimeSlot.ANY_TIME]}),
    ]
