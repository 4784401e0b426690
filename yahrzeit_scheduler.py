#!/usr/bin/env python3
"""
Yahrzeit Scheduling
Picks the next yahrzeit out of a generated sequence and projects an
occurrence into a calendar event record. Nothing here mutates an occurrence.
"""

from dataclasses import dataclass
from datetime import timedelta

from calendar_types import GregorianDate
from yahrzeit_generator import days_until

DEFAULT_DISPLAY_NAME = 'Loved One'
DEFAULT_SHARE_NAME = 'my loved one'
REMINDER_OFFSET = timedelta(days=-1)

TRADITIONAL_OBSERVANCES = (
    'Light yahrzeit candle at sunset',
    'Recite Kaddish',
    'Visit the grave',
    'Give tzedakah (charity)',
)


@dataclass(frozen=True)
class CalendarEventRecord:
    summary: str
    start_date: GregorianDate
    end_date: GregorianDate
    description: str
    location: str
    alarm_trigger: timedelta
    alarm_description: str
    hebrew_date: str
    cycle_number: int


def next_occurrence(occurrences, today=None):
    """The occurrence with the smallest non-negative days-from-today, or None.

    Without `today` the snapshot values computed at generation time are used.
    """
    best = None
    best_days = None
    for occurrence in occurrences:
        if today is None:
            delta = occurrence.days_from_today
        else:
            delta = days_until(occurrence.gregorian_date, today)
        if delta < 0:
            continue
        if best is None or delta < best_days:
            best, best_days = occurrence, delta
    return best


def _display_name(name, default=DEFAULT_DISPLAY_NAME):
    name = ' '.join(str(name or '').split())
    return name or default


def to_calendar_event(occurrence, display_name=None):
    name = _display_name(display_name)
    hebrew = occurrence.hebrew_date.display()
    observances = '\n'.join(f'- {item}' for item in TRADITIONAL_OBSERVANCES)
    description = (
        f"Light a yahrzeit candle at sunset the evening before in memory of {name}.\n\n"
        f"Hebrew Date: {hebrew}\n\n"
        f"Traditional observances:\n{observances}"
    )
    return CalendarEventRecord(
        summary=f'Yahrzeit - {name}',
        start_date=occurrence.gregorian_date,
        end_date=occurrence.gregorian_date.add_days(1),
        description=description,
        location='Home',
        alarm_trigger=REMINDER_OFFSET,
        alarm_description=f'Tomorrow is the yahrzeit of {name}. Light candle at sunset.',
        hebrew_date=hebrew,
        cycle_number=occurrence.cycle_number,
    )


def share_text(occurrence, display_name=None):
    name = _display_name(display_name, DEFAULT_SHARE_NAME)
    return (
        f"The next yahrzeit for {name} is {occurrence.gregorian_date.long_format()} "
        f"({occurrence.hebrew_date.display()})."
    )
