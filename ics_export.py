#!/usr/bin/env python3
"""
Yahrzeit iCalendar Export
Serializes CalendarEventRecords to an RFC 5545 calendar with one all-day
VEVENT and a one-day-before display alarm per yahrzeit.
"""

import re

from ics import Calendar, Event
from ics.alarm import DisplayAlarm

PRODID = '-//Neshama//Yahrzeit Calculator//EN'
UID_DOMAIN = 'neshama.ca'


def _slug(name):
    slug = re.sub(r'[^a-z0-9]+', '-', str(name or '').lower()).strip('-')
    return slug or 'loved-one'


def ics_filename(display_name, gregorian_date):
    """yahrzeit-{name}-{year}.ics"""
    return f"yahrzeit-{_slug(display_name)}-{gregorian_date.year}.ics"


def _event_uid(record):
    # The summary already reads "Yahrzeit - {name}".
    return (
        f"{_slug(record.summary)}-{record.start_date.isoformat().replace('-', '')}"
        f"-{record.cycle_number}@{UID_DOMAIN}"
    )


def build_event(record):
    event = Event(
        name=record.summary,
        begin=record.start_date.isoformat(),
        description=record.description,
        location=record.location,
        uid=_event_uid(record),
    )
    event.make_all_day()
    event.end = record.end_date.isoformat()
    event.alarms.append(DisplayAlarm(
        trigger=record.alarm_trigger,
        display_text=record.alarm_description,
    ))
    return event


def _event_lines(event):
    """The VEVENT block of `event` (alarms included) as serialized lines."""
    lines = ''.join(Calendar(events=[event]).serialize_iter()).splitlines(keepends=True)
    start = next(i for i, line in enumerate(lines) if line.startswith('BEGIN:VEVENT'))
    end = max(i for i, line in enumerate(lines) if line.startswith('END:VEVENT'))
    return lines[start:end + 1]


def render_calendar(records):
    """Serialize one or more CalendarEventRecords to VCALENDAR text.

    Events are written in record order. ics keeps Calendar.events as a set,
    so each event is serialized on its own and spliced into the wrapper.
    """
    lines = ''.join(Calendar(creator=PRODID).serialize_iter()).splitlines(keepends=True)
    close = max(i for i, line in enumerate(lines) if line.startswith('END:VCALENDAR'))
    events = []
    for record in records:
        events.extend(_event_lines(build_event(record)))
    return ''.join(lines[:close] + events + lines[close:])
