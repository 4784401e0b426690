#!/usr/bin/env python3
"""
Tests for next-yahrzeit selection, calendar event records, share text
and the .ics export.
"""

import os
import sys
import unittest
from datetime import timedelta

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from calendar_types import GregorianDate
from ics_export import ics_filename, render_calendar
from sunset_resolver import resolve
from yahrzeit_generator import generate
from yahrzeit_scheduler import (
    TRADITIONAL_OBSERVANCES, next_occurrence, share_text, to_calendar_event,
)


def _occurrences(today, years=10):
    anchor, _ = resolve(GregorianDate(2025, 2, 13), 'before')
    return generate(anchor, years, today)


# ══════════════════════════════════════════════════════════════
# Next Occurrence
# ══════════════════════════════════════════════════════════════

class TestNextOccurrence(unittest.TestCase):

    def test_picks_first_upcoming(self):
        upcoming = next_occurrence(_occurrences(GregorianDate(2026, 6, 1)))
        self.assertEqual(upcoming.cycle_number, 2)
        self.assertGreaterEqual(upcoming.days_from_today, 0)

    def test_today_counts_as_upcoming(self):
        upcoming = next_occurrence(_occurrences(GregorianDate(2026, 2, 2)))
        self.assertEqual(upcoming.cycle_number, 1)
        self.assertEqual(upcoming.days_from_today, 0)

    def test_none_when_all_past(self):
        self.assertIsNone(next_occurrence(_occurrences(GregorianDate(2040, 1, 1), years=2)))

    def test_empty_sequence(self):
        self.assertIsNone(next_occurrence([]))

    def test_today_override_ignores_snapshot(self):
        occurrences = _occurrences(GregorianDate(2026, 1, 1))
        upcoming = next_occurrence(occurrences, today=GregorianDate(2026, 6, 1))
        self.assertEqual(upcoming.cycle_number, 2)
        # Snapshot values are left alone.
        self.assertEqual(occurrences[0].days_from_today, 32)


# ══════════════════════════════════════════════════════════════
# Calendar Event Records
# ══════════════════════════════════════════════════════════════

class TestCalendarEvent(unittest.TestCase):

    def setUp(self):
        self.occurrence = _occurrences(GregorianDate(2026, 1, 1))[0]

    def test_record_fields(self):
        record = to_calendar_event(self.occurrence, 'Rivka Cohen')
        self.assertEqual(record.summary, 'Yahrzeit - Rivka Cohen')
        self.assertEqual(record.start_date, GregorianDate(2026, 2, 2))
        self.assertEqual(record.end_date, GregorianDate(2026, 2, 3))
        self.assertEqual(record.location, 'Home')
        self.assertEqual(record.alarm_trigger, timedelta(days=-1))
        self.assertIn('Rivka Cohen', record.alarm_description)
        self.assertEqual(record.hebrew_date, '15 Shevat 5786')
        self.assertEqual(record.cycle_number, 1)

    def test_description_lists_observances(self):
        record = to_calendar_event(self.occurrence, 'Rivka Cohen')
        self.assertIn('Hebrew Date: 15 Shevat 5786', record.description)
        for item in TRADITIONAL_OBSERVANCES:
            self.assertIn(item, record.description)

    def test_blank_name_uses_default(self):
        record = to_calendar_event(self.occurrence, '   ')
        self.assertEqual(record.summary, 'Yahrzeit - Loved One')

    def test_share_text(self):
        text = share_text(self.occurrence, 'Rivka Cohen')
        self.assertEqual(
            text,
            'The next yahrzeit for Rivka Cohen is Monday, February 2, 2026 (15 Shevat 5786).'
        )

    def test_share_text_default_name(self):
        self.assertIn('for my loved one is', share_text(self.occurrence))


# ══════════════════════════════════════════════════════════════
# iCalendar Export
# ══════════════════════════════════════════════════════════════

class TestIcsExport(unittest.TestCase):

    def setUp(self):
        self.occurrences = _occurrences(GregorianDate(2026, 1, 1), years=2)

    def test_single_event_calendar(self):
        text = render_calendar([to_calendar_event(self.occurrences[0], 'Rivka Cohen')])
        self.assertIn('BEGIN:VCALENDAR', text)
        self.assertIn('END:VCALENDAR', text)
        self.assertEqual(text.count('BEGIN:VEVENT'), 1)
        self.assertIn('SUMMARY:Yahrzeit - Rivka Cohen', text)
        self.assertIn('DTSTART;VALUE=DATE:20260202', text)
        self.assertIn('BEGIN:VALARM', text)
        self.assertIn('neshama.ca', text)

    def test_one_event_per_record(self):
        records = [to_calendar_event(o, 'Rivka Cohen') for o in self.occurrences]
        text = render_calendar(records)
        self.assertEqual(text.count('BEGIN:VEVENT'), 3)
        self.assertEqual(text.count('BEGIN:VALARM'), 3)

    def test_events_follow_record_order(self):
        occurrences = _occurrences(GregorianDate(2026, 1, 1), years=6)
        text = render_calendar([to_calendar_event(o, 'Rivka Cohen') for o in occurrences])
        starts = [line.split(':', 1)[1].strip() for line in text.splitlines() if line.startswith('DTSTART')]
        expected = [o.gregorian_date.isoformat().replace('-', '') for o in occurrences]
        self.assertEqual(starts, expected)
        self.assertEqual(starts, sorted(starts))
        self.assertTrue(text.rstrip().endswith('END:VCALENDAR'))

    def test_uid_names_the_yahrzeit_once(self):
        text = render_calendar([to_calendar_event(self.occurrences[0], 'Rivka Cohen')])
        self.assertIn('UID:yahrzeit-rivka-cohen-20260202-1@neshama.ca', text)
        self.assertNotIn('yahrzeit-yahrzeit', text)

    def test_filename(self):
        self.assertEqual(
            ics_filename('Rivka Cohen', GregorianDate(2026, 2, 2)),
            'yahrzeit-rivka-cohen-2026.ics'
        )
        self.assertEqual(
            ics_filename('', GregorianDate(2026, 2, 2)),
            'yahrzeit-loved-one-2026.ics'
        )


if __name__ == '__main__':
    unittest.main()
