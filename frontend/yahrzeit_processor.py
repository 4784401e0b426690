#!/usr/bin/env python3
"""
Neshama Yahrzeit Reminder Planner
Daily job that works out which yahrzeit reminders are due: a week-ahead
reminder 7 days before and a day-of reminder on the yahrzeit itself.
Sending is left to the caller's `send` callback.
"""

import logging
from datetime import datetime

import pytz

from yahrzeit_manager import YahrzeitManager, occurrence_to_dict
from calendar_conversion import gregorian_to_hebrew
from calendar_types import CalendarError, GregorianDate, SunsetHint
from sunset_resolver import resolve
from yahrzeit_generator import generate
from yahrzeit_scheduler import next_occurrence

logging.basicConfig(level=logging.INFO, format='%(asctime)s [%(levelname)s] %(message)s')

TORONTO_TZ = pytz.timezone('America/Toronto')

WEEK_AHEAD_DAYS = 7


def is_shabbat_pause(now=None):
    """Check if we're in the Shabbat pause window (Fri 6PM - Sat 9PM Toronto time)."""
    if now is None:
        now = datetime.now(TORONTO_TZ)
    weekday = now.weekday()  # 0=Mon, 4=Fri, 5=Sat

    if weekday == 4 and now.hour >= 18:  # Friday after 6 PM
        return True
    if weekday == 5 and now.hour < 21:   # Saturday before 9 PM
        return True
    return False


def reminder_type(days_until):
    if days_until == 0:
        return 'day_of'
    if days_until == WEEK_AHEAD_DAYS:
        return 'week_ahead'
    return None


def plan_reminders(reminders, today=None, mgr=None):
    """Work out which reminders are due today.

    reminders: dicts with id, deceased_name, date_of_death and optionally
    sunset and last_reminder_hebrew_year.
    Returns: (due, errors) where each due item is
    {reminder, type, yahrzeit, hebrew_year}.
    """
    mgr = mgr or YahrzeitManager()
    today = mgr._parse_today(today)
    current_year = gregorian_to_hebrew(today).year
    due = []
    errors = []

    for reminder in reminders:
        reminder_id = reminder.get('id', '?')
        try:
            death_date = GregorianDate.parse(reminder.get('date_of_death'))
            anchor, _ = resolve(death_date, reminder.get('sunset') or SunsetHint.UNSURE)
            # Enough cycles to reach the year after the current Hebrew year.
            years = max(current_year - anchor.hebrew_date_of_death.year, 0)
            found = next_occurrence(generate(anchor, years, today))
        except CalendarError as e:
            logging.error(f"[Yahrzeit] Reminder {reminder_id}: {e}")
            errors.append({'id': reminder_id, 'message': str(e)})
            continue

        if found is None:
            continue
        upcoming = occurrence_to_dict(found)

        kind = reminder_type(upcoming['days_until'])
        if kind is None:
            continue

        # Day-of is the last send for a Hebrew year; week-ahead may precede it.
        last_year = reminder.get('last_reminder_hebrew_year')
        if last_year and last_year >= upcoming['hebrew_year']:
            continue

        due.append({
            'reminder': reminder,
            'type': kind,
            'yahrzeit': upcoming,
            'hebrew_year': upcoming['hebrew_year'],
        })

    return due, errors


def process_yahrzeit_reminders(reminders, send, today=None, now=None, mgr=None):
    """Plan today's reminders and hand each to `send(reminder, type, yahrzeit)`.
    Returns counts: {sent, errors, total, paused}.
    """
    if is_shabbat_pause(now):
        logging.info("[Yahrzeit] Shabbat pause — skipping reminder processing")
        return {'sent': 0, 'errors': 0, 'total': len(reminders), 'paused': True}

    due, errors = plan_reminders(reminders, today=today, mgr=mgr)
    sent_count = 0
    error_count = len(errors)

    for item in due:
        reminder = item['reminder']
        try:
            if send(reminder, item['type'], item['yahrzeit']):
                sent_count += 1
                logging.info(f"[Yahrzeit] {item['type']} reminder sent for {reminder.get('deceased_name', '?')}")
            else:
                error_count += 1
        except Exception as e:
            logging.error(f"[Yahrzeit] Error sending reminder {reminder.get('id', '?')}: {e}")
            error_count += 1

    logging.info(f"[Yahrzeit] Processing complete: {sent_count} sent, {error_count} errors, {len(reminders)} total")
    return {'sent': sent_count, 'errors': error_count, 'total': len(reminders), 'paused': False}
