#!/usr/bin/env python3
"""
Neshama Yahrzeit Calculator Manager
Turns a date of passing into the Hebrew date of death and the yahrzeit
dates that follow, for the calculator page, the API and the command line.

Results are plain dicts in the {'status': ..., 'message': ...} shape the
other Neshama managers return.
"""

import os
import sys
import logging
from datetime import date, datetime

import pytz

FRONTEND_DIR = os.path.dirname(os.path.abspath(__file__))
_project_root = os.path.join(FRONTEND_DIR, '..')
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from calendar_types import (
    CalendarError, GregorianDate, HebrewDate, HebrewMonth, InvalidDate, SunsetHint,
)
from calendar_conversion import gregorian_to_hebrew
from hebrew_year import is_leap_year, months_in_year, month_length, year_length, year_type
from ics_export import ics_filename, render_calendar
from sunset_resolver import YahrzeitAnchor, resolve
from yahrzeit_generator import generate
from yahrzeit_scheduler import next_occurrence, share_text, to_calendar_event
from yahrzeit_pdf import generate_schedule_pdf

logging.basicConfig(level=logging.INFO, format='%(asctime)s [%(levelname)s] %(message)s')

DEFAULT_TIMEZONE = 'America/Toronto'


def occurrence_to_dict(occurrence):
    """JSON-friendly view of a YahrzeitOccurrence."""
    return {
        'cycle': occurrence.cycle_number,
        'hebrew_date': occurrence.hebrew_date.display(),
        'hebrew_year': occurrence.hebrew_date.year,
        'hebrew_month': occurrence.hebrew_date.month.value,
        'hebrew_day': occurrence.hebrew_date.day,
        'gregorian_date': occurrence.gregorian_date.isoformat(),
        'gregorian_date_formatted': occurrence.gregorian_date.long_format(),
        'days_until': occurrence.days_from_today,
        'is_past': occurrence.is_past,
    }


class YahrzeitManager:
    def __init__(self, timezone=None):
        self.timezone_name = timezone or os.environ.get('YAHRZEIT_TIMEZONE', DEFAULT_TIMEZONE)
        self.tz = pytz.timezone(self.timezone_name)
        self.default_years = int(os.environ.get('YAHRZEIT_DEFAULT_YEARS', 10))
        self.max_years = int(os.environ.get('YAHRZEIT_MAX_YEARS', 100))

    # ── Helpers ───────────────────────────────────────────────

    def today(self):
        """Today's date in the configured timezone."""
        return GregorianDate.from_date(datetime.now(self.tz).date())

    def _sanitize_text(self, value, max_len=200):
        if not value:
            return ''
        return ' '.join(str(value)[:max_len].split())

    def _parse_years(self, value):
        if value in (None, ''):
            return self.default_years
        try:
            years = int(value)
        except (TypeError, ValueError):
            raise ValueError('Years to calculate must be a whole number')
        if not 1 <= years <= self.max_years:
            raise ValueError(f'Years to calculate must be between 1 and {self.max_years}')
        return years

    def _parse_today(self, value):
        if value is None:
            return self.today()
        if isinstance(value, GregorianDate):
            return value
        if isinstance(value, str):
            return GregorianDate.parse(value)
        if isinstance(value, date):
            return GregorianDate.from_date(value)
        raise InvalidDate(f"Today must be a YYYY-MM-DD date (got {value!r})")

    def _resolve_request(self, data):
        """Validate calculator input. Returns (anchor, assumption, years, name, today)."""
        date_of_death = str(data.get('date_of_death') or '').strip()
        if not date_of_death:
            raise ValueError('Date of passing is required')
        death_date = GregorianDate.parse(date_of_death)
        hint = SunsetHint.parse(data.get('sunset') or SunsetHint.UNSURE.value)
        years = self._parse_years(data.get('years'))
        name = self._sanitize_text(data.get('name'))
        today = self._parse_today(data.get('today'))
        anchor, assumption = resolve(death_date, hint)
        return anchor, assumption, years, name, today

    # ── Calculator ────────────────────────────────────────────

    def calculate(self, data):
        """Calculate yahrzeit dates.
        data: {date_of_death: 'YYYY-MM-DD', sunset?: before|after|unsure, years?, name?, today?}
        Returns: {status, hebrew_date_of_death, yahrzeits, next_yahrzeit, ...}
        """
        try:
            anchor, assumption, years, name, today = self._resolve_request(data)
            occurrences = generate(anchor, years, today)
        except (CalendarError, ValueError) as e:
            logging.warning(f"[Yahrzeit] Calculation rejected: {e}")
            return {'status': 'error', 'message': str(e)}

        upcoming = next_occurrence(occurrences)
        hebrew = anchor.hebrew_date_of_death
        logging.info(
            f"[Yahrzeit] Calculated {len(occurrences)} yahrzeits from {hebrew.display()} "
            f"({anchor.gregorian_date_of_death.isoformat()}, {anchor.hint.value} sunset)"
        )
        return {
            'status': 'success',
            'name': name,
            'date_of_death': anchor.gregorian_date_of_death.isoformat(),
            'sunset': anchor.hint.value,
            'assumption': assumption,
            'hebrew_date_of_death': hebrew.display(),
            'hebrew_month': hebrew.month.value,
            'hebrew_day': hebrew.day,
            'hebrew_year': hebrew.year,
            'today': today.isoformat(),
            'yahrzeits': [occurrence_to_dict(o) for o in occurrences],
            'next_yahrzeit': occurrence_to_dict(upcoming) if upcoming else None,
            'share_text': share_text(upcoming, name) if upcoming else None,
        }

    def build_ics(self, data, cycle=None):
        """Calendar file for the next yahrzeit, or for `cycle` when given.
        Returns: (filename, ics_text) or None when there is nothing to export.
        """
        try:
            anchor, _, years, name, today = self._resolve_request(data)
            occurrences = generate(anchor, years, today)
            if cycle not in (None, ''):
                cycle = int(cycle)
        except (CalendarError, ValueError) as e:
            logging.warning(f"[Yahrzeit] Calendar export rejected: {e}")
            return None

        if cycle in (None, ''):
            target = next_occurrence(occurrences)
        else:
            target = next((o for o in occurrences if o.cycle_number == cycle), None)
        if target is None:
            logging.info("[Yahrzeit] No yahrzeit in range to export")
            return None

        record = to_calendar_event(target, name)
        filename = ics_filename(name or 'Loved One', target.gregorian_date)
        return filename, render_calendar([record])

    def build_full_ics(self, data):
        """Calendar file with every calculated yahrzeit. Returns (filename, ics_text) or None."""
        try:
            anchor, _, years, name, today = self._resolve_request(data)
            occurrences = generate(anchor, years, today)
        except (CalendarError, ValueError) as e:
            logging.warning(f"[Yahrzeit] Calendar export rejected: {e}")
            return None
        records = [to_calendar_event(o, name) for o in occurrences]
        filename = ics_filename(name or 'Loved One', occurrences[0].gregorian_date)
        return filename, render_calendar(records)

    def build_schedule_pdf(self, data):
        """Printable schedule of every calculated yahrzeit. Returns (filename, pdf_bytes) or None."""
        try:
            anchor, _, years, name, today = self._resolve_request(data)
            occurrences = generate(anchor, years, today)
        except (CalendarError, ValueError) as e:
            logging.warning(f"[Yahrzeit] Schedule PDF rejected: {e}")
            return None
        pdf_bytes = generate_schedule_pdf(
            name,
            anchor.hebrew_date_of_death.display(),
            occurrences,
            date_of_death=anchor.gregorian_date_of_death.long_format(),
        )
        filename = ics_filename(name or 'Loved One', occurrences[0].gregorian_date)
        return filename.replace('.ics', '-schedule.pdf'), pdf_bytes

    # ── Hebrew Date Conversion ────────────────────────────────

    def convert_to_hebrew_date(self, gregorian_str, sunset=SunsetHint.BEFORE.value):
        """Convert a Gregorian date string (YYYY-MM-DD) to Hebrew date components.
        Returns: (hebrew_str, month_name, hebrew_day, hebrew_year) or None on invalid input.
        """
        try:
            anchor, _ = resolve(GregorianDate.parse(gregorian_str), sunset)
        except CalendarError as e:
            logging.error(f"[Yahrzeit] Hebrew date conversion error: {e}")
            return None
        hd = anchor.hebrew_date_of_death
        return (hd.display(), hd.month.value, hd.day, hd.year)

    def get_next_yahrzeit_gregorian(self, hebrew_month, hebrew_day, death_year=None, today=None):
        """Next yahrzeit on or after today for a Hebrew month/day.
        Without death_year the date is treated as falling in the year before
        the current Hebrew year, which keeps the Adar and day-30 rules intact.
        Returns: (GregorianDate, hebrew_year) or None.
        """
        today = self._parse_today(today)
        current_year = gregorian_to_hebrew(today).year
        try:
            month = HebrewMonth.parse(hebrew_month)
            day = int(hebrew_day)
            if death_year is not None:
                death = HebrewDate(int(death_year), month, day)
            else:
                death = self._latest_year_with(month, day, current_year - 1)
            anchor = YahrzeitAnchor(
                hebrew_date_of_death=death,
                gregorian_date_of_death=today,
                converted_gregorian_date=today,
                hint=SunsetHint.BEFORE,
            )
            years_needed = max(current_year - death.year + 1, 1)
            upcoming = next_occurrence(generate(anchor, years_needed, today))
        except (CalendarError, ValueError) as e:
            logging.error(f"[Yahrzeit] Next yahrzeit calculation error: {e}")
            return None

        if upcoming is None:
            return None
        return upcoming.gregorian_date, upcoming.hebrew_date.year

    def _latest_year_with(self, month, day, start_year):
        """The HebrewDate for month/day in the latest year <= start_year where it exists.
        Adar I/II need a leap year, plain Adar a regular one, and the 30th of
        Cheshvan or Kislev a year where that month is full.
        """
        for year in range(start_year, max(start_year - 38, 0), -1):
            if month.is_adar and (month is HebrewMonth.ADAR) == is_leap_year(year):
                continue
            if day > month_length(year, month):
                continue
            return HebrewDate(year, month, day)
        raise CalendarError(f"{day} {month.value} does not occur in the years before {start_year + 1}")

    def describe_year(self, hebrew_year):
        """Leap status, length, classification and month lengths for a Hebrew year."""
        try:
            year = int(hebrew_year)
            months = [
                {'month': m.value, 'days': month_length(year, m)}
                for m in months_in_year(year)
            ]
            return {
                'status': 'success',
                'year': year,
                'leap_year': is_leap_year(year),
                'length': year_length(year),
                'type': year_type(year).value,
                'months': months,
            }
        except (CalendarError, ValueError) as e:
            logging.warning(f"[Yahrzeit] Year lookup rejected: {e}")
            return {'status': 'error', 'message': str(e)}


def _print_calculation(result):
    if result['status'] != 'success':
        logging.info(f"Error: {result['message']}")
        return
    logging.info(f"\n{'='*60}")
    logging.info(f" YAHRZEIT CALCULATOR")
    logging.info(f"{'='*60}")
    if result['name']:
        logging.info(f" In memory of: {result['name']}")
    logging.info(f" Date of passing: {result['date_of_death']} ({result['sunset']} sunset)")
    logging.info(f" Hebrew date of passing: {result['hebrew_date_of_death']}")
    if result['assumption']:
        logging.info(f" Note: {result['assumption']}")
    logging.info("")
    next_cycle = result['next_yahrzeit']['cycle'] if result['next_yahrzeit'] else None
    for y in result['yahrzeits']:
        marker = '->' if y['cycle'] == next_cycle else '  '
        logging.info(f" {marker} {y['cycle']:>3}  {y['gregorian_date_formatted']:<32} {y['hebrew_date']}")
    logging.info(f"{'='*60}\n")


def _request_from_args(args):
    data = {'date_of_death': args[0] if args else ''}
    if len(args) > 1:
        data['sunset'] = args[1]
    if len(args) > 2:
        data['years'] = args[2]
    if len(args) > 3:
        data['name'] = ' '.join(args[3:])
    return data


def main(argv=None):
    """Command line entry point. Returns a process exit code."""
    argv = list(sys.argv[1:] if argv is None else argv)
    mgr = YahrzeitManager()

    command = argv[0].lower() if argv else ''
    args = argv[1:]

    if command == 'calculate' and args:
        result = mgr.calculate(_request_from_args(args))
        _print_calculation(result)
        return 0 if result['status'] == 'success' else 1
    elif command == 'next' and args:
        result = mgr.calculate(_request_from_args(args))
        if result['status'] != 'success':
            logging.info(f"Error: {result['message']}")
            return 1
        if not result['next_yahrzeit']:
            logging.info("No upcoming yahrzeit in the calculated range")
            return 1
        logging.info(result['share_text'])
        return 0
    elif command == 'ics' and args:
        exported = mgr.build_ics(_request_from_args(args))
        if not exported:
            logging.info("Nothing to export")
            return 1
        filename, text = exported
        with open(filename, 'w', encoding='utf-8', newline='') as f:
            f.write(text)
        logging.info(f"Wrote {filename}")
        return 0
    elif command == 'hebrew' and args:
        sunset = args[1] if len(args) > 1 else SunsetHint.BEFORE.value
        converted = mgr.convert_to_hebrew_date(args[0], sunset)
        if not converted:
            return 1
        logging.info(converted[0])
        return 0
    elif command == 'year' and args:
        result = mgr.describe_year(args[0])
        if result['status'] != 'success':
            logging.info(f"Error: {result['message']}")
            return 1
        kind = 'leap' if result['leap_year'] else 'regular'
        logging.info(f" {result['year']}: {result['length']} days, {kind} year, {result['type']}")
        for m in result['months']:
            logging.info(f"   {m['month']:<10} {m['days']}")
        return 0

    logging.info("Usage: python yahrzeit_manager.py [command] ...")
    logging.info("\nCommands:")
    logging.info("  calculate DATE [before|after|unsure] [YEARS] [NAME]  - List yahrzeits")
    logging.info("  next DATE [before|after|unsure] [YEARS] [NAME]       - Next yahrzeit")
    logging.info("  ics DATE [before|after|unsure] [YEARS] [NAME]        - Write .ics for next yahrzeit")
    logging.info("  hebrew DATE [before|after]                           - Hebrew date of a day")
    logging.info("  year HEBREW_YEAR                                     - Structure of a Hebrew year")
    return 2


if __name__ == '__main__':
    sys.exit(main())
