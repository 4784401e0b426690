#!/usr/bin/env python3
"""
Calendar Value Types
Immutable date values shared by the Hebrew calendar engine, plus the error
kinds it raises.

Month identity is a named enum rather than an ordinal, because leap years
insert Adar I and shift every later month by one position.
"""

import re
from dataclasses import dataclass
from datetime import date
from enum import Enum


# ── Errors ────────────────────────────────────────────────────

class CalendarError(ValueError):
    """Base class for every error raised by the calendar engine."""


class InvalidDate(CalendarError):
    """A Gregorian or Hebrew date that does not exist, or precedes the epoch."""


class OutOfRangeYear(CalendarError):
    """A Hebrew year before AM 1."""


class UnresolvableObservance(CalendarError):
    """A yahrzeit cycle year for which no observed date could be produced."""


class InvalidSunsetHint(CalendarError):
    """A sunset hint other than before / after / unsure."""


# ── Hebrew months ─────────────────────────────────────────────

class HebrewMonth(Enum):
    NISAN = 'Nisan'
    IYAR = 'Iyar'
    SIVAN = 'Sivan'
    TAMMUZ = 'Tammuz'
    AV = 'Av'
    ELUL = 'Elul'
    TISHREI = 'Tishrei'
    CHESHVAN = 'Cheshvan'
    KISLEV = 'Kislev'
    TEVET = 'Tevet'
    SHEVAT = 'Shevat'
    ADAR = 'Adar'
    ADAR_I = 'Adar I'
    ADAR_II = 'Adar II'

    @property
    def is_adar(self):
        return self in (HebrewMonth.ADAR, HebrewMonth.ADAR_I, HebrewMonth.ADAR_II)

    @classmethod
    def parse(cls, value):
        """Look a month up by enum name or display name ('Adar II', 'ADAR_II', 'adar 2')."""
        if isinstance(value, cls):
            return value
        text = str(value or '').strip()
        for month in cls:
            if text == month.value or text.upper() == month.name:
                return month
        normalized = text.lower().replace('_', ' ').replace('-', ' ')
        normalized = ' '.join(normalized.split())
        aliases = {
            'adar 1': cls.ADAR_I, 'adar a': cls.ADAR_I, 'adar rishon': cls.ADAR_I,
            'adar 2': cls.ADAR_II, 'adar b': cls.ADAR_II, 'adar sheni': cls.ADAR_II,
            'iyyar': cls.IYAR, 'tamuz': cls.TAMMUZ, 'tishri': cls.TISHREI,
            'heshvan': cls.CHESHVAN, 'marcheshvan': cls.CHESHVAN, 'chesvan': cls.CHESHVAN,
            'shvat': cls.SHEVAT, 'shevet': cls.SHEVAT, 'teves': cls.TEVET,
        }
        for month in cls:
            if normalized == month.value.lower():
                return month
        if normalized in aliases:
            return aliases[normalized]
        raise InvalidDate(f"Unknown Hebrew month: {value!r}")


class SunsetHint(Enum):
    BEFORE = 'before'
    AFTER = 'after'
    UNSURE = 'unsure'

    @classmethod
    def parse(cls, value):
        if isinstance(value, cls):
            return value
        text = str(value or '').strip().lower()
        for hint in cls:
            if text == hint.value:
                return hint
        raise InvalidSunsetHint(f"Sunset hint must be before, after or unsure (got {value!r})")


# ── Gregorian dates ───────────────────────────────────────────

WEEKDAY_NAMES = ('Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday', 'Sunday')
GREGORIAN_MONTH_NAMES = (
    'January', 'February', 'March', 'April', 'May', 'June',
    'July', 'August', 'September', 'October', 'November', 'December',
)
ISO_DATE_RE = re.compile(r'^(\d{4,})-(\d{2})-(\d{2})$', re.ASCII)


def is_gregorian_leap_year(year):
    return year % 4 == 0 and year % 400 not in (100, 200, 300)


def gregorian_month_length(year, month):
    if month == 2:
        return 29 if is_gregorian_leap_year(year) else 28
    if month in (4, 6, 9, 11):
        return 30
    return 31


@dataclass(frozen=True, order=True)
class GregorianDate:
    """Proleptic Gregorian date with astronomical year numbering (1 BCE is year 0)."""

    year: int
    month: int
    day: int

    def __post_init__(self):
        for field_name in ('year', 'month', 'day'):
            value = getattr(self, field_name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidDate(f"Gregorian {field_name} must be an integer (got {value!r})")
        if not 1 <= self.month <= 12:
            raise InvalidDate(f"Gregorian month out of range: {self.month}")
        if not 1 <= self.day <= gregorian_month_length(self.year, self.month):
            raise InvalidDate(f"Day {self.day} does not exist in {self.year:04d}-{self.month:02d}")

    @classmethod
    def from_date(cls, value):
        return cls(value.year, value.month, value.day)

    @classmethod
    def parse(cls, text):
        """Parse 'YYYY-MM-DD'. Anything else in the string is rejected."""
        match = ISO_DATE_RE.match(str(text or '').strip())
        if not match:
            raise InvalidDate(f"Invalid date format (expected YYYY-MM-DD): {text!r}")
        return cls(int(match.group(1)), int(match.group(2)), int(match.group(3)))

    def to_date(self):
        if not 1 <= self.year <= 9999:
            raise InvalidDate(f"Year {self.year} cannot be represented as datetime.date")
        return date(self.year, self.month, self.day)

    def to_epoch_day(self):
        # Local import keeps the value types free of a module cycle.
        from calendar_conversion import gregorian_to_epoch_day
        return gregorian_to_epoch_day(self)

    def add_days(self, days):
        from calendar_conversion import epoch_day_to_gregorian
        return epoch_day_to_gregorian(self.to_epoch_day() + days)

    def weekday_name(self):
        # Epoch day 1 (0001-01-01) is a Monday.
        return WEEKDAY_NAMES[(self.to_epoch_day() - 1) % 7]

    def isoformat(self):
        if self.year < 0:
            return f"-{-self.year:04d}-{self.month:02d}-{self.day:02d}"
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"

    def long_format(self):
        """'Monday, February 2, 2026'"""
        return f"{self.weekday_name()}, {GREGORIAN_MONTH_NAMES[self.month - 1]} {self.day}, {self.year}"

    def __str__(self):
        return self.isoformat()


# ── Hebrew dates ──────────────────────────────────────────────

@dataclass(frozen=True)
class HebrewDate:
    """A Hebrew calendar date. Construction checks the day against the real month length."""

    year: int
    month: HebrewMonth
    day: int

    def __post_init__(self):
        if not isinstance(self.month, HebrewMonth):
            object.__setattr__(self, 'month', HebrewMonth.parse(self.month))
        if isinstance(self.year, bool) or not isinstance(self.year, int):
            raise InvalidDate(f"Hebrew year must be an integer (got {self.year!r})")
        if isinstance(self.day, bool) or not isinstance(self.day, int):
            raise InvalidDate(f"Hebrew day must be an integer (got {self.day!r})")
        from hebrew_year import month_length
        length = month_length(self.year, self.month)
        if not 1 <= self.day <= length:
            raise InvalidDate(
                f"Day {self.day} does not exist in {self.month.value} {self.year} "
                f"({length} days)"
            )

    def to_epoch_day(self):
        from calendar_conversion import hebrew_to_epoch_day
        return hebrew_to_epoch_day(self)

    def display(self):
        return f"{self.day} {self.month.value} {self.year}"

    def __str__(self):
        return self.display()
