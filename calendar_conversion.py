#!/usr/bin/env python3
"""
Hebrew <-> Gregorian Date Conversion
Both calendars map to and from a single epoch day number; there is no
direct Hebrew-to-Gregorian arithmetic.

Epoch day 1 is 1 January of proleptic Gregorian year 1, the same count
datetime.date.toordinal() uses.
"""

from calendar_types import (
    GregorianDate, HebrewDate, InvalidDate, gregorian_month_length, is_gregorian_leap_year,
)
from hebrew_year import (
    HEBREW_EPOCH, days_before_month, month_length, months_in_year, new_year_day,
)

# Mean Hebrew year: 35975351 / 98496 days (235 lunar months per 19 years).
MEAN_YEAR_NUMERATOR = 35975351
MEAN_YEAR_DENOMINATOR = 98496


# ── Gregorian ─────────────────────────────────────────────────

def gregorian_to_epoch_day(gdate):
    year, month, day = gdate.year, gdate.month, gdate.day
    prior_years = year - 1
    days = (
        365 * prior_years
        + prior_years // 4
        - prior_years // 100
        + prior_years // 400
        + (367 * month - 362) // 12
        + day
    )
    if month > 2:
        days -= 1 if is_gregorian_leap_year(year) else 2
    return days


def _gregorian_year_from_epoch_day(epoch_day):
    d0 = epoch_day - 1
    n400, d1 = divmod(d0, 146097)
    n100, d2 = divmod(d1, 36524)
    n4, d3 = divmod(d2, 1461)
    n1 = d3 // 365
    year = 400 * n400 + 100 * n100 + 4 * n4 + n1
    # The last day of a 4- or 400-year cycle belongs to the year just counted.
    if n100 == 4 or n1 == 4:
        return year
    return year + 1


def epoch_day_to_gregorian(epoch_day):
    year = _gregorian_year_from_epoch_day(epoch_day)
    day_of_year = epoch_day - gregorian_to_epoch_day(GregorianDate(year, 1, 1)) + 1
    month = 1
    while day_of_year > gregorian_month_length(year, month):
        day_of_year -= gregorian_month_length(year, month)
        month += 1
    return GregorianDate(year, month, day_of_year)


# ── Hebrew ────────────────────────────────────────────────────

def hebrew_to_epoch_day(hdate):
    # HebrewDate construction has already validated the month and day.
    return new_year_day(hdate.year) + days_before_month(hdate.year, hdate.month) + hdate.day - 1


def hebrew_year_of_epoch_day(epoch_day):
    """The Hebrew year containing `epoch_day`.

    Closed-form estimate from the mean year length, then a bounded
    correction against the real new-year days.
    """
    if epoch_day < HEBREW_EPOCH:
        raise InvalidDate(f"Epoch day {epoch_day} is before 1 Tishrei AM 1")
    year = (epoch_day - HEBREW_EPOCH) * MEAN_YEAR_DENOMINATOR // MEAN_YEAR_NUMERATOR + 1
    year = max(year, 1)
    # The estimate is off by at most one year; the loops never run more than twice.
    while year > 1 and new_year_day(year) > epoch_day:
        year -= 1
    while new_year_day(year + 1) <= epoch_day:
        year += 1
    return year


def epoch_day_to_hebrew(epoch_day):
    year = hebrew_year_of_epoch_day(epoch_day)
    remaining = epoch_day - new_year_day(year)
    for month in months_in_year(year):
        length = month_length(year, month)
        if remaining < length:
            return HebrewDate(year, month, remaining + 1)
        remaining -= length
    # Unreachable: year_length is the sum of the month lengths.
    raise InvalidDate(f"Epoch day {epoch_day} fell outside Hebrew year {year}")


# ── Public conversions ────────────────────────────────────────

def gregorian_to_hebrew(gdate):
    """Convert a GregorianDate (or datetime.date) to the HebrewDate of its daytime."""
    if not isinstance(gdate, GregorianDate):
        gdate = GregorianDate.from_date(gdate)
    epoch_day = gregorian_to_epoch_day(gdate)
    if epoch_day < HEBREW_EPOCH:
        raise InvalidDate(f"{gdate.isoformat()} is before the Hebrew calendar epoch")
    return epoch_day_to_hebrew(epoch_day)


def hebrew_to_gregorian(hdate):
    return epoch_day_to_gregorian(hebrew_to_epoch_day(hdate))
