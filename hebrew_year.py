#!/usr/bin/env python3
"""
Hebrew Year Structure
Leap years, year lengths and month lengths for any Hebrew year (AM 1 onward).

Everything here is closed-form arithmetic on the year number:
- leap years are positions 3, 6, 8, 11, 14, 17 and 19 of the 19-year cycle
- 1 Tishrei is the day of the molad of Tishrei, moved by the four
  postponement rules (dechiyot)
- the year length (353-355 or 383-385 days) decides whether Cheshvan
  and Kislev have 29 or 30 days
"""

from enum import Enum

from calendar_types import HebrewMonth, InvalidDate, OutOfRangeYear

# Epoch day of 1 Tishrei AM 1 (proleptic Gregorian -3760-09-07).
HEBREW_EPOCH = -1373427

# A lunar month is 29 days 12 hours 793 parts; 1080 parts to the hour.
PARTS_PER_DAY = 25920
MONTH_PARTS = 13753  # the 12h 793p beyond 29 whole days
MOLAD_BAHARAD_PARTS = 12084  # molad BaHaRaD (5h 204p) plus 6h for molad zaken

YEAR_MONTHS = (
    HebrewMonth.TISHREI, HebrewMonth.CHESHVAN, HebrewMonth.KISLEV,
    HebrewMonth.TEVET, HebrewMonth.SHEVAT, HebrewMonth.ADAR,
    HebrewMonth.NISAN, HebrewMonth.IYAR, HebrewMonth.SIVAN,
    HebrewMonth.TAMMUZ, HebrewMonth.AV, HebrewMonth.ELUL,
)
LEAP_YEAR_MONTHS = (
    HebrewMonth.TISHREI, HebrewMonth.CHESHVAN, HebrewMonth.KISLEV,
    HebrewMonth.TEVET, HebrewMonth.SHEVAT, HebrewMonth.ADAR_I, HebrewMonth.ADAR_II,
    HebrewMonth.NISAN, HebrewMonth.IYAR, HebrewMonth.SIVAN,
    HebrewMonth.TAMMUZ, HebrewMonth.AV, HebrewMonth.ELUL,
)

FIXED_MONTH_LENGTHS = {
    HebrewMonth.TISHREI: 30,
    HebrewMonth.TEVET: 29,
    HebrewMonth.SHEVAT: 30,
    HebrewMonth.ADAR: 29,
    HebrewMonth.ADAR_I: 30,
    HebrewMonth.ADAR_II: 29,
    HebrewMonth.NISAN: 30,
    HebrewMonth.IYAR: 29,
    HebrewMonth.SIVAN: 30,
    HebrewMonth.TAMMUZ: 29,
    HebrewMonth.AV: 30,
    HebrewMonth.ELUL: 29,
}

VALID_YEAR_LENGTHS = (353, 354, 355, 383, 384, 385)


class YearType(Enum):
    DEFICIENT = 'deficient'  # Cheshvan 29, Kislev 29
    REGULAR = 'regular'      # Cheshvan 29, Kislev 30
    COMPLETE = 'complete'    # Cheshvan 30, Kislev 30


def _check_year(year):
    if isinstance(year, bool) or not isinstance(year, int):
        raise OutOfRangeYear(f"Hebrew year must be an integer (got {year!r})")
    if year < 1:
        raise OutOfRangeYear(f"Hebrew year {year} is before the calendar epoch (AM 1)")


def is_leap_year(year):
    _check_year(year)
    return (7 * year + 1) % 19 < 7


def _elapsed_days(year):
    """Days from the epoch to the molad-based Rosh Hashanah of `year`.

    Molad zaken is folded into MOLAD_BAHARAD_PARTS; lo ADU rosh
    (never Sunday, Wednesday or Friday) is applied here. Valid for year 0,
    which _year_length_correction(1) needs.
    """
    months_elapsed = (235 * year - 234) // 19
    parts_elapsed = MOLAD_BAHARAD_PARTS + MONTH_PARTS * months_elapsed
    days = 29 * months_elapsed + parts_elapsed // PARTS_PER_DAY
    if (3 * (days + 1)) % 7 < 3:
        days += 1
    return days


def _year_length_correction(year):
    """GaTaRaD and BeTUTaKPaT: push the new year so no year is 356 or 382 days."""
    previous = _elapsed_days(year - 1)
    current = _elapsed_days(year)
    following = _elapsed_days(year + 1)
    if following - current == 356:
        return 2
    if current - previous == 382:
        return 1
    return 0


def new_year_day(year):
    """Epoch day number of 1 Tishrei of `year`."""
    _check_year(year)
    return HEBREW_EPOCH + _elapsed_days(year) + _year_length_correction(year)


def year_length(year):
    _check_year(year)
    return new_year_day(year + 1) - new_year_day(year)


def year_type(year):
    remainder = year_length(year) % 10
    if remainder == 3:
        return YearType.DEFICIENT
    if remainder == 4:
        return YearType.REGULAR
    return YearType.COMPLETE


def has_long_cheshvan(year):
    return year_type(year) is YearType.COMPLETE


def has_short_kislev(year):
    return year_type(year) is YearType.DEFICIENT


def months_in_year(year):
    """Months of `year` in calendar order, Tishrei first."""
    return LEAP_YEAR_MONTHS if is_leap_year(year) else YEAR_MONTHS


def month_exists(year, month):
    return month in months_in_year(year)


def month_length(year, month):
    if not month_exists(year, month):
        kind = 'leap' if is_leap_year(year) else 'non-leap'
        raise InvalidDate(f"{month.value} does not exist in {year} ({kind} year)")
    if month is HebrewMonth.CHESHVAN:
        return 30 if has_long_cheshvan(year) else 29
    if month is HebrewMonth.KISLEV:
        return 29 if has_short_kislev(year) else 30
    return FIXED_MONTH_LENGTHS[month]


def next_month(year, month):
    """The month after `month` in `year`, as (year, month). Elul rolls into next Tishrei."""
    months = months_in_year(year)
    if month not in months:
        raise InvalidDate(f"{month.value} does not exist in {year}")
    index = months.index(month)
    if index + 1 < len(months):
        return year, months[index + 1]
    return year + 1, HebrewMonth.TISHREI


def days_before_month(year, month):
    """Days from 1 Tishrei to the first day of `month` in `year`."""
    total = 0
    for current in months_in_year(year):
        if current is month:
            return total
        total += month_length(year, current)
    raise InvalidDate(f"{month.value} does not exist in {year}")
