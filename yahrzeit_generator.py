#!/usr/bin/env python3
"""
Yahrzeit Recurrence
Projects a Hebrew date of death onto later Hebrew years.

Rules, applied in this order for each target year:
1. Adar: a death in Adar of a regular year is observed in Adar II of a
   leap year. A death in Adar I / Adar II keeps its Adar in a leap year
   and falls back to plain Adar in a regular year.
2. Day 30: if the 30th does not exist in the target year's month
   (short Cheshvan or Kislev, or Adar I's 30th landing in a 29-day Adar),
   the yahrzeit is the 1st of the following month.
3. Otherwise the same month and day.
"""

from dataclasses import dataclass

from calendar_conversion import hebrew_to_gregorian
from calendar_types import (
    CalendarError, GregorianDate, HebrewDate, HebrewMonth, InvalidDate, UnresolvableObservance,
)
from hebrew_year import is_leap_year, month_exists, month_length, next_month


@dataclass(frozen=True)
class YahrzeitOccurrence:
    cycle_number: int
    hebrew_date: HebrewDate
    gregorian_date: GregorianDate
    days_from_today: int
    is_past: bool


def _observed_month(death_month, target_year):
    """Rule 1: which month of `target_year` carries the yahrzeit."""
    if not death_month.is_adar:
        return death_month
    if is_leap_year(target_year):
        if death_month is HebrewMonth.ADAR:
            return HebrewMonth.ADAR_II
        return death_month
    return HebrewMonth.ADAR


def observed_date(anchor, target_year):
    """The Hebrew date on which the yahrzeit falls in `target_year`."""
    death = anchor.hebrew_date_of_death
    if target_year <= death.year:
        raise InvalidDate(
            f"Target year {target_year} is not after the year of death ({death.year})"
        )

    month = _observed_month(death.month, target_year)
    if not month_exists(target_year, month):
        raise UnresolvableObservance(f"{month.value} does not exist in {target_year}")

    day = death.day
    if day == 30 and month_length(target_year, month) == 29:
        year, month = next_month(target_year, month)
        return HebrewDate(year, month, 1)
    try:
        return HebrewDate(target_year, month, day)
    except InvalidDate as e:
        raise UnresolvableObservance(
            f"No yahrzeit for {death.display()} in {target_year}: {e}"
        ) from e


def days_until(gregorian_date, today):
    if not isinstance(today, GregorianDate):
        today = GregorianDate.from_date(today)
    return gregorian_date.to_epoch_day() - today.to_epoch_day()


def generate(anchor, years_requested, today):
    """Yahrzeits for cycles 1 .. years_requested + 1, in cycle order.

    `today` fixes days_from_today / is_past for the whole sequence.
    """
    if isinstance(years_requested, bool) or not isinstance(years_requested, int):
        raise ValueError(f"years_requested must be an integer (got {years_requested!r})")
    if years_requested < 0:
        raise ValueError(f"years_requested must not be negative (got {years_requested})")

    death_year = anchor.hebrew_date_of_death.year
    occurrences = []
    for cycle in range(1, years_requested + 2):
        hebrew = observed_date(anchor, death_year + cycle)
        try:
            gregorian = hebrew_to_gregorian(hebrew)
        except CalendarError as e:
            raise UnresolvableObservance(f"Cycle {cycle}: {e}") from e
        delta = days_until(gregorian, today)
        occurrences.append(YahrzeitOccurrence(
            cycle_number=cycle,
            hebrew_date=hebrew,
            gregorian_date=gregorian,
            days_from_today=delta,
            is_past=delta < 0,
        ))
    return occurrences
