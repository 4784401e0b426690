#!/usr/bin/env python3
"""
Sunset Adjustment
The Hebrew day begins at the preceding sunset, so a death after sunset
belongs to the Hebrew date of the following Gregorian day.
"""

from dataclasses import dataclass

from calendar_conversion import gregorian_to_hebrew
from calendar_types import GregorianDate, HebrewDate, SunsetHint

UNSURE_ASSUMPTION = (
    "Time of passing relative to sunset was not known; "
    "the date was treated as before sunset."
)


@dataclass(frozen=True)
class YahrzeitAnchor:
    """The canonical Hebrew date of death, fixed once per calculation."""

    hebrew_date_of_death: HebrewDate
    gregorian_date_of_death: GregorianDate
    converted_gregorian_date: GregorianDate
    hint: SunsetHint


def resolve(death_date, hint):
    """Resolve a Gregorian date of death and sunset hint to a YahrzeitAnchor.

    Returns (anchor, assumption). `assumption` is None unless the hint was
    'unsure', in which case it explains that 'before' was assumed.
    """
    if not isinstance(death_date, GregorianDate):
        death_date = GregorianDate.from_date(death_date)
    hint = SunsetHint.parse(hint)

    converted = death_date
    if hint is SunsetHint.AFTER:
        converted = death_date.add_days(1)

    anchor = YahrzeitAnchor(
        hebrew_date_of_death=gregorian_to_hebrew(converted),
        gregorian_date_of_death=death_date,
        converted_gregorian_date=converted,
        hint=hint,
    )
    assumption = UNSURE_ASSUMPTION if hint is SunsetHint.UNSURE else None
    return anchor, assumption
