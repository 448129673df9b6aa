"""
This module expands recurrence rules into concrete pickup days.

It uses dateutil's rrule implementation. Expansion works on naive local
wall-clock datetimes, so only the calendar day of each occurrence matters
and DST transitions cannot shift a pickup onto a neighbouring day.
"""
from datetime import date, datetime, time
from typing import List
from zoneinfo import ZoneInfo

from dateutil.relativedelta import relativedelta
from dateutil.rrule import DAILY, FR, MO, MONTHLY, SA, SU, TH, TU, WE, WEEKLY, rrule

from .models import RecurrenceSpec

FREQUENCIES = {"DAILY": DAILY, "WEEKLY": WEEKLY, "MONTHLY": MONTHLY}
WEEKDAYS = {"MO": MO, "TU": TU, "WE": WE, "TH": TH, "FR": FR, "SA": SA, "SU": SU}

DEFAULT_HORIZON_MONTHS = 6


def build_rrule(spec: RecurrenceSpec, dtstart: datetime) -> rrule:
    """
    Builds a dateutil rrule for the given spec.

    Raises:
        ValueError: If the spec uses an unknown frequency or weekday, a
            non-positive interval, or filter values rrule rejects.
    """
    freq = FREQUENCIES.get((spec.frequency or "").upper())
    if freq is None:
        raise ValueError(f"Unsupported frequency: {spec.frequency!r}")
    if spec.interval < 1:
        raise ValueError(f"Interval must be at least 1, got {spec.interval}")

    options = {"dtstart": dtstart, "interval": spec.interval}
    if spec.by_weekday:
        try:
            options["byweekday"] = [WEEKDAYS[str(code).upper()] for code in spec.by_weekday]
        except KeyError as e:
            raise ValueError(f"Unknown weekday code: {e.args[0]!r}") from e
    if spec.by_month_day:
        options["bymonthday"] = list(spec.by_month_day)
    if spec.by_month:
        options["bymonth"] = list(spec.by_month)
    if spec.by_set_position:
        options["bysetpos"] = list(spec.by_set_position)
    return rrule(freq, **options)


def expand(
    spec: RecurrenceSpec,
    tz: ZoneInfo,
    now: datetime,
    horizon_months: int = DEFAULT_HORIZON_MONTHS,
) -> List[date]:
    """
    Returns the ascending pickup days of `spec` between the start of today
    and `now + horizon_months`, both ends inclusive.
    """
    local_now = now.astimezone(tz).replace(tzinfo=None)
    day_start = datetime.combine(local_now.date(), time.min)
    until = local_now + relativedelta(months=horizon_months)

    rule = build_rrule(spec, day_start)
    return [occurrence.date() for occurrence in rule.between(day_start, until, inc=True)]
