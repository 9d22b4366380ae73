from __future__ import annotations
from calendar import isleap
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from itertools import groupby
from typing import Any, Iterable

from loguru import logger


@dataclass(frozen=True)
class JubileeHit:
    employee: Any
    years: int
    anniversary_date: date


def parse_jubilee_years(csv: str | None) -> set[int]:
    """Parse a milestone list such as "5,10,25".

    Malformed and non-positive entries are dropped instead of failing the
    whole configuration.
    """
    years: set[int] = set()
    for part in (csv or "").split(","):
        part = part.strip()
        if not part:
            continue
        try:
            value = int(part)
        except ValueError:
            logger.debug("Ignoring invalid jubilee year entry: {!r}", part)
            continue
        if value > 0:
            years.add(value)
    return years


def to_date(value: Any) -> date | None:
    """Coerce a date, datetime or ISO string to a date; None when impossible."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return datetime.fromisoformat(text).date()
        except ValueError:
            return None
    return None


def anniversary_in_year(start: date, year: int) -> date:
    # Feb 29 falls back to Feb 28 in non-leap years
    if start.month == 2 and start.day == 29 and not isleap(year):
        return date(year, 2, 28)
    return start.replace(year=year)


def _hit_for_year(employee: Any, years: set[int], year: int) -> JubileeHit | None:
    start = to_date(getattr(employee, "start_date", None))
    if start is None:
        return None
    count = year - start.year
    if count <= 0 or count not in years:
        return None
    return JubileeHit(employee=employee, years=count, anniversary_date=anniversary_in_year(start, year))


def find_jubilees_on_day(employees: Iterable[Any], years: set[int], target: date | datetime) -> list[JubileeHit]:
    """Employees whose milestone anniversary falls exactly on ``target``."""
    if not years:
        return []
    day = to_date(target)
    hits: list[JubileeHit] = []
    for employee in employees:
        hit = _hit_for_year(employee, years, day.year)
        if hit is not None and hit.anniversary_date == day:
            hits.append(hit)
    return hits


def find_upcoming_jubilees(
    employees: Iterable[Any],
    years: set[int],
    window_days: int,
    today: date | datetime,
) -> list[JubileeHit]:
    """Milestone anniversaries between ``today`` and ``today + window_days``, both inclusive.

    The following year is tested as well so that windows crossing New Year
    are covered.
    """
    if not years or window_days < 0:
        return []
    start = to_date(today)
    end = start + timedelta(days=window_days)
    hits: list[JubileeHit] = []
    for employee in employees:
        for year in (start.year, start.year + 1):
            hit = _hit_for_year(employee, years, year)
            if hit is not None and start <= hit.anniversary_date <= end:
                hits.append(hit)
    return hits


def is_birthday(birth_date: Any, today: date | datetime) -> bool:
    born = to_date(birth_date)
    if born is None:
        return False
    day = to_date(today)
    return born.day == day.day and born.month == day.month


def group_hits_by_years(hits: Iterable[JubileeHit]) -> list[tuple[int, list[JubileeHit]]]:
    ordered = sorted(hits, key=lambda h: (h.years, h.anniversary_date))
    return [(years, list(group)) for years, group in groupby(ordered, key=lambda h: h.years)]
