# -*- coding: utf-8 -*-
"""
Semi-monthly pay period helpers.

1st_half covers days 1-15, 2nd_half covers day 16 to the last day of the month.
Benefit/Deduction rows use the short cutoff codes "1st"/"2nd" for the same halves.
"""
from __future__ import annotations
import calendar
from datetime import date
from typing import Tuple

from payroll.exceptions import PayrollValidationError
from payroll.models import PeriodType, Cutoff

FIRST_HALF_LAST_DAY = 15


def validate_period(year, month, period_type) -> Tuple[int, int, str]:
    try:
        year = int(year)
        month = int(month)
    except (TypeError, ValueError):
        raise PayrollValidationError("year and month must be integers.", year=year, month=month)
    if not 1 <= month <= 12:
        raise PayrollValidationError(f"month must be between 1 and 12 (got {month}).", month=month)
    if year < 1900:
        raise PayrollValidationError(f"year {year} is out of range.", year=year)
    if period_type not in PeriodType.values:
        raise PayrollValidationError(
            f"period_type must be one of {', '.join(PeriodType.values)} (got {period_type!r}).",
            period_type=period_type,
        )
    return year, month, period_type


def period_bounds(year: int, month: int, period_type: str) -> Tuple[date, date]:
    year, month, period_type = validate_period(year, month, period_type)
    if period_type == PeriodType.FIRST_HALF:
        return date(year, month, 1), date(year, month, FIRST_HALF_LAST_DAY)
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, FIRST_HALF_LAST_DAY + 1), date(year, month, last_day)


def expected_days_in_half(period_type: str, period_end: date) -> int:
    if period_type == PeriodType.FIRST_HALF:
        return FIRST_HALF_LAST_DAY
    return period_end.day - FIRST_HALF_LAST_DAY


def cutoff_for(period_type: str) -> str:
    return Cutoff.FIRST if period_type == PeriodType.FIRST_HALF else Cutoff.SECOND
