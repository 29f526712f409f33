#!/usr/bin/env python3
"""
Trend Calculation
=================
Year-over-year growth of a name's births.

A name with no births in the baseline year but births in the compared
year is "new": its growth ratio is the sentinel 10 and its percentage
change is +infinity.
"""

import math
from enum import Enum
from typing import Optional

from namestore import NameRecord

# Stand-in ratio for names absent from the baseline year
NEW_NAME_RATIO = 10.0


class TrendDirection(Enum):
    """Direction of a name between two years"""
    RISING = "rising"
    FALLING = "falling"
    STABLE = "stable"


def ratio_from_counts(count_a: int, count_b: int) -> float:
    """Growth ratio of count_a over the baseline count_b."""
    if count_b > 0:
        return count_a / count_b
    return NEW_NAME_RATIO if count_a > 0 else 0.0


def percentage_from_counts(count_a: int, count_b: int) -> float:
    if count_b > 0:
        return (count_a - count_b) / count_b * 100
    return math.inf if count_a > 0 else 0.0


def direction_from_counts(count_a: int, count_b: int) -> TrendDirection:
    if count_a > count_b:
        return TrendDirection.RISING
    if count_a < count_b:
        return TrendDirection.FALLING
    return TrendDirection.STABLE


def growth_ratio(record: NameRecord, year_a: int, year_b: int) -> float:
    """Births in year_a divided by births in year_b (see NEW_NAME_RATIO)."""
    return ratio_from_counts(record.births(year_a), record.births(year_b))


def percentage_change(record: NameRecord, year_a: int, year_b: int) -> float:
    return percentage_from_counts(record.births(year_a), record.births(year_b))


def trend_direction(record: NameRecord, year_a: int, year_b: int) -> TrendDirection:
    return direction_from_counts(record.births(year_a), record.births(year_b))


def _latest_pair(record: NameRecord) -> Optional[tuple]:
    year = record.current_year
    if year is None:
        return None
    return year, year - 1


def recent_growth(record: NameRecord) -> float:
    """Growth ratio of the dataset's latest year over the year before."""
    pair = _latest_pair(record)
    return growth_ratio(record, *pair) if pair else 0.0


def recent_percentage_change(record: NameRecord) -> float:
    pair = _latest_pair(record)
    return percentage_change(record, *pair) if pair else 0.0


def recent_direction(record: NameRecord) -> TrendDirection:
    pair = _latest_pair(record)
    return trend_direction(record, *pair) if pair else TrendDirection.STABLE


def has_baseline(record: NameRecord) -> bool:
    """Whether the year before the latest one has births to compare against."""
    pair = _latest_pair(record)
    return bool(pair) and record.births(pair[1]) > 0


def yearly_trend(record: NameRecord, window: int = 5) -> int:
    """Births in the last recorded year minus births `window` recorded years earlier."""
    years = sorted(record.yearly_births)[-window:]
    if not years:
        return 0
    return record.births(years[-1]) - record.births(years[0])


__all__ = [
    'NEW_NAME_RATIO',
    'TrendDirection',
    'ratio_from_counts',
    'percentage_from_counts',
    'direction_from_counts',
    'growth_ratio',
    'percentage_change',
    'trend_direction',
    'recent_growth',
    'recent_percentage_change',
    'recent_direction',
    'has_baseline',
    'yearly_trend',
]
