from dataclasses import dataclass, field
from enum import Enum
from typing import List

import numpy as np

from solarsystemopt.errors import ConfigurationError
from solarsystemopt.utility import DAYS_PER_YEAR, HOURS_PER_DAY


class WeekdayType(Enum):
    WEEKDAY = 'weekday'  # Monday - Friday
    WEEKEND = 'weekend'  # Saturday, Sunday


@dataclass(frozen=True)
class HourRange:
    """ Hours [start, end) of a day type. Ranges with start > end wrap around midnight (e.g. 22 - 6)."""
    start: int
    end: int
    weekday_type: WeekdayType

    def hours(self) -> List[int]:
        if self.start > self.end:
            return list(range(self.start, HOURS_PER_DAY)) + list(range(0, self.end))
        return list(range(self.start, self.end))

    def matchesHour(self, hour: int, weekday_type: WeekdayType) -> bool:
        if self.weekday_type != weekday_type:
            return False
        if self.start > self.end:
            return hour >= self.start or hour < self.end
        return self.start <= hour < self.end


@dataclass(frozen=True)
class RateTier:
    name: str  # e.g. 'Peak', 'Off-Peak'
    rate: float  # per kWh
    hour_ranges: List[HourRange] = field(default_factory=list)

    def matchesHour(self, hour: int, weekday_type: WeekdayType) -> bool:
        return any(hour_range.matchesHour(hour, weekday_type) for hour_range in self.hour_ranges)


class ElectricityRate:
    """ Grid tariff, either a fixed rate or a time-of-use structure of rate tiers.
    Use ElectricityRate.fixed(rate) or ElectricityRate.tiered(tiers)."""

    def __init__(self, rate: float = None, tiers: List[RateTier] = None):
        if (rate is None) == (tiers is None):
            raise ConfigurationError("An electricity rate is either fixed or tiered")
        self.rate = rate
        self.tiers = list(tiers) if tiers is not None else None

    @staticmethod
    def fixed(rate: float) -> 'ElectricityRate':
        return ElectricityRate(rate=rate)

    @staticmethod
    def tiered(tiers: List[RateTier]) -> 'ElectricityRate':
        return ElectricityRate(tiers=tiers)

    @property
    def is_fixed(self) -> bool:
        return self.tiers is None

    def rateForHour(self, hour: int, weekday_type: WeekdayType) -> float:
        if self.is_fixed:
            return self.rate
        for tier in self.tiers:
            if tier.matchesHour(hour, weekday_type):
                return tier.rate
        raise ConfigurationError(f"No rate tier covers hour {hour} on a {weekday_type.value}")

    def toWeeklyHourlyRates(self) -> np.ndarray:
        """ 168 rates, Monday 0h to Sunday 23h."""
        return np.array([self.rateForHour(hour, _weekdayType(day))
                         for day in range(7) for hour in range(HOURS_PER_DAY)])

    def toYearlyHourlyRates(self) -> np.ndarray:
        """ 8760 rates, January 1st (assumed to be a Monday) 0h to December 31st 23h."""
        weekly = self.toWeeklyHourlyRates()
        return np.array([weekly[(day % 7) * HOURS_PER_DAY + hour]
                         for day in range(DAYS_PER_YEAR) for hour in range(HOURS_PER_DAY)])

    def isValid(self) -> bool:
        """ True if all hours of weekdays and weekends are covered exactly once and no rate is negative."""
        if self.is_fixed:
            return self.rate >= 0
        if any(tier.rate < 0 for tier in self.tiers):
            return False
        for weekday_type in WeekdayType:
            covered = [0] * HOURS_PER_DAY
            for tier in self.tiers:
                for hour_range in tier.hour_ranges:
                    if hour_range.weekday_type != weekday_type:
                        continue
                    for hour in hour_range.hours():
                        covered[hour] += 1
            if any(count != 1 for count in covered):
                return False
        return True

    def __repr__(self):
        if self.is_fixed:
            return f"ElectricityRate.fixed({self.rate})"
        return f"ElectricityRate.tiered({[tier.name for tier in self.tiers]})"


def _weekdayType(day_of_week: int) -> WeekdayType:
    # 0 = Monday
    return WeekdayType.WEEKDAY if day_of_week < 5 else WeekdayType.WEEKEND
