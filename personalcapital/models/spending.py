"""
Spending summary models (``/api/account/getUserSpending``).
"""

from dataclasses import dataclass
from datetime import date
from typing import Self

from personalcapital.models.reader import FieldReader
from personalcapital.models.transactions import IntervalType


@dataclass(frozen=True, kw_only=True)
class SpendingDetail:
    date: date
    amount: float

    @classmethod
    def from_payload(cls, r: FieldReader) -> Self:
        return cls(date=r.iso_date("date"), amount=r.number("amount"))


@dataclass(frozen=True, kw_only=True)
class SpendingInterval:
    interval_type: IntervalType
    current: float
    average: float | None = None
    target: float | None = None
    details: tuple[SpendingDetail, ...] = ()

    @classmethod
    def from_payload(cls, r: FieldReader) -> Self:
        return cls(
            interval_type=r.enum("type", IntervalType),
            current=r.number("current"),
            average=r.opt_number("average"),
            target=r.opt_number("target"),
            details=tuple(r.opt_array("details", SpendingDetail.from_payload) or ()),
        )


@dataclass(frozen=True, kw_only=True)
class UserSpending:
    intervals: tuple[SpendingInterval, ...]

    @classmethod
    def from_payload(cls, r: FieldReader) -> Self:
        return cls(intervals=tuple(r.array("intervals", SpendingInterval.from_payload)))

    def interval(self, interval_type: IntervalType) -> SpendingInterval | None:
        """Return the summary for one interval type."""
        for interval in self.intervals:
            if interval.interval_type == interval_type:
                return interval
        return None
