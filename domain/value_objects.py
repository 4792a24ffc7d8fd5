"""Domain Value Objects"""
from pydantic import BaseModel, validator
from datetime import date, datetime, time, timedelta
from typing import Iterator

from domain.enums import BoardType

ONE_DAY = timedelta(days=1)

# Hours at which a stay starts occupying a room on arrival and releases it on departure
FULL_BOARD_CHECK_IN_HOUR = 19
STANDARD_CHECK_IN_HOUR = 14
FULL_BOARD_CHECK_OUT_HOUR = 12
STANDARD_CHECK_OUT_HOUR = 8


def check_in_hour(board_type: str) -> int:
    return FULL_BOARD_CHECK_IN_HOUR if board_type == BoardType.FULL_BOARD else STANDARD_CHECK_IN_HOUR


def check_out_hour(board_type: str) -> int:
    return FULL_BOARD_CHECK_OUT_HOUR if board_type == BoardType.FULL_BOARD else STANDARD_CHECK_OUT_HOUR


def at_hour(day: date, hour: int = 0) -> datetime:
    return datetime.combine(day, time(hour=hour))


class TimeBlock(BaseModel):
    """Value Object for a half-open [start, end) occupancy interval"""
    start: datetime
    end: datetime

    def overlaps(self, other: "TimeBlock") -> bool:
        return self.start < other.end and self.end > other.start

    class Config:
        frozen = True


class StayWindow(BaseModel):
    """Value Object for a stay, check-in and check-out dates only"""
    check_in: date
    check_out: date

    @validator('check_out')
    def check_out_after_check_in(cls, v, values):
        if 'check_in' in values and v <= values['check_in']:
            raise ValueError('Check-out must be after check-in')
        return v

    @property
    def last_night(self) -> date:
        return self.check_out - ONE_DAY

    def nights(self) -> int:
        """Calculate number of nights"""
        return (self.check_out - self.check_in).days

    def days(self) -> Iterator[date]:
        """Iterate the nights of the stay, check-in day included, check-out day excluded"""
        day = self.check_in
        while day < self.check_out:
            yield day
            day += ONE_DAY

    def overlaps(self, check_in: date, check_out: date) -> bool:
        """Coarse date-only overlap, no time of day"""
        return not (self.check_out <= check_in or self.check_in >= check_out)

    def block_on(self, day: date, board_type: str) -> TimeBlock:
        """Time block this stay needs on one of its own days.

        Arrival day runs from the check-in hour to midnight and wins for
        one-night stays. The last night runs from midnight to the check-out
        hour on the departure date. Any other day is a full day.
        """
        if day == self.check_in:
            return TimeBlock(start=at_hour(day, check_in_hour(board_type)), end=at_hour(day + ONE_DAY))
        if day == self.last_night:
            return TimeBlock(start=at_hour(day), end=at_hour(self.check_out, check_out_hour(board_type)))
        return TimeBlock(start=at_hour(day), end=at_hour(day + ONE_DAY))

    def occupancy_seen_from(self, day: date, board_type: str) -> TimeBlock:
        """Span an already booked stay occupies, as evaluated for another stay's day.

        The span covers the whole stay; only its ends are trimmed to the
        check-in and check-out hours, and only when ``day`` is the stay's
        arrival day or last night respectively.
        """
        if day == self.check_in:
            start = at_hour(self.check_in, check_in_hour(board_type))
        else:
            start = at_hour(self.check_in)

        if day == self.last_night:
            end = at_hour(self.check_out, check_out_hour(board_type))
        else:
            end = at_hour(self.check_out)

        return TimeBlock(start=start, end=end)

    class Config:
        frozen = True


class CancellationResult(BaseModel):
    """Outcome of a cancellation attempt; a refusal is an expected result, not an error"""
    success: bool
    message: str

    class Config:
        frozen = True


class AvailabilitySummary(BaseModel):
    is_available: bool
    available_room_count: int

    class Config:
        frozen = True
