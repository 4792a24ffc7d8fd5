"""Domain Services - availability, allocation, pricing and recurrence rules

Everything here works on already fetched data and never touches a
repository, so the same inputs always give the same answer.
"""
import calendar
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, Iterator, List, Optional, Set
from uuid import UUID

from domain.entities import Reservation, RoomType
from domain.enums import RecurrenceType
from domain.errors import NoCapacityError
from domain.value_objects import StayWindow


def _active(reservations: Iterable[Reservation], exclude_reservation_id: Optional[UUID] = None) -> List[Reservation]:
    return [
        r for r in reservations
        if not r.is_canceled and r.reservation_id != exclude_reservation_id
    ]


class AvailabilityEngine:
    """Decides whether a room type still has a free unit for a stay"""

    def is_available(
        self,
        room_type: RoomType,
        stay: StayWindow,
        board_type: str,
        existing: Iterable[Reservation],
        exclude_reservation_id: Optional[UUID] = None
    ) -> bool:
        """Check every night of ``stay`` against the booked time blocks.

        ``existing`` is the coarse-overlap result for the room type; canceled
        reservations and ``exclude_reservation_id`` are ignored. The stay is
        rejected as soon as one day has ``total_rooms`` overlapping blocks.
        """
        reservations = _active(existing, exclude_reservation_id)

        for day in stay.days():
            if self.occupied_units(stay, board_type, day, reservations) >= room_type.total_rooms:
                return False

        return True

    @staticmethod
    def occupied_units(
        stay: StayWindow,
        board_type: str,
        day: date,
        reservations: Iterable[Reservation]
    ) -> int:
        """Count reservations whose block overlaps the candidate's block on ``day``"""
        block = stay.block_on(day, board_type)
        return sum(
            1 for existing in reservations
            if block.overlaps(existing.stay.occupancy_seen_from(day, existing.board_type))
        )

    @staticmethod
    def available_count(room_type: RoomType, stay: StayWindow, existing: Iterable[Reservation]) -> int:
        """Units left by coarse date overlap only, used for capacity reporting.

        May go below zero when the time-block rules let more stays share a
        date range than there are units.
        """
        overlapping = sum(
            1 for r in existing
            if not r.is_canceled and r.stay.overlaps(stay.check_in, stay.check_out)
        )
        return room_type.total_rooms - overlapping


class RoomAllocator:
    """Picks a concrete room number for a new or moved reservation"""

    @staticmethod
    def occupied_room_numbers(existing: Iterable[Reservation]) -> Set[str]:
        return {
            r.allocated_room_number for r in existing
            if not r.is_canceled and r.allocated_room_number is not None
        }

    def allocate(self, room_type: RoomType, existing: Iterable[Reservation]) -> str:
        """First room number, in the room type's declared order, not held by an overlapping stay.

        Declared order is the only tie-break; no load balancing across units.
        """
        occupied = self.occupied_room_numbers(existing)
        for room_number in room_type.room_numbers:
            if room_number not in occupied:
                return room_number
        raise NoCapacityError()

    def is_still_free(self, room_type: RoomType, room_number: Optional[str], existing: Iterable[Reservation]) -> bool:
        return (
            room_number is not None
            and room_number in room_type.room_numbers
            and room_number not in self.occupied_room_numbers(existing)
        )


class CostCalculator:
    """Total price of a stay from room rate, discount and board"""

    @staticmethod
    def nights(stay: StayWindow) -> int:
        return max(1, stay.nights())

    def calculate(self, room_type: RoomType, stay: StayWindow, board_type: str) -> Decimal:
        nights = self.nights(stay)

        if nights == 1:
            return (room_type.base_price_after_discount + room_type.meal_cost_for_board(board_type)) * nights

        # Multi-night stays charge the arrival night at breakfast + dinner
        # whatever the board; further nights use the selected board rate.
        meals = room_type.half_board_meal_cost + (nights - 1) * room_type.meal_cost_for_board(board_type)
        room = room_type.base_price_after_discount * nights
        return meals + room


def add_months(day: date, months: int) -> date:
    """Shift by calendar months, clamping to the last day of the target month"""
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return day.replace(year=year, month=month, day=min(day.day, last_day))


class RecurrenceExpander:
    """Turns one booking request into its dated occurrences"""

    @staticmethod
    def shift(day: date, recurrence: RecurrenceType, iteration: int) -> date:
        if iteration == 0:
            return day
        if recurrence == RecurrenceType.DAILY:
            return day + timedelta(days=iteration)
        if recurrence == RecurrenceType.WEEKLY:
            return day + timedelta(days=iteration * 7)
        if recurrence == RecurrenceType.MONTHLY:
            return add_months(day, iteration)
        return day

    def occurrence(self, stay: StayWindow, recurrence: RecurrenceType, iteration: int) -> StayWindow:
        """The i-th stay: check-in shifted, length of stay unchanged.

        Check-out follows from the night count so month-end clamping never
        shortens or empties a stay.
        """
        check_in = self.shift(stay.check_in, recurrence, iteration)
        return StayWindow(check_in=check_in, check_out=check_in + timedelta(days=stay.nights()))

    def expand(self, stay: StayWindow, recurrence: RecurrenceType, count: int) -> Iterator[StayWindow]:
        """Yield ``count`` occurrences, or just the base stay when count is 0.

        With ``RecurrenceType.NONE`` every occurrence repeats the base dates.
        """
        for iteration in range(count if count > 0 else 1):
            yield self.occurrence(stay, recurrence, iteration)
