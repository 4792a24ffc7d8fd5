"""Application Services - Business use cases"""
import asyncio
import contextlib
import logging
from uuid import UUID
from datetime import date, datetime
from typing import Any, AsyncContextManager, Callable, Dict, List, Optional

from domain.repositories import ReservationRepository, RoomDirectory
from domain.entities import Reservation, RoomType, GuestDetails
from domain.enums import ReservationStatus, RecurrenceType
from domain.errors import InvalidOperationError, NotFoundError, RoomNotFoundError
from domain.services import AvailabilityEngine, RoomAllocator, CostCalculator, RecurrenceExpander
from domain.value_objects import StayWindow, CancellationResult, AvailabilitySummary

logger = logging.getLogger(__name__)

DEFAULT_CANCELLATION_WINDOW_HOURS = 48.0


class RoomTypeLocks:
    """One asyncio lock per room type.

    Holding the lock across the availability check and the insert closes the
    check-then-act gap for writers in this process. Other processes sharing
    the same store are not covered.
    """

    def __init__(self):
        self._locks: Dict[UUID, asyncio.Lock] = {}

    def get(self, room_type_id: UUID) -> asyncio.Lock:
        return self._locks.setdefault(room_type_id, asyncio.Lock())


class AvailabilityService:
    """Service for availability queries on a room type"""

    def __init__(self,
                 repository: ReservationRepository,
                 room_directory: RoomDirectory,
                 engine: Optional[AvailabilityEngine] = None):
        self.repository = repository
        self.room_directory = room_directory
        self.engine = engine or AvailabilityEngine()

    async def is_available(
        self,
        room_type_id: UUID,
        check_in: date,
        check_out: date,
        board_type: str,
        exclude_reservation_id: Optional[UUID] = None
    ) -> bool:
        """Check if the room type has a free unit for every night of the stay"""
        room_type = await self.room_directory.get_room_type(room_type_id)
        if room_type is None:
            return False
        stay = StayWindow(check_in=check_in, check_out=check_out)
        return await self.is_available_for(room_type, stay, board_type, exclude_reservation_id)

    async def is_available_for(
        self,
        room_type: RoomType,
        stay: StayWindow,
        board_type: str,
        exclude_reservation_id: Optional[UUID] = None
    ) -> bool:
        """Same check for an already resolved room type"""
        existing = await self.repository.find_overlapping(
            room_type.room_type_id, stay.check_in, stay.check_out, exclude_id=exclude_reservation_id
        )
        return self.engine.is_available(room_type, stay, board_type, existing, exclude_reservation_id)

    async def get_available_count(self, room_type_id: UUID, check_in: date, check_out: date) -> int:
        """Units of the room type not touched by any stay in the date range"""
        room_type = await self.room_directory.get_room_type(room_type_id)
        if room_type is None:
            return 0
        stay = StayWindow(check_in=check_in, check_out=check_out)
        existing = await self.repository.find_overlapping(room_type_id, check_in, check_out)
        return self.engine.available_count(room_type, stay, existing)

    async def check_availability(
        self,
        room_type_id: UUID,
        check_in: date,
        check_out: date,
        board_type: str = "",
        exclude_reservation_id: Optional[UUID] = None
    ) -> AvailabilitySummary:
        """Booking decision and coarse unit count in one answer"""
        is_available = await self.is_available(
            room_type_id, check_in, check_out, board_type, exclude_reservation_id
        )
        available_count = await self.get_available_count(room_type_id, check_in, check_out)
        return AvailabilitySummary(is_available=is_available, available_room_count=available_count)


class ReservationService:
    """Service for Reservation business use cases"""

    def __init__(self,
                 repository: ReservationRepository,
                 room_directory: RoomDirectory,
                 locks: Optional[RoomTypeLocks] = None,
                 clock: Callable[[], datetime] = datetime.now,
                 cancellation_window_hours: float = DEFAULT_CANCELLATION_WINDOW_HOURS):
        self.repository = repository
        self.room_directory = room_directory
        self.availability = AvailabilityService(repository, room_directory)
        self.allocator = RoomAllocator()
        self.calculator = CostCalculator()
        self.recurrence = RecurrenceExpander()
        self.locks = locks
        self.clock = clock
        self.cancellation_window_hours = cancellation_window_hours

    def _write_guard(self, room_type_id: UUID) -> AsyncContextManager[Any]:
        # Without locks the check-then-insert race between concurrent writers is left open
        if self.locks is None:
            return contextlib.nullcontext()
        return self.locks.get(room_type_id)

    async def _resolve_room_type(self, room_type_id: UUID) -> RoomType:
        room_type = await self.room_directory.get_room_type(room_type_id)
        if room_type is None:
            raise RoomNotFoundError()
        return room_type

    async def create_reservation(
        self,
        room_type_id: UUID,
        check_in: date,
        check_out: date,
        guest: GuestDetails,
        user_id: Optional[str] = None,
        recurrence: RecurrenceType = RecurrenceType.NONE,
        recurrence_count: int = 0,
        created_by: Optional[str] = None
    ) -> Reservation:
        """Create one reservation per recurrence occurrence and return the first.

        Occurrences are checked and stored one after another, so a rejected
        occurrence leaves the earlier ones in place.
        """
        stay = StayWindow(check_in=check_in, check_out=check_out)
        room_type = await self._resolve_room_type(room_type_id)

        created: List[Reservation] = []
        async with self._write_guard(room_type_id):
            for occurrence in self.recurrence.expand(stay, recurrence, recurrence_count):
                if not await self.availability.is_available_for(room_type, occurrence, guest.board_type):
                    logger.info(
                        "Room type %s not available for %s to %s",
                        room_type_id, occurrence.check_in, occurrence.check_out
                    )
                    raise InvalidOperationError(
                        f"Room is not available for {occurrence.check_in:%Y-%m-%d} to {occurrence.check_out:%Y-%m-%d}"
                    )

                reservation = Reservation.create(
                    room_type_id=room_type_id,
                    stay=occurrence,
                    guest=guest,
                    user_id=user_id,
                    recurrence=recurrence,
                    recurrence_count=recurrence_count,
                    created_by=created_by
                )

                existing = await self.repository.find_overlapping(
                    room_type_id, occurrence.check_in, occurrence.check_out
                )
                reservation.assign_room(self.allocator.allocate(room_type, existing))
                reservation.set_total_cost(self.calculator.calculate(room_type, occurrence, reservation.board_type))

                created.append(await self.repository.save(reservation))
                logger.info(
                    "Created reservation %s in room %s for %s to %s",
                    reservation.reservation_id, reservation.allocated_room_number,
                    occurrence.check_in, occurrence.check_out
                )

        return created[0]

    async def get_reservation(self, reservation_id: UUID) -> Optional[Reservation]:
        """Get reservation by ID"""
        return await self.repository.find_by_id(reservation_id)

    async def get_reservations_by_user(self, user_id: str) -> List[Reservation]:
        """Get all reservations made by a user"""
        return await self.repository.find_by_user_id(user_id)

    async def get_all_reservations(self) -> List[Reservation]:
        """Get all reservations"""
        return await self.repository.find_all()

    async def update_reservation(
        self,
        reservation_id: UUID,
        room_type_id: UUID,
        check_in: date,
        check_out: date,
        guest: GuestDetails,
        updated_by: Optional[str] = None
    ) -> Reservation:
        """Replace dates, room type and guest details, then reprice"""
        reservation = await self.repository.find_by_id(reservation_id)
        if reservation is None:
            raise NotFoundError("Reservation not found")

        stay = StayWindow(check_in=check_in, check_out=check_out)
        room_type = await self._resolve_room_type(room_type_id)

        async with self._write_guard(room_type_id):
            others = await self.repository.find_overlapping(
                room_type_id, stay.check_in, stay.check_out, exclude_id=reservation_id
            )
            if not self.availability.engine.is_available(room_type, stay, guest.board_type, others, reservation_id):
                raise InvalidOperationError("Selected room type is not available for the new dates.")

            reservation.replace_details(room_type_id, stay, guest, updated_by)

            # Keep the current room number unless the move made it invalid or taken
            if not self.allocator.is_still_free(room_type, reservation.allocated_room_number, others):
                reservation.assign_room(self.allocator.allocate(room_type, others))

            reservation.set_total_cost(self.calculator.calculate(room_type, stay, reservation.board_type))
            updated = await self.repository.update(reservation)

        logger.info("Updated reservation %s", reservation_id)
        return updated

    async def update_status(
        self,
        reservation_id: UUID,
        status: ReservationStatus,
        admin_note: Optional[str] = None,
        updated_by: Optional[str] = None
    ) -> bool:
        """Set status and admin note; False when the reservation does not exist"""
        reservation = await self.repository.find_by_id(reservation_id)
        if not reservation:
            return False

        reservation.change_status(status, admin_note, updated_by)
        await self.repository.update(reservation)
        logger.info("Reservation %s status set to %s", reservation_id, status.value)
        return True

    async def cancel_reservation(self, reservation_id: UUID) -> Optional[CancellationResult]:
        """Cancel a reservation unless check-in is too close"""
        reservation = await self.repository.find_by_id(reservation_id)
        if not reservation:
            return None

        result = reservation.cancel(self.clock(), self.cancellation_window_hours)
        if not result.success:
            logger.info("Refused to cancel reservation %s: %s", reservation_id, result.message)
            return result

        await self.repository.update(reservation)
        logger.info("Canceled reservation %s", reservation_id)
        return result
