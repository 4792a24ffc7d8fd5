"""In-Memory Repository Implementations"""
import asyncio
from typing import Optional, List, Dict
from uuid import UUID
from datetime import date

from domain.repositories import ReservationRepository, RoomDirectory
from domain.entities import Reservation, RoomType


class InMemoryReservationRepository(ReservationRepository):
    """In-memory implementation of ReservationRepository

    Stored and returned reservations are copies, so callers only change
    stored state through ``save`` and ``update``.
    """

    def __init__(self):
        self._storage: Dict[UUID, Reservation] = {}
        self._lock = asyncio.Lock()

    async def save(self, reservation: Reservation) -> Reservation:
        """Save reservation to memory"""
        async with self._lock:
            if reservation.reservation_id in self._storage:
                raise ValueError("Reservation already exists")
            self._storage[reservation.reservation_id] = reservation.model_copy(deep=True)
        return reservation

    async def update(self, reservation: Reservation) -> Reservation:
        """Update reservation"""
        async with self._lock:
            if reservation.reservation_id not in self._storage:
                raise ValueError("Reservation not found")
            self._storage[reservation.reservation_id] = reservation.model_copy(deep=True)
        return reservation

    async def find_by_id(self, reservation_id: UUID) -> Optional[Reservation]:
        """Find reservation by ID"""
        reservation = self._storage.get(reservation_id)
        return reservation.model_copy(deep=True) if reservation else None

    async def find_by_user_id(self, user_id: str) -> List[Reservation]:
        """Find reservations by user ID"""
        return [r.model_copy(deep=True) for r in self._storage.values() if r.user_id == user_id]

    async def find_all(self) -> List[Reservation]:
        """Find all reservations"""
        return [r.model_copy(deep=True) for r in self._storage.values()]

    async def find_overlapping(
        self,
        room_type_id: UUID,
        check_in: date,
        check_out: date,
        exclude_id: Optional[UUID] = None
    ) -> List[Reservation]:
        """Find non-canceled reservations overlapping the date range"""
        return [
            r.model_copy(deep=True) for r in self._storage.values()
            if r.room_type_id == room_type_id
            and not r.is_canceled
            and r.reservation_id != exclude_id
            and r.stay.overlaps(check_in, check_out)
        ]


class InMemoryRoomDirectory(RoomDirectory):
    """In-memory room types, used when no Room service is configured"""

    def __init__(self, room_types: Optional[List[RoomType]] = None):
        self._storage: Dict[UUID, RoomType] = {}
        for room_type in room_types or []:
            self.add(room_type)

    def add(self, room_type: RoomType) -> RoomType:
        self._storage[room_type.room_type_id] = room_type
        return room_type

    async def get_room_type(self, room_type_id: UUID) -> Optional[RoomType]:
        return self._storage.get(room_type_id)
