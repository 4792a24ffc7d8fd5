"""Domain Repository Interfaces"""
from abc import ABC, abstractmethod
from typing import Optional, List
from uuid import UUID
from datetime import date

from domain.entities import Reservation, RoomType


class ReservationRepository(ABC):
    """Repository interface for Reservation Aggregate"""

    @abstractmethod
    async def save(self, reservation: Reservation) -> Reservation:
        """Insert a new reservation"""
        pass

    @abstractmethod
    async def update(self, reservation: Reservation) -> Reservation:
        """Replace an existing reservation"""
        pass

    @abstractmethod
    async def find_by_id(self, reservation_id: UUID) -> Optional[Reservation]:
        """Find reservation by ID"""
        pass

    @abstractmethod
    async def find_by_user_id(self, user_id: str) -> List[Reservation]:
        """Find reservations made by a user"""
        pass

    @abstractmethod
    async def find_all(self) -> List[Reservation]:
        """Find all reservations"""
        pass

    @abstractmethod
    async def find_overlapping(
        self,
        room_type_id: UUID,
        check_in: date,
        check_out: date,
        exclude_id: Optional[UUID] = None
    ) -> List[Reservation]:
        """Non-canceled reservations of a room type whose dates overlap [check_in, check_out)"""
        pass


class RoomDirectory(ABC):
    """Read-only access to room types owned by the Room context"""

    @abstractmethod
    async def get_room_type(self, room_type_id: UUID) -> Optional[RoomType]:
        """Room type by ID, None when it does not exist"""
        pass
