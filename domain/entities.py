"""Domain Entities - Aggregates"""
from pydantic import BaseModel, Field, validator
from uuid import UUID, uuid4
from datetime import datetime, date
from typing import Optional, List
from decimal import Decimal

from domain.enums import ReservationStatus, RecurrenceType, BoardType
from domain.value_objects import StayWindow, CancellationResult, at_hour

MAX_RECURRENCE_COUNT = 365
FALLBACK_ROOM_NAME = "Room Service Unavailable"


class RoomType(BaseModel):
    """Room type as published by the Room context (read-only here)"""

    room_type_id: UUID
    name: str = ""

    # Capacity
    total_rooms: int = Field(ge=0, default=0)
    room_numbers: List[str] = []

    # Pricing
    price: Decimal = Field(ge=0, default=Decimal("0"))
    discount: Decimal = Field(ge=0, le=100, default=Decimal("0"))
    breakfast_price: Decimal = Field(ge=0, default=Decimal("0"))
    lunch_price: Decimal = Field(ge=0, default=Decimal("0"))
    dinner_price: Decimal = Field(ge=0, default=Decimal("0"))

    class Config:
        from_attributes = True

    @property
    def base_price_after_discount(self) -> Decimal:
        """Nightly room price with the discount applied, meals excluded"""
        return self.price * (Decimal(1) - self.discount / Decimal(100))

    @property
    def full_board_meal_cost(self) -> Decimal:
        return self.breakfast_price + self.lunch_price + self.dinner_price

    @property
    def half_board_meal_cost(self) -> Decimal:
        return self.breakfast_price + self.dinner_price

    def meal_cost_for_board(self, board_type: str) -> Decimal:
        """Meal charge for one night on the given board"""
        if board_type == BoardType.HALF_BOARD:
            return self.half_board_meal_cost
        if board_type == BoardType.FULL_BOARD:
            return self.full_board_meal_cost
        return Decimal("0")

    @staticmethod
    def unavailable(room_type_id: UUID) -> "RoomType":
        """Zero-capacity stand-in used when the Room context cannot be reached"""
        return RoomType(room_type_id=room_type_id, name=FALLBACK_ROOM_NAME)


class GuestDetails(BaseModel):
    """Contact and preference fields supplied by the guest"""
    first_name: str
    last_name: str
    email: str
    phone_number: str
    country: str
    book_for: str = ""
    is_work_related: bool = False
    pay_by: str
    board_type: str = ""
    special_request: str = ""

    def normalized(self) -> "GuestDetails":
        return GuestDetails(
            first_name=self.first_name.strip(),
            last_name=self.last_name.strip(),
            email=self.email.strip(),
            phone_number=self.phone_number.strip(),
            country=self.country.strip(),
            book_for=self.book_for,
            is_work_related=self.is_work_related,
            pay_by=self.pay_by,
            board_type=self.board_type,
            special_request=(self.special_request or "").strip()
        )


class Reservation(BaseModel):
    """Reservation Aggregate Root Entity"""

    # Identity
    reservation_id: UUID = Field(default_factory=uuid4)
    user_id: Optional[str] = None

    # Reference to the Room context
    room_type_id: UUID

    # Guest
    first_name: str
    last_name: str
    email: str
    phone_number: str
    country: str
    book_for: str = ""
    is_work_related: bool = False
    special_request: str = ""

    # Stay
    check_in_date: date
    check_out_date: date
    pay_by: str
    board_type: str = ""
    total_cost: Decimal = Field(ge=0, default=Decimal("0"))
    allocated_room_number: Optional[str] = None

    # Status
    status: ReservationStatus = ReservationStatus.ACTIVE
    admin_note: str = ""

    # Recurrence
    recurrence: RecurrenceType = RecurrenceType.NONE
    recurrence_count: int = Field(ge=0, le=MAX_RECURRENCE_COUNT, default=0)

    # Metadata
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
    created_by: Optional[str] = None
    updated_by: Optional[str] = None

    class Config:
        from_attributes = True

    @validator('check_out_date')
    def check_out_after_check_in(cls, v, values):
        if 'check_in_date' in values and v <= values['check_in_date']:
            raise ValueError('Check-out must be after check-in')
        return v

    # ==================== FACTORY METHOD ====================
    @staticmethod
    def create(
        room_type_id: UUID,
        stay: StayWindow,
        guest: GuestDetails,
        user_id: Optional[str] = None,
        recurrence: RecurrenceType = RecurrenceType.NONE,
        recurrence_count: int = 0,
        created_by: Optional[str] = None
    ) -> "Reservation":
        """Create a new active reservation for one stay window"""
        guest = guest.normalized()
        return Reservation(
            user_id=user_id,
            room_type_id=room_type_id,
            check_in_date=stay.check_in,
            check_out_date=stay.check_out,
            recurrence=recurrence,
            recurrence_count=recurrence_count,
            status=ReservationStatus.ACTIVE,
            created_by=created_by,
            **guest.model_dump()
        )

    # ==================== MODIFICATION METHODS ====================
    def replace_details(
        self,
        room_type_id: UUID,
        stay: StayWindow,
        guest: GuestDetails,
        updated_by: Optional[str] = None
    ) -> None:
        """Replace every guest, date and room type field"""
        guest = guest.normalized()
        self.room_type_id = room_type_id
        self.check_in_date = stay.check_in
        self.check_out_date = stay.check_out
        for field_name, value in guest.model_dump().items():
            setattr(self, field_name, value)
        self._touch(updated_by)

    def assign_room(self, room_number: str) -> None:
        self.allocated_room_number = room_number

    def set_total_cost(self, total_cost: Decimal) -> None:
        if total_cost < 0:
            raise ValueError("Total cost cannot be negative")
        self.total_cost = total_cost

    # ==================== STATE TRANSITION METHODS ====================
    def change_status(
        self,
        status: ReservationStatus,
        admin_note: Optional[str] = None,
        updated_by: Optional[str] = None
    ) -> None:
        """Admin override, any status may be set"""
        self.status = status
        self.admin_note = (admin_note or "").strip()
        self._touch(updated_by)

    def cancel(self, now: datetime, window_hours: float) -> CancellationResult:
        """Cancel unless check-in is less than ``window_hours`` away"""
        if self.hours_until_check_in(now) < window_hours:
            return CancellationResult(
                success=False,
                message=f"Cannot cancel within {window_hours:g} hours of check-in."
            )

        self.status = ReservationStatus.CANCELED
        self._touch()
        return CancellationResult(success=True, message="Reservation canceled successfully.")

    # ==================== QUERY METHODS ====================
    @property
    def stay(self) -> StayWindow:
        return StayWindow(check_in=self.check_in_date, check_out=self.check_out_date)

    @property
    def is_canceled(self) -> bool:
        return self.status == ReservationStatus.CANCELED

    def hours_until_check_in(self, now: datetime) -> float:
        return (at_hour(self.check_in_date) - now).total_seconds() / 3600

    def get_nights(self) -> int:
        return self.stay.nights()

    def _touch(self, updated_by: Optional[str] = None) -> None:
        self.updated_at = datetime.utcnow()
        if updated_by:
            self.updated_by = updated_by
