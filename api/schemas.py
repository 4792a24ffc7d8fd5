"""API Schemas - Request and Response DTOs"""
import re
from pydantic import BaseModel, Field, validator
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID
from typing import Optional

from domain.entities import GuestDetails, MAX_RECURRENCE_COUNT
from domain.enums import ReservationStatus, RecurrenceType

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
PHONE_PATTERN = re.compile(r"^\+?[0-9 ()\-]{6,20}$")


# ============================================================================
# RESERVATION SCHEMAS
# ============================================================================

class GuestFields(BaseModel):
    """Guest fields shared by create and update requests"""
    first_name: str = Field(min_length=1, max_length=25)
    last_name: str = Field(min_length=1, max_length=25)
    email: str
    country: str = Field(min_length=1, max_length=25)
    phone_number: str
    book_for: str = ""
    is_work_related: bool = False
    check_in_date: date
    check_out_date: date
    pay_by: str = Field(min_length=1)
    full_or_half_board: str = ""
    special_request: Optional[str] = ""

    @validator('email')
    def email_is_valid(cls, v):
        if not EMAIL_PATTERN.match(v.strip()):
            raise ValueError('Please enter a valid email address.')
        return v

    @validator('phone_number')
    def phone_is_valid(cls, v):
        if not PHONE_PATTERN.match(v.strip()):
            raise ValueError('Please enter a valid phone number.')
        return v

    @validator('check_out_date')
    def check_out_after_check_in(cls, v, values):
        if 'check_in_date' in values and v <= values['check_in_date']:
            raise ValueError('Check-out must be after check-in')
        return v

    def to_guest(self) -> GuestDetails:
        return GuestDetails(
            first_name=self.first_name,
            last_name=self.last_name,
            email=self.email,
            phone_number=self.phone_number,
            country=self.country,
            book_for=self.book_for,
            is_work_related=self.is_work_related,
            pay_by=self.pay_by,
            board_type=self.full_or_half_board,
            special_request=self.special_request or ""
        )


class CreateReservationRequest(GuestFields):
    """Create reservation request DTO"""
    user_id: Optional[str] = None
    room_type_id: UUID
    recurrence: RecurrenceType = RecurrenceType.NONE
    recurrence_count: int = Field(ge=0, le=MAX_RECURRENCE_COUNT, default=0)
    created_by: Optional[str] = None


class UpdateReservationRequest(GuestFields):
    """Update reservation request DTO"""
    room_type_id: UUID
    updated_by: Optional[str] = None


class UpdateStatusRequest(BaseModel):
    """Update status request DTO"""
    status: ReservationStatus
    admin_note: Optional[str] = None
    updated_by: Optional[str] = None


class ReservationResponse(BaseModel):
    """Reservation response DTO"""
    reservation_id: UUID
    user_id: Optional[str] = None
    room_type_id: UUID
    first_name: str
    last_name: str
    email: str
    phone_number: str
    country: str
    book_for: str
    is_work_related: bool
    check_in_date: date
    check_out_date: date
    pay_by: str
    full_or_half_board: str
    total_cost: Decimal
    special_request: str
    status: str
    admin_note: str
    recurrence: str
    recurrence_count: int
    allocated_room_number: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    created_by: Optional[str] = None
    updated_by: Optional[str] = None


class MessageResponse(BaseModel):
    """Plain message response DTO"""
    message: str


# ============================================================================
# AVAILABILITY SCHEMAS
# ============================================================================

class AvailabilityResponse(BaseModel):
    """Availability response DTO"""
    is_available: bool
    available_room_count: int


class AvailableCountResponse(BaseModel):
    """Available count response DTO"""
    room_type_id: UUID
    check_in_date: date
    check_out_date: date
    available_room_count: int
