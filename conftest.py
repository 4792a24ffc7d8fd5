"""Shared fixtures for the reservation service tests"""
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

import pytest
from fastapi.testclient import TestClient

from main import app, get_reservation_service, get_availability_service
from application.services import ReservationService, AvailabilityService
from domain.entities import RoomType, GuestDetails, Reservation
from domain.value_objects import StayWindow
from infrastructure.repositories.in_memory_repositories import (
    InMemoryReservationRepository, InMemoryRoomDirectory
)

SINGLE_ROOM_ID = UUID("11111111-1111-1111-1111-111111111111")
DOUBLE_ROOM_ID = UUID("22222222-2222-2222-2222-222222222222")
UNKNOWN_ROOM_ID = UUID("99999999-9999-9999-9999-999999999999")

# Check-in used by the cancellation window tests is 2025-03-10 00:00
FIXED_NOW = datetime(2025, 2, 1, 12, 0)


def make_guest(board_type: str = "Half Board", **overrides) -> GuestDetails:
    fields = dict(
        first_name="Ada",
        last_name="Lovelace",
        email="ada@example.com",
        phone_number="+44 20 7946 0000",
        country="UK",
        pay_by="Card",
        board_type=board_type
    )
    fields.update(overrides)
    return GuestDetails(**fields)


def make_reservation(
    room_type_id: UUID,
    check_in: date,
    check_out: date,
    board_type: str = "Half Board",
    room_number: str = None
) -> Reservation:
    reservation = Reservation.create(
        room_type_id=room_type_id,
        stay=StayWindow(check_in=check_in, check_out=check_out),
        guest=make_guest(board_type)
    )
    if room_number:
        reservation.assign_room(room_number)
    return reservation


@pytest.fixture
def single_room_type():
    """One unit, priced like the worked pricing example"""
    return RoomType(
        room_type_id=SINGLE_ROOM_ID,
        name="Single",
        total_rooms=1,
        room_numbers=["101"],
        price=Decimal("10000"),
        discount=Decimal("10"),
        breakfast_price=Decimal("1000"),
        lunch_price=Decimal("1000"),
        dinner_price=Decimal("1000")
    )


@pytest.fixture
def double_room_type():
    return RoomType(
        room_type_id=DOUBLE_ROOM_ID,
        name="Double",
        total_rooms=2,
        room_numbers=["201", "202"],
        price=Decimal("20000"),
        discount=Decimal("0"),
        breakfast_price=Decimal("1500"),
        lunch_price=Decimal("2000"),
        dinner_price=Decimal("2500")
    )


@pytest.fixture
def room_directory(single_room_type, double_room_type):
    return InMemoryRoomDirectory([single_room_type, double_room_type])


@pytest.fixture
def reservation_repository():
    return InMemoryReservationRepository()


@pytest.fixture
def reservation_service(reservation_repository, room_directory):
    return ReservationService(reservation_repository, room_directory, clock=lambda: FIXED_NOW)


@pytest.fixture
def availability_service(reservation_repository, room_directory):
    return AvailabilityService(reservation_repository, room_directory)


@pytest.fixture
def client(reservation_repository, room_directory):
    """FastAPI test client wired to fresh in-memory collaborators"""
    app.dependency_overrides[get_reservation_service] = lambda: ReservationService(
        reservation_repository, room_directory
    )
    app.dependency_overrides[get_availability_service] = lambda: AvailabilityService(
        reservation_repository, room_directory
    )
    yield TestClient(app)
    app.dependency_overrides.clear()
