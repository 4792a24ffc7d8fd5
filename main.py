import logging
from contextlib import asynccontextmanager
from datetime import date, datetime, timezone
from typing import List, Optional
from uuid import UUID

from fastapi import FastAPI, HTTPException, Depends, Request
from fastapi.responses import JSONResponse

import config
from api.schemas import (
    # Reservation
    CreateReservationRequest, UpdateReservationRequest, UpdateStatusRequest,
    ReservationResponse, MessageResponse,
    # Availability
    AvailabilityResponse, AvailableCountResponse
)
from application.services import ReservationService, AvailabilityService, RoomTypeLocks
from domain.entities import Reservation
from domain.enums import ReservationStatus, RecurrenceType, BoardType
from domain.errors import NotFoundError
from domain.repositories import RoomDirectory
from infrastructure.repositories.in_memory_repositories import (
    InMemoryReservationRepository, InMemoryRoomDirectory
)
from infrastructure.room_directory import HttpRoomDirectory

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)


def build_room_directory() -> RoomDirectory:
    if config.ROOM_SERVICE_BASE_URL:
        return HttpRoomDirectory(
            config.ROOM_SERVICE_BASE_URL,
            timeout_seconds=config.ROOM_SERVICE_TIMEOUT_SECONDS,
            max_retries=config.ROOM_SERVICE_MAX_RETRIES
        )
    logger.warning("ROOM_SERVICE_BASE_URL is not set, using an empty in-memory room directory")
    return InMemoryRoomDirectory()


# Initialize repositories
reservation_repo = InMemoryReservationRepository()
room_directory = build_room_directory()
room_type_locks = RoomTypeLocks() if config.SERIALIZE_RESERVATION_WRITES else None


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    if isinstance(room_directory, HttpRoomDirectory):
        await room_directory.aclose()


app = FastAPI(
    title="Hotel Reservation API",
    description="Room availability, allocation and reservation lifecycle",
    version=config.APP_VERSION,
    lifespan=lifespan
)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"message": "Internal server error"})


# Dependency injection
def get_reservation_service() -> ReservationService:
    return ReservationService(
        reservation_repo,
        room_directory,
        locks=room_type_locks,
        cancellation_window_hours=config.CANCELLATION_WINDOW_HOURS
    )

def get_availability_service() -> AvailabilityService:
    return AvailabilityService(reservation_repo, room_directory)

# ============================================================================
# HEALTH & ENUM REFERENCE ENDPOINTS
# ============================================================================

@app.get("/api/health", tags=["Health"])
async def health_check():
    """Health check endpoint"""
    return {
        "service": config.APP_NAME,
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat()
    }

@app.get("/api/enums/reservation-status", tags=["Enum Reference"])
async def get_reservation_statuses():
    """Get all ReservationStatus enum values"""
    return {
        "values": [item.value for item in ReservationStatus],
        "description": "Reservation status values: Active, Canceled, CheckedIn, Completed"
    }

@app.get("/api/enums/recurrence-type", tags=["Enum Reference"])
async def get_recurrence_types():
    """Get all RecurrenceType enum values"""
    return {
        "values": [item.value for item in RecurrenceType],
        "description": "Recurrence values: None, Daily, Weekly, Monthly"
    }

@app.get("/api/enums/board-type", tags=["Enum Reference"])
async def get_board_types():
    """Get board types that affect price and occupancy"""
    return {
        "values": [item.value for item in BoardType],
        "description": "Any other board value is treated as room only"
    }

# ============================================================================
# AVAILABILITY ENDPOINTS
# ============================================================================

@app.get("/api/reservation/availability", response_model=AvailabilityResponse, tags=["Availability"])
async def check_availability(
    room_type_id: UUID,
    check_in_date: date,
    check_out_date: date,
    board_type: str = "",
    exclude_reservation_id: Optional[UUID] = None,
    service: AvailabilityService = Depends(get_availability_service)
):
    """Check if a room type can take a stay, with the coarse available count"""
    try:
        summary = await service.check_availability(
            room_type_id=room_type_id,
            check_in=check_in_date,
            check_out=check_out_date,
            board_type=board_type,
            exclude_reservation_id=exclude_reservation_id
        )
        return AvailabilityResponse(
            is_available=summary.is_available,
            available_room_count=summary.available_room_count
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

@app.get("/api/reservation/available-count", response_model=AvailableCountResponse, tags=["Availability"])
async def get_available_count(
    room_type_id: UUID,
    check_in_date: date,
    check_out_date: date,
    service: AvailabilityService = Depends(get_availability_service)
):
    """Get the number of units not booked in the date range"""
    try:
        count = await service.get_available_count(room_type_id, check_in_date, check_out_date)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return AvailableCountResponse(
        room_type_id=room_type_id,
        check_in_date=check_in_date,
        check_out_date=check_out_date,
        available_room_count=count
    )

# ============================================================================
# RESERVATION ENDPOINTS
# ============================================================================

@app.get("/api/reservation", response_model=List[ReservationResponse], tags=["Reservations"])
async def get_all_reservations(service: ReservationService = Depends(get_reservation_service)):
    """Get all reservations"""
    reservations = await service.get_all_reservations()
    return [_reservation_to_response(r) for r in reservations]

@app.get("/api/reservation/user/{user_id}", response_model=List[ReservationResponse], tags=["Reservations"])
async def get_user_reservations(
    user_id: str,
    service: ReservationService = Depends(get_reservation_service)
):
    """Get all reservations for a user"""
    reservations = await service.get_reservations_by_user(user_id)
    return [_reservation_to_response(r) for r in reservations]

@app.get("/api/reservation/{reservation_id}", response_model=ReservationResponse, tags=["Reservations"])
async def get_reservation(
    reservation_id: UUID,
    service: ReservationService = Depends(get_reservation_service)
):
    """Get reservation by ID"""
    reservation = await service.get_reservation(reservation_id)
    if not reservation:
        raise HTTPException(status_code=404, detail="Reservation not found")
    return _reservation_to_response(reservation)

@app.post("/api/reservation", response_model=ReservationResponse, status_code=201, tags=["Reservations"])
async def create_reservation(
    request: CreateReservationRequest,
    service: ReservationService = Depends(get_reservation_service)
):
    """Create a reservation, one per recurrence occurrence; returns the first"""
    try:
        reservation = await service.create_reservation(
            room_type_id=request.room_type_id,
            check_in=request.check_in_date,
            check_out=request.check_out_date,
            guest=request.to_guest(),
            user_id=request.user_id,
            recurrence=request.recurrence,
            recurrence_count=request.recurrence_count,
            created_by=request.created_by
        )
        return _reservation_to_response(reservation)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

@app.put("/api/reservation/{reservation_id}", response_model=ReservationResponse, tags=["Reservations"])
async def update_reservation(
    reservation_id: UUID,
    request: UpdateReservationRequest,
    service: ReservationService = Depends(get_reservation_service)
):
    """Replace reservation details and reprice"""
    try:
        reservation = await service.update_reservation(
            reservation_id=reservation_id,
            room_type_id=request.room_type_id,
            check_in=request.check_in_date,
            check_out=request.check_out_date,
            guest=request.to_guest(),
            updated_by=request.updated_by
        )
        return _reservation_to_response(reservation)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

@app.patch("/api/reservation/{reservation_id}/status", response_model=MessageResponse, tags=["Reservations"])
async def update_reservation_status(
    reservation_id: UUID,
    request: UpdateStatusRequest,
    service: ReservationService = Depends(get_reservation_service)
):
    """Admin status override"""
    updated = await service.update_status(
        reservation_id, request.status, request.admin_note, request.updated_by
    )
    if not updated:
        raise HTTPException(status_code=404, detail="Reservation not found")
    return {"message": "Status updated successfully"}

@app.patch("/api/reservation/{reservation_id}/cancel", response_model=MessageResponse, tags=["Reservations"])
async def cancel_reservation(
    reservation_id: UUID,
    service: ReservationService = Depends(get_reservation_service)
):
    """Cancel reservation"""
    result = await service.cancel_reservation(reservation_id)
    if result is None:
        raise HTTPException(status_code=404, detail="Reservation not found")
    if not result.success:
        raise HTTPException(status_code=400, detail=result.message)
    return {"message": result.message}

# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def _reservation_to_response(reservation: Reservation) -> ReservationResponse:
    """Convert Reservation entity to ReservationResponse"""
    return ReservationResponse(
        reservation_id=reservation.reservation_id,
        user_id=reservation.user_id,
        room_type_id=reservation.room_type_id,
        first_name=reservation.first_name,
        last_name=reservation.last_name,
        email=reservation.email,
        phone_number=reservation.phone_number,
        country=reservation.country,
        book_for=reservation.book_for,
        is_work_related=reservation.is_work_related,
        check_in_date=reservation.check_in_date,
        check_out_date=reservation.check_out_date,
        pay_by=reservation.pay_by,
        full_or_half_board=reservation.board_type,
        total_cost=reservation.total_cost,
        special_request=reservation.special_request,
        status=reservation.status.value,
        admin_note=reservation.admin_note,
        recurrence=reservation.recurrence.value,
        recurrence_count=reservation.recurrence_count,
        allocated_room_number=reservation.allocated_room_number,
        created_at=reservation.created_at,
        updated_at=reservation.updated_at,
        created_by=reservation.created_by,
        updated_by=reservation.updated_by
    )

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
