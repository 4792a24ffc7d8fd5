"""Room service client tests with the HTTP layer mocked by respx"""
from datetime import date
from decimal import Decimal
from uuid import uuid4

import httpx
import pytest
import respx

from application.services import AvailabilityService
from domain.entities import FALLBACK_ROOM_NAME
from infrastructure.repositories.in_memory_repositories import InMemoryReservationRepository
from infrastructure.room_directory import HttpRoomDirectory, RoomTypePayload

ROOM_SERVICE_URL = "http://rooms.test"


def room_json(room_type_id, **overrides):
    body = {
        "id": str(room_type_id),
        "name": "Deluxe",
        "description": "Sea view",
        "totalRooms": 2,
        "roomNumbers": ["201", "202"],
        "price": 15000,
        "discount": 10,
        "breakfastPrice": 500,
        "lunchPrice": 700,
        "dinnerPrice": 900
    }
    body.update(overrides)
    return body


@pytest.fixture
async def directory():
    room_directory = HttpRoomDirectory(ROOM_SERVICE_URL + "/", timeout_seconds=1.0, max_retries=2)
    yield room_directory
    await room_directory.aclose()


class TestRoomTypePayload:
    """Test the Room service DTO mapping"""

    @pytest.mark.unit
    @pytest.mark.infrastructure
    def test_camel_case_payload_maps_to_room_type(self):
        room_type_id = uuid4()
        room_type = RoomTypePayload.model_validate(room_json(room_type_id)).to_domain()

        assert room_type.room_type_id == room_type_id
        assert room_type.total_rooms == 2
        assert room_type.room_numbers == ["201", "202"]
        assert room_type.base_price_after_discount == Decimal("13500")
        assert room_type.half_board_meal_cost == Decimal("1400")


class TestHttpRoomDirectory:
    """Test HttpRoomDirectory.get_room_type"""

    @pytest.mark.infrastructure
    async def test_room_found(self, directory):
        room_type_id = uuid4()
        with respx.mock(assert_all_called=True) as router:
            router.get(f"{ROOM_SERVICE_URL}/api/rooms/{room_type_id}").respond(
                status_code=200, json=room_json(room_type_id)
            )
            room_type = await directory.get_room_type(room_type_id)

        assert room_type.name == "Deluxe"
        assert room_type.full_board_meal_cost == Decimal("2100")

    @pytest.mark.infrastructure
    @pytest.mark.edge_case
    async def test_missing_room_is_none(self, directory):
        room_type_id = uuid4()
        with respx.mock(assert_all_called=True) as router:
            route = router.get(f"{ROOM_SERVICE_URL}/api/rooms/{room_type_id}").respond(status_code=404)
            room_type = await directory.get_room_type(room_type_id)

        assert room_type is None
        assert route.call_count == 1

    @pytest.mark.infrastructure
    @pytest.mark.edge_case
    async def test_server_error_is_retried(self, directory):
        room_type_id = uuid4()
        with respx.mock(assert_all_called=True) as router:
            route = router.get(f"{ROOM_SERVICE_URL}/api/rooms/{room_type_id}").mock(side_effect=[
                httpx.Response(500),
                httpx.Response(200, json=room_json(room_type_id)),
            ])
            room_type = await directory.get_room_type(room_type_id)

        assert route.call_count == 2
        assert room_type.total_rooms == 2

    @pytest.mark.infrastructure
    @pytest.mark.edge_case
    async def test_persistent_server_error_yields_fallback(self, directory):
        room_type_id = uuid4()
        with respx.mock(assert_all_called=True) as router:
            route = router.get(f"{ROOM_SERVICE_URL}/api/rooms/{room_type_id}").respond(status_code=503)
            room_type = await directory.get_room_type(room_type_id)

        assert route.call_count == 3
        assert room_type.room_type_id == room_type_id
        assert room_type.name == FALLBACK_ROOM_NAME
        assert room_type.total_rooms == 0

    @pytest.mark.infrastructure
    @pytest.mark.edge_case
    async def test_connection_error_yields_fallback(self, directory):
        room_type_id = uuid4()
        with respx.mock(assert_all_called=True) as router:
            route = router.get(f"{ROOM_SERVICE_URL}/api/rooms/{room_type_id}").mock(
                side_effect=httpx.ConnectError
            )
            room_type = await directory.get_room_type(room_type_id)

        assert route.call_count == 3
        assert room_type.total_rooms == 0

    @pytest.mark.infrastructure
    @pytest.mark.edge_case
    async def test_timeout_yields_fallback(self):
        room_directory = HttpRoomDirectory(ROOM_SERVICE_URL, max_retries=0)
        room_type_id = uuid4()
        with respx.mock(assert_all_called=True) as router:
            route = router.get(f"{ROOM_SERVICE_URL}/api/rooms/{room_type_id}").mock(
                side_effect=httpx.ReadTimeout
            )
            room_type = await room_directory.get_room_type(room_type_id)
        await room_directory.aclose()

        assert route.call_count == 1
        assert room_type.name == FALLBACK_ROOM_NAME

    @pytest.mark.infrastructure
    @pytest.mark.edge_case
    @pytest.mark.parametrize("body", ["<html>oops</html>", '{"name": "no id"}'])
    async def test_unreadable_payload_yields_fallback(self, directory, body):
        room_type_id = uuid4()
        with respx.mock(assert_all_called=True) as router:
            router.get(f"{ROOM_SERVICE_URL}/api/rooms/{room_type_id}").respond(status_code=200, text=body)
            room_type = await directory.get_room_type(room_type_id)

        assert room_type.name == FALLBACK_ROOM_NAME

    @pytest.mark.infrastructure
    @pytest.mark.edge_case
    @pytest.mark.parametrize("overrides", [{"totalRooms": -1}, {"discount": 150}])
    async def test_out_of_range_room_values_yield_fallback(self, directory, overrides):
        room_type_id = uuid4()
        with respx.mock(assert_all_called=True) as router:
            router.get(f"{ROOM_SERVICE_URL}/api/rooms/{room_type_id}").respond(
                status_code=200, json=room_json(room_type_id, **overrides)
            )
            room_type = await directory.get_room_type(room_type_id)

        assert room_type.name == FALLBACK_ROOM_NAME
        assert room_type.total_rooms == 0


class TestRoomServiceOutage:
    """Test availability when the Room service cannot be reached"""

    @pytest.mark.integration
    @pytest.mark.edge_case
    async def test_outage_reports_nothing_available(self, directory):
        service = AvailabilityService(InMemoryReservationRepository(), directory)
        room_type_id = uuid4()
        with respx.mock(assert_all_called=True) as router:
            router.get(f"{ROOM_SERVICE_URL}/api/rooms/{room_type_id}").respond(status_code=502)
            summary = await service.check_availability(room_type_id, date(2025, 3, 1), date(2025, 3, 2))

        assert not summary.is_available
        assert summary.available_room_count == 0
