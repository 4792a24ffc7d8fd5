"""HTTP client for the Room service"""
import logging
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

import httpx
from pydantic import BaseModel, Field

from domain.entities import RoomType
from domain.repositories import RoomDirectory

logger = logging.getLogger(__name__)


class RoomTypePayload(BaseModel):
    """Room DTO as serialized by the Room service (camelCase JSON)"""
    id: UUID
    name: str = ""
    total_rooms: int = Field(0, alias="totalRooms")
    room_numbers: List[str] = Field(default_factory=list, alias="roomNumbers")
    price: Decimal = Decimal("0")
    discount: Decimal = Decimal("0")
    breakfast_price: Decimal = Field(Decimal("0"), alias="breakfastPrice")
    lunch_price: Decimal = Field(Decimal("0"), alias="lunchPrice")
    dinner_price: Decimal = Field(Decimal("0"), alias="dinnerPrice")

    class Config:
        populate_by_name = True

    def to_domain(self) -> RoomType:
        return RoomType(
            room_type_id=self.id,
            name=self.name,
            total_rooms=self.total_rooms,
            room_numbers=self.room_numbers,
            price=self.price,
            discount=self.discount,
            breakfast_price=self.breakfast_price,
            lunch_price=self.lunch_price,
            dinner_price=self.dinner_price
        )


class HttpRoomDirectory(RoomDirectory):
    """Room directory backed by the Room service REST API.

    A missing room (404) is reported as None. Any other failure, such as a
    timeout, a connection error, a 5xx after retries or an unreadable body,
    yields a zero-capacity placeholder room type so availability checks fail
    closed instead of crashing the caller.
    """

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 10.0,
        max_retries: int = 2,
        client: Optional[httpx.AsyncClient] = None
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.max_retries = max(0, max_retries)
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout_seconds),
                headers={"Accept": "application/json"}
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def get_room_type(self, room_type_id: UUID) -> Optional[RoomType]:
        url = f"{self.base_url}/api/rooms/{room_type_id}"
        logger.debug("Fetching room with ID: %s", room_type_id)

        try:
            response = await self._get_with_retries(url)
        except httpx.HTTPError as exc:
            logger.error("HTTP error while retrieving room %s, using fallback room: %s", room_type_id, exc)
            return RoomType.unavailable(room_type_id)

        if response.status_code == 404:
            logger.warning("Room with ID %s not found", room_type_id)
            return None

        if response.is_error:
            logger.error(
                "Failed to retrieve room %s. Status: %s, using fallback room",
                room_type_id, response.status_code
            )
            return RoomType.unavailable(room_type_id)

        try:
            room_type = RoomTypePayload.model_validate(response.json()).to_domain()
        except ValueError as exc:
            logger.error("Unreadable room payload for %s, using fallback room: %s", room_type_id, exc)
            return RoomType.unavailable(room_type_id)

        logger.debug("Retrieved room %s: %s", room_type_id, room_type.name)
        return room_type

    async def _get_with_retries(self, url: str) -> httpx.Response:
        """GET with up to ``max_retries`` extra attempts on transport errors and 5xx"""
        client = await self._get_client()
        attempt = 0
        while True:
            try:
                response = await client.get(url)
            except httpx.TransportError as exc:
                if attempt >= self.max_retries:
                    raise
                logger.warning("Room service request failed (%s), retry %d of %d", exc, attempt + 1, self.max_retries)
            else:
                if response.status_code < 500 or attempt >= self.max_retries:
                    return response
                logger.warning(
                    "Room service answered %s, retry %d of %d",
                    response.status_code, attempt + 1, self.max_retries
                )
            attempt += 1
