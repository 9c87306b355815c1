"""
Location bridge - single-shot lookup of the user's current position.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx

from config.app_config import LocationConfig
from services.chat_service.models import Location
from services.exceptions import LocationDeniedError, LocationUnavailableError
from utils.logging_config import get_logger


class PositionProvider(ABC):
    """Source of the current position"""

    @abstractmethod
    async def get_position(self) -> Location:
        """
        Raises:
            LocationUnavailableError: If no position can be determined
        """
        pass


class StaticPositionProvider(PositionProvider):
    """Fixed position, e.g. a kiosk with a known address"""

    def __init__(self, latitude: float, longitude: float):
        self.location = Location(latitude=latitude, longitude=longitude)

    async def get_position(self) -> Location:
        return self.location


class IpGeolocationProvider(PositionProvider):
    """Approximate position from an IP geolocation service"""

    def __init__(self, url: str = "https://ipapi.co/json/", timeout: float = 10.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.logger = get_logger(__name__)
        self.url = url
        self.timeout = timeout
        self._transport = transport

    @staticmethod
    def parse_payload(payload: Dict[str, Any]) -> Location:
        """
        Read coordinates from a lookup response

        Accepts either lat/lon or latitude/longitude keys.
        """
        latitude = payload.get("latitude", payload.get("lat"))
        longitude = payload.get("longitude", payload.get("lon"))

        if latitude is None or longitude is None:
            raise LocationUnavailableError("Lookup response has no coordinates")

        try:
            latitude = float(latitude)
            longitude = float(longitude)
        except (TypeError, ValueError) as e:
            raise LocationUnavailableError(f"Invalid coordinates in lookup response: {e}") from e

        if not (-90.0 <= latitude <= 90.0 and -180.0 <= longitude <= 180.0):
            raise LocationUnavailableError(f"Coordinates out of range: {latitude}, {longitude}")

        return Location(latitude=latitude, longitude=longitude)

    async def get_position(self) -> Location:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(self.url)
                response.raise_for_status()
        except httpx.HTTPError as e:
            raise LocationUnavailableError(f"Location lookup failed: {e}") from e

        try:
            payload = response.json()
        except ValueError as e:
            raise LocationUnavailableError(f"Location lookup returned invalid JSON: {e}") from e

        if not isinstance(payload, dict):
            raise LocationUnavailableError("Location lookup returned an unexpected payload")

        return self.parse_payload(payload)


class LocationBridge:
    """
    Single-shot "get current position" with success/failure outcomes.
    No polling and no continuous tracking.
    """

    def __init__(self, provider: Optional[PositionProvider], enabled: bool = True):
        self.logger = get_logger(__name__)
        self.provider = provider
        self.enabled = enabled

    async def get_current_position(self) -> Location:
        """
        Resolve the current position

        Raises:
            LocationDeniedError: If location sharing is disabled
            LocationUnavailableError: If the position cannot be determined
        """
        if not self.enabled:
            raise LocationDeniedError("Location sharing is disabled")

        if self.provider is None:
            raise LocationUnavailableError("No location provider configured")

        location = await self.provider.get_position()
        self.logger.debug("Current position resolved")
        return location


def create_location_bridge(config: LocationConfig) -> LocationBridge:
    """Build the location bridge described by configuration"""
    provider: Optional[PositionProvider] = None

    if config.provider == "static":
        if config.static_latitude is not None and config.static_longitude is not None:
            provider = StaticPositionProvider(config.static_latitude, config.static_longitude)
    elif config.provider == "ip":
        provider = IpGeolocationProvider(url=config.lookup_url, timeout=config.timeout)
    else:
        raise ValueError(f"Unknown location provider: {config.provider}")

    return LocationBridge(provider, enabled=config.enabled)
