"""
Address -> coordinates via a Nominatim compatible endpoint.
Docs: https://nominatim.org/release-docs/develop/api/Search/

The public instance allows one request per second per application, so all
lookups share one RateLimiter. Any failure resolves to None.
"""
import asyncio
import logging
import math
import time
from dataclasses import dataclass
from typing import Optional, Any, Callable, Awaitable

import aiohttp

from roomrent.config import config


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float


class RateLimiter:
    """
    Minimum spacing between calls, shared by every holder of the instance.
    The lock serializes waiters so concurrent callers queue instead of
    all reading the same timestamp.
    """

    def __init__(
        self,
        min_interval: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._last_call: Optional[float] = None
        self._lock = asyncio.Lock()

    async def wait(self) -> None:
        async with self._lock:
            if self._last_call is not None:
                delay = self.min_interval - (self._clock() - self._last_call)
                if delay > 0:
                    await self._sleep(delay)
            self._last_call = self._clock()


class GeocodingService:
    """Service for resolving room addresses"""

    def __init__(
        self,
        rate_limiter: RateLimiter,
        url: str = config.GEOCODING_URL,
        user_agent: str = config.GEOCODING_USER_AGENT,
        country_suffix: Optional[str] = config.GEOCODING_COUNTRY_SUFFIX,
        timeout: float = 10,
    ):
        self.rate_limiter = rate_limiter
        self.url = url
        self.user_agent = user_agent
        self.country_suffix = country_suffix
        self.timeout = timeout

    async def _fetch(self, query: str) -> Optional[Any]:
        """Raw search call; returns decoded JSON or None on a non-200 reply"""
        params = {"q": query, "format": "json", "limit": "1", "addressdetails": "1"}
        # Nominatim rejects requests without a User-Agent
        headers = {"User-Agent": self.user_agent}

        async with aiohttp.ClientSession() as session:
            async with session.get(
                self.url,
                params=params,
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            ) as resp:
                if resp.status != 200:
                    logging.warning(f"Geocoding API returned status {resp.status}")
                    return None
                return await resp.json(content_type=None)

    async def resolve_coordinates(self, address: Optional[str]) -> Optional[Coordinates]:
        """
        Geocode an address.

        Returns:
            Coordinates or None if the address is blank, unknown, or the
            provider failed in any way
        """
        if not address or not address.strip():
            return None

        query = f"{address}, {self.country_suffix}" if self.country_suffix else address

        try:
            await self.rate_limiter.wait()
            data = await self._fetch(query)

            if not isinstance(data, list) or not data:
                logging.warning(f"No geocoding results for address: {address}")
                return None

            first = data[0]
            latitude = float(first.get("lat"))
            longitude = float(first.get("lon"))
            if math.isnan(latitude) or math.isnan(longitude):
                logging.warning(f"Invalid coordinates returned for address: {address}")
                return None

            logging.info(f"Geocoded address: {address} -> ({latitude}, {longitude})")
            return Coordinates(latitude=latitude, longitude=longitude)

        except Exception as e:
            logging.error(f"Error geocoding address {address!r}: {e}")
            return None

    @staticmethod
    def build_address(ward: Optional[str] = None, district: Optional[str] = None, province: Optional[str] = None) -> str:
        return ", ".join(part.strip() for part in (ward, district, province) if part and part.strip())

    async def resolve_room_address(
        self,
        ward: Optional[str] = None,
        district: Optional[str] = None,
        province: Optional[str] = None
    ) -> Optional[Coordinates]:
        address = self.build_address(ward, district, province)
        if not address:
            return None
        return await self.resolve_coordinates(address)


# Global instance (initialized on first use or at startup)
geocoding_service: Optional[GeocodingService] = None


def get_geocoding_service() -> GeocodingService:
    """Get the process-wide geocoder and its shared rate limiter"""
    global geocoding_service

    if geocoding_service is None:
        geocoding_service = GeocodingService(RateLimiter(config.GEOCODING_MIN_INTERVAL))

    return geocoding_service
