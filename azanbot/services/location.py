"""City geocoding and coordinates-to-timezone lookup."""

import logging

import httpx

from azanbot.config import Config
from azanbot.db.models import GeocodeResult
from azanbot.utils.errors import ConfigurationError, UpstreamError

logger = logging.getLogger(__name__)


class LocationResolver:
    """Resolve free-text city names via Nominatim and timezones via TimeZoneDB."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timezonedb_api_key: str | None = None,
        nominatim_url: str | None = None,
        timezonedb_url: str | None = None,
    ):
        self._client = client
        self._owns_client = client is None
        self.timezonedb_api_key = (
            Config.TIMEZONEDB_API_KEY if timezonedb_api_key is None else timezonedb_api_key
        )
        self.nominatim_url = nominatim_url or Config.NOMINATIM_URL
        self.timezonedb_url = timezonedb_url or Config.TIMEZONEDB_URL

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=Config.HTTP_TIMEOUT,
                headers={"User-Agent": Config.HTTP_USER_AGENT},
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if this resolver created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def geocode(self, city: str) -> GeocodeResult | None:
        """Find the best match for a city name.

        Returns:
            The first match, or None when nothing matched
        """
        try:
            response = await self.client.get(
                self.nominatim_url,
                params={"format": "json", "q": city, "limit": 1},
            )
            response.raise_for_status()
            results = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise UpstreamError(f"Geocoding failed for {city!r}: {e}") from e

        if not results:
            logger.info(f"No geocoding match for {city!r}")
            return None

        first = results[0]
        try:
            return GeocodeResult(
                latitude=float(first["lat"]),
                longitude=float(first["lon"]),
                display_name=first.get("display_name") or city,
            )
        except (KeyError, TypeError, ValueError) as e:
            raise UpstreamError(f"Unexpected geocoding result for {city!r}: {first}") from e

    async def timezone_for(self, latitude: float, longitude: float) -> str:
        """Get the IANA timezone name at the given coordinates."""
        if not self.timezonedb_api_key:
            raise ConfigurationError("TIMEZONEDB_API_KEY is required for timezone lookup")

        try:
            response = await self.client.get(
                self.timezonedb_url,
                params={
                    "key": self.timezonedb_api_key,
                    "format": "json",
                    "by": "position",
                    "lat": latitude,
                    "lng": longitude,
                },
            )
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise UpstreamError(
                f"Timezone lookup failed for ({latitude}, {longitude}): {e}"
            ) from e

        zone_name = data.get("zoneName")
        if data.get("status") != "OK" or not zone_name:
            raise UpstreamError(
                f"Timezone lookup failed for ({latitude}, {longitude}): "
                f"{data.get('message') or data.get('status')}"
            )

        return zone_name
