"""Reverse geocoding providers.

Each provider wraps one geopy geocoder and turns its answer into a
GeocodedAddress. Providers raise ProviderUnreachable or
ProviderMalformedResponse on failure; the reconciler decides what to do
with them. geopy geocoders are blocking, so calls run in a worker thread.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from geopy.exc import GeocoderParseError, GeopyError
from geopy.extra.rate_limiter import RateLimiter
from geopy.geocoders import ArcGIS, GoogleV3, Nominatim
from geopy.location import Location

from venue_locator.core.config import Settings
from venue_locator.core.geocoding.exceptions import (
    ProviderMalformedResponse,
    ProviderUnreachable,
)
from venue_locator.models.geographic import GeocodedAddress, Position, SourceTrust

logger = logging.getLogger(__name__)


class GeocodingProvider(ABC):
    """Base class for geocoding providers.

    All providers should inherit from this class and implement
    its abstract methods.
    """

    name: str = "unknown"
    trust: SourceTrust = SourceTrust.UNKNOWN

    @abstractmethod
    async def reverse_geocode(self, latitude: float, longitude: float) -> GeocodedAddress:
        """Resolve coordinates to address components.

        Raises:
            ProviderUnreachable: If the service cannot be reached or refuses the call
            ProviderMalformedResponse: If the answer is not a usable address
        """
        raise NotImplementedError

    @abstractmethod
    async def geocode(self, query: str) -> Position:
        """Resolve a free-text address to coordinates.

        Raises:
            ProviderUnreachable: If the service cannot be reached or refuses the call
            ProviderMalformedResponse: If nothing matched the query
        """
        raise NotImplementedError

    def __repr__(self) -> str:
        """String representation of the provider."""
        return f"{self.__class__.__name__}(name='{self.name}', trust='{self.trust.value}')"


class GeopyProvider(GeocodingProvider):
    """Provider backed by a blocking geopy geocoder."""

    def __init__(self, geocoder: Any, min_delay_seconds: float = 0.0):
        """Initialize the provider.

        Args:
            geocoder: A geopy geocoder instance
            min_delay_seconds: Minimum delay between calls to respect quotas
        """
        self.geocoder = geocoder
        self._reverse = self._rate_limited(geocoder.reverse, min_delay_seconds)
        self._geocode = self._rate_limited(geocoder.geocode, min_delay_seconds)

    @staticmethod
    def _rate_limited(func: Callable[..., Any], min_delay_seconds: float) -> Callable[..., Any]:
        # Retries are the reconciler's business; errors must reach it
        return RateLimiter(
            func,
            min_delay_seconds=min_delay_seconds,
            max_retries=0,
            swallow_exceptions=False,
        )

    def reverse_kwargs(self) -> dict[str, Any]:
        """Extra keyword arguments for the geocoder's ``reverse`` call."""
        return {"exactly_one": True}

    @abstractmethod
    def parse_reverse(self, result: Any) -> GeocodedAddress:
        """Build a GeocodedAddress from the geocoder's ``reverse`` result."""
        raise NotImplementedError

    async def _call(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        try:
            return await asyncio.to_thread(func, *args, **kwargs)
        except GeocoderParseError as e:
            raise ProviderMalformedResponse(self.name, f"unparseable response: {e}") from e
        except GeopyError as e:
            raise ProviderUnreachable(self.name, str(e) or e.__class__.__name__) from e

    async def reverse_geocode(self, latitude: float, longitude: float) -> GeocodedAddress:
        point = f"{latitude}, {longitude}"
        result = await self._call(self._reverse, point, **self.reverse_kwargs())
        if not result:
            raise ProviderMalformedResponse(self.name, "no result for coordinates")

        try:
            address = self.parse_reverse(result)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise ProviderMalformedResponse(self.name, f"unexpected payload: {e}") from e

        if not address.has_locality:
            raise ProviderMalformedResponse(self.name, "response has no address components")

        logger.debug(f"{self.name} reverse geocoded {latitude},{longitude} to {address.short_label}")
        return address

    async def geocode(self, query: str) -> Position:
        if not query or not query.strip():
            raise ProviderMalformedResponse(self.name, "empty query")

        location = await self._call(self._geocode, query, exactly_one=True)
        if not location:
            raise ProviderMalformedResponse(self.name, f"no match for '{query[:50]}'")
        return Position(latitude=location.latitude, longitude=location.longitude)


class NominatimProvider(GeopyProvider):
    """OpenStreetMap Nominatim, the open-data source."""

    name = "nominatim"
    trust = SourceTrust.OPEN

    # Most specific first; rural and non-US areas often lack "city"
    CITY_KEYS = (
        "city",
        "town",
        "municipality",
        "village",
        "hamlet",
        "suburb",
        "neighbourhood",
        "locality",
        "county",
        "district",
    )
    STATE_KEYS = ("state", "region", "province", "state_district")

    def __init__(
        self,
        user_agent: str,
        timeout: float = 10.0,
        min_delay_seconds: float = 1.1,
        language: str = "en",
    ):
        super().__init__(
            Nominatim(user_agent=user_agent, timeout=timeout),
            min_delay_seconds=min_delay_seconds,
        )
        self.language = language

    def reverse_kwargs(self) -> dict[str, Any]:
        return {
            "exactly_one": True,
            "language": self.language,
            "addressdetails": True,
            "zoom": 18,
        }

    def parse_reverse(self, result: Location) -> GeocodedAddress:
        raw = result.raw
        address = raw.get("address") or {}
        city = next((address[k] for k in self.CITY_KEYS if address.get(k)), None)
        state = next((address[k] for k in self.STATE_KEYS if address.get(k)), None)
        return GeocodedAddress(
            city=city,
            state=state,
            country=address.get("country"),
            postal_code=address.get("postcode") or address.get("postal_code"),
            source=self.name,
            trust=self.trust,
            formatted_address=raw.get("display_name") or result.address,
            raw=raw,
        )


class ArcGISProvider(GeopyProvider):
    """Esri ArcGIS World Geocoding, a commercial mapping service."""

    name = "arcgis"
    trust = SourceTrust.HIGH

    def __init__(self, timeout: float = 10.0, min_delay_seconds: float = 0.5):
        super().__init__(ArcGIS(timeout=timeout), min_delay_seconds=min_delay_seconds)

    def parse_reverse(self, result: Location) -> GeocodedAddress:
        attrs = result.raw
        return GeocodedAddress(
            city=attrs.get("City") or attrs.get("Neighborhood") or attrs.get("Subregion"),
            state=attrs.get("Region"),
            country=attrs.get("CountryCode"),
            postal_code=attrs.get("Postal"),
            source=self.name,
            trust=self.trust,
            formatted_address=attrs.get("LongLabel") or attrs.get("Match_addr") or result.address,
            raw=attrs,
        )


class GoogleMapsProvider(GeopyProvider):
    """Google Maps Geocoding API, the high-trust commercial source."""

    name = "google"
    trust = SourceTrust.HIGH

    PRECISE_LOCATION_TYPES = {"ROOFTOP", "RANGE_INTERPOLATED"}
    CITY_TYPES = ("locality", "sublocality_level_1", "administrative_area_level_2")
    FALLBACK_CITY_TYPES = ("sublocality", "neighborhood")

    def __init__(
        self,
        api_key: str,
        timeout: float = 10.0,
        language: str = "en",
    ):
        super().__init__(GoogleV3(api_key=api_key, timeout=timeout))
        self.language = language

    def reverse_kwargs(self) -> dict[str, Any]:
        # All results, so the most precise one can be picked
        return {"exactly_one": False, "language": self.language}

    def _pick_result(self, results: list[Location]) -> dict[str, Any]:
        for location in results:
            geometry = location.raw.get("geometry") or {}
            if geometry.get("location_type") in self.PRECISE_LOCATION_TYPES:
                return location.raw
        return results[0].raw

    def parse_reverse(self, result: list[Location] | Location) -> GeocodedAddress:
        results = result if isinstance(result, list) else [result]
        raw = self._pick_result(results)
        components: list[dict[str, Any]] = raw.get("address_components") or []

        def find(types: tuple[str, ...]) -> str | None:
            # Component order decides ties, as Google lists specific before broad
            for component in components:
                if any(t in component.get("types", []) for t in types):
                    return component.get("long_name")
            return None

        city = None
        for city_type in self.CITY_TYPES:
            city = find((city_type,))
            if city:
                break
        if not city:
            city = find(self.FALLBACK_CITY_TYPES)

        return GeocodedAddress(
            city=city,
            state=find(("administrative_area_level_1",)),
            country=find(("country",)),
            postal_code=find(("postal_code",)),
            source=self.name,
            trust=self.trust,
            formatted_address=raw.get("formatted_address"),
            raw=raw,
        )


def build_providers(config: Settings) -> list[GeocodingProvider]:
    """Create the configured providers in priority order.

    Unknown names are skipped with a warning; Google is skipped when no API
    key is configured.

    Args:
        config: Application settings

    Returns:
        Providers ordered by GEOCODING_PROVIDERS
    """
    providers: list[GeocodingProvider] = []
    for name in config.GEOCODING_PROVIDERS:
        if name == "google":
            if not config.GOOGLE_MAPS_API_KEY:
                logger.info("GOOGLE_MAPS_API_KEY not set, skipping Google Maps provider")
                continue
            providers.append(
                GoogleMapsProvider(
                    api_key=config.GOOGLE_MAPS_API_KEY,
                    timeout=config.GEOCODING_TIMEOUT,
                    language=config.GEOCODING_LANGUAGE,
                )
            )
        elif name == "arcgis":
            providers.append(
                ArcGISProvider(
                    timeout=config.GEOCODING_TIMEOUT,
                    min_delay_seconds=config.ARCGIS_RATE_LIMIT,
                )
            )
        elif name == "nominatim":
            providers.append(
                NominatimProvider(
                    user_agent=config.NOMINATIM_USER_AGENT,
                    timeout=config.GEOCODING_TIMEOUT,
                    min_delay_seconds=config.NOMINATIM_RATE_LIMIT,
                    language=config.GEOCODING_LANGUAGE,
                )
            )
        else:
            logger.warning(f"Unknown geocoding provider: {name}")

    logger.info(f"Configured geocoding providers: {[p.name for p in providers]}")
    return providers
