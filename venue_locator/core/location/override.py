"""Manual location entry."""

import asyncio
from collections.abc import Sequence

from venue_locator.core.geocoding.exceptions import ProviderError
from venue_locator.core.geocoding.providers import GeocodingProvider
from venue_locator.core.location.session import LocationSession
from venue_locator.core.logging import get_logger
from venue_locator.models.geographic import (
    ManualLocationInput,
    Position,
    ResolvedLocation,
    ScoredAddress,
    SourceTrust,
)

logger = get_logger(module="override")

MANUAL_SOURCE = "manual"


class ManualOverride:
    """Turn user-entered locations into authoritative resolved locations.

    Manual entries are never scored. When the entry carries no
    coordinates they are looked up in order: forward geocoding through the
    providers, the session's last known position, then the default
    location.
    """

    def __init__(
        self,
        providers: Sequence[GeocodingProvider] = (),
        default_location: ResolvedLocation | None = None,
        timeout: float = 10.0,
    ):
        self.providers = list(providers)
        self.default_location = default_location
        self.timeout = timeout

    async def _forward_geocode(self, query: str) -> Position | None:
        for provider in self.providers:
            try:
                position = await asyncio.wait_for(provider.geocode(query), timeout=self.timeout)
            except TimeoutError:
                logger.warning("Forward geocoding timed out", provider=provider.name)
                continue
            except ProviderError as e:
                logger.warning("Forward geocoding failed", provider=provider.name, error=str(e))
                continue
            logger.info("Forward geocoded manual entry", provider=provider.name, query=query)
            return position
        return None

    async def resolve_position(
        self, entry: ManualLocationInput, last_position: Position | None = None
    ) -> Position:
        """Find coordinates for a manual entry.

        Raises:
            ValueError: If no coordinates can be found for the entry
        """
        if entry.has_coordinates:
            return Position(latitude=entry.latitude, longitude=entry.longitude)

        position = await self._forward_geocode(entry.query)
        if position is not None:
            return position

        if last_position is not None:
            logger.info("Using last known position for manual entry", query=entry.query)
            return last_position

        if self.default_location is not None:
            logger.info("Using default position for manual entry", query=entry.query)
            return self.default_location.position

        raise ValueError(f"Could not find coordinates for '{entry.query}'")

    async def build(
        self, entry: ManualLocationInput, last_position: Position | None = None
    ) -> ResolvedLocation:
        """Build the resolved location for an entry without touching any session."""
        position = await self.resolve_position(entry, last_position)
        address = None
        if entry.city or entry.state or entry.country or entry.postal_code:
            address = ScoredAddress(
                city=entry.city,
                state=entry.state,
                country=entry.country,
                postal_code=entry.postal_code,
                source=MANUAL_SOURCE,
                trust=SourceTrust.UNKNOWN,
                formatted_address=entry.query or None,
                confidence=None,
            )
        return ResolvedLocation(position=position, address=address, is_manually_set=True)

    async def override(
        self, session: LocationSession, entry: ManualLocationInput
    ) -> ResolvedLocation:
        """Replace the session's location with a manual entry.

        Args:
            session: Session to update
            entry: What the user typed

        Returns:
            The new current location, flagged as manually set

        Raises:
            ValueError: If no coordinates can be found for the entry
            InvalidStateTransition: If the session cannot be overridden now
        """
        location = await self.build(entry, session.last_position)
        session.apply_override(location)
        logger.info(
            "Location overridden manually",
            session_id=session.session_id,
            label=location.address.short_label if location.address else None,
            latitude=location.latitude,
            longitude=location.longitude,
        )
        return location
