"""Location resolution orchestration."""

import asyncio
from collections.abc import Awaitable, Callable, Iterable

from structlog.stdlib import BoundLogger

from venue_locator.core.config import Settings, settings
from venue_locator.core.geocoding.acquisition import PositionAcquirer, PositionSensor
from venue_locator.core.geocoding.exceptions import AcquisitionError
from venue_locator.core.geocoding.providers import build_providers
from venue_locator.core.geocoding.range_filter import filter_candidates
from venue_locator.core.geocoding.reconciler import ProviderReconciler
from venue_locator.core.location.override import ManualOverride
from venue_locator.core.location.session import LocationSession, ResolutionState
from venue_locator.core.logging import get_session_logger
from venue_locator.core.metrics import RESOLUTIONS_TOTAL
from venue_locator.models.geographic import (
    FALLBACK_SOURCE,
    Candidate,
    DistanceRange,
    FilterResult,
    ManualLocationInput,
    Position,
    ProximityListing,
    RankedCandidate,
    ResolvedLocation,
    ScoredAddress,
    SourceTrust,
)

ManualInputCallback = Callable[[str], Awaitable[ManualLocationInput | None]]


def fallback_location(config: Settings) -> ResolvedLocation | None:
    """Build the configured last-resort location, if any."""
    if not config.has_fallback_location:
        return None

    address = None
    if config.FALLBACK_CITY or config.FALLBACK_STATE or config.FALLBACK_COUNTRY:
        address = ScoredAddress(
            city=config.FALLBACK_CITY,
            state=config.FALLBACK_STATE,
            country=config.FALLBACK_COUNTRY,
            source=FALLBACK_SOURCE,
            trust=SourceTrust.UNKNOWN,
            confidence=0,
            issues=("Default location used",),
        )
    return ResolvedLocation(
        position=Position(
            latitude=config.FALLBACK_LATITUDE,
            longitude=config.FALLBACK_LONGITUDE,
        ),
        address=address,
    )


class LocationService:
    """Resolve where a user is and rank venues around them.

    One service can serve many callers; all per-caller state lives in the
    LocationSession passed to each call.
    """

    def __init__(
        self,
        acquirer: PositionAcquirer,
        reconciler: ProviderReconciler,
        manual_override: ManualOverride | None = None,
        request_manual_input: ManualInputCallback | None = None,
        default_location: ResolvedLocation | None = None,
        config: Settings = settings,
    ):
        self.acquirer = acquirer
        self.reconciler = reconciler
        self.manual_override = manual_override or ManualOverride(
            reconciler.providers, default_location, timeout=reconciler.timeout
        )
        self.request_manual_input = request_manual_input
        self.default_location = default_location
        self.config = config

    @classmethod
    def from_settings(
        cls,
        sensor: PositionSensor,
        config: Settings = settings,
        request_manual_input: ManualInputCallback | None = None,
    ) -> "LocationService":
        """Wire a service from application settings."""
        providers = build_providers(config)
        default = fallback_location(config)
        return cls(
            acquirer=PositionAcquirer(
                sensor,
                backoff_seconds=config.ACQUISITION_BACKOFF_SECONDS,
                max_cache_age_ms=config.ACQUISITION_MAX_CACHE_AGE_MS,
            ),
            reconciler=ProviderReconciler(providers, timeout=config.GEOCODING_TIMEOUT),
            manual_override=ManualOverride(
                providers, default, timeout=config.GEOCODING_TIMEOUT
            ),
            request_manual_input=request_manual_input,
            default_location=default,
            config=config,
        )

    async def resolve_location(self, session: LocationSession) -> ResolvedLocation:
        """Return the session's location, detecting it if needed.

        A manually set location is returned as is; only ``redetect`` replaces
        it. Concurrent callers on the same session share one detection.

        Raises:
            AcquisitionError: If detection failed and no manual input was
                given. The session keeps any location it already had; the
                default location is used only when it had none.
        """
        if session.is_overridden and session.current is not None:
            return session.current

        in_flight = session.lock.locked()
        async with session.lock:
            if session.current is not None and (session.is_overridden or in_flight):
                return session.current
            return await self._detect(session, redetect=False)

    async def redetect(self, session: LocationSession) -> ResolvedLocation:
        """Run a fresh detection on explicit user request, leaving any manual location.

        If the detection fails, a previous location (manual or not) stays
        current and the error is raised.
        """
        async with session.lock:
            return await self._detect(session, redetect=True)

    async def override_location(
        self, session: LocationSession, entry: ManualLocationInput
    ) -> ResolvedLocation:
        """Apply a manual location.

        Takes effect immediately, even while a detection is in flight; that
        detection's result is then discarded.
        """
        return await self.manual_override.override(session, entry)

    def filter_candidates_by_distance(
        self,
        candidates: Iterable[Candidate],
        origin: ResolvedLocation | Position | None,
        range_km: DistanceRange | str | None = None,
    ) -> FilterResult:
        """Filter and rank candidates; see ``range_filter.filter_candidates``."""
        return filter_candidates(
            candidates, origin, range_km or self.config.DEFAULT_DISTANCE_RANGE
        )

    def listing_for(
        self,
        session: LocationSession,
        candidates: Iterable[Candidate],
        range_km: DistanceRange | str | None = None,
    ) -> ProximityListing:
        """Decide what to show for a distance search around the session's location.

        When the location is known but nothing falls inside the window, the
        full candidate list is shown instead, with a message saying so.
        """
        items = list(candidates)
        result = self.filter_candidates_by_distance(items, session.current, range_km)

        if not result.origin_known:
            return ProximityListing(
                result=result,
                items=result.kept,
                message="Location unavailable, showing all venues",
            )

        if result.matched_count == 0 and items:
            window = range_km or self.config.DEFAULT_DISTANCE_RANGE
            message = (
                f"No venues found within {window} km; showing all {len(items)} venues. "
                f"{result.excluded_no_coords} venues have no coordinates."
            )
            log = get_session_logger(session.session_id).bind(module="location_service")
            log.info(
                "No venues in range, falling back to full list",
                distance_range=str(window),
                excluded_no_coords=result.excluded_no_coords,
                excluded_out_of_range=result.excluded_out_of_range,
            )
            return ProximityListing(
                result=result,
                items=[RankedCandidate(candidate=c) for c in items],
                fell_back=True,
                message=message,
            )

        return ProximityListing(result=result, items=result.kept)

    async def _detect(self, session: LocationSession, redetect: bool) -> ResolvedLocation:
        session.transition(ResolutionState.ACQUIRING, redetect=redetect)
        generation = session.next_generation()
        log = get_session_logger(session.session_id).bind(
            module="location_service", generation=generation
        )

        try:
            return await self._run_cycle(session, generation, log)
        except asyncio.CancelledError:
            if session.is_current(generation):
                session.abort()
            raise

    async def _run_cycle(
        self, session: LocationSession, generation: int, log: BoundLogger
    ) -> ResolvedLocation:
        try:
            position = await self.acquirer.acquire(
                max_attempts=self.config.ACQUISITION_MAX_ATTEMPTS,
                accuracy_threshold_m=self.config.ACQUISITION_ACCURACY_THRESHOLD_M,
                per_attempt_timeout_ms=self.config.ACQUISITION_TIMEOUT_MS,
            )
        except AcquisitionError as e:
            if not session.is_current(generation):
                log.info("Acquisition failed after manual override, keeping override")
                return session.current
            log.warning("Position acquisition failed", code=e.code, attempts=e.attempts)
            return await self._recover(session, e, generation)

        if not session.is_current(generation):
            log.info("Discarding detected position, location was overridden")
            return session.current

        session.transition(ResolutionState.RECONCILING)
        address = await self.reconciler.reconcile(position)

        if not session.is_current(generation):
            log.info("Discarding reconciled address, location was overridden")
            return session.current

        state = ResolutionState.RESOLVED if address else ResolutionState.DEGRADED
        location = ResolvedLocation(position=position, address=address)
        session.replace(location, state)
        RESOLUTIONS_TOTAL.labels(state=state.value).inc()
        log.info(
            "Location resolved",
            state=state.value,
            source=address.source if address else None,
            confidence=location.confidence,
        )
        return location

    async def _recover(
        self, session: LocationSession, error: AcquisitionError, generation: int
    ) -> ResolvedLocation:
        log = get_session_logger(session.session_id).bind(module="location_service")

        if self.request_manual_input is not None:
            entry = await self.request_manual_input(error.user_message)
            if not session.is_current(generation):
                return session.current
            if entry is None:
                log.info("No manual location entered")
            else:
                try:
                    location = await self.manual_override.override(session, entry)
                except ValueError as e:
                    log.warning("Manual location could not be placed", error=str(e))
                else:
                    RESOLUTIONS_TOTAL.labels(state=ResolutionState.OVERRIDDEN.value).inc()
                    return location

        # The default only stands in when nothing better is known
        known = session.current is not None and session.current is not self.default_location
        if self.default_location is not None and not known:
            session.replace(self.default_location, ResolutionState.DEGRADED)
            RESOLUTIONS_TOTAL.labels(state=ResolutionState.DEGRADED.value).inc()
            log.info("Using default location after failed detection")
            return self.default_location

        if known:
            log.info(
                "Keeping previous location after failed detection",
                is_manually_set=session.current.is_manually_set,
            )
        session.abort()
        RESOLUTIONS_TOTAL.labels(state="failed").inc()
        raise error
