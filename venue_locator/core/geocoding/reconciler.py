"""Multi-provider reverse geocoding reconciliation."""

import asyncio
import time
from collections.abc import Sequence

from venue_locator.core.geocoding.exceptions import ProviderError
from venue_locator.core.geocoding.providers import GeocodingProvider
from venue_locator.core.geocoding.scoring import evaluate
from venue_locator.core.logging import get_logger
from venue_locator.core.metrics import PROVIDER_LATENCY_SECONDS, PROVIDER_REQUESTS_TOTAL
from venue_locator.models.geographic import GeocodedAddress, Position, ScoredAddress

logger = get_logger(module="reconciler")


class ProviderReconciler:
    """Query every provider for a position and keep the most trustworthy answer.

    Providers are queried concurrently and each one gets its own timeout,
    so a slow or failing provider costs at most that timeout and never
    hides the others' answers. Answers are scored independently and the
    best one wins outright; addresses from different providers are never
    merged.
    """

    def __init__(self, providers: Sequence[GeocodingProvider], timeout: float = 10.0):
        """Initialize the reconciler.

        Args:
            providers: Providers in priority order; earlier wins score ties
            timeout: Per-provider timeout in seconds
        """
        self.providers = list(providers)
        self.timeout = timeout

    async def _query(
        self, provider: GeocodingProvider, position: Position
    ) -> GeocodedAddress | None:
        start = time.perf_counter()
        outcome = "success"
        try:
            return await asyncio.wait_for(
                provider.reverse_geocode(position.latitude, position.longitude),
                timeout=self.timeout,
            )
        except TimeoutError:
            outcome = "timeout"
            logger.warning("Provider timed out", provider=provider.name, timeout=self.timeout)
        except ProviderError as e:
            outcome = e.__class__.__name__
            logger.warning("Provider failed", provider=provider.name, error=str(e))
        except Exception as e:
            outcome = "error"
            logger.error(
                "Unexpected provider error",
                provider=provider.name,
                error=str(e),
                error_type=type(e).__name__,
            )
        finally:
            PROVIDER_LATENCY_SECONDS.labels(provider=provider.name).observe(
                time.perf_counter() - start
            )
            PROVIDER_REQUESTS_TOTAL.labels(provider=provider.name, outcome=outcome).inc()
        return None

    async def score_all(self, position: Position) -> list[ScoredAddress]:
        """Return every successful answer, best first.

        Args:
            position: The accepted device position

        Returns:
            Scored addresses sorted by confidence descending, ties broken by
            provider priority. Empty when no provider succeeded.
        """
        if not self.providers:
            logger.warning("No geocoding providers configured")
            return []

        results = await asyncio.gather(
            *(self._query(provider, position) for provider in self.providers)
        )

        ranked: list[tuple[int, int, ScoredAddress]] = []
        for priority, (provider, address) in enumerate(zip(self.providers, results, strict=True)):
            if address is None:
                continue
            evaluation = evaluate(position.accuracy_m, provider.trust, address)
            scored = ScoredAddress.from_address(address, evaluation.score, evaluation.issues)
            ranked.append((-evaluation.score, priority, scored))

        ranked.sort(key=lambda entry: (entry[0], entry[1]))
        scored_addresses = [entry[2] for entry in ranked]

        logger.info(
            "Reconciled provider answers",
            latitude=position.latitude,
            longitude=position.longitude,
            succeeded=len(scored_addresses),
            queried=len(self.providers),
            scores={a.source: a.confidence for a in scored_addresses},
        )
        return scored_addresses

    async def reconcile(self, position: Position) -> ScoredAddress | None:
        """Return the highest scoring address, or ``None`` when all providers failed."""
        scored = await self.score_all(position)
        if not scored:
            logger.warning(
                "All geocoding providers failed",
                latitude=position.latitude,
                longitude=position.longitude,
            )
            return None
        return scored[0]
