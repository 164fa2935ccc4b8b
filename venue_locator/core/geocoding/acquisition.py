"""Device position acquisition with retry on poor accuracy."""

import asyncio
from typing import Protocol

from venue_locator.core.geocoding.exceptions import (
    AcquisitionError,
    AcquisitionTimeout,
)
from venue_locator.core.logging import get_logger
from venue_locator.core.metrics import ACQUISITION_ATTEMPTS_TOTAL
from venue_locator.models.geographic import Position

logger = get_logger(module="acquisition")


class PositionSensor(Protocol):
    """A device position source (GPS, browser geolocation, ...).

    Implementations raise PermissionDenied, PositionUnavailable or
    AcquisitionTimeout on failure.
    """

    async def request(
        self, high_accuracy: bool, timeout_ms: int, max_cache_age_ms: int
    ) -> Position: ...


class PositionAcquirer:
    """Obtain a device position, retrying while it is too inaccurate to use."""

    def __init__(
        self,
        sensor: PositionSensor,
        backoff_seconds: float = 1.0,
        max_cache_age_ms: int = 0,
    ):
        self.sensor = sensor
        self.backoff_seconds = backoff_seconds
        self.max_cache_age_ms = max_cache_age_ms

    async def _request(self, timeout_ms: int) -> Position:
        try:
            return await asyncio.wait_for(
                self.sensor.request(
                    high_accuracy=True,
                    timeout_ms=timeout_ms,
                    max_cache_age_ms=self.max_cache_age_ms,
                ),
                timeout=timeout_ms / 1000,
            )
        except TimeoutError as e:
            raise AcquisitionTimeout(f"No position within {timeout_ms}ms") from e

    async def _backoff(self) -> None:
        if self.backoff_seconds > 0:
            await asyncio.sleep(self.backoff_seconds)

    async def acquire(
        self,
        max_attempts: int = 3,
        accuracy_threshold_m: float = 1000.0,
        per_attempt_timeout_ms: int = 20000,
    ) -> Position:
        """Acquire a position.

        A fix less accurate than ``accuracy_threshold_m`` is retried after a
        short backoff while attempts remain; the last attempt's fix is
        accepted whatever its accuracy. Timeouts are retried within the
        same budget. Permission and availability errors end acquisition
        immediately.

        Args:
            max_attempts: Total number of sensor requests allowed
            accuracy_threshold_m: Accuracy radius above which a fix is retried
            per_attempt_timeout_ms: Timeout for each sensor request

        Returns:
            The accepted Position

        Raises:
            PermissionDenied: Access to the sensor was refused
            PositionUnavailable: The sensor could not determine a position
            AcquisitionTimeout: Every attempt timed out
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        for attempt in range(1, max_attempts + 1):
            is_last = attempt == max_attempts
            try:
                position = await self._request(per_attempt_timeout_ms)
            except AcquisitionTimeout as e:
                ACQUISITION_ATTEMPTS_TOTAL.labels(outcome="timeout").inc()
                logger.warning("Position request timed out", attempt=attempt)
                if is_last:
                    e.attempts = attempt
                    raise
                await self._backoff()
                continue
            except AcquisitionError as e:
                ACQUISITION_ATTEMPTS_TOTAL.labels(outcome="error").inc()
                logger.warning(
                    "Position request failed",
                    attempt=attempt,
                    code=e.code,
                    error=str(e),
                )
                e.attempts = attempt
                raise

            accuracy = position.accuracy_m
            if accuracy is not None and accuracy > accuracy_threshold_m and not is_last:
                ACQUISITION_ATTEMPTS_TOTAL.labels(outcome="inaccurate").inc()
                logger.info(
                    "Position too inaccurate, retrying",
                    attempt=attempt,
                    accuracy_m=accuracy,
                    threshold_m=accuracy_threshold_m,
                )
                await self._backoff()
                continue

            ACQUISITION_ATTEMPTS_TOTAL.labels(outcome="accepted").inc()
            logger.info(
                "Position acquired",
                attempt=attempt,
                accuracy_m=accuracy,
                latitude=position.latitude,
                longitude=position.longitude,
            )
            return position

        # Unreachable: the last attempt either returns or raises
        raise AcquisitionTimeout(attempts=max_attempts)
