"""Exception hierarchy for location resolution."""


class LocationError(Exception):
    """Base exception for all location resolution errors."""


class AcquisitionError(LocationError):
    """Terminal failure to obtain a device position.

    ``code`` follows the device geolocation error codes (1 permission
    denied, 2 position unavailable, 3 timeout). ``user_message`` is meant
    for prompting the manual-entry flow.
    """

    code: int = 0
    user_message: str = (
        "Unable to access your location. "
        "Please try again or enter your location manually."
    )

    def __init__(self, message: str | None = None, attempts: int = 0):
        self.attempts = attempts
        super().__init__(message or self.user_message)


class PermissionDenied(AcquisitionError):
    """The user or platform denied access to the position sensor."""

    code = 1
    user_message = (
        "Location access denied. "
        "Please enable location services in your browser settings."
    )


class PositionUnavailable(AcquisitionError):
    """The sensor could not determine a position."""

    code = 2
    user_message = (
        "Unable to determine your location. "
        "Please check your internet connection."
    )


class AcquisitionTimeout(AcquisitionError):
    """No position arrived within the attempt budget."""

    code = 3
    user_message = "Location request timed out. Please try again."


class ProviderError(LocationError):
    """A geocoding provider call failed. Recovered inside the reconciler."""

    def __init__(self, provider: str, detail: str):
        self.provider = provider
        self.detail = detail
        super().__init__(f"{provider}: {detail}")


class ProviderUnreachable(ProviderError):
    """The provider could not be reached, timed out or refused the call."""


class ProviderMalformedResponse(ProviderError):
    """The provider answered with something that is not a usable address."""


class InvalidRangeFormat(LocationError, ValueError):
    """A distance range string is not of the form ``<min>-<max>``."""

    def __init__(self, raw: str, reason: str = "expected '<min>-<max>'"):
        self.raw = raw
        super().__init__(f"Invalid distance range '{raw}': {reason}")


class InvalidStateTransition(LocationError):
    """A resolution session was asked to move to a state it cannot reach."""

    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"Cannot move resolution session from {current} to {target}")
