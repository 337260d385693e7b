"""Geolocation collaborator: where the user is when the app starts."""
import logging
from typing import Callable, Optional, Protocol

from mapty.services.workout import Location

logger = logging.getLogger(__name__)


class GeolocationProvider(Protocol):
    def get_current_location(
        self,
        on_success: Callable[[Location], None],
        on_failure: Callable[[], None],
    ) -> None:
        ...


class StaticLocationProvider:
    """
    Reports a fixed location, typically the configured home coordinates.

    With no location configured every lookup fails, which leaves the map
    unavailable until the frontend posts the browser's position.
    """

    def __init__(self, location: Optional[Location] = None):
        self.location = location

    def get_current_location(
        self,
        on_success: Callable[[Location], None],
        on_failure: Callable[[], None],
    ) -> None:
        if self.location is None:
            logger.debug("No home location configured")
            on_failure()
            return
        on_success(self.location)
