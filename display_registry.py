import logging
from typing import List

from display_service import Display, DisplayService
from errors import DisplayError, DisplayNotFoundError

logger = logging.getLogger(__name__)


class DisplayRegistry:
    def __init__(self, service: DisplayService) -> None:
        self.service = service

    def enumerate(self) -> List[Display]:
        try:
            displays = list(self.service.enumerate_displays())
        except DisplayError:
            raise
        except OSError as error:
            raise DisplayError(f"Display enumeration failed: {error}") from error
        logger.debug("Enumerated displays: %s", [display.external_id for display in displays])
        return displays

    def resolve(self, display_id: int) -> Display:
        """Return the display whose id matches; the first one wins on duplicates."""
        displays = self.enumerate()
        matches = [display for display in displays if display.external_id == display_id]
        if not matches:
            raise DisplayNotFoundError(display_id, [display.external_id for display in displays])
        if len(matches) > 1:
            logger.warning(
                "%d displays report id %d; using the first one", len(matches), display_id
            )
        return matches[0]
