"""
Display service contract
Everything that touches native display handles goes through one of these.
"""

import sys
from dataclasses import dataclass
from typing import Any, Dict, List

from errors import DisplayError


@dataclass(frozen=True)
class Display:
    external_id: int
    # Only valid for the enumeration that produced it.
    handle: Any


class DisplayService:
    """Platform adapter for display enumeration and desktop images.

    ``options`` passed to ``set_desktop_image`` holds ``scaling_code`` (1, 2
    or 3), ``allow_clipping`` (bool) and ``fill_color`` (r, g, b, a floats).
    """

    def enumerate_displays(self) -> List[Display]:
        raise NotImplementedError

    def set_desktop_image(self, handle: Any, image_path: str, options: Dict[str, Any]) -> None:
        raise NotImplementedError

    def close(self) -> None:
        """Release native resources held by the adapter."""


def create_display_service() -> DisplayService:
    try:
        if sys.platform == "win32":
            from windows_display import WindowsDisplayService

            return WindowsDisplayService()
        if sys.platform == "darwin":
            from macos_display import MacDisplayService

            return MacDisplayService()
    except OSError as error:
        raise DisplayError(f"Unable to connect to the display service: {error}") from error
    raise DisplayError(f"Setting desktop images is not supported on platform '{sys.platform}'")
