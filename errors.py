"""Error types raised by space-eye."""

from typing import Optional


class SpaceEyeError(Exception):
    """Base class for every error the app reports to the user."""


class FetchError(SpaceEyeError):
    """The catalog (or an image) could not be retrieved."""


class TransportError(FetchError):
    """Connection failure, timeout or non-success HTTP status."""


class MissingMetadataError(FetchError):
    """A required response header was absent."""


class MalformedCatalogError(FetchError):
    """The response body does not match the catalog schema."""


class CatalogSelectionError(SpaceEyeError):
    """A satellite, view or image source id is not present in the catalog."""


class ImageDownloadError(SpaceEyeError):
    """A downloaded file is not a readable image."""


class DisplayError(SpaceEyeError):
    """Display enumeration failed or the platform is unsupported."""


class DisplayNotFoundError(DisplayError):
    def __init__(self, display_id: int, available: Optional[list] = None):
        self.display_id = display_id
        self.available = list(available or [])
        detail = ", ".join(str(item) for item in self.available) or "none"
        super().__init__(f"No display with id {display_id} (available: {detail})")


class ApplyError(SpaceEyeError):
    """The display service rejected the wallpaper."""

    def __init__(self, message: str, reason: Optional[BaseException] = None):
        self.reason = reason
        if reason is not None:
            message = f"{message}: {reason}"
        super().__init__(message)
