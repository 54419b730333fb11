import logging
import os
import sys
from typing import Optional

import requests
from PIL import Image, UnidentifiedImageError

from config import RequestTimeout, StorageSettings, UserAgent
from errors import ImageDownloadError, TransportError

logger = logging.getLogger(__name__)

APP_DIR_NAME = "space-eye"


def default_data_dir() -> str:
    """Per-user application data directory for this platform."""
    if sys.platform == "win32":
        base = os.getenv("APPDATA") or os.path.join(os.path.expanduser("~"), "AppData", "Roaming")
    elif sys.platform == "darwin":
        base = os.path.join(os.path.expanduser("~"), "Library", "Application Support")
    else:
        base = os.getenv("XDG_DATA_HOME") or os.path.join(os.path.expanduser("~"), ".local", "share")
    return os.path.join(base, APP_DIR_NAME)


class ImageStore:
    def __init__(
        self,
        directory: Optional[str] = None,
        timeout: float = RequestTimeout,
        session: Optional[requests.Session] = None,
    ) -> None:
        root = directory or StorageSettings.get("directory") or default_data_dir()
        self.directory = os.path.abspath(os.path.expanduser(root))
        self.images_dir = os.path.join(self.directory, "images")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.setdefault("User-Agent", UserAgent)

    def ensure_dirs(self) -> None:
        os.makedirs(self.images_dir, exist_ok=True)

    def path_for(self, filename: str) -> str:
        name = os.path.basename(str(filename).strip())
        if not name or name in (".", ".."):
            raise ImageDownloadError(f"Invalid image filename '{filename}'")
        return os.path.join(self.images_dir, name)

    def download(self, url: str, filename: str) -> str:
        self.ensure_dirs()
        target_path = self.path_for(filename)
        tmp_path = f"{target_path}.part"

        logger.info("[DOWNLOAD] %s -> %s", url, target_path)
        try:
            self._fetch_to(url, tmp_path)
            with Image.open(tmp_path) as image:
                image.verify()
            os.replace(tmp_path, target_path)
        except requests.RequestException as error:
            # RequestException is an OSError, so it has to be matched first.
            self._discard(tmp_path)
            raise TransportError(f"Image download from {url} failed: {error}") from error
        except (UnidentifiedImageError, Image.DecompressionBombError, SyntaxError) as error:
            self._discard(tmp_path)
            raise ImageDownloadError(f"Downloaded file from {url} is not a valid image: {error}") from error
        except OSError as error:
            self._discard(tmp_path)
            raise ImageDownloadError(f"Unable to store image from {url}: {error}") from error
        except BaseException:
            self._discard(tmp_path)
            raise
        return target_path

    def _fetch_to(self, url: str, path: str) -> None:
        response = self.session.get(url, stream=True, timeout=self.timeout)
        try:
            response.raise_for_status()
            with open(path, "wb") as handle:
                for chunk in response.iter_content(chunk_size=8192):
                    if chunk:
                        handle.write(chunk)
        finally:
            response.close()

    def _discard(self, path: str) -> None:
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as error:
            logger.warning("Failed to remove partial download %s: %s", path, error)
