import logging
import os
from typing import Any, Dict

from display_service import Display, DisplayService
from errors import ApplyError
from render_options import RenderOptions

logger = logging.getLogger(__name__)


def build_options_bundle(options: RenderOptions) -> Dict[str, Any]:
    return {
        "scaling_code": int(options.scaling),
        "allow_clipping": bool(options.allow_clipping),
        "fill_color": tuple(float(channel) for channel in options.background_color),
    }


class WallpaperApplier:
    def __init__(self, service: DisplayService) -> None:
        self.service = service

    def apply(self, display: Display, image_path: str, options: RenderOptions) -> None:
        path = os.path.abspath(os.path.expanduser(str(image_path)))
        bundle = build_options_bundle(options)
        logger.info(
            "Setting %s on display %d (scaling=%s, clipping=%s)",
            path,
            display.external_id,
            options.scaling.name,
            options.allow_clipping,
        )
        try:
            self.service.set_desktop_image(display.handle, path, bundle)
        except ApplyError:
            raise
        except Exception as error:
            raise ApplyError(
                f"Display {display.external_id} rejected wallpaper {path}", reason=error
            ) from error
