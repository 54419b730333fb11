import argparse
import logging
import os
import sys
from dataclasses import dataclass, replace
from typing import List, Optional

from cache_manager import CatalogCache
from catalog_fetcher import RemoteCatalogFetcher
from catalog_models import ImageSource
from config import DefaultDisplayId, RenderSettings, SchedulerSettings, StorageSettings
from display_registry import DisplayRegistry
from display_service import Display, DisplayService, create_display_service
from errors import SpaceEyeError
from image_store import ImageStore, default_data_dir
from render_options import RenderOptions, ScalingMode, WIRE_NAMES, parse_color
from scheduler_service import SchedulerService
from wallpaper_applier import WallpaperApplier

logger = logging.getLogger(__name__)

DEFAULT_REFRESH_SECONDS = 600


@dataclass(frozen=True)
class CatalogSelection:
    satellite_id: int
    view_id: int
    source_id: Optional[int] = None


@dataclass(frozen=True)
class WallpaperJob:
    """What one wallpaper update does; replayed by the scheduler."""
    image_path: str
    display_id: int
    options: RenderOptions
    selection: Optional[CatalogSelection] = None
    # None lets the selected image source pick its default scaling.
    scaling: Optional[ScalingMode] = None


class SpaceEyeApp:
    def __init__(
        self,
        cache: CatalogCache,
        registry: DisplayRegistry,
        applier: WallpaperApplier,
        image_store: ImageStore,
        display_service: Optional[DisplayService] = None,
    ) -> None:
        self.cache = cache
        self.registry = registry
        self.applier = applier
        self.image_store = image_store
        self.display_service = display_service
        self.job: Optional[WallpaperJob] = None
        self.last_source: Optional[ImageSource] = None

    @classmethod
    def create(cls, data_dir: Optional[str] = None) -> "SpaceEyeApp":
        service = create_display_service()
        return cls(
            cache=CatalogCache(RemoteCatalogFetcher()),
            registry=DisplayRegistry(service),
            applier=WallpaperApplier(service),
            image_store=ImageStore(data_dir),
            display_service=service,
        )

    def close(self) -> None:
        if self.display_service is not None:
            self.display_service.close()

    def list_displays(self) -> List[Display]:
        return self.registry.enumerate()

    def set_wallpaper(self, image_path: str, display_id: int, options: RenderOptions) -> Display:
        display = self.registry.resolve(display_id)
        self.applier.apply(display, image_path, options)
        return display

    def update_from_catalog(
        self,
        selection: CatalogSelection,
        filename: str,
        display_id: int,
        options: RenderOptions,
        scaling: Optional[ScalingMode] = None,
    ) -> str:
        """Resolve the display, pick an image source from the catalog, download and apply it."""
        display = self.registry.resolve(display_id)
        snapshot = self.cache.get_current()
        source = snapshot.catalog.select(selection.satellite_id, selection.view_id, selection.source_id)
        logger.info(
            "Selected image source %d (%s, %dx%d)",
            source.id,
            source.estimated_size,
            source.dimensions[0],
            source.dimensions[1],
        )
        image_path = self.image_store.download(source.url, filename)
        effective = options.with_scaling(scaling if scaling is not None else source.default_scaling)
        self.applier.apply(display, image_path, effective)
        self.last_source = source
        return image_path

    def run_job(self, job: WallpaperJob) -> None:
        self.job = job
        self.refresh_wallpaper("startup")

    def refresh_wallpaper(self, trigger: str) -> None:
        if self.job is None:
            raise SpaceEyeError("No wallpaper job configured")
        job = self.job
        logger.info("Updating wallpaper (trigger: %s)", trigger)
        if job.selection is None:
            options = job.options if job.scaling is None else job.options.with_scaling(job.scaling)
            self.set_wallpaper(job.image_path, job.display_id, options)
        else:
            self.update_from_catalog(job.selection, job.image_path, job.display_id, job.options, job.scaling)

    def refresh_interval(self) -> int:
        configured = int(SchedulerSettings.get("interval_seconds", 0) or 0)
        if configured:
            return configured
        if self.last_source and self.last_source.update_interval_seconds:
            return self.last_source.update_interval_seconds
        return DEFAULT_REFRESH_SECONDS


def _color_arg(value: str):
    try:
        return parse_color(value)
    except ValueError as error:
        raise argparse.ArgumentTypeError(str(error))


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="space-eye",
        description="Set satellite imagery as the desktop background of a display.",
    )
    parser.add_argument("wallpaper", help="Path to the wallpaper to set (the filename to store it under with --satellite)")
    parser.add_argument("--display", type=int, default=DefaultDisplayId, help="Display id (default: %(default)s)")
    parser.add_argument("--scaling", choices=sorted(WIRE_NAMES), help="How the image is scaled to the display")
    parser.add_argument("--background-color", type=_color_arg, help="Fill color as #RRGGBB or #RRGGBBAA")
    parser.add_argument("--no-clipping", action="store_true", help="Never crop the image to fill the display")
    parser.add_argument("--satellite", type=int, help="Satellite id to download imagery from")
    parser.add_argument("--view", type=int, help="View id of the satellite")
    parser.add_argument("--source", type=int, help="Image source id (default: largest available)")
    parser.add_argument("--watch", action="store_true", help="Keep running and refresh the wallpaper periodically")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    if (args.satellite is None) != (args.view is None):
        parser.error("--satellite and --view must be given together")
    if args.source is not None and args.satellite is None:
        parser.error("--source requires --satellite and --view")
    return args


def build_job(args: argparse.Namespace) -> WallpaperJob:
    options = RenderOptions.from_settings(RenderSettings)
    if args.background_color is not None:
        options = replace(options, background_color=args.background_color)
    if args.no_clipping:
        options = replace(options, allow_clipping=False)

    scaling = ScalingMode.from_wire(args.scaling) if args.scaling else None
    selection = None
    if args.satellite is not None:
        selection = CatalogSelection(args.satellite, args.view, args.source)
    return WallpaperJob(args.wallpaper, args.display, options, selection, scaling)


def setup_logging(data_dir: str, verbose: bool = False) -> None:
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    try:
        os.makedirs(data_dir, exist_ok=True)
        log_path = os.path.join(data_dir, StorageSettings.get("log_file") or "space-eye.log")
        handlers.insert(0, logging.FileHandler(log_path, encoding='utf-8'))
    except OSError as error:
        print(f"Unable to open log file: {error}", file=sys.stderr)

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=handlers,
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    job = build_job(args)

    data_dir = StorageSettings.get("directory") or default_data_dir()
    setup_logging(data_dir, args.verbose)

    app: Optional[SpaceEyeApp] = None
    try:
        app = SpaceEyeApp.create(data_dir)
        app.run_job(job)
        if args.watch:
            watch(app)
    except (SpaceEyeError, OSError) as error:
        logger.debug("Wallpaper update failed", exc_info=True)
        print(f"error: {error}", file=sys.stderr)
        return 1
    finally:
        if app is not None:
            app.close()
    return 0


def watch(app: SpaceEyeApp) -> None:
    interval = app.refresh_interval()
    logger.info("Watching: refreshing every %ds", interval)
    scheduler = SchedulerService(
        app,
        interval,
        jitter_seconds=int(SchedulerSettings.get("jitter_seconds", 0)),
        initial_delay_seconds=interval,
    )
    scheduler.start()
    try:
        scheduler.wait()
    except KeyboardInterrupt:
        pass
    finally:
        scheduler.stop()


if __name__ == "__main__":
    sys.exit(main())
