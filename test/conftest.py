import copy

import pytest

from catalog_models import Catalog, CachedCatalog
from display_service import Display, DisplayService

GOES_PAYLOAD = {
    "dnsHttpProbeOverride": [],
    "satellites": [
        {
            "id": 1,
            "name": "GOES-16",
            "views": [
                {
                    "id": 10,
                    "name": "CONUS",
                    "imageSources": [
                        {
                            "id": 100,
                            "url": "https://x/5k.jpg",
                            "estimatedSize": "5k",
                            "updateInterval": 600,
                            "dimensions": [5000, 5000],
                            "defaultScaling": "fit",
                        }
                    ],
                }
            ],
        }
    ],
}


class FakeClock:
    def __init__(self, now: float = 1_700_000_000):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeDisplayService(DisplayService):
    def __init__(self, displays=None, error=None):
        self.displays = list(displays or [])
        self.error = error
        self.calls = []

    def enumerate_displays(self):
        return list(self.displays)

    def set_desktop_image(self, handle, image_path, options):
        if self.error is not None:
            raise self.error
        self.calls.append((handle, image_path, options))


class FakeFetcher:
    def __init__(self, clock, results=None):
        self.clock = clock
        self.results = list(results or [])
        self.calls = 0
        self.previous = []

    def fetch(self, previous=None):
        self.calls += 1
        self.previous.append(previous)
        if self.results:
            result = self.results.pop(0)
            if isinstance(result, Exception):
                raise result
            return result
        return CachedCatalog(Catalog.from_dict(goes_payload()), f"etag-{self.calls}", int(self.clock()))


def goes_payload():
    return copy.deepcopy(GOES_PAYLOAD)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def displays():
    return [Display(7, "A"), Display(9, "B")]


@pytest.fixture
def display_service(displays):
    return FakeDisplayService(displays)
