"""Tests for the catalog data model and its JSON format."""
import json

import pytest

from catalog_models import Catalog, ImageSource, Satellite, SatelliteView
from errors import CatalogSelectionError
from render_options import ScalingMode

from conftest import goes_payload


def _source(source_id, width, thumbnail=False, scaling=ScalingMode.PROPORTIONAL_FIT):
    return ImageSource(
        id=source_id,
        url=f"https://example.test/{source_id}.jpg",
        estimated_size=f"{width // 1000}k",
        update_interval_seconds=600,
        dimensions=(width, width),
        default_scaling=scaling,
        is_thumbnail=thumbnail,
    )


def test_parses_goes_scenario():
    catalog = Catalog.from_json(json.dumps(goes_payload()))

    assert catalog.dns_http_probe_override == ()
    assert len(catalog.satellites) == 1
    satellite = catalog.satellites[0]
    assert satellite.name == "GOES-16"
    assert len(satellite.views) == 1
    assert satellite.views[0].name == "CONUS"
    assert len(satellite.views[0].image_sources) == 1
    source = satellite.views[0].image_sources[0]
    assert source.default_scaling is ScalingMode.PROPORTIONAL_FIT
    assert source.update_interval_seconds == 600
    assert source.dimensions == (5000, 5000)
    assert source.is_thumbnail is False


def test_round_trip_keeps_structure():
    catalog = Catalog(
        dns_http_probe_override=("dns.example.test",),
        satellites=(
            Satellite(1, "GOES-16", (SatelliteView(10, "CONUS", (_source(100, 5000), _source(101, 1000, True))),)),
            Satellite(2, "Himawari-8", (SatelliteView(20, "Full Disk", (
                _source(200, 2000, scaling=ScalingMode.NONE),
                _source(201, 500, True, ScalingMode.AXES_INDEPENDENT),
            )),)),
        ),
    )

    parsed = Catalog.from_json(catalog.to_json())

    assert parsed == catalog
    assert [s.name for s in parsed.satellites] == ["GOES-16", "Himawari-8"]
    assert [src.id for src in parsed.satellites[1].views[0].image_sources] == [200, 201]


@pytest.mark.parametrize(
    "mutate",
    [
        lambda p: p.pop("satellites"),
        lambda p: p.pop("dnsHttpProbeOverride"),
        lambda p: p["satellites"][0].update(id="1"),
        lambda p: p["satellites"][0].update(views={}),
        lambda p: p["satellites"][0]["views"][0]["imageSources"][0].update(dimensions=[5000]),
        lambda p: p["satellites"][0]["views"][0]["imageSources"][0].update(defaultScaling="zoom"),
        lambda p: p["satellites"][0]["views"][0]["imageSources"][0].update(updateInterval=True),
        lambda p: p["satellites"][0]["views"][0]["imageSources"][0].update(isThumbnail="yes"),
        lambda p: p["satellites"][0]["views"][0]["imageSources"][0].pop("url"),
    ],
)
def test_schema_mismatch_raises_value_error(mutate):
    payload = goes_payload()
    mutate(payload)
    with pytest.raises(ValueError):
        Catalog.from_dict(payload)


def test_non_object_document_is_rejected():
    with pytest.raises(ValueError):
        Catalog.from_json("[]")


def test_invalid_json_is_rejected():
    with pytest.raises(ValueError):
        Catalog.from_json(b"{not json")


def test_duplicate_ids_are_not_rejected():
    payload = goes_payload()
    payload["satellites"].append(payload["satellites"][0])
    catalog = Catalog.from_dict(payload)
    assert len(catalog.satellites) == 2


def test_select_prefers_largest_full_size_source():
    view = SatelliteView(10, "CONUS", (_source(1, 1000), _source(2, 8000, thumbnail=True), _source(3, 5000)))
    catalog = Catalog((), (Satellite(1, "GOES-16", (view,)),))

    assert catalog.select(1, 10).id == 3
    assert catalog.select(1, 10, 2).id == 2


def test_select_falls_back_to_thumbnails():
    view = SatelliteView(10, "CONUS", (_source(1, 500, thumbnail=True), _source(2, 800, thumbnail=True)))
    assert view.best_image_source().id == 2


@pytest.mark.parametrize("ids", [(9, 10, None), (1, 99, None), (1, 10, 999)])
def test_select_unknown_ids(ids):
    catalog = Catalog.from_dict(goes_payload())
    with pytest.raises(CatalogSelectionError):
        catalog.select(*ids)


def test_empty_view_has_no_best_source():
    with pytest.raises(CatalogSelectionError):
        SatelliteView(1, "Empty").best_image_source()
