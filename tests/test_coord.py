"""Tests for the coordinate math and beam geometry."""

import math

import numpy as np
import pytest

from coord import (beam_factory, build_beam_geometry, cartesian_to_geographic,
                   compute_antipode, geographic_to_cartesian, map_to_scene_position)
from models import BeamSpec, GeoPoint


class FakeScene:
    """Stands in for the globe engine's projection."""

    def __init__(self, ready=True):
        self.ready = ready
        self.calls = []

    def project_to_scene(self, lat, lon, altitude=0.0):
        self.calls.append((lat, lon, altitude))
        if not self.ready:
            return None
        return geographic_to_cartesian(lat, lon, 1.0, altitude)


@pytest.mark.parametrize("lat, lon, expected", [
    (40, -74, (-40, 106)),
    (10, 170, (-10, -10)),
    (0, 0, (0, 180)),
    (0, 180, (0, 0)),
    (-33.9, 151.2, (33.9, -28.8)),
])
def test_compute_antipode_examples(lat, lon, expected):
    result = compute_antipode(GeoPoint(lat, lon))
    assert result.latitude == pytest.approx(expected[0])
    assert result.longitude == pytest.approx(expected[1])


def test_compute_antipode_is_involution():
    for lat in np.linspace(-90, 90, 13):
        for lon in np.linspace(-179.5, 180, 25):
            p = GeoPoint(float(lat), float(lon))
            back = compute_antipode(compute_antipode(p))
            assert back.latitude == pytest.approx(p.latitude)
            assert back.longitude == pytest.approx(p.longitude)


def test_compute_antipode_wrap_edges_round_trip_exactly():
    assert compute_antipode(compute_antipode(GeoPoint(0, 0))) == GeoPoint(0, 0)
    assert compute_antipode(compute_antipode(GeoPoint(0, 180))) == GeoPoint(0, 180)


def test_compute_antipode_stays_in_range():
    for lon in np.linspace(-180, 180, 73):
        result = compute_antipode(GeoPoint(12.5, float(lon)))
        assert -180 < result.longitude <= 180


def test_geopoint_rejects_out_of_range():
    with pytest.raises(ValueError):
        GeoPoint(91, 0)
    with pytest.raises(ValueError):
        GeoPoint(0, 181)


def test_geographic_to_cartesian_axes():
    np.testing.assert_allclose(geographic_to_cartesian(0, 0), [1, 0, 0], atol=1e-12)
    np.testing.assert_allclose(geographic_to_cartesian(0, 90), [0, 1, 0], atol=1e-12)
    np.testing.assert_allclose(geographic_to_cartesian(90, 0), [0, 0, 1], atol=1e-12)
    np.testing.assert_allclose(geographic_to_cartesian(0, 0, radius=2, altitude=0.5), [3, 0, 0])


def test_cartesian_to_geographic_inverts_projection():
    lat, lon, alt = cartesian_to_geographic(geographic_to_cartesian(48.85, 2.35, 1.0, 2.5))
    assert lat == pytest.approx(48.85)
    assert lon == pytest.approx(2.35)
    assert alt == pytest.approx(2.5)


def test_antipode_is_opposite_in_scene():
    p = GeoPoint(48.85, 2.35)
    a = compute_antipode(p)
    np.testing.assert_allclose(
        geographic_to_cartesian(p.latitude, p.longitude),
        -geographic_to_cartesian(a.latitude, a.longitude),
        atol=1e-9,
    )


def test_map_to_scene_position_returns_plain_tuple():
    scene = FakeScene()
    pos = map_to_scene_position(scene, GeoPoint(0, 90), 0.0)
    assert isinstance(pos, tuple)
    assert pos == pytest.approx((0.0, 1.0, 0.0), abs=1e-12)
    assert scene.calls == [(0, 90, 0.0)]


def test_map_to_scene_position_before_ready():
    assert map_to_scene_position(FakeScene(ready=False), GeoPoint(0, 0)) is None
    assert map_to_scene_position(None, GeoPoint(0, 0)) is None


@pytest.mark.parametrize("start, end", [
    (None, (0.0, 0.0, 1.0)),
    ((0.0, 0.0, 1.0), None),
    (None, None),
])
def test_build_beam_geometry_missing_endpoint(start, end):
    assert build_beam_geometry(start, end, 0.01, '#00ffff', 0.9) is None


def test_build_beam_geometry_tube_spans_chord():
    beam = build_beam_geometry((1.0, 0.0, 0.0), (-1.0, 0.0, 0.0), 0.01, '#00ffff', 0.9)

    assert beam is not None
    assert beam.color == '#00ffff'
    assert beam.opacity == 0.9
    assert beam.lighting is False

    xmin, xmax, ymin, ymax, zmin, zmax = beam.mesh.bounds
    assert xmin == pytest.approx(-1.0)
    assert xmax == pytest.approx(1.0)
    # a straight chord through the centre, only as thick as the tube
    assert max(abs(ymin), abs(ymax), abs(zmin), abs(zmax)) <= 0.01 + 1e-6
    assert beam.mesh.n_points > 0


def test_beam_factory_returns_fresh_mesh_each_call():
    make_beam = beam_factory(FakeScene(), radius=0.01)
    spec = BeamSpec(GeoPoint(48.85, 2.35), compute_antipode(GeoPoint(48.85, 2.35)))

    first = make_beam(spec)
    second = make_beam(spec)

    assert first is not None and second is not None
    assert first.mesh is not second.mesh
    length = math.dist(first.mesh.bounds[0::2], first.mesh.bounds[1::2])
    assert length >= 2.0


def test_beam_factory_skips_when_scene_not_ready():
    make_beam = beam_factory(FakeScene(ready=False))
    assert make_beam(BeamSpec(GeoPoint(0, 0), GeoPoint(0, 180))) is None
