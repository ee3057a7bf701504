import math
from typing import Callable, Optional, Tuple

import numpy as np
import pyvista as pv

from models import BeamSpec, GeoPoint, MeshDescriptor
from settings import BEAM_COLOR, BEAM_OPACITY, BEAM_RADIUS, BEAM_SIDES, GLOBE_RADIUS

Vec3 = Tuple[float, float, float]


def compute_antipode(point: GeoPoint) -> GeoPoint:
    """Return the point diametrically opposite on the sphere."""
    lon = point.longitude + 180.0
    if lon > 180.0:
        lon -= 360.0
    return GeoPoint(latitude=-point.latitude, longitude=lon)


def geographic_to_cartesian(lat: float, lon: float, radius: float = GLOBE_RADIUS,
                            altitude: float = 0.0) -> np.ndarray:
    """
    Convert geographic coordinates to 3D Cartesian (Z up, prime meridian on +X).

    Args:
        lat: Latitude in degrees
        lon: Longitude in degrees
        radius: Sphere radius
        altitude: Height above the surface, as a fraction of the radius

    Returns:
        3D point (x, y, z)
    """
    lat_rad = math.radians(lat)
    lon_rad = math.radians(lon)
    r = radius * (1 + altitude)

    x = r * math.cos(lat_rad) * math.cos(lon_rad)
    y = r * math.cos(lat_rad) * math.sin(lon_rad)
    z = r * math.sin(lat_rad)

    return np.array([x, y, z])


def cartesian_to_geographic(xyz, radius: float = GLOBE_RADIUS) -> Tuple[float, float, float]:
    """
    Inverse of geographic_to_cartesian.

    Returns:
        (latitude, longitude, altitude) with latitude/longitude in degrees
    """
    x, y, z = (float(c) for c in xyz)
    r = math.sqrt(x * x + y * y + z * z)
    if r == 0:
        return 0.0, 0.0, -1.0
    lat = math.degrees(math.asin(max(-1.0, min(1.0, z / r))))
    lon = math.degrees(math.atan2(y, x))
    return lat, lon, r / radius - 1


def map_to_scene_position(scene, point: GeoPoint, altitude: float = 0.0) -> Optional[Vec3]:
    """
    Ask the globe engine where a geographic point sits in its scene.

    Returns None while the engine has no scene yet.
    """
    if scene is None:
        return None
    pos = scene.project_to_scene(point.latitude, point.longitude, altitude)
    if pos is None:
        return None
    return float(pos[0]), float(pos[1]), float(pos[2])


def build_beam_geometry(start: Optional[Vec3], end: Optional[Vec3],
                        radius: float = BEAM_RADIUS, color: str = BEAM_COLOR,
                        opacity: float = BEAM_OPACITY) -> Optional[MeshDescriptor]:
    """
    Build a straight tube between two scene positions.

    The path is a chord through the globe's interior, not a surface arc.

    Args:
        start: Scene position of the origin, or None if not projected yet
        end: Scene position of the antipode, or None if not projected yet
        radius: Tube radius
        color: Material color
        opacity: Material opacity

    Returns:
        Unlit translucent mesh, or None when either endpoint is missing
    """
    if start is None or end is None:
        return None

    path = pv.Line(start, end, resolution=1)
    tube = path.tube(radius=radius, n_sides=BEAM_SIDES)

    return MeshDescriptor(mesh=tube, color=color, opacity=opacity, lighting=False)


def beam_factory(scene, radius: float = BEAM_RADIUS, color: str = BEAM_COLOR,
                 opacity: float = BEAM_OPACITY) -> Callable[[BeamSpec], Optional[MeshDescriptor]]:
    """Per-datum callback for the engine's custom object layer."""
    def make_beam(beam: BeamSpec) -> Optional[MeshDescriptor]:
        start = map_to_scene_position(scene, beam.start, 0.0)
        end = map_to_scene_position(scene, beam.end, 0.0)
        return build_beam_geometry(start, end, radius, color, opacity)

    return make_beam
