"""
PyVista globe engine.

Renders a textured unit sphere with a lat/lon graticule and exposes the
small surface the rest of the program relies on: projecting lat/lon into
the scene, a point-marker layer, a custom per-datum object layer, an
animated camera, and traversal of the live actors.
"""

import math
import os
import time
from dataclasses import dataclass
from typing import Callable, Iterator, Optional, Sequence, Tuple

import numpy as np
import pyvista as pv
import requests

from coord import cartesian_to_geographic, geographic_to_cartesian
from models import Marker
from settings import (GLOBE_COLOR, GLOBE_RADIUS, GRID_LATITUDES,
                      GRID_LONGITUDE_STEP, GRID_OPACITY, MARKER_ALTITUDE,
                      REQUEST_TIMEOUT, SPHERE_RESOLUTION, TEXTURE_CACHE,
                      TEXTURE_URL, WINDOW_SIZE)

View = Tuple[float, float, float]  # (lat, lon, altitude)


# ============================================================================
# GEOMETRY
# ============================================================================

def create_textured_sphere(radius: float = GLOBE_RADIUS,
                           resolution: int = SPHERE_RESOLUTION) -> pv.PolyData:
    """
    Sphere with equirectangular texture coordinates.

    u runs from lon -180 (0) to lon 180 (1), v from the south pole (0) to
    the north pole (1), matching a standard world image.
    """
    theta = np.linspace(-np.pi, np.pi, resolution)
    phi = np.linspace(0, np.pi, resolution)
    theta_grid, phi_grid = np.meshgrid(theta, phi)

    x = radius * np.sin(phi_grid) * np.cos(theta_grid)
    y = radius * np.sin(phi_grid) * np.sin(theta_grid)
    z = radius * np.cos(phi_grid)

    points = np.column_stack((x.flatten(), y.flatten(), z.flatten()))

    grid = pv.StructuredGrid()
    grid.points = points
    grid.dimensions = [resolution, resolution, 1]

    u = np.linspace(0, 1, resolution)
    v = np.linspace(0, 1, resolution)
    u_grid, v_grid = np.meshgrid(u, v)
    grid.active_texture_coordinates = np.column_stack((u_grid.flatten(), 1 - v_grid.flatten()))

    return grid.extract_surface()


def create_latitude_line(lat: float, radius: float = GLOBE_RADIUS,
                         num_points: int = 200) -> pv.PolyData:
    lat_rad = math.radians(lat)
    circle = pv.Circle(radius=radius * math.cos(lat_rad), resolution=num_points)
    return circle.translate((0, 0, radius * math.sin(lat_rad)))


def create_longitude_line(lon: float, radius: float = GLOBE_RADIUS,
                          num_points: int = 100) -> pv.PolyData:
    """Meridian from the north pole to the south pole."""
    points = [geographic_to_cartesian(lat, lon, radius)
              for lat in np.linspace(90, -90, num_points)]
    return pv.lines_from_points(np.array(points))


def create_marker(marker: Marker, radius: float = GLOBE_RADIUS,
                  altitude: float = MARKER_ALTITUDE) -> pv.PolyData:
    """Short cylinder standing on the surface; size is its angular radius."""
    lat, lon = marker.point.latitude, marker.point.longitude
    normal = geographic_to_cartesian(lat, lon, 1.0)
    center = geographic_to_cartesian(lat, lon, radius, altitude / 2)
    return pv.Cylinder(
        center=center,
        direction=normal,
        radius=radius * math.radians(marker.size),
        height=radius * altitude,
        resolution=24,
    )


def download_texture(url: str, save_path: str) -> Optional[str]:
    if os.path.exists(save_path):
        print(f"Using cached texture: {save_path}")
        return save_path

    print(f"Downloading texture from {url}...")
    try:
        response = requests.get(url, stream=True, timeout=REQUEST_TIMEOUT)
        if response.status_code != 200:
            print(f"Error downloading texture: HTTP {response.status_code}")
            return None
        with open(save_path, 'wb') as f:
            for chunk in response.iter_content(chunk_size=8192):
                f.write(chunk)
    except (requests.RequestException, OSError) as e:
        print(f"Error downloading texture: {e}")
        return None

    print("Texture downloaded successfully")
    return save_path


# ============================================================================
# CAMERA
# ============================================================================

def ease_in_out_quad(t: float) -> float:
    if t < 0.5:
        return 2 * t * t
    return -1 + (4 - 2 * t) * t


def interpolate_view(start: View, end: View, t: float) -> View:
    """Blend two points of view, going the short way round in longitude."""
    k = ease_in_out_quad(max(0.0, min(1.0, t)))
    d_lon = (end[1] - start[1] + 180.0) % 360.0 - 180.0
    lon = start[1] + d_lon * k
    lon = (lon + 180.0) % 360.0 - 180.0
    return (
        start[0] + (end[0] - start[0]) * k,
        lon,
        start[2] + (end[2] - start[2]) * k,
    )


@dataclass
class CameraTween:
    start: View
    end: View
    started: float
    duration: float   # seconds

    def at(self, now: float) -> Tuple[View, bool]:
        t = (now - self.started) / self.duration
        return interpolate_view(self.start, self.end, t), t >= 1.0


# ============================================================================
# ENGINE
# ============================================================================

class GlobeEngine:
    def __init__(self, radius=GLOBE_RADIUS, texture_url=TEXTURE_URL,
                 texture_path=TEXTURE_CACHE, window_size=WINDOW_SIZE,
                 off_screen=False, plotter=None, clock=time.monotonic):
        self.radius = radius
        self.texture_url = texture_url
        self.texture_path = texture_path
        self.window_size = window_size
        self.off_screen = off_screen
        self.clock = clock

        self._plotter = plotter
        self._mounted = False
        self._tween: Optional[CameraTween] = None

        self._points: Tuple[Marker, ...] = ()
        self._point_actors = []
        self._points_dirty = False

        self._custom_data: Tuple = ()
        self._custom_factory: Optional[Callable] = None
        self._custom_actors = []
        self._custom_dirty = False

    @property
    def plotter(self) -> Optional[pv.Plotter]:
        return self._plotter

    @property
    def ready(self) -> bool:
        return self._mounted and self._plotter is not None

    @property
    def closed(self) -> bool:
        if not self._mounted:
            return False
        return getattr(self._plotter, '_closed', False) is True or self._plotter.render_window is None

    @property
    def animating(self) -> bool:
        return self._tween is not None

    def mount(self):
        if self._mounted:
            return
        if self._plotter is None:
            self._plotter = pv.Plotter(window_size=list(self.window_size),
                                       off_screen=self.off_screen)
        plotter = self._plotter
        plotter.set_background('black')

        texture = None
        if self.texture_url:
            texture_path = download_texture(self.texture_url, self.texture_path)
            if texture_path:
                texture = pv.read_texture(texture_path)

        sphere = create_textured_sphere(self.radius)
        if texture is not None:
            plotter.add_mesh(sphere, texture=texture, smooth_shading=True, name='globe')
        else:
            plotter.add_mesh(sphere, color=GLOBE_COLOR, smooth_shading=True, name='globe')

        for i, lat in enumerate(GRID_LATITUDES):
            plotter.add_mesh(
                create_latitude_line(lat, self.radius * 1.001),
                color='red' if lat == 0 else 'yellow',
                opacity=GRID_OPACITY,
                line_width=2,
                style='wireframe',
                name=f'parallel_{i}',
            )
        for i, lon in enumerate(range(-180, 180, GRID_LONGITUDE_STEP)):
            plotter.add_mesh(
                create_longitude_line(lon, self.radius * 1.001),
                color='gray',
                opacity=GRID_OPACITY,
                line_width=2,
                name=f'meridian_{i}',
            )

        plotter.add_text("GLOBE ANTIPODE", position='upper_edge', font_size=18,
                         color='white', name='title')

        # Looking from +X at the prime meridian, north up
        self._set_view((0.0, 0.0, 2.5))

        self._mounted = True
        if not self.off_screen:
            plotter.enable_terrain_style(mouse_wheel_zooms=True)
            plotter.show(title="Globe Antipode", interactive_update=True, auto_close=False)

    def close(self):
        if self._plotter is not None and self._mounted:
            self._plotter.close()
        self._mounted = False
        self._tween = None

    # --- projection & camera -------------------------------------------------

    def project_to_scene(self, lat: float, lon: float, altitude: float = 0.0) -> Optional[np.ndarray]:
        if not self.ready:
            return None
        return geographic_to_cartesian(lat, lon, self.radius, altitude)

    def point_of_view(self) -> Optional[View]:
        if not self.ready:
            return None
        return cartesian_to_geographic(self._plotter.camera.position, self.radius)

    def _set_view(self, view: View):
        lat, lon, altitude = view
        position = geographic_to_cartesian(lat, lon, self.radius, altitude)
        self._plotter.camera_position = [tuple(position), (0, 0, 0), (0, 0, 1)]

    def transition_camera(self, lat: float, lon: float, altitude: float, duration_ms: float):
        """Start moving the camera; returns immediately."""
        if not self.ready:
            return
        target = (lat, lon, altitude)
        if duration_ms <= 0:
            self._tween = None
            self._set_view(target)
            return
        self._tween = CameraTween(start=self.point_of_view(), end=target,
                                  started=self.clock(), duration=duration_ms / 1000.0)

    # --- data layers ---------------------------------------------------------

    def set_points(self, markers: Sequence[Marker]):
        self._points = tuple(markers)
        self._points_dirty = True

    def set_custom_layer(self, data: Sequence, factory: Callable):
        self._custom_data = tuple(data)
        self._custom_factory = factory
        self._custom_dirty = True

    def set_text(self, text: str, name: str = 'info'):
        if not self.ready:
            return
        self._plotter.add_text(text, position='lower_edge', font_size=12,
                               color='white', name=name)

    def _rebuild_points(self):
        for actor in self._point_actors:
            self._plotter.remove_actor(actor)
        self._point_actors = []

        for i, marker in enumerate(self._points):
            actor = self._plotter.add_mesh(create_marker(marker, self.radius),
                                           color=marker.color, name=f'point_{i}',
                                           reset_camera=False)
            self._point_actors.append(actor)
            if marker.label:
                label_pos = geographic_to_cartesian(marker.point.latitude,
                                                    marker.point.longitude,
                                                    self.radius, MARKER_ALTITUDE * 2)
                label = self._plotter.add_point_labels(
                    [label_pos], [marker.label], text_color=marker.color,
                    show_points=False, shape_opacity=0.3, font_size=14,
                    name=f'point_label_{i}', reset_camera=False)
                self._point_actors.append(label)
        self._points_dirty = False

    def _rebuild_custom(self):
        for actor in self._custom_actors:
            self._plotter.remove_actor(actor)
        self._custom_actors = []

        pending = False
        for i, datum in enumerate(self._custom_data):
            obj = self._custom_factory(datum)
            if obj is None:
                pending = True
                continue
            actor = self._plotter.add_mesh(obj.mesh, color=obj.color, opacity=obj.opacity,
                                           lighting=obj.lighting, name=f'custom_{i}',
                                           reset_camera=False)
            self._custom_actors.append(actor)
        # Retry on the next tick if the factory could not build yet
        self._custom_dirty = pending

    # --- scene graph & render loop -------------------------------------------

    def traverse(self) -> Iterator:
        if not self.ready:
            return iter(())
        return iter(list(self._plotter.renderer.actors.values()))

    def tick(self):
        if not self.ready:
            return
        if self._tween is not None:
            view, done = self._tween.at(self.clock())
            self._set_view(view)
            if done:
                self._tween = None
        if self._points_dirty:
            self._rebuild_points()
        if self._custom_dirty and self._custom_factory is not None:
            self._rebuild_custom()

        if self.off_screen:
            self._plotter.render()
        else:
            self._plotter.update()

    def screenshot(self, path: str):
        if self.ready:
            self._plotter.screenshot(path)
