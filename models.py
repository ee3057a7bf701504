"""Value types shared by the search pipeline and the globe."""

from dataclasses import dataclass
from typing import Any, Optional, Tuple


@dataclass(frozen=True)
class GeoPoint:
    latitude: float
    longitude: float

    def __post_init__(self):
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"latitude out of range: {self.latitude}")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"longitude out of range: {self.longitude}")


@dataclass(frozen=True)
class PlaceResult:
    point: GeoPoint
    display_name: str

    @property
    def short_name(self) -> str:
        """First component of the display name, e.g. 'Paris'."""
        return self.display_name.split(',')[0].strip()


@dataclass(frozen=True)
class PlaceInfo:
    origin: PlaceResult
    antipode: PlaceResult


@dataclass(frozen=True)
class Marker:
    point: GeoPoint
    size: float
    color: str
    label: str


@dataclass(frozen=True)
class BeamSpec:
    start: GeoPoint
    end: GeoPoint


@dataclass(frozen=True)
class MeshDescriptor:
    """A renderable mesh plus the material the engine should give it."""
    mesh: Any                   # pyvista.PolyData
    color: str
    opacity: float
    lighting: bool = True


@dataclass(frozen=True)
class SearchState:
    query: str = ""
    markers: Tuple[Marker, ...] = ()
    beam: Tuple[BeamSpec, ...] = ()
    info: Optional[PlaceInfo] = None
