"""
Search orchestration: place name -> antipode -> globe state.

One SearchOrchestrator owns the SearchState shown on the globe. Every
completed search swaps in a brand new state object, so listeners never see
markers from one search next to a beam from another.
"""

import enum
import logging
from typing import Callable, List, Optional

from coord import compute_antipode
from geocode import NetworkError, NotFound
from models import BeamSpec, Marker, PlaceInfo, PlaceResult, SearchState
from settings import (ANTIPODE_COLOR, ANTIPODE_LABEL, CAMERA_ALTITUDE,
                      CAMERA_DURATION_MS, CAMERA_LATITUDE, MARKER_SIZE,
                      ORIGIN_COLOR, ORIGIN_LABEL)

logger = logging.getLogger(__name__)


class SearchPhase(enum.Enum):
    IDLE = "idle"
    GEOCODING = "geocoding"
    ANTIPODE_COMPUTED = "antipode_computed"
    REVERSE_GEOCODING = "reverse_geocoding"
    COMPLETE = "complete"
    FAILED = "failed"


def build_state(query: str, origin: PlaceResult, antipode: PlaceResult) -> SearchState:
    markers = (
        Marker(origin.point, MARKER_SIZE, ORIGIN_COLOR, ORIGIN_LABEL),
        Marker(antipode.point, MARKER_SIZE, ANTIPODE_COLOR, ANTIPODE_LABEL),
    )
    beam = (BeamSpec(start=origin.point, end=antipode.point),)
    return SearchState(query=query, markers=markers, beam=beam,
                       info=PlaceInfo(origin=origin, antipode=antipode))


class SearchOrchestrator:
    def __init__(self, client, camera=None, notify: Callable[[str], None] = print,
                 camera_longitude_offset: float = 0.0,
                 camera_altitude: float = CAMERA_ALTITUDE,
                 camera_duration_ms: int = CAMERA_DURATION_MS):
        self.client = client
        self.camera = camera
        self.notify = notify
        self.camera_longitude_offset = camera_longitude_offset
        self.camera_altitude = camera_altitude
        self.camera_duration_ms = camera_duration_ms

        self._state = SearchState()
        self._phase = SearchPhase.IDLE
        self._generation = 0
        self._listeners: List[Callable[[SearchState], None]] = []

    @property
    def state(self) -> SearchState:
        return self._state

    @property
    def phase(self) -> SearchPhase:
        return self._phase

    def subscribe(self, listener: Callable[[SearchState], None]):
        self._listeners.append(listener)

    def _is_current(self, generation: int) -> bool:
        if generation != self._generation:
            logger.debug("dropping superseded search #%d", generation)
            return False
        return True

    def _fail(self, message: str):
        self._phase = SearchPhase.FAILED
        self.notify(message)
        self._phase = SearchPhase.IDLE

    async def search(self, query: str) -> Optional[SearchState]:
        """
        Run one search to completion.

        Returns the new state, or None if the query was blank, the lookup
        failed, or a newer search superseded this one.
        """
        query = query.strip()
        if not query:
            return None

        self._generation += 1
        generation = self._generation
        self._phase = SearchPhase.GEOCODING

        try:
            origin = await self.client.forward_geocode(query)
        except NotFound:
            if self._is_current(generation):
                self._fail("City not found!")
            return None
        except NetworkError as e:
            logger.error("API Error: %s", e)
            if self._is_current(generation):
                self._fail(f"Lookup failed: {e}")
            return None

        if not self._is_current(generation):
            return None

        antipode_point = compute_antipode(origin.point)
        self._phase = SearchPhase.ANTIPODE_COMPUTED

        self._phase = SearchPhase.REVERSE_GEOCODING
        try:
            antipode_name = await self.client.reverse_geocode(antipode_point)
        except NetworkError as e:
            logger.error("API Error: %s", e)
            if self._is_current(generation):
                self._fail(f"Lookup failed: {e}")
            return None

        if not self._is_current(generation):
            return None

        state = build_state(query, origin, PlaceResult(antipode_point, antipode_name))
        self._state = state
        self._phase = SearchPhase.COMPLETE
        for listener in self._listeners:
            listener(state)

        if self.camera is not None:
            self.camera.transition_camera(
                CAMERA_LATITUDE,
                origin.point.longitude + self.camera_longitude_offset,
                self.camera_altitude,
                self.camera_duration_ms,
            )
        return state
