"""
Forward and reverse geocoding against OpenStreetMap Nominatim.

Lookups use a blocking requests session run in a worker thread, so callers
can await them from the event loop that drives the globe.
"""

import asyncio
import logging

import requests

from models import GeoPoint, PlaceResult
from settings import (NOMINATIM_URL, REQUEST_TIMEOUT, REVERSE_ZOOM,
                      UNRESOLVED_LABEL, USER_AGENT)

logger = logging.getLogger(__name__)


class GeocodeError(Exception):
    """Base class for lookup failures."""


class NotFound(GeocodeError):
    """The forward lookup matched nothing."""


class NetworkError(GeocodeError):
    """Transport failure or an unreadable response."""


class GeocodeClient:
    def __init__(self, base_url=NOMINATIM_URL, session=None, user_agent=USER_AGENT,
                 timeout=REQUEST_TIMEOUT, reverse_zoom=REVERSE_ZOOM):
        self.base_url = base_url.rstrip('/')
        self.session = session or requests.Session()
        self.session.headers.update({'User-Agent': user_agent})
        self.timeout = timeout
        self.reverse_zoom = reverse_zoom

    def _get_json(self, endpoint, params):
        url = f"{self.base_url}/{endpoint}"
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except (requests.RequestException, ValueError) as e:
            raise NetworkError(f"{endpoint} lookup failed: {e}") from e

    async def forward_geocode(self, query: str) -> PlaceResult:
        """
        Resolve a place name to its first match.

        Raises:
            NotFound: the service returned no matches
            NetworkError: transport or parse failure
        """
        params = {'format': 'json', 'q': query, 'limit': 1}
        data = await asyncio.to_thread(self._get_json, 'search', params)

        if not isinstance(data, list):
            raise NetworkError(f"unexpected search response: {type(data).__name__}")
        if not data:
            raise NotFound(query)

        first = data[0]
        try:
            point = GeoPoint(latitude=float(first['lat']), longitude=float(first['lon']))
            name = str(first['display_name'])
        except (KeyError, TypeError, ValueError) as e:
            raise NetworkError(f"malformed search result: {e}") from e

        logger.debug("forward %r -> %s (%s)", query, point, name)
        return PlaceResult(point=point, display_name=name)

    async def reverse_geocode(self, point: GeoPoint) -> str:
        """
        Name the area around a coordinate.

        Open ocean usually has no name; that yields UNRESOLVED_LABEL
        rather than an error.
        """
        params = {
            'format': 'json',
            'lat': point.latitude,
            'lon': point.longitude,
            'zoom': self.reverse_zoom,
        }
        data = await asyncio.to_thread(self._get_json, 'reverse', params)

        if not isinstance(data, dict):
            raise NetworkError(f"unexpected reverse response: {type(data).__name__}")

        name = data.get('display_name')
        if not name:
            logger.debug("reverse %s -> no name (%s)", point, data.get('error'))
            return UNRESOLVED_LABEL
        return str(name)
