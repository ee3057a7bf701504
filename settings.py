"""Shared constants for the antipode globe."""


# ============================================================================
# CONFIGURATION
# ============================================================================

# Geocoding service (OpenStreetMap Nominatim)
NOMINATIM_URL = "https://nominatim.openstreetmap.org"
USER_AGENT = "antipode-globe/0.1 (python-requests)"
REQUEST_TIMEOUT = 10.0       # seconds
REVERSE_ZOOM = 10            # coarse enough to name regions and oceans
UNRESOLVED_LABEL = "Ocean / Unknown Area"

# Globe geometry
GLOBE_RADIUS = 1.0
SPHERE_RESOLUTION = 200
GLOBE_COLOR = '#1a1a2e'      # used when the texture is unavailable
TEXTURE_URL = "https://unpkg.com/three-globe/example/img/earth-night.jpg"
TEXTURE_CACHE = "earth_night.jpg"

# Graticule
GRID_LATITUDES = [-60, -30, 0, 30, 60]
GRID_LONGITUDE_STEP = 30
GRID_OPACITY = 0.35

# Markers
MARKER_SIZE = 0.5            # angular radius in degrees
MARKER_ALTITUDE = 0.02       # fraction of globe radius
ORIGIN_COLOR = '#ff0055'
ORIGIN_LABEL = "Start"
ANTIPODE_COLOR = '#00ffff'
ANTIPODE_LABEL = "Antipode"

# Beam
BEAM_RADIUS = 0.004
BEAM_SIDES = 8
BEAM_COLOR = '#00ffff'
BEAM_OPACITY = 0.9

# Camera
CAMERA_LATITUDE = 0.0
CAMERA_ALTITUDE = 2.5        # globe radii above the surface
CAMERA_DURATION_MS = 2000
SIDE_VIEW_OFFSET = -90.0     # degrees, shows the beam side-on

# Scene post-processing
GLASS_DELAY = 1.0            # seconds after mount
GLASS_OPACITY = 0.5

# Window
WINDOW_SIZE = (1600, 1600)
FRAME_INTERVAL = 1 / 30      # seconds between render ticks
PROMPT = "city> "
