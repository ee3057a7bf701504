import os
import sys

import pytest

# Modules live at the repository root
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from models import GeoPoint, PlaceResult  # noqa: E402


@pytest.fixture
def paris():
    return PlaceResult(
        point=GeoPoint(48.8534951, 2.3483915),
        display_name="Paris, Île-de-France, France métropolitaine, France",
    )
