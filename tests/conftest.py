import os

import pytest

from solar_raster.raster import RenderSettings
from solar_raster.vecmath import Vec3

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


@pytest.fixture
def small_settings() -> RenderSettings:
    return RenderSettings(64, 64)


@pytest.fixture
def front_light_settings() -> RenderSettings:
    return RenderSettings(64, 64, light_direction=Vec3(0.0, 0.0, 1.0))
