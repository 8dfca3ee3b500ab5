import os
from types import SimpleNamespace

import pytest
from gdalbridge.config import get_settings
from gdalbridge.adapters import gdal_native
from tests.factories import FakeGdal, FakeOGR, FakeOSR

def pytest_configure():
    # nivel de log estable en los tests
    os.environ.setdefault("GDALBRIDGE_LOG_LEVEL", "WARNING")

@pytest.fixture(autouse=True)
def _reset_settings_cache():
    # evita fuga de estado entre tests
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()

@pytest.fixture
def fake_native(monkeypatch):
    """Sustituye osgeo.{gdal,ogr,osr} por fakes en gdal_native."""
    fakes = SimpleNamespace(gdal=FakeGdal(), ogr=FakeOGR(), osr=FakeOSR())
    monkeypatch.setattr(gdal_native, "_HAS_GDAL", True)
    monkeypatch.setattr(gdal_native, "_exceptions_enabled", False)
    monkeypatch.setattr(gdal_native, "gdal", fakes.gdal)
    monkeypatch.setattr(gdal_native, "ogr", fakes.ogr)
    monkeypatch.setattr(gdal_native, "osr", fakes.osr)
    return fakes

def pytest_collection_modifyitems(items):
    for item in items:
        if "integration" in item.keywords and os.environ.get("CI") == "true":
            # marca como slow en CI si quieres escalonar
            item.add_marker(pytest.mark.slow)
