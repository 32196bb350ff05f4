import logging
import os
import pytest
from pix2att.config import get_settings

def pytest_configure(config):
    config.addinivalue_line("markers", "gdal: requiere GDAL/OGR instalado")
    config.addinivalue_line("markers", "slow: tests lentos")

@pytest.fixture(autouse=True)
def _reset_settings_cache(monkeypatch):
    # evita fuga de estado entre tests (entorno y caché)
    for k in list(os.environ):
        if k.startswith("PIX2ATT_"):
            monkeypatch.delenv(k, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
    # setup_logging() deja handlers sobre streams ya capturados
    pkg = logging.getLogger("pix2att")
    for h in list(pkg.handlers):
        pkg.removeHandler(h)

def pytest_collection_modifyitems(items):
    for item in items:
        if "integration" in str(item.fspath) and os.environ.get("CI") == "true":
            # marca como slow en CI si quieres escalonar
            item.add_marker(pytest.mark.slow)
