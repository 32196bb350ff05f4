# tests/unit/test_cli.py
from contextlib import contextmanager

import pytest

from pix2att import cli
from pix2att.contracts.core import FieldKind, SampleReport
from pix2att.contracts.errors import DatasetOpenError, LayerNotFoundError


class _FakeService:
    def __init__(self, report=None, exc=None):
        self.report = report
        self.exc = exc
        self.ran = []

    def run(self, attribute):
        self.ran.append(attribute)
        if self.exc is not None:
            raise self.exc
        return self.report


@pytest.fixture
def wiring(monkeypatch):
    """Sustituye open_sampling_service y captura request/settings."""
    calls = {}

    def install(service=None, open_exc=None):
        @contextmanager
        def fake_open(request, settings):
            calls["request"] = request
            calls["settings"] = settings
            if open_exc is not None:
                raise open_exc
            yield service
        monkeypatch.setattr(cli, "open_sampling_service", fake_open)
        return calls
    return install


def _report(**kw):
    return SampleReport(attribute="elev", field_kind=FieldKind.REAL, **kw).end_now()


@pytest.mark.parametrize("argv", [[], ["a.tif"], ["a.tif", "b.gpkg", "pts"]])
def test_missing_positionals_is_usage_error(argv, wiring, capsys):
    calls = wiring(service=_FakeService(_report()))
    assert cli.main(argv) == 1
    assert "request" not in calls
    assert "usage" in capsys.readouterr().err

def test_flags_reach_settings(wiring):
    svc = _FakeService(_report(features_total=2, features_updated=2))
    calls = wiring(service=svc)
    rc = cli.main(["-b", "2", "-p", "-gt", "50", "--on-error", "skip",
                   "--reuse-field", "dem.tif", "pts.gpkg", "sitios", "elev"])
    assert rc == 0
    s = calls["settings"]
    assert (s.band, s.progress, s.group_transactions, s.on_error) == (2, True, 50, "skip")
    assert s.reuse_existing_field and not s.nodata_as_null
    req = calls["request"]
    assert (req.raster, req.vector, req.layer, req.attribute) == ("dem.tif", "pts.gpkg", "sitios", "elev")
    assert svc.ran == ["elev"]

def test_defaults_without_flags(wiring):
    calls = wiring(service=_FakeService(_report()))
    assert cli.main(["dem.tif", "pts.gpkg", "sitios", "elev"]) == 0
    s = calls["settings"]
    assert (s.band, s.group_transactions, s.progress) == (1, 1, False)

@pytest.mark.parametrize("bad", [["-b", "0"], ["-gt", "-1"], ["-b", "x"]])
def test_invalid_option_values(bad, wiring):
    wiring(service=_FakeService(_report()))
    assert cli.main(bad + ["dem.tif", "pts.gpkg", "sitios", "elev"]) == 1

@pytest.mark.parametrize("exc", [
    DatasetOpenError("nope.tif", "raster"),
    LayerNotFoundError("sitios", "pts.gpkg"),
])
def test_open_failures_exit_1(exc, wiring, capsys):
    wiring(open_exc=exc)
    assert cli.main(["nope.tif", "pts.gpkg", "sitios", "elev"]) == 1
    assert "[ERROR]" in capsys.readouterr().err

def test_run_failure_exit_1(wiring, capsys):
    wiring(service=_FakeService(exc=RuntimeError("boom")))
    assert cli.main(["dem.tif", "pts.gpkg", "sitios", "elev"]) == 1
    assert "boom" in capsys.readouterr().err

def test_blank_attribute_is_usage_error(wiring):
    calls = wiring(service=_FakeService(_report()))
    assert cli.main(["dem.tif", "pts.gpkg", "sitios", " "]) == 1
    assert "request" not in calls
