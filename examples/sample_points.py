# =============================
# FILE: examples/sample_points.py
# =============================
"""
Uso mínimo sin CLI: abre raster y capa con los adapters GDAL y corre el servicio.
Equivale a `pix2att -gt 500 dem.tif sitios.gpkg sitios elev`.
"""
from pix2att.composition.di import build_settings, open_sampling_service
from pix2att.contracts.core import SampleRequest
from pix2att.logging_config import setup_logging


if __name__ == "__main__":
    settings = build_settings(group_transactions=500, on_error="skip", log_level="INFO")
    setup_logging(settings.log_level)
    request = SampleRequest(raster="/ruta/dem.tif", vector="/ruta/sitios.gpkg",
                            layer="sitios", attribute="elev")

    with open_sampling_service(request, settings) as svc:
        report = svc.run(request.attribute)

    print(report.summary())
    for f in report.failures[:10]:
        print(" -", f.fid, f.stage.value, f.message)
