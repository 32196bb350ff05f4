# src/pix2att/cli.py
from __future__ import annotations

"""
CLI de pix2att: muestrea un raster en los puntos de una capa vectorial y
guarda el valor en un atributo nuevo.

  pix2att [-b band] [-p] [-gt n] raster vector layer attribute

Ejemplos rápidos:
  pix2att dem.tif sitios.gpkg sitios elev
  pix2att -b 2 -p -gt 500 landcover.tif pozos.gpkg pozos clase
  pix2att --on-error skip --reuse-field dem.tif sitios.shp sitios elev

Códigos de salida: 0 éxito, 1 uso inválido o precondición fallida.
"""

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

import yaml

from .composition.di import build_settings, open_sampling_service
from .contracts.core import SampleRequest
from .contracts.errors import Pix2AttError
from .logging_config import get_module_logger, setup_logging

logger = get_module_logger(__name__)

# ----------------------
# Utilidades locales
# ----------------------

class _Parser(argparse.ArgumentParser):
    """argparse con exit code 1 (no 2) en errores de uso."""

    def error(self, message: str):  # type: ignore[override]
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _positive_int(v: str) -> int:
    n = int(v)
    if n < 1:
        raise argparse.ArgumentTypeError(f"se esperaba un entero >= 1: {v}")
    return n


def _non_negative_int(v: str) -> int:
    n = int(v)
    if n < 0:
        raise argparse.ArgumentTypeError(f"se esperaba un entero >= 0: {v}")
    return n


def _flag(v: bool) -> Optional[bool]:
    # store_true ausente -> None para no pisar YAML/entorno
    return True if v else None

# ----------------------
# Parser
# ----------------------

def _build_parser() -> argparse.ArgumentParser:
    p = _Parser(prog="pix2att",
                description="Escribe en un atributo nuevo el valor del raster bajo cada punto")
    p.add_argument("raster", help="raster de entrada (ruta o cadena de conexión, solo lectura)")
    p.add_argument("vector", help="dataset vectorial a actualizar (ruta o cadena de conexión)")
    p.add_argument("layer", help="nombre de la capa de puntos")
    p.add_argument("attribute", help="nombre del campo nuevo")
    p.add_argument("-b", "--band", type=_positive_int, default=None,
                   help="banda 1-based a muestrear (default 1)")
    p.add_argument("-p", "--progress", action="store_true", help="muestra progreso en consola")
    p.add_argument("-gt", "--group-transactions", dest="group_transactions",
                   type=_non_negative_int, default=None,
                   help="updates por transacción (default 1; 0 desactiva transacciones explícitas)")
    p.add_argument("--on-error", choices=("abort", "skip"), default=None,
                   help="qué hacer si falla una feature (default abort)")
    p.add_argument("--reuse-field", action="store_true",
                   help="rellena el campo si ya existe en lugar de fallar")
    p.add_argument("--nodata-null", action="store_true",
                   help="escribe NULL cuando el pixel vale nodata")
    p.add_argument("--config", type=Path, default=None, help="YAML con opciones (ver Settings)")
    p.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ERROR")
    return p


def main(argv: Sequence[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    parser = _build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as ex:
        return int(ex.code or 0)

    try:
        settings = build_settings(
            args.config,
            band=args.band,
            group_transactions=args.group_transactions,
            progress=_flag(args.progress),
            on_error=args.on_error,
            reuse_existing_field=_flag(args.reuse_field),
            nodata_as_null=_flag(args.nodata_null),
            log_level=args.log_level,
        )
        request = SampleRequest(raster=args.raster, vector=args.vector,
                                layer=args.layer, attribute=args.attribute)
    except (ValueError, OSError, yaml.YAMLError) as ex:
        print(f"[ERROR] Entrada inválida: {ex}", file=sys.stderr)
        return 1

    setup_logging(settings.log_level)
    try:
        with open_sampling_service(request, settings) as svc:
            report = svc.run(request.attribute)
    except KeyboardInterrupt:
        return 130
    except Pix2AttError as ex:
        print(f"[ERROR] {ex}", file=sys.stderr)
        return 1
    except Exception as ex:
        logger.debug("Fallo inesperado", exc_info=True)
        print(f"[ERROR] {ex}", file=sys.stderr)
        return 1

    logger.info("%s en %.2fs", report.summary(), report.duration_s or 0.0)
    if report.failures:
        logger.warning("%d features omitidas (on_error=skip)", report.features_skipped)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
