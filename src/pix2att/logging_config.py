# src/pix2att/logging_config.py
"""
Configuración de logging de pix2att.

Un único handler de consola sobre el logger raíz del paquete; los módulos
obtienen su logger con `get_module_logger(__name__)`.
"""
from __future__ import annotations

import logging
from typing import Optional

ROOT_LOGGER = "pix2att"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(log_level: str = "WARNING", stream=None,
                  log_format: Optional[str] = None) -> logging.Logger:
    """
    Configura y devuelve el logger raíz del paquete.

    Parameters
    ----------
    log_level : str
        DEBUG, INFO, WARNING, ERROR o CRITICAL.
    stream : file-like, optional
        Destino del handler de consola (stderr por defecto).
    log_format : str, optional
        Formato de los registros; por defecto `LOG_FORMAT`.
    """
    numeric_level = getattr(logging, str(log_level).upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Nivel de log inválido: {log_level}")

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(numeric_level)

    # reconfigurable: reemplaza el handler previo en lugar de duplicarlo
    for h in list(logger.handlers):
        if getattr(h, "_pix2att", False):
            logger.removeHandler(h)

    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter(log_format or LOG_FORMAT))
    handler._pix2att = True  # type: ignore[attr-defined]
    logger.addHandler(handler)

    logger.debug("Logging inicializado en nivel %s", log_level)
    return logger


def get_module_logger(module_name: str) -> logging.Logger:
    """Logger hijo de `pix2att` para un módulo."""
    if module_name == ROOT_LOGGER or module_name.startswith(ROOT_LOGGER + "."):
        return logging.getLogger(module_name)
    return logging.getLogger(f"{ROOT_LOGGER}.{module_name}")
