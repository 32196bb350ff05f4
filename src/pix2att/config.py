# src/pix2att/config.py
from __future__ import annotations

import logging
from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

OnError = Literal["abort", "skip"]

class Settings(BaseSettings):
    """
    Config unificada del muestreo. No toca disco.
    Debe ser construida y provista por composition/di.py (CLI).
    Prioridad: argumentos CLI > YAML (--config) > entorno PIX2ATT_* > defaults.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="PIX2ATT_",
        extra="ignore",                 # claves ajenas del .env; el YAML se valida en di.py
        frozen=True,
    )

    # --- muestreo ---
    band: int = Field(1, ge=1)                       # 1-based
    group_transactions: int = Field(1, ge=0)          # 0 -> sin transacciones explícitas
    nodata_as_null: bool = False

    # --- esquema ---
    reuse_existing_field: bool = False

    # --- ejecución ---
    progress: bool = False
    on_error: OnError = "abort"
    log_level: str = "WARNING"

    # ----------------------------
    # Normalizadores / validadores
    # ----------------------------
    @field_validator("log_level", mode="before")
    @classmethod
    def _valid_level(cls, v: str) -> str:
        v2 = str(v).strip().upper()
        if not isinstance(logging.getLevelName(v2), int):
            raise ValueError(f"log_level inválido: {v}")
        return v2

    @field_validator("on_error", mode="before")
    @classmethod
    def _lower(cls, v: str) -> str:
        return str(v).strip().lower()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Instancia cacheada. Úsala SOLO desde composition/di.py o CLI.
    Prohibido usarla en services/. Para tests, recuerda limpiar:
        get_settings.cache_clear()
    """
    return Settings()
