# src/gdalbridge/config.py
from __future__ import annotations

import logging
from functools import lru_cache
from typing import Dict, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .contracts.geo import CRSRef

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class Settings(BaseSettings):
    """
    Config del binding. No toca disco ni GDAL.
    La aplicación de `gdal_config` al runtime la hace composition/di.py.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="GDALBRIDGE_",
        env_nested_delimiter="__",
        extra="forbid",
        frozen=True,
    )

    # --- destinos en memoria de las utilidades batch ---
    memory_raster_format: str = "MEM"
    # None -> se detecta: "MEM" si el driver MEM soporta vector, si no "Memory"
    memory_vector_format: Optional[str] = None

    # --- runtime GDAL ---
    gdal_config: Dict[str, str] = Field(default_factory=dict)  # p.ej. {"GDAL_NUM_THREADS": "ALL_CPUS"}

    # --- misc ---
    log_level: str = "WARNING"
    # Importante: str para que pydantic-settings NO intente json.loads
    default_crs: str = "EPSG:4326"

    # ----------------------------
    # Normalizadores / validadores
    # ----------------------------
    @field_validator("memory_raster_format", mode="before")
    @classmethod
    def _non_empty_format(cls, v: str) -> str:
        v2 = str(v).strip()
        if not v2:
            raise ValueError("memory_raster_format no puede ser vacío")
        return v2

    @field_validator("memory_vector_format", mode="before")
    @classmethod
    def _blank_is_auto(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v2 = str(v).strip()
        return v2 or None

    @field_validator("log_level", mode="before")
    @classmethod
    def _valid_level(cls, v: str) -> str:
        v2 = str(v).strip().upper()
        if v2 not in _LOG_LEVELS:
            raise ValueError(f"log_level inválido: {v}")
        return v2

    @field_validator("default_crs", mode="before")
    @classmethod
    def _non_empty_crs(cls, v: str) -> str:
        v2 = str(v).strip()
        if not v2:
            raise ValueError("default_crs no puede ser vacío")
        return v2

    def default_crs_ref(self) -> CRSRef:
        return CRSRef.parse(self.default_crs)

    def log_level_no(self) -> int:
        return logging.getLevelName(self.log_level)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Instancia cacheada. Para tests, recuerda limpiar:
        get_settings.cache_clear()
    """
    return Settings()
