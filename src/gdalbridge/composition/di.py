from __future__ import annotations
import logging
from pathlib import Path
import yaml

from ..config import Settings
from ..adapters.gdal_native import get_gdal

logger = logging.getLogger(__name__)

def load_settings_from_yaml(path: Path) -> Settings:
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: se esperaba un mapeo YAML")
    return Settings(**data)

def build_settings(project_root: Path) -> Settings:
    cfg = (project_root / "config" / "settings.yaml").resolve()
    if cfg.exists():
        return load_settings_from_yaml(cfg)
    return Settings()

def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level_no(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

def configure_gdal(settings: Settings) -> None:
    """Aplica `gdal_config` (GDAL_CACHEMAX, GDAL_NUM_THREADS, ...) al runtime."""
    if not settings.gdal_config:
        return
    g = get_gdal()
    for key, value in settings.gdal_config.items():
        g.SetConfigOption(key, str(value))
        logger.debug("GDAL config %s=%s", key, value)
