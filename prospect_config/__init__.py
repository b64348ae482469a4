"""
prospect_config -- single public entrypoint for import configuration.

Responsibility:
    ``get_import_config()`` is the ONLY way runtime code obtains the field
    catalogs, header aliases, field defaults and reader settings. YAML loading
    lives in ``prospect_config.loader``.

Architecture position:
    Sits above ``prospect_kernel`` and below ``prospect_ingestion``. The
    kernel MUST NEVER import from ``prospect_config``.

Failure modes:
    - ``FileNotFoundError`` -- no catalog file in the requested directory.
    - ``ConfigError`` -- structural validation failures.

Audit relevance:
    Every fresh load emits an ``import_config_loaded`` log entry with the
    source path and checksum so each import run is traceable to the exact
    catalog that governed its mapping and validation.
"""

from __future__ import annotations

import threading
from pathlib import Path

from prospect_config.loader import CATALOG_FILENAME, load_import_config
from prospect_config.schema import (
    EntityCatalogDef,
    FieldDef,
    FieldType,
    ImportConfig,
    ImportSettingsDef,
    ParentResolutionDef,
)
from prospect_kernel.logging_config import get_logger

_logger = get_logger("config")

_DEFAULT_CONFIG_DIR = Path(__file__).parent / "sets" / "default"

_cache: dict[Path, ImportConfig] = {}
_cache_lock = threading.Lock()


def get_import_config(config_dir: Path | None = None) -> ImportConfig:
    """The ONLY public configuration entrypoint.

    Loads ``import_catalogs.yaml`` from ``config_dir`` (default: the bundled
    ``sets/default``) once per directory and caches the result.
    """
    path = (Path(config_dir) if config_dir else _DEFAULT_CONFIG_DIR).resolve() / CATALOG_FILENAME
    with _cache_lock:
        cached = _cache.get(path)
        if cached is not None:
            return cached
        config = load_import_config(path)
        _cache[path] = config
    _logger.info(
        "import_config_loaded",
        extra={
            "source": str(path),
            "checksum": config.checksum,
            "entity_kinds": list(config.entity_kinds),
        },
    )
    return config


def clear_config_cache() -> None:
    """Forget cached configs. FOR TESTING ONLY."""
    with _cache_lock:
        _cache.clear()


__all__ = [
    "CATALOG_FILENAME",
    "get_import_config",
    "clear_config_cache",
    "EntityCatalogDef",
    "FieldDef",
    "FieldType",
    "ImportConfig",
    "ImportSettingsDef",
    "ParentResolutionDef",
]
