"""
Configuration Loader (``prospect_config.loader``).

Responsibility
--------------
Loads the import catalog YAML and parses it into typed
``prospect_config.schema`` dataclass instances. Runtime callers use
``prospect_config.get_import_config()``; this module is the parsing layer.

Invariants enforced
-------------------
* Every parsed object is a frozen dataclass from ``schema.py``.
* Malformed entries raise ``ConfigError`` naming the offending key; there are
  no silent defaults for required keys (``name``, ``entity_kind``, ``fields``).
* ``compute_checksum`` produces a deterministic SHA-256 of the parsed data.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Structurally invalid content  -> ``ConfigError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from prospect_config.schema import (
    EntityCatalogDef,
    FieldDef,
    FieldType,
    ImportConfig,
    ImportSettingsDef,
    ParentResolutionDef,
)
from prospect_kernel.domain.tiers import SubscriptionTier
from prospect_kernel.exceptions import ConfigError

CATALOG_FILENAME = "import_catalogs.yaml"


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def compute_checksum(data: dict[str, Any]) -> str:
    """Deterministic SHA-256 of the raw config mapping."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def parse_field(data: Any, source: str) -> FieldDef:
    """Parse a FieldDef from a dict or a bare field name."""
    if isinstance(data, str):
        return FieldDef(name=data)
    if not isinstance(data, dict) or not data.get("name"):
        raise ConfigError(f"field entry must be a name or a mapping with 'name': {data!r}", source)
    type_raw = str(data.get("type", FieldType.STRING.value)).lower()
    try:
        field_type = FieldType(type_raw)
    except ValueError:
        raise ConfigError(f"field {data['name']!r} has unknown type {type_raw!r}", source) from None
    return FieldDef(
        name=str(data["name"]),
        field_type=field_type,
        required=bool(data.get("required", False)),
        default=data.get("default"),
        fallback=data.get("fallback"),
    )


def parse_catalog(data: dict[str, Any], source: str) -> EntityCatalogDef:
    """Parse an EntityCatalogDef. Field order is preserved."""
    try:
        kind = str(data["entity_kind"])
        raw_fields = data["fields"]
    except KeyError as exc:
        raise ConfigError(f"catalog is missing key {exc.args[0]!r}", source) from None
    fields = tuple(parse_field(f, source) for f in raw_fields or ())
    if not fields:
        raise ConfigError(f"catalog {kind!r} declares no fields", source)
    names = [f.name for f in fields]
    if len(set(names)) != len(names):
        raise ConfigError(f"catalog {kind!r} declares duplicate fields", source)
    for f in fields:
        if f.fallback is not None and f.fallback not in names:
            raise ConfigError(f"field {f.name!r} falls back to unknown field {f.fallback!r}", source)
    sample = tuple(str(v) for v in data.get("sample_row") or ())
    return EntityCatalogDef(entity_kind=kind, fields=fields, sample_row=sample)


def parse_settings(data: dict[str, Any] | None, source: str) -> ImportSettingsDef:
    """Parse ImportSettingsDef; absent keys take schema defaults."""
    data = data or {}
    defaults = ImportSettingsDef()
    delimiter = str(data.get("delimiter", defaults.delimiter))
    list_delimiter = str(data.get("list_delimiter", defaults.list_delimiter))
    if not delimiter or not list_delimiter:
        raise ConfigError("delimiter and list_delimiter must be non-empty", source)
    if delimiter == list_delimiter:
        raise ConfigError("delimiter and list_delimiter must differ", source)
    tiers = tuple(str(t) for t in data.get("default_tiers", defaults.default_tiers))
    known = {t.value for t in SubscriptionTier}
    if not tiers or not set(tiers) <= known:
        raise ConfigError(f"default_tiers must be a non-empty subset of {sorted(known)}", source)
    return ImportSettingsDef(
        delimiter=delimiter,
        list_delimiter=list_delimiter,
        empty_tokens=tuple(str(t) for t in data.get("empty_tokens", defaults.empty_tokens)),
        default_tiers=tiers,
    )


def parse_parent_resolution(data: dict[str, Any] | None, source: str) -> ParentResolutionDef:
    """Parse ParentResolutionDef."""
    data = data or {}
    return ParentResolutionDef(
        dependent_kind=str(data.get("dependent_kind", "contact")),
        parent_kind=str(data.get("parent_kind", "company")),
        key_field=str(data.get("key_field", "company_name")),
        carried_fields=tuple(str(f) for f in data.get("carried_fields") or ()),
        defaults=dict(data.get("defaults") or {}),
    )


def parse_import_config(data: dict[str, Any], source: str = "<memory>") -> ImportConfig:
    """
    Parse the whole catalog document into an ImportConfig.

    Raises:
        ConfigError: if catalogs are missing or cross-references are broken.
    """
    raw_catalogs = data.get("catalogs")
    if not raw_catalogs:
        raise ConfigError("no catalogs defined", source)
    catalogs: dict[str, EntityCatalogDef] = {}
    for raw in raw_catalogs:
        cat = parse_catalog(raw, source)
        if cat.entity_kind in catalogs:
            raise ConfigError(f"catalog {cat.entity_kind!r} defined twice", source)
        catalogs[cat.entity_kind] = cat

    parent = parse_parent_resolution(data.get("parent_resolution"), source)
    for kind in (parent.dependent_kind, parent.parent_kind):
        if kind not in catalogs:
            raise ConfigError(f"parent_resolution references unknown kind {kind!r}", source)
    if parent.key_field not in catalogs[parent.dependent_kind].field_names:
        raise ConfigError(f"key_field {parent.key_field!r} missing from {parent.dependent_kind!r}", source)

    aliases = {str(k): str(v) for k, v in (data.get("aliases") or {}).items()}
    return ImportConfig(
        settings=parse_settings(data.get("settings"), source),
        catalogs=catalogs,
        aliases=aliases,
        parent_resolution=parent,
        checksum=compute_checksum(data),
    )


def load_import_config(path: Path) -> ImportConfig:
    """Load and parse one catalog YAML file."""
    return parse_import_config(load_yaml_file(path), source=str(path))
