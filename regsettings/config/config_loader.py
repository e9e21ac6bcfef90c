# SPDX-License-Identifier: LGPL-3.0-or-later
# regsettings/config/config_loader.py
"""
Declarative per-property option tables.

Instead of (or on top of) annotating a settings class, the storage options can
live in a JSON or YAML file and be passed as ``RegistrySettings(..., options=...)``::

    properties:
      Password: {value_kind: binary, obfuscate: true}
      Name: string
      Counter: 3          # registry type code (REG_BINARY)

A document without a ``properties`` key is taken as the table itself.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Union

from ..attributes import RegistrySetting
from ..core.exceptions import ConfigError, wrap_config

try:
    import yaml  # type: ignore

    YAML_AVAILABLE = True
except Exception:  # pragma: no cover
    yaml = None  # type: ignore
    YAML_AVAILABLE = False

logger = logging.getLogger(__name__)

TABLE_KEY = "properties"

_YAML_ERRORS: tuple = (yaml.YAMLError,) if YAML_AVAILABLE else ()


def _read_structured_file(path: Path) -> Dict[str, Any]:
    """
    Read a JSON/YAML file into a dict.

    Supported:
      - *.json
      - *.yml / *.yaml  (requires PyYAML)
      - anything else: JSON first, then YAML
    """
    sfx = path.suffix.lower()
    raw = path.read_text(encoding="utf-8")
    if sfx == ".json":
        parsed = json.loads(raw)
    elif sfx in (".yml", ".yaml"):
        if not YAML_AVAILABLE:
            raise ConfigError(msg="YAML support not available (PyYAML not installed). Use JSON instead.")
        parsed = yaml.safe_load(raw)
    else:
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            if not YAML_AVAILABLE:
                raise
            parsed = yaml.safe_load(raw)
    if parsed is None:
        parsed = {}
    if not isinstance(parsed, dict):
        raise ConfigError(msg="top-level config must be a mapping/object (dict)", context={"path": str(path)})
    return parsed


def parse_options(data: Mapping[str, Any]) -> Dict[str, RegistrySetting]:
    """Validate a raw option table into ``{property name: RegistrySetting}``."""
    table = data.get(TABLE_KEY, data) if isinstance(data, Mapping) else data
    if table is None:
        return {}
    if not isinstance(table, Mapping):
        raise ConfigError(msg=f"'{TABLE_KEY}' must be a mapping of property name to options")

    out: Dict[str, RegistrySetting] = {}
    for name, entry in table.items():
        if not isinstance(name, str) or not name:
            raise ConfigError(msg=f"invalid property name: {name!r}")
        try:
            out[name] = RegistrySetting.from_mapping(entry)
        except (TypeError, ValueError) as e:
            raise wrap_config(f"invalid options for property {name!r}: {e}", e, property=name) from e
    return out


def load_options(path: Union[str, Path]) -> Dict[str, RegistrySetting]:
    """Read and validate an option table file."""
    p = Path(path).expanduser()
    try:
        data = _read_structured_file(p)
    except (OSError, ValueError) + _YAML_ERRORS as e:
        raise wrap_config(f"cannot read options file {p}: {e}", e, path=str(p)) from e

    options = parse_options(data)
    logger.debug("Loaded %d property options from %s", len(options), p)
    return options
