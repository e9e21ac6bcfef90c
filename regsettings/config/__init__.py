# SPDX-License-Identifier: LGPL-3.0-or-later
# regsettings/config/__init__.py
from .config_loader import YAML_AVAILABLE, load_options, parse_options

__all__ = ["YAML_AVAILABLE", "load_options", "parse_options"]
