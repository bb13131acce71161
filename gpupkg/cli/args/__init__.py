# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# gpupkg/cli/args/__init__.py
"""
Argument parser modules for the gpupkg CLI.
"""
from __future__ import annotations

from .groups import _add_global_config_logging, _add_inventory_options, _add_package_options
from .parser import HelpFormatter, _build_preparser, _load_merged_config, build_parser, parse_args_with_config
from .validators import validate_args

__all__ = [
    "HelpFormatter",
    "_add_global_config_logging",
    "_add_inventory_options",
    "_add_package_options",
    "_build_preparser",
    "_load_merged_config",
    "build_parser",
    "parse_args_with_config",
    "validate_args",
]
