# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
from __future__ import annotations

import argparse
import os
from typing import Any, Dict

_SNAPSHOT_SUFFIXES = (".json", ".yaml", ".yml")


def _validate_snapshot_path(path: str, flag: str, *, must_exist: bool) -> None:
    if not path.lower().endswith(_SNAPSHOT_SUFFIXES):
        raise SystemExit(f"{flag} must be a .json, .yaml or .yml file: {path}")
    if must_exist and not os.path.isfile(path):
        raise SystemExit(f"{flag} file not found: {path}")


def validate_args(args: argparse.Namespace, conf: Dict[str, Any]) -> None:
    """
    Cheap consistency checks only; nothing here touches the inventory or
    creates files.
    """
    catalog = getattr(args, "catalog", None)
    dump = getattr(args, "dump_catalog", None)

    if catalog and dump:
        raise SystemExit("--catalog and --dump-catalog are mutually exclusive")
    if catalog:
        _validate_snapshot_path(str(catalog), "--catalog", must_exist=True)
    if dump:
        _validate_snapshot_path(str(dump), "--dump-catalog", must_exist=False)

    host_root = getattr(args, "host_root", None)
    if host_root and not os.path.isdir(os.path.expanduser(str(host_root))):
        raise SystemExit(f"--host-root is not a directory: {host_root}")

    flt = getattr(args, "filter", None)
    if flt is not None and not str(flt).strip():
        raise SystemExit("--filter must not be empty")
