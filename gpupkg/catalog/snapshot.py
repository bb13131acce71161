# SPDX-License-Identifier: LGPL-3.0-or-later
# gpupkg/catalog/snapshot.py
# -*- coding: utf-8 -*-
"""
Inventory snapshots.

A snapshot is the output of every catalog read saved to one JSON/YAML document,
so a host can be packaged later (or elsewhere, with --host-root pointing at the
mounted system drive) without re-running the slow WMI enumeration.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

import yaml

from ..core.exceptions import CatalogError
from ..core.file_ops import atomic_write
from .inventory import DISPLAY_CLASS, DeviceCatalog
from .models import (
    DriverFileAssociation,
    PartitionableGpu,
    PnpDevice,
    SignedDriverRecord,
    SystemDriver,
)

SNAPSHOT_KEYS = (
    "partitionable_gpus",
    "display_devices",
    "signed_drivers",
    "system_drivers",
    "file_associations",
)


def _is_yaml(path: Path) -> bool:
    return path.suffix.lower() in (".yaml", ".yml")


def load_snapshot(path: Path) -> Dict[str, List[Dict[str, Any]]]:
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise CatalogError(f"cannot read catalog snapshot {path}: {e}", cause=e)

    try:
        data = yaml.safe_load(text) if _is_yaml(path) else json.loads(text)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise CatalogError(f"invalid catalog snapshot {path}: {e}", cause=e)

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise CatalogError(f"catalog snapshot must be a mapping: {path}")

    out: Dict[str, List[Dict[str, Any]]] = {}
    for key in SNAPSHOT_KEYS:
        rows = data.get(key) or []
        if not isinstance(rows, list):
            raise CatalogError(f"catalog snapshot key {key!r} must be a list: {path}")
        out[key] = [r for r in rows if isinstance(r, dict)]
    return out


def write_snapshot(path: Path, data: Dict[str, Any]) -> Path:
    path = Path(path).expanduser().resolve()
    if _is_yaml(path):
        text = yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
    else:
        text = json.dumps(data, indent=2, ensure_ascii=False)
    with atomic_write(path) as tmp:
        tmp.write_text(text, encoding="utf-8")
    return path


class SnapshotDeviceCatalog(DeviceCatalog):
    def __init__(self, logger: logging.Logger, path: Path):
        super().__init__(logger)
        self.path = Path(path)
        self._data = load_snapshot(self.path)
        logger.info("📂 Using catalog snapshot: %s", self.path)

    def list_partition_capable_gpus(self) -> List[PartitionableGpu]:
        gpus = [PartitionableGpu.from_dict(r) for r in self._data["partitionable_gpus"]]
        return [g for g in gpus if g.name]

    def list_display_devices(self, device_class: str = DISPLAY_CLASS) -> List[PnpDevice]:
        # Snapshots only ever hold display-class rows.
        return [PnpDevice.from_dict(r) for r in self._data["display_devices"]]

    def list_signed_display_drivers(self, device_class: str = DISPLAY_CLASS) -> List[SignedDriverRecord]:
        return [SignedDriverRecord.from_dict(r) for r in self._data["signed_drivers"]]

    def list_system_drivers(self) -> List[SystemDriver]:
        return [SystemDriver.from_dict(r) for r in self._data["system_drivers"]]

    def _fetch_driver_file_associations(self) -> List[DriverFileAssociation]:
        out = [DriverFileAssociation.from_dict(r) for r in self._data["file_associations"]]
        return [a for a in out if a.owner_device_id and a.file_path]
