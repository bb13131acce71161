# SPDX-License-Identifier: LGPL-3.0-or-later
# gpupkg/pipeline/correlator.py
# -*- coding: utf-8 -*-
"""
Partition-capable GPU -> device -> driver -> files correlation.

The hypervisor names a GPU by its device interface path:

    \\\\?\\PCI#VEN_10DE&DEV_2484&SUBSYS_146B10DE&REV_A1#4&2e3a6a6&0&0008#{064092b3-625e-43bf-9eb5-dc845897dd59}

The PnP instance id hidden in it is the middle part with '#' turned back into
'\\':

    PCI\\VEN_10DE&DEV_2484&SUBSYS_146B10DE&REV_A1\\4&2e3a6a6&0&0008

From the instance id we find the display device, its signed driver, the kernel
service module (which lives in the versioned driver-store package folder) and
every file the inventory associates with the device.
"""
from __future__ import annotations

import logging
import re
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import PureWindowsPath
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from ..catalog.inventory import DeviceCatalog
from ..catalog.models import PartitionableGpu, PnpDevice, SignedDriverRecord, SystemDriver
from ..core.exceptions import CorrelationError, InstanceIdParseError
from ..core.logger import Log
from .hostpaths import HostLayout

_NAMESPACE_PREFIXES = ("\\\\?\\", "\\\\.\\", "\\??\\")
_CLASS_GUID_RE = re.compile(
    r"#\{[0-9A-Fa-f]{8}-[0-9A-Fa-f]{4}-[0-9A-Fa-f]{4}-[0-9A-Fa-f]{4}-[0-9A-Fa-f]{12}\}"
)

DRIVER_STORE_MARKER = "driverstore"


def extract_instance_id(raw: str) -> str:
    s = (raw or "").strip()
    for prefix in _NAMESPACE_PREFIXES:
        if s.startswith(prefix):
            body = s[len(prefix):]
            break
    else:
        raise InstanceIdParseError(f"GPU name is not a device path: {raw!r}")

    m = _CLASS_GUID_RE.search(body)
    if m is None:
        raise InstanceIdParseError(f"GPU name has no interface class GUID: {raw!r}")

    body = body[: m.start()]
    if not body:
        raise InstanceIdParseError(f"GPU name has an empty device part: {raw!r}")
    return body.replace("#", "\\")


def driver_store_folder(module_path: PureWindowsPath) -> PureWindowsPath:
    """
    Driver-store package folder that holds `module_path`.

    Usually two levels above the module (FileRepository\\<pkg>\\<sub>\\x.sys),
    but some vendors put the module straight into the package folder and
    others nest it deeper, so the folder is anchored on the FileRepository
    component instead of counting.
    """
    parts = module_path.parts
    folded = [p.casefold() for p in parts]
    try:
        idx = len(folded) - 1 - folded[::-1].index("filerepository")
    except ValueError:
        raise CorrelationError(f"driver module is not inside the driver store: {module_path}") from None

    # need FileRepository\<pkg>\...\module
    if idx + 2 >= len(parts):
        raise CorrelationError(f"driver module is not inside a driver package folder: {module_path}")
    return PureWindowsPath(*parts[: idx + 2])


def is_driver_store_path(path: str) -> bool:
    return DRIVER_STORE_MARKER in path.casefold()


def split_driver_files(paths: Iterable[str]) -> Tuple[List[str], List[str]]:
    """
    Dedupe (case-insensitive), sort, and split into (inside driver store,
    outside driver store).
    """
    unique: Dict[str, str] = {}
    for p in paths:
        p = (p or "").strip()
        if p:
            unique.setdefault(p.casefold(), p)

    ordered = sorted(unique.values(), key=lambda s: (s.casefold(), s))
    store = [p for p in ordered if is_driver_store_path(p)]
    outside = [p for p in ordered if not is_driver_store_path(p)]
    return store, outside


@dataclass(frozen=True)
class TargetGpu:
    gpu: PartitionableGpu
    device: PnpDevice
    driver: SignedDriverRecord
    system_driver: SystemDriver
    driver_store_folder: PureWindowsPath
    non_store_files: Tuple[PureWindowsPath, ...] = field(default_factory=tuple)
    store_file_count: int = 0

    @property
    def instance_id(self) -> str:
        return self.device.instance_id

    @property
    def friendly_name(self) -> str:
        return self.device.friendly_name

    def to_dict(self) -> Dict[str, Any]:
        return {
            "gpu": self.gpu.name,
            "instance_id": self.instance_id,
            "friendly_name": self.friendly_name,
            "driver": self.driver.to_dict(),
            "service": self.system_driver.name,
            "module": self.system_driver.path_name,
            "driver_store_folder": str(self.driver_store_folder),
            "non_store_files": [str(p) for p in self.non_store_files],
            "store_file_count": self.store_file_count,
        }


@dataclass(frozen=True)
class _InventoryIndex:
    # all keys casefolded
    devices: Dict[str, PnpDevice]
    drivers: Dict[str, List[SignedDriverRecord]]
    services: Dict[str, SystemDriver]
    files: Dict[str, List[str]]


class IdentifierCorrelator:
    def __init__(self, logger: logging.Logger, catalog: DeviceCatalog, layout: HostLayout):
        self.logger = logger
        self.catalog = catalog
        self.layout = layout

        self._index: Optional[_InventoryIndex] = None

    def _load(self) -> _InventoryIndex:
        if self._index is not None:
            return self._index

        devices: Dict[str, PnpDevice] = {}
        for d in self.catalog.list_display_devices():
            devices.setdefault(d.instance_id.casefold(), d)

        drivers: Dict[str, List[SignedDriverRecord]] = defaultdict(list)
        for r in self.catalog.list_signed_display_drivers():
            drivers[r.device_id.casefold()].append(r)

        services: Dict[str, SystemDriver] = {}
        for s in self.catalog.list_system_drivers():
            services.setdefault(s.name.casefold(), s)

        files: Dict[str, List[str]] = defaultdict(list)
        for a in self.catalog.list_driver_file_associations():
            files[a.owner_device_id.casefold()].append(a.file_path)

        Log.trace(
            self.logger,
            "🧮 Inventory: %d display device(s), %d signed driver id(s), %d service(s), %d file owner(s)",
            len(devices), len(drivers), len(services), len(files),
        )
        self._index = _InventoryIndex(devices=devices, drivers=dict(drivers), services=services, files=dict(files))
        return self._index

    def correlate(self, gpu: PartitionableGpu) -> TargetGpu:
        index = self._load()

        instance_id = extract_instance_id(gpu.name)
        key = instance_id.casefold()

        device = index.devices.get(key)
        if device is None:
            raise CorrelationError(
                f"corresponding device not found for partitionable GPU {gpu.name}",
                context={"instance_id": instance_id},
            )
        log = Log.bind(self.logger, gpu=device.friendly_name)
        log.info("🎯 Matched %s", device.instance_id)

        candidates = index.drivers.get(key) or []
        if not candidates:
            raise CorrelationError(
                f"no signed driver found for {device.friendly_name} ({device.instance_id})"
            )
        driver = candidates[0]
        if len(candidates) > 1:
            log.warning(
                "⚠️  %d signed drivers for %s; using the first (%s %s)",
                len(candidates), device.instance_id, driver.inf_name, driver.version,
            )

        if not device.service:
            raise CorrelationError(f"device {device.instance_id} has no driver service")
        system_driver = index.services.get(device.service.casefold())
        if system_driver is None or not system_driver.path_name:
            raise CorrelationError(f"system driver {device.service!r} not found for {device.instance_id}")

        module = self.layout.normalize(system_driver.path_name)
        folder = driver_store_folder(module)

        store, outside = split_driver_files(index.files.get(key, []))
        log.info(
            "📦 Driver %s %s (%s): store folder %s, %d store file(s), %d other file(s)",
            driver.provider_name, driver.version, driver.inf_name, folder.name, len(store), len(outside),
        )

        return TargetGpu(
            gpu=gpu,
            device=device,
            driver=driver,
            system_driver=system_driver,
            driver_store_folder=folder,
            non_store_files=tuple(self.layout.normalize(p) for p in outside),
            store_file_count=len(store),
        )

    def correlate_all(self, gpus: Sequence[PartitionableGpu]) -> List[TargetGpu]:
        return [self.correlate(g) for g in gpus]
