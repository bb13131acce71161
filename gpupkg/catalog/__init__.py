# SPDX-License-Identifier: LGPL-3.0-or-later
# gpupkg/catalog/__init__.py
from .inventory import DISPLAY_CLASS, CimDeviceCatalog, DeviceCatalog
from .models import (
    DriverFileAssociation,
    PartitionableGpu,
    PnpDevice,
    SignedDriverRecord,
    SystemDriver,
)
from .snapshot import SnapshotDeviceCatalog, load_snapshot, write_snapshot

__all__ = [
    "DISPLAY_CLASS",
    "CimDeviceCatalog",
    "DeviceCatalog",
    "DriverFileAssociation",
    "PartitionableGpu",
    "PnpDevice",
    "SignedDriverRecord",
    "SnapshotDeviceCatalog",
    "SystemDriver",
    "load_snapshot",
    "write_snapshot",
]
