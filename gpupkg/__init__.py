# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# gpupkg/__init__.py
"""
gpupkg - GPU-P host driver packager

Collects the host GPU driver files a Hyper-V guest needs to use a GPU
partition and writes them into one archive laid out like the guest's
C:\\Windows.

Usage as a library:

    from gpupkg import CimDeviceCatalog, DriverPackager, PowerShell

    catalog = CimDeviceCatalog(logger, PowerShell(logger))
    result = DriverPackager(logger, catalog).run(destination=r"D:\\share", name_filter="RTX")
    print(result.archive_path)
"""

__version__ = "0.1.0"

from .catalog import CimDeviceCatalog, DeviceCatalog, SnapshotDeviceCatalog
from .catalog.powershell import PowerShell
from .pipeline import DriverPackager, HostLayout, PackageResult, TargetGpu

__all__ = [
    "__version__",
    "CimDeviceCatalog",
    "DeviceCatalog",
    "DriverPackager",
    "HostLayout",
    "PackageResult",
    "PowerShell",
    "SnapshotDeviceCatalog",
    "TargetGpu",
]
