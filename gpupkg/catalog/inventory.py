# SPDX-License-Identifier: LGPL-3.0-or-later
# gpupkg/catalog/inventory.py
# -*- coding: utf-8 -*-
"""Device/driver inventory adapters."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from ..core.logger import Log
from .hypervisor import GpuEnumerator, select_gpu_enumerator
from .models import (
    DriverFileAssociation,
    PartitionableGpu,
    PnpDevice,
    SignedDriverRecord,
    SystemDriver,
)
from .powershell import PowerShell

DISPLAY_CLASS = "Display"


def _ps_quote(s: str) -> str:
    return "'" + s.replace("'", "''") + "'"


class DeviceCatalog:
    """
    Read-only view of the hypervisor + device inventory.

    Subclasses implement the `_fetch_*` primitives. The file association set
    covers every driver on the system (tens of thousands of rows on a typical
    workstation, minutes to enumerate through WMI), so it is fetched at most
    once per catalog instance and served from memory afterwards.
    """

    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self._associations: Optional[List[DriverFileAssociation]] = None

    # -- primitives --------------------------------------------------------

    def list_partition_capable_gpus(self) -> List[PartitionableGpu]:
        raise NotImplementedError

    def list_display_devices(self, device_class: str = DISPLAY_CLASS) -> List[PnpDevice]:
        raise NotImplementedError

    def list_signed_display_drivers(self, device_class: str = DISPLAY_CLASS) -> List[SignedDriverRecord]:
        raise NotImplementedError

    def list_system_drivers(self) -> List[SystemDriver]:
        raise NotImplementedError

    def _fetch_driver_file_associations(self) -> List[DriverFileAssociation]:
        raise NotImplementedError

    # -- cached ------------------------------------------------------------

    def list_driver_file_associations(self) -> List[DriverFileAssociation]:
        if self._associations is None:
            self._associations = list(self._fetch_driver_file_associations())
            self.logger.info("📚 Driver file inventory: %d association(s)", len(self._associations))
        return self._associations

    def snapshot(self) -> Dict[str, Any]:
        return {
            "partitionable_gpus": [x.to_dict() for x in self.list_partition_capable_gpus()],
            "display_devices": [x.to_dict() for x in self.list_display_devices()],
            "signed_drivers": [x.to_dict() for x in self.list_signed_display_drivers()],
            "system_drivers": [x.to_dict() for x in self.list_system_drivers()],
            "file_associations": [x.to_dict() for x in self.list_driver_file_associations()],
        }


class CimDeviceCatalog(DeviceCatalog):
    """Live inventory via Hyper-V, PnpDevice and CIM cmdlets."""

    def __init__(
        self,
        logger: logging.Logger,
        shell: PowerShell,
        *,
        gpu_enumerator: Optional[GpuEnumerator] = None,
    ):
        super().__init__(logger)
        self.shell = shell
        self._gpu_enumerator = gpu_enumerator

    @property
    def gpu_enumerator(self) -> GpuEnumerator:
        if self._gpu_enumerator is None:
            self._gpu_enumerator = select_gpu_enumerator(self.logger, self.shell)
        return self._gpu_enumerator

    def list_partition_capable_gpus(self) -> List[PartitionableGpu]:
        return self.gpu_enumerator.list_partition_capable_gpus()

    def list_display_devices(self, device_class: str = DISPLAY_CLASS) -> List[PnpDevice]:
        rows = self.shell.query(
            f"Get-PnpDevice -Class {_ps_quote(device_class)} | Select-Object InstanceId, FriendlyName, Service"
        )
        return [PnpDevice.from_dict(r) for r in rows]

    def list_signed_display_drivers(self, device_class: str = DISPLAY_CLASS) -> List[SignedDriverRecord]:
        wql = "DeviceClass = '{}'".format(device_class.upper().replace("'", "\\'"))
        rows = self.shell.query(
            f"Get-CimInstance -ClassName Win32_PnPSignedDriver -Filter {_ps_quote(wql)}"
            " | Select-Object DeviceID, InfName, DriverProviderName, DriverVersion, Description"
        )
        return [SignedDriverRecord.from_dict(r) for r in rows]

    def list_system_drivers(self) -> List[SystemDriver]:
        rows = self.shell.query("Get-CimInstance -ClassName Win32_SystemDriver | Select-Object Name, PathName")
        return [SystemDriver.from_dict(r) for r in rows]

    def _fetch_driver_file_associations(self) -> List[DriverFileAssociation]:
        Log.step(self.logger, "Enumerating driver file associations (this is slow)")
        rows = self.shell.query(
            "Get-CimInstance -ClassName Win32_PNPSignedDriverCIMDataFile"
            " | Select-Object @{n='Owner';e={$_.Antecedent.DeviceID}}, @{n='Path';e={$_.Dependent.Name}}",
            depth=2,
        )
        out = [DriverFileAssociation.from_dict(r) for r in rows]
        return [a for a in out if a.owner_device_id and a.file_path]
