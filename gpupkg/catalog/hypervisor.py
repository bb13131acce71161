# SPDX-License-Identifier: LGPL-3.0-or-later
# gpupkg/catalog/hypervisor.py
# -*- coding: utf-8 -*-
"""
Partition-capable GPU enumeration.

Hyper-V renamed the cmdlet between host releases:
  - Windows 11 / Server 2022 and newer: Get-VMHostPartitionableGpu
  - Windows 10 20H1..21H2:              Get-VMPartitionableGpu

The entry point is probed once and the matching enumerator is used for the
rest of the run.
"""
from __future__ import annotations

import logging
from typing import List

from .models import PartitionableGpu
from .powershell import PowerShell


class GpuEnumerator:
    cmdlet: str = ""

    def __init__(self, logger: logging.Logger, shell: PowerShell):
        self.logger = logger
        self.shell = shell

    def list_partition_capable_gpus(self) -> List[PartitionableGpu]:
        rows = self.shell.query(f"{self.cmdlet} | Select-Object Name")
        gpus = [PartitionableGpu.from_dict(r) for r in rows]
        return [g for g in gpus if g.name]


class HostPartitionableGpuEnumerator(GpuEnumerator):
    cmdlet = "Get-VMHostPartitionableGpu"


class LegacyPartitionableGpuEnumerator(GpuEnumerator):
    cmdlet = "Get-VMPartitionableGpu"


def select_gpu_enumerator(logger: logging.Logger, shell: PowerShell) -> GpuEnumerator:
    if shell.has_command(HostPartitionableGpuEnumerator.cmdlet):
        logger.debug("Using %s", HostPartitionableGpuEnumerator.cmdlet)
        return HostPartitionableGpuEnumerator(logger, shell)
    logger.info(
        "%s not available on this host; falling back to %s",
        HostPartitionableGpuEnumerator.cmdlet,
        LegacyPartitionableGpuEnumerator.cmdlet,
    )
    return LegacyPartitionableGpuEnumerator(logger, shell)
