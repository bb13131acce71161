# SPDX-License-Identifier: LGPL-3.0-or-later
# gpupkg/catalog/models.py
# -*- coding: utf-8 -*-
"""Records returned by the hypervisor and the device/driver inventory."""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping

from .references import parse_cim_reference


def _field(d: Mapping[str, Any], *names: str) -> str:
    """
    First non-empty value among `names`.

    Snapshots and ConvertTo-Json output spell keys differently
    ("instance_id" vs "InstanceId"), so every record accepts both.
    """
    for n in names:
        v = d.get(n)
        if v is not None and str(v) != "":
            return str(v)
    return ""


@dataclass(frozen=True)
class PartitionableGpu:
    # e.g. \\?\PCI#VEN_10DE&DEV_2484&...#4&2e3a6a6&0&0008#{064092b3-625e-43bf-9eb5-dc845897dd59}
    name: str

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "PartitionableGpu":
        return cls(name=_field(d, "name", "Name"))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class PnpDevice:
    instance_id: str
    friendly_name: str
    service: str = ""

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "PnpDevice":
        return cls(
            instance_id=_field(d, "instance_id", "InstanceId"),
            friendly_name=_field(d, "friendly_name", "FriendlyName"),
            service=_field(d, "service", "Service"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SignedDriverRecord:
    device_id: str
    inf_name: str
    provider_name: str
    version: str
    description: str

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "SignedDriverRecord":
        return cls(
            device_id=_field(d, "device_id", "DeviceID"),
            inf_name=_field(d, "inf_name", "InfName"),
            provider_name=_field(d, "provider_name", "DriverProviderName"),
            version=_field(d, "version", "DriverVersion"),
            description=_field(d, "description", "Description"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SystemDriver:
    # Kernel service; path_name is the on-disk module, e.g.
    # C:\Windows\System32\DriverStore\FileRepository\nv_dispi.inf_amd64_...\nvlddmkm.sys
    name: str
    path_name: str

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "SystemDriver":
        return cls(
            name=_field(d, "name", "Name"),
            path_name=_field(d, "path_name", "PathName"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class DriverFileAssociation:
    owner_device_id: str
    file_path: str

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "DriverFileAssociation":
        owner = _field(d, "owner_device_id", "Antecedent", "Owner")
        path = _field(d, "file_path", "Dependent", "Path")
        return cls(
            owner_device_id=parse_cim_reference(owner),
            file_path=parse_cim_reference(path),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
