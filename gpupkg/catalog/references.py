# SPDX-License-Identifier: LGPL-3.0-or-later
# gpupkg/catalog/references.py
# -*- coding: utf-8 -*-
"""
WMI object-path references.

Association classes (Win32_PNPSignedDriverCIMDataFile) point at their ends with
object paths instead of values:

    \\\\HOST\\ROOT\\cimv2:Win32_PnPSignedDriver.DeviceID="PCI\\\\VEN_10DE&DEV_2484\\\\4&2E3A6A6&0&0008"
    \\\\HOST\\root\\cimv2:CIM_DataFile.Name="c:\\\\windows\\\\system32\\\\nvapi64.dll"

Get-CimInstance resolves them to key values already; Get-WmiObject and older
snapshots keep the raw string. Both forms are accepted.
"""
from __future__ import annotations

import re

_OBJECT_PATH_RE = re.compile(
    r"""^
    (?:\\\\[^\\]+\\)?          # \\HOST\ (optional)
    [^:"]*:                    # ROOT\cimv2:
    [A-Za-z_][A-Za-z_0-9]*     # class
    \.[A-Za-z_][A-Za-z_0-9]*   # .Key
    ="(?P<value>.*)"$
    """,
    re.VERBOSE,
)


def _unescape(value: str) -> str:
    return value.replace('\\"', '"').replace("\\\\", "\\")


def parse_cim_reference(raw: str) -> str:
    """
    Return the key value of a WMI object path, or `raw` unchanged (stripped)
    when it is already a plain value.
    """
    s = (raw or "").strip()
    m = _OBJECT_PATH_RE.match(s)
    if not m:
        return s
    return _unescape(m.group("value"))
