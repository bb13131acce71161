# SPDX-License-Identifier: LGPL-3.0-or-later
# gpupkg/pipeline/hostpaths.py
# -*- coding: utf-8 -*-
"""Host path model (Windows paths as reported by the inventory)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path, PureWindowsPath
from typing import Optional, Union

from ..core.file_ops import resolve_case_insensitive

DEFAULT_SYSTEM_ROOT = r"C:\Windows"

# Canonical spelling of the system-root folders a guest expects.
GUEST_SYSTEM_DIRS = ("System32", "SysWOW64")

WinPathLike = Union[str, PureWindowsPath]


@dataclass(frozen=True)
class HostLayout:
    # Host paths are always Windows paths (C:\Windows\System32\...), whatever
    # OS we run on. `mount` is where the host system drive is visible locally;
    # None means the paths are directly usable (running on the host itself).
    system_root: PureWindowsPath = PureWindowsPath(DEFAULT_SYSTEM_ROOT)
    mount: Optional[Path] = None

    @classmethod
    def from_args(cls, system_root: Optional[str] = None, host_root: Optional[str] = None) -> "HostLayout":
        root = system_root or os.environ.get("SystemRoot") or DEFAULT_SYSTEM_ROOT
        mount = Path(host_root).expanduser().resolve() if host_root else None
        return cls(system_root=PureWindowsPath(root), mount=mount)

    def normalize(self, raw: WinPathLike) -> PureWindowsPath:
        """
        Turn a module/file path from the inventory into an absolute host path.

        Handles the forms Win32_SystemDriver.PathName takes in practice:
          \\SystemRoot\\System32\\drivers\\x.sys
          %SystemRoot%\\System32\\drivers\\x.sys
          \\??\\C:\\Windows\\System32\\drivers\\x.sys
          System32\\drivers\\x.sys           (relative to the system root)
          \\Windows\\System32\\drivers\\x.sys  (rooted, no drive)
        """
        s = str(raw).strip().strip('"')
        if s.startswith("\\??\\"):
            s = s[4:]

        low = s.lower()
        for alias in ("\\systemroot\\", "%systemroot%\\"):
            if low.startswith(alias):
                return self.system_root / s[len(alias):]

        p = PureWindowsPath(s)
        if p.drive:
            return p
        if p.root:
            return PureWindowsPath(self.system_root.drive + s)
        return self.system_root / p

    def local(self, win: WinPathLike) -> Path:
        p = PureWindowsPath(win)
        if self.mount is None:
            return Path(str(p))
        return resolve_case_insensitive(self.mount, p.parts[1:])

    def guest_relative(self, win: WinPathLike) -> Optional[PureWindowsPath]:
        """
        Path of `win` relative to the system root (case-insensitive), or None
        when it lies outside of it.
        """
        parts = PureWindowsPath(win).parts
        root_parts = self.system_root.parts
        if len(parts) <= len(root_parts):
            return None
        if [x.casefold() for x in parts[: len(root_parts)]] != [x.casefold() for x in root_parts]:
            return None
        rel = list(parts[len(root_parts):])
        for name in GUEST_SYSTEM_DIRS:
            if rel[0].casefold() == name.casefold():
                rel[0] = name
        return PureWindowsPath(*rel)
