# SPDX-License-Identifier: LGPL-3.0-or-later
# gpupkg/pipeline/destination.py
# -*- coding: utf-8 -*-
from __future__ import annotations

import datetime as _dt
import os
import re
from dataclasses import dataclass
from pathlib import Path, PurePath, PureWindowsPath
from typing import Optional, Union

from ..core.exceptions import ArchiveError

ARCHIVE_SUFFIXES = (".zip",)
PACKAGE_PREFIX = "GPUPDriverPackage"

_WINDOWS_PATH_RE = re.compile(r"^(?:[A-Za-z]:[\\/]|\\\\)")


@dataclass(frozen=True)
class Destination:
    folder: PurePath
    filename: str

    @property
    def archive_path(self) -> Path:
        # A drive-letter or UNC folder only means something on a Windows host;
        # elsewhere it would silently become a relative path under the cwd.
        if not isinstance(self.folder, Path):
            raise ArchiveError(
                f"destination {self.folder} is a Windows path but this host is not Windows",
                context={"os": os.name},
            )
        return self.folder / self.filename


def default_filename(today: Optional[_dt.date] = None) -> str:
    today = today or _dt.date.today()
    return f"{PACKAGE_PREFIX}-{today.strftime('%Y%m%d')}{ARCHIVE_SUFFIXES[0]}"


def _as_path(raw: str) -> Union[Path, PureWindowsPath]:
    # C:\out\pkg.zip must split the Windows way even when we are not on Windows
    # (e.g. packaging from a snapshot on another machine).
    if _WINDOWS_PATH_RE.match(raw) and not isinstance(Path(raw), PureWindowsPath):
        return PureWindowsPath(raw)
    return Path(raw).expanduser()


def resolve_destination(
    raw: Optional[str] = None,
    *,
    today: Optional[_dt.date] = None,
    cwd: Optional[Path] = None,
) -> Destination:
    """
    Output folder + archive name for the package.

      None / ""          -> <cwd>/GPUPDriverPackage-<date>.zip
      ...\\pkg.zip       -> folder of the path, pkg.zip
      existing dir       -> that dir, GPUPDriverPackage-<date>.zip
      anything else      -> a directory to create, GPUPDriverPackage-<date>.zip

    Nothing is created here; the archiver makes the folder when it writes.
    """
    base = Path(cwd) if cwd else Path.cwd()
    if not raw or not str(raw).strip():
        return Destination(folder=base, filename=default_filename(today))

    p = _as_path(str(raw).strip())
    if isinstance(p, Path) and not p.is_absolute():
        p = base / p

    if p.suffix.lower() in ARCHIVE_SUFFIXES:
        return Destination(folder=p.parent, filename=p.name)
    return Destination(folder=p, filename=default_filename(today))
