# SPDX-License-Identifier: LGPL-3.0-or-later
# gpupkg/pipeline/archiver.py
# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
import os
import zipfile
from pathlib import Path
from typing import Iterable, Iterator, Tuple

from ..core.exceptions import ArchiveError
from ..core.file_ops import atomic_write
from ..core.utils import U
from .staging import SENTINEL

# Packages are transfer artifacts: speed over size.
FASTEST = 1


def _walk(root: Path, exclude: Iterable[str]) -> Iterator[Tuple[Path, str]]:
    """Yield (path, arcname) in a stable order; empty directories included."""
    skip = set(exclude)
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames.sort()
        here = Path(dirpath)
        rel_dir = here.relative_to(root)
        names = sorted(f for f in filenames if not (rel_dir == Path(".") and f in skip))
        if not names and not dirnames and here != root:
            yield here, rel_dir.as_posix() + "/"
        for f in names:
            p = here / f
            yield p, p.relative_to(root).as_posix()


class Archiver:
    def __init__(self, logger: logging.Logger, *, compresslevel: int = FASTEST):
        self.logger = logger
        self.compresslevel = compresslevel

    def archive(self, source_root: Path, archive_path: Path, *, exclude: Iterable[str] = (SENTINEL,)) -> Path:
        """
        Zip the contents of `source_root` (not the directory itself) into
        `archive_path`. Paths are passed explicitly; the process working
        directory is never changed.
        """
        source_root = Path(source_root)
        archive_path = Path(archive_path)
        self.logger.info("🗜️  Compressing %s -> %s", source_root, archive_path)

        count = 0
        try:
            with atomic_write(archive_path) as tmp:
                with zipfile.ZipFile(tmp, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=self.compresslevel) as zf:
                    for p, arcname in _walk(source_root, exclude):
                        zf.write(p, arcname)
                        count += 1
        except (OSError, zipfile.BadZipFile, zipfile.LargeZipFile) as e:
            raise ArchiveError(f"failed to create archive {archive_path}: {e}", cause=e)

        self.logger.info(
            "📦 Archive written: %s (%d entries, %s)",
            archive_path, count, U.human_bytes(archive_path.stat().st_size),
        )
        return archive_path
