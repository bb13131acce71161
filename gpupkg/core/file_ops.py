# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# gpupkg/core/file_ops.py
"""
Filesystem helpers shared by the staging and archiving steps.
"""

from __future__ import annotations

import os
import shutil
import sys
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Iterable, Optional


@contextmanager
def atomic_write(
    target_path: Path,
    *,
    suffix: str = ".part",
    dir: Optional[Path] = None,
) -> Generator[Path, None, None]:
    """
    Context manager for atomic file writes using temporary file + rename.

    Yields a temporary path next to the target; on success it is renamed over
    `target_path`, on failure it is removed and the exception propagates. A
    half-written archive is therefore never left at the destination.

    Example:
        with atomic_write(Path("C:/out/pkg.zip")) as tmp:
            build_zip(tmp)
    """
    target_path = Path(target_path)
    temp_dir = Path(dir) if dir else target_path.parent
    temp_dir.mkdir(parents=True, exist_ok=True)

    fd, temp_name = tempfile.mkstemp(
        suffix=suffix,
        prefix=f".{target_path.name}.",
        dir=str(temp_dir),
    )
    temp_path = Path(temp_name)

    try:
        os.close(fd)  # caller opens temp_path itself
        yield temp_path
        os.replace(temp_path, target_path)
    except BaseException:
        temp_path.unlink(missing_ok=True)
        raise


def ensure_parent_dir(path: Path) -> None:
    Path(path).parent.mkdir(parents=True, exist_ok=True)


def resolve_case_insensitive(base: Path, parts: Iterable[str]) -> Path:
    """
    Join `parts` onto `base`, reusing the on-disk spelling of each component
    that already exists under a different case.

    NTFS paths are case-insensitive, so `system32\\nvapi64.dll` from the
    inventory names the same file as `System32\\nvapi64.dll` on the volume.
    Components that do not exist yet are appended as given.
    """
    cur = Path(base)
    for part in parts:
        nxt = cur / part
        if not nxt.exists() and cur.is_dir():
            folded = part.casefold()
            for child in cur.iterdir():
                if child.name.casefold() == folded:
                    nxt = child
                    break
        cur = nxt
    return cur


def copy_any(src: Path, dst: Path) -> None:
    """
    Copy a file, or a directory recursively, to `dst`.

    Directory copies merge into an existing destination, so staging the same
    tree twice is a no-op rather than an error.
    """
    if src.is_dir():
        shutil.copytree(src, dst, dirs_exist_ok=True)
        return
    ensure_parent_dir(dst)
    shutil.copy2(src, dst)


def remove_tree(path: Path) -> None:
    # Driver payloads are sometimes marked read-only; clear the bit and retry.
    def _retry_writable(func, p, _exc):
        os.chmod(p, 0o700)
        func(p)

    if not path.exists():
        return
    if sys.version_info >= (3, 12):
        shutil.rmtree(path, onexc=_retry_writable)
    else:
        shutil.rmtree(path, onerror=_retry_writable)
