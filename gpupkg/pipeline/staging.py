# SPDX-License-Identifier: LGPL-3.0-or-later
# gpupkg/pipeline/staging.py
# -*- coding: utf-8 -*-
"""
Guest-layout staging.

The staging tree mirrors the guest's %SystemRoot%:

    <staging>/System32/HostDriverStore/FileRepository/<package folder>/...
    <staging>/System32/<file>
    <staging>/SysWOW64/<file>

The archive built from it is extracted by the operator into C:\\Windows of
the guest. The driver store goes under HostDriverStore because the guest's
own DriverStore must stay untouched; the GPU-P paravirtual driver loads the
host's user-mode components from there.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
import time
from pathlib import Path, PureWindowsPath
from typing import Any, Dict, List, Optional, Sequence

from ..core.exceptions import StagingError
from ..core.file_ops import copy_any, remove_tree, resolve_case_insensitive
from ..core.logger import Log
from ..core.logging_utils import log_step
from .correlator import TargetGpu
from .hostpaths import GUEST_SYSTEM_DIRS, HostLayout

STAGING_PREFIX = "gpupkg-staging-"
SENTINEL = ".gpupkg-staging"

HOST_DRIVER_STORE = PureWindowsPath("System32", "HostDriverStore", "FileRepository")


def sweep_stale_staging(logger: logging.Logger, parent: Optional[Path] = None) -> int:
    """
    Remove staging trees left behind by runs that were killed mid-copy.

    Only directories carrying our sentinel are touched. One run per staging
    parent is assumed, so any sentinel-marked tree found here is stale.
    """
    base = Path(parent) if parent else Path(tempfile.gettempdir())
    if not base.is_dir():
        return 0

    removed = 0
    for d in sorted(base.glob(STAGING_PREFIX + "*")):
        if not (d.is_dir() and (d / SENTINEL).is_file()):
            continue
        try:
            remove_tree(d)
        except OSError as e:
            logger.warning("⚠️  Could not remove stale staging tree %s: %s", d, e)
            continue
        logger.info("🧹 Removed stale staging tree from an interrupted run: %s", d)
        removed += 1
    return removed


class StagingTree:
    """
    Scoped staging directory: created on enter, removed on every exit path.

    Usage:
        with StagingTree(logger) as tree:
            assembler.stage(tree, targets)
            archiver.archive(tree.root, dest)
    """

    def __init__(self, logger: logging.Logger, parent: Optional[Path] = None):
        self.logger = logger
        self.parent = Path(parent) if parent else None
        self._root: Optional[Path] = None

    @property
    def root(self) -> Path:
        if self._root is None:
            raise StagingError("staging tree is not active")
        return self._root

    @property
    def driver_repository(self) -> Path:
        return self.root.joinpath(*HOST_DRIVER_STORE.parts)

    def __enter__(self) -> "StagingTree":
        try:
            if self.parent is not None:
                self.parent.mkdir(parents=True, exist_ok=True)
            self._root = Path(tempfile.mkdtemp(prefix=STAGING_PREFIX, dir=str(self.parent) if self.parent else None))
            sentinel: Dict[str, Any] = {"pid": os.getpid(), "created": time.time()}
            (self._root / SENTINEL).write_text(json.dumps(sentinel), encoding="utf-8")
            self.driver_repository.mkdir(parents=True, exist_ok=True)
            for d in GUEST_SYSTEM_DIRS:
                (self._root / d).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            self._release(quiet=True)
            raise StagingError(f"cannot create staging tree: {e}", cause=e)
        self.logger.info("🏗️  Staging tree: %s", self._root)
        return self

    def _release(self, *, quiet: bool) -> None:
        root, self._root = self._root, None
        if root is None:
            return
        try:
            remove_tree(root)
        except OSError as e:
            if not quiet:
                raise StagingError(f"cannot remove staging tree {root}: {e}", cause=e)
            self.logger.error("💥 Cannot remove staging tree %s: %s", root, e)
            return
        self.logger.debug("🧹 Removed staging tree %s", root)

    def __exit__(self, exc_type, exc, tb) -> None:
        # While another error propagates, a cleanup failure is logged instead
        # of replacing it.
        self._release(quiet=exc_type is not None)


class StagingAssembler:
    def __init__(self, logger: logging.Logger, layout: HostLayout):
        self.logger = logger
        self.layout = layout

    def _copy(self, src: Path, dst: Path) -> None:
        try:
            copy_any(src, dst)
        except OSError as e:
            raise StagingError(f"failed to copy {src} -> {dst}: {e}", cause=e)

    def stage_driver_store(self, tree: StagingTree, target: TargetGpu) -> Path:
        src = self.layout.local(target.driver_store_folder)
        if not src.is_dir():
            raise StagingError(f"driver store folder not found: {src}", context={"gpu": target.friendly_name})

        dst = tree.driver_repository / target.driver_store_folder.name
        if dst.exists():
            self.logger.info("♻️  Driver store folder already staged, merging: %s", dst.name)
        Log.step(self.logger, f"Copying driver store folder {target.driver_store_folder.name}")
        self._copy(src, dst)
        return dst

    def stage_file(self, tree: StagingTree, host_path: PureWindowsPath) -> Path:
        rel = self.layout.guest_relative(host_path)
        if rel is None:
            raise StagingError(
                f"driver file is outside the system root {self.layout.system_root}: {host_path}"
            )

        src = self.layout.local(host_path)
        dst = resolve_case_insensitive(tree.root, rel.parts)
        self.logger.info("📄 %s -> %s", host_path, rel)
        self._copy(src, dst)
        return dst

    def stage(self, tree: StagingTree, targets: Sequence[TargetGpu]) -> List[Dict[str, Any]]:
        report: List[Dict[str, Any]] = []
        for i, t in enumerate(targets, 1):
            with log_step(self.logger, f"Staging GPU {i}/{len(targets)}: {t.friendly_name}"):
                try:
                    folder = self.stage_driver_store(tree, t)
                    files = [self.stage_file(tree, p) for p in t.non_store_files]
                except StagingError as e:
                    raise e.with_context(gpu=t.friendly_name)
            report.append({
                "friendly_name": t.friendly_name,
                "driver_store_folder": str(folder),
                "files": [str(f) for f in files],
            })
        return report
