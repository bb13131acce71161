# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# gpupkg/pipeline/packager.py

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.panel import Panel

from ..catalog.inventory import DeviceCatalog
from ..core.exceptions import DiscoveryError
from ..core.logger import Log, is_tty
from ..core.logging_utils import log_step
from ..core.utils import U
from .archiver import Archiver
from .correlator import IdentifierCorrelator, TargetGpu
from .destination import Destination, resolve_destination
from .hostpaths import HostLayout
from .selector import ConfirmFn, TargetSelector, rich_confirm
from .staging import StagingAssembler, StagingTree, sweep_stale_staging


@dataclass
class PackageResult:
    archive_path: Path
    targets: List[TargetGpu] = field(default_factory=list)
    size: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "archive_path": str(self.archive_path),
            "size": self.size,
            "targets": [t.to_dict() for t in self.targets],
        }


class DriverPackager:
    """
    Discovery -> correlation -> selection -> staging -> archive.

    Every step either completes or raises; there is no partial package and no
    retry. The staging tree is gone when run() returns or raises.
    """

    def __init__(
        self,
        logger: logging.Logger,
        catalog: DeviceCatalog,
        *,
        layout: Optional[HostLayout] = None,
        confirm: Optional[ConfirmFn] = None,
        staging_parent: Optional[Path] = None,
        archiver: Optional[Archiver] = None,
    ):
        self.logger = logger
        self.catalog = catalog
        self.layout = layout or HostLayout()
        self.staging_parent = staging_parent

        self.correlator = IdentifierCorrelator(logger, catalog, self.layout)
        self.selector = TargetSelector(logger, confirm or rich_confirm())
        self.assembler = StagingAssembler(logger, self.layout)
        self.archiver = archiver or Archiver(logger)

    def discover(self) -> List[TargetGpu]:
        with log_step(self.logger, "🔎 Discovering partition-capable GPUs"):
            gpus = self.catalog.list_partition_capable_gpus()
            if not gpus:
                raise DiscoveryError("no partition-capable GPU found on this host (is GPU-P supported and Hyper-V enabled?)")
            for g in gpus:
                Log.trace(self.logger, "GPU-P adapter: %s", g.name)
            self.logger.info("🖥️  %d partition-capable GPU(s)", len(gpus))

        with log_step(self.logger, "🧭 Correlating GPUs with installed drivers"):
            # One full fetch of the file inventory, shared by every GPU below.
            self.catalog.list_driver_file_associations()
            return self.correlator.correlate_all(gpus)

    def run(self, destination: Optional[str] = None, name_filter: Optional[str] = None) -> PackageResult:
        U.banner(self.logger, "GPU-P driver package")
        dest: Destination = resolve_destination(destination)
        self.logger.info("🎯 Destination: %s", dest.archive_path)

        targets = self.discover()
        selected = self.selector.select(targets, name_filter)

        sweep_stale_staging(self.logger, self.staging_parent)
        with StagingTree(self.logger, self.staging_parent) as tree:
            with log_step(self.logger, "📁 Staging driver files"):
                self.assembler.stage(tree, selected)
            with log_step(self.logger, "🗜️  Archiving"):
                archive = self.archiver.archive(tree.root, dest.archive_path)

        result = PackageResult(archive_path=archive, targets=list(selected), size=archive.stat().st_size)
        self._summary(result)
        return result

    def _summary(self, result: PackageResult) -> None:
        lines = []
        for t in result.targets:
            lines.append(
                f"{t.friendly_name}\n"
                f"  driver: {t.driver.provider_name} {t.driver.version} ({t.driver.inf_name})\n"
                f"  store:  {t.driver_store_folder.name}\n"
                f"  files:  {len(t.non_store_files)} outside the driver store"
            )
        lines.append(f"archive: {result.archive_path} ({U.human_bytes(result.size)})")
        lines.append("Extract into C:\\Windows of the guest.")

        if is_tty():
            Console(stderr=True).print(Panel("\n".join(lines), title="GPU-P driver package", expand=True))
            return
        for ln in "\n".join(lines).splitlines():
            Log.ok(self.logger, ln)
