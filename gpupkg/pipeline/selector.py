# SPDX-License-Identifier: LGPL-3.0-or-later
# gpupkg/pipeline/selector.py
# -*- coding: utf-8 -*-
"""Choose which resolved GPUs end up in the package."""
from __future__ import annotations

import logging
import sys
from typing import Callable, List, Optional, Sequence

from rich.prompt import Confirm

from ..core.exceptions import PackagingCancelled, SelectionError
from ..core.logger import Log
from .correlator import TargetGpu

ConfirmFn = Callable[[str], bool]

MULTI_GPU_WARNING = (
    "More than one partition-capable GPU was found. Hyper-V does not let you pick "
    "which physical GPU backs a VM's partition, so the guest may end up on any of them. "
    "Drivers for all of them will be packaged unless --filter narrows the set."
)


def rich_confirm(assume_yes: bool = False) -> ConfirmFn:
    """
    Confirmation callback for the multi-GPU gate.

    --yes answers for the operator. Without a terminal there is nobody to ask,
    so the answer is no.
    """
    def _ask(question: str) -> bool:
        if assume_yes:
            return True
        if not sys.stdin.isatty():
            return False
        return bool(Confirm.ask(question, default=False))

    return _ask


class TargetSelector:
    def __init__(self, logger: logging.Logger, confirm: ConfirmFn):
        self.logger = logger
        self.confirm = confirm

    def select(self, targets: Sequence[TargetGpu], name_filter: Optional[str] = None) -> List[TargetGpu]:
        if not targets:
            raise SelectionError("no GPU could be resolved; nothing to package")

        # The gate looks at everything discovered, before any filter applies.
        if len(targets) > 1:
            Log.warn(self.logger, MULTI_GPU_WARNING)
            for t in targets:
                self.logger.warning("   • %s (%s)", t.friendly_name, t.instance_id)
            if not self.confirm(f"Continue with {len(targets)} GPUs?"):
                raise PackagingCancelled()

        if not name_filter:
            return list(targets)

        needle = name_filter.casefold()
        selected = [t for t in targets if needle in t.friendly_name.casefold()]
        if not selected:
            raise SelectionError(
                f"no GPU friendly name contains {name_filter!r}",
                context={"available": [t.friendly_name for t in targets]},
            )
        self.logger.info("🔎 Filter %r selected %d of %d GPU(s)", name_filter, len(selected), len(targets))
        return selected
