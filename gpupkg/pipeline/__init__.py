# SPDX-License-Identifier: LGPL-3.0-or-later
# gpupkg/pipeline/__init__.py
from .archiver import Archiver
from .correlator import IdentifierCorrelator, TargetGpu, extract_instance_id
from .destination import Destination, resolve_destination
from .hostpaths import HostLayout
from .packager import DriverPackager, PackageResult
from .selector import TargetSelector
from .staging import StagingAssembler, StagingTree

__all__ = [
    "Archiver",
    "Destination",
    "DriverPackager",
    "HostLayout",
    "IdentifierCorrelator",
    "PackageResult",
    "StagingAssembler",
    "StagingTree",
    "TargetGpu",
    "TargetSelector",
    "extract_instance_id",
    "resolve_destination",
]
