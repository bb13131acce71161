# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# gpupkg/cli/help_texts.py
from __future__ import annotations

# NOTE:
# Pure help text used by the argparse epilog. Keep it copy/paste runnable.

YAML_EXAMPLE = r"""# gpupkg configuration (YAML)
#
# Run (elevated PowerShell on the Hyper-V host):
#   gpupkg --config gpupkg.yaml
#
# Merge multiple configs (later overrides earlier):
#   gpupkg --config base.yaml --config rtx.yaml
#
destination: D:\vm-share\gpu            # folder, or a full ...\name.zip path
filter: RTX                             # only GPUs whose name contains this
yes: true                               # accept the multi-GPU warning
staging_dir: D:\tmp                     # parent of the temporary staging tree
powershell: pwsh                        # powershell.exe (default) or pwsh
log_file: gpupkg.log
verbose: 1

# Offline: package from a snapshot taken earlier with --dump-catalog,
# with the host's C: drive mounted somewhere readable.
# catalog: host-inventory.json
# host_root: /mnt/host-c
"""

FEATURE_SUMMARY = r"""  • Finds partition-capable GPUs (Get-VMHostPartitionableGpu, or Get-VMPartitionableGpu on older hosts)
  • Resolves each to its display device, signed driver and driver-store package folder
  • Collects every driver file outside the driver store (System32 / SysWOW64)
  • Stages them as System32\HostDriverStore\FileRepository\<pkg> + System32\... for the guest
  • Writes one .zip (fastest compression); the staging tree is always removed
  • --dump-catalog / --catalog: save and reuse the slow WMI inventory
  • Extract the archive into C:\Windows of the guest
"""
