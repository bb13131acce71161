# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
from __future__ import annotations

import argparse


def _add_global_config_logging(p: argparse.ArgumentParser) -> None:
    # ------------------------------------------------------------------
    # Global config/logging (two-phase parse relies on these)
    # ------------------------------------------------------------------
    from ... import __version__

    p.add_argument(
        "--config",
        action="append",
        default=[],
        help="YAML/JSON config file (repeatable; later overrides earlier).",
    )
    p.add_argument("--dump-config", action="store_true", help="Print merged normalized config and exit.")
    p.add_argument("--dump-args", action="store_true", help="Print final parsed args and exit.")
    p.add_argument("--version", action="version", version=__version__)
    p.add_argument("-v", "--verbose", action="count", default=0, help="Verbosity: -v, -vv, -vvv (trace)")
    p.add_argument("-q", "--quiet", action="count", default=0, help="Less output: -q warnings, -qq errors only")
    p.add_argument("--log-file", dest="log_file", default=None, help="Write logs to file.")
    p.add_argument("--log-json", dest="log_json", action="store_true", help="Emit NDJSON log lines.")
    p.add_argument(
        "--debug",
        dest="debug",
        action="store_true",
        help="Enable debug logging (also via env GPUPKG_DEBUG=1).",
    )


def _add_package_options(p: argparse.ArgumentParser) -> None:
    # ------------------------------------------------------------------
    # What to package and where
    # ------------------------------------------------------------------
    p.add_argument(
        "-d",
        "--destination",
        dest="destination",
        default=None,
        help="Output directory or full .zip path (default: current directory, GPUPDriverPackage-<date>.zip).",
    )
    p.add_argument(
        "-f",
        "--filter",
        dest="filter",
        default=None,
        help="Only package GPUs whose friendly name contains this text (case-insensitive).",
    )
    p.add_argument(
        "-y",
        "--yes",
        dest="yes",
        action="store_true",
        help="Do not ask for confirmation when more than one partition-capable GPU is found.",
    )
    p.add_argument(
        "--staging-dir",
        dest="staging_dir",
        default=None,
        help="Parent directory for the temporary staging tree (default: system temp).",
    )


def _add_inventory_options(p: argparse.ArgumentParser) -> None:
    # ------------------------------------------------------------------
    # Inventory source
    # ------------------------------------------------------------------
    p.add_argument(
        "--catalog",
        dest="catalog",
        default=None,
        help="Use a saved inventory snapshot (JSON/YAML) instead of querying this host.",
    )
    p.add_argument(
        "--dump-catalog",
        dest="dump_catalog",
        default=None,
        help="Query this host, save the inventory snapshot to FILE (JSON/YAML) and exit.",
    )
    p.add_argument(
        "--host-root",
        dest="host_root",
        default=None,
        help="Directory where the host system drive is visible (e.g. a mounted volume); host paths C:\\... are read from here.",
    )
    p.add_argument(
        "--system-root",
        dest="system_root",
        default=None,
        help="Host system root (default: %%SystemRoot%% or C:\\Windows).",
    )
    p.add_argument(
        "--powershell",
        dest="powershell",
        default="powershell.exe",
        help="PowerShell executable used for inventory queries (e.g. pwsh).",
    )
