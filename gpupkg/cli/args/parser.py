# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
from __future__ import annotations

import argparse
import os
from typing import Any, Dict, Optional, Sequence, Tuple

from ...config.config_loader import Config
from ...core.logger import c
from ...core.utils import U
from ..help_texts import FEATURE_SUMMARY, YAML_EXAMPLE
from .groups import _add_global_config_logging, _add_inventory_options, _add_package_options
from .validators import validate_args


class HelpFormatter(argparse.RawDescriptionHelpFormatter, argparse.ArgumentDefaultsHelpFormatter):
    """Combines raw description formatting with default value display in help."""


def _build_epilog() -> str:
    return (
        c("YAML example:\n", "cyan", ["bold"])
        + c(YAML_EXAMPLE, "cyan")
        + "\n"
        + c("Feature summary:\n", "cyan", ["bold"])
        + c(FEATURE_SUMMARY, "cyan")
    )


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="gpupkg",
        description=c("gpupkg: package host GPU drivers for GPU-P (GPU partitioning) guests", "green", ["bold"]),
        formatter_class=HelpFormatter,
        epilog=_build_epilog(),
    )
    _add_global_config_logging(p)
    _add_package_options(p)
    _add_inventory_options(p)
    return p


def _build_preparser() -> argparse.ArgumentParser:
    pre = argparse.ArgumentParser(add_help=False)
    pre.add_argument("--config", action="append", default=[])
    pre.add_argument("-v", "--verbose", action="count", default=0)
    pre.add_argument("-q", "--quiet", action="count", default=0)
    pre.add_argument("--log-file", dest="log_file", default=None)
    pre.add_argument("--log-json", dest="log_json", action="store_true")
    pre.add_argument("--debug", action="store_true")
    pre.add_argument("--dump-config", action="store_true")
    pre.add_argument("--dump-args", action="store_true")
    return pre


def _load_merged_config(logger: Any, cfgs: Sequence[str]) -> Dict[str, Any]:
    if not cfgs:
        return {}
    expanded = Config.expand_configs(logger, list(cfgs))
    return Config.load_many(logger, expanded)


def _debug_env() -> bool:
    return os.environ.get("GPUPKG_DEBUG", "").strip().lower() in ("1", "true", "yes", "on")


def parse_args_with_config(
    argv: Optional[Sequence[str]] = None,
    logger: Any = None,
) -> Tuple[argparse.Namespace, Dict[str, Any], Any]:
    """
    Flow:
      Phase 0: parse ONLY global flags needed to locate config/logging
      Phase 1: load+merge config files
      Phase 2: apply config as defaults onto the parser
      Phase 3: full parse to get final args
      Phase 4: validate
    """
    import sys

    if argv is None:
        argv = sys.argv[1:]
    argv = list(argv)

    parser = build_parser()

    pre = _build_preparser()
    args0, _rest = pre.parse_known_args(argv)

    debug = bool(args0.debug or _debug_env())
    verbose = max(int(args0.verbose or 0), 2 if debug else 0)

    from ...core.logger import Log  # local import to avoid cycles

    own_logger = logger is None
    logging_flags = (verbose, int(args0.quiet or 0), args0.log_file, bool(args0.log_json))
    if own_logger:
        logger = Log.setup(verbose, args0.log_file, quiet=args0.quiet, json_logs=args0.log_json)

    conf = _load_merged_config(logger, args0.config or [])

    if args0.dump_config:
        print(U.json_dump(conf))
        raise SystemExit(0)

    # Config values become defaults so the CLI can override them.
    Config.apply_as_defaults(logger, parser, conf)

    args = parser.parse_args(argv)
    args.verbose = max(int(args.verbose or 0), verbose)
    args.debug = debug

    # Logging keys may come from the config; rebuild handlers if they did.
    final_flags = (int(args.verbose or 0), int(args.quiet or 0), args.log_file, bool(args.log_json))
    if own_logger and final_flags != logging_flags:
        logger = Log.setup(final_flags[0], final_flags[2], quiet=final_flags[1], json_logs=final_flags[3])

    if args0.dump_args:
        print(U.json_dump(vars(args)))
        raise SystemExit(0)

    validate_args(args, conf)
    return args, conf, logger
