# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# gpupkg/config/config_loader.py
from __future__ import annotations

import argparse
import glob
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Sequence

import yaml

from ..core.exceptions import Fatal


def _deep_merge(base: Dict[str, Any], over: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(base)
    for k, v in over.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def _key_name(k: Any) -> str:
    # YAML 1.1 reads a bare `yes:` key as the boolean True.
    if k is True:
        return "yes"
    if k is False:
        return "no"
    return str(k).replace("-", "_")


def _normalize_keys(d: Dict[str, Any]) -> Dict[str, Any]:
    # YAML authors write both `log-file` and `log_file`; argparse dests use '_'.
    return {_key_name(k): v for k, v in d.items()}


class Config:
    @staticmethod
    def expand_configs(logger: logging.Logger, cfgs: Sequence[str]) -> List[Path]:
        """Expand globs and ~; keep the given order (later overrides earlier)."""
        out: List[Path] = []
        for raw in cfgs:
            pattern = str(Path(raw).expanduser())
            hits = sorted(glob.glob(pattern)) if any(ch in pattern for ch in "*?[") else [pattern]
            if not hits:
                raise Fatal(2, f"config glob matched nothing: {raw}")
            for h in hits:
                p = Path(h).resolve()
                if not p.is_file():
                    raise Fatal(2, f"config file not found: {p}")
                out.append(p)
        logger.debug("Config files: %s", [str(p) for p in out])
        return out

    @staticmethod
    def load_one(logger: logging.Logger, path: Path) -> Dict[str, Any]:
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise Fatal(2, f"cannot read config {path}: {e}") from e

        try:
            if path.suffix.lower() == ".json":
                data = json.loads(text)
            else:
                data = yaml.safe_load(text)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise Fatal(2, f"invalid config {path}: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise Fatal(2, f"config must be a mapping at top level: {path}")
        logger.debug("Loaded config %s (%d key(s))", path, len(data))
        return _normalize_keys(data)

    @staticmethod
    def load_many(logger: logging.Logger, paths: Sequence[Path]) -> Dict[str, Any]:
        conf: Dict[str, Any] = {}
        for p in paths:
            conf = _deep_merge(conf, Config.load_one(logger, Path(p)))
        return conf

    @staticmethod
    def apply_as_defaults(logger: logging.Logger, parser: argparse.ArgumentParser, conf: Dict[str, Any]) -> None:
        """
        Feed config values to argparse as defaults so explicit CLI flags win.
        Unknown keys are reported and ignored.
        """
        dests = {a.dest for a in parser._actions}
        known = {k: v for k, v in conf.items() if k in dests}
        unknown = sorted(k for k in conf if k not in dests)
        if unknown:
            logger.warning("⚠️  Ignoring unknown config key(s): %s", ", ".join(unknown))
        if known:
            parser.set_defaults(**known)
