# SPDX-License-Identifier: LGPL-3.0-or-later
# gpupkg/core/exceptions.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


def _safe_int(x: Any, default: int = 1) -> int:
    try:
        return int(x)
    except Exception:
        return default


def _clamp_exit_code(code: int) -> int:
    # Exit codes are 0..255 on every host we care about.
    if code < 0:
        return 1
    if code > 255:
        return 255
    return code


def _one_line(s: str, limit: int = 600) -> str:
    s = (s or "").strip().replace("\r", " ").replace("\n", " ")
    s = " ".join(s.split())
    return s if len(s) <= limit else (s[: limit - 3] + "...")


def _format_context_compact(ctx: Dict[str, Any]) -> str:
    return ", ".join(f"{k}={ctx.get(k)!r}" for k in sorted(ctx.keys()))


@dataclass(eq=False)
class GpupkgError(Exception):
    """
    Base project error with:
      - stable fields for reporting/JSON
      - readable __str__ (what operators see)
      - exit code honored by main()
    """
    code: int = 1
    msg: str = "error"
    cause: Optional[BaseException] = None
    context: Optional[Dict[str, Any]] = None

    def __post_init__(self) -> None:
        self.code = _clamp_exit_code(_safe_int(self.code, default=1))
        self.msg = _one_line(self.msg) or self.__class__.__name__
        super().__init__(self.msg)
        self.args = (self.msg,)

    def with_context(self, **ctx: Any) -> "GpupkgError":
        if self.context is None:
            self.context = {}
        self.context.update(ctx)
        return self

    def user_message(self, *, include_context: bool = False, include_cause: bool = False) -> str:
        parts = [self.msg or self.__class__.__name__]

        if include_context and self.context:
            parts.append(f"[{_one_line(_format_context_compact(self.context))}]")

        if include_cause and self.cause is not None:
            parts.append(f"(cause: {type(self.cause).__name__}: {_one_line(str(self.cause))})")

        return " ".join(parts)

    def __str__(self) -> str:
        return self.user_message()

    def to_dict(self, *, include_cause: bool = False) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "type": self.__class__.__name__,
            "code": self.code,
            "message": self.msg,
            "context": self.context or {},
        }
        if include_cause and self.cause is not None:
            d["cause"] = {"type": type(self.cause).__name__, "message": _one_line(str(self.cause))}
        return d


class Fatal(GpupkgError):
    """
    User-facing fatal error (exit code is honored by the top-level main()).
    """
    pass


class PackagingCancelled(Fatal):
    """Operator declined the multi-GPU confirmation. Not a failure."""

    def __init__(self, msg: str = "packaging cancelled by operator", **kw: Any):
        super().__init__(code=3, msg=msg, **kw)


class CatalogError(Fatal):
    """Device/driver inventory could not be queried."""

    def __init__(self, msg: str, **kw: Any):
        kw.setdefault("code", 10)
        super().__init__(msg=msg, **kw)


class DiscoveryError(Fatal):
    """No partition-capable GPU was reported by the hypervisor."""

    def __init__(self, msg: str, **kw: Any):
        kw.setdefault("code", 11)
        super().__init__(msg=msg, **kw)


class CorrelationError(Fatal):
    """A partition-capable GPU could not be resolved to device, driver or files."""

    def __init__(self, msg: str, **kw: Any):
        kw.setdefault("code", 12)
        super().__init__(msg=msg, **kw)


class InstanceIdParseError(CorrelationError):
    """Hypervisor GPU name does not follow the device-path convention."""
    pass


class SelectionError(Fatal):
    def __init__(self, msg: str, **kw: Any):
        kw.setdefault("code", 13)
        super().__init__(msg=msg, **kw)


class StagingError(Fatal):
    def __init__(self, msg: str, **kw: Any):
        kw.setdefault("code", 20)
        super().__init__(msg=msg, **kw)


class ArchiveError(Fatal):
    def __init__(self, msg: str, **kw: Any):
        kw.setdefault("code", 21)
        super().__init__(msg=msg, **kw)


def format_exception_for_cli(e: BaseException, *, verbose: int = 0) -> str:
    """
    One-liner output for CLI.

    verbose=0: just message
    verbose=1: message + compact context (if any)
    verbose>=2: message + context + cause
    """
    if isinstance(e, GpupkgError):
        return e.user_message(
            include_context=(verbose >= 1),
            include_cause=(verbose >= 2),
        )

    if verbose >= 2:
        return f"{type(e).__name__}: {_one_line(str(e))}"
    return _one_line(str(e)) or type(e).__name__
