# SPDX-License-Identifier: LGPL-3.0-or-later
# gpupkg/core/__init__.py
from .exceptions import Fatal, GpupkgError
from .logger import Log

__all__ = ["Fatal", "GpupkgError", "Log"]
