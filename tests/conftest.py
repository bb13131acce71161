# SPDX-License-Identifier: LGPL-3.0-or-later
import logging
import os
import sys
from pathlib import Path

import pytest

_THIS_DIR = Path(__file__).resolve().parent
_REPO_ROOT = _THIS_DIR.parent

if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

os.environ.setdefault("PYTHONPATH", str(_REPO_ROOT))

from fakes.fake_host import FakeHost  # noqa: E402


@pytest.fixture
def logger():
    lg = logging.getLogger("gpupkg_tests")
    lg.setLevel(logging.DEBUG)
    return lg


@pytest.fixture
def host(tmp_path):
    return FakeHost(tmp_path / "host")


@pytest.fixture
def staging_parent(tmp_path):
    p = tmp_path / "staging"
    p.mkdir()
    return p
