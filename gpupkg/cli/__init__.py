# SPDX-License-Identifier: LGPL-3.0-or-later
# gpupkg/cli/__init__.py
