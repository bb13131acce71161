# SPDX-License-Identifier: LGPL-3.0-or-later
class FakeShell:
    """
    Stand-in for catalog.powershell.PowerShell.

    `responses` maps a substring of the script to the records query() returns;
    `commands` is the set of cmdlets has_command() reports as present.
    """

    def __init__(self, responses=None, commands=()):
        self.responses = dict(responses or {})
        self.commands = set(commands)
        self.scripts = []

    def query(self, script, *, depth=3):
        self.scripts.append(script)
        for needle, rows in self.responses.items():
            if needle in script:
                return [dict(r) for r in rows]
        return []

    def has_command(self, name):
        self.scripts.append(f"Get-Command {name}")
        return name in self.commands

    def count(self, needle):
        return sum(1 for s in self.scripts if needle in s)
