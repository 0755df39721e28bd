"""Unit tests for install plans (nstack.project.installer)."""

from __future__ import annotations

import pytest

from nstack.project.installer import InstallCommand, install_plan
from nstack.project.models import PackageManager


class TestInstallPlan:
    @pytest.mark.unit
    @pytest.mark.parametrize(
        "manager,prefix",
        [
            (PackageManager.NPM, ("npm", "install")),
            (PackageManager.YARN, ("yarn", "add")),
            (PackageManager.PNPM, ("pnpm", "add")),
            (PackageManager.BUN, ("bun", "add")),
            (PackageManager.UNKNOWN, ("npm", "install")),
        ],
    )
    def test_commands_per_manager(self, manager, prefix):
        plan = install_plan(manager, ["drizzle-orm@^0.38.0"], ["drizzle-kit@^0.30.0"])
        assert len(plan) == 2
        assert plan[0].argv == (*prefix, "drizzle-orm@^0.38.0")
        assert not plan[0].dev
        assert plan[1].argv == (*prefix, "-D", "drizzle-kit@^0.30.0")
        assert plan[1].dev

    @pytest.mark.unit
    def test_empty_groups_omitted(self):
        assert install_plan(PackageManager.PNPM, [], []) == []
        plan = install_plan(PackageManager.PNPM, [], ["tsx"])
        assert [c.dev for c in plan] == [True]

    @pytest.mark.unit
    def test_str(self):
        command = InstallCommand(argv=("pnpm", "add", "-D", "tsx"), dev=True)
        assert str(command) == "pnpm add -D tsx"
