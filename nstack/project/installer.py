"""Install plans for the external package installer.

The engine never installs anything itself.  It computes which packages a
feature needs and turns them into the commands the project's own package
manager would run; the CLI decides whether to execute them.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from nstack.project.models import PackageManager

# (executable, add-subcommand) per package manager.
_ADD_COMMANDS: dict[PackageManager, tuple[str, str]] = {
    PackageManager.NPM: ("npm", "install"),
    PackageManager.YARN: ("yarn", "add"),
    PackageManager.PNPM: ("pnpm", "add"),
    PackageManager.BUN: ("bun", "add"),
}


class InstallCommand(BaseModel):
    """A single package-manager invocation."""

    model_config = ConfigDict(frozen=True)

    argv: tuple[str, ...] = Field(..., description="Full argument vector")
    dev: bool = Field(default=False, description="Installs development dependencies")

    def __str__(self) -> str:
        return " ".join(self.argv)


def install_plan(
    package_manager: PackageManager,
    dependencies: list[str],
    dev_dependencies: list[str],
) -> list[InstallCommand]:
    """Build the commands that install *dependencies* and *dev_dependencies*.

    Each entry is a package argument such as ``"drizzle-orm"`` or
    ``"pg@^8.13.0"``.  An ``UNKNOWN`` package manager falls back to npm.
    Empty groups produce no command.
    """
    manager = package_manager
    if manager is PackageManager.UNKNOWN:
        manager = PackageManager.NPM
    executable, subcommand = _ADD_COMMANDS[manager]

    plan: list[InstallCommand] = []
    if dependencies:
        plan.append(InstallCommand(argv=(executable, subcommand, *dependencies)))
    if dev_dependencies:
        plan.append(
            InstallCommand(argv=(executable, subcommand, "-D", *dev_dependencies), dev=True)
        )
    return plan
