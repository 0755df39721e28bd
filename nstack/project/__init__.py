"""Target project detection.

Usage::

    from nstack.project.probe import probe

    context = probe("./my-app")
    print(context.package_manager, context.layout, context.router)

The probe itself is not re-exported here because it depends on
:mod:`nstack.config`, which in turn imports the enumerations below.
"""

from nstack.project.models import (
    LayoutStyle,
    PackageManager,
    ProjectContext,
    RouterStyle,
)
from nstack.project.installer import InstallCommand, install_plan

__all__ = [
    "InstallCommand",
    "LayoutStyle",
    "PackageManager",
    "ProjectContext",
    "RouterStyle",
    "install_plan",
]
