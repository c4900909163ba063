"""Bootstrap a local environment for developing analysis modules.

Submodules
----------
state
    Explicit setup state stored under a tools directory.
resources
    Validation of local desktop and required-files checkouts.
fetch
    Archive download plus HTML and dataset copying.
modules
    Discovery and installation of analysis packages from GitHub.
bootstrap
    The sequential ``run_setup`` procedure.
commands
    ``devsetup`` console script.
"""

from __future__ import annotations

__all__ = [
    "bootstrap",
    "commands",
    "fetch",
    "modules",
    "resources",
    "state",
]
