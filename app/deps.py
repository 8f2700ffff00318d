# -*- coding: utf-8 -*-
"""Optional runtime packages.

The engine and the ``casedesk`` command need only the standard library; the
desktop front (``casedesk-gui``) needs PyQt5. The check runs before any Qt
import so a missing package ends with install guidance instead of a traceback.
"""
from __future__ import annotations

from importlib import import_module

# feature -> [(pip name, module to import)]
RUNTIME_PACKAGES = {
    "gui": [("PyQt5", "PyQt5.QtWidgets")],
}


def missing_runtime_packages(feature: str = "gui") -> list[str]:
    missing: list[str] = []
    for package_name, import_name in RUNTIME_PACKAGES.get(feature, []):
        try:
            import_module(import_name)
        except ImportError:
            missing.append(package_name)
    return missing


def ensure_runtime_deps(feature: str = "gui") -> None:
    """Raise RuntimeError naming what to install for ``feature``."""
    missing = missing_runtime_packages(feature)
    if not missing:
        return
    raise RuntimeError(
        f"casedesk {feature} needs: {', '.join(missing)}.\n\n"
        "Install it with:\n"
        "  pip install -e .\n\n"
        "The casedesk command line works without it."
    )
