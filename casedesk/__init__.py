"""casedesk package entry.

Stable module entrypoint (python -m casedesk) for the roster edit/save
engine that lives in the top-level packages (core/, app/, services/, ...).
"""

from casedesk.version import __version__  # single source of truth

__all__ = ["__version__"]
