"""
InkLocalizer - ID tagging and string export for Ink scripts
===========================================================

Finds every line of dialogue in a folder of Ink files, gives each one a
stable ID written back into the source as an ``#id:`` tag, and exports the
ID -> text table for translators (CSV, JSON or gettext .po).

Re-running keeps the IDs already in the files; ``--retag`` regenerates them.
"""

from . import core
from . import utils
from .version import VERSION

__version__ = VERSION

__all__ = ['core', 'utils', '__version__']
