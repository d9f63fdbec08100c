"""
Utils module for InkLocalizer
=============================
"""

from .config import ConfigManager, LocalizerSettings, TableOutputSettings
from .encoding import read_text_safely

__all__ = [
    'ConfigManager', 'LocalizerSettings', 'TableOutputSettings', 'read_text_safely'
]
