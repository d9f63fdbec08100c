"""
Core module for InkLocalizer
============================
"""

from .exceptions import (
    ErrorKind, InkLocalizerError, RootNotFoundError, InkParseError, MultiSpanPerLineError,
    IdExhaustedError, TagInsertError, ExportError, ConfigError
)
from .ink_parser import InkParser
from .id_generator import IdGenerator, UsedIdRegistry
from .localization_store import LocalizationStore
from .text_selector import LocalizableSpan, TextSelector
from .tag_inserter import PendingInsert, TagInserter
from .localizer import Localizer, LocalizerResult, LocalizerStage
from .output_formatter import TableOutputFormatter

__all__ = [
    'ErrorKind', 'InkLocalizerError', 'RootNotFoundError', 'InkParseError', 'MultiSpanPerLineError',
    'IdExhaustedError', 'TagInsertError', 'ExportError', 'ConfigError',
    'InkParser',
    'IdGenerator', 'UsedIdRegistry',
    'LocalizationStore',
    'LocalizableSpan', 'TextSelector',
    'PendingInsert', 'TagInserter',
    'Localizer', 'LocalizerResult', 'LocalizerStage',
    'TableOutputFormatter'
]
