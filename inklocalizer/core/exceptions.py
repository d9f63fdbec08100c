"""
Custom exceptions for InkLocalizer.
"""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Error categories reported by a localization run."""
    ROOT_NOT_FOUND = "root_not_found"
    PARSE_FAILURE = "parse_failure"
    MULTI_SPAN_PER_LINE = "multi_span_per_line"
    ID_EXHAUSTED = "id_exhausted"
    DUPLICATE_IDENTIFIER = "duplicate_identifier"
    PATCH_IO_FAILURE = "patch_io_failure"
    EXPORT_IO_FAILURE = "export_io_failure"


class InkLocalizerError(Exception):
    """Base exception for InkLocalizer."""
    kind: Optional[ErrorKind] = None


class RootNotFoundError(InkLocalizerError):
    """Raised when the configured scan root does not exist."""
    kind = ErrorKind.ROOT_NOT_FOUND

    def __init__(self, root: str):
        super().__init__(f'Directory "{root}" does not exist.')
        self.root = root


class InkParseError(InkLocalizerError):
    """Raised when an Ink source file cannot be parsed."""
    kind = ErrorKind.PARSE_FAILURE

    def __init__(self, message: str, file_name: str = "", line_number: int = 0):
        location = file_name
        if line_number:
            location = f"{file_name}:{line_number}"
        super().__init__(f"Ink Parse Error: {location}: {message}" if location else f"Ink Parse Error: {message}")
        self.file_name = file_name
        self.line_number = line_number


class MultiSpanPerLineError(InkLocalizerError):
    """Raised when two localizable chunks of text share one source line."""
    kind = ErrorKind.MULTI_SPAN_PER_LINE

    def __init__(self, file_id: str, line_number: int):
        super().__init__(
            f'Error in file "{file_id}" line "{line_number}" - two localizable chunks of text '
            f'on the same line are not supported.'
        )
        self.file_id = file_id
        self.line_number = line_number


class IdExhaustedError(InkLocalizerError):
    """Raised when no unique identifier could be generated for a prefix."""
    kind = ErrorKind.ID_EXHAUSTED

    def __init__(self, prefix: str, attempts: int):
        super().__init__(
            f"Couldn't generate a unique ID for prefix '{prefix}' after {attempts} attempts."
        )
        self.prefix = prefix
        self.attempts = attempts


class TagInsertError(InkLocalizerError):
    """Raised when a source file cannot be read, patched or written."""
    kind = ErrorKind.PATCH_IO_FAILURE

    def __init__(self, file_name: str, cause: str, line_number: int = 0, loc_id: str = ""):
        detail = f"Error replacing tags in {file_name}"
        if line_number:
            detail += f" (line {line_number}, id {loc_id})"
        super().__init__(f"{detail}: {cause}")
        self.file_name = file_name
        self.cause = cause
        self.line_number = line_number
        self.loc_id = loc_id


class ExportError(InkLocalizerError):
    """Raised when a localization table cannot be written."""
    kind = ErrorKind.EXPORT_IO_FAILURE

    def __init__(self, file_format: str, output_path: str, cause: str):
        super().__init__(f"Error writing out {file_format} file {output_path}: {cause}")
        self.file_format = file_format
        self.output_path = output_path
        self.cause = cause


class ConfigError(InkLocalizerError):
    """Raised when configuration-related errors occur."""
    pass
