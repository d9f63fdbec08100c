"""
Localization Store
==================

Insertion-ordered mapping of localization ID to trimmed text.
"""

import logging
from typing import Dict, Iterator, Optional, Tuple

# (file path, line number) a string was found at
Origin = Tuple[str, int]


class LocalizationStore:
    """ID -> text table in order of first encounter. Duplicate IDs are reported and dropped."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self._strings: Dict[str, str] = {}
        self._origins: Dict[str, Origin] = {}
        self.duplicates: list = []

    def add(self, loc_id: str, text: str, origin: Optional[Origin] = None) -> bool:
        if loc_id in self._strings:
            self.duplicates.append(loc_id)
            self.logger.warning(
                f"Unexpected behaviour - trying to add content for a string named {loc_id}, "
                f"but one already exists? Have you duplicated a tag?"
            )
            return False

        self._strings[loc_id] = text.strip()
        if origin is not None:
            self._origins[loc_id] = origin
        return True

    def entries(self) -> Dict[str, str]:
        return dict(self._strings)

    def origin(self, loc_id: str) -> Optional[Origin]:
        return self._origins.get(loc_id)

    def __contains__(self, loc_id: str) -> bool:
        return loc_id in self._strings

    def __len__(self) -> int:
        return len(self._strings)

    def __iter__(self) -> Iterator[str]:
        return iter(self._strings)
