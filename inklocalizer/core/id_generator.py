"""
ID Generator
============

Generates short, scope-prefixed localization IDs that are unique within a run.

    <file>_<knot>_<stitch>_<4 chars from A-Z0-9>
"""

import logging
import random
import string
import threading
from typing import Iterable, List, Optional, Set

from inklocalizer.core.exceptions import IdExhaustedError
from inklocalizer.core.ink_nodes import InkNode, SCOPE_KINDS

ID_ALPHABET = string.ascii_uppercase + string.digits
ID_SUFFIX_LENGTH = 4
MAX_ATTEMPTS = 100


class UsedIdRegistry:
    """Every identifier committed during a run."""

    def __init__(self, initial: Optional[Iterable[str]] = None):
        self._ids: Set[str] = set(initial or ())
        self._lock = threading.Lock()

    def try_add(self, loc_id: str) -> bool:
        """Check-and-insert in one step. False if the id was already taken."""
        with self._lock:
            if loc_id in self._ids:
                return False
            self._ids.add(loc_id)
            return True

    def seed(self, loc_ids: Iterable[str]) -> None:
        with self._lock:
            self._ids.update(loc_ids)

    def __contains__(self, loc_id: str) -> bool:
        return loc_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)


def make_scope_prefix(ancestry: List[InkNode]) -> str:
    """Knot and stitch names, outer to inner, each followed by '_'."""
    return ''.join(f"{node.name}_" for node in ancestry if node.kind in SCOPE_KINDS)


def make_loc_prefix(file_id: str, ancestry: List[InkNode]) -> str:
    return f"{file_id}_{make_scope_prefix(ancestry)}"


class IdGenerator:
    """Run-scoped ID source: owns the used-ID registry and its random generator."""

    def __init__(self, registry: Optional[UsedIdRegistry] = None, seed: Optional[int] = None,
                 rng: Optional[random.Random] = None):
        self.logger = logging.getLogger(__name__)
        self.registry = registry if registry is not None else UsedIdRegistry()
        self._random = rng if rng is not None else random.Random(seed)

    def seed_existing(self, loc_ids: Iterable[str]) -> None:
        """Reserve identifiers already authored in the sources."""
        self.registry.seed(loc_ids)

    def generate_id(self, length: int = ID_SUFFIX_LENGTH) -> str:
        return ''.join(self._random.choice(ID_ALPHABET) for _ in range(length))

    def generate_unique(self, prefix: str) -> str:
        for _ in range(MAX_ATTEMPTS):
            loc_id = prefix + self.generate_id()
            if self.registry.try_add(loc_id):
                return loc_id
            self.logger.debug(f"ID collision for {loc_id}, retrying")
        raise IdExhaustedError(prefix, MAX_ATTEMPTS)
