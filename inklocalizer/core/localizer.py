# -*- coding: utf-8 -*-
"""
Localizer
=========

Runs a full localization pass over a folder of Ink files.

Flow:
1. Validate the root folder
2. Parse every matching file and select localizable spans
3. Reserve existing IDs, then keep them or generate new ones
4. Only after every file is scanned: write new tags into the sources

Nothing is written if any file fails to parse or breaks the one-span-per-line
rule.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Optional

from inklocalizer.core.exceptions import ErrorKind, InkLocalizerError, RootNotFoundError
from inklocalizer.core.id_generator import IdGenerator, make_loc_prefix
from inklocalizer.core.ink_parser import InkParser
from inklocalizer.core.localization_store import LocalizationStore
from inklocalizer.core.tag_inserter import PendingInsert, TagInserter
from inklocalizer.core.text_selector import LocalizableSpan, TextSelector

if TYPE_CHECKING:
    from inklocalizer.utils.config import LocalizerSettings


class LocalizerStage(Enum):
    """Localization run stages."""
    IDLE = "idle"
    VALIDATING = "validating"
    SCANNING = "scanning"
    GENERATING = "generating"
    INSERTING = "inserting"
    COMPLETED = "completed"
    ERROR = "error"


@dataclass
class LocalizerResult:
    """Outcome of a localization run."""
    success: bool
    message: str
    stage: LocalizerStage
    stats: Dict[str, int] = field(default_factory=dict)
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    failed_files: List[str] = field(default_factory=list)


class Localizer:
    """
    Finds localizable text in Ink files, assigns IDs and tags the sources.

    Each instance is one run: the used-ID registry, store and visited-file set
    are not shared between runs.
    """

    def __init__(self, settings: Optional["LocalizerSettings"] = None):
        self.logger = logging.getLogger(__name__)
        if settings is None:
            from inklocalizer.utils.config import LocalizerSettings
            settings = LocalizerSettings()
        self.settings = settings

        self.store = LocalizationStore()
        self.selector = TextSelector()
        self.id_generator = IdGenerator(seed=settings.id_seed)
        self.inserter = TagInserter(debug_retag_files=settings.debug_retag_files)
        self.files_tags_to_insert: Dict[str, List[PendingInsert]] = {}

        self.current_stage = LocalizerStage.IDLE
        self.root_dir: Optional[Path] = None
        self.stats: Dict[str, int] = {
            'files_scanned': 0,
            'strings': 0,
            'existing_ids': 0,
            'new_ids': 0,
            'files_updated': 0,
            'duplicates': 0,
        }

    @property
    def strings(self) -> Dict[str, str]:
        return self.store.entries()

    def get_directory_path(self) -> Path:
        folder = self.settings.root_folder
        if not folder or not folder.strip():
            return Path.cwd().resolve()
        return Path(folder).expanduser().resolve()

    def run(self) -> LocalizerResult:
        try:
            self._set_stage(LocalizerStage.VALIDATING)
            self.root_dir = self.get_directory_path()
            if not self.root_dir.is_dir():
                raise RootNotFoundError(str(self.root_dir))

            self._set_stage(LocalizerStage.SCANNING)
            spans = self.scan_files(self.discover_files(self.root_dir))

            self._set_stage(LocalizerStage.GENERATING)
            self.resolve_ids(spans)

            self._set_stage(LocalizerStage.INSERTING)
            failures = self.inserter.insert_tags_to_files(self.files_tags_to_insert)
        except InkLocalizerError as e:
            self.logger.error(str(e))
            failed_stage = self.current_stage
            self._set_stage(LocalizerStage.ERROR)
            return LocalizerResult(
                success=False,
                message=f"Not localized ({failed_stage.value} failed).",
                stage=LocalizerStage.ERROR,
                stats=dict(self.stats),
                error=str(e),
                error_kind=e.kind,
            )

        self.stats['files_updated'] = len([w for w in self.files_tags_to_insert.values() if w]) - len(failures)
        self.stats['duplicates'] = len(self.store.duplicates)
        self.stats['strings'] = len(self.store)

        if failures:
            self._set_stage(LocalizerStage.ERROR)
            return LocalizerResult(
                success=False,
                message=f"Localized, but {len(failures)} file(s) could not be updated.",
                stage=LocalizerStage.ERROR,
                stats=dict(self.stats),
                error="\n".join(str(f) for f in failures),
                error_kind=ErrorKind.PATCH_IO_FAILURE,
                failed_files=[f.file_name for f in failures],
            )

        self._set_stage(LocalizerStage.COMPLETED)
        return LocalizerResult(
            success=True,
            message=f"Localized - found {len(self.store)} strings.",
            stage=LocalizerStage.COMPLETED,
            stats=dict(self.stats),
        )

    def discover_files(self, root_dir: Path) -> List[Path]:
        files = sorted(p for p in root_dir.rglob(self.settings.file_pattern) if p.is_file())
        self.logger.info(f"Found {len(files)} files matching {self.settings.file_pattern} in {root_dir}")
        return files

    def scan_files(self, ink_files: List[Path]) -> List[LocalizableSpan]:
        parser = InkParser(self.root_dir or self.get_directory_path())
        spans: List[LocalizableSpan] = []
        for ink_file in ink_files:
            story = parser.parse_file(ink_file)
            spans.extend(self.selector.select(story))
            self.stats['files_scanned'] += 1
        return spans

    def resolve_ids(self, spans: List[LocalizableSpan]) -> None:
        """Keep authored IDs (unless re-tagging) and queue freshly generated ones."""
        retag = self.settings.retag
        existing_ids = [span.find_existing_id() for span in spans]

        if not retag:
            self.id_generator.seed_existing(loc_id for loc_id in existing_ids if loc_id)

        for span, loc_id in zip(spans, existing_ids):
            origin = (span.file_name, span.line_number)
            if loc_id and not retag:
                self.store.add(loc_id, span.text, origin)
                self.stats['existing_ids'] += 1
                continue

            loc_id = self.id_generator.generate_unique(make_loc_prefix(span.file_id, span.ancestry))
            self.files_tags_to_insert.setdefault(span.file_name, []).append(PendingInsert(span, loc_id))
            self.store.add(loc_id, span.text, origin)
            self.stats['new_ids'] += 1

    def _set_stage(self, stage: LocalizerStage) -> None:
        self.current_stage = stage
        self.logger.debug(f"Stage: {stage.value}")
