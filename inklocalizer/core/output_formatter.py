"""
Output Formatter
===============

Writes the localization table (ID -> text) as CSV, JSON or a gettext catalog.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

import polib

from inklocalizer.core.exceptions import ExportError
from inklocalizer.core.localization_store import LocalizationStore
from inklocalizer.version import VERSION


class TableOutputFormatter:
    """Formats a LocalizationStore into translation tables."""

    def __init__(self, store: LocalizationStore):
        self.logger = logging.getLogger(__name__)
        self.store = store

    @staticmethod
    def escape_csv_text(text: str) -> str:
        return text.replace('"', '""')

    def format_csv(self) -> str:
        lines = ["ID,Text"]
        for loc_id, text in self.store.entries().items():
            lines.append(f'{loc_id},"{self.escape_csv_text(text)}"')
        return "\n".join(lines) + "\n"

    def format_json(self) -> str:
        return json.dumps(self.store.entries(), indent=2, ensure_ascii=False)

    def build_po(self, root_dir: Optional[Path] = None) -> polib.POFile:
        po = polib.POFile()
        po.metadata = {
            'Project-Id-Version': f'InkLocalizer {VERSION}',
            'POT-Creation-Date': datetime.now().strftime('%Y-%m-%d %H:%M%z'),
            'MIME-Version': '1.0',
            'Content-Type': 'text/plain; charset=utf-8',
            'Content-Transfer-Encoding': '8bit',
        }
        for loc_id, text in self.store.entries().items():
            occurrences = []
            origin = self.store.origin(loc_id)
            if origin:
                file_name, line_number = origin
                occurrences.append((self._relative(file_name, root_dir), str(line_number)))
            po.append(polib.POEntry(
                msgctxt=loc_id,
                msgid=text,
                msgstr="",
                occurrences=occurrences,
            ))
        return po

    @staticmethod
    def _relative(file_name: str, root_dir: Optional[Path]) -> str:
        path = Path(file_name)
        if root_dir is not None:
            try:
                return path.relative_to(root_dir).as_posix()
            except ValueError:
                pass
        return path.as_posix()

    def write_csv(self, output_path: str) -> Path:
        return self._write("CSV", output_path, self.format_csv())

    def write_json(self, output_path: str) -> Path:
        return self._write("JSON", output_path, self.format_json())

    def write_po(self, output_path: str, root_dir: Optional[Path] = None) -> Path:
        path = Path(output_path).resolve()
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            self.build_po(root_dir).save(str(path))
        except OSError as e:
            raise ExportError("PO", str(path), str(e)) from e
        self.logger.info(f"PO file written: {path}")
        return path

    def _write(self, file_format: str, output_path: str, contents: str) -> Path:
        path = Path(output_path).resolve()
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, 'w', encoding='utf-8', newline='\n') as f:
                f.write(contents)
        except OSError as e:
            raise ExportError(file_format, str(path), str(e)) from e
        self.logger.info(f"{file_format} file written: {path}")
        return path

    def export_all(self, outputs: Dict[str, str], root_dir: Optional[Path] = None) -> Dict[str, Path]:
        """Write each enabled format ({'csv': path, ...}); empty paths are skipped."""
        written: Dict[str, Path] = {}
        if outputs.get('csv'):
            written['csv'] = self.write_csv(outputs['csv'])
        if outputs.get('json'):
            written['json'] = self.write_json(outputs['json'])
        if outputs.get('po'):
            written['po'] = self.write_po(outputs['po'], root_dir)
        return written
