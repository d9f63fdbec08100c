import json
from pathlib import Path

import polib
import pytest

from inklocalizer.core.exceptions import ErrorKind, ExportError
from inklocalizer.core.localization_store import LocalizationStore
from inklocalizer.core.output_formatter import TableOutputFormatter


@pytest.fixture
def store(tmp_path: Path):
    store = LocalizationStore()
    store.add("A1", 'Say "hi"', (str(tmp_path / "scenes" / "intro.ink"), 3))
    store.add("B2", "Привіт, світе", (str(tmp_path / "outro.ink"), 7))
    return store


def test_csv_quotes_and_escapes():
    store = LocalizationStore()
    store.add("A1", 'Say "hi"')
    assert TableOutputFormatter(store).format_csv() == 'ID,Text\nA1,"Say ""hi"""\n'


def test_csv_for_empty_store():
    assert TableOutputFormatter(LocalizationStore()).format_csv() == "ID,Text\n"


def test_json_keeps_order_and_unicode(store):
    text = TableOutputFormatter(store).format_json()
    assert "Привіт" in text
    assert list(json.loads(text).items()) == [("A1", 'Say "hi"'), ("B2", "Привіт, світе")]


def test_po_catalog_has_context_and_occurrences(store, tmp_path: Path):
    out = tmp_path / "out" / "strings.po"
    TableOutputFormatter(store).write_po(str(out), root_dir=tmp_path)

    catalog = polib.pofile(str(out))
    entries = {entry.msgctxt: entry for entry in catalog}
    assert entries["A1"].msgid == 'Say "hi"'
    assert entries["A1"].msgstr == ""
    assert entries["A1"].occurrences == [("scenes/intro.ink", "3")]
    assert entries["B2"].occurrences == [("outro.ink", "7")]


def test_export_all_writes_enabled_formats_only(store, tmp_path: Path):
    csv_path = tmp_path / "tables" / "strings.csv"
    written = TableOutputFormatter(store).export_all({'csv': str(csv_path), 'json': "", 'po': ""}, tmp_path)

    assert list(written) == ['csv']
    assert csv_path.read_text(encoding="utf-8").startswith("ID,Text\n")
    assert not (tmp_path / "tables" / "strings.json").exists()


def test_write_failure_raises_export_error(store, tmp_path: Path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")

    with pytest.raises(ExportError) as exc_info:
        TableOutputFormatter(store).write_json(str(blocker / "strings.json"))

    assert exc_info.value.kind is ErrorKind.EXPORT_IO_FAILURE
    assert "Error writing out JSON file" in str(exc_info.value)
