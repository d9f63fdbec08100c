import re
from pathlib import Path

import pytest

from inklocalizer.cli_main import build_parser, main


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path: Path, monkeypatch):
    # keep a stray inklocalizer.json in the repo from leaking into runs
    monkeypatch.chdir(tmp_path)


def test_run_and_export_csv(tmp_path: Path, capsys):
    story = tmp_path / "story"
    story.mkdir()
    (story / "myfile.ink").write_text("Hello world\n", encoding="utf-8")
    csv_path = tmp_path / "out" / "strings.csv"

    code = main(["--folder", str(story), "--csv", str(csv_path), "--seed", "5"])

    assert code == 0
    assert re.fullmatch(r'ID,Text\nmyfile_[A-Z0-9]{4},"Hello world"\n', csv_path.read_text(encoding="utf-8"))
    assert "Localized - found 1 strings." in capsys.readouterr().out


def test_missing_folder_fails(tmp_path: Path, capsys):
    assert main(["--folder", str(tmp_path / "missing")]) == 1
    assert "Not localized." in capsys.readouterr().out


def test_missing_explicit_config_fails(tmp_path: Path):
    assert main(["--config", str(tmp_path / "nope.json")]) == 1


def test_export_failure_returns_error(tmp_path: Path, capsys):
    (tmp_path / "scene.ink").write_text("Hello\n", encoding="utf-8")
    (tmp_path / "blocker").write_text("file", encoding="utf-8")

    code = main(["--folder", str(tmp_path), "--json", str(tmp_path / "blocker" / "strings.json")])

    assert code == 1
    assert "Table not written." in capsys.readouterr().out


def test_flags_default_to_none():
    args = build_parser().parse_args([])
    assert args.retag is None
    assert args.debug_retag_files is None
    assert args.root_folder is None
