"""tests for the command line interface."""

import json
from pathlib import Path

import pytest

from dualchat import main
from dualchat.config import ACTIVE_CONVERSATION_KEY, CONVERSATIONS_KEY


def _stored(data_file: Path) -> list[dict]:
    values = json.loads(data_file.read_text(encoding="utf-8"))
    return json.loads(values[CONVERSATIONS_KEY])


def _write_source(path: Path, records: object) -> Path:
    path.write_text(json.dumps(records), encoding="utf-8")
    return path


RECORDS = [
    {
        "id": "conv-a",
        "title": "Alpha",
        "createdAt": "2024-01-01T00:00:00.000Z",
        "updatedAt": "2024-01-03T00:00:00.000Z",
        "messages": [
            {
                "id": "m1",
                "text": "Hello",
                "sender": "User",
                "purpose": "user-input",
                "timestamp": "2024-01-01T00:00:00.000Z",
            }
        ],
        "notepad": "draft",
    },
    {
        "id": "conv-b",
        "title": "Beta",
        "createdAt": "2024-01-01T00:00:00.000Z",
        "updatedAt": "2024-01-02T00:00:00.000Z",
        "messages": [],
    },
]


def test_cli_requires_command() -> None:
    """CLI requires a subcommand."""
    with pytest.raises(SystemExit) as exc_info:
        main([])
    assert exc_info.value.code == 2  # argparse exits with 2 for missing args


def test_cli_delete_requires_target(tmp_path: Path) -> None:
    """delete needs an id or --all."""
    with pytest.raises(SystemExit) as exc_info:
        main(["--data-file", str(tmp_path / "s.json"), "delete"])
    assert exc_info.value.code == 2


def test_cli_new_persists_conversation(tmp_path: Path) -> None:
    """new creates and selects a conversation."""
    data_file = tmp_path / "storage.json"

    assert main(["--data-file", str(data_file), "new", "Plan"]) == 0

    stored = _stored(data_file)
    assert [c["title"] for c in stored] == ["Plan"]
    values = json.loads(data_file.read_text(encoding="utf-8"))
    assert values[ACTIVE_CONVERSATION_KEY] == stored[0]["id"]


def test_cli_list_prints_newest_first(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """list prints conversations newest first."""
    data_file = tmp_path / "storage.json"
    source = _write_source(tmp_path / "in.json", RECORDS)
    assert main(["--data-file", str(data_file), "-q", "import", str(source)]) == 0
    capsys.readouterr()

    assert main(["--data-file", str(data_file), "list"]) == 0

    err = capsys.readouterr().err
    assert err.index("Alpha") < err.index("Beta")


def test_cli_import_reports_counts(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """import merges and prints a summary."""
    data_file = tmp_path / "storage.json"
    source = _write_source(tmp_path / "in.json", RECORDS)

    assert main(["--data-file", str(data_file), "import", str(source)]) == 0
    assert main(["--data-file", str(data_file), "import", str(source)]) == 0

    err = capsys.readouterr().err
    assert "2 new" in err
    assert "2 replaced" in err
    assert len(_stored(data_file)) == 2


def test_cli_import_rejects_unusable_file(tmp_path: Path) -> None:
    """files without usable conversations fail with exit code 1."""
    data_file = tmp_path / "storage.json"
    source = _write_source(tmp_path / "junk.json", [1, 2, 3])

    assert main(["--data-file", str(data_file), "import", str(source)]) == 1
    assert not data_file.exists()


def test_cli_import_missing_file(tmp_path: Path) -> None:
    """missing import files fail with exit code 1."""
    assert main(["--data-file", str(tmp_path / "s.json"), "import", str(tmp_path / "none.json")]) == 1


def test_cli_rename_and_delete(tmp_path: Path) -> None:
    """rename and delete act on existing ids and reject unknown ones."""
    data_file = tmp_path / "storage.json"
    source = _write_source(tmp_path / "in.json", RECORDS)
    main(["--data-file", str(data_file), "import", str(source)])

    assert main(["--data-file", str(data_file), "rename", "conv-b", "Gamma"]) == 0
    assert main(["--data-file", str(data_file), "rename", "missing", "X"]) == 1
    assert main(["--data-file", str(data_file), "rename", "conv-b", "   "]) == 1
    assert {c["title"] for c in _stored(data_file)} == {"Alpha", "Gamma"}

    assert main(["--data-file", str(data_file), "delete", "conv-a"]) == 0
    assert main(["--data-file", str(data_file), "delete", "conv-a"]) == 1
    assert [c["id"] for c in _stored(data_file)] == ["conv-b"]

    assert main(["--data-file", str(data_file), "delete", "--all"]) == 0
    assert _stored(data_file) == []


def test_cli_export_html(tmp_path: Path) -> None:
    """export writes an HTML document into --out."""
    data_file = tmp_path / "storage.json"
    out = tmp_path / "out"
    source = _write_source(tmp_path / "in.json", RECORDS)
    main(["--data-file", str(data_file), "import", str(source)])

    assert main(["--data-file", str(data_file), "export", "--format", "html", "--out", str(out)]) == 0

    files = list(out.glob("*.html"))
    assert len(files) == 1
    content = files[0].read_text(encoding="utf-8")
    assert content.index("Alpha") < content.index("Beta")


def test_cli_export_dry_run(tmp_path: Path) -> None:
    """dry run writes nothing."""
    data_file = tmp_path / "storage.json"
    out = tmp_path / "out"
    source = _write_source(tmp_path / "in.json", RECORDS)
    main(["--data-file", str(data_file), "import", str(source)])

    assert main(["--data-file", str(data_file), "export", "--id", "conv-a", "--out", str(out), "--dry-run"]) == 0
    assert not out.exists()


def test_cli_export_unknown_id(tmp_path: Path) -> None:
    """exporting an unknown id fails with exit code 1."""
    data_file = tmp_path / "storage.json"
    assert main(["--data-file", str(data_file), "export", "--id", "nope", "--out", str(tmp_path)]) == 1


def test_cli_layout_shows_and_saves_preferences(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    """layout prints stored preferences and saves changes."""
    data_file = tmp_path / "storage.json"

    assert main(["--data-file", str(data_file), "layout"]) == 0
    assert "Chat panel width: 60%" in capsys.readouterr().err

    assert main(["--data-file", str(data_file), "layout", "--panel-width", "95", "--fullscreen"]) == 0
    capsys.readouterr()

    assert main(["--data-file", str(data_file), "layout"]) == 0
    err = capsys.readouterr().err
    assert "Chat panel width: 80%" in err
    assert "Notepad fullscreen: yes" in err
