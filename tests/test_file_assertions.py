from pathlib import Path

import pytest

from recordpack.recorder import RecordedValueMismatchError
from recordpack.testing import assert_file_as_recorded


def test_recording_mode_writes_file_and_parents(tmp_path: Path) -> None:
    target = tmp_path / "out" / "nested" / "file.txt"

    assert_file_as_recorded(target, "content\n", recording=True)

    assert target.read_text(encoding="utf-8") == "content\n"


def test_recording_mode_deletes_file_for_missing_content(tmp_path: Path) -> None:
    target = tmp_path / "stale.txt"
    target.write_text("old", encoding="utf-8")

    assert_file_as_recorded(target, None, recording=True)
    assert_file_as_recorded(tmp_path / "never.txt", None, recording=True)

    assert not target.exists()


def test_replay_mode_accepts_matching_content(tmp_path: Path) -> None:
    target = tmp_path / "file.txt"
    target.write_text("same", encoding="utf-8")

    assert_file_as_recorded(target, "same", recording=False)
    assert_file_as_recorded(tmp_path / "absent.txt", None, recording=False)


def test_replay_mode_reports_changed_missing_and_unexpected_files(tmp_path: Path) -> None:
    target = tmp_path / "file.txt"
    target.write_text("recorded", encoding="utf-8")

    with pytest.raises(RecordedValueMismatchError, match="differs"):
        assert_file_as_recorded(target, "generated", recording=False)
    with pytest.raises(RecordedValueMismatchError, match="is missing"):
        assert_file_as_recorded(tmp_path / "absent.txt", "generated", recording=False)
    with pytest.raises(RecordedValueMismatchError, match="should not exist"):
        assert_file_as_recorded(target, None, recording=False)


def test_mode_defaults_to_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    target = tmp_path / "file.txt"
    monkeypatch.setenv("UPDATE_TESTS", "1")

    assert_file_as_recorded(target, "fresh")

    assert target.read_text(encoding="utf-8") == "fresh"
