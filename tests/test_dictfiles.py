from pathlib import Path

import pytest

from hanzikit.dictfiles import DictionaryFileList


def _touch(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"")


@pytest.fixture
def dirs(tmp_path):
    user = tmp_path / "user"
    system = tmp_path / "system"
    _touch(user / "b.dict")
    _touch(user / "a.dict")
    _touch(system / "c.dict")
    _touch(system / "c.dict.disable")
    _touch(user / "orphan.dict.disable")
    _touch(user / "notes.txt")
    return user, system


def test_files_are_sorted_and_flags_read(dirs):
    user, system = dirs
    files = DictionaryFileList(user, [system])
    names = [files.file_name(row) for row in range(files.row_count())]
    assert names == ["a.dict", "b.dict", "c.dict"]
    assert [files.is_enabled(row) for row in range(files.row_count())] == [
        True,
        True,
        False,
    ]


def test_display_name_strips_suffix(dirs):
    user, system = dirs
    files = DictionaryFileList(user, [system])
    assert files.display_name(0) == "a"
    assert files.display_name(2) == "c"


def test_out_of_range_row_raises(dirs):
    user, system = dirs
    files = DictionaryFileList(user, [system])
    with pytest.raises(IndexError):
        files.file_name(3)
    assert files.set_enabled(10, False) is False


def test_find_file_defaults_to_zero(dirs):
    user, system = dirs
    files = DictionaryFileList(user, [system])
    assert files.find_file("b.dict") == 1
    assert files.find_file("missing.dict") == 0


def test_set_enabled_reports_change(dirs):
    user, system = dirs
    calls = []
    files = DictionaryFileList(user, [system], on_changed=lambda: calls.append(1))
    assert files.set_enabled(0, True) is False
    assert calls == []
    assert files.set_enabled(0, False) is True
    assert calls == [1]
    assert files.is_enabled(0) is False


def test_save_writes_and_removes_markers(dirs):
    user, system = dirs
    files = DictionaryFileList(user, [system])
    files.set_enabled(0, False)
    files.set_enabled(2, True)
    files.save()
    assert (user / "a.dict.disable").exists()
    assert not (user / "c.dict.disable").exists()

    reloaded = DictionaryFileList(user, [system])
    assert reloaded.is_enabled(reloaded.find_file("a.dict")) is False
    # the system marker is outside the user directory and stays in force
    assert reloaded.is_enabled(reloaded.find_file("c.dict")) is False


def test_save_creates_user_directory(tmp_path):
    system = tmp_path / "system"
    _touch(system / "x.dict")
    user = tmp_path / "fresh" / "dictionaries"
    files = DictionaryFileList(user, [system])
    files.set_enabled(0, False)
    files.save()
    assert (user / "x.dict.disable").is_file()


def test_missing_directories_give_empty_list(tmp_path):
    files = DictionaryFileList(tmp_path / "none", [tmp_path / "other"])
    assert files.row_count() == 0