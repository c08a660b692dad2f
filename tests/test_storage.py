import datetime
import sys

from Daybook import storage


def test_filename_is_zero_padded_iso_date():
    assert storage.filename_for(datetime.date(2024, 3, 7)) == "2024-03-07.log"


def test_path_for_joins_directory(tmp_path):
    assert storage.path_for(tmp_path, datetime.date(2024, 1, 1)) == tmp_path / "2024-01-01.log"


def test_list_files_returns_regular_files_only(tmp_path):
    (tmp_path / "a.log").write_text("", encoding="utf-8")
    (tmp_path / "b.txt").write_text("", encoding="utf-8")
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "c.log").write_text("", encoding="utf-8")

    assert sorted(p.name for p in storage.list_files(tmp_path)) == ["a.log", "b.txt"]


def test_list_files_of_missing_directory_is_empty(tmp_path):
    assert storage.list_files(tmp_path / "missing") == []


def test_creation_time_is_recent_for_a_new_file(tmp_path):
    path = tmp_path / "new.log"
    path.write_text("x", encoding="utf-8")
    age = datetime.datetime.now() - storage.creation_time(path)
    assert datetime.timedelta(seconds=-5) < age < datetime.timedelta(minutes=5)


def test_default_directory_follows_the_executable_when_frozen(tmp_path, monkeypatch):
    exe = tmp_path / "app.exe"
    exe.write_text("", encoding="utf-8")
    monkeypatch.setattr(sys, "frozen", True, raising=False)
    monkeypatch.setattr(sys, "executable", str(exe))
    assert storage.default_directory() == tmp_path.resolve() / "logs"
