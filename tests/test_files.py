from fileview.errors import AccessDeniedError, NotFoundError, PathIsDirectoryError, PathNotDirectoryError
from fileview.services.filesystem import FileSystemService
from fileview.services.roots import RootRegistry
from pathlib import Path
import pytest


def _service(tmp_path: Path, **kwargs) -> FileSystemService:
    return FileSystemService(RootRegistry([("files", str(tmp_path))]), **kwargs)


def test_fs_sandbox_prevents_escape(tmp_path: Path):
    fs = _service(tmp_path, allow_writes=True)
    fs.write_text(0, "/", "ok.txt", "ok")
    assert fs.view(0, "/ok.txt").page.lines == ["ok"]
    with pytest.raises(PermissionError):
        fs.view(0, "../escape.txt")
    with pytest.raises(AccessDeniedError):
        fs.write_text(0, "/", "../../escape.txt", "nope")
    assert not (tmp_path.parent / "escape.txt").exists()


def test_view_reports_logical_path_and_size(tmp_path: Path):
    (tmp_path / "logs").mkdir()
    (tmp_path / "logs" / "app.log").write_bytes(b"one\ntwo\n")
    fs = _service(tmp_path)

    view = fs.view(0, "/logs/app.log")
    assert view.path == "/logs/app.log"
    assert view.name == "app.log"
    assert view.size == 8
    assert view.page.lines == ["one", "two", ""]


def test_view_errors_do_not_leak_host_paths(tmp_path: Path):
    (tmp_path / "dir").mkdir()
    fs = _service(tmp_path)

    with pytest.raises(NotFoundError) as missing:
        fs.view(0, "/nope.txt")
    assert str(tmp_path) not in str(missing.value)
    assert "/nope.txt" in str(missing.value)

    with pytest.raises(PathIsDirectoryError):
        fs.view(0, "/dir")


def test_list_dir_round_trips_paths(tmp_path: Path):
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "notes.md").write_text("# hi\n", encoding="utf-8")
    (tmp_path / "README").write_text("x", encoding="utf-8")
    fs = _service(tmp_path)

    top = fs.list_dir(0, "/")
    assert [e.name for e in top] == ["README", "sub"]
    readme, sub = top
    assert readme.to_dict().get("extension") is None
    assert sub.is_dir and "extension" not in sub.to_dict()

    inner = fs.list_dir(0, sub.path)
    assert inner[0].path == "/sub/notes.md"
    assert inner[0].extension == "md"
    # a listed path is accepted unchanged by view
    assert fs.view(0, inner[0].path).page.lines == ["# hi", ""]

    with pytest.raises(PathNotDirectoryError):
        fs.list_dir(0, "/README")


def test_writes_disabled_by_default(tmp_path: Path):
    fs = _service(tmp_path)
    with pytest.raises(AccessDeniedError):
        fs.write_text(0, "/", "a.txt", "x")
    with pytest.raises(AccessDeniedError):
        fs.make_dir(0, "/", "d")
    assert list(tmp_path.iterdir()) == []


def test_make_dir_and_delete(tmp_path: Path):
    fs = _service(tmp_path, allow_writes=True)
    assert fs.make_dir(0, "/", "reports") == "/reports"
    assert fs.write_text(0, "/reports", "q1.txt", "a\nb") == "/reports/q1.txt"

    with pytest.raises(OSError):
        fs.delete(0, "/reports")  # not empty
    assert fs.delete(0, "/reports", recursive=True) == "/reports"
    assert not (tmp_path / "reports").exists()

    with pytest.raises(AccessDeniedError):
        fs.delete(0, "/")
    with pytest.raises(AccessDeniedError):
        fs.make_dir(0, "/", "..")
