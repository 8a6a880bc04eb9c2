# tests/test_sandbox.py
from pathlib import Path

import pytest

from fileview.errors import AccessDeniedError, InvalidArgumentError, RootConfigError
from fileview.services.roots import Root, RootRegistry, parse_roots
from fileview.services.sandbox import resolve, resolve_child


@pytest.fixture
def root(tmp_path: Path) -> Root:
    return RootRegistry([("data", str(tmp_path))]).get(0)


@pytest.mark.parametrize(
    "logical",
    ["/../../etc/passwd", "../x", "/a/../../x", "..", "/./../x", "a/b/../../../x"],
)
def test_traversal_is_denied(root: Root, logical: str):
    with pytest.raises(AccessDeniedError) as exc:
        resolve(root, logical)
    assert root.path not in str(exc.value)


@pytest.mark.parametrize("logical", ["", "/", ".", "/a/..", "//"])
def test_root_aliases_resolve_to_root(root: Root, logical: str):
    resolved = resolve(root, logical)
    assert resolved.path == root.path
    assert resolved.logical == "/"
    assert resolved.is_root


def test_resolved_paths_stay_under_root(root: Root):
    for logical in ["/a.txt", "a.txt", "/deep/er/file.log", "/x/../y.txt", "/..hidden"]:
        resolved = resolve(root, logical)
        assert resolved.path.startswith(root.path)
    assert resolve(root, "/x/../y.txt").logical == "/y.txt"
    assert resolve(root, "/..hidden").logical == "/..hidden"


def test_child_composition_is_revalidated(root: Root):
    parent = resolve(root, "/uploads")
    assert resolve_child(parent, "report.txt").logical == "/uploads/report.txt"
    assert resolve_child(parent, "../sibling.txt").logical == "/sibling.txt"
    with pytest.raises(AccessDeniedError):
        resolve_child(parent, "../../outside.txt")
    with pytest.raises(AccessDeniedError):
        resolve_child(parent, "..")
    # a leading slash does not re-anchor the name at the root
    assert resolve_child(parent, "/etc/passwd").logical == "/uploads/etc/passwd"


def test_registry_parsing_and_selection(tmp_path: Path):
    (tmp_path / "logs").mkdir()
    spec = f"docs={tmp_path}, {tmp_path / 'logs'}"
    assert parse_roots(spec) == [("docs", str(tmp_path)), ("logs", str(tmp_path / "logs"))]

    registry = RootRegistry.from_spec(spec)
    assert len(registry) == 2
    assert registry.get(1).name == "logs"
    assert registry.describe() == [{"index": 0, "name": "docs"}, {"index": 1, "name": "logs"}]
    with pytest.raises(InvalidArgumentError):
        registry.get(2)


def test_registry_rejects_missing_roots(tmp_path: Path):
    with pytest.raises(RootConfigError):
        RootRegistry([("gone", str(tmp_path / "missing"))])
    (tmp_path / "file.txt").write_text("x")
    with pytest.raises(RootConfigError):
        RootRegistry([("file", str(tmp_path / "file.txt"))])
    with pytest.raises(RootConfigError):
        RootRegistry.from_spec(" , ")
