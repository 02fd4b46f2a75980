"""Tests for the storage browser service."""

import os

import pytest

from dailyposts.core.errors import ConflictError, NotFoundError, PathEscapeError, ValidationError
from dailyposts.core.sandbox import PathSandbox
from dailyposts.services.storage import StorageBrowser, is_safe_basename


@pytest.fixture
def root(tmp_path):
    root = tmp_path / "root"
    (root / "docs").mkdir(parents=True)
    (root / "archive").mkdir()
    (root / "docs" / "a.txt").write_text("A")
    (root / "docs" / "b.txt").write_text("B")
    return root


@pytest.fixture
def browser(root):
    return StorageBrowser(PathSandbox(root), "PUBLIC")


def test_list_dir(browser):
    entries = browser.list_dir("PUBLIC://docs")

    assert [e.basename for e in entries] == ["a.txt", "b.txt"]
    assert entries[0].path == "PUBLIC://docs/a.txt"
    assert entries[0].type == "file"
    assert entries[0].mime_type == "text/plain"
    assert entries[0].file_size == 1


def test_list_root_dirs_only(browser):
    entries = browser.list_dir("PUBLIC://", dirs_only=True)
    assert [(e.basename, e.type, e.path) for e in entries] == [
        ("archive", "dir", "PUBLIC://archive"),
        ("docs", "dir", "PUBLIC://docs"),
    ]


def test_list_file_is_not_a_directory(browser):
    with pytest.raises(ValidationError):
        browser.list_dir("PUBLIC://docs/a.txt")


def test_read(browser):
    assert browser.read("PUBLIC://docs/a.txt") == (b"A", "text/plain")


def test_read_outside_root(browser):
    with pytest.raises(PathEscapeError):
        browser.read("PUBLIC://../../etc/passwd")


def test_make_dir(browser, root):
    browser.make_dir("PUBLIC://docs", "new")
    assert (root / "docs" / "new").is_dir()

    with pytest.raises(ConflictError):
        browser.make_dir("PUBLIC://docs", "new")


@pytest.mark.parametrize("name", ["", ".", "..", "../x", "a/b", "a\\b"])
def test_unsafe_names(browser, name):
    assert not is_safe_basename(name)
    with pytest.raises(ValidationError):
        browser.rename("PUBLIC://docs/a.txt", name)


def test_rename_stays_in_same_directory(browser, root):
    browser.rename("PUBLIC://docs/a.txt", "c.txt")

    assert (root / "docs" / "c.txt").read_text() == "A"
    assert not (root / "docs" / "a.txt").exists()


def test_rename_onto_existing(browser, root):
    with pytest.raises(ConflictError):
        browser.rename("PUBLIC://docs/a.txt", "b.txt")
    assert (root / "docs" / "b.txt").read_text() == "B"


def test_rename_root_refused(browser):
    with pytest.raises(ValidationError):
        browser.rename("PUBLIC://", "other")


def test_move(browser, root):
    browser.move("PUBLIC://archive", ["PUBLIC://docs/a.txt", "PUBLIC://docs/b.txt"])

    assert sorted(p.name for p in (root / "archive").iterdir()) == ["a.txt", "b.txt"]
    assert list((root / "docs").iterdir()) == []


def test_move_partial_failure_is_not_rolled_back(browser, root):
    (root / "archive" / "b.txt").write_text("existing")

    with pytest.raises(ConflictError):
        browser.move("PUBLIC://archive", ["PUBLIC://docs/a.txt", "PUBLIC://docs/b.txt"])

    assert (root / "archive" / "a.txt").read_text() == "A"
    assert not (root / "docs" / "a.txt").exists()
    assert (root / "docs" / "b.txt").read_text() == "B"
    assert (root / "archive" / "b.txt").read_text() == "existing"


def test_move_destination_outside_root(browser):
    with pytest.raises(PathEscapeError):
        browser.move("PUBLIC://..", ["PUBLIC://docs/a.txt"])


def test_move_uses_base_name_of_source(browser, root):
    browser.move("PUBLIC://archive", ["PUBLIC://docs/../docs/a.txt"])
    assert (root / "archive" / "a.txt").exists()


def test_delete(browser, root):
    browser.delete(["PUBLIC://docs/a.txt", "PUBLIC://archive"])

    assert not (root / "docs" / "a.txt").exists()
    assert not (root / "archive").exists()
    assert (root / "docs" / "b.txt").exists()


def test_delete_stops_at_first_missing_item(browser, root):
    with pytest.raises(NotFoundError):
        browser.delete(["PUBLIC://docs/a.txt", "PUBLIC://docs/missing.txt", "PUBLIC://docs/b.txt"])

    assert not (root / "docs" / "a.txt").exists()
    assert (root / "docs" / "b.txt").exists()


def test_delete_root_refused(browser, root):
    with pytest.raises(ValidationError):
        browser.delete(["PUBLIC://"])
    assert root.is_dir()


def test_list_dir_with_dangling_symlink(browser, root):
    os.symlink(root / "gone", root / "docs" / "dangling")

    entries = browser.list_dir("PUBLIC://docs")

    assert [e.basename for e in entries] == ["a.txt", "b.txt", "dangling"]
    assert entries[2].type == "file"
    assert browser.list_dir("PUBLIC://docs", dirs_only=True) == []


def test_list_dir_reports_link_not_target(browser, root, tmp_path):
    outside = tmp_path / "big.bin"
    outside.write_bytes(b"x" * 4096)
    os.symlink(outside, root / "docs" / "link")

    entry = next(e for e in browser.list_dir("PUBLIC://docs") if e.basename == "link")
    assert entry.file_size == os.lstat(root / "docs" / "link").st_size
    assert entry.file_size != 4096
