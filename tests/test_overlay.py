import os
import stat
from pathlib import Path

import pytest

from pollen.errors import CopyFailed
from pollen.overlay import copy_tree


def _make_tree(root: Path) -> None:
    (root / "opt" / "chrome").mkdir(parents=True)
    (root / "hosts").write_text("127.0.0.1 localhost\n", encoding="utf-8")
    (root / "opt" / "chrome" / "flags").write_text("--foo\n", encoding="utf-8")
    os.chmod(root / "hosts", 0o640)
    os.symlink("hosts", root / "hosts.link")
    os.symlink("/nonexistent/resolv.conf", root / "resolv.conf")
    os.symlink("opt", root / "opt.link")


def test_copy_tree_preserves_links_and_modes(tmp_path: Path) -> None:
    src = tmp_path / "etc"
    src.mkdir()
    _make_tree(src)
    dst = tmp_path / "overlay" / "etc"

    report = copy_tree(src, dst)

    assert report.failures == []
    assert (dst / "opt" / "chrome" / "flags").read_text(encoding="utf-8") == "--foo\n"
    assert stat.S_IMODE((dst / "hosts").stat().st_mode) == 0o640
    assert (dst / "hosts.link").is_symlink()
    assert os.readlink(dst / "hosts.link") == "hosts"
    # Dangling links are copied as links, not dereferenced.
    assert (dst / "resolv.conf").is_symlink()
    assert os.readlink(dst / "resolv.conf") == "/nonexistent/resolv.conf"
    assert (dst / "opt.link").is_symlink()
    assert (dst / "hosts").stat().st_mtime == (src / "hosts").stat().st_mtime


def test_copy_tree_recreates_fifo(tmp_path: Path) -> None:
    src = tmp_path / "etc"
    src.mkdir()
    os.mkfifo(src / "initctl")

    report = copy_tree(src, tmp_path / "copy")

    assert report.failures == []
    assert stat.S_ISFIFO(os.lstat(tmp_path / "copy" / "initctl").st_mode)


def test_copy_tree_tolerates_unreadable_entry(tmp_path: Path, monkeypatch) -> None:
    src = tmp_path / "etc"
    src.mkdir()
    _make_tree(src)
    (src / "shadow").write_text("root:*:19000::::::\n", encoding="utf-8")

    import shutil

    real_copyfile = shutil.copyfile

    def flaky(s, d, *, follow_symlinks=True):
        if Path(s).name == "shadow":
            raise PermissionError(13, "Permission denied", str(s))
        return real_copyfile(s, d, follow_symlinks=follow_symlinks)

    monkeypatch.setattr("pollen.overlay.shutil.copyfile", flaky)
    dst = tmp_path / "copy"
    report = copy_tree(src, dst)

    assert [f.path.name for f in report.failures] == ["shadow"]
    assert report.failures[0].reason == "Permission denied"
    assert not (dst / "shadow").exists()
    assert (dst / "hosts").exists()
    assert (dst / "opt" / "chrome" / "flags").exists()


def test_copy_tree_twice_replaces_entries(tmp_path: Path) -> None:
    src = tmp_path / "etc"
    src.mkdir()
    _make_tree(src)
    dst = tmp_path / "copy"

    copy_tree(src, dst)
    (src / "hosts").write_text("10.0.0.1 router\n", encoding="utf-8")
    report = copy_tree(src, dst)

    assert report.failures == []
    assert (dst / "hosts").read_text(encoding="utf-8") == "10.0.0.1 router\n"
    assert os.readlink(dst / "hosts.link") == "hosts"


def test_copy_tree_onto_itself_is_noop(tmp_path: Path) -> None:
    src = tmp_path / "etc"
    src.mkdir()
    _make_tree(src)

    report = copy_tree(src, src)

    assert report.copied == 0
    assert report.failures == []
    assert (src / "hosts").read_text(encoding="utf-8") == "127.0.0.1 localhost\n"


def test_copy_tree_refuses_destination_inside_source(tmp_path: Path) -> None:
    src = tmp_path / "etc"
    src.mkdir()
    _make_tree(src)

    with pytest.raises(CopyFailed, match="into itself"):
        copy_tree(src, src / "pollen-overlay" / "etc")
    assert not (src / "pollen-overlay").exists()
