from __future__ import annotations

import errno
import os
import shutil
import stat
from dataclasses import dataclass, field
from pathlib import Path

from .errors import CopyFailed


@dataclass
class CopyFailure:
    path: Path
    reason: str


@dataclass
class CopyReport:
    copied: int = 0
    failures: list[CopyFailure] = field(default_factory=list)


def _failure(path: Path, exc: OSError) -> CopyFailure:
    return CopyFailure(path=path, reason=exc.strerror or str(exc))


def _clear(dst: Path) -> None:
    # Leftovers from a previous run are replaced, except real directories which are merged into.
    if dst.is_symlink() or (dst.exists() and not dst.is_dir()):
        dst.unlink()


def _make_dir(src_st: os.stat_result, dst: Path, preserve_owner: bool) -> None:
    _clear(dst)
    dst.mkdir(exist_ok=True)
    if preserve_owner:
        os.lchown(dst, src_st.st_uid, src_st.st_gid)


def _copy_entry(src: Path, src_st: os.stat_result, dst: Path, preserve_owner: bool) -> None:
    mode = src_st.st_mode
    if stat.S_ISSOCK(mode):
        raise OSError(errno.EOPNOTSUPP, "socket skipped", str(src))

    _clear(dst)
    if stat.S_ISLNK(mode):
        os.symlink(os.readlink(src), dst)
    elif stat.S_ISREG(mode):
        shutil.copyfile(src, dst, follow_symlinks=False)
    else:
        # fifo, character or block device
        os.mknod(dst, mode, src_st.st_rdev)

    # chown before chmod: the kernel drops setuid/setgid bits on chown.
    if preserve_owner:
        os.lchown(dst, src_st.st_uid, src_st.st_gid)
    if stat.S_ISLNK(mode):
        os.utime(dst, ns=(src_st.st_atime_ns, src_st.st_mtime_ns), follow_symlinks=False)
    else:
        shutil.copystat(src, dst, follow_symlinks=False)


def copy_tree(src: Path, dst: Path, preserve_owner: bool | None = None) -> CopyReport:
    """Copy the contents of ``src`` into ``dst`` the way ``cp -a src/. dst`` does.

    Symlinks are recreated as links (dangling ones included), modes, timestamps
    and, when running as root, ownership are preserved. Entries that cannot be
    copied are recorded in the returned report and the walk carries on.
    A ``dst`` inside ``src`` is refused with ``CopyFailed``.
    """
    if preserve_owner is None:
        preserve_owner = os.geteuid() == 0

    src_real, dst_real = src.resolve(), dst.resolve()
    if dst_real != src_real and dst_real.is_relative_to(src_real):
        raise CopyFailed(f"cannot copy '{src}' into itself, '{dst}'")

    report = CopyReport()
    dst.mkdir(parents=True, exist_ok=True)
    if os.path.samefile(src, dst):
        # dst is already mounted over src; copying would clobber files with themselves.
        return report

    staged_dirs: list[tuple[Path, Path]] = [(src, dst)]

    def on_walk_error(exc: OSError) -> None:
        report.failures.append(_failure(Path(exc.filename or src), exc))

    for root, dirs, files in os.walk(src, onerror=on_walk_error):
        root_path = Path(root)
        target_root = dst / root_path.relative_to(src)

        descend: list[str] = []
        for name in dirs:
            s, d = root_path / name, target_root / name
            try:
                st = os.lstat(s)
                if stat.S_ISDIR(st.st_mode):
                    _make_dir(st, d, preserve_owner)
                    staged_dirs.append((s, d))
                    descend.append(name)
                else:
                    _copy_entry(s, st, d, preserve_owner)
                report.copied += 1
            except OSError as exc:
                report.failures.append(_failure(s, exc))
        dirs[:] = descend

        for name in files:
            s, d = root_path / name, target_root / name
            try:
                _copy_entry(s, os.lstat(s), d, preserve_owner)
                report.copied += 1
            except OSError as exc:
                report.failures.append(_failure(s, exc))

    # Directory times last, deepest first, since filling them in bumps their mtime.
    for s, d in reversed(staged_dirs):
        try:
            shutil.copystat(s, d)
        except OSError as exc:
            report.failures.append(_failure(s, exc))

    return report
