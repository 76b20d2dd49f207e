"""Recursive directory copy for published assets.

Walks a source tree, filters every entry through :func:`valid_path` (and
the optional gitignore-style patterns), and hands each qualifying file
to a :class:`~assetpub.transport.Transport`.  The walk stops at the first
failed transfer; files copied before it are kept.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

from ._exclude import ExcludeFilter, valid_path
from .exceptions import SyncError, TransferError
from .transport import Transport

log = logging.getLogger("assetpub")

DEFAULT_DIR_MODE = 0o777


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CopySpec:
    """Options for one directory copy.

    Attributes:
        file_types: Extensions (without dot) to copy.  Empty copies all files.
        exclude: Exclusion tokens: names (``.svn``) or relative paths
            (``/a/b``), forward-slash separated.
        level: Recursion depth.  ``-1`` copies everything, ``0`` only the
            files directly inside the directory, ``N`` descends N levels.
        new_dir_mode: Mode applied to created directories.
        new_file_mode: Mode applied to copied files, ``None`` to keep the
            process default.
        is_remote: True when copying through a remote transport; modes
            are not applied then.
        ignore_patterns: Extra gitignore-style patterns.
    """
    file_types: frozenset[str] = frozenset()
    exclude: frozenset[str] = frozenset()
    level: int = -1
    new_dir_mode: int | None = DEFAULT_DIR_MODE
    new_file_mode: int | None = None
    is_remote: bool = False
    ignore_patterns: tuple[str, ...] = ()


@dataclass
class SyncReport:
    """Relative paths (forward slashes) copied and skipped by a sync."""
    copied: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.copied)


# ---------------------------------------------------------------------------
# Copy
# ---------------------------------------------------------------------------

def copy_directory(
    src: str,
    dst: str,
    spec: CopySpec,
    transport: Transport,
    base: str = "",
) -> SyncReport:
    """Copy directory *src* to *dst* (created if missing) per *spec*.

    *base* is the path of *src* relative to the directory being published
    (``""`` for the top level).  Raises :class:`SyncError` naming the
    relative path of the first entry that could not be copied.
    """
    report = SyncReport()
    ignore = ExcludeFilter(patterns=spec.ignore_patterns)
    _copy_recursive(src, dst, base, spec.level, spec, transport, ignore, report,
                    frozenset([os.path.realpath(src)]))
    log.info("[sync] %s -> %s: %d file(s)", src, dst, report.total)
    return report


def _copy_recursive(
    src: str,
    dst: str,
    base: str,
    level: int,
    spec: CopySpec,
    transport: Transport,
    ignore: ExcludeFilter,
    report: SyncReport,
    ancestors: frozenset[str],
) -> None:
    dir_mode = None if spec.is_remote else spec.new_dir_mode
    try:
        transport.makedirs(dst, dir_mode)
        names = sorted(os.listdir(src))
    except (OSError, TransferError) as exc:
        raise SyncError(base or "/", str(exc)) from exc

    for name in names:
        path = os.path.join(src, name)
        rel = f"{base}/{name}"
        is_file = os.path.isfile(path)
        if not is_file and not os.path.isdir(path):
            # neither file nor directory, e.g. a dangling symlink
            log.debug("[sync] skipping special entry %s", path)
            report.skipped.append(rel.lstrip("/"))
            continue
        if not valid_path(base, name, is_file, spec.file_types, spec.exclude) \
                or (ignore.active and ignore.is_excluded(rel, is_dir=not is_file)):
            report.skipped.append(rel.lstrip("/"))
            continue
        if is_file:
            try:
                transport.copy_file(path, dst, name)
            except TransferError as exc:
                raise SyncError(rel.lstrip("/"), str(exc)) from exc
            if spec.new_file_mode is not None and not spec.is_remote:
                transport.chmod(transport.join(dst, name), spec.new_file_mode)
            report.copied.append(rel.lstrip("/"))
        elif level:
            real = os.path.realpath(path)
            if real in ancestors:
                log.debug("[sync] skipping symlink loop %s -> %s", path, real)
                report.skipped.append(rel.lstrip("/"))
                continue
            _copy_recursive(
                path, transport.join(dst, name), rel,
                level - 1 if level > 0 else level,
                spec, transport, ignore, report, ancestors | {real},
            )
