"""Entry filtering for directory publishing.

``valid_path`` applies exclusion tokens and file-type suffixes to one
directory entry.  ``ExcludeFilter`` adds optional gitignore-style
patterns (``--ignore`` / ``--ignore-from``) on top of that.

Pattern syntax follows gitignore rules (implemented by
``dulwich.ignore.IgnoreFilter``).
"""

from __future__ import annotations

from pathlib import Path
from typing import Collection, Sequence

from dulwich.ignore import IgnoreFilter


def _split_ext(name: str) -> str:
    """Return the text after the last '.', or '' when there is none."""
    _, dot, ext = name.rpartition(".")
    return ext if dot else ""


def _matches_token(rel_path: str, token: str) -> bool:
    """True if *rel_path* is *token* or lies underneath it."""
    token = token.strip("/")
    if not token:
        return False
    rel_path = rel_path.lstrip("/")
    return rel_path == token or rel_path.startswith(token + "/")


def valid_path(
    base: str,
    name: str,
    is_file: bool,
    file_types: Collection[str] = (),
    exclude: Collection[str] = (),
) -> bool:
    """Decide whether a directory entry takes part in a copy.

    *base* is the entry's parent relative to the published directory,
    using forward slashes regardless of ``os.sep`` (``""`` at the root,
    ``"/css"`` one level down).  An exclusion token may be a bare name
    (``.svn`` rejects that name at any depth) or a relative path
    (``/a/b`` rejects ``a/b`` and everything below it, but not ``a/bc``).

    Directories always pass the suffix check.  Files pass it when
    *file_types* is empty or contains the extension after the last dot;
    files without an extension are rejected while a filter is active.
    """
    rel_path = f"{base}/{name}"
    for token in exclude:
        if name == token or _matches_token(rel_path, token):
            return False
    if not is_file or not file_types:
        return True
    ext = _split_ext(name)
    if ext:
        return ext in file_types
    return False


def read_patterns(path: str) -> list[str]:
    """Read gitignore-style patterns from a file, skipping blanks and comments."""
    result: list[str] = []
    for raw in Path(path).read_text(encoding="utf-8").splitlines():
        line = raw.strip()
        if line and not line.startswith("#"):
            result.append(line)
    return result


class ExcludeFilter:
    """Gitignore-style patterns from ``--ignore`` and ``--ignore-from``."""

    def __init__(self, *, patterns: Sequence[str] | None = None) -> None:
        lines = [p.encode("utf-8") for p in patterns or ()]
        self._filter: IgnoreFilter | None = IgnoreFilter(lines) if lines else None

    @property
    def active(self) -> bool:
        """True if any pattern is configured."""
        return self._filter is not None

    def is_excluded(self, rel_path: str, *, is_dir: bool = False) -> bool:
        """Check a slash-separated path relative to the published root."""
        if self._filter is None:
            return False
        rel_path = rel_path.lstrip("/")
        check = rel_path + "/" if is_dir else rel_path
        return self._filter.is_ignored(check) is True
