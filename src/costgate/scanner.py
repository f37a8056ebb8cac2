"""Filesystem scanner — turns files and directory trees into exact token counts.

Every failure mode folds into ScanResult.files_skipped; nothing here raises
to the caller.
"""

from __future__ import annotations

import logging
import os
import stat
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from costgate.models import ScanResult
from costgate.tokens import DEFAULT_ENCODING, Encoder, count_tokens, get_encoder

logger = logging.getLogger(__name__)

IGNORED_DIRS = frozenset(
    {
        ".git",
        ".hg",
        ".svn",
        "node_modules",
        "__pycache__",
        ".venv",
        "venv",
        "dist",
        "build",
        ".next",
        "coverage",
        ".idea",
        ".vscode",
        "target",
        ".mypy_cache",
        ".pytest_cache",
        ".ruff_cache",
        ".tox",
    }
)

IGNORED_EXTENSIONS = frozenset(
    {
        ".png", ".jpg", ".jpeg", ".gif", ".ico", ".svg", ".webp", ".bmp",
        ".pdf", ".zip", ".gz", ".tar", ".tgz", ".7z", ".rar",
        ".exe", ".dll", ".so", ".dylib", ".bin", ".o", ".a", ".class", ".jar",
        ".woff", ".woff2", ".ttf", ".otf", ".eot",
        ".mp3", ".mp4", ".mov", ".wav", ".avi",
        ".pyc", ".pyo", ".lock", ".db", ".sqlite", ".sqlite3",
    }
)


@dataclass
class _Scan:
    """Settings and visited-directory state for one scan target."""

    encode: Encoder | None
    encoding: str
    ignored_dirs: frozenset[str]
    ignored_extensions: frozenset[str]
    visited: set[str] = field(default_factory=set)

    def encoder(self) -> Encoder:
        # Loaded on the first readable file so empty or missing targets never touch tiktoken
        if self.encode is None:
            self.encode = get_encoder(self.encoding)
        return self.encode


def scan_path(
    path: str | Path,
    *,
    encode: Encoder | None = None,
    encoding: str = DEFAULT_ENCODING,
    base_dir: str | Path | None = None,
    ignored_dirs: Iterable[str] = IGNORED_DIRS,
    ignored_extensions: Iterable[str] = IGNORED_EXTENSIONS,
) -> ScanResult:
    """Count tokens under ``path`` (a file or a directory tree).

    Relative paths resolve against ``base_dir`` (default: the current working
    directory). A directory whose real path was already entered during this
    scan counts as nothing, which stops symlink loops. Without ``encode``,
    the tiktoken ``encoding`` is used.
    """
    scan = _Scan(
        encode=encode,
        encoding=encoding,
        ignored_dirs=frozenset(ignored_dirs),
        ignored_extensions=frozenset(e.lower() for e in ignored_extensions),
    )

    target = Path(path)
    if not target.is_absolute():
        target = Path(base_dir) / target if base_dir is not None else Path.cwd() / target

    return _scan(target, scan)


def scan_paths(
    paths: Iterable[str | Path],
    *,
    encode: Encoder | None = None,
    encoding: str = DEFAULT_ENCODING,
    base_dir: str | Path | None = None,
    ignored_dirs: Iterable[str] = IGNORED_DIRS,
    ignored_extensions: Iterable[str] = IGNORED_EXTENSIONS,
) -> ScanResult:
    """Scan several targets and sum the per-target results.

    Each target is an independent scan: a tree named twice, or named with
    one of its parents, is counted once per mention.
    """
    ignored_dirs = frozenset(ignored_dirs)
    ignored_extensions = frozenset(ignored_extensions)

    total = ScanResult.zero()
    for path in paths:
        total += scan_path(
            path,
            encode=encode,
            encoding=encoding,
            base_dir=base_dir,
            ignored_dirs=ignored_dirs,
            ignored_extensions=ignored_extensions,
        )
    return total


def _scan(path: Path, scan: _Scan) -> ScanResult:
    try:
        st = path.stat()
    except (OSError, ValueError) as exc:
        logger.debug("skip %s: cannot stat (%s)", path, exc)
        return ScanResult.skipped()

    if stat.S_ISDIR(st.st_mode):
        return _scan_dir(path, scan)

    if not stat.S_ISREG(st.st_mode):
        # FIFOs, sockets and devices would block or stream forever
        logger.debug("skip %s: not a regular file", path)
        return ScanResult.skipped()

    return _scan_file(path, scan)


def _scan_dir(path: Path, scan: _Scan) -> ScanResult:
    if path.name in scan.ignored_dirs:
        return ScanResult.zero()

    real = os.path.realpath(path)
    if real in scan.visited:
        logger.debug("skip %s: already scanned as %s", path, real)
        return ScanResult.zero()
    scan.visited.add(real)

    try:
        entries = sorted(path.iterdir())
    except OSError as exc:
        logger.debug("skip %s: cannot list (%s)", path, exc)
        return ScanResult.skipped()

    total = ScanResult.zero()
    for entry in entries:
        total += _scan(entry, scan)
    return total


def _scan_file(path: Path, scan: _Scan) -> ScanResult:
    if path.suffix.lower() in scan.ignored_extensions:
        return ScanResult.skipped()

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.debug("skip %s: unreadable (%s)", path, exc)
        return ScanResult.skipped()

    if "\x00" in text:
        logger.debug("skip %s: binary content", path)
        return ScanResult.skipped()

    try:
        tokens = count_tokens(text, scan.encoder())
    except Exception:
        logger.warning("skip %s: tokenizer failed", path, exc_info=True)
        return ScanResult.skipped()

    return ScanResult(tokens=tokens, files_counted=1)
