"""Utility functions for blogship.

Key functions:
    slugify: Convert a title or filename to a URL slug.
    is_markdown: Check if a path is a Markdown file.
    find_executable: Locate an executable in PATH.
    clean_worktree: Empty a git working tree, keeping its .git directory.
    tree_digest: Hash a directory tree's paths and bytes.
"""

from __future__ import annotations

import hashlib
import re
import shutil
from pathlib import Path

GIT_DIR = ".git"


def slugify(name: str) -> str:
    """Convert a title or filename stem to a slug, dropping a date prefix.

    Args:
        name: Title or filename stem.

    Returns:
        URL-friendly slug.

    Examples:
        >>> slugify("Throttling in Go")
        'throttling-in-go'

        >>> slugify("2022-10-07-throttling-in-go")
        'throttling-in-go'
    """
    cleaned = name
    if "-" in cleaned:
        parts = cleaned.split("-")
        if len(parts) >= 4 and all(p.isdigit() for p in parts[:3]):
            cleaned = "-".join(parts[3:])
    cleaned = re.sub(r"[^a-zA-Z0-9]+", "-", cleaned)
    cleaned = cleaned.strip("-").lower()
    return cleaned or "untitled"


def is_markdown(path: Path) -> bool:
    """Check if a path is a Markdown file (case-insensitive .md)."""
    return path.suffix.lower() == ".md"


def find_executable(name: str) -> str | None:
    """Find an executable by name or path.

    Args:
        name: Executable name (looked up in PATH) or a path to one.

    Returns:
        Full path to the executable if found, None otherwise.
    """
    found = shutil.which(name)
    if found:
        return found
    candidate = Path(name)
    if candidate.is_file():
        return str(candidate)
    return None


def clean_worktree(path: Path) -> list[str]:
    """Delete everything in a working tree except its .git directory.

    Hidden files are removed too, so nothing generated by an earlier run
    survives into the next one.

    Args:
        path: Root of the working tree.

    Returns:
        Sorted names of the top-level entries that were removed.
    """
    removed = []
    for entry in sorted(path.iterdir()):
        if entry.name == GIT_DIR:
            continue
        if entry.is_dir() and not entry.is_symlink():
            shutil.rmtree(entry)
        else:
            entry.unlink()
        removed.append(entry.name)
    return removed


def ensure_absent(path: Path) -> None:
    """Remove a file or directory tree if it exists."""
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    elif path.exists() or path.is_symlink():
        path.unlink()


def iter_tree(root: Path) -> list[Path]:
    """Return all files below root in a stable order, skipping .git."""
    files = []
    for path in root.rglob("*"):
        rel = path.relative_to(root)
        if rel.parts and rel.parts[0] == GIT_DIR:
            continue
        if path.is_file():
            files.append(path)
    return sorted(files, key=lambda p: p.relative_to(root).as_posix())


def tree_digest(root: Path) -> str:
    """Compute a SHA-256 digest over a directory tree.

    The digest covers each file's relative path and contents, so two trees
    share a digest exactly when they are byte-for-byte identical.
    """
    digest = hashlib.sha256()
    for path in iter_tree(root):
        digest.update(path.relative_to(root).as_posix().encode("utf-8"))
        digest.update(b"\0")
        digest.update(hashlib.sha256(path.read_bytes()).digest())
    return digest.hexdigest()
