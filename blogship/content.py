"""Content loading and validation for blogship.

This module reads the Markdown documents of the blog and checks the
front matter every document must carry before the generator ever sees it.
A document without a title or a parseable date stops the build at once.

Key classes:
- ContentDocument: Dataclass representing one validated document.
- FileContentLoader: Discovers Markdown files under the content directory.
- ContentTree: Loads and validates every document, failing fast.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any

import yaml

from .errors import ContentError
from .utils import is_markdown

FRONTMATTER_RE = re.compile(
    r"\A---[ \t]*\r?\n(.*?)^---[ \t]*(?:\r?\n|\Z)", re.DOTALL | re.MULTILINE
)

SECTION_INDEX = "_index.md"


@dataclass(frozen=True)
class ContentDocument:
    """A validated Markdown document.

    Attributes:
        path: Path to the source file; identifies the document.
        title: Title from front matter.
        date: Publication date (calendar date).
        tags: Tags, order irrelevant, duplicates collapsed.
        body: Markdown body following the front matter.
        draft: Whether the front matter marks the document as a draft.
        front_matter: The full parsed front matter mapping.
    """

    path: Path
    title: str
    date: date | None
    tags: frozenset[str]
    body: str
    draft: bool = False
    front_matter: dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def is_section(self) -> bool:
        return self.path.name == SECTION_INDEX


def parse_front_matter(text: str, path: Path) -> tuple[dict[str, Any], str]:
    """Split a document into its YAML front matter and body.

    Args:
        text: Raw file content.
        path: Path to the file, used in error messages.

    Returns:
        Tuple of (front matter dict, remaining body).

    Raises:
        ContentError: If the block is missing, malformed or not a mapping.
    """
    text = text.lstrip("\ufeff")
    match = FRONTMATTER_RE.match(text)
    if not match:
        raise ContentError(path, "missing front matter block delimited by '---'")
    try:
        data = yaml.safe_load(match.group(1))
    except yaml.YAMLError as exc:
        raise ContentError(path, f"malformed front matter: {exc}") from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ContentError(path, "front matter must be a mapping")
    return data, text[match.end() :]


def parse_date(value: Any) -> date:
    """Coerce a front matter date value to a calendar date.

    Accepts ``date`` and ``datetime`` objects (as produced by YAML) and
    ISO-like strings such as ``2022-10-07`` or ``2022-10-07T09:00:00Z``.

    Raises:
        ValueError: If the value cannot be interpreted as a date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        raw = value.strip()
        if raw.endswith(("Z", "z")):
            raw = raw[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(raw).date()
        except ValueError:
            raise ValueError(f"invalid ISO date {value!r}") from None
    raise ValueError(f"unsupported date value {value!r}")


def normalize_tags(value: Any) -> frozenset[str]:
    """Normalize a front matter tags value.

    Raises:
        ValueError: If tags is not a list of strings.
    """
    if value is None:
        return frozenset()
    if not isinstance(value, list):
        raise ValueError("tags must be a list of strings")
    tags = set()
    for tag in value:
        if not isinstance(tag, str):
            raise ValueError(f"tag {tag!r} is not a string")
        if tag.strip():
            tags.add(tag.strip())
    return frozenset(tags)


class FileContentLoader:
    """Discovers Markdown documents in a content directory.

    Attributes:
        content_dir: Directory containing the documents.
    """

    def __init__(self, content_dir: Path):
        self.content_dir = content_dir

    def iter_files(self) -> list[Path]:
        """Return all Markdown files, sorted so that loading is deterministic."""
        files = [
            path
            for path in self.content_dir.rglob("*")
            if path.is_file() and is_markdown(path)
        ]
        return sorted(files, key=lambda p: p.relative_to(self.content_dir).as_posix())


def load_document(path: Path) -> ContentDocument:
    """Read and validate a single document.

    Section index files (``_index.md``) only need a title; every other
    document also needs a parseable date.

    Raises:
        ContentError: If the document is invalid.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ContentError(path, f"cannot read file: {exc}") from exc

    front_matter, body = parse_front_matter(raw, path)

    title = front_matter.get("title")
    if title is not None and not isinstance(title, str):
        raise ContentError(path, f"title must be a string, got {title!r}")
    if not title or not title.strip():
        raise ContentError(path, "front matter is missing a non-empty 'title'")

    published: date | None = None
    if "date" in front_matter or path.name != SECTION_INDEX:
        if front_matter.get("date") is None:
            raise ContentError(path, "front matter is missing 'date'")
        try:
            published = parse_date(front_matter["date"])
        except ValueError as exc:
            raise ContentError(path, f"unparseable date: {exc}") from exc

    draft = front_matter.get("draft", False)
    if not isinstance(draft, bool):
        raise ContentError(path, f"draft must be true or false, got {draft!r}")

    try:
        tags = normalize_tags(front_matter.get("tags"))
    except ValueError as exc:
        raise ContentError(path, str(exc)) from exc

    return ContentDocument(
        path=path,
        title=title.strip(),
        date=published,
        tags=tags,
        body=body,
        draft=draft,
        front_matter=front_matter,
    )


class ContentTree:
    """The blog's content source tree.

    Attributes:
        content_dir: Directory containing the documents.
    """

    def __init__(self, content_dir: Path, loader: FileContentLoader | None = None):
        self.content_dir = content_dir
        self._loader = loader or FileContentLoader(content_dir)

    def load(self) -> list[ContentDocument]:
        """Load every document, stopping at the first invalid one.

        Returns:
            Documents in path order.

        Raises:
            ContentError: If the directory is missing or any document is invalid.
        """
        if not self.content_dir.is_dir():
            raise ContentError(self.content_dir, "content directory does not exist")
        return [load_document(path) for path in self._loader.iter_files()]
