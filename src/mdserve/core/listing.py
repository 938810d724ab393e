"""Directory scanning for listings and feeds.

Every listing request scans the directory afresh; nothing is cached.
"""

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from urllib.parse import quote

from mdserve.core.errors import DirectoryEnumerationError, PathError
from mdserve.core.frontmatter import (
    FrontMatter,
    infer_date,
    infer_summary,
    infer_title,
    parse,
    read_document,
)
from mdserve.core.paths import PathResolver, RequestPath, ValidatedPath
from mdserve.core.routing import DOCUMENT_EXTENSION, INDEX_DOCUMENT
from mdserve.core.types import URLPath

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DocumentMetadataEntry:
    """One entry of a listing or feed."""

    name: str
    path: Path
    url_path: URLPath
    front_matter: FrontMatter
    is_dir: bool = False

    @property
    def display_name(self) -> str:
        """File name without the document extension."""
        if self.is_dir:
            return self.name
        return self.name.removesuffix(f".{DOCUMENT_EXTENSION}")


def sort_key(entry: DocumentMetadataEntry) -> tuple[int, int, str]:
    """Newest first, undated last, then by name ascending."""
    if entry.front_matter.date is None:
        return (1, 0, entry.name)
    return (0, -entry.front_matter.date.toordinal(), entry.name)


def scan_directory(resolver: PathResolver, directory: ValidatedPath) -> list[DocumentMetadataEntry]:
    """Collect documents and sub-directories of a listing directory.

    Hidden entries, index.md and entries that resolve outside the root
    are skipped.

    Args:
        resolver: Resolver for the content root
        directory: Validated directory to list

    Returns:
        Entries sorted newest first, then by name

    Raises:
        DirectoryEnumerationError: If the directory or one of its documents
            cannot be read
    """
    entries: list[DocumentMetadataEntry] = []
    for name, validated in _children(resolver, directory):
        if validated.is_dir():
            entries.append(_directory_entry(resolver, name, validated))
        elif _is_document(name, validated):
            entries.append(_document_entry(name, validated))
    return sorted(entries, key=sort_key)


def feed_entries(resolver: PathResolver, directory: ValidatedPath) -> list[DocumentMetadataEntry]:
    """Collect the documents of a directory for its feed.

    Raises:
        DirectoryEnumerationError: If the directory or one of its documents
            cannot be read
    """
    entries = [
        _document_entry(name, validated)
        for name, validated in _children(resolver, directory)
        if _is_document(name, validated)
    ]
    return sorted(entries, key=sort_key)


def _children(resolver: PathResolver, directory: ValidatedPath) -> list[tuple[str, ValidatedPath]]:
    try:
        with os.scandir(directory.path) as it:
            names = sorted(entry.name for entry in it)
    except OSError as e:
        raise DirectoryEnumerationError(f"Cannot read directory {directory.path}: {e}") from e

    children: list[tuple[str, ValidatedPath]] = []
    for name in names:
        if name.startswith("."):
            continue
        request = RequestPath(segments=(*directory.request.segments, name), trailing_slash=False)
        try:
            validated = resolver.validate(directory.path / name, request)
        except PathError as e:
            logger.warning("Skipping %s in listing: %s", name, e)
            continue
        children.append((name, validated))
    return children


def _is_document(name: str, validated: ValidatedPath) -> bool:
    return (
        name.endswith(f".{DOCUMENT_EXTENSION}")
        and name != INDEX_DOCUMENT
        and validated.is_file()
    )


def _url_for(validated: ValidatedPath, *, is_dir: bool) -> URLPath:
    segments = list(validated.request.segments)
    if not is_dir:
        # clean URL: drop the .md extension
        segments[-1] = segments[-1].removesuffix(f".{DOCUMENT_EXTENSION}")
    path = "/" + "/".join(quote(s) for s in segments)
    return URLPath(path + "/" if is_dir else path)


def _document_entry(name: str, validated: ValidatedPath) -> DocumentMetadataEntry:
    try:
        document = read_document(validated.path)
    except OSError as e:
        raise DirectoryEnumerationError(f"Cannot read {validated.path}: {e}") from e

    return DocumentMetadataEntry(
        name=name,
        path=validated.path,
        url_path=_url_for(validated, is_dir=False),
        front_matter=document.front_matter,
    )


def _directory_entry(
    resolver: PathResolver, name: str, validated: ValidatedPath
) -> DocumentMetadataEntry:
    """Entry for a sub-directory, described by its index.md when present.

    The date always comes from the directory itself.
    """
    front_matter = FrontMatter()
    index = _index_document(resolver, validated)
    if index is not None:
        try:
            parsed = parse(index.read_text(encoding="utf-8", errors="replace"))
        except OSError as e:
            raise DirectoryEnumerationError(f"Cannot read {index}: {e}") from e
        front_matter = FrontMatter(
            title=parsed.front_matter.title or infer_title(parsed.body),
            summary=parsed.front_matter.summary or infer_summary(parsed.body),
            author=parsed.front_matter.author,
        )

    return DocumentMetadataEntry(
        name=name,
        path=validated.path,
        url_path=_url_for(validated, is_dir=True),
        front_matter=replace(front_matter, date=infer_date(validated.path)),
        is_dir=True,
    )


def _index_document(resolver: PathResolver, directory: ValidatedPath) -> Path | None:
    request = RequestPath(segments=(*directory.request.segments, INDEX_DOCUMENT), trailing_slash=False)
    try:
        index = resolver.validate(directory.path / INDEX_DOCUMENT, request)
    except PathError:
        return None
    return index.path if index.is_file() else None
