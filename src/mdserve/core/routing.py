"""Request classification.

Decides, once per request, which of {document, listing, feed, static file,
redirect, not found} applies to a validated path. The outcome is a closed
set of immutable target types consumed by the HTTP layer.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from mdserve.core.errors import PathError, PathNotFoundError
from mdserve.core.paths import PathResolver, RequestPath, ValidatedPath
from mdserve.core.types import URLPath

logger = logging.getLogger(__name__)

DOCUMENT_EXTENSION = "md"
INDEX_DOCUMENT = "index.md"
INDEX_HTML = "index.html"
FEED_NAMES = frozenset({"feed.xml", "rss.xml"})

STATIC_EXTENSIONS = frozenset(
    {
        "css", "js", "mjs", "map", "json", "xml", "txt", "pdf",
        "png", "jpg", "jpeg", "gif", "svg", "webp", "ico", "avif",
        "woff", "woff2", "ttf", "otf", "eot",
        "mp4", "webm", "mp3", "ogg", "wav",
    }
)  # fmt: skip


@dataclass(frozen=True)
class Document:
    """Render a Markdown document."""

    path: Path
    url_path: URLPath


@dataclass(frozen=True)
class Directory:
    """List a directory, or build its feed when feed is set."""

    path: Path
    url_path: URLPath
    feed: bool = False
    segments: tuple[str, ...] = field(default=(), compare=False, repr=False)


@dataclass(frozen=True)
class StaticFile:
    """Stream a file as-is."""

    path: Path


@dataclass(frozen=True)
class Redirect:
    """Permanent redirect to the canonical URL."""

    location: str


@dataclass(frozen=True)
class NotFound:
    """Nothing servable. Also used for rejected paths."""

    reason: str = field(default="not-found", compare=False)


ResolvedTarget = Document | Directory | StaticFile | Redirect | NotFound


def _canonical_location(raw_path: str) -> str:
    """Directory URL with its trailing slash.

    Leading slashes collapse to one so "//docs" cannot become a
    protocol-relative "//docs/" pointing at another host.
    """
    return "/" + raw_path.lstrip("/") + "/"


def file_extension(name: str) -> str | None:
    """Lowercased extension without the dot, or None."""
    stem, dot, ext = name.rpartition(".")
    if not dot or not stem or not ext:
        return None
    return ext.lower()


@dataclass(frozen=True)
class RequestShape:
    """Routing-relevant facts about the request as the client sent it."""

    raw_path: str
    trailing_slash: bool
    extension: str | None
    names_index: bool
    names_feed: bool

    @classmethod
    def from_request(cls, raw_path: str, request: RequestPath) -> "RequestShape":
        leaf = "" if request.trailing_slash else request.leaf
        return cls(
            raw_path=raw_path,
            trailing_slash=raw_path.endswith("/"),
            extension=file_extension(leaf) if leaf else None,
            names_index=leaf == INDEX_HTML,
            names_feed=leaf in FEED_NAMES,
        )

    @property
    def names_alias(self) -> bool:
        """Leaf stands for the parent directory (index.html, feed.xml)."""
        return self.names_index or self.names_feed


class RequestClassifier:
    """Maps request paths to resolved targets under one content root."""

    def __init__(self, resolver: PathResolver) -> None:
        self._resolver = resolver

    @property
    def resolver(self) -> PathResolver:
        return self._resolver

    def resolve(self, raw_path: str) -> ResolvedTarget:
        """Run the whole pipeline for a raw request path.

        Path errors never escape: invalid encoding, traversal and missing
        files all become NotFound so that responses cannot be told apart.

        Args:
            raw_path: Raw URL path without query string

        Returns:
            ResolvedTarget for the request
        """
        try:
            request = RequestPath.parse(raw_path)
        except PathError as e:
            return self._not_found(raw_path, e)

        shape = RequestShape.from_request(raw_path, request)

        if shape.names_alias:
            target = self._resolve_alias(request, shape)
            if not isinstance(target, NotFound):
                return target

        try:
            validated = self._resolver.resolve_request_path(request)
        except PathNotFoundError as e:
            clean = self._clean_url_document(request, shape)
            return clean if clean is not None else self._not_found(raw_path, e)
        except PathError as e:
            return self._not_found(raw_path, e)

        return self.classify(validated, shape)

    def classify(self, validated: ValidatedPath, shape: RequestShape) -> ResolvedTarget:
        """Classify a validated location. First matching rule wins.

        Args:
            validated: Location approved by PathResolver
            shape: How the client phrased the request

        Returns:
            ResolvedTarget for the location
        """
        url_path = validated.request.url

        if validated.is_dir():
            if not shape.trailing_slash and not shape.names_alias:
                return Redirect(location=_canonical_location(shape.raw_path))

            index = self._index_document(validated)
            if shape.trailing_slash or shape.names_index:
                if index is not None:
                    return Document(path=index.path, url_path=url_path)
                return Directory(
                    path=validated.path,
                    url_path=url_path,
                    segments=validated.request.segments,
                )

            if shape.names_feed and index is None:
                return Directory(
                    path=validated.path,
                    url_path=url_path,
                    feed=True,
                    segments=validated.request.segments,
                )

            return NotFound()

        # "file/" names a directory that does not exist
        if shape.trailing_slash or not validated.is_file():
            return NotFound()

        extension = file_extension(validated.path.name)
        if extension == DOCUMENT_EXTENSION:
            return Document(path=validated.path, url_path=url_path)

        if extension not in STATIC_EXTENSIONS:
            clean = self._clean_url_document(validated.request, shape)
            return clean if clean is not None else NotFound()

        return StaticFile(path=validated.path)

    def _resolve_alias(self, request: RequestPath, shape: RequestShape) -> ResolvedTarget:
        """Classify the directory an index.html or feed leaf stands for."""
        try:
            directory = self._resolver.resolve_request_path(request.parent())
        except PathError as e:
            return self._not_found(shape.raw_path, e)
        if not directory.is_dir():
            return NotFound()
        return self.classify(directory, shape)

    def _index_document(self, directory: ValidatedPath) -> ValidatedPath | None:
        """Validated index.md inside a directory, if one exists."""
        request = RequestPath(
            segments=(*directory.request.segments, INDEX_DOCUMENT),
            trailing_slash=False,
        )
        try:
            index = self._resolver.validate(directory.path / INDEX_DOCUMENT, request)
        except PathError:
            return None
        return index if index.is_file() else None

    def _clean_url_document(
        self, request: RequestPath, shape: RequestShape
    ) -> Document | None:
        """Look up leaf + ".md" for a request without a known extension."""
        if not request.segments or shape.trailing_slash:
            return None
        if shape.extension == DOCUMENT_EXTENSION or shape.extension in STATIC_EXTENSIONS:
            return None

        sibling = request.with_leaf(f"{request.leaf}.{DOCUMENT_EXTENSION}")
        try:
            document = self._resolver.resolve_request_path(sibling)
        except PathError:
            return None
        if not document.is_file():
            return None
        return Document(path=document.path, url_path=request.url)

    def _not_found(self, raw_path: str, error: PathError) -> NotFound:
        logger.debug("Rejected %s (%s): %s", raw_path, error.reason, error)
        return NotFound(reason=error.reason)
