"""Request path decoding and root confinement.

Turns an untrusted, percent-encoded URL path into a canonical filesystem
location that is proven to live under the content root, symlinks included.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import unquote_to_bytes

from mdserve.core.errors import (
    InvalidEncodingError,
    PathNotFoundError,
    TraversalRejectedError,
)
from mdserve.core.types import URLPath

logger = logging.getLogger(__name__)

# "%" not followed by two hex digits
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


@dataclass(frozen=True)
class ContentRoot:
    """Configured content directory in lexical and canonical form."""

    lexical: Path
    canonical: Path

    @classmethod
    def from_path(cls, path: Path) -> "ContentRoot":
        """Build a root, canonicalizing it once.

        Args:
            path: Content directory as configured

        Returns:
            ContentRoot with symlinks and relative components resolved
        """
        lexical = path.absolute()
        return cls(lexical=lexical, canonical=lexical.resolve())


@dataclass(frozen=True)
class RequestPath:
    """Percent-decoded request path split into segments."""

    segments: tuple[str, ...]
    trailing_slash: bool

    @classmethod
    def parse(cls, raw: str) -> "RequestPath":
        """Decode a raw URL path.

        Empty and "." segments are dropped. ".." segments are kept so the
        resolver can reject them explicitly.

        Args:
            raw: Raw (still percent-encoded) URL path, e.g. "/blog/my%20post"

        Returns:
            Decoded RequestPath

        Raises:
            InvalidEncodingError: If an escape is malformed, the bytes are
                not UTF-8, or the result contains a NUL character
        """
        if _BAD_ESCAPE.search(raw):
            raise InvalidEncodingError(f"Malformed percent-escape in {raw!r}")
        try:
            decoded = unquote_to_bytes(raw).decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidEncodingError(f"Path is not valid UTF-8: {raw!r}") from e
        if "\x00" in decoded:
            raise InvalidEncodingError(f"Path contains NUL: {raw!r}")

        segments = tuple(s for s in decoded.split("/") if s not in ("", "."))
        return cls(segments=segments, trailing_slash=decoded.endswith("/"))

    @property
    def leaf(self) -> str:
        """Last segment, empty for the root."""
        return self.segments[-1] if self.segments else ""

    @property
    def url(self) -> URLPath:
        """Decoded URL path with a leading slash."""
        if not self.segments:
            return URLPath("/")
        path = "/" + "/".join(self.segments)
        return URLPath(path + "/" if self.trailing_slash else path)

    def parent(self) -> "RequestPath":
        """Directory containing the leaf, as a trailing-slash path."""
        return RequestPath(segments=self.segments[:-1], trailing_slash=True)

    def with_leaf(self, leaf: str) -> "RequestPath":
        """Same directory, different leaf name."""
        return RequestPath(segments=(*self.segments[:-1], leaf), trailing_slash=False)


@dataclass(frozen=True)
class ValidatedPath:
    """Canonical location approved by PathResolver."""

    path: Path
    request: RequestPath
    is_symlink: bool = False

    def is_dir(self) -> bool:
        return self.path.is_dir()

    def is_file(self) -> bool:
        return self.path.is_file()


def is_within(root: Path, path: Path) -> bool:
    """Check that path equals root or descends from it, segment by segment.

    Comparing parts rather than strings keeps "/www-evil" from matching
    a root of "/www".
    """
    root_parts = root.parts
    return path.parts[: len(root_parts)] == root_parts


class PathResolver:
    """Resolves request paths to canonical locations under a content root."""

    def __init__(self, root: ContentRoot) -> None:
        """Initialize resolver.

        Args:
            root: Content root, canonicalized at startup
        """
        self._root = root

    @property
    def root(self) -> ContentRoot:
        return self._root

    def resolve(self, raw_url_path: str) -> ValidatedPath:
        """Decode, join and validate a raw URL path.

        Args:
            raw_url_path: Raw request path, e.g. "/blog/post.md"

        Returns:
            ValidatedPath inside the canonical root

        Raises:
            InvalidEncodingError: If the path does not decode to text
            TraversalRejectedError: If the path escapes the root
            PathNotFoundError: If nothing exists at the path
        """
        return self.resolve_request_path(RequestPath.parse(raw_url_path))

    def resolve_request_path(self, request: RequestPath) -> ValidatedPath:
        """Validate an already decoded request path.

        Raises:
            TraversalRejectedError: If a segment is ".." or the canonical
                location escapes the root
            PathNotFoundError: If nothing exists at the path
        """
        if ".." in request.segments:
            raise TraversalRejectedError(f"Parent segment in {request.url!r}")

        candidate = self._root.lexical.joinpath(*request.segments)
        return self.validate(candidate, request)

    def validate(self, candidate: Path, request: RequestPath) -> ValidatedPath:
        """Canonicalize a filesystem path and confine it to the root.

        Args:
            candidate: Filesystem path built under the lexical root
            request: Request path the candidate was derived from

        Returns:
            ValidatedPath for the canonical location

        Raises:
            TraversalRejectedError: If the canonical location escapes the root
            PathNotFoundError: If the candidate does not exist
        """
        try:
            canonical = candidate.resolve(strict=True)
        except FileNotFoundError:
            self._check_nearest_ancestor(candidate)
            raise PathNotFoundError(f"No such path: {request.url!r}") from None
        except (OSError, RuntimeError) as e:
            # symlink loops, a file used as a directory, permissions
            raise PathNotFoundError(f"Cannot resolve {request.url!r}: {e}") from e

        if not is_within(self._root.canonical, canonical):
            raise TraversalRejectedError(f"{request.url!r} resolves outside the root")

        return ValidatedPath(
            path=canonical,
            request=request,
            is_symlink=candidate.is_symlink(),
        )

    def _check_nearest_ancestor(self, candidate: Path) -> None:
        """Reject a missing path whose nearest existing ancestor escapes the root."""
        for ancestor in candidate.parents:
            try:
                canonical = ancestor.resolve(strict=True)
            except (OSError, RuntimeError):
                continue
            if not is_within(self._root.canonical, canonical):
                raise TraversalRejectedError(f"Ancestor {ancestor} resolves outside the root")
            return
