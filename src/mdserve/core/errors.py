"""Error taxonomy for request resolution and content serving.

Path errors are flattened to a single not-found response by the HTTP layer
so clients cannot tell a blocked path from a missing one. Enumeration and
rendering errors fail the current request with a server error.
"""


class PathError(Exception):
    """Request path could not be turned into a servable location."""

    reason = "invalid"


class InvalidEncodingError(PathError):
    """Percent-encoding is malformed or does not decode to text."""

    reason = "invalid-encoding"


class TraversalRejectedError(PathError):
    """Canonical location falls outside the content root."""

    reason = "traversal"


class PathNotFoundError(PathError):
    """Nothing exists at the validated location."""

    reason = "not-found"


class DirectoryEnumerationError(OSError):
    """A listing or feed directory could not be read completely."""


class RenderingError(RuntimeError):
    """The Markdown renderer failed for a document."""
