"""Breadcrumb trail for a document URL."""

from dataclasses import dataclass
from urllib.parse import quote


@dataclass(frozen=True)
class Breadcrumb:
    """Breadcrumb navigation item. The current page has no path."""

    title: str
    path: str | None = None


def build_breadcrumbs(url_path: str) -> list[Breadcrumb]:
    """Build breadcrumbs from a decoded URL path.

    Starts with "Home" linking to "/". Intermediate segments link to their
    directory; the last segment is the current page. For the root only
    [Home] is returned, which templates skip.

    Args:
        url_path: Decoded URL path, e.g. "/blog/2024/post"

    Returns:
        List of Breadcrumb
    """
    segments = [s for s in url_path.split("/") if s]
    if not segments:
        return [Breadcrumb(title="Home")]

    crumbs = [Breadcrumb(title="Home", path="/")]
    for i, segment in enumerate(segments[:-1]):
        path = "/" + "/".join(quote(s) for s in segments[: i + 1]) + "/"
        crumbs.append(Breadcrumb(title=segment, path=path))
    crumbs.append(Breadcrumb(title=segments[-1].removesuffix(".md")))
    return crumbs
