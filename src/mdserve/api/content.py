"""Content endpoint.

Serves every path under the content root: rendered documents, directory
listings, feeds, static files and canonical-URL redirects.
"""

import logging
from email.utils import formatdate
from hashlib import md5
from pathlib import Path
from urllib.parse import quote

from aiohttp import web

from mdserve import templates
from mdserve.app_keys import base_url_key, classifier_key, renderer_key
from mdserve.core.breadcrumbs import build_breadcrumbs
from mdserve.core.cascade import find_css, find_meta_image
from mdserve.core.errors import DirectoryEnumerationError, RenderingError
from mdserve.core.feed import CONTENT_TYPE as FEED_CONTENT_TYPE
from mdserve.core.feed import build_feed
from mdserve.core.frontmatter import read_document
from mdserve.core.listing import feed_entries, scan_directory
from mdserve.core.paths import RequestPath, ValidatedPath
from mdserve.core.routing import (
    Directory,
    Document,
    Redirect,
    RequestClassifier,
    StaticFile,
)

logger = logging.getLogger(__name__)

STATIC_CHUNK_SIZE = 256 * 1024


def create_content_routes() -> list[web.RouteDef]:
    return [
        web.get("/{path:.*}", get_content),
    ]


async def get_content(request: web.Request) -> web.StreamResponse:
    classifier = request.app[classifier_key]
    raw_path = request.rel_url.raw_path
    target = classifier.resolve(raw_path)

    try:
        if isinstance(target, Redirect):
            raise web.HTTPMovedPermanently(location=target.location)
        if isinstance(target, StaticFile):
            return web.FileResponse(target.path, chunk_size=STATIC_CHUNK_SIZE)
        if isinstance(target, Document):
            return _serve_document(request, classifier, target)
        if isinstance(target, Directory) and target.feed:
            return _serve_feed(request, classifier, target)
        if isinstance(target, Directory):
            return _serve_listing(classifier, target)
    except (DirectoryEnumerationError, RenderingError):
        logger.exception("Failed to serve %s", raw_path)
        return _error_response(500)
    except FileNotFoundError:
        # removed since classification
        return _error_response(404)
    except OSError:
        logger.exception("I/O error serving %s", raw_path)
        return _error_response(500)

    return _error_response(404)


def _serve_document(
    request: web.Request,
    classifier: RequestClassifier,
    target: Document,
) -> web.Response:
    document = read_document(target.path)
    rendered = request.app[renderer_key].render(document.body)

    root = classifier.resolver.root.canonical
    directory = target.path.parent
    markup = templates.document_page(
        document.front_matter,
        rendered.html,
        css=find_css(root, directory),
        meta_image=find_meta_image(root, directory),
        breadcrumbs=build_breadcrumbs(target.url_path),
    )

    etag = _compute_etag(markup)
    if request.headers.get("If-None-Match") == etag:
        return web.Response(status=304, headers={"ETag": etag})

    return web.Response(
        text=markup,
        content_type="text/html",
        headers={
            "ETag": etag,
            "Last-Modified": formatdate(target.path.stat().st_mtime, usegmt=True),
        },
    )


def _serve_listing(classifier: RequestClassifier, target: Directory) -> web.Response:
    directory = _validated_directory(target)
    entries = scan_directory(classifier.resolver, directory)
    markup = templates.listing_page(
        target.url_path,
        entries,
        css=find_css(classifier.resolver.root.canonical, target.path),
    )
    return web.Response(text=markup, content_type="text/html")


def _serve_feed(
    request: web.Request,
    classifier: RequestClassifier,
    target: Directory,
) -> web.Response:
    directory = _validated_directory(target)
    entries = feed_entries(classifier.resolver, directory)
    name = Path(target.url_path).name or "Home"
    xml = build_feed(
        title=name,
        link=quote(target.url_path),
        description=f"Recent documents in {target.url_path}",
        entries=entries,
        base_url=request.app[base_url_key],
    )
    return web.Response(text=xml, content_type=FEED_CONTENT_TYPE, charset="utf-8")


def _validated_directory(target: Directory) -> ValidatedPath:
    request = RequestPath(segments=target.segments, trailing_slash=True)
    return ValidatedPath(path=target.path, request=request)


def _error_response(status: int) -> web.Response:
    if status == 404:
        title, message = "404 Not Found", "The page you requested could not be found."
    else:
        title, message = "500 Internal Server Error", "An internal server error occurred."
    return web.Response(
        status=status,
        text=templates.error_page(title, message),
        content_type="text/html",
    )


def _compute_etag(content: str) -> str:
    # Use first 16 hex chars (64 bits) - enough to detect a changed page
    content_hash = md5(content.encode("utf-8"), usedforsecurity=False).hexdigest()[:16]
    return f'"{content_hash}"'
