"""aiohttp server for mdserve.

Application factory and route registration.
"""

import logging

from aiohttp import web

from mdserve.api.content import create_content_routes
from mdserve.api.health import create_health_routes
from mdserve.app_keys import base_url_key, classifier_key, renderer_key
from mdserve.config import Config
from mdserve.core.paths import ContentRoot, PathResolver
from mdserve.core.renderer import MarkdownRenderer
from mdserve.core.routing import RequestClassifier

logger = logging.getLogger(__name__)


def create_app(config: Config) -> web.Application:
    """Create aiohttp application.

    The content root is canonicalized once here; every request is resolved
    against it.

    Args:
        config: Application configuration

    Returns:
        Configured aiohttp application
    """
    app = web.Application()

    root = ContentRoot.from_path(config.content.root)
    if not root.canonical.is_dir():
        logger.warning("Content root does not exist yet: %s", root.lexical)

    app[classifier_key] = RequestClassifier(PathResolver(root))
    app[renderer_key] = MarkdownRenderer()
    app[base_url_key] = config.content.base_url or ""

    # Health check must be registered before the catch-all content route
    app.router.add_routes(create_health_routes())
    app.router.add_routes(create_content_routes())

    return app


def run_server(config: Config) -> None:
    """Run the server.

    Args:
        config: Application configuration
    """
    app = create_app(config)
    web.run_app(app, host=config.server.host, port=config.server.port)
