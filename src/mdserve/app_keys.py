"""Application keys for type-safe app configuration access."""

from aiohttp import web

from mdserve.core.renderer import MarkdownRenderer
from mdserve.core.routing import RequestClassifier

classifier_key = web.AppKey("classifier", RequestClassifier)
renderer_key = web.AppKey("renderer", MarkdownRenderer)
base_url_key = web.AppKey("base_url", str)
