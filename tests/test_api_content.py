"""Tests for the content endpoint."""

import os
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest
from aiohttp.test_utils import TestClient
from mdserve.config import Config
from mdserve.server import create_app


@pytest.fixture
def client(test_config: Config, aiohttp_client: Any) -> Any:
    """Create test client with configured app."""
    return aiohttp_client(create_app(test_config))


class TestDocuments:
    """Tests for rendered documents."""

    @pytest.mark.asyncio
    async def test__document__renders_html(self, www: Path, client: Any) -> None:
        (www / "about.md").write_text("---\ntitle: About Us\nauthor: Ada\n---\n# About\n\nHello.\n")

        test_client: TestClient = await client
        response = await test_client.get("/about.md")

        assert response.status == 200
        assert response.headers["Content-Type"].startswith("text/html")
        body = await response.text()
        assert "<title>About Us</title>" in body
        assert '<meta name="author" content="Ada">' in body
        assert "<p>Hello.</p>" in body

    @pytest.mark.asyncio
    async def test__clean_url__renders_document(self, www: Path, client: Any) -> None:
        (www / "blog").mkdir()
        (www / "blog" / "post.md").write_text("# Post\n\nText.\n")
        (www / "blog" / "style.css").write_text("")

        test_client: TestClient = await client
        response = await test_client.get("/blog/post")

        assert response.status == 200
        body = await response.text()
        assert '<link rel="stylesheet" href="/blog/style.css">' in body
        assert '<a href="/blog/">blog</a>' in body

    @pytest.mark.asyncio
    async def test__index_document__serves_directory(self, www: Path, client: Any) -> None:
        (www / "index.md").write_text("# Welcome\n")

        test_client: TestClient = await client
        slash = await test_client.get("/")
        alias = await test_client.get("/index.html")

        assert slash.status == 200
        assert alias.status == 200
        assert "<title>Welcome</title>" in await slash.text()
        assert await alias.text() == await slash.text()

    @pytest.mark.asyncio
    async def test__matching_etag__returns_304(self, www: Path, client: Any) -> None:
        (www / "page.md").write_text("# Page\n")

        test_client: TestClient = await client
        first = await test_client.get("/page.md")
        etag = first.headers["ETag"]
        second = await test_client.get("/page.md", headers={"If-None-Match": etag})

        assert "Last-Modified" in first.headers
        assert second.status == 304

    @pytest.mark.asyncio
    async def test__impossible_date__still_renders(self, www: Path, client: Any) -> None:
        """Treat an off-calendar date as missing instead of failing the page."""
        (www / "post.md").write_text("---\ntitle: Post\ndate: 2024-13-01\n---\n# Post\n")

        test_client: TestClient = await client
        response = await test_client.get("/post")

        assert response.status == 200
        assert "<title>Post</title>" in await response.text()

    @pytest.mark.asyncio
    async def test__rendering_failure__returns_500(self, www: Path, client: Any) -> None:
        (www / "page.md").write_text("# Page\n")

        test_client: TestClient = await client
        with patch("mistune.Markdown.parse", side_effect=ValueError("boom")):
            response = await test_client.get("/page.md")

        assert response.status == 500
        assert "500 Internal Server Error" in await response.text()


class TestListings:
    """Tests for directory listings and redirects."""

    @pytest.mark.asyncio
    async def test__directory_without_slash__redirects(self, www: Path, client: Any) -> None:
        (www / "blog").mkdir()

        test_client: TestClient = await client
        response = await test_client.get("/blog", allow_redirects=False)

        assert response.status == 301
        assert response.headers["Location"] == "/blog/"

    @pytest.mark.asyncio
    async def test__listing__shows_documents_newest_first(self, www: Path, client: Any) -> None:
        (www / "blog").mkdir()
        (www / "blog" / "old.md").write_text("---\ntitle: Old\ndate: 2023-01-01\n---\n")
        (www / "blog" / "new.md").write_text("---\ntitle: New\ndate: 2024-01-01\n---\n")

        test_client: TestClient = await client
        response = await test_client.get("/blog/")

        assert response.status == 200
        body = await response.text()
        assert "Index of /blog/" in body
        assert body.index("New") < body.index("Old")
        assert '<a href="/blog/new">' in body

    @pytest.mark.asyncio
    async def test__empty_directory__lists_nothing(self, www: Path, client: Any) -> None:
        (www / "empty").mkdir()

        test_client: TestClient = await client
        response = await test_client.get("/empty/")

        assert response.status == 200
        assert "Empty directory." in await response.text()

    @pytest.mark.asyncio
    async def test__enumeration_failure__returns_500(self, www: Path, client: Any) -> None:
        (www / "blog").mkdir()

        test_client: TestClient = await client
        with patch("os.scandir", side_effect=PermissionError("denied")):
            response = await test_client.get("/blog/")

        assert response.status == 500


class TestFeeds:
    """Tests for generated RSS feeds."""

    @pytest.mark.asyncio
    async def test__feed__is_rss(self, www: Path, client: Any) -> None:
        (www / "blog").mkdir()
        (www / "blog" / "a.md").write_text("---\ntitle: A\ndate: 2024-01-01\n---\n")

        test_client: TestClient = await client
        response = await test_client.get("/blog/feed.xml")

        assert response.status == 200
        assert response.headers["Content-Type"] == "application/rss+xml; charset=utf-8"
        body = await response.text()
        assert body.startswith('<?xml version="1.0" encoding="UTF-8"?>')
        assert "<title>blog</title>" in body
        assert "<link>/blog/a</link>" in body

    @pytest.mark.asyncio
    async def test__impossible_date_sibling__keeps_feed_and_listing(
        self, www: Path, client: Any
    ) -> None:
        (www / "blog").mkdir()
        (www / "blog" / "good.md").write_text("---\ntitle: Good\ndate: 2024-01-01\n---\n")
        (www / "blog" / "bad.md").write_text("---\ntitle: Bad\ndate: 2024-02-30\n---\n")

        test_client: TestClient = await client
        feed = await test_client.get("/blog/feed.xml")
        listing = await test_client.get("/blog/")

        assert feed.status == 200
        assert listing.status == 200
        body = await feed.text()
        assert "<title>Good</title>" in body
        assert "<title>Bad</title>" in body

    @pytest.mark.asyncio
    async def test__base_url__makes_links_absolute(
        self, www: Path, test_config: Config, aiohttp_client: Any
    ) -> None:
        test_config.content.base_url = "https://example.com"
        (www / "a.md").write_text("# A\n")

        test_client: TestClient = await aiohttp_client(create_app(test_config))
        response = await test_client.get("/rss.xml")

        assert "<link>https://example.com/a</link>" in await response.text()

    @pytest.mark.asyncio
    async def test__feed_under_index_directory__returns_404(
        self, www: Path, client: Any
    ) -> None:
        (www / "docs").mkdir()
        (www / "docs" / "index.md").write_text("# Docs\n")

        test_client: TestClient = await client
        response = await test_client.get("/docs/feed.xml")

        assert response.status == 404


class TestStaticFiles:
    """Tests for static file streaming."""

    @pytest.mark.asyncio
    async def test__stylesheet__is_served_as_is(self, www: Path, client: Any) -> None:
        (www / "style.css").write_text("body { color: red; }")

        test_client: TestClient = await client
        response = await test_client.get("/style.css")

        assert response.status == 200
        assert response.headers["Content-Type"].startswith("text/css")
        assert await response.text() == "body { color: red; }"

    @pytest.mark.asyncio
    async def test__large_file__streams_completely(self, www: Path, client: Any) -> None:
        payload = os.urandom(1024 * 1024)
        (www / "blob.pdf").write_bytes(payload)

        test_client: TestClient = await client
        response = await test_client.get("/blob.pdf")

        assert response.status == 200
        assert await response.read() == payload


class TestNotFound:
    """Tests for rejected and missing paths."""

    @pytest.mark.asyncio
    async def test__traversal_and_missing__are_identical(
        self, tmp_path: Path, www: Path, client: Any
    ) -> None:
        """Answer traversal attempts exactly like missing files."""
        (tmp_path / "secret.md").write_text("# Secret")
        os.symlink(tmp_path / "secret.md", www / "leak.md")

        test_client: TestClient = await client
        missing = await test_client.get("/missing.md")
        symlink = await test_client.get("/leak.md")
        bad_encoding = await test_client.get("/%ff.md")

        bodies = {await r.text() for r in (missing, symlink, bad_encoding)}
        assert {r.status for r in (missing, symlink, bad_encoding)} == {404}
        assert len(bodies) == 1
        assert "Secret" not in bodies.pop()

    @pytest.mark.asyncio
    async def test__unknown_extension__returns_404(self, www: Path, client: Any) -> None:
        (www / "run.sh").write_text("echo hi")

        test_client: TestClient = await client
        response = await test_client.get("/run.sh")

        assert response.status == 404
