"""Shared test fixtures."""

from pathlib import Path

import pytest
from mdserve.config import Config, ContentConfig, LoggingConfig, ServerConfig
from mdserve.core.paths import ContentRoot, PathResolver
from mdserve.core.routing import RequestClassifier


@pytest.fixture
def www(tmp_path: Path) -> Path:
    """Create an empty content root.

    Use exist_ok=True to allow other fixtures to also create the directory.
    """
    root = tmp_path / "www"
    root.mkdir(exist_ok=True)
    return root


@pytest.fixture
def resolver(www: Path) -> PathResolver:
    return PathResolver(ContentRoot.from_path(www))


@pytest.fixture
def classifier(resolver: PathResolver) -> RequestClassifier:
    return RequestClassifier(resolver)


@pytest.fixture
def test_config(www: Path) -> Config:
    """Create a test configuration rooted at the www fixture."""
    return Config(
        server=ServerConfig(),
        content=ContentConfig(root=www),
        logging=LoggingConfig(),
    )
