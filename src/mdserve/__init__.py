"""mdserve - serve a directory of Markdown documents as a website."""

__version__ = "0.1.0"
