"""Core type definitions."""

from typing import NewType

# Root-relative URL path (e.g., "/blog/style.css", "/blog/")
# Distinct from filesystem Path to catch type mismatches
URLPath = NewType("URLPath", str)
