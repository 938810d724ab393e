"""Directory-scoped asset cascade.

A stylesheet applies to its directory and every descendant unless a nearer
one overrides it: /blog/style.css wins over /style.css for anything under
/blog/. Inputs must already be canonical; callers validate the document
path with PathResolver first.
"""

from collections.abc import Iterator, Sequence
from pathlib import Path
from urllib.parse import quote

from mdserve.core.types import URLPath

STYLESHEET_NAME = "style.css"

META_IMAGE_EXTENSIONS = ("png", "jpg", "jpeg", "gif", "webp", "avif", "svg")


def ancestor_dirs(canonical_root: Path, canonical_dir: Path) -> Iterator[tuple[str, ...]]:
    """Yield root-relative part tuples from the directory up to the root.

    Nothing is yielded for a directory outside the root.
    """
    root_parts = canonical_root.parts
    dir_parts = canonical_dir.parts
    if dir_parts[: len(root_parts)] != root_parts:
        return

    relative = dir_parts[len(root_parts) :]
    for depth in range(len(relative), -1, -1):
        yield relative[:depth]


def find_nearest(
    canonical_root: Path,
    canonical_dir: Path,
    names: Sequence[str],
) -> URLPath | None:
    """Find the nearest file with one of the given names.

    Args:
        canonical_root: Canonical content root
        canonical_dir: Canonical directory to start from
        names: Candidate file names, checked in order within each directory

    Returns:
        Root-relative URL path of the first match, or None
    """
    for parts in ancestor_dirs(canonical_root, canonical_dir):
        directory = canonical_root.joinpath(*parts)
        for name in names:
            if (directory / name).is_file():
                return URLPath("/" + "/".join(quote(p) for p in (*parts, name)))
    return None


def find_css(canonical_root: Path, canonical_document_dir: Path) -> URLPath | None:
    """Find the stylesheet that applies to a directory.

    Args:
        canonical_root: Canonical content root
        canonical_document_dir: Canonical directory holding the document,
            or the listed directory itself

    Returns:
        URL path such as "/blog/style.css", or None when no stylesheet exists
    """
    return find_nearest(canonical_root, canonical_document_dir, (STYLESHEET_NAME,))


def find_meta_image(canonical_root: Path, canonical_document_dir: Path) -> URLPath | None:
    """Find the nearest meta.<ext> image used for link previews."""
    names = tuple(f"meta.{ext}" for ext in META_IMAGE_EXTENSIONS)
    return find_nearest(canonical_root, canonical_document_dir, names)
