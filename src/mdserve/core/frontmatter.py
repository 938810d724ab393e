"""YAML front matter parsing and metadata inference.

A document may start with a block delimited by "---" lines holding YAML.
Fields missing from that block are inferred from the document body and the
file's timestamps. Metadata is best-effort: a malformed block degrades to
inference and never makes a document unservable.
"""

import logging
import re
from dataclasses import dataclass, replace
from datetime import date, datetime
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

DELIMITER = "---"

_ATX_HEADING = re.compile(r"^#{1,6}(\s|$)")
_SETEXT_UNDERLINE = re.compile(r"^(=+|-+)$")


class _FrontMatterLoader(yaml.SafeLoader):
    """SafeLoader that keeps impossible dates such as 2024-02-30 as strings."""

    def construct_yaml_timestamp(self, node: yaml.Node) -> object:
        try:
            return super().construct_yaml_timestamp(node)
        except ValueError:
            return self.construct_scalar(node)


_FrontMatterLoader.add_constructor(
    "tag:yaml.org,2002:timestamp", _FrontMatterLoader.construct_yaml_timestamp
)


@dataclass(frozen=True)
class FrontMatter:
    """Document metadata. Fields are None until set or inferred."""

    title: str | None = None
    summary: str | None = None
    date: "date | None" = None
    author: str | None = None


@dataclass(frozen=True)
class ParsedDocument:
    """Front matter split from the Markdown body."""

    front_matter: FrontMatter
    body: str


def parse(text: str) -> ParsedDocument:
    """Split a document into front matter and body.

    The block is recognized only when the first line is exactly "---" and a
    later line is exactly "---". Without a closing line the whole text is
    body.

    Args:
        text: Full document text

    Returns:
        ParsedDocument with whatever fields the block provided
    """
    text = text.removeprefix("\ufeff")
    lines = text.splitlines(keepends=True)
    if not lines or lines[0].rstrip("\r\n") != DELIMITER:
        return ParsedDocument(front_matter=FrontMatter(), body=text)

    for i, line in enumerate(lines[1:], start=1):
        if line.rstrip("\r\n") == DELIMITER:
            block = "".join(lines[1:i])
            body = "".join(lines[i + 1 :])
            return ParsedDocument(front_matter=_load_block(block), body=body)

    return ParsedDocument(front_matter=FrontMatter(), body=text)


def _load_block(block: str) -> FrontMatter:
    try:
        data = yaml.load(block, Loader=_FrontMatterLoader)
    except (yaml.YAMLError, ValueError) as e:
        logger.warning("Ignoring malformed front matter: %s", e)
        return FrontMatter()

    if data is None:
        return FrontMatter()
    if not isinstance(data, dict):
        logger.warning("Ignoring front matter that is not a mapping: %s", type(data).__name__)
        return FrontMatter()

    return FrontMatter(
        title=_text_field(data, "title"),
        summary=_text_field(data, "summary"),
        date=_date_field(data.get("date")),
        author=_text_field(data, "author"),
    )


def _text_field(data: dict, key: str) -> str | None:
    value = data.get(key)
    if not isinstance(value, str):
        if value is not None:
            logger.debug("Front matter %s has type %s, ignoring", key, type(value).__name__)
        return None
    value = value.strip()
    return value or None


def _date_field(value: object) -> date | None:
    # YAML already turns unquoted ISO dates into date/datetime objects
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip()).date()
        except ValueError:
            logger.debug("Unparseable front matter date %r, ignoring", value)
    return None


def fill_inferred(partial: FrontMatter, body: str, path: Path) -> FrontMatter:
    """Fill missing fields from the body and the file.

    Author has no inference source and stays None when absent.

    Args:
        partial: Front matter as parsed
        body: Markdown body without the front matter block
        path: Document file, used for the date and the fallback title

    Returns:
        New FrontMatter with title, summary and date filled where possible
    """
    return replace(
        partial,
        title=partial.title or infer_title(body) or title_from_filename(path),
        summary=partial.summary or infer_summary(body),
        date=partial.date or infer_date(path),
    )


def infer_title(body: str) -> str | None:
    """Return the text of the first level-one ATX heading."""
    in_code_block = False
    for line in body.splitlines():
        stripped = line.strip()
        if stripped.startswith(("```", "~~~")):
            in_code_block = not in_code_block
            continue
        if in_code_block:
            continue
        if stripped.startswith("# ") or stripped.startswith("#\t"):
            title = stripped[2:].strip()
            # optional closing sequence: "# Title #"
            title = re.sub(r"\s+#+$", "", title).strip()
            if title:
                return title
    return None


def infer_summary(body: str) -> str | None:
    """Return the first paragraph, skipping ATX and Setext headings.

    A paragraph is the first run of non-blank, non-heading lines. Lines
    followed by a "===" or "---" underline are a Setext heading and are
    discarded.
    """
    lines: list[str] = []
    in_code_block = False

    for line in body.splitlines():
        stripped = line.strip()

        if stripped.startswith(("```", "~~~")):
            if lines:
                break
            in_code_block = not in_code_block
            continue
        if in_code_block:
            continue

        if not stripped:
            if lines:
                break
            continue
        if _ATX_HEADING.match(stripped):
            if lines:
                break
            continue
        if _SETEXT_UNDERLINE.match(stripped):
            # after text: the collected lines were a heading, not a paragraph;
            # alone: a thematic break
            lines.clear()
            continue
        lines.append(stripped)

    return " ".join(lines) if lines else None


def infer_date(path: Path) -> date | None:
    """Return the file's creation date, or its modification date.

    Creation time is only available on some platforms (st_birthtime).
    """
    try:
        stat = path.stat()
    except OSError as e:
        logger.debug("Cannot stat %s for date inference: %s", path, e)
        return None

    timestamp = getattr(stat, "st_birthtime", None)
    if timestamp is None:
        logger.debug("Creation time unavailable for %s, using mtime", path)
        timestamp = stat.st_mtime
    return datetime.fromtimestamp(timestamp).date()


def title_from_filename(path: Path) -> str:
    """Derive a title from a file name ("my-first-post.md" -> "My first post").

    An index.md takes its directory's name.
    """
    stem = path.parent.name if path.stem == "index" and path.parent.name else path.stem
    words = re.sub(r"[-_]+", " ", stem).strip()
    if not words:
        return stem
    return words[0].upper() + words[1:]


def read_document(path: Path) -> ParsedDocument:
    """Read a document and return its fully inferred front matter and body.

    Raises:
        OSError: If the file cannot be read
    """
    parsed = parse(path.read_text(encoding="utf-8", errors="replace"))
    return ParsedDocument(
        front_matter=fill_inferred(parsed.front_matter, parsed.body, path),
        body=parsed.body,
    )
