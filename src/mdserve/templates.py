"""HTML templates for documents, listings and error pages."""

from collections.abc import Sequence
from html import escape

from mdserve.core.breadcrumbs import Breadcrumb
from mdserve.core.frontmatter import FrontMatter
from mdserve.core.listing import DocumentMetadataEntry


def html_doc(title: str, head: str, body: str) -> str:
    return (
        "<!doctype html>\n"
        '<html lang="en">\n'
        "<head>\n"
        '<meta charset="utf-8">\n'
        '<meta name="viewport" content="width=device-width, initial-scale=1">\n'
        f"<title>{escape(title)}</title>\n"
        f"{head}"
        "</head>\n"
        "<body>\n"
        f"{body}\n"
        "</body>\n"
        "</html>\n"
    )


def meta(attr: str, key: str, content: str) -> str:
    return f'<meta {attr}="{escape(key, quote=True)}" content="{escape(content, quote=True)}">\n'


def stylesheet(href: str | None) -> str:
    if href is None:
        return ""
    return f'<link rel="stylesheet" href="{escape(href, quote=True)}">\n'


def link(href: str, text: str) -> str:
    return f'<a href="{escape(href, quote=True)}">{escape(text)}</a>'


def breadcrumb_nav(crumbs: Sequence[Breadcrumb]) -> str:
    if len(crumbs) <= 1:
        return ""
    items = []
    for crumb in crumbs:
        if crumb.path is None:
            items.append(f'<li><span aria-current="page">{escape(crumb.title)}</span></li>')
        else:
            items.append(f"<li>{link(crumb.path, crumb.title)}</li>")
    return '<nav aria-label="breadcrumb"><ol>' + "".join(items) + "</ol></nav>\n"


def document_page(
    front_matter: FrontMatter,
    content_html: str,
    *,
    css: str | None,
    meta_image: str | None,
    breadcrumbs: Sequence[Breadcrumb],
) -> str:
    """Full page around a rendered document."""
    title = front_matter.title or ""
    head = ""
    if title:
        head += meta("property", "og:title", title)
    if front_matter.summary:
        head += meta("name", "description", front_matter.summary)
        head += meta("property", "og:description", front_matter.summary)
    if meta_image:
        head += meta("property", "og:image", meta_image)
        head += meta("name", "twitter:card", "summary_large_image")
        head += meta("name", "twitter:image", meta_image)
    if front_matter.author:
        head += meta("name", "author", front_matter.author)
    if front_matter.date:
        head += meta("property", "article:published_time", front_matter.date.isoformat())
    head += stylesheet(css)

    body = breadcrumb_nav(breadcrumbs) + f"<main>\n{content_html}\n</main>"
    return html_doc(title, head, body)


def listing_page(
    url_path: str,
    entries: Sequence[DocumentMetadataEntry],
    *,
    css: str | None,
) -> str:
    """Index page for a directory without index.md."""
    heading = f"Index of {url_path}"
    if not entries:
        items = "<p><em>Empty directory.</em></p>"
    else:
        rows = [_listing_row(entry) for entry in entries]
        items = "<ul>\n" + "\n".join(rows) + "\n</ul>"

    body = f"<main>\n<h1>{escape(heading)}</h1>\n{items}\n</main>"
    return html_doc(heading, stylesheet(css), body)


def _listing_row(entry: DocumentMetadataEntry) -> str:
    fm = entry.front_matter
    if entry.is_dir:
        label = f"{entry.display_name}/"
    else:
        label = fm.title or entry.display_name

    row = link(entry.url_path, label)
    if fm.date:
        row += f" <time>{fm.date.isoformat()}</time>"
    if fm.author:
        row += f" by {escape(fm.author)}"
    if fm.summary:
        row += f"<p>{escape(fm.summary)}</p>"
    return f"<li>{row}</li>"


def error_page(title: str, message: str) -> str:
    body = f"<h1>{escape(title)}</h1>\n<p>{escape(message)}</p>"
    return html_doc(title, "", body)
