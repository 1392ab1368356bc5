"""HTML directory index with sortable name/type/size columns."""

from __future__ import annotations

import functools
import locale
import logging
import mimetypes
import os
import stat
from html import escape
from typing import Mapping
from urllib.parse import quote

from classic_static.schemas.listing import EntryKind, ListingItem, SortKey, SortOrder
from classic_static.schemas.options import StaticConfig
from classic_static.services.resolver import ResolvedRequest
from classic_static.utils import fs, pages
from classic_static.utils.sizes import format_size

logger = logging.getLogger(__name__)

COLUMNS = ((SortKey.NAME, "Name"), (SortKey.TYPE, "Type"), (SortKey.SIZE, "Size"))

ARROWS = {SortOrder.ASC: "↑", SortOrder.DESC: "↓"}

# Characters encodeURIComponent leaves alone
_URI_SAFE = "!~*'()"

PAGE_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    <meta http-equiv="X-UA-Compatible" content="IE=edge">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Index of {path}</title>
</head>
<body>
    <h1>Index of {path}</h1>
    {table}
</body>
</html>
"""


def parse_sort(query: Mapping[str, str]) -> tuple[SortKey, SortOrder]:
    """Read ``sort`` and ``order`` from the query string, with defaults."""
    try:
        key = SortKey(query.get("sort") or SortKey.NAME.value)
    except ValueError:
        key = SortKey.NAME
    try:
        order = SortOrder(query.get("order") or SortOrder.ASC.value)
    except ValueError:
        order = SortOrder.ASC
    return key, order


def header_links(key: SortKey, order: SortOrder) -> list[str]:
    """Column headers; clicking the active column flips its order."""
    cells = []
    for column, label in COLUMNS:
        if column == key:
            next_order = SortOrder.DESC if order == SortOrder.ASC else SortOrder.ASC
            label = f"{label} {ARROWS[order]}"
        else:
            next_order = SortOrder.ASC
        href = f"?sort={column.value}&order={next_order.value}"
        cells.append(f'<th><a href="{escape(href)}">{escape(label)}</a></th>')
    return cells


def item_uri(href_path: str, name: str) -> str:
    base = href_path.rstrip("/")
    return f"{base}/{quote(name, safe=_URI_SAFE)}"


def parent_uri(href_path: str) -> str:
    return href_path.rsplit("/", 1)[0] or "/"


async def _size_of(path: str) -> int | None:
    """Size in bytes, None for directories and unreadable entries."""
    try:
        st = await fs.stat_path(path)
    except (OSError, ValueError):
        return None
    if stat.S_ISDIR(st.st_mode):
        return None
    return st.st_size


async def collect_items(
    resolved: ResolvedRequest, entries: list[fs.DirectoryEntry], config: StaticConfig
) -> list[ListingItem]:
    items = []
    for entry in entries:
        if entry.kind is None:
            logger.info("Skipping unsupported entry type: %s", entry.name)
            continue

        if entry.kind == EntryKind.DIRECTORY:
            size_bytes, mime = None, "DIR"
        else:
            size_bytes = await _size_of(os.path.join(resolved.fs_path, entry.name))
            mime = mimetypes.guess_type(entry.name)[0] or "unknown"

        reserved = (
            resolved.at_root
            and entry.name in config.reserved_segments
            and entry.kind in (EntryKind.DIRECTORY, EntryKind.SYMLINK)
        )
        items.append(
            ListingItem(
                name=entry.name,
                kind=entry.kind,
                mime=mime,
                size_label=format_size(size_bytes),
                size_bytes=size_bytes,
                uri=item_uri(resolved.href_path, entry.name),
                reserved=reserved,
            )
        )
    return items


def _compare(a: ListingItem, b: ListingItem, key: SortKey) -> int:
    match key:
        case SortKey.NAME:
            return locale.strcoll(a.name, b.name)
        case SortKey.TYPE:
            return locale.strcoll(a.mime, b.mime)
        case SortKey.SIZE:
            return (a.size_bytes or 0) - (b.size_bytes or 0)
    return 0


def sort_items(items: list[ListingItem], key: SortKey, order: SortOrder) -> list[ListingItem]:
    """Sort by column; directories stay first for type and size.

    Descending order negates the comparison instead of reversing the list,
    so equal items keep their enumeration order.
    """
    sign = -1 if order == SortOrder.DESC else 1

    def compare(a: ListingItem, b: ListingItem) -> int:
        if key != SortKey.NAME and a.is_directory != b.is_directory:
            return -1 if a.is_directory else 1
        return sign * _compare(a, b, key)

    return sorted(items, key=functools.cmp_to_key(compare))


def render_row(item: ListingItem) -> str:
    prefix = " FILE " if item.kind == EntryKind.FILE else ""
    name = escape(item.name)
    size = escape(item.size_label)
    if item.reserved:
        return f"<tr><td>{prefix} {name}</td><td>DIR BUT RESERVED</td><td>{size}</td></tr>"
    return (
        f'<tr><td>{prefix} <a href="{escape(item.uri)}">{name}</a></td>'
        f"<td>{escape(item.mime)}</td><td>{size}</td></tr>"
    )


async def render_listing(resolved: ResolvedRequest, config: StaticConfig) -> str:
    """Render the directory at ``resolved.fs_path`` as an HTML page.

    A read failure yields a short error page instead of raising: the
    dispatcher already knows the directory exists.
    """
    try:
        entries = await fs.scan_directory(resolved.fs_path)
    except OSError as e:
        logger.error("Directory read error for %s: %s", resolved.fs_path, e)
        return pages.DIRECTORY_ERROR_HTML

    key, order = parse_sort(resolved.request.query_params)
    items = sort_items(await collect_items(resolved, entries, config), key, order)

    rows = ["<table>", "<tr>", *header_links(key, order), "</tr>"]
    if not resolved.at_root:
        rows.append(
            f'<tr><td><a href="{escape(parent_uri(resolved.href_path))}">'
            f"<b>.. Parent Directory</b></a></td><td>DIR</td><td>-</td></tr>"
        )
    if items:
        rows.extend(render_row(item) for item in items)
    else:
        rows.append("<tr><td>empty folder</td><td></td><td></td></tr>")
    rows.append("</table>")

    return PAGE_TEMPLATE.format(path=escape(resolved.display_path), table="\n".join(rows))
