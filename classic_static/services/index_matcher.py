"""Index file discovery with ordered name/pattern rules."""

from __future__ import annotations

import logging
import os
import stat
from typing import NamedTuple, Sequence

from classic_static.schemas.listing import EntryKind
from classic_static.schemas.options import Matcher, matches
from classic_static.utils import fs

logger = logging.getLogger(__name__)


class IndexHit(NamedTuple):
    path: str
    stat: os.stat_result


async def find_index(directory: str, matchers: Sequence[Matcher]) -> IndexHit | None:
    """Return the first file satisfying the earliest matcher that has a match.

    Matchers are tried strictly in order. Within one matcher, candidates
    follow directory enumeration order. Every candidate is stat'ed again
    and must still be a regular file; one that vanished in between is
    skipped.
    """
    if not matchers:
        return None
    try:
        entries = await fs.scan_directory(directory)
    except OSError as e:
        logger.warning("Cannot scan %s for index files: %s", directory, e)
        return None

    names = [e.name for e in entries if e.kind in (EntryKind.FILE, EntryKind.SYMLINK)]
    for matcher in matchers:
        for name in names:
            if not matches(matcher, name):
                continue
            path = os.path.join(directory, name)
            try:
                st = await fs.stat_path(path)
            except OSError:
                logger.debug("Index candidate vanished: %s", path)
                continue
            if stat.S_ISREG(st.st_mode):
                return IndexHit(path, st)
    return None
