"""
fluxforge.file_queue
~~~~~~~~~~~~~~~~~~~~
Ordered input files for one tool session. No Qt, no subprocess.

Candidates that the active tool does not accept are dropped without error.
`rejects` names them so a caller can report them; for single-file tools
`add` also drops all but the last accepted file, which is not a rejection.
"""

from __future__ import annotations

import itertools
import logging
from pathlib import Path
from typing import Iterable, Iterator

from fluxforge.models import FileItem
from fluxforge.tools import ToolProfile

logger = logging.getLogger(__name__)


class FileQueue:

    # Process-wide: a token is never reused, even by a later queue.
    _tokens = itertools.count(1)

    def __init__(self, profile: ToolProfile):
        self._profile = profile
        self._items: list[FileItem] = []

    @property
    def profile(self) -> ToolProfile:
        return self._profile

    # ── Mutation ──────────────────────────────────────────────────────────────

    def add(self, files: Iterable[Path | str]) -> list[FileItem]:
        """
        Append every accepted file in its original relative order.
        For single-file tools the last accepted file replaces the queue.
        """
        accepted: list[FileItem] = []
        for candidate in files:
            path = Path(candidate)
            if not self._profile.accepts(path):
                logger.debug("Rejected '%s' for %s", path.name, self._profile.display_name)
                continue
            accepted.append(FileItem(
                path=path,
                name=path.name,
                size=_file_size(path),
                token=next(FileQueue._tokens),
            ))

        if not accepted:
            return []

        if self._profile.single_file:
            accepted = accepted[-1:]
            self._items = list(accepted)
        else:
            self._items.extend(accepted)
        return accepted

    def rejects(self, files: Iterable[Path | str]) -> list[Path]:
        """The candidates `add` would refuse because of their extension."""
        return [Path(f) for f in files if not self._profile.accepts(Path(f))]

    def remove_at(self, index: int) -> FileItem | None:
        """Remove the item at *index*; out-of-range indices are ignored."""
        if not 0 <= index < len(self._items):
            return None
        return self._items.pop(index)

    def clear(self) -> None:
        self._items.clear()

    def backfill_page_count(self, token: int, page_count: int) -> bool:
        """
        Set the page count of the item holding *token*.
        Returns False if that item has left the queue in the meantime.
        """
        item = self.find(token)
        if item is None:
            return False
        item.page_count = max(1, int(page_count))
        return True

    # ── Queries ───────────────────────────────────────────────────────────────

    def items(self) -> list[FileItem]:
        return list(self._items)

    def paths(self) -> tuple[Path, ...]:
        return tuple(item.path for item in self._items)

    def find(self, token: int) -> FileItem | None:
        return next((i for i in self._items if i.token == token), None)

    @property
    def total_pages(self) -> int:
        return sum(item.page_count for item in self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[FileItem]:
        return iter(list(self._items))


def _file_size(path: Path) -> int:
    try:
        return path.stat().st_size
    except OSError:
        return 0
