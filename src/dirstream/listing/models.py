# Listing data model.
# Created: 2026-10-12

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal

EntryType = Literal["file", "directory"]


@dataclass
class Entry:
    """A single file or directory parsed out of an upstream index page.

    ``name`` is the display text as the index printed it, so it may be
    truncated by the server (nginx shortens long names with ``..>``).
    ``path`` is canonical and is what lookups should use.
    """

    name: str
    type: EntryType
    path: str
    size: int = 0
    modified: datetime | None = None

    @property
    def is_dir(self) -> bool:
        return self.type == "directory"
