"""Computes column widths for printing notes one per line."""

from __future__ import annotations
from dataclasses import dataclass
from typing import Sequence

from theca.models import Item, Status


ELLIPSIS = '...'
BODY_MARKER = ' (+)'
"""Appended to the title of notes with a body, unless bodies are being printed beneath the line."""


def format_field(value: str, width: int, truncate: bool = False) -> str:
    """Pads value to exactly width characters.

    Without truncate, longer values are cut off at width. With truncate (used for titles), a value that overflows
    by more than 3 characters is shortened to width, its last 3 characters replaced by an ellipsis; a value that
    overflows by 3 characters or fewer is returned untruncated, even though that makes the line longer.
    """
    if len(value) > width and truncate:
        if width > len(ELLIPSIS) and len(value) - width > len(ELLIPSIS):
            return value[:width - len(ELLIPSIS)] + ELLIPSIS
        return value
    return value[:width].ljust(width)


@dataclass
class LineFormat:
    colsep: int
    id_width: int
    title_width: int
    status_width: int
    touched_width: int

    @classmethod
    def for_items(cls, items: Sequence[Item], condensed: bool = False, search_body: bool = False,
                  console_width: int = 0) -> LineFormat:
        """Computes the layout for printing exactly the given notes.

        The status column gets width 0 (and is omitted) when every note is Blank. If console_width is nonzero and
        the line would be wider, the title column is narrowed to fit, provided it stays positive.
        """
        colsep = 1 if condensed else 2

        id_width = max((len(str(i.id)) for i in items), default=0)
        title_width = max((len(i.title) + (len(BODY_MARKER) if i.body and not search_body else 0)
                           for i in items), default=0)
        if not condensed:
            # room for the "id" and "title" headings
            id_width = max(id_width, 2)
            title_width = max(title_width, 5)

        if any(i.status != Status.BLANK for i in items):
            status_width = 1 if condensed else len(Status.STARTED.value)
        else:
            status_width = 0

        touched_width = 10 if condensed else 19

        fmt = cls(colsep=colsep, id_width=id_width, title_width=title_width,
                  status_width=status_width, touched_width=touched_width)
        overflow = fmt.line_width() - console_width
        if console_width > 0 and overflow > 0 and fmt.title_width > overflow:
            fmt.title_width -= overflow
        return fmt

    def line_width(self) -> int:
        columns = 3 if self.status_width else 2
        return self.id_width + self.title_width + self.status_width + self.touched_width + columns * self.colsep

    def header(self) -> str:
        """Returns the column headings and a separator line."""
        sep = ' ' * self.colsep
        parts = [format_field('id', self.id_width), format_field('title', self.title_width)]
        if self.status_width:
            parts.append(format_field('status', self.status_width))
        parts.append(format_field('last touched', self.touched_width))
        return sep.join(parts) + '\n' + '-' * self.line_width()
