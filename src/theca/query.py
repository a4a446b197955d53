"""Selecting, ordering and printing notes.

:class:`NoteQuery` turns a profile's notes into the batch to display, and the ``render_*`` functions turn a batch
into text. None of this changes the order notes are stored in.
"""

from __future__ import annotations
from collections import Counter
from dataclasses import dataclass
from datetime import datetime
import json
import re
from typing import Iterable, List, Optional, Sequence

from terminaltables import AsciiTable

from theca.errors import InvalidPattern
from theca.lineformat import BODY_MARKER, LineFormat, format_field
from theca.models import Item, Profile, Status, localize_last_touched, parse_last_touched


def _touched_key(item: Item) -> datetime:
    try:
        return parse_last_touched(item.last_touched)
    except ValueError:
        # unparseable timestamps sort as if they were touched just now
        return datetime.now().astimezone()


@dataclass
class NoteQuery:
    """Criteria for choosing which notes to show, and in what order."""

    pattern: Optional[str] = None
    """If set, only notes whose title (or body, see :attr:`search_body`) matches are included."""

    regex: bool = False
    """If True, :attr:`pattern` is a regular expression searched for anywhere in the text; otherwise it must
    occur as an exact substring. Matching is case-sensitive either way."""

    search_body: bool = False

    status: Optional[Status] = None
    """If set, only notes with this status are included."""

    datesort: bool = False
    """Sort by last touched instead of by id."""

    reverse: bool = False

    limit: int = 0
    """Maximum number of notes to return; 0 means no limit."""

    def matcher(self):
        if self.pattern is None:
            return lambda text: True
        if self.regex:
            try:
                compiled = re.compile(self.pattern)
            except re.error as e:
                raise InvalidPattern(self.pattern, e)
            return lambda text: compiled.search(text) is not None
        return lambda text: self.pattern in text

    def apply_filtering(self, notes: Iterable[Item]) -> List[Item]:
        """Returns the notes matching the pattern and status, in their original order.

        Raises :exc:`theca.errors.InvalidPattern` if the regular expression does not compile.
        """
        matches = self.matcher()
        result = []
        for note in notes:
            if self.status is not None and note.status != self.status:
                continue
            if not matches(note.body if self.search_body else note.title):
                continue
            result.append(note)
        return result

    def apply_sorting(self, notes: Iterable[Item]) -> List[Item]:
        """Stable sort ascending by id or last touched, then reversed if requested, then limited."""
        key = _touched_key if self.datesort else (lambda n: n.id)
        result = sorted(notes, key=key)
        if self.reverse:
            result.reverse()
        if self.limit:
            result = result[:self.limit]
        return result

    def apply(self, notes: Iterable[Item]) -> List[Item]:
        return self.apply_sorting(self.apply_filtering(notes))


def render_line(item: Item, fmt: LineFormat, search_body: bool = False) -> str:
    """Formats one note as a line; if search_body is True, its body lines follow, each indented by a tab."""
    sep = ' ' * fmt.colsep
    if item.body and not search_body:
        title = format_field(item.title, max(fmt.title_width - len(BODY_MARKER), 0), True) + BODY_MARKER
    else:
        title = format_field(item.title, fmt.title_width, True)
    parts = [format_field(str(item.id), fmt.id_width), title]
    if fmt.status_width:
        parts.append(format_field(str(item.status), fmt.status_width))
    parts.append(format_field(localize_last_touched(item.last_touched), fmt.touched_width))
    lines = [sep.join(parts)]
    if search_body:
        lines.extend(f'\t{line}' for line in item.body.splitlines())
    return '\n'.join(lines)


def render_lines(items: Sequence[Item], condensed: bool = False, search_body: bool = False,
                 console_width: int = 0) -> str:
    """Formats a batch of notes as a table, one line per note, with a header unless condensed."""
    fmt = LineFormat.for_items(items, condensed=condensed, search_body=search_body, console_width=console_width)
    lines = [] if condensed else [fmt.header()]
    lines.extend(render_line(item, fmt, search_body) for item in items)
    return '\n'.join(lines)


def render_json(items: Sequence[Item]) -> str:
    return json.dumps([i.as_json() for i in items], indent=2)


def render_batch(items: Sequence[Item], *, as_json: bool = False, condensed: bool = False,
                 search_body: bool = False, console_width: int = 0, empty_message: str = '') -> str:
    """Renders the notes as JSON or as lines; an empty batch renders as ``[]`` or the empty_message."""
    if as_json:
        return render_json(items)
    if not items:
        return empty_message
    return render_lines(items, condensed=condensed, search_body=search_body, console_width=console_width)


def render_note(item: Item, as_json: bool = False, condensed: bool = False) -> str:
    """Formats every field of a single note. Status is omitted when Blank, body when empty."""
    if as_json:
        return json.dumps(item.as_json(), indent=2)
    fields = [('id', str(item.id)), ('title', item.title)]
    if item.status != Status.BLANK:
        fields.append(('status', str(item.status)))
    fields.append(('last touched', localize_last_touched(item.last_touched)))
    if item.body:
        fields.append(('body', item.body))
    if condensed:
        return '\n'.join(f'{name}: {value}' for name, value in fields)
    return '\n\n'.join(f'{name}\n{"-" * len(name)}\n{value}' for name, value in fields)


def render_stats(name: str, profile: Profile) -> str:
    """Summarizes a profile as a table: size, status breakdown, and the range of last touched times."""
    counts = Counter(n.status for n in profile.notes)
    statuses = ', '.join(f'{label}: {counts[status]}' for label, status in
                         (('none', Status.BLANK), ('started', Status.STARTED), ('urgent', Status.URGENT)))
    if profile.notes:
        oldest = localize_last_touched(min(profile.notes, key=_touched_key).last_touched)
        newest = localize_last_touched(max(profile.notes, key=_touched_key).last_touched)
        ages = f'oldest: {oldest}, newest: {newest}'
    else:
        ages = ''
    data = [
        ('name', name),
        ('encrypted', str(profile.encrypted).lower()),
        ('notes', str(len(profile.notes))),
        ('statuses', statuses),
        ('note ages', ages),
    ]
    table = AsciiTable(data)
    table.inner_heading_row_border = False
    return table.table
