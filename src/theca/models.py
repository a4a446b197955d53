"""Defines classes for representing notes, profiles, and requested commands.

The most important classes are :class:`Item`, :class:`Profile`, and :class:`Command`.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Iterable, List, Optional


DATEFMT = '%Y-%m-%d %H:%M:%S %z'
"""Format of :attr:`Item.last_touched` as stored in profile files."""

DATEFMT_SHORT = '%Y-%m-%d %H:%M:%S'
"""Format used when showing :attr:`Item.last_touched` to the user."""


def now_string() -> str:
    """Returns the current local time formatted with :data:`DATEFMT`."""
    return datetime.now().astimezone().strftime(DATEFMT)


def parse_last_touched(value: str) -> datetime:
    """Parses a :data:`DATEFMT` timestamp. Raises :exc:`ValueError` if it is malformed."""
    return datetime.strptime(value, DATEFMT)


def localize_last_touched(value: str) -> str:
    """Converts a stored timestamp into the local timezone, formatted with :data:`DATEFMT_SHORT`.

    Values that cannot be parsed are returned unchanged.
    """
    try:
        return parse_last_touched(value).astimezone().strftime(DATEFMT_SHORT)
    except ValueError:
        return value


class Status(Enum):
    """Status of a note. The value is the textual form used in profile files."""
    BLANK = ''
    STARTED = 'Started'
    URGENT = 'Urgent'

    def __str__(self):
        return self.value


@dataclass
class Item:
    """A single note."""

    id: int
    """Unique within a profile. Assigned as one more than the highest existing id and never reused."""

    title: str

    status: Status = Status.BLANK

    body: str = ''

    last_touched: str = field(default_factory=now_string)
    """Local timestamp in :data:`DATEFMT`, refreshed whenever the note is created or edited."""

    def touch(self) -> None:
        self.last_touched = now_string()

    def as_json(self) -> dict:
        """Returns a dict representing the instance, suitable for serializing as json."""
        return {
            'id': self.id,
            'title': self.title,
            'status': self.status.value,
            'body': self.body,
            'last_touched': self.last_touched,
        }

    @classmethod
    def from_json(cls, data: dict) -> Item:
        """Inverse of :meth:`as_json`.

        Raises :exc:`KeyError`, :exc:`TypeError` or :exc:`ValueError` if the data does not describe a note.
        """
        if not isinstance(data['id'], int) or isinstance(data['id'], bool) or data['id'] < 0:
            raise ValueError(f'invalid note id: {data["id"]!r}')
        for key in ('title', 'body', 'last_touched'):
            if not isinstance(data[key], str):
                raise TypeError(f'{key} must be a string')
        return cls(id=data['id'], title=data['title'], status=Status(data['status']),
                   body=data['body'], last_touched=data['last_touched'])


@dataclass
class Profile:
    """A named collection of notes, persisted as one file by :class:`theca.store.ProfileStore`.

    :attr:`notes` is kept in storage order; sorting for display never reorders it.
    """

    encrypted: bool = False

    notes: List[Item] = field(default_factory=list)

    def next_id(self) -> int:
        return max((n.id for n in self.notes), default=0) + 1

    def find(self, note_id: int) -> Optional[Item]:
        return next((n for n in self.notes if n.id == note_id), None)

    def add_note(self, title: str, body: str = '', status: Status = None) -> Item:
        """Appends a new note and returns it. Newlines are stripped from the title."""
        item = Item(id=self.next_id(),
                    title=title.replace('\n', ''),
                    status=status or Status.BLANK,
                    body=body)
        self.notes.append(item)
        return item

    def remove_note(self, note_id: int) -> bool:
        """Removes the note with the given id. Returns False if there was no such note."""
        for i, note in enumerate(self.notes):
            if note.id == note_id:
                del self.notes[i]
                return True
        return False

    def delete_notes(self, ids: Iterable[int]) -> Dict[int, bool]:
        """Removes each of the given notes, returning whether each one existed.

        A missing id does not prevent the others from being removed.
        """
        return {note_id: self.remove_note(note_id) for note_id in ids}

    def clear(self) -> None:
        del self.notes[:]

    def as_json(self) -> dict:
        return {
            'encrypted': self.encrypted,
            'notes': [n.as_json() for n in self.notes],
        }

    @classmethod
    def from_json(cls, data: dict) -> Profile:
        if not isinstance(data['encrypted'], bool):
            raise TypeError('encrypted must be a boolean')
        notes = [Item.from_json(n) for n in data['notes']]
        if len({n.id for n in notes}) != len(notes):
            raise ValueError('duplicate note ids')
        return cls(encrypted=data['encrypted'], notes=notes)


class Action(Enum):
    LIST = 'list'
    VIEW = 'view'
    SEARCH = 'search'
    INFO = 'info'
    ADD = 'add'
    EDIT = 'edit'
    DELETE = 'del'
    TRANSFER = 'transfer'
    IMPORT = 'import'
    CLEAR = 'clear'
    NEW_PROFILE = 'new-profile'
    ENCRYPT_PROFILE = 'encrypt-profile'
    DECRYPT_PROFILE = 'decrypt-profile'
    LIST_PROFILES = 'list-profiles'

    @property
    def mutates(self) -> bool:
        """True if running the action changes the profile and saves it."""
        return self in _MUTATING_ACTIONS


_MUTATING_ACTIONS = {Action.ADD, Action.EDIT, Action.DELETE, Action.TRANSFER, Action.CLEAR,
                     Action.NEW_PROFILE, Action.ENCRYPT_PROFILE, Action.DECRYPT_PROFILE}


@dataclass
class Command:
    """One requested invocation of the tool.

    This is the unit that :class:`theca.api.Theca` executes, and that it re-executes against freshly loaded
    data if the profile file changed on disk while the command was running.
    """

    action: Action = Action.LIST

    profile: str = 'default'
    """Name of the profile the command operates on."""

    profile_folder: Optional[str] = None
    """Explicit folder hint; see :meth:`theca.conf.ThecaConf.resolve_profile_folder`."""

    key: str = ''
    encrypted: bool = False

    yes: bool = False
    """If True, confirmation prompts are skipped and answered affirmatively."""

    ids: List[int] = field(default_factory=list)

    name: Optional[str] = None
    """The other profile for transfer/import, or the name of the profile created by new-profile."""

    title: str = ''
    body: Optional[str] = None
    """Literal body text, if one was given."""

    stdin: bool = False
    """If True, the body is read from piped input."""

    editor: bool = False
    """If True, the body is captured from the external editor."""

    piped_text: Optional[str] = None
    """Piped input, once it has been read. Replays reuse it instead of reading again."""

    editor_text: Optional[str] = None
    """Body captured from the editor for a new note. Replays reuse it instead of opening the editor again."""

    transferred: Optional[Item] = None
    """The copy a transfer saved to the destination profile. Replays reuse it instead of copying again."""

    status: Optional[Status] = None

    pattern: str = ''
    regex: bool = False
    search_body: bool = False

    limit: int = 0
    datesort: bool = False
    reverse: bool = False
    json: bool = False
    condensed: bool = False

    new_key: str = ''
