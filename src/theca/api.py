"""Provides the main entry point for using the library, :class:`Theca`"""

from __future__ import annotations
from dataclasses import replace
import logging
import os.path
from typing import Optional, Tuple

from theca.conf import ThecaConf
from theca.console import Console
from theca.errors import InvalidArgument, NoteNotFound, TransferIncomplete, UserAborted
from theca.models import Action, Command, Item, Profile, Status
from theca.query import NoteQuery, render_batch, render_note, render_stats
from theca.store import NO_FINGERPRINT, ProfileStore


logger = logging.getLogger(__name__)


ENCRYPTED_EDIT_WARNING = """## [WARNING] ##

continuing will write the body of the decrypted note to a temporary
file, increasing the possibility it could be recovered later.

## [WARNING] ##
Are you sure you want to continue?"""


class Theca:
    """Runs :class:`theca.models.Command` instances against profiles.

    Generally, you should get an instance using :meth:`Theca.for_user`. Here's an example that adds a note to the
    default profile:

    .. code-block:: python

       from theca.api import Theca
       from theca.models import Action, Command
       Theca.for_user().execute(Command(Action.ADD, title='buy milk'))

    .. attribute:: conf
       :type: theca.conf.ThecaConf

    .. attribute:: console
       :type: theca.console.Console

    .. attribute:: store
       :type: theca.store.ProfileStore
    """

    @staticmethod
    def for_user() -> Theca:
        return Theca(ThecaConf.for_user())

    def __init__(self, conf: ThecaConf, console: Console = None):
        self.conf = conf
        self.console = console or Console()
        self.store = ProfileStore(conf, self.console)

    def execute(self, cmd: Command, _depth: int = 0) -> None:
        """Loads the profile named by the command (or creates it, for new-profile), then runs the command on it.

        Commands that change the profile save it afterwards.
        """
        if _depth > 1:
            raise InvalidArgument(f'{cmd.action.value} cannot be nested')
        if cmd.action == Action.LIST_PROFILES:
            self.list_profiles(cmd.profile_folder)
            return
        if cmd.action == Action.IMPORT:
            if cmd.name == cmd.profile:
                raise InvalidArgument(f'cannot import a note from a profile to itself ({cmd.name} -> {cmd.profile})')
            self.execute(replace(cmd, action=Action.TRANSFER, profile=cmd.name, name=cmd.profile), _depth + 1)
            return
        if cmd.action == Action.TRANSFER and cmd.name == cmd.profile:
            raise InvalidArgument(f'cannot transfer a note from a profile to itself ({cmd.profile} -> {cmd.name})')
        profile, fingerprint = self.open(cmd)
        self.run(cmd, profile, fingerprint)

    def open(self, cmd: Command) -> Tuple[Profile, int]:
        if cmd.action == Action.NEW_PROFILE:
            return self.store.create(self._target_name(cmd), cmd.profile_folder, cmd.encrypted, cmd.yes)
        return self.store.load(cmd.profile, cmd.profile_folder, cmd.key, cmd.encrypted)

    def run(self, cmd: Command, profile: Profile, fingerprint: int, replaying: bool = False) -> None:
        """Runs the command against an already loaded profile.

        If the command changes the profile and the file changed on disk since it was loaded (according to
        fingerprint), the command is run once more against a freshly loaded copy instead; see :meth:`replay`.
        """
        action = cmd.action
        if action == Action.LIST:
            print(render_batch(self._query(cmd).apply(profile.notes), as_json=cmd.json, condensed=cmd.condensed,
                               console_width=self.console.terminal_width(), empty_message='this profile is empty'))
        elif action == Action.SEARCH:
            query = self._query(cmd, pattern=cmd.pattern)
            print(render_batch(query.apply(profile.notes), as_json=cmd.json, condensed=cmd.condensed,
                               search_body=cmd.search_body, console_width=self.console.terminal_width(),
                               empty_message='nothing found'))
        elif action == Action.VIEW:
            print(render_note(self._find(profile, cmd.ids[0]), as_json=cmd.json, condensed=cmd.condensed))
        elif action == Action.INFO:
            print(render_stats(cmd.profile, profile))
        elif action.mutates:
            key = self.apply(cmd, profile)
            path = self.store.profile_path(self._target_name(cmd), cmd.profile_folder)
            self.store.save(profile, path, key, fingerprint, confirm=cmd.yes,
                            new_profile=(action == Action.NEW_PROFILE),
                            replay=None if replaying else lambda: self.replay(cmd))
        else:
            raise InvalidArgument(f'cannot run {action.value} against a single profile')

    def replay(self, cmd: Command) -> None:
        """Re-runs a command against a fresh copy of its profile, after the file changed underneath it.

        Whatever the command did to the stale copy is discarded. The editor is not opened again: a new note keeps
        the body that was typed, and an edit uses the body of the last note in the fresh copy. A transfer keeps
        the copy it already saved to the destination and only removes the note from the fresh source again.

        Note that commands which refer to notes by id (edit, del, transfer) are re-run with the same ids, which
        may now belong to different notes if the other writer deleted and added notes.
        """
        logger.info("replaying %s against a fresh copy of '%s'", cmd.action.value, cmd.profile)
        profile, _ = self.store.load(cmd.profile, cmd.profile_folder, cmd.key, cmd.encrypted)
        if cmd.editor and cmd.action == Action.EDIT:
            cmd = replace(cmd, editor=False, body=profile.notes[-1].body if profile.notes else '')
        self.run(cmd, profile, NO_FINGERPRINT, replaying=True)

    def apply(self, cmd: Command, profile: Profile) -> str:
        """Makes the change a mutating command asks for. Returns the passphrase to save the profile with."""
        action = cmd.action
        key = cmd.key
        if action == Action.ADD:
            item = profile.add_note(cmd.title, self._add_body(cmd), cmd.status)
            print(f'note {item.id} added')
        elif action == Action.EDIT:
            self.edit_note(profile, cmd)
        elif action == Action.DELETE:
            for note_id, existed in profile.delete_notes(cmd.ids).items():
                if existed:
                    print(f'deleted note {note_id}')
                else:
                    print(f"note {note_id} doesn't exist")
        elif action == Action.TRANSFER:
            self.transfer_note(profile, cmd)
        elif action == Action.CLEAR:
            if not (cmd.yes or self.console.confirm(
                    'are you sure you want to delete all the notes in this profile?')):
                raise UserAborted()
            profile.clear()
        elif action == Action.DECRYPT_PROFILE:
            profile.encrypted = False
            key = ''
            print(f"decrypting '{cmd.profile}'")
        elif action == Action.ENCRYPT_PROFILE:
            if not cmd.new_key:
                cmd.new_key = self.console.read_password()
            profile.encrypted = True
            key = cmd.new_key
            print(f"encrypting '{cmd.profile}'")
        elif action == Action.NEW_PROFILE:
            print(f"creating profile '{self._target_name(cmd)}'")
        return key

    def edit_note(self, profile: Profile, cmd: Command) -> Item:
        """Applies an edit command to one note.

        The title is replaced only if a new one is given; the title ``-`` instead means the body should be read
        from piped input. The status is always replaced (Blank if none was given). The body is replaced only if a
        new one was given, piped, or captured from the editor. The last touched time is always updated.
        """
        item = self._find(profile, cmd.ids[0])
        title = cmd.title.replace('\n', '')
        body = None
        if title == '-':
            body = self._piped_text(cmd)
        elif cmd.stdin:
            body = self._piped_text(cmd)
        elif cmd.editor:
            if self.console.is_interactive():
                if profile.encrypted and not cmd.yes and not self.console.confirm(ENCRYPTED_EDIT_WARNING):
                    raise UserAborted()
                body = self.console.edit(item.body)
        elif cmd.body is not None:
            body = cmd.body

        if title and title != '-':
            item.title = title
        item.status = cmd.status or Status.BLANK
        if body is not None:
            item.body = body
        item.touch()
        print(f'edited note {item.id}')
        return item

    def transfer_note(self, source: Profile, cmd: Command) -> Item:
        """Moves a note from source (the profile named by ``cmd.profile``) to the profile named by ``cmd.name``.

        The destination is loaded (or created if it has no file yet), the note is added to it under a new id,
        and the destination is saved right away. Only then is the note removed from source; saving source is left
        to the caller. Returns the copy.

        The copy is remembered on the command, so running the command again (as a replay does) only removes the
        note from source.
        """
        destination = cmd.name
        note_id = cmd.ids[0]
        note = self._find(source, note_id)
        if cmd.transferred is None:
            cmd.transferred = self._copy_note(note, cmd)
        else:
            logger.debug("note %d already copied to '%s' as note %d", note_id, destination, cmd.transferred.id)
        copy = cmd.transferred
        if not source.remove_note(note_id):
            raise TransferIncomplete(note_id, cmd.profile, destination)
        print(f'transferred [{cmd.profile}: note {note_id} -> {destination}: note {copy.id}]')
        return copy

    def _copy_note(self, note: Item, cmd: Command, replaying: bool = False) -> Item:
        path = self.store.profile_path(cmd.name, cmd.profile_folder)
        if os.path.isfile(path):
            target, fingerprint = self.store.load(cmd.name, cmd.profile_folder, cmd.key, cmd.encrypted)
        else:
            target, fingerprint = self.store.create(cmd.name, cmd.profile_folder, cmd.encrypted, cmd.yes)
        copy = target.add_note(note.title, note.body, note.status)

        def replay():
            nonlocal copy
            copy = self._copy_note(note, cmd, replaying=True)

        self.store.save(target, path, cmd.key, NO_FINGERPRINT if replaying else fingerprint, confirm=cmd.yes,
                        replay=replay)
        return copy

    def list_profiles(self, profile_folder: Optional[str] = None) -> None:
        folder = self.conf.resolve_profile_folder(profile_folder)
        print(f'profiles in {folder}')
        for name, plaintext in self.store.list_profiles(profile_folder):
            print(f'    {name}' if plaintext else f'    {name} [encrypted]')

    def _add_body(self, cmd: Command) -> str:
        if cmd.stdin:
            return self._piped_text(cmd)
        if cmd.editor:
            if not self.console.is_interactive():
                return ''
            if cmd.editor_text is None:
                cmd.editor_text = self.console.edit('')
            return cmd.editor_text
        return cmd.body or ''

    def _piped_text(self, cmd: Command) -> str:
        if cmd.piped_text is None:
            cmd.piped_text = self.console.read_stdin()
        return cmd.piped_text

    @staticmethod
    def _find(profile: Profile, note_id: int) -> Item:
        item = profile.find(note_id)
        if item is None:
            raise NoteNotFound(note_id)
        return item

    @staticmethod
    def _target_name(cmd: Command) -> str:
        if cmd.action == Action.NEW_PROFILE:
            return cmd.name or 'default'
        return cmd.profile

    @staticmethod
    def _query(cmd: Command, pattern: Optional[str] = None) -> NoteQuery:
        return NoteQuery(pattern=pattern, regex=cmd.regex, search_body=cmd.search_body, status=cmd.status,
                         datesort=cmd.datesort, reverse=cmd.reverse, limit=cmd.limit)
