"""Provides the :class:`ProfileStore` class, which reads and writes profile files.

A profile file is the pretty-printed JSON form of :class:`theca.models.Profile`, or, for encrypted profiles, the
ciphertext of that JSON.

There is no locking. Instead, loading a profile also returns a fingerprint of the file's bytes, and
:meth:`ProfileStore.save` checks the fingerprint again before writing. If the file changed in between, the caller's
pending command is re-run against a fresh copy of the file instead of overwriting the other writer's changes.
"""

import hashlib
import json
import logging
import os
import os.path
from typing import Callable, List, Optional, Tuple

import shortuuid

from theca.conf import ThecaConf
from theca.console import Console
from theca.crypt import decrypt, encrypt, password_to_key
from theca.errors import InvalidEncoding, MalformedProfile, NotAFile, ProfileChanged, ProfileNotFound, \
    StorageError, UserAborted
from theca.models import Profile


logger = logging.getLogger(__name__)


NO_FINGERPRINT = 0
"""Fingerprint of a profile that has no file yet. Saving with it never triggers conflict handling."""


def fingerprint_bytes(data: bytes) -> int:
    """Returns a nonzero 64-bit digest of the data."""
    digest = int.from_bytes(hashlib.blake2b(data, digest_size=8).digest(), 'big')
    return digest or 1


def serialize(profile: Profile) -> str:
    return json.dumps(profile.as_json(), indent=2)


def parse(text: str, path: str) -> Profile:
    """Parses the JSON form of a profile. Raises :exc:`theca.errors.MalformedProfile` mentioning path on failure."""
    try:
        return Profile.from_json(json.loads(text))
    except (ValueError, KeyError, TypeError) as e:
        raise MalformedProfile(path, e)


def _read_bytes(path: str) -> bytes:
    try:
        with open(path, 'rb') as file:
            return file.read()
    except OSError as e:
        raise StorageError(path, e)


class ProfileStore:
    """Creates, loads and saves profiles.

    .. attribute:: conf
       :type: theca.conf.ThecaConf

    .. attribute:: console
       :type: theca.console.Console

       Used for confirmation prompts.
    """
    def __init__(self, conf: ThecaConf, console: Console):
        self.conf = conf
        self.console = console

    def profile_path(self, name: str, profile_folder: Optional[str] = None) -> str:
        return self.conf.profile_path(name, profile_folder)

    def fingerprint(self, path: str) -> int:
        """Returns the fingerprint of the file currently at path. Raises :exc:`theca.errors.StorageError`."""
        return fingerprint_bytes(_read_bytes(path))

    def create(self, profile_name: str, profile_folder: Optional[str] = None, encrypted: bool = False,
               confirm_create: bool = False) -> Tuple[Profile, int]:
        """Returns a new empty profile, making sure the profile folder exists.

        If the folder is missing, the user is asked before it is created, unless confirm_create is True.
        """
        folder = self.conf.resolve_profile_folder(profile_folder)
        if not os.path.exists(folder):
            if not (confirm_create
                    or self.console.confirm(f"{folder} doesn't exist, would you like to create it?")):
                raise UserAborted()
            logger.debug('creating profile folder %s', folder)
            try:
                os.makedirs(folder)
            except OSError as e:
                raise StorageError(folder, e)
        logger.debug('new profile %s in %s', profile_name, folder)
        return Profile(encrypted=encrypted), NO_FINGERPRINT

    def load(self, profile_name: str, profile_folder: Optional[str] = None, key: str = '',
             encrypted: bool = False) -> Tuple[Profile, int]:
        """Reads a profile file, decrypting it with a key derived from the passphrase if encrypted is True.

        Returns the profile and the fingerprint of the bytes that were read.
        """
        path = self.profile_path(profile_name, profile_folder)
        if not os.path.isfile(path):
            if os.path.exists(path):
                raise NotAFile(path)
            raise ProfileNotFound(path)
        data = _read_bytes(path)
        fingerprint = fingerprint_bytes(data)
        if encrypted:
            data = decrypt(data, password_to_key(key))
        try:
            text = data.decode('utf-8')
        except UnicodeDecodeError as e:
            raise InvalidEncoding(path, e)
        profile = parse(text, path)
        logger.debug('loaded %s (%d notes, fingerprint %x)', path, len(profile.notes), fingerprint)
        return profile, fingerprint

    def save(self, profile: Profile, path: str, key: str = '', fingerprint: int = NO_FINGERPRINT,
             confirm: bool = False, *, new_profile: bool = False,
             replay: Callable[[], None] = None) -> None:
        """Writes the profile to path, encrypting it with a key derived from the passphrase if it is encrypted.

        fingerprint should be the value :meth:`load` returned for this profile. If the file no longer matches
        it, some other process saved the profile in the meantime; after confirmation (skipped if confirm is True)
        replay is called *instead of* writing this profile. It is expected to load the profile again, redo the
        pending change, and save with :data:`NO_FINGERPRINT`. Declining raises :exc:`theca.errors.UserAborted`.

        If new_profile is True and the file already exists, overwriting it requires confirmation (skipped if
        confirm is True).
        """
        if new_profile and os.path.exists(path) and not confirm:
            if not self.console.confirm(f'profile {path} already exists, would you like to overwrite it?'):
                raise UserAborted()

        if fingerprint != NO_FINGERPRINT:
            current = self.fingerprint(path)
            if current != fingerprint:
                logger.info('%s changed on disk since it was loaded (fingerprint %x, now %x)',
                            path, fingerprint, current)
                if not confirm:
                    if not self.console.confirm(f"changes have been made to the profile '{path}' on disk since "
                                                'it was loaded, would you like to attempt to merge them?'):
                        raise UserAborted()
                if replay is None:
                    raise ProfileChanged(path)
                replay()
                return

        self.write(profile, path, key)

    def list_profiles(self, profile_folder: Optional[str] = None) -> List[Tuple[str, bool]]:
        """Returns the names of the profiles in the folder, sorted, each with whether it is readable as plaintext.

        Files that are not plaintext profiles are assumed to be encrypted.
        """
        folder = self.conf.resolve_profile_folder(profile_folder)
        if not os.path.isdir(folder):
            raise ProfileNotFound(folder)
        result = []
        for filename in sorted(os.listdir(folder)):
            path = os.path.join(folder, filename)
            name, ext = os.path.splitext(filename)
            if ext != '.json' or not os.path.isfile(path):
                continue
            try:
                parse(_read_bytes(path).decode('utf-8'), path)
                plaintext = True
            except (MalformedProfile, UnicodeDecodeError):
                plaintext = False
            result.append((name, plaintext))
        return result

    def write(self, profile: Profile, path: str, key: str = '') -> None:
        """Unconditionally writes the profile, via a temporary file that is renamed over path."""
        data = serialize(profile).encode('utf-8')
        if profile.encrypted:
            data = encrypt(data, password_to_key(key))
        folder, basename = os.path.split(path)
        tmp = os.path.join(folder, f'.{basename}.{shortuuid.uuid()}.tmp')
        logger.debug('writing %s (%d notes)', path, len(profile.notes))
        try:
            with open(tmp, 'wb') as file:
                file.write(data)
            os.replace(tmp, path)
        except OSError as e:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise StorageError(path, e)
