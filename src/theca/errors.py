"""Exceptions raised by theca.

Everything the tool reports to the user derives from :class:`ThecaError`; the CLI prints the
:attr:`ThecaError.message` and exits with a nonzero status.
"""


class ThecaError(Exception):
    """Base class for errors that should be reported to the user without a traceback."""
    def __init__(self, message: str, cause: BaseException = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class UserAborted(ThecaError):
    """Raised when the user declines a confirmation prompt. Nothing is written."""
    def __init__(self, message: str = 'ok bye'):
        super().__init__(message)


class ProfileNotFound(ThecaError):
    def __init__(self, path: str):
        super().__init__(f'{path} does not exist.')
        self.path = path


class NotAFile(ThecaError):
    def __init__(self, path: str):
        super().__init__(f'{path} is not a file.')
        self.path = path


class MalformedProfile(ThecaError):
    """Raised when a profile file cannot be parsed."""
    def __init__(self, path: str, cause: BaseException = None):
        super().__init__(f'invalid JSON in {path}', cause)
        self.path = path


class DecryptionError(ThecaError):
    """Raised when ciphertext cannot be decrypted, usually because the key is wrong."""


class InvalidEncoding(ThecaError):
    def __init__(self, path: str, cause: BaseException = None):
        super().__init__(f'{path} is not valid UTF-8 (is the profile encrypted?)', cause)
        self.path = path


class NoteNotFound(ThecaError):
    def __init__(self, note_id: int):
        super().__init__(f"note {note_id} doesn't exist")
        self.note_id = note_id


class InvalidArgument(ThecaError):
    pass


class TransferIncomplete(ThecaError):
    """Raised when a note was copied to the destination profile but could not be removed from the source.

    The destination has already been saved, so the note now exists in both profiles.
    """
    def __init__(self, note_id: int, source: str, destination: str):
        super().__init__(f"note {note_id} was copied to '{destination}' but couldn't be removed from "
                         f"'{source}', it now exists in both profiles")
        self.note_id = note_id
        self.source = source
        self.destination = destination


class InvalidPattern(ThecaError):
    def __init__(self, pattern: str, cause: BaseException = None):
        super().__init__(f'regex error: {cause}.' if cause else f'regex error: {pattern}', cause)
        self.pattern = pattern


class StorageError(ThecaError):
    """Wraps an :exc:`OSError` raised while reading or writing profile files."""
    def __init__(self, path: str, cause: OSError):
        detail = cause.strerror or str(cause)
        super().__init__(f'{path}: {detail}', cause)
        self.path = path


class EditorError(ThecaError):
    """Raised when the external editor is not configured or exits unsuccessfully."""


class ProfileChanged(ThecaError):
    """Raised when a profile file changed on disk since it was loaded and there is no way to merge."""
    def __init__(self, path: str):
        super().__init__(f'{path} was changed by another process since it was loaded')
        self.path = path
