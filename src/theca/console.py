"""Provides the :class:`Console` class, through which theca talks to the user interactively.

Everything that needs a terminal (confirmation prompts, password entry, the external editor) goes through an
instance of this class, so the rest of the code can be exercised with a scripted replacement.
"""

import getpass
import logging
import os
import shlex
import shutil
import subprocess
import sys
import tempfile

from theca.errors import EditorError


logger = logging.getLogger(__name__)


_YES = {'y', 'yes'}
_NO = {'n', 'no'}


class Console:
    def confirm(self, prompt: str) -> bool:
        """Asks a yes/no question, repeating until it gets a recognizable answer."""
        print(prompt)
        while True:
            try:
                answer = input('[y/n]# ').strip().lower()
            except EOFError:
                return False
            if answer in _YES:
                return True
            if answer in _NO:
                return False
            print('invalid input.')

    def read_password(self) -> str:
        return getpass.getpass('Key: ')

    def read_stdin(self) -> str:
        return sys.stdin.read()

    def is_interactive(self) -> bool:
        """True if both stdin and stdout are attached to a terminal."""
        return sys.stdin.isatty() and sys.stdout.isatty()

    def terminal_width(self) -> int:
        """Returns the width of the terminal, or 0 if output is not going to a terminal."""
        if not sys.stdout.isatty():
            return 0
        return shutil.get_terminal_size((0, 0)).columns

    def edit(self, seed: str) -> str:
        """Opens ``$VISUAL`` (or ``$EDITOR``) on a temporary file containing seed, and returns what was saved."""
        editor = os.environ.get('VISUAL') or os.environ.get('EDITOR')
        if not editor:
            raise EditorError('neither $VISUAL nor $EDITOR is set.')
        with tempfile.NamedTemporaryFile(mode='w', prefix='theca', suffix='.txt', delete=False,
                                         encoding='utf-8') as tf:
            tf.write(seed)
            path = tf.name
        try:
            logger.debug('running editor %s on %s', editor, path)
            try:
                returncode = subprocess.call(shlex.split(editor) + [path])
            except OSError as e:
                raise EditorError(f'could not run editor {editor}: {e}', e)
            if returncode != 0:
                raise EditorError(f'editor {editor} exited with status {returncode}')
            with open(path, 'r', encoding='utf-8') as file:
                return file.read()
        finally:
            os.unlink(path)
