from datetime import datetime
import pytest
from theca.api import Theca
from theca.conf import ThecaConf
from theca.console import Console
from theca.models import DATEFMT, DATEFMT_SHORT


class FakeConsole(Console):
    """Scripted replacement for the interactive console.

    Confirmation answers, passwords and editor results are consumed in order; running out of answers fails the
    test, so unexpected prompts are caught.
    """
    def __init__(self, answers=(), passwords=(), stdin='', interactive=False, edits=(), width=0):
        self.answers = list(answers)
        self.passwords = list(passwords)
        self.stdin = stdin
        self.interactive = interactive
        self.edits = list(edits)
        self.width = width
        self.prompts = []
        self.seeds = []
        self.stdin_reads = 0

    def confirm(self, prompt):
        self.prompts.append(prompt)
        assert self.answers, f'unexpected prompt: {prompt}'
        return self.answers.pop(0)

    def read_password(self):
        assert self.passwords, 'unexpected password prompt'
        return self.passwords.pop(0)

    def read_stdin(self):
        self.stdin_reads += 1
        return self.stdin

    def is_interactive(self):
        return self.interactive

    def terminal_width(self):
        return self.width

    def edit(self, seed):
        self.seeds.append(seed)
        assert self.edits, 'unexpected editor invocation'
        return self.edits.pop(0)


def stamp(local: str) -> str:
    """Converts a local 'YYYY-mm-dd HH:MM:SS' time into a stored last_touched value."""
    return datetime.strptime(local, DATEFMT_SHORT).astimezone().strftime(DATEFMT)


@pytest.fixture
def console():
    return FakeConsole()


@pytest.fixture
def theca(fs, console):
    fs.create_dir('/profiles')
    return Theca(ThecaConf(profile_folder='/profiles'), console)
