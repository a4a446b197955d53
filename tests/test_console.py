import pytest

from theca.console import Console
from theca.errors import EditorError


def test_confirm_repeats_until_answered(mocker, capsys):
    mocker.patch('builtins.input', side_effect=['maybe', 'Y'])
    assert Console().confirm('really?')
    assert capsys.readouterr().out == 'really?\ninvalid input.\n'


def test_confirm_no(mocker):
    mocker.patch('builtins.input', return_value='no')
    assert not Console().confirm('really?')


def test_confirm_end_of_input(mocker):
    mocker.patch('builtins.input', side_effect=EOFError)
    assert not Console().confirm('really?')


def test_edit(mocker, monkeypatch):
    monkeypatch.setenv('VISUAL', 'myeditor --wait')

    def fake_editor(argv):
        assert argv[:2] == ['myeditor', '--wait']
        with open(argv[2]) as file:
            assert file.read() == 'old body'
        with open(argv[2], 'w') as file:
            file.write('new body')
        return 0

    call = mocker.patch('theca.console.subprocess.call', side_effect=fake_editor)
    assert Console().edit('old body') == 'new body'
    assert call.call_count == 1


def test_edit_without_editor(monkeypatch):
    monkeypatch.delenv('VISUAL', raising=False)
    monkeypatch.delenv('EDITOR', raising=False)
    with pytest.raises(EditorError):
        Console().edit('')


def test_edit_failure(mocker, monkeypatch):
    monkeypatch.delenv('VISUAL', raising=False)
    monkeypatch.setenv('EDITOR', 'vi')
    mocker.patch('theca.console.subprocess.call', return_value=1)
    with pytest.raises(EditorError, match='exited with status 1'):
        Console().edit('')


def test_terminal_width_when_not_a_terminal(mocker):
    fake_sys = mocker.patch('theca.console.sys')
    fake_sys.stdout.isatty.return_value = False
    assert Console().terminal_width() == 0
