import json

import pytest

from conftest import FakeConsole
from theca import cli
from theca.models import Status


@pytest.fixture
def console(mocker, monkeypatch):
    monkeypatch.delenv('THECA_DEFAULT_PROFILE', raising=False)
    monkeypatch.setenv('THECA_PROFILE_FOLDER', '/profiles')
    console = FakeConsole()
    mocker.patch('theca.cli.Console', return_value=console)
    return console


@pytest.fixture
def profiles(fs):
    fs.create_dir('/profiles')


def read(name='default'):
    with open(f'/profiles/{name}.json') as file:
        return json.load(file)


def test_add_and_list(profiles, console, capsys):
    assert cli.main(['new-profile']) == 0
    assert cli.main(['add', 'buy milk', '--urgent', '-b', '2%']) == 0
    assert cli.main(['add', 'call mom']) == 0
    capsys.readouterr()
    assert cli.main(['list', '-c']) == 0
    lines = capsys.readouterr().out.splitlines()
    assert [line.split()[0] for line in lines] == ['1', '2']
    assert ' U ' in lines[0]
    notes = read()['notes']
    assert notes[0]['body'] == '2%'
    assert notes[0]['status'] == 'Urgent'


def test_default_command_is_list(profiles, console, capsys):
    cli.main(['new-profile'])
    capsys.readouterr()
    assert cli.main([]) == 0
    assert capsys.readouterr().out == 'this profile is empty\n'


def test_profile_folder_argument(fs, console):
    fs.create_dir('/elsewhere')
    assert cli.main(['-f', '/elsewhere', 'new-profile', 'work']) == 0
    with open('/elsewhere/work.json') as file:
        assert json.load(file) == {'encrypted': False, 'notes': []}


def test_default_profile_from_environment(profiles, console, monkeypatch):
    monkeypatch.setenv('THECA_DEFAULT_PROFILE', 'work')
    cli.main(['new-profile', 'work'])
    cli.main(['add', 'in work'])
    assert [n['title'] for n in read('work')['notes']] == ['in work']


def test_profile_argument(profiles, console):
    cli.main(['new-profile', 'home'])
    cli.main(['-p', 'home', 'add', 'at home'])
    assert [n['title'] for n in read('home')['notes']] == ['at home']


def test_error_exit_status(profiles, console, capsys):
    assert cli.main(['list']) == 1
    assert capsys.readouterr().err == 'error: /profiles/default.json does not exist.\n'


def test_declined_prompt(profiles, console, capsys):
    cli.main(['new-profile'])
    cli.main(['add', 'x'])
    console.answers = [False]
    assert cli.main(['clear']) == 1
    assert capsys.readouterr().err == 'error: ok bye\n'
    assert len(read()['notes']) == 1


def test_yes_skips_prompts(profiles, console):
    cli.main(['new-profile'])
    cli.main(['add', 'x'])
    assert cli.main(['-y', 'clear']) == 0
    assert read()['notes'] == []


def test_edit_and_delete(profiles, console, capsys):
    cli.main(['new-profile'])
    cli.main(['add', 'first', '--started'])
    cli.main(['add', 'second'])
    assert cli.main(['edit', '1', 'renamed', '-b', 'now with a body']) == 0
    assert cli.main(['del', '2', '3']) == 0
    out = capsys.readouterr().out
    assert "deleted note 2\nnote 3 doesn't exist\n" in out
    notes = read()['notes']
    assert notes == [{'id': 1, 'title': 'renamed', 'status': '', 'body': 'now with a body',
                      'last_touched': notes[0]['last_touched']}]


def test_piped_body(profiles, console):
    console.stdin = 'from the pipe'
    cli.main(['new-profile'])
    assert cli.main(['add', 'piped', '-']) == 0
    assert cli.main(['edit', '1', '-']) == 0
    assert read()['notes'][0]['body'] == 'from the pipe'
    assert read()['notes'][0]['title'] == 'piped'
    assert console.stdin_reads == 2


def test_dash_conflicts_with_body(profiles, console):
    with pytest.raises(SystemExit) as exc:
        cli.main(['add', 'title', '-', '-b', 'body'])
    assert exc.value.code == 2


def test_encrypted_asks_for_key(profiles, console):
    console.passwords = ['hunter2']
    assert cli.main(['-e', 'new-profile', 'secret']) == 0
    console.passwords = ['hunter2']
    assert cli.main(['-e', '-p', 'secret', 'add', 'hidden']) == 0
    assert cli.main(['-k', 'hunter2', '-p', 'secret', 'list']) == 0


def test_wrong_key(profiles, console, capsys):
    cli.main(['-k', 'hunter2', 'new-profile'])
    assert cli.main(['-k', 'hunter3', 'list']) == 1
    assert capsys.readouterr().err == 'error: unable to decrypt profile, is the key correct?\n'


def test_list_profiles_does_not_ask_for_key(profiles, console, capsys):
    cli.main(['new-profile'])
    capsys.readouterr()
    assert cli.main(['-e', 'list-profiles']) == 0
    assert capsys.readouterr().out == 'profiles in /profiles\n    default\n'


def test_transfer_and_import(profiles, console, capsys):
    cli.main(['new-profile'])
    cli.main(['new-profile', 'work'])
    cli.main(['add', 'movable'])
    capsys.readouterr()
    assert cli.main(['transfer', '1', 'work']) == 0
    assert capsys.readouterr().out == 'transferred [default: note 1 -> work: note 1]\n'
    assert cli.main(['import', '1', 'work']) == 0
    assert capsys.readouterr().out == 'transferred [work: note 1 -> default: note 1]\n'
    assert [n['title'] for n in read()['notes']] == ['movable']
    assert read('work')['notes'] == []


def test_search_arguments(profiles, console):
    args = cli.argparser().parse_args(['search', '--regex', '--search-body', '-l', '2', '-d', '-r', '--none', 'x.*'])
    cmd = cli.command_from_args(args, cli.ThecaConf(), console)
    assert cmd.pattern == 'x.*'
    assert cmd.regex and cmd.search_body and cmd.datesort and cmd.reverse
    assert cmd.limit == 2
    assert cmd.status == Status.BLANK
    assert cmd.profile == 'default'


def test_key_implies_encrypted(console):
    args = cli.argparser().parse_args(['-k', 'pw', 'info'])
    cmd = cli.command_from_args(args, cli.ThecaConf(), console)
    assert cmd.encrypted
    assert cmd.key == 'pw'


def test_negative_limit_is_rejected(profiles, console, capsys):
    with pytest.raises(SystemExit) as exc:
        cli.main(['list', '-l', '-1'])
    assert exc.value.code == 2
    assert 'must not be negative: -1' in capsys.readouterr().err
