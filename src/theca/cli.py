"""Command-line interface for theca."""


import argparse
import logging
import sys

from theca.api import Theca
from theca.conf import ThecaConf
from theca.console import Console
from theca.errors import ThecaError
from theca.models import Action, Command, Status


def _add_status_args(parser: argparse.ArgumentParser) -> None:
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--none', dest='status', action='store_const', const=Status.BLANK,
                       help='No status.')
    group.add_argument('--started', dest='status', action='store_const', const=Status.STARTED,
                       help='Status "Started".')
    group.add_argument('--urgent', dest='status', action='store_const', const=Status.URGENT,
                       help='Status "Urgent".')


def _add_output_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('-c', '--condensed', action='store_true', help='Use the condensed output format.')
    parser.add_argument('-j', '--json', action='store_true', help='Output as JSON.')


def _non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f'must not be negative: {value}')
    return number


def _add_listing_args(parser: argparse.ArgumentParser) -> None:
    _add_output_args(parser)
    parser.add_argument('-l', '--limit', type=_non_negative_int, default=0,
                        help='Show at most this many notes. 0 (the default) shows all of them.')
    parser.add_argument('-d', '--datesort', action='store_true',
                        help='Sort by when the notes were last touched instead of by id.')
    parser.add_argument('-r', '--reverse', action='store_true', help='Reverse the sort order.')
    _add_status_args(parser)


def _add_body_args(parser: argparse.ArgumentParser) -> None:
    group = parser.add_mutually_exclusive_group()
    group.add_argument('-b', '--body', help='Body of the note.')
    group.add_argument('--editor', action='store_true',
                       help='Write the body in $VISUAL or $EDITOR. Ignored when not running in a terminal.')


def argparser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='theca', description='A simple command line note taking tool.')
    parser.set_defaults(action=Action.LIST, ids=[], name=None, title='', body=None, dash=None, editor=False,
                        status=None, pattern='', regex=False, search_body=False, limit=0, datesort=False,
                        reverse=False, json=False, condensed=False, new_key='')
    parser.add_argument('-p', '--profile',
                        help='Profile to use. Defaults to $THECA_DEFAULT_PROFILE, or "default".')
    parser.add_argument('-f', '--profile-folder',
                        help='Folder containing profiles. Defaults to $THECA_PROFILE_FOLDER, or ~/.theca.')
    parser.add_argument('-k', '--key', help='Encryption key for the profile. Implies --encrypted.')
    parser.add_argument('-e', '--encrypted', action='store_true',
                        help='The profile is encrypted. You will be asked for the key if --key is not given.')
    parser.add_argument('-y', '--yes', action='store_true',
                        help='Answer yes to every confirmation prompt, including merging concurrent changes.')
    parser.add_argument('-v', '--verbose', action='store_true', help='Print debug logging to stderr.')

    subs = parser.add_subparsers(title='Commands')

    p_list = subs.add_parser('list', help='List the notes in the profile. This is the default command.')
    _add_listing_args(p_list)
    p_list.set_defaults(action=Action.LIST)

    p_view = subs.add_parser('view', help='Show a single note in full.')
    p_view.add_argument('ids', nargs=1, type=int, metavar='id')
    _add_output_args(p_view)
    p_view.set_defaults(action=Action.VIEW)

    p_search = subs.add_parser('search', help='Search the notes by title (or body, with --search-body).')
    p_search.add_argument('pattern', help='Text that must appear exactly; or a regular expression, with --regex.')
    p_search.add_argument('--regex', action='store_true', help='Treat the pattern as a regular expression.')
    p_search.add_argument('--search-body', action='store_true',
                          help='Match against note bodies instead of titles, and print matching bodies.')
    _add_listing_args(p_search)
    p_search.set_defaults(action=Action.SEARCH)

    p_info = subs.add_parser('info', help='Show statistics about the profile.')
    p_info.set_defaults(action=Action.INFO)

    p_add = subs.add_parser('add', help='Add a note.')
    p_add.add_argument('title')
    p_add.add_argument('dash', nargs='?', choices=['-'], metavar='-', help='Read the body from piped input.')
    _add_body_args(p_add)
    _add_status_args(p_add)
    p_add.set_defaults(action=Action.ADD)

    p_edit = subs.add_parser(
        'edit',
        help='Edit a note. The status is always replaced: omitting a status flag resets it. '
             'Passing "-" as the title reads the body from piped input and keeps the current title.')
    p_edit.add_argument('ids', nargs=1, type=int, metavar='id')
    p_edit.add_argument('title', nargs='?', default='', help='New title. Omit to keep the current title.')
    _add_body_args(p_edit)
    _add_status_args(p_edit)
    p_edit.set_defaults(action=Action.EDIT)

    p_del = subs.add_parser('del', help='Delete notes.')
    p_del.add_argument('ids', nargs='+', type=int, metavar='id')
    p_del.set_defaults(action=Action.DELETE)

    p_transfer = subs.add_parser('transfer', help='Move a note from this profile to another one.')
    p_transfer.add_argument('ids', nargs=1, type=int, metavar='id')
    p_transfer.add_argument('name', help='Destination profile.')
    p_transfer.set_defaults(action=Action.TRANSFER)

    p_import = subs.add_parser('import', help='Move a note from another profile into this one.')
    p_import.add_argument('ids', nargs=1, type=int, metavar='id')
    p_import.add_argument('name', help='Source profile.')
    p_import.set_defaults(action=Action.IMPORT)

    p_clear = subs.add_parser('clear', help='Delete every note in the profile.')
    p_clear.set_defaults(action=Action.CLEAR)

    p_new = subs.add_parser('new-profile', help='Create a new, empty profile.')
    p_new.add_argument('name', nargs='?', default='default')
    p_new.set_defaults(action=Action.NEW_PROFILE)

    p_enc = subs.add_parser('encrypt-profile', help='Encrypt the profile with a new key.')
    p_enc.add_argument('--new-key', default='', help='The new key. You will be asked for it if omitted.')
    p_enc.set_defaults(action=Action.ENCRYPT_PROFILE)

    p_dec = subs.add_parser('decrypt-profile', help='Store the profile unencrypted.')
    p_dec.set_defaults(action=Action.DECRYPT_PROFILE)

    p_profiles = subs.add_parser('list-profiles', help='List the profiles in the profile folder.')
    p_profiles.set_defaults(action=Action.LIST_PROFILES)

    return parser


def command_from_args(args: argparse.Namespace, conf: ThecaConf, console: Console) -> Command:
    """Builds the command to execute, filling in defaults and asking for the key if one is needed."""
    cmd = Command(
        action=args.action,
        profile=args.profile or conf.default_profile,
        profile_folder=args.profile_folder,
        key=args.key or '',
        encrypted=args.encrypted or bool(args.key),
        yes=args.yes,
        ids=args.ids,
        name=args.name,
        title=args.title,
        body=args.body,
        stdin=args.dash == '-',
        editor=args.editor,
        status=args.status,
        pattern=args.pattern,
        regex=args.regex,
        search_body=args.search_body,
        limit=args.limit,
        datesort=args.datesort,
        reverse=args.reverse,
        json=args.json,
        condensed=args.condensed,
        new_key=args.new_key,
    )
    if cmd.encrypted and not cmd.key and cmd.action != Action.LIST_PROFILES:
        cmd.key = console.read_password()
    return cmd


def main(args=None) -> int:
    """Runs the tool and returns its exit code.

    args may be an array of string command-line arguments; if absent,
    the process's arguments are used.
    """
    parser = argparser()
    args = parser.parse_args(args)
    if args.dash and (args.body is not None or args.editor):
        parser.error('- cannot be combined with --body or --editor')
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format='%(levelname)s %(name)s: %(message)s')
    console = Console()
    try:
        conf = ThecaConf.for_user()
        cmd = command_from_args(args, conf, console)
        Theca(conf, console).execute(cmd)
    except ThecaError as e:
        print(f'error: {e.message}', file=sys.stderr)
        return 1
    return 0
