from __future__ import annotations
from dataclasses import dataclass, replace
import logging
import os
import os.path
from typing import Mapping, Optional


logger = logging.getLogger(__name__)


DEFAULT_PROFILE_FOLDER = os.path.join('~', '.theca')


@dataclass
class ThecaConf:
    """Settings that apply to every command, constructed once at startup.

    Usually obtained via :meth:`for_user`, and passed explicitly to :class:`theca.api.Theca`.
    """

    profile_folder: Optional[str] = None
    """Folder containing the profile files.

    Overridden by the ``THECA_PROFILE_FOLDER`` environment variable, and by an explicit ``--profile-folder``
    argument. If none of those are set, ``~/.theca`` is used.
    """

    default_profile: str = 'default'
    """Profile used when no ``--profile`` argument is given. Overridden by ``THECA_DEFAULT_PROFILE``."""

    @classmethod
    def user_config_path(cls) -> str:
        return os.path.expanduser(os.path.join('~', '.theca.conf.py'))

    @classmethod
    def for_user(cls, environ: Mapping[str, str] = None) -> ThecaConf:
        """Loads ``~/.theca.conf.py`` if it exists, then applies environment variable overrides.

        The config file is a Python script which must assign an instance of :class:`ThecaConf` to the
        variable ``conf``, for example::

            from theca.conf import ThecaConf
            conf = ThecaConf(profile_folder='~/Dropbox/theca', default_profile='work')
        """
        environ = os.environ if environ is None else environ
        path = cls.user_config_path()
        if os.path.exists(path):
            logger.debug('loading config from %s', path)
            with open(path, 'r') as file:
                conf_script = file.read()
            context = {}
            exec(conf_script, context)
            if 'conf' not in context or not isinstance(context['conf'], cls):
                raise Exception('You need to assign an instance of ThecaConf to the variable `conf` '
                                f'in your config file: {path}')
            conf = context['conf']
        else:
            conf = cls()
        return conf.with_environ(environ)

    def with_environ(self, environ: Mapping[str, str]) -> ThecaConf:
        conf = self
        if environ.get('THECA_PROFILE_FOLDER'):
            conf = replace(conf, profile_folder=environ['THECA_PROFILE_FOLDER'])
        if environ.get('THECA_DEFAULT_PROFILE'):
            conf = replace(conf, default_profile=environ['THECA_DEFAULT_PROFILE'])
        return conf

    def resolve_profile_folder(self, hint: Optional[str] = None) -> str:
        """Returns the folder to use: the explicit hint if given, else :attr:`profile_folder`, else ``~/.theca``."""
        folder = hint or self.profile_folder or DEFAULT_PROFILE_FOLDER
        return os.path.expanduser(folder)

    def profile_path(self, name: str, hint: Optional[str] = None) -> str:
        return os.path.join(self.resolve_profile_folder(hint), f'{name}.json')
