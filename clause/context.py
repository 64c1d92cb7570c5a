
import os

from clause.utils import format_nonexp_repr


class Dirs(object):
    """Directories a command is likely to want, derived from the
    environment. *config*, *cache*, and *data* follow the XDG base
    directory conventions, and include the command's name.

    Nothing is created on the filesystem; these are just paths.
    """
    def __init__(self, name, environ=None):
        environ = os.environ if environ is None else environ
        home = environ.get('HOME') or os.path.expanduser('~')
        self.home = os.path.abspath(home)
        self.config = self._get_xdg_dir(environ, 'XDG_CONFIG_HOME', '.config', name)
        self.cache = self._get_xdg_dir(environ, 'XDG_CACHE_HOME', '.cache', name)
        self.data = self._get_xdg_dir(environ, 'XDG_DATA_HOME', '.local/share', name)

    def _get_xdg_dir(self, environ, env_var, home_subdir, name):
        base_dir = environ.get(env_var) or os.path.join(self.home, home_subdir)
        return os.path.join(os.path.abspath(base_dir), name)

    def __repr__(self):
        return format_nonexp_repr(self, ['home', 'config', 'cache', 'data'])


class Context(object):
    """Passed as ``ctx`` to Command handlers, a fresh Context is built
    for every call to :meth:`Command.exec`, and never shared between
    calls.

    Args:
       command (Command): The Command being executed.
       argv (list): The tokens passed to that execution.
       environ (dict): Environment variables to derive paths from.
          Defaults to ``os.environ``.
    """
    def __init__(self, command, argv=(), environ=None):
        self.command = command
        self.argv = tuple(argv)
        self.environ = os.environ if environ is None else environ
        self.dirs = Dirs(command.name, environ=self.environ)

    def __repr__(self):
        return format_nonexp_repr(self, ['command', 'argv'])
