import sys
import asyncio
import logging
from collections import OrderedDict
from collections.abc import Mapping

from clause.args import validate_arg_defs, bind_args
from clause.errors import (ClauseException,
                           DefinitionError,
                           ArgumentParseError,
                           ControlSignal,
                           CommandLineError,
                           HelpSignal,
                           VersionSignal,
                           InvalidSubcommand)
from clause.parser import Flag, FlagParser
from clause.context import Context
from clause.helpers import HelpHandler
from clause.utils import (inject,
                          resolve,
                          get_default_name,
                          docstring_to_doc,
                          process_command_name)


log = logging.getLogger(__name__)


def default_print_error(msg):
    return sys.stderr.write(msg + '\n')


DEFAULT_HELP_HANDLER = HelpHandler()

VERSION_FLAG_NAME = 'version'


class Command(object):
    def __init__(self, func=None, name=None, doc=None, **kwargs):
        """The central type in clause. Instantiate a Command with either
        a handler function or a mapping of subcommands, then call
        ``await command.exec()`` (or ``command.run()``, outside of a
        running event loop) to execute your CLI.

        Note that only the first three constructor arguments are
        positional, the rest are keyword-only.

        Args:
           func (callable): The function called when this command is
              run. It may accept any of ``args`` (the bound positional
              arguments), ``flags`` (a dict of flag values), ``ctx``
              (a Context), and ``command`` (this Command), by
              name. It may return an awaitable. Mutually exclusive
              with *subcommands*.
           name (str): The name of this command, used in help and
              error messages. Defaults to the name of *func*.
           doc (str): A description that appears in help
              output. Defaults to the first paragraph of *func*'s
              docstring.
           args (list): A list of Arg instances, the positional
              arguments accepted. Defaults to none.
           flags (list): A list of Flag instances.
           subcommands: A mapping of names to Command instances, or
              a list of Commands, to be dispatched to by name.
           version (str): If set, a ``--version`` flag is added which
              prints the name and version.
           help: Pass False to disable the automatically added
              ``--help`` flag. Also accepts a HelpHandler instance.

        Raises DefinitionError if the command could never be run,
        e.g., if it has both or neither of *func* and *subcommands*, or
        if *args* are misordered.
        """
        subcommands = kwargs.pop('subcommands', None)
        args = kwargs.pop('args', None)
        flags = list(kwargs.pop('flags', None) or [])
        self.version = kwargs.pop('version', None)
        help = kwargs.pop('help', DEFAULT_HELP_HANDLER)
        if kwargs:
            raise TypeError('unexpected keyword arguments: %r' % sorted(kwargs.keys()))

        self._check_func_or_subcommands(func, subcommands)
        self.func = func

        name = name if name is not None else get_default_name(func)
        self.name = process_command_name(name)
        self.doc = docstring_to_doc(func) if doc is None else doc

        self.args = list(args or [])
        validate_arg_defs(self.args)

        self.subcommands = OrderedDict()
        for subcmd_name, subcmd in _iter_subcommands(subcommands):
            self._add_subcommand(subcmd_name, subcmd)
        if self.subcommands and self.args and self.args[-1].rest:
            raise DefinitionError('rest arguments cannot be combined with subcommands')

        if help is True:
            help = DEFAULT_HELP_HANDLER
        if help and not isinstance(help, HelpHandler):
            raise TypeError('expected HelpHandler instance or False for help, not: %r' % (help,))
        self.help_handler = help or None

        signal_map = {}
        if self.help_handler:
            flags.append(self.help_handler.flag)
            signal_map[self.help_handler.flag.name] = lambda: HelpSignal(self)
        if self.version:
            flags.append(Flag('--' + VERSION_FLAG_NAME, parse_as=True,
                              doc='show version information and exit'))
            signal_map[VERSION_FLAG_NAME] = lambda: VersionSignal(self.name, self.version)

        self.parser = FlagParser(flags,
                                 subcmd_names=list(self.subcommands),
                                 posarg_count=len(self.args),
                                 signal_map=signal_map)
        return

    @staticmethod
    def _check_func_or_subcommands(func, subcommands):
        if func is not None and subcommands:
            raise DefinitionError('command may have subcommands OR a handler'
                                  ' function, but not both')
        if func is None and not subcommands:
            raise DefinitionError('command must have subcommands OR a handler function')
        if func is not None and not callable(func):
            raise DefinitionError('expected callable handler function, not: %r' % (func,))

    def _add_subcommand(self, subcmd_name, subcmd):
        if not isinstance(subcmd, Command):
            raise DefinitionError('expected Command instance, not: %r' % (subcmd,))
        subcmd_name = process_command_name(subcmd_name)
        if subcmd_name in self.subcommands:
            raise DefinitionError('conflicting subcommand name: %r' % subcmd_name)
        self.subcommands[subcmd_name] = subcmd

    def get_flags(self, with_hidden=True):
        return self.parser.get_flags(with_hidden=with_hidden)

    async def exec(self, argv=None):
        """Parses *argv*, binds positional arguments, and then either
        dispatches to the selected subcommand, or calls the handler
        function. Returns whatever the handler (or subcommand)
        returns.

        Defaults to the arguments on the command line,
        ``sys.argv[1:]``.

        If ``--help`` or ``--version`` is passed, the corresponding
        text is printed to stdout, and None is returned. All other
        exceptions, including ArgumentParseErrors from bad user input,
        are raised.
        """
        if argv is None:
            argv = sys.argv[1:]
        argv = list(argv)
        try:
            prs_res = self.parser.parse(argv)
            bound_args = await bind_args(self.args, prs_res.posargs)
            ctx = Context(self, argv)

            if prs_res.subcmd:
                subcmd = self.subcommands[prs_res.subcmd]
                log.debug('%s: dispatching to subcommand %r', self.name, prs_res.subcmd)
                try:
                    return await subcmd.exec(prs_res.subcmd_argv)
                except ArgumentParseError as ape:
                    ape.subcmds = (prs_res.subcmd,) + tuple(getattr(ape, 'subcmds', ()))
                    raise
            elif self.func is None:
                # subcommands exist, but none was chosen
                if not self.help_handler:
                    raise InvalidSubcommand('expected subcommand, choose from: %s'
                                            % ', '.join(self.subcommands))
                raise HelpSignal(self)

            kwargs = {'args': bound_args,
                      'flags': prs_res.flags,
                      'ctx': ctx,
                      'command': self}
            log.debug('%s: calling handler %r', self.name, self.func)
            return await resolve(inject(self.func, kwargs))
        except ControlSignal as cs:
            print(cs.render())
            return None

    def run(self, argv=None, print_error=None):
        """The synchronous, process-level entry point. Runs
        :meth:`exec` to completion in a new event loop, and returns its
        result.

        If there is a parse error due to invalid user input, an error
        is printed and a CommandLineError is raised. If not caught, a
        CommandLineError will exit the process with status code 1.

        Args:
           argv (list): A sequence of strings representing the
              command-line arguments, not including the program
              name. Defaults to ``sys.argv[1:]``.
           print_error (callable): The function that formats/prints
               error messages before program exit on CLI errors.
        """
        print_error = _get_print_error(print_error)
        try:
            return asyncio.run(self.exec(argv))
        except ArgumentParseError as ape:
            handle_error(ape, print_error=print_error, name=self.name)

    def __repr__(self):
        cn = self.__class__.__name__
        if self.subcommands:
            return '<%s name=%r subcommands=%r>' % (cn, self.name, list(self.subcommands))
        return '<%s name=%r func=%r>' % (cn, self.name, self.func)


def _iter_subcommands(subcommands):
    if not subcommands:
        return []
    if isinstance(subcommands, Mapping):
        return list(subcommands.items())
    ret = []
    for subcmd in subcommands:
        ret.append((getattr(subcmd, 'name', None), subcmd))
    return ret


def _get_print_error(print_error):
    if print_error is None or print_error is True:
        return default_print_error
    elif print_error and not callable(print_error):
        raise TypeError('expected callable for print_error, not %r'
                        % print_error)
    return print_error


def handle_error(exc, print_error=None, name=None):
    """The top-level handler for errors escaping a Command. Errors
    caused by user input are printed and converted to a
    CommandLineError, which exits with status code 1 if not
    caught. Anything else, including DefinitionErrors, is re-raised
    unchanged.
    """
    if isinstance(exc, CommandLineError) or not isinstance(exc, ClauseException):
        raise exc
    if isinstance(exc, DefinitionError):
        raise exc
    print_error = _get_print_error(print_error)

    msg = 'error'
    if name:
        msg += ': ' + name
    if getattr(exc, 'subcmds', None):
        msg += ' ' + ' '.join(exc.subcmds)
    try:
        e_msg = exc.args[0]
    except (AttributeError, IndexError):
        e_msg = ''
    if e_msg:
        msg += ': ' + e_msg
    if print_error:
        print_error(msg)
    raise CommandLineError(msg) from exc


def command(func=None, **kwargs):
    "Shorthand for ``Command(func, **kwargs)``."
    return Command(func, **kwargs)
