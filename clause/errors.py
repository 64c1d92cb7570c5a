
from boltons.iterutils import unique


class ClauseException(Exception):
    """The basest base exception clause has. Rarely directly
    instantiated if ever, but useful for catching.
    """
    pass


class DefinitionError(ClauseException, ValueError):
    """Raised when arguments, flags, or commands are declared in a shape
    that could never be invoked, e.g., a required argument after an
    optional one, or a Command with both a handler and
    subcommands. Always raised at construction time.
    """
    pass


class ArgumentParseError(ClauseException):
    """A base exception used for all errors raised during argument
    parsing and binding, i.e., errors caused by the user's input.

    Many subtypes have a ".from_parse()" classmethod that creates an
    exception message from the values available during the parse
    process.
    """
    pass


class InvalidChoice(ArgumentParseError):
    """Raised when a positional argument is not one of the choices
    configured on its Arg.
    """
    def __init__(self, msg, arg=None, token=None, choices=()):
        super(InvalidChoice, self).__init__(msg)
        self.arg = arg
        self.token = token
        self.choices = list(choices)

    @classmethod
    def from_parse(cls, arg, token, choices):
        msg = ('expected "%s" to be one of:\n%s'
               % (token, '\n'.join([str(c) for c in choices])))
        return cls(msg, arg=arg, token=token, choices=choices)


class MissingRequiredArguments(ArgumentParseError):
    """Raised when one or more required positional arguments are not
    passed, and have no default to fall back on. The unsatisfied Args
    are available as the *missing_args* attribute.
    """
    def __init__(self, msg, args=()):
        super(MissingRequiredArguments, self).__init__(msg)
        self.missing_args = list(args)

    @classmethod
    def from_parse(cls, args):
        label = 'argument' if len(args) == 1 else 'arguments'
        msg = ('missing required %s: %s'
               % (label, ' '.join([a.to_string(usage=True) for a in args])))
        return cls(msg, args=args)


class UnexpectedArguments(ArgumentParseError):
    """Raised when more positional arguments are passed than the
    command's argument list accepts. The excess values are available
    as the *unexpected_args* attribute.
    """
    def __init__(self, msg, args=()):
        super(UnexpectedArguments, self).__init__(msg)
        self.unexpected_args = list(args)

    @classmethod
    def from_parse(cls, args):
        label = 'argument' if len(args) == 1 else 'arguments'
        msg = ('unexpected %s: %s'
               % (label, ', '.join([repr(a) for a in args])))
        return cls(msg, args=args)


class InvalidSubcommand(ArgumentParseError):
    """
    Raised when an unrecognized subcommand is passed.
    """
    @classmethod
    def from_parse(cls, subcmd_names, subcmd_name):
        msg = ('unknown subcommand "%s", choose from: %s'
               % (subcmd_name, ', '.join(unique(subcmd_names))))
        return cls(msg)


class UnknownFlag(ArgumentParseError):
    """
    Raised when an unrecognized flag is passed.
    """
    @classmethod
    def from_parse(cls, flag_labels, flag_name):
        msg = ('unknown flag "%s", choose from: %s'
               % (flag_name, ', '.join(unique(flag_labels))))
        return cls(msg)


FRIENDLY_TYPE_NAMES = {int: 'integer',
                       float: 'decimal'}


class InvalidFlagArgument(ArgumentParseError):
    """Raised when the argument passed to a flag (the value directly
    after it in argv) fails to parse. Tries to automatically detect
    when an argument is missing.
    """
    @classmethod
    def from_parse(cls, flag, arg, exc=None):
        if arg is None:
            return cls('expected argument for flag %s' % flag.name)

        val_parser = flag.parse_as
        vp_label = getattr(val_parser, 'display_name', FRIENDLY_TYPE_NAMES.get(val_parser))
        if vp_label is None:
            vp_label = repr(val_parser)
            tmpl = 'flag %s converter (%r) failed to parse value: %r'
        else:
            tmpl = 'flag %s expected a valid %s value, not %r'
        msg = tmpl % (flag.name, vp_label, arg)

        if exc:
            msg += ' (got error: %r)' % exc
        if arg.startswith('-'):
            msg += '. (Did you forget to pass an argument?)'

        return cls(msg)


class MissingRequiredFlags(ArgumentParseError):
    """
    Raised when a required flag is not passed. See Flag for more info.
    """
    @classmethod
    def from_parse(cls, missing_flag_names):
        msg = ('missing required arguments for flags: %s'
               % ', '.join(missing_flag_names))
        return cls(msg)


class DuplicateFlag(ArgumentParseError):
    """Raised when a flag is passed multiple times, and the flag's
    "multi" setting is set to 'error'.
    """
    @classmethod
    def from_parse(cls, flag, arg_val_list):
        avl_text = ', '.join([repr(v) for v in arg_val_list])
        if callable(flag.parse_as):
            msg = ('more than one value was passed for flag "%s": %s'
                   % (flag.name, avl_text))
        else:
            msg = ('flag "%s" was used multiple times, but can be used only once' % flag.name)
        return cls(msg)


class ControlSignal(ClauseException):
    """Not an error so much as a request from the user, raised during
    flag parsing, caught by Command.exec(), and rendered to stdout.
    """
    def render(self):
        raise NotImplementedError()


class VersionSignal(ControlSignal):
    "Raised when the --version flag is passed."
    def __init__(self, name, version):
        super(VersionSignal, self).__init__('version requested')
        self.name = name
        self.version = version

    def render(self):
        return '%s version %s' % (self.name, self.version)


class HelpSignal(ControlSignal):
    "Raised when the --help flag is passed."
    def __init__(self, command):
        super(HelpSignal, self).__init__('help requested')
        self.command = command

    def render(self):
        return self.command.help_handler.get_help_text(self.command)


class CommandLineError(ClauseException, SystemExit):
    def __init__(self, msg, code=1):
        SystemExit.__init__(self, msg)
        self.code = code
