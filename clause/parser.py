
from collections import OrderedDict

from boltons.iterutils import unique
from boltons.dictutils import OrderedMultiDict as OMD

from clause.errors import (DefinitionError,
                           UnknownFlag,
                           DuplicateFlag,
                           InvalidSubcommand,
                           InvalidFlagArgument,
                           MissingRequiredFlags)
from clause.utils import (ERROR,
                          arg_to_subcmd,
                          get_type_desc,
                          format_flag_label,
                          flag_to_identifier,
                          normalize_flag_name,
                          format_flag_post_doc,
                          format_nonexp_repr)


def _multi_error(flag, arg_val_list):
    "Raise a DuplicateFlag if more than one value is specified for an argument"
    if len(arg_val_list) > 1:
        raise DuplicateFlag.from_parse(flag, arg_val_list)
    return arg_val_list[0]


def _multi_extend(flag, arg_val_list):
    "Return a list of all arguments specified for a flag"
    return arg_val_list


def _multi_override(flag, arg_val_list):
    "Return only the last argument specified for a flag"
    return arg_val_list[-1]


_MULTI_SHORTCUTS = {'error': _multi_error,
                    False: _multi_error,
                    'extend': _multi_extend,
                    True: _multi_extend,
                    'override': _multi_override}


_VALID_CHARS = 'abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789!*+./?@_'
def _validate_char(char):
    orig_char = char
    if char[0] == '-' and len(char) > 1:
        char = char[1:]
    if len(char) > 1:
        raise DefinitionError('char flags must be exactly one character, optionally'
                              ' prefixed by a dash, not: %r' % orig_char)
    if char not in _VALID_CHARS:
        raise DefinitionError('expected valid flag character (ASCII letters, numbers,'
                              ' or shell-compatible punctuation), not: %r' % orig_char)
    return char


class Flag(object):
    """The Flag object represents all there is to know about a named
    option that can be parsed from argv and passed to a Command's
    handler. It also references a FlagDisplay, used by HelpHandlers
    to control formatting of the flag during --help output.

    Args:
       name (str): A string name for the flag, starting with a letter,
          and consisting of only ASCII letters, numbers, '-', and '_'.
       parse_as: How to interpret the flag. If *parse_as* is a
         callable, it will be called with the argument to the flag,
         the return value of which is stored in the parsed flags. If
         *parse_as* is not a callable, then the flag takes no
         argument, and the presence of the flag will produce this
         value. Defaults to ``str``, meaning a default flag will take
         one string argument.
       missing: How to interpret the absence of the flag. Can be any
         value, which will be in the parsed flags when the flag is not
         present. Can also be the special value ``clause.ERROR``,
         which will make the flag required. Defaults to ``None``.
       multi (str): How to handle multiple instances of the same
         flag. Pass 'override' to accept the last flag's value. Pass
         'extend' to collect all values into a list. Pass 'error' to
         get the default behavior, which raises a DuplicateFlag
         exception. *multi* can also take a callable, which accepts
         the flag and a list of its values and returns the value to
         be stored.
       char (str): A single-character short form for the flag.
       doc (str): A summary of the flag's behavior, used in automatic
         help generation.
       display: Controls how the flag is displayed in automatic help
         generation. Pass False to hide the flag, pass a string to
         customize the label, and pass a FlagDisplay instance for full
         customizability.
    """
    def __init__(self, name, parse_as=str, missing=None, multi='error',
                 char=None, doc=None, display=None):
        self.name = flag_to_identifier(name)
        self.doc = doc
        self.parse_as = parse_as
        self.missing = missing
        if missing is ERROR and not callable(parse_as):
            raise DefinitionError('cannot make an argument-less flag required.'
                                  ' expected non-ERROR for missing, or a callable'
                                  ' for parse_as, not: %r' % (parse_as,))
        self.char = _validate_char(char) if char else None

        if callable(multi):
            self.multi = multi
        elif multi in _MULTI_SHORTCUTS:
            self.multi = _MULTI_SHORTCUTS[multi]
        else:
            raise DefinitionError('multi expected callable, bool, or one of %r, not: %r'
                                  % (list(_MULTI_SHORTCUTS.keys()), multi))

        self.set_display(display)

    def set_display(self, display):
        """Controls how the flag is displayed in automatic help
        generation. Pass False to hide the flag, pass a string to
        customize the label, and pass a FlagDisplay instance for full
        customizability.
        """
        if display is None:
            display = {}
        elif isinstance(display, bool):
            display = {'hidden': not display}
        elif isinstance(display, str):
            display = {'label': display}
        if isinstance(display, dict):
            display = FlagDisplay(self, **display)
        if not isinstance(display, FlagDisplay):
            raise TypeError('expected bool, text name, dict of display'
                            ' options, or FlagDisplay instance, not: %r'
                            % (display,))
        self.display = display

    def __repr__(self):
        return format_nonexp_repr(self, ['name', 'parse_as'], ['missing', 'char'])


class FlagDisplay(object):
    """Provides individual overrides for most of a given flag's display
    settings, as used by HelpHandler. Pass an instance of this to
    Flag.set_display() for full control of help output.

    Args:
       flag (Flag): The Flag instance to which this FlagDisplay applies.
       label (str): The formatted version of the string used to
         represent the flag in help and error messages. Defaults to
         None, which allows the label to be autogenerated.
       post_doc (str): An addendum string added to the Flag's own
         doc. Defaults to a parenthetical describing whether the flag
         takes an argument, and whether the argument is required.
       full_doc (str): A string of the whole flag's doc, overriding
         the doc + post_doc default.
       value_name (str): For flags which take an argument, the string
         to use as the placeholder of the flag argument in help and
         error labels.
       hidden (bool): Pass True to hide this flag in general help and
         error messages. Defaults to False.
    """
    def __init__(self, flag, **kw):
        self.flag = flag
        self._label = kw.pop('label', None)

        self.doc = flag.doc
        if self.doc is None and callable(flag.parse_as):
            _prep, desc = get_type_desc(flag.parse_as)
            self.doc = 'Parsed with ' + desc
            if _prep == 'as':
                self.doc = desc

        self.post_doc = kw.pop('post_doc', None)
        self._full_doc = kw.pop('full_doc', None)

        self.value_name = ''
        if callable(flag.parse_as):
            self.value_name = kw.pop('value_name', None) or self.flag.name.upper()

        self.hidden = kw.pop('hidden', False)  # bool

        if kw:
            raise TypeError('unexpected keyword arguments: %r' % sorted(kw.keys()))
        return

    @property
    def label(self):
        return self._label

    @label.setter
    def label(self, val):
        self._label = val
        # stay hidden if set to hidden, else hide if empty
        self.hidden = self.hidden or (not val)

    @property
    def full_doc(self):
        if self._full_doc is not None:
            return self._full_doc
        return ' '.join([p for p in (self.doc, format_flag_post_doc(self.flag)) if p])


class FlagParseResult(object):
    """The result of :meth:`FlagParser.parse`, instances of this type
    store everything the flag collaborator separates out of an argv.

    Args:
       posargs (list): The positional argument tokens, as strings,
          still to be bound by the Command.
       flags (OrderedDict): Mapping of canonical flag names to parsed values.
       subcmd (str): Name of the selected subcommand, if any.
       subcmd_argv (list): The tokens following the subcommand name,
          left unparsed for the subcommand.
       argv (tuple): The sequence of strings parsed.
    """
    def __init__(self, posargs, flags, subcmd=None, subcmd_argv=(), argv=()):
        self.posargs = list(posargs)
        self.flags = OrderedDict(flags)
        self.subcmd = subcmd
        self.subcmd_argv = list(subcmd_argv)
        self.argv = tuple(argv)

    def __repr__(self):
        return format_nonexp_repr(self, ['posargs', 'flags'], ['subcmd'])


class FlagParser(object):
    """Separates flags from positional arguments, and picks out the
    subcommand name, if the command has subcommands.

    Args:
       flags (list): Flag instances accepted.
       subcmd_names (list): Canonical names of the available
          subcommands. When non-empty, the first positional token
          after the command's own positional arguments selects the
          subcommand, and all tokens after it are left for the
          subcommand to parse.
       posarg_count (int): How many positional tokens the command
          itself takes ahead of the subcommand name.
       signal_map (dict): Maps flag names to zero-argument callables
          returning a ControlSignal, raised as soon as the flag is
          seen. Used for --help and --version.

    Conventions: ``--flag value``, ``--flag=value``, and ``-f value``
    all work. ``--`` ends flag parsing, and a lone ``-`` is a
    positional argument (conventionally, stdin).
    """
    def __init__(self, flags=(), subcmd_names=(), posarg_count=0, signal_map=None):
        self.flag_map = OrderedDict()
        for flag in flags:
            self.add(flag)
        self.subcmd_names = list(subcmd_names)
        self.posarg_count = posarg_count
        self.signal_map = dict(signal_map or {})

    def add(self, flag):
        if not isinstance(flag, Flag):
            raise DefinitionError('expected Flag instance, not: %r' % (flag,))
        if flag.name in self.flag_map:
            raise DefinitionError('duplicate definition for flag name: %r' % flag.name)
        if flag.char and flag.char in self.flag_map:
            raise DefinitionError('conflicting short form for flag %r: %r'
                                  % (flag.name, flag.char))
        self.flag_map[flag.name] = flag
        if flag.char:
            self.flag_map[flag.char] = flag
        return

    def get_flags(self, with_hidden=True):
        return unique([f for f in self.flag_map.values()
                       if with_hidden or not f.display.hidden])

    def parse(self, argv):
        argv = list(argv)
        args = argv
        posargs = []
        subcmd, subcmd_argv = None, []
        flag_value_map = OMD()

        while args:
            arg = args[0]
            if arg == '--':
                posargs.extend(args[1:])
                break
            if arg.startswith('-') and arg != '-':
                flag, value, args = self._parse_single_flag(args)
                if flag.name in self.signal_map:
                    raise self.signal_map[flag.name]()
                flag_value_map.add(flag.name, value)
                continue
            if self.subcmd_names and len(posargs) >= self.posarg_count:
                subcmd = arg_to_subcmd(arg)
                if subcmd not in self.subcmd_names:
                    raise InvalidSubcommand.from_parse(self.subcmd_names, arg)
                subcmd_argv = args[1:]
                break
            posargs.append(arg)
            args = args[1:]

        flags = self._resolve_flags(flag_value_map)
        return FlagParseResult(posargs, flags, subcmd=subcmd,
                               subcmd_argv=subcmd_argv, argv=argv)

    def _parse_single_flag(self, args):
        arg, arg_text = args[0], None
        if arg.startswith('--') and '=' in arg:
            arg, arg_text = arg.split('=', 1)
        flag = self.flag_map.get(normalize_flag_name(arg))
        if flag is None:
            labels = [format_flag_label(f) for f in self.get_flags(with_hidden=False)]
            raise UnknownFlag.from_parse(labels, arg)

        flag_conv = flag.parse_as
        if not callable(flag_conv):
            if arg_text is not None:
                raise InvalidFlagArgument('flag %s does not take an argument, got: %r'
                                          % (flag.name, arg_text))
            # e.g., True is effectively store_true, False is effectively store_false
            return flag, flag_conv, args[1:]

        if arg_text is None:
            try:
                arg_text = args[1]
            except IndexError:
                raise InvalidFlagArgument.from_parse(flag, arg=None)
            rest = args[2:]
        else:
            rest = args[1:]
        try:
            arg_val = flag_conv(arg_text)
        except Exception as e:
            raise InvalidFlagArgument.from_parse(flag, arg_text, exc=e)

        return flag, arg_val, rest

    def _resolve_flags(self, parsed_flag_map):
        ret = OrderedDict()
        pfm = parsed_flag_map

        # resolve dupes, check requireds, and set defaults
        missing_flags = []
        for flag in self.get_flags():
            if flag.name in pfm:
                ret[flag.name] = flag.multi(flag, pfm.getlist(flag.name))
            elif flag.name in self.signal_map:
                continue
            elif flag.missing is ERROR:
                missing_flags.append(flag.name)
            else:
                ret[flag.name] = flag.missing
        if missing_flags:
            raise MissingRequiredFlags.from_parse(missing_flags)
        return ret
