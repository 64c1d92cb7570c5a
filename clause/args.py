"""Positional argument definitions, and the machinery which validates
and binds them.

An argument list is an ordered list of :class:`Arg` objects, usually
built with the :data:`arg` builder::

  args = [arg('src', 'file to copy'),
          arg.optional('dest', default='.'),
          arg.rest('extra')]

Order matters: zero or more required Args, followed by zero or more
optional Args, followed by at most one rest Arg. Lists breaking this
rule raise a :exc:`~clause.errors.DefinitionError` as soon as they're
passed to a Command.
"""

import copy
import logging

from boltons.typeutils import make_sentinel

from clause.errors import (DefinitionError,
                           InvalidChoice,
                           MissingRequiredArguments,
                           UnexpectedArguments)
from clause.utils import resolve, format_nonexp_repr


log = logging.getLogger(__name__)

MISSING = make_sentinel('MISSING')  # marks a bound slot with no value

UNKNOWN_ARG_LABEL = 'UNKNOWN ARGUMENT'

_ARG_OPTIONS = ('description', 'parse', 'choices', 'default', 'hidden',
                'required', 'rest')


def _const_supplier(value):
    async def get_default():
        return copy.copy(value)
    return get_default


class Arg(object):
    """A single positional argument slot. Usually created with one of
    the :class:`ArgBuilder` methods, e.g., ``arg.optional('name')``,
    rather than instantiated directly.

    Args:
       name (str): Used in help and error messages, upper-cased.
       description (str): A summary of the argument, used in help.
       required (bool): Whether binding fails when no value is
         passed and no default is available. Defaults to True.
       rest (bool): Pass True to absorb all remaining positional
         arguments. Rest arguments are never required.
       hidden (bool): Pass True to hide the argument in help and
         error messages.
       parse (callable): Converts a single string token to its
         value. May return an awaitable. Defaults to ``str``.
       choices: A list of allowed raw string values, or a callable
         (sync or async) returning one, called at bind time.
       default: A value to use when no token is passed. Callables
         are treated as suppliers and called at bind time. Whatever
         is passed, the stored *default* is always an async
         supplier (or None). Static values are shallow-copied
         on each call.
    """
    def __init__(self, name=None, description=None, required=True, rest=False,
                 hidden=False, parse=str, choices=None, default=None):
        self.id = -1
        self.name = name
        self.description = description
        self.rest = bool(rest)
        self.required = bool(required) and not self.rest
        self.hidden = bool(hidden)
        if not callable(parse):
            raise TypeError('expected callable for parse, not: %r' % (parse,))
        self.parse = parse
        self.choices = choices
        if default is not None and not callable(default):
            default = _const_supplier(default)
        self.default = default

    def to_string(self, usage=False):
        """Display the argument for help or error messages. Pass
        *usage* for the bracketed form used in usage lines.
        """
        if self.hidden:
            return ''
        ret = self.name.upper() if self.name else ''
        if not usage:
            return ret
        ret = '<%s>' % (ret or UNKNOWN_ARG_LABEL)
        if not self.required:
            ret = '[%s]' % ret
        return ret

    def __str__(self):
        return self.to_string(usage=True)

    def __repr__(self):
        return format_nonexp_repr(self, ['name', 'required'],
                                  ['id', 'rest', 'parse', 'choices'],
                                  opt_key=lambda v: not v)


def _get_params(name, description, options):
    # support arg(opts), arg(name, opts), and arg(name, desc, opts)
    if isinstance(name, dict):
        return None, None, dict(name, **options)
    if isinstance(description, dict):
        return name, None, dict(description, **options)
    return name, description, options


class ArgBuilder(object):
    """Creates :class:`Arg` instances. Call it, or one of its
    ``required()``, ``optional()``, or ``rest()`` methods, with any
    combination of a name, a description, and keyword options::

      arg('path')
      arg('path', 'the file to read', parse=os.path.abspath)
      arg.optional(default='.')

    Use ``extend()`` to make a family of builders sharing options,
    e.g., a common *parse* function.
    """
    def __init__(self, **defaults):
        self._check_options(defaults)
        self.defaults = defaults

    @staticmethod
    def _check_options(options):
        unknown = sorted(set(options) - set(_ARG_OPTIONS))
        if unknown:
            raise TypeError('unexpected argument options: %r' % unknown)

    def __call__(self, name=None, description=None, **options):
        name, description, options = _get_params(name, description, options)
        self._check_options(options)
        kw = dict(self.defaults)
        if description is not None:
            kw['description'] = description
        kw.update(options)
        return Arg(name, **kw)

    def required(self, name=None, description=None, **options):
        name, description, options = _get_params(name, description, options)
        options.update(required=True, rest=False)
        return self(name, description, **options)

    def optional(self, name=None, description=None, **options):
        name, description, options = _get_params(name, description, options)
        options.update(required=False, rest=False)
        return self(name, description, **options)

    def rest(self, name=None, description=None, **options):
        name, description, options = _get_params(name, description, options)
        options.update(required=False, rest=True)
        return self(name, description, **options)

    def extend(self, **options):
        "Returns a new builder, with *options* overriding this one's defaults."
        self._check_options(options)
        defaults = dict(self.defaults)
        defaults.update(options)
        return self.__class__(**defaults)

    def __repr__(self):
        cn = self.__class__.__name__
        return '%s(%s)' % (cn, ', '.join(['%s=%r' % (k, v) for k, v
                                          in sorted(self.defaults.items())]))


arg = ArgBuilder(parse=str)
int_arg = arg.extend(parse=int)
float_arg = arg.extend(parse=float)


def _add_ids(defs):
    for i, arg_def in enumerate(defs):
        arg_def.id = i


def validate_arg_defs(defs):
    """Check that *defs* is a list of Args, ordered required, then
    optional, then at most one rest Arg. Raises DefinitionError if
    not.
    """
    state = 'required'
    for arg_def in defs:
        if not isinstance(arg_def, Arg):
            raise DefinitionError('expected Arg instance, not: %r' % (arg_def,))
        if state == 'required':
            if arg_def.rest:
                state = 'rest'
            elif not arg_def.required:
                state = 'optional'
        elif state == 'optional':
            if arg_def.required:
                raise DefinitionError('required arguments may not follow optional arguments')
            if arg_def.rest:
                state = 'rest'
        else:
            raise DefinitionError('rest arguments must be the last ones defined')
    _add_ids(defs)
    return


def get_max_arg_count(defs):
    "The most positional arguments *defs* accepts, None if unbounded."
    if any([arg_def.rest for arg_def in defs]):
        return None
    return len(defs)


class BoundArguments(list):
    """The positional values produced by binding, one per argument slot,
    followed by any values collected by a rest argument. Unfilled
    optional slots hold None.

    Values can also be looked up by the name of their Arg.
    """
    def __init__(self, defs, values):
        super(BoundArguments, self).__init__(values)
        self.defs = list(defs)

    def get(self, name, default=None):
        return self.as_dict().get(name, default)

    def as_dict(self):
        ret = {}
        for arg_def in self.defs:
            if not arg_def.name:
                continue
            if arg_def.rest:
                ret[arg_def.name] = list(self[arg_def.id:])
            elif arg_def.id < len(self):
                ret[arg_def.name] = self[arg_def.id]
        return ret


async def _check_choices(arg_def, token):
    choices = arg_def.choices
    if callable(choices):
        choices = choices()
    choices = await resolve(choices)
    if token not in choices:
        raise InvalidChoice.from_parse(arg_def, token, choices)


async def _parse_token(arg_def, token):
    if arg_def.choices is not None:
        await _check_choices(arg_def, token)
    return await resolve(arg_def.parse(token))


async def bind_args(defs, tokens):
    """Convert the raw string *tokens* to values according to the
    argument list *defs*. Returns a BoundArguments.

    Raises InvalidChoice, MissingRequiredArguments, or
    UnexpectedArguments on bad input. Exceptions raised by an Arg's
    *parse* function propagate unchanged.
    """
    tokens = list(tokens)
    _add_ids(defs)
    max_count = get_max_arg_count(defs)
    rest_def = defs[-1] if defs and defs[-1].rest else None
    slot_defs = defs[:-1] if rest_def is not None else defs
    values = [MISSING] * len(slot_defs)
    rest_values = []

    for arg_def in slot_defs[:len(tokens)]:
        values[arg_def.id] = await _parse_token(arg_def, tokens[arg_def.id])
    if rest_def is not None:
        rest_values = [await _parse_token(rest_def, t)
                       for t in tokens[rest_def.id:]]

    for arg_def in defs[len(tokens):]:
        if arg_def.default is None:
            continue
        value = await resolve(arg_def.default())
        if value is None:
            continue
        if arg_def.rest:
            if isinstance(value, (list, tuple)):
                rest_values = list(value)
            else:
                rest_values = [value]
        else:
            values[arg_def.id] = value

    missing = [a for a in slot_defs if a.required and values[a.id] is MISSING]
    if missing:
        raise MissingRequiredArguments.from_parse(missing)

    if max_count is not None and len(tokens) > max_count:
        raise UnexpectedArguments.from_parse(tokens[max_count:])

    values = [None if v is MISSING else v for v in values] + rest_values
    log.debug('bound %d positional arguments: %r', len(values), values)
    return BoundArguments(defs, values)
