
import re
import inspect
import keyword
from functools import partial

from boltons.strutils import camel2under
from boltons.iterutils import unique
from boltons.typeutils import make_sentinel

from clause.errors import DefinitionError


ERROR = make_sentinel('ERROR')  # used for Flag(missing=ERROR)

# keep it just to subset of valid ASCII python identifiers for now
VALID_FLAG_RE = re.compile(r"^[A-z][-_A-z0-9]*\Z")


def process_command_name(name):
    """Validate and canonicalize a Command's name, generally on
    construction or at subcommand addition. Like
    ``flag_to_identifier()``, only letters, numbers, '-', and/or
    '_'. Must begin with a letter, and no trailing underscores or
    dashes. Names are lower-cased, and dashes become underscores,
    matching how subcommand names are read from argv.

    Python keywords are allowed, as subcommands are never used as
    attributes or variables in injection.

    """

    if not name or not isinstance(name, str):
        raise DefinitionError('expected non-zero length string for subcommand name, not: %r' % (name,))

    if name.endswith('-') or name.endswith('_'):
        raise DefinitionError('expected subcommand name without trailing dashes'
                              ' or underscores, not: %r' % name)

    name_match = VALID_FLAG_RE.match(name)
    if not name_match:
        raise DefinitionError('valid subcommand name must begin with a letter, and'
                              ' consist only of letters, digits, underscores, and'
                              ' dashes, not: %r' % name)

    return arg_to_subcmd(name)


def normalize_flag_name(flag):
    ret = flag.lstrip('-')
    if (len(flag) - len(ret)) > 1:
        # only single-character flags are considered case-sensitive (like an initial)
        ret = ret.lower()
    ret = ret.replace('-', '_')
    return ret


def arg_to_subcmd(arg):
    return arg.lower().replace('-', '_')


def flag_to_identifier(flag):
    """Validate and canonicalize a flag name to a valid Python identifier
    (variable name).

    Valid input strings include only letters, numbers, '-', and/or
    '_'. Only single/double leading dash allowed (-/--). No trailing
    dashes or underscores. Must not be a Python keyword.

    Input case doesn't matter, output case will always be lower.
    """
    orig_flag = flag
    if not flag or not isinstance(flag, str):
        raise DefinitionError('expected non-zero length string for flag, not: %r' % (flag,))

    if flag.endswith('-') or flag.endswith('_'):
        raise DefinitionError('expected flag without trailing dashes'
                              ' or underscores, not: %r' % orig_flag)

    if flag[:2] == '--':
        flag = flag[2:]

    flag_match = VALID_FLAG_RE.match(flag)
    if not flag_match:
        raise DefinitionError('valid flag names must begin with a letter, optionally'
                              ' prefixed by two dashes, and consist only of letters,'
                              ' digits, underscores, and dashes, not: %r' % orig_flag)

    flag_name = normalize_flag_name(flag)

    if keyword.iskeyword(flag_name):
        raise DefinitionError('valid flag names must not be Python keywords: %r'
                              % orig_flag)

    return flag_name


def identifier_to_flag(identifier):
    """
    Turn an identifier back into its flag format (e.g., "Flag" -> --flag).
    """
    if identifier.startswith('-'):
        raise ValueError('expected identifier, not flag name: %r' % identifier)
    ret = identifier.lower().replace('_', '-')
    return '--' + ret


def format_flag_label(flag):
    "The default flag label formatter, used in help and error formatting"
    if flag.display.label is not None:
        return flag.display.label
    parts = [identifier_to_flag(flag.name)]
    if flag.char:
        parts.append('-' + flag.char)
    ret = ' / '.join(parts)
    if flag.display.value_name:
        ret += ' ' + flag.display.value_name
    return ret


def format_flag_post_doc(flag):
    "The default flag post-doc formatter, used in help formatting"
    if flag.display.post_doc is not None:
        return flag.display.post_doc
    if not flag.display.value_name:
        return ''
    if flag.missing is ERROR:
        return '(required)'
    if flag.missing is None or repr(flag.missing) == object.__repr__(flag.missing):
        # avoid displaying unhelpful defaults
        return '(optional)'
    return '(defaults to %r)' % (flag.missing,)


def format_args_label(args):
    "The positional argument label used in usage lines"
    return ' '.join([a for a in [arg.to_string(usage=True) for arg in args] if a])


def get_type_desc(parse_as):
    "Kind of a hacky way to improve message readability around argument types"
    if not callable(parse_as):
        raise TypeError('expected parse_as to be callable, not %r' % parse_as)
    friendly_name = {int: 'integer', float: 'decimal'}.get(parse_as)
    if friendly_name:
        return 'as', friendly_name
    try:
        # return the type name if it looks like a type
        return 'as', parse_as.__name__
    except AttributeError:
        pass
    # if all else fails
    return 'with', repr(parse_as)


def unwrap_text(text):
    all_grafs = []
    cur_graf = []
    for line in text.splitlines():
        line = line.strip()
        if line:
            cur_graf.append(line)
        else:
            all_grafs.append(' '.join(cur_graf))
            cur_graf = []
    if cur_graf:
        all_grafs.append(' '.join(cur_graf))
    return '\n'.join(all_grafs)


def get_default_name(func):
    if func is None:
        return 'command'
    if isinstance(func, partial):
        func = func.func  # just one level of partial for now
    name = getattr(func, '__name__', None)  # most functions hit this
    if name is None:
        name = camel2under(func.__class__.__name__).lower()  # callable instances, etc.
    name = name.strip('_')
    if not VALID_FLAG_RE.match(name):
        return 'command'  # lambdas and the like
    return name


def docstring_to_doc(func):
    if func is None:
        return ''
    doc = getattr(func, '__doc__', None)
    if not doc:
        return ''

    unwrapped = unwrap_text(doc)
    try:
        ret = [g for g in unwrapped.splitlines() if g][0]
    except IndexError:
        ret = ''

    return ret


def get_arg_names(func):
    """Returns a tuple of (names, takes_kwargs): the names of the
    parameters *func* accepts by keyword, and whether it takes
    ``**kwargs``.
    """
    sig = inspect.signature(func)
    names, takes_kwargs = [], False
    for param in sig.parameters.values():
        if param.kind is param.VAR_KEYWORD:
            takes_kwargs = True
        elif param.kind in (param.POSITIONAL_OR_KEYWORD, param.KEYWORD_ONLY):
            names.append(param.name)
    return names, takes_kwargs


def inject(func, kwargs):
    """Call *func* with the subset of *kwargs* it asks for by name. A
    function accepting ``**kwargs`` gets all of them.
    """
    arg_names, takes_kwargs = get_arg_names(func)
    if takes_kwargs:
        return func(**kwargs)
    return func(**dict([(k, v) for k, v in kwargs.items() if k in arg_names]))


async def resolve(value):
    "Await *value* if it is awaitable, otherwise return it as-is."
    if inspect.isawaitable(value):
        return await value
    return value


def format_nonexp_repr(obj, req_names=None, opt_names=None, opt_key=None):
    """Format a non-expression-style repr

    Some object reprs look like object instantiation, e.g., App(r=[], mw=[]).

    This makes sense for smaller, lower-level objects whose state
    roundtrips. But a lot of objects contain values that don't
    roundtrip, like types and functions.

    For those objects, there is the non-expression style repr, which
    mimic's Python's default style to make a repr like this:

    <Arg name='src' parse=<class 'str'>>
    """
    cn = obj.__class__.__name__
    req_names = req_names or []
    opt_names = opt_names or []
    all_names = unique(req_names + opt_names)

    if opt_key is None:
        opt_key = lambda v: v is None
    assert callable(opt_key)

    items = [(name, getattr(obj, name, None)) for name in all_names]
    labels = ['%s=%r' % (name, val) for name, val in items
              if not (name in opt_names and opt_key(val))]
    if not labels:
        labels = ['id=%s' % id(obj)]
    ret = '<%s %s>' % (cn, ' '.join(labels))
    return ret
