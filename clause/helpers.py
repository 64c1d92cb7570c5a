
import os
import sys
import array
import textwrap

from clause.parser import Flag
from clause.utils import format_flag_label, format_args_label


def _get_termios_winsize():
    # TLPI, 62.9 (p. 1319)
    import fcntl
    import termios

    winsize = array.array('H', [0, 0, 0, 0])

    assert not fcntl.ioctl(sys.stdout, termios.TIOCGWINSZ, winsize)

    ws_row, ws_col, _, _ = winsize

    return ws_row, ws_col


def _get_environ_winsize():
    # the argparse approach. ROWS/COLUMNS are special shell variables.
    try:
        rows, columns = int(os.environ['ROWS']), int(os.environ['COLUMNS'])
    except (KeyError, ValueError):
        rows, columns = None, None
    return rows, columns


def get_winsize():
    rows, cols = None, None
    try:
        rows, cols = _get_termios_winsize()
    except Exception:
        pass
    if not cols:
        rows, cols = _get_environ_winsize()
    return rows, cols


def _wrap_pair(indent, label, sep, doc, doc_start, max_doc_width):
    ret = []
    append = ret.append
    lhs = indent + label

    if not doc:
        append(lhs)
        return ret

    len_sep = len(sep)
    wrapped_doc = textwrap.wrap(doc, max_doc_width)
    if len(lhs) <= doc_start:
        lhs_f = lhs.ljust(doc_start - len(sep)) + sep
        append(lhs_f + wrapped_doc[0])
    else:
        append(lhs)
        append((' ' * (doc_start - len_sep)) + sep + wrapped_doc[0])

    for line in wrapped_doc[1:]:
        append(' ' * doc_start + line)

    return ret


DEFAULT_HELP_FLAG = Flag('--help', parse_as=True, char='-h', doc='show this help message and exit')


class HelpHandler(object):
    """Renders help text for a Command, and provides the flag which
    requests it. Every key in *default_context* can be overridden
    with a keyword argument, e.g., ``HelpHandler(width=100)``.

    Args:
       flag (Flag): The flag which triggers help output. Defaults to
          ``--help / -h``.
    """
    default_context = {
        'usage_label': 'Usage:',
        'subcmd_section_heading': 'Subcommands: ',
        'args_section_heading': 'Arguments: ',
        'flags_section_heading': 'Flags: ',
        'section_break': '\n',
        'group_break': '',
        'subcmd_example': 'subcommand',
        'width': None,
        'max_width': 120,
        'min_doc_width': 50,
        'doc_separator': '   ',  # '   + ' is pretty classy as bullet points, too
        'section_indent': '  ',
        'pre_doc': '',
        'post_doc': '\n',
    }

    def __init__(self, flag=DEFAULT_HELP_FLAG, **kwargs):
        ctx = {}
        for key, val in self.default_context.items():
            ctx[key] = kwargs.pop(key, val)
        if kwargs:
            raise TypeError('unexpected keyword arguments: %r' % list(kwargs.keys()))
        if not isinstance(flag, Flag):
            raise TypeError('expected Flag instance for help flag, not: %r' % (flag,))
        self.ctx = ctx
        self.flag = flag

    def _get_layout(self, labels):
        ctx = self.ctx
        return get_layout(labels=labels,
                          indent=ctx['section_indent'],
                          sep=ctx['doc_separator'],
                          width=ctx['width'],
                          max_width=ctx['max_width'],
                          min_doc_width=ctx['min_doc_width'])

    def _get_section(self, heading, label_doc_pairs):
        ctx = self.ctx
        ret = [heading, ctx['group_break']]
        layout = self._get_layout(labels=[label for label, _ in label_doc_pairs])
        for label, doc in label_doc_pairs:
            ret.extend(_wrap_pair(indent=ctx['section_indent'],
                                  label=label,
                                  sep=ctx['doc_separator'],
                                  doc=doc,
                                  doc_start=layout['doc_start'],
                                  max_doc_width=layout['doc_width']))
        ret.append(ctx['section_break'])
        return ret

    def get_help_text(self, command, program_name=None):
        ctx = self.ctx

        ret = [self.get_usage_line(command, program_name=program_name)]
        append = ret.append
        append(ctx['group_break'])

        if command.doc:
            append(command.doc)
            append(ctx['section_break'])

        if command.subcommands:
            pairs = [(name, subcmd.doc) for name, subcmd in command.subcommands.items()]
            ret.extend(self._get_section(ctx['subcmd_section_heading'], pairs))

        shown_args = [a for a in command.args if not a.hidden]
        if shown_args:
            pairs = [(a.to_string(usage=True), a.description) for a in shown_args]
            ret.extend(self._get_section(ctx['args_section_heading'], pairs))

        shown_flags = command.get_flags(with_hidden=False)
        if shown_flags:
            pairs = [(format_flag_label(f), f.display.full_doc) for f in shown_flags]
            ret.extend(self._get_section(ctx['flags_section_heading'], pairs))

        return ctx['pre_doc'] + '\n'.join(ret).rstrip('\n') + ctx['post_doc']

    def get_usage_line(self, command, program_name=None):
        ctx = self.ctx
        parts = [ctx['usage_label']] if ctx['usage_label'] else []
        append = parts.append

        append(program_name or command.name)

        args_label = format_args_label(command.args)
        if command.subcommands:
            # the command's own arguments come before the subcommand name
            if args_label:
                append(args_label)
            append(ctx['subcmd_example'])

        if command.get_flags(with_hidden=False):
            append('[FLAGS]')

        if args_label and not command.subcommands:
            append(args_label)

        return ' '.join(parts)


def get_layout(labels, indent, sep, width=None, max_width=120, min_doc_width=40):
    if width is None:
        _, width = get_winsize()
        if width is None:
            width = 80
        width = min(width, max_width)
        width -= 2

    len_sep = len(sep)
    len_indent = len(indent)

    max_label_width = 0
    max_doc_width = min_doc_width
    doc_start = width - min_doc_width
    for label in labels:
        cur_len = len(label)
        if cur_len < max_label_width:
            continue
        max_label_width = cur_len
        if (len_indent + cur_len + len_sep + min_doc_width) < width:
            max_doc_width = width - max_label_width - len_sep - len_indent
            doc_start = len_indent + cur_len + len_sep

    return {'width': width,
            'label_width': max_label_width,
            'doc_width': max_doc_width,
            'doc_start': doc_start}
