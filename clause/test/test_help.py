
import asyncio

import pytest

from clause import (Command,
                    Flag,
                    HelpHandler,
                    arg,
                    int_arg)


def get_subcmd_cmd():
    subsubcmd = Command(_subsubcmd, name='subsubcmd',
                        args=[int_arg('count', 'how many times'),
                              arg.optional('posarg_item'),
                              arg.optional('secret', hidden=True)])
    subcmd = Command(name='subcmd', doc='the subcmd help', subcommands=[subsubcmd])
    return Command(name='halp', doc='halp help', subcommands=[subcmd])


def _subsubcmd():
    "the subsubcmd help"
    pass


@pytest.fixture
def subcmd_cmd():
    return get_subcmd_cmd()


@pytest.mark.parametrize(
    "argv, contains, exit_code",
    [(['-h'], ['Usage', 'halp help', 'subcmd'], 0),  # basic, explicit help
     (['--help'], ['Usage', 'halp help', 'subcmd'], 0),
     ([], ['Usage', 'halp help', 'subcmd'], 0),
     # explicit help on subcommands
     (['subcmd', '-h'], ['Usage', 'the subcmd help', 'subsubcmd'], 0),
     (['subcmd', 'subsubcmd', '-h'], ['Usage', 'the subsubcmd help', 'POSARG_ITEM'], 0),
     # help wins over missing arguments
     (['subcmd', 'subsubcmd', '--help'], ['<COUNT> [<POSARG_ITEM>]'], 0),
     # invalid subcommands
     (['nonexistent-subcmd'], ['error: halp', 'subcmd'], 1),
     (['subcmd', 'nonexistent-subsubcmd'], ['error: halp subcmd', 'subsubcmd'], 1)
     ]
)
def test_help(subcmd_cmd, argv, contains, exit_code, capsys):
    if isinstance(contains, str):
        contains = [contains]

    try:
        subcmd_cmd.run(argv)
    except SystemExit as se:
        if exit_code is not None:
            assert se.code == exit_code

    out, err = capsys.readouterr()
    if exit_code == 0:
        output = out
    else:
        output = err

    for cont in contains:
        assert cont in output

    return


def test_help_text_layout():
    cmd = get_subcmd_cmd().subcommands['subcmd'].subcommands['subsubcmd']
    help_text = cmd.help_handler.get_help_text(cmd)
    lines = help_text.splitlines()

    assert lines[0] == 'Usage: subsubcmd [FLAGS] <COUNT> [<POSARG_ITEM>]'
    assert 'the subsubcmd help' in lines
    assert 'Arguments: ' in lines
    assert 'SECRET' not in help_text
    assert any(['how many times' in line for line in lines])
    assert any([line.strip().startswith('--help / -h') for line in lines])
    assert help_text.endswith('\n')


def test_help_hidden_flags():
    cmd = Command(lambda: None, name='tool',
                  flags=[Flag('--debug', parse_as=True, display=False),
                         Flag('--level', parse_as=int, doc='log level')])
    help_text = cmd.help_handler.get_help_text(cmd)
    assert '--debug' not in help_text
    assert '--level LEVEL' in help_text
    assert 'log level (optional)' in help_text


def test_help_handler_options(capsys):
    handler = HelpHandler(flag=Flag('--halp', parse_as=True), usage_label='USAGE:', width=60)
    cmd = Command(lambda: None, name='tool', help=handler)

    assert asyncio.run(cmd.exec(['--halp'])) is None
    out, _ = capsys.readouterr()
    assert out.startswith('USAGE: tool [FLAGS]')

    with pytest.raises(TypeError):
        HelpHandler(widht=60)

    with pytest.raises(TypeError):
        HelpHandler(flag='--halp')

    with pytest.raises(TypeError):
        Command(lambda: None, help='yes please')


def test_no_help():
    cmd = Command(lambda: None, name='tool', help=False)
    assert cmd.help_handler is None
    assert cmd.get_flags() == []
