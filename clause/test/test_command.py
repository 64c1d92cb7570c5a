
import os
import sys
import asyncio

import pytest

from clause import (Command,
                    Context,
                    Flag,
                    arg,
                    int_arg,
                    command,
                    handle_error,
                    DefinitionError,
                    InvalidSubcommand,
                    MissingRequiredArguments,
                    UnexpectedArguments,
                    UnknownFlag,
                    CommandLineError)
from clause.testing import TestClient


def run_exec(cmd, argv):
    return asyncio.run(cmd.exec(argv))


def _add(args):
    "add two integers"
    return args[0] + args[1]


def get_calc_cmd():
    add_cmd = Command(_add, name='add', args=[int_arg('a'), int_arg('b')])

    async def mul(args):
        "multiply integers"
        ret = 1
        for num in args:
            ret *= num
        return ret

    mul_cmd = Command(mul, args=[int_arg.rest('nums')])
    return Command(name='calc', doc='a calculator',
                   subcommands={'add': add_cmd, 'mul': mul_cmd})


def test_func_or_subcommands():
    sub = Command(lambda: None, name='sub')

    with pytest.raises(DefinitionError, match='subcommands OR a handler function, but not both'):
        Command(lambda: None, subcommands={'sub': sub})

    with pytest.raises(DefinitionError, match='must have subcommands OR a handler'):
        Command()

    with pytest.raises(DefinitionError, match='must have subcommands OR a handler'):
        Command(subcommands={})

    with pytest.raises(DefinitionError, match='expected callable handler'):
        Command('not callable')


def test_construction_errors():
    with pytest.raises(DefinitionError, match='required arguments may not follow optional'):
        Command(lambda: None, args=[arg.optional('a'), arg('b')])

    sub = Command(lambda: None, name='sub')
    with pytest.raises(DefinitionError, match='rest arguments cannot be combined with subcommands'):
        Command(name='top', subcommands={'sub': sub}, args=[arg.rest('a')])

    with pytest.raises(DefinitionError, match='expected Command instance'):
        Command(name='top', subcommands={'sub': lambda: None})

    with pytest.raises(DefinitionError, match='conflicting subcommand name'):
        Command(name='top', subcommands=[sub, sub])

    with pytest.raises(DefinitionError, match='duplicate definition for flag name'):
        Command(lambda: None, flags=[Flag('--version', parse_as=True)], version='1.0')

    with pytest.raises(TypeError, match='unexpected keyword arguments'):
        Command(lambda: None, flagz=[])


def test_default_name_and_doc():
    def greet_user():
        """Say hello.

        More details here.
        """
    cmd = Command(greet_user)
    assert cmd.name == 'greet_user'
    assert cmd.doc == 'Say hello.'

    assert Command(lambda: None).name == 'command'
    assert Command(greet_user, name='greet', doc='').doc == ''


def test_exec_literal_result():
    assert run_exec(Command(lambda: 123), []) == 123
    assert run_exec(command(lambda: 'abc'), []) == 'abc'


def test_exec_default_argv(monkeypatch):
    cmd = Command(lambda args: list(args), args=[arg.rest('words')])
    monkeypatch.setattr(sys, 'argv', ['prog', 'a', 'b'])
    assert run_exec(cmd, None) == ['a', 'b']


def test_exec_injection():
    seen = {}

    def handler(args, flags, ctx):
        seen.update(args=args, flags=flags, ctx=ctx)
        return 'done'

    cmd = Command(handler, name='copy',
                  args=[arg('src'), arg.optional('dest', default='.')],
                  flags=[Flag('--force', parse_as=True)])

    assert run_exec(cmd, ['--force', 'a.txt']) == 'done'
    assert seen['args'] == ['a.txt', '.']
    assert seen['args'].get('dest') == '.'
    assert seen['flags'] == {'force': True}
    assert isinstance(seen['ctx'], Context)
    assert seen['ctx'].command is cmd
    assert seen['ctx'].argv == ('--force', 'a.txt')

    def kw_handler(**kwargs):
        return sorted(kwargs)

    assert run_exec(Command(kw_handler), []) == ['args', 'command', 'ctx', 'flags']


def test_exec_async_handler():
    async def handler(args):
        await asyncio.sleep(0)
        return args[0] * 2

    cmd = Command(handler, args=[int_arg('n')])
    assert run_exec(cmd, ['21']) == 42


def test_exec_fresh_context():
    ctxs = []
    cmd = Command(lambda ctx: ctxs.append(ctx))
    run_exec(cmd, [])
    run_exec(cmd, [])
    assert len(ctxs) == 2
    assert ctxs[0] is not ctxs[1]


def test_exec_binding_errors():
    cmd = Command(lambda args: args, name='copy', args=[arg('src'), arg('dest')])
    with pytest.raises(MissingRequiredArguments):
        run_exec(cmd, ['a'])
    with pytest.raises(UnexpectedArguments):
        run_exec(cmd, ['a', 'b', 'c'])


def test_exec_handler_errors_propagate():
    def handler():
        raise KeyError('oops')

    with pytest.raises(KeyError, match='oops'):
        run_exec(Command(handler), [])


def test_subcommand_dispatch():
    calc = get_calc_cmd()
    assert list(calc.subcommands) == ['add', 'mul']
    assert run_exec(calc, ['add', '1', '2']) == 3
    assert run_exec(calc, ['mul', '2', '3', '4']) == 24
    assert run_exec(calc, ['mul']) == 1

    with pytest.raises(InvalidSubcommand):
        run_exec(calc, ['div', '1', '2'])

    with pytest.raises(MissingRequiredArguments) as exc_info:
        run_exec(calc, ['add', '1'])
    assert exc_info.value.subcmds == ('add',)


def test_subcommand_list_and_nesting():
    def leaf(args):
        return 'leaf:' + args[0]

    inner = Command(name='inner', subcommands=[Command(leaf, args=[arg('x')])])
    outer = Command(name='outer', subcommands=[inner])
    assert run_exec(outer, ['inner', 'leaf', 'y']) == 'leaf:y'


def test_subcommand_after_parent_args(capsys):
    def deploy(args):
        return 'deploy:' + args[0]

    top = Command(name='top', args=[arg('region'), arg.optional('zone')],
                  subcommands={'deploy': Command(deploy, args=[arg('target')])})
    assert run_exec(top, ['us', 'east', 'deploy', 'web']) == 'deploy:web'

    # too few tokens to reach the subcommand name
    assert run_exec(top, ['us']) is None
    out, _ = capsys.readouterr()
    assert 'Usage: top <REGION> [<ZONE>] subcommand [FLAGS]' in out

    with pytest.raises(MissingRequiredArguments):
        run_exec(top, [])

    with pytest.raises(InvalidSubcommand):
        run_exec(top, ['us', 'east', 'destroy'])


def test_subcommand_mixed_case_name():
    deploy = Command(lambda: 'deployed', name='Deploy')
    top = Command(name='top', subcommands=[deploy])
    assert deploy.name == 'deploy'
    assert list(top.subcommands) == ['deploy']
    assert run_exec(top, ['Deploy']) == 'deployed'
    assert run_exec(top, ['deploy']) == 'deployed'

    top = Command(name='top', subcommands={'Ship-It': deploy})
    assert run_exec(top, ['ship-it']) == 'deployed'


def test_exec_static_default_not_shared():
    def handler(args):
        args[0].append('x')
        return args[0]

    cmd = Command(handler, args=[arg.optional('items', default=[])])
    assert run_exec(cmd, []) == ['x']
    assert run_exec(cmd, []) == ['x']


def test_subcommand_not_chosen(capsys):
    calc = get_calc_cmd()
    assert run_exec(calc, []) is None
    out, _ = capsys.readouterr()
    assert 'Usage: calc subcommand' in out

    sub = Command(lambda: None, name='sub')
    no_help = Command(name='top', subcommands=[sub], help=False)
    with pytest.raises(InvalidSubcommand, match='expected subcommand'):
        run_exec(no_help, [])


def test_version(capsys):
    called = []
    cmd = Command(lambda: called.append(1), name='tool', version='1.2.3')

    assert run_exec(cmd, ['--version']) is None
    out, _ = capsys.readouterr()
    assert out == 'tool version 1.2.3\n'
    assert not called

    with pytest.raises(UnknownFlag):
        run_exec(Command(lambda: None), ['--version'])


def test_version_skips_binding(capsys):
    cmd = Command(lambda: None, name='tool', version='2.0', args=[arg('required_thing')])
    assert run_exec(cmd, ['--version']) is None
    out, _ = capsys.readouterr()
    assert '2.0' in out


def test_context_dirs():
    cmd = Command(lambda: None, name='tool')
    ctx = Context(cmd, environ={'HOME': '/home/user', 'XDG_CONFIG_HOME': '/etc/xdg'})
    assert ctx.dirs.home == '/home/user'
    assert ctx.dirs.config == '/etc/xdg/tool'
    assert ctx.dirs.cache == '/home/user/.cache/tool'
    assert ctx.dirs.data == '/home/user/.local/share/tool'

    home = run_exec(Command(lambda ctx: ctx.dirs.home), [])
    assert os.path.isabs(home)


def test_run_errors(capsys):
    cmd = Command(lambda args: args, name='copy', args=[arg('src')])
    with pytest.raises(CommandLineError) as exc_info:
        cmd.run([])
    assert exc_info.value.code == 1
    _, err = capsys.readouterr()
    assert err == 'error: copy: missing required argument: <SRC>\n'

    with pytest.raises(SystemExit):
        get_calc_cmd().run(['add', '1'])
    _, err = capsys.readouterr()
    assert err.startswith('error: calc add: missing required argument: <B>')

    errors = []
    with pytest.raises(CommandLineError):
        cmd.run(['a', 'b'], print_error=errors.append)
    assert errors == ["error: copy: unexpected argument: 'b'"]

    assert cmd.run(['a']) == ['a']

    with pytest.raises(TypeError):
        cmd.run(['a'], print_error='stderr')


def test_handle_error():
    with pytest.raises(KeyError):
        handle_error(KeyError('not ours'))

    with pytest.raises(DefinitionError):
        handle_error(DefinitionError('bad shape'))

    errors = []
    with pytest.raises(CommandLineError) as exc_info:
        handle_error(UnexpectedArguments('unexpected argument'), print_error=errors.append)
    assert exc_info.value.code == 1
    assert errors == ['error: unexpected argument']


def test_test_client():
    def greet(args, flags):
        "greet somebody"
        greeting = 'hello, %s' % args[0]
        if flags['loud']:
            greeting = greeting.upper()
        print(greeting)
        return greeting

    cmd = Command(greet, args=[arg('name')], flags=[Flag('--loud', parse_as=True)],
                  version='0.1')
    client = TestClient(cmd)

    res = client.invoke(['--loud', 'world'])
    assert res.exit_code == 0
    assert res.stdout == 'HELLO, WORLD\n'
    assert res.return_value == 'HELLO, WORLD'

    res = client.invoke('--version')
    assert res.exit_code == 0
    assert res.stdout == 'greet version 0.1\n'

    res = client.invoke([])
    assert res.exit_code == 1
    assert 'missing required argument: <NAME>' in res.stderr
    assert isinstance(res.exception, CommandLineError)

    res = TestClient(cmd, mix_stderr=True).invoke('--nope')
    assert res.exit_code == 1
    assert 'unknown flag "--nope"' in res.stdout
