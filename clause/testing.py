# Design of this owes heavily to Click's CliRunner

"""Run a Command the way a user would, with stdin, stdout, stderr,
and the environment all swapped out, and get back a Result with the
output and exit code.

  >>> client = TestClient(cmd)
  >>> res = client.invoke(['--loud', 'world'])
  >>> res.exit_code
  0
"""

import io
import os
import sys
import shlex
import contextlib


def make_input_stream(input, encoding):
    if input is None:
        input = b''
    elif isinstance(input, str):
        input = input.encode(encoding)
    elif not isinstance(input, bytes):
        raise TypeError('expected bytes, text, or None, not: %r' % (input,))
    return io.BytesIO(input)


class Result(object):
    """Holds the captured result of an invoked CLI script."""

    def __init__(self, test_client, stdout_bytes, stderr_bytes, exit_code,
                 exc_info, return_value=None):
        self.test_client = test_client
        self.stdout_bytes = stdout_bytes
        self.stderr_bytes = stderr_bytes
        self.exit_code = exit_code  # integer
        self.return_value = return_value

        # if an exception occurred:
        self.exc_info = exc_info

    @property
    def exception(self):
        return self.exc_info[1] if self.exc_info else None

    @property
    def stdout(self):
        """The standard output as unicode string."""
        return self.stdout_bytes.decode(self.test_client.encoding, 'replace') \
            .replace('\r\n', '\n')

    @property
    def stderr(self):
        """The standard error as unicode string."""
        if self.stderr_bytes is None:
            raise ValueError("stderr not separately captured")
        return self.stderr_bytes.decode(self.test_client.encoding, 'replace') \
            .replace('\r\n', '\n')

    def __repr__(self):
        return '<%s %s>' % (
            self.__class__.__name__,
            repr(self.exception) if self.exception else ('exit_code=%s' % self.exit_code),
        )


class TestClient(object):
    """Invokes *cmd* in an isolated environment.

    Args:
       cmd (Command): The Command to test.
       env (dict): Environment variables set for every invocation. A
          value of None unsets that variable.
       mix_stderr (bool): Pass True to capture stderr in stdout.
       reraise (bool): Whether exceptions other than SystemExit are
          raised, rather than captured on the Result. Defaults to True.
    """
    __test__ = False  # not a pytest test class

    def __init__(self, cmd, env=None, mix_stderr=False, reraise=True):
        self.cmd = cmd
        self.base_env = env or {}
        self.reraise = reraise
        self.mix_stderr = mix_stderr
        self.encoding = 'utf8'

    @contextlib.contextmanager
    def isolate(self, input=None, env=None, chdir=None):
        input_stream = make_input_stream(input, self.encoding)
        old_cwd = os.getcwd()
        old_stdin, old_stdout, old_stderr = sys.stdin, sys.stdout, sys.stderr

        full_env = dict(self.base_env)
        if env:
            full_env.update(env)

        bytes_output = io.BytesIO()
        bytes_error = None
        sys.stdin = io.TextIOWrapper(input_stream, encoding=self.encoding)
        sys.stdout = io.TextIOWrapper(bytes_output, encoding=self.encoding)
        if self.mix_stderr:
            sys.stderr = sys.stdout
        else:
            bytes_error = io.BytesIO()
            sys.stderr = io.TextIOWrapper(bytes_error, encoding=self.encoding)

        old_env = {}
        try:
            if chdir:
                os.chdir(str(chdir))

            _sync_env(os.environ, full_env, old_env)

            yield (bytes_output, bytes_error)
        finally:
            if chdir:
                os.chdir(old_cwd)

            _sync_env(os.environ, old_env)

            sys.stdout.flush()
            sys.stderr.flush()
            sys.stdout = old_stdout
            sys.stderr = old_stderr
            sys.stdin = old_stdin

        return

    def invoke(self, args, input=None, env=None, chdir=None):
        """Run the command with *args*, a list of strings, or a single
        string to be split shell-style. Returns a Result.
        """
        with self.isolate(input=input, env=env, chdir=chdir) as (stdout, stderr):
            exc_info = None
            exit_code = 0
            return_value = None

            if isinstance(args, str):
                args = shlex.split(args)

            try:
                return_value = self.cmd.run(args or ())
            except SystemExit as se:
                exc_info = sys.exc_info()
                exit_code = se.code
                if exit_code is None:
                    exit_code = 0

                if not isinstance(exit_code, int):
                    sys.stdout.write(str(exit_code))
                    sys.stdout.write('\n')
                    exit_code = 1
            except Exception:
                if self.reraise:
                    raise
                exit_code = 1
                exc_info = sys.exc_info()
            finally:
                sys.stdout.flush()
                sys.stderr.flush()
                stdout_bytes = stdout.getvalue()
                stderr_bytes = stderr.getvalue() if stderr is not None else None

        return Result(test_client=self,
                      stdout_bytes=stdout_bytes,
                      stderr_bytes=stderr_bytes,
                      exit_code=exit_code,
                      exc_info=exc_info,
                      return_value=return_value)


def _sync_env(env, new, backup=None):
    for key, value in new.items():
        if backup is not None:
            backup[key] = env.get(key)
        if value is not None:
            env[key] = value
            continue
        try:
            del env[key]
        except Exception:
            pass
    return backup
