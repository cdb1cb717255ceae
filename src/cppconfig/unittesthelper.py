import contextlib
import os
import shutil
import tempfile

from cppconfig.compiler import ProcessResult

# The abbreviation "uth" is often used for this "unittesthelper"


def cppconfigdir():
    return os.path.dirname(os.path.realpath(__file__))


def samplesdir():
    return os.path.realpath(os.path.join(cppconfigdir(), "samples"))


def read_sample(relative_path):
    with open(os.path.join(samplesdir(), relative_path), encoding="utf-8") as ff:
        return ff.read()


class FakeRunner:
    """Stands in for run_process.  Replays canned compiler output and
    remembers every command it was asked to run.
    """

    def __init__(self, stdout="", stderr="", returncode=0, error=None):
        self.stdout = stdout
        self.stderr = stderr
        self.returncode = returncode
        self.error = error
        self.commands = []

    @classmethod
    def linux_clang(cls):
        return cls(
            stdout=read_sample("clang_linux_stdout.txt"),
            stderr=read_sample("clang_linux_stderr.txt"),
        )

    async def __call__(self, cmd):
        self.commands.append(list(cmd))
        if self.error is not None:
            raise self.error
        return ProcessResult(self.returncode, self.stdout, self.stderr)


class TempDirectoryContext:
    """Context manager for temporary directories with optional directory changing."""

    def __init__(self, change_dir=True, prefix=None):
        self.change_dir = change_dir
        self.prefix = prefix
        self._tmpdir = None
        self._origdir = None

    def __enter__(self):
        if self.change_dir:
            self._origdir = os.getcwd()

        self._tmpdir = os.path.realpath(tempfile.mkdtemp(prefix=self.prefix))

        if self.change_dir:
            os.chdir(self._tmpdir)

        return self._tmpdir

    def __exit__(self, exc_type, exc_value, traceback):
        if self.change_dir and self._origdir:
            os.chdir(self._origdir)
        if self._tmpdir:
            shutil.rmtree(self._tmpdir, ignore_errors=True)


@contextlib.contextmanager
def EnvironmentContext(env_vars):
    """Context manager for temporarily setting (or, with None, removing)
    environment variables.
    """
    original_values = {key: os.environ.get(key) for key in env_vars}
    for key, value in env_vars.items():
        if value is None:
            os.environ.pop(key, None)
        else:
            os.environ[key] = value

    try:
        yield
    finally:
        for key, value in original_values.items():
            if value is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = value


def write_config(directory, lines):
    """Write a cppconfig.conf into directory"""
    filename = os.path.join(directory, "cppconfig.conf")
    with open(filename, "w") as ff:
        for line in lines:
            ff.write(line + "\n")
    return filename
