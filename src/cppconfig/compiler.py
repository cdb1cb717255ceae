"""Determine the default configuration of a compiler.

Each supported compiler family (the CC_TYPE of the build configuration) maps
to a fetch strategy in COMPILER_TYPES.  A strategy produces a Compiler whose
defaults are never modified; callers get clones and layer the flags of a
specific build command line on top.

The clang strategy asks the compiler itself.  Running

    clang -std=c++14 -xc++ -Wp,-v -E -dD /dev/null

preprocesses an empty file, dumping every predefined macro as a "#define"
line and the include search path as an indented list following an
"#include <...> search starts here:" header.  Depending on the platform and
build of clang those end up on stdout or stderr so both are parsed.

The msvc family does not support this so it starts from empty defaults and
relies on the flags of each build command line.
"""

import asyncio
import sys
from dataclasses import dataclass
from typing import List

import cppconfig.arguments
from cppconfig.compile_config import (
    CompileConfig,
    FileType,
    IntelliSenseMode,
    build_define,
)


FRAMEWORK_MARKER = " (framework directory)"

CPP_VERSION = "c++14"
C_VERSION = "gnu99"

# Preprocess an empty input, print the search path and keep the #defines
PROBE_FLAGS = ["-Wp,-v", "-E", "-dD", "/dev/null"]


class CompilerConfigError(ValueError):
    """The build configuration does not say which compiler is in use"""


class UnknownCompilerTypeError(CompilerConfigError):
    def __init__(self, compiler_type):
        super().__init__(f"Unknown compiler type {compiler_type}.")
        self.compiler_type = compiler_type


class ProbeError(RuntimeError):
    """The compiler could not be run or its output was unusable"""


class EmptyProbeResultError(ProbeError):
    """The compiler ran but reported no include paths or no defines"""


@dataclass
class ProcessResult:
    returncode: int
    stdout: str
    stderr: str


async def run_process(cmd: List[str]) -> ProcessResult:
    """Run cmd to completion and capture both output streams"""
    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as err:
        raise ProbeError(f"Unable to run {cmd[0]}: {err}") from err

    stdout, stderr = await process.communicate()
    return ProcessResult(
        returncode=process.returncode,
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace"),
    )


def parse_compiler_defaults(output, defaults, verbose=0):
    """Accumulate the include paths and #defines found in output into defaults"""
    in_includes = False
    for line in output.strip().splitlines():
        if in_includes:
            if line.startswith(" "):
                include = line.strip()
                if include.endswith(FRAMEWORK_MARKER):
                    include = include[: -len(FRAMEWORK_MARKER)]
                defaults.includes.add(include)
                if verbose >= 9:
                    print("Compiler include " + include)
                continue
            # The end of the list still needs to be looked at
            in_includes = False

        if line.startswith("#include "):
            in_includes = True
        elif line.startswith("#define "):
            define = build_define(line[len("#define "):].strip(), " ")
            defaults.add_define(define)
            if verbose >= 9:
                print("Compiler define " + str(define))


def language_flags(filetype):
    if FileType(filetype) == FileType.C:
        return ["-std=" + C_VERSION, "-xc"]
    return ["-std=" + CPP_VERSION, "-xc++"]


def _effective_command(srcdir, command, filetype, overrides):
    """The user may override the compiler per source directory and language"""
    if overrides is not None:
        override = overrides.get_compiler(srcdir, filetype)
        if override:
            return list(override)
    return list(command)


class Compiler:
    """The default configuration of one compiler for one source directory
    and one language.  Use create() rather than constructing directly.
    """

    def __init__(
        self,
        srcdir,
        command,
        filetype,
        defaults,
        compiler_type,
        force_include_flag,
        overrides=None,
        verbose=0,
    ):
        self.srcdir = srcdir
        self.command = list(command)
        self.filetype = FileType(filetype)
        self.compiler_type = compiler_type
        self.force_include_flag = force_include_flag
        self._defaults = defaults
        self._overrides = overrides
        self._verbose = verbose

    def get_command(self):
        return _effective_command(
            self.srcdir, self.command, self.filetype, self._overrides
        )

    def get_default_configuration(self):
        return self._defaults.clone()

    def get_include_paths(self):
        return self._defaults.includes.copy()

    def add_compiler_arguments_to_config(self, cmdline, config):
        cppconfig.arguments.add_compiler_arguments_to_config(
            cmdline, self.force_include_flag, config, verbose=self._verbose
        )

    def get_configuration(self, cmdline=None):
        """The defaults with the flags of cmdline applied"""
        config = self.get_default_configuration()
        self.add_compiler_arguments_to_config(cmdline, config)
        return config

    def to_state(self):
        """Summarise for diagnostic dumps"""
        override = None
        if self._overrides is not None:
            override = self._overrides.get_compiler(self.srcdir, self.filetype)
        return {
            "type": self.compiler_type,
            "filetype": self.filetype.value,
            "command": self.command,
            "override": override,
            "includes": len(self._defaults.includes),
            "defines": len(self._defaults.defines),
        }

    def __repr__(self):
        return "Compiler({0!r}, {1!r}, {2})".format(
            self.compiler_type, self.srcdir, self.filetype.value
        )


async def fetch_clang(
    srcdir,
    command,
    filetype,
    compiler_type,
    build_config,
    overrides=None,
    runner=None,
    verbose=0,
):
    """Probe a clang compatible compiler for its defaults"""
    if runner is None:
        runner = run_process

    sdk = None
    if sys.platform == "darwin":
        sdk = build_config.get("MACOS_SDK_DIR")

    cmd = _effective_command(srcdir, command, filetype, overrides)
    cmd.extend(language_flags(filetype))
    if sdk:
        cmd.extend(["-isysroot", sdk])
    cmd.extend(PROBE_FLAGS)

    if verbose >= 3:
        print(" ".join(cmd))

    try:
        result = await runner(cmd)
        if verbose >= 5:
            print(result.stdout)
            print(result.stderr)
        if result.returncode != 0 and verbose >= 1:
            print(
                "{0} exited with status {1}".format(cmd[0], result.returncode)
            )

        defaults = CompileConfig.default(filetype, IntelliSenseMode.CLANG)
        parse_compiler_defaults(result.stdout, defaults, verbose=verbose)
        parse_compiler_defaults(result.stderr, defaults, verbose=verbose)

        if not defaults.includes or not defaults.defines:
            raise EmptyProbeResultError(
                "{0} returned {1} include paths and {2} defines (exit status {3})".format(
                    " ".join(cmd),
                    len(defaults.includes),
                    len(defaults.defines),
                    result.returncode,
                )
            )
    except ProbeError as err:
        print(
            "Failed to get compiler defaults for {0}. Error={1}".format(srcdir, err),
            file=sys.stderr,
        )
        raise
    except OSError as err:
        print(
            "Failed to run {0} for {1}. Error={2}".format(cmd[0], srcdir, err),
            file=sys.stderr,
        )
        raise ProbeError("Unable to run {0}: {1}".format(cmd[0], err)) from err

    if verbose >= 1:
        print(
            "Found {0} include paths and {1} defines for {2} ({3})".format(
                len(defaults.includes),
                len(defaults.defines),
                srcdir,
                FileType(filetype).value,
            )
        )

    return Compiler(
        srcdir,
        command,
        filetype,
        defaults,
        compiler_type,
        FORCE_INCLUDE_FLAGS[compiler_type],
        overrides=overrides,
        verbose=verbose,
    )


async def fetch_msvc(
    srcdir,
    command,
    filetype,
    compiler_type,
    build_config,
    overrides=None,
    runner=None,
    verbose=0,
):
    """msvc cannot be asked for its defaults.  Start empty and let the
    per file command lines supply the includes and defines.
    """
    defaults = CompileConfig.default(filetype, MSVC_MODES[compiler_type])
    if verbose >= 1:
        print(
            "Using empty defaults for {0} in {1} ({2})".format(
                compiler_type, srcdir, FileType(filetype).value
            )
        )
    return Compiler(
        srcdir,
        command,
        filetype,
        defaults,
        compiler_type,
        FORCE_INCLUDE_FLAGS[compiler_type],
        overrides=overrides,
        verbose=verbose,
    )


MSVC_MODES = {
    "msvc": IntelliSenseMode.MSVC,
    "clang-cl": IntelliSenseMode.CLANG,
}

FORCE_INCLUDE_FLAGS = {
    "clang": "-include",
    "clang-cl": "-FI",
    "msvc": "-FI",
}

COMPILER_TYPES = {
    "clang": fetch_clang,
    "clang-cl": fetch_msvc,
    "msvc": fetch_msvc,
}


def create(
    srcdir, command, filetype, build_config, overrides=None, runner=None, verbose=0
):
    """Compiler Factory.

    Configuration problems raise immediately.  Otherwise the returned
    awaitable runs the strategy for the CC_TYPE in build_config and
    produces a Compiler, or raises ProbeError.
    """
    compiler_type = build_config.get("CC_TYPE")
    if not compiler_type:
        raise CompilerConfigError("Unable to determine compiler types.")

    try:
        fetch = COMPILER_TYPES[compiler_type]
    except KeyError:
        raise UnknownCompilerTypeError(compiler_type) from None

    if verbose >= 4:
        print("Using {0} for CC_TYPE={1}".format(fetch.__name__, compiler_type))

    return fetch(
        srcdir,
        command,
        filetype,
        compiler_type,
        build_config,
        overrides=overrides,
        runner=runner,
        verbose=verbose,
    )
