import asyncio
import json
import os
import sys

from rich.console import Console
from rich.table import Table

import cppconfig.apptools
import cppconfig.compiler
import cppconfig.configutils
import cppconfig.utils
from cppconfig.compile_config import FileType
from cppconfig.workspace import CompilerCache


def add_arguments(cap):
    cppconfig.apptools.add_common_arguments(cap)
    cap.add(
        "srcdir",
        nargs="?",
        default=os.getcwd(),
        help="Source directory the compiler is being probed for")
    cap.add(
        "--filetype",
        choices=[filetype.value for filetype in FileType],
        default=FileType.CPP.value,
        help="Language of the translation unit")
    cap.add(
        "--cmdline",
        default=None,
        help="Build command line of a source file.  Its -D, -I and forced includes are applied to the defaults")

    # Figure out what style classes are available and add them to the command
    # line options
    styles = [st[:-5].lower() for st in dict(globals()) if st.endswith("Style")]
    cap.add(
        "--style", choices=styles, default="pretty", help="Output formatting style")


class PrettyStyle(object):
    def __init__(self, console=None):
        self.console = console if console is not None else Console()

    def show(self, compiler, config):
        state = compiler.to_state()
        self.console.print(
            "{0} ({1}) {2}".format(state["type"], state["filetype"], " ".join(compiler.get_command()))
        )
        table = Table(show_header=True)
        table.add_column("Setting", style="bold")
        table.add_column("Value", overflow="fold")
        table.add_row("standard", config.standard.value)
        table.add_row("intelliSenseMode", config.intellisense_mode.value)
        for include in config.includes:
            table.add_row("include", include)
        for forced in config.forced_includes:
            table.add_row("forced include", forced)
        for define in config.defines.values():
            table.add_row("define", str(define))
        self.console.print(table)


class JsonStyle(object):
    def show(self, compiler, config):
        command = compiler.get_command()
        compiler_path = command[0] if command else None
        print(json.dumps(config.to_source_file_configuration(compiler_path), indent=2))


class FlatStyle(object):
    def show(self, compiler, config):
        print(cppconfig.utils.join_cmdline(config.to_flags(compiler.force_include_flag)))


async def resolve(args):
    """ Probe the compiler described by args and apply args.cmdline """
    cache = CompilerCache(
        cppconfig.apptools.build_config_from_args(args),
        overrides=cppconfig.configutils.CompilerOverrides.from_args(args),
        jobs=args.jobs,
        verbose=args.verbose,
    )
    command = cppconfig.apptools.command_from_args(args, args.filetype)
    srcdir = os.path.realpath(args.srcdir)
    compiler = await cache.get_compiler(srcdir, command, args.filetype)
    return compiler, compiler.get_configuration(args.cmdline)


def main(argv=None):
    cap = cppconfig.apptools.create_parser(
        "Show the include paths, defines and standard a compiler uses")
    add_arguments(cap)
    args = cppconfig.apptools.parseargs(cap, argv)

    try:
        compiler, config = asyncio.run(resolve(args))
    except (cppconfig.compiler.CompilerConfigError, cppconfig.compiler.ProbeError) as err:
        sys.stderr.write(str(err) + "\n")
        return 1

    styleclass = globals()[args.style.title() + "Style"]
    styleclass().show(compiler, config)
    return 0


if __name__ == "__main__":
    sys.exit(main())
