import argparse
import os

import configargparse
from rich.console import Console
from rich.table import Table

import cppconfig.compiler
import cppconfig.configutils
import cppconfig.jobs
import cppconfig.utils
from cppconfig.compile_config import FileType
from cppconfig.version import __version__

README = os.path.join(os.path.dirname(os.path.realpath(__file__)), "README.cppconfig.rst")


def print_manual(console=None):
    """ Render the README to the terminal """
    from rich_rst import RestructuredText

    if console is None:
        console = Console()
    with open(README, encoding="utf-8") as ff:
        console.print(RestructuredText(ff.read()))


class _ManAction(argparse.Action):
    def __init__(self, option_strings, dest=argparse.SUPPRESS, default=argparse.SUPPRESS, help=None):
        super().__init__(option_strings=option_strings, dest=dest, default=default, nargs=0, help=help)

    def __call__(self, parser, namespace, values, option_string=None):
        print_manual()
        parser.exit()


def add_base_arguments(cap):
    cap.add(
        "-v",
        "--verbose",
        help="Output verbosity. Add more v's to make it more verbose",
        action="count",
        default=0)
    cap.add(
        "-q",
        "--quiet",
        help="Decrement verbosity. Useful in apps where the default verbosity > 0.",
        action="count",
        default=0)
    cap.add(
        "--version",
        action="version",
        version=__version__)
    cap.add(
        "--man",
        action=_ManAction,
        help="Show the manual")


def add_common_arguments(cap):
    """ Insert the arguments that describe the build's compiler """
    add_base_arguments(cap)
    cap.add(
        "--CC_TYPE",
        choices=sorted(cppconfig.compiler.COMPILER_TYPES),
        default=None,
        help="Compiler family.  The same value as the build system's CC_TYPE.")
    cap.add("--CC", help="C compiler command", default="clang")
    cap.add("--CXX", help="C++ compiler command", default="clang++")
    cap.add(
        "--MACOS_SDK_DIR",
        default=None,
        help="macOS SDK to probe the compiler against. Ignored on other platforms.")
    cap.add(
        "--c-compiler",
        dest="c_compiler",
        default=None,
        help="Command that replaces CC when probing for the defaults")
    cap.add(
        "--cpp-compiler",
        dest="cpp_compiler",
        default=None,
        help="Command that replaces CXX when probing for the defaults")
    cppconfig.jobs.add_arguments(cap)


def build_config_from_args(args):
    """ The subset of the build system's configuration that the compiler factory reads """
    build_config = {}
    for key in ("CC_TYPE", "MACOS_SDK_DIR"):
        value = getattr(args, key, None)
        if value:
            build_config[key] = value
    return build_config


def command_from_args(args, filetype):
    """ The build's compiler command for the given file type """
    if FileType(filetype) == FileType.C:
        command = args.CC
    else:
        command = args.CXX
    return cppconfig.utils.split_cmdline(command)


def create_parser(description, include_config=True, user_config_dir=None, system_config_dir=None):
    default_config_files = []
    if include_config:
        default_config_files = cppconfig.configutils.defaultconfigs(
            user_config_dir=user_config_dir, system_config_dir=system_config_dir
        )
    return configargparse.ArgumentParser(
        description=description,
        formatter_class=configargparse.ArgumentDefaultsHelpFormatter,
        auto_env_var_prefix="",
        default_config_files=default_config_files,
        args_for_setting_config_path=["-c", "--config"],
        ignore_unknown_config_file_keys=True,
    )


def substitutions(args):
    args.verbose -= args.quiet


def parseargs(cap, argv=None):
    args = cap.parse_args(args=argv)
    substitutions(args)
    if args.verbose >= 3:
        cap.print_values()
    if args.verbose >= 2:
        verbose_print_args(args)
    return args


def verbose_print_args(args, console=None):
    """ Print the args in two columns Attr: Value """
    if console is None:
        console = Console()
    table = Table(title="Final aggregated variables", show_header=False)
    table.add_column("Attr", style="bold")
    table.add_column("Value", overflow="fold")
    for attr, value in sorted(vars(args).items()):
        table.add_row(attr, "" if value is None else str(value))
    console.print(table)
