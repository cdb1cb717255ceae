import cppconfig.utils
from cppconfig.compile_config import build_define


def is_flag(arg):
    """ Both "-" (gcc/clang) and "/" (msvc) introduce a flag """
    return len(arg) >= 2 and arg[0] in "-/"


def is_separated_value(flag, candidate):
    """ Whether candidate is the value of a flag such as "-I" given on its own.
        A following flag is never swallowed.  "/" only starts a flag after an
        msvc style flag, otherwise "-I /usr/include" would lose its path.
    """
    if candidate.startswith("-"):
        return False
    return not (flag[0] == "/" and is_flag(candidate))


def add_compiler_arguments_to_config(cmdline, force_include_flag, config, verbose=0):
    """ Layer the -D, -I and forced include flags of a build command line
        onto config.  Every other flag is ignored.

        force_include_flag differs between compiler families ("-include" for
        clang/gcc, "-FI" for msvc) so the caller supplies it.  The argument
        following it is the file to include.
    """
    if not cmdline:
        return

    args = cppconfig.utils.split_cmdline(cmdline)
    pos = 0
    while pos < len(args):
        arg = args[pos]
        pos += 1
        if not is_flag(arg):
            continue

        kind = arg[1]
        if kind in "DI":
            value = arg[2:]
            if not value and pos < len(args) and is_separated_value(arg, args[pos]):
                # "-I dir" and "-D NAME" spell the value as the next argument
                value = args[pos]
                pos += 1
            if not value:
                continue

            if kind == "D":
                define = build_define(value, "=")
                config.add_define(define)
                if verbose >= 9:
                    print("Override define " + str(define))
            else:
                config.includes.add(value)
                if verbose >= 9:
                    print("Override include " + value)
            continue

        if arg == force_include_flag and pos < len(args):
            forced = args[pos]
            pos += 1
            if forced:
                config.forced_includes.add(forced)
                if verbose >= 9:
                    print("Override forced include " + forced)
