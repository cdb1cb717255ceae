import os

import appdirs
from configargparse import DefaultConfigFileParser

import cppconfig.utils
from cppconfig.compile_config import FileType

APPNAME = "cppconfig"
CONFIG_FILENAME = "cppconfig.conf"


def default_config_directories(
    user_config_dir=None, system_config_dir=None, cwd=None, verbose=0
):
    """ Directories that may hold a cppconfig.conf, highest priority first """
    # Priority (highest to lowest)
    # 1) current working directory
    # 2) user config   (XDG compliant. ~/.config/cppconfig)
    # 3) system config (XDG compliant. /etc/xdg/cppconfig)
    if cwd is None:
        cwd = os.getcwd()
    if user_config_dir is None:
        user_config_dir = appdirs.user_config_dir(appname=APPNAME)
    if system_config_dir is None:
        system_config_dir = appdirs.site_config_dir(appname=APPNAME)

    results = cppconfig.utils.OrderedSet([cwd, user_config_dir, system_config_dir])
    if verbose >= 9:
        print(" ".join(["Default config directories"] + list(results)))
    return results


def defaultconfigs(user_config_dir=None, system_config_dir=None, cwd=None, verbose=0):
    """ The existing cppconfig.conf files, lowest priority first.
        That is the order configargparse expects for default_config_files.
    """
    candidates = [
        os.path.join(cfgdir, CONFIG_FILENAME)
        for cfgdir in reversed(
            default_config_directories(
                user_config_dir=user_config_dir,
                system_config_dir=system_config_dir,
                cwd=cwd,
                verbose=verbose,
            )
        )
    ]
    configs = [cfg for cfg in candidates if os.path.isfile(cfg)]
    if verbose >= 8:
        print(" ".join(["Default configs are"] + configs))
    return configs


def extract_item_from_config_files(key, config_files, default=None, verbose=0):
    """ Look key up in config_files (lowest priority first).
        Return the given default if no file has the key.
    """
    fileparser = DefaultConfigFileParser()
    for cfgpath in reversed(config_files):
        with open(cfgpath) as cfg:
            items = fileparser.parse(cfg)
        try:
            value = items[key]
        except KeyError:
            continue
        if verbose >= 2:
            print(" ".join([cfgpath, "contains", key, "=", str(value)]))
        return value

    return default


class CompilerOverrides(object):

    """ Lets the user replace the compiler command used to probe a source
        directory, separately for C and C++.

        Explicitly supplied commands win.  Otherwise the cppconfig.conf in the
        source directory is consulted, then the one in the user config
        directory.  The keys are "c-compiler" and "cpp-compiler".
    """

    KEYS = {FileType.C: "c-compiler", FileType.CPP: "cpp-compiler"}

    def __init__(self, c_compiler=None, cpp_compiler=None, user_config_dir=None, verbose=0):
        self._commands = {FileType.C: c_compiler, FileType.CPP: cpp_compiler}
        if user_config_dir is None:
            user_config_dir = appdirs.user_config_dir(appname=APPNAME)
        self._user_config_dir = user_config_dir
        self._verbose = verbose

    @classmethod
    def from_args(cls, args):
        return cls(
            c_compiler=args.c_compiler,
            cpp_compiler=args.cpp_compiler,
            verbose=args.verbose,
        )

    def config_files(self, srcdir):
        """ The override config files for srcdir, lowest priority first """
        candidates = [
            os.path.join(self._user_config_dir, CONFIG_FILENAME),
            os.path.join(srcdir, CONFIG_FILENAME),
        ]
        return [cfg for cfg in cppconfig.utils.OrderedSet(candidates) if os.path.isfile(cfg)]

    def get_compiler(self, srcdir, filetype):
        """ The override command as a list, or None to use the build's compiler """
        filetype = FileType(filetype)
        value = self._commands[filetype]
        if not value:
            value = extract_item_from_config_files(
                self.KEYS[filetype], self.config_files(srcdir), verbose=self._verbose
            )
        if not value:
            return None

        command = cppconfig.utils.split_cmdline(value)
        if self._verbose >= 4:
            print("Compiler override for {0} ({1}): {2}".format(srcdir, filetype.value, command))
        return command or None
