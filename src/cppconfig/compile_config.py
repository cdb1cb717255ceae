"""The configuration model handed to code intelligence tools.

A CompileConfig holds everything a parser needs to understand a translation
unit the way the real compiler would: the include search path, the
predefined macros, any forced includes, the language standard and the
IntelliSense mode (the compiler family whose ABI and builtins apply).
"""

import enum
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from cppconfig.utils import OrderedSet


class FileType(str, enum.Enum):
    C = "c"
    CPP = "cpp"


class Standard(str, enum.Enum):
    C89 = "c89"
    C99 = "c99"
    C11 = "c11"
    CPP98 = "c++98"
    CPP03 = "c++03"
    CPP11 = "c++11"
    CPP14 = "c++14"
    CPP17 = "c++17"


class IntelliSenseMode(str, enum.Enum):
    MSVC = "msvc-x64"
    GCC = "gcc-x64"
    CLANG = "clang-x64"


C_STANDARD = Standard.C99
CPP_STANDARD = Standard.CPP14

DEFAULT_DEFINE_VALUE = "1"


def standard_for(filetype):
    """The language standard assumed for the given file type"""
    if FileType(filetype) == FileType.C:
        return C_STANDARD
    return CPP_STANDARD


@dataclass(frozen=True)
class Define:
    key: str
    value: str = DEFAULT_DEFINE_VALUE

    def __str__(self):
        return f"{self.key}={self.value}"


def build_define(text, splitter):
    """Split text at the first splitter into a Define.

    "FOO=bar" split on "=" gives FOO/bar.  When there is no splitter the
    whole text is the key and the value is "1", which is what both
    "-DFOO" and "#define FOO" mean.
    """
    pos = text.find(splitter)
    if pos >= 0:
        return Define(text[:pos], text[pos + len(splitter):])
    return Define(text, DEFAULT_DEFINE_VALUE)


@dataclass
class CompileConfig:
    intellisense_mode: IntelliSenseMode
    standard: Standard
    includes: OrderedSet = field(default_factory=OrderedSet)
    defines: Dict[str, Define] = field(default_factory=dict)
    forced_includes: OrderedSet = field(default_factory=OrderedSet)

    @classmethod
    def default(cls, filetype, intellisense_mode):
        """An empty configuration with the standard preset for filetype"""
        return cls(
            intellisense_mode=IntelliSenseMode(intellisense_mode),
            standard=standard_for(filetype),
        )

    def add_define(self, define):
        self.defines[define.key] = define

    def clone(self):
        """Copy the containers so that the clone can be freely modified"""
        return CompileConfig(
            intellisense_mode=self.intellisense_mode,
            standard=self.standard,
            includes=OrderedSet(self.includes),
            defines=dict(self.defines),
            forced_includes=OrderedSet(self.forced_includes),
        )

    def to_flags(self, force_include_flag="-include") -> List[str]:
        """Express the configuration as compiler flags"""
        flags = ["-I" + include for include in self.includes]
        flags.extend("-D" + str(define) for define in self.defines.values())
        for forced in self.forced_includes:
            flags.extend([force_include_flag, forced])
        return flags

    def to_source_file_configuration(self, compiler_path: Optional[str] = None):
        """The plain dict consumed by the per file configuration provider"""
        result = {
            "includePath": list(self.includes),
            "defines": [str(define) for define in self.defines.values()],
            "forcedInclude": list(self.forced_includes),
            "standard": self.standard.value,
            "intelliSenseMode": self.intellisense_mode.value,
        }
        if compiler_path:
            result["compilerPath"] = compiler_path
        return result
