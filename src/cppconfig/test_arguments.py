from cppconfig.arguments import add_compiler_arguments_to_config, is_flag
from cppconfig.compile_config import CompileConfig, Define, FileType, IntelliSenseMode


def _config():
    return CompileConfig.default(FileType.CPP, IntelliSenseMode.CLANG)


def test_is_flag():
    assert is_flag("-D")
    assert is_flag("/FI")
    assert not is_flag("-")
    assert not is_flag("foo.cpp")


class TestAddCompilerArguments:
    def test_define_include_and_forced_include(self):
        config = _config()
        add_compiler_arguments_to_config(
            "-DFOO=bar -Ipath/to/inc -include force.h", "-include", config
        )
        assert config.defines["FOO"] == Define("FOO", "bar")
        assert "path/to/inc" in config.includes
        assert "force.h" in config.forced_includes

    def test_empty_command_line_is_a_noop(self):
        for cmdline in (None, ""):
            config = _config()
            add_compiler_arguments_to_config(cmdline, "-include", config)
            assert config == _config()

    def test_define_without_value(self):
        config = _config()
        add_compiler_arguments_to_config("-DDEBUG", "-include", config)
        assert config.defines["DEBUG"].value == "1"

    def test_later_define_overwrites(self):
        config = _config()
        config.add_define(Define("FOO", "probed"))
        add_compiler_arguments_to_config("-DFOO=1 -DFOO=2", "-include", config)
        assert config.defines["FOO"].value == "2"
        assert len(config.defines) == 1

    def test_msvc_style_flags(self):
        config = _config()
        add_compiler_arguments_to_config(
            "cl.exe /nologo /DWIN32 /DUNICODE=1 /Ic:/sdk/include -FI pch.h", "-FI", config
        )
        assert config.defines["WIN32"].value == "1"
        assert config.defines["UNICODE"].value == "1"
        assert list(config.includes) == ["c:/sdk/include"]
        assert list(config.forced_includes) == ["pch.h"]

    def test_forced_include_flag_is_family_specific(self):
        config = _config()
        add_compiler_arguments_to_config("-FI pch.h", "-include", config)
        assert len(config.forced_includes) == 0
        # "-FI" is an ordinary flag to clang so pch.h is just a file name
        assert len(config.includes) == 0

    def test_forced_include_without_argument(self):
        config = _config()
        add_compiler_arguments_to_config("-DX -include", "-include", config)
        assert len(config.forced_includes) == 0
        assert "X" in config.defines

    def test_separated_values(self):
        config = _config()
        add_compiler_arguments_to_config("-I include -D NAME=value", "-include", config)
        assert list(config.includes) == ["include"]
        assert config.defines["NAME"].value == "value"

    def test_empty_flag_does_not_swallow_the_next_flag(self):
        config = _config()
        add_compiler_arguments_to_config("-I -DFOO=1 -D -Ibar", "-include", config)
        assert config.defines["FOO"].value == "1"
        assert list(config.includes) == ["bar"]
        assert len(config.defines) == 1

    def test_separated_absolute_path(self):
        config = _config()
        add_compiler_arguments_to_config("-I /usr/local/include", "-include", config)
        assert list(config.includes) == ["/usr/local/include"]

        config = _config()
        add_compiler_arguments_to_config("/I /DWIN32", "-FI", config)
        assert len(config.includes) == 0
        assert "WIN32" in config.defines

    def test_dangling_include_flag(self):
        config = _config()
        add_compiler_arguments_to_config("-DX -I", "-include", config)
        assert len(config.includes) == 0

    def test_other_arguments_are_ignored(self):
        config = _config()
        add_compiler_arguments_to_config(
            "clang++ -c -O2 -Wall -std=c++17 -o foo.o foo.cpp -isystem /opt/inc x",
            "-include",
            config,
        )
        assert config == _config()

    def test_quoted_define(self):
        config = _config()
        add_compiler_arguments_to_config(
            '-DMOZ_APP_NAME="\\"firefox\\"" "-DGREETING=hello world"', "-include", config
        )
        assert config.defines["MOZ_APP_NAME"].value == '"firefox"'
        assert config.defines["GREETING"].value == "hello world"

    def test_includes_are_a_set(self):
        config = _config()
        add_compiler_arguments_to_config("-Ia -Ib -Ia", "-include", config)
        assert list(config.includes) == ["a", "b"]

    def test_arrival_order_does_not_change_the_result(self):
        first = _config()
        add_compiler_arguments_to_config("-Ia -Ib -DX -include f.h", "-include", first)
        second = _config()
        add_compiler_arguments_to_config("-include f.h -DX -Ib -Ia", "-include", second)
        assert first == second
