import asyncio

import pytest

import cppconfig.compiler as compiler
import cppconfig.unittesthelper as uth
from cppconfig.compile_config import FileType
from cppconfig.workspace import CompilerCache

CLANG = {"CC_TYPE": "clang"}


class SelectiveRunner:
    """Fails for the "bad-clang" command, otherwise replays linux clang output.
    Tracks how many probes are running at once.
    """

    def __init__(self):
        self.good = uth.FakeRunner.linux_clang()
        self.commands = []
        self.running = 0
        self.max_running = 0

    async def __call__(self, cmd):
        self.commands.append(cmd)
        self.running += 1
        self.max_running = max(self.max_running, self.running)
        try:
            await asyncio.sleep(0.01)
            if cmd[0] == "bad-clang":
                return compiler.ProcessResult(1, "", "bad-clang: command failed")
            return await self.good(cmd)
        finally:
            self.running -= 1


class TestCompilerCache:
    def test_probes_once_per_directory_and_filetype(self):
        runner = uth.FakeRunner.linux_clang()
        cache = CompilerCache(CLANG, runner=runner, jobs=2)

        async def scenario():
            first = await cache.get_compiler("/src", ["clang++"], "cpp")
            second = await cache.get_compiler("/src", ["clang++"], FileType.CPP)
            c_compiler = await cache.get_compiler("/src", ["clang"], "c")
            return first, second, c_compiler

        first, second, c_compiler = asyncio.run(scenario())
        assert first is second
        assert c_compiler is not first
        assert len(runner.commands) == 2

    def test_concurrent_requests_share_a_probe(self):
        runner = SelectiveRunner()
        cache = CompilerCache(CLANG, runner=runner, jobs=4)

        async def scenario():
            return await asyncio.gather(
                cache.get_compiler("/src", ["clang++"], "cpp"),
                cache.get_compiler("/src", ["clang++"], "cpp"),
            )

        first, second = asyncio.run(scenario())
        assert first is second
        assert len(runner.commands) == 1

    def test_cancelled_request_leaves_the_shared_probe_running(self):
        runner = SelectiveRunner()
        cache = CompilerCache(CLANG, runner=runner, jobs=4)

        async def scenario():
            impatient = asyncio.ensure_future(cache.get_compiler("/src", ["clang++"], "cpp"))
            patient = asyncio.ensure_future(cache.get_compiler("/src", ["clang++"], "cpp"))
            await asyncio.sleep(0)
            impatient.cancel()
            result = await patient
            return impatient, result

        impatient, result = asyncio.run(scenario())
        assert impatient.cancelled()
        assert isinstance(result, compiler.Compiler)
        assert len(runner.commands) == 1
        assert cache.compilers() == [result]

    def test_failures_are_independent_and_not_cached(self):
        runner = SelectiveRunner()
        cache = CompilerCache(CLANG, runner=runner, jobs=4)

        results = asyncio.run(
            cache.get_compilers(
                [
                    ("/good", ["clang++"], "cpp"),
                    ("/bad", ["bad-clang"], "cpp"),
                ]
            )
        )
        assert isinstance(results[0], compiler.Compiler)
        assert isinstance(results[1], compiler.EmptyProbeResultError)
        assert cache.compilers() == [results[0]]

        # Asking again probes again
        with pytest.raises(compiler.ProbeError):
            asyncio.run(cache.get_compiler("/bad", ["bad-clang"], "cpp"))
        assert [cmd[0] for cmd in runner.commands].count("bad-clang") == 2

    def test_configuration_errors(self):
        cache = CompilerCache({"CC_TYPE": "tcc"}, runner=uth.FakeRunner())
        results = asyncio.run(cache.get_compilers([("/src", ["tcc"], "c")]))
        assert isinstance(results[0], compiler.UnknownCompilerTypeError)

        cache = CompilerCache({}, runner=uth.FakeRunner())
        with pytest.raises(compiler.CompilerConfigError):
            asyncio.run(cache.get_compiler("/src", ["tcc"], "c"))

    def test_jobs_limit_concurrency(self):
        runner = SelectiveRunner()
        cache = CompilerCache(CLANG, runner=runner, jobs=1)
        requests = [("/src{0}".format(ii), ["clang++"], "cpp") for ii in range(4)]
        results = asyncio.run(cache.get_compilers(requests))
        assert all(isinstance(result, compiler.Compiler) for result in results)
        assert runner.max_running == 1

        runner = SelectiveRunner()
        cache = CompilerCache(CLANG, runner=runner, jobs=4)
        asyncio.run(cache.get_compilers(requests))
        assert runner.max_running == 4

    def test_source_configuration(self):
        runner = uth.FakeRunner.linux_clang()
        cache = CompilerCache(CLANG, runner=runner, jobs=2)

        async def scenario():
            one = await cache.get_source_configuration(
                "/src", ["clang++"], "cpp", "clang++ -DONE -Ione -include one.h one.cpp"
            )
            two = await cache.get_source_configuration(
                "/src", ["clang++"], "cpp", "clang++ -DTWO two.cpp"
            )
            return one, two

        one, two = asyncio.run(scenario())
        assert "ONE" in one.defines and "ONE" not in two.defines
        assert "one" in one.includes and "one" not in two.includes
        assert list(one.forced_includes) == ["one.h"]
        assert len(two.forced_includes) == 0
        assert len(runner.commands) == 1

    def test_browse_path_and_forget(self):
        cache = CompilerCache(CLANG, runner=uth.FakeRunner.linux_clang(), jobs=2)
        asyncio.run(
            cache.get_compilers(
                [
                    ("/a", ["clang++"], "cpp"),
                    ("/b", ["clang++"], "cpp"),
                    ("/b", ["clang"], "c"),
                ]
            )
        )
        assert cache.browse_path() == [
            "/usr/local/include",
            "/usr/lib/llvm-16/lib/clang/16/include",
            "/usr/include/x86_64-linux-gnu",
            "/usr/include",
        ]
        assert len(cache.to_state()) == 3

        cache.forget("/b")
        assert len(cache.compilers()) == 1

    def test_default_jobs(self):
        cache = CompilerCache(CLANG)
        assert cache._jobs >= 1
