"""Keeps one Compiler per source directory and language.

Probing a compiler means running it, so it is done once, the first time a
(source directory, file type) pair is asked for.  Every per file request
after that works on a clone of the cached defaults.
"""

import asyncio
import functools

import cppconfig.compiler
import cppconfig.jobs
from cppconfig.compile_config import FileType
from cppconfig.utils import OrderedSet


class CompilerCache:
    def __init__(self, build_config, overrides=None, runner=None, jobs=None, verbose=0):
        self.build_config = build_config
        self._overrides = overrides
        self._runner = runner
        self._jobs = jobs if jobs else cppconfig.jobs.cpu_count()
        self._verbose = verbose
        self._compilers = {}
        self._pending = {}
        self._semaphore = None
        self._semaphore_loop = None

    @staticmethod
    def _key(srcdir, filetype):
        return (srcdir, FileType(filetype))

    def _limit(self):
        # A semaphore belongs to the event loop it is used in
        loop = asyncio.get_running_loop()
        if self._semaphore is None or self._semaphore_loop is not loop:
            self._semaphore = asyncio.Semaphore(self._jobs)
            self._semaphore_loop = loop
        return self._semaphore

    async def _limited(self, probe):
        async with self._limit():
            return await probe

    async def get_compiler(self, srcdir, command, filetype):
        """The Compiler for srcdir and filetype, probing on first use.

        Concurrent requests for the same pair share the one probe.  A failed
        probe is not remembered so asking again will probe again.
        """
        key = self._key(srcdir, filetype)
        try:
            return self._compilers[key]
        except KeyError:
            pass

        task = self._pending.get(key)
        if task is None:
            # Bad configuration raises here, before anything is scheduled
            probe = cppconfig.compiler.create(
                srcdir,
                command,
                filetype,
                self.build_config,
                overrides=self._overrides,
                runner=self._runner,
                verbose=self._verbose,
            )
            task = asyncio.ensure_future(self._limited(probe))
            task.add_done_callback(functools.partial(self._probe_done, key))
            self._pending[key] = task

        # One impatient caller must not cancel the probe for the others
        return await asyncio.shield(task)

    def _probe_done(self, key, task):
        if self._pending.get(key) is task:
            del self._pending[key]
        if task.cancelled() or task.exception() is not None:
            return
        self._compilers[key] = task.result()

    async def get_compilers(self, requests):
        """Probe each (srcdir, command, filetype) in requests concurrently.

        Returns a list in the same order holding either the Compiler or the
        exception that stopped it from being created.
        """
        return await asyncio.gather(
            *(self.get_compiler(*request) for request in requests),
            return_exceptions=True,
        )

    async def get_source_configuration(self, srcdir, command, filetype, cmdline):
        """The configuration for one source file built with cmdline"""
        compiler = await self.get_compiler(srcdir, command, filetype)
        return compiler.get_configuration(cmdline)

    def compilers(self):
        return list(self._compilers.values())

    def browse_path(self):
        """Every include path known to any of the compilers"""
        paths = OrderedSet()
        for compiler in self._compilers.values():
            paths.update(compiler.get_include_paths())
        return list(paths)

    def forget(self, srcdir):
        """Drop the compilers for srcdir, for example after its build changed"""
        for key in [key for key in self._compilers if key[0] == srcdir]:
            del self._compilers[key]
        if self._verbose >= 2:
            print("Forgot compilers for " + srcdir)

    def to_state(self):
        return [compiler.to_state() for compiler in self._compilers.values()]
