"""
Unit tests for ExecutableBuilder.

Tests linking objects and libraries into an executable.
"""

import pytest

from craftc.build import (
    BuildConfig,
    CompileError,
    ExecutableBuilder,
    InvalidInputError,
    LinkError,
    MissingInputError,
)


class TestExecutableBuilder:
    """Test suite for ExecutableBuilder."""

    @pytest.fixture
    def objdir(self, tmp_path):
        return tmp_path / 'obj'

    @pytest.fixture
    def exe_path(self, tmp_path):
        return tmp_path / 'bin' / 'app'

    @pytest.fixture
    def config(self, toolchain, objdir):
        return BuildConfig(cc=toolchain.cc, objdir=objdir, cflags='-O2')

    @pytest.fixture
    def library(self, tmp_path, age):
        lib = tmp_path / 'libdep.a'
        lib.write_text('ARCHIVE')
        age(lib, 200)
        return lib

    @pytest.fixture
    def sources(self, write_source):
        return [write_source('main.c'), write_source('util.c')]

    def test_build_command(self, config, objdir, exe_path, library):
        """Test link command ordering: objects, libraries, then ldflags."""
        builder = ExecutableBuilder(
            config, 'main.c', exe_path, lib_paths=str(library), ldflags='-lm -static'
        )

        cmd = builder.build_command([objdir / 'main.o'])

        assert cmd == [
            config.cc, '-O2', '-o', str(exe_path), str(objdir / 'main.o'), str(library), '-lm', '-static'
        ]

    def test_empty_exe_path_rejected(self, config):
        """Test that a blank executable path is invalid."""
        with pytest.raises(InvalidInputError):
            ExecutableBuilder(config, 'main.c', ' ')

    def test_first_build(self, config, toolchain, sources, objdir, exe_path, library):
        """Test objects are compiled and linked with the library."""
        result = ExecutableBuilder(config, sources, exe_path, lib_paths=str(library)).run()

        assert result.built is True
        assert result.output_path == exe_path
        assert result.outputs == (objdir / 'main.o', objdir / 'util.o')
        assert toolchain.count('cc') == 3
        link = toolchain.invocations('cc')[-1]
        assert f'-o {exe_path}' in link
        assert link.endswith(str(library))
        assert exe_path.read_text() == f'EXE {objdir / "main.o"} {objdir / "util.o"} {library}'

    def test_no_libraries_is_valid(self, config, toolchain, sources, exe_path):
        """Test an empty library list links objects only."""
        result = ExecutableBuilder(config, sources, exe_path, lib_paths='').run()

        assert result.built is True
        assert exe_path.exists()

    def test_idempotent(self, config, toolchain, sources, exe_path, library):
        """Test a second run performs zero subprocess invocations."""
        ExecutableBuilder(config, sources, exe_path, lib_paths=str(library)).run()
        toolchain.reset()

        result = ExecutableBuilder(config, sources, exe_path, lib_paths=str(library)).run()

        assert result.built is False
        assert toolchain.count() == 0

    def test_rebuilt_library_triggers_relink(
        self, config, toolchain, sources, objdir, exe_path, library, age
    ):
        """Test a newer library relinks without recompiling."""
        ExecutableBuilder(config, sources, exe_path, lib_paths=str(library)).run()
        for path in (objdir / 'main.o', objdir / 'util.o', exe_path):
            age(path, 100)
        age(library, 50)
        toolchain.reset()

        result = ExecutableBuilder(config, sources, exe_path, lib_paths=str(library)).run()

        assert result.built is True
        assert result.built_count == 0
        assert toolchain.count('cc') == 1
        assert '-c' not in toolchain.invocations('cc')[0].split()

    def test_edited_source_recompiles_and_relinks(
        self, config, toolchain, sources, objdir, exe_path, age
    ):
        """Test touching one source rebuilds exactly its object and the executable."""
        ExecutableBuilder(config, sources, exe_path).run()
        for path in (objdir / 'main.o', objdir / 'util.o', exe_path):
            age(path, 100)
        age(sources[1], 50)
        toolchain.reset()

        result = ExecutableBuilder(config, sources, exe_path).run()

        assert result.built_count == 1
        invocations = toolchain.invocations('cc')
        assert len(invocations) == 2
        assert invocations[0].endswith(str(sources[1]))

    def test_missing_library(self, config, toolchain, sources, exe_path, tmp_path):
        """Test a missing library fails before the link step."""
        with pytest.raises(MissingInputError) as exc_info:
            ExecutableBuilder(
                config, sources, exe_path, lib_paths=str(tmp_path / 'libnone.a')
            ).run()

        assert exc_info.value.path.name == 'libnone.a'
        assert all('-c' in line.split() for line in toolchain.invocations('cc'))
        assert not exe_path.exists()

    def test_link_error(self, config, sources, exe_path):
        """Test linker failure raises LinkError with diagnostics."""
        with pytest.raises(LinkError) as exc_info:
            ExecutableBuilder(config, sources, exe_path, ldflags='-lfail').run()

        assert exc_info.value.returncode == 1
        assert 'undefined reference' in exc_info.value.stderr
        assert '-lfail' in exc_info.value.cmd

    def test_compile_failure_skips_link(self, config, toolchain, write_source, exe_path):
        """Test a failing object aborts before linking."""
        sources = [write_source('main.c'), write_source('bad.c', '#error\n')]

        with pytest.raises(CompileError):
            ExecutableBuilder(config, sources, exe_path).run()

        assert all('-c' in line.split() for line in toolchain.invocations('cc'))
        assert not exe_path.exists()

    def test_force(self, toolchain, sources, objdir, exe_path):
        """Test force recompiles and relinks."""
        ExecutableBuilder(BuildConfig(cc=toolchain.cc, objdir=objdir), sources, exe_path).run()
        toolchain.reset()

        forced = BuildConfig(cc=toolchain.cc, objdir=objdir, force=True)
        result = ExecutableBuilder(forced, sources, exe_path).run()

        assert result.built is True
        assert toolchain.count('cc') == 3
