"""
Command-line interface for craftc.

This module provides the `craftc` CLI tool. Each subcommand turns its
arguments into a BuildConfig, hands it to one builder, and maps the outcome
to an exit code.
"""

import argparse
import os
import sys
from pathlib import Path
from typing import List, Optional

from craftc import __version__
from craftc.build import (
    BuildConfig,
    BuildError,
    ExecutableBuilder,
    IBuilder,
    ObjectBuilder,
    ObjectSetBuilder,
    StaticLibraryBuilder,
)
from craftc.cli_utils import ErrorFormatter, IgnoredArgsReporter, configure_logging

PROG = "craftc"
COMMANDS = ("obj", "objs", "static-lib", "exe")

# Long options taking a value that may itself begin with a dash (--ldflags -lm)
VALUE_OPTIONS = frozenset({
    "--cc",
    "--objdir",
    "--cflags",
    "--cfile",
    "--cfiles",
    "--lib-path",
    "--ar",
    "--exe-path",
    "--lib-paths",
    "--ldflags",
    "--jobs",
})
GLOBAL_SHORT_FLAGS = "vif"


def _add_global_flags(parser: argparse.ArgumentParser, default) -> None:
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=default,
        help="Enable verbose output",
    )
    parser.add_argument(
        "-i",
        "--ignore",
        action="store_true",
        default=default,
        help="Ignore unknown commands and flags",
    )
    parser.add_argument(
        "-f",
        "--force",
        action="store_true",
        default=default,
        help="Force a complete build",
    )


def _add_common_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--cc", required=True, help="C compiler")
    parser.add_argument("--objdir", required=True, type=Path, help="Output object directory")
    parser.add_argument("--cflags", default="", help="Additional compiler flags")


def _add_jobs_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-j",
        "--jobs",
        type=int,
        default=None,
        help="Maximum parallel compiler processes (default: CPU count)",
    )


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser for all subcommands."""
    parser = argparse.ArgumentParser(
        prog=PROG,
        description="A fast, minimal C build tool",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"{PROG} {__version__}",
    )
    _add_global_flags(parser, default=False)

    # Global flags are also accepted after the subcommand; SUPPRESS keeps the
    # subparser from resetting values given before it.
    global_flags = argparse.ArgumentParser(add_help=False)
    _add_global_flags(global_flags, default=argparse.SUPPRESS)

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    obj_parser = subparsers.add_parser(
        "obj",
        parents=[global_flags],
        help="Compile a single source file to object file",
    )
    _add_common_flags(obj_parser)
    obj_parser.add_argument("--cfile", required=True, help="C source file")

    objs_parser = subparsers.add_parser(
        "objs",
        parents=[global_flags],
        help="Compile multiple source files to object files",
    )
    _add_common_flags(objs_parser)
    objs_parser.add_argument(
        "--cfiles", required=True, help="Space-separated list of C source files"
    )
    _add_jobs_flag(objs_parser)

    lib_parser = subparsers.add_parser(
        "static-lib",
        parents=[global_flags],
        help="Build a static library from multiple source files",
    )
    _add_common_flags(lib_parser)
    lib_parser.add_argument(
        "--cfiles", required=True, help="Space-separated list of C source files"
    )
    lib_parser.add_argument("--lib-path", required=True, type=Path, help="Library path")
    lib_parser.add_argument(
        "--ar",
        default=os.environ.get("AR", "ar"),
        help="Archiver (default: $AR or ar)",
    )
    _add_jobs_flag(lib_parser)

    exe_parser = subparsers.add_parser(
        "exe",
        parents=[global_flags],
        help="Build an application binary from source files and libraries",
    )
    _add_common_flags(exe_parser)
    exe_parser.add_argument(
        "--cfiles", required=True, help="Space-separated list of C source files"
    )
    exe_parser.add_argument("--exe-path", required=True, type=Path, help="Executable path")
    exe_parser.add_argument(
        "--lib-paths", default="", help="Space-separated list of library paths"
    )
    exe_parser.add_argument("--ldflags", default="", help="Additional linker flags")
    _add_jobs_flag(exe_parser)

    return parser


def make_config(args: argparse.Namespace) -> BuildConfig:
    """Build the per-command configuration from parsed arguments."""
    kwargs = {}
    if getattr(args, "jobs", None) is not None:
        kwargs["jobs"] = args.jobs
    if getattr(args, "ar", None):
        kwargs["ar"] = args.ar
    return BuildConfig(
        cc=args.cc,
        objdir=args.objdir,
        cflags=args.cflags,
        force=args.force,
        **kwargs,
    )


def make_builder(args: argparse.Namespace, config: BuildConfig) -> IBuilder:
    """Select the builder for the parsed subcommand."""
    if args.command == "obj":
        return ObjectBuilder(config, args.cfile)
    if args.command == "objs":
        return ObjectSetBuilder(config, args.cfiles)
    if args.command == "static-lib":
        return StaticLibraryBuilder(config, args.cfiles, args.lib_path)
    if args.command == "exe":
        return ExecutableBuilder(
            config,
            args.cfiles,
            args.exe_path,
            lib_paths=args.lib_paths,
            ldflags=args.ldflags,
        )
    raise ValueError(f"Unknown command: {args.command}")


def run_command(args: argparse.Namespace) -> int:
    """Run the parsed subcommand and return the process exit code."""
    config = None
    try:
        config = make_config(args)
        builder = make_builder(args, config)
        result = builder.run()
    except KeyboardInterrupt:
        if config is not None:
            config.cancel.cancel()
        ErrorFormatter.handle_keyboard_interrupt()
    except BuildError as e:
        ErrorFormatter.print_failure(PROG, args.command, e, args.verbose)
        return 1

    if args.verbose:
        if result.built:
            ErrorFormatter.print_success(f"Built {result.output_path}")
        else:
            ErrorFormatter.print_success(f"{result.output_path} is up to date")
    return 0


def attach_option_values(argv: List[str]) -> List[str]:
    """Bind each value option to the token after it, as --opt=value.

    argparse refuses a separate value that starts with a dash, which rules
    out the common `--ldflags -lm` and `--cflags -O2` spellings.
    """
    result = []
    tokens = iter(argv)
    for token in tokens:
        if token in VALUE_OPTIONS:
            value = next(tokens, None)
            if value is not None:
                token = f"{token}={value}"
        result.append(token)
    return result


def ignore_requested(argv: List[str]) -> bool:
    """Whether -i/--ignore appears, alone or combined like -vi."""
    for token in argv:
        if token == "--ignore":
            return True
        if token.startswith("-") and not token.startswith("--"):
            letters = token[1:]
            if "i" in letters and all(c in GLOBAL_SHORT_FLAGS for c in letters):
                return True
    return False


def split_unknown_commands(argv: List[str]):
    """Remove words before the subcommand that name no known command.

    Returns:
        Tuple of (remaining argv, removed words)
    """
    kept: List[str] = []
    dropped: List[str] = []
    for index, token in enumerate(argv):
        if token in COMMANDS:
            return kept + argv[index:], dropped
        if token.startswith("-"):
            kept.append(token)
        else:
            dropped.append(token)
    return kept, dropped


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse argv, dropping unknown commands and flags when -i/--ignore is given."""
    if argv is None:
        argv = sys.argv[1:]
    parser = build_parser()
    argv = attach_option_values(list(argv))

    if ignore_requested(argv):
        argv, dropped = split_unknown_commands(argv)
        args, ignored = parser.parse_known_args(argv)
        IgnoredArgsReporter.report(dropped + ignored, args.verbose)
    else:
        args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(0)
    return args


def main(argv: Optional[List[str]] = None) -> None:
    """craftc - incremental build driver for C projects.

    Examples:
        craftc obj --cc gcc --objdir build --cfile main.c
        craftc objs --cc gcc --objdir build --cfiles "a.c b.c"
        craftc static-lib --cc gcc --objdir build --cfiles "a.c b.c" --lib-path libab.a
        craftc -f exe --cc gcc --objdir build --cfiles main.c --exe-path app --lib-paths libab.a
    """
    args = parse_args(argv)
    configure_logging(args.verbose)
    sys.exit(run_command(args))


if __name__ == "__main__":
    main()
