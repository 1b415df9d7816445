"""Command-line option parsing for proctor.

The parser turns raw tokens (from the command line, an options file or
``PROCTOR_OPTS``) into a plain options mapping. Flags that select a run mode
record an :class:`InvocationKind` under the ``runner`` key; the last such flag
wins, so ``--bisect --help`` prints the help listing.
"""

from __future__ import annotations

import argparse
import enum
import typing as typ

from .errors import OptionParserError

PROG = "proctor"
USAGE = f"{PROG} [options] [files or directories]"
# Registered so they fail loudly, hidden from the help listing.
INVALID_OPTIONS: tuple[str, ...] = ("-d", "--I")
BISECT_VERBOSE = "verbose"


class InvocationKind(enum.Enum):
    """Run modes the command line can select."""

    INITIALIZE_PROJECT = "init"
    DRB_WITH_FALLBACK = "drb"
    BISECT = "bisect"
    PRINT_VERSION = "version"
    PRINT_HELP = "help"


class _ParseError(Exception):
    """Carry argparse failures out of the parser without exiting."""


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> typ.NoReturn:
        raise _ParseError(message)


class _RejectOptionAction(argparse.Action):
    def __call__(
        self,
        parser: argparse.ArgumentParser,
        namespace: argparse.Namespace,
        values: object,
        option_string: str | None = None,
    ) -> None:
        parser.error(f"invalid option: {option_string}")


class _BisectAction(argparse.Action):
    """Record ``--bisect[=verbose]``; any other value is a path to run."""

    def __call__(
        self,
        parser: argparse.ArgumentParser,
        namespace: argparse.Namespace,
        values: object,
        option_string: str | None = None,
    ) -> None:
        namespace.runner = InvocationKind.BISECT
        if values == BISECT_VERBOSE:
            namespace.bisect = BISECT_VERBOSE
            return
        namespace.bisect = True
        if isinstance(values, str):
            namespace.trailing_paths.append(values)


class _DrbAction(argparse.BooleanOptionalAction):
    def __call__(
        self,
        parser: argparse.ArgumentParser,
        namespace: argparse.Namespace,
        values: object,
        option_string: str | None = None,
    ) -> None:
        super().__call__(parser, namespace, values, option_string)
        if getattr(namespace, self.dest):
            namespace.runner = InvocationKind.DRB_WITH_FALLBACK


def build_parser(
    invalid_options: typ.Sequence[str] = INVALID_OPTIONS,
) -> argparse.ArgumentParser:
    """Return the argparse parser describing every proctor option."""
    parser = _ArgumentParser(
        prog=PROG,
        usage=USAGE,
        add_help=False,
        allow_abbrev=False,
    )
    parser.add_argument(
        "files_or_directories_to_run",
        nargs="*",
        metavar="PATH",
        help="Test files or directories to run (defaults to the test paths).",
    )
    parser.add_argument(
        "-O",
        "--options",
        dest="custom_options_file",
        metavar="PATH",
        help="Use PATH instead of ./.proctor.yaml as the project options file.",
    )
    parser.add_argument(
        "-e",
        "--example",
        dest="full_description",
        action="append",
        metavar="PATTERN",
        help="Run examples whose names match PATTERN (may be repeated).",
    )
    parser.add_argument(
        "--fail-fast",
        action="store_true",
        default=None,
        help="Abort the run on the first failure.",
    )
    parser.add_argument(
        "--bisect",
        action=_BisectAction,
        nargs="?",
        metavar=BISECT_VERBOSE,
        help=(
            "Repeatedly runs the suite in order to isolate the failures to the "
            "smallest reproducible case."
        ),
    )
    parser.add_argument(
        "--init",
        dest="runner",
        action="store_const",
        const=InvocationKind.INITIALIZE_PROJECT,
        help="Initialize your project with proctor.",
    )
    parser.add_argument(
        "-X",
        "--drb",
        action=_DrbAction,
        help="Run examples via DRb.",
    )
    parser.add_argument(
        "--drb-port",
        type=int,
        metavar="PORT",
        help="Port to connect to the DRb server.",
    )
    parser.add_argument(
        "-v",
        "--version",
        dest="runner",
        action="store_const",
        const=InvocationKind.PRINT_VERSION,
        help="Display the version.",
    )
    parser.add_argument(
        "-h",
        "--help",
        dest="runner",
        action="store_const",
        const=InvocationKind.PRINT_HELP,
        help="You're looking at it.",
    )
    for option in invalid_options:
        parser.add_argument(option, action=_RejectOptionAction, nargs=0)
    parser.set_defaults(runner=None)
    return parser


class OptionParser:
    """Parse proctor tokens into an options mapping."""

    def __init__(self, invalid_options: typ.Sequence[str] = INVALID_OPTIONS) -> None:
        """Build the underlying parser, rejecting ``invalid_options``."""
        self.invalid_options = tuple(invalid_options)
        self._parser = build_parser(self.invalid_options)

    def format_help(self) -> str:
        """Return the full usage listing, hidden options included."""
        return self._parser.format_help()

    def parse(
        self,
        args: typ.Sequence[str],
        source: str | None = None,
    ) -> dict[str, typ.Any]:
        """Return the options encoded by ``args``.

        ``source`` names where the tokens came from and is quoted in the error
        raised for an invalid option.
        """
        if not args:
            return {"files_or_directories_to_run": []}

        namespace = argparse.Namespace(trailing_paths=[])
        try:
            self._parser.parse_intermixed_args(list(args), namespace)
        except _ParseError as error:
            raise OptionParserError(str(error), source) from error

        values = vars(namespace)
        paths = [
            *values.pop("files_or_directories_to_run"),
            *values.pop("trailing_paths"),
        ]
        options = {key: value for key, value in values.items() if value is not None}
        options["files_or_directories_to_run"] = paths
        return options
