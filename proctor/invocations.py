"""The run modes the proctor command line can select.

Each invocation exposes ``call(configuration_options, err, out)`` and returns
the process exit code. The set is closed: :func:`select_invocation` maps every
:class:`~proctor.option_parser.InvocationKind` onto exactly one of them.
"""

from __future__ import annotations

import logging
import typing as typ

from . import version
from .bisect.coordinator import Coordinator
from .configuration import Configuration, configuration
from .drb import DRbRunner
from .errors import DRbConnectionError
from .formatters import BisectDebugFormatter, BisectProgressFormatter
from .help_text import filter_help_text
from .option_parser import BISECT_VERBOSE, InvocationKind
from .project_initializer import ProjectInitializer
from .runner import Runner

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .configuration_options import ConfigurationOptions

_logger = logging.getLogger(__name__)

DRB_FALLBACK_MESSAGE = "No DRb server is running. Running in local process instead ..."


class HelpSource(typ.Protocol):
    """Anything that can render a usage listing."""

    def format_help(self) -> str:
        """Return the usage listing."""
        ...


class Invocation(typ.Protocol):
    """A run mode selected from the command line."""

    def call(
        self,
        configuration_options: ConfigurationOptions,
        err: typ.IO[str],
        out: typ.IO[str],
    ) -> int:
        """Run and return the exit code."""
        ...


class InitializeProject:
    """Scaffold the current project."""

    def call(
        self,
        configuration_options: ConfigurationOptions,
        err: typ.IO[str],
        out: typ.IO[str],
    ) -> int:
        """Run the project initializer; always succeeds."""
        ProjectInitializer(stream=out).run()
        return 0


class DRbWithFallback:
    """Run through a DRb server, or locally when none is running."""

    def call(
        self,
        configuration_options: ConfigurationOptions,
        err: typ.IO[str],
        out: typ.IO[str],
    ) -> int:
        """Return the exit code of the remote run, or of the local fallback."""
        try:
            return DRbRunner(configuration_options).run(err, out)
        except DRbConnectionError as error:
            _logger.debug("Falling back to a local run: %s", error)
            err.write(f"{DRB_FALLBACK_MESSAGE}\n")

        # Outside the handler so failures here are not chained to the
        # connection error.
        return Runner(configuration_options).run(err, out)


class Bisect:
    """Isolate the minimal set of examples that reproduces the failures."""

    def __init__(self, config: Configuration | None = None) -> None:
        """Use ``config`` as the test configuration handed to the coordinator."""
        self.configuration = config or configuration()

    def call(
        self,
        configuration_options: ConfigurationOptions,
        err: typ.IO[str],
        out: typ.IO[str],
    ) -> int:
        """Return 0 when a reproduction was found, 1 otherwise."""
        formatter_class = self._formatter_class_for(
            configuration_options.options.get("bisect")
        )
        success = Coordinator.bisect_with(
            configuration_options.args,
            self.configuration,
            formatter_class,
        )
        return 0 if success else 1

    @staticmethod
    def _formatter_class_for(argument: object) -> type[BisectProgressFormatter]:
        if argument == BISECT_VERBOSE:
            return BisectDebugFormatter
        return BisectProgressFormatter


class PrintVersion:
    """Print the proctor version."""

    def call(
        self,
        configuration_options: ConfigurationOptions,
        err: typ.IO[str],
        out: typ.IO[str],
    ) -> int:
        """Write the version string; always succeeds."""
        out.write(f"{version.VERSION}\n")
        return 0


class PrintHelp:
    """Print the usage listing without the hidden options."""

    def __init__(self, parser: HelpSource, hidden_options: cabc.Sequence[str]) -> None:
        """Render ``parser``'s listing, dropping ``hidden_options``."""
        self.parser = parser
        self.hidden_options = tuple(hidden_options)

    def call(
        self,
        configuration_options: ConfigurationOptions,
        err: typ.IO[str],
        out: typ.IO[str],
    ) -> int:
        """Write the filtered listing; always succeeds."""
        out.write(filter_help_text(self.parser.format_help(), self.hidden_options))
        return 0


def select_invocation(
    configuration_options: ConfigurationOptions,
    *,
    parser: HelpSource | None = None,
    invalid_options: cabc.Sequence[str] | None = None,
    config: Configuration | None = None,
) -> Invocation | None:
    """Return the invocation the options ask for, or None for a plain run.

    Help hides the options rejected by the parser that produced
    ``configuration_options`` unless ``invalid_options`` overrides them.
    """
    kind: InvocationKind | None = configuration_options.options.get("runner")
    _logger.debug("Selected invocation %s", kind)
    match kind:
        case None:
            return None
        case InvocationKind.INITIALIZE_PROJECT:
            return InitializeProject()
        case InvocationKind.DRB_WITH_FALLBACK:
            return DRbWithFallback()
        case InvocationKind.BISECT:
            return Bisect(config)
        case InvocationKind.PRINT_VERSION:
            return PrintVersion()
        case InvocationKind.PRINT_HELP:
            if invalid_options is None:
                invalid_options = configuration_options.parser.invalid_options
            return PrintHelp(parser or configuration_options.parser, invalid_options)
        case _:
            typ.assert_never(kind)
