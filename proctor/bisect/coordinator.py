"""Wire the shell runner, minimizer and formatter together for a bisect."""

from __future__ import annotations

import logging
import typing as typ

from proctor.errors import BisectFailedError

from .example_minimizer import ExampleMinimizer
from .shell_runner import ShellRunner

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from proctor.configuration import Configuration
    from proctor.formatters import BisectProgressFormatter

_logger = logging.getLogger(__name__)


class Coordinator:
    """Run a bisect and report its outcome through a formatter."""

    def __init__(
        self,
        runner: ShellRunner,
        formatter: BisectProgressFormatter,
    ) -> None:
        """Bind the coordinator to its runner and formatter."""
        self._runner = runner
        self._formatter = formatter

    @classmethod
    def bisect_with(
        cls,
        original_args: cabc.Sequence[str],
        configuration: Configuration,
        formatter_class: type[BisectProgressFormatter],
    ) -> bool:
        """Bisect the suite described by ``original_args``.

        Returns True when a minimal reproduction was found and False when the
        bisect had to give up.
        """
        formatter = formatter_class(configuration.output_stream)
        runner = ShellRunner(original_args, configuration)
        return cls(runner, formatter).bisect()

    def bisect(self) -> bool:
        """Find and publish the minimal reproduction command."""
        minimizer = ExampleMinimizer(self._runner, self._formatter)
        try:
            reproduction = minimizer.find_minimal_repro()
        except BisectFailedError as error:
            _logger.debug("Bisect failed: %s", error)
            self._formatter.bisect_failed(str(error))
            return False
        self._formatter.bisect_repro_command(reproduction)
        return True
