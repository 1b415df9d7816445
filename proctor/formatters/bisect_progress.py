"""Report bisect progress to the configured output stream.

The minimizer notifies the formatter as it goes; the progress formatter
keeps the output compact (a dot per run), the debug formatter lists every
command and its results.
"""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from proctor.bisect.models import ExampleResults, Reproduction


def _pluralize(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def _seconds(duration: float) -> str:
    return f"{duration:.2f} seconds"


def _example_range(first: int, last: int) -> str:
    return f"example {first}" if first == last else f"examples {first}-{last}"


class BisectProgressFormatter:
    """Write a terse account of the bisect to ``output``."""

    def __init__(self, output: typ.IO[str]) -> None:
        """Bind the formatter to its output stream."""
        self.output = output

    def _write(self, text: str) -> None:
        self.output.write(text)
        self.output.flush()

    def bisect_started(self, original_cli_args: cabc.Sequence[str]) -> None:
        """Announce the bisect and the options it was started with."""
        options = " ".join(original_cli_args)
        self._write(f'Bisect started using options: "{options}"\n')
        self._write("Running suite to find failures...")

    def bisect_original_run_complete(
        self,
        failed_example_ids: cabc.Sequence[str],
        non_failing_example_ids: cabc.Sequence[str],
        duration: float,
    ) -> None:
        """Summarise the initial full run."""
        failures = _pluralize(len(failed_example_ids), "failing example")
        non_failures = _pluralize(len(non_failing_example_ids), "non-failing example")
        self._write(f" ({_seconds(duration)})\n")
        self._write(f"Starting bisect with {failures} and {non_failures}.\n")

    def bisect_dependency_check_started(self) -> None:
        """Announce the order-dependence check."""
        self._write("Checking that failure(s) are order-dependent..")

    def bisect_dependency_check_passed(self) -> None:
        """Report that the failures need other examples to run first."""
        self._write(" failure appears to be order-dependent\n")

    def bisect_dependency_check_failed(self) -> None:
        """Report that the failures reproduce on their own."""
        self._write(" failure(s) do not require any non-failures to run first\n")

    def bisect_round_started(self, round_number: int, candidates_count: int) -> None:
        """Announce a bisect round over ``candidates_count`` examples."""
        span = _example_range(1, candidates_count)
        self._write(f"\nRound {round_number}: bisecting over non-failing {span}")

    def bisect_individual_run_start(
        self,
        command: str,
        ids_to_run: cabc.Sequence[str],
    ) -> None:
        """Mark the start of a single subprocess run."""

    def bisect_individual_run_complete(
        self,
        results: ExampleResults,
        duration: float,
    ) -> None:
        """Mark the end of a single subprocess run."""
        self._write(".")

    def bisect_round_ignoring_ids(
        self,
        ids_to_ignore: cabc.Sequence[str],
        ignore_range: tuple[int, int],
        remaining_ids: cabc.Sequence[str],
        duration: float,
    ) -> None:
        """Report the half of the candidates that turned out to be irrelevant."""
        span = _example_range(*ignore_range)
        self._write(f" ignoring {span} ({_seconds(duration)})")

    def bisect_round_detected_multiple_culprits(self, duration: float) -> None:
        """Report that both halves are needed to reproduce the failures."""
        self._write(
            f" multiple culprits detected - splitting candidates ({_seconds(duration)})"
        )

    def bisect_repro_command(self, reproduction: Reproduction) -> None:
        """Print the minimal reproduction command."""
        self._write(
            "\n\nBisect complete! Reduced necessary non-failing examples from "
            f"{reproduction.original_count} to {reproduction.reduced_count} "
            f"in {_seconds(reproduction.duration)}.\n"
        )
        self._write(
            f"\nThe minimal reproduction command is:\n  {reproduction.command}\n"
        )

    def bisect_failed(self, failure_explanation: str) -> None:
        """Explain why the bisect gave up."""
        self._write(f"\n\nBisect aborted!\n\n{failure_explanation.strip()}\n")


class BisectDebugFormatter(BisectProgressFormatter):
    """Progress formatter that also lists every run and its results."""

    def bisect_original_run_complete(
        self,
        failed_example_ids: cabc.Sequence[str],
        non_failing_example_ids: cabc.Sequence[str],
        duration: float,
    ) -> None:
        """Summarise the initial run and list the ids on both sides."""
        super().bisect_original_run_complete(
            failed_example_ids, non_failing_example_ids, duration
        )
        self._write_ids("Failing examples", failed_example_ids)
        self._write_ids("Non-failing examples", non_failing_example_ids)

    def bisect_individual_run_start(
        self,
        command: str,
        ids_to_run: cabc.Sequence[str],
    ) -> None:
        """Print the command about to run."""
        self._write(f"\n - Running: {command}")

    def bisect_individual_run_complete(
        self,
        results: ExampleResults,
        duration: float,
    ) -> None:
        """Print the failures observed by the run."""
        self._write(f" ({_seconds(duration)})\n")
        self._write_ids("    - Failures", results.failed_example_ids)

    def bisect_round_ignoring_ids(
        self,
        ids_to_ignore: cabc.Sequence[str],
        ignore_range: tuple[int, int],
        remaining_ids: cabc.Sequence[str],
        duration: float,
    ) -> None:
        """Report the ignored half along with the ids that remain."""
        super().bisect_round_ignoring_ids(
            ids_to_ignore, ignore_range, remaining_ids, duration
        )
        self._write("\n")
        self._write_ids("    - Examples we can safely ignore", ids_to_ignore)
        self._write_ids("    - Remaining non-failing examples", remaining_ids)

    def _write_ids(self, label: str, ids: cabc.Sequence[str]) -> None:
        listing = ", ".join(ids) if ids else "(none)"
        self._write(f"{label} ({len(ids)}): {listing}\n")
