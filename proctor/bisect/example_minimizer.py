"""Reduce the non-failing examples to those the failures depend on."""

from __future__ import annotations

import time
import typing as typ

from proctor.errors import BisectFailedError

from .models import Reproduction

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from proctor.formatters import BisectProgressFormatter

    from .models import ExampleResults
    from .shell_runner import ShellRunner

ERROR_NO_FAILURES = (
    "No failures found. Bisect only works in the presence of one or more "
    "failing examples."
)
ERROR_NOT_REPRODUCIBLE = (
    "The reduced set of examples no longer reproduces the failures. They may "
    "be flaky or depend on state outside the suite."
)


class ExampleMinimizer:
    """Bisect the non-failing examples that run before the failures.

    A half of the candidates is dropped whenever the expected failures still
    fail without it; when neither half can be dropped both are bisected in
    turn.
    """

    def __init__(
        self,
        runner: ShellRunner,
        formatter: BisectProgressFormatter,
    ) -> None:
        """Bind the minimizer to its shell runner and formatter."""
        self._runner = runner
        self._formatter = formatter
        self._all_ids: tuple[str, ...] = ()
        self._failed_ids: tuple[str, ...] = ()
        self._remaining_ids: list[str] = []
        self._round = 0

    def find_minimal_repro(self) -> Reproduction:
        """Return the smallest reproduction found."""
        started = time.perf_counter()
        candidates = self._prepare()
        original_count = len(self._remaining_ids)

        self._formatter.bisect_dependency_check_started()
        if self._reproduces([]):
            self._formatter.bisect_dependency_check_failed()
            self._remaining_ids = []
        else:
            self._formatter.bisect_dependency_check_passed()
            self._remaining_ids = list(candidates)
            self._bisect_over(candidates)
            if not self._reproduces(self._remaining_ids):
                raise BisectFailedError(ERROR_NOT_REPRODUCIBLE)

        return Reproduction(
            command=self._runner.repro_command_from(
                self._ordered([*self._remaining_ids, *self._failed_ids])
            ),
            original_count=original_count,
            reduced_count=len(self._remaining_ids),
            duration=time.perf_counter() - started,
        )

    def _prepare(self) -> list[str]:
        self._formatter.bisect_started(self._runner.original_cli_args)
        started = time.perf_counter()
        results = self._runner.original_results()
        self._all_ids = results.all_example_ids
        self._failed_ids = results.failed_example_ids
        if not self._failed_ids:
            raise BisectFailedError(ERROR_NO_FAILURES)

        non_failing = [
            example_id
            for example_id in self._all_ids
            if example_id not in self._failed_ids
        ]
        self._remaining_ids = non_failing
        self._formatter.bisect_original_run_complete(
            self._failed_ids, non_failing, time.perf_counter() - started
        )
        last_failure = max(
            (self._all_ids.index(i) for i in self._failed_ids if i in self._all_ids),
            default=len(self._all_ids),
        )
        return [
            example_id
            for example_id in self._all_ids[:last_failure]
            if example_id not in self._failed_ids
        ]

    def _bisect_over(self, candidates: list[str]) -> None:
        if len(candidates) <= 1:
            return

        self._round += 1
        self._formatter.bisect_round_started(self._round, len(candidates))
        slice_size = (len(candidates) + 1) // 2
        lhs, rhs = candidates[:slice_size], candidates[slice_size:]

        started = time.perf_counter()
        ignored = next(
            (
                half
                for half in (lhs, rhs)
                if self._reproduces([i for i in self._remaining_ids if i not in half])
            ),
            None,
        )
        duration = time.perf_counter() - started

        if ignored is None:
            self._formatter.bisect_round_detected_multiple_culprits(duration)
            self._bisect_over(lhs)
            self._bisect_over(rhs)
            return

        self._remaining_ids = [i for i in self._remaining_ids if i not in ignored]
        first = candidates.index(ignored[0]) + 1
        self._formatter.bisect_round_ignoring_ids(
            ignored,
            (first, first + len(ignored) - 1),
            self._remaining_ids,
            duration,
        )
        self._bisect_over([i for i in candidates if i not in ignored])

    def _reproduces(self, ids: cabc.Sequence[str]) -> bool:
        ids_to_run = self._ordered([*ids, *self._failed_ids])
        self._formatter.bisect_individual_run_start(
            self._runner.repro_command_from(ids_to_run), ids_to_run
        )
        started = time.perf_counter()
        results: ExampleResults = self._runner.run(ids_to_run)
        self._formatter.bisect_individual_run_complete(
            results, time.perf_counter() - started
        )
        return set(self._failed_ids) <= set(results.failed_example_ids)

    def _ordered(self, ids: cabc.Iterable[str]) -> list[str]:
        wanted = list(dict.fromkeys(ids))
        known = [example_id for example_id in self._all_ids if example_id in wanted]
        return known + [i for i in wanted if i not in self._all_ids]
