"""Value objects shared by the bisect runner, minimizer and formatters."""

from __future__ import annotations

import dataclasses


@dataclasses.dataclass(frozen=True, slots=True)
class ExampleResults:
    """Example ids observed during one run, in run order."""

    all_example_ids: tuple[str, ...]
    failed_example_ids: tuple[str, ...]


@dataclasses.dataclass(frozen=True, slots=True)
class Reproduction:
    """Outcome of a successful bisect."""

    command: str
    original_count: int
    reduced_count: int
    duration: float
