"""Run subsets of the suite in a subprocess and report what failed."""

from __future__ import annotations

import logging
import shlex
import subprocess
import typing as typ

from proctor.option_parser import BISECT_VERBOSE, PROG, OptionParser
from proctor.runner import pytest_arguments

from .models import ExampleResults

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from proctor.configuration import Configuration

_logger = logging.getLogger(__name__)

_FAILURE_PREFIXES = ("FAILED ", "ERROR ")
_FAILURE_DETAIL_SEPARATOR = " - "
_NODE_ID_SEPARATOR = "::"
BISECT_FLAG = "--bisect"


def _strip_bisect_flag(args: cabc.Iterable[str]) -> list[str]:
    """Drop ``--bisect`` and its ``verbose`` value; other values stay as paths."""
    stripped: list[str] = []
    tokens = iter(args)
    for arg in tokens:
        if arg == BISECT_FLAG:
            following = next(tokens, None)
            if following is not None and following != BISECT_VERBOSE:
                stripped.append(following)
            continue
        if arg.startswith(f"{BISECT_FLAG}="):
            value = arg.partition("=")[2]
            if value and value != BISECT_VERBOSE:
                stripped.append(value)
            continue
        stripped.append(arg)
    return stripped


def _cli_flags(options: typ.Mapping[str, typ.Any]) -> list[str]:
    flags: list[str] = []
    if options.get("fail_fast"):
        flags.append("--fail-fast")
    for pattern in options.get("full_description", []):
        flags.extend(["-e", pattern])
    return flags


def parse_collected_ids(stdout: str) -> tuple[str, ...]:
    """Return the node ids printed by ``pytest --collect-only -q``."""
    return tuple(
        line.strip()
        for line in stdout.splitlines()
        if _NODE_ID_SEPARATOR in line and not line.startswith(" ")
    )


def parse_failed_ids(stdout: str) -> tuple[str, ...]:
    """Return the node ids listed as failed or errored in the short summary."""
    failed: list[str] = []
    for line in stdout.splitlines():
        prefix = next((p for p in _FAILURE_PREFIXES if line.startswith(p)), None)
        if prefix is None:
            continue
        node_id = line[len(prefix) :].split(_FAILURE_DETAIL_SEPARATOR, 1)[0].strip()
        if node_id and node_id not in failed:
            failed.append(node_id)
    return tuple(failed)


class ShellRunner:
    """Drive pytest in a subprocess for each bisect step."""

    def __init__(
        self,
        original_args: cabc.Sequence[str],
        config: Configuration,
    ) -> None:
        """Derive the base command from the arguments the bisect started with."""
        self.original_cli_args = _strip_bisect_flag(original_args)
        options = OptionParser().parse(self.original_cli_args)
        self._paths: list[str] = list(options.get("files_or_directories_to_run", []))
        self._options = {**options, "files_or_directories_to_run": []}
        self._command = tuple(config.bisect_command)

    def original_results(self) -> ExampleResults:
        """Collect every example id and run the whole suite once."""
        collected = self._invoke(
            [*self._command, "--collect-only", "-q", *self._pytest_args(self._paths)]
        )
        all_ids = parse_collected_ids(collected.stdout or "")
        completed = self._invoke(self._run_command(self._paths))
        return ExampleResults(all_ids, parse_failed_ids(completed.stdout or ""))

    def run(self, ids: cabc.Sequence[str]) -> ExampleResults:
        """Run exactly ``ids`` in the given order."""
        completed = self._invoke(self._run_command(ids))
        return ExampleResults(tuple(ids), parse_failed_ids(completed.stdout or ""))

    def repro_command_from(self, ids: cabc.Sequence[str]) -> str:
        """Return the proctor command line that runs ``ids``."""
        return shlex.join([PROG, *_cli_flags(self._options), *ids])

    def _pytest_args(self, paths: cabc.Sequence[str]) -> list[str]:
        return pytest_arguments(
            {**self._options, "files_or_directories_to_run": list(paths)}
        )

    def _run_command(self, paths: cabc.Sequence[str]) -> list[str]:
        return [
            *self._command,
            "-q",
            "-rfE",
            "-p",
            "no:cacheprovider",
            *self._pytest_args(paths),
        ]

    def _invoke(self, command: list[str]) -> subprocess.CompletedProcess[str]:
        _logger.debug("Running %s", shlex.join(command))
        return subprocess.run(  # noqa: S603
            command,
            capture_output=True,
            text=True,
            check=False,
        )
