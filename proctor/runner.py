"""Run the suite inside the current process."""

from __future__ import annotations

import contextlib
import logging
import typing as typ

import pytest

if typ.TYPE_CHECKING:
    from .configuration_options import ConfigurationOptions

_logger = logging.getLogger(__name__)


def write_stream_output(stream: typ.IO[str], content: str) -> None:
    """Write content to a stream, ensuring it ends with a newline."""
    stream.write(content)
    if not content.endswith("\n"):
        stream.write("\n")
    stream.flush()


def pytest_arguments(options: typ.Mapping[str, typ.Any]) -> list[str]:
    """Translate proctor options into pytest command-line arguments."""
    arguments: list[str] = []
    if options.get("fail_fast"):
        arguments.append("-x")
    if patterns := options.get("full_description"):
        arguments.extend(["-k", " or ".join(f"({pattern})" for pattern in patterns)])
    arguments.extend(options.get("files_or_directories_to_run", []))
    return arguments


class Runner:
    """Execute the suite in-process through pytest."""

    def __init__(self, options: ConfigurationOptions) -> None:
        """Keep the parsed options for the run."""
        self._options = options

    def run(self, err: typ.IO[str], out: typ.IO[str]) -> int:
        """Run the suite, writing its output to ``out`` and ``err``."""
        arguments = pytest_arguments(self._options.options)
        _logger.debug("Running pytest in process with %r", arguments)
        with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
            result = pytest.main(arguments)
        return 0 if result == pytest.ExitCode.OK else 1
