"""Command line entry point for proctor."""

from __future__ import annotations

import logging
import os
import sys
import typing as typ

from .configuration import configuration
from .configuration_options import ConfigurationOptions
from .errors import ProctorError
from .invocations import select_invocation
from .runner import Runner

ENV_LOG_LEVEL = "PROCTOR_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"


def setup_logging() -> None:
    """Configure logging from ``PROCTOR_LOG_LEVEL``."""
    level_name = os.getenv(ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL).strip().upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def run(
    args: typ.Sequence[str],
    err: typ.IO[str] | None = None,
    out: typ.IO[str] | None = None,
) -> int:
    """Parse ``args``, run the selected invocation and return its exit code."""
    err = err or sys.stderr
    out = out or sys.stdout
    options = ConfigurationOptions(args)
    invocation = select_invocation(options, config=configuration())
    if invocation is None:
        return Runner(options).run(err, out)
    return invocation.call(options, err, out)


def main(argv: typ.Sequence[str] | None = None) -> int:
    """Entry point for the proctor CLI."""
    setup_logging()
    args = sys.argv[1:] if argv is None else argv
    try:
        return run(args)
    except ProctorError as error:
        print(f"proctor: {error}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
