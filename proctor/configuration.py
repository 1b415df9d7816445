"""Process-wide test configuration shared by the runners and bisect."""

from __future__ import annotations

import dataclasses
import sys
import typing as typ

DEFAULT_DRB_PORT = 8989


def _default_bisect_command() -> tuple[str, ...]:
    return (sys.executable, "-m", "pytest")


@dataclasses.dataclass(slots=True)
class Configuration:
    """Settings that outlive a single invocation object.

    The entry point creates one instance per process; invocations that need it
    receive it explicitly rather than reaching for the module-level instance.
    """

    output_stream: typ.IO[str] = dataclasses.field(
        default_factory=lambda: sys.stdout
    )
    drb_port: int = DEFAULT_DRB_PORT
    drb_connect_timeout: float = 2.0
    bisect_command: tuple[str, ...] = dataclasses.field(
        default_factory=_default_bisect_command
    )


_configuration: Configuration | None = None


def configuration() -> Configuration:
    """Return the process-wide configuration, creating it on first use."""
    global _configuration  # noqa: PLW0603
    if _configuration is None:
        _configuration = Configuration()
    return _configuration


def reset_configuration() -> None:
    """Forget the process-wide configuration."""
    global _configuration  # noqa: PLW0603
    _configuration = None
