"""Shared fixtures for proctor unit tests."""

from __future__ import annotations

import dataclasses
import io
import typing as typ

import pytest

from proctor.configuration import Configuration
from proctor.option_parser import OptionParser


@dataclasses.dataclass
class StubOptions:
    """Stand-in for ConfigurationOptions with fixed args and options."""

    args: tuple[str, ...] = ()
    options: dict[str, typ.Any] = dataclasses.field(default_factory=dict)
    parser: OptionParser = dataclasses.field(default_factory=OptionParser)


@dataclasses.dataclass
class Streams:
    """The error and output streams handed to an invocation."""

    err: io.StringIO = dataclasses.field(default_factory=io.StringIO)
    out: io.StringIO = dataclasses.field(default_factory=io.StringIO)


@pytest.fixture
def streams() -> Streams:
    """Fresh error and output streams."""
    return Streams()


@pytest.fixture
def stub_options() -> StubOptions:
    """Configuration options with no arguments."""
    return StubOptions()


@pytest.fixture
def bisect_configuration() -> Configuration:
    """A configuration writing to an in-memory stream and running `pytest`."""
    return Configuration(
        output_stream=io.StringIO(),
        bisect_command=("pytest",),
    )
