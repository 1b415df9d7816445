"""Scaffold the files a project needs to run under proctor."""

from __future__ import annotations

import sys
import typing as typ
from importlib import resources
from pathlib import Path

from ruamel.yaml import YAML

from .configuration_options import OPTIONS_KEY, PROJECT_OPTIONS_FILENAME

DEFAULT_OPTIONS: tuple[str, ...] = ("tests",)
CONFTEST_PATH = Path("tests") / "conftest.py"
CONFTEST_TEMPLATE = "conftest.py.tmpl"

_yaml = YAML(typ="safe")
_yaml.default_flow_style = False
_yaml.explicit_start = False
_yaml.explicit_end = False
_yaml.indent(mapping=2, sequence=4, offset=2)


class ProjectInitializer:
    """Create the options file and a starter conftest, never overwriting."""

    def __init__(
        self,
        destination: Path | None = None,
        stream: typ.IO[str] | None = None,
    ) -> None:
        """Target ``destination`` (cwd by default) and report to ``stream``."""
        self.destination = destination or Path.cwd()
        self.stream = stream or sys.stdout

    def run(self) -> None:
        """Write any missing project files."""
        self._copy_if_missing(PROJECT_OPTIONS_FILENAME, self._write_options)
        self._copy_if_missing(str(CONFTEST_PATH), self._write_conftest)

    def _copy_if_missing(
        self,
        relative_path: str,
        writer: typ.Callable[[Path], None],
    ) -> None:
        target = self.destination / relative_path
        if target.exists():
            self._report("exist", relative_path)
            return
        self._report("create", relative_path)
        target.parent.mkdir(parents=True, exist_ok=True)
        writer(target)

    def _write_options(self, target: Path) -> None:
        with target.open("w", encoding="utf-8") as handle:
            _yaml.dump({OPTIONS_KEY: list(DEFAULT_OPTIONS)}, handle)

    def _write_conftest(self, target: Path) -> None:
        template = resources.files("proctor.templates").joinpath(CONFTEST_TEMPLATE)
        target.write_text(template.read_text(encoding="utf-8"), encoding="utf-8")

    def _report(self, status: str, relative_path: str) -> None:
        self.stream.write(f"  {status}   {relative_path}\n")
