"""Merge options from options files, the environment and the command line."""

from __future__ import annotations

import logging
import os
import shlex
import typing as typ
from pathlib import Path

from cyclopts import config as cyclopts_config
from ruamel.yaml import YAML

from .errors import ConfigurationFileError
from .option_parser import OptionParser

_logger = logging.getLogger(__name__)

PROJECT_OPTIONS_FILENAME = ".proctor.yaml"
LOCAL_OPTIONS_FILENAME = ".proctor-local.yaml"
GLOBAL_OPTIONS_FILENAME = "options.yaml"
OPTIONS_KEY = "options"
ENV_OPTIONS = "PROCTOR_OPTS"
# Later sources append to these instead of replacing them.
ACCUMULATED_OPTIONS = frozenset({"full_description"})

_yaml = YAML(typ="safe")


class _YamlConfig(cyclopts_config.ConfigFromFile):
    """Cyclopts config provider backed by ruamel.yaml."""

    def _load_config(self, path: Path) -> dict[str, typ.Any]:
        if not path.exists():
            return {}
        with path.open("r", encoding="utf-8") as handle:
            contents = _yaml.load(handle) or {}
        return dict(contents) if isinstance(contents, dict) else {}


def global_options_path() -> Path:
    """Return the per-user options file."""
    root = os.environ.get("XDG_CONFIG_HOME")
    base = Path(root).expanduser() if root else Path.home() / ".config"
    return base / "proctor" / GLOBAL_OPTIONS_FILENAME


def read_options_file(path: Path) -> list[str]:
    """Return the CLI tokens listed in the options file at ``path``."""
    if not path.is_file():
        return []
    provider = _YamlConfig(path=str(path), must_exist=False)
    raw = provider.config or {}
    tokens = raw.get(OPTIONS_KEY, []) if isinstance(raw, dict) else None
    if not isinstance(tokens, list) or not all(
        isinstance(token, str) for token in tokens
    ):
        raise ConfigurationFileError(str(path))
    _logger.debug("Loaded %d option(s) from %s", len(tokens), path)
    return [token for token in tokens if token]


class ConfigurationOptions:
    """Parsed options for a single proctor run.

    ``args`` keeps the raw command-line tokens; ``options`` holds the merged
    result of every options source, command line last.
    """

    def __init__(
        self,
        args: typ.Sequence[str],
        *,
        parser: OptionParser | None = None,
        working_directory: Path | None = None,
        environ: typ.Mapping[str, str] | None = None,
    ) -> None:
        """Parse ``args`` and merge in the options files and environment."""
        self.args: tuple[str, ...] = tuple(args)
        self.parser = parser or OptionParser()
        self._cwd = working_directory or Path.cwd()
        self._environ = os.environ if environ is None else environ
        self.options: dict[str, typ.Any] = self._organize_options()

    def _organize_options(self) -> dict[str, typ.Any]:
        command_line = self.parser.parse(self.args)
        custom_file = command_line.get("custom_options_file")

        sources: list[dict[str, typ.Any]] = []
        for path in self._options_file_paths(custom_file):
            tokens = read_options_file(path)
            if tokens:
                sources.append(self.parser.parse(tokens, source=str(path)))
        env_tokens = shlex.split(self._environ.get(ENV_OPTIONS, ""))
        if env_tokens:
            source = f"{ENV_OPTIONS} environment variable"
            sources.append(self.parser.parse(env_tokens, source=source))
        sources.append(command_line)
        return _merge(sources)

    def _options_file_paths(self, custom_file: str | None) -> list[Path]:
        project = (
            Path(custom_file).expanduser()
            if custom_file
            else self._cwd / PROJECT_OPTIONS_FILENAME
        )
        return [
            global_options_path(),
            project,
            self._cwd / LOCAL_OPTIONS_FILENAME,
        ]


def _merge(sources: typ.Iterable[typ.Mapping[str, typ.Any]]) -> dict[str, typ.Any]:
    merged: dict[str, typ.Any] = {"files_or_directories_to_run": []}
    for source in sources:
        for key, value in source.items():
            if key in ACCUMULATED_OPTIONS:
                merged[key] = [*merged.get(key, []), *value]
            elif key == "files_or_directories_to_run":
                if value:
                    merged[key] = list(value)
            else:
                merged[key] = value
    return merged
