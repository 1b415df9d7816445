"""Client for running the suite inside a long-lived DRb test server.

The server keeps the project loaded between runs. A run is a single
``POST /run`` carrying ``{"argv": [...]}``; the server replies with
``{"exit_code": int, "stdout": str, "stderr": str}``.
"""

from __future__ import annotations

import logging
import os
import typing as typ

import requests
from requests import exceptions as requests_exceptions

from .configuration import Configuration, configuration
from .errors import DRbConnectionError, DRbResponseError
from .runner import write_stream_output

if typ.TYPE_CHECKING:
    from .configuration_options import ConfigurationOptions

_logger = logging.getLogger(__name__)

ENV_DRB_PORT = "PROCTOR_DRB"
DRB_HOST = "127.0.0.1"
_DRB_FLAGS = frozenset({"-X", "--drb", "--no-drb"})
_DRB_PORT_FLAG = "--drb-port"


class DRbRunner:
    """Dispatch a run to the DRb server listening on the configured port."""

    def __init__(
        self,
        options: ConfigurationOptions,
        config: Configuration | None = None,
        session: requests.Session | None = None,
    ) -> None:
        """Bind the runner to the parsed options and the process configuration."""
        self._options = options
        self._configuration = config or configuration()
        self._session = session

    @property
    def drb_port(self) -> int:
        """Return the port from the options, the environment, or the default."""
        port = self._options.options.get("drb_port")
        if port is not None:
            return int(port)
        if env_port := os.environ.get(ENV_DRB_PORT):
            return int(env_port)
        return self._configuration.drb_port

    @property
    def url(self) -> str:
        """Return the server's run endpoint."""
        return f"http://{DRB_HOST}:{self.drb_port}/run"

    def drb_argv(self) -> list[str]:
        """Return the original arguments minus the flags that selected DRb."""
        argv: list[str] = []
        skip_next = False
        for arg in self._options.args:
            if skip_next:
                skip_next = False
                continue
            if arg in _DRB_FLAGS or arg.startswith(f"{_DRB_PORT_FLAG}="):
                continue
            if arg == _DRB_PORT_FLAG:
                skip_next = True
                continue
            argv.append(arg)
        return argv

    def run(self, err: typ.IO[str], out: typ.IO[str]) -> int:
        """Run the suite on the server, copying its output into the streams.

        A session passed to the constructor is left open for the caller;
        otherwise one is opened for this run and closed afterwards.
        """
        if self._session is not None:
            return self._post(self._session, err, out)
        with requests.Session() as session:
            return self._post(session, err, out)

    def _post(
        self,
        session: requests.Session,
        err: typ.IO[str],
        out: typ.IO[str],
    ) -> int:
        url = self.url
        _logger.debug("Connecting to DRb server at %s", url)
        try:
            response = session.post(
                url,
                json={"argv": self.drb_argv()},
                timeout=(self._configuration.drb_connect_timeout, None),
            )
        except requests_exceptions.ConnectionError as error:
            # ConnectTimeout is a ConnectionError; read timeouts are not.
            raise DRbConnectionError(url) from error

        try:
            response.raise_for_status()
            payload = response.json()
        except (requests_exceptions.HTTPError, ValueError) as error:
            message = f"DRb server at {url} returned an unusable response: {error}"
            raise DRbResponseError(message) from error

        return _emit_payload(payload, url, err, out)


def _emit_payload(
    payload: object,
    url: str,
    err: typ.IO[str],
    out: typ.IO[str],
) -> int:
    if not isinstance(payload, dict) or not isinstance(
        payload.get("exit_code"), int
    ):
        message = f"DRb server at {url} did not report an exit code."
        raise DRbResponseError(message)
    if stdout := payload.get("stdout"):
        write_stream_output(out, str(stdout))
    if stderr := payload.get("stderr"):
        write_stream_output(err, str(stderr))
    return payload["exit_code"]
