from __future__ import annotations

import logging
import threading
import warnings

import requests
from urllib3.exceptions import InsecureRequestWarning

from httpcheck.checks.results import HttpResponse
from httpcheck.config import settings
from httpcheck.errors import BodyReadError, HttpCheckError
from httpcheck.models import CheckConfig

logger = logging.getLogger(__name__)

DRAIN_CHUNK_SIZE = 8192


def _target(config: CheckConfig) -> str:
    return f"{config.url} ({config.method})"


def _send(config: CheckConfig) -> requests.Response:
    try:
        return requests.request(
            config.method,
            config.url,
            headers={"User-Agent": settings.USER_AGENT},
            timeout=(config.timeout_s, config.timeout_s),
            verify=not config.insecure,
            allow_redirects=True,
            stream=True,
        )
    except requests.Timeout as exc:
        raise HttpCheckError(
            f"Request to {_target(config)} timed out after {config.timeout_s}s"
        ) from exc
    except requests.RequestException as exc:
        raise HttpCheckError(
            f"Request to {_target(config)} failed: {exc.__class__.__name__}: {exc}"
        ) from exc


def _read_body(resp: requests.Response, config: CheckConfig) -> bytes:
    try:
        return resp.content
    except requests.RequestException as exc:
        raise BodyReadError(
            f"Failed to read response body from {config.url}: {exc.__class__.__name__}: {exc}"
        ) from exc


def _drain(resp: requests.Response, config: CheckConfig) -> None:
    try:
        for _ in resp.iter_content(chunk_size=DRAIN_CHUNK_SIZE):
            pass
    except requests.RequestException as exc:
        raise BodyReadError(
            f"Failed to drain response body from {config.url}: {exc.__class__.__name__}: {exc}"
        ) from exc


class _Exchange:
    """
    One request/response cycle, run on a worker thread.

    The caller waits on ``done`` for at most the configured timeout, so
    connect, TLS, headers and body share a single deadline no matter how
    slowly the server trickles data. ``abort`` closes the response to
    unblock a worker that is still reading.
    """

    def __init__(self, config: CheckConfig) -> None:
        self.config = config
        self.done = threading.Event()
        self.response: requests.Response | None = None
        self.result: HttpResponse | None = None
        self.error: Exception | None = None

    def run(self) -> None:
        try:
            self.result = self._perform()
        except Exception as exc:
            self.error = exc
        finally:
            self.done.set()

    def _perform(self) -> HttpResponse:
        resp = _send(self.config)
        self.response = resp
        with resp:
            if self.config.checks_body:
                return HttpResponse(status_code=resp.status_code, body=_read_body(resp, self.config))
            _drain(resp, self.config)
            return HttpResponse(status_code=resp.status_code)

    def abort(self) -> None:
        resp = self.response
        if resp is not None:
            resp.close()


def fetch(config: CheckConfig) -> HttpResponse:
    """
    Issue the single request described by ``config``.

    The body is downloaded when a substring check will look at it and
    drained otherwise; either way the connection is released.
    """
    if config.insecure:
        logger.warning("Warning: TLS certificate verification is disabled. Use with caution.")

    exchange = _Exchange(config)
    worker = threading.Thread(target=exchange.run, name="httpcheck-request", daemon=True)

    with warnings.catch_warnings():
        if config.insecure:
            warnings.simplefilter("ignore", InsecureRequestWarning)
        worker.start()
        finished = exchange.done.wait(config.timeout_s)

    if not finished:
        exchange.abort()
        raise HttpCheckError(f"Request to {_target(config)} timed out after {config.timeout_s}s")
    if exchange.error is not None:
        raise exchange.error
    return exchange.result
