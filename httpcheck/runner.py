from __future__ import annotations

import logging
import sys

from httpcheck.checks.http_check import fetch
from httpcheck.checks.results import CheckResult
from httpcheck.evaluation import evaluate
from httpcheck.models import CheckConfig

logger = logging.getLogger(__name__)

ROOT_LOGGER_NAME = "httpcheck"


class _BelowLevel(logging.Filter):
    def __init__(self, level: int) -> None:
        super().__init__()
        self.level = level

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < self.level


def configure_logging(verbose: bool) -> logging.Logger:
    """
    Route the package's log records to the terminal.

    Narration goes to stdout and errors to stderr. Without ``verbose``
    the logger drops everything, so a healthy check prints nothing.
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.propagate = False

    if not verbose:
        root.setLevel(logging.CRITICAL + 1)
        root.addHandler(logging.NullHandler())
        return root

    formatter = logging.Formatter("%(message)s")

    out = logging.StreamHandler(sys.stdout)
    out.setLevel(logging.DEBUG)
    out.addFilter(_BelowLevel(logging.ERROR))
    out.setFormatter(formatter)

    err = logging.StreamHandler(sys.stderr)
    err.setLevel(logging.ERROR)
    err.setFormatter(formatter)

    root.setLevel(logging.DEBUG)
    root.addHandler(out)
    root.addHandler(err)
    return root


def _log_result(res: CheckResult, config: CheckConfig) -> None:
    if res.body_checked and not res.body_matched:
        logger.error("Error: %s", res.reason)
        return
    if res.body_checked:
        logger.info("Success: the response body contains '%s'", config.body_contains)
    # a rejected status code is a verdict, not an error
    logger.info("%s", res.reason)


def run_check(config: CheckConfig) -> CheckResult:
    """Dispatch the request described by ``config`` and judge the response."""
    resp = fetch(config)
    res = evaluate(resp.status_code, resp.body, config)
    _log_result(res, config)
    return res
