from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

from pydantic import ValidationError

from httpcheck.config import settings
from httpcheck.errors import HttpCheckConfigError, HttpCheckError
from httpcheck.evaluation import parse_accepted_codes
from httpcheck.models import CheckConfig
from httpcheck.runner import configure_logging, run_check

logger = logging.getLogger(__name__)

USAGE = """\
httpcheck: command line tool that checks the HTTP status of a URL.

Usage:
  httpcheck -u <URL> [-c <codes>] [-t <seconds>] [-v] [-k] [-m <GET|HEAD>] [-b <string> | -B <BODY_VAR_NAME>]
  httpcheck -U <URL_VAR_NAME> [-C <CODES_VAR_NAME>] [-t <seconds>] [-v] [-k] [-m <GET|HEAD>] [-b <string> | -B <BODY_VAR_NAME>]

Options:
  -u, --url <URL>                        URL to check.
  -U, --url-env-name <NAME>              Name of the environment variable holding the URL.
  -c, --accepted-codes <codes>           Comma-separated list of accepted HTTP status codes (e.g. 200,404).
                                         Optional when -b/--body-contains is used.
  -C, --accepted-codes-env-name <NAME>   Name of the environment variable holding the accepted codes.
                                         Ignored when -b or -B is used.
  -t, --timeout <seconds>                Request timeout in seconds (default: 5).
  -k, --insecure                         Allow insecure TLS connections (skip certificate verification).
  -v, --verbose                          Enable verbose output.
  -h, --help                             Show this help.
  -m, --method <GET|HEAD>                HTTP method to use (default: GET).
  -b, --body-contains <string>           String the response body must contain (GET only).
                                         When used, the status code check is optional.
  -B, --body-contains-env-name <NAME>    Name of the environment variable holding the string the
                                         response body must contain (GET only).

Container examples:
  With a shell (the shell expands the variables):
    ENV PORT=8080
    ENV HTTP_ACCEPTED_CODES=200,404
    ENV BODY_CHECK_STRING="OK"
    HEALTHCHECK --interval=5s --timeout=3s CMD ["httpcheck", "-u", "http://localhost:${PORT}/api/v1/health", "-c", "${HTTP_ACCEPTED_CODES}", "-b", "${BODY_CHECK_STRING}"]

  Without a shell (httpcheck reads the variables itself):
    ENV URL_TO_CHECK=http://localhost:8080/api/v1/health
    ENV ACCEPTED_STATUS_CODES=200,404
    ENV RESPONSE_BODY_CONTAINS="OK"
    HEALTHCHECK --interval=5s --timeout=3s CMD ["httpcheck", "-U", "URL_TO_CHECK", "-C", "ACCEPTED_STATUS_CODES", "-B", "RESPONSE_BODY_CONTAINS"]

  Timeout and HEAD method:
    httpcheck -u http://localhost:8080/health -c 200 -t 10 -m HEAD

  Body check only, substring taken from the environment:
    httpcheck -u http://localhost:8080/status -B RESPONSE_BODY_CONTAINS

  Body and status code checks:
    httpcheck -u http://localhost:8080/status -b "OK" -c 200
"""

# flag -> ParsedArgs attribute, for options that take a value
_VALUE_OPTIONS = {
    "-u": "url",
    "--url": "url",
    "-U": "url_env_name",
    "--url-env-name": "url_env_name",
    "-c": "accepted_codes",
    "--accepted-codes": "accepted_codes",
    "-C": "accepted_codes_env_name",
    "--accepted-codes-env-name": "accepted_codes_env_name",
    "-t": "timeout_s",
    "--timeout": "timeout_s",
    "-m": "method",
    "--method": "method",
    "-b": "body_contains",
    "--body-contains": "body_contains",
    "-B": "body_contains_env_name",
    "--body-contains-env-name": "body_contains_env_name",
}

_SWITCHES = {
    "-v": "verbose",
    "--verbose": "verbose",
    "-k": "insecure",
    "--insecure": "insecure",
    "-h": "help",
    "--help": "help",
}

_LONG_NAMES = {
    "url": "-u/--url",
    "url_env_name": "-U/--url-env-name",
    "accepted_codes": "-c/--accepted-codes",
    "accepted_codes_env_name": "-C/--accepted-codes-env-name",
    "timeout_s": "-t/--timeout",
    "method": "-m/--method",
    "body_contains": "-b/--body-contains",
    "body_contains_env_name": "-B/--body-contains-env-name",
}


@dataclass
class ParsedArgs:
    url: str = ""
    url_env_name: str = ""
    accepted_codes: str = ""
    accepted_codes_env_name: str = ""
    timeout_s: int = settings.DEFAULT_TIMEOUT_SECONDS
    method: str = settings.DEFAULT_METHOD
    body_contains: str = ""
    body_contains_env_name: str = ""
    verbose: bool = False
    insecure: bool = False
    help: bool = False


def _parse_timeout(value: str) -> int:
    if not (value.isascii() and value.isdigit()):
        raise HttpCheckConfigError(f"Error: -t/--timeout requires a valid integer: {value!r}")
    timeout_s = int(value)
    if not 0 < timeout_s <= settings.MAX_TIMEOUT_SECONDS:
        raise HttpCheckConfigError(
            f"Error: -t/--timeout must be between 1 and {settings.MAX_TIMEOUT_SECONDS} "
            f"seconds: {value!r}"
        )
    return timeout_s


def _parse_method(value: str) -> str:
    method = value.upper()
    if method not in settings.ALLOWED_METHODS:
        raise HttpCheckConfigError(f"Error: invalid HTTP method: {method}. Use GET or HEAD.")
    return method


def parse_args(argv: Sequence[str]) -> ParsedArgs:
    """Tokenize ``argv`` left to right. Environment lookups happen later."""
    parsed = ParsedArgs()
    i = 0
    while i < len(argv):
        arg = argv[i]
        if arg in _SWITCHES:
            setattr(parsed, _SWITCHES[arg], True)
        elif arg in _VALUE_OPTIONS:
            field = _VALUE_OPTIONS[arg]
            if i + 1 >= len(argv):
                raise HttpCheckConfigError(
                    f"Error: {_LONG_NAMES[field]} requires an argument.", to_stderr=False
                )
            value = argv[i + 1]
            if field == "timeout_s":
                setattr(parsed, field, _parse_timeout(value))
            elif field == "method":
                setattr(parsed, field, _parse_method(value))
            else:
                setattr(parsed, field, value)
            i += 1
        else:
            raise HttpCheckConfigError(f"Unknown option: {arg}", show_usage=True)
        i += 1
    return parsed


def resolve_config(parsed: ParsedArgs, environ: Mapping[str, str]) -> CheckConfig:
    url = parsed.url
    if parsed.url_env_name:
        url = environ.get(parsed.url_env_name, "")
        logger.info("Using URL from environment variable: %s=%s", parsed.url_env_name, url)

    codes_text = parsed.accepted_codes
    # any body source, literal or from the environment, disables -C
    if (
        parsed.accepted_codes_env_name
        and not parsed.body_contains_env_name
        and not parsed.body_contains
    ):
        codes_text = environ.get(parsed.accepted_codes_env_name, "")
        logger.info(
            "Using accepted codes from environment variable: %s=%s",
            parsed.accepted_codes_env_name,
            codes_text,
        )

    body_contains = parsed.body_contains
    if parsed.body_contains_env_name:
        body_contains = environ.get(parsed.body_contains_env_name, "")
        logger.info(
            "Using body search string from environment variable: %s=%s",
            parsed.body_contains_env_name,
            body_contains,
        )

    if not url:
        raise HttpCheckConfigError(
            "Error: the URL must be provided via arguments or an environment variable.",
            to_stderr=False,
            show_usage=True,
        )

    accepted_codes = parse_accepted_codes(codes_text)

    try:
        return CheckConfig(
            url=url,
            accepted_codes=accepted_codes,
            accepted_codes_raw=codes_text,
            method=parsed.method,
            timeout_s=parsed.timeout_s,
            insecure=parsed.insecure,
            verbose=parsed.verbose,
            body_contains=body_contains,
        )
    except ValidationError as exc:
        raise HttpCheckConfigError(f"Error: invalid configuration: {exc}") from exc


def _report_config_error(exc: HttpCheckConfigError) -> None:
    stream = sys.stderr if exc.to_stderr else sys.stdout
    print(exc, file=stream)
    if exc.show_usage:
        print(USAGE, file=stream)


def main(argv: Optional[Sequence[str]] = None, environ: Optional[Mapping[str, str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    if environ is None:
        environ = os.environ

    if not argv:
        print(USAGE)
        return 0

    try:
        parsed = parse_args(argv)
        if parsed.help:
            print(USAGE)
            return 0

        configure_logging(parsed.verbose)
        config = resolve_config(parsed, environ)
    except HttpCheckConfigError as exc:
        _report_config_error(exc)
        return 1

    try:
        result = run_check(config)
    except HttpCheckError as exc:
        logger.error("%s", exc)
        return 1
    return 0 if result.ok else 1
