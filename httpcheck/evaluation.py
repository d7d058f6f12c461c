from __future__ import annotations

from httpcheck.checks.results import CheckResult
from httpcheck.errors import HttpCheckConfigError
from httpcheck.models import CheckConfig


def parse_accepted_codes(text: str) -> frozenset[int] | None:
    """
    Parse a comma-separated list of status codes.

    Returns None for an empty string, meaning no code criterion is set.
    """
    if text == "":
        return None

    codes: set[int] = set()
    for item in text.split(","):
        raw = item.strip()
        if not raw.isdigit() or not raw.isascii():
            raise HttpCheckConfigError(f"Error: invalid accepted code '{item}'")
        codes.add(int(raw))
    return frozenset(codes)


def body_gate(body: bytes | None, config: CheckConfig) -> bool | None:
    if not config.checks_body:
        return None
    if body is None:
        return False
    return config.body_contains.encode("utf-8") in body


def codes_gate(status_code: int, config: CheckConfig) -> bool | None:
    if not config.checks_codes:
        return None
    return status_code in config.accepted_codes


def evaluate(status_code: int, body: bytes | None, config: CheckConfig) -> CheckResult:
    target = f"{config.url} ({config.method})"

    body_matched = body_gate(body, config)
    if body_matched is False:
        return CheckResult(
            ok=False,
            status_code=status_code,
            reason=f"Response body from {target} does not contain '{config.body_contains}'",
            body_checked=True,
            body_matched=False,
        )

    codes_ok = codes_gate(status_code, config)
    body_checked = body_matched is not None
    if codes_ok is None:
        if body_checked:
            reason = f"Request to {target} succeeded. Status code: {status_code} (body matched)"
        else:
            reason = f"Request to {target} succeeded. Status code: {status_code} (no expected codes)"
        return CheckResult(
            ok=True,
            status_code=status_code,
            reason=reason,
            body_checked=body_checked,
            body_matched=body_matched,
        )

    if codes_ok:
        reason = f"Request to {target} succeeded. Status code: {status_code} (accepted)"
    else:
        reason = (
            f"Request to {target} failed. Status code: {status_code} "
            f"(not accepted, expected: {config.accepted_codes_raw})"
        )
    return CheckResult(
        ok=codes_ok,
        status_code=status_code,
        reason=reason,
        body_checked=body_checked,
        body_matched=body_matched,
    )
