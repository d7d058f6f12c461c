from __future__ import annotations

from dataclasses import dataclass


@dataclass
class HttpResponse:
    status_code: int
    body: bytes | None = None


@dataclass
class CheckResult:
    ok: bool
    status_code: int
    reason: str
    body_checked: bool = False
    body_matched: bool | None = None
