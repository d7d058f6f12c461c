from __future__ import annotations

from typing import Annotated, FrozenSet, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from httpcheck.config import settings

HttpMethod = Literal["GET", "HEAD"]
StatusCode = Annotated[int, Field(ge=0)]


class CheckConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str = Field(..., min_length=1)
    accepted_codes: Optional[FrozenSet[StatusCode]] = None
    accepted_codes_raw: str = ""
    method: HttpMethod = "GET"
    timeout_s: int = Field(
        default=settings.DEFAULT_TIMEOUT_SECONDS, gt=0, le=settings.MAX_TIMEOUT_SECONDS
    )
    insecure: bool = False
    verbose: bool = False
    body_contains: str = ""

    @property
    def checks_body(self) -> bool:
        return bool(self.body_contains) and self.method == "GET"

    @property
    def checks_codes(self) -> bool:
        return self.accepted_codes is not None
