from __future__ import annotations

from typing import Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from service_health.checks.results import (
    DEFAULT_EXPECTED_STATUS,
    DEFAULT_METHOD,
    DEFAULT_TIMEOUT_MS,
    CheckRequest,
)

Method = Literal["GET", "POST", "PUT", "DELETE"]


class CheckHttpEndpointParams(BaseModel):
    """Arguments accepted by the check_http_endpoint tool."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    url: str = Field(
        ...,
        min_length=1,
        description="The URL to check (e.g., https://google.com)",
    )
    method: Method = Field(default=DEFAULT_METHOD, description="HTTP method to use")
    timeout: int = Field(
        default=DEFAULT_TIMEOUT_MS,
        ge=1000,
        le=30000,
        description="Request timeout in milliseconds",
    )
    expected_status: int = Field(
        default=DEFAULT_EXPECTED_STATUS,
        ge=100,
        le=599,
        alias="expectedStatus",
        description="Expected HTTP status code",
    )
    headers: Optional[Dict[str, str]] = Field(
        default=None,
        description="Optional HTTP headers to include",
    )

    def to_request(self) -> CheckRequest:
        return CheckRequest(
            url=self.url,
            method=self.method,
            timeout_ms=self.timeout,
            expected_status=self.expected_status,
            headers=dict(self.headers or {}),
        )
