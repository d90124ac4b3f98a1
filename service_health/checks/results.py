from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal

HttpMethod = Literal["GET", "POST", "PUT", "DELETE"]

DEFAULT_METHOD: HttpMethod = "GET"
DEFAULT_TIMEOUT_MS = 10000
DEFAULT_EXPECTED_STATUS = 200


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    WARNING = "warning"
    UNHEALTHY = "unhealthy"


@dataclass(frozen=True)
class CheckRequest:
    url: str
    method: HttpMethod = DEFAULT_METHOD
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    expected_status: int = DEFAULT_EXPECTED_STATUS
    headers: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class CheckDetail:
    url: str
    timestamp: str
    error: str | None = None


@dataclass(frozen=True)
class CheckResult:
    status: HealthStatus
    response_time_ms: int
    message: str
    detail: CheckDetail
    status_code: int | None = None
