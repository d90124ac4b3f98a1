from __future__ import annotations

import errno
import logging
import math
import socket
import time
from datetime import datetime, timezone
from typing import Iterator
from urllib.parse import urljoin, urlsplit

import requests
from requests.structures import CaseInsensitiveDict

from service_health.checks.results import (
    CheckDetail,
    CheckRequest,
    CheckResult,
    HealthStatus,
)
from service_health.security.url_validator import inspect_url

logger = logging.getLogger(__name__)

USER_AGENT = "Service-Health-MCP/1.0.0"
REDIRECT_STATUS_CODES = frozenset({301, 302, 303, 307, 308})
MAX_REDIRECTS = 5
# Credentials that must not follow a redirect to another host.
CROSS_HOST_STRIPPED_HEADERS = ("Authorization", "Proxy-Authorization", "Cookie")

DNS_FAILURE = "Endpoint not found - DNS resolution failed"
CONNECTION_REFUSED = "Connection refused - endpoint may be down"
REQUEST_TIMED_OUT = "Request timed out - endpoint may be slow or unresponsive"

_DNS_MARKERS = (
    "name or service not known",
    "nodename nor servname",
    "getaddrinfo failed",
    "failed to resolve",
    "temporary failure in name resolution",
    "no address associated with hostname",
)
_REFUSED_MARKERS = ("connection refused", "actively refused")


def utcnow_iso() -> str:
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def classify_status(actual_status: int, expected_status: int) -> HealthStatus:
    if actual_status == expected_status:
        return HealthStatus.HEALTHY
    # Any 2xx still means the endpoint works, just not as expected.
    if 200 <= actual_status < 300:
        return HealthStatus.WARNING
    return HealthStatus.UNHEALTHY


def status_message(status: HealthStatus, outcome: int | str, response_time_ms: int) -> str:
    """``outcome`` is the HTTP status code, or a transport error description."""
    if status == HealthStatus.HEALTHY:
        return f"Endpoint is healthy ({outcome}) - {response_time_ms}ms response time"
    if status == HealthStatus.WARNING:
        return (
            f"Endpoint responding ({outcome}) but status differs from expected"
            f" - {response_time_ms}ms response time"
        )
    return f"Endpoint is unhealthy ({outcome}) - {response_time_ms}ms response time"


def _exception_chain(exc: BaseException) -> Iterator[BaseException]:
    seen: set[int] = set()
    pending: list[BaseException] = [exc]
    while pending:
        current = pending.pop(0)
        if id(current) in seen:
            continue
        seen.add(id(current))
        yield current
        # urllib3's MaxRetryError keeps the underlying failure on .reason
        for linked in (
            getattr(current, "reason", None),
            current.__cause__,
            current.__context__,
            *current.args,
        ):
            if isinstance(linked, BaseException):
                pending.append(linked)


def describe_transport_error(exc: BaseException) -> str:
    """Map a failed request to a human-readable description."""
    if isinstance(exc, requests.Timeout):
        return REQUEST_TIMED_OUT

    for cause in _exception_chain(exc):
        if isinstance(cause, socket.gaierror):
            return DNS_FAILURE
        if isinstance(cause, ConnectionRefusedError):
            return CONNECTION_REFUSED
        if isinstance(cause, TimeoutError):
            return REQUEST_TIMED_OUT
        code = getattr(cause, "errno", None)
        if code == errno.ECONNREFUSED:
            return CONNECTION_REFUSED
        if code == errno.ETIMEDOUT:
            return REQUEST_TIMED_OUT

    text = str(exc).lower()
    if any(marker in text for marker in _DNS_MARKERS):
        return DNS_FAILURE
    if any(marker in text for marker in _REFUSED_MARKERS):
        return CONNECTION_REFUSED
    if "timed out" in text:
        return REQUEST_TIMED_OUT
    return f"Network error: {exc}"


def _elapsed_ms(start: float) -> int:
    # Rounded up: an attempted request never reports 0ms.
    return max(1, math.ceil((time.perf_counter() - start) * 1000))


def _merged_headers(extra: dict[str, str]) -> CaseInsensitiveDict:
    headers = CaseInsensitiveDict({"User-Agent": USER_AGENT})
    headers.update(extra)
    return headers


def _redirect_method(status_code: int, method: str) -> str:
    if status_code == 303 and method != "HEAD":
        return "GET"
    if status_code in (301, 302) and method == "POST":
        return "GET"
    return method


def _send(
    session: requests.Session,
    method: str,
    url: str,
    headers: CaseInsensitiveDict,
    deadline: float,
) -> tuple[int, str | None]:
    remaining = max(deadline - time.perf_counter(), 0.001)
    logger.debug("Requesting %s %s (timeout=%.3fs)", method, url, remaining)
    response = session.request(
        method,
        url,
        headers=headers.copy(),
        timeout=(remaining, remaining),
        allow_redirects=False,
        stream=True,
    )
    try:
        return response.status_code, response.headers.get("Location")
    finally:
        response.close()


def _unhealthy(
    url: str,
    timestamp: str,
    response_time_ms: int,
    message: str,
    error: str,
) -> CheckResult:
    return CheckResult(
        status=HealthStatus.UNHEALTHY,
        response_time_ms=response_time_ms,
        message=message,
        detail=CheckDetail(url=url, timestamp=timestamp, error=error),
    )


def _run(session: requests.Session, request: CheckRequest, start: float, timestamp: str) -> CheckResult:
    deadline = start + request.timeout_ms / 1000
    headers = _merged_headers(request.headers)
    method: str = request.method
    url = request.url

    try:
        status_code, location = _send(session, method, url, headers, deadline)
        hops = 0
        while status_code in REDIRECT_STATUS_CODES and location and hops < MAX_REDIRECTS:
            next_url = urljoin(url, location)
            rejection = inspect_url(next_url)
            if rejection is not None:
                logger.warning("Redirect from %s to %s rejected: %s", url, next_url, rejection.reason)
                return _unhealthy(
                    request.url,
                    timestamp,
                    _elapsed_ms(start),
                    "Redirect target rejected",
                    rejection.reason,
                )
            if urlsplit(next_url).hostname != urlsplit(url).hostname:
                for name in CROSS_HOST_STRIPPED_HEADERS:
                    headers.pop(name, None)
            method = _redirect_method(status_code, method)
            url = next_url
            hops += 1
            status_code, location = _send(session, method, url, headers, deadline)
    except requests.RequestException as exc:
        response_time_ms = _elapsed_ms(start)
        description = describe_transport_error(exc)
        logger.warning("HTTP check %s failed after %sms: %s", request.url, response_time_ms, exc)
        return _unhealthy(
            request.url,
            timestamp,
            response_time_ms,
            status_message(HealthStatus.UNHEALTHY, description, response_time_ms),
            description,
        )
    except Exception as exc:
        response_time_ms = _elapsed_ms(start)
        logger.exception("Unexpected failure checking %s", request.url)
        description = f"Network error: {exc}"
        return _unhealthy(
            request.url,
            timestamp,
            response_time_ms,
            status_message(HealthStatus.UNHEALTHY, description, response_time_ms),
            description,
        )

    response_time_ms = _elapsed_ms(start)
    status = classify_status(status_code, request.expected_status)
    logger.info(
        "HTTP check %s %s -> %s (%s) in %sms",
        request.method,
        request.url,
        status_code,
        status.value,
        response_time_ms,
    )
    return CheckResult(
        status=status,
        response_time_ms=response_time_ms,
        status_code=status_code,
        message=status_message(status, status_code, response_time_ms),
        detail=CheckDetail(url=request.url, timestamp=timestamp),
    )


def check_endpoint(request: CheckRequest, *, session: requests.Session | None = None) -> CheckResult:
    """
    Run one health check against ``request.url``.

    The URL is validated before anything touches the network. Every outcome,
    including rejection and transport failure, is returned as a CheckResult.
    A session is created per call unless one is passed in.
    """
    start = time.perf_counter()
    timestamp = utcnow_iso()

    rejection = inspect_url(request.url)
    if rejection is not None:
        logger.warning("Refusing to check %r: %s", request.url, rejection.reason)
        return _unhealthy(request.url, timestamp, 0, "Invalid URL provided", rejection.reason)

    if session is not None:
        return _run(session, request, start, timestamp)

    with requests.Session() as own_session:
        return _run(own_session, request, start, timestamp)
