from __future__ import annotations

from service_health.checks.results import CheckResult, HealthStatus

STATUS_EMOJI = {
    HealthStatus.HEALTHY: "✅",
    HealthStatus.WARNING: "⚠️",
    HealthStatus.UNHEALTHY: "❌",
}
UNKNOWN_EMOJI = "❓"

INTERPRETATIONS = {
    HealthStatus.HEALTHY: "🎉 The endpoint is working perfectly! No issues detected.",
    HealthStatus.WARNING: (
        "⚠️ The endpoint is responding but may need attention. "
        "Check if this is expected behavior."
    ),
}
DEFAULT_INTERPRETATION = (
    "🚨 The endpoint has issues and may be down or misconfigured. Investigation needed."
)


def _status_label(status: HealthStatus | str) -> str:
    value = status.value if isinstance(status, HealthStatus) else str(status)
    return value.upper()


def format_check_result(result: CheckResult) -> str:
    emoji = STATUS_EMOJI.get(result.status, UNKNOWN_EMOJI)

    lines = [
        f"{emoji} **Health Check Result**",
        "",
        f"**URL:** {result.detail.url}",
        f"**Status:** {_status_label(result.status)}",
        f"**Response Time:** {result.response_time_ms}ms",
    ]
    if result.status_code is not None:
        lines.append(f"**HTTP Status:** {result.status_code}")
    lines.append(f"**Message:** {result.message}")
    if result.detail.error:
        lines.append(f"**Error Details:** {result.detail.error}")
    lines.append(f"**Checked At:** {result.detail.timestamp}")

    # Interpretation
    lines.extend(["", "**Interpretation:**"])
    lines.append(INTERPRETATIONS.get(result.status, DEFAULT_INTERPRETATION))
    return "\n".join(lines)
