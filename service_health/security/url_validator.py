"""URL safety checks applied before any outbound health-check request.

Validation is string/syntax level only. Hostnames are never resolved, so a
public-looking name that resolves to a private address is not caught here.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from urllib.parse import urlsplit

import idna

logger = logging.getLogger(__name__)

ALLOWED_SCHEMES = frozenset({"http", "https"})
ALLOWED_PORTS: tuple[int, ...] = (80, 443, 8080, 8443)

# Evaluated in order against the canonical lower-cased hostname.
BLOCKED_HOST_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("localhost", re.compile(r"^localhost$")),
    ("loopback", re.compile(r"^127\.")),
    ("unspecified", re.compile(r"^0\.0\.0\.0$")),
    ("private-10", re.compile(r"^10\.")),
    ("private-172", re.compile(r"^172\.(1[6-9]|2[0-9]|3[0-1])\.")),
    ("private-192", re.compile(r"^192\.168\.")),
    ("link-local", re.compile(r"^169\.254\.")),
    ("link-local-v6", re.compile(r"^fe80:")),
    ("cloud-metadata-ip", re.compile(r"^169\.254\.169\.254$")),
    ("cloud-metadata-host", re.compile(r"^metadata\.google\.internal$")),
    ("hex-literal", re.compile(r"^0x")),
    ("ipv6-literal", re.compile(r"^\[")),
)

_DOTTED_QUAD = re.compile(r"^(\d{1,3}\.){3}\d{1,3}$")
_DECIMAL = re.compile(r"^[0-9]+$")
_OCTAL = re.compile(r"^0[0-7]+$")
_HEX = re.compile(r"^0x[0-9a-f]*$")


class RejectionKind(str, Enum):
    MALFORMED_URL = "MalformedUrl"
    DISALLOWED_SCHEME = "DisallowedScheme"
    BLOCKED_HOST = "BlockedHost"
    DISALLOWED_PORT = "DisallowedPort"
    INVALID_IPV4 = "InvalidIPv4"
    PRIVATE_NETWORK = "PrivateNetwork"
    LOOPBACK_ADDRESS = "LoopbackAddress"
    LINK_LOCAL_ADDRESS = "LinkLocalAddress"
    RESERVED_OR_MULTICAST = "ReservedOrMulticast"


@dataclass(frozen=True)
class UrlRejection:
    kind: RejectionKind
    reason: str


class UnsafeUrlError(ValueError):
    def __init__(self, rejection: UrlRejection) -> None:
        super().__init__(rejection.reason)
        self.rejection = rejection

    @property
    def kind(self) -> RejectionKind:
        return self.rejection.kind


def _ipv4_number(part: str) -> int | None:
    if _HEX.match(part):
        digits = part[2:]
        return int(digits, 16) if digits else 0
    if _OCTAL.match(part):
        return int(part, 8)
    if _DECIMAL.match(part):
        return int(part, 10)
    return None


def numeric_ipv4_to_dotted(host: str) -> str | None:
    """
    Rewrite numeric IPv4 shorthands (``2130706433``, ``0x7f.1``,
    ``0177.0.0.1``) to dotted-quad, the way URL parsers in browsers and
    most HTTP stacks present them.

    Returns None when ``host`` is not a numeric form or denotes an address
    outside the IPv4 space; such hosts are left for the later checks.
    """
    parts = host.split(".")
    if len(parts) > 1 and parts[-1] == "":
        parts = parts[:-1]
    if not 1 <= len(parts) <= 4:
        return None

    numbers: list[int] = []
    for part in parts:
        value = _ipv4_number(part)
        if value is None:
            return None
        numbers.append(value)

    *leading, last = numbers
    if any(n > 255 for n in leading):
        return None
    if last >= 256 ** (5 - len(numbers)):
        return None

    address = last
    for index, n in enumerate(leading):
        address += n * 256 ** (3 - index)
    return ".".join(str((address >> shift) & 0xFF) for shift in (24, 16, 8, 0))


def canonical_hostname(hostname: str) -> str:
    if ":" in hostname:
        # urlsplit strips the brackets from IPv6 literals.
        return f"[{hostname.lower()}]"
    # Full-width and other compatibility forms map to ASCII, as IDNA lookup would do.
    host = idna.uts46_remap(hostname, std3_rules=False).lower()
    if host.endswith("."):
        host = host[:-1]
    return numeric_ipv4_to_dotted(host) or host


def match_blocked_host(host: str) -> str | None:
    for label, pattern in BLOCKED_HOST_PATTERNS:
        if pattern.search(host):
            return label
    return None


def is_dotted_quad(host: str) -> bool:
    return bool(_DOTTED_QUAD.match(host))


def check_ipv4_numeric(ip: str) -> UrlRejection | None:
    """Numeric range checks for a dotted-quad host, independent of the text patterns."""
    octets = [int(part, 10) for part in ip.split(".")]

    if any(o < 0 or o > 255 for o in octets):
        return UrlRejection(RejectionKind.INVALID_IPV4, f"Invalid IP address: {ip}")

    a, b = octets[0], octets[1]

    if a == 10:
        return UrlRejection(RejectionKind.PRIVATE_NETWORK, f"Private network access not allowed: {ip}")
    if a == 172 and 16 <= b <= 31:
        return UrlRejection(RejectionKind.PRIVATE_NETWORK, f"Private network access not allowed: {ip}")
    if a == 192 and b == 168:
        return UrlRejection(RejectionKind.PRIVATE_NETWORK, f"Private network access not allowed: {ip}")
    if a == 127:
        return UrlRejection(RejectionKind.LOOPBACK_ADDRESS, f"Loopback address access not allowed: {ip}")
    if a == 169 and b == 254:
        return UrlRejection(RejectionKind.LINK_LOCAL_ADDRESS, f"Link-local address access not allowed: {ip}")
    if a >= 224:
        return UrlRejection(
            RejectionKind.RESERVED_OR_MULTICAST,
            f"Multicast/reserved address access not allowed: {ip}",
        )
    return None


def inspect_url(url: str) -> UrlRejection | None:
    """Return why ``url`` must not be requested, or None if it is safe."""
    try:
        parts = urlsplit(url.strip())
        hostname = parts.hostname
        port = parts.port
    except (ValueError, AttributeError):
        return UrlRejection(RejectionKind.MALFORMED_URL, "Invalid URL format")

    if not parts.scheme:
        return UrlRejection(RejectionKind.MALFORMED_URL, "Invalid URL format")

    if parts.scheme.lower() not in ALLOWED_SCHEMES:
        return UrlRejection(RejectionKind.DISALLOWED_SCHEME, "Only HTTP and HTTPS protocols are allowed")

    if not hostname:
        return UrlRejection(RejectionKind.MALFORMED_URL, "Invalid URL format")

    try:
        host = canonical_hostname(hostname)
    except idna.IDNAError:
        return UrlRejection(RejectionKind.MALFORMED_URL, "Invalid URL format")

    if match_blocked_host(host) is not None:
        return UrlRejection(
            RejectionKind.BLOCKED_HOST,
            f"Access to internal networks and localhost is not allowed: {host}",
        )

    if port is not None and port not in ALLOWED_PORTS:
        allowed = ", ".join(str(p) for p in ALLOWED_PORTS)
        return UrlRejection(
            RejectionKind.DISALLOWED_PORT,
            f"Port {port} is not allowed. Allowed ports: {allowed}",
        )

    if is_dotted_quad(host):
        return check_ipv4_numeric(host)

    return None


def validate_url(url: str) -> str:
    """Return ``url`` unchanged if it is safe to request, else raise UnsafeUrlError."""
    rejection = inspect_url(url)
    if rejection is not None:
        logger.warning("Rejected URL %r: %s (%s)", url, rejection.reason, rejection.kind.value)
        raise UnsafeUrlError(rejection)
    return url
