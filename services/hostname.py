"""
Hostname classification for tenant routing.

A request host is exactly one of: an IP literal, the platform main domain,
a subdomain of the main domain (whose first label is the tenant slug) or a
custom domain owned by a tenant.
"""

import ipaddress
from dataclasses import dataclass
from typing import Optional

from domain.enums import HostKind


@dataclass(frozen=True)
class HostClassification:
    kind: HostKind
    host: str
    slug: Optional[str] = None

    @property
    def is_platform(self) -> bool:
        return self.kind in (HostKind.IP, HostKind.MAIN_DOMAIN)


def normalize_host(raw: str) -> str:
    """
    Lower-case the host, drop the port and any trailing dot.

    Examples:
      - "Chef.DancyMeals.cm:8000" -> "chef.dancymeals.cm"
      - "[::1]:8000" -> "::1"
      - "dancymeals.cm." -> "dancymeals.cm"
    """
    host = (raw or "").strip().lower()
    if host.startswith("["):
        # Bracketed IPv6, optionally followed by :port
        end = host.find("]")
        if end != -1:
            return host[1:end]
    if host.count(":") == 1:
        host = host.split(":", 1)[0]
    return host.rstrip(".")


def is_ip_literal(host: str) -> bool:
    try:
        ipaddress.ip_address(host)
    except ValueError:
        return False
    return True


def classify_host(raw_host: str, main_domain: str) -> HostClassification:
    """
    Classify a raw Host header value against the configured main domain.

    Rules are applied in order: IP literal, exact main domain, ``*.main_domain``
    subdomain, anything else is a custom domain. Never raises.
    """
    host = normalize_host(raw_host)
    main = normalize_host(main_domain)

    if is_ip_literal(host):
        return HostClassification(kind=HostKind.IP, host=host)

    if host == main:
        return HostClassification(kind=HostKind.MAIN_DOMAIN, host=host)

    suffix = f".{main}"
    if host.endswith(suffix):
        # Multi-label prefixes are kept whole and simply match no slug
        prefix = host[: -len(suffix)]
        return HostClassification(kind=HostKind.SUBDOMAIN, host=host, slug=prefix)

    return HostClassification(kind=HostKind.CUSTOM_DOMAIN, host=host)
