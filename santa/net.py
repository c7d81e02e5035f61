from __future__ import annotations

import re

from flask import Request

from .models import IP_MAX_LENGTH

# Checked in order; the first usable value wins.
IP_HEADERS = (
    "X-Forwarded-For",
    "X-Real-IP",
    "CF-Connecting-IP",
    "X-Client-IP",
    "True-Client-IP",
    "Fastly-Client-IP",
)

_FORWARDED_FOR = re.compile(r"for=([^;]+)", re.IGNORECASE)


def normalize_ip(value: str | None) -> str | None:
    if not value:
        return None

    trimmed = value.strip().strip('"')
    if not trimmed:
        return None

    first = trimmed.split(",")[0].strip()
    if not first:
        return None

    # [2001:db8::1]:443
    if first.startswith("[") and "]" in first:
        inside = first[1:first.index("]")].strip()
        return inside[:IP_MAX_LENGTH] or None

    # 203.0.113.7:8080 (a single colon, so not a bare IPv6 address)
    if first.count(":") == 1:
        host, port = first.split(":")
        if port.isdigit():
            return host.strip()[:IP_MAX_LENGTH] or None

    return first[:IP_MAX_LENGTH]


def parse_forwarded(value: str | None) -> str | None:
    if not value:
        return None
    for entry in value.split(","):
        match = _FORWARDED_FOR.search(entry)
        if match:
            candidate = normalize_ip(match.group(1))
            if candidate:
                return candidate
    return None


def request_ip(request: Request) -> str | None:
    """Best-effort client address. Informational only; never raises."""
    for header in IP_HEADERS:
        candidate = normalize_ip(request.headers.get(header))
        if candidate:
            return candidate
    return parse_forwarded(request.headers.get("Forwarded")) or normalize_ip(request.remote_addr)
