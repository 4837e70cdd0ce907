"""Derive the address used as the one-submission-per-source key."""

from __future__ import annotations

from typing import Mapping, Optional

FORWARDED_FOR_HEADER = "x-forwarded-for"
REAL_IP_HEADER = "x-real-ip"


def strip_port(peer: str) -> str:
    head, sep, _ = peer.rpartition(":")
    return head if sep else peer


def resolve_client_address(headers: Mapping[str, str], peer: Optional[str]) -> str:
    """Pick the canonical client address for a request.

    ``X-Forwarded-For`` wins (first entry only, kept verbatim), then
    ``X-Real-IP``, then the raw transport peer with its trailing ``:port``
    removed. The result is treated as an opaque string and never validated as
    an IP address.
    """
    forwarded = headers.get(FORWARDED_FOR_HEADER)
    if forwarded:
        return forwarded.split(",", 1)[0]

    real_ip = headers.get(REAL_IP_HEADER)
    if real_ip:
        return real_ip

    return strip_port(peer or "")
