"""Device identity derived from connection metadata"""
import hashlib
from typing import Optional


def fingerprint(user_agent: Optional[str], remote_address: Optional[str]) -> str:
    """Return a stable device id for a (User-Agent, address) combination.

    SHA-256 hex digest of ``"<user_agent>-<remote_address>"``; missing values
    count as empty strings. Clients sharing an address and an identical
    User-Agent collapse to the same device.
    """
    raw = f"{user_agent or ''}-{remote_address or ''}"
    return hashlib.sha256(raw.encode()).hexdigest()


def client_address(peer_host: Optional[str], forwarded_for: Optional[str], trust_proxy: bool) -> str:
    """Pick the address used for fingerprinting.

    Behind a trusted reverse proxy the first ``X-Forwarded-For`` hop is the
    real client; otherwise the socket peer is used.
    """
    if trust_proxy and forwarded_for:
        first_hop = forwarded_for.split(",")[0].strip()
        if first_hop:
            return first_hop
    return peer_host or ""
