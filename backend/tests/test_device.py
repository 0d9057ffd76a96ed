"""Tests for device fingerprinting"""
import hashlib

from filevault.services.device import client_address, fingerprint


def test_fingerprint_is_sha256_of_agent_and_address():
    """Test the device id is the SHA-256 of "<user agent>-<address>" """
    expected = hashlib.sha256(b"Mozilla/5.0-10.0.0.1").hexdigest()
    assert fingerprint("Mozilla/5.0", "10.0.0.1") == expected


def test_fingerprint_is_deterministic():
    """Test the same inputs always give the same device"""
    assert fingerprint("curl/8.0", "127.0.0.1") == fingerprint("curl/8.0", "127.0.0.1")


def test_fingerprint_distinguishes_agents_and_addresses():
    """Test a different User-Agent or address is a different device"""
    base = fingerprint("curl/8.0", "127.0.0.1")
    assert fingerprint("curl/8.1", "127.0.0.1") != base
    assert fingerprint("curl/8.0", "127.0.0.2") != base


def test_fingerprint_treats_missing_values_as_empty():
    """Test None inputs hash like empty strings"""
    assert fingerprint(None, None) == hashlib.sha256(b"-").hexdigest()
    assert fingerprint(None, "1.2.3.4") == fingerprint("", "1.2.3.4")


def test_client_address_uses_peer_by_default():
    """Test X-Forwarded-For is ignored unless proxies are trusted"""
    assert client_address("10.0.0.5", "203.0.113.9", trust_proxy=False) == "10.0.0.5"


def test_client_address_uses_first_forwarded_hop_behind_proxy():
    """Test the first X-Forwarded-For hop wins behind a trusted proxy"""
    assert client_address("10.0.0.5", "203.0.113.9, 10.0.0.1", trust_proxy=True) == "203.0.113.9"
    assert client_address("10.0.0.5", None, trust_proxy=True) == "10.0.0.5"
    assert client_address(None, None, trust_proxy=False) == ""
