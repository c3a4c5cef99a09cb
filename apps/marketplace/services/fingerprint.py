"""Visitor fingerprinting helpers. Raw client addresses are never stored."""

import hashlib


def client_ip_from_request(request) -> str:
    """First X-Forwarded-For hop, else REMOTE_ADDR, else 'unknown'."""
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR', '')
    if forwarded:
        return forwarded.split(',')[0].strip() or 'unknown'
    return request.META.get('REMOTE_ADDR') or 'unknown'


def hash_ip(ip_address: str) -> str:
    """First 16 hex chars of the SHA-256 of the address."""
    return hashlib.sha256((ip_address or 'unknown').encode('utf-8')).hexdigest()[:16]
