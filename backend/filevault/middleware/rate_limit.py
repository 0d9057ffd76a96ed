"""Rate limiting for the credential endpoints"""
from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from filevault.config import settings
from filevault.services.device import client_address


def get_identifier(request: Request) -> str:
    """Rate-limit key: the client address, honouring X-Forwarded-For behind a trusted proxy"""
    peer = get_remote_address(request)
    return client_address(peer, request.headers.get("x-forwarded-for"), settings.TRUST_PROXY_HEADERS)


# Create limiter instance
limiter = Limiter(
    key_func=get_identifier,
    default_limits=settings.RATE_LIMIT_DEFAULT,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)

# Applied to signup, signin and refresh (brute-force targets)
AUTH_RATE_LIMIT = settings.RATE_LIMIT_AUTH
