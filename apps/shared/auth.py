"""
Admin access control

Mutation endpoints depend on require_admin. Admin features must be switched on
in Settings, and when an API key is configured the X-API-Key header has to
match it.
"""

import hmac
import logging
from typing import Optional
from fastapi import Request, HTTPException, status, Security
from fastapi.security import APIKeyHeader

logger = logging.getLogger(__name__)

# API key header name
API_KEY_HEADER = "X-API-Key"

api_key_header = APIKeyHeader(name=API_KEY_HEADER, auto_error=False)


async def require_admin(
    request: Request,
    api_key: Optional[str] = Security(api_key_header),
) -> Optional[str]:
    """
    Dependency guarding admin-only endpoints.

    Usage in endpoints:
    @router.post("/protected")
    def protected_endpoint(api_key: str = Depends(require_admin)):
        pass
    """
    settings = request.app.state.settings

    if not settings.admin_enabled:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin features are disabled",
        )

    if not settings.api_key:
        if settings.is_production:
            raise RuntimeError(
                "INTERNAL_API_KEY must be set in production. "
                "Generate one with: python -c 'import secrets; print(secrets.token_urlsafe(32))'"
            )
        logger.warning(
            "API key authentication disabled - running in development mode. "
            "Set INTERNAL_API_KEY environment variable for security."
        )
        return None

    # Use constant-time comparison to prevent timing attacks
    if api_key is None or not hmac.compare_digest(api_key, settings.api_key):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "message": "Invalid or missing API key",
                "category": "security",
            },
        )

    return api_key
